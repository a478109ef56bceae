"""
Shop for Balatro.
Generates joker and planet card offers and prices rerolls.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .hand_detector import HandType, hand_type_name
from .jokers import Joker, JokerRegistry, default_registry
from .scoring import HandTypeConfig, INITIAL_HAND_TYPE_CONFIGS, upgrade_hand_type_config


class ItemType(Enum):
    JOKER = "joker"
    PLANET = "planet"


# Planet cards and the hand type each one levels up
PLANET_CARDS = {
    "Pluto": HandType.HIGH_CARD,
    "Mercury": HandType.PAIR,
    "Uranus": HandType.TWO_PAIR,
    "Venus": HandType.THREE_OF_A_KIND,
    "Saturn": HandType.STRAIGHT,
    "Jupiter": HandType.FLUSH,
    "Earth": HandType.FULL_HOUSE,
    "Mars": HandType.FOUR_OF_A_KIND,
    "Neptune": HandType.STRAIGHT_FLUSH,
    "Eris": HandType.ROYAL_FLUSH,
}


@dataclass
class ShopItem:
    """Something for sale: a joker, or a planet card that levels a hand type."""
    id: str
    type: ItemType
    name: str
    description: str
    cost: int
    joker: Optional[Joker] = None
    hand_type: Optional[HandType] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "name": self.name,
            "description": self.description,
            "cost": self.cost,
            "joker": self.joker.to_dict() if self.joker else None,
            "hand_type": self.hand_type.value if self.hand_type else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ShopItem":
        joker = data.get("joker")
        hand_type = data.get("hand_type")
        return cls(
            id=data["id"],
            type=ItemType(data["type"]),
            name=data["name"],
            description=data.get("description", ""),
            cost=int(data["cost"]),
            joker=Joker.from_dict(joker) if joker else None,
            hand_type=HandType(hand_type) if hand_type else None,
        )

    def __str__(self):
        return f"{self.name} (${self.cost})"


@dataclass
class ShopConfig:
    """Configuration for shop behavior."""
    joker_slots: int = 2
    planet_slots: int = 1
    planet_cost: int = 3
    base_reroll_cost: int = 2
    reroll_increment: int = 1
    rarity_weights: Optional[dict] = field(default=None)


def joker_item(joker: Joker) -> ShopItem:
    return ShopItem(
        id=f"shop-{joker.id}",
        type=ItemType.JOKER,
        name=joker.name,
        description=joker.description,
        cost=joker.cost,
        joker=joker,
    )


def planet_item(name: str, cost: int, rng: random.Random = None) -> ShopItem:
    rng = rng or random
    hand_type = PLANET_CARDS[name]
    return ShopItem(
        id=f"planet-{name.lower()}-{rng.getrandbits(32):08x}",
        type=ItemType.PLANET,
        name=name,
        description=f"Level up {hand_type_name(hand_type)}",
        cost=cost,
        hand_type=hand_type,
    )


class Shop:
    """
    Generates shop contents.
    """

    def __init__(self, registry: JokerRegistry = None, config: ShopConfig = None,
                 rng: random.Random = None):
        self.registry = registry or default_registry
        self.config = config or ShopConfig()
        self.rng = rng or random.Random()

    def generate(self) -> list[ShopItem]:
        """A fresh inventory: joker slots first, then planet cards."""
        items = [
            joker_item(joker)
            for joker in self.registry.generate_shop_jokers(
                self.config.joker_slots, self.config.rarity_weights, self.rng)
        ]
        for _ in range(self.config.planet_slots):
            name = self.rng.choice(list(PLANET_CARDS))
            items.append(planet_item(name, self.config.planet_cost, self.rng))
        return items

    def reroll_cost(self, rerolls_used: int) -> int:
        """Each reroll in a round costs more than the last."""
        return self.config.base_reroll_cost + rerolls_used * self.config.reroll_increment


def find_item(items: list[ShopItem], item_id: str) -> Optional[ShopItem]:
    for item in items:
        if item.id == item_id:
            return item
    return None


def apply_planet(item: ShopItem, hand_type_configs: dict) -> str:
    """Apply a planet card's effect (level up a hand type) in place."""
    if item.type != ItemType.PLANET or item.hand_type is None:
        return f"{item.name} is not a planet card"

    current = hand_type_configs.get(item.hand_type) or INITIAL_HAND_TYPE_CONFIGS[item.hand_type]
    upgraded: HandTypeConfig = upgrade_hand_type_config(current)
    hand_type_configs[item.hand_type] = upgraded
    return f"{item.name}: {upgraded.name} leveled up to {upgraded.level}"
