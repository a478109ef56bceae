"""
Joker templates and the registry that instantiates them.

A template holds the static catalog data plus a factory for its effect
descriptor. The registry creates fresh jokers from templates, draws weighted
random templates for the shop and answers trigger/value questions about
owned jokers.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .deck import Suit
from .effects import (
    Condition,
    ConditionKind,
    EffectKind,
    EffectType,
    JokerEffect,
    ScoringView,
    Trigger,
    check_condition,
)
from .hand_detector import HandType

logger = logging.getLogger(__name__)


class Rarity(Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"


DEFAULT_RARITY_WEIGHTS = {
    Rarity.COMMON: 50,
    Rarity.UNCOMMON: 30,
    Rarity.RARE: 15,
    Rarity.LEGENDARY: 5,
}

RARITY_VALUE_MULTIPLIERS = {
    Rarity.COMMON: 1,
    Rarity.UNCOMMON: 1.5,
    Rarity.RARE: 2,
    Rarity.LEGENDARY: 3,
}


@dataclass
class Joker:
    """An owned (or offered) joker instance."""
    id: str
    name: str
    description: str
    rarity: Rarity
    cost: int
    effect: JokerEffect
    sell_value: int

    @property
    def template_id(self) -> str:
        return self.id.rsplit("-", 1)[0]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "rarity": self.rarity.value,
            "cost": self.cost,
            "effect": self.effect.to_dict(),
            "sell_value": self.sell_value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Joker":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            rarity=Rarity(data["rarity"]),
            cost=int(data["cost"]),
            effect=JokerEffect.from_dict(data["effect"]),
            sell_value=int(data["sell_value"]),
        )

    def __str__(self):
        return f"{self.name} (${self.cost})"


@dataclass
class JokerTemplate:
    id: str
    name: str
    description: str
    rarity: Rarity
    base_cost: int
    sell_value_multiplier: float
    effect_factory: Callable[[], JokerEffect]


def _effect(effect_type: EffectType, trigger: Trigger = Trigger.ON_SCORE,
            params: dict = None, **fields) -> Callable[[], JokerEffect]:
    """Factory returning a fresh descriptor each call."""
    def factory() -> JokerEffect:
        return JokerEffect(type=effect_type, trigger=trigger,
                           params=dict(params or {}), **fields)
    return factory


DEFAULT_TEMPLATES = [
    JokerTemplate(
        id="joker_basic_mult",
        name="Joker",
        description="+4 Mult",
        rarity=Rarity.COMMON,
        base_cost=2,
        sell_value_multiplier=0.5,
        effect_factory=_effect(EffectType.MULTIPLIER, value=4),
    ),
    JokerTemplate(
        id="joker_basic_chips",
        name="Chip Stack",
        description="+30 Chips",
        rarity=Rarity.COMMON,
        base_cost=2,
        sell_value_multiplier=0.5,
        effect_factory=_effect(EffectType.ADDITIVE, value=30),
    ),
    JokerTemplate(
        id="joker_hearts_lover",
        name="Hearts Lover",
        description="+3 Mult for each Heart played",
        rarity=Rarity.COMMON,
        base_cost=3,
        sell_value_multiplier=0.5,
        effect_factory=_effect(
            EffectType.CONDITIONAL, value=3, kind=EffectKind.MULT_PER_SUIT,
            condition=Condition(ConditionKind.HAS_SUIT, Suit.HEARTS),
            params={"suit": Suit.HEARTS.value},
        ),
    ),
    JokerTemplate(
        id="joker_recycler",
        name="Recycler",
        description="Earn $1 each time you discard",
        rarity=Rarity.COMMON,
        base_cost=3,
        sell_value_multiplier=0.5,
        effect_factory=_effect(
            EffectType.SPECIAL, Trigger.ON_DISCARD, value=1, kind=EffectKind.EARN_MONEY,
        ),
    ),
    JokerTemplate(
        id="joker_pair_expert",
        name="Pair Expert",
        description="+50 Chips if the hand is a Pair or better",
        rarity=Rarity.UNCOMMON,
        base_cost=5,
        sell_value_multiplier=0.6,
        effect_factory=_effect(
            EffectType.CONDITIONAL, value=50, kind=EffectKind.ADD_CHIPS,
            condition=Condition(ConditionKind.HAND_AT_LEAST, HandType.PAIR),
        ),
    ),
    JokerTemplate(
        id="joker_face_card_bonus",
        name="Face Card Bonus",
        description="+2 Mult for each face card played",
        rarity=Rarity.UNCOMMON,
        base_cost=4,
        sell_value_multiplier=0.6,
        effect_factory=_effect(
            EffectType.CONDITIONAL, value=2, kind=EffectKind.MULT_PER_FACE_CARD,
            condition=Condition(ConditionKind.HAS_FACE_CARD),
        ),
    ),
    JokerTemplate(
        id="joker_percent_boost",
        name="Percent Boost",
        description="+25% Chips",
        rarity=Rarity.UNCOMMON,
        base_cost=4,
        sell_value_multiplier=0.6,
        effect_factory=_effect(EffectType.SPECIAL, value=25, kind=EffectKind.PERCENT_CHIPS),
    ),
    JokerTemplate(
        id="joker_lucky_seven",
        name="Lucky Seven",
        description="+77 Chips for each 7 played",
        rarity=Rarity.RARE,
        base_cost=8,
        sell_value_multiplier=0.7,
        effect_factory=_effect(
            EffectType.CONDITIONAL, value=77, kind=EffectKind.CHIPS_PER_RANK,
            condition=Condition(ConditionKind.HAS_RANK, 7),
            params={"rank": 7},
        ),
    ),
    JokerTemplate(
        id="joker_flush_master",
        name="Flush Master",
        description="x3 Mult on a five-card flush",
        rarity=Rarity.RARE,
        base_cost=10,
        sell_value_multiplier=0.7,
        effect_factory=_effect(
            EffectType.CONDITIONAL, value=3, kind=EffectKind.X_MULT,
            condition=Condition(ConditionKind.IS_FLUSH),
        ),
    ),
    JokerTemplate(
        id="joker_mult_doubler",
        name="Mult Doubler",
        description="Doubles the current Mult",
        rarity=Rarity.RARE,
        base_cost=9,
        sell_value_multiplier=0.7,
        effect_factory=_effect(EffectType.SPECIAL, value=2, kind=EffectKind.DOUBLE_MULT),
    ),
    JokerTemplate(
        id="joker_golden_ticket",
        name="Golden Ticket",
        description="+10 Mult and +$1 every round",
        rarity=Rarity.LEGENDARY,
        base_cost=20,
        sell_value_multiplier=0.8,
        effect_factory=_effect(
            EffectType.SPECIAL, Trigger.PASSIVE, value=10, kind=EffectKind.ADD_MULT,
            money_per_round=1,
        ),
    ),
    JokerTemplate(
        id="joker_chaos_multiplier",
        name="Chaos Multiplier",
        description="Random x2 to x10 Mult",
        rarity=Rarity.LEGENDARY,
        base_cost=25,
        sell_value_multiplier=0.8,
        effect_factory=_effect(
            EffectType.SPECIAL, kind=EffectKind.RANDOM_X_MULT, params={"min": 2, "max": 10},
        ),
    ),
]


class JokerRegistry:
    """Catalog of joker templates keyed by template id."""

    def __init__(self, templates: list[JokerTemplate] = None):
        self._templates: dict[str, JokerTemplate] = {}
        for template in templates or []:
            self.register_joker(template)

    def register_joker(self, template: JokerTemplate):
        """Add a template, replacing any existing one with the same id."""
        self._templates[template.id] = template

    def create_joker(self, template_id: str, rng: random.Random = None) -> Optional[Joker]:
        template = self._templates.get(template_id)
        if template is None:
            logger.warning("Joker template not found: %s", template_id)
            return None

        rng = rng or random
        return Joker(
            id=f"{template.id}-{rng.getrandbits(40):010x}",
            name=template.name,
            description=template.description,
            rarity=template.rarity,
            cost=template.base_cost,
            effect=template.effect_factory(),
            sell_value=int(template.base_cost * template.sell_value_multiplier),
        )

    def get_template(self, template_id: str) -> Optional[JokerTemplate]:
        return self._templates.get(template_id)

    def get_all_templates(self) -> list[JokerTemplate]:
        return list(self._templates.values())

    def get_templates_by_rarity(self, rarity: Rarity) -> list[JokerTemplate]:
        return [t for t in self._templates.values() if t.rarity == rarity]

    def get_random_template(self, rarity_weights: dict = None,
                            rng: random.Random = None) -> Optional[JokerTemplate]:
        """
        Weighted draw over the catalog.

        Each template weighs as much as its rarity. Rarities missing from the
        map weigh 1 and a weight of 0 removes the rarity from the pool. Keys may
        be Rarity members or their string values.
        """
        weights_by_rarity = DEFAULT_RARITY_WEIGHTS if rarity_weights is None else rarity_weights
        weights_by_rarity = {
            Rarity(key): weight
            for key, weight in weights_by_rarity.items()
        }

        candidates = []
        weights = []
        for template in self._templates.values():
            weight = weights_by_rarity.get(template.rarity, 1)
            if weight <= 0:
                continue
            candidates.append(template)
            weights.append(weight)

        if not candidates:
            return None

        rng = rng or random
        return rng.choices(candidates, weights=weights, k=1)[0]

    def generate_shop_jokers(self, count: int = 2, rarity_weights: dict = None,
                             rng: random.Random = None) -> list[Joker]:
        """Independent draws, so the same template can fill several slots."""
        jokers = []
        for _ in range(count):
            template = self.get_random_template(rarity_weights, rng)
            if template is None:
                continue
            joker = self.create_joker(template.id, rng)
            if joker:
                jokers.append(joker)
        return jokers


def can_trigger_joker(joker: Joker, view: ScoringView, trigger: Trigger) -> bool:
    if joker.effect.trigger != trigger:
        return False
    return check_condition(joker.effect.condition, view)


def calculate_joker_value(joker: Joker) -> int:
    """Cost scaled by rarity."""
    return int(joker.cost * RARITY_VALUE_MULTIPLIERS.get(joker.rarity, 1))


def joker_effect_description(joker: Joker) -> str:
    effect = joker.effect
    if effect.type == EffectType.ADDITIVE:
        return f"{joker.description} (+{effect.value} Chips)"
    if effect.type == EffectType.MULTIPLIER:
        return f"{joker.description} (+{effect.value} Mult)"
    if effect.type == EffectType.CONDITIONAL:
        return f"{joker.description} (conditional)"
    return f"{joker.description} (special)"


default_registry = JokerRegistry(DEFAULT_TEMPLATES)


def register_joker(template: JokerTemplate):
    default_registry.register_joker(template)


def create_joker(template_id: str, rng: random.Random = None) -> Optional[Joker]:
    return default_registry.create_joker(template_id, rng)


def get_all_templates() -> list[JokerTemplate]:
    return default_registry.get_all_templates()


def get_templates_by_rarity(rarity: Rarity) -> list[JokerTemplate]:
    return default_registry.get_templates_by_rarity(rarity)


def get_random_template(rarity_weights: dict = None,
                        rng: random.Random = None) -> Optional[JokerTemplate]:
    return default_registry.get_random_template(rarity_weights, rng)


def generate_shop_jokers(count: int = 2, rarity_weights: dict = None,
                         rng: random.Random = None) -> list[Joker]:
    return default_registry.generate_shop_jokers(count, rarity_weights, rng)
