"""
Game state snapshot and its JSON-friendly (de)serialization.
"""

from dataclasses import dataclass, field
from enum import Enum

from .deck import Card
from .hand_detector import HandType
from .jokers import Joker
from .scoring import HandTypeConfig, initial_hand_type_configs
from .shop import ShopItem


class GamePhase(Enum):
    MENU = "menu"
    PLAYING = "playing"
    SHOP = "shop"
    GAME_OVER = "game_over"
    GAME_COMPLETED = "game_completed"


@dataclass
class GameSettings:
    """Presentation preferences. Game rules never read these."""
    master_volume: float = 0.7
    sfx_volume: float = 0.8
    music_volume: float = 0.6
    animation_speed: str = "normal"  # "slow", "normal", "fast"
    auto_save: bool = True
    show_tutorial: bool = True
    language: str = "en"

    def to_dict(self) -> dict:
        return {
            "master_volume": self.master_volume,
            "sfx_volume": self.sfx_volume,
            "music_volume": self.music_volume,
            "animation_speed": self.animation_speed,
            "auto_save": self.auto_save,
            "show_tutorial": self.show_tutorial,
            "language": self.language,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GameSettings":
        defaults = cls()
        return cls(**{k: data.get(k, getattr(defaults, k)) for k in defaults.to_dict()})


@dataclass
class GameState:
    """
    Everything needed to resume a game.

    Each card lives in exactly one of deck, hand or discard_pile.
    selected_cards holds the same objects as the matching cards in hand.
    """
    phase: GamePhase = GamePhase.MENU
    current_round: int = 1
    target_score: int = 300
    current_score: int = 0
    money: int = 4
    is_game_completed: bool = False
    deck: list[Card] = field(default_factory=list)
    hand: list[Card] = field(default_factory=list)
    selected_cards: list[Card] = field(default_factory=list)
    discard_pile: list[Card] = field(default_factory=list)
    jokers: list[Joker] = field(default_factory=list)
    max_jokers: int = 5
    hands_left: int = 4
    discards_left: int = 3
    shop_items: list[ShopItem] = field(default_factory=list)
    shop_refresh_cost: int = 2
    shop_rerolls: int = 0
    hand_type_configs: dict[HandType, HandTypeConfig] = field(default_factory=initial_hand_type_configs)
    settings: GameSettings = field(default_factory=GameSettings)

    def find_in_hand(self, card_id: str):
        for card in self.hand:
            if card.id == card_id:
                return card
        return None

    def find_joker(self, joker_id: str):
        for joker in self.jokers:
            if joker.id == joker_id:
                return joker
        return None

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "current_round": self.current_round,
            "target_score": self.target_score,
            "current_score": self.current_score,
            "money": self.money,
            "is_game_completed": self.is_game_completed,
            "deck": [c.to_dict() for c in self.deck],
            "hand": [c.to_dict() for c in self.hand],
            "selected_cards": [c.id for c in self.selected_cards],
            "discard_pile": [c.to_dict() for c in self.discard_pile],
            "jokers": [j.to_dict() for j in self.jokers],
            "max_jokers": self.max_jokers,
            "hands_left": self.hands_left,
            "discards_left": self.discards_left,
            "shop_items": [item.to_dict() for item in self.shop_items],
            "shop_refresh_cost": self.shop_refresh_cost,
            "shop_rerolls": self.shop_rerolls,
            "hand_type_configs": {ht.value: cfg.to_dict() for ht, cfg in self.hand_type_configs.items()},
            "settings": self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GameState":
        """Rebuild a state. Raises KeyError/ValueError/TypeError on malformed data."""
        hand = [Card.from_dict(c) for c in data["hand"]]
        by_id = {c.id: c for c in hand}
        selected = []
        for card_id in data.get("selected_cards", []):
            if card_id not in by_id:
                raise ValueError(f"Selected card {card_id} is not in hand")
            selected.append(by_id[card_id])

        deck = [Card.from_dict(c) for c in data["deck"]]
        discard_pile = [Card.from_dict(c) for c in data["discard_pile"]]
        seen = set()
        for card in deck + hand + discard_pile:
            if card.id in seen:
                raise ValueError(f"Card {card.id} appears more than once")
            seen.add(card.id)

        configs = initial_hand_type_configs()
        for key, cfg in (data.get("hand_type_configs") or {}).items():
            configs[HandType(key)] = HandTypeConfig.from_dict(cfg)

        return cls(
            phase=GamePhase(data["phase"]),
            current_round=int(data["current_round"]),
            target_score=int(data["target_score"]),
            current_score=int(data["current_score"]),
            money=int(data["money"]),
            is_game_completed=bool(data.get("is_game_completed", False)),
            deck=deck,
            hand=hand,
            selected_cards=selected,
            discard_pile=discard_pile,
            jokers=[Joker.from_dict(j) for j in data.get("jokers", [])],
            max_jokers=int(data.get("max_jokers", 5)),
            hands_left=int(data["hands_left"]),
            discards_left=int(data["discards_left"]),
            shop_items=[ShopItem.from_dict(i) for i in data.get("shop_items", [])],
            shop_refresh_cost=int(data.get("shop_refresh_cost", 2)),
            shop_rerolls=int(data.get("shop_rerolls", 0)),
            hand_type_configs=configs,
            settings=GameSettings.from_dict(data.get("settings") or {}),
        )
