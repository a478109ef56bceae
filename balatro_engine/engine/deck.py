"""
Card model and deck utilities.
Handles card creation, shuffling, dealing, sorting and the straight/flush
primitives the hand evaluator is built on.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Suit(Enum):
    SPADES = "spades"
    HEARTS = "hearts"
    CLUBS = "clubs"
    DIAMONDS = "diamonds"


class EnhancementType(Enum):
    BONUS = "bonus"
    MULT = "mult"
    WILD = "wild"
    GLASS = "glass"
    STEEL = "steel"


STANDARD_DECK_SIZE = 52
CARDS_PER_SUIT = 13

RANK_NAMES = {
    1: "A", 2: "2", 3: "3", 4: "4", 5: "5", 6: "6", 7: "7",
    8: "8", 9: "9", 10: "10", 11: "J", 12: "Q", 13: "K",
}
SUIT_SYMBOLS = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}
SUIT_COLORS = {
    Suit.HEARTS: "red",
    Suit.DIAMONDS: "yellow",
    Suit.CLUBS: "green",
    Suit.SPADES: "black",
}


class InsufficientCardsError(ValueError):
    """Raised when more cards are requested than a deck holds."""


@dataclass
class Enhancement:
    type: EnhancementType
    value: int = 0

    def to_dict(self) -> dict:
        return {"type": self.type.value, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict) -> "Enhancement":
        return cls(type=EnhancementType(data["type"]), value=data.get("value", 0))


@dataclass
class Card:
    id: str
    suit: Suit
    rank: int  # 1-13, 1 = Ace
    is_selected: bool = False
    is_enhanced: bool = False
    enhancement: Optional[Enhancement] = None
    is_stone: bool = False
    is_steel: bool = False
    is_glass: bool = False
    is_gold: bool = False

    def __post_init__(self):
        if not 1 <= self.rank <= CARDS_PER_SUIT:
            raise ValueError(f"Card rank must be 1-13, got {self.rank}")

    def __setattr__(self, name, value):
        # suit and rank are fixed once the card exists
        if name in ("suit", "rank") and name in self.__dict__:
            raise AttributeError(f"Card.{name} cannot be reassigned")
        super().__setattr__(name, value)

    @classmethod
    def of(cls, rank: int, suit: Suit) -> "Card":
        """Create a plain card with the standard id."""
        return cls(id=f"{suit.value}-{rank}", suit=suit, rank=rank)

    @property
    def display_name(self) -> str:
        return f"{RANK_NAMES[self.rank]}{SUIT_SYMBOLS[self.suit]}"

    @property
    def color(self) -> str:
        return SUIT_COLORS[self.suit]

    @property
    def is_red(self) -> bool:
        return self.color == "red"

    @property
    def is_black(self) -> bool:
        return self.color == "black"

    @property
    def is_face_card(self) -> bool:
        return 11 <= self.rank <= 13

    @property
    def is_ace(self) -> bool:
        return self.rank == 1

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "suit": self.suit.value,
            "rank": self.rank,
            "is_selected": self.is_selected,
            "is_enhanced": self.is_enhanced,
            "enhancement": self.enhancement.to_dict() if self.enhancement else None,
        }
        for flag in ("is_stone", "is_steel", "is_glass", "is_gold"):
            data[flag] = getattr(self, flag)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Card":
        enhancement = data.get("enhancement")
        return cls(
            id=data["id"],
            suit=Suit(data["suit"]),
            rank=int(data["rank"]),
            is_selected=bool(data.get("is_selected", False)),
            is_enhanced=bool(data.get("is_enhanced", False)),
            enhancement=Enhancement.from_dict(enhancement) if enhancement else None,
            is_stone=bool(data.get("is_stone", False)),
            is_steel=bool(data.get("is_steel", False)),
            is_glass=bool(data.get("is_glass", False)),
            is_gold=bool(data.get("is_gold", False)),
        )

    def __str__(self) -> str:
        return self.display_name

    def __repr__(self) -> str:
        return self.__str__()


@dataclass
class DealResult:
    dealt: list[Card]
    remaining: list[Card]


def create_standard_deck() -> list[Card]:
    """Create the 52 cards of a standard deck, one per (suit, rank)."""
    cards = []
    for suit in Suit:
        for rank in range(1, CARDS_PER_SUIT + 1):
            cards.append(Card.of(rank, suit))
    return cards


def shuffle_deck(deck: list[Card], rng: random.Random = None) -> list[Card]:
    """Return a shuffled copy of the deck (Fisher-Yates)."""
    rng = rng or random
    shuffled = list(deck)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def deal_cards(deck: list[Card], count: int) -> DealResult:
    """Split the first `count` cards off the deck."""
    if count < 0 or count > len(deck):
        raise InsufficientCardsError(
            f"Cannot deal {count} cards from a deck of {len(deck)}"
        )
    return DealResult(dealt=list(deck[:count]), remaining=list(deck[count:]))


def get_card_straight_value(card: Card, ace_high: bool = False) -> int:
    """Value used for ordering and straights. Ace is 1 or 14."""
    if card.rank == 1:
        return 14 if ace_high else 1
    return card.rank


def get_card_base_score(card: Card) -> int:
    """Chip value of a card: Ace 11, 2-10 face value, J/Q/K 10."""
    if card.rank == 1:
        return 11
    if 2 <= card.rank <= 10:
        return card.rank
    return 10


def calculate_hand_base_score(cards: list[Card]) -> int:
    return sum(get_card_base_score(c) for c in cards)


def compare_cards(card1: Card, card2: Card, ace_high: bool = True) -> int:
    return get_card_straight_value(card1, ace_high) - get_card_straight_value(card2, ace_high)


def sort_cards_by_rank(cards: list[Card], ace_high: bool = True,
                       descending: bool = False) -> list[Card]:
    """Stable sort by straight value."""
    return sorted(cards, key=lambda c: get_card_straight_value(c, ace_high),
                  reverse=descending)


def group_cards_by_rank(cards: list[Card]) -> dict[int, list[Card]]:
    groups: dict[int, list[Card]] = {}
    for card in cards:
        groups.setdefault(card.rank, []).append(card)
    return groups


def group_cards_by_suit(cards: list[Card]) -> dict[Suit, list[Card]]:
    groups: dict[Suit, list[Card]] = {suit: [] for suit in Suit}
    for card in cards:
        groups[card.suit].append(card)
    return groups


def is_flush(cards: list[Card]) -> bool:
    """True if every card shares one suit. Empty input is not a flush."""
    if not cards:
        return False
    first_suit = cards[0].suit
    return all(c.suit == first_suit for c in cards)


def _is_consecutive(values: list[int]) -> bool:
    return all(b == a + 1 for a, b in zip(values, values[1:]))


def is_straight(cards: list[Card]) -> bool:
    """
    True if exactly five cards form a run.
    Both A-2-3-4-5 and 10-J-Q-K-A count, so the Ace is checked low and high.
    """
    if len(cards) != 5:
        return False
    low = sorted(get_card_straight_value(c, ace_high=False) for c in cards)
    high = sorted(get_card_straight_value(c, ace_high=True) for c in cards)
    return _is_consecutive(low) or _is_consecutive(high)

