"""
Hand detection for Balatro.
Identifies the poker hand formed by 1-5 played cards.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .deck import (
    Card,
    get_card_straight_value,
    group_cards_by_rank,
    is_flush,
    is_straight,
    sort_cards_by_rank,
)


class EmptyHandError(ValueError):
    """Raised when an empty set of cards is evaluated or scored."""


class HandType(Enum):
    """Poker hand types, ordered by base strength."""
    HIGH_CARD = "high_card"
    PAIR = "pair"
    TWO_PAIR = "two_pair"
    THREE_OF_A_KIND = "three_of_a_kind"
    STRAIGHT = "straight"
    FLUSH = "flush"
    FULL_HOUSE = "full_house"
    FOUR_OF_A_KIND = "four_of_a_kind"
    STRAIGHT_FLUSH = "straight_flush"
    ROYAL_FLUSH = "royal_flush"

    @property
    def tier(self) -> int:
        return HAND_TIERS[self]


HAND_TIERS = {hand_type: tier for tier, hand_type in enumerate(HandType, start=1)}

HAND_TYPE_NAMES = {
    HandType.HIGH_CARD: "High Card",
    HandType.PAIR: "Pair",
    HandType.TWO_PAIR: "Two Pair",
    HandType.THREE_OF_A_KIND: "Three of a Kind",
    HandType.STRAIGHT: "Straight",
    HandType.FLUSH: "Flush",
    HandType.FULL_HOUSE: "Full House",
    HandType.FOUR_OF_A_KIND: "Four of a Kind",
    HandType.STRAIGHT_FLUSH: "Straight Flush",
    HandType.ROYAL_FLUSH: "Royal Flush",
}

TIER_WEIGHT = 100
ROYAL_VALUES = [10, 11, 12, 13, 14]


def hand_type_name(hand_type: HandType) -> str:
    return HAND_TYPE_NAMES.get(hand_type, "Unknown Hand")


@dataclass(frozen=True)
class HandEvaluation:
    """Result of hand evaluation."""
    hand_type: HandType
    cards: tuple[Card, ...]    # Cards forming the pattern
    kickers: tuple[Card, ...]  # Remaining cards, highest first
    rank: int                  # tier * 100 + tiebreak

    @property
    def tier(self) -> int:
        return self.rank // TIER_WEIGHT

    @property
    def name(self) -> str:
        return hand_type_name(self.hand_type)


def _high(card: Card) -> int:
    return get_card_straight_value(card, ace_high=True)


def _result(hand_type: HandType, cards: list[Card], kickers: list[Card],
            tiebreak: int) -> HandEvaluation:
    return HandEvaluation(
        hand_type=hand_type,
        cards=tuple(cards),
        kickers=tuple(kickers),
        rank=hand_type.tier * TIER_WEIGHT + tiebreak,
    )


def _groups_of(cards: list[Card], size: int) -> list[list[Card]]:
    """Rank groups of exactly `size` cards, highest rank first."""
    groups = [g for g in group_cards_by_rank(cards).values() if len(g) == size]
    return sorted(groups, key=lambda g: _high(g[0]), reverse=True)


def _kickers(cards: list[Card], used: list[Card]) -> list[Card]:
    used_ids = {id(c) for c in used}
    rest = [c for c in cards if id(c) not in used_ids]
    return sort_cards_by_rank(rest, ace_high=True, descending=True)


def _straight_cards(cards: list[Card]) -> tuple[list[Card], int]:
    """Order a straight top-down and return its high card value."""
    values = sorted(_high(c) for c in cards)
    if values == [2, 3, 4, 5, 14]:
        # The wheel: the Ace plays low
        ordered = sort_cards_by_rank(cards, ace_high=False, descending=True)
        return ordered, 5
    return sort_cards_by_rank(cards, ace_high=True, descending=True), values[-1]


class HandDetector:
    """
    Classifies played cards by running the checks from strongest to weakest
    and returning the first match. High card always matches.
    """

    def __init__(self):
        self.checks: list[Callable[[list[Card]], Optional[HandEvaluation]]] = [
            self.check_royal_flush,
            self.check_straight_flush,
            self.check_four_of_a_kind,
            self.check_full_house,
            self.check_flush,
            self.check_straight,
            self.check_three_of_a_kind,
            self.check_two_pair,
            self.check_pair,
            self.check_high_card,
        ]

    def evaluate(self, cards: list[Card]) -> HandEvaluation:
        if not cards:
            raise EmptyHandError("Cannot evaluate an empty hand")
        cards = list(cards)
        for check in self.checks:
            result = check(cards)
            if result is not None:
                return result
        return self.check_high_card(cards)

    def check_royal_flush(self, cards: list[Card]) -> Optional[HandEvaluation]:
        if len(cards) != 5 or not (is_flush(cards) and is_straight(cards)):
            return None
        if sorted(_high(c) for c in cards) != ROYAL_VALUES:
            return None
        ordered = sort_cards_by_rank(cards, ace_high=True, descending=True)
        return _result(HandType.ROYAL_FLUSH, ordered, [], 14)

    def check_straight_flush(self, cards: list[Card]) -> Optional[HandEvaluation]:
        if len(cards) != 5 or not (is_flush(cards) and is_straight(cards)):
            return None
        ordered, high = _straight_cards(cards)
        return _result(HandType.STRAIGHT_FLUSH, ordered, [], high)

    def check_four_of_a_kind(self, cards: list[Card]) -> Optional[HandEvaluation]:
        quads = _groups_of(cards, 4)
        if not quads:
            return None
        four = quads[0]
        return _result(HandType.FOUR_OF_A_KIND, four, _kickers(cards, four), _high(four[0]))

    def check_full_house(self, cards: list[Card]) -> Optional[HandEvaluation]:
        if len(cards) != 5:
            return None
        trips = _groups_of(cards, 3)
        pairs = _groups_of(cards, 2)
        if not trips or not pairs:
            return None
        pattern = trips[0] + pairs[0]
        return _result(HandType.FULL_HOUSE, pattern, [], _high(trips[0][0]))

    def check_flush(self, cards: list[Card]) -> Optional[HandEvaluation]:
        if len(cards) != 5 or not is_flush(cards):
            return None
        ordered = sort_cards_by_rank(cards, ace_high=True, descending=True)
        return _result(HandType.FLUSH, ordered, ordered, _high(ordered[0]))

    def check_straight(self, cards: list[Card]) -> Optional[HandEvaluation]:
        if len(cards) != 5 or not is_straight(cards):
            return None
        ordered, high = _straight_cards(cards)
        return _result(HandType.STRAIGHT, ordered, [], high)

    def check_three_of_a_kind(self, cards: list[Card]) -> Optional[HandEvaluation]:
        trips = _groups_of(cards, 3)
        if not trips:
            return None
        three = trips[0]
        return _result(HandType.THREE_OF_A_KIND, three, _kickers(cards, three), _high(three[0]))

    def check_two_pair(self, cards: list[Card]) -> Optional[HandEvaluation]:
        pairs = _groups_of(cards, 2)
        if len(pairs) < 2:
            return None
        # More than two pairs only happens with oversized hands: keep the top two
        high_pair, low_pair = pairs[0], pairs[1]
        pattern = high_pair + low_pair
        # Index of (high, low) in lexicographic order; always below 100
        h = _high(high_pair[0]) - 2
        l = _high(low_pair[0]) - 2
        tiebreak = h * (h - 1) // 2 + l
        return _result(HandType.TWO_PAIR, pattern, _kickers(cards, pattern), tiebreak)

    def check_pair(self, cards: list[Card]) -> Optional[HandEvaluation]:
        pairs = _groups_of(cards, 2)
        if not pairs:
            return None
        pair = pairs[0]
        return _result(HandType.PAIR, pair, _kickers(cards, pair), _high(pair[0]))

    def check_high_card(self, cards: list[Card]) -> HandEvaluation:
        # Kickers list every card top-down, the high card included
        ordered = sort_cards_by_rank(cards, ace_high=True, descending=True)
        return _result(HandType.HIGH_CARD, ordered[:1], ordered, _high(ordered[0]))


def compare_hands(hand1: HandEvaluation, hand2: HandEvaluation) -> int:
    """
    Compare two evaluated hands.

    Returns a positive number if hand1 is stronger, negative if hand2 is,
    zero on a tie. Equal ranks fall back to kickers, highest first; running
    out of kickers first loses.
    """
    diff = hand1.rank - hand2.rank
    if diff != 0:
        return diff

    for i in range(max(len(hand1.kickers), len(hand2.kickers))):
        if i >= len(hand1.kickers):
            return -1
        if i >= len(hand2.kickers):
            return 1
        kicker_diff = _high(hand1.kickers[i]) - _high(hand2.kickers[i])
        if kicker_diff != 0:
            return kicker_diff

    return 0


_default_detector = HandDetector()


def evaluate_hand(cards: list[Card]) -> HandEvaluation:
    """Convenience function to evaluate a hand."""
    return _default_detector.evaluate(cards)
