"""Shared fixtures for the engine tests."""

import random

import pytest

from balatro_engine.engine.deck import Card, Suit
from balatro_engine.engine.game import GameConfig, GameController

SUIT_CODES = {"s": Suit.SPADES, "h": Suit.HEARTS, "c": Suit.CLUBS, "d": Suit.DIAMONDS}
RANK_CODES = {"A": 1, "J": 11, "Q": 12, "K": 13}


def parse_cards(codes: str) -> list[Card]:
    """'As Kh 10d 2c' -> cards. Duplicate cards get distinct ids."""
    cards = []
    seen = {}
    for token in codes.split():
        rank_code, suit_code = token[:-1], token[-1]
        rank = RANK_CODES.get(rank_code) or int(rank_code)
        card = Card.of(rank, SUIT_CODES[suit_code])
        count = seen.get(card.id, 0)
        seen[card.id] = count + 1
        if count:
            card = Card(id=f"{card.id}-{count}", suit=card.suit, rank=card.rank)
        cards.append(card)
    return cards


@pytest.fixture
def cards():
    return parse_cards


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def make_game():
    def _make(seed: int = 7, start: bool = True, **config_overrides) -> GameController:
        starting_jokers = config_overrides.pop("starting_jokers", None)
        game = GameController(
            config=GameConfig(**config_overrides),
            seed=seed,
            starting_jokers=starting_jokers,
        )
        if start:
            game.start_game()
        return game
    return _make
