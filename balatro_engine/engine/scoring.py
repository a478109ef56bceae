"""
Scoring engine for Balatro.
Calculates final score from played cards, jokers, and hand type levels.

Score = (Card Chips + Hand Chips, then joker chips) x (Hand Mult, then joker mult)
"""

import random
from dataclasses import dataclass, field, replace
from itertools import combinations
from typing import Optional

from .deck import Card, calculate_hand_base_score
from .effects import (
    SCORING_TRIGGERS,
    EffectType,
    ScoringContext,
    ScoringView,
    apply_effect,
    check_condition,
)
from .hand_detector import (
    EmptyHandError,
    HandEvaluation,
    HandType,
    evaluate_hand,
    hand_type_name,
)
from .jokers import Joker

UPGRADE_CHIP_RATE = 0.3


@dataclass
class HandTypeConfig:
    """Per-hand-type chips, mult and level."""
    name: str
    base_chips: int
    base_multiplier: int
    level: int = 1
    upgrade_cost: int = 3

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "base_chips": self.base_chips,
            "base_multiplier": self.base_multiplier,
            "level": self.level,
            "upgrade_cost": self.upgrade_cost,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HandTypeConfig":
        return cls(
            name=data["name"],
            base_chips=int(data["base_chips"]),
            base_multiplier=int(data["base_multiplier"]),
            level=int(data.get("level", 1)),
            upgrade_cost=int(data.get("upgrade_cost", 3)),
        )


# (chips, mult, upgrade cost) at level 1
_INITIAL_VALUES = {
    HandType.HIGH_CARD: (5, 1, 3),
    HandType.PAIR: (10, 2, 3),
    HandType.TWO_PAIR: (20, 2, 3),
    HandType.THREE_OF_A_KIND: (30, 3, 4),
    HandType.STRAIGHT: (30, 4, 4),
    HandType.FLUSH: (35, 4, 4),
    HandType.FULL_HOUSE: (40, 4, 5),
    HandType.FOUR_OF_A_KIND: (60, 7, 5),
    HandType.STRAIGHT_FLUSH: (100, 8, 6),
    HandType.ROYAL_FLUSH: (100, 8, 6),
}


def initial_hand_type_configs() -> dict[HandType, HandTypeConfig]:
    """Fresh level-1 configs for every hand type."""
    return {
        hand_type: HandTypeConfig(
            name=hand_type_name(hand_type),
            base_chips=chips,
            base_multiplier=mult,
            level=1,
            upgrade_cost=cost,
        )
        for hand_type, (chips, mult, cost) in _INITIAL_VALUES.items()
    }


INITIAL_HAND_TYPE_CONFIGS = initial_hand_type_configs()


def upgrade_hand_type_config(config: HandTypeConfig, levels: int = 1) -> HandTypeConfig:
    """Return a copy raised by `levels` levels."""
    upgraded = replace(config)
    for _ in range(levels):
        upgraded = replace(
            upgraded,
            level=upgraded.level + 1,
            base_chips=upgraded.base_chips + int(upgraded.base_chips * UPGRADE_CHIP_RATE),
            base_multiplier=upgraded.base_multiplier + 1,
            upgrade_cost=upgraded.upgrade_cost + 1,
        )
    return upgraded


@dataclass(frozen=True)
class JokerEffectResult:
    joker_id: str
    joker_name: str
    effect_type: EffectType
    value: float
    description: str


@dataclass(frozen=True)
class ScoreResult:
    """Detailed breakdown of how a score was calculated."""
    hand_type: HandType
    base_score: int
    chips: float
    multiplier: float
    final_score: int
    joker_effects: tuple[JokerEffectResult, ...] = ()
    evaluation: Optional[HandEvaluation] = field(default=None, compare=False)
    details: tuple[str, ...] = field(default=(), compare=False)

    @property
    def hand_name(self) -> str:
        return hand_type_name(self.hand_type)


class ScoringEngine:
    """
    Scores played cards.

    Every played card contributes its chip value, then the hand type's chips
    and mult are added, then jokers run in roster order against the running
    chips and mult.
    """

    def calculate(self, cards: list[Card], jokers: list[Joker] = None,
                  hand_type_configs: dict = None, view: ScoringView = None,
                  rng: random.Random = None) -> ScoreResult:
        if not cards:
            raise EmptyHandError("Cannot score an empty hand")

        cards = list(cards)
        evaluation = evaluate_hand(cards)
        configs = hand_type_configs or {}
        config = configs.get(evaluation.hand_type) or INITIAL_HAND_TYPE_CONFIGS[evaluation.hand_type]

        base_score = calculate_hand_base_score(cards)
        ctx = ScoringContext(
            chips=base_score + config.base_chips,
            multiplier=config.base_multiplier,
        )
        ctx.details.append(f"{config.name} lvl {config.level}: {config.base_chips} Chips x {config.base_multiplier} Mult")
        ctx.details.append(f"+{base_score} Chips (cards)")

        if view is None:
            view = ScoringView(played_cards=tuple(cards), evaluation=evaluation)
        else:
            view = replace(view, played_cards=tuple(cards), evaluation=evaluation)

        effects = []
        for joker in jokers or []:
            effect = joker.effect
            if effect.trigger not in SCORING_TRIGGERS:
                continue
            if not check_condition(effect.condition, view):
                continue
            applied = apply_effect(effect, ctx, view, source=joker.name, rng=rng)
            if applied is None:
                continue
            value, description = applied
            effects.append(JokerEffectResult(
                joker_id=joker.id,
                joker_name=joker.name,
                effect_type=effect.type,
                value=value,
                description=description,
            ))

        return ScoreResult(
            hand_type=evaluation.hand_type,
            base_score=base_score,
            chips=ctx.chips,
            multiplier=ctx.multiplier,
            final_score=ctx.score,
            joker_effects=tuple(effects),
            evaluation=evaluation,
            details=tuple(ctx.details),
        )

    def preview(self, cards: list[Card], jokers: list[Joker] = None,
                hand_type_configs: dict = None, view: ScoringView = None) -> ScoreResult:
        """Deterministic score: random effects use their expected value."""
        return self.calculate(list(cards), list(jokers or []), dict(hand_type_configs or {}),
                              view=view, rng=None)

    def find_best_hand(self, available_cards: list[Card], hand_size: int = 5) -> list[Card]:
        """
        Strongest `hand_size` subset by hand rank; the first one found wins ties.
        Tries every combination, so keep the input to a hand's worth of cards.
        """
        cards = list(available_cards)
        if len(cards) <= hand_size:
            return cards

        best: list[Card] = []
        best_rank = -1
        for combo in combinations(cards, hand_size):
            rank = evaluate_hand(list(combo)).rank
            if rank > best_rank:
                best_rank = rank
                best = list(combo)
        return best


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def score_display_lines(result: ScoreResult) -> list[str]:
    """Human-readable breakdown of a score."""
    lines = [
        result.hand_name,
        f"Card chips: {result.base_score}",
    ]
    for effect in result.joker_effects:
        lines.append(f"{effect.joker_name}: {effect.description}")
    lines.append(f"{_format_number(result.chips)} Chips x {_format_number(result.multiplier)} Mult")
    lines.append(f"Score: {result.final_score}")
    return lines


_default_engine = ScoringEngine()


def calculate_score(cards: list[Card], jokers: list[Joker] = None,
                    hand_type_configs: dict = None, *, view: ScoringView = None,
                    rng: random.Random = None) -> ScoreResult:
    """Convenience function to score a hand."""
    return _default_engine.calculate(cards, jokers, hand_type_configs, view=view, rng=rng)


def preview_score(cards: list[Card], jokers: list[Joker] = None,
                  hand_type_configs: dict = None, *, view: ScoringView = None) -> ScoreResult:
    return _default_engine.preview(cards, jokers, hand_type_configs, view=view)


def find_best_hand(available_cards: list[Card], hand_size: int = 5) -> list[Card]:
    return _default_engine.find_best_hand(available_cards, hand_size)
