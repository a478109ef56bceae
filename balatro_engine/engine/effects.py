"""
Joker effect descriptors and the interpreter that applies them.

Effects are plain data (type, trigger, kind, condition, params) so jokers can
be saved and compared. All behaviour lives in the dispatch functions below,
which only read the view they are given and write to the scoring context.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .deck import Card, Suit, is_flush
from .hand_detector import HandEvaluation, HandType


class EffectType(Enum):
    ADDITIVE = "additive"        # +Chips
    MULTIPLIER = "multiplier"    # +Mult
    CONDITIONAL = "conditional"  # Depends on the played cards
    SPECIAL = "special"          # Free-form transform of the running score


class Trigger(Enum):
    ON_SCORE = "on_score"
    ON_DISCARD = "on_discard"
    ON_DRAW = "on_draw"
    PASSIVE = "passive"


SCORING_TRIGGERS = (Trigger.ON_SCORE, Trigger.PASSIVE)


class EffectKind(Enum):
    ADD_CHIPS = "add_chips"
    ADD_MULT = "add_mult"
    X_MULT = "x_mult"
    MULT_PER_SUIT = "mult_per_suit"            # params: suit
    MULT_PER_FACE_CARD = "mult_per_face_card"
    CHIPS_PER_RANK = "chips_per_rank"          # params: rank
    RANDOM_X_MULT = "random_x_mult"            # params: min, max
    PERCENT_CHIPS = "percent_chips"
    DOUBLE_MULT = "double_mult"
    EARN_MONEY = "earn_money"


class ConditionKind(Enum):
    HAS_SUIT = "has_suit"
    HAS_RANK = "has_rank"
    HAS_FACE_CARD = "has_face_card"
    MIN_CARDS = "min_cards"
    IS_FLUSH = "is_flush"
    HAND_AT_LEAST = "hand_at_least"


@dataclass(frozen=True)
class Condition:
    """A predicate over the scoring view. `value` depends on the kind."""
    kind: ConditionKind
    value: object = None

    def to_dict(self) -> dict:
        value = self.value.value if isinstance(self.value, Enum) else self.value
        return {"kind": self.kind.value, "value": value}

    @classmethod
    def from_dict(cls, data: dict) -> "Condition":
        kind = ConditionKind(data["kind"])
        value = data.get("value")
        if kind == ConditionKind.HAS_SUIT:
            value = Suit(value)
        elif kind == ConditionKind.HAND_AT_LEAST:
            value = HandType(value)
        return cls(kind=kind, value=value)


@dataclass
class JokerEffect:
    type: EffectType
    trigger: Trigger
    value: float = 0
    kind: Optional[EffectKind] = None
    condition: Optional[Condition] = None
    params: dict = field(default_factory=dict)
    money_per_round: int = 0

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "trigger": self.trigger.value,
            "value": self.value,
            "kind": self.kind.value if self.kind else None,
            "condition": self.condition.to_dict() if self.condition else None,
            "params": dict(self.params),
            "money_per_round": self.money_per_round,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "JokerEffect":
        kind = EffectKind(data["kind"]) if data.get("kind") else None
        condition = data.get("condition")
        params = dict(data.get("params") or {})
        _check_params(kind, params)
        return cls(
            type=EffectType(data["type"]),
            trigger=Trigger(data["trigger"]),
            value=data.get("value", 0),
            kind=kind,
            condition=Condition.from_dict(condition) if condition else None,
            params=params,
            money_per_round=data.get("money_per_round", 0),
        )


def _check_params(kind: Optional[EffectKind], params: dict) -> None:
    """Raise ValueError if params cannot drive the given kind."""
    if kind == EffectKind.MULT_PER_SUIT:
        Suit(params["suit"])
    elif kind == EffectKind.CHIPS_PER_RANK:
        if not 1 <= int(params["rank"]) <= 13:
            raise ValueError(f"Rank out of range: {params['rank']}")
    elif kind == EffectKind.RANDOM_X_MULT:
        low, high = int(params.get("min", 2)), int(params.get("max", 10))
        if low > high:
            raise ValueError(f"Empty multiplier range: {low}..{high}")


@dataclass(frozen=True)
class ScoringView:
    """Read-only slice of game state that conditions and effects may look at."""
    played_cards: tuple[Card, ...] = ()
    evaluation: Optional[HandEvaluation] = None
    held_cards: tuple[Card, ...] = ()
    money: int = 0
    current_round: int = 1


@dataclass
class ScoringContext:
    """Running chips and mult passed through the joker pipeline."""
    chips: float
    multiplier: float
    details: list[str] = field(default_factory=list)

    @property
    def score(self) -> int:
        return int(self.chips * self.multiplier)

    def add_chips(self, amount: float, source: str = ""):
        self.chips += amount
        if source:
            self.details.append(f"+{amount} Chips ({source})")

    def add_mult(self, amount: float, source: str = ""):
        self.multiplier += amount
        if source:
            self.details.append(f"+{amount} Mult ({source})")

    def multiply_mult(self, factor: float, source: str = ""):
        self.multiplier *= factor
        if source:
            self.details.append(f"x{factor} Mult ({source})")


def check_condition(condition: Optional[Condition], view: ScoringView) -> bool:
    """True if the condition holds for the view. No condition always holds."""
    if condition is None:
        return True

    cards = view.played_cards
    kind = condition.kind

    if kind == ConditionKind.HAS_SUIT:
        return any(c.suit == condition.value for c in cards)

    elif kind == ConditionKind.HAS_RANK:
        return any(c.rank == condition.value for c in cards)

    elif kind == ConditionKind.HAS_FACE_CARD:
        return any(c.is_face_card for c in cards)

    elif kind == ConditionKind.MIN_CARDS:
        return len(cards) >= condition.value

    elif kind == ConditionKind.IS_FLUSH:
        return len(cards) >= 5 and is_flush(list(cards))

    elif kind == ConditionKind.HAND_AT_LEAST:
        if view.evaluation is None:
            return False
        return view.evaluation.hand_type.tier >= condition.value.tier

    return False


def _expected_or_rolled(low: int, high: int, rng: Optional[random.Random]) -> float:
    # Without an rng the roll resolves to its expected value
    if rng is None:
        return (low + high) / 2
    return rng.randint(low, high)


def apply_effect(effect: JokerEffect, ctx: ScoringContext, view: ScoringView,
                 source: str = "", rng: random.Random = None) -> Optional[tuple[float, str]]:
    """
    Apply one effect to the running score.

    Returns (value, description) when the effect changed the score, or None
    when it had nothing to act on.
    """
    if effect.type == EffectType.ADDITIVE:
        if not effect.value:
            return None
        ctx.add_chips(effect.value, source)
        return effect.value, f"+{effect.value} Chips"

    if effect.type == EffectType.MULTIPLIER:
        if not effect.value:
            return None
        ctx.add_mult(effect.value, source)
        return effect.value, f"+{effect.value} Mult"

    return _apply_kind(effect, ctx, view, source, rng)


def _apply_kind(effect: JokerEffect, ctx: ScoringContext, view: ScoringView,
                source: str, rng: Optional[random.Random]) -> Optional[tuple[float, str]]:
    kind = effect.kind
    params = effect.params
    cards = view.played_cards

    if kind == EffectKind.ADD_CHIPS:
        amount = effect.value
        if not amount:
            return None
        ctx.add_chips(amount, source)
        return amount, f"+{amount} Chips"

    elif kind == EffectKind.ADD_MULT:
        amount = effect.value
        if not amount:
            return None
        ctx.add_mult(amount, source)
        return amount, f"+{amount} Mult"

    elif kind == EffectKind.X_MULT:
        factor = effect.value
        if factor in (0, 1):
            return None
        ctx.multiply_mult(factor, source)
        return factor, f"x{factor} Mult"

    elif kind == EffectKind.MULT_PER_SUIT:
        suit = Suit(params["suit"])
        amount = sum(1 for c in cards if c.suit == suit) * effect.value
        if not amount:
            return None
        ctx.add_mult(amount, source)
        return amount, f"+{amount} Mult ({suit.value})"

    elif kind == EffectKind.MULT_PER_FACE_CARD:
        amount = sum(1 for c in cards if c.is_face_card) * effect.value
        if not amount:
            return None
        ctx.add_mult(amount, source)
        return amount, f"+{amount} Mult (face cards)"

    elif kind == EffectKind.CHIPS_PER_RANK:
        rank = int(params["rank"])
        amount = sum(1 for c in cards if c.rank == rank) * effect.value
        if not amount:
            return None
        ctx.add_chips(amount, source)
        return amount, f"+{amount} Chips"

    elif kind == EffectKind.RANDOM_X_MULT:
        factor = _expected_or_rolled(int(params.get("min", 2)), int(params.get("max", 10)), rng)
        ctx.multiply_mult(factor, source)
        return factor, f"x{factor} Mult (random)"

    elif kind == EffectKind.PERCENT_CHIPS:
        amount = int(ctx.chips * effect.value / 100)
        if not amount:
            return None
        ctx.add_chips(amount, source)
        return amount, f"+{amount} Chips ({effect.value}%)"

    elif kind == EffectKind.DOUBLE_MULT:
        amount = ctx.multiplier
        if not amount:
            return None
        ctx.add_mult(amount, source)
        return amount, f"+{amount} Mult (doubled)"

    elif kind == EffectKind.EARN_MONEY:
        # Money is paid out by the game, not the scorer
        return None

    return None


def money_from_effect(effect: JokerEffect) -> int:
    """Dollars an effect pays when it fires outside scoring."""
    if effect.kind == EffectKind.EARN_MONEY:
        return int(effect.value)
    return 0
