"""Tests for effect conditions and the effect interpreter."""

import random

import pytest

from balatro_engine.engine.deck import Suit
from balatro_engine.engine.effects import (
    Condition,
    ConditionKind,
    EffectKind,
    EffectType,
    JokerEffect,
    ScoringContext,
    ScoringView,
    Trigger,
    apply_effect,
    check_condition,
    money_from_effect,
)
from balatro_engine.engine.hand_detector import HandType, evaluate_hand


def view_of(cards):
    return ScoringView(played_cards=tuple(cards), evaluation=evaluate_hand(cards))


def test_missing_condition_holds(cards):
    assert check_condition(None, view_of(cards("2s")))


@pytest.mark.parametrize("condition,codes,expected", [
    (Condition(ConditionKind.HAS_SUIT, Suit.HEARTS), "2s 3h", True),
    (Condition(ConditionKind.HAS_SUIT, Suit.HEARTS), "2s 3d", False),
    (Condition(ConditionKind.HAS_RANK, 7), "7s 3d", True),
    (Condition(ConditionKind.HAS_RANK, 7), "8s 3d", False),
    (Condition(ConditionKind.HAS_FACE_CARD), "Js 3d", True),
    (Condition(ConditionKind.HAS_FACE_CARD), "As 10d", False),
    (Condition(ConditionKind.MIN_CARDS, 3), "As 10d 4c", True),
    (Condition(ConditionKind.MIN_CARDS, 3), "As 10d", False),
    (Condition(ConditionKind.IS_FLUSH), "2h 5h 9h Jh Kh", True),
    (Condition(ConditionKind.IS_FLUSH), "2h 5h 9h Jh", False),
    (Condition(ConditionKind.HAND_AT_LEAST, HandType.PAIR), "9s 9h", True),
    (Condition(ConditionKind.HAND_AT_LEAST, HandType.PAIR), "9s 8h", False),
    (Condition(ConditionKind.HAND_AT_LEAST, HandType.PAIR), "9s 9h 9d", True),
])
def test_conditions(cards, condition, codes, expected):
    assert check_condition(condition, view_of(cards(codes))) is expected


def test_hand_at_least_needs_evaluation(cards):
    view = ScoringView(played_cards=tuple(cards("9s 9h")))
    assert not check_condition(Condition(ConditionKind.HAND_AT_LEAST, HandType.PAIR), view)


def test_condition_serialization_restores_enums():
    condition = Condition(ConditionKind.HAND_AT_LEAST, HandType.FLUSH)
    data = condition.to_dict()
    assert data == {"kind": "hand_at_least", "value": "flush"}
    assert Condition.from_dict(data) == condition
    suited = Condition(ConditionKind.HAS_SUIT, Suit.CLUBS)
    assert Condition.from_dict(suited.to_dict()) == suited


def test_effect_serialization():
    effect = JokerEffect(
        type=EffectType.CONDITIONAL, trigger=Trigger.ON_SCORE, value=3,
        kind=EffectKind.MULT_PER_SUIT,
        condition=Condition(ConditionKind.HAS_SUIT, Suit.HEARTS),
        params={"suit": "hearts"},
    )
    assert JokerEffect.from_dict(effect.to_dict()) == effect


@pytest.mark.parametrize("kind,params", [
    (EffectKind.MULT_PER_SUIT, {"suit": "stars"}),
    (EffectKind.MULT_PER_SUIT, {}),
    (EffectKind.CHIPS_PER_RANK, {"rank": 14}),
    (EffectKind.CHIPS_PER_RANK, {"rank": "seven"}),
    (EffectKind.RANDOM_X_MULT, {"min": 10, "max": 2}),
])
def test_effect_with_bad_params_is_rejected(kind, params):
    data = JokerEffect(EffectType.SPECIAL, Trigger.ON_SCORE, 1, kind=kind).to_dict()
    data["params"] = params
    with pytest.raises((ValueError, KeyError)):
        JokerEffect.from_dict(data)


def test_additive_and_multiplier(cards):
    ctx = ScoringContext(chips=10, multiplier=2)
    view = view_of(cards("2s"))
    assert apply_effect(JokerEffect(EffectType.ADDITIVE, Trigger.ON_SCORE, 30), ctx, view) == (30, "+30 Chips")
    assert apply_effect(JokerEffect(EffectType.MULTIPLIER, Trigger.ON_SCORE, 4), ctx, view) == (4, "+4 Mult")
    assert ctx.chips == 40
    assert ctx.multiplier == 6
    assert ctx.score == 240


def test_zero_effects_do_nothing(cards):
    ctx = ScoringContext(chips=10, multiplier=2)
    view = view_of(cards("2s"))
    assert apply_effect(JokerEffect(EffectType.ADDITIVE, Trigger.ON_SCORE, 0), ctx, view) is None
    x_one = JokerEffect(EffectType.SPECIAL, Trigger.ON_SCORE, 1, kind=EffectKind.X_MULT)
    assert apply_effect(x_one, ctx, view) is None
    per_suit = JokerEffect(EffectType.CONDITIONAL, Trigger.ON_SCORE, 3,
                           kind=EffectKind.MULT_PER_SUIT, params={"suit": "hearts"})
    assert apply_effect(per_suit, ctx, view) is None
    assert (ctx.chips, ctx.multiplier) == (10, 2)


def test_percent_chips_truncates(cards):
    ctx = ScoringContext(chips=30, multiplier=2)
    effect = JokerEffect(EffectType.SPECIAL, Trigger.ON_SCORE, 25, kind=EffectKind.PERCENT_CHIPS)
    value, _ = apply_effect(effect, ctx, view_of(cards("Ks Kh")))
    assert value == 7
    assert ctx.chips == 37


def test_double_mult(cards):
    ctx = ScoringContext(chips=30, multiplier=5)
    effect = JokerEffect(EffectType.SPECIAL, Trigger.ON_SCORE, 2, kind=EffectKind.DOUBLE_MULT)
    apply_effect(effect, ctx, view_of(cards("Ks")))
    assert ctx.multiplier == 10


def test_per_card_effects(cards):
    view = view_of(cards("7s 7h Kd Qh"))
    ctx = ScoringContext(chips=0, multiplier=0)
    apply_effect(JokerEffect(EffectType.CONDITIONAL, Trigger.ON_SCORE, 77,
                             kind=EffectKind.CHIPS_PER_RANK, params={"rank": 7}), ctx, view)
    apply_effect(JokerEffect(EffectType.CONDITIONAL, Trigger.ON_SCORE, 2,
                             kind=EffectKind.MULT_PER_FACE_CARD), ctx, view)
    apply_effect(JokerEffect(EffectType.CONDITIONAL, Trigger.ON_SCORE, 3,
                             kind=EffectKind.MULT_PER_SUIT, params={"suit": "hearts"}), ctx, view)
    assert ctx.chips == 154
    assert ctx.multiplier == 4 + 6


def test_random_x_mult_uses_expected_value_without_rng(cards):
    effect = JokerEffect(EffectType.SPECIAL, Trigger.ON_SCORE,
                         kind=EffectKind.RANDOM_X_MULT, params={"min": 2, "max": 10})
    ctx = ScoringContext(chips=10, multiplier=2)
    value, _ = apply_effect(effect, ctx, view_of(cards("2s")))
    assert value == 6
    assert ctx.multiplier == 12


def test_random_x_mult_rolls_with_rng(cards):
    effect = JokerEffect(EffectType.SPECIAL, Trigger.ON_SCORE,
                         kind=EffectKind.RANDOM_X_MULT, params={"min": 2, "max": 10})
    rolls = set()
    rng = random.Random(5)
    for _ in range(50):
        ctx = ScoringContext(chips=10, multiplier=1)
        value, _ = apply_effect(effect, ctx, view_of(cards("2s")), rng=rng)
        assert 2 <= value <= 10
        rolls.add(value)
    assert len(rolls) > 1


def test_earn_money_is_paid_outside_scoring(cards):
    effect = JokerEffect(EffectType.SPECIAL, Trigger.ON_DISCARD, 1, kind=EffectKind.EARN_MONEY)
    ctx = ScoringContext(chips=10, multiplier=2)
    assert apply_effect(effect, ctx, view_of(cards("2s"))) is None
    assert money_from_effect(effect) == 1
    assert money_from_effect(JokerEffect(EffectType.ADDITIVE, Trigger.ON_SCORE, 30)) == 0


def test_context_records_details():
    ctx = ScoringContext(chips=1, multiplier=1)
    ctx.add_chips(5, "Chip Stack")
    ctx.multiply_mult(3, "Flush Master")
    ctx.add_mult(2)
    assert ctx.details == ["+5 Chips (Chip Stack)", "x3 Mult (Flush Master)"]
