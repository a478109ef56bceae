"""Tests for the scoring pipeline and hand type levels."""

import random

import pytest

from balatro_engine.engine.effects import EffectKind, EffectType, JokerEffect, Trigger
from balatro_engine.engine.hand_detector import EmptyHandError, HandType, evaluate_hand
from balatro_engine.engine.jokers import Joker, Rarity, create_joker
from balatro_engine.engine.scoring import (
    ScoringEngine,
    calculate_score,
    find_best_hand,
    initial_hand_type_configs,
    preview_score,
    score_display_lines,
    upgrade_hand_type_config,
)


def jokers(*template_ids):
    rng = random.Random(0)
    return [create_joker(template_id, rng) for template_id in template_ids]


def test_pair_without_jokers(cards):
    result = calculate_score(cards("3s 9h 3d Kc 7s"))
    assert result.hand_type == HandType.PAIR
    assert result.base_score == 32
    assert result.chips == 42
    assert result.multiplier == 2
    assert result.final_score == 84
    assert result.joker_effects == ()


def test_additive_jokers_apply_in_roster_order(cards):
    result = calculate_score(cards("Ks Kh"), jokers("joker_basic_chips", "joker_basic_mult"))
    assert result.chips == 60
    assert result.multiplier == 6
    assert result.final_score == 360
    assert [e.joker_name for e in result.joker_effects] == ["Chip Stack", "Joker"]


def test_roster_order_changes_result(cards):
    doubler_first = calculate_score(cards("Ks Kh"), jokers("joker_mult_doubler", "joker_basic_mult"))
    mult_first = calculate_score(cards("Ks Kh"), jokers("joker_basic_mult", "joker_mult_doubler"))
    assert doubler_first.final_score == 240
    assert mult_first.final_score == 360


def test_flush_master_multiplies(cards):
    flush = cards("Ah Kh 10h 7h 2h")
    result = calculate_score(flush, jokers("joker_flush_master"))
    assert result.hand_type == HandType.FLUSH
    assert result.base_score == 40
    assert result.final_score == 75 * 12

    stacked = calculate_score(flush, jokers("joker_hearts_lover", "joker_flush_master"))
    assert stacked.multiplier == 57
    assert stacked.final_score == 4275


def test_flush_master_needs_five_cards(cards):
    result = calculate_score(cards("Ah Kh 10h 7h"), jokers("joker_flush_master"))
    assert result.hand_type == HandType.HIGH_CARD
    assert result.joker_effects == ()


def test_conditional_jokers(cards):
    pair_expert, face, lucky, golden, percent = jokers(
        "joker_pair_expert", "joker_face_card_bonus", "joker_lucky_seven",
        "joker_golden_ticket", "joker_percent_boost",
    )
    assert calculate_score(cards("Ks Qh"), [pair_expert]).joker_effects == ()
    assert calculate_score(cards("Ks Kh"), [pair_expert]).final_score == 80 * 2
    assert calculate_score(cards("Ks Kh"), [face]).final_score == 30 * 6
    assert calculate_score(cards("7s 7h"), [lucky]).final_score == 178 * 2
    assert calculate_score(cards("Ks Kh"), [golden]).final_score == 30 * 12
    assert calculate_score(cards("Ks Kh"), [percent]).final_score == 37 * 2


def test_discard_jokers_do_not_score(cards):
    result = calculate_score(cards("Ks Kh"), jokers("joker_recycler"))
    assert result.final_score == 60
    assert result.joker_effects == ()


def test_no_op_effect_is_not_recorded(cards):
    x_one = Joker(
        id="x-one", name="Flat", description="x1 Mult", rarity=Rarity.COMMON, cost=1,
        effect=JokerEffect(EffectType.SPECIAL, Trigger.ON_SCORE, 1, kind=EffectKind.X_MULT),
        sell_value=0,
    )
    result = calculate_score(cards("Ks Kh"), [x_one])
    assert result.final_score == 60
    assert result.joker_effects == ()


def test_chaos_multiplier(cards):
    chaos = jokers("joker_chaos_multiplier")
    assert preview_score(cards("Ks Kh"), chaos).final_score == 360
    rolled = calculate_score(cards("Ks Kh"), chaos, rng=random.Random(9))
    factor = rolled.joker_effects[0].value
    assert 2 <= factor <= 10
    assert rolled.final_score == int(60 * factor)


def test_preview_is_idempotent_and_pure(cards):
    hand = cards("Ah Kh 10h 7h 2h")
    roster = jokers("joker_hearts_lover", "joker_chaos_multiplier")
    configs = initial_hand_type_configs()
    snapshot = {k: v.to_dict() for k, v in configs.items()}
    first = preview_score(hand, roster, configs)
    second = preview_score(hand, roster, configs)
    assert first == second
    assert {k: v.to_dict() for k, v in configs.items()} == snapshot
    assert [c.id for c in hand] == ["hearts-1", "hearts-13", "hearts-10", "hearts-7", "hearts-2"]


def test_missing_config_falls_back_to_initial(cards):
    assert calculate_score(cards("Ks Kh"), hand_type_configs={}).final_score == 60


def test_upgraded_config_is_used(cards):
    configs = initial_hand_type_configs()
    configs[HandType.PAIR] = upgrade_hand_type_config(configs[HandType.PAIR])
    result = calculate_score(cards("Ks Kh"), hand_type_configs=configs)
    assert result.chips == 33
    assert result.multiplier == 3


def test_upgrade_math():
    pair = initial_hand_type_configs()[HandType.PAIR]
    level2 = upgrade_hand_type_config(pair)
    assert (level2.level, level2.base_chips, level2.base_multiplier, level2.upgrade_cost) == (2, 13, 3, 4)
    level3 = upgrade_hand_type_config(pair, levels=2)
    assert (level3.level, level3.base_chips, level3.base_multiplier, level3.upgrade_cost) == (3, 16, 4, 5)
    assert pair.level == 1
    assert pair.base_chips == 10


def test_empty_hand_raises():
    with pytest.raises(EmptyHandError):
        ScoringEngine().calculate([])


def test_find_best_hand(cards):
    hand = cards("9s 9h 9d 4c 4s 2h Kd Jc")
    best = find_best_hand(hand)
    assert len(best) == 5
    assert evaluate_hand(best).hand_type == HandType.FULL_HOUSE


def test_find_best_hand_small_input(cards):
    hand = cards("9s 2h")
    assert find_best_hand(hand) == hand


def test_display_lines(cards):
    lines = score_display_lines(calculate_score(cards("3s 9h 3d Kc 7s")))
    assert lines[0] == "Pair"
    assert "42 Chips x 2 Mult" in lines
    assert lines[-1] == "Score: 84"
