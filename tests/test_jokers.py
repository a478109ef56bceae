"""Tests for joker templates and the registry."""

import logging
import random

import pytest

from balatro_engine.engine.effects import ScoringView, Trigger
from balatro_engine.engine.hand_detector import evaluate_hand
from balatro_engine.engine.jokers import (
    DEFAULT_TEMPLATES,
    Joker,
    JokerRegistry,
    JokerTemplate,
    Rarity,
    calculate_joker_value,
    can_trigger_joker,
    create_joker,
    joker_effect_description,
)


def registry():
    return JokerRegistry(DEFAULT_TEMPLATES)


def test_catalog_covers_every_rarity():
    reg = registry()
    assert len(reg.get_all_templates()) == 12
    for rarity in Rarity:
        assert reg.get_templates_by_rarity(rarity)


def test_create_joker_from_template():
    joker = create_joker("joker_basic_mult", random.Random(1))
    assert joker.name == "Joker"
    assert joker.cost == 2
    assert joker.sell_value == 1
    assert joker.template_id == "joker_basic_mult"
    assert joker.effect.value == 4


def test_sell_value_is_floored():
    joker = create_joker("joker_lucky_seven", random.Random(1))
    assert joker.sell_value == 5


def test_created_jokers_get_distinct_ids_and_effects():
    rng = random.Random(1)
    a = create_joker("joker_hearts_lover", rng)
    b = create_joker("joker_hearts_lover", rng)
    assert a.id != b.id
    assert a.effect == b.effect
    assert a.effect is not b.effect
    assert a.effect.params is not b.effect.params


def test_unknown_template_logs_warning(caplog):
    with caplog.at_level(logging.WARNING):
        assert registry().create_joker("joker_missing") is None
    assert "joker_missing" in caplog.text


def test_register_replaces_same_id():
    reg = registry()
    original = reg.get_template("joker_basic_mult")
    replacement = JokerTemplate(
        id="joker_basic_mult", name="Big Joker", description="+8 Mult",
        rarity=Rarity.COMMON, base_cost=4, sell_value_multiplier=0.5,
        effect_factory=original.effect_factory,
    )
    reg.register_joker(replacement)
    assert len(reg.get_all_templates()) == 12
    assert reg.create_joker("joker_basic_mult").name == "Big Joker"


def test_zero_weight_excludes_rarity():
    reg = registry()
    weights = {Rarity.COMMON: 0, Rarity.UNCOMMON: 0, Rarity.RARE: 0, Rarity.LEGENDARY: 1}
    rng = random.Random(3)
    for _ in range(30):
        assert reg.get_random_template(weights, rng).rarity == Rarity.LEGENDARY


def test_rarity_weights_accept_string_keys():
    reg = registry()
    weights = {"common": 0, "uncommon": 0, "rare": 0, "legendary": 1}
    rng = random.Random(3)
    for _ in range(30):
        assert reg.get_random_template(weights, rng).rarity == Rarity.LEGENDARY


def test_unknown_rarity_key_raises():
    with pytest.raises(ValueError):
        registry().get_random_template({"mythic": 1})


def test_missing_rarity_weighs_one():
    template = DEFAULT_TEMPLATES[4]
    assert template.rarity == Rarity.UNCOMMON
    reg = JokerRegistry([template])
    assert reg.get_random_template({Rarity.COMMON: 50}, random.Random(1)) is template


def test_empty_pool_returns_none():
    assert JokerRegistry().get_random_template() is None
    zero = {rarity: 0 for rarity in Rarity}
    assert registry().get_random_template(zero) is None
    assert registry().generate_shop_jokers(3, zero) == []


def test_shop_jokers_are_reproducible():
    a = registry().generate_shop_jokers(3, rng=random.Random(11))
    b = registry().generate_shop_jokers(3, rng=random.Random(11))
    assert len(a) == 3
    assert [j.id for j in a] == [j.id for j in b]


def test_trigger_checks_trigger_and_condition(cards):
    rng = random.Random(1)
    hearts = create_joker("joker_hearts_lover", rng)
    recycler = create_joker("joker_recycler", rng)
    played = cards("2s 3s")
    view = ScoringView(played_cards=tuple(played), evaluation=evaluate_hand(played))
    assert recycler is not None
    assert can_trigger_joker(recycler, view, Trigger.ON_DISCARD)
    assert not can_trigger_joker(recycler, view, Trigger.ON_SCORE)
    assert not can_trigger_joker(hearts, view, Trigger.ON_SCORE)


def test_joker_value_scales_with_rarity():
    rng = random.Random(1)
    assert calculate_joker_value(create_joker("joker_face_card_bonus", rng)) == 6
    assert calculate_joker_value(create_joker("joker_lucky_seven", rng)) == 16
    assert calculate_joker_value(create_joker("joker_golden_ticket", rng)) == 60


def test_effect_description():
    rng = random.Random(1)
    assert joker_effect_description(create_joker("joker_basic_mult", rng)) == "+4 Mult (+4 Mult)"
    assert "conditional" in joker_effect_description(create_joker("joker_flush_master", rng))


def test_joker_serialization():
    joker = create_joker("joker_pair_expert", random.Random(2))
    assert Joker.from_dict(joker.to_dict()) == joker
