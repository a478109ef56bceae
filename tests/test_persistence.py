"""Tests for saving and loading game state and run history."""

import json
import logging

from balatro_engine.engine.game import GameController
from balatro_engine.engine.history import RunHistory
from balatro_engine.engine.state import GamePhase, GameSettings, GameState


def mid_round_game(make_game):
    game = make_game(base_target_score=10**9,
                     starting_jokers=["joker_hearts_lover", "joker_pair_expert", "joker_chaos_multiplier"])
    hand = game.state.hand
    game.select_card(hand[0].id)
    game.select_card(hand[1].id)
    game.play_hand()
    game.select_card(game.state.hand[2].id)
    game.select_card(game.state.hand[4].id)
    return game


def test_save_load_round_trip(make_game):
    game = mid_round_game(make_game)
    game.state.settings.language = "fr"
    saved = game.save_game()

    other = GameController(seed=99)
    assert other.load_game(saved)
    assert other.state == game.state
    assert other.state.to_dict() == game.state.to_dict()
    assert other.state.settings.language == "fr"


def test_loaded_selection_points_at_hand_cards(make_game):
    game = mid_round_game(make_game)
    other = GameController()
    other.load_game(game.save_game())
    s = other.state
    assert len(s.selected_cards) == 2
    for card in s.selected_cards:
        assert any(card is c for c in s.hand)
        assert card.is_selected


def test_loaded_game_keeps_playing(make_game):
    game = mid_round_game(make_game)
    other = GameController(seed=3)
    other.load_game(game.save_game())
    assert other.play_hand() is not None
    assert other.state.hands_left == 2


def test_save_load_in_shop(make_game):
    game = make_game(base_target_score=1)
    for card in list(game.state.hand[:5]):
        game.select_card(card.id)
    game.play_hand()
    assert game.state.phase == GamePhase.SHOP

    other = GameController()
    assert other.load_game(game.save_game())
    assert other.state.phase == GamePhase.SHOP
    assert other.state.shop_items == game.state.shop_items
    assert other.state.money == 7
    assert other.buy_shop_item(other.state.shop_items[-1].id)
    assert other.state.money == 4


def test_malformed_save_is_rejected(make_game, caplog):
    game = make_game()
    before = game.state.to_dict()
    with caplog.at_level(logging.ERROR):
        assert not game.load_game("not json")
        assert not game.load_game("[]")
        assert not game.load_game(json.dumps({"phase": "playing"}))
    assert game.state.to_dict() == before
    assert "Failed to load game" in caplog.text


def test_selection_outside_hand_is_rejected(make_game):
    game = make_game()
    data = game.state.to_dict()
    data["selected_cards"] = ["nowhere-1"]
    assert not game.load_game(json.dumps(data))


def test_unknown_enum_is_rejected(make_game):
    game = make_game()
    data = game.state.to_dict()
    data["phase"] = "paused"
    assert not game.load_game(json.dumps(data))


def test_corrupt_joker_params_are_rejected(make_game):
    game = mid_round_game(make_game)
    data = game.state.to_dict()
    hearts = next(j for j in data["jokers"] if j["name"] == "Hearts Lover")
    hearts["effect"]["params"] = {"suit": "bogus"}
    hearts["effect"]["condition"] = None
    assert not game.load_game(json.dumps(data))

    data = game.state.to_dict()
    chaos = next(j for j in data["jokers"] if j["name"] == "Chaos Multiplier")
    chaos["effect"]["params"] = {"min": 10, "max": 2}
    assert not game.load_game(json.dumps(data))


def test_deeply_nested_save_is_rejected(make_game):
    game = make_game()
    before = game.state.to_dict()
    assert not game.load_game("[" * 100000 + "]" * 100000)
    assert game.state.to_dict() == before


def test_duplicated_card_is_rejected(make_game):
    game = make_game()
    data = game.state.to_dict()
    data["deck"].append(data["hand"][0])
    assert not game.load_game(json.dumps(data))


def test_shop_rerolls_survive_save(make_game):
    game = make_game(base_target_score=1)
    for card in list(game.state.hand[:5]):
        game.select_card(card.id)
    game.play_hand()
    assert game.refresh_shop()

    other = GameController()
    assert other.load_game(game.save_game())
    assert other.state.shop_rerolls == 1
    assert other.state.shop_refresh_cost == 3


def test_settings_defaults_fill_gaps():
    settings = GameSettings.from_dict({"language": "de"})
    assert settings.language == "de"
    assert settings.master_volume == 0.7
    assert settings.animation_speed == "normal"


def test_state_defaults_round_trip():
    state = GameState()
    assert GameState.from_dict(state.to_dict()) == state


def test_history_summary_and_files(make_game, tmp_path):
    game = make_game(base_target_score=1, max_rounds=1)
    for card in list(game.state.hand[:5]):
        game.select_card(card.id)
    game.play_hand()
    game.exit_shop()

    summary = game.history.to_dict()["summary"]
    assert summary["rounds_attempted"] == 1
    assert summary["rounds_won"] == 1
    assert summary["hands_played"] == 1
    assert summary["victory"] is True
    assert len(game.history.get_hand_scores()) == 1

    path = tmp_path / "logs" / "run.json"
    game.history.save(str(path))
    loaded = RunHistory.load(str(path))
    assert loaded.to_dict() == game.history.to_dict()
    loaded.add_event(1, "note", {})
    assert loaded.events[-1].timestamp == len(game.history.events)


def test_close_calls_and_joker_timeline():
    history = RunHistory()
    history.add_round_result(1, 310, 300, True, 4)
    history.add_round_result(2, 900, 450, True, 2)
    history.add_joker_acquired(2, "Joker", 2)
    history.add_joker_sold(3, "Joker", 1)
    assert [e.round for e in history.get_close_calls()] == [1]
    assert [row["type"] for row in history.get_joker_timeline()] == ["joker_acquired", "joker_sold"]
