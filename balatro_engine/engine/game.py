"""
Game progression for Balatro.
Runs rounds (play, discard, refill), pays out rewards, and drives the shop.
"""

import json
import logging
import random
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .deck import Card, create_standard_deck, deal_cards, shuffle_deck, sort_cards_by_rank
from .effects import ScoringView, Trigger, money_from_effect
from .hand_detector import HandType, hand_type_name
from .history import RunHistory
from .jokers import JokerRegistry, can_trigger_joker, default_registry
from .scoring import (
    INITIAL_HAND_TYPE_CONFIGS,
    initial_hand_type_configs,
    JokerEffectResult,
    ScoreResult,
    ScoringEngine,
    upgrade_hand_type_config,
)
from .shop import ItemType, Shop, ShopConfig, apply_planet, find_item
from .state import GamePhase, GameSettings, GameState

logger = logging.getLogger(__name__)


@dataclass
class GameConfig:
    """Configuration for a game run."""
    starting_money: int = 4
    starting_hands: int = 4
    starting_discards: int = 3
    hand_size: int = 8
    max_selected: int = 5
    max_jokers: int = 5
    shop_joker_slots: int = 2
    shop_planet_slots: int = 1
    planet_cost: int = 3
    shop_refresh_cost: int = 2
    refresh_cost_increment: int = 1
    base_target_score: int = 300
    target_score_increment: int = 150
    target_score_multiplier: float = 1.6
    target_scaling: str = "linear"  # "linear" or "exponential"
    max_rounds: int = 8
    round_reward: int = 3
    interest_cap: int = 5
    sort_hand: bool = True


class GameEvent(Enum):
    SCORE_CALCULATED = "score_calculated"
    HAND_PLAYED = "hand_played"
    CARDS_DISCARDED = "cards_discarded"
    JOKER_TRIGGERED = "joker_triggered"
    ROUND_COMPLETE = "round_complete"
    SHOP_ENTERED = "shop_entered"
    SHOP_EXITED = "shop_exited"
    GAME_OVER = "game_over"
    GAME_COMPLETED = "game_completed"


def target_score_for_round(config: GameConfig, round_num: int) -> int:
    """Score needed to clear a round."""
    if config.target_scaling == "exponential":
        return int(config.base_target_score * config.target_score_multiplier ** (round_num - 1))
    return config.base_target_score + (round_num - 1) * config.target_score_increment


def calculate_interest(money: int, cap: int) -> int:
    """$1 per $5 held, up to the cap."""
    return min(cap, money // 5)


class GameController:
    """
    Owns a GameState and applies the rules to it.

    Rule violations (wrong phase, not enough money, nothing selected) return
    False or None and leave the state untouched.
    """

    def __init__(self, config: GameConfig = None, registry: JokerRegistry = None,
                 seed: Optional[int] = None, rng: random.Random = None,
                 starting_jokers: list[str] = None,
                 starting_hand_levels: dict = None,
                 preset_name: str = "standard",
                 settings: GameSettings = None):
        self.config = config or GameConfig()
        self.registry = registry or default_registry
        self.seed = seed
        self.rng = rng or random.Random(seed)
        self.starting_jokers = list(starting_jokers or [])
        self.starting_hand_levels = dict(starting_hand_levels or {})
        self.preset_name = preset_name
        self.scoring = ScoringEngine()
        self.shop = Shop(
            self.registry,
            ShopConfig(
                joker_slots=self.config.shop_joker_slots,
                planet_slots=self.config.shop_planet_slots,
                planet_cost=self.config.planet_cost,
                base_reroll_cost=self.config.shop_refresh_cost,
                reroll_increment=self.config.refresh_cost_increment,
            ),
            self.rng,
        )
        self._handlers: dict[GameEvent, list[Callable]] = defaultdict(list)
        self.history = RunHistory(preset_name=preset_name, seed=seed)
        self.state = self._fresh_state(settings or GameSettings())

    # --- events ---

    def on(self, event: GameEvent, handler: Callable[[dict], None]):
        """Register a callback; it receives a dict payload."""
        self._handlers[event].append(handler)

    def _emit(self, event: GameEvent, **payload):
        for handler in list(self._handlers[event]):
            handler(payload)

    # --- setup ---

    def _fresh_state(self, settings: GameSettings) -> GameState:
        configs = initial_hand_type_configs()
        for hand_type, level in self.starting_hand_levels.items():
            if level > 1:
                configs[hand_type] = upgrade_hand_type_config(configs[hand_type], level - 1)

        jokers = []
        for template_id in self.starting_jokers[:self.config.max_jokers]:
            joker = self.registry.create_joker(template_id, self.rng)
            if joker:
                jokers.append(joker)

        return GameState(
            phase=GamePhase.MENU,
            current_round=1,
            target_score=target_score_for_round(self.config, 1),
            current_score=0,
            money=self.config.starting_money,
            deck=shuffle_deck(create_standard_deck(), self.rng),
            jokers=jokers,
            max_jokers=self.config.max_jokers,
            hands_left=self.config.starting_hands,
            discards_left=self.config.starting_discards,
            shop_refresh_cost=self.config.shop_refresh_cost,
            hand_type_configs=configs,
            settings=settings,
        )

    def _set_phase(self, phase: GamePhase):
        logger.debug("Phase %s -> %s (round %d)", self.state.phase.value, phase.value,
                     self.state.current_round)
        self.state.phase = phase

    def _begin_run(self):
        s = self.state
        self._refill_hand()
        self._set_phase(GamePhase.PLAYING)
        self.history.add_run_start(
            money=s.money,
            jokers=[j.name for j in s.jokers],
            hand_levels={ht.value: cfg.level for ht, cfg in s.hand_type_configs.items() if cfg.level > 1},
        )
        self.history.add_round_start(s.current_round, s.target_score)

    def start_game(self) -> bool:
        """MENU -> PLAYING with a fresh hand."""
        if self.state.phase != GamePhase.MENU:
            return False
        self._begin_run()
        return True

    def new_game(self):
        """Throw away the current run and start another one."""
        self.history = RunHistory(preset_name=self.preset_name, seed=self.seed)
        self.state = self._fresh_state(self.state.settings)
        self._begin_run()

    # --- cards ---

    def _sort_hand(self):
        if self.config.sort_hand:
            self.state.hand = sort_cards_by_rank(self.state.hand, ace_high=True, descending=True)

    def _refill_hand(self):
        s = self.state
        needed = min(self.config.hand_size - len(s.hand), len(s.deck))
        if needed > 0:
            dealt = deal_cards(s.deck, needed)
            s.hand.extend(dealt.dealt)
            s.deck = dealt.remaining
        self._sort_hand()

    def _take_selected(self) -> list[Card]:
        """Move the selected cards from hand to the discard pile."""
        s = self.state
        taken = list(s.selected_cards)
        taken_ids = {id(c) for c in taken}
        s.hand = [c for c in s.hand if id(c) not in taken_ids]
        for card in taken:
            card.is_selected = False
        s.discard_pile.extend(taken)
        s.selected_cards = []
        return taken

    def select_card(self, card_id: str) -> bool:
        s = self.state
        if s.phase != GamePhase.PLAYING:
            return False
        if len(s.selected_cards) >= self.config.max_selected:
            return False
        card = s.find_in_hand(card_id)
        if card is None or card.is_selected:
            return False
        card.is_selected = True
        s.selected_cards.append(card)
        return True

    def deselect_card(self, card_id: str) -> bool:
        s = self.state
        if s.phase != GamePhase.PLAYING:
            return False
        card = s.find_in_hand(card_id)
        if card is None or not card.is_selected:
            return False
        card.is_selected = False
        s.selected_cards = [c for c in s.selected_cards if c is not card]
        return True

    def clear_selection(self) -> bool:
        s = self.state
        if s.phase != GamePhase.PLAYING:
            return False
        for card in s.selected_cards:
            card.is_selected = False
        s.selected_cards = []
        return True

    def apply_recommendation(self, card_ids: list[str]) -> list[str]:
        """Replace the selection with the given cards; returns the ids selected."""
        if not self.clear_selection():
            return []
        return [card_id for card_id in card_ids if self.select_card(card_id)]

    def _view(self, played: list[Card]) -> ScoringView:
        s = self.state
        played_ids = {id(c) for c in played}
        return ScoringView(
            played_cards=tuple(played),
            held_cards=tuple(c for c in s.hand if id(c) not in played_ids),
            money=s.money,
            current_round=s.current_round,
        )

    def play_hand(self, on_scored: Callable[[ScoreResult], None] = None) -> Optional[ScoreResult]:
        """Score the selected cards. Returns None if the play is not allowed."""
        s = self.state
        if s.phase != GamePhase.PLAYING or not s.selected_cards or s.hands_left <= 0:
            return None

        played = list(s.selected_cards)
        result = self.scoring.calculate(played, s.jokers, s.hand_type_configs,
                                        view=self._view(played), rng=self.rng)
        s.current_score += result.final_score

        self._take_selected()
        s.hands_left -= 1
        self._refill_hand()

        self._emit(GameEvent.SCORE_CALCULATED, result=result)
        for effect in result.joker_effects:
            self._emit(GameEvent.JOKER_TRIGGERED, effect=effect)
        self._emit(GameEvent.HAND_PLAYED, result=result, cards=played)
        self.history.add_hand_played(
            s.current_round,
            hand_type=result.hand_name,
            cards=[c.display_name for c in played],
            score=result.final_score,
            total_score=s.current_score,
            jokers_triggered=[e.joker_name for e in result.joker_effects],
        )

        if on_scored:
            on_scored(result)

        self._check_round_end(best_hand=result.hand_name)
        return result

    def discard_cards(self) -> bool:
        s = self.state
        if s.phase != GamePhase.PLAYING or not s.selected_cards or s.discards_left <= 0:
            return False

        discarded = list(s.selected_cards)
        view = self._view(discarded)
        earned = 0
        for joker in s.jokers:
            if can_trigger_joker(joker, view, Trigger.ON_DISCARD):
                amount = money_from_effect(joker.effect)
                if amount:
                    earned += amount
                    effect = JokerEffectResult(
                        joker_id=joker.id,
                        joker_name=joker.name,
                        effect_type=joker.effect.type,
                        value=amount,
                        description=f"+${amount}",
                    )
                    self._emit(GameEvent.JOKER_TRIGGERED, effect=effect)
        s.money += earned

        self._take_selected()
        s.discards_left -= 1
        self._refill_hand()

        self._emit(GameEvent.CARDS_DISCARDED, cards=discarded, money_earned=earned)
        self.history.add_discard(s.current_round, [c.display_name for c in discarded], earned)
        return True

    # --- round lifecycle ---

    def _check_round_end(self, best_hand: str = None):
        s = self.state
        hands_used = self.config.starting_hands - s.hands_left
        discards_used = self.config.starting_discards - s.discards_left

        if s.current_score >= s.target_score:
            reward = self.config.round_reward
            reward += calculate_interest(s.money, self.config.interest_cap)
            reward += sum(j.effect.money_per_round for j in s.jokers)
            s.money += reward
            self.history.add_round_result(s.current_round, s.current_score, s.target_score, True,
                                          hands_used, discards_used, reward, best_hand)
            self._emit(GameEvent.ROUND_COMPLETE, round=s.current_round, score=s.current_score,
                       reward=reward)
            self._enter_shop()

        elif s.hands_left <= 0:
            self.history.add_round_result(s.current_round, s.current_score, s.target_score, False,
                                          hands_used, discards_used, 0, best_hand)
            self._set_phase(GamePhase.GAME_OVER)
            self._record_run_end(success=False)
            self._emit(GameEvent.GAME_OVER, round=s.current_round, score=s.current_score)

    def _enter_shop(self):
        s = self.state
        for card in s.selected_cards:
            card.is_selected = False
        s.selected_cards = []
        s.shop_rerolls = 0
        s.shop_refresh_cost = self.shop.reroll_cost(0)
        s.shop_items = self.shop.generate()
        self._set_phase(GamePhase.SHOP)
        self.history.add_shop_visit(s.current_round, [str(i) for i in s.shop_items], s.money)
        self._emit(GameEvent.SHOP_ENTERED, items=list(s.shop_items))

    def _record_run_end(self, success: bool):
        s = self.state
        rounds_won = s.current_round if success else s.current_round - 1
        self.history.add_run_end(
            success=success,
            final_round=s.current_round,
            rounds_won=rounds_won,
            final_money=s.money,
            jokers=[j.name for j in s.jokers],
            hand_levels={ht.value: cfg.level for ht, cfg in s.hand_type_configs.items()},
        )

    def exit_shop(self) -> bool:
        s = self.state
        if s.phase != GamePhase.SHOP:
            return False

        s.shop_items = []
        self._emit(GameEvent.SHOP_EXITED, round=s.current_round)

        if s.current_round >= self.config.max_rounds:
            s.is_game_completed = True
            self._set_phase(GamePhase.GAME_COMPLETED)
            self._record_run_end(success=True)
            self._emit(GameEvent.GAME_COMPLETED, round=s.current_round, money=s.money)
            return True

        self._start_next_round()
        return True

    def _start_next_round(self):
        s = self.state
        s.current_round += 1
        s.target_score = target_score_for_round(self.config, s.current_round)
        s.current_score = 0
        s.hands_left = self.config.starting_hands
        s.discards_left = self.config.starting_discards

        all_cards = s.deck + s.hand + s.discard_pile
        for card in all_cards:
            card.is_selected = False
        s.selected_cards = []
        s.hand = []
        s.discard_pile = []
        s.deck = shuffle_deck(all_cards, self.rng)
        self._refill_hand()

        self._set_phase(GamePhase.PLAYING)
        self.history.add_round_start(s.current_round, s.target_score)

    # --- shop ---

    def buy_shop_item(self, item_id: str) -> bool:
        s = self.state
        if s.phase != GamePhase.SHOP:
            return False
        item = find_item(s.shop_items, item_id)
        if item is None or s.money < item.cost:
            return False

        if item.type == ItemType.JOKER:
            if len(s.jokers) >= s.max_jokers:
                return False
            s.jokers.append(item.joker)
            self.history.add_joker_acquired(s.current_round, item.name, item.cost)
        else:
            apply_planet(item, s.hand_type_configs)
            config = s.hand_type_configs[item.hand_type]
            self.history.add_hand_upgraded(s.current_round, config.name, config.level,
                                           source=item.name, cost=item.cost)

        s.money -= item.cost
        s.shop_items = [i for i in s.shop_items if i.id != item_id]
        return True

    def refresh_shop(self) -> bool:
        s = self.state
        if s.phase != GamePhase.SHOP or s.money < s.shop_refresh_cost:
            return False
        s.money -= s.shop_refresh_cost
        s.shop_rerolls += 1
        s.shop_refresh_cost = self.shop.reroll_cost(s.shop_rerolls)
        s.shop_items = self.shop.generate()
        return True

    def sell_joker(self, joker_id: str) -> bool:
        s = self.state
        if s.phase not in (GamePhase.PLAYING, GamePhase.SHOP):
            return False
        joker = s.find_joker(joker_id)
        if joker is None:
            return False
        s.money += joker.sell_value
        s.jokers = [j for j in s.jokers if j is not joker]
        self.history.add_joker_sold(s.current_round, joker.name, joker.sell_value)
        return True

    def upgrade_hand_type(self, hand_type: HandType) -> bool:
        s = self.state
        if s.phase not in (GamePhase.PLAYING, GamePhase.SHOP):
            return False
        config = s.hand_type_configs.get(hand_type) or INITIAL_HAND_TYPE_CONFIGS[hand_type]
        if s.money < config.upgrade_cost:
            return False
        s.money -= config.upgrade_cost
        upgraded = upgrade_hand_type_config(config)
        s.hand_type_configs[hand_type] = upgraded
        self.history.add_hand_upgraded(s.current_round, hand_type_name(hand_type), upgraded.level,
                                       source="upgrade", cost=config.upgrade_cost)
        return True

    # --- advice ---

    def preview_score(self) -> Optional[ScoreResult]:
        """Score the current selection without changing anything."""
        s = self.state
        if not s.selected_cards:
            return None
        played = list(s.selected_cards)
        return self.scoring.preview(played, s.jokers, s.hand_type_configs, view=self._view(played))

    def best_hand_suggestion(self) -> list[Card]:
        return self.scoring.find_best_hand(self.state.hand, self.config.max_selected)

    # --- persistence ---

    def save_game(self) -> str:
        return json.dumps(self.state.to_dict())

    def load_game(self, data: str) -> bool:
        """Replace the state from a save string. Bad input leaves the state alone."""
        try:
            state = GameState.from_dict(json.loads(data))
        except (ValueError, KeyError, TypeError, AttributeError, RecursionError) as e:
            logger.error("Failed to load game: %s", e)
            return False
        self.state = state
        return True

    @property
    def is_game_over(self) -> bool:
        return self.state.phase == GamePhase.GAME_OVER

    @property
    def is_finished(self) -> bool:
        return self.state.phase in (GamePhase.GAME_OVER, GamePhase.GAME_COMPLETED)
