"""
Main API for Balatro simulation.
Drives a GameController with the advisory strategy and summarizes runs.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .engine.game import GameController
from .engine.hand_detector import HandType
from .engine.state import GamePhase
from .engine.strategy import BasicStrategy
from .presets import PRESETS, Preset, build_config, get_preset, list_presets


@dataclass
class RoundDetail:
    """Details of a single round attempt."""
    round: int
    score: int
    required: int
    success: bool
    hands_used: int
    discards_used: int
    money_earned: int

    @property
    def margin_pct(self) -> float:
        if self.required == 0:
            return 0
        return (self.score - self.required) / self.required * 100


@dataclass
class RunSummary:
    """Summary of a simulation run."""
    victory: bool
    round_reached: int
    rounds_won: int
    max_rounds: int
    final_money: int
    jokers_collected: list[str]
    planets_used: int
    hand_levels: dict[str, int]
    preset_used: str
    best_hand_score: int = 0
    round_history: list[RoundDetail] = field(default_factory=list)
    hand_scores: list[dict] = field(default_factory=list)

    def __str__(self):
        result = "VICTORY!" if self.victory else "DEFEAT"
        lines = [
            f"{'='*50}",
            f"  {result} - Round {self.round_reached}",
            f"{'='*50}",
            f"  Rounds won: {self.rounds_won}/{self.max_rounds}",
            f"  Final money: ${self.final_money}",
            f"  Jokers: {', '.join(self.jokers_collected) if self.jokers_collected else 'None'}",
            f"  Planets used: {self.planets_used}",
            f"  Best hand: {self.best_hand_score:,}",
        ]

        # Show leveled hands
        leveled = {k: v for k, v in self.hand_levels.items() if v > 1}
        if leveled:
            levels_str = ", ".join(f"{k}:{v}" for k, v in sorted(leveled.items(), key=lambda x: -x[1])[:5])
            lines.append(f"  Hand levels: {levels_str}")

        lines.append(f"{'='*50}")
        return "\n".join(lines)

    def to_dict(self):
        return {
            "victory": self.victory,
            "round_reached": self.round_reached,
            "rounds_won": self.rounds_won,
            "max_rounds": self.max_rounds,
            "final_money": self.final_money,
            "jokers_collected": self.jokers_collected,
            "planets_used": self.planets_used,
            "hand_levels": self.hand_levels,
            "preset_used": self.preset_used,
            "best_hand_score": self.best_hand_score,
        }


@dataclass
class BatchResult:
    """Results from multiple simulation runs."""
    runs: int
    wins: int
    win_rate: float
    avg_rounds: float
    max_round: int
    avg_money: float
    avg_jokers: float
    avg_planets: float
    round_distribution: dict[int, int]
    preset_used: str

    def __str__(self):
        lines = [
            f"{'='*50}",
            f"  BATCH RESULTS ({self.runs} runs)",
            f"  Preset: {self.preset_used}",
            f"{'='*50}",
            f"  Win rate: {self.wins}/{self.runs} ({self.win_rate:.1f}%)",
            f"  Avg rounds won: {self.avg_rounds:.1f}",
            f"  Max round reached: {self.max_round}",
            f"  Avg final money: ${self.avg_money:.0f}",
            f"  Avg jokers collected: {self.avg_jokers:.1f}",
            f"  Avg planets used: {self.avg_planets:.1f}",
            "",
            "  Round distribution:",
        ]

        for round_num in sorted(self.round_distribution.keys()):
            count = self.round_distribution[round_num]
            pct = count / self.runs * 100
            bar = "█" * int(pct / 2)
            lines.append(f"    Round {round_num}: {count:>3} ({pct:>5.1f}%) {bar}")

        lines.append(f"{'='*50}")
        return "\n".join(lines)

    def to_dict(self):
        return {
            "runs": self.runs,
            "wins": self.wins,
            "win_rate": self.win_rate,
            "avg_rounds": self.avg_rounds,
            "max_round": self.max_round,
            "avg_money": self.avg_money,
            "avg_jokers": self.avg_jokers,
            "avg_planets": self.avg_planets,
            "round_distribution": self.round_distribution,
            "preset_used": self.preset_used,
        }


def play_round(game: GameController, strategy: BasicStrategy, verbose: bool = False):
    """Play until the round is won or lost."""
    while game.state.phase == GamePhase.PLAYING:
        discard_ids = strategy.select_cards_to_discard(game)
        if discard_ids and game.apply_recommendation(discard_ids) and game.discard_cards():
            continue

        game.apply_recommendation(strategy.select_cards_to_play(game))
        result = game.play_hand()
        if result is None:
            # Nothing playable left in hand
            break
        if verbose:
            print(f"    {result.hand_name}: {result.final_score:,} "
                  f"({game.state.current_score:,}/{game.state.target_score:,})")


def visit_shop(game: GameController, strategy: BasicStrategy, verbose: bool = False) -> list[str]:
    """Buy what the strategy picks, then leave. Returns the names bought."""
    bought = []
    for item_id in strategy.choose_purchases(game):
        item = next((i for i in game.state.shop_items if i.id == item_id), None)
        if item and game.buy_shop_item(item_id):
            bought.append(item.name)
    if verbose and bought:
        print(f"  Shop: Bought {bought}")
    game.exit_shop()
    return bought


def simulate_run(game: GameController, strategy: BasicStrategy = None,
                 verbose: bool = False) -> GameController:
    """Play a started game to the end."""
    strategy = strategy or BasicStrategy()
    if game.state.phase == GamePhase.MENU:
        game.start_game()

    while not game.is_finished:
        s = game.state
        if s.phase == GamePhase.PLAYING:
            round_num = s.current_round
            play_round(game, strategy, verbose)
            if verbose:
                status = "WIN" if game.state.phase != GamePhase.GAME_OVER else "LOSS"
                print(f"Round {round_num}: {game.state.current_score:,}/"
                      f"{game.state.target_score:,} - {status}")
            if game.state.phase == GamePhase.PLAYING:
                # The strategy could not finish the round
                break
        elif s.phase == GamePhase.SHOP:
            visit_shop(game, strategy, verbose)
        else:
            break

    return game


class Simulator:
    """
    Main simulator class.

    Usage:
        sim = Simulator()
        result = sim.run("flush_build")
        print(result)

        # Or run many:
        batch = sim.run_batch("standard", runs=100)
        print(batch)
    """

    def __init__(self, log_dir: str = None):
        # Run histories are written here when set
        self.log_dir = Path(log_dir) if log_dir else None

    def get_available_presets(self) -> list[dict]:
        """Get list of available presets with info."""
        return [
            {
                "id": key,
                "name": p.name,
                "description": p.description,
                "starting_jokers": p.starting_jokers,
            }
            for key, p in PRESETS.items()
        ]

    def _controller(self, preset: Union[str, Preset], seed: Optional[int]) -> tuple[GameController, str]:
        if isinstance(preset, str):
            p = get_preset(preset)
            if p is None:
                raise ValueError(f"Unknown preset: {preset}. Available: {list_presets()}")
            preset_name = preset
        else:
            p = preset
            preset_name = p.name

        game = GameController(
            config=build_config(p),
            seed=seed,
            starting_jokers=p.starting_jokers,
            starting_hand_levels={HandType(k): v for k, v in p.hand_levels.items()},
            preset_name=preset_name,
        )
        return game, preset_name

    def run(self, preset: Union[str, Preset] = "standard", seed: Optional[int] = None,
            verbose: bool = False, strategy: BasicStrategy = None) -> RunSummary:
        """
        Run a single simulation.

        Args:
            preset: Preset name (string) or Preset object
            seed: Seed for the run's random generator
            verbose: Print detailed output during run
            strategy: Strategy to play with (BasicStrategy by default)

        Returns:
            RunSummary with results
        """
        game, preset_name = self._controller(preset, seed)
        simulate_run(game, strategy, verbose)

        if self.log_dir:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
            game.history.save(str(self.log_dir / f"run_{timestamp}_{preset_name}.json"))

        round_history = []
        planets_used = 0
        for event in game.history.events:
            if event.event_type == "round_result":
                data = event.data
                round_history.append(RoundDetail(
                    round=event.round,
                    score=data.get("score", 0),
                    required=data.get("required", 0),
                    success=data.get("success", False),
                    hands_used=data.get("hands_used", 0),
                    discards_used=data.get("discards_used", 0),
                    money_earned=data.get("money_earned", 0),
                ))
            elif event.event_type == "hand_upgraded" and event.data.get("source") != "upgrade":
                planets_used += 1

        s = game.state
        hand_scores = game.history.get_hand_scores()
        return RunSummary(
            victory=s.phase == GamePhase.GAME_COMPLETED,
            round_reached=s.current_round,
            rounds_won=sum(1 for r in round_history if r.success),
            max_rounds=game.config.max_rounds,
            final_money=s.money,
            jokers_collected=[j.name for j in s.jokers],
            planets_used=planets_used,
            hand_levels={cfg.name: cfg.level for cfg in s.hand_type_configs.values()},
            preset_used=preset_name,
            best_hand_score=max((h["score"] for h in hand_scores), default=0),
            round_history=round_history,
            hand_scores=hand_scores,
        )

    def run_batch(self, preset: Union[str, Preset] = "standard", runs: int = 100,
                  seed: Optional[int] = None, verbose: bool = False) -> BatchResult:
        """
        Run multiple simulations and aggregate results.

        With a seed, run i uses seed + i so the batch is reproducible.
        """
        preset_name = preset if isinstance(preset, str) else preset.name

        wins = 0
        total_rounds = 0
        max_round = 0
        total_money = 0
        total_jokers = 0
        total_planets = 0
        round_distribution = {}

        for i in range(runs):
            if verbose and (i + 1) % 10 == 0:
                print(f"  Run {i + 1}/{runs}...")

            run_seed = seed + i if seed is not None else None
            summary = self.run(preset, seed=run_seed)

            if summary.victory:
                wins += 1
            total_rounds += summary.rounds_won
            max_round = max(max_round, summary.round_reached)
            total_money += summary.final_money
            total_jokers += len(summary.jokers_collected)
            total_planets += summary.planets_used

            round_distribution[summary.round_reached] = round_distribution.get(summary.round_reached, 0) + 1

        return BatchResult(
            runs=runs,
            wins=wins,
            win_rate=wins / runs * 100 if runs else 0,
            avg_rounds=total_rounds / runs if runs else 0,
            max_round=max_round,
            avg_money=total_money / runs if runs else 0,
            avg_jokers=total_jokers / runs if runs else 0,
            avg_planets=total_planets / runs if runs else 0,
            round_distribution=round_distribution,
            preset_used=preset_name,
        )


# Convenience functions
def run(preset: str = "standard", seed: Optional[int] = None, verbose: bool = False) -> RunSummary:
    """Quick run with default simulator."""
    sim = Simulator()
    return sim.run(preset, seed=seed, verbose=verbose)


def run_batch(preset: str = "standard", runs: int = 100, seed: Optional[int] = None,
              verbose: bool = False) -> BatchResult:
    """Quick batch run with default simulator."""
    sim = Simulator()
    return sim.run_batch(preset, runs, seed=seed, verbose=verbose)
