#!/usr/bin/env python3
"""
Demo script for the Balatro engine.
Shows hand detection, scoring with jokers, and full game simulation.

    python -m balatro_engine.demo --seed 7 --preset flush_build
"""

import argparse
import logging

from .engine.deck import Card, Suit
from .engine.game import GameEvent
from .engine.hand_detector import evaluate_hand
from .engine.jokers import create_joker, joker_effect_description
from .engine.scoring import calculate_score, score_display_lines
from .presets import build_controller, list_presets
from .simulator import Simulator, simulate_run


def demo_hand_detection():
    """Demonstrate hand detection."""
    print("=" * 60)
    print("HAND DETECTION DEMO")
    print("=" * 60)

    test_hands = [
        # Pair
        [Card.of(13, Suit.HEARTS), Card.of(13, Suit.DIAMONDS), Card.of(5, Suit.CLUBS)],
        # Three of a kind
        [Card.of(7, Suit.HEARTS), Card.of(7, Suit.DIAMONDS), Card.of(7, Suit.CLUBS)],
        # Flush
        [Card.of(1, Suit.HEARTS), Card.of(13, Suit.HEARTS), Card.of(10, Suit.HEARTS),
         Card.of(7, Suit.HEARTS), Card.of(2, Suit.HEARTS)],
        # Straight, Ace low
        [Card.of(1, Suit.HEARTS), Card.of(2, Suit.DIAMONDS), Card.of(3, Suit.CLUBS),
         Card.of(4, Suit.SPADES), Card.of(5, Suit.HEARTS)],
        # Full House
        [Card.of(12, Suit.HEARTS), Card.of(12, Suit.DIAMONDS), Card.of(12, Suit.CLUBS),
         Card.of(9, Suit.SPADES), Card.of(9, Suit.HEARTS)],
    ]

    for cards in test_hands:
        evaluation = evaluate_hand(cards)
        print(f"\nCards: {', '.join(str(c) for c in cards)}")
        print(f"  Hand: {evaluation.name} (rank {evaluation.rank})")
        print(f"  Pattern: {', '.join(str(c) for c in evaluation.cards)}")
        if evaluation.kickers:
            print(f"  Kickers: {', '.join(str(c) for c in evaluation.kickers)}")


def demo_scoring():
    """Demonstrate scoring with and without jokers."""
    print("\n" + "=" * 60)
    print("SCORING DEMO")
    print("=" * 60)

    cards = [Card.of(13, Suit.SPADES), Card.of(13, Suit.HEARTS), Card.of(7, Suit.HEARTS)]

    result = calculate_score(cards)
    print("\nPair of Kings - NO JOKERS:")
    for line in score_display_lines(result):
        print(f"  {line}")

    jokers = [create_joker(t) for t in ("joker_basic_mult", "joker_hearts_lover", "joker_lucky_seven")]
    print("\nJokers:")
    for joker in jokers:
        print(f"  {joker.name}: {joker_effect_description(joker)}")

    result = calculate_score(cards, jokers)
    print("\nPair of Kings - WITH jokers:")
    for line in score_display_lines(result):
        print(f"  {line}")


def demo_full_run(preset: str, seed: int, verbose: bool):
    """Simulate a full run with event narration."""
    print("\n" + "=" * 60)
    print(f"FULL RUN SIMULATION ({preset}, seed {seed})")
    print("=" * 60)

    game = build_controller(preset, seed=seed)
    game.on(GameEvent.ROUND_COMPLETE,
            lambda e: print(f"  Round {e['round']} cleared with {e['score']:,} (+${e['reward']})"))
    game.on(GameEvent.GAME_OVER,
            lambda e: print(f"  Game over in round {e['round']} at {e['score']:,}"))
    game.on(GameEvent.GAME_COMPLETED,
            lambda e: print(f"  Run complete after round {e['round']} with ${e['money']}"))

    simulate_run(game, verbose=verbose)
    summary = game.history.to_dict()["summary"]
    print(f"\nRounds won: {summary['rounds_won']}, best hand: {summary['best_hand_score']:,}")


def demo_monte_carlo(preset: str, runs: int, seed: int):
    """Run multiple simulations to get win rate."""
    print("\n" + "=" * 60)
    print(f"MONTE CARLO SIMULATION ({runs} runs)")
    print("=" * 60)

    batch = Simulator().run_batch(preset, runs=runs, seed=seed)
    print(batch)


def main(argv: list[str] = None):
    parser = argparse.ArgumentParser(description="Balatro engine demo")
    parser.add_argument("--preset", default="standard", choices=list_presets())
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--runs", type=int, default=20, help="runs for the batch simulation")
    parser.add_argument("--verbose", "-v", action="store_true", help="print every hand played")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(),
                        format="%(levelname)s %(name)s: %(message)s")

    demo_hand_detection()
    demo_scoring()
    demo_full_run(args.preset, args.seed, args.verbose)
    demo_monte_carlo(args.preset, args.runs, args.seed)

    print("\n" + "=" * 60)
    print("SIMULATION COMPLETE")
    print("=" * 60)


if __name__ == "__main__":
    main()
