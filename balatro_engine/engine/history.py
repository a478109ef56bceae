"""
Run history tracking.
Captures key events during a run so it can be replayed, summarized or exported.
"""

from dataclasses import dataclass, asdict
from typing import Optional
import json
from pathlib import Path


@dataclass
class RunEvent:
    """Single event in a run."""
    round: int
    event_type: str  # "run_start", "hand_played", "round_result", "joker_acquired", etc.
    data: dict
    timestamp: int = 0  # event sequence number


class RunHistory:
    """Captures the story of a run."""

    def __init__(self, preset_name: str = "standard", seed: Optional[int] = None):
        self.events: list[RunEvent] = []
        self.metadata = {
            "preset": preset_name,
            "seed": seed,
        }
        self._event_counter = 0

    def add_event(self, round_num: int, event_type: str, data: dict):
        """Add an event to the history."""
        self.events.append(RunEvent(
            round=round_num,
            event_type=event_type,
            data=data,
            timestamp=self._event_counter
        ))
        self._event_counter += 1

    def add_run_start(self, money: int, jokers: list, hand_levels: dict = None):
        """Log the start of a run."""
        self.add_event(
            round_num=1,
            event_type="run_start",
            data={
                "starting_money": money,
                "starting_jokers": jokers,
                "starting_hand_levels": hand_levels or {}
            }
        )

    def add_round_start(self, round_num: int, target_score: int):
        self.add_event(round_num, "round_start", {"target_score": target_score})

    def add_hand_played(self, round_num: int, hand_type: str, cards: list, score: int,
                        total_score: int, jokers_triggered: list = None):
        """Log a scored hand."""
        self.add_event(
            round_num=round_num,
            event_type="hand_played",
            data={
                "hand_type": hand_type,
                "cards": cards,
                "score": score,
                "total_score": total_score,
                "jokers_triggered": jokers_triggered or []
            }
        )

    def add_discard(self, round_num: int, cards: list, money_earned: int = 0):
        self.add_event(round_num, "discard", {"cards": cards, "money_earned": money_earned})

    def add_shop_visit(self, round_num: int, items_offered: list, money: int):
        """Log entering the shop."""
        self.add_event(
            round_num=round_num,
            event_type="shop_visit",
            data={
                "items_offered": items_offered,
                "money": money
            }
        )

    def add_joker_acquired(self, round_num: int, joker_name: str, cost: int, source: str = "shop"):
        """Log joker acquisition."""
        self.add_event(
            round_num=round_num,
            event_type="joker_acquired",
            data={
                "joker": joker_name,
                "cost": cost,
                "source": source
            }
        )

    def add_joker_sold(self, round_num: int, joker_name: str, sell_value: int):
        """Log joker removal."""
        self.add_event(
            round_num=round_num,
            event_type="joker_sold",
            data={
                "joker": joker_name,
                "sell_value": sell_value
            }
        )

    def add_hand_upgraded(self, round_num: int, hand_type: str, new_level: int,
                          source: str, cost: int):
        """Log hand level up."""
        self.add_event(
            round_num=round_num,
            event_type="hand_upgraded",
            data={
                "hand_type": hand_type,
                "new_level": new_level,
                "source": source,
                "cost": cost
            }
        )

    def add_round_result(self, round_num: int, score: int, required: int, success: bool,
                         hands_used: int, discards_used: int = 0,
                         money_earned: int = 0, best_hand: str = None):
        """Log the end of a round."""
        margin = score - required
        margin_pct = (margin / required * 100) if required > 0 else 0

        self.add_event(
            round_num=round_num,
            event_type="round_result",
            data={
                "score": score,
                "required": required,
                "success": success,
                "margin": margin,
                "margin_pct": round(margin_pct, 1),
                "hands_used": hands_used,
                "discards_used": discards_used,
                "money_earned": money_earned,
                "best_hand": best_hand,
                "close_call": abs(margin_pct) < 20
            }
        )

    def add_run_end(self, success: bool, final_round: int, rounds_won: int,
                    final_money: int, jokers: list, hand_levels: dict = None):
        """Log run completion."""
        self.add_event(
            round_num=final_round,
            event_type="run_end",
            data={
                "victory": success,
                "rounds_won": rounds_won,
                "final_money": final_money,
                "final_jokers": jokers,
                "final_hand_levels": hand_levels or {}
            }
        )

    def get_close_calls(self) -> list[RunEvent]:
        """Get all close call events."""
        return [e for e in self.events
                if e.event_type == "round_result" and e.data.get("close_call")]

    def get_joker_timeline(self) -> list[dict]:
        """Get timeline of joker acquisitions/sales."""
        return [{"round": e.round, "type": e.event_type, **e.data}
                for e in self.events
                if e.event_type in ("joker_acquired", "joker_sold")]

    def get_hand_scores(self) -> list[dict]:
        """One row per scored hand, in play order."""
        return [{"round": e.round, "hand_type": e.data["hand_type"], "score": e.data["score"]}
                for e in self.events if e.event_type == "hand_played"]

    def to_dict(self) -> dict:
        """Convert to dict for JSON serialization."""
        return {
            "metadata": self.metadata,
            "events": [asdict(e) for e in self.events],
            "summary": self._generate_summary()
        }

    def _generate_summary(self) -> dict:
        """Generate a quick summary of the run."""
        round_results = [e for e in self.events if e.event_type == "round_result"]
        hands = [e for e in self.events if e.event_type == "hand_played"]
        run_end = next((e for e in self.events if e.event_type == "run_end"), None)

        return {
            "rounds_attempted": len(round_results),
            "rounds_won": sum(1 for e in round_results if e.data.get("success")),
            "close_calls": sum(1 for e in round_results if e.data.get("close_call")),
            "hands_played": len(hands),
            "best_hand_score": max((e.data["score"] for e in hands), default=0),
            "jokers_acquired": sum(1 for e in self.events if e.event_type == "joker_acquired"),
            "jokers_sold": sum(1 for e in self.events if e.event_type == "joker_sold"),
            "hands_upgraded": sum(1 for e in self.events if e.event_type == "hand_upgraded"),
            "victory": run_end.data.get("victory") if run_end else False
        }

    def save(self, filepath: str):
        """Save run history to JSON."""
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filepath: str) -> 'RunHistory':
        """Load run history from JSON."""
        with open(filepath) as f:
            data = json.load(f)

        history = cls(
            preset_name=data["metadata"]["preset"],
            seed=data["metadata"].get("seed")
        )
        history.metadata = data["metadata"]

        for event_data in data["events"]:
            history.events.append(RunEvent(**event_data))
            history._event_counter = max(history._event_counter, event_data["timestamp"] + 1)

        return history
