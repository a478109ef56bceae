"""
Preset configurations for Balatro runs.
Allows easy setup of different playstyles and starting conditions.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Optional

from .engine.game import GameConfig, GameController
from .engine.hand_detector import HandType


@dataclass
class Preset:
    """A complete preset configuration for a run."""
    name: str
    description: str
    starting_jokers: list[str] = field(default_factory=list)  # template ids
    hand_levels: dict = field(default_factory=dict)  # HandType value -> level
    config_overrides: dict = field(default_factory=dict)


# Built-in presets
PRESETS = {
    "standard": Preset(
        name="Standard",
        description="Default run with no modifiers",
    ),

    "flush_build": Preset(
        name="Flush Build",
        description="Focus on flush hands with suit-based jokers",
        starting_jokers=["joker_flush_master", "joker_hearts_lover"],
        hand_levels={"flush": 3},
    ),

    "pair_spam": Preset(
        name="Pair Spam",
        description="Maximize pair hands",
        starting_jokers=["joker_pair_expert", "joker_basic_mult"],
        hand_levels={"pair": 5, "two_pair": 3},
    ),

    "mult_stacker": Preset(
        name="Mult Stacker",
        description="Stack mult jokers for big scores",
        starting_jokers=["joker_basic_mult", "joker_face_card_bonus", "joker_mult_doubler"],
        hand_levels={"pair": 3, "three_of_a_kind": 3},
    ),

    "economy": Preset(
        name="Economy",
        description="Money-focused build for shop advantage",
        starting_jokers=["joker_recycler", "joker_golden_ticket"],
        config_overrides={"starting_money": 14},
    ),

    "blue_deck": Preset(
        name="Blue Deck",
        description="Extra hand per round",
        config_overrides={"starting_hands": 5},
    ),

    "red_deck": Preset(
        name="Red Deck",
        description="Extra discard per round",
        config_overrides={"starting_discards": 4},
    ),

    "ramp": Preset(
        name="Ramp",
        description="Targets grow by x1.6 every round",
        config_overrides={"target_scaling": "exponential"},
    ),

    "no_jokers": Preset(
        name="No Jokers Challenge",
        description="Win without any jokers",
        config_overrides={"shop_joker_slots": 0, "shop_planet_slots": 2},
    ),
}


def get_preset(name: str) -> Optional[Preset]:
    """Get a preset by name."""
    return PRESETS.get(name.lower().replace(" ", "_"))


def list_presets() -> list[str]:
    """List all available preset names."""
    return list(PRESETS.keys())


def get_preset_info(name: str) -> Optional[dict]:
    """Get info about a preset."""
    preset = get_preset(name)
    if preset:
        return {
            "name": preset.name,
            "description": preset.description,
            "starting_jokers": preset.starting_jokers,
            "hand_levels": preset.hand_levels,
            "config_overrides": preset.config_overrides,
        }
    return None


def build_config(preset: Preset, base: GameConfig = None) -> GameConfig:
    """Apply a preset's overrides to a config. Unknown keys raise ValueError."""
    known = {f.name for f in fields(GameConfig)}
    unknown = set(preset.config_overrides) - known
    if unknown:
        raise ValueError(f"Unknown config keys in preset {preset.name}: {sorted(unknown)}")
    return replace(base or GameConfig(), **preset.config_overrides)


def build_controller(name: str = "standard", seed: Optional[int] = None) -> GameController:
    """A controller set up from a named preset, still in the menu phase."""
    preset = get_preset(name)
    if preset is None:
        raise ValueError(f"Unknown preset: {name}")
    return GameController(
        config=build_config(preset),
        seed=seed,
        starting_jokers=preset.starting_jokers,
        starting_hand_levels={HandType(k): v for k, v in preset.hand_levels.items()},
        preset_name=name,
    )
