"""
Balatro Game Engine
"""

from .engine.deck import Card, Suit, create_standard_deck
from .engine.hand_detector import HandType, HandEvaluation, evaluate_hand
from .engine.scoring import ScoreResult, calculate_score, preview_score, find_best_hand
from .engine.game import GameConfig, GameController, GameEvent
from .engine.state import GamePhase

__version__ = "0.1.0"
