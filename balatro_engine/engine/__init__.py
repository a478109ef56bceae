"""
Balatro engine components.
"""

from .deck import Card, Suit, Enhancement, EnhancementType, InsufficientCardsError, create_standard_deck, shuffle_deck, deal_cards
from .hand_detector import HandType, HandEvaluation, HandDetector, EmptyHandError, evaluate_hand, compare_hands, hand_type_name
from .effects import EffectType, EffectKind, Trigger, Condition, ConditionKind, JokerEffect, ScoringView, ScoringContext
from .jokers import Joker, JokerTemplate, JokerRegistry, Rarity, create_joker, generate_shop_jokers
from .scoring import HandTypeConfig, ScoreResult, JokerEffectResult, ScoringEngine, calculate_score, preview_score, find_best_hand
from .shop import Shop, ShopItem, ItemType, PLANET_CARDS
from .state import GamePhase, GameSettings, GameState
from .game import GameConfig, GameController, GameEvent
