"""
Advisory strategy for Balatro.
Recommends which cards to play or discard and what to buy in the shop.
Used by the simulator and as the local stand-in for hand advice in the UI.
"""

from collections import Counter
from typing import TYPE_CHECKING

from .deck import Card, get_card_base_score
from .jokers import calculate_joker_value
from .shop import ItemType, ShopItem

if TYPE_CHECKING:
    from .game import GameController


class BasicStrategy:
    """
    Simple strategy for playing Balatro.
    Used for simulations.
    """

    def __init__(self, discard_threshold: float = 0.5, max_discard: int = 3):
        # Discard when the best hand scores below this share of what is still needed
        self.discard_threshold = discard_threshold
        self.max_discard = max_discard

    def _candidates(self, game: "GameController") -> list[list[Card]]:
        cards = game.state.hand
        play_count = game.config.max_selected
        candidates = [game.best_hand_suggestion()]

        # Rank groups: pairs, trips, quads
        rank_counts = Counter(c.rank for c in cards)
        for rank, count in rank_counts.items():
            if count >= 2:
                candidates.append([c for c in cards if c.rank == rank][:play_count])

        # Highest chip cards
        by_chips = sorted(cards, key=get_card_base_score, reverse=True)
        candidates.append(by_chips[:play_count])
        return [c for c in candidates if c]

    def _preview(self, game: "GameController", cards: list[Card]) -> int:
        s = game.state
        return game.scoring.preview(cards, s.jokers, s.hand_type_configs).final_score

    def select_cards_to_play(self, game: "GameController") -> list[str]:
        """Ids of the highest-scoring candidate hand."""
        best_score = -1
        best: list[Card] = []
        for cards in self._candidates(game):
            score = self._preview(game, cards)
            if score > best_score:
                best_score = score
                best = cards
        return [c.id for c in best]

    def select_cards_to_discard(self, game: "GameController") -> list[str]:
        """
        Ids of cards to discard, or [] to keep the hand.
        Only discards while the best play falls short and another hand follows.
        """
        s = game.state
        if s.discards_left <= 0 or s.hands_left <= 1 or len(s.hand) <= 3:
            return []

        needed = s.target_score - s.current_score
        play_ids = self.select_cards_to_play(game)
        play_cards = [c for c in s.hand if c.id in play_ids]
        if play_cards and self._preview(game, play_cards) >= needed * self.discard_threshold:
            return []

        # Discard the lowest lonely cards outside the planned play
        rank_counts = Counter(c.rank for c in s.hand)
        lonely = [c for c in s.hand if rank_counts[c.rank] == 1 and c.id not in play_ids]
        lonely.sort(key=get_card_base_score)
        return [c.id for c in lonely[:min(self.max_discard, game.config.max_selected)]]

    def _score_item(self, item: ShopItem) -> float:
        if item.type == ItemType.JOKER:
            return calculate_joker_value(item.joker) / max(1, item.cost)
        return 0.5

    def choose_purchases(self, game: "GameController") -> list[str]:
        """Ids of shop items to buy, best value first, within budget and slots."""
        s = game.state
        money = s.money
        free_slots = s.max_jokers - len(s.jokers)
        chosen = []

        for item in sorted(s.shop_items, key=self._score_item, reverse=True):
            if item.cost > money:
                continue
            if item.type == ItemType.JOKER:
                if free_slots <= 0:
                    continue
                free_slots -= 1
            chosen.append(item.id)
            money -= item.cost

        return chosen
