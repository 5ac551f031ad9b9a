"""
Players without persistent state: random, minimax and alpha-beta.
"""

from __future__ import annotations

from typing import Any, Optional
import numpy as np

from ..games.base import Game
from ..search.heuristics import Heuristic
from ..search.minimax import Minimax, AlphaBeta, SearchResult
from .base import Player


class RandomPlayer(Player):
    """Plays a uniformly random legal move."""

    def __init__(self, game: Game, seed: Optional[int] = None, name: str = ""):
        super().__init__(game, name)
        self.rng = np.random.default_rng(seed)

    def choose_move(self, state: Any, rng: Optional[np.random.Generator] = None) -> Optional[Any]:
        moves = self.game.legal_actions(state)
        if not moves:
            return None
        rng = rng if rng is not None else self.rng
        return moves[int(rng.integers(len(moves)))]


class MinimaxPlayer(Player):
    """
    Plays the best move found by depth-bounded minimax.

    Args:
        game: Game instance
        depth: Search depth in plies
        evaluate: Heuristic for the depth limit (default: the game's own)
    """

    searcher_class = Minimax

    def __init__(
        self,
        game: Game,
        depth: int,
        evaluate: Optional[Heuristic] = None,
        name: str = "",
    ):
        if depth < 1:
            raise ValueError("Depth must be at least 1")
        super().__init__(game, name)
        self.depth = depth
        self.searcher = self.searcher_class(game, evaluate)
        self.last_result: Optional[SearchResult] = None
        self.leaves_evaluated = 0

    def choose_move(self, state: Any, rng: Optional[np.random.Generator] = None) -> Optional[Any]:
        # Deterministic: rng is accepted for interface compatibility only
        result = self.searcher.search(state, self.depth)
        self.last_result = result
        self.leaves_evaluated += result.nodes
        return result.move


class AlphaBetaPlayer(MinimaxPlayer):
    """Minimax player with alpha-beta pruning; same moves, fewer leaves."""

    searcher_class = AlphaBeta
