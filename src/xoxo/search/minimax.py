"""
Depth-bounded minimax search in negamax form.

Every call returns the value of a position from the perspective of the
player to move there; a parent negates its children's values, so one
code path serves both players.

Scores:
- a finished game is worth +-(WIN_SCORE - ply) to the mover, so faster
  wins and slower losses are preferred; draws are worth 0
- at the depth limit, the game's heuristic decides

Tie-break: when several root moves share the best score, the first one
in legal_actions order is returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
import logging
import math

from ..games.base import Game
from .heuristics import Heuristic, get_heuristic

logger = logging.getLogger(__name__)

WIN_SCORE = 100_000.0


@dataclass
class SearchResult:
    """Best move and its score for the player to move."""
    move: Optional[Any]
    score: float
    nodes: int = 0  # leaf evaluations; small when pruning works well


class Minimax:
    """
    Exhaustive depth-bounded negamax.

    Args:
        game: Game instance
        evaluate: Heuristic for non-terminal leaves (default: the game's own)
    """

    def __init__(self, game: Game, evaluate: Optional[Heuristic] = None):
        self.game = game
        self.evaluate = evaluate if evaluate is not None else get_heuristic(game.spec.name)
        self.nodes = 0

    def search(self, state: Any, depth: int) -> SearchResult:
        """
        Search `depth` plies below state.

        Returns a result with move=None when state is terminal or depth
        is 0.
        """
        self.nodes = 0
        if depth <= 0 or self.game.is_terminal(state):
            return SearchResult(move=None, score=self._leaf(state, 0), nodes=self.nodes)

        best_move = None
        best_score = -math.inf
        alpha, beta = -math.inf, math.inf

        for move in self.game.legal_actions(state):
            child = self.game.apply_action(state, move)
            score = -self._negamax(child, depth - 1, 1, -beta, -alpha)
            if score > best_score:
                best_score = score
                best_move = move
            alpha = max(alpha, best_score)

        logger.debug(
            "%s depth %d: move %s score %.1f after %d leaves",
            type(self).__name__, depth, best_move, best_score, self.nodes,
        )
        return SearchResult(move=best_move, score=best_score, nodes=self.nodes)

    def _negamax(self, state: Any, depth: int, ply: int, alpha: float, beta: float) -> float:
        # Plain minimax ignores the window
        if depth == 0 or self.game.is_terminal(state):
            return self._leaf(state, ply)

        best = -math.inf
        for move in self.game.legal_actions(state):
            child = self.game.apply_action(state, move)
            best = max(best, -self._negamax(child, depth - 1, ply + 1, -beta, -alpha))
        return best

    def _leaf(self, state: Any, ply: int) -> float:
        """Exact score of a finished game, heuristic otherwise."""
        self.nodes += 1
        outcome = self.game.outcome(state)
        if outcome.finished:
            if outcome.winner is None:
                return 0.0
            sign = outcome.value_for(self.game.current_player(state))
            return sign * (WIN_SCORE - ply)
        return float(self.evaluate(state))


class AlphaBeta(Minimax):
    """
    Negamax with alpha-beta pruning (fail-soft).

    Returns the same move and score as Minimax for any state and depth;
    pruning only reduces the number of leaves evaluated.
    """

    def _negamax(self, state: Any, depth: int, ply: int, alpha: float, beta: float) -> float:
        if depth == 0 or self.game.is_terminal(state):
            return self._leaf(state, ply)

        best = -math.inf
        for move in self.game.legal_actions(state):
            child = self.game.apply_action(state, move)
            value = -self._negamax(child, depth - 1, ply + 1, -beta, -alpha)
            if value > best:
                best = value
            if best > alpha:
                alpha = best
            if alpha >= beta:
                # The opponent will never allow this line
                break
        return best
