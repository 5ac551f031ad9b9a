"""Game-tree search: minimax, alpha-beta and static evaluators."""

from .heuristics import (
    Heuristic,
    HEURISTICS,
    get_heuristic,
    ttt_heuristic,
    c4_heuristic,
    uttt_heuristic,
)
from .minimax import Minimax, AlphaBeta, SearchResult, WIN_SCORE

__all__ = [
    "Heuristic",
    "HEURISTICS",
    "get_heuristic",
    "ttt_heuristic",
    "c4_heuristic",
    "uttt_heuristic",
    "Minimax",
    "AlphaBeta",
    "SearchResult",
    "WIN_SCORE",
]
