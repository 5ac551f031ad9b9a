"""
Static position evaluators for depth-limited search.

Every evaluator scores a state from the perspective of the side to move
(higher is better for the mover) and is antisymmetric: swapping the side
to move negates the score. Scores stay far below minimax.WIN_SCORE so a
heuristic never outranks a proven result.
"""

from __future__ import annotations

from typing import Callable, Any
import numpy as np

from ..games.tictactoe import WINNING_LINES, TicTacToeState
from ..games.connect4 import ROWS, COLS, WIN_LENGTH, Connect4State
from ..games.ultimate import UltimateState

Heuristic = Callable[[Any], float]

_LINES = np.array(WINNING_LINES, dtype=np.intp)


def line_balance(cells: np.ndarray, sign: int) -> float:
    """
    Open-line balance of a 3x3 board.

    A line holding only the mover's marks scores +1 per mark, a line
    holding only opponent marks scores -1 per mark.
    """
    lines = cells[_LINES] * sign
    mine = np.sum(lines == 1, axis=1)
    theirs = np.sum(lines == -1, axis=1)
    return float(np.sum(mine[theirs == 0]) - np.sum(theirs[mine == 0]))


def ttt_heuristic(state: TicTacToeState) -> float:
    return line_balance(state.board, int(state.to_move))


def _connect4_windows() -> np.ndarray:
    """Flat indices of every 4-cell window on the board."""
    windows = []
    for r in range(ROWS):
        for c in range(COLS):
            for dr, dc in ((0, 1), (1, 0), (1, 1), (1, -1)):
                end_r = r + (WIN_LENGTH - 1) * dr
                end_c = c + (WIN_LENGTH - 1) * dc
                if 0 <= end_r < ROWS and 0 <= end_c < COLS:
                    windows.append(
                        [(r + i * dr) * COLS + (c + i * dc) for i in range(WIN_LENGTH)]
                    )
    return np.array(windows, dtype=np.intp)


C4_WINDOWS = _connect4_windows()  # 69 windows
C4_COLUMN_WEIGHTS = np.array([0, 1, 2, 3, 2, 1, 0], dtype=np.float64)


def c4_heuristic(state: Connect4State) -> float:
    """
    Centre control plus threat counting.

    Windows with 3 of one side's pieces and an empty cell score 5,
    windows with 2 pieces and 2 empty cells score 2.
    """
    board = state.board.astype(np.int64) * int(state.to_move)
    centre = float(np.sum(board * C4_COLUMN_WEIGHTS))

    windows = board.flatten()[C4_WINDOWS]
    mine = np.sum(windows == 1, axis=1)
    theirs = np.sum(windows == -1, axis=1)
    empty = WIN_LENGTH - mine - theirs

    threats = (
        5.0 * np.sum((mine == 3) & (empty == 1))
        + 2.0 * np.sum((mine == 2) & (empty == 2))
        - 5.0 * np.sum((theirs == 3) & (empty == 1))
        - 2.0 * np.sum((theirs == 2) & (empty == 2))
    )
    return centre + float(threats)


def uttt_heuristic(state: UltimateState) -> float:
    """
    A variant of the Powell and Merrill heuristic for Ultimate Tic-Tac-Toe.

    Sub-boards won count 100, the centre sub-board another 30, the centre
    cell of each sub-board 10, and open lines on the meta board 20 per mark.
    """
    sign = int(state.to_move)
    meta = state.meta_board.astype(np.int64) * sign
    board = state.board.astype(np.int64) * sign

    return (
        100.0 * float(np.sum(meta))
        + 30.0 * float(meta[4])
        + 10.0 * float(np.sum(board[:, 4]))
        + 20.0 * line_balance(state.meta_board, sign)
    )


HEURISTICS: dict[str, Heuristic] = {
    "tictactoe": ttt_heuristic,
    "connect4": c4_heuristic,
    "ultimate": uttt_heuristic,
}


def get_heuristic(game_name: str) -> Heuristic:
    """Get the evaluator for a game by name."""
    if game_name not in HEURISTICS:
        available = ", ".join(HEURISTICS.keys())
        raise ValueError(f"No heuristic for game '{game_name}'. Available: {available}")
    return HEURISTICS[game_name]
