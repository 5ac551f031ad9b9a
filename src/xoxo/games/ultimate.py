"""
Ultimate Tic-Tac-Toe game implementation.

Rules:
- A 3x3 grid of 3x3 tic-tac-toe sub-boards, X first
- The first move may go anywhere
- After that, the cell index of the previous move picks the sub-board the
  next move must be played in. If that sub-board is already decided (won
  or full), the player may move in any undecided sub-board.
- Winning a sub-board claims it on the meta board
- Three claimed sub-boards in a row win the game; if every sub-board is
  decided without such a line, it's a draw

Sub-boards and cells are both numbered 0-8 row-major, like Tic-Tac-Toe.
"""

from __future__ import annotations

from dataclasses import dataclass
from hashlib import blake2b
from typing import NamedTuple
import re
import numpy as np

from ..errors import IllegalMove
from .base import Game, GameSpec, Mark, Outcome, ONGOING, DRAW, register_game
from .tictactoe import NUM_CELLS, LINES_THROUGH, line_winner


NUM_BOARDS = 9

# sub_status values
OPEN = 0
DRAWN = 2

ANY_BOARD = -1


class UltimateMove(NamedTuple):
    """A cell inside a sub-board."""
    board: int
    cell: int

    def __str__(self) -> str:
        return f"{self.board}:{self.cell}"


@dataclass
class UltimateState:
    """
    Ultimate Tic-Tac-Toe state.

    board[b, c] is cell c of sub-board b (+1 = X, -1 = O, 0 = empty).
    sub_status[b] is OPEN, +1/-1 for the mark that won it, or DRAWN.
    active is the sub-board the mover must play in, or ANY_BOARD.
    """
    board: np.ndarray       # shape (9, 9), dtype int8
    sub_status: np.ndarray  # shape (9,), dtype int8
    active: int = ANY_BOARD
    to_move: Mark = Mark.X
    result: Outcome = ONGOING

    def __post_init__(self):
        if self.board.shape != (NUM_BOARDS, NUM_CELLS):
            raise ValueError(f"Board must be {NUM_BOARDS}x{NUM_CELLS}")
        if self.board.dtype != np.int8:
            self.board = self.board.astype(np.int8)
        if self.sub_status.dtype != np.int8:
            self.sub_status = self.sub_status.astype(np.int8)

    @property
    def meta_board(self) -> np.ndarray:
        """Sub-board owners as a tic-tac-toe board (drawn boards count as empty)."""
        return np.where(self.sub_status == DRAWN, 0, self.sub_status).astype(np.int8)


@register_game("ultimate")
class UltimateGame(Game[UltimateState, UltimateMove]):
    """Ultimate Tic-Tac-Toe implementation. Actions are UltimateMove(board, cell)."""

    _spec = GameSpec(
        name="ultimate",
        board_shape=(NUM_BOARDS, NUM_CELLS),
        num_actions=NUM_BOARDS * NUM_CELLS,
        max_moves=NUM_BOARDS * NUM_CELLS,
    )

    @property
    def spec(self) -> GameSpec:
        return self._spec

    def initial_state(self) -> UltimateState:
        return UltimateState(
            board=np.zeros((NUM_BOARDS, NUM_CELLS), dtype=np.int8),
            sub_status=np.zeros(NUM_BOARDS, dtype=np.int8),
        )

    def current_player(self, state: UltimateState) -> Mark:
        return state.to_move

    def playable_boards(self, state: UltimateState) -> list[int]:
        """Sub-boards the mover may play in."""
        if state.result.finished:
            return []
        if state.active != ANY_BOARD:
            return [state.active]
        return [b for b in range(NUM_BOARDS) if state.sub_status[b] == OPEN]

    def legal_actions(self, state: UltimateState) -> list[UltimateMove]:
        moves = []
        for b in self.playable_boards(state):
            sub = state.board[b]
            moves.extend(UltimateMove(b, c) for c in range(NUM_CELLS) if sub[c] == 0)
        return moves

    def _validate(self, state: UltimateState, action) -> UltimateMove:
        if state.result.finished:
            raise IllegalMove(action, "the game is over")
        try:
            b, c = action
        except (TypeError, ValueError):
            raise IllegalMove(action, "must be a (board, cell) pair") from None
        if not all(isinstance(v, (int, np.integer)) for v in (b, c)):
            raise IllegalMove(action, "board and cell must be integers")
        if not (0 <= b < NUM_BOARDS and 0 <= c < NUM_CELLS):
            raise IllegalMove(action, "board and cell must be 0-8")
        if state.sub_status[b] != OPEN:
            raise IllegalMove(action, f"sub-board {b} is already decided")
        if state.active != ANY_BOARD and b != state.active:
            raise IllegalMove(action, f"must play in sub-board {state.active}")
        if state.board[b, c] != 0:
            raise IllegalMove(action, f"cell {c} of sub-board {b} is already occupied")
        return UltimateMove(int(b), int(c))

    def apply_action(self, state: UltimateState, action: UltimateMove) -> UltimateState:
        b, c = self._validate(state, action)
        mark = state.to_move

        new_board = state.board.copy()
        new_board[b, c] = mark
        sub_status = state.sub_status.copy()

        result = ONGOING
        if line_winner(new_board[b], LINES_THROUGH[c]):
            sub_status[b] = mark
            meta = np.where(sub_status == DRAWN, 0, sub_status)
            if line_winner(meta, LINES_THROUGH[b]):
                result = Outcome.win(mark)
        elif not np.any(new_board[b] == 0):
            sub_status[b] = DRAWN

        if not result.finished and not np.any(sub_status == OPEN):
            result = DRAW

        # A decided target means free choice, which is the same position
        # as ANY_BOARD
        active = c if sub_status[c] == OPEN else ANY_BOARD

        return UltimateState(
            board=new_board,
            sub_status=sub_status,
            active=active,
            to_move=mark.other(),
            result=result,
        )

    def outcome(self, state: UltimateState) -> Outcome:
        return state.result

    def identity(self, state: UltimateState) -> int:
        """First 8 bytes of BLAKE2b over board, active sub-board and mover."""
        h = blake2b(digest_size=8)
        h.update(state.board.tobytes())
        h.update(bytes((state.active + 1, 1 if state.to_move == Mark.X else 0)))
        return int.from_bytes(h.digest(), "little")

    def num_moves(self, state: UltimateState) -> int:
        return int(np.count_nonzero(state.board))

    def parse_action(self, text: str) -> UltimateMove:
        """Parse 'board cell', 'board,cell' or 'board:cell'."""
        parts = [p for p in re.split(r"[\s,:]+", text.strip()) if p]
        if len(parts) != 2:
            raise ValueError("Enter a sub-board and a cell, e.g. '4 0'")
        b, c = int(parts[0]), int(parts[1])
        if not (0 <= b < NUM_BOARDS and 0 <= c < NUM_CELLS):
            raise ValueError("Sub-board and cell must be 0-8")
        return UltimateMove(b, c)

    def format_action(self, action: UltimateMove) -> str:
        return str(UltimateMove(*action))

    def render(self, state: UltimateState) -> str:
        """Render the 9x9 grid; the sub-board to play in is listed below."""
        symbols = {0: ".", 1: "X", -1: "O"}
        separator = "+-------+-------+-------+"

        lines = [separator]
        for board_row in range(3):
            for cell_row in range(3):
                parts = []
                for board_col in range(3):
                    b = board_row * 3 + board_col
                    cells = " ".join(
                        symbols[int(state.board[b, cell_row * 3 + cell_col])]
                        for cell_col in range(3)
                    )
                    parts.append(f" {cells} ")
                lines.append("|" + "|".join(parts) + "|")
            lines.append(separator)

        if not state.result.finished:
            if state.active == ANY_BOARD:
                lines.append("Play in any open sub-board")
            else:
                lines.append(f"Play in sub-board {state.active}")
        return "\n".join(lines)
