"""
Tic-Tac-Toe game implementation.

Simple 3x3 game, small enough for minimax to search exhaustively.

Rules:
- 3x3 board
- Players alternate placing their mark, X first
- First to get 3 in a row (horizontal, vertical, diagonal) wins
- If board fills with no winner, it's a draw
"""

from __future__ import annotations

from dataclasses import dataclass
import numpy as np

from ..errors import IllegalMove
from .base import Game, GameSpec, Mark, Outcome, ONGOING, DRAW, register_game


BOARD_SIZE = 3
NUM_CELLS = BOARD_SIZE * BOARD_SIZE

# Winning lines (indices into flattened board)
WINNING_LINES = (
    # Rows
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    # Columns
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    # Diagonals
    (0, 4, 8),
    (2, 4, 6),
)

LINES_THROUGH = tuple(
    tuple(line for line in WINNING_LINES if cell in line)
    for cell in range(NUM_CELLS)
)


def _symmetry_permutations() -> np.ndarray:
    """Cell permutations for the 8 symmetries (4 rotations x reflection)."""
    cells = np.arange(NUM_CELLS).reshape(BOARD_SIZE, BOARD_SIZE)
    perms = []
    for k in range(4):
        rotated = np.rot90(cells, k)
        perms.append(rotated.flatten())
        perms.append(np.fliplr(rotated).flatten())
    return np.array(perms, dtype=np.intp)


SYMMETRIES = _symmetry_permutations()
POWERS_OF_3 = 3 ** np.arange(NUM_CELLS, dtype=np.int64)


def line_winner(cells: np.ndarray, lines=WINNING_LINES) -> int:
    """Return +1/-1 if that mark owns a full line among `lines`, else 0."""
    for a, b, c in lines:
        v = cells[a]
        if v != 0 and v == cells[b] and v == cells[c]:
            return int(v)
    return 0


@dataclass
class TicTacToeState:
    """Tic-Tac-Toe game state with absolute marks (+1 = X, -1 = O)."""
    board: np.ndarray  # shape (9,), dtype int8
    to_move: Mark = Mark.X
    result: Outcome = ONGOING

    def __post_init__(self):
        if self.board.shape != (NUM_CELLS,):
            raise ValueError(f"Board must have {NUM_CELLS} cells")
        if self.board.dtype != np.int8:
            self.board = self.board.astype(np.int8)


def _evaluate(board: np.ndarray) -> Outcome:
    winner = line_winner(board)
    if winner:
        return Outcome.win(Mark(winner))
    if not np.any(board == 0):
        return DRAW
    return ONGOING


@register_game("tictactoe")
class TicTacToeGame(Game[TicTacToeState, int]):
    """
    Tic-Tac-Toe implementation.

    Actions are cell indices (0-8), mapping to positions:
    0 | 1 | 2
    ---------
    3 | 4 | 5
    ---------
    6 | 7 | 8
    """

    _spec = GameSpec(
        name="tictactoe",
        board_shape=(BOARD_SIZE, BOARD_SIZE),
        num_actions=NUM_CELLS,
        max_moves=NUM_CELLS,
    )

    @property
    def spec(self) -> GameSpec:
        return self._spec

    def initial_state(self) -> TicTacToeState:
        """Return empty board."""
        return TicTacToeState(board=np.zeros(NUM_CELLS, dtype=np.int8))

    def current_player(self, state: TicTacToeState) -> Mark:
        return state.to_move

    def legal_actions(self, state: TicTacToeState) -> list[int]:
        """Return empty cells as actions."""
        if state.result.finished:
            return []
        return [i for i in range(NUM_CELLS) if state.board[i] == 0]

    def apply_action(self, state: TicTacToeState, action: int) -> TicTacToeState:
        """Place the mover's mark and return new state."""
        if state.result.finished:
            raise IllegalMove(action, "the game is over")
        if not isinstance(action, (int, np.integer)) or not 0 <= action < NUM_CELLS:
            raise IllegalMove(action, f"must be a cell 0-{NUM_CELLS - 1}")
        if state.board[action] != 0:
            raise IllegalMove(action, f"cell {action} is already occupied")

        new_board = state.board.copy()
        new_board[action] = state.to_move

        # Only lines through the new mark can have been completed
        if line_winner(new_board, LINES_THROUGH[action]):
            result = Outcome.win(state.to_move)
        elif not np.any(new_board == 0):
            result = DRAW
        else:
            result = ONGOING

        return TicTacToeState(
            board=new_board,
            to_move=state.to_move.other(),
            result=result,
        )

    def outcome(self, state: TicTacToeState) -> Outcome:
        return state.result

    def identity(self, state: TicTacToeState) -> int:
        """
        Base-3 encoding of the board, minimised over the 8 symmetries.

        Whose turn it is follows from the mark count, so it is not encoded.
        """
        digits = np.where(state.board == -1, 2, state.board).astype(np.int64)
        keys = digits[SYMMETRIES] @ POWERS_OF_3
        return int(keys.min())

    def num_moves(self, state: TicTacToeState) -> int:
        return int(np.count_nonzero(state.board))

    def parse_action(self, text: str) -> int:
        action = int(text.strip())
        if not 0 <= action < NUM_CELLS:
            raise ValueError(f"Cell must be 0-{NUM_CELLS - 1}")
        return action

    def from_string(self, text: str) -> TicTacToeState:
        """
        Build a state from 9 characters 'x', 'o' or '.'/' ', row-major.

        The side to move follows from the mark count.
        """
        if len(text) != NUM_CELLS:
            raise ValueError(f"Expected {NUM_CELLS} characters, got {len(text)}")
        symbols = {"x": 1, "o": -1, ".": 0, " ": 0}
        try:
            board = np.array([symbols[ch] for ch in text.lower()], dtype=np.int8)
        except KeyError as e:
            raise ValueError(f"Invalid character {e.args[0]!r}") from None

        xs = int(np.sum(board == 1))
        os_ = int(np.sum(board == -1))
        if xs - os_ not in (0, 1):
            raise ValueError("X moves first, so X must have as many or one more mark than O")
        to_move = Mark.X if xs == os_ else Mark.O
        return TicTacToeState(board=board, to_move=to_move, result=_evaluate(board))

    def render(self, state: TicTacToeState) -> str:
        """Render board as ASCII art."""
        symbols = {0: ".", 1: "X", -1: "O"}

        lines = []
        for r in range(BOARD_SIZE):
            row_str = " | ".join(
                symbols[int(state.board[r * BOARD_SIZE + c])] for c in range(BOARD_SIZE)
            )
            lines.append(f" {row_str} ")
            if r < BOARD_SIZE - 1:
                lines.append("-----------")

        return "\n".join(lines)
