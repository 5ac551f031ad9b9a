"""
Connect 4 game implementation.

Rules:
- 6 rows x 7 columns board
- Players drop pieces into columns, X first
- First to get 4 in a row (horizontal, vertical, or diagonal) wins
- If board fills up with no winner, it's a draw

The numpy board (row 0 at the top) is kept for rendering and heuristics.
Win detection and identity use bitboards: bit `col * 7 + row` is set when
the cell `row` rows above the bottom of `col` is occupied. The seventh bit
of each column stays empty so shifts never wrap between columns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
import numpy as np

from ..errors import IllegalMove
from .base import Game, GameSpec, Mark, Outcome, ONGOING, DRAW, register_game


# Board dimensions
ROWS = 6
COLS = 7
WIN_LENGTH = 4

COLUMN_BITS = ROWS + 1
COLUMN_MASK = (1 << COLUMN_BITS) - 1
FULL_BOARD = sum(((1 << ROWS) - 1) << (c * COLUMN_BITS) for c in range(COLS))


def has_four(bits: int) -> bool:
    """Check if a bitboard contains 4 in a row."""
    # vertical, horizontal, diagonal /, diagonal \
    for shift in (1, COLUMN_BITS, COLUMN_BITS - 1, COLUMN_BITS + 1):
        pairs = bits & (bits >> shift)
        if pairs & (pairs >> (2 * shift)):
            return True
    return False


def mirror_bits(bits: int) -> int:
    """Reflect a bitboard left to right."""
    mirrored = 0
    for c in range(COLS):
        column = (bits >> (c * COLUMN_BITS)) & COLUMN_MASK
        mirrored |= column << ((COLS - 1 - c) * COLUMN_BITS)
    return mirrored


@dataclass
class Connect4State:
    """Connect 4 game state with absolute marks (+1 = X, -1 = O)."""
    board: np.ndarray  # shape (6, 7), dtype int8
    to_move: Mark = Mark.X
    result: Outcome = ONGOING
    bits_x: int = 0
    bits_o: int = 0
    heights: Tuple[int, ...] = (0,) * COLS

    def __post_init__(self):
        if self.board.shape != (ROWS, COLS):
            raise ValueError(f"Board must be {ROWS}x{COLS}")
        if self.board.dtype != np.int8:
            self.board = self.board.astype(np.int8)

    @property
    def mask(self) -> int:
        return self.bits_x | self.bits_o

    def bits_of(self, mark: Mark) -> int:
        return self.bits_x if mark == Mark.X else self.bits_o


@register_game("connect4")
class Connect4Game(Game[Connect4State, int]):
    """
    Connect 4 implementation.

    Actions are column indices (0-6).
    """

    _spec = GameSpec(
        name="connect4",
        board_shape=(ROWS, COLS),
        num_actions=COLS,
        max_moves=ROWS * COLS,
    )

    @property
    def spec(self) -> GameSpec:
        return self._spec

    def initial_state(self) -> Connect4State:
        """Return empty board."""
        return Connect4State(board=np.zeros((ROWS, COLS), dtype=np.int8))

    def current_player(self, state: Connect4State) -> Mark:
        return state.to_move

    def legal_actions(self, state: Connect4State) -> list[int]:
        """Return columns that aren't full."""
        if state.result.finished:
            return []
        return [c for c in range(COLS) if state.heights[c] < ROWS]

    def apply_action(self, state: Connect4State, action: int) -> Connect4State:
        """Drop the mover's piece in a column and return new state."""
        if state.result.finished:
            raise IllegalMove(action, "the game is over")
        if not isinstance(action, (int, np.integer)) or not 0 <= action < COLS:
            raise IllegalMove(action, f"must be a column 0-{COLS - 1}")

        height = state.heights[action]
        if height >= ROWS:
            raise IllegalMove(action, f"column {action} is full")

        mark = state.to_move
        new_board = state.board.copy()
        new_board[ROWS - 1 - height, action] = mark

        bit = 1 << (action * COLUMN_BITS + height)
        bits_x, bits_o = state.bits_x, state.bits_o
        if mark == Mark.X:
            bits_x |= bit
            mover_bits = bits_x
        else:
            bits_o |= bit
            mover_bits = bits_o

        if has_four(mover_bits):
            result = Outcome.win(mark)
        elif (bits_x | bits_o) == FULL_BOARD:
            result = DRAW
        else:
            result = ONGOING

        heights = list(state.heights)
        heights[action] += 1

        return Connect4State(
            board=new_board,
            to_move=mark.other(),
            result=result,
            bits_x=bits_x,
            bits_o=bits_o,
            heights=tuple(heights),
        )

    def outcome(self, state: Connect4State) -> Outcome:
        return state.result

    def identity(self, state: Connect4State) -> int:
        """
        position + mask key of the side to move, minimised with its mirror.

        The key is unique per position and fits in 49 bits.
        """
        position = state.bits_of(state.to_move)
        mask = state.mask
        key = position + mask
        mirrored = mirror_bits(position) + mirror_bits(mask)
        return min(key, mirrored)

    def num_moves(self, state: Connect4State) -> int:
        return sum(state.heights)

    def parse_action(self, text: str) -> int:
        action = int(text.strip())
        if not 0 <= action < COLS:
            raise ValueError(f"Column must be 0-{COLS - 1}")
        return action

    def from_string(self, text: str) -> Connect4State:
        """
        Build a state from 6 lines of 7 characters ('x', 'o' or '.').

        Lines run from the top row to the bottom row; indentation and
        blank leading/trailing lines are ignored.
        """
        rows = [line.strip() for line in text.strip().splitlines()]
        if len(rows) != ROWS or any(len(r) != COLS for r in rows):
            raise ValueError(f"Expected {ROWS} lines of {COLS} characters")

        symbols = {"x": 1, "o": -1, ".": 0}
        try:
            board = np.array(
                [[symbols[ch] for ch in row.lower()] for row in rows],
                dtype=np.int8,
            )
        except KeyError as e:
            raise ValueError(f"Invalid character {e.args[0]!r}") from None

        bits_x = bits_o = 0
        heights = []
        for c in range(COLS):
            height = 0
            for h in range(ROWS):
                value = board[ROWS - 1 - h, c]
                if value == 0:
                    if np.any(board[: ROWS - 1 - h, c] != 0):
                        raise ValueError(f"Floating piece in column {c}")
                    break
                bit = 1 << (c * COLUMN_BITS + h)
                if value == 1:
                    bits_x |= bit
                else:
                    bits_o |= bit
                height += 1
            heights.append(height)

        xs = int(np.sum(board == 1))
        os_ = int(np.sum(board == -1))
        if xs - os_ not in (0, 1):
            raise ValueError("X moves first, so X must have as many or one more piece than O")

        x_won, o_won = has_four(bits_x), has_four(bits_o)
        if x_won and o_won:
            raise ValueError("Both players cannot have four in a row")
        if x_won:
            result = Outcome.win(Mark.X)
        elif o_won:
            result = Outcome.win(Mark.O)
        elif (bits_x | bits_o) == FULL_BOARD:
            result = DRAW
        else:
            result = ONGOING

        return Connect4State(
            board=board,
            to_move=Mark.X if xs == os_ else Mark.O,
            result=result,
            bits_x=bits_x,
            bits_o=bits_o,
            heights=tuple(heights),
        )

    def render(self, state: Connect4State) -> str:
        """Render board as ASCII art."""
        symbols = {0: ".", 1: "X", -1: "O"}

        lines = []
        lines.append(" " + " ".join(str(i) for i in range(COLS)))
        lines.append("-" * (COLS * 2 + 1))

        for r in range(ROWS):
            row_str = "|" + "|".join(
                symbols[int(state.board[r, c])] for c in range(COLS)
            ) + "|"
            lines.append(row_str)

        lines.append("-" * (COLS * 2 + 1))
        return "\n".join(lines)
