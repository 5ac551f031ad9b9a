"""
Abstract base classes for xoxo games.

Every game the searchers can play implements the Game interface.
The searchers don't know anything about the rules - they only need to:
1. Know what moves are legal
2. Apply moves and get new states
3. Know when the game is over and who won
4. Get a canonical identity for a state (the statistics store key)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import TypeVar, Generic, Optional


class Mark(IntEnum):
    """A player's mark. X always moves first."""
    X = 1
    O = -1

    def other(self) -> Mark:
        return Mark(-self.value)

    @property
    def symbol(self) -> str:
        return self.name


@dataclass(frozen=True)
class Outcome:
    """
    Result of a position.

    finished=False means the game is still running. A finished outcome
    with winner=None is a draw.
    """
    finished: bool
    winner: Optional[Mark] = None

    @property
    def is_draw(self) -> bool:
        return self.finished and self.winner is None

    def value_for(self, mark: Mark) -> float:
        """+1.0 if mark won, -1.0 if it lost, 0.0 for a draw or ongoing game."""
        if self.winner is None:
            return 0.0
        return 1.0 if self.winner == mark else -1.0

    def __str__(self) -> str:
        if not self.finished:
            return "ongoing"
        if self.winner is None:
            return "draw"
        return f"{self.winner.symbol} wins"

    @classmethod
    def win(cls, mark: Mark) -> Outcome:
        return cls(finished=True, winner=Mark(mark))


ONGOING = Outcome(finished=False)
DRAW = Outcome(finished=True)


@dataclass(frozen=True)
class GameSpec:
    """
    Describes a game's structure.

    max_moves is the length of the longest possible game, which is also
    the depth at which minimax becomes exhaustive.
    """
    name: str
    board_shape: tuple[int, ...]  # e.g., (6, 7) for Connect4, (9, 9) for Ultimate
    num_actions: int              # e.g., 7 for Connect4, 81 for Ultimate
    max_moves: int

    @property
    def board_size(self) -> int:
        """Total number of board cells."""
        result = 1
        for dim in self.board_shape:
            result *= dim
        return result


# Type variables for game state and action
State = TypeVar('State')
Action = TypeVar('Action')


class Game(ABC, Generic[State, Action]):
    """
    Abstract base class for any two-player zero-sum perfect-information game.

    Key concepts:
    - State: The full board position, whose turn it is and the outcome.
      States are values: apply_action returns a new state and never
      mutates its input.
    - Action: A legal move in the game
    - Identity: An unsigned 64-bit integer that is equal for strategically
      identical states. This is the key of the MCTS statistics store.
    """

    @property
    @abstractmethod
    def spec(self) -> GameSpec:
        """Return the GameSpec describing this game."""
        pass

    @abstractmethod
    def initial_state(self) -> State:
        """Return the starting state of the game, X to move."""
        pass

    @abstractmethod
    def current_player(self, state: State) -> Mark:
        """Return the mark of the player to move."""
        pass

    @abstractmethod
    def legal_actions(self, state: State) -> list[Action]:
        """
        Return list of legal actions from this state.

        The list is empty exactly when the state is terminal. Its order
        is the evaluation order used by every search.
        """
        pass

    @abstractmethod
    def apply_action(self, state: State, action: Action) -> State:
        """
        Apply action and return new state.

        Raises:
            IllegalMove: if action is not in legal_actions(state)
        """
        pass

    @abstractmethod
    def outcome(self, state: State) -> Outcome:
        """Return ONGOING, DRAW or a win for one mark."""
        pass

    @abstractmethod
    def identity(self, state: State) -> int:
        """Return the canonical 64-bit key of the state."""
        pass

    @abstractmethod
    def num_moves(self, state: State) -> int:
        """Number of marks placed so far."""
        pass

    @abstractmethod
    def parse_action(self, text: str) -> Action:
        """
        Parse a human-entered move.

        Raises:
            ValueError: if the text does not describe an action
        """
        pass

    def is_terminal(self, state: State) -> bool:
        return self.outcome(state).finished

    def format_action(self, action: Action) -> str:
        return str(action)

    def render(self, state: State) -> str:
        """
        Render state as string for display.

        Optional - default returns empty string.
        """
        return ""


# Registry of available games
_GAME_REGISTRY: dict[str, type[Game]] = {}


def register_game(name: str):
    """Decorator to register a game class."""
    def decorator(cls: type[Game]):
        _GAME_REGISTRY[name] = cls
        return cls
    return decorator


def get_game(name: str) -> Game:
    """Get a game instance by name."""
    if name not in _GAME_REGISTRY:
        available = ", ".join(_GAME_REGISTRY.keys())
        raise ValueError(f"Unknown game '{name}'. Available: {available}")
    return _GAME_REGISTRY[name]()


def list_games() -> list[str]:
    """List all registered games."""
    return list(_GAME_REGISTRY.keys())
