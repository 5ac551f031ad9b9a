"""
Player interface.

A match runner only ever calls choose_move() and applies the result, so
it never needs to know which strategy it is driving.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Optional
import numpy as np

from ..games.base import Game, State, Action


class Player(ABC, Generic[State, Action]):
    """
    A strategy bound to one game.

    Args:
        game: Game the player plays
        name: Display name used in logs and reports
    """

    def __init__(self, game: Game[State, Action], name: str = ""):
        self.game = game
        self.name = name or type(self).__name__

    @abstractmethod
    def choose_move(
        self,
        state: State,
        rng: Optional[np.random.Generator] = None,
    ) -> Optional[Action]:
        """
        Pick a move for the player to move in state.

        Args:
            state: Current game state
            rng: Optional generator overriding the player's own randomness

        Returns:
            A legal action, or None if the state is terminal
        """
        pass

    def finish(self) -> None:
        """Called once when the player is done playing (e.g. to persist data)."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
