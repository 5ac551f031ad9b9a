"""
Game implementations.

Each game implements the Game interface from base.py.
"""

from .base import (
    Game,
    GameSpec,
    Mark,
    Outcome,
    ONGOING,
    DRAW,
    State,
    Action,
    register_game,
    get_game,
    list_games,
)

# Import games to register them
from . import tictactoe
from . import ultimate
from . import connect4

from .tictactoe import TicTacToeGame, TicTacToeState
from .ultimate import UltimateGame, UltimateState, UltimateMove
from .connect4 import Connect4Game, Connect4State

__all__ = [
    "Game",
    "GameSpec",
    "Mark",
    "Outcome",
    "ONGOING",
    "DRAW",
    "State",
    "Action",
    "register_game",
    "get_game",
    "list_games",
    "TicTacToeGame",
    "TicTacToeState",
    "UltimateGame",
    "UltimateState",
    "UltimateMove",
    "Connect4Game",
    "Connect4State",
]
