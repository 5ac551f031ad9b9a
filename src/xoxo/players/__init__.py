"""
Players: every strategy behind one choose_move() interface.
"""

from .base import Player
from .search import RandomPlayer, MinimaxPlayer, AlphaBetaPlayer
from .mcts import MCTSPlayer
from .human import HumanPlayer
from .presets import (
    PlayerKind,
    PlayerConfig,
    PLAYER_PRESETS,
    GAME_PRESET_OVERRIDES,
    list_presets,
    get_player_config,
    data_file_for,
    create_player,
)

__all__ = [
    "Player",
    "RandomPlayer",
    "MinimaxPlayer",
    "AlphaBetaPlayer",
    "MCTSPlayer",
    "HumanPlayer",
    "PlayerKind",
    "PlayerConfig",
    "PLAYER_PRESETS",
    "GAME_PRESET_OVERRIDES",
    "list_presets",
    "get_player_config",
    "data_file_for",
    "create_player",
]
