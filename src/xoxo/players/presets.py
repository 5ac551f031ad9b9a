"""
Player configurations and presets.

A preset names a strategy and its tuning: search depth for minimax and
alpha-beta, iteration budget and exploration constant for MCTS. The
roster mirrors the arena line-up the statistics files are named after.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Callable, Optional
import math

from ..games.base import Game, Mark
from ..mcts.search import ROLLOUT_POLICIES
from ..mcts.store import StatsStore
from .base import Player
from .human import HumanPlayer
from .mcts import MCTSPlayer
from .search import RandomPlayer, MinimaxPlayer, AlphaBetaPlayer


class PlayerKind(Enum):
    """Strategy families."""
    RANDOM = "random"
    MINIMAX = "minimax"
    ALPHABETA = "alphabeta"
    MCTS = "mcts"
    HUMAN = "human"


@dataclass(frozen=True)
class PlayerConfig:
    """
    Configuration for one player. Fixed for the duration of a match.

    Attributes:
        kind: Strategy family
        depth: Minimax / alpha-beta search depth in plies
        iterations: MCTS iterations per move
        exploration: MCTS UCB1 exploration constant
        rollout: MCTS playout policy
        time_limit: Optional MCTS seconds per move
        seed: Random seed (random and MCTS players)
        name: Preset name
        description: Description for listings
    """
    kind: PlayerKind
    depth: int = 4
    iterations: int = 2000
    exploration: float = math.sqrt(2)
    rollout: str = "random"
    time_limit: Optional[float] = None
    seed: Optional[int] = None
    name: str = ""
    description: str = ""

    def __post_init__(self):
        if self.depth < 1:
            raise ValueError("Depth must be at least 1")
        if self.iterations < 1:
            raise ValueError("Iterations must be at least 1")
        if self.exploration < 0:
            raise ValueError("Exploration constant must be non-negative")
        if self.rollout not in ROLLOUT_POLICIES:
            raise ValueError(f"Rollout must be one of: {', '.join(ROLLOUT_POLICIES)}")
        if self.time_limit is not None and self.time_limit <= 0:
            raise ValueError("Time limit must be positive")

    @property
    def persistent(self) -> bool:
        """Whether the player learns into a statistics store."""
        return self.kind == PlayerKind.MCTS

    def with_overrides(self, **changes) -> PlayerConfig:
        """Copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


# Default presets
PLAYER_PRESETS: dict[str, PlayerConfig] = {
    "random": PlayerConfig(
        kind=PlayerKind.RANDOM,
        name="random",
        description="Uniformly random legal moves",
    ),
    "minimax4": PlayerConfig(
        kind=PlayerKind.MINIMAX,
        depth=4,
        name="minimax4",
        description="Minimax with depth 4",
    ),
    "ab4": PlayerConfig(
        kind=PlayerKind.ALPHABETA,
        depth=4,
        name="ab4",
        description="Minimax with depth 4 and alpha-beta pruning",
    ),
    "ab6": PlayerConfig(
        kind=PlayerKind.ALPHABETA,
        depth=6,
        name="ab6",
        description="Minimax with depth 6 and alpha-beta pruning",
    ),
    "mcts1": PlayerConfig(
        kind=PlayerKind.MCTS,
        exploration=1.0,
        name="mcts1",
        description="MCTS with c=1 in the UCB1 formula",
    ),
    "mcts2": PlayerConfig(
        kind=PlayerKind.MCTS,
        exploration=2.0,
        name="mcts2",
        description="MCTS with c=2 in the UCB1 formula",
    ),
    "mcts3": PlayerConfig(
        kind=PlayerKind.MCTS,
        exploration=0.5,
        name="mcts3",
        description="MCTS with c=0.5 in the UCB1 formula",
    ),
    "human": PlayerConfig(
        kind=PlayerKind.HUMAN,
        name="human",
        description="Moves typed in the terminal",
    ),
}


# Game-specific presets (some games need different scaling)
GAME_PRESET_OVERRIDES: dict[str, dict[str, dict]] = {
    "tictactoe": {
        # Small enough to search to the end of the game
        "minimax4": {"depth": 9, "description": "Minimax, full depth"},
        "ab4": {"depth": 9, "description": "Alpha-beta, full depth"},
        "ab6": {"depth": 9, "description": "Alpha-beta, full depth"},
    },
    "ultimate": {
        # Playouts are long and branching is wide
        "mcts1": {"iterations": 1000},
        "mcts2": {"iterations": 1000},
        "mcts3": {"iterations": 1000},
    },
}


def list_presets() -> list[str]:
    return list(PLAYER_PRESETS.keys())


def get_player_config(preset: str, game_name: Optional[str] = None) -> PlayerConfig:
    """
    Get a preset configuration.

    Args:
        preset: Preset name
        game_name: Optional game name for game-specific tuning
    """
    if preset not in PLAYER_PRESETS:
        available = ", ".join(PLAYER_PRESETS.keys())
        raise ValueError(f"Unknown player '{preset}'. Available: {available}")
    config = PLAYER_PRESETS[preset]
    overrides = GAME_PRESET_OVERRIDES.get(game_name or "", {}).get(preset)
    if overrides:
        config = replace(config, **overrides)
    return config


def data_file_for(data_dir: Path, config: PlayerConfig, mark: Mark, game_name: str) -> Path:
    """Statistics file of a persistent player: {data_dir}/{preset}.{mark}.{game}.npz"""
    return Path(data_dir) / f"{config.name}.{mark.symbol}.{game_name}.npz"


def create_player(
    game: Game,
    config: PlayerConfig,
    store: Optional[StatsStore] = None,
    data_file: Optional[Path] = None,
    read_input: Optional[Callable[[str], str]] = None,
    name: Optional[str] = None,
) -> Player:
    """
    Build a player from its configuration.

    Args:
        game: Game instance
        config: Player configuration
        store: Statistics store for MCTS players (default: empty)
        data_file: Where an MCTS player saves its store on finish()
        read_input: Input function for human players
        name: Display name (default: the preset name)
    """
    name = name or config.name or config.kind.value

    if config.kind == PlayerKind.RANDOM:
        return RandomPlayer(game, seed=config.seed, name=name)
    if config.kind == PlayerKind.MINIMAX:
        return MinimaxPlayer(game, depth=config.depth, name=name)
    if config.kind == PlayerKind.ALPHABETA:
        return AlphaBetaPlayer(game, depth=config.depth, name=name)
    if config.kind == PlayerKind.MCTS:
        return MCTSPlayer(
            game,
            store=store,
            iterations=config.iterations,
            exploration=config.exploration,
            rollout=config.rollout,
            time_limit=config.time_limit,
            seed=config.seed,
            data_file=data_file,
            name=name,
        )
    if config.kind == PlayerKind.HUMAN:
        if read_input is not None:
            return HumanPlayer(game, read_input=read_input, name=name)
        return HumanPlayer(game, name=name)
    raise ValueError(f"Unsupported player kind: {config.kind}")
