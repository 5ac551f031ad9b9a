"""Utilities module."""

from .config import (
    Config,
    MCTSConfig,
    SearchConfig,
    ArenaConfig,
    get_default_config,
)
from .seed import set_seed, derive_seed
from .logging import (
    Logger,
    MatchLogger,
    console,
    setup_logging,
    create_progress,
    print_config,
    print_board,
)

__all__ = [
    "Config",
    "MCTSConfig",
    "SearchConfig",
    "ArenaConfig",
    "get_default_config",
    "set_seed",
    "derive_seed",
    "Logger",
    "MatchLogger",
    "console",
    "setup_logging",
    "create_progress",
    "print_config",
    "print_board",
]
