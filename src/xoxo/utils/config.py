"""
Configuration management for xoxo.

Uses dataclasses with sensible defaults; player strength itself comes
from the presets in xoxo.players.presets.
Supports loading from and saving to YAML files.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional
import yaml


@dataclass
class MCTSConfig:
    """MCTS settings applied on top of the player presets (None = keep the preset's)."""

    iterations: Optional[int] = None
    exploration: Optional[float] = None
    rollout: Optional[str] = None
    time_limit: Optional[float] = None  # Seconds per move


@dataclass
class SearchConfig:
    """Minimax / alpha-beta settings (None = keep the preset's)."""

    depth: Optional[int] = None


@dataclass
class ArenaConfig:
    """Arena configuration."""

    games: int = 10
    results_file: str = "results.csv"
    log_dir: str = "runs"


@dataclass
class Config:
    """Full run configuration."""

    # Component configs
    mcts: MCTSConfig = field(default_factory=MCTSConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    arena: ArenaConfig = field(default_factory=ArenaConfig)

    # Global settings
    game: str = "connect4"
    data_dir: str = "data"

    # Random seed (None = nondeterministic)
    seed: Optional[int] = None

    def save(self, path: str) -> None:
        """Save config to YAML file."""
        with open(path, "w") as f:
            yaml.dump(asdict(self), f, default_flow_style=False)

    @classmethod
    def load(cls, path: str) -> Config:
        """Load config from YAML file. Missing keys keep their defaults."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls(
            mcts=MCTSConfig(**(data.get("mcts") or {})),
            search=SearchConfig(**(data.get("search") or {})),
            arena=ArenaConfig(**(data.get("arena") or {})),
            game=data.get("game", "connect4"),
            data_dir=data.get("data_dir", "data"),
            seed=data.get("seed"),
        )

    def ensure_dirs(self) -> None:
        """Create output directories if they don't exist."""
        Path(self.data_dir).mkdir(parents=True, exist_ok=True)
        Path(self.arena.log_dir).mkdir(parents=True, exist_ok=True)
        Path(self.arena.results_file).parent.mkdir(parents=True, exist_ok=True)


def get_default_config() -> Config:
    return Config()
