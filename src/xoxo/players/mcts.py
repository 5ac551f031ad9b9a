"""
MCTS player backed by a persistent statistics store.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional
import logging
import math
import numpy as np

from ..games.base import Game
from ..mcts.search import MCTS, MCTSResult
from ..mcts.store import StatsStore
from .base import Player

logger = logging.getLogger(__name__)


class MCTSPlayer(Player):
    """
    Chooses moves with MCTS, accumulating statistics in a store.

    Args:
        game: Game instance
        store: Statistics store (loaded by the caller, shared across matches)
        iterations: Iterations per move
        exploration: UCB1 exploration constant
        rollout: Playout policy ("random" or "greedy")
        time_limit: Optional seconds per move
        seed: Seed for the search's random generator
        data_file: Where finish() saves the store; None keeps it in memory
    """

    def __init__(
        self,
        game: Game,
        store: Optional[StatsStore] = None,
        iterations: int = 2000,
        exploration: float = math.sqrt(2),
        rollout: str = "random",
        time_limit: Optional[float] = None,
        seed: Optional[int] = None,
        data_file: Optional[Path] = None,
        name: str = "",
    ):
        if iterations < 1:
            raise ValueError("Iterations must be at least 1")
        super().__init__(game, name)
        self.store = store if store is not None else StatsStore(game=game.spec.name)
        self.iterations = iterations
        self.time_limit = time_limit
        self.data_file = data_file
        self.mcts = MCTS(game, self.store, exploration=exploration, rollout=rollout, seed=seed)
        self.last_result: Optional[MCTSResult] = None

    def choose_move(self, state: Any, rng: Optional[np.random.Generator] = None) -> Optional[Any]:
        # An explicit rng drives this call only
        own_rng = self.mcts.rng
        if rng is not None:
            self.mcts.rng = rng
        try:
            result = self.mcts.search(state, self.iterations, time_limit=self.time_limit)
        finally:
            self.mcts.rng = own_rng
        self.last_result = result
        return result.move

    def finish(self) -> None:
        """Save the statistics store, if this player owns a data file."""
        if self.data_file is not None:
            self.store.save(self.data_file)
            logger.debug("%s saved %d records to %s", self.name, len(self.store), self.data_file)
