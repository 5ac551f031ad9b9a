"""
MCTS search over a persistent statistics store.

UCB1 selection formula:
U(s') = win_rate(s') + c * sqrt(ln N(s) / N(s'))

where s' ranges over the children of s and win_rate is counted for the
player choosing at s. Each iteration:
1. Select: from the root, follow the child with the highest U until a
   child with no visits (expanded first, in legal_actions order) or a
   terminal state is reached
2. Expand: create the record for that child
3. Simulate: play out to the end of the game with a fast default policy
4. Backup: add one visit and the playout's result to every record on the
   path, each scored for the player who moved into that state

The final move is the root child with the most visits (robust child),
first in legal_actions order on ties.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional
import logging
import math
import time
import numpy as np

from ..games.base import Game, Mark
from .store import StatsStore

logger = logging.getLogger(__name__)

ROLLOUT_POLICIES = ("random", "greedy")


@dataclass
class MCTSResult:
    """Outcome of one search."""
    move: Optional[Any]
    iterations: int
    visits: list[tuple[Any, int]] = field(default_factory=list)  # (move, child visits)


class MCTS:
    """
    Monte Carlo Tree Search with UCB1 and random playouts.

    Args:
        game: Game instance
        store: Statistics store shared across searches (and runs)
        exploration: Exploration constant c in the UCB1 formula
        rollout: Default policy, "random" (uniform) or "greedy" (take an
            immediate win when there is one, otherwise uniform)
        seed: Seed for the search's random generator
        rng: Generator to use instead of a seeded one
    """

    def __init__(
        self,
        game: Game,
        store: StatsStore,
        exploration: float = math.sqrt(2),
        rollout: str = "random",
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        if rollout not in ROLLOUT_POLICIES:
            raise ValueError(f"Unknown rollout policy '{rollout}'. Available: {', '.join(ROLLOUT_POLICIES)}")
        if exploration < 0:
            raise ValueError("Exploration constant must be non-negative")

        self.game = game
        self.store = store
        self.exploration = exploration
        self.rollout = rollout
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def search(
        self,
        state: Any,
        iterations: int,
        time_limit: Optional[float] = None,
    ) -> MCTSResult:
        """
        Run MCTS from the given state.

        Args:
            state: Starting game state
            iterations: Maximum number of iterations
            time_limit: Optional wall-clock budget in seconds; at least one
                iteration always runs

        Returns:
            MCTSResult with the robust-child move. A terminal state returns
            move=None without touching the store.
        """
        if self.game.is_terminal(state):
            return MCTSResult(move=None, iterations=0)

        deadline = time.perf_counter() + time_limit if time_limit is not None else None
        root_key = self.game.identity(state)

        done = 0
        for _ in range(iterations):
            if deadline is not None and done > 0 and time.perf_counter() >= deadline:
                break
            self._simulate(state, root_key)
            done += 1

        visits = self.child_visits(state)
        move = self._robust_child(visits)
        logger.debug(
            "MCTS ran %d iterations: move %s, root visits %d, %d records",
            done, move, self.store.visits(root_key), len(self.store),
        )
        return MCTSResult(move=move, iterations=done, visits=visits)

    def child_visits(self, state: Any) -> list[tuple[Any, int]]:
        """Visit count of each legal move's resulting state."""
        return [
            (move, self.store.visits(self.game.identity(self.game.apply_action(state, move))))
            for move in self.game.legal_actions(state)
        ]

    @staticmethod
    def _robust_child(visits: list[tuple[Any, int]]) -> Optional[Any]:
        best_move, best_visits = None, -1
        for move, n in visits:
            if n > best_visits:
                best_move, best_visits = move, n
        return best_move

    def _simulate(self, root: Any, root_key: int) -> None:
        """Run one iteration: select -> expand -> simulate -> backup."""
        game = self.game
        store = self.store

        state = root
        key = root_key
        # (identity, player who moved into that state)
        path = [(root_key, game.current_player(root).other())]

        # Selection
        while not game.is_terminal(state):
            mover = game.current_player(state)
            parent_visits = store.visits(key)

            best = None
            best_score = -math.inf
            expanded = False
            for move in game.legal_actions(state):
                child = game.apply_action(state, move)
                child_key = game.identity(child)
                record = store.get(child_key)
                if record is None or record.visits == 0:
                    # Expansion
                    store.record(child_key)
                    best = (child, child_key)
                    expanded = True
                    break

                score = self._ucb(record.reward, record.visits, parent_visits)
                if score > best_score:
                    best_score = score
                    best = (child, child_key)

            state, key = best
            path.append((key, mover))
            if expanded:
                break

        # Simulation
        winner = self._playout(state)

        # Backup
        for node_key, mover in path:
            store.update(node_key, winner, mover)

    def _ucb(self, reward: float, visits: int, parent_visits: int) -> float:
        """The UCB1 formula; parent_visits below 1 counts as 1."""
        exploit = reward / visits
        explore = math.sqrt(math.log(max(parent_visits, 1)) / visits)
        return exploit + self.exploration * explore

    def _playout(self, state: Any) -> Optional[Mark]:
        """Play to the end with the default policy and return the winner."""
        game = self.game
        while not game.is_terminal(state):
            moves = game.legal_actions(state)
            if self.rollout == "greedy":
                mover = game.current_player(state)
                for move in moves:
                    child = game.apply_action(state, move)
                    if game.outcome(child).winner == mover:
                        return mover
            move = moves[int(self.rng.integers(len(moves)))]
            state = game.apply_action(state, move)
        return game.outcome(state).winner
