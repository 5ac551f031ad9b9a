"""
Statistics record for one state identity.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class StatsRecord:
    """
    Visit and outcome counters for one state.

    Outcomes are counted for the player who made the move leading into the
    state, which is the player choosing among siblings at the parent.
    Counts only grow; losses are whatever is left of the visits.
    """
    visits: int = 0
    wins: int = 0
    draws: int = 0

    @property
    def losses(self) -> int:
        return self.visits - self.wins - self.draws

    @property
    def reward(self) -> float:
        """Accumulated reward: 1 per win, 1/2 per draw."""
        return self.wins + 0.5 * self.draws

    @property
    def win_rate(self) -> float:
        return self.reward / self.visits if self.visits else 0.0

    def merged(self, other: StatsRecord) -> StatsRecord:
        """Counts of both records added together."""
        return StatsRecord(
            visits=self.visits + other.visits,
            wins=self.wins + other.wins,
            draws=self.draws + other.draws,
        )
