"""
Head-to-head matches between two players.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional
import logging
import time

from ..errors import IllegalMove
from ..games.base import Game, Mark, Outcome
from ..players.base import Player

logger = logging.getLogger(__name__)

# Values of MatchResult.result
X_WINS = "X"
O_WINS = "O"
DRAWN = "draw"


@dataclass
class MatchResult:
    """
    Result of one finished match.

    Attributes:
        game: Game name
        player_x: Name of the player who moved first
        player_o: Name of the player who moved second
        result: "X", "O" or "draw"
        moves: Moves in the order they were played (formatted)
        duration: Wall-clock seconds for the whole match
        time_x: Seconds player X spent choosing moves
        time_o: Seconds player O spent choosing moves
        played_at: ISO timestamp of the end of the match
    """

    game: str
    player_x: str
    player_o: str
    result: str
    moves: list[str] = field(default_factory=list)
    duration: float = 0.0
    time_x: float = 0.0
    time_o: float = 0.0
    played_at: str = ""

    def __post_init__(self):
        if self.result not in (X_WINS, O_WINS, DRAWN):
            raise ValueError(f"Invalid match result {self.result!r}")
        if not self.played_at:
            self.played_at = datetime.now().isoformat(timespec="seconds")

    @property
    def winner(self) -> Optional[Mark]:
        if self.result == DRAWN:
            return None
        return Mark.X if self.result == X_WINS else Mark.O

    @property
    def winner_name(self) -> Optional[str]:
        if self.result == DRAWN:
            return None
        return self.player_x if self.result == X_WINS else self.player_o

    @property
    def num_moves(self) -> int:
        return len(self.moves)

    @staticmethod
    def result_label(outcome: Outcome) -> str:
        if outcome.winner is None:
            return DRAWN
        return outcome.winner.symbol


def play_match(
    game: Game,
    player_x: Player,
    player_o: Player,
    on_move: Optional[Callable[[Any, Any, Mark], None]] = None,
) -> MatchResult:
    """
    Play one game from the initial state to the end.

    Args:
        game: Game instance
        player_x: Player moving first
        player_o: Player moving second
        on_move: Optional callback(new_state, move, mark) after every move

    Returns:
        MatchResult

    Raises:
        IllegalMove: if a player picks an illegal move (the match is aborted)
    """
    players = {Mark.X: player_x, Mark.O: player_o}
    spent = {Mark.X: 0.0, Mark.O: 0.0}
    moves: list[str] = []

    state = game.initial_state()
    start = time.perf_counter()

    while not game.is_terminal(state):
        mark = game.current_player(state)
        player = players[mark]

        t0 = time.perf_counter()
        move = player.choose_move(state)
        spent[mark] += time.perf_counter() - t0

        if move is None:
            raise IllegalMove(move, f"{player.name} returned no move in an ongoing game")
        state = game.apply_action(state, move)
        moves.append(game.format_action(move))

        if on_move is not None:
            on_move(state, move, mark)

    outcome = game.outcome(state)
    logger.debug(
        "%s vs %s: %s after %d moves", player_x.name, player_o.name, outcome, len(moves)
    )
    return MatchResult(
        game=game.spec.name,
        player_x=player_x.name,
        player_o=player_o.name,
        result=MatchResult.result_label(outcome),
        moves=moves,
        duration=time.perf_counter() - start,
        time_x=spent[Mark.X],
        time_o=spent[Mark.O],
    )
