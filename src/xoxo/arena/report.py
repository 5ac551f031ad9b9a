"""
Match results on disk and the wins/draws/losses report.

Results are appended to a CSV file, one row per match, so runs from
several processes and sessions accumulate in one place.
"""

from __future__ import annotations

import csv
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from rich.console import Console
from rich.table import Table

from ..errors import CorruptData
from .match import MatchResult, X_WINS, O_WINS, DRAWN

PathLike = Union[str, os.PathLike]

RESULT_FIELDS = [
    "game",
    "player_x",
    "player_o",
    "result",
    "moves",
    "duration",
    "time_x",
    "time_o",
    "played_at",
]


def append_result(path: PathLike, result: MatchResult) -> None:
    """Append one match to the results file, writing the header first if new."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    needs_header = not path.exists() or path.stat().st_size == 0

    with open(path, mode="a", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=RESULT_FIELDS)
        if needs_header:
            writer.writeheader()
        writer.writerow({
            "game": result.game,
            "player_x": result.player_x,
            "player_o": result.player_o,
            "result": result.result,
            "moves": " ".join(result.moves),
            "duration": f"{result.duration:.6f}",
            "time_x": f"{result.time_x:.6f}",
            "time_o": f"{result.time_o:.6f}",
            "played_at": result.played_at,
        })


def load_results(path: PathLike, game: Optional[str] = None) -> list[MatchResult]:
    """
    Read match results back.

    Args:
        path: Results file (absent file gives an empty list)
        game: Only return matches of this game

    Raises:
        CorruptData: if a row cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        return []

    results = []
    with open(path, newline="", encoding="utf-8") as f:
        for line_no, row in enumerate(csv.DictReader(f), start=2):
            if game is not None and row.get("game") != game:
                continue
            try:
                results.append(MatchResult(
                    game=row["game"],
                    player_x=row["player_x"],
                    player_o=row["player_o"],
                    result=row["result"],
                    moves=(row.get("moves") or "").split(),
                    duration=float(row.get("duration") or 0.0),
                    time_x=float(row.get("time_x") or 0.0),
                    time_o=float(row.get("time_o") or 0.0),
                    played_at=row.get("played_at") or "",
                ))
            except (KeyError, TypeError, ValueError) as e:
                raise CorruptData(f"{path}:{line_no}: malformed result row ({e})") from e
    return results


@dataclass
class ResultMatrix:
    """
    Wins/draws/losses per pairing.

    Row = player who moved first, column = player who moved second.
    Counts are from the row player's point of view.
    """

    players: list[str] = field(default_factory=list)
    cells: dict[tuple[str, str], list[int]] = field(default_factory=dict)

    def get(self, row: str, col: str) -> tuple[int, int, int]:
        wins, draws, losses = self.cells.get((row, col), (0, 0, 0))
        return wins, draws, losses

    @property
    def total_games(self) -> int:
        return sum(sum(counts) for counts in self.cells.values())


def summarize_results(
    results: Iterable[MatchResult],
    players: Optional[list[str]] = None,
) -> ResultMatrix:
    """
    Build the results matrix.

    Args:
        results: Match results (already filtered to one game)
        players: Row/column order; by default players appear in the order
            they are first seen
    """
    matrix = ResultMatrix(players=list(players) if players else [])
    fixed = players is not None

    for r in results:
        for name in (r.player_x, r.player_o):
            if name not in matrix.players:
                if fixed:
                    break
                matrix.players.append(name)
        else:
            counts = matrix.cells.setdefault((r.player_x, r.player_o), [0, 0, 0])
            if r.result == X_WINS:
                counts[0] += 1
            elif r.result == DRAWN:
                counts[1] += 1
            elif r.result == O_WINS:
                counts[2] += 1

    return matrix


def print_report(matrix: ResultMatrix, console: Console, title: str = "Results") -> None:
    """Print the matrix as a rich table of wins/draws/losses."""
    table = Table(title=title, caption="wins/draws/losses, row = X (first), column = O")
    table.add_column("", style="cyan")
    for name in matrix.players:
        table.add_column(name, justify="center")

    for row in matrix.players:
        cells = []
        for col in matrix.players:
            wins, draws, losses = matrix.get(row, col)
            if wins + draws + losses == 0:
                cells.append("[dim]-[/]")
            else:
                cells.append(f"[green]{wins}[/]/{draws}/[red]{losses}[/]")
        table.add_row(row, *cells)

    console.print(table)
