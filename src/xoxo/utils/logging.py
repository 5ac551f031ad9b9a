"""
Logging utilities with rich formatting.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, is_dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    MofNCompleteColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.panel import Panel


console = Console()


def setup_logging(verbose: bool = False) -> None:
    """
    Route the library's `logging` records through rich.

    Search internals log at DEBUG; they only show with verbose=True.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


class Logger:
    """
    Console logger with colour-coded message levels.

    Args:
        verbose: Whether to print to console
    """

    def __init__(self, verbose: bool = True):
        self.verbose = verbose

    def log_message(self, message: str, style: str = "white") -> None:
        """Log a message."""
        if self.verbose:
            console.print(f"[{style}]{message}[/]")

    def log_info(self, message: str) -> None:
        self.log_message(message, "blue")

    def log_success(self, message: str) -> None:
        self.log_message(message, "green")

    def log_warning(self, message: str) -> None:
        self.log_message(message, "yellow")

    def log_error(self, message: str) -> None:
        self.log_message(message, "red")


class MatchLogger(Logger):
    """
    Logger that also appends one JSON line per finished match.

    Args:
        log_dir: Directory for log files
        verbose: Whether to print to console
    """

    def __init__(self, log_dir: str = "runs", verbose: bool = True):
        super().__init__(verbose)
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.log_file = self.log_dir / f"arena_{timestamp}.jsonl"
        self.matches_logged = 0

    def log_match(self, result: Any) -> None:
        """Append a match result (a dataclass) to the JSON log."""
        record = asdict(result) if is_dataclass(result) else dict(result)
        with open(self.log_file, "a") as f:
            f.write(json.dumps(record, default=str) + "\n")
        self.matches_logged += 1


def create_progress() -> Progress:
    """Create a rich progress bar with elapsed/remaining time."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        TextColumn("eta"),
        TimeRemainingColumn(),
        console=console,
        transient=False,
    )


def print_config(config: Any, title: str = "Configuration") -> None:
    """Print a (nested) dataclass as a parameter table."""
    table = Table(title=title, show_header=True)
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", style="white")

    def add_dict(d: dict, prefix: str = "") -> None:
        for k, v in d.items():
            key = f"{prefix}{k}" if prefix else k
            if isinstance(v, dict):
                add_dict(v, f"{key}.")
            else:
                table.add_row(key, str(v))

    add_dict(asdict(config))
    console.print(table)


def print_board(board_str: str, title: Optional[str] = "Board") -> None:
    """Print a game board in a panel."""
    console.print(Panel(board_str, title=title, border_style="blue", expand=False))
