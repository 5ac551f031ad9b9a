"""
Human proxy player: shows the board in the terminal and asks for a move.
"""

from __future__ import annotations

from typing import Any, Callable, Optional
import numpy as np
import typer
from rich.console import Console

from ..games.base import Game
from .base import Player


def _prompt(message: str) -> str:
    return typer.prompt(message)


class HumanPlayer(Player):
    """
    Reads moves from a person until a legal one is entered.

    Args:
        game: Game instance
        read_input: Function that shows a prompt and returns the reply
        console: Console the board and messages are printed to
    """

    def __init__(
        self,
        game: Game,
        read_input: Callable[[str], str] = _prompt,
        console: Optional[Console] = None,
        name: str = "human",
    ):
        super().__init__(game, name)
        self.read_input = read_input
        self.console = console or Console()

    def choose_move(self, state: Any, rng: Optional[np.random.Generator] = None) -> Optional[Any]:
        legal = self.game.legal_actions(state)
        if not legal:
            return None

        mark = self.game.current_player(state)
        self.console.print(self.game.render(state))
        options = " ".join(self.game.format_action(a) for a in legal)

        while True:
            text = self.read_input(f"{mark.symbol} to move {options}")
            try:
                action = self.game.parse_action(text)
            except ValueError as e:
                self.console.print(f"[red]Invalid input: {e}[/]")
                continue
            if action in legal:
                return action
            self.console.print("[red]Invalid move[/]")
