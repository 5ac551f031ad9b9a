"""
xoxo - Game-playing search harness.

Minimax, alpha-beta and Monte Carlo Tree Search players for two-player
perfect-information games. MCTS statistics persist between runs and can
be merged across processes.

Supported games:
- Tic-Tac-Toe
- Ultimate Tic-Tac-Toe
- Connect 4

Usage:
    from xoxo.games import get_game
    from xoxo.mcts import StatsStore
    from xoxo.players import AlphaBetaPlayer, MCTSPlayer
    from xoxo.arena import play_match

    game = get_game('connect4')
    store = StatsStore.load('data/mcts1.X.connect4.npz', game='connect4')

    result = play_match(
        game,
        MCTSPlayer(game, store, iterations=2000, seed=0),
        AlphaBetaPlayer(game, depth=6),
    )
    store.save('data/mcts1.X.connect4.npz')
"""

__version__ = "0.1.0"

from . import errors
from . import games
from . import search
from . import mcts
from . import players
from . import arena

__all__ = [
    "errors",
    "games",
    "search",
    "mcts",
    "players",
    "arena",
    "__version__",
]
