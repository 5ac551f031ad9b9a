"""Tests for players and presets."""

import io

import numpy as np
import pytest
from rich.console import Console

from xoxo.games import Mark, UltimateMove
from xoxo.games.connect4 import Connect4Game
from xoxo.games.tictactoe import TicTacToeGame
from xoxo.games.ultimate import UltimateGame
from xoxo.mcts import StatsStore
from xoxo.players import (
    AlphaBetaPlayer,
    HumanPlayer,
    MCTSPlayer,
    MinimaxPlayer,
    PLAYER_PRESETS,
    PlayerConfig,
    PlayerKind,
    RandomPlayer,
    create_player,
    data_file_for,
    get_player_config,
    list_presets,
)


def scripted(*answers):
    """Input function returning the given answers in order."""
    replies = iter(answers)
    return lambda prompt: next(replies)


def quiet_console():
    return Console(file=io.StringIO())


class TestRandomPlayer:
    def test_plays_legal_moves(self):
        game = Connect4Game()
        player = RandomPlayer(game, seed=0)
        state = game.initial_state()
        while not game.is_terminal(state):
            move = player.choose_move(state)
            assert move in game.legal_actions(state)
            state = game.apply_action(state, move)

    def test_seeded(self):
        game = UltimateGame()
        state = game.initial_state()
        a = [RandomPlayer(game, seed=3).choose_move(state) for _ in range(5)]
        b = [RandomPlayer(game, seed=3).choose_move(state) for _ in range(5)]
        assert a == b

    def test_rng_argument_overrides(self):
        game = TicTacToeGame()
        state = game.initial_state()
        player = RandomPlayer(game, seed=1)
        a = player.choose_move(state, rng=np.random.default_rng(5))
        b = player.choose_move(state, rng=np.random.default_rng(5))
        assert a == b

    def test_terminal_returns_none(self):
        game = TicTacToeGame()
        state = game.from_string("xxxoo....")
        assert RandomPlayer(game).choose_move(state) is None


class TestSearchPlayers:
    def test_depth_must_be_positive(self):
        with pytest.raises(ValueError):
            MinimaxPlayer(TicTacToeGame(), depth=0)

    def test_alphabeta_agrees_with_minimax(self):
        game = Connect4Game()
        minimax = MinimaxPlayer(game, depth=3)
        alphabeta = AlphaBetaPlayer(game, depth=3)

        state = game.initial_state()
        for _ in range(6):
            move = minimax.choose_move(state)
            assert alphabeta.choose_move(state) == move
            assert alphabeta.last_result.score == minimax.last_result.score
            state = game.apply_action(state, move)

        assert alphabeta.leaves_evaluated < minimax.leaves_evaluated

    def test_terminal_returns_none(self):
        game = TicTacToeGame()
        state = game.from_string("xxxoo....")
        assert AlphaBetaPlayer(game, depth=2).choose_move(state) is None

    def test_custom_evaluator(self):
        game = Connect4Game()
        player = AlphaBetaPlayer(game, depth=1, evaluate=lambda state: 0.0)
        # Every move scores 0, so the first column is kept
        assert player.choose_move(game.initial_state()) == 0


class TestMCTSPlayer:
    def test_shares_store(self):
        game = TicTacToeGame()
        store = StatsStore(game="tictactoe")
        player = MCTSPlayer(game, store, iterations=50, seed=0)
        player.choose_move(game.initial_state())
        assert store.visits(game.identity(game.initial_state())) == 50
        assert player.last_result.iterations == 50

    def test_finish_saves_store(self, tmp_path):
        game = TicTacToeGame()
        path = tmp_path / "mcts1.X.tictactoe.npz"
        player = MCTSPlayer(game, iterations=20, seed=0, data_file=path)
        player.choose_move(game.initial_state())
        player.finish()

        loaded = StatsStore.load(path, game="tictactoe")
        assert loaded == player.store

    def test_finish_without_file_is_noop(self, tmp_path):
        player = MCTSPlayer(TicTacToeGame(), iterations=5)
        player.finish()
        assert list(tmp_path.iterdir()) == []

    def test_rng_argument_is_scoped_to_call(self):
        game = TicTacToeGame()
        state = game.initial_state()
        player = MCTSPlayer(game, iterations=20, seed=0)
        own = player.mcts.rng

        player.choose_move(state, rng=np.random.default_rng(1))
        assert player.mcts.rng is own

        # Later calls draw from the player's own generator as if the override never happened
        reference = MCTSPlayer(game, iterations=20, seed=0)
        reference.store.merge(player.store)
        reference.choose_move(state)
        player.choose_move(state)
        assert player.store == reference.store

    def test_invalid_iterations(self):
        with pytest.raises(ValueError):
            MCTSPlayer(TicTacToeGame(), iterations=0)

    def test_terminal_returns_none(self):
        game = TicTacToeGame()
        player = MCTSPlayer(game, iterations=10)
        assert player.choose_move(game.from_string("xxxoo....")) is None
        assert len(player.store) == 0


class TestHumanPlayer:
    def test_reprompts_until_legal(self):
        game = TicTacToeGame()
        state = game.from_string("x........")
        player = HumanPlayer(game, read_input=scripted("middle", "0", "12", "4"), console=quiet_console())
        assert player.choose_move(state) == 4

    def test_ultimate_input(self):
        game = UltimateGame()
        state = game.apply_action(game.initial_state(), UltimateMove(4, 2))
        player = HumanPlayer(game, read_input=scripted("4 0", "2 5"), console=quiet_console())
        assert player.choose_move(state) == UltimateMove(2, 5)

    def test_shows_board(self):
        game = TicTacToeGame()
        output = io.StringIO()
        player = HumanPlayer(game, read_input=scripted("4"), console=Console(file=output))
        player.choose_move(game.initial_state())
        assert "|" in output.getvalue()

    def test_terminal_returns_none(self):
        game = TicTacToeGame()
        player = HumanPlayer(game, read_input=scripted(), console=quiet_console())
        assert player.choose_move(game.from_string("xxxoo....")) is None


class TestPresets:
    def test_roster(self):
        assert list_presets() == ["random", "minimax4", "ab4", "ab6", "mcts1", "mcts2", "mcts3", "human"]

    def test_exploration_constants(self):
        assert get_player_config("mcts1").exploration == 1.0
        assert get_player_config("mcts2").exploration == 2.0
        assert get_player_config("mcts3").exploration == 0.5

    def test_game_overrides(self):
        assert get_player_config("ab4").depth == 4
        assert get_player_config("ab4", "tictactoe").depth == 9
        assert get_player_config("minimax4", "tictactoe").depth == 9
        assert get_player_config("ab6", "connect4").depth == 6
        # Overrides never touch the shared presets
        assert PLAYER_PRESETS["ab4"].depth == 4

    def test_unknown_preset(self):
        with pytest.raises(ValueError):
            get_player_config("deep-blue")

    def test_validation(self):
        with pytest.raises(ValueError):
            PlayerConfig(kind=PlayerKind.MINIMAX, depth=0)
        with pytest.raises(ValueError):
            PlayerConfig(kind=PlayerKind.MCTS, rollout="smart")
        with pytest.raises(ValueError):
            PlayerConfig(kind=PlayerKind.MCTS, time_limit=0)

    def test_with_overrides_skips_none(self):
        config = get_player_config("mcts1").with_overrides(iterations=None, seed=7)
        assert config.iterations == PLAYER_PRESETS["mcts1"].iterations
        assert config.seed == 7

    def test_create_player_kinds(self):
        game = Connect4Game()
        expected = {
            "random": RandomPlayer,
            "minimax4": MinimaxPlayer,
            "ab4": AlphaBetaPlayer,
            "mcts1": MCTSPlayer,
            "human": HumanPlayer,
        }
        for preset, cls in expected.items():
            player = create_player(game, get_player_config(preset, "connect4"))
            assert type(player) is cls
            assert player.name == preset

    def test_create_mcts_player_uses_store(self, tmp_path):
        game = Connect4Game()
        store = StatsStore(game="connect4")
        config = get_player_config("mcts2", "connect4")
        path = data_file_for(tmp_path, config, Mark.O, "connect4")
        player = create_player(game, config, store=store, data_file=path)

        assert player.store is store
        assert player.mcts.exploration == 2.0
        assert player.data_file == path

    def test_data_file_naming(self, tmp_path):
        config = get_player_config("mcts1")
        path = data_file_for(tmp_path, config, Mark.X, "connect4")
        assert path == tmp_path / "mcts1.X.connect4.npz"
        assert config.persistent
        assert not get_player_config("ab6").persistent
