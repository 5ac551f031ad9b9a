"""Tests for MCTS invariants."""

import math

import numpy as np
import pytest

from xoxo.games.connect4 import Connect4Game
from xoxo.games.tictactoe import TicTacToeGame
from xoxo.mcts import MCTS, StatsRecord, StatsStore


def play(game, moves):
    state = game.initial_state()
    for move in moves:
        state = game.apply_action(state, move)
    return state


class TestStatsRecord:
    def test_reward_counts_draws_as_half(self):
        record = StatsRecord(visits=10, wins=4, draws=2)
        assert record.reward == 5.0
        assert record.win_rate == 0.5
        assert record.losses == 4

    def test_empty_record(self):
        assert StatsRecord().win_rate == 0.0

    def test_merged(self):
        merged = StatsRecord(3, 1, 1).merged(StatsRecord(2, 2, 0))
        assert merged == StatsRecord(5, 3, 1)


class TestSearch:
    def test_terminal_root_returns_none(self):
        game = TicTacToeGame()
        state = game.from_string("xxxoo....")
        store = StatsStore(game="tictactoe")
        result = MCTS(game, store, seed=0).search(state, 100)
        assert result.move is None
        assert result.iterations == 0
        assert len(store) == 0

    def test_visit_counts_add_up(self):
        game = Connect4Game()
        # After one piece no two children are mirror images
        state = play(game, [0])
        store = StatsStore(game="connect4")
        mcts = MCTS(game, store, seed=1)

        result = mcts.search(state, 300)
        assert result.iterations == 300
        assert store.visits(game.identity(state)) == 300
        assert sum(n for _, n in result.visits) == 300

    def test_every_child_tried_before_revisits(self):
        game = Connect4Game()
        state = play(game, [0])
        store = StatsStore(game="connect4")
        result = MCTS(game, store, seed=2).search(state, 7)
        assert [n for _, n in result.visits] == [1] * 7

    def test_returns_legal_move(self):
        game = TicTacToeGame()
        state = game.from_string("x...o....")
        result = MCTS(game, StatsStore(), seed=3).search(state, 50)
        assert result.move in game.legal_actions(state)

    def test_records_stay_consistent(self):
        game = TicTacToeGame()
        store = StatsStore(game="tictactoe")
        MCTS(game, store, seed=4).search(game.initial_state(), 500)
        for record in store.records.values():
            assert record.wins + record.draws <= record.visits
            assert record.visits >= 0

    def test_deterministic_with_seed(self):
        game = Connect4Game()
        state = game.initial_state()
        store_a = StatsStore(game="connect4")
        store_b = StatsStore(game="connect4")

        result_a = MCTS(game, store_a, seed=42).search(state, 400)
        result_b = MCTS(game, store_b, seed=42).search(state, 400)

        assert result_a.move == result_b.move
        assert result_a.visits == result_b.visits
        assert store_a == store_b

    def test_time_limit_stops_early(self):
        game = Connect4Game()
        store = StatsStore(game="connect4")
        result = MCTS(game, store, seed=5).search(game.initial_state(), 10_000_000, time_limit=0.05)
        assert 1 <= result.iterations < 10_000_000
        assert result.move is not None

    def test_invalid_parameters(self):
        game = TicTacToeGame()
        with pytest.raises(ValueError):
            MCTS(game, StatsStore(), rollout="smart")
        with pytest.raises(ValueError):
            MCTS(game, StatsStore(), exploration=-1.0)


class TestPlayStrength:
    def test_finds_connect4_win(self):
        game = Connect4Game()
        # X to move, three in a row on the bottom, column 3 wins
        state = play(game, [0, 6, 1, 6, 2, 5])
        result = MCTS(game, StatsStore(game="connect4"), seed=7).search(state, 1500)
        assert result.move == 3

    def test_finds_ttt_win(self):
        game = TicTacToeGame()
        state = game.from_string("xx.oo....")
        result = MCTS(game, StatsStore(game="tictactoe"), seed=8).search(state, 500)
        assert result.move == 2

    def test_greedy_rollout(self):
        game = Connect4Game()
        state = play(game, [0, 6, 1, 6, 2, 5])
        mcts = MCTS(game, StatsStore(game="connect4"), rollout="greedy", seed=9)
        assert mcts.search(state, 1000).move == 3


class TestUCB:
    def test_formula(self):
        game = TicTacToeGame()
        mcts = MCTS(game, StatsStore(), exploration=2.0)
        expected = 3 / 4 + 2.0 * math.sqrt(math.log(10) / 4)
        assert mcts._ucb(3.0, 4, 10) == pytest.approx(expected)

    def test_parent_visits_floor(self):
        game = TicTacToeGame()
        mcts = MCTS(game, StatsStore(), exploration=1.0)
        # ln(1) = 0, so only the exploitation term remains
        assert mcts._ucb(1.0, 2, 0) == pytest.approx(0.5)

    def test_credit_goes_to_mover(self):
        game = TicTacToeGame()
        # X to move and wins at 2 on every playout through that child
        state = game.from_string("xx.oo....")
        store = StatsStore(game="tictactoe")
        MCTS(game, store, seed=10).search(state, 200)

        winning = store.get(game.identity(game.apply_action(state, 2)))
        assert winning.visits > 0
        assert winning.wins == winning.visits


class TestPersistence:
    def test_search_continues_from_saved_store(self, tmp_path):
        game = Connect4Game()
        state = game.initial_state()
        path = tmp_path / "stats.npz"

        uninterrupted = StatsStore(game="connect4")
        mcts = MCTS(game, uninterrupted, rng=np.random.default_rng(11))
        mcts.search(state, 150)
        mcts.search(state, 150)

        first = StatsStore(game="connect4")
        rng = np.random.default_rng(11)
        MCTS(game, first, rng=rng).search(state, 150)
        first.save(path)

        resumed = StatsStore.load(path, game="connect4")
        MCTS(game, resumed, rng=rng).search(state, 150)

        assert resumed == uninterrupted

    def test_learning_changes_root_statistics(self, tmp_path):
        game = TicTacToeGame()
        path = tmp_path / "ttt.npz"
        store = StatsStore.load(path, game="tictactoe")
        assert len(store) == 0

        MCTS(game, store, seed=12).search(game.initial_state(), 100)
        store.save(path)

        loaded = StatsStore.load(path, game="tictactoe")
        root = game.identity(game.initial_state())
        assert loaded.visits(root) == 100
        assert loaded.get(root).visits == 100
        assert loaded.game == "tictactoe"
        assert loaded.get(root) == store.get(root)
