"""Tests for the persistent statistics store and its encodings."""

import json

import numpy as np
import pytest

from xoxo.errors import CorruptData, IncompatibleFormat
from xoxo.games import Mark
from xoxo.games.tictactoe import TicTacToeGame
from xoxo.mcts import (
    FORMAT_VERSION,
    JsonCodec,
    NpzCodec,
    StatsRecord,
    StatsStore,
    StoreCodec,
    codec_for_path,
    load_store,
    merge_records,
    save_store,
)


def write_npz(path, keys, visits, wins, draws, dtype=np.int64):
    """Write a statistics archive with a valid header and the given arrays."""
    with open(path, "wb") as f:
        np.savez(
            f,
            magic=np.array("xoxo-stats"),
            version=np.array(FORMAT_VERSION),
            game=np.array("tictactoe"),
            keys=np.array(keys, dtype=np.uint64),
            visits=np.array(visits, dtype=dtype),
            wins=np.array(wins, dtype=dtype),
            draws=np.array(draws, dtype=dtype),
        )


def make_store(game="connect4"):
    return StatsStore(
        {
            1: StatsRecord(10, 4, 2),
            2**63 + 5: StatsRecord(3, 0, 3),
            2**64 - 1: StatsRecord(1, 1, 0),
        },
        game=game,
    )


class TestLoad:
    def test_absent_file_is_empty(self, tmp_path):
        store = StatsStore.load(tmp_path / "missing.npz", game="connect4")
        assert len(store) == 0
        assert store.game == "connect4"

    def test_zero_byte_file_is_empty(self, tmp_path):
        path = tmp_path / "empty.npz"
        path.touch()
        assert len(StatsStore.load(path)) == 0

    def test_garbage_is_corrupt(self, tmp_path):
        path = tmp_path / "garbage.npz"
        path.write_bytes(b"this is not a statistics file")
        with pytest.raises(CorruptData):
            StatsStore.load(path)

    def test_truncated_archive_is_corrupt(self, tmp_path):
        path = tmp_path / "stats.npz"
        make_store().save(path)
        data = path.read_bytes()
        path.write_bytes(data[: len(data) // 2])
        with pytest.raises(CorruptData):
            StatsStore.load(path)

    def test_foreign_npz_is_incompatible(self, tmp_path):
        path = tmp_path / "other.npz"
        with open(path, "wb") as f:
            np.savez(f, weights=np.zeros(3))
        with pytest.raises(IncompatibleFormat):
            StatsStore.load(path)

    def test_plain_npy_is_incompatible(self, tmp_path):
        path = tmp_path / "array.npz"
        with open(path, "wb") as f:
            np.save(f, np.arange(4))
        with pytest.raises(IncompatibleFormat):
            StatsStore.load(path)

    def test_future_version_is_incompatible(self, tmp_path):
        path = tmp_path / "future.npz"
        with open(path, "wb") as f:
            np.savez(
                f,
                magic=np.array("xoxo-stats"),
                version=np.array(FORMAT_VERSION + 1),
                game=np.array("connect4"),
                keys=np.zeros(0, dtype=np.uint64),
                visits=np.zeros(0, dtype=np.int64),
                wins=np.zeros(0, dtype=np.int64),
                draws=np.zeros(0, dtype=np.int64),
            )
        with pytest.raises(IncompatibleFormat):
            StatsStore.load(path)

    def test_incompatible_is_corrupt(self):
        # Callers catching CorruptData also catch format mismatches
        assert issubclass(IncompatibleFormat, CorruptData)

    def test_wrong_game_is_incompatible(self, tmp_path):
        path = tmp_path / "stats.npz"
        make_store("connect4").save(path)
        with pytest.raises(IncompatibleFormat):
            StatsStore.load(path, game="tictactoe")

    @pytest.mark.parametrize("visits,wins,draws", [
        ([-5, 3], [0, 1], [0, 0]),
        ([4, 3], [-1, 1], [0, 0]),
        ([4, 3], [1, 1], [0, -2]),
        ([4, 3], [3, 1], [2, 0]),
    ])
    def test_impossible_counts_are_corrupt(self, tmp_path, visits, wins, draws):
        path = tmp_path / "stats.npz"
        write_npz(path, [1, 2], visits, wins, draws)
        with pytest.raises(CorruptData):
            StatsStore.load(path)

    def test_float_arrays_are_corrupt(self, tmp_path):
        path = tmp_path / "stats.npz"
        write_npz(path, [1], [2.5], [1.0], [0.0], dtype=np.float64)
        with pytest.raises(CorruptData):
            StatsStore.load(path)

    def test_corrupt_counts_never_reach_search(self, tmp_path):
        game = TicTacToeGame()
        state = game.initial_state()
        children = sorted({game.identity(game.apply_action(state, m)) for m in game.legal_actions(state)})
        path = tmp_path / "stats.npz"
        write_npz(path, children, [-5] * len(children), [0] * len(children), [0] * len(children))
        with pytest.raises(CorruptData):
            StatsStore.load(path, game="tictactoe")


class TestSave:
    @pytest.mark.parametrize("suffix", [".npz", ".json"])
    def test_round_trip(self, tmp_path, suffix):
        path = tmp_path / f"stats{suffix}"
        store = make_store()
        store.save(path)

        loaded = StatsStore.load(path)
        assert loaded == store
        assert loaded.game == "connect4"

    def test_empty_store_round_trip(self, tmp_path):
        path = tmp_path / "stats.npz"
        StatsStore(game="tictactoe").save(path)
        loaded = StatsStore.load(path)
        assert len(loaded) == 0
        assert loaded.game == "tictactoe"

    def test_keeps_exact_file_name(self, tmp_path):
        path = tmp_path / "mcts1.X.connect4.npz"
        make_store().save(path)
        assert path.exists()
        assert sorted(p.name for p in tmp_path.iterdir()) == ["mcts1.X.connect4.npz"]

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "data" / "nested" / "stats.npz"
        make_store().save(path)
        assert path.exists()

    def test_failed_save_keeps_previous_file(self, tmp_path):
        class BrokenCodec(StoreCodec):
            name = "broken"

            def encode(self, records, game, fh):
                fh.write(b"partial")
                raise OSError("disk full")

            def decode(self, fh):
                raise NotImplementedError

        path = tmp_path / "stats.npz"
        original = make_store()
        original.save(path)
        before = path.read_bytes()

        bigger = make_store()
        bigger.update(99, Mark.X, Mark.X)
        with pytest.raises(OSError):
            bigger.save(path, codec=BrokenCodec())

        assert path.read_bytes() == before
        assert StatsStore.load(path) == original
        assert sorted(p.name for p in tmp_path.iterdir()) == ["stats.npz"]

    def test_module_functions(self, tmp_path):
        path = tmp_path / "stats.npz"
        save_store(make_store(), path)
        assert load_store(path, game="connect4") == make_store()


class TestMerge:
    def test_counts_add(self):
        a = StatsStore({1: StatsRecord(2, 1, 0), 2: StatsRecord(1, 0, 1)})
        b = StatsStore({1: StatsRecord(3, 1, 1), 3: StatsRecord(4, 4, 0)})
        a.merge(b)
        assert a.get(1) == StatsRecord(5, 2, 1)
        assert a.get(2) == StatsRecord(1, 0, 1)
        assert a.get(3) == StatsRecord(4, 4, 0)

    def test_merge_does_not_alias(self):
        a = StatsStore()
        b = StatsStore({1: StatsRecord(1, 1, 0)})
        a.merge(b)
        a.update(1, Mark.O, Mark.X)
        assert b.get(1) == StatsRecord(1, 1, 0)

    def test_merge_is_order_independent(self):
        x = {1: StatsRecord(2, 1, 0), 2: StatsRecord(5, 2, 2)}
        y = {2: StatsRecord(1, 1, 0), 3: StatsRecord(7, 0, 7)}
        assert merge_records(x, y) == merge_records(y, x)

    def test_merge_is_associative(self):
        x = StatsStore({1: StatsRecord(2, 1, 0), 2: StatsRecord(5, 2, 2)})
        y = StatsStore({2: StatsRecord(1, 1, 0), 3: StatsRecord(7, 0, 7)})
        z = StatsStore({1: StatsRecord(4, 0, 4), 3: StatsRecord(1, 1, 0), 4: StatsRecord(2, 0, 0)})

        left = x.copy()
        left.merge(y)
        left.merge(z)

        inner = y.copy()
        inner.merge(z)
        right = x.copy()
        right.merge(inner)

        assert left == right
        assert left.get(1) == StatsRecord(6, 1, 4)
        assert left.total_visits == x.total_visits + y.total_visits + z.total_visits
        assert merge_records(merge_records(x.records, y.records), z.records) == merge_records(
            x.records, merge_records(y.records, z.records)
        )

    def test_merge_records_is_pure(self):
        x = {1: StatsRecord(2, 1, 0)}
        y = {1: StatsRecord(1, 0, 1)}
        merged = merge_records(x, y)
        assert merged[1] == StatsRecord(3, 1, 1)
        assert x[1] == StatsRecord(2, 1, 0)
        assert y[1] == StatsRecord(1, 0, 1)

    def test_merge_loaded_files(self, tmp_path):
        a_path = tmp_path / "a.npz"
        b_path = tmp_path / "b.json"
        StatsStore({1: StatsRecord(2, 2, 0)}, game="tictactoe").save(a_path)
        StatsStore({1: StatsRecord(1, 0, 0), 2: StatsRecord(1, 0, 1)}, game="tictactoe").save(b_path)

        store = StatsStore.load(a_path, game="tictactoe")
        store.merge(StatsStore.load(b_path, game="tictactoe"))
        assert store.get(1) == StatsRecord(3, 2, 0)
        assert store.total_visits == 4

    def test_merge_other_game_raises(self):
        a = StatsStore(game="connect4")
        b = StatsStore({1: StatsRecord(1, 0, 0)}, game="tictactoe")
        with pytest.raises(IncompatibleFormat):
            a.merge(b)


class TestUpdate:
    def test_update_scores_for_mover(self):
        store = StatsStore()
        store.update(7, Mark.X, Mark.X)
        store.update(7, Mark.O, Mark.X)
        store.update(7, None, Mark.X)
        assert store.get(7) == StatsRecord(visits=3, wins=1, draws=1)
        assert store.get(7).losses == 1

    def test_copy_is_independent(self):
        store = make_store()
        clone = store.copy()
        clone.update(1, None, Mark.O)
        assert clone != store
        assert store.get(1) == StatsRecord(10, 4, 2)


class TestCodecs:
    def test_codec_from_suffix(self, tmp_path):
        assert isinstance(codec_for_path(tmp_path / "a.json"), JsonCodec)
        assert isinstance(codec_for_path(tmp_path / "a.npz"), NpzCodec)
        assert isinstance(codec_for_path(tmp_path / "a.bin"), NpzCodec)

    def test_explicit_codec(self, tmp_path):
        path = tmp_path / "stats.dat"
        store = make_store()
        store.save(path, codec=JsonCodec())
        assert StatsStore.load(path, codec=JsonCodec()) == store

    def test_json_is_readable(self, tmp_path):
        path = tmp_path / "stats.json"
        make_store().save(path)
        document = json.loads(path.read_text())
        assert document["magic"] == "xoxo-stats"
        assert document["version"] == FORMAT_VERSION
        assert document["records"]["1"] == [10, 4, 2]

    def test_json_wrong_version(self, tmp_path):
        path = tmp_path / "stats.json"
        path.write_text(json.dumps({"magic": "xoxo-stats", "version": 99, "records": {}}))
        with pytest.raises(IncompatibleFormat):
            StatsStore.load(path)

    def test_json_malformed_records(self, tmp_path):
        path = tmp_path / "stats.json"
        path.write_text(json.dumps({"magic": "xoxo-stats", "version": 1, "records": {"1": [1]}}))
        with pytest.raises(CorruptData):
            StatsStore.load(path)

    def test_json_records_not_an_object(self, tmp_path):
        path = tmp_path / "stats.json"
        path.write_text(json.dumps({"magic": "xoxo-stats", "version": 1, "records": [[1, 1, 0]]}))
        with pytest.raises(CorruptData):
            StatsStore.load(path)

    def test_json_missing_records(self, tmp_path):
        path = tmp_path / "stats.json"
        path.write_text(json.dumps({"magic": "xoxo-stats", "version": 1}))
        with pytest.raises(CorruptData):
            StatsStore.load(path)

    @pytest.mark.parametrize("records", [
        {"1": [-1, 0, 0]},
        {"1": [2, 2, 1]},
        {"-3": [1, 1, 0]},
        {"1": ["many", 0, 0]},
    ])
    def test_json_impossible_records(self, tmp_path, records):
        path = tmp_path / "stats.json"
        path.write_text(json.dumps({"magic": "xoxo-stats", "version": 1, "records": records}))
        with pytest.raises(CorruptData):
            StatsStore.load(path)

    def test_json_garbage(self, tmp_path):
        path = tmp_path / "stats.json"
        path.write_text("{not json")
        with pytest.raises(CorruptData):
            StatsStore.load(path)
