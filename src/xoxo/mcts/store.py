"""
Persistent statistics store for MCTS.

A flat mapping from state identity to StatsRecord. There is no tree of
node objects: a search derives child identities from the game and looks
them up here, which is what lets statistics from separate runs be merged.

Lifecycle: load() once when a process starts, mutate during searches,
save() once at the end (or at explicit checkpoints). Only one process
should write a given file at a time.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Mapping, Optional, Union
import logging
import os

from ..errors import IncompatibleFormat
from ..games.base import Mark
from .codec import StoreCodec, codec_for_path
from .record import StatsRecord

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def merge_records(
    existing: Mapping[int, StatsRecord],
    incoming: Mapping[int, StatsRecord],
) -> dict[int, StatsRecord]:
    """
    Merge two record mappings into a new one.

    Records with the same identity have their counts added; nothing is
    ever overwritten. The inputs are not modified.
    """
    merged = {key: StatsRecord(r.visits, r.wins, r.draws) for key, r in existing.items()}
    for key, record in incoming.items():
        current = merged.get(key)
        if current is None:
            merged[key] = StatsRecord(record.visits, record.wins, record.draws)
        else:
            merged[key] = current.merged(record)
    return merged


class StatsStore:
    """
    Statistics records for one game, keyed by state identity.

    Args:
        records: Initial records (copied by reference)
        game: Name of the game the identities belong to
    """

    def __init__(
        self,
        records: Optional[dict[int, StatsRecord]] = None,
        game: Optional[str] = None,
    ):
        self.records: dict[int, StatsRecord] = records if records is not None else {}
        self.game = game

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, key: int) -> bool:
        return key in self.records

    def __iter__(self) -> Iterator[int]:
        return iter(self.records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatsStore):
            return NotImplemented
        return self.records == other.records

    def __repr__(self) -> str:
        return f"StatsStore(game={self.game!r}, records={len(self)}, visits={self.total_visits})"

    def get(self, key: int) -> Optional[StatsRecord]:
        return self.records.get(key)

    def visits(self, key: int) -> int:
        record = self.records.get(key)
        return record.visits if record is not None else 0

    def record(self, key: int) -> StatsRecord:
        """Return the record for key, creating an empty one if absent."""
        record = self.records.get(key)
        if record is None:
            record = StatsRecord()
            self.records[key] = record
        return record

    def update(self, key: int, winner: Optional[Mark], mover: Mark) -> None:
        """Count one playout through key, scored for `mover`."""
        record = self.record(key)
        record.visits += 1
        if winner is None:
            record.draws += 1
        elif winner == mover:
            record.wins += 1

    @property
    def total_visits(self) -> int:
        return sum(r.visits for r in self.records.values())

    def merge(self, other: Union[StatsStore, Mapping[int, StatsRecord]]) -> None:
        """Accumulate another store's counts into this one."""
        if isinstance(other, StatsStore):
            if self.game and other.game and self.game != other.game:
                raise IncompatibleFormat(
                    f"Cannot merge statistics for '{other.game}' into '{self.game}'"
                )
            self.game = self.game or other.game
            other = other.records

        for key, incoming in other.items():
            record = self.record(key)
            record.visits += incoming.visits
            record.wins += incoming.wins
            record.draws += incoming.draws

    def copy(self) -> StatsStore:
        return StatsStore(merge_records(self.records, {}), game=self.game)

    @classmethod
    def load(
        cls,
        path: PathLike,
        game: Optional[str] = None,
        codec: Optional[StoreCodec] = None,
    ) -> StatsStore:
        """
        Load a store from disk.

        An absent or zero-byte file gives an empty store; that is the
        normal first run for a game and configuration.

        Args:
            path: Statistics file
            game: Expected game name; a file written for another game
                raises IncompatibleFormat
            codec: Encoding (default: chosen from the file suffix)

        Raises:
            CorruptData: if the file cannot be decoded
            IncompatibleFormat: if the file has another format version or game
        """
        path = Path(path)
        if not path.exists() or path.stat().st_size == 0:
            logger.debug("No statistics at %s, starting empty", path)
            return cls(game=game)

        codec = codec or codec_for_path(path)
        with open(path, "rb") as f:
            stored_game, records = codec.decode(f)

        if game and stored_game and stored_game != game:
            raise IncompatibleFormat(
                f"{path} holds statistics for '{stored_game}', not '{game}'"
            )

        logger.debug("Loaded %d records from %s", len(records), path)
        return cls(records, game=game or stored_game)

    def save(self, path: PathLike, codec: Optional[StoreCodec] = None) -> None:
        """
        Write the store to disk.

        The data goes to a temporary file that then replaces the target,
        so a crash mid-write leaves the previous file intact.
        """
        path = Path(path)
        codec = codec or codec_for_path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")

        try:
            with open(tmp, "wb") as f:
                codec.encode(self.records, self.game, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise

        logger.debug("Saved %d records to %s", len(self), path)


def load_store(path: PathLike, game: Optional[str] = None) -> StatsStore:
    """Load a statistics store (see StatsStore.load)."""
    return StatsStore.load(path, game=game)


def save_store(store: StatsStore, path: PathLike) -> None:
    """Save a statistics store (see StatsStore.save)."""
    store.save(path)
