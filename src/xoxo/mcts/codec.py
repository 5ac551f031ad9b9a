"""
On-disk encodings for the MCTS statistics store.

The default NpzCodec stores the mapping as flat numpy arrays keyed by the
64-bit state identity:

    keys    uint64  state identities
    visits  int64   visit counts
    wins    int64   wins for the player who moved into the state
    draws   int64   draws

plus the scalars magic, version and game. JsonCodec writes the same
content as a nested key-value document; it is readable but several times
larger and slower, so it is meant for inspection and small data sets.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Optional, Tuple
import json
import zipfile
import zlib
import numpy as np

from ..errors import CorruptData, IncompatibleFormat
from .record import StatsRecord

FORMAT_MAGIC = "xoxo-stats"
FORMAT_VERSION = 1

Records = dict[int, StatsRecord]


def _check_header(magic: str, version: int) -> None:
    if magic != FORMAT_MAGIC:
        raise IncompatibleFormat(f"Not a statistics file (magic {magic!r})")
    if version != FORMAT_VERSION:
        raise IncompatibleFormat(
            f"Statistics format version {version} is not supported "
            f"(expected {FORMAT_VERSION})"
        )


def _check_counts(visits: np.ndarray, wins: np.ndarray, draws: np.ndarray) -> None:
    """Reject records whose counts no sequence of playouts could produce."""
    if len(visits) == 0:
        return
    if (visits < 0).any() or (wins < 0).any() or (draws < 0).any():
        raise CorruptData("Statistics file contains negative counts")
    bad = np.flatnonzero(wins + draws > visits)
    if len(bad):
        raise CorruptData(
            f"Statistics file has {len(bad)} records with more results than visits"
        )


class StoreCodec(ABC):
    """Encodes a statistics mapping to a binary file object and back."""

    name: str = ""

    @abstractmethod
    def encode(self, records: Records, game: Optional[str], fh: BinaryIO) -> None:
        pass

    @abstractmethod
    def decode(self, fh: BinaryIO) -> Tuple[Optional[str], Records]:
        """
        Returns:
            (game, records) where game is the name stored in the file

        Raises:
            CorruptData: if the content cannot be decoded
            IncompatibleFormat: if the magic or version does not match
        """
        pass


class NpzCodec(StoreCodec):
    """Compressed flat arrays (numpy .npz)."""

    name = "npz"
    _ARRAYS = ("keys", "visits", "wins", "draws")

    def encode(self, records: Records, game: Optional[str], fh: BinaryIO) -> None:
        count = len(records)
        keys = np.fromiter(records.keys(), dtype=np.uint64, count=count)
        visits = np.fromiter((r.visits for r in records.values()), dtype=np.int64, count=count)
        wins = np.fromiter((r.wins for r in records.values()), dtype=np.int64, count=count)
        draws = np.fromiter((r.draws for r in records.values()), dtype=np.int64, count=count)

        # Pass the file handle so numpy does not append '.npz' to the name
        np.savez_compressed(
            fh,
            magic=np.array(FORMAT_MAGIC),
            version=np.array(FORMAT_VERSION, dtype=np.int64),
            game=np.array(game or ""),
            keys=keys,
            visits=visits,
            wins=wins,
            draws=draws,
        )

    def decode(self, fh: BinaryIO) -> Tuple[Optional[str], Records]:
        try:
            data = np.load(fh, allow_pickle=False)
        except (zipfile.BadZipFile, ValueError, OSError, EOFError) as e:
            raise CorruptData(f"Could not read statistics file: {e}") from e
        if not isinstance(data, np.lib.npyio.NpzFile):
            raise IncompatibleFormat("Not a statistics file (expected an .npz archive)")

        with data:
            missing = [k for k in ("magic", "version", *self._ARRAYS) if k not in data.files]
            if "magic" in missing:
                raise IncompatibleFormat("Not a statistics file (no magic marker)")
            try:
                _check_header(str(data["magic"].item()), int(data["version"]))
                if missing:
                    raise CorruptData(f"Statistics file is missing arrays: {', '.join(missing)}")

                game = str(data["game"].item()) if "game" in data.files else ""
                keys = data["keys"]
                visits = data["visits"]
                wins = data["wins"]
                draws = data["draws"]
            except (zipfile.BadZipFile, zlib.error, ValueError, OSError, EOFError) as e:
                raise CorruptData(f"Could not read statistics file: {e}") from e

        if any(a.ndim != 1 or a.dtype.kind not in "iu" for a in (keys, visits, wins, draws)):
            raise CorruptData("Statistics arrays must be one-dimensional integer arrays")
        if not (len(keys) == len(visits) == len(wins) == len(draws)):
            raise CorruptData("Statistics arrays have different lengths")
        _check_counts(visits, wins, draws)

        records = {
            key: StatsRecord(visits=v, wins=w, draws=d)
            for key, v, w, d in zip(keys.tolist(), visits.tolist(), wins.tolist(), draws.tolist())
        }
        if len(records) != len(keys):
            raise CorruptData("Statistics file contains duplicate keys")
        return game or None, records


class JsonCodec(StoreCodec):
    """Nested key-value JSON document."""

    name = "json"

    def encode(self, records: Records, game: Optional[str], fh: BinaryIO) -> None:
        document = {
            "magic": FORMAT_MAGIC,
            "version": FORMAT_VERSION,
            "game": game or "",
            "records": {
                str(key): [r.visits, r.wins, r.draws] for key, r in records.items()
            },
        }
        fh.write(json.dumps(document).encode("utf-8"))

    def decode(self, fh: BinaryIO) -> Tuple[Optional[str], Records]:
        try:
            document = json.loads(fh.read().decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CorruptData(f"Could not read statistics file: {e}") from e

        if not isinstance(document, dict):
            raise IncompatibleFormat("Not a statistics file")
        _check_header(document.get("magic"), document.get("version"))

        entries = document.get("records")
        if not isinstance(entries, dict):
            raise CorruptData("Malformed statistics records: expected an object of id -> counts")
        try:
            records = {
                int(key): StatsRecord(visits=int(v), wins=int(w), draws=int(d))
                for key, (v, w, d) in entries.items()
            }
            counts = np.array(
                [(r.visits, r.wins, r.draws) for r in records.values()], dtype=np.int64
            ).reshape(-1, 3)
        except (AttributeError, TypeError, ValueError, OverflowError) as e:
            raise CorruptData(f"Malformed statistics records: {e}") from e

        if any(not 0 <= key < 2**64 for key in records):
            raise CorruptData("Statistics file contains identities outside the 64-bit range")
        _check_counts(counts[:, 0], counts[:, 1], counts[:, 2])
        return document.get("game") or None, records


CODECS: dict[str, StoreCodec] = {
    NpzCodec.name: NpzCodec(),
    JsonCodec.name: JsonCodec(),
}


def codec_for_path(path: Path) -> StoreCodec:
    """Pick a codec from the file suffix (.json -> JSON, anything else -> npz)."""
    if Path(path).suffix.lower() == ".json":
        return CODECS["json"]
    return CODECS["npz"]
