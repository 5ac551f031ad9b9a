"""
Monte Carlo Tree Search module.
"""

from .record import StatsRecord
from .store import StatsStore, merge_records, load_store, save_store
from .codec import StoreCodec, NpzCodec, JsonCodec, codec_for_path, FORMAT_VERSION
from .search import MCTS, MCTSResult, ROLLOUT_POLICIES

__all__ = [
    "StatsRecord",
    "StatsStore",
    "merge_records",
    "load_store",
    "save_store",
    "StoreCodec",
    "NpzCodec",
    "JsonCodec",
    "codec_for_path",
    "FORMAT_VERSION",
    "MCTS",
    "MCTSResult",
    "ROLLOUT_POLICIES",
]
