"""
Integration layer: the pool engine (invocation surface) and snapshot encoding.
"""

from .pool_engine import EngineOutcome, PoolEngine
from .pool_snapshot import (
    PoolSnapshot,
    decode_pool_record,
    encode_pool_record,
    registry_from_snapshot,
    snapshot_registry,
)

__all__ = [
    "EngineOutcome",
    "PoolEngine",
    "PoolSnapshot",
    "decode_pool_record",
    "encode_pool_record",
    "registry_from_snapshot",
    "snapshot_registry",
]
