"""
Pool registry snapshot encoding.

Goals:
- Deterministic JSON serialization for hashing / snapshot distribution.
- Round-trippable into `PoolRecord` / `PoolRegistry`.
- A fixed-size binary record per pool for ledgers that persist raw accounts.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from ..core.errors import InvariantViolation
from ..core.invariants import check_all
from ..state.canonical import bytes_to_hex, canonical_json_bytes, hex32_to_bytes, tagged_digest, tagged_digest_hex
from ..state.pools import PoolConfig, PoolRecord, PoolRegistry, PoolState


POOL_SNAPSHOT_VERSION = 1

# seed u64 | fee_bps u16 | locked u8 | has_authority u8 |
# reserve_x u64 | reserve_y u64 | total_shares u64 |
# pool_id | asset_x | asset_y | share_asset | authority   (32 bytes each)
_RECORD_STRUCT = struct.Struct("<QHBBQQQ32s32s32s32s32s")
POOL_RECORD_SIZE = _RECORD_STRUCT.size


def _require_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return int(value)


def _validated(record: PoolRecord) -> PoolRecord:
    violations = check_all(record.config, record.state)
    if violations:
        raise InvariantViolation(violations)
    return record


def pool_to_dict(record: PoolRecord) -> Dict[str, Any]:
    c, s = record.config, record.state
    return {
        "seed": int(c.seed),
        "pool_id": c.pool_id,
        "fee_bps": int(c.fee_bps),
        "asset_x": c.asset_x,
        "asset_y": c.asset_y,
        "share_asset": c.share_asset,
        "authority": c.authority,
        "locked": bool(c.locked),
        "reserve_x": int(s.reserve_x),
        "reserve_y": int(s.reserve_y),
        "total_shares": int(s.total_shares),
    }


def pool_from_dict(d: Mapping[str, Any]) -> PoolRecord:
    """
    Inverse of `pool_to_dict`. Raises KeyError on missing fields,
    `InvalidPoolConfig` on a malformed identity and `InvariantViolation` when
    the accounting breaks a pool invariant.
    """
    locked = d["locked"]
    if not isinstance(locked, bool):
        raise TypeError("locked must be a bool")
    authority = d["authority"]
    if authority is not None and not isinstance(authority, str):
        raise TypeError("authority must be a string or None")
    config = PoolConfig(
        seed=_require_int(d["seed"], name="seed"),
        fee_bps=_require_int(d["fee_bps"], name="fee_bps"),
        asset_x=d["asset_x"],
        asset_y=d["asset_y"],
        pool_id=d["pool_id"],
        share_asset=d["share_asset"],
        authority=authority,
        locked=locked,
    )
    state = PoolState(
        reserve_x=_require_int(d["reserve_x"], name="reserve_x"),
        reserve_y=_require_int(d["reserve_y"], name="reserve_y"),
        total_shares=_require_int(d["total_shares"], name="total_shares"),
    )
    return _validated(PoolRecord(config=config, state=state))


@dataclass(frozen=True)
class PoolSnapshot:
    """
    Deterministic, versioned snapshot of a `PoolRegistry`.

    The commitment is *not* included inside `data` to avoid self-reference.
    """

    version: int
    data: Dict[str, Any]

    def canonical_bytes(self) -> bytes:
        return canonical_json_bytes(self.data)

    def commitment_bytes(self) -> bytes:
        return tagged_digest("pool_snapshot", self.canonical_bytes(), version=self.version)

    def commitment_hex(self) -> str:
        return tagged_digest_hex("pool_snapshot", self.canonical_bytes(), version=self.version)


def snapshot_registry(registry: PoolRegistry, *, version: int = POOL_SNAPSHOT_VERSION) -> PoolSnapshot:
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    pools = [pool_to_dict(record) for _, record in registry.items()]
    return PoolSnapshot(version=version, data={"version": version, "pools": pools})


def registry_from_snapshot(snapshot: PoolSnapshot) -> PoolRegistry:
    if snapshot.data.get("version") != snapshot.version:
        raise ValueError("snapshot version mismatch")
    registry = PoolRegistry()
    for entry in snapshot.data.get("pools", []):
        registry.insert(pool_from_dict(entry))
    return registry


def encode_pool_record(record: PoolRecord) -> bytes:
    """
    Fixed-size little-endian record. Identifiers must be 0x-prefixed 32-byte hex.
    A missing authority is encoded as 32 zero bytes with `has_authority = 0`.
    """
    c, s = record.config, record.state
    authority = c.authority
    authority_b = b"\x00" * 32 if authority is None else hex32_to_bytes(authority, name="authority")
    return _RECORD_STRUCT.pack(
        c.seed,
        c.fee_bps,
        1 if c.locked else 0,
        0 if authority is None else 1,
        s.reserve_x,
        s.reserve_y,
        s.total_shares,
        hex32_to_bytes(c.pool_id, name="pool_id"),
        hex32_to_bytes(c.asset_x, name="asset_x"),
        hex32_to_bytes(c.asset_y, name="asset_y"),
        hex32_to_bytes(c.share_asset, name="share_asset"),
        authority_b,
    )


def decode_pool_record(data: bytes) -> PoolRecord:
    """Inverse of `encode_pool_record`; validates like `pool_from_dict`."""
    if len(data) != POOL_RECORD_SIZE:
        raise ValueError(f"pool record must be {POOL_RECORD_SIZE} bytes, got {len(data)}")
    (
        seed,
        fee_bps,
        locked,
        has_authority,
        reserve_x,
        reserve_y,
        total_shares,
        pool_id,
        asset_x,
        asset_y,
        share_asset,
        authority,
    ) = _RECORD_STRUCT.unpack(data)
    if locked not in (0, 1) or has_authority not in (0, 1):
        raise ValueError("flag bytes must be 0 or 1")
    config = PoolConfig(
        seed=seed,
        fee_bps=fee_bps,
        asset_x=bytes_to_hex(asset_x),
        asset_y=bytes_to_hex(asset_y),
        pool_id=bytes_to_hex(pool_id),
        share_asset=bytes_to_hex(share_asset),
        authority=bytes_to_hex(authority) if has_authority else None,
        locked=bool(locked),
    )
    state = PoolState(reserve_x=reserve_x, reserve_y=reserve_y, total_shares=total_shares)
    return _validated(PoolRecord(config=config, state=state))
