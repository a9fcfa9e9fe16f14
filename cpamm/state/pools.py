"""
Pool identity, pool accounting, and the registry that owns them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, unique
from typing import Dict, Iterator, Optional, Tuple

from ..core.amounts import AMOUNT_BITS, U64_MAX, require_amount
from ..core.errors import DuplicatePool, InvalidFee, InvalidPoolConfig, PoolNotFound
from .balances import AssetId, Owner
from .canonical import hex32_to_bytes, tagged_digest_hex, u64_le


BPS_DENOM = 10_000


@unique
class PoolStatus(Enum):
    """Implicit pool lifecycle states."""
    UNINITIALIZED = "UNINITIALIZED"
    ACTIVE = "ACTIVE"
    LOCKED = "LOCKED"


@unique
class SwapDirection(Enum):
    """Which reserve receives the input."""
    X_TO_Y = "X_TO_Y"
    Y_TO_X = "Y_TO_X"

    @classmethod
    def from_is_x(cls, is_x: bool) -> "SwapDirection":
        return cls.X_TO_Y if is_x else cls.Y_TO_X


def compute_pool_id(seed: int) -> str:
    """
    Deterministic pool id for a seed:
        pool_id = H("cpamm:pool:v1\\x00" || seed_le_u64)
    """
    if not isinstance(seed, int) or isinstance(seed, bool) or not (0 <= seed <= U64_MAX):
        raise InvalidPoolConfig(f"seed must be an unsigned 64-bit int: {seed!r}")
    return tagged_digest_hex("pool", u64_le(seed))


def compute_share_asset(pool_id: str) -> AssetId:
    """Share asset id derived from the pool id (one share asset per pool)."""
    return tagged_digest_hex("share", hex32_to_bytes(pool_id, name="pool_id"))


@dataclass(frozen=True)
class PoolConfig:
    """
    Immutable identity and policy of a pool.

    Attributes:
        seed: u64 discriminator between pools over the same pair
        fee_bps: swap fee in basis points (0-10000)
        asset_x: first pooled asset
        asset_y: second pooled asset (must differ from asset_x)
        pool_id: derived from seed; owner of the pool's holding accounts
        share_asset: liquidity-share asset minted/burned by this pool
        authority: account allowed to lock/unlock, or None (never lockable)
        locked: when True every mutation except lock toggling is rejected
    """
    seed: int
    fee_bps: int
    asset_x: AssetId
    asset_y: AssetId
    pool_id: str
    share_asset: AssetId
    authority: Optional[Owner] = None
    locked: bool = False

    def __post_init__(self):
        if not isinstance(self.fee_bps, int) or isinstance(self.fee_bps, bool):
            raise TypeError("fee_bps must be an int")
        if not (0 <= self.fee_bps <= BPS_DENOM):
            raise InvalidFee(f"fee_bps must be in [0, {BPS_DENOM}]: {self.fee_bps}")
        if self.pool_id != compute_pool_id(self.seed):
            raise InvalidPoolConfig(f"pool_id does not match seed {self.seed}")
        if self.share_asset != compute_share_asset(self.pool_id):
            raise InvalidPoolConfig(f"share_asset is not derived from pool_id for seed {self.seed}")
        if self.asset_x == self.asset_y:
            raise InvalidPoolConfig(f"pool assets must differ: {self.asset_x}")
        if self.share_asset in (self.asset_x, self.asset_y):
            raise InvalidPoolConfig("share asset must differ from the pooled assets")

    @classmethod
    def create(
        cls,
        *,
        seed: int,
        fee_bps: int,
        asset_x: AssetId,
        asset_y: AssetId,
        authority: Optional[Owner] = None,
    ) -> "PoolConfig":
        pool_id = compute_pool_id(seed)
        return cls(
            seed=seed,
            fee_bps=fee_bps,
            asset_x=asset_x,
            asset_y=asset_y,
            pool_id=pool_id,
            share_asset=compute_share_asset(pool_id),
            authority=authority,
            locked=False,
        )

    def assets_for(self, direction: SwapDirection) -> Tuple[AssetId, AssetId]:
        """(asset_in, asset_out) for a swap direction."""
        if direction is SwapDirection.X_TO_Y:
            return self.asset_x, self.asset_y
        return self.asset_y, self.asset_x


@dataclass(frozen=True)
class PoolState:
    """
    Live accounting of a pool.

    The `reserve_x == reserve_y == 0 <=> total_shares == 0` relation is checked
    by `cpamm.core.invariants`, not here, so transient candidates can be inspected.
    """
    reserve_x: int = 0
    reserve_y: int = 0
    total_shares: int = 0

    def __post_init__(self):
        for name in ("reserve_x", "reserve_y", "total_shares"):
            require_amount(name, getattr(self, name), bits=AMOUNT_BITS)

    @property
    def is_empty(self) -> bool:
        return self.total_shares == 0

    def get_constant_product(self) -> int:
        return self.reserve_x * self.reserve_y

    def reserves_for(self, direction: SwapDirection) -> Tuple[int, int]:
        """(reserve_in, reserve_out) for a swap direction."""
        if direction is SwapDirection.X_TO_Y:
            return self.reserve_x, self.reserve_y
        return self.reserve_y, self.reserve_x

    def with_swap_reserves(self, direction: SwapDirection, reserve_in: int, reserve_out: int) -> "PoolState":
        if direction is SwapDirection.X_TO_Y:
            return replace(self, reserve_x=reserve_in, reserve_y=reserve_out)
        return replace(self, reserve_x=reserve_out, reserve_y=reserve_in)


@dataclass(frozen=True)
class PoolRecord:
    """One registry entry: configuration plus accounting."""
    config: PoolConfig
    state: PoolState

    @property
    def status(self) -> PoolStatus:
        return PoolStatus.LOCKED if self.config.locked else PoolStatus.ACTIVE

    def __repr__(self) -> str:
        return (
            f"PoolRecord(seed={self.config.seed}, pool_id={self.config.pool_id[:18]}..., "
            f"reserves=({self.state.reserve_x}, {self.state.reserve_y}), "
            f"total_shares={self.state.total_shares}, status={self.status.value})"
        )


class PoolRegistry:
    """
    Arena of pool records keyed by seed.

    Records are immutable; a transition replaces the whole record in one
    assignment, so readers never observe a half-applied update.
    """

    def __init__(self) -> None:
        self._records: Dict[int, PoolRecord] = {}

    def find(self, seed: int) -> Optional[PoolRecord]:
        return self._records.get(seed)

    def get(self, seed: int) -> PoolRecord:
        record = self._records.get(seed)
        if record is None:
            raise PoolNotFound(f"no pool initialized for seed {seed}")
        return record

    def status(self, seed: int) -> PoolStatus:
        record = self._records.get(seed)
        if record is None:
            return PoolStatus.UNINITIALIZED
        return record.status

    def insert(self, record: PoolRecord) -> None:
        seed = record.config.seed
        if seed in self._records:
            raise DuplicatePool(f"pool already initialized for seed {seed}")
        self._records[seed] = record

    def commit(self, record: PoolRecord) -> None:
        seed = record.config.seed
        current = self.get(seed)
        if current.config.pool_id != record.config.pool_id:
            raise InvalidPoolConfig(f"pool identity changed for seed {seed}")
        self._records[seed] = record

    def seeds(self) -> list[int]:
        return sorted(self._records)

    def items(self) -> Iterator[Tuple[int, PoolRecord]]:
        for seed in self.seeds():
            yield seed, self._records[seed]

    def __contains__(self, seed: object) -> bool:
        return seed in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"PoolRegistry({len(self._records)} pools)"
