# [TESTER] v1

from __future__ import annotations

from dataclasses import replace

import pytest

from cpamm.core.errors import DuplicatePool, InvalidAmount, InvalidFee, InvalidPoolConfig, Overflow, PoolNotFound
from cpamm.state.pools import (
    PoolConfig,
    PoolRecord,
    PoolRegistry,
    PoolState,
    PoolStatus,
    SwapDirection,
    compute_pool_id,
    compute_share_asset,
)


ASSET_X = "0x" + "11" * 32
ASSET_Y = "0x" + "22" * 32


def _record(seed: int = 1) -> PoolRecord:
    return PoolRecord(
        config=PoolConfig.create(seed=seed, fee_bps=30, asset_x=ASSET_X, asset_y=ASSET_Y),
        state=PoolState(),
    )


def test_pool_id_is_deterministic_per_seed() -> None:
    assert compute_pool_id(1) == compute_pool_id(1)
    assert compute_pool_id(1) != compute_pool_id(2)
    assert compute_pool_id(0).startswith("0x")
    assert len(compute_pool_id(0)) == 66


def test_share_asset_is_derived_from_pool_id() -> None:
    c = PoolConfig.create(seed=9, fee_bps=30, asset_x=ASSET_X, asset_y=ASSET_Y)
    assert c.share_asset == compute_share_asset(c.pool_id)
    assert c.share_asset not in (c.pool_id, ASSET_X, ASSET_Y)


def test_config_rejects_mismatched_pool_id() -> None:
    c = PoolConfig.create(seed=1, fee_bps=30, asset_x=ASSET_X, asset_y=ASSET_Y)
    with pytest.raises(InvalidPoolConfig):
        replace(c, seed=2)


def test_config_rejects_bad_fee() -> None:
    with pytest.raises(InvalidFee):
        PoolConfig.create(seed=1, fee_bps=10_001, asset_x=ASSET_X, asset_y=ASSET_Y)


def test_config_assets_for_direction() -> None:
    c = PoolConfig.create(seed=1, fee_bps=30, asset_x=ASSET_X, asset_y=ASSET_Y)
    assert c.assets_for(SwapDirection.X_TO_Y) == (ASSET_X, ASSET_Y)
    assert c.assets_for(SwapDirection.Y_TO_X) == (ASSET_Y, ASSET_X)
    assert SwapDirection.from_is_x(True) is SwapDirection.X_TO_Y
    assert SwapDirection.from_is_x(False) is SwapDirection.Y_TO_X


def test_state_validates_widths() -> None:
    with pytest.raises(InvalidAmount):
        PoolState(reserve_x=-1)
    with pytest.raises(Overflow):
        PoolState(total_shares=1 << 64)


def test_state_swap_reserves() -> None:
    s = PoolState(10, 20, 5)
    assert s.reserves_for(SwapDirection.Y_TO_X) == (20, 10)
    assert s.with_swap_reserves(SwapDirection.Y_TO_X, 25, 8) == PoolState(8, 25, 5)
    assert s.with_swap_reserves(SwapDirection.X_TO_Y, 12, 17) == PoolState(12, 17, 5)


def test_registry_lifecycle() -> None:
    reg = PoolRegistry()
    assert reg.status(1) is PoolStatus.UNINITIALIZED
    with pytest.raises(PoolNotFound):
        reg.get(1)

    rec = _record(1)
    reg.insert(rec)
    assert 1 in reg
    assert len(reg) == 1
    assert reg.status(1) is PoolStatus.ACTIVE
    with pytest.raises(DuplicatePool):
        reg.insert(_record(1))

    locked = replace(rec, config=replace(rec.config, locked=True))
    reg.commit(locked)
    assert reg.status(1) is PoolStatus.LOCKED


def test_registry_commit_requires_existing_pool() -> None:
    with pytest.raises(PoolNotFound):
        PoolRegistry().commit(_record(3))


def test_registry_items_sorted_by_seed() -> None:
    reg = PoolRegistry()
    for seed in (5, 1, 3):
        reg.insert(_record(seed))
    assert reg.seeds() == [1, 3, 5]
    assert [seed for seed, _ in reg.items()] == [1, 3, 5]
