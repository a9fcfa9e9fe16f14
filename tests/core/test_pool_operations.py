"""Tests for cpamm/core/operations.py: pure pool transitions."""

from __future__ import annotations

import pytest

from cpamm.core import operations
from cpamm.core.errors import (
    DuplicatePool,
    InsufficientLiquidity,
    InvalidAmount,
    InvalidFee,
    InvalidPoolConfig,
    PoolLocked,
    SlippageExceeded,
    Unauthorized,
)
from cpamm.state.ledger import InstructionKind
from cpamm.state.pools import PoolRecord, PoolState, PoolStatus, SwapDirection


ASSET_X = "0x" + "11" * 32
ASSET_Y = "0x" + "22" * 32
ADMIN = "admin"
ALICE = "alice"


def _new_pool(fee_bps: int = 30, authority=None) -> PoolRecord:
    return operations.initialize(seed=7, fee_bps=fee_bps, asset_x=ASSET_X, asset_y=ASSET_Y, authority=authority)


def _funded_pool(x: int = 100_000_000, y: int = 100_000_000, shares: int = 100_000_000, **kw) -> PoolRecord:
    t = operations.deposit(_new_pool(**kw), user=ALICE, desired_shares=shares, max_x=x, max_y=y)
    return t.record


class TestInitialize:
    def test_creates_empty_unlocked_pool(self):
        r = _new_pool()
        assert r.state == PoolState(0, 0, 0)
        assert r.config.fee_bps == 30
        assert r.config.locked is False
        assert r.status is PoolStatus.ACTIVE

    def test_fee_bounds(self):
        assert _new_pool(fee_bps=0).config.fee_bps == 0
        assert _new_pool(fee_bps=10_000).config.fee_bps == 10_000
        with pytest.raises(InvalidFee):
            _new_pool(fee_bps=10_001)

    def test_max_fee_policy(self):
        with pytest.raises(InvalidFee):
            operations.initialize(seed=1, fee_bps=200, asset_x=ASSET_X, asset_y=ASSET_Y, max_fee_bps=100)

    def test_duplicate(self):
        existing = _new_pool()
        with pytest.raises(DuplicatePool):
            operations.initialize(seed=7, fee_bps=30, asset_x=ASSET_X, asset_y=ASSET_Y, existing=existing)

    def test_identical_assets(self):
        with pytest.raises(InvalidPoolConfig):
            operations.initialize(seed=1, fee_bps=30, asset_x=ASSET_X, asset_y=ASSET_X)

    def test_seed_must_be_u64(self):
        with pytest.raises(InvalidPoolConfig):
            operations.initialize(seed=-1, fee_bps=30, asset_x=ASSET_X, asset_y=ASSET_Y)
        with pytest.raises(InvalidPoolConfig):
            operations.initialize(seed=1 << 64, fee_bps=30, asset_x=ASSET_X, asset_y=ASSET_Y)


class TestDeposit:
    def test_first_deposit(self):
        t = operations.deposit(_new_pool(), user=ALICE, desired_shares=100_000_000, max_x=100_000_000, max_y=100_000_000)
        assert t.record.state == PoolState(100_000_000, 100_000_000, 100_000_000)
        assert t.result.minted_shares == 100_000_000
        kinds = [i.kind for i in t.instructions]
        assert kinds == [InstructionKind.TRANSFER, InstructionKind.TRANSFER, InstructionKind.MINT]
        assert t.instructions[0].source == ALICE
        assert t.instructions[0].dest == t.record.config.pool_id
        assert t.instructions[2].asset == t.record.config.share_asset

    def test_second_deposit_is_proportional(self):
        t = operations.deposit(_funded_pool(), user=ALICE, desired_shares=50_000_000, max_x=50_000_000, max_y=50_000_000)
        assert (t.result.required_x, t.result.required_y) == (50_000_000, 50_000_000)
        assert t.record.state == PoolState(150_000_000, 150_000_000, 150_000_000)

    def test_proportional_rounds_up(self):
        pool = _funded_pool(x=100, y=33, shares=10)
        t = operations.deposit(pool, user=ALICE, desired_shares=1, max_x=10, max_y=4)
        assert (t.result.required_x, t.result.required_y) == (10, 4)

    def test_slippage_leaves_record_untouched(self):
        pool = _funded_pool(x=100, y=33, shares=10)
        with pytest.raises(SlippageExceeded):
            operations.deposit(pool, user=ALICE, desired_shares=1, max_x=10, max_y=3)
        assert pool.state == PoolState(100, 33, 10)

    @pytest.mark.parametrize("shares,mx,my", [(0, 1, 1), (1, 0, 1), (1, 1, 0)])
    def test_zero_amounts_on_empty_pool(self, shares, mx, my):
        with pytest.raises(InvalidAmount):
            operations.deposit(_new_pool(), user=ALICE, desired_shares=shares, max_x=mx, max_y=my)

    def test_zero_shares_on_funded_pool(self):
        with pytest.raises(InvalidAmount):
            operations.deposit(_funded_pool(), user=ALICE, desired_shares=0, max_x=10, max_y=10)


class TestWithdraw:
    def test_rounds_down(self):
        pool = _funded_pool(x=100, y=33, shares=10)
        t = operations.withdraw(pool, user=ALICE, burn_shares=1, min_x=0, min_y=0)
        assert (t.result.out_x, t.result.out_y) == (10, 3)
        assert t.record.state == PoolState(90, 30, 9)
        kinds = [i.kind for i in t.instructions]
        assert kinds == [InstructionKind.BURN, InstructionKind.TRANSFER, InstructionKind.TRANSFER]

    def test_full_withdraw_empties_pool(self):
        t = operations.withdraw(_funded_pool(), user=ALICE, burn_shares=100_000_000, min_x=0, min_y=0)
        assert t.record.state.is_empty
        assert t.record.state == PoolState(0, 0, 0)

    def test_errors(self):
        pool = _funded_pool(x=100, y=33, shares=10)
        with pytest.raises(InvalidAmount):
            operations.withdraw(pool, user=ALICE, burn_shares=0, min_x=0, min_y=0)
        with pytest.raises(InvalidAmount):
            operations.withdraw(pool, user=ALICE, burn_shares=11, min_x=0, min_y=0)
        with pytest.raises(SlippageExceeded):
            operations.withdraw(pool, user=ALICE, burn_shares=1, min_x=11, min_y=0)

    def test_empty_pool(self):
        with pytest.raises(InsufficientLiquidity):
            operations.withdraw(_new_pool(), user=ALICE, burn_shares=1, min_x=0, min_y=0)
        with pytest.raises(InvalidAmount):
            operations.withdraw(_new_pool(), user=ALICE, burn_shares=0, min_x=0, min_y=0)


class TestSwap:
    def _pool(self) -> PoolRecord:
        pool = _funded_pool()
        return operations.deposit(pool, user=ALICE, desired_shares=50_000_000, max_x=50_000_000, max_y=50_000_000).record

    def test_x_to_y(self):
        t = operations.swap(self._pool(), user=ALICE, direction=SwapDirection.X_TO_Y, amount_in=10_000_000, min_amount_out=0)
        assert t.result.amount_out == 9_348_628
        assert t.result.asset_in == ASSET_X
        assert t.result.asset_out == ASSET_Y
        assert t.record.state == PoolState(160_000_000, 140_651_372, 150_000_000)

    def test_y_to_x_is_symmetric_on_balanced_pool(self):
        t = operations.swap(self._pool(), user=ALICE, direction=SwapDirection.Y_TO_X, amount_in=10_000_000, min_amount_out=0)
        assert t.result.amount_out == 9_348_628
        assert t.result.asset_in == ASSET_Y
        assert t.record.state == PoolState(140_651_372, 160_000_000, 150_000_000)
        assert t.instructions[0].asset == ASSET_Y
        assert t.instructions[1].dest == ALICE

    def test_slippage(self):
        pool = self._pool()
        with pytest.raises(SlippageExceeded):
            operations.swap(pool, user=ALICE, direction=SwapDirection.X_TO_Y, amount_in=10_000_000, min_amount_out=9_348_629)
        assert pool.state == PoolState(150_000_000, 150_000_000, 150_000_000)

    def test_zero_amount_checked_before_liquidity(self):
        with pytest.raises(InvalidAmount):
            operations.swap(_new_pool(), user=ALICE, direction=SwapDirection.X_TO_Y, amount_in=0, min_amount_out=0)

    def test_empty_pool(self):
        with pytest.raises(InsufficientLiquidity):
            operations.swap(_new_pool(), user=ALICE, direction=SwapDirection.X_TO_Y, amount_in=1, min_amount_out=0)

    def test_direction_type(self):
        with pytest.raises(TypeError):
            operations.swap(self._pool(), user=ALICE, direction=True, amount_in=1, min_amount_out=0)

    def test_product_strictly_increases_with_fee(self):
        pool = self._pool()
        t = operations.swap(pool, user=ALICE, direction=SwapDirection.X_TO_Y, amount_in=10_000_000, min_amount_out=0)
        assert t.record.state.get_constant_product() > pool.state.get_constant_product()


class TestLocking:
    def test_lock_blocks_mutations(self):
        pool = _funded_pool(authority=ADMIN)
        locked = operations.set_locked(pool, caller=ADMIN, locked=True)
        assert locked.status is PoolStatus.LOCKED
        with pytest.raises(PoolLocked):
            operations.deposit(locked, user=ALICE, desired_shares=1, max_x=10, max_y=10)
        with pytest.raises(PoolLocked):
            operations.withdraw(locked, user=ALICE, burn_shares=0, min_x=0, min_y=0)
        with pytest.raises(PoolLocked):
            operations.swap(locked, user=ALICE, direction=SwapDirection.X_TO_Y, amount_in=0, min_amount_out=0)

    def test_unlock(self):
        pool = operations.set_locked(_funded_pool(authority=ADMIN), caller=ADMIN, locked=True)
        unlocked = operations.set_locked(pool, caller=ADMIN, locked=False)
        assert unlocked.config.locked is False
        operations.swap(unlocked, user=ALICE, direction=SwapDirection.X_TO_Y, amount_in=1_000, min_amount_out=1)

    def test_only_authority(self):
        with pytest.raises(Unauthorized):
            operations.set_locked(_funded_pool(authority=ADMIN), caller=ALICE, locked=True)
        with pytest.raises(Unauthorized):
            operations.set_locked(_funded_pool(), caller=ADMIN, locked=True)
