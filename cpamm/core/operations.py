"""
Pool operations (functional core).

Each operation takes one immutable `PoolRecord` snapshot plus caller inputs and
returns a `PoolTransition`: the candidate next record, the ledger instructions
that must succeed for it to be committed, and the realized amounts. Nothing is
mutated here; `cpamm.integration.pool_engine` is the imperative shell that
executes the instructions and commits the record.

Validation order per operation:
1. pool is unlocked
2. argument domains (zero amounts, bounds)
3. curve arithmetic (slippage, liquidity, overflow)
4. post-state invariants
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple, Union

from ..state.balances import AssetId, Owner
from ..state.ledger import LedgerInstruction
from ..state.pools import BPS_DENOM, PoolConfig, PoolRecord, PoolState, SwapDirection
from . import curve
from .amounts import checked_add, checked_sub, require_amount
from .errors import (
    DuplicatePool,
    InsufficientLiquidity,
    InvalidAmount,
    InvalidFee,
    InvariantViolation,
    PoolLocked,
    Unauthorized,
)
from .invariants import check_all, share_value_not_diluted, shares_unchanged_by_swap, swap_product_non_decreasing


@dataclass(frozen=True)
class DepositResult:
    required_x: int
    required_y: int
    minted_shares: int


@dataclass(frozen=True)
class WithdrawResult:
    out_x: int
    out_y: int
    burned_shares: int


@dataclass(frozen=True)
class SwapResult:
    direction: SwapDirection
    asset_in: AssetId
    asset_out: AssetId
    amount_in: int
    amount_out: int


OperationResult = Union[DepositResult, WithdrawResult, SwapResult]


@dataclass(frozen=True)
class PoolTransition:
    record: PoolRecord
    instructions: Tuple[LedgerInstruction, ...]
    result: OperationResult


def _require_unlocked(config: PoolConfig) -> None:
    if config.locked:
        raise PoolLocked(f"pool {config.seed} is locked")


def _finalize(
    pre: PoolRecord,
    post_state: PoolState,
    instructions: Tuple[LedgerInstruction, ...],
    result: OperationResult,
    transition_checks: Tuple[Tuple[str, Callable[[PoolState, PoolState], bool]], ...] = (),
) -> PoolTransition:
    violations = check_all(pre.config, post_state)
    violations.extend(name for name, fn in transition_checks if not fn(pre.state, post_state))
    if violations:
        raise InvariantViolation(violations)
    return PoolTransition(
        record=replace(pre, state=post_state),
        instructions=instructions,
        result=result,
    )


def initialize(
    *,
    seed: int,
    fee_bps: int,
    asset_x: AssetId,
    asset_y: AssetId,
    authority: Optional[Owner] = None,
    existing: Optional[PoolRecord] = None,
    max_fee_bps: int = BPS_DENOM,
) -> PoolRecord:
    """
    Create an empty, unlocked pool record.

    Raises:
        InvalidFee: `fee_bps` outside `[0, max_fee_bps]`
        DuplicatePool: `existing` is already initialized for this seed
        InvalidPoolConfig: bad seed or identical assets
    """
    if not isinstance(fee_bps, int) or isinstance(fee_bps, bool):
        raise TypeError("fee_bps must be an int")
    if not (0 <= fee_bps <= min(max_fee_bps, BPS_DENOM)):
        raise InvalidFee(f"fee_bps must be in [0, {min(max_fee_bps, BPS_DENOM)}]: {fee_bps}")
    if existing is not None:
        raise DuplicatePool(f"pool already initialized for seed {seed}")

    config = PoolConfig.create(
        seed=seed,
        fee_bps=fee_bps,
        asset_x=asset_x,
        asset_y=asset_y,
        authority=authority,
    )
    state = PoolState()
    violations = check_all(config, state)
    if violations:
        raise InvariantViolation(violations)
    return PoolRecord(config=config, state=state)


def deposit(
    record: PoolRecord,
    *,
    user: Owner,
    desired_shares: int,
    max_x: int,
    max_y: int,
) -> PoolTransition:
    """
    Mint `desired_shares` to `user` against at most `max_x`/`max_y`.

    An empty pool takes `max_x`/`max_y` verbatim; otherwise the required amounts
    are the ceil-rounded proportional slice of the reserves.
    """
    config, state = record.config, record.state
    _require_unlocked(config)

    if state.total_shares == 0:
        required_x, required_y, minted = curve.initial_deposit(max_x, max_y, desired_shares)
    else:
        required_x, required_y = curve.proportional_deposit(
            state.reserve_x,
            state.reserve_y,
            state.total_shares,
            desired_shares,
            max_x,
            max_y,
        )
        minted = desired_shares

    post_state = PoolState(
        reserve_x=checked_add(state.reserve_x, required_x),
        reserve_y=checked_add(state.reserve_y, required_y),
        total_shares=checked_add(state.total_shares, minted),
    )
    instructions = (
        LedgerInstruction.transfer(config.asset_x, user, config.pool_id, required_x),
        LedgerInstruction.transfer(config.asset_y, user, config.pool_id, required_y),
        LedgerInstruction.mint(config.share_asset, user, minted),
    )
    return _finalize(
        record,
        post_state,
        instructions,
        DepositResult(required_x=required_x, required_y=required_y, minted_shares=minted),
        (("share_value_not_diluted", share_value_not_diluted),),
    )


def withdraw(
    record: PoolRecord,
    *,
    user: Owner,
    burn_shares: int,
    min_x: int,
    min_y: int,
) -> PoolTransition:
    """Burn `burn_shares` from `user` for a floor-rounded slice of both reserves."""
    config, state = record.config, record.state
    _require_unlocked(config)

    if burn_shares == 0:
        raise InvalidAmount("burn_shares must be positive")
    if state.total_shares == 0:
        raise InsufficientLiquidity(f"pool {config.seed} has no outstanding shares")

    out_x, out_y = curve.withdraw(
        state.reserve_x,
        state.reserve_y,
        state.total_shares,
        burn_shares,
        min_x,
        min_y,
    )
    post_state = PoolState(
        reserve_x=checked_sub(state.reserve_x, out_x),
        reserve_y=checked_sub(state.reserve_y, out_y),
        total_shares=checked_sub(state.total_shares, burn_shares),
    )
    instructions = (
        LedgerInstruction.burn(config.share_asset, user, burn_shares),
        LedgerInstruction.transfer(config.asset_x, config.pool_id, user, out_x),
        LedgerInstruction.transfer(config.asset_y, config.pool_id, user, out_y),
    )
    return _finalize(
        record,
        post_state,
        instructions,
        WithdrawResult(out_x=out_x, out_y=out_y, burned_shares=burn_shares),
        (("share_value_not_diluted", share_value_not_diluted),),
    )


def swap(
    record: PoolRecord,
    *,
    user: Owner,
    direction: SwapDirection,
    amount_in: int,
    min_amount_out: int,
    reject_zero_output: bool = True,
) -> PoolTransition:
    """Exact-in swap of `amount_in` in `direction`, paying at least `min_amount_out`."""
    config, state = record.config, record.state
    _require_unlocked(config)
    if not isinstance(direction, SwapDirection):
        raise TypeError(f"direction must be a SwapDirection, got {direction!r}")

    require_amount("amount_in", amount_in)
    if amount_in == 0:
        raise InvalidAmount("amount_in must be positive")
    if state.total_shares == 0:
        raise InsufficientLiquidity(f"pool {config.seed} is empty")

    reserve_in, reserve_out = state.reserves_for(direction)
    asset_in, asset_out = config.assets_for(direction)

    amount_out = curve.swap(
        reserve_in,
        reserve_out,
        config.fee_bps,
        amount_in,
        min_amount_out,
        reject_zero_output=reject_zero_output,
    )
    post_state = state.with_swap_reserves(
        direction,
        checked_add(reserve_in, amount_in),
        checked_sub(reserve_out, amount_out),
    )
    instructions = (
        LedgerInstruction.transfer(asset_in, user, config.pool_id, amount_in),
        LedgerInstruction.transfer(asset_out, config.pool_id, user, amount_out),
    )

    def _product(pre: PoolState, post: PoolState) -> bool:
        return swap_product_non_decreasing(pre, post, fee_bps=config.fee_bps)

    return _finalize(
        record,
        post_state,
        instructions,
        SwapResult(
            direction=direction,
            asset_in=asset_in,
            asset_out=asset_out,
            amount_in=amount_in,
            amount_out=amount_out,
        ),
        (
            ("swap_product_non_decreasing", _product),
            ("shares_unchanged_by_swap", shares_unchanged_by_swap),
        ),
    )


def set_locked(record: PoolRecord, *, caller: Owner, locked: bool) -> PoolRecord:
    """
    Lock or unlock a pool. Only the configured authority may do this; a pool
    created without an authority can never be locked.
    """
    authority = record.config.authority
    if authority is None or caller != authority:
        raise Unauthorized(f"{caller!r} is not the authority of pool {record.config.seed}")
    return replace(record, config=replace(record.config, locked=bool(locked)))
