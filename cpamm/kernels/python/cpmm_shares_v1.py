"""
Liquidity-share kernel (v1 semantics).

Rounding always favours the pool:
- deposits pay `ceil(shares * reserve / total_shares)` of each asset,
- withdrawals receive `floor(shares * reserve / total_shares)` of each asset.

The first deposit into an empty pool takes the caller's amounts and share
count verbatim (no geometric-mean pricing, no locked minimum).
"""

from __future__ import annotations

from dataclasses import dataclass

from ...core.amounts import AMOUNT_BITS, checked_add, checked_sub, mul_div_ceil, mul_div_floor, require_amount
from ...core.errors import InvalidAmount


@dataclass(frozen=True)
class DepositSharesResult:
    required_x: int
    required_y: int
    minted_shares: int
    new_reserve_x: int
    new_reserve_y: int
    new_total_shares: int


@dataclass(frozen=True)
class WithdrawSharesResult:
    out_x: int
    out_y: int
    burned_shares: int
    new_reserve_x: int
    new_reserve_y: int
    new_total_shares: int


def _require_all(bits: int, **values: int) -> None:
    for name, v in values.items():
        require_amount(name, v, bits=bits)


def deposit_initial(
    *,
    max_x: int,
    max_y: int,
    desired_shares: int,
    bits: int = AMOUNT_BITS,
) -> DepositSharesResult:
    """Seed an empty pool: uses `max_x`/`max_y` in full and mints `desired_shares`."""
    _require_all(bits, max_x=max_x, max_y=max_y, desired_shares=desired_shares)
    if max_x == 0 or max_y == 0 or desired_shares == 0:
        raise InvalidAmount(
            f"initial deposit requires nonzero amounts: max_x={max_x} max_y={max_y} shares={desired_shares}"
        )
    return DepositSharesResult(
        required_x=max_x,
        required_y=max_y,
        minted_shares=desired_shares,
        new_reserve_x=max_x,
        new_reserve_y=max_y,
        new_total_shares=desired_shares,
    )


def deposit_proportional(
    *,
    reserve_x: int,
    reserve_y: int,
    total_shares: int,
    desired_shares: int,
    bits: int = AMOUNT_BITS,
) -> DepositSharesResult:
    """Price `desired_shares` against the current reserves (ceil rounding)."""
    _require_all(
        bits,
        reserve_x=reserve_x,
        reserve_y=reserve_y,
        total_shares=total_shares,
        desired_shares=desired_shares,
    )
    if desired_shares == 0:
        raise InvalidAmount("desired_shares must be positive")

    required_x = mul_div_ceil(desired_shares, reserve_x, total_shares, bits=bits)
    required_y = mul_div_ceil(desired_shares, reserve_y, total_shares, bits=bits)

    return DepositSharesResult(
        required_x=required_x,
        required_y=required_y,
        minted_shares=desired_shares,
        new_reserve_x=checked_add(reserve_x, required_x, bits=bits),
        new_reserve_y=checked_add(reserve_y, required_y, bits=bits),
        new_total_shares=checked_add(total_shares, desired_shares, bits=bits),
    )


def withdraw_shares(
    *,
    reserve_x: int,
    reserve_y: int,
    total_shares: int,
    burn_shares: int,
    bits: int = AMOUNT_BITS,
) -> WithdrawSharesResult:
    """Burn `burn_shares` for a floor-rounded slice of both reserves."""
    _require_all(
        bits,
        reserve_x=reserve_x,
        reserve_y=reserve_y,
        total_shares=total_shares,
        burn_shares=burn_shares,
    )
    if burn_shares == 0:
        raise InvalidAmount("burn_shares must be positive")
    if burn_shares > total_shares:
        raise InvalidAmount(f"cannot burn more than total_shares: {burn_shares} > {total_shares}")

    out_x = mul_div_floor(burn_shares, reserve_x, total_shares, bits=bits)
    out_y = mul_div_floor(burn_shares, reserve_y, total_shares, bits=bits)

    return WithdrawSharesResult(
        out_x=out_x,
        out_y=out_y,
        burned_shares=burn_shares,
        new_reserve_x=checked_sub(reserve_x, out_x, bits=bits),
        new_reserve_y=checked_sub(reserve_y, out_y, bits=bits),
        new_total_shares=checked_sub(total_shares, burn_shares, bits=bits),
    )
