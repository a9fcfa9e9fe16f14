"""
Constant-product swap kernel (v1 semantics).

- The fee is charged on the input with floor rounding:
      net_in = floor(amount_in * (10_000 - fee_bps) / 10_000)
- Pricing uses the fee-reduced input:
      amount_out = reserve_out - floor(reserve_in * reserve_out / (reserve_in + net_in))
- The *full* `amount_in` is credited to `reserve_in`, so the fee stays in the pool.
- `amount_out` is capped so that `k_after >= k_before` always holds, and
  `k_after > k_before` whenever `fee_bps > 0`. The cap only binds on very
  shallow pools; on realistic reserves the formula above is returned as-is.

All intermediate products are formed in 128 bits; reserves and amounts are u64.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...core.amounts import (
    AMOUNT_BITS,
    ceil_div,
    checked_add,
    checked_mul,
    checked_sub,
    floor_div,
    mul_div_floor,
    require_amount,
)
from ...core.errors import InsufficientLiquidity, InvalidAmount, InvalidFee, InvariantViolation


BPS_DENOM = 10_000


@dataclass(frozen=True)
class SwapExactInResult:
    amount_in: int
    net_in: int
    fee_amount: int
    amount_out: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int


def require_fee_bps(fee_bps: int) -> int:
    if not isinstance(fee_bps, int) or isinstance(fee_bps, bool):
        raise TypeError("fee_bps must be an int")
    if not (0 <= fee_bps <= BPS_DENOM):
        raise InvalidFee(f"fee_bps must be in [0, {BPS_DENOM}]: {fee_bps}")
    return fee_bps


def compute_net_in(*, amount_in: int, fee_bps: int, bits: int = AMOUNT_BITS) -> int:
    """`floor(amount_in * (10_000 - fee_bps) / 10_000)`."""
    require_amount("amount_in", amount_in, bits=bits)
    require_fee_bps(fee_bps)
    return mul_div_floor(amount_in, BPS_DENOM - fee_bps, BPS_DENOM, bits=bits)


def max_amount_out_preserving_k(
    *,
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    strict: bool,
    bits: int = AMOUNT_BITS,
) -> int:
    """
    Largest output for which `(reserve_in + amount_in) * (reserve_out - out)` stays
    `>= k` (or `> k` when `strict`).
    """
    k = checked_mul(reserve_in, reserve_out, bits=2 * bits)
    x_after = checked_add(reserve_in, amount_in, bits=bits)
    if strict:
        y_min = floor_div(k, x_after) + 1
    else:
        y_min = ceil_div(k, x_after)
    if y_min > reserve_out:
        return 0
    return reserve_out - y_min


def swap_exact_in(
    *,
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_bps: int,
    bits: int = AMOUNT_BITS,
) -> SwapExactInResult:
    """
    Exact-in swap quote + post-state.

    Raises:
        InvalidAmount: `amount_in == 0`
        InvalidFee: fee outside `[0, 10_000]`
        InsufficientLiquidity: either reserve is empty, or the output would drain the pool
        Overflow: the credited input reserve does not fit the amount width
        InvariantViolation: the post-swap product would be below the pre-swap product
    """
    require_amount("reserve_in", reserve_in, bits=bits)
    require_amount("reserve_out", reserve_out, bits=bits)
    require_amount("amount_in", amount_in, bits=bits)
    require_fee_bps(fee_bps)

    if amount_in == 0:
        raise InvalidAmount("amount_in must be positive")
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity("cannot swap against an empty reserve")

    new_reserve_in = checked_add(reserve_in, amount_in, bits=bits)
    k_before = checked_mul(reserve_in, reserve_out, bits=2 * bits)

    net_in = compute_net_in(amount_in=amount_in, fee_bps=fee_bps, bits=bits)
    priced_in = checked_add(reserve_in, net_in, bits=bits)
    amount_out = reserve_out - floor_div(k_before, priced_in)

    cap = max_amount_out_preserving_k(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_in=amount_in,
        strict=fee_bps > 0,
        bits=bits,
    )
    amount_out = min(amount_out, cap)

    if amount_out >= reserve_out:
        raise InsufficientLiquidity(f"amount_out {amount_out} would drain reserve_out {reserve_out}")

    new_reserve_out = checked_sub(reserve_out, amount_out, bits=bits)
    k_after = checked_mul(new_reserve_in, new_reserve_out, bits=2 * bits)
    if k_after < k_before:
        raise InvariantViolation(["swap_product_non_decreasing"])

    return SwapExactInResult(
        amount_in=amount_in,
        net_in=net_in,
        fee_amount=amount_in - net_in,
        amount_out=amount_out,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
        k_before=k_before,
        k_after=k_after,
    )
