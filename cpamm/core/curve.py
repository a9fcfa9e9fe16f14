"""
Constant-product curve engine.

Pure, state-free functions over explicit reserves and share supply. Same inputs
always produce the same outputs; nothing here mutates anything.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per call
- Invariant: after each swap, x' * y' >= x * y (strictly when fee_bps > 0)
- Rounding: deposits round up, withdrawals and swap outputs round down
"""

from typing import Tuple

from ..kernels.python.cpmm_shares_v1 import deposit_initial as _kernel_deposit_initial
from ..kernels.python.cpmm_shares_v1 import deposit_proportional as _kernel_deposit_proportional
from ..kernels.python.cpmm_shares_v1 import withdraw_shares as _kernel_withdraw_shares
from ..kernels.python.cpmm_swap_v1 import swap_exact_in as _kernel_swap_exact_in
from ..kernels.python.cpmm_swap_v1 import SwapExactInResult
from .amounts import AMOUNT_BITS, require_amount
from .errors import SlippageExceeded


def initial_deposit(max_x: int, max_y: int, desired_shares: int) -> Tuple[int, int, int]:
    """
    First deposit into an empty pool.

    Returns:
        (required_x, required_y, minted_shares) == (max_x, max_y, desired_shares)

    Raises:
        InvalidAmount: if any argument is zero
    """
    r = _kernel_deposit_initial(max_x=max_x, max_y=max_y, desired_shares=desired_shares)
    return r.required_x, r.required_y, r.minted_shares


def proportional_deposit(
    reserve_x: int,
    reserve_y: int,
    total_shares: int,
    desired_shares: int,
    max_x: int,
    max_y: int,
) -> Tuple[int, int]:
    """
    Amounts required to mint `desired_shares` into a non-empty pool.

        required_x = ceil(desired_shares * reserve_x / total_shares)
        required_y = ceil(desired_shares * reserve_y / total_shares)

    Raises:
        InvalidAmount: `desired_shares == 0`
        SlippageExceeded: `required_x > max_x` or `required_y > max_y`
    """
    require_amount("max_x", max_x)
    require_amount("max_y", max_y)
    r = _kernel_deposit_proportional(
        reserve_x=reserve_x,
        reserve_y=reserve_y,
        total_shares=total_shares,
        desired_shares=desired_shares,
    )
    if r.required_x > max_x:
        raise SlippageExceeded(f"required_x ({r.required_x}) > max_x ({max_x})")
    if r.required_y > max_y:
        raise SlippageExceeded(f"required_y ({r.required_y}) > max_y ({max_y})")
    return r.required_x, r.required_y


def withdraw(
    reserve_x: int,
    reserve_y: int,
    total_shares: int,
    burn_shares: int,
    min_x: int,
    min_y: int,
) -> Tuple[int, int]:
    """
    Amounts returned for burning `burn_shares`.

        out_x = floor(burn_shares * reserve_x / total_shares)
        out_y = floor(burn_shares * reserve_y / total_shares)

    Raises:
        InvalidAmount: `burn_shares == 0` or `burn_shares > total_shares`
        SlippageExceeded: `out_x < min_x` or `out_y < min_y`
    """
    require_amount("min_x", min_x)
    require_amount("min_y", min_y)
    r = _kernel_withdraw_shares(
        reserve_x=reserve_x,
        reserve_y=reserve_y,
        total_shares=total_shares,
        burn_shares=burn_shares,
    )
    if r.out_x < min_x:
        raise SlippageExceeded(f"out_x ({r.out_x}) < min_x ({min_x})")
    if r.out_y < min_y:
        raise SlippageExceeded(f"out_y ({r.out_y}) < min_y ({min_y})")
    return r.out_x, r.out_y


def quote_swap(
    reserve_in: int,
    reserve_out: int,
    fee_bps: int,
    amount_in: int,
    *,
    bits: int = AMOUNT_BITS,
) -> SwapExactInResult:
    """Full swap quote (no bound checks); see `cpmm_swap_v1.swap_exact_in`."""
    return _kernel_swap_exact_in(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_in=amount_in,
        fee_bps=fee_bps,
        bits=bits,
    )


def swap(
    reserve_in: int,
    reserve_out: int,
    fee_bps: int,
    amount_in: int,
    min_amount_out: int,
    *,
    reject_zero_output: bool = True,
) -> int:
    """
    Output amount for an exact-in swap.

        net_in = floor(amount_in * (10_000 - fee_bps) / 10_000)
        amount_out = reserve_out - floor(reserve_in * reserve_out / (reserve_in + net_in))

    The caller credits the full `amount_in` to `reserve_in`; that is what keeps
    the fee inside the pool.

    Raises:
        InvalidAmount: `amount_in == 0`
        SlippageExceeded: `amount_out < min_amount_out` (or a zero output)
        InsufficientLiquidity: empty reserve, or the output would drain the pool
    """
    require_amount("min_amount_out", min_amount_out)
    r = quote_swap(reserve_in, reserve_out, fee_bps, amount_in)
    if reject_zero_output and r.amount_out == 0:
        raise SlippageExceeded("amount_out is zero (trade too small)")
    if r.amount_out < min_amount_out:
        raise SlippageExceeded(f"amount_out ({r.amount_out}) < min_amount_out ({min_amount_out})")
    return r.amount_out
