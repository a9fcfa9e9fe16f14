"""Invariant checkers for pool records.

Each function returns True when the invariant holds; `check_all()` returns the
list of violated invariant ids (empty = all pass). Transition checks compare a
pre-state with a candidate post-state.
"""

from __future__ import annotations

from typing import Callable

from ..state.pools import BPS_DENOM, PoolConfig, PoolState
from .amounts import U64_MAX


def inv_reserves_fit_u64(c: PoolConfig, s: PoolState) -> bool:
    return 0 <= s.reserve_x <= U64_MAX and 0 <= s.reserve_y <= U64_MAX


def inv_shares_fit_u64(c: PoolConfig, s: PoolState) -> bool:
    return 0 <= s.total_shares <= U64_MAX


def inv_empty_iff_no_shares(c: PoolConfig, s: PoolState) -> bool:
    reserves_empty = s.reserve_x == 0 and s.reserve_y == 0
    return reserves_empty == (s.total_shares == 0)


def inv_backed_reserves_nonzero(c: PoolConfig, s: PoolState) -> bool:
    if s.total_shares == 0:
        return True
    return s.reserve_x > 0 and s.reserve_y > 0


def inv_fee_in_range(c: PoolConfig, s: PoolState) -> bool:
    return 0 <= c.fee_bps <= BPS_DENOM


def inv_assets_distinct(c: PoolConfig, s: PoolState) -> bool:
    return len({c.asset_x, c.asset_y, c.share_asset}) == 3


INVARIANT_REGISTRY: dict[str, Callable[[PoolConfig, PoolState], bool]] = {
    "inv_reserves_fit_u64": inv_reserves_fit_u64,
    "inv_shares_fit_u64": inv_shares_fit_u64,
    "inv_empty_iff_no_shares": inv_empty_iff_no_shares,
    "inv_backed_reserves_nonzero": inv_backed_reserves_nonzero,
    "inv_fee_in_range": inv_fee_in_range,
    "inv_assets_distinct": inv_assets_distinct,
}


def check_all(config: PoolConfig, state: PoolState) -> list[str]:
    """Return the ids of all violated invariants (empty list = all pass)."""
    return [name for name, fn in INVARIANT_REGISTRY.items() if not fn(config, state)]


# -- Transition checks -------------------------------------------------------

def swap_product_non_decreasing(pre: PoolState, post: PoolState, *, fee_bps: int) -> bool:
    """`x' * y' >= x * y`, strictly when a fee is charged."""
    k_before = pre.get_constant_product()
    k_after = post.get_constant_product()
    if fee_bps > 0:
        return k_after > k_before
    return k_after >= k_before


def shares_unchanged_by_swap(pre: PoolState, post: PoolState) -> bool:
    return pre.total_shares == post.total_shares


def share_value_not_diluted(pre: PoolState, post: PoolState) -> bool:
    """
    Reserve per share never decreases for remaining holders:
        post.reserve / post.shares >= pre.reserve / pre.shares (both assets)
    Vacuous when either side has no shares.
    """
    if pre.total_shares == 0 or post.total_shares == 0:
        return True
    return (
        post.reserve_x * pre.total_shares >= pre.reserve_x * post.total_shares
        and post.reserve_y * pre.total_shares >= pre.reserve_y * post.total_shares
    )
