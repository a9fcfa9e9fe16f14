"""Property tests for the curve engine: product, rounding direction, proportionality."""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from cpamm.core import curve
from cpamm.kernels.python.cpmm_shares_v1 import deposit_proportional, withdraw_shares
from cpamm.kernels.python.cpmm_swap_v1 import swap_exact_in


reserves = st.integers(min_value=1, max_value=10**12)
amounts = st.integers(min_value=1, max_value=10**12)
fees = st.integers(min_value=0, max_value=10_000)
# Keeps ceil(d * rx / ts) inside u64 for every draw.
shallow = st.integers(min_value=1, max_value=10**9)


@settings(max_examples=300, deadline=None)
@given(x=reserves, y=reserves, a=amounts, fee=fees)
def test_swap_never_decreases_product(x: int, y: int, a: int, fee: int) -> None:
    r = swap_exact_in(reserve_in=x, reserve_out=y, amount_in=a, fee_bps=fee)
    assert r.new_reserve_in == x + a
    assert r.new_reserve_out == y - r.amount_out
    assert r.amount_out < y
    if fee > 0:
        assert r.k_after > r.k_before
    else:
        assert r.k_after >= r.k_before


@settings(max_examples=200, deadline=None)
@given(x=reserves, y=reserves, a=amounts, fee=st.integers(min_value=0, max_value=9_999))
def test_higher_fee_never_pays_more(x: int, y: int, a: int, fee: int) -> None:
    low = swap_exact_in(reserve_in=x, reserve_out=y, amount_in=a, fee_bps=fee)
    high = swap_exact_in(reserve_in=x, reserve_out=y, amount_in=a, fee_bps=fee + 1)
    assert high.amount_out <= low.amount_out


@settings(max_examples=300, deadline=None)
@given(rx=shallow, ry=shallow, ts=shallow, d=shallow)
def test_deposit_cost_covers_share_of_reserves(rx: int, ry: int, ts: int, d: int) -> None:
    r = deposit_proportional(reserve_x=rx, reserve_y=ry, total_shares=ts, desired_shares=d)
    assert r.required_x * ts >= d * rx
    assert r.required_y * ts >= d * ry
    assert (r.required_x - 1) * ts < d * rx
    assert (r.required_y - 1) * ts < d * ry


@settings(max_examples=300, deadline=None)
@given(rx=shallow, ry=shallow, ts=shallow, d=shallow)
def test_deposit_then_withdraw_returns_at_most_deposit(rx: int, ry: int, ts: int, d: int) -> None:
    dep = deposit_proportional(reserve_x=rx, reserve_y=ry, total_shares=ts, desired_shares=d)
    wd = withdraw_shares(
        reserve_x=dep.new_reserve_x,
        reserve_y=dep.new_reserve_y,
        total_shares=dep.new_total_shares,
        burn_shares=d,
    )
    assert wd.out_x <= dep.required_x
    assert wd.out_y <= dep.required_y


@settings(max_examples=300, deadline=None)
@given(rx=reserves, ry=reserves, ts=reserves, data=st.data())
def test_withdraw_pays_at_most_share_of_reserves(rx: int, ry: int, ts: int, data) -> None:
    burn = data.draw(st.integers(min_value=1, max_value=ts))
    out_x, out_y = curve.withdraw(rx, ry, ts, burn, 0, 0)
    assert out_x * ts <= burn * rx
    assert out_y * ts <= burn * ry
