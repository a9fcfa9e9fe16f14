#!/usr/bin/env python3

from __future__ import annotations

import logging

from cpamm.config import load_config
from cpamm.core.errors import PoolError
from cpamm.integration.pool_engine import PoolEngine
from cpamm.integration.pool_snapshot import snapshot_registry
from cpamm.state.ledger import InMemoryLedger
from cpamm.state.pools import SwapDirection


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    provider = "0x" + "aa" * 32
    trader = "0x" + "bb" * 32
    asset_x = "0x" + "11" * 32
    asset_y = "0x" + "22" * 32

    ledger = InMemoryLedger()
    ledger.fund(
        [
            (provider, asset_x, 1_000_000_000),
            (provider, asset_y, 1_000_000_000),
            (trader, asset_x, 50_000_000),
        ]
    )
    engine = PoolEngine(ledger, config=load_config())

    config = engine.initialize(1, 30, asset_x=asset_x, asset_y=asset_y)
    print(f"[offline-demo] pool_id={config.pool_id} share_asset={config.share_asset} fee_bps={config.fee_bps}")

    first = engine.deposit(1, provider, 100_000_000, 100_000_000, 100_000_000)
    print(f"[offline-demo] first deposit: x={first.required_x} y={first.required_y} shares={first.minted_shares}")

    second = engine.deposit(1, provider, 50_000_000, 60_000_000, 60_000_000)
    print(f"[offline-demo] second deposit: x={second.required_x} y={second.required_y} shares={second.minted_shares}")

    state = engine.pool(1).state
    k_before = state.get_constant_product()
    print(f"[offline-demo] reserves before swap: x={state.reserve_x} y={state.reserve_y} k={k_before}")

    quote = engine.quote_swap(1, SwapDirection.X_TO_Y, 10_000_000)
    try:
        engine.swap(1, trader, SwapDirection.X_TO_Y, 10_000_000, quote.amount_out + 1)
    except PoolError as exc:
        print(f"[offline-demo] swap with tight bound rejected: {exc.code}")

    result = engine.swap(1, trader, SwapDirection.X_TO_Y, 10_000_000, quote.amount_out)
    state = engine.pool(1).state
    print(f"[offline-demo] swap: in={result.amount_in} out={result.amount_out}")
    print(f"[offline-demo] reserves after swap: x={state.reserve_x} y={state.reserve_y} k={state.get_constant_product()}")
    if state.get_constant_product() < k_before:
        print("[offline-demo] FAIL: constant product decreased")
        return 1

    snapshot = snapshot_registry(engine.registry)
    print(f"[offline-demo] snapshot commitment={snapshot.commitment_hex()}")
    print("[offline-demo] OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
