"""
Pool engine: the invocation surface over a pool registry and a token ledger.

This is the imperative shell around `cpamm.core.operations`:
- read one record snapshot from the registry,
- compute the transition (pure; raises typed errors, nothing mutated),
- execute the ledger instructions all-or-nothing,
- commit the new record with a single registry write.

If any step fails the registry is not written. The ledger is restored too,
unless undoing an applied instruction also fails; that case surfaces as a
`LedgerError` with `rollback_complete == False` and is logged at ERROR.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from ..config import EngineConfig
from ..core import operations
from ..core.curve import quote_swap
from ..core.errors import LedgerError, PoolError
from ..core.operations import DepositResult, PoolTransition, SwapResult, WithdrawResult
from ..kernels.python.cpmm_swap_v1 import SwapExactInResult
from ..state.balances import AssetId, Owner
from ..state.ledger import TokenLedger, execute_instructions
from ..state.pools import PoolConfig, PoolRecord, PoolRegistry, PoolStatus, SwapDirection


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineOutcome:
    """Result-style wrapper for drivers that prefer not to catch exceptions."""

    ok: bool
    value: Any = None
    error: Optional[str] = None
    code: Optional[str] = None


def _coerce_direction(direction: Union[SwapDirection, bool]) -> SwapDirection:
    if isinstance(direction, SwapDirection):
        return direction
    if isinstance(direction, bool):
        return SwapDirection.from_is_x(direction)
    raise TypeError(f"direction must be a SwapDirection or bool, got {direction!r}")


class PoolEngine:
    """
    Drives pool operations for many pools (keyed by seed) against one ledger.

    The engine assumes the environment serializes mutations per pool; it holds
    no locks itself.
    """

    def __init__(
        self,
        ledger: TokenLedger,
        *,
        config: Optional[EngineConfig] = None,
        registry: Optional[PoolRegistry] = None,
    ) -> None:
        self.ledger = ledger
        self.config = config if config is not None else EngineConfig()
        self.registry = registry if registry is not None else PoolRegistry()

    # -- queries -------------------------------------------------------------

    def pool(self, seed: int) -> PoolRecord:
        return self.registry.get(seed)

    def status(self, seed: int) -> PoolStatus:
        return self.registry.status(seed)

    def quote_swap(self, seed: int, direction: Union[SwapDirection, bool], amount_in: int) -> SwapExactInResult:
        """Read-only swap quote against the current reserves (no bounds applied)."""
        record = self.registry.get(seed)
        d = _coerce_direction(direction)
        reserve_in, reserve_out = record.state.reserves_for(d)
        return quote_swap(reserve_in, reserve_out, record.config.fee_bps, amount_in)

    # -- mutations -----------------------------------------------------------

    def initialize(
        self,
        seed: int,
        fee_bps: Optional[int] = None,
        *,
        asset_x: AssetId,
        asset_y: AssetId,
        authority: Optional[Owner] = None,
    ) -> PoolConfig:
        fee = self.config.default_fee_bps if fee_bps is None else fee_bps

        def _op() -> PoolRecord:
            record = operations.initialize(
                seed=seed,
                fee_bps=fee,
                asset_x=asset_x,
                asset_y=asset_y,
                authority=authority,
                existing=self.registry.find(seed),
                max_fee_bps=self.config.max_fee_bps,
            )
            self.registry.insert(record)
            return record

        record = self._run("initialize", seed, _op)
        logger.info(
            "Pool initialized",
            extra={
                "event": "cpamm.initialize",
                "seed": seed,
                "pool_id": record.config.pool_id,
                "fee_bps": fee,
            },
        )
        return record.config

    def deposit(self, seed: int, user: Owner, desired_shares: int, max_x: int, max_y: int) -> DepositResult:
        transition = self._run(
            "deposit",
            seed,
            lambda: operations.deposit(
                self.registry.get(seed),
                user=user,
                desired_shares=desired_shares,
                max_x=max_x,
                max_y=max_y,
            ),
        )
        self._apply("deposit", transition)
        return transition.result

    def withdraw(self, seed: int, user: Owner, burn_shares: int, min_x: int, min_y: int) -> WithdrawResult:
        transition = self._run(
            "withdraw",
            seed,
            lambda: operations.withdraw(
                self.registry.get(seed),
                user=user,
                burn_shares=burn_shares,
                min_x=min_x,
                min_y=min_y,
            ),
        )
        self._apply("withdraw", transition)
        return transition.result

    def swap(
        self,
        seed: int,
        user: Owner,
        direction: Union[SwapDirection, bool],
        amount_in: int,
        min_amount_out: int,
    ) -> SwapResult:
        transition = self._run(
            "swap",
            seed,
            lambda: operations.swap(
                self.registry.get(seed),
                user=user,
                direction=_coerce_direction(direction),
                amount_in=amount_in,
                min_amount_out=min_amount_out,
                reject_zero_output=self.config.reject_zero_output,
            ),
        )
        self._apply("swap", transition)
        return transition.result

    def set_locked(self, seed: int, caller: Owner, locked: bool) -> PoolConfig:
        record = self._run(
            "set_locked",
            seed,
            lambda: operations.set_locked(self.registry.get(seed), caller=caller, locked=locked),
        )
        self.registry.commit(record)
        logger.info(
            "Pool lock changed",
            extra={"event": "cpamm.set_locked", "seed": seed, "locked": record.config.locked},
        )
        return record.config

    def execute(self, op: str, **kwargs: Any) -> EngineOutcome:
        """
        Run a named operation and return an `EngineOutcome` instead of raising
        `PoolError`s. Programming errors (TypeError etc.) still propagate.
        """
        handlers: dict[str, Callable[..., Any]] = {
            "initialize": self.initialize,
            "deposit": self.deposit,
            "withdraw": self.withdraw,
            "swap": self.swap,
            "set_locked": self.set_locked,
        }
        handler = handlers.get(op)
        if handler is None:
            return EngineOutcome(ok=False, error=f"unknown operation: {op}", code="UnknownOperation")
        try:
            return EngineOutcome(ok=True, value=handler(**kwargs))
        except PoolError as exc:
            return EngineOutcome(ok=False, error=str(exc), code=exc.code)

    # -- internals -----------------------------------------------------------

    def _run(self, op: str, seed: int, fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except PoolError as exc:
            logger.debug(
                "Pool operation rejected: %s - %s",
                exc.code,
                exc,
                extra={"event": f"cpamm.{op}.rejected", "seed": seed, "error_code": exc.code},
            )
            raise

    def _apply(self, op: str, transition: PoolTransition) -> None:
        record = transition.record
        try:
            execute_instructions(self.ledger, transition.instructions)
        except LedgerError as exc:
            if exc.rollback_complete:
                logger.warning(
                    "Ledger rejected %s; pool state unchanged: %s",
                    op,
                    exc,
                    extra={"event": f"cpamm.{op}.ledger_failed", "seed": record.config.seed},
                )
            else:
                logger.error(
                    "Ledger rejected %s and could not be rolled back; ledger no longer matches pool %s: %s",
                    op,
                    record.config.seed,
                    exc,
                    extra={"event": f"cpamm.{op}.ledger_inconsistent", "seed": record.config.seed},
                )
            raise
        self.registry.commit(record)
        logger.info(
            "Pool %s applied",
            op,
            extra={
                "event": f"cpamm.{op}",
                "seed": record.config.seed,
                "reserve_x": record.state.reserve_x,
                "reserve_y": record.state.reserve_y,
                "total_shares": record.state.total_shares,
            },
        )
