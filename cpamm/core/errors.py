"""Exception types for the pool engine.

Every error is local to one operation invocation. Each class carries a stable
``code`` string so drivers can match on it without importing the class.
"""

from __future__ import annotations


class PoolError(Exception):
    """Base class for all pool engine errors."""

    code: str = "PoolError"


class InvalidAmount(PoolError):
    """A zero amount where a nonzero one is required, or a burn above supply."""

    code = "InvalidAmount"


class InvalidFee(PoolError):
    """Fee basis points outside ``[0, 10_000]``."""

    code = "InvalidFee"


class InvalidPoolConfig(PoolError):
    """Malformed pool identity (seed out of range, identical assets)."""

    code = "InvalidPoolConfig"


class DuplicatePool(PoolError):
    """The seed is already bound to an initialized pool."""

    code = "DuplicatePool"


class PoolNotFound(PoolError):
    """No pool has been initialized for the seed."""

    code = "PoolNotFound"


class SlippageExceeded(PoolError):
    """A computed amount violates the caller-supplied min/max bound."""

    code = "SlippageExceeded"


class InsufficientLiquidity(PoolError):
    """The pool is empty or too shallow for the request."""

    code = "InsufficientLiquidity"


class Overflow(PoolError, ArithmeticError):
    """A value does not fit its fixed integer width."""

    code = "Overflow"


class DivisionByZero(PoolError, ArithmeticError):
    """Integer division with a zero denominator."""

    code = "DivisionByZero"


class PoolLocked(PoolError):
    """State-mutating operation attempted while the pool is locked."""

    code = "PoolLocked"


class Unauthorized(PoolError):
    """Caller is not the pool authority."""

    code = "Unauthorized"


class LedgerError(PoolError):
    """
    The token ledger rejected an instruction.

    `rollback_failures` is empty when every applied instruction was undone;
    otherwise it lists the undo steps that failed and the ledger is left
    partially changed.
    """

    code = "LedgerError"

    def __init__(self, message: str, *, rollback_failures: tuple[str, ...] = ()) -> None:
        self.rollback_failures = tuple(rollback_failures)
        super().__init__(message)

    @property
    def rollback_complete(self) -> bool:
        return not self.rollback_failures


class InvariantViolation(PoolError):
    """A computed post-state violates one or more pool invariants."""

    code = "InvariantViolation"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")


ERROR_CODES: dict[str, type[PoolError]] = {
    cls.code: cls
    for cls in (
        InvalidAmount,
        InvalidFee,
        InvalidPoolConfig,
        DuplicatePool,
        PoolNotFound,
        SlippageExceeded,
        InsufficientLiquidity,
        Overflow,
        DivisionByZero,
        PoolLocked,
        Unauthorized,
        LedgerError,
        InvariantViolation,
    )
}
