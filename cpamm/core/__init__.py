"""
Core pool algorithms.

Only the leaf modules are re-exported here; import `cpamm.core.curve`,
`cpamm.core.invariants` and `cpamm.core.operations` directly.
"""

from .amounts import U64_MAX, U128_MAX, ceil_div, checked_add, checked_mul, checked_sub, floor_div
from .errors import (
    DivisionByZero,
    DuplicatePool,
    InsufficientLiquidity,
    InvalidAmount,
    InvalidFee,
    InvalidPoolConfig,
    InvariantViolation,
    LedgerError,
    Overflow,
    PoolError,
    PoolLocked,
    PoolNotFound,
    SlippageExceeded,
    Unauthorized,
)

__all__ = [
    "U64_MAX",
    "U128_MAX",
    "ceil_div",
    "checked_add",
    "checked_mul",
    "checked_sub",
    "floor_div",
    "DivisionByZero",
    "DuplicatePool",
    "InsufficientLiquidity",
    "InvalidAmount",
    "InvalidFee",
    "InvalidPoolConfig",
    "InvariantViolation",
    "LedgerError",
    "Overflow",
    "PoolError",
    "PoolLocked",
    "PoolNotFound",
    "SlippageExceeded",
    "Unauthorized",
]
