"""
Fixed-width unsigned integer arithmetic for token amounts.

Python ints never overflow, so widths are enforced explicitly:
- amounts, reserves and share supply are unsigned 64-bit values,
- products of two amounts are formed in a 128-bit intermediate,
- every narrowing back to 64 bits is checked and fails with `Overflow`.

No floating point is used anywhere.
"""

from __future__ import annotations

from .errors import DivisionByZero, InvalidAmount, Overflow


AMOUNT_BITS = 64
WIDE_BITS = 128

U64_MAX = (1 << AMOUNT_BITS) - 1
U128_MAX = (1 << WIDE_BITS) - 1


def max_for_bits(bits: int) -> int:
    if not isinstance(bits, int) or isinstance(bits, bool) or bits <= 0:
        raise ValueError(f"bits must be a positive int: {bits!r}")
    return (1 << bits) - 1


def require_amount(name: str, value: int, *, bits: int = AMOUNT_BITS) -> int:
    """
    Validate an unsigned amount of the given width.

    Raises:
        TypeError: if `value` is not an int (bools are rejected)
        InvalidAmount: if `value` is negative
        Overflow: if `value` does not fit in `bits`
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise InvalidAmount(f"{name} must be non-negative: {value}")
    if value > max_for_bits(bits):
        raise Overflow(f"{name} exceeds u{bits}: {value}")
    return value


def narrow(value: int, *, bits: int = AMOUNT_BITS) -> int:
    """Truncate-and-check: the result must round-trip through `bits`."""
    truncated = value & max_for_bits(bits)
    if truncated != value:
        raise Overflow(f"value does not fit u{bits}: {value}")
    return truncated


def checked_add(a: int, b: int, *, bits: int = AMOUNT_BITS) -> int:
    return narrow(a + b, bits=bits)


def checked_sub(a: int, b: int, *, bits: int = AMOUNT_BITS) -> int:
    if b > a:
        raise Overflow(f"subtraction underflow: {a} - {b}")
    return narrow(a - b, bits=bits)


def checked_mul(a: int, b: int, *, bits: int = WIDE_BITS) -> int:
    return narrow(a * b, bits=bits)


def floor_div(numerator: int, denominator: int) -> int:
    if denominator == 0:
        raise DivisionByZero(f"division by zero: {numerator} / 0")
    if numerator < 0 or denominator < 0:
        raise ValueError("floor_div operands must be non-negative")
    return numerator // denominator


def ceil_div(numerator: int, denominator: int) -> int:
    if denominator == 0:
        raise DivisionByZero(f"division by zero: {numerator} / 0")
    if numerator < 0 or denominator < 0:
        raise ValueError("ceil_div operands must be non-negative")
    return (numerator + denominator - 1) // denominator


def mul_div_floor(a: int, b: int, denominator: int, *, bits: int = AMOUNT_BITS) -> int:
    """floor(a * b / denominator), product in the wide width, result narrowed to `bits`."""
    product = checked_mul(a, b, bits=2 * bits)
    return narrow(floor_div(product, denominator), bits=bits)


def mul_div_ceil(a: int, b: int, denominator: int, *, bits: int = AMOUNT_BITS) -> int:
    """ceil(a * b / denominator), product in the wide width, result narrowed to `bits`."""
    product = checked_mul(a, b, bits=2 * bits)
    return narrow(ceil_div(product, denominator), bits=bits)
