"""
Deterministic encodings for identifiers and snapshot commitments.

Every digest in the package is `sha256(domain_sep(label) || payload)` rendered
as 0x-prefixed lowercase hex, so ids derived for different purposes can never
collide even when their payloads do.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


CANONICAL_ENCODING_VERSION = 1
HASH_BYTES = 32


def _check_encodable(value: Any, path: str = "$") -> None:
    # bool is an int subclass; both are fine. Floats are not.
    if value is None or isinstance(value, (bool, int, str)):
        return
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError(f"{path}: object keys must be str, got {type(k).__name__}")
            _check_encodable(v, f"{path}.{k}")
        return
    if isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _check_encodable(item, f"{path}[{i}]")
        return
    raise TypeError(f"{path}: {type(value).__name__} is not allowed in canonical encoding")


def canonical_json_bytes(value: Any) -> bytes:
    """
    Canonical JSON: UTF-8, sorted keys, no whitespace. Only None, bool, int,
    str, list/tuple and str-keyed dict are accepted.
    """
    _check_encodable(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def domain_sep_bytes(label: str, version: int = CANONICAL_ENCODING_VERSION) -> bytes:
    """b"cpamm:<label>:v<version>\\x00"."""
    if not isinstance(label, str) or not label or not label.isascii() or "\x00" in label:
        raise ValueError(f"label must be a non-empty ASCII string without NUL: {label!r}")
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return f"cpamm:{label}:v{version}".encode("ascii") + b"\x00"


def tagged_digest(label: str, payload: bytes, *, version: int = CANONICAL_ENCODING_VERSION) -> bytes:
    return hashlib.sha256(domain_sep_bytes(label, version) + payload).digest()


def tagged_digest_hex(label: str, payload: bytes, *, version: int = CANONICAL_ENCODING_VERSION) -> str:
    return bytes_to_hex(tagged_digest(label, payload, version=version))


def u64_le(value: int) -> bytes:
    return value.to_bytes(8, "little")


def bytes_to_hex(value: bytes) -> str:
    return "0x" + bytes(value).hex()


def hex32_to_bytes(value: str, *, name: str) -> bytes:
    """Parse a 0x-prefixed 32-byte hex id (as produced by `tagged_digest_hex`)."""
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str")
    if not value.startswith("0x") or len(value) != 2 + 2 * HASH_BYTES:
        raise ValueError(f"{name} must be a 0x-prefixed {HASH_BYTES}-byte hex string")
    try:
        raw = bytes.fromhex(value[2:])
    except ValueError as exc:
        raise ValueError(f"{name} must be valid hex") from exc
    if len(raw) != HASH_BYTES:
        raise ValueError(f"{name} must be valid hex")
    return raw
