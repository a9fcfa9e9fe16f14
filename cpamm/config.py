"""
Engine configuration.

Configuration is a small frozen dataclass loaded from YAML. Resolution order
for `load_config()`:
1. an explicit `path` argument,
2. the file named by the `CPAMM_CONFIG` environment variable,
3. the packaged `cpamm/defaults.yaml`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml


CONFIG_ENV_VAR = "CPAMM_CONFIG"
BPS_DENOM = 10_000


@dataclass(frozen=True)
class EngineConfig:
    """Runtime policy for the pool engine."""

    # Upper bound accepted by `initialize` (never above 10_000).
    max_fee_bps: int = BPS_DENOM
    # Fee used when `initialize` is called without one.
    default_fee_bps: int = 30
    # Reject swaps whose output rounds down to zero.
    reject_zero_output: bool = True

    def __post_init__(self) -> None:
        for name in ("max_fee_bps", "default_fee_bps"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if not (0 <= v <= BPS_DENOM):
                raise ValueError(f"{name} must be in [0, {BPS_DENOM}]: {v}")
        if self.default_fee_bps > self.max_fee_bps:
            raise ValueError(
                f"default_fee_bps ({self.default_fee_bps}) exceeds max_fee_bps ({self.max_fee_bps})"
            )
        if not isinstance(self.reject_zero_output, bool):
            raise TypeError("reject_zero_output must be a bool")


_FIELD_NAMES = tuple(f.name for f in fields(EngineConfig))


def default_config_path() -> Path:
    # cpamm/config.py -> cpamm/defaults.yaml
    return Path(__file__).resolve().parent / "defaults.yaml"


def config_from_mapping(obj: Mapping[str, Any]) -> EngineConfig:
    """Build an `EngineConfig` from a mapping; unknown keys are rejected."""
    if not isinstance(obj, Mapping):
        raise TypeError("config must be a mapping")
    unknown = sorted(set(obj) - set(_FIELD_NAMES))
    if unknown:
        raise ValueError(f"unknown config keys: {', '.join(map(str, unknown))}")
    return EngineConfig(**dict(obj))


def load_config(path: Optional[Union[str, Path]] = None) -> EngineConfig:
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR, "").strip()
        path = env_path or default_config_path()
    text = Path(path).read_text(encoding="utf-8")
    obj = yaml.safe_load(text)
    if obj is None:
        return EngineConfig()
    if not isinstance(obj, Mapping):
        raise TypeError("config YAML must be a mapping")
    section = obj["engine"] if "engine" in obj else obj
    if section is None:
        return EngineConfig()
    return config_from_mapping(section)
