# [TESTER] v1

from __future__ import annotations

import pytest

from cpamm.config import CONFIG_ENV_VAR, EngineConfig, config_from_mapping, default_config_path, load_config


def test_packaged_defaults_match_dataclass_defaults(monkeypatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    assert default_config_path().exists()
    assert load_config() == EngineConfig()


def test_load_config_from_explicit_path(tmp_path) -> None:
    path = tmp_path / "engine.yaml"
    path.write_text("engine:\n  default_fee_bps: 5\n  reject_zero_output: false\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.default_fee_bps == 5
    assert cfg.reject_zero_output is False
    assert cfg.max_fee_bps == 10_000


def test_load_config_accepts_flat_mapping(tmp_path) -> None:
    path = tmp_path / "flat.yaml"
    path.write_text("max_fee_bps: 100\n", encoding="utf-8")
    assert load_config(str(path)).max_fee_bps == 100


def test_load_config_from_env(tmp_path, monkeypatch) -> None:
    path = tmp_path / "env.yaml"
    path.write_text("engine:\n  default_fee_bps: 1\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    assert load_config().default_fee_bps == 1


def test_empty_file_yields_defaults(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == EngineConfig()


def test_invalid_documents(tmp_path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(TypeError):
        load_config(path)
    with pytest.raises(ValueError, match="unknown config keys"):
        config_from_mapping({"fee": 3})


def test_config_validation() -> None:
    with pytest.raises(ValueError):
        EngineConfig(max_fee_bps=10, default_fee_bps=30)
    with pytest.raises(ValueError):
        EngineConfig(max_fee_bps=10_001)
    with pytest.raises(TypeError):
        EngineConfig(reject_zero_output="yes")


def test_empty_engine_section_yields_defaults(tmp_path) -> None:
    path = tmp_path / "bare.yaml"
    path.write_text("engine:\n", encoding="utf-8")
    assert load_config(path) == EngineConfig()
