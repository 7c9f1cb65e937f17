from __future__ import annotations

import json

import pytest

from overlay_dimmer import debug_config as module


def test_release_mode_ignores_file(monkeypatch, tmp_path) -> None:
    path = tmp_path / "debug.json"
    path.write_text(json.dumps({"tracing": {"enabled": True}, "log_retention": 3}), encoding="utf-8")
    monkeypatch.setattr(module, "DEBUG_CONFIG_ENABLED", False, raising=False)

    cfg = module.load_debug_config(path)

    assert cfg.trace_enabled is False
    assert cfg.log_retention is None


def test_dev_mode_reads_tracing_section(monkeypatch, tmp_path) -> None:
    path = tmp_path / "debug.json"
    path.write_text(json.dumps({"tracing": {"enabled": True}, "log_retention": 3}), encoding="utf-8")
    monkeypatch.setattr(module, "DEBUG_CONFIG_ENABLED", True, raising=False)

    cfg = module.load_debug_config(path)

    assert cfg.trace_enabled is True
    assert cfg.log_retention == 3


def test_dev_mode_accepts_flat_trace_flag(monkeypatch, tmp_path) -> None:
    path = tmp_path / "debug.json"
    path.write_text(json.dumps({"trace_enabled": True}), encoding="utf-8")
    monkeypatch.setattr(module, "DEBUG_CONFIG_ENABLED", True, raising=False)

    assert module.load_debug_config(path).trace_enabled is True


def test_dev_mode_missing_file_returns_defaults(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(module, "DEBUG_CONFIG_ENABLED", True, raising=False)
    assert module.load_debug_config(tmp_path / "absent.json") == module.DebugConfig()


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, None), ("x", None), (0, 1), (-4, 1), (7, 7), (99, 20)],
)
def test_coerce_log_retention(raw, expected) -> None:
    assert module.coerce_log_retention(raw) == expected


@pytest.mark.parametrize(("value", "expected"), [("1", True), ("YES", True), ("0", False), ("maybe", False)])
def test_is_dev_mode_reads_env(monkeypatch, value, expected) -> None:
    monkeypatch.setenv(module.DEV_MODE_ENV_VAR, value)
    assert module.is_dev_mode() is expected


def test_is_dev_mode_defaults_off(monkeypatch) -> None:
    monkeypatch.delenv(module.DEV_MODE_ENV_VAR, raising=False)
    assert module.is_dev_mode() is False
