"""Settings for the dimmer launcher and frame driver."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from overlay_dimmer.logging_utils import LOGGER_NAME

_LOGGER = logging.getLogger(LOGGER_NAME)

ALPHA_ENV_VAR = "OVERLAY_DIMMER_ALPHA"
DISPLAY_ENV_VAR = "OVERLAY_DIMMER_DISPLAY"
MIN_FRAME_INTERVAL_MS = 4


@dataclass(frozen=True)
class DimmerSettings:
    """Values used to bootstrap a dimmer before any caller requests arrive."""

    display_id: int = 0
    layer: int = 0
    dim_alpha: float = 0.6
    fade_in_ms: int = 250
    fade_out_ms: int = 200
    frame_interval_ms: int = 16
    log_retention: int = 5


def _float(value: Any, fallback: float) -> float:
    if value is None:
        return fallback
    try:
        return float(value)
    except (TypeError, ValueError):
        return fallback


def _int(value: Any, fallback: int) -> int:
    if value is None:
        return fallback
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _clamp_alpha(value: float) -> float:
    if value != value:  # NaN
        return DimmerSettings.dim_alpha
    return max(0.0, min(1.0, value))


def settings_from_mapping(data: Mapping[str, Any]) -> DimmerSettings:
    defaults = DimmerSettings()
    return DimmerSettings(
        display_id=max(0, _int(data.get("display_id"), defaults.display_id)),
        layer=_int(data.get("layer"), defaults.layer),
        dim_alpha=_clamp_alpha(_float(data.get("dim_alpha"), defaults.dim_alpha)),
        fade_in_ms=max(0, _int(data.get("fade_in_ms"), defaults.fade_in_ms)),
        fade_out_ms=max(0, _int(data.get("fade_out_ms"), defaults.fade_out_ms)),
        frame_interval_ms=max(MIN_FRAME_INTERVAL_MS, _int(data.get("frame_interval_ms"), defaults.frame_interval_ms)),
        log_retention=max(1, _int(data.get("log_retention"), defaults.log_retention)),
    )


def apply_env_overrides(settings: DimmerSettings, env: Optional[Mapping[str, str]] = None) -> DimmerSettings:
    """Layer OVERLAY_DIMMER_ALPHA / OVERLAY_DIMMER_DISPLAY on top of file settings."""
    source = os.environ if env is None else env
    changes: Dict[str, Any] = {}
    alpha_raw = source.get(ALPHA_ENV_VAR)
    if alpha_raw:
        try:
            changes["dim_alpha"] = _clamp_alpha(float(alpha_raw))
        except ValueError:
            _LOGGER.warning("Ignoring invalid %s=%r", ALPHA_ENV_VAR, alpha_raw)
    display_raw = source.get(DISPLAY_ENV_VAR)
    if display_raw:
        try:
            changes["display_id"] = max(0, int(display_raw))
        except ValueError:
            _LOGGER.warning("Ignoring invalid %s=%r", DISPLAY_ENV_VAR, display_raw)
    if changes:
        _LOGGER.debug("Applied env overrides: %s", ", ".join(f"{k}={v}" for k, v in sorted(changes.items())))
        return replace(settings, **changes)
    return settings


def load_settings(settings_path: Path) -> DimmerSettings:
    """Read dimmer_settings.json if it exists, falling back to defaults on any problem."""
    try:
        raw = settings_path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        _LOGGER.debug("Dimmer settings not found at %s; using defaults", settings_path)
        return DimmerSettings()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        _LOGGER.warning("Failed to parse %s; using defaults (%s)", settings_path, exc)
        return DimmerSettings()

    if not isinstance(data, dict):
        _LOGGER.warning("Dimmer settings at %s are not a JSON object; using defaults", settings_path)
        return DimmerSettings()
    return settings_from_mapping(data)
