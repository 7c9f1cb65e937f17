from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "OverlayDimmer"
LOG_FILENAME = "overlay-dimmer.log"
PROPAGATE_ENV_VAR = "OVERLAY_DIMMER_PROPAGATE_LOGS"
LOG_DIR_ENV_VAR = "OVERLAY_DIMMER_LOG_DIR"
_TRUTHY = {"1", "true", "yes", "on"}


class ReleaseLogLevelFilter(logging.Filter):
    """Promote debug logs to INFO in release builds so diagnostics stay visible."""

    def __init__(self, release_mode: bool) -> None:
        super().__init__()
        self._release_mode = release_mode

    def filter(self, record: logging.LogRecord) -> bool:
        if self._release_mode and record.levelno == logging.DEBUG:
            record.levelno = logging.INFO
            record.levelname = "INFO"
        return True


def get_dimmer_logger(*, dev_mode: bool = False) -> logging.Logger:
    """Return the package logger, setting level, propagation and release filter once."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if dev_mode else logging.INFO)
    logger.propagate = os.environ.get(PROPAGATE_ENV_VAR, "").lower() in _TRUTHY
    if not any(isinstance(existing, ReleaseLogLevelFilter) for existing in logger.filters):
        logger.addFilter(ReleaseLogLevelFilter(release_mode=not dev_mode))
    return logger


def resolve_logs_dir(base_path: Path, log_dir_name: str = "OverlayDimmer") -> Path:
    """
    Resolve the directory to store dimmer logs.

    Strategy:
    - Use OVERLAY_DIMMER_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    ``base_path`` is the package location and is never used as a log target.
    """
    candidates = []

    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home / "overlay-dimmer" / "logs")
    candidates.append(cache_home / "overlay-dimmer" / "logs")
    candidates.append(Path.cwd() / "logs")

    package_root = base_path.resolve()
    for base in candidates:
        target = base / log_dir_name
        if package_root in target.resolve().parents:
            continue
        try:
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def configure_logging(
    *,
    dev_mode: bool,
    retention: int,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Attach a rotating file handler to the package logger (once per target file)."""
    logger = get_dimmer_logger(dev_mode=dev_mode)
    target_dir = log_dir or resolve_logs_dir(Path(__file__).parent)
    log_path = Path(os.path.abspath(target_dir / LOG_FILENAME))
    for existing in logger.handlers:
        if isinstance(existing, RotatingFileHandler) and Path(existing.baseFilename) == log_path:
            return logger
    target_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=512 * 1024,
        backupCount=max(0, retention - 1),
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    logger.addHandler(handler)
    logger.debug("Logging to %s (retention=%d)", log_path, retention)
    return logger
