from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import QApplication

from overlay_dimmer.debug_config import DEBUG_CONFIG_ENABLED, DEV_MODE_ENV_VAR, load_debug_config
from overlay_dimmer.dimmer import OverlayDimmer
from overlay_dimmer.dimmer_config import DimmerSettings, apply_env_overrides, load_settings
from overlay_dimmer.logging_utils import configure_logging
from overlay_dimmer.qt_surface import DimFrameDriver, QtDisplayProvider, QtUpdateBatch, make_qt_surface_factory

PACKAGE_DIR = Path(__file__).resolve().parent


def resolve_settings_path(args_settings: Optional[str]) -> Path:
    if args_settings:
        return Path(args_settings).expanduser().resolve()
    env_override = os.getenv("OVERLAY_DIMMER_SETTINGS")
    if env_override:
        return Path(env_override).expanduser().resolve()
    return (PACKAGE_DIR.parent / "dimmer_settings.json").resolve()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fade a translucent dim overlay over a display")
    parser.add_argument("--settings", help="Path to dimmer_settings.json")
    parser.add_argument("--display", type=int, help="Display index to dim")
    parser.add_argument("--alpha", type=float, help="Target dim alpha (0-1)")
    parser.add_argument("--fade-in-ms", type=int, help="Fade-in duration in milliseconds")
    parser.add_argument("--fade-out-ms", type=int, help="Fade-out duration in milliseconds")
    parser.add_argument("--hold-ms", type=int, default=1500, help="How long to hold the dim before fading out")
    return parser


def merge_cli_args(settings: DimmerSettings, args: argparse.Namespace) -> DimmerSettings:
    alpha = settings.dim_alpha if args.alpha is None else max(0.0, min(1.0, args.alpha))
    return DimmerSettings(
        display_id=settings.display_id if args.display is None else max(0, args.display),
        layer=settings.layer,
        dim_alpha=alpha,
        fade_in_ms=settings.fade_in_ms if args.fade_in_ms is None else max(0, args.fade_in_ms),
        fade_out_ms=settings.fade_out_ms if args.fade_out_ms is None else max(0, args.fade_out_ms),
        frame_interval_ms=settings.frame_interval_ms,
        log_retention=settings.log_retention,
    )


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings_path = resolve_settings_path(args.settings)
    settings = merge_cli_args(apply_env_overrides(load_settings(settings_path)), args)
    debug_config = load_debug_config((PACKAGE_DIR.parent / "debug.json").resolve())
    retention = debug_config.log_retention or settings.log_retention
    logger = configure_logging(dev_mode=DEBUG_CONFIG_ENABLED, retention=retention)
    if not DEBUG_CONFIG_ENABLED:
        logger.debug("debug.json ignored (release mode). Export %s=1 to enable tracing.", DEV_MODE_ENV_VAR)

    logger.info("Starting overlay dimmer (pid=%s)", os.getpid())
    logger.debug(
        "Loaded settings from %s: display=%d alpha=%.2f fade_in=%d fade_out=%d hold=%d",
        settings_path,
        settings.display_id,
        settings.dim_alpha,
        settings.fade_in_ms,
        settings.fade_out_ms,
        args.hold_ms,
    )

    app = QApplication(sys.argv[:1])
    batch = QtUpdateBatch()
    dimmer = OverlayDimmer(
        settings.display_id,
        display_provider=QtDisplayProvider(),
        surface_factory=make_qt_surface_factory(batch),
        transaction=batch,
        logger=logger,
        trace=debug_config.trace_enabled,
    )
    driver = DimFrameDriver(dimmer, transaction=batch, interval_ms=settings.frame_interval_ms)

    def _fade_out() -> None:
        with batch:
            dimmer.dismiss(settings.fade_out_ms)
        if dimmer.is_animating():
            driver.start()
        else:
            app.quit()

    def _on_settled() -> None:
        if dimmer.is_dimming():
            QTimer.singleShot(max(0, args.hold_ms), _fade_out)
        else:
            app.quit()

    driver.finished.connect(_on_settled)

    with batch:
        dimmer.present(settings.layer, settings.dim_alpha, settings.fade_in_ms)
    if dimmer.is_animating():
        driver.start()
    else:
        QTimer.singleShot(0, _on_settled)

    exit_code = app.exec()
    with batch:
        dimmer.release()
    logger.info("Overlay dimmer exiting with code %s", exit_code)
    return int(exit_code)
