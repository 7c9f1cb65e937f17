"""Translucent dim overlay driven toward a target alpha over time.

All mutating calls (``present``, ``dismiss``, ``dismiss_now``, ``jump_to_end``,
``advance``, ``release``) must be made with the caller's atomic-update scope
open. The dimmer only opens the scope itself while creating its surface.
"""
from __future__ import annotations

import logging
import math
from contextlib import nullcontext
from typing import Callable, Optional, TextIO

from overlay_dimmer.dim_geometry import GeometrySynchronizer
from overlay_dimmer.logging_utils import LOGGER_NAME
from overlay_dimmer.surface import DimSurface, DisplayProvider, SurfaceFactory, TransactionFactory
from overlay_dimmer.timeline import Timeline, monotonic_ms


class OverlayDimmer:
    def __init__(
        self,
        display_id: int,
        *,
        display_provider: DisplayProvider,
        surface_factory: SurfaceFactory,
        transaction: TransactionFactory = nullcontext,
        clock: Callable[[], float] = monotonic_ms,
        logger: Optional[logging.Logger] = None,
        trace: bool = False,
    ) -> None:
        self._logger = logger or logging.getLogger(LOGGER_NAME)
        self._trace = trace
        self._display_id = display_id
        self._display_provider = display_provider
        self._clock = clock
        self._geometry = GeometrySynchronizer(logger=self._logger)
        self._timeline = Timeline()
        self._alpha = 0.0
        self._target_alpha = 0.0
        self._showing = False
        self._surface: Optional[DimSurface] = None

        self._trace_log("Ctor: display_id=%s", display_id)
        with transaction():
            try:
                self._surface = surface_factory(display_id)
            except Exception:
                self._logger.exception("Exception creating dim surface for display %s", display_id)
            else:
                self._logger.debug("Dim surface %r created for display %s", self._surface, display_id)

    # Queries -----------------------------------------------------------------

    def is_dimming(self) -> bool:
        return self._target_alpha != 0

    def is_animating(self) -> bool:
        return self._target_alpha != self._alpha

    def get_target_alpha(self) -> float:
        return self._target_alpha

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def layer(self) -> int:
        return self._geometry.layer

    @property
    def showing(self) -> bool:
        return self._showing

    @property
    def surface(self) -> Optional[DimSurface]:
        return self._surface

    # Transitions -------------------------------------------------------------

    def present(self, layer: int, alpha: float, duration_ms: int) -> None:
        """Begin, redirect or shorten a transition toward ``alpha`` at ``layer``."""
        if math.isnan(alpha) or not 0.0 <= alpha <= 1.0:
            raise ValueError(f"dim alpha must be within [0, 1], got {alpha!r}")
        self._trace_log("present: layer=%d alpha=%s duration=%s", layer, alpha, duration_ms)
        if self._surface is None:
            self._logger.error("present: no dim surface")
            self._collapse()
            return

        self._geometry.sync(self._surface, self._display_provider.display_info(self._display_id), layer)

        now = self._clock()
        animating = self.is_animating()
        if (animating and (self._target_alpha != alpha or self._timeline.ends_earlier(now, duration_ms))) or (
            not animating and self._alpha != alpha
        ):
            if duration_ms <= 0:
                self._set_alpha(alpha)
            else:
                self._timeline.restart(self._alpha, now, duration_ms)
        self._trace_log(
            "present: start_alpha=%s start_time=%s", self._timeline.start_alpha, self._timeline.start_time
        )
        self._target_alpha = alpha

    def dismiss(self, duration_ms: int) -> None:
        """Fade to transparent over ``duration_ms``."""
        if self._surface is None:
            self._logger.error("dismiss: no dim surface")
            self._collapse()
            return
        if self._showing and (
            self._target_alpha != 0 or self._timeline.ends_earlier(self._clock(), duration_ms)
        ):
            self._trace_log("dismiss: duration=%s", duration_ms)
            self.present(self._geometry.layer, 0.0, duration_ms)

    def dismiss_now(self) -> None:
        if self._surface is None:
            self._logger.error("dismiss_now: no dim surface")
            self._collapse()
            return
        if self._showing:
            self._trace_log("dismiss_now: immediate")
            self.dismiss(0)

    def jump_to_end(self) -> None:
        if self._surface is None:
            self._logger.error("jump_to_end: no dim surface")
            self._collapse()
            return
        if self.is_animating():
            self._trace_log("jump_to_end: immediate")
            self.present(self._geometry.layer, self._target_alpha, 0)

    def advance(self) -> bool:
        """Step the transition; returns True while further ticks are needed."""
        if self._surface is None:
            self._logger.error("advance: no dim surface")
            self._collapse()
            return False

        if self.is_animating():
            now = self._clock()
            alpha = self._timeline.alpha_at(now, self._target_alpha)
            self._trace_log("advance: now=%s alpha=%s", now, alpha)
            self._set_alpha(alpha)

        return self.is_animating()

    # Lifecycle ---------------------------------------------------------------

    def release(self) -> None:
        surface = self._surface
        if surface is None:
            return
        self._trace_log("release: destroying %r", surface)
        self._surface = None
        try:
            surface.destroy()
        except RuntimeError as exc:
            self._logger.warning("Failure destroying dim surface %r: %s", surface, exc)

    def dump(self, sink: TextIO, prefix: str = "") -> None:
        timeline = self._timeline
        sink.write(f"{prefix}dim_surface={self._surface!r}\n")
        sink.write(f"{prefix} layer={self._geometry.layer} alpha={self._alpha} showing={self._showing}\n")
        sink.write(f"{prefix}last_width={self._geometry.last_width} last_height={self._geometry.last_height}\n")
        sink.write(
            f"{prefix}Last animation: start_time={timeline.start_time} duration={timeline.duration_ms}"
            f" cur_time={self._clock()}\n"
        )
        sink.write(f"{prefix} start_alpha={timeline.start_alpha} target_alpha={self._target_alpha}\n")

    # Internals ---------------------------------------------------------------

    def _collapse(self) -> None:
        # Keeps is_animating() False once the surface is gone.
        self._target_alpha = 0.0
        self._alpha = 0.0

    def _set_alpha(self, alpha: float) -> None:
        if self._alpha == alpha:
            return
        surface = self._surface
        self._trace_log("set_alpha: alpha=%s", alpha)
        try:
            surface.set_alpha(alpha)
            if alpha == 0 and self._showing:
                surface.hide()
                self._showing = False
            elif alpha > 0 and not self._showing:
                surface.show()
                self._showing = True
        except RuntimeError as exc:
            self._logger.warning("Failure setting dim alpha to %s: %s", alpha, exc)
        self._alpha = alpha

    def _trace_log(self, message: str, *args: object) -> None:
        if self._trace:
            self._logger.debug(message, *args)
