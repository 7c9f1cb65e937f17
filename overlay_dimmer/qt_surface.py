"""PyQt6 implementations of the dimmer's collaborators."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PyQt6.QtCore import QObject, QRect, Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QColor, QGuiApplication, QPainter, QPaintEvent, QScreen
from PyQt6.QtWidgets import QWidget

from overlay_dimmer.logging_utils import LOGGER_NAME
from overlay_dimmer.surface import DisplayInfo, SurfaceError, TransactionFactory

_LOGGER = logging.getLogger(LOGGER_NAME)


def _screen_for(display_id: int) -> Optional[QScreen]:
    screens = QGuiApplication.screens()
    if 0 <= display_id < len(screens):
        return screens[display_id]
    return QGuiApplication.primaryScreen()


class QtDisplayProvider:
    """Maps a display id to the logical size of the matching QScreen."""

    def display_info(self, display_id: int) -> DisplayInfo:
        screen = _screen_for(display_id)
        if screen is None:
            _LOGGER.debug("No screen available for display %s; reporting empty geometry", display_id)
            return DisplayInfo(logical_width=0, logical_height=0)
        geometry = screen.geometry()
        return DisplayInfo(logical_width=geometry.width(), logical_height=geometry.height())


class _DimWidget(QWidget):
    def __init__(self) -> None:
        super().__init__(
            None,
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.Tool
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.WindowTransparentForInput,
        )
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_ShowWithoutActivating, True)
        self.setAutoFillBackground(False)
        self.dim_alpha = 0.0

    def paintEvent(self, event: QPaintEvent) -> None:  # noqa: N802 - Qt override
        painter = QPainter(self)
        try:
            painter.fillRect(self.rect(), QColor(0, 0, 0, int(round(self.dim_alpha * 255))))
        finally:
            painter.end()


class QtDimSurface:
    """Dim surface backed by a frameless, input-transparent top-level widget.

    Top-level Qt windows have no numeric stacking order; the layer is recorded
    and the window is raised when the layer increases and lowered when it drops.
    """

    def __init__(self, screen: Optional[QScreen]) -> None:
        self._widget: Optional[_DimWidget] = _DimWidget()
        self._origin = QRect(0, 0, 0, 0)
        if screen is not None:
            self._widget.setScreen(screen)
            self._origin = screen.geometry()
        self._layer: Optional[int] = None
        self._destroy_listeners: List[Callable[["QtDimSurface"], None]] = []

    def __repr__(self) -> str:
        state = "destroyed" if self._widget is None else f"0x{id(self._widget):x}"
        return f"QtDimSurface({state}, layer={self._layer})"

    @property
    def widget(self) -> Optional[QWidget]:
        return self._widget

    @property
    def layer(self) -> Optional[int]:
        return self._layer

    def add_destroy_listener(self, listener: Callable[["QtDimSurface"], None]) -> None:
        self._destroy_listeners.append(listener)

    def _require_widget(self) -> _DimWidget:
        if self._widget is None:
            raise SurfaceError("dim surface already destroyed")
        return self._widget

    def set_position(self, x: float, y: float) -> None:
        widget = self._require_widget()
        widget.move(self._origin.x() + int(round(x)), self._origin.y() + int(round(y)))

    def set_size(self, width: int, height: int) -> None:
        self._require_widget().resize(max(1, width), max(1, height))

    def set_layer(self, layer: int) -> None:
        widget = self._require_widget()
        previous = self._layer
        self._layer = layer
        if previous is None or layer >= previous:
            widget.raise_()
        else:
            widget.lower()

    def set_alpha(self, alpha: float) -> None:
        widget = self._require_widget()
        widget.dim_alpha = alpha
        widget.update()

    def show(self) -> None:
        self._require_widget().show()

    def hide(self) -> None:
        self._require_widget().hide()

    def suspend_updates(self) -> None:
        if self._widget is not None:
            self._widget.setUpdatesEnabled(False)

    def resume_updates(self) -> None:
        if self._widget is not None:
            self._widget.setUpdatesEnabled(True)
            self._widget.update()

    def destroy(self) -> None:
        widget = self._require_widget()
        self._widget = None
        widget.hide()
        widget.deleteLater()
        listeners, self._destroy_listeners = self._destroy_listeners, []
        for listener in listeners:
            listener(self)


class QtUpdateBatch:
    """Atomic-update scope: tracked surfaces repaint once when the outermost scope closes.

    The instance is its own transaction factory, so it can be passed straight to
    ``OverlayDimmer(transaction=...)``. Scopes nest.
    """

    def __init__(self) -> None:
        self._surfaces: List[QtDimSurface] = []
        self._depth = 0

    def __call__(self) -> "QtUpdateBatch":
        return self

    @property
    def is_open(self) -> bool:
        return self._depth > 0

    @property
    def tracked(self) -> tuple[QtDimSurface, ...]:
        return tuple(self._surfaces)

    def track(self, surface: QtDimSurface) -> None:
        if surface in self._surfaces or surface.widget is None:
            return
        self._surfaces.append(surface)
        surface.add_destroy_listener(self.untrack)
        if self._depth > 0:
            surface.suspend_updates()

    def untrack(self, surface: QtDimSurface) -> None:
        if surface in self._surfaces:
            self._surfaces.remove(surface)

    def __enter__(self) -> "QtUpdateBatch":
        if self._depth == 0:
            for surface in self._surfaces:
                surface.suspend_updates()
        self._depth += 1
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._depth -= 1
        if self._depth == 0:
            for surface in self._surfaces:
                surface.resume_updates()


def make_qt_surface_factory(batch: Optional[QtUpdateBatch] = None) -> Callable[[int], QtDimSurface]:
    def _factory(display_id: int) -> QtDimSurface:
        if QGuiApplication.instance() is None:
            raise SurfaceError("QApplication must exist before creating a dim surface")
        surface = QtDimSurface(_screen_for(display_id))
        if batch is not None:
            batch.track(surface)
        return surface

    return _factory


class DimFrameDriver(QObject):
    """Calls ``advance()`` on a timer until the dimmer settles.

    Lives outside the dimmer: it only supplies the periodic tick the dimmer expects
    from its caller, opening the update scope around each step.
    """

    finished = pyqtSignal()

    def __init__(
        self,
        dimmer,
        *,
        transaction: TransactionFactory,
        interval_ms: int = 16,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._dimmer = dimmer
        self._transaction = transaction
        self._timer = QTimer(self)
        self._timer.setInterval(max(1, interval_ms))
        self._timer.timeout.connect(self.tick)

    def is_active(self) -> bool:
        return self._timer.isActive()

    def start(self) -> None:
        if not self._timer.isActive():
            self._timer.start()

    def stop(self) -> None:
        self._timer.stop()

    def tick(self) -> bool:
        with self._transaction():
            still_animating = self._dimmer.advance()
        if not still_animating:
            self._timer.stop()
            self.finished.emit()
        return still_animating
