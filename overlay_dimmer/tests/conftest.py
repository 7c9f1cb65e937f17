import logging
import os

import pytest

from overlay_dimmer.dimmer import OverlayDimmer
from overlay_dimmer.surface import DisplayInfo, SurfaceError


def pytest_configure(config):
    config.addinivalue_line("markers", "pyqt_required: needs a working PyQt6 platform plugin")


def pytest_runtest_setup(item):
    if item.get_closest_marker("pyqt_required"):
        if not os.getenv("PYQT_TESTS"):
            pytest.skip("PYQT_TESTS not set; skipping PyQt-dependent test")


class RecordingSurface:
    """Surface double that records every call and can be told to fail."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise SurfaceError(f"{name} rejected")

    def set_position(self, x, y):
        self._record("set_position", x, y)

    def set_size(self, width, height):
        self._record("set_size", width, height)

    def set_layer(self, layer):
        self._record("set_layer", layer)

    def set_alpha(self, alpha):
        self._record("set_alpha", alpha)

    def show(self):
        self._record("show")

    def hide(self):
        self._record("hide")

    def destroy(self):
        self._record("destroy")

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


class StubClock:
    def __init__(self, value: float = 0.0) -> None:
        self.value = value

    def __call__(self) -> float:
        return self.value


class StubDisplay:
    def __init__(self, width: int = 1080, height: int = 1920) -> None:
        self.width = width
        self.height = height
        self.queries: list[int] = []

    def display_info(self, display_id: int) -> DisplayInfo:
        self.queries.append(display_id)
        return DisplayInfo(logical_width=self.width, logical_height=self.height)


class TransactionRecorder:
    def __init__(self) -> None:
        self.opened = 0
        self.closed = 0

    def __call__(self):
        return self

    def __enter__(self):
        self.opened += 1
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed += 1


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def clock():
    return StubClock()


@pytest.fixture
def display():
    return StubDisplay()


@pytest.fixture
def transaction_recorder():
    return TransactionRecorder()


@pytest.fixture
def dim_logger():
    logger = logging.getLogger("overlay_dimmer_tests")
    logger.propagate = True
    return logger


@pytest.fixture
def make_dimmer(surface, clock, display, dim_logger):
    def _make(**kwargs):
        kwargs.setdefault("display_provider", display)
        kwargs.setdefault("surface_factory", lambda _display_id: surface)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("logger", dim_logger)
        return OverlayDimmer(0, **kwargs)

    return _make


@pytest.fixture
def dimmer(make_dimmer):
    return make_dimmer()
