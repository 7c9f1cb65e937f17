"""Collaborator interfaces consumed by the overlay dimmer.

The dimmer never touches a toolkit directly; callers inject a display provider,
a surface factory and an atomic-update scope. Any of the surface calls may raise
``RuntimeError`` (``SurfaceError`` is the one our own adapters use).
"""
from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Callable, Protocol


class SurfaceError(RuntimeError):
    """Raised by a surface adapter when the native drawable rejects a call."""


@dataclass(frozen=True)
class DisplayInfo:
    logical_width: int
    logical_height: int


class DisplayProvider(Protocol):
    def display_info(self, display_id: int) -> DisplayInfo:
        ...


class DimSurface(Protocol):
    def set_position(self, x: float, y: float) -> None:
        ...

    def set_size(self, width: int, height: int) -> None:
        ...

    def set_layer(self, layer: int) -> None:
        ...

    def set_alpha(self, alpha: float) -> None:
        ...

    def show(self) -> None:
        ...

    def hide(self) -> None:
        ...

    def destroy(self) -> None:
        ...


SurfaceFactory = Callable[[int], DimSurface]
TransactionFactory = Callable[[], AbstractContextManager]
