"""Geometry reconciliation for the dim surface.

The surface is oversized by half in each direction and backed off so that a
frozen, rotated frame containing it never exposes an undimmed corner.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from overlay_dimmer.surface import DimSurface, DisplayInfo

OVERSCAN_FACTOR = 1.5
UNSET_LAYER = -1


@dataclass(frozen=True)
class DimGeometry:
    x: float
    y: float
    width: int
    height: int


def compute_dim_geometry(logical_width: int, logical_height: int) -> DimGeometry:
    width = int(logical_width * OVERSCAN_FACTOR)
    height = int(logical_height * OVERSCAN_FACTOR)
    # A sixth of the enlarged extent puts a quarter of the overscan on each side.
    x = -float(width // 6)
    y = -float(height // 6)
    return DimGeometry(x=x, y=y, width=width, height=height)


class GeometrySynchronizer:
    """Pushes position, size and layer to the surface only when they change."""

    def __init__(self, *, logger: logging.Logger) -> None:
        self._logger = logger
        self.layer = UNSET_LAYER
        self.last_width = 0
        self.last_height = 0

    def needs_update(self, geometry: DimGeometry, layer: int) -> bool:
        return (
            self.last_width != geometry.width
            or self.last_height != geometry.height
            or self.layer != layer
        )

    def sync(self, surface: DimSurface, info: DisplayInfo, layer: int) -> Optional[DimGeometry]:
        """Apply geometry for ``info``/``layer``; returns the geometry if anything was pushed."""
        geometry = compute_dim_geometry(info.logical_width, info.logical_height)
        if not self.needs_update(geometry, layer):
            return None
        try:
            surface.set_position(geometry.x, geometry.y)
            surface.set_size(geometry.width, geometry.height)
            surface.set_layer(layer)
        except RuntimeError as exc:
            self._logger.warning(
                "Failure setting dim size or layer (size=%dx%d layer=%d): %s",
                geometry.width,
                geometry.height,
                layer,
                exc,
            )
        self.last_width = geometry.width
        self.last_height = geometry.height
        self.layer = layer
        return geometry
