"""Translucent overlay dimmer with linear alpha transitions."""

from overlay_dimmer.dim_geometry import DimGeometry, compute_dim_geometry
from overlay_dimmer.dimmer import OverlayDimmer
from overlay_dimmer.surface import DimSurface, DisplayInfo, DisplayProvider, SurfaceError

__version__ = "0.1.0"

__all__ = [
    "DimGeometry",
    "DimSurface",
    "DisplayInfo",
    "DisplayProvider",
    "OverlayDimmer",
    "SurfaceError",
    "compute_dim_geometry",
    "__version__",
]
