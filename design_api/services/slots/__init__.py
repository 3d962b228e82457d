from .grid import GridCoordinate, Plane
from .populate import FillMethod, populate_geometry_with_slot_centers
from .sampler import populate_surface, populate_volume

__all__ = [
    "FillMethod",
    "GridCoordinate",
    "Plane",
    "populate_geometry_with_slot_centers",
    "populate_surface",
    "populate_volume",
]
