"""Populate geometry with points ready to be used as WFC slot centers.

Geometry is scaled so that one slot becomes the unit cube and aligned with the
world frame. Sampled points are rounded to integer cell addresses, which are
deduplicated and mapped back to the base plane and the real slot size.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import numpy as np

from design_api.constants import (
    DEFAULT_FILL_METHOD,
    DEFAULT_PRECISION,
    DEFAULT_SLOT_DIAGONAL,
    MAX_SAMPLE_WORKERS,
)
from .grid import (
    GridCoordinate,
    Plane,
    denormalization_transform,
    normalization_transform,
    transform_points,
)
from .sampler import populate_surface, populate_volume

logger = logging.getLogger(__name__)

INVALID_DIAGONAL_MESSAGE = "One or more slot dimensions are not larger than 0."
INVALID_PRECISION_MESSAGE = "Precision must be larger than 0."


class FillMethod(IntEnum):
    SURFACE = 0
    VOLUME = 1
    BOTH = 2

    @property
    def surface(self) -> bool:
        return self in (FillMethod.SURFACE, FillMethod.BOTH)

    @property
    def volume(self) -> bool:
        return self in (FillMethod.VOLUME, FillMethod.BOTH)


def validate_parameters(
    diagonal: Sequence[float],
    fill_method: Union[int, FillMethod],
    precision: float,
) -> Optional[str]:
    """Return a message describing the first invalid parameter, or ``None``."""
    if len(diagonal) != 3 or any(not np.isfinite(d) or d <= 0 for d in diagonal):
        return INVALID_DIAGONAL_MESSAGE
    if not np.isfinite(precision) or precision <= 0:
        return INVALID_PRECISION_MESSAGE
    if fill_method not in set(FillMethod):
        return f"Fill method must be one of {[m.value for m in FillMethod]}, got {fill_method}."
    return None


def _normalize(shape: Any, matrix: np.ndarray) -> Any:
    """Copy ``shape`` and move it into the unit grid frame."""
    if not hasattr(shape, "apply_transform") or not hasattr(shape, "copy"):
        raise TypeError(f"Geometry of type {type(shape).__name__} cannot be transformed")
    normalized = shape.copy()
    normalized.apply_transform(matrix)
    vertices = np.asarray(getattr(normalized, "vertices", np.empty((0, 3))), dtype=float)
    if not np.all(np.isfinite(vertices)):
        raise ValueError("Transformed geometry has non-finite coordinates")
    return normalized


def _sample_cells(
    index: int,
    shape: Any,
    matrix: np.ndarray,
    fill_method: FillMethod,
    precision: float,
) -> List[GridCoordinate]:
    """Sample one shape and return its cell addresses in first-seen order."""
    try:
        normalized = _normalize(shape, matrix)
    except (TypeError, ValueError) as exc:
        logger.warning("Skipping geometry %d: %s", index, exc)
        return []

    batches = []
    try:
        if fill_method.surface:
            batches.append(populate_surface(precision, normalized))
        if fill_method.volume:
            batches.append(populate_volume(precision, normalized))
    except (TypeError, ValueError) as exc:
        logger.warning("Skipping geometry %d: sampling failed: %s", index, exc)
        return []

    cells: Dict[GridCoordinate, None] = {}
    for points in batches:
        if points is None or len(points) == 0:
            continue
        for point in points:
            cells.setdefault(GridCoordinate.from_point(point))
    if not cells:
        logger.debug("Geometry %d produced no samples", index)
    return list(cells)


def populate_geometry_with_slot_centers(
    geometry: Optional[Iterable[Any]],
    base_plane: Optional[Plane] = None,
    diagonal: Sequence[float] = DEFAULT_SLOT_DIAGONAL,
    fill_method: Union[int, FillMethod] = DEFAULT_FILL_METHOD,
    precision: float = DEFAULT_PRECISION,
    workers: Optional[int] = None,
) -> Optional[np.ndarray]:
    """Compute slot centers covering ``geometry``.

    Args:
        geometry: trimesh geometry (``Trimesh``, ``PointCloud``, ``Path3D``).
            ``None`` entries are ignored.
        base_plane: Grid orientation and origin. Defaults to world XY.
        diagonal: Slot size along the base plane axes; all components must be
            positive.
        fill_method: 0 wraps the surface, 1 fills the volume, 2 does both.
        precision: Sampling step in slot units. Lower is denser and slower.
        workers: Sample shapes on a thread pool of this size.

    Returns:
        (N, 3) array of world-space slot centers with one point per occupied
        cell, in first-seen order. ``None`` when the input is missing or a
        parameter is invalid.
    """
    if geometry is None:
        logger.info("No geometry supplied; slot centers are not computed")
        return None
    if base_plane is None:
        base_plane = Plane.world_xy()

    diagonal = [float(d) for d in diagonal]
    error = validate_parameters(diagonal, fill_method, precision)
    if error is not None:
        logger.error(error)
        return None
    fill_method = FillMethod(fill_method)

    shapes = [shape for shape in geometry if shape is not None]
    normalization = normalization_transform(base_plane, diagonal)

    def sample(item):
        index, shape = item
        return _sample_cells(index, shape, normalization, fill_method, precision)

    if workers is not None and workers > 1 and len(shapes) > 1:
        max_workers = min(workers, MAX_SAMPLE_WORKERS, len(shapes))
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            per_shape = list(pool.map(sample, enumerate(shapes)))
    else:
        per_shape = [sample(item) for item in enumerate(shapes)]

    centers_normalized: Dict[GridCoordinate, None] = {}
    for cells in per_shape:
        for cell in cells:
            centers_normalized.setdefault(cell)

    logger.debug(
        "Populated %d shapes with %d unique slots", len(shapes), len(centers_normalized)
    )
    if not centers_normalized:
        return np.empty((0, 3))

    points = np.array([cell.to_point() for cell in centers_normalized], dtype=float)
    return transform_points(denormalization_transform(base_plane, diagonal), points)
