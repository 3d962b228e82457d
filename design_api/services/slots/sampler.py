"""Point sampling of geometry surfaces and volumes.

Both routines return an (N, 3) array of points lying on or inside the
geometry, or ``None`` when the geometry has nothing to offer for the requested
mode (a point has no volume, an open mesh has no interior). Surface points are
the vertices of the mesh subdivided to ``step``; volume points are a grid of
spacing at most ``step`` over the bounds, kept where the mesh contains them.
"""

import logging
from typing import Any, Optional

import numpy as np
import trimesh
from trimesh.path import Path3D
from trimesh.path.traversal import resample_path

logger = logging.getLogger(__name__)


def _subdivision_iterations(mesh: trimesh.Trimesh, step: float) -> int:
    """Enough subdivision passes to bring every edge below ``step``."""
    longest = float(mesh.edges_unique_length.max()) if len(mesh.edges_unique) else 0.0
    if longest <= step:
        return 10
    passes = int(np.ceil(np.log2(longest / step)))
    return max(10, passes + 2)


def _subdivide(mesh: trimesh.Trimesh, step: float) -> np.ndarray:
    subdivided = mesh.subdivide_to_size(
        max_edge=step, max_iter=_subdivision_iterations(mesh, step)
    )
    return np.asarray(subdivided.vertices, dtype=float)


def _interior_grid(bounds: np.ndarray, step: float) -> np.ndarray:
    """Cell-centered grid over ``bounds`` with spacing no larger than ``step``.

    Thin axes get a single sample at the middle of the bounds.
    """
    axes = []
    for lo, hi in zip(bounds[0], bounds[1]):
        count = max(int(np.ceil((hi - lo) / step)), 1)
        axes.append(lo + (np.arange(count) + 0.5) * ((hi - lo) / count))
    grid = np.meshgrid(*axes, indexing="ij")
    return np.column_stack([g.ravel() for g in grid])


def _sample_polylines(path: Any, step: float) -> Optional[np.ndarray]:
    samples = []
    # Entities are discretized one by one; open curves are not part of path.discrete
    for entity in path.entities:
        polyline = np.asarray(entity.discrete(path.vertices), dtype=float)
        if len(polyline) < 2:
            samples.append(polyline)
            continue
        length = float(np.linalg.norm(np.diff(polyline, axis=0), axis=1).sum())
        if length <= step:
            samples.append(polyline)
            continue
        samples.append(resample_path(polyline, step=step, step_round=False))
        samples.append(polyline[[0, -1]])
    if not samples:
        return None
    return np.vstack(samples)


def populate_surface(step: float, geometry: Any) -> Optional[np.ndarray]:
    """Sample the boundary of ``geometry`` roughly every ``step`` units."""
    if step <= 0:
        raise ValueError(f"Sampling step must be positive, got {step}")
    if isinstance(geometry, trimesh.PointCloud):
        if len(geometry.vertices) == 0:
            return None
        return np.asarray(geometry.vertices, dtype=float)
    if isinstance(geometry, Path3D):
        return _sample_polylines(geometry, step)
    if isinstance(geometry, trimesh.Trimesh):
        if geometry.is_empty:
            return None
        return _subdivide(geometry, step)
    raise TypeError(f"Cannot sample geometry of type {type(geometry).__name__}")


def populate_volume(step: float, geometry: Any) -> Optional[np.ndarray]:
    """Sample the interior of ``geometry`` on a grid of spacing at most ``step``."""
    if step <= 0:
        raise ValueError(f"Sampling step must be positive, got {step}")
    if isinstance(geometry, (trimesh.PointCloud, Path3D)):
        return None
    if isinstance(geometry, trimesh.Trimesh):
        if geometry.is_empty:
            return None
        if not geometry.is_watertight:
            logger.debug("Mesh is not closed; no volume to populate")
            return None
        candidates = _interior_grid(np.asarray(geometry.bounds, dtype=float), step)
        return candidates[geometry.contains(candidates)]
    raise TypeError(f"Cannot sample geometry of type {type(geometry).__name__}")
