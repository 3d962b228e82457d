import uuid
import logging
from typing import Any, List, Optional, Sequence

import numpy as np
import trimesh

logger = logging.getLogger(__name__)


class ShapeMappingError(Exception):
    """Raised when a shape spec cannot be turned into geometry."""
    pass


def _vector(spec: dict, key: str, default: Optional[Sequence[float]] = None) -> np.ndarray:
    value = spec.get(key, default)
    if value is None:
        raise ShapeMappingError(f"Shape '{spec.get('shape')}' requires '{key}'")
    arr = np.asarray(value, dtype=float)
    if arr.shape != (3,):
        raise ShapeMappingError(f"'{key}' must be a 3D vector, got {value}")
    return arr


def _points(spec: dict, key: str = "points") -> np.ndarray:
    value = spec.get(key)
    if value is None:
        raise ShapeMappingError(f"Shape '{spec.get('shape')}' requires '{key}'")
    arr = np.asarray(value, dtype=float)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ShapeMappingError(f"'{key}' must be a list of 3D points")
    return arr


def _positive(spec: dict, *keys: str) -> float:
    for key in keys:
        if key in spec:
            value = spec[key]
            if not isinstance(value, (int, float)) or value <= 0:
                raise ShapeMappingError(f"'{key}' must be a positive number, got {value}")
            return float(value)
    raise ShapeMappingError(f"Shape '{spec.get('shape')}' requires one of {list(keys)}")


def _centered(mesh: trimesh.Trimesh, spec: dict) -> trimesh.Trimesh:
    center = _vector(spec, "center", (0.0, 0.0, 0.0))
    if np.any(center):
        mesh.apply_translation(center)
    return mesh


def map_shape(spec: dict, request_id: str | None = None) -> Any:
    """
    Convert a shape spec into trimesh geometry.

    Supported shapes: point, points, polyline, box, sphere, cylinder, mesh.
    Solids are centered on ``center`` (default origin).
    """
    logger.debug(
        "map_shape called",
        extra={"request_id": request_id, "shape": spec.get("shape") if isinstance(spec, dict) else None},
    )
    if not isinstance(spec, dict) or "shape" not in spec:
        raise ShapeMappingError("Shape spec must be an object with a 'shape' key")
    shape = str(spec["shape"]).lower()

    if shape == "point":
        return trimesh.PointCloud(_vector(spec, "point").reshape(1, 3))
    if shape == "points":
        return trimesh.PointCloud(_points(spec))
    if shape == "polyline":
        points = _points(spec)
        if len(points) < 2:
            raise ShapeMappingError("A polyline needs at least two points")
        return trimesh.load_path(points)
    if shape in ("cube", "box"):
        size = spec.get("size", spec.get("size_mm"))
        if isinstance(size, (int, float)):
            extents = [float(size)] * 3
        elif size is not None and len(size) == 3:
            extents = [float(s) for s in size]
        else:
            raise ShapeMappingError(f"Box size must be a number or a 3D vector, got {size}")
        if any(e <= 0 for e in extents):
            raise ShapeMappingError(f"Box size must be positive, got {size}")
        return _centered(trimesh.creation.box(extents=extents), spec)
    if shape == "sphere":
        if "radius" in spec:
            radius = _positive(spec, "radius")
        else:
            radius = _positive(spec, "size_mm") / 2
        subdivisions = int(spec.get("subdivisions", 3))
        return _centered(trimesh.creation.icosphere(subdivisions=subdivisions, radius=radius), spec)
    if shape == "cylinder":
        radius = _positive(spec, "radius", "radius_mm")
        height = _positive(spec, "height", "height_mm")
        return _centered(trimesh.creation.cylinder(radius=radius, height=height), spec)
    if shape == "mesh":
        vertices = _points(spec, "vertices")
        faces = np.asarray(spec.get("faces", []), dtype=int)
        if faces.ndim != 2 or faces.shape[1] != 3:
            raise ShapeMappingError("'faces' must be a list of vertex index triples")
        if faces.size and (faces.min() < 0 or faces.max() >= len(vertices)):
            raise ShapeMappingError("'faces' reference vertices that do not exist")
        return trimesh.Trimesh(vertices=vertices, faces=faces, process=True)
    raise ShapeMappingError(f"Unknown shape: {shape}")


def map_shapes(specs: Optional[List[dict]], request_id: str | None = None) -> Optional[List[Any]]:
    """Map a list of shape specs; ``None`` entries stay ``None``."""
    if specs is None:
        return None
    request_id = request_id or str(uuid.uuid4())
    geometry = [None if spec is None else map_shape(spec, request_id=request_id) for spec in specs]
    logger.debug(
        "map_shapes output",
        extra={"request_id": request_id, "count": len(geometry)},
    )
    return geometry
