import numpy as np
from dataclasses import dataclass, field
from typing import Sequence, Tuple

# Axes shorter than this are treated as degenerate
_AXIS_TOLERANCE = 1e-12


@dataclass(frozen=True)
class GridCoordinate:
    """Integer address of one unit cell of the normalized slot grid."""

    x: int
    y: int
    z: int

    @classmethod
    def from_point(cls, point: Sequence[float]) -> "GridCoordinate":
        """Round a normalized point to the nearest cell.

        Halves round to the nearest even integer.
        """
        x, y, z = np.rint(np.asarray(point, dtype=float)[:3]).astype(int)
        return cls(int(x), int(y), int(z))

    def to_point(self) -> Tuple[float, float, float]:
        return (float(self.x), float(self.y), float(self.z))


@dataclass(frozen=True)
class Plane:
    """Grid base plane: an origin and an orthonormal axis triple.

    The axes are orthonormalized on construction the same way a plane is built
    from an origin and two in-plane directions: ``x_axis`` keeps its direction,
    ``z_axis`` is perpendicular to both inputs and ``y_axis`` completes the
    right-handed frame.
    """

    origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    x_axis: Tuple[float, float, float] = (1.0, 0.0, 0.0)
    y_axis: Tuple[float, float, float] = (0.0, 1.0, 0.0)
    z_axis: Tuple[float, float, float] = field(init=False)

    def __post_init__(self):
        origin = np.asarray(self.origin, dtype=float)
        x = np.asarray(self.x_axis, dtype=float)
        y = np.asarray(self.y_axis, dtype=float)
        if origin.shape != (3,) or x.shape != (3,) or y.shape != (3,):
            raise ValueError("Plane origin and axes must be 3D vectors")
        if not (np.all(np.isfinite(origin)) and np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
            raise ValueError("Plane origin and axes must be finite")
        x_len = np.linalg.norm(x)
        if x_len < _AXIS_TOLERANCE:
            raise ValueError("Plane x axis has zero length")
        x = x / x_len
        z = np.cross(x, y)
        z_len = np.linalg.norm(z)
        if z_len < _AXIS_TOLERANCE:
            raise ValueError("Plane axes are parallel")
        z = z / z_len
        y = np.cross(z, x)
        object.__setattr__(self, "origin", tuple(float(v) for v in origin))
        object.__setattr__(self, "x_axis", tuple(float(v) for v in x))
        object.__setattr__(self, "y_axis", tuple(float(v) for v in y))
        object.__setattr__(self, "z_axis", tuple(float(v) for v in z))

    @classmethod
    def world_xy(cls) -> "Plane":
        return cls()

    def frame(self) -> np.ndarray:
        """4x4 matrix mapping world XY coordinates onto this plane."""
        mat = np.eye(4)
        mat[:3, 0] = self.x_axis
        mat[:3, 1] = self.y_axis
        mat[:3, 2] = self.z_axis
        mat[:3, 3] = self.origin
        return mat


def normalization_transform(base_plane: Plane, diagonal: Sequence[float]) -> np.ndarray:
    """Transform taking world geometry into the unit slot grid.

    Scales about ``base_plane`` by ``1 / diagonal`` along its axes, then maps
    the plane onto world XY so one slot becomes the unit cube at an integer
    address.
    """
    frame = base_plane.frame()
    inv_frame = np.linalg.inv(frame)
    scale = np.diag([1.0 / d for d in diagonal] + [1.0])
    scale_about_plane = frame @ scale @ inv_frame
    return inv_frame @ scale_about_plane


def denormalization_transform(base_plane: Plane, diagonal: Sequence[float]) -> np.ndarray:
    """Inverse of :func:`normalization_transform`."""
    frame = base_plane.frame()
    scale = np.diag([float(d) for d in diagonal] + [1.0])
    scale_about_plane = frame @ scale @ np.linalg.inv(frame)
    return scale_about_plane @ frame


def transform_points(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Apply a 4x4 homogeneous transform to an (N, 3) array."""
    points = np.asarray(points, dtype=float).reshape(-1, 3)
    homogeneous = np.hstack([points, np.ones((len(points), 1))])
    return (homogeneous @ matrix.T)[:, :3]
