import numpy as np
import pytest
import trimesh
from trimesh.path import Path3D

from design_api.services.mapping import ShapeMappingError, map_shape, map_shapes


def test_map_point_and_points():
    point = map_shape({"shape": "point", "point": [1, 2, 3]})
    assert isinstance(point, trimesh.PointCloud)
    assert np.allclose(point.vertices, [[1, 2, 3]])

    cloud = map_shape({"shape": "points", "points": [[0, 0, 0], [1, 1, 1]]})
    assert len(cloud.vertices) == 2


def test_map_polyline():
    path = map_shape({"shape": "polyline", "points": [[0, 0, 0], [1, 0, 0], [1, 1, 0]]})
    assert isinstance(path, Path3D)
    with pytest.raises(ShapeMappingError):
        map_shape({"shape": "polyline", "points": [[0, 0, 0]]})


def test_map_box_sizes():
    cube = map_shape({"shape": "cube", "size_mm": 2})
    assert np.allclose(cube.extents, [2, 2, 2])
    box = map_shape({"shape": "box", "size": [1, 2, 3], "center": [5, 0, 0]})
    assert np.allclose(box.extents, [1, 2, 3])
    assert np.allclose(box.bounds.mean(axis=0), [5, 0, 0])
    with pytest.raises(ShapeMappingError):
        map_shape({"shape": "box", "size": [1, 0, 1]})


def test_map_sphere_radius_or_size():
    by_radius = map_shape({"shape": "sphere", "radius": 2})
    by_size = map_shape({"shape": "sphere", "size_mm": 4})
    assert by_radius.is_watertight
    assert np.allclose(by_radius.extents, by_size.extents)
    with pytest.raises(ShapeMappingError):
        map_shape({"shape": "sphere", "radius": -1})


def test_map_cylinder():
    cylinder = map_shape({"shape": "cylinder", "radius_mm": 1, "height_mm": 4})
    assert np.isclose(cylinder.extents[2], 4)
    with pytest.raises(ShapeMappingError):
        map_shape({"shape": "cylinder", "radius": 1})


def test_map_mesh():
    mesh = map_shape(
        {
            "shape": "mesh",
            "vertices": [[0, 0, 0], [1, 0, 0], [0, 1, 0]],
            "faces": [[0, 1, 2]],
        }
    )
    assert len(mesh.faces) == 1
    with pytest.raises(ShapeMappingError):
        map_shape({"shape": "mesh", "vertices": [[0, 0, 0]], "faces": [[0, 1, 2]]})


@pytest.mark.parametrize("spec", [{"shape": "torus"}, {"size": 1}, "sphere"])
def test_map_rejects_unknown_specs(spec):
    with pytest.raises(ShapeMappingError):
        map_shape(spec)


def test_map_shapes_keeps_missing_entries():
    assert map_shapes(None) is None
    shapes = map_shapes([None, {"shape": "point", "point": [0, 0, 0]}])
    assert shapes[0] is None
    assert isinstance(shapes[1], trimesh.PointCloud)
