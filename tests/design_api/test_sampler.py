import numpy as np
import pytest
import trimesh

from design_api.services.slots.sampler import populate_surface, populate_volume


def test_point_cloud_surface_is_its_points():
    cloud = trimesh.PointCloud([[0, 0, 0], [1, 2, 3]])
    points = populate_surface(0.5, cloud)
    assert np.allclose(points, [[0, 0, 0], [1, 2, 3]])
    assert populate_volume(0.5, cloud) is None


def test_polyline_is_sampled_along_its_length():
    path = trimesh.load_path(np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0]]))
    points = populate_surface(0.5, path)
    assert np.allclose(points[:, 1:], 0.0)
    xs = np.unique(np.round(points[:, 0], 9))
    assert xs[0] == pytest.approx(0.0)
    assert xs[-1] == pytest.approx(2.0)
    assert np.all(np.diff(xs) <= 0.5 + 1e-9)
    assert populate_volume(0.5, path) is None


def _within(points, bounds, tol=1e-9):
    return np.all(points >= bounds[0] - tol) and np.all(points <= bounds[1] + tol)


@pytest.mark.parametrize("step", [0.3, 0.35, 0.7])
def test_mesh_samples_stay_within_bounds(step):
    shapes = [
        trimesh.creation.box(extents=(1.0, 1.0, 1.0)),
        trimesh.creation.icosphere(subdivisions=2, radius=0.8),
        trimesh.creation.box(
            extents=(0.4, 0.4, 0.4),
            transform=trimesh.transformations.translation_matrix([0.25, 0.0, 0.0]),
        ),
    ]
    for mesh in shapes:
        surface = populate_surface(step, mesh)
        volume = populate_volume(step, mesh)
        assert len(surface) >= len(mesh.vertices)
        assert _within(surface, mesh.bounds)
        assert _within(volume, mesh.bounds)


def test_mesh_surface_edges_are_refined_to_step(unit_cube):
    coarse = populate_surface(0.7, unit_cube)
    fine = populate_surface(0.3, unit_cube)
    assert len(fine) > len(coarse)
    # cube faces stay on the surface
    assert np.allclose(np.abs(fine).max(axis=1), 0.5)


def test_volume_reaches_the_interior():
    box = trimesh.creation.box(extents=(2.0, 2.0, 2.0))
    surface = populate_surface(0.5, box)
    volume = populate_volume(0.5, box)
    assert np.allclose(np.abs(surface).max(axis=1), 1.0)
    # 4 x 4 x 4 cell-centered grid, all strictly inside
    assert len(volume) == 64
    assert np.all(np.abs(volume) < 1.0)
    assert np.any(np.all(np.abs(volume) < 0.5, axis=1))


def test_open_mesh_has_no_volume():
    triangle = trimesh.Trimesh(
        vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0]], faces=[[0, 1, 2]]
    )
    assert populate_volume(0.5, triangle) is None
    assert len(populate_surface(0.5, triangle)) > 0


def test_unsupported_geometry_raises():
    with pytest.raises(TypeError):
        populate_surface(0.5, "not geometry")
    with pytest.raises(TypeError):
        populate_volume(0.5, 42)


def test_step_must_be_positive(unit_cube):
    with pytest.raises(ValueError):
        populate_surface(0.0, unit_cube)
    with pytest.raises(ValueError):
        populate_volume(-1.0, unit_cube)
