import logging

import numpy as np
import pytest
from sample_meshes import corner_tetrahedron, perturbed_icosphere

from core.exceptions import DegenerateGeometryError
from geometry.adjacency import build_vertex_adjacency
from geometry.mesh import TriangleMesh
from runtime.diagnostics.metrics import enclosed_volume, surface_area
from runtime.forces import accumulate_forces, net_force


def _forces(mesh, sigma=1.0, **kwargs):
    adj = build_vertex_adjacency(mesh.n_vertices, mesh.triangles)
    area_force = np.zeros((mesh.n_vertices, 3))
    volume_force = np.zeros((mesh.n_vertices, 3))
    n_bad = accumulate_forces(
        mesh.positions, adj, sigma, area_force, volume_force, **kwargs
    )
    return area_force, volume_force, n_bad


def _central_difference(fn, positions, triangles, vertex, axis, eps=1e-6):
    plus = positions.copy()
    minus = positions.copy()
    plus[vertex, axis] += eps
    minus[vertex, axis] -= eps
    return (fn(plus, triangles) - fn(minus, triangles)) / (2.0 * eps)


@pytest.mark.parametrize("sigma", [1.0, 0.37])
def test_area_force_matches_finite_difference(sigma):
    mesh = perturbed_icosphere(1)
    area_force, _, _ = _forces(mesh, sigma)
    positions = np.array(mesh.positions)
    for vertex in (0, 5, 17, 41):
        for axis in range(3):
            fd = _central_difference(surface_area, positions, mesh.triangles, vertex, axis)
            assert area_force[vertex, axis] == pytest.approx(-sigma * fd, abs=1e-6)


def test_volume_force_matches_finite_difference():
    mesh = perturbed_icosphere(1, seed=3)
    _, volume_force, _ = _forces(mesh)
    positions = np.array(mesh.positions)
    for vertex in (1, 9, 30):
        for axis in range(3):
            fd = _central_difference(
                enclosed_volume, positions, mesh.triangles, vertex, axis
            )
            assert volume_force[vertex, axis] == pytest.approx(-fd, abs=1e-6)


def test_corner_tetrahedron_forces():
    mesh = corner_tetrahedron()
    area_force, volume_force, n_bad = _forces(mesh)
    assert n_bad == 0
    # Pushing the origin vertex toward the slanted face shrinks the volume,
    # so minus the volume gradient points along (1, 1, 1).
    assert np.allclose(volume_force[0], [1.0 / 6.0, 1.0 / 6.0, 1.0 / 6.0])
    # Moving the origin vertex inward along the diagonal shrinks the area.
    assert np.dot(area_force[0], [1.0, 1.0, 1.0]) > 0.0
    assert np.allclose(area_force.sum(axis=0), 0.0)
    assert np.allclose(volume_force.sum(axis=0), 0.0)


def test_buffers_are_fully_recomputed():
    mesh = corner_tetrahedron()
    adj = build_vertex_adjacency(mesh.n_vertices, mesh.triangles)
    area_force = np.full((4, 3), 99.0)
    volume_force = np.full((4, 3), -99.0)
    accumulate_forces(mesh.positions, adj, 1.0, area_force, volume_force)
    expected_area, expected_volume, _ = _forces(mesh)
    assert np.allclose(area_force, expected_area)
    assert np.allclose(volume_force, expected_volume)


def _flattened_tetrahedron():
    # Vertex 3 dropped onto the segment between vertices 1 and 2, making the
    # face (1, 2, 3) a zero-area sliver.
    positions = [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.5, 0.5, 0.0]]
    return corner_tetrahedron().with_positions(np.array(positions))


def test_degenerate_triangle_contributes_zero_area_force(caplog):
    caplog.set_level(logging.WARNING, logger="surface_evolver")
    mesh = _flattened_tetrahedron()
    area_force, volume_force, n_bad = _forces(mesh, degeneracy_policy="zero")

    assert n_bad == 3
    assert np.all(np.isfinite(area_force))
    assert np.all(np.isfinite(volume_force))
    assert "degenerate" in caplog.text

    # Same result as dropping the sliver from the triangle list.
    kept = TriangleMesh(mesh.positions, mesh.triangles[:3])
    adj = build_vertex_adjacency(4, kept.triangles)
    expected = np.zeros((4, 3))
    accumulate_forces(kept.positions, adj, 1.0, expected, np.zeros((4, 3)))
    assert np.allclose(area_force, expected)


def test_degenerate_triangle_raises_under_raise_policy():
    mesh = _flattened_tetrahedron()
    with pytest.raises(DegenerateGeometryError) as excinfo:
        _forces(mesh, degeneracy_policy="raise")
    assert set(excinfo.value.vertex_indices) == {1, 2, 3}


def test_net_force_is_sum_of_buffers():
    area_force = np.array([[1.0, 0.0, 0.0], [0.0, 2.0, 0.0]])
    volume_force = np.array([[0.5, 0.0, 0.0], [0.0, -2.0, 1.0]])
    assert np.allclose(net_force(area_force, volume_force), [[1.5, 0, 0], [0, 0, 1]])
