import math

import numpy as np
import pytest
from sample_meshes import corner_tetrahedron

from geometry.adjacency import build_vertex_adjacency
from geometry.primitives import icosphere, tetrahedron
from runtime.diagnostics.metrics import (
    enclosed_volume,
    gaussian_curvature,
    mean_curvature,
    mean_net_force,
    surface_area,
    vertex_angle_defects,
    vertex_curvatures,
)


@pytest.mark.parametrize("edge", [1.0, 2.0, 0.3])
def test_regular_tetrahedron_volume_and_area(edge):
    mesh = tetrahedron(edge)
    assert enclosed_volume(mesh.positions, mesh.triangles) == pytest.approx(
        edge**3 / (6.0 * math.sqrt(2.0))
    )
    assert surface_area(mesh.positions, mesh.triangles) == pytest.approx(
        math.sqrt(3.0) * edge**2
    )


def test_corner_tetrahedron_volume():
    mesh = corner_tetrahedron()
    assert enclosed_volume(mesh.positions, mesh.triangles) == pytest.approx(1.0 / 6.0)
    assert surface_area(mesh.positions, mesh.triangles) == pytest.approx(
        1.5 + math.sqrt(3.0) / 2.0
    )


def test_volume_sign_follows_winding():
    mesh = tetrahedron(1.0)
    flipped = mesh.reversed_winding()
    assert enclosed_volume(flipped.positions, flipped.triangles) == pytest.approx(
        -enclosed_volume(mesh.positions, mesh.triangles)
    )


def test_volume_is_translation_invariant():
    mesh = corner_tetrahedron()
    shifted = mesh.positions + np.array([3.0, -2.0, 7.5])
    assert enclosed_volume(shifted, mesh.triangles) == pytest.approx(1.0 / 6.0)


def test_mean_net_force():
    area_force = np.array([[3.0, 0.0, 0.0], [0.0, 0.0, 0.0]])
    volume_force = np.array([[0.0, 4.0, 0.0], [0.0, 0.0, -2.0]])
    assert mean_net_force(area_force, volume_force) == pytest.approx(3.5)
    assert mean_net_force(np.zeros((0, 3)), np.zeros((0, 3))) == 0.0


def test_angle_defects_satisfy_gauss_bonnet():
    mesh = icosphere(2)
    adj = build_vertex_adjacency(mesh.n_vertices, mesh.triangles)
    defects, areas = vertex_angle_defects(mesh.positions, adj)
    # Closed genus-0 surface: total defect is 2 * pi * chi = 4 * pi.
    assert defects.sum() == pytest.approx(4.0 * math.pi)
    # Every triangle is counted once per corner.
    assert areas.sum() == pytest.approx(3.0 * surface_area(mesh.positions, mesh.triangles))


def test_regular_tetrahedron_vertex_curvature():
    mesh = tetrahedron(1.0)
    adj = build_vertex_adjacency(mesh.n_vertices, mesh.triangles)
    # Three equilateral corners of pi/3 meet at every vertex.
    expected = (2.0 * math.pi - math.pi) / (3.0 * math.sqrt(3.0) / 4.0)
    assert np.allclose(vertex_curvatures(mesh.positions, adj), expected)
    assert mean_curvature(mesh.positions, adj) == pytest.approx(expected)


def test_curvature_on_unit_sphere():
    mesh = icosphere(3)
    adj = build_vertex_adjacency(mesh.n_vertices, mesh.triangles)
    # The defect is divided by the full incident area, three times the
    # barycentric vertex area, so the estimator reads K / 3 on a sphere.
    assert mean_curvature(mesh.positions, adj) == pytest.approx(1.0 / 3.0, rel=0.05)
    assert gaussian_curvature(mesh.positions, adj) == pytest.approx(1.0, rel=0.05)


def test_curvature_scales_with_radius():
    small = icosphere(2, radius=1.0)
    large = icosphere(2, radius=2.0)
    adj = build_vertex_adjacency(small.n_vertices, small.triangles)
    ratio = mean_curvature(small.positions, adj) / mean_curvature(large.positions, adj)
    assert ratio == pytest.approx(4.0)
