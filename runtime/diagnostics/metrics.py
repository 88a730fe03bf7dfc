"""Scalar mesh diagnostics: area, volume, curvature and net force."""

from __future__ import annotations

import logging

import numpy as np

from geometry.adjacency import VertexAdjacency
from geometry.triangle_ops import (
    _fast_cross,
    corner_angles,
    signed_volume_terms,
    triangle_areas,
)

logger = logging.getLogger("surface_evolver")


def surface_area(positions: np.ndarray, triangles: np.ndarray) -> float:
    """Total area, ``sum |(x_b - x_a) x (x_c - x_b)| / 2``."""
    return float(np.sum(triangle_areas(positions, triangles)))


def enclosed_volume(positions: np.ndarray, triangles: np.ndarray) -> float:
    """Signed enclosed volume, ``sum x_a . (x_b x x_c) / 6``.

    Positive when the triangles are wound outward.
    """
    return float(np.sum(signed_volume_terms(positions, triangles)))


def mean_net_force(area_force: np.ndarray, volume_force: np.ndarray) -> float:
    """Mean of ``|area_force + volume_force|`` over vertices."""
    if area_force.shape[0] == 0:
        return 0.0
    return float(np.mean(np.linalg.norm(area_force + volume_force, axis=1)))


def vertex_angle_defects(
    positions: np.ndarray, adjacency: VertexAdjacency
) -> tuple[np.ndarray, np.ndarray]:
    """Return per-vertex angular defect and incident triangle area.

    For each opposite edge ``(p, q)`` of vertex ``i`` the corner angle is the
    angle between ``u = x_p - x_i`` and ``v = x_q - x_i`` and the triangle
    area is ``|u x v| / 2``. The defect is ``2*pi`` minus the angle sum.
    """
    n_verts = adjacency.n_vertices
    angle_sums = np.zeros(n_verts, dtype=float)
    area_sums = np.zeros(n_verts, dtype=float)
    if adjacency.owners.size == 0:
        return 2.0 * np.pi - angle_sums, area_sums

    owners = adjacency.owners
    xi = positions[owners]
    u = positions[adjacency.pairs[:, 0]] - xi
    v = positions[adjacency.pairs[:, 1]] - xi

    np.add.at(angle_sums, owners, corner_angles(u, v))
    np.add.at(area_sums, owners, 0.5 * np.linalg.norm(_fast_cross(u, v), axis=1))
    return 2.0 * np.pi - angle_sums, area_sums


def vertex_curvatures(
    positions: np.ndarray,
    adjacency: VertexAdjacency,
    *,
    barycentric: bool = False,
) -> np.ndarray:
    """Angular-defect curvature per vertex.

    By default the defect is divided by the full incident area sum. With
    ``barycentric=True`` it is divided by one third of that sum (the
    barycentric vertex area), which is the Gaussian-curvature normalization.
    Vertices with no incident triangles yield NaN.
    """
    defects, areas = vertex_angle_defects(positions, adjacency)
    if barycentric:
        areas = areas / 3.0
    with np.errstate(divide="ignore", invalid="ignore"):
        return defects / areas


def mean_curvature(positions: np.ndarray, adjacency: VertexAdjacency) -> float:
    """Mean of ``(2*pi - angle sum) / incident area sum`` over vertices.

    Vertices without incident triangles are left out of the mean.
    """
    return _mean_over_connected(vertex_curvatures(positions, adjacency), adjacency)


def gaussian_curvature(positions: np.ndarray, adjacency: VertexAdjacency) -> float:
    """Mean angular defect over barycentric vertex area."""
    values = vertex_curvatures(positions, adjacency, barycentric=True)
    return _mean_over_connected(values, adjacency)


def _mean_over_connected(values: np.ndarray, adjacency: VertexAdjacency) -> float:
    connected = adjacency.counts > 0
    if not np.any(connected):
        return 0.0
    selected = values[connected]
    if not np.all(np.isfinite(selected)):
        logger.debug(
            "Curvature undefined at %d vertices (zero incident area).",
            int(np.count_nonzero(~np.isfinite(selected))),
        )
    return float(np.mean(selected))


__all__ = [
    "surface_area",
    "enclosed_volume",
    "mean_net_force",
    "vertex_angle_defects",
    "vertex_curvatures",
    "mean_curvature",
    "gaussian_curvature",
]
