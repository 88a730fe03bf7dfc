"""Closed reference meshes: tetrahedron, icosahedron and icospheres."""

from __future__ import annotations

import math
from typing import Dict, List, Tuple

import numpy as np

from geometry.mesh import TriangleMesh
from geometry.triangle_ops import _row_dot, triangle_normals

_PHI = (1.0 + math.sqrt(5.0)) / 2.0

_ICOSAHEDRON_VERTICES = [
    (-1.0, _PHI, 0.0),
    (1.0, _PHI, 0.0),
    (-1.0, -_PHI, 0.0),
    (1.0, -_PHI, 0.0),
    (0.0, -1.0, _PHI),
    (0.0, 1.0, _PHI),
    (0.0, -1.0, -_PHI),
    (0.0, 1.0, -_PHI),
    (_PHI, 0.0, -1.0),
    (_PHI, 0.0, 1.0),
    (-_PHI, 0.0, -1.0),
    (-_PHI, 0.0, 1.0),
]

_ICOSAHEDRON_FACES = [
    (0, 11, 5), (0, 5, 1), (0, 1, 7), (0, 7, 10), (0, 10, 11),
    (1, 5, 9), (5, 11, 4), (11, 10, 2), (10, 7, 6), (7, 1, 8),
    (3, 9, 4), (3, 4, 2), (3, 2, 6), (3, 6, 8), (3, 8, 9),
    (4, 9, 5), (2, 4, 11), (6, 2, 10), (8, 6, 7), (9, 8, 1),
]


def _orient_about_origin(
    positions: np.ndarray, faces: np.ndarray, outward: bool
) -> np.ndarray:
    """Flip faces of a convex, origin-centred solid to a common winding."""
    faces = np.array(faces, dtype=np.int64)
    normals = triangle_normals(positions, faces)
    centroids = positions[faces].mean(axis=1)
    facing_out = _row_dot(normals, centroids) > 0.0
    flip = ~facing_out if outward else facing_out
    faces[flip] = faces[flip][:, ::-1]
    return faces


def tetrahedron(edge_length: float = 1.0, *, outward: bool = True) -> TriangleMesh:
    """Regular tetrahedron centred at the origin."""
    scale = edge_length / (2.0 * math.sqrt(2.0))
    positions = scale * np.array(
        [
            [1.0, 1.0, 1.0],
            [1.0, -1.0, -1.0],
            [-1.0, 1.0, -1.0],
            [-1.0, -1.0, 1.0],
        ]
    )
    faces = _orient_about_origin(
        positions, [(0, 1, 2), (0, 1, 3), (0, 2, 3), (1, 2, 3)], outward
    )
    return TriangleMesh(positions, faces, name="tetrahedron")


def icosahedron(radius: float = 1.0, *, outward: bool = True) -> TriangleMesh:
    """Regular icosahedron with circumradius ``radius``."""
    positions = np.array(_ICOSAHEDRON_VERTICES)
    positions *= radius / np.linalg.norm(positions[0])
    faces = _orient_about_origin(positions, _ICOSAHEDRON_FACES, outward)
    return TriangleMesh(positions, faces, name="icosahedron")


def subdivide(
    mesh: TriangleMesh, levels: int = 1, *, radius: float | None = None
) -> TriangleMesh:
    """Split every triangle into four through its edge midpoints.

    Child triangles keep the parent's winding. When ``radius`` is given,
    new vertices are pushed onto the origin-centred sphere of that radius
    after every level.
    """
    if levels < 0:
        raise ValueError(f"levels must be >= 0; got {levels}")
    positions: List[np.ndarray] = [np.array(p, dtype=float) for p in mesh.positions]
    faces: List[Tuple[int, int, int]] = [tuple(int(i) for i in f) for f in mesh.triangles]

    for _ in range(levels):
        midpoints: Dict[Tuple[int, int], int] = {}

        def midpoint(i: int, j: int) -> int:
            key = (min(i, j), max(i, j))
            idx = midpoints.get(key)
            if idx is None:
                point = 0.5 * (positions[i] + positions[j])
                if radius is not None:
                    point *= radius / np.linalg.norm(point)
                idx = len(positions)
                positions.append(point)
                midpoints[key] = idx
            return idx

        new_faces: List[Tuple[int, int, int]] = []
        for a, b, c in faces:
            ab = midpoint(a, b)
            bc = midpoint(b, c)
            ca = midpoint(c, a)
            new_faces.extend([(a, ab, ca), (b, bc, ab), (c, ca, bc), (ab, bc, ca)])
        faces = new_faces

    return TriangleMesh(np.array(positions), np.array(faces), name=mesh.name)


def icosphere(
    subdivisions: int = 2, radius: float = 1.0, *, outward: bool = True
) -> TriangleMesh:
    """Subdivided icosahedron with every vertex on the sphere of ``radius``."""
    base = icosahedron(radius, outward=outward)
    sphere = subdivide(base, subdivisions, radius=radius)
    return TriangleMesh(sphere.positions, sphere.triangles, name="icosphere")


MESH_BUILDERS = {
    "tetrahedron": lambda n: subdivide(tetrahedron(), n),
    "icosahedron": lambda n: subdivide(icosahedron(), n),
    "icosphere": lambda n: icosphere(n),
}


def build_named_mesh(name: str, subdivisions: int = 0) -> TriangleMesh:
    """Return one of the built-in meshes by name."""
    try:
        builder = MESH_BUILDERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown mesh {name!r}; expected one of {sorted(MESH_BUILDERS)}."
        ) from None
    return builder(subdivisions)


__all__ = [
    "tetrahedron",
    "icosahedron",
    "icosphere",
    "subdivide",
    "build_named_mesh",
    "MESH_BUILDERS",
]
