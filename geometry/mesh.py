"""Immutable triangle-mesh container and construction-time validation."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from core.exceptions import MeshValidationError

logger = logging.getLogger("surface_evolver")


@dataclass(frozen=True, eq=False)
class TriangleMesh:
    """Vertex positions plus a fixed, winding-ordered triangle list.

    ``positions`` is copied to a float64 ``(V, 3)`` array and ``triangles`` to
    an int64 ``(T, 3)`` array. Both are marked read-only; the engine takes its
    own writable copy of the positions.
    """

    positions: np.ndarray
    triangles: np.ndarray
    name: str = field(default="mesh", compare=False)

    def __post_init__(self) -> None:
        positions = np.array(self.positions, dtype=float)
        try:
            triangles = np.array(self.triangles, dtype=np.int64)
        except (TypeError, ValueError) as exc:
            raise MeshValidationError(f"Triangles must be integer triples: {exc}") from exc
        positions.setflags(write=False)
        triangles.setflags(write=False)
        object.__setattr__(self, "positions", positions)
        object.__setattr__(self, "triangles", triangles)

    @property
    def n_vertices(self) -> int:
        return int(self.positions.shape[0]) if self.positions.ndim == 2 else 0

    @property
    def n_triangles(self) -> int:
        return int(self.triangles.shape[0]) if self.triangles.ndim == 2 else 0

    def with_positions(self, positions: np.ndarray) -> "TriangleMesh":
        """Return a mesh with the same topology and new positions."""
        return TriangleMesh(positions, self.triangles, name=self.name)

    def reversed_winding(self) -> "TriangleMesh":
        """Return the same surface with every triangle's winding flipped."""
        return TriangleMesh(self.positions, self.triangles[:, ::-1], name=self.name)


def validate_mesh(mesh: TriangleMesh, *, require_closed: bool = True) -> None:
    """Check every construction precondition of ``mesh``.

    Raises
    ------
    MeshValidationError
        If shapes are wrong, positions are not finite, a triangle references
        an index outside ``[0, V)`` or repeats a vertex, or (when
        ``require_closed``) the surface is not closed and consistently wound.
    """
    positions = mesh.positions
    triangles = mesh.triangles

    if positions.ndim != 2 or positions.shape[1] != 3:
        raise MeshValidationError(
            f"Vertex positions must have shape (V, 3); got {positions.shape}."
        )
    if positions.shape[0] == 0:
        raise MeshValidationError("Mesh has no vertices.")
    if not np.all(np.isfinite(positions)):
        raise MeshValidationError("Vertex positions must be finite.")
    if triangles.ndim != 2 or triangles.shape[1] != 3:
        raise MeshValidationError(
            f"Triangles must have shape (T, 3); got {triangles.shape}."
        )
    if triangles.shape[0] == 0:
        raise MeshValidationError("Mesh has no triangles.")

    n_verts = positions.shape[0]
    out_of_range = np.nonzero(np.any((triangles < 0) | (triangles >= n_verts), axis=1))[0]
    if out_of_range.size:
        tri = int(out_of_range[0])
        raise MeshValidationError(
            f"Triangle {tri} {triangles[tri].tolist()} references a vertex "
            f"outside [0, {n_verts}).",
            triangle_index=tri,
        )

    repeated = np.nonzero(
        (triangles[:, 0] == triangles[:, 1])
        | (triangles[:, 1] == triangles[:, 2])
        | (triangles[:, 2] == triangles[:, 0])
    )[0]
    if repeated.size:
        tri = int(repeated[0])
        raise MeshValidationError(
            f"Triangle {tri} {triangles[tri].tolist()} repeats a vertex.",
            triangle_index=tri,
        )

    if require_closed:
        check_closed_orientation(triangles)

    unused = n_verts - np.unique(triangles).size
    if unused:
        logger.warning("%d vertices are not referenced by any triangle.", unused)


def check_closed_orientation(triangles: np.ndarray | Sequence[Sequence[int]]) -> None:
    """Verify the surface is closed and consistently wound.

    Each directed edge ``(u, v)`` taken in winding order must occur exactly
    once, and its reverse ``(v, u)`` exactly once.
    """
    directed: Counter = Counter()
    first_seen: dict[tuple[int, int], int] = {}
    for tri_idx, (a, b, c) in enumerate(np.asarray(triangles).tolist()):
        for edge in ((a, b), (b, c), (c, a)):
            directed[edge] += 1
            first_seen.setdefault(edge, tri_idx)

    for edge, count in directed.items():
        if count > 1:
            raise MeshValidationError(
                f"Directed edge {edge} is used by {count} triangles; "
                "triangle winding is inconsistent.",
                triangle_index=first_seen[edge],
                edge=edge,
            )
        reverse = (edge[1], edge[0])
        if reverse not in directed:
            raise MeshValidationError(
                f"Edge {edge} has no opposite half-edge; the surface is not closed.",
                triangle_index=first_seen[edge],
                edge=edge,
            )


__all__ = ["TriangleMesh", "validate_mesh", "check_closed_orientation"]
