"""Per-vertex opposite-edge tables built once per mesh.

For a triangle ``(a, b, c)`` the opposite edge of each corner keeps the
triangle's winding: ``a`` gets ``(b, c)``, ``b`` gets ``(c, a)`` and ``c``
gets ``(a, b)``. Every area and volume formula in the force accumulator and
the curvature diagnostic reads its orientation from these pairs.

The tables are stored compactly, CSR style: row ``offsets[i] + k`` of
``pairs`` is the ``k``-th opposite edge of vertex ``i`` and ``owners`` repeats
``i`` for each of its rows, so per-step kernels can run over all rows at once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from core.exceptions import MeshValidationError

logger = logging.getLogger("surface_evolver")


@dataclass(frozen=True, eq=False)
class VertexAdjacency:
    """Flattened opposite-edge table for all vertices."""

    pairs: np.ndarray  # (3T, 2) opposite-edge vertex indices
    owners: np.ndarray  # (3T,) vertex each row belongs to
    counts: np.ndarray  # (V,) incident triangles per vertex
    offsets: np.ndarray  # (V,) first row of each vertex

    @property
    def n_vertices(self) -> int:
        return int(self.counts.shape[0])

    def opposite_edges(self, vertex: int) -> List[Tuple[int, int]]:
        """Return the ordered opposite-edge pairs of ``vertex``."""
        start = int(self.offsets[vertex])
        stop = start + int(self.counts[vertex])
        return [(int(p), int(q)) for p, q in self.pairs[start:stop]]


def opposite_edge(triangle, vertex: int) -> Tuple[int, int]:
    """Return the winding-preserving edge of ``triangle`` opposite ``vertex``."""
    a, b, c = (int(x) for x in triangle)
    if a == vertex:
        return b, c
    if b == vertex:
        return c, a
    if c == vertex:
        return a, b
    raise ValueError(f"Vertex {vertex} is not a corner of triangle {(a, b, c)}.")


def build_vertex_adjacency(n_vertices: int, triangles: np.ndarray) -> VertexAdjacency:
    """Collect the incident triangles of every vertex as opposite edges.

    Each vertex scans the full triangle list in order, so the pairs of a
    vertex appear in triangle order and rebuilding from the same list yields
    identical tables. The scan is O(V*T); it runs once per mesh and never on
    the per-step path.

    Raises
    ------
    MeshValidationError
        If a triangle references an index outside ``[0, n_vertices)``.
    """
    triangles = np.asarray(triangles, dtype=np.int64)
    if triangles.ndim != 2 or triangles.shape[1] != 3:
        raise MeshValidationError(
            f"Triangles must have shape (T, 3); got {triangles.shape}."
        )
    bad = np.nonzero(np.any((triangles < 0) | (triangles >= n_vertices), axis=1))[0]
    if bad.size:
        tri = int(bad[0])
        raise MeshValidationError(
            f"Triangle {tri} {triangles[tri].tolist()} references a vertex "
            f"outside [0, {n_vertices}).",
            triangle_index=tri,
        )

    n_tris = triangles.shape[0]
    pairs = np.empty((3 * n_tris, 2), dtype=np.int64)
    owners = np.empty(3 * n_tris, dtype=np.int64)
    counts = np.zeros(n_vertices, dtype=np.int64)
    offsets = np.zeros(n_vertices, dtype=np.int64)

    offset = 0
    for vertex in range(n_vertices):
        offsets[vertex] = offset
        # Full scan of the triangle list; nonzero keeps triangle order.
        hits = np.nonzero(np.any(triangles == vertex, axis=1))[0]
        for count, tri_idx in enumerate(hits):
            pairs[offset + count] = opposite_edge(triangles[tri_idx], vertex)
            owners[offset + count] = vertex
        counts[vertex] = hits.size
        offset += hits.size

    # A triangle repeating a vertex is emitted once for that vertex, leaving
    # unused rows at the end.
    pairs = pairs[:offset]
    owners = owners[:offset]

    isolated = int(np.count_nonzero(counts == 0))
    if isolated:
        logger.debug("%d vertices have no incident triangles.", isolated)
    logger.debug(
        "Built opposite-edge adjacency: %d vertices, %d triangles, %d rows.",
        n_vertices,
        n_tris,
        offset,
    )

    for arr in (pairs, owners, counts, offsets):
        arr.setflags(write=False)
    return VertexAdjacency(pairs=pairs, owners=owners, counts=counts, offsets=offsets)


__all__ = ["VertexAdjacency", "build_vertex_adjacency", "opposite_edge"]
