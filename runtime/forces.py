"""Per-vertex surface-tension and volume forces.

For vertex ``i`` and each of its opposite edges ``(p, q)`` with
``x1 = x[i]``, ``x2 = x[p]``, ``x3 = x[q]``, ``s1 = x2 - x1`` and
``s2 = x3 - x2``::

    area_force[i]   += sigma / 2 * s2 x (s1 x s2) / |s1 x s2|
    volume_force[i] += (x3 x x2) / 6

The area term is ``-sigma`` times the gradient of the triangle area with
respect to ``x1``. The volume term is minus the gradient of the
divergence-theorem volume ``x_a . (x_b x x_c) / 6`` for this pairing.
"""

from __future__ import annotations

import logging

import numpy as np

from core.exceptions import DegenerateGeometryError
from geometry.adjacency import VertexAdjacency
from geometry.triangle_ops import _fast_cross

logger = logging.getLogger("surface_evolver")


def accumulate_forces(
    positions: np.ndarray,
    adjacency: VertexAdjacency,
    surface_tension: float,
    area_force: np.ndarray,
    volume_force: np.ndarray,
    *,
    degeneracy_policy: str = "zero",
    degenerate_tol: float = 1e-12,
) -> int:
    """Recompute both force buffers in place from one position snapshot.

    ``area_force`` and ``volume_force`` are ``(V, 3)`` buffers owned by the
    caller; they are zeroed first, never updated incrementally. Every row of
    the adjacency reads ``positions`` only, so the whole pass is a single
    vectorized map followed by a scatter-add onto the owning vertices.

    A contribution is degenerate when ``|s1 x s2| <= degenerate_tol * |s1| *
    |s2|``. Under the ``"zero"`` policy its area term is dropped (the volume
    term stays, it is always finite); under ``"raise"`` the first one found
    aborts with :class:`DegenerateGeometryError`.

    Returns
    -------
    int
        Number of degenerate contributions that were zeroed.
    """
    area_force.fill(0.0)
    volume_force.fill(0.0)
    if adjacency.owners.size == 0:
        return 0

    owners = adjacency.owners
    x1 = positions[owners]
    x2 = positions[adjacency.pairs[:, 0]]
    x3 = positions[adjacency.pairs[:, 1]]
    s1 = x2 - x1
    s2 = x3 - x2

    n = _fast_cross(s1, s2)
    n_len = np.linalg.norm(n, axis=1)
    bound = degenerate_tol * np.linalg.norm(s1, axis=1) * np.linalg.norm(s2, axis=1)
    degenerate = n_len <= bound
    n_degenerate = int(np.count_nonzero(degenerate))

    if n_degenerate and degeneracy_policy == "raise":
        row = int(np.argmax(degenerate))
        corner = (
            int(owners[row]),
            int(adjacency.pairs[row, 0]),
            int(adjacency.pairs[row, 1]),
        )
        raise DegenerateGeometryError(
            f"Degenerate triangle {corner} at vertex {corner[0]}: "
            f"|s1 x s2| = {n_len[row]:.3e}.",
            vertex_indices=corner,
        )

    safe_len = np.where(degenerate, 1.0, n_len)
    area_terms = (0.5 * surface_tension) * _fast_cross(s2, n) / safe_len[:, None]
    area_terms[degenerate] = 0.0
    volume_terms = _fast_cross(x3, x2) / 6.0

    np.add.at(area_force, owners, area_terms)
    np.add.at(volume_force, owners, volume_terms)

    if n_degenerate:
        logger.warning(
            "Zeroed %d degenerate triangle contributions to the area force.",
            n_degenerate,
        )
    return n_degenerate


def net_force(area_force: np.ndarray, volume_force: np.ndarray) -> np.ndarray:
    """Per-vertex sum of the two force buffers."""
    return area_force + volume_force


__all__ = ["accumulate_forces", "net_force"]
