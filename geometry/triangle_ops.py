"""Vectorized triangle geometry helpers shared by forces and diagnostics."""

from __future__ import annotations

import numpy as np


def _fast_cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Compute cross products for arrays of 3D vectors."""
    x = a[..., 1] * b[..., 2] - a[..., 2] * b[..., 1]
    y = a[..., 2] * b[..., 0] - a[..., 0] * b[..., 2]
    z = a[..., 0] * b[..., 1] - a[..., 1] * b[..., 0]
    out = np.empty(x.shape + (3,), dtype=x.dtype)
    out[..., 0] = x
    out[..., 1] = y
    out[..., 2] = z
    return out


def _row_dot(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Row-wise dot product of two ``(N, 3)`` arrays."""
    return np.einsum("ij,ij->i", a, b)


def triangle_normals(positions: np.ndarray, tri_rows: np.ndarray) -> np.ndarray:
    """Return unnormalized normals ``(x_b - x_a) x (x_c - x_b)``."""
    xa = positions[tri_rows[:, 0]]
    xb = positions[tri_rows[:, 1]]
    xc = positions[tri_rows[:, 2]]
    return _fast_cross(xb - xa, xc - xb)


def triangle_areas(positions: np.ndarray, tri_rows: np.ndarray) -> np.ndarray:
    """Return the area of every triangle."""
    return 0.5 * np.linalg.norm(triangle_normals(positions, tri_rows), axis=1)


def signed_volume_terms(positions: np.ndarray, tri_rows: np.ndarray) -> np.ndarray:
    """Per-triangle divergence-theorem terms ``x_a . (x_b x x_c) / 6``.

    Their sum is the enclosed volume, positive for outward winding.
    """
    xa = positions[tri_rows[:, 0]]
    xb = positions[tri_rows[:, 1]]
    xc = positions[tri_rows[:, 2]]
    return _row_dot(xa, _fast_cross(xb, xc)) / 6.0


def corner_angles(u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Angles between paired edge vectors, ``acos(u.v / sqrt(|u|^2 |v|^2))``."""
    uu = _row_dot(u, u)
    vv = _row_dot(v, v)
    with np.errstate(divide="ignore", invalid="ignore"):
        cos_theta = _row_dot(u, v) / np.sqrt(uu * vv)
    # Rounding can push the cosine just outside [-1, 1].
    return np.arccos(np.clip(cos_theta, -1.0, 1.0))
