"""Integrator that overwrites the buffer the forces were read from."""

from __future__ import annotations

import numpy as np

from .base import BaseIntegrator, _displacement


class InPlaceIntegrator(BaseIntegrator):
    """Single position buffer, updated in place every step.

    The displacement is computed in full from the force buffers before the
    buffer is touched, so every vertex of a step moves from the same
    snapshot and the next step reads the freshly displaced positions.
    """

    mode = "in_place"

    def __init__(self, positions: np.ndarray) -> None:
        self._positions = np.array(positions, dtype=float)

    @property
    def source(self) -> np.ndarray:
        return self._positions

    @property
    def active(self) -> np.ndarray:
        return self._positions

    def displace(self, area_force, volume_force, alpha, step_size):
        delta = _displacement(area_force, volume_force, alpha, step_size)
        self._positions += delta
        return delta
