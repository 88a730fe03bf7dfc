"""Integrator that writes a secondary buffer and leaves the source intact."""

from __future__ import annotations

import numpy as np

from .base import BaseIntegrator, _displacement


class DoubleBufferedIntegrator(BaseIntegrator):
    """Source/destination pair of position buffers.

    Each step writes ``destination = source + displacement``. The source is
    not modified until :meth:`swap` is called, so stepping repeatedly without
    swapping recomputes the same destination from the same source.
    """

    mode = "double_buffered"

    def __init__(self, positions: np.ndarray) -> None:
        self._source = np.array(positions, dtype=float)
        # The destination starts as a copy so diagnostics are defined
        # before the first step.
        self._destination = self._source.copy()

    @property
    def source(self) -> np.ndarray:
        return self._source

    @property
    def active(self) -> np.ndarray:
        return self._destination

    def displace(self, area_force, volume_force, alpha, step_size):
        delta = _displacement(area_force, volume_force, alpha, step_size)
        np.add(self._source, delta, out=self._destination)
        return delta

    def swap(self) -> None:
        self._source, self._destination = self._destination, self._source
        self._destination[...] = self._source
