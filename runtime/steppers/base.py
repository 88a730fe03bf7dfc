# runtime/steppers/base.py
"""Abstract base class for vertex integrators."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np


class BaseIntegrator(ABC):
    """Base interface for the position-buffer policy of the engine.

    An integrator owns the position buffer(s). Forces are always computed
    from :attr:`source`; diagnostics and renderers read :attr:`active`, the
    buffer the last step wrote.
    """

    mode: str = ""

    @property
    @abstractmethod
    def source(self) -> np.ndarray:
        """Positions the next step reads."""

    @property
    @abstractmethod
    def active(self) -> np.ndarray:
        """Positions the last step wrote."""

    @abstractmethod
    def displace(
        self,
        area_force: np.ndarray,
        volume_force: np.ndarray,
        alpha: float,
        step_size: float,
    ) -> np.ndarray:
        """Apply ``x + step_size * (area_force - alpha * volume_force)``.

        Parameters
        ----------
        area_force, volume_force : np.ndarray
            ``(V, 3)`` buffers computed from :attr:`source` this step.
        alpha : float
            Volume-projection coefficient of this step.
        step_size : float
            Fixed step size lambda.

        Returns
        -------
        np.ndarray
            The per-vertex displacement that was applied.
        """

    def swap(self) -> None:
        """Promote the written buffer to the next step's source."""

    def __repr__(self) -> str:  # pragma: no cover - simple utility
        return f"{self.__class__.__name__}(n_vertices={self.source.shape[0]})"


def _displacement(
    area_force: np.ndarray, volume_force: np.ndarray, alpha: float, step_size: float
) -> np.ndarray:
    return step_size * (area_force - alpha * volume_force)
