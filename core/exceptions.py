"""Custom exception types for the surface evolver."""

from __future__ import annotations

from typing import Any


class SurfaceEvolverError(Exception):
    """Base class for domain-specific errors."""


class MeshValidationError(SurfaceEvolverError):
    """Raised when a mesh violates a construction precondition.

    Covers malformed input (wrong array shapes, out-of-range or repeated
    vertex indices) as well as surfaces that are not closed or not
    consistently wound. Always raised before any simulation step runs.
    """

    def __init__(
        self,
        message: str,
        *,
        triangle_index: int | None = None,
        edge: tuple[int, int] | None = None,
    ) -> None:
        super().__init__(message)
        self.triangle_index = triangle_index
        self.edge = edge


class DegenerateGeometryError(SurfaceEvolverError):
    """Raised when a step hits numerically undefined geometry.

    Only raised under the ``"raise"`` degeneracy policy; the ``"zero"`` policy
    guards the same conditions and logs a warning instead.
    """

    def __init__(
        self,
        message: str,
        *,
        vertex_indices: Any | None = None,
        denominator: float | None = None,
    ) -> None:
        super().__init__(message)
        self.vertex_indices = vertex_indices
        self.denominator = denominator


class SimulationStateError(SurfaceEvolverError):
    """Raised when the engine API is used in a way its buffer mode forbids."""


class ParameterError(SurfaceEvolverError, ValueError):
    """Raised for invalid configuration values."""

    def __init__(self, key: str, value: Any, message: str | None = None) -> None:
        if message is None:
            message = f"Invalid value {value!r} for parameter '{key}'."
        super().__init__(message)
        self.key = key
        self.value = value


__all__ = [
    "SurfaceEvolverError",
    "MeshValidationError",
    "DegenerateGeometryError",
    "SimulationStateError",
    "ParameterError",
]
