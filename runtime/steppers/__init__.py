"""Position-buffer integrators for the simulation engine."""

from .base import BaseIntegrator
from .double_buffered import DoubleBufferedIntegrator
from .in_place import InPlaceIntegrator

INTEGRATORS = {
    InPlaceIntegrator.mode: InPlaceIntegrator,
    DoubleBufferedIntegrator.mode: DoubleBufferedIntegrator,
}


def make_integrator(mode: str, positions) -> BaseIntegrator:
    """Instantiate the integrator registered for ``mode``."""
    try:
        cls = INTEGRATORS[mode]
    except KeyError:
        raise ValueError(
            f"Unknown buffer mode {mode!r}; expected one of {sorted(INTEGRATORS)}."
        ) from None
    return cls(positions)


__all__ = [
    "BaseIntegrator",
    "DoubleBufferedIntegrator",
    "InPlaceIntegrator",
    "INTEGRATORS",
    "make_integrator",
]
