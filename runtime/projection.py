"""Volume-projection coefficient for the constrained descent step."""

from __future__ import annotations

import logging
import math

import numpy as np

from core.exceptions import DegenerateGeometryError

logger = logging.getLogger("surface_evolver")


def projection_coefficient(
    area_force: np.ndarray,
    volume_force: np.ndarray,
    *,
    degeneracy_policy: str = "zero",
    projection_tol: float = 1e-30,
) -> float:
    """Return ``alpha = sum(vf . af) / sum(vf . vf)``.

    Displacing every vertex along ``af - alpha * vf`` is the least-squares
    projection of the area force onto the complement of the volume force, so
    the first-order volume change of the step vanishes.

    The quotient is ill-conditioned when ``sum(vf . vf) <= projection_tol`` or
    when it is not finite. Under the ``"zero"`` policy alpha is clamped to 0
    (plain area descent) and a warning is logged; under ``"raise"`` a
    :class:`DegenerateGeometryError` is raised.
    """
    numerator = float(np.einsum("ij,ij->", volume_force, area_force))
    denominator = float(np.einsum("ij,ij->", volume_force, volume_force))

    if denominator > projection_tol:
        alpha = numerator / denominator
        if math.isfinite(alpha):
            return alpha

    if degeneracy_policy == "raise":
        raise DegenerateGeometryError(
            f"Volume projection is ill-conditioned: sum |volume force|^2 = "
            f"{denominator:.3e}.",
            denominator=denominator,
        )
    logger.warning(
        "Volume projection ill-conditioned (denominator %.3e); using alpha = 0.",
        denominator,
    )
    return 0.0


__all__ = ["projection_coefficient"]
