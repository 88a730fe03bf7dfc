"""Per-iteration recording of engine diagnostics for JSON output."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Callable, Dict, Iterable, List

logger = logging.getLogger("surface_evolver")

# Quantity name -> reader over a SurfaceEvolver.
RECORDABLE: Dict[str, Callable[[Any], Any]] = {
    "SurfaceArea": lambda evolver: evolver.get_area(),
    "Volume": lambda evolver: evolver.get_volume(),
    "Force": lambda evolver: evolver.get_mean_net_force(),
    "Curvature": lambda evolver: evolver.get_mean_curvature(),
    "Points": lambda evolver: evolver.positions.tolist(),
}


def parse_record_names(names: str | Iterable[str]) -> List[str]:
    """Split a comma separated quantity list and check every name."""
    if isinstance(names, str):
        names = [token.strip() for token in names.split(",")]
    else:
        names = [str(token).strip() for token in names]
    names = [name for name in names if name]
    unknown = [name for name in names if name not in RECORDABLE]
    if unknown:
        raise ValueError(
            f"Unknown record quantities {unknown}; expected any of {list(RECORDABLE)}."
        )
    return names


class IterationRecorder:
    """Collect one record per committed step.

    Each record is a list holding the requested quantities in request order,
    so ``["SurfaceArea", "Volume"]`` yields ``[[area0, vol0], [area1, vol1], ...]``.
    Use an instance as the ``callback`` of :meth:`SurfaceEvolver.run`.
    """

    def __init__(self, quantities: Iterable[str]) -> None:
        self.quantities = parse_record_names(quantities)
        self.records: List[List[Any]] = []

    def __call__(self, evolver) -> None:
        self.records.append([RECORDABLE[name](evolver) for name in self.quantities])

    def write_json(self, path: str, *, compact: bool = False) -> None:
        directory = os.path.dirname(str(path))
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w") as f:
            if compact:
                json.dump(self.records, f, separators=(",", ":"))
            else:
                json.dump(self.records, f, indent=2)
        logger.info("Wrote %d iteration records to %s", len(self.records), path)
