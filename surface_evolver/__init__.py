"""Package utilities for surface-evolver.

The engine lives in top-level packages like `geometry/`, `runtime/` and
`parameters/`. This package exposes the installed version and the main
engine entry points under one import name.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from geometry.mesh import TriangleMesh
from runtime.evolver import SurfaceEvolver

try:
    __version__ = version("surface-evolver")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = ["SurfaceEvolver", "TriangleMesh", "__version__"]
