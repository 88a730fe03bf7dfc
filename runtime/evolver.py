# runtime/evolver.py

import logging
from typing import Callable, Dict, Optional

import numpy as np

from core.exceptions import SimulationStateError
from geometry.adjacency import build_vertex_adjacency
from geometry.mesh import TriangleMesh, validate_mesh
from parameters.global_parameters import GlobalParameters
from runtime.diagnostics import metrics
from runtime.forces import accumulate_forces, net_force
from runtime.projection import projection_coefficient
from runtime.steppers import BaseIntegrator, make_integrator

logger = logging.getLogger("surface_evolver")


def _readonly(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.setflags(write=False)
    return view


class SurfaceEvolver:
    """Volume-preserving surface-tension flow on a fixed triangle mesh.

    One call to :meth:`step_simulation` recomputes both force buffers from the
    current source positions, reduces them to the projection coefficient
    alpha and displaces every vertex by
    ``step_size * (area_force - alpha * volume_force)``.

    The mesh topology, the opposite-edge adjacency and the buffer policy are
    fixed at construction. All buffers are allocated once and owned by the
    engine; accessors hand out read-only views.
    """

    def __init__(
        self,
        mesh: TriangleMesh,
        global_params: Optional[GlobalParameters] = None,
        *,
        require_closed: bool = True,
    ) -> None:
        self.global_params = (global_params or GlobalParameters()).validate()
        validate_mesh(mesh, require_closed=require_closed)

        self.mesh = mesh
        self.triangles = mesh.triangles
        self.surface_tension = float(self.global_params.get("surface_tension"))
        self.step_size = float(self.global_params.get("step_size"))
        self.buffer_mode = self.global_params.get("buffer_mode")
        self.degeneracy_policy = self.global_params.get("degeneracy_policy")
        self.degenerate_tol = float(self.global_params.get("degenerate_tol"))
        self.projection_tol = float(self.global_params.get("projection_tol"))

        n_verts = mesh.n_vertices
        self.adjacency = build_vertex_adjacency(n_verts, self.triangles)
        self.integrator: BaseIntegrator = make_integrator(
            self.buffer_mode, mesh.positions
        )
        self._area_force = np.zeros((n_verts, 3), dtype=float)
        self._volume_force = np.zeros((n_verts, 3), dtype=float)
        self._last_alpha: Optional[float] = None
        self._last_displacement = 0.0
        self.iteration = 0

        logger.debug(
            "SurfaceEvolver ready: %d vertices, %d triangles, sigma=%g, "
            "lambda=%g, buffer_mode=%s, degeneracy_policy=%s",
            n_verts,
            mesh.n_triangles,
            self.surface_tension,
            self.step_size,
            self.buffer_mode,
            self.degeneracy_policy,
        )

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------
    def evaluate_forces(self) -> int:
        """Refresh the force buffers from the source positions.

        Returns the number of degenerate contributions that were zeroed.
        """
        return accumulate_forces(
            self.integrator.source,
            self.adjacency,
            self.surface_tension,
            self._area_force,
            self._volume_force,
            degeneracy_policy=self.degeneracy_policy,
            degenerate_tol=self.degenerate_tol,
        )

    def step_simulation(self) -> None:
        """Advance the surface by exactly one iteration.

        Forces, alpha and the displacement all derive from one snapshot of
        the source buffer. If a degeneracy is raised the positions are left
        untouched.
        """
        self.evaluate_forces()
        alpha = projection_coefficient(
            self._area_force,
            self._volume_force,
            degeneracy_policy=self.degeneracy_policy,
            projection_tol=self.projection_tol,
        )
        delta = self.integrator.displace(
            self._area_force, self._volume_force, alpha, self.step_size
        )
        self._last_alpha = alpha
        self._last_displacement = (
            float(np.max(np.linalg.norm(delta, axis=1))) if delta.size else 0.0
        )
        self.iteration += 1
        logger.debug(
            "Step %d: alpha=%.6e, max |dx|=%.3e",
            self.iteration,
            alpha,
            self._last_displacement,
        )

    def swap_buffers(self) -> None:
        """Make the last written buffer the source of the next step.

        Raises
        ------
        SimulationStateError
            If the engine was built with the in-place buffer policy.
        """
        if self.buffer_mode != "double_buffered":
            raise SimulationStateError(
                "swap_buffers() requires buffer_mode='double_buffered'; "
                f"this engine uses {self.buffer_mode!r}."
            )
        self.integrator.swap()

    def run(
        self,
        iterations: int,
        callback: Optional[Callable[["SurfaceEvolver"], None]] = None,
    ) -> None:
        """Call :meth:`step_simulation` ``iterations`` times.

        ``callback`` is invoked with the engine after each step, once the new
        positions are committed. With double buffering the buffers are
        swapped after the callback so consecutive steps chain.
        """
        if iterations < 0:
            raise ValueError(f"iterations must be >= 0; got {iterations}")
        start_area = self.get_area()
        start_volume = self.get_volume()
        for _ in range(iterations):
            self.step_simulation()
            if callback is not None:
                callback(self)
            if self.buffer_mode == "double_buffered":
                self.integrator.swap()
        if iterations:
            logger.info(
                "Completed %d steps: area %.6f -> %.6f, volume %.6f -> %.6f",
                iterations,
                start_area,
                self.get_area(),
                start_volume,
                self.get_volume(),
            )

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def positions(self) -> np.ndarray:
        """Read-only view of the active (last written) positions."""
        return _readonly(self.integrator.active)

    @property
    def source_positions(self) -> np.ndarray:
        """Read-only view of the positions the next step reads."""
        return _readonly(self.integrator.source)

    @property
    def area_force(self) -> np.ndarray:
        return _readonly(self._area_force)

    @property
    def volume_force(self) -> np.ndarray:
        return _readonly(self._volume_force)

    @property
    def net_force(self) -> np.ndarray:
        return net_force(self._area_force, self._volume_force)

    @property
    def alpha(self) -> Optional[float]:
        """Projection coefficient of the last step, None before stepping."""
        return self._last_alpha

    @property
    def max_displacement(self) -> float:
        """Largest vertex displacement of the last step."""
        return self._last_displacement

    def current_mesh(self) -> TriangleMesh:
        """Snapshot of the active positions as a new mesh."""
        return self.mesh.with_positions(self.integrator.active)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    def get_area(self) -> float:
        return metrics.surface_area(self.integrator.active, self.triangles)

    def get_volume(self) -> float:
        return metrics.enclosed_volume(self.integrator.active, self.triangles)

    def get_mean_curvature(self) -> float:
        return metrics.mean_curvature(self.integrator.active, self.adjacency)

    def get_gaussian_curvature(self) -> float:
        return metrics.gaussian_curvature(self.integrator.active, self.adjacency)

    def get_mean_net_force(self) -> float:
        """Mean net force from the last computed force buffers.

        Nothing is recomputed; before the first force evaluation the buffers
        are zero and so is the result.
        """
        return metrics.mean_net_force(self._area_force, self._volume_force)

    def get_properties(self) -> Dict[str, float]:
        return {
            "surface_area": self.get_area(),
            "volume": self.get_volume(),
            "mean_curvature": self.get_mean_curvature(),
            "mean_net_force": self.get_mean_net_force(),
        }
