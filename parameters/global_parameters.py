# global_parameters.py

import math

from core.exceptions import ParameterError

BUFFER_MODES = ("in_place", "double_buffered")
DEGENERACY_POLICIES = ("zero", "raise")


class GlobalParameters:
    def __init__(self, initial_params=None):
        """
        all parameters are defined with underscore, _, instead of spaces
        """
        # Use a dictionary to store all parameters
        self._params = {
            "surface_tension": 1.0,  # sigma
            "step_size": 0.01,  # lambda, fixed for the whole run
            # Position buffer policy, fixed at engine construction:
            #   "in_place"       : overwrite the buffer forces were read from.
            #   "double_buffered": write a second buffer; the caller swaps.
            "buffer_mode": "in_place",
            # What to do with numerically undefined geometry:
            #   "zero" : drop the offending contribution and log a warning.
            #   "raise": abort the step with DegenerateGeometryError.
            "degeneracy_policy": "zero",
            # A triangle is degenerate when |s1 x s2| <= tol * |s1| * |s2|.
            "degenerate_tol": 1e-12,
            # alpha is ill-conditioned when sum |volume_force|^2 <= tol.
            "projection_tol": 1e-30,
            "iterations": 10,
        }
        # Load initial parameters if provided
        if initial_params:
            self.update(initial_params)

    def __getattr__(self, name):
        """Attribute access for known parameter keys.

        ``global_params.step_size`` and ``global_params.get("step_size")``
        read the same storage.
        """
        params = self.__dict__.get("_params")
        if params is not None and name in params:
            return params[name]
        raise AttributeError(
            f"{type(self).__name__!s} object has no attribute {name!r}"
        )

    def __setattr__(self, name, value):
        """Attribute assignment for known parameter keys."""
        if name == "_params":
            object.__setattr__(self, name, value)
            return
        params = self.__dict__.get("_params")
        if params is not None and name in params:
            params[name] = value
            return
        object.__setattr__(self, name, value)

    def get(self, key, default=None):
        """Retrieve a parameter value, or return a default if not found."""
        return self._params.get(key, default)

    def set(self, key, value):
        """Set or update a parameter."""
        self._params[key] = value

    def update(self, params):
        """Update multiple parameters at once."""
        self._params.update(params)

    def validate(self):
        """Coerce numeric values and reject anything the engine cannot run.

        Raises
        ------
        ParameterError
            For unknown modes, non-finite numbers, a non-positive step size or
            negative tolerances.
        """
        for key in ("surface_tension", "step_size", "degenerate_tol", "projection_tol"):
            value = self._params.get(key)
            try:
                value = float(value)
            except (TypeError, ValueError):
                raise ParameterError(key, value) from None
            if not math.isfinite(value):
                raise ParameterError(key, value, f"Parameter '{key}' must be finite.")
            self._params[key] = value

        if self._params["step_size"] <= 0.0:
            raise ParameterError(
                "step_size",
                self._params["step_size"],
                "Parameter 'step_size' must be positive.",
            )
        for key in ("degenerate_tol", "projection_tol"):
            if self._params[key] < 0.0:
                raise ParameterError(
                    key, self._params[key], f"Parameter '{key}' must be >= 0."
                )

        # Integral floats and numeric strings from JSON/YAML count as ints.
        iterations = self._params.get("iterations")
        if isinstance(iterations, str):
            try:
                iterations = float(iterations)
            except ValueError:
                pass
        if isinstance(iterations, float) and iterations.is_integer():
            iterations = int(iterations)
        if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 0:
            raise ParameterError("iterations", self._params.get("iterations"))
        self._params["iterations"] = iterations

        if self._params["buffer_mode"] not in BUFFER_MODES:
            raise ParameterError(
                "buffer_mode",
                self._params["buffer_mode"],
                f"buffer_mode must be one of {BUFFER_MODES}; "
                f"got {self._params['buffer_mode']!r}.",
            )
        if self._params["degeneracy_policy"] not in DEGENERACY_POLICIES:
            raise ParameterError(
                "degeneracy_policy",
                self._params["degeneracy_policy"],
                f"degeneracy_policy must be one of {DEGENERACY_POLICIES}; "
                f"got {self._params['degeneracy_policy']!r}.",
            )
        return self

    def __contains__(self, key):
        """Check if a parameter exists."""
        return key in self._params

    def __repr__(self):
        """String representation for debugging."""
        return f"GlobalParameters({self._params})"

    def to_dict(self):
        """Convert the parameters to a dictionary for serialization."""
        return self._params
