# geom_io.py
import json
import logging
import os

import numpy as np
import yaml

from core.exceptions import MeshValidationError, ParameterError
from geometry.mesh import TriangleMesh
from parameters.global_parameters import GlobalParameters

logger = logging.getLogger("surface_evolver")


def load_data(filename):
    """Load geometry from a JSON or YAML file.

    Expected format:
    {
        "vertices": [[x, y, z], ...],
        "faces": [[a, b, c], ...],
        "global_parameters": {"surface_tension": 1.0, "step_size": 0.01}
    }"""
    filename_str = str(filename)
    with open(filename_str, "r") as f:
        if filename_str.endswith((".yaml", ".yml")):
            data = yaml.safe_load(f)
        elif filename_str.endswith(".json"):
            data = json.load(f)
        else:
            logger.error(f"Unsupported file format for: {filename_str}")
            raise ValueError(f"Unsupported file format for: {filename_str}")

    if not isinstance(data, dict):
        raise ValueError(f"Geometry file {filename_str} must contain a mapping.")
    return data


def resolve_geometry_path(path: str) -> str:
    """Return an existing geometry path, allowing the extension to be omitted."""
    if os.path.isfile(path):
        return path
    for ext in (".json", ".yaml", ".yml"):
        if not path.lower().endswith(ext) and os.path.isfile(path + ext):
            return path + ext
    raise FileNotFoundError(f"Cannot find file '{path}' or '{path}.json'")


def parse_geometry(data: dict) -> tuple[TriangleMesh, GlobalParameters]:
    """Build a mesh and its parameters from loaded file data."""
    global_params = GlobalParameters()

    # Override global parameters with values from the input file
    input_global_params = data.get("global_parameters") or {}
    if not isinstance(input_global_params, dict):
        raise ParameterError(
            "global_parameters",
            input_global_params,
            "global_parameters must be a mapping of parameter names to values.",
        )
    global_params.update(input_global_params)

    def _coerce_float_param(key: str) -> None:
        """Coerce numeric global parameters that may parse as strings in YAML."""
        val = global_params.get(key)
        if isinstance(val, str):
            try:
                global_params.set(key, float(val))
            except ValueError:
                logger.warning(
                    "global_parameters.%s should be numeric; got %r", key, val
                )

    for _key in ("surface_tension", "step_size", "degenerate_tol", "projection_tol"):
        _coerce_float_param(_key)

    vertices = data.get("vertices")
    if not isinstance(vertices, list) or not vertices:
        raise MeshValidationError("Geometry data needs a non-empty 'vertices' list.")
    faces = data.get("faces", data.get("triangles"))
    if not isinstance(faces, list) or not faces:
        raise MeshValidationError("Geometry data needs a non-empty 'faces' list.")

    positions = []
    for idx, vertex in enumerate(vertices):
        if not isinstance(vertex, (list, tuple)) or len(vertex) != 3:
            raise MeshValidationError(
                f"Vertex {idx} must have exactly 3 coordinates; got {vertex!r}."
            )
        try:
            positions.append([float(c) for c in vertex])
        except (TypeError, ValueError):
            raise MeshValidationError(
                f"Vertex {idx} has non-numeric coordinates: {vertex!r}."
            ) from None

    triangles = []
    for idx, face in enumerate(faces):
        if not isinstance(face, (list, tuple)) or len(face) != 3:
            raise MeshValidationError(
                f"Face {idx} must be a triangle of 3 vertex indices; got {face!r}.",
                triangle_index=idx,
            )
        try:
            triangles.append([int(v) for v in face])
        except (TypeError, ValueError):
            raise MeshValidationError(
                f"Face {idx} has non-integer vertex indices: {face!r}.",
                triangle_index=idx,
            ) from None

    mesh = TriangleMesh(
        np.asarray(positions, dtype=float),
        np.asarray(triangles, dtype=np.int64),
        name=str(data.get("name", "mesh")),
    )
    logger.debug(
        "Parsed geometry: %d vertices, %d triangles.", mesh.n_vertices, mesh.n_triangles
    )
    return mesh, global_params


def save_geometry(
    mesh: TriangleMesh,
    path: str = "outputs/temp_output_file.json",
    *,
    global_params: GlobalParameters | None = None,
    compact: bool = False,
):
    """Write ``mesh`` (and optionally its parameters) in the input format."""
    data = {
        "name": mesh.name,
        "vertices": mesh.positions.tolist(),
        "faces": mesh.triangles.tolist(),
    }
    if global_params is not None:
        data["global_parameters"] = dict(global_params.to_dict())

    directory = os.path.dirname(str(path))
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w") as f:
        if compact:
            json.dump(data, f, separators=(",", ":"), ensure_ascii=False)
        else:
            json.dump(data, f, indent=4, ensure_ascii=False)
    logger.debug("Saved geometry to %s", path)


__all__ = ["load_data", "parse_geometry", "save_geometry", "resolve_geometry_path"]
