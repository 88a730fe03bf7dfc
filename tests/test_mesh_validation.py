import numpy as np
import pytest
from sample_meshes import SAMPLE_GEOMETRY, corner_tetrahedron

from core.exceptions import MeshValidationError, SurfaceEvolverError
from geometry.mesh import TriangleMesh, check_closed_orientation, validate_mesh
from geometry.primitives import icosphere
from runtime.evolver import SurfaceEvolver


def test_valid_meshes_pass():
    validate_mesh(corner_tetrahedron())
    validate_mesh(icosphere(2))
    validate_mesh(icosphere(1, outward=False))


def test_mesh_arrays_are_copied_and_read_only():
    vertices = np.array(SAMPLE_GEOMETRY["vertices"])
    mesh = TriangleMesh(vertices, SAMPLE_GEOMETRY["faces"])
    vertices[0, 0] = 42.0
    assert mesh.positions[0, 0] == 0.0
    with pytest.raises(ValueError):
        mesh.positions[0, 0] = 1.0
    assert mesh.triangles.dtype == np.int64


def test_out_of_range_index():
    mesh = TriangleMesh(
        SAMPLE_GEOMETRY["vertices"], [[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 4]]
    )
    with pytest.raises(MeshValidationError) as excinfo:
        validate_mesh(mesh)
    assert excinfo.value.triangle_index == 3
    assert "outside [0, 4)" in str(excinfo.value)


def test_repeated_vertex_in_triangle():
    mesh = TriangleMesh(SAMPLE_GEOMETRY["vertices"], [[0, 2, 2], [0, 1, 3]])
    with pytest.raises(MeshValidationError, match="repeats a vertex"):
        validate_mesh(mesh)


def test_wrong_shapes():
    with pytest.raises(MeshValidationError, match=r"shape \(V, 3\)"):
        validate_mesh(TriangleMesh(np.zeros((4, 2)), [[0, 1, 2]]))
    with pytest.raises(MeshValidationError, match=r"shape \(T, 3\)"):
        validate_mesh(TriangleMesh(np.zeros((4, 3)), [[0, 1, 2, 3]]))
    with pytest.raises(MeshValidationError, match="no triangles"):
        validate_mesh(TriangleMesh(np.zeros((4, 3)), np.zeros((0, 3), dtype=int)))


def test_non_finite_positions():
    vertices = np.array(SAMPLE_GEOMETRY["vertices"])
    vertices[2, 1] = np.nan
    with pytest.raises(MeshValidationError, match="finite"):
        validate_mesh(TriangleMesh(vertices, SAMPLE_GEOMETRY["faces"]))


def test_open_surface_is_rejected():
    mesh = TriangleMesh(SAMPLE_GEOMETRY["vertices"], SAMPLE_GEOMETRY["faces"][:3])
    with pytest.raises(MeshValidationError, match="not closed"):
        validate_mesh(mesh)
    # Open surfaces are accepted when closedness is not required.
    validate_mesh(mesh, require_closed=False)


def test_inconsistent_winding_is_rejected():
    faces = [list(f) for f in SAMPLE_GEOMETRY["faces"]]
    faces[3] = faces[3][::-1]
    with pytest.raises(MeshValidationError, match="inconsistent") as excinfo:
        check_closed_orientation(faces)
    assert excinfo.value.edge is not None


def test_engine_construction_fails_before_any_step():
    mesh = TriangleMesh(
        SAMPLE_GEOMETRY["vertices"], [[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 7]]
    )
    with pytest.raises(SurfaceEvolverError):
        SurfaceEvolver(mesh)
