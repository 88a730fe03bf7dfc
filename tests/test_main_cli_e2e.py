import json

import matplotlib
import pytest
import yaml
from sample_meshes import sample_geometry, write_sample_geometry

import main

matplotlib.use("Agg")


def test_builtin_mesh_run_writes_records(tmp_path):
    out = tmp_path / "records.json"
    main.main(
        [
            "-m",
            "icosphere",
            "-n",
            "1",
            "--iterations",
            "3",
            "--record",
            "SurfaceArea,Volume,Force",
            "-o",
            str(out),
            "-q",
        ]
    )
    records = json.loads(out.read_text())
    assert len(records) == 3
    assert all(len(row) == 3 for row in records)
    areas = [row[0] for row in records]
    assert areas[-1] <= areas[0] + 1e-12


def test_properties_output(tmp_path, capsys):
    path = write_sample_geometry(tmp_path)
    main.main(["-i", path, "--properties", "-q"])
    out = capsys.readouterr().out
    assert "=== Surface Properties ===" in out
    assert "Total volume      : 0.166667" in out


def test_yaml_input_and_saved_mesh(tmp_path):
    path = tmp_path / "tet.yaml"
    path.write_text(yaml.safe_dump(sample_geometry(step_size=0.005)))
    saved = tmp_path / "final.json"

    main.main(
        [
            "-i",
            str(tmp_path / "tet"),
            "--iterations",
            "2",
            "--buffer-mode",
            "double_buffered",
            "--save-mesh",
            str(saved),
            "-q",
        ]
    )
    data = json.loads(saved.read_text())
    assert data["global_parameters"]["buffer_mode"] == "double_buffered"
    assert data["global_parameters"]["step_size"] == 0.005
    assert len(data["faces"]) == 4


def test_viz_save_writes_image(tmp_path):
    image = tmp_path / "surface.png"
    main.main(["-m", "tetrahedron", "--iterations", "1", "--viz-save", str(image), "-q"])
    assert image.exists()


def test_missing_input_exits(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main.main(["-i", str(tmp_path / "nope.json"), "-q"])
    assert excinfo.value.code == 1


def test_open_surface_exits(tmp_path):
    data = sample_geometry()
    data["faces"] = data["faces"][:3]
    path = write_sample_geometry(tmp_path, name="open.json", data=data)
    with pytest.raises(SystemExit) as excinfo:
        main.main(["-i", path, "-q"])
    assert excinfo.value.code == 1


def test_bad_record_name_exits():
    with pytest.raises(SystemExit) as excinfo:
        main.main(["-m", "tetrahedron", "--record", "Pressure", "-q"])
    assert excinfo.value.code == 1


def test_malformed_vertex_exits(tmp_path):
    data = sample_geometry()
    data["vertices"][0] = 5
    path = write_sample_geometry(tmp_path, name="bad.json", data=data)
    with pytest.raises(SystemExit) as excinfo:
        main.main(["-i", path, "-q"])
    assert excinfo.value.code == 1


def test_properties_on_degenerate_mesh_exits_under_raise_policy(tmp_path):
    data = sample_geometry()
    # Vertex 3 on the segment between vertices 1 and 2: face (1, 2, 3) has no area.
    data["vertices"][3] = [0.5, 0.5, 0.0]
    path = write_sample_geometry(tmp_path, name="flat.json", data=data)
    with pytest.raises(SystemExit) as excinfo:
        main.main(["-i", path, "--properties", "--degeneracy-policy", "raise", "-q"])
    assert excinfo.value.code == 1
