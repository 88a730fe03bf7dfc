import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from geometry.primitives import icosphere  # noqa: E402
from visualization.plotting import plot_mesh  # noqa: E402


def test_plot_mesh_adds_facets_and_vertices():
    mesh = icosphere(1)
    ax = plot_mesh(mesh.positions, mesh.triangles, show=False, scatter=True)
    # One collection for the facets, one for the vertex scatter.
    assert len(ax.collections) == 2
    assert ax.get_title() == "Evolved Surface"
    plt.close("all")


def test_plot_mesh_empty_positions_is_noop():
    assert plot_mesh([], [], show=False) is None
