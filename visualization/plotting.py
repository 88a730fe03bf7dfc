import logging
from typing import Any, Optional

import matplotlib.pyplot as plt
import numpy as np
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

logger = logging.getLogger("surface_evolver")


def plot_mesh(
    positions: np.ndarray,
    triangles: np.ndarray,
    ax=None,
    show_indices: bool = False,
    scatter: bool = False,
    transparent: bool = False,
    draw_edges: bool = True,
    facet_color: Any = None,
    edge_color: str = "k",
    title: Optional[str] = None,
    no_axes: bool = False,
    show: bool = True,
):
    """
    Visualize a triangle mesh in 3D using Matplotlib.

    Parameters
    ----------
    positions : np.ndarray
        ``(V, 3)`` vertex positions, e.g. ``SurfaceEvolver.positions``.
    triangles : np.ndarray
        ``(T, 3)`` vertex indices.
    ax : mpl_toolkits.mplot3d.Axes3D, optional
        Optional Matplotlib 3D axis. If omitted, a new figure and axis
        are created.
    show_indices : bool, optional
        If ``True``, draw vertex indices next to each vertex.
    scatter : bool, optional
        If ``True``, draw vertices as red scatter points.
    transparent : bool, optional
        If ``True``, draw facets semi‑transparent.
    draw_edges : bool, optional
        If ``True`` (default), outline every triangle.
    facet_color :
        Facet color. If ``None``, a light blue color is used.
    show : bool, optional
        If ``True`` (default), call :func:`matplotlib.pyplot.show` after
        drawing. Set to ``False`` when using non‑interactive backends
        or when the caller saves the figure.

    Returns
    -------
    The 3D axis that was drawn on.
    """
    positions = np.asarray(positions, dtype=float)
    triangles = np.asarray(triangles, dtype=int)
    if positions.size == 0:
        logger.warning("Mesh has no vertices to visualize.")
        return ax

    if ax is None:
        fig = plt.figure()
        ax = fig.add_subplot(111, projection="3d")

    if len(triangles):
        alpha = 0.4 if transparent else 1.0
        tri_collection = Poly3DCollection(
            list(positions[triangles]),
            alpha=alpha,
            edgecolor=edge_color if draw_edges else "none",
            linewidths=0.5 if draw_edges else 0.0,
        )
        tri_collection.set_facecolor(
            facet_color if facet_color is not None else (0.6, 0.8, 1.0)
        )
        ax.add_collection3d(tri_collection)

    X, Y, Z = positions[:, 0], positions[:, 1], positions[:, 2]
    if scatter:
        ax.scatter(X, Y, Z, color="r", s=20)

    if show_indices:
        for idx, pos in enumerate(positions):
            ax.text(*pos, f"{idx}", color="k", fontsize=8)

    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_zlabel("Z")
    ax.set_title(title or "Evolved Surface")

    # Equal aspect ratio
    max_range = np.array(
        [X.max() - X.min(), Y.max() - Y.min(), Z.max() - Z.min()]
    ).max()
    mid_x = (X.max() + X.min()) * 0.5
    mid_y = (Y.max() + Y.min()) * 0.5
    mid_z = (Z.max() + Z.min()) * 0.5

    ax.set_xlim(mid_x - max_range / 2, mid_x + max_range / 2)
    ax.set_ylim(mid_y - max_range / 2, mid_y + max_range / 2)
    ax.set_zlim(mid_z - max_range / 2, mid_z + max_range / 2)

    if no_axes:
        ax.set_axis_off()

    plt.tight_layout()

    if show:
        plt.show()
    return ax
