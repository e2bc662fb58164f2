"""Static PNG rendering of a frame with matplotlib."""

import io
import logging

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.colors import to_rgba  # noqa: E402

from memviz.render.frame import RenderFrame  # noqa: E402

logger = logging.getLogger(__name__)

BACKGROUND = "#f8f9fa"
LABEL_COLOR = "#111111"


def _marker_area(size: float) -> float:
    # Node sizes are radii in scene units; scatter wants an area in points^2
    return size * size / 4.0


def render_png(frame: RenderFrame, dpi: int = 150, show_labels: bool = True) -> bytes:
    """
    Draw nodes and links of a frame onto a blank canvas.

    3D frames are projected onto the x/y plane and painted back to front
    by z, so nearer nodes cover farther ones.
    """
    fig = plt.figure(figsize=(12, 9), facecolor=BACKGROUND)
    ax = fig.gca()
    ax.set_facecolor(BACKGROUND)
    ax.set_axis_off()

    try:
        if frame.nodes:
            positions = {n.id: (n.x, n.y) for n in frame.nodes}

            for link in frame.links:
                (x0, y0), (x1, y1) = positions[link.source], positions[link.target]
                ax.plot(
                    [x0, x1],
                    [y0, y1],
                    color=link.color,
                    alpha=link.opacity,
                    linewidth=1.0 + link.width,
                    zorder=1,
                )

            ordered = sorted(frame.nodes, key=lambda n: n.z)
            ax.scatter(
                [n.x for n in ordered],
                [n.y for n in ordered],
                s=[_marker_area(n.size) for n in ordered],
                c=[to_rgba(n.color, n.opacity) for n in ordered],
                edgecolors=["#000000" if n.selected else "none" for n in ordered],
                zorder=2,
            )

            if show_labels:
                for n in ordered:
                    ax.annotate(
                        n.label,
                        (n.x, n.y),
                        fontsize=7,
                        color=LABEL_COLOR,
                        alpha=n.opacity,
                        ha="center",
                        va="top",
                        xytext=(0, -6),
                        textcoords="offset points",
                        zorder=3,
                    )
            ax.set_aspect("equal", adjustable="datalim")
            ax.margins(0.05)

        buffer = io.BytesIO()
        fig.savefig(buffer, format="png", dpi=dpi, facecolor=fig.get_facecolor())
    finally:
        plt.close(fig)

    data = buffer.getvalue()
    logger.debug(f"Rendered snapshot: {len(frame.nodes)} nodes, {len(data)} bytes")
    return data
