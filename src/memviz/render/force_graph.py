"""Adapter for the 3d-force-graph browser client.

The server cannot drive WebGL directly, so this adapter keeps the latest
frame and the pending camera command as a versioned scene document. The
HTML page served at /graph polls that document and applies it to its
ForceGraph3D (or ForceGraph in 2D) instance.
"""

import logging

from memviz.render.adapter import CameraMove
from memviz.render.frame import RenderFrame
from memviz.render.snapshot import render_png

logger = logging.getLogger(__name__)


class ForceGraphAdapter:
    """Scene document for the browser renderer."""

    def __init__(self, dimensions: int = 3) -> None:
        self.dimensions = dimensions
        self.frame = RenderFrame(dimensions=dimensions)
        self.camera: CameraMove | None = None
        self.fit: dict | None = None
        self.version = 0

    def sync(self, frame: RenderFrame) -> None:
        self.frame = frame
        self._bump()

    def move_camera(self, move: CameraMove) -> None:
        self.camera = move
        self.fit = None
        self._bump()

    def zoom_to_fit(self, duration_ms: int, padding: int) -> None:
        self.fit = {"durationMs": duration_ms, "padding": padding}
        self.camera = None
        self._bump()

    def snapshot(self) -> bytes:
        return render_png(self.frame)

    def _bump(self) -> None:
        self.version += 1

    def to_dict(self) -> dict:
        """Scene document; camera and fit commands are tagged with the version."""
        return {
            "version": self.version,
            "dimensions": self.dimensions,
            "frame": self.frame.to_dict(),
            "camera": self.camera.to_dict() if self.camera else None,
            "fit": self.fit,
        }
