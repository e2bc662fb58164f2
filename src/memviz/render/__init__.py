"""Render frames and render adapters."""

from memviz.render.adapter import CameraMove, RenderAdapter, focus_camera, home_camera
from memviz.render.force_graph import ForceGraphAdapter
from memviz.render.frame import LinkVisual, NodeVisual, RenderFrame, build_frame
from memviz.render.snapshot import render_png

__all__ = [
    "CameraMove",
    "ForceGraphAdapter",
    "LinkVisual",
    "NodeVisual",
    "RenderAdapter",
    "RenderFrame",
    "build_frame",
    "focus_camera",
    "home_camera",
    "render_png",
]
