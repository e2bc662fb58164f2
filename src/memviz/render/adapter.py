"""The contract between the visualizer core and a rendering primitive."""

import math
from dataclasses import dataclass
from typing import Protocol

from memviz.layout import NodePosition
from memviz.render.frame import RenderFrame

Vector = tuple[float, float, float]

ORIGIN: Vector = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class CameraMove:
    """Animated camera transition.

    A move that follows a node carries its id and distance. Renderers that
    run their own simulation re-aim at the node's live position; the
    position and look-at here are the core's last known coordinates.
    """

    position: Vector
    look_at: Vector = ORIGIN
    duration_ms: int = 0
    node_id: str | None = None
    distance: float | None = None

    def to_dict(self) -> dict:
        return {
            "position": dict(zip("xyz", self.position)),
            "lookAt": dict(zip("xyz", self.look_at)),
            "durationMs": self.duration_ms,
            "nodeId": self.node_id,
            "distance": self.distance,
        }


def focus_camera(
    position: NodePosition | None,
    distance: float,
    duration_ms: int,
    dimensions: int = 3,
    node_id: str | None = None,
) -> CameraMove:
    """Place the camera `distance` units out along the origin-to-node ray.

    A node sitting at the origin has no ray; the camera then backs off
    along +z. 2D views always look straight down the z axis.
    """
    x, y, z = position.as_tuple() if position else ORIGIN
    if dimensions == 2:
        return CameraMove((x, y, distance), (x, y, 0.0), duration_ms, node_id, distance)

    length = math.hypot(x, y, z)
    if length == 0:
        return CameraMove((0.0, 0.0, distance), ORIGIN, duration_ms, node_id, distance)
    ratio = 1 + distance / length
    return CameraMove((x * ratio, y * ratio, z * ratio), (x, y, z), duration_ms, node_id, distance)


def home_camera(home_z: float, duration_ms: int) -> CameraMove:
    return CameraMove((0.0, 0.0, home_z), ORIGIN, duration_ms)


class RenderAdapter(Protocol):
    """Anything that can draw frames and move a camera.

    Implementations must not read the graph store or selection state
    directly: every visual decision arrives already made in the frame.
    """

    def sync(self, frame: RenderFrame) -> None: ...

    def move_camera(self, move: CameraMove) -> None: ...

    def zoom_to_fit(self, duration_ms: int, padding: int) -> None: ...

    def snapshot(self) -> bytes: ...
