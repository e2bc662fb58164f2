"""Layout engine: applies layouts and runs the pin/settle/release cycle."""

import logging
from collections.abc import Callable

from memviz.config import settings
from memviz.graph.store import GraphStore
from memviz.layout.algorithms import LayoutName, LayoutState, apply_layout
from memviz.scheduling import DelayedTasks

logger = logging.getLogger(__name__)

RELEASE_TASK = "layout-release"


class LayoutEngine:
    """
    Applies layouts on behalf of a session.

    One-shot layouts pin every node to its computed coordinates for a
    settle window so the renderer animates the transition, then release
    the pins so the live simulation can relax overlaps. Only one release
    is ever outstanding: switching layouts cancels the previous one.
    """

    def __init__(
        self,
        tasks: DelayedTasks,
        dimensions: int | None = None,
        settle_window_ms: int | None = None,
    ) -> None:
        self.tasks = tasks
        self.dimensions = dimensions or settings.dimensions
        self.settle_window_ms = settle_window_ms if settle_window_ms is not None else settings.settle_window_ms
        self.current: LayoutState | None = None

    def apply(
        self,
        store: GraphStore,
        layout_name: str | LayoutName,
        on_release: Callable[[LayoutState], None] | None = None,
    ) -> LayoutState:
        """Compute a layout and start its pin/release cycle.

        Positions of the previous layout are handed over as the starting
        point, which only the continuous force layout makes use of.
        """
        self.tasks.cancel(RELEASE_TASK)

        prior = self.current.positions if self.current else None
        state = apply_layout(store, layout_name, prior_positions=prior, dimensions=self.dimensions)
        self.current = state

        if not state.is_continuous and state.positions:
            state.pin_all()
            self.tasks.schedule(
                RELEASE_TASK,
                self.settle_window_ms,
                lambda: self._release(state, on_release),
            )

        logger.info(f"Applied '{state.name.value}' layout to {len(state.positions)} nodes")
        return state

    @property
    def release_pending(self) -> bool:
        return self.tasks.is_pending(RELEASE_TASK)

    def reset(self) -> None:
        """Forget the current layout and any pending release (dataset switch)."""
        self.tasks.cancel(RELEASE_TASK)
        self.current = None

    def _release(self, state: LayoutState, on_release: Callable[[LayoutState], None] | None) -> None:
        if state is not self.current:
            return
        state.release_all()
        logger.debug(f"Released pins for '{state.name.value}' layout")
        if on_release is not None:
            on_release(state)
