"""Interaction state machine.

Binds pointer events, search input and layout choices to the selection
state and the layout engine. Hover-intent, search debounce and camera
travel are cancellable delayed tasks; a newer event of the same kind
always cancels the older one before it can fire.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from memviz.config import settings
from memviz.errors import StaleReferenceError
from memviz.graph.store import GraphStore
from memviz.interaction.content import NodeDetails, Tooltip, link_tooltip, node_details, node_tooltip
from memviz.interaction.selection import SelectionState
from memviz.layout import LayoutEngine, LayoutName, LayoutState, NodePosition
from memviz.models import Node
from memviz.scheduling import DelayedTasks

logger = logging.getLogger(__name__)

HOVER_TASK = "hover"
SEARCH_TASK = "search"
NAVIGATE_TASK = "navigate"


class InteractionState(str, Enum):
    IDLE = "idle"
    HOVER_PENDING = "hover_pending"
    TOOLTIP_SHOWN = "tooltip_shown"


@dataclass(frozen=True)
class HoverTarget:
    kind: Literal["node", "link"]
    id: str


class InteractionController:
    """
    Event-driven controller for one loaded graph.

    Callers feed it UI events; it mutates SelectionState, asks the layout
    engine for new layouts and reports visual changes through `on_change`.
    `on_focus` is asked to move the camera when navigating to a node.
    """

    def __init__(
        self,
        selection: SelectionState,
        layout_engine: LayoutEngine,
        tasks: DelayedTasks,
        on_change: Callable[[], None] | None = None,
        on_focus: Callable[[Node, NodePosition | None], None] | None = None,
        hover_delay_ms: int | None = None,
        search_debounce_ms: int | None = None,
        camera_travel_ms: int | None = None,
    ) -> None:
        self.selection = selection
        self.layout_engine = layout_engine
        self.tasks = tasks
        self.on_change = on_change
        self.on_focus = on_focus
        self.hover_delay_ms = hover_delay_ms if hover_delay_ms is not None else settings.hover_delay_ms
        self.search_debounce_ms = (
            search_debounce_ms if search_debounce_ms is not None else settings.search_debounce_ms
        )
        self.camera_travel_ms = camera_travel_ms if camera_travel_ms is not None else settings.camera_travel_ms

        self.state = InteractionState.IDLE
        self.hover_target: HoverTarget | None = None
        self.hover_deadline: float | None = None
        self.tooltip: Tooltip | None = None
        self.details: NodeDetails | None = None

    @property
    def store(self) -> GraphStore:
        return self.selection.store

    # ==========================================================================
    # Pointer events
    # ==========================================================================

    def pointer_enter_node(self, node_id: str) -> None:
        self._start_hover(HoverTarget("node", node_id))

    def pointer_enter_link(self, link_id: str) -> None:
        self._start_hover(HoverTarget("link", link_id))

    def pointer_leave(self) -> None:
        self._end_hover()
        self._notify()

    def click_node(self, node_id: str) -> None:
        self._end_hover()
        node = self.selection.select(node_id)
        if node is None:
            return
        self.details = node_details(self.store, node)
        self._notify()

    def click_background(self) -> None:
        self._end_hover()
        self.selection.clear_selection()
        self.details = None
        self._notify()

    # ==========================================================================
    # Search, layout, navigation
    # ==========================================================================

    def search_input_changed(self, term: str) -> None:
        """Debounce search input; only the last term typed gets applied."""
        self.tasks.schedule(SEARCH_TASK, self.search_debounce_ms, lambda: self._apply_search(term))

    def search_now(self, term: str) -> list[Node]:
        self.tasks.cancel(SEARCH_TASK)
        return self._apply_search(term)

    def clear_search(self) -> None:
        self.tasks.cancel(SEARCH_TASK)
        self.selection.clear_selection()
        self.details = None
        self._notify()

    def change_layout(self, layout_name: str | LayoutName) -> LayoutState:
        state = self.layout_engine.apply(self.store, layout_name, on_release=lambda _: self._notify())
        self._notify()
        return state

    def navigate_to_node(self, node_id: str) -> bool:
        """Focus the camera on a node, then select it once the camera arrives."""
        node = self.store.node_by_id(node_id)
        if node is None:
            logger.debug(f"Ignoring navigation to unknown node '{node_id}'")
            return False

        current = self.layout_engine.current
        position = current.position_of(node.id) if current else None
        if self.on_focus is not None:
            self.on_focus(node, position)
        self.tasks.schedule(NAVIGATE_TASK, self.camera_travel_ms, lambda: self.click_node(node.id))
        return True

    def reset(self) -> None:
        """Drop every pending task and all interaction state (dataset switch)."""
        self.tasks.cancel_all()
        self.layout_engine.reset()
        self.selection.clear_selection()
        self.state = InteractionState.IDLE
        self.hover_target = None
        self.hover_deadline = None
        self.tooltip = None
        self.details = None

    # ==========================================================================
    # Internals
    # ==========================================================================

    def _start_hover(self, target: HoverTarget) -> None:
        self._end_hover()
        self.state = InteractionState.HOVER_PENDING
        self.hover_target = target
        self.hover_deadline = self.tasks.schedule(
            HOVER_TASK, self.hover_delay_ms, lambda: self._show_tooltip(target)
        )

    def _end_hover(self) -> None:
        self.tasks.cancel(HOVER_TASK)
        self.state = InteractionState.IDLE
        self.hover_target = None
        self.hover_deadline = None
        self.tooltip = None

    def _show_tooltip(self, target: HoverTarget) -> None:
        try:
            self.tooltip = self._build_tooltip(target)
        except StaleReferenceError as e:
            logger.debug(f"Tooltip skipped: {e}")
            self._end_hover()
            return
        self.state = InteractionState.TOOLTIP_SHOWN
        self.hover_deadline = None
        self._notify()

    def _build_tooltip(self, target: HoverTarget) -> Tooltip:
        if target.kind == "node":
            node = self.store.node_by_id(target.id)
            if node is None:
                raise StaleReferenceError(target.id)
            return node_tooltip(node)
        link = self.store.link_by_id(target.id)
        if link is None:
            raise StaleReferenceError(target.id)
        return link_tooltip(link)

    def _apply_search(self, term: str) -> list[Node]:
        matches = self.selection.filter_by_search(term)
        self.details = None
        self._notify()
        return matches

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()
