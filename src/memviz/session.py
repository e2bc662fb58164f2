"""Visualizer session: the single owner of all per-view state.

A session ties one dataset provider, one render adapter and one scheduler
to the store, layout engine, selection state and interaction controller
of whatever dataset is currently loaded.
"""

import logging
from datetime import date
from pathlib import PurePath
from typing import Protocol

from memviz.config import Settings, settings
from memviz.errors import DatasetNotFoundError
from memviz.graph.store import GraphStore
from memviz.interaction import InteractionController, NodeDetails, SelectionState, Tooltip
from memviz.layout import LayoutEngine, LayoutName, LayoutState, NodePosition
from memviz.models import DatasetInfo, GraphPayload, Node
from memviz.render import (
    RenderAdapter,
    RenderFrame,
    build_frame,
    focus_camera,
    home_camera,
    render_png,
)
from memviz.scheduling import AsyncioScheduler, DelayedTasks, Scheduler

logger = logging.getLogger(__name__)


class DatasetProvider(Protocol):
    """Where graphs come from."""

    async def list_datasets(self) -> list[DatasetInfo]: ...

    async def load_graph(self, dataset_id: str) -> GraphPayload | None: ...


class VisualizerSession:
    """
    Orchestrates load -> layout -> interaction -> render for one view.

    Every state change ends in `refresh`, which rebuilds the render frame
    and pushes it to the attached render adapter.
    """

    def __init__(
        self,
        provider: DatasetProvider,
        scheduler: Scheduler | None = None,
        config: Settings | None = None,
    ) -> None:
        self.provider = provider
        self.config = config or settings
        self.dimensions = self.config.dimensions
        self.tasks = DelayedTasks(scheduler or AsyncioScheduler())

        self.store = GraphStore.empty()
        self.dataset_id: str | None = None
        self.selection = SelectionState(self.store)
        self.layout_engine = LayoutEngine(
            self.tasks,
            dimensions=self.dimensions,
            settle_window_ms=self.config.settle_window_ms,
        )
        self.controller = InteractionController(
            self.selection,
            self.layout_engine,
            self.tasks,
            on_change=self.refresh,
            on_focus=self._focus,
            hover_delay_ms=self.config.hover_delay_ms,
            search_debounce_ms=self.config.search_debounce_ms,
            camera_travel_ms=self.config.camera_travel_ms,
        )

        self.renderer: RenderAdapter | None = None
        self.initial_layout: str | LayoutName = self.config.default_layout
        self.frame = RenderFrame(dimensions=self.dimensions)

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    def initialize(self, container: RenderAdapter, initial_layout: str | LayoutName | None = None) -> None:
        """Attach a render adapter and choose the layout applied on every load."""
        self.renderer = container
        if initial_layout is not None:
            self.initial_layout = initial_layout
        self.refresh()

    async def load_and_render(self, dataset_id: str) -> dict:
        """Fetch a dataset, swap it in and render it.

        Raises:
            DatasetNotFoundError: the provider could not supply the dataset.
                The currently loaded graph is left untouched.
        """
        payload = await self.provider.load_graph(dataset_id)
        if payload is None:
            logger.warning(f"Dataset not found: {dataset_id}")
            raise DatasetNotFoundError(dataset_id)

        store = GraphStore.build(payload.nodes, payload.edges)

        # Tear down everything tied to the old graph before the swap
        self.controller.reset()
        self.store = store
        self.selection.attach(store)
        self.dataset_id = dataset_id

        self.controller.change_layout(self.initial_layout)
        logger.info(f"Rendered '{dataset_id}': {len(store.nodes)} nodes, {len(store.links)} links")
        return self.stats

    async def list_datasets(self) -> list[DatasetInfo]:
        return await self.provider.list_datasets()

    # ==========================================================================
    # Operations
    # ==========================================================================

    def set_layout(self, layout_name: str | LayoutName) -> LayoutState:
        return self.controller.change_layout(layout_name)

    def search(self, term: str) -> None:
        """Debounced search; the highlight updates once typing pauses."""
        self.controller.search_input_changed(term)

    def search_now(self, term: str) -> list[Node]:
        return self.controller.search_now(term)

    def clear_search(self) -> None:
        self.controller.clear_search()

    def select_node(self, node_id: str) -> None:
        self.controller.click_node(node_id)

    def clear_selection(self) -> None:
        self.controller.click_background()

    def navigate_to_node(self, node_id: str) -> bool:
        return self.controller.navigate_to_node(node_id)

    def pointer_enter_node(self, node_id: str) -> None:
        self.controller.pointer_enter_node(node_id)

    def pointer_enter_link(self, link_id: str) -> None:
        self.controller.pointer_enter_link(link_id)

    def pointer_leave(self) -> None:
        self.controller.pointer_leave()

    def fit_view(self) -> None:
        if self.renderer is not None:
            self.renderer.zoom_to_fit(self.config.camera_travel_ms, self.config.fit_padding)

    def reset_view(self) -> None:
        """Drop selection, highlights and details, then return the camera home."""
        self.controller.clear_search()
        if self.renderer is not None:
            self.renderer.move_camera(home_camera(self.config.camera_home_z, self.config.camera_travel_ms))

    def export_snapshot(self) -> bytes:
        """PNG image of the current frame."""
        if self.renderer is not None:
            return self.renderer.snapshot()
        return render_png(self.frame)

    def snapshot_filename(self, today: date | None = None) -> str:
        name = PurePath(self.dataset_id).stem if self.dataset_id else "graph"
        return f"memory-graph-3d-{name}-{(today or date.today()).isoformat()}.png"

    # ==========================================================================
    # Read-only views
    # ==========================================================================

    @property
    def layout(self) -> LayoutState | None:
        return self.layout_engine.current

    @property
    def details(self) -> NodeDetails | None:
        return self.controller.details

    @property
    def tooltip(self) -> Tooltip | None:
        return self.controller.tooltip

    @property
    def stats(self) -> dict:
        return {
            "databaseName": self.dataset_id,
            "nodeCount": len(self.store.nodes),
            "edgeCount": len(self.store.links),
        }

    def legend(self) -> list[dict]:
        """Entity types with their color and node count, in first-seen order."""
        entries: dict[str, dict] = {}
        for node in self.store.nodes:
            entry = entries.get(node.entity_type)
            if entry is None:
                entries[node.entity_type] = {"entityType": node.entity_type, "color": node.color, "count": 1}
            else:
                entry["count"] += 1
        return list(entries.values())

    def to_dict(self) -> dict:
        return {
            "stats": self.stats,
            "layout": self.layout.name.value if self.layout else None,
            "selection": self.selection.to_dict(),
            "interaction": self.controller.state.value,
            "tooltip": self.tooltip.to_dict() if self.tooltip else None,
            "details": self.details.to_dict() if self.details else None,
            "legend": self.legend(),
        }

    # ==========================================================================
    # Rendering
    # ==========================================================================

    def refresh(self) -> None:
        self.frame = build_frame(self.store, self.selection, self.layout, self.dimensions)
        if self.renderer is not None:
            self.renderer.sync(self.frame)

    def _focus(self, node: Node, position: NodePosition | None) -> None:
        if self.renderer is None:
            return
        move = focus_camera(
            position,
            self.config.camera_distance,
            self.config.camera_travel_ms,
            self.dimensions,
            node_id=node.id,
        )
        logger.debug(f"Focusing camera on '{node.id}'")
        self.renderer.move_camera(move)
