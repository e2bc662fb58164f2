"""Unit tests for the interaction controller."""

from unittest.mock import MagicMock

import pytest

from memviz.graph import GraphStore
from memviz.interaction import InteractionController, InteractionState, SelectionState
from memviz.layout import LayoutEngine, LayoutName
from memviz.scheduling import DelayedTasks, ManualScheduler


@pytest.fixture
def on_change() -> MagicMock:
    return MagicMock()


@pytest.fixture
def on_focus() -> MagicMock:
    return MagicMock()


@pytest.fixture
def controller(
    sample_store: GraphStore, tasks: DelayedTasks, on_change: MagicMock, on_focus: MagicMock
) -> InteractionController:
    engine = LayoutEngine(tasks, dimensions=3, settle_window_ms=3000)
    return InteractionController(
        SelectionState(sample_store),
        engine,
        tasks,
        on_change=on_change,
        on_focus=on_focus,
        hover_delay_ms=300,
        search_debounce_ms=300,
        camera_travel_ms=1000,
    )


class TestHover:
    """Tests for hover-intent tooltips."""

    def test_tooltip_after_delay(self, controller: InteractionController, scheduler: ManualScheduler) -> None:
        controller.pointer_enter_node("AuthModule")
        assert controller.state is InteractionState.HOVER_PENDING
        assert controller.hover_deadline == 300
        assert controller.tooltip is None

        scheduler.advance(299)
        assert controller.tooltip is None

        scheduler.advance(1)
        assert controller.state is InteractionState.TOOLTIP_SHOWN
        assert controller.tooltip.title == "AuthModule"

    def test_leave_cancels(self, controller: InteractionController, scheduler: ManualScheduler) -> None:
        controller.pointer_enter_node("AuthModule")
        scheduler.advance(100)
        controller.pointer_leave()
        scheduler.advance(1000)
        assert controller.state is InteractionState.IDLE
        assert controller.tooltip is None

    def test_rehover_restarts_timer(self, controller: InteractionController, scheduler: ManualScheduler) -> None:
        """Only the last hovered target gets a tooltip."""
        controller.pointer_enter_node("AuthModule")
        scheduler.advance(200)
        controller.pointer_enter_link("1")
        scheduler.advance(200)
        assert controller.tooltip is None
        scheduler.advance(100)
        assert controller.tooltip.kind == "link"
        assert controller.tooltip.target_id == "1"

    def test_hover_from_tooltip_hides_it(self, controller: InteractionController, scheduler: ManualScheduler) -> None:
        controller.pointer_enter_node("AuthModule")
        scheduler.advance(300)
        controller.pointer_enter_node("Orphan")
        assert controller.tooltip is None
        assert controller.state is InteractionState.HOVER_PENDING

    def test_stale_target_is_noop(self, controller: InteractionController, scheduler: ManualScheduler) -> None:
        controller.pointer_enter_node("ghost")
        scheduler.advance(300)
        assert controller.state is InteractionState.IDLE
        assert controller.tooltip is None

    def test_click_hides_tooltip(self, controller: InteractionController, scheduler: ManualScheduler) -> None:
        controller.pointer_enter_node("AuthModule")
        scheduler.advance(300)
        controller.click_node("AuthModule")
        assert controller.state is InteractionState.IDLE
        assert controller.tooltip is None


class TestClicks:
    """Tests for click handling."""

    def test_click_node_selects_and_builds_details(
        self, controller: InteractionController, on_change: MagicMock
    ) -> None:
        controller.click_node("TokenService")
        assert controller.selection.selected_node == "TokenService"
        assert controller.details.node.id == "TokenService"
        assert len(controller.details.connections) == 2
        on_change.assert_called()

    def test_click_unknown_node(self, controller: InteractionController) -> None:
        controller.click_node("AuthModule")
        controller.click_node("ghost")
        assert controller.selection.selected_node == "AuthModule"
        assert controller.details.node.id == "AuthModule"

    def test_click_background_clears(self, controller: InteractionController) -> None:
        controller.click_node("AuthModule")
        controller.click_background()
        assert controller.selection.selected_node is None
        assert controller.details is None
        assert not controller.selection.has_active_highlight()


class TestSearch:
    """Tests for debounced search."""

    def test_debounce_applies_last_term(self, controller: InteractionController, scheduler: ManualScheduler) -> None:
        controller.search_input_changed("a")
        scheduler.advance(100)
        controller.search_input_changed("au")
        scheduler.advance(100)
        controller.search_input_changed("token")
        scheduler.advance(299)
        assert not controller.selection.has_active_highlight()
        scheduler.advance(1)
        assert controller.selection.highlighted_nodes == {"TokenService"}
        assert controller.selection.search_term == "token"

    def test_search_clears_details(self, controller: InteractionController, scheduler: ManualScheduler) -> None:
        controller.click_node("AuthModule")
        controller.search_input_changed("orphan")
        scheduler.advance(300)
        assert controller.details is None
        assert controller.selection.selected_node is None

    def test_clear_search_cancels_pending(self, controller: InteractionController, scheduler: ManualScheduler) -> None:
        controller.search_input_changed("token")
        controller.clear_search()
        scheduler.advance(1000)
        assert not controller.selection.has_active_highlight()

    def test_search_now(self, controller: InteractionController) -> None:
        matches = controller.search_now("config")
        assert [n.id for n in matches] == ["ConfigService"]


class TestNavigate:
    """Tests for camera navigation."""

    def test_focus_then_select(
        self, controller: InteractionController, scheduler: ManualScheduler, on_focus: MagicMock
    ) -> None:
        controller.change_layout("circle")
        assert controller.navigate_to_node("ConfigService")

        node, position = on_focus.call_args.args
        assert node.id == "ConfigService"
        assert position is controller.layout_engine.current.position_of("ConfigService")
        assert controller.selection.selected_node is None

        scheduler.advance(1000)
        assert controller.selection.selected_node == "ConfigService"
        assert controller.details.node.id == "ConfigService"

    def test_navigate_unknown(self, controller: InteractionController, on_focus: MagicMock) -> None:
        assert not controller.navigate_to_node("ghost")
        on_focus.assert_not_called()

    def test_renavigate_cancels_first(self, controller: InteractionController, scheduler: ManualScheduler) -> None:
        controller.navigate_to_node("AuthModule")
        scheduler.advance(500)
        controller.navigate_to_node("Orphan")
        scheduler.advance(1000)
        assert controller.selection.selected_node == "Orphan"


class TestLayoutAndReset:
    """Tests for layout switching and teardown."""

    def test_release_triggers_refresh(
        self, controller: InteractionController, scheduler: ManualScheduler, on_change: MagicMock
    ) -> None:
        state = controller.change_layout("grid")
        assert state.name is LayoutName.GRID
        on_change.reset_mock()
        scheduler.advance(3000)
        on_change.assert_called_once()
        assert state.pinned_count == 0

    def test_reset_cancels_everything(self, controller: InteractionController, scheduler: ManualScheduler) -> None:
        controller.change_layout("grid")
        controller.pointer_enter_node("AuthModule")
        controller.search_input_changed("auth")
        controller.navigate_to_node("Orphan")
        controller.reset()

        assert scheduler.pending == 0
        scheduler.advance(5000)
        assert controller.state is InteractionState.IDLE
        assert controller.tooltip is None
        assert controller.details is None
        assert not controller.selection.has_active_highlight()
        assert controller.layout_engine.current is None
