"""Unit tests for layout algorithms and the layout engine."""

import logging
import math

import pytest

from memviz.errors import UnknownLayoutError
from memviz.graph import GraphStore
from memviz.layout import (
    LayoutEngine,
    LayoutName,
    NodePosition,
    apply_layout,
    compute_levels,
    resolve_layout_name,
)
from memviz.layout.algorithms import ceil_cbrt, ceil_sqrt
from memviz.scheduling import DelayedTasks, ManualScheduler

ONE_SHOT = [
    LayoutName.CIRCLE,
    LayoutName.GRID,
    LayoutName.CUBE,
    LayoutName.SPHERE,
    LayoutName.HIERARCHICAL,
    LayoutName.CONCENTRIC,
]


def ring_store(n: int) -> GraphStore:
    nodes = [{"id": f"n{i}"} for i in range(n)]
    links = [{"source": f"n{i}", "target": f"n{(i + 1) % n}"} for i in range(n)]
    return GraphStore.build(nodes, links)


def radius(position: NodePosition) -> float:
    return math.hypot(*position.as_tuple())


class TestResolveLayoutName:
    """Tests for layout name resolution."""

    def test_alias(self) -> None:
        assert resolve_layout_name("cose") is LayoutName.FORCE

    def test_case_insensitive(self) -> None:
        assert resolve_layout_name(" Circle ") is LayoutName.CIRCLE

    def test_unknown_raises(self) -> None:
        with pytest.raises(UnknownLayoutError):
            resolve_layout_name("spiral")

    def test_planar_fallback(self) -> None:
        assert resolve_layout_name("cube", dimensions=2) is LayoutName.GRID
        assert resolve_layout_name("sphere", dimensions=2) is LayoutName.CIRCLE
        assert resolve_layout_name("cube", dimensions=3) is LayoutName.CUBE


class TestIntegerRoots:
    """Tests for exact integer ceil roots."""

    def test_ceil_sqrt(self) -> None:
        assert [ceil_sqrt(n) for n in (1, 4, 5, 9, 10)] == [1, 2, 3, 3, 4]

    def test_ceil_cbrt(self) -> None:
        assert [ceil_cbrt(n) for n in (1, 8, 9, 27, 28, 64)] == [1, 2, 3, 3, 4, 4]


class TestHierarchical:
    """Tests for BFS levels."""

    def test_chain_levels(self, chain_store: GraphStore) -> None:
        """A -> B -> C gives levels 0, 1, 2."""
        state = apply_layout(chain_store, "hierarchical")
        assert state.levels == {"A": 0, "B": 1, "C": 2}

    def test_shortest_level_wins(self) -> None:
        store = GraphStore.build(
            [{"id": "A"}, {"id": "B"}, {"id": "C"}, {"id": "D"}],
            [
                {"source": "A", "target": "B"},
                {"source": "B", "target": "C"},
                {"source": "C", "target": "D"},
                {"source": "A", "target": "D"},
            ],
        )
        assert compute_levels(store)["D"] == 1

    def test_cycle_uses_first_node_as_root(self) -> None:
        levels = compute_levels(ring_store(4))
        assert levels == {"n0": 0, "n1": 1, "n2": 2, "n3": 3}

    def test_level_monotonicity(self) -> None:
        """For every link a -> b, level(b) <= level(a) + 1 and roots sit at 0."""
        store = GraphStore.build(
            [{"id": x} for x in "ABCDEFG"],
            [
                {"source": "A", "target": "B"},
                {"source": "B", "target": "C"},
                {"source": "C", "target": "B"},
                {"source": "D", "target": "C"},
                # E <-> F is a cycle no root reaches
                {"source": "E", "target": "F"},
                {"source": "F", "target": "E"},
                {"source": "F", "target": "G"},
            ],
        )
        levels = compute_levels(store)
        assert set(levels) == set("ABCDEFG")
        for link in store.links:
            assert levels[link.target.id] <= levels[link.source.id] + 1
        for node in store.nodes:
            if store.in_degree(node.id) == 0:
                assert levels[node.id] == 0

    def test_3d_rings_by_depth(self, chain_store: GraphStore) -> None:
        state = apply_layout(chain_store, "hierarchical", dimensions=3)
        assert [state.positions[x].z for x in "ABC"] == [0.0, 80.0, 160.0]

    def test_2d_rings_grow(self, chain_store: GraphStore) -> None:
        state = apply_layout(chain_store, "hierarchical", dimensions=2)
        radii = [radius(state.positions[x]) for x in "ABC"]
        assert radii == pytest.approx([40.0, 80.0, 120.0])
        assert all(state.positions[x].z == 0.0 for x in "ABC")


class TestConcentric:
    """Tests for degree-ranked concentric layout."""

    def test_hub_is_innermost(self) -> None:
        """Degrees [3, 1, 1, 1]: the hub's radius is strictly smallest."""
        store = GraphStore.build(
            [{"id": "hub"}, {"id": "a"}, {"id": "b"}, {"id": "c"}],
            [{"source": "hub", "target": x} for x in "abc"],
        )
        for dims in (2, 3):
            state = apply_layout(store, "concentric", dimensions=dims)
            hub = radius(state.positions["hub"])
            for leaf in "abc":
                assert hub < radius(state.positions[leaf])

    def test_radius_formula(self) -> None:
        store = GraphStore.build(
            [{"id": "hub"}, {"id": "a"}, {"id": "b"}, {"id": "c"}],
            [{"source": "hub", "target": x} for x in "abc"],
        )
        state = apply_layout(store, "concentric", dimensions=2)
        assert radius(state.positions["hub"]) == pytest.approx(30.0)
        assert radius(state.positions["a"]) == pytest.approx(30.0 + 2 / 3 * 100)

    def test_no_links(self) -> None:
        store = GraphStore.build([{"id": "a"}, {"id": "b"}], [])
        state = apply_layout(store, "concentric", dimensions=2)
        assert radius(state.positions["a"]) == pytest.approx(130.0)


class TestOneShotLayouts:
    """Tests shared by every one-shot layout."""

    @pytest.mark.parametrize("name", ONE_SHOT)
    def test_every_node_gets_finite_coordinates(self, name: LayoutName, sample_store: GraphStore) -> None:
        state = apply_layout(sample_store, name)
        assert set(state.positions) == {n.id for n in sample_store.nodes}
        for position in state.positions.values():
            assert all(math.isfinite(v) for v in position.as_tuple())

    @pytest.mark.parametrize("name", [*ONE_SHOT, LayoutName.FORCE])
    def test_empty_graph(self, name: LayoutName) -> None:
        state = apply_layout(GraphStore.empty(), name)
        assert state.positions == {}

    @pytest.mark.parametrize("name", [*ONE_SHOT, LayoutName.FORCE])
    def test_single_node_at_origin(self, name: LayoutName) -> None:
        store = GraphStore.build([{"id": "only"}], [])
        state = apply_layout(store, name)
        assert state.positions["only"].as_tuple() == (0.0, 0.0, 0.0)

    def test_circle_radius(self) -> None:
        state = apply_layout(ring_store(6), "circle")
        for position in state.positions.values():
            assert radius(position) == pytest.approx(60.0)
            assert position.z == 0.0

    def test_grid_centered(self) -> None:
        state = apply_layout(ring_store(4), "grid")
        xs = sorted({p.x for p in state.positions.values()})
        ys = sorted({p.y for p in state.positions.values()})
        assert xs == [-15.0, 15.0]
        assert ys == [-15.0, 15.0]

    def test_cube_uses_three_axes(self) -> None:
        state = apply_layout(ring_store(8), "cube")
        coords = {p.as_tuple() for p in state.positions.values()}
        assert len(coords) == 8
        assert {c[2] for c in coords} == {-15.0, 15.0}

    def test_sphere_radius(self) -> None:
        state = apply_layout(ring_store(20), "sphere")
        for position in state.positions.values():
            assert radius(position) == pytest.approx(100.0)


class TestForceLayout:
    """Tests for the continuous force layout."""

    def test_config(self, sample_store: GraphStore) -> None:
        state = apply_layout(sample_store, "force")
        assert state.is_continuous
        assert state.force.charge_strength == -120
        assert state.force.link_distance == 30
        assert state.force.alpha_decay == 0.02
        assert state.force.velocity_decay == 0.3
        assert state.force.warmup_ticks == 100
        assert state.force.to_dict()["centerForces"] == {"x": 0.03, "y": 0.03, "z": 0.03}

    def test_no_pins(self, sample_store: GraphStore) -> None:
        state = apply_layout(sample_store, "force")
        assert state.pinned_count == 0

    def test_keeps_prior_positions(self, sample_store: GraphStore) -> None:
        prior = {"AuthModule": NodePosition(1.0, 2.0, 3.0)}
        state = apply_layout(sample_store, "force", prior_positions=prior)
        assert state.positions["AuthModule"].as_tuple() == (1.0, 2.0, 3.0)
        assert set(state.positions) == {n.id for n in sample_store.nodes}

    def test_2d_flat(self, sample_store: GraphStore) -> None:
        state = apply_layout(sample_store, "force", dimensions=2)
        assert all(p.z == 0.0 for p in state.positions.values())

    def test_unknown_falls_back(self, sample_store: GraphStore, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            state = apply_layout(sample_store, "spiral")
        assert state.name is LayoutName.FORCE
        assert "spiral" in caplog.text


class TestLayoutEngine:
    """Tests for the pin/settle/release cycle."""

    @pytest.fixture
    def engine(self, tasks: DelayedTasks) -> LayoutEngine:
        return LayoutEngine(tasks, dimensions=3, settle_window_ms=3000)

    def test_one_shot_pins_then_releases(
        self, engine: LayoutEngine, scheduler: ManualScheduler, sample_store: GraphStore
    ) -> None:
        released = []
        state = engine.apply(sample_store, "circle", on_release=released.append)
        assert state.pinned_count == len(sample_store)
        assert engine.release_pending

        scheduler.advance(2999)
        assert state.pinned_count == len(sample_store)

        scheduler.advance(1)
        assert state.pinned_count == 0
        assert released == [state]
        assert not engine.release_pending

    def test_relayout_cancels_previous_release(
        self, engine: LayoutEngine, scheduler: ManualScheduler, sample_store: GraphStore
    ) -> None:
        released = []
        first = engine.apply(sample_store, "circle", on_release=released.append)
        scheduler.advance(2000)
        second = engine.apply(sample_store, "grid", on_release=released.append)

        scheduler.advance(1500)
        assert released == []
        assert first.pinned_count == len(sample_store)
        assert scheduler.pending == 1

        scheduler.advance(1500)
        assert released == [second]

    def test_force_has_no_release(self, engine: LayoutEngine, sample_store: GraphStore) -> None:
        engine.apply(sample_store, "force")
        assert not engine.release_pending

    def test_force_continues_from_previous_layout(
        self, engine: LayoutEngine, scheduler: ManualScheduler, sample_store: GraphStore
    ) -> None:
        circle = engine.apply(sample_store, "circle")
        scheduler.advance(3000)
        force = engine.apply(sample_store, "force")
        for node_id, position in circle.positions.items():
            assert force.positions[node_id].as_tuple() == position.as_tuple()

    def test_reset(self, engine: LayoutEngine, sample_store: GraphStore) -> None:
        engine.apply(sample_store, "sphere")
        engine.reset()
        assert engine.current is None
        assert not engine.release_pending
