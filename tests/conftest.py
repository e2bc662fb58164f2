"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from memviz.config import Environment, Settings
from memviz.graph import GraphStore
from memviz.models import DatasetInfo, GraphPayload
from memviz.render import ForceGraphAdapter
from memviz.scheduling import DelayedTasks, ManualScheduler
from memviz.session import VisualizerSession
from memviz.storage import SqliteDatasetProvider, seed_folder


class StaticProvider:
    """In-memory dataset provider keyed by dataset id."""

    def __init__(self, graphs: dict[str, GraphPayload]) -> None:
        self.graphs = graphs
        self.requested: list[str] = []

    async def list_datasets(self) -> list[DatasetInfo]:
        return []

    async def load_graph(self, dataset_id: str) -> GraphPayload | None:
        self.requested.append(dataset_id)
        return self.graphs.get(dataset_id)


def make_payload(dataset_id: str, nodes: list[dict], edges: list[dict]) -> GraphPayload:
    return GraphPayload(dataset_id=dataset_id, nodes=nodes, edges=edges)


# Small software-architecture graph used across tests
SAMPLE_NODES = [
    {
        "id": "AuthModule",
        "label": "AuthModule",
        "entityType": "module",
        "observations": [
            {"text": "Handles user authentication", "timestamp": "2025-01-15T10:30:00Z", "source": "code-analysis"},
            {"text": "Uses JWT tokens"},
        ],
    },
    {"id": "UserService", "label": "UserService", "entityType": "service", "observations": ["Core user service"]},
    {"id": "TokenService", "label": "TokenService", "entityType": "service", "observations": []},
    {"id": "ConfigService", "label": "ConfigService", "entityType": "service", "observations": []},
    {"id": "Orphan", "label": "Orphan", "entityType": "concept", "observations": []},
]

SAMPLE_EDGES = [
    {"id": "1", "source": "AuthModule", "target": "UserService", "relationType": "depends_on",
     "fromType": "module", "toType": "service"},
    {"id": "2", "source": "AuthModule", "target": "TokenService", "relationType": "contains"},
    {"id": "3", "source": "TokenService", "target": "ConfigService", "relationType": "uses"},
    {"id": "4", "source": "UserService", "target": "ConfigService", "relationType": "uses"},
]


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Test settings pointing at a temporary memory folder."""
    return Settings(
        environment=Environment.TEST,
        memory_folder_path=str(tmp_path / "memory"),
        seed_test_databases=False,
    )


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual-time scheduler advanced explicitly by tests."""
    return ManualScheduler()


@pytest.fixture
def tasks(scheduler: ManualScheduler) -> DelayedTasks:
    return DelayedTasks(scheduler)


@pytest.fixture
def sample_store() -> GraphStore:
    """Five nodes, four links, one isolated node."""
    return GraphStore.build(SAMPLE_NODES, SAMPLE_EDGES)


@pytest.fixture
def chain_store() -> GraphStore:
    """A -> B -> C."""
    return GraphStore.build(
        [{"id": "A"}, {"id": "B"}, {"id": "C"}],
        [{"source": "A", "target": "B"}, {"source": "B", "target": "C"}],
    )


@pytest.fixture
def static_provider() -> StaticProvider:
    return StaticProvider(
        {
            "sample.db": make_payload("sample.db", SAMPLE_NODES, SAMPLE_EDGES),
            "empty.db": make_payload("empty.db", [], []),
            "search.db": make_payload(
                "search.db",
                [{"id": "AuthModule", "label": "AuthModule"}, {"id": "UserService", "label": "UserService"}],
                [{"id": "e1", "source": "AuthModule", "target": "UserService", "relationType": "uses"}],
            ),
        }
    )


@pytest.fixture
def adapter(test_settings: Settings) -> ForceGraphAdapter:
    return ForceGraphAdapter(test_settings.dimensions)


@pytest.fixture
def session(
    static_provider: StaticProvider,
    scheduler: ManualScheduler,
    test_settings: Settings,
    adapter: ForceGraphAdapter,
) -> VisualizerSession:
    """Session over the static provider, driven by virtual time."""
    session = VisualizerSession(static_provider, scheduler, test_settings)
    session.initialize(adapter, "force")
    return session


@pytest.fixture
def memory_folder(test_settings: Settings) -> Path:
    """Memory folder seeded with the sample databases."""
    seed_folder(test_settings.memory_folder_path)
    return Path(test_settings.memory_folder_path)


@pytest.fixture
def sqlite_provider(memory_folder: Path, test_settings: Settings) -> SqliteDatasetProvider:
    return SqliteDatasetProvider(memory_folder, test_settings.max_graph_nodes)
