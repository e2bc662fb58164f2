"""Unit tests for the SQLite dataset provider and seeder."""

import logging
import sqlite3
from pathlib import Path

import pytest

from memviz.graph import GraphStore
from memviz.storage import SqliteDatasetProvider, seed_folder
from memviz.storage.seeder import SOFTWARE_PROJECT, TEAM_KNOWLEDGE, write_normalized
from memviz.storage.sqlite_provider import SchemaKind, detect_schema, parse_observations


class TestSeeder:
    """Tests for sample database creation."""

    def test_creates_all_samples(self, tmp_path: Path) -> None:
        created = seed_folder(tmp_path)
        assert sorted(p.name for p in created) == [
            "empty.db",
            "nodes-only.db",
            "software-project.db",
            "team-knowledge.db",
        ]

    def test_existing_files_untouched(self, tmp_path: Path) -> None:
        seed_folder(tmp_path)
        assert seed_folder(tmp_path) == []

    def test_sample_sizes(self) -> None:
        assert len(SOFTWARE_PROJECT.entities) == 30
        assert len(SOFTWARE_PROJECT.relations) == 40
        assert len(TEAM_KNOWLEDGE.entities) == 15
        assert len(TEAM_KNOWLEDGE.relations) == 16


class TestListDatasets:
    """Tests for dataset discovery."""

    @pytest.mark.asyncio
    async def test_sorted_by_display_name(self, sqlite_provider: SqliteDatasetProvider) -> None:
        datasets = await sqlite_provider.list_datasets()
        assert [d.display_name for d in datasets] == [
            "empty",
            "nodes-only",
            "software-project",
            "team-knowledge",
        ]
        assert all(d.size_bytes > 0 for d in datasets)
        assert datasets[0].last_modified.tzinfo is not None

    @pytest.mark.asyncio
    async def test_ignores_other_files(self, sqlite_provider: SqliteDatasetProvider, memory_folder: Path) -> None:
        (memory_folder / "notes.txt").write_text("hello")
        datasets = await sqlite_provider.list_datasets()
        assert "notes.txt" not in {d.id for d in datasets}

    @pytest.mark.asyncio
    async def test_missing_folder(self, tmp_path: Path) -> None:
        provider = SqliteDatasetProvider(tmp_path / "nope")
        assert await provider.list_datasets() == []


class TestLoadGraph:
    """Tests for loading graphs."""

    @pytest.mark.asyncio
    async def test_compact_schema(self, sqlite_provider: SqliteDatasetProvider) -> None:
        payload = await sqlite_provider.load_graph("software-project.db")
        assert payload.metadata == {"databaseName": "software-project.db", "nodeCount": 30, "edgeCount": 40}

        auth = next(n for n in payload.nodes if n["id"] == "AuthModule")
        assert auth["entityType"] == "module"
        assert auth["observations"][0]["source"] == "code-analysis"

        edge = payload.edges[0]
        assert edge["id"] == "1"
        assert edge["fromType"] == "module"
        assert edge["toType"] == "service"

    @pytest.mark.asyncio
    async def test_normalized_schema(self, tmp_path: Path) -> None:
        write_normalized(tmp_path / "team.db", TEAM_KNOWLEDGE)
        provider = SqliteDatasetProvider(tmp_path)
        payload = await provider.load_graph("team.db")

        assert len(payload.nodes) == 15
        assert len(payload.edges) == 16
        alice = next(n for n in payload.nodes if n["id"] == "Alice Chen")
        assert [o["text"] for o in alice["observations"]] == [
            "Senior backend developer",
            "Expert in distributed systems",
        ]
        assert alice["observations"][0]["source"] == "hr-system"

    @pytest.mark.asyncio
    async def test_payload_builds_clean_store(self, sqlite_provider: SqliteDatasetProvider) -> None:
        payload = await sqlite_provider.load_graph("team-knowledge.db")
        store = GraphStore.build(payload.nodes, payload.edges)
        assert len(store.links) == 16

    @pytest.mark.asyncio
    async def test_empty_and_nodes_only(self, sqlite_provider: SqliteDatasetProvider) -> None:
        empty = await sqlite_provider.load_graph("empty.db")
        assert empty.nodes == [] and empty.edges == []
        nodes_only = await sqlite_provider.load_graph("nodes-only.db")
        assert len(nodes_only.nodes) == 5
        assert nodes_only.edges == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["../secret.db", "sub/x.db", "..", "", "   "])
    async def test_rejects_unsafe_names(
        self, sqlite_provider: SqliteDatasetProvider, name: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            assert await sqlite_provider.load_graph(name) is None
        assert caplog.records

    @pytest.mark.asyncio
    async def test_missing_file(self, sqlite_provider: SqliteDatasetProvider) -> None:
        assert await sqlite_provider.load_graph("missing.db") is None

    @pytest.mark.asyncio
    async def test_not_a_memory_graph(self, memory_folder: Path, sqlite_provider: SqliteDatasetProvider) -> None:
        conn = sqlite3.connect(memory_folder / "other.db")
        conn.execute("CREATE TABLE things (id INTEGER)")
        conn.commit()
        conn.close()
        assert await sqlite_provider.load_graph("other.db") is None

    @pytest.mark.asyncio
    async def test_not_sqlite(self, memory_folder: Path, sqlite_provider: SqliteDatasetProvider) -> None:
        (memory_folder / "garbage.db").write_bytes(b"not a database at all" * 100)
        assert await sqlite_provider.load_graph("garbage.db") is None

    @pytest.mark.asyncio
    async def test_warns_on_large_graph(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        seed_folder(tmp_path)
        provider = SqliteDatasetProvider(tmp_path, max_graph_nodes=10)
        with caplog.at_level(logging.WARNING):
            payload = await provider.load_graph("software-project.db")
        assert payload is not None
        assert "exceeds limit" in caplog.text


class TestSchemaHelpers:
    """Tests for schema detection and observation parsing."""

    def test_detect_schema(self, tmp_path: Path) -> None:
        seed_folder(tmp_path)
        write_normalized(tmp_path / "n.db", TEAM_KNOWLEDGE)
        with sqlite3.connect(tmp_path / "empty.db") as conn:
            assert detect_schema(conn) is SchemaKind.COMPACT
        with sqlite3.connect(tmp_path / "n.db") as conn:
            assert detect_schema(conn) is SchemaKind.NORMALIZED

    def test_parse_observations(self) -> None:
        assert parse_observations(None) == []
        assert parse_observations('["a", {"text": "b"}]') == ["a", {"text": "b"}]
        assert parse_observations("plain text") == ["plain text"]
        assert parse_observations('"single"') == ["single"]
        assert parse_observations("42") == []
