"""Sample memory databases for development and tests."""

import asyncio
import json
import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path

from memviz.config import settings

logger = logging.getLogger(__name__)

COMPACT_SCHEMA = """
CREATE TABLE IF NOT EXISTS entities (
    name TEXT PRIMARY KEY,
    entityType TEXT NOT NULL,
    observations TEXT
);

CREATE TABLE IF NOT EXISTS relations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    fromEntity TEXT NOT NULL,
    toEntity TEXT NOT NULL,
    relationType TEXT NOT NULL,
    fromType TEXT DEFAULT '',
    toType TEXT DEFAULT '',
    FOREIGN KEY (fromEntity) REFERENCES entities(name) ON DELETE CASCADE,
    FOREIGN KEY (toEntity) REFERENCES entities(name) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_entities_type ON entities(entityType);
CREATE INDEX IF NOT EXISTS idx_relations_from ON relations(fromEntity);
CREATE INDEX IF NOT EXISTS idx_relations_to ON relations(toEntity);
"""

NORMALIZED_SCHEMA = """
CREATE TABLE IF NOT EXISTS entities (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    entity_type TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS observations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    entity_id INTEGER NOT NULL REFERENCES entities(id) ON DELETE CASCADE,
    content TEXT NOT NULL,
    timestamp TEXT,
    source TEXT
);

CREATE TABLE IF NOT EXISTS relations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    from_entity TEXT NOT NULL,
    from_type TEXT,
    to_entity TEXT NOT NULL,
    to_type TEXT,
    relation_type TEXT NOT NULL
);
"""


def _obs(text: str, timestamp: str | None = None, source: str | None = None) -> dict:
    entry: dict = {"text": text}
    if timestamp:
        entry["timestamp"] = timestamp
    if source:
        entry["source"] = source
    return entry


@dataclass
class SampleDataset:
    """Entities as (name, type, observations); relations as (from, from_type, to, to_type, relation)."""

    file_name: str
    entities: list[tuple[str, str, list[dict]]] = field(default_factory=list)
    relations: list[tuple[str, str, str, str, str]] = field(default_factory=list)


SOFTWARE_PROJECT = SampleDataset(
    file_name="software-project.db",
    entities=[
        ("AuthModule", "module", [
            _obs("Handles user authentication and authorization", "2025-01-15T10:30:00Z", "code-analysis"),
            _obs("Uses JWT tokens for session management", "2025-01-15T10:31:00Z", "documentation"),
        ]),
        ("UserService", "service", [
            _obs("Core service for user management", "2025-01-15T11:00:00Z", "code-analysis"),
            _obs("Implements caching for performance", source="code-review"),
        ]),
        ("UserController", "class", [_obs("REST API controller for user operations", "2025-01-16T09:00:00Z")]),
        ("User", "class", [_obs("Domain entity representing a user", "2025-01-14T14:00:00Z", "documentation")]),
        ("UserRepository", "class", [_obs("Data access layer for User entities", source="code-analysis")]),
        ("DatabaseContext", "class", [_obs("Entity Framework DbContext", "2025-01-14T14:30:00Z")]),
        ("AuthController", "class", [
            _obs("Handles login, logout, and token refresh", "2025-01-15T10:45:00Z", "code-analysis"),
        ]),
        ("TokenService", "service", [_obs("JWT token generation and validation", "2025-01-15T10:35:00Z")]),
        ("EmailService", "service", [_obs("Sends transactional emails", source="documentation")]),
        ("NotificationModule", "module", [_obs("Manages all notification channels", "2025-01-17T08:00:00Z")]),
        ("CacheService", "service", [
            _obs("Redis-based caching implementation", "2025-01-16T10:00:00Z", "code-analysis"),
        ]),
        ("LoggingModule", "module", [_obs("Centralized logging with Serilog", source="documentation")]),
        ("ConfigService", "service", [_obs("Configuration management from appsettings", "2025-01-14T09:00:00Z")]),
        ("HealthCheckController", "class", [_obs("Exposes health check endpoints", source="code-analysis")]),
        ("MetricsService", "service", [_obs("Application metrics and monitoring", "2025-01-18T11:00:00Z")]),
        ("DataModule", "module", [_obs("Database access and migrations", source="documentation")]),
        ("MigrationService", "service", [_obs("Handles database schema migrations")]),
        ("ValidationService", "service", [
            _obs("Input validation and sanitization", "2025-01-15T15:00:00Z", "security-review"),
        ]),
        ("PasswordHasher", "class", [
            _obs("BCrypt password hashing implementation", "2025-01-15T10:40:00Z", "security-review"),
        ]),
        ("RoleService", "service", [_obs("Role-based access control", source="documentation")]),
        ("Permission", "class", [_obs("Permission entity for RBAC")]),
        ("Role", "class", [_obs("Role entity with permission collection", "2025-01-15T11:30:00Z")]),
        ("AuditService", "service", [_obs("Audit logging for compliance", source="compliance-review")]),
        ("AuditLog", "class", [_obs("Audit log entry entity")]),
        ("ApiModule", "module", [_obs("REST API layer", "2025-01-14T08:00:00Z", "documentation")]),
        ("ErrorHandler", "class", [_obs("Global exception handling middleware", source="code-analysis")]),
        ("RequestLogger", "class", [_obs("HTTP request/response logging", "2025-01-16T14:00:00Z")]),
        ("RateLimiter", "class", [_obs("API rate limiting implementation", source="security-review")]),
        ("CorsPolicyService", "service", [_obs("CORS configuration management")]),
        ("SwaggerConfig", "config", [_obs("OpenAPI documentation setup", "2025-01-14T10:00:00Z")]),
    ],
    relations=[
        ("AuthModule", "module", "UserService", "service", "depends_on"),
        ("AuthModule", "module", "TokenService", "service", "contains"),
        ("AuthModule", "module", "PasswordHasher", "class", "contains"),
        ("AuthModule", "module", "RoleService", "service", "depends_on"),
        ("UserService", "service", "UserRepository", "class", "uses"),
        ("UserService", "service", "CacheService", "service", "uses"),
        ("UserService", "service", "ValidationService", "service", "uses"),
        ("UserService", "service", "EmailService", "service", "uses"),
        ("UserController", "class", "UserService", "service", "calls"),
        ("UserController", "class", "ValidationService", "service", "calls"),
        ("UserRepository", "class", "DatabaseContext", "class", "uses"),
        ("UserRepository", "class", "User", "class", "manages"),
        ("AuthController", "class", "TokenService", "service", "calls"),
        ("AuthController", "class", "UserService", "service", "calls"),
        ("AuthController", "class", "AuditService", "service", "calls"),
        ("TokenService", "service", "ConfigService", "service", "uses"),
        ("EmailService", "service", "ConfigService", "service", "uses"),
        ("NotificationModule", "module", "EmailService", "service", "contains"),
        ("CacheService", "service", "ConfigService", "service", "uses"),
        ("LoggingModule", "module", "ConfigService", "service", "uses"),
        ("HealthCheckController", "class", "MetricsService", "service", "calls"),
        ("HealthCheckController", "class", "DatabaseContext", "class", "calls"),
        ("DataModule", "module", "DatabaseContext", "class", "contains"),
        ("DataModule", "module", "MigrationService", "service", "contains"),
        ("MigrationService", "service", "DatabaseContext", "class", "uses"),
        ("RoleService", "service", "Role", "class", "manages"),
        ("RoleService", "service", "Permission", "class", "manages"),
        ("RoleService", "service", "CacheService", "service", "uses"),
        ("AuditService", "service", "AuditLog", "class", "manages"),
        ("AuditService", "service", "DatabaseContext", "class", "uses"),
        ("ApiModule", "module", "AuthController", "class", "contains"),
        ("ApiModule", "module", "UserController", "class", "contains"),
        ("ApiModule", "module", "HealthCheckController", "class", "contains"),
        ("ApiModule", "module", "ErrorHandler", "class", "contains"),
        ("ApiModule", "module", "RequestLogger", "class", "contains"),
        ("ApiModule", "module", "RateLimiter", "class", "contains"),
        ("ErrorHandler", "class", "LoggingModule", "module", "uses"),
        ("RequestLogger", "class", "LoggingModule", "module", "uses"),
        ("RateLimiter", "class", "CacheService", "service", "uses"),
        ("SwaggerConfig", "config", "ApiModule", "module", "documents"),
    ],
)

TEAM_KNOWLEDGE = SampleDataset(
    file_name="team-knowledge.db",
    entities=[
        ("Alice Chen", "person", [
            _obs("Senior backend developer", source="hr-system"),
            _obs("Expert in distributed systems", "2025-01-10T09:00:00Z"),
        ]),
        ("Bob Smith", "person", [_obs("Frontend lead", source="hr-system"), _obs("React and TypeScript specialist")]),
        ("Carol Davis", "person", [_obs("DevOps engineer", source="hr-system")]),
        ("David Lee", "person", [_obs("Product manager", "2025-01-05T10:00:00Z")]),
        ("Authentication System", "project", [
            _obs("OAuth2 and OIDC implementation", source="confluence"),
            _obs("Critical security component"),
        ]),
        ("Dashboard Redesign", "project", [_obs("New analytics dashboard", "2025-01-08T14:00:00Z")]),
        ("CI/CD Pipeline", "project", [_obs("GitHub Actions workflow", source="documentation")]),
        ("Microservices Migration", "project", [_obs("Monolith to microservices", source="architecture-review")]),
        ("React", "technology", [_obs("Frontend framework")]),
        ("Kubernetes", "technology", [_obs("Container orchestration", source="tech-radar")]),
        ("PostgreSQL", "technology", [_obs("Primary database")]),
        ("Redis", "technology", [_obs("Caching layer")]),
        ("Sprint 23", "concept", [_obs("Current sprint", "2025-01-15T08:00:00Z")]),
        ("Technical Debt", "concept", [_obs("Accumulated shortcuts in codebase")]),
        ("Security Review", "document", [_obs("Q1 2025 security audit findings", source="security-team")]),
    ],
    relations=[
        ("Alice Chen", "person", "Authentication System", "project", "leads"),
        ("Alice Chen", "person", "PostgreSQL", "technology", "expert_in"),
        ("Alice Chen", "person", "Redis", "technology", "expert_in"),
        ("Bob Smith", "person", "Dashboard Redesign", "project", "leads"),
        ("Bob Smith", "person", "React", "technology", "expert_in"),
        ("Carol Davis", "person", "CI/CD Pipeline", "project", "leads"),
        ("Carol Davis", "person", "Kubernetes", "technology", "expert_in"),
        ("David Lee", "person", "Sprint 23", "concept", "manages"),
        ("David Lee", "person", "Dashboard Redesign", "project", "owns"),
        ("Authentication System", "project", "Microservices Migration", "project", "part_of"),
        ("Authentication System", "project", "PostgreSQL", "technology", "uses"),
        ("Authentication System", "project", "Redis", "technology", "uses"),
        ("Dashboard Redesign", "project", "React", "technology", "uses"),
        ("CI/CD Pipeline", "project", "Kubernetes", "technology", "uses"),
        ("Microservices Migration", "project", "Technical Debt", "concept", "addresses"),
        ("Security Review", "document", "Authentication System", "project", "audits"),
    ],
)

EMPTY = SampleDataset(file_name="empty.db")

NODES_ONLY = SampleDataset(
    file_name="nodes-only.db",
    entities=[(f"Concept {c}", "concept", [_obs(f"Standalone concept {c}")]) for c in "ABCDE"],
)

SAMPLE_DATASETS = [SOFTWARE_PROJECT, TEAM_KNOWLEDGE, EMPTY, NODES_ONLY]


def write_compact(path: Path, dataset: SampleDataset) -> None:
    """Create a compact-layout database at `path`."""
    conn = sqlite3.connect(path)
    try:
        conn.executescript(COMPACT_SCHEMA)
        conn.executemany(
            "INSERT INTO entities (name, entityType, observations) VALUES (?, ?, ?)",
            [(name, entity_type, json.dumps(obs)) for name, entity_type, obs in dataset.entities],
        )
        conn.executemany(
            "INSERT INTO relations (fromEntity, fromType, toEntity, toType, relationType) "
            "VALUES (?, ?, ?, ?, ?)",
            dataset.relations,
        )
        conn.commit()
    finally:
        conn.close()


def write_normalized(path: Path, dataset: SampleDataset) -> None:
    """Create a normalized-layout database at `path`."""
    conn = sqlite3.connect(path)
    try:
        conn.executescript(NORMALIZED_SCHEMA)
        for name, entity_type, observations in dataset.entities:
            cursor = conn.execute(
                "INSERT INTO entities (name, entity_type) VALUES (?, ?)", (name, entity_type)
            )
            conn.executemany(
                "INSERT INTO observations (entity_id, content, timestamp, source) VALUES (?, ?, ?, ?)",
                [
                    (cursor.lastrowid, o["text"], o.get("timestamp"), o.get("source"))
                    for o in observations
                ],
            )
        conn.executemany(
            "INSERT INTO relations (from_entity, from_type, to_entity, to_type, relation_type) "
            "VALUES (?, ?, ?, ?, ?)",
            dataset.relations,
        )
        conn.commit()
    finally:
        conn.close()


def seed_folder(folder: str | Path | None = None) -> list[Path]:
    """Create any missing sample databases; existing files are left alone.

    Returns the paths that were created.
    """
    target = Path(folder or settings.memory_folder_path).resolve()
    target.mkdir(parents=True, exist_ok=True)

    created = []
    for dataset in SAMPLE_DATASETS:
        path = target / dataset.file_name
        if path.exists():
            logger.debug(f"Database already exists: {path}")
            continue
        write_compact(path, dataset)
        created.append(path)
        logger.info(
            f"Created {dataset.file_name} with {len(dataset.entities)} entities "
            f"and {len(dataset.relations)} relations"
        )
    return created


async def seed_folder_async(folder: str | Path | None = None) -> list[Path]:
    return await asyncio.to_thread(seed_folder, folder)
