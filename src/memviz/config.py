"""Configuration management using Pydantic Settings."""

from enum import Enum
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment presets."""

    DEV = "dev"
    PROD = "prod"
    TEST = "test"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    environment: Environment = Environment.PROD

    # Dataset discovery
    memory_folder_path: str = Field(
        default="./.memory/",
        description="Folder containing *.db memory graph files"
    )
    max_graph_nodes: int = Field(
        default=10000,
        ge=100,
        le=100000,
        description="Node count above which a loaded graph triggers a warning"
    )
    seed_test_databases: bool = Field(
        default=False,
        description="Create sample databases in the memory folder on startup"
    )

    # Visualization
    default_layout: str = "force"
    dimensions: Literal[2, 3] = 3

    # Interaction timing (milliseconds)
    hover_delay_ms: int = 300
    search_debounce_ms: int = 300
    settle_window_ms: int = Field(
        default=3000,
        description="How long one-shot layouts keep nodes pinned before release"
    )
    camera_travel_ms: int = 1000

    # Camera
    camera_distance: float = 200.0
    camera_home_z: float = 300.0
    fit_padding: int = 100

    # API Configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    api_debug: bool = False


def get_dev_settings() -> Settings:
    """Get development environment settings."""
    return Settings(
        environment=Environment.DEV,
        seed_test_databases=True,
        api_debug=True,
    )


def get_test_settings() -> Settings:
    """Get test environment settings.

    Timers are left at their real values; tests drive them through a
    manual scheduler instead of shortening them.
    """
    return Settings(
        environment=Environment.TEST,
        memory_folder_path="./.memory-test/",
        seed_test_databases=False,
    )


# Global settings instance
settings = Settings()
