"""Application configuration loaded from the environment."""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

from .constants import DEFAULT_GRAPH_DB_URL, DEFAULT_RELATIONAL_DB_URL

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class AppConfig:
    """Configuration for the graphapp server.

    Attributes:
        relational_db_url: SQLAlchemy URL of the relational store (users, projects)
        graph_db_url: SQLAlchemy URL of the graph store (nodes, relationships)
        db_echo: Whether to echo SQL statements for debugging
        cors_origins: Origins allowed by the CORS middleware
        seed_sample_data: Seed the graph store with sample data when it is empty
    """

    relational_db_url: str = DEFAULT_RELATIONAL_DB_URL
    graph_db_url: str = DEFAULT_GRAPH_DB_URL
    db_echo: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    seed_sample_data: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a configuration from environment variables (and a .env file)."""
        load_dotenv()

        origins = os.getenv("GRAPHAPP_CORS_ORIGINS", "*")
        return cls(
            relational_db_url=os.getenv(
                "GRAPHAPP_RELATIONAL_DB_URL", DEFAULT_RELATIONAL_DB_URL
            ),
            graph_db_url=os.getenv("GRAPHAPP_GRAPH_DB_URL", DEFAULT_GRAPH_DB_URL),
            db_echo=_env_flag("GRAPHAPP_DB_ECHO"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            seed_sample_data=_env_flag("GRAPHAPP_SEED_SAMPLE_DATA"),
        )
