"""Database connection and session management for the graph and relational stores."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from sqlalchemy import MetaData, event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

logger = logging.getLogger(__name__)


def normalize_db_url(db_url: str) -> str:
    """Rewrite a database URL to use an async driver.

    PostgreSQL URLs are pointed at psycopg (v3) and plain SQLite URLs at
    aiosqlite. Other URLs are returned unchanged.
    """
    if db_url.startswith("postgresql://"):
        return db_url.replace("postgresql://", "postgresql+psycopg://", 1)
    if db_url.startswith("postgresql+asyncpg://"):
        return db_url.replace("postgresql+asyncpg://", "postgresql+psycopg://", 1)
    if db_url.startswith("postgresql+psycopg2://"):
        return db_url.replace("postgresql+psycopg2://", "postgresql+psycopg://", 1)
    if db_url.startswith("sqlite://"):
        return db_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return db_url


class DatabaseManager:
    """Manages the engine and sessions of one store.

    Each store (relational, graph) gets its own manager bound to its own
    metadata, so the two never share tables or transactions.
    """

    def __init__(
        self,
        metadata: MetaData,
        db_url: Optional[str] = None,
        db_path: Optional[Path] = None,
        echo: bool = False,
        name: str = "database",
    ):
        """Initialize database manager.

        Args:
            metadata: Metadata holding the tables of this store
            db_url: Database URL (for PostgreSQL or other databases)
            db_path: Path to the SQLite database file (for SQLite)
            echo: Whether to echo SQL statements for debugging
            name: Store name used in log messages

        Note: Either db_url or db_path must be provided. If both are provided,
        db_url takes precedence.
        """
        if db_url:
            self.db_url = normalize_db_url(db_url)
            self.is_sqlite = self.db_url.startswith("sqlite")
            self.db_path = None
        elif db_path:
            self.db_url = f"sqlite+aiosqlite:///{db_path}"
            self.is_sqlite = True
            self.db_path = db_path
        else:
            raise ValueError("Either db_url or db_path must be provided")

        self.metadata = metadata
        self.echo = echo
        self.name = name
        self.engine: Optional[AsyncEngine] = None
        self.SessionLocal: Optional[async_sessionmaker] = None

    @property
    def is_memory(self) -> bool:
        return self.is_sqlite and (
            ":memory:" in self.db_url or self.db_url.rstrip("/").endswith("aiosqlite:")
        )

    async def connect(self) -> None:
        """Create database engine and session factory."""
        if self.engine is not None:
            logger.warning(f"Database '{self.name}' already connected")
            return

        if self.is_sqlite:
            self.engine = create_async_engine(
                self.db_url,
                echo=self.echo,
                # An in-memory database only lives as long as its single connection
                poolclass=StaticPool if self.is_memory else NullPool,
                connect_args={
                    "check_same_thread": False,
                },
            )

            @event.listens_for(self.engine.sync_engine, "connect")
            def set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                if not self.is_memory:
                    cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.execute("PRAGMA synchronous=NORMAL")
                cursor.close()

        else:
            self.engine = create_async_engine(
                self.db_url,
                echo=self.echo,
                pool_size=10,
                max_overflow=20,
                pool_pre_ping=True,  # Verify connections before using
                pool_recycle=3600,  # Recycle connections after 1 hour
                connect_args={
                    "connect_timeout": 10,
                } if "postgresql" in self.db_url else {},
            )

        self.SessionLocal = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )
        logger.debug(f"Database '{self.name}' connected: {self.engine.url!r}")

    async def create_tables(self) -> None:
        """Create the tables of this store if they do not exist."""
        if self.engine is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        async with self.engine.begin() as conn:
            await conn.run_sync(self.metadata.create_all)
        logger.debug(f"Tables ready for '{self.name}'")

    async def drop_tables(self) -> None:
        """Drop every table of this store."""
        if self.engine is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        async with self.engine.begin() as conn:
            await conn.run_sync(self.metadata.drop_all)
        logger.info(f"Dropped all tables for '{self.name}'")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a new database session with proper transaction management.

        This context manager ensures that:
        - Transactions are committed on successful completion
        - Transactions are rolled back on exceptions
        - Sessions are properly closed after use

        Yields:
            SQLAlchemy async session instance

        Raises:
            RuntimeError: If database not connected
        """
        if self.SessionLocal is None:
            raise RuntimeError("Database not connected. Call connect() first.")

        async with self.SessionLocal() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:
        """Close database connections and cleanup resources."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.SessionLocal = None
            logger.debug(f"Database '{self.name}' connections closed")

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()


def create_graph_manager(db_url: str, echo: bool = False) -> DatabaseManager:
    """Build the manager of the property-graph store."""
    from .graph_models import GraphBase

    return DatabaseManager(GraphBase.metadata, db_url=db_url, echo=echo, name="graph")


def create_relational_manager(db_url: str, echo: bool = False) -> DatabaseManager:
    """Build the manager of the relational store."""
    from .relational_models import RelationalBase

    return DatabaseManager(
        RelationalBase.metadata, db_url=db_url, echo=echo, name="relational"
    )
