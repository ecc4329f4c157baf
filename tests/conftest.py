from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from database.database import create_graph_manager, create_relational_manager
from services import GraphAggregationService, GraphDataService, RelationalDataService


class FakeClock:
    """Clock that moves one minute forward on every call."""

    def __init__(self, start=None, step=timedelta(minutes=1)):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step
        self.calls = []

    def __call__(self):
        current = self.now
        self.calls.append(current)
        self.now = current + self.step
        return current


def sqlite_url(path):
    return f"sqlite+aiosqlite:///{path}"


@pytest_asyncio.fixture
async def graph_db(tmp_path):
    """Graph store backed by a fresh SQLite file."""
    manager = create_graph_manager(sqlite_url(tmp_path / "graph.db"))
    await manager.connect()
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest_asyncio.fixture
async def relational_db(tmp_path):
    """Relational store backed by a fresh SQLite file."""
    manager = create_relational_manager(sqlite_url(tmp_path / "relational.db"))
    await manager.connect()
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def graph_service(graph_db):
    return GraphDataService(graph_db)


@pytest.fixture
def relational_service(relational_db, clock):
    return RelationalDataService(relational_db, clock=clock)


@pytest.fixture
def aggregation_service(graph_service):
    return GraphAggregationService(graph_service)
