"""Shared utilities and helpers for the graphapp CLI."""

import logging
from typing import Any, Awaitable, Callable

from rich.console import Console

from database.database import create_graph_manager, create_relational_manager
from graphapp.config import AppConfig
from services import create_services

# Shared console and logger
console = Console(record=True)
logger = logging.getLogger(__name__)


async def run_with_services(
    action: Callable[[dict], Awaitable[Any]], reset: bool = False
) -> Any:
    """Connect both stores, make sure their tables exist and run ``action``.

    Args:
        action: Coroutine function receiving the dict built by ``create_services``
        reset: Drop every table before creating them again

    Returns:
        Whatever ``action`` returns
    """
    config = AppConfig.from_env()
    graph_db = create_graph_manager(config.graph_db_url, echo=config.db_echo)
    relational_db = create_relational_manager(
        config.relational_db_url, echo=config.db_echo
    )

    async with graph_db, relational_db:
        for manager in (graph_db, relational_db):
            if reset:
                await manager.drop_tables()
            await manager.create_tables()
        return await action(create_services(graph_db, relational_db))
