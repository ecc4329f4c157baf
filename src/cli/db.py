"""Database commands for the graphapp CLI."""

import asyncio

import typer
from rich.table import Table

from cli.common import console, logger, run_with_services
from services import seed_sample_graph

db = typer.Typer(name="db", help="Database commands")


async def _noop(services: dict) -> None:
    return None


@db.command("init")
def initialize_db():
    """Create the tables of both stores."""
    try:
        asyncio.run(run_with_services(_noop))
        logger.info("✓ Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise typer.Exit(1)


@db.command("seed")
def seed_db(
    force: bool = typer.Option(
        False, "--force", help="Seed even if the graph already holds nodes."
    ),
):
    """Load the sample graph."""

    async def seed(services: dict) -> bool:
        return await seed_sample_graph(services["graph_service"], force=force)

    try:
        seeded = asyncio.run(run_with_services(seed))
    except Exception as e:
        logger.error(f"Seeding failed: {e}")
        raise typer.Exit(1)

    if seeded:
        logger.info("✓ Sample data loaded")
    else:
        logger.warning("Graph already holds data; use --force to seed anyway")


@db.command("reset")
def reset_db(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
):
    """Drop and recreate every table of both stores."""
    if not yes:
        typer.confirm("This deletes all users, projects, nodes and relationships. Continue?", abort=True)

    try:
        asyncio.run(run_with_services(_noop, reset=True))
        logger.info("✓ Database reset")
    except Exception as e:
        logger.error(f"Database reset failed: {e}")
        raise typer.Exit(1)


@db.command("stats")
def show_stats():
    """Show row counts of both stores."""

    async def collect(services: dict) -> dict:
        stats = await services["graph_service"].get_stats()
        relational = services["relational_service"]
        stats["user_count"] = len(await relational.get_all_users())
        stats["project_count"] = len(await relational.get_all_projects())
        return stats

    try:
        stats = asyncio.run(run_with_services(collect))
    except Exception as e:
        logger.error(f"Failed to read statistics: {e}")
        raise typer.Exit(1)

    table = Table(title="GraphApp statistics")
    table.add_column("Entity")
    table.add_column("Count", justify="right")
    table.add_row("Users", str(stats["user_count"]))
    table.add_row("Projects", str(stats["project_count"]))
    table.add_row("Nodes", str(stats["node_count"]))
    for node_type, count in sorted(stats["nodes_by_type"].items()):
        table.add_row(f"  {node_type}", str(count))
    table.add_row("Relationships", str(stats["relationship_count"]))
    for rel_type, count in sorted(stats["relationships_by_type"].items()):
        table.add_row(f"  {rel_type}", str(count))
    console.print(table)
