"""GraphApp CLI - serve the API and manage its stores."""

import typer
from dotenv import load_dotenv

from cli.db import db
from cli.server import server
from graphapp import __version__
from graphapp.logging_config import setup_logging

# Load environment variables and setup logging
load_dotenv()
setup_logging()

# Create the main app
app = typer.Typer(
    name="graphapp",
    help="GraphApp - REST backend over a relational store and a property graph",
    add_completion=False,
)

# Add command groups
app.add_typer(server, name="server")
app.add_typer(db, name="db")


@app.command("version", help="Show GraphApp version")
def version():
    typer.echo(f"graphapp {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
