"""Tests for the graphapp CLI."""

import os

import pytest
from typer.testing import CliRunner

from cli import app
from graphapp import __version__

runner = CliRunner()


@pytest.fixture(autouse=True)
def stores(tmp_path, monkeypatch):
    """Point both stores at temporary SQLite files."""
    monkeypatch.setenv("GRAPHAPP_GRAPH_DB_URL", f"sqlite:///{tmp_path / 'graph.db'}")
    monkeypatch.setenv(
        "GRAPHAPP_RELATIONAL_DB_URL", f"sqlite:///{tmp_path / 'relational.db'}"
    )
    return tmp_path


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_db_init_creates_store_files(stores):
    result = runner.invoke(app, ["db", "init"])

    assert result.exit_code == 0
    assert (stores / "graph.db").exists()
    assert (stores / "relational.db").exists()


def test_db_seed_and_stats():
    result = runner.invoke(app, ["db", "seed"])
    assert result.exit_code == 0

    result = runner.invoke(app, ["db", "stats"])

    assert result.exit_code == 0
    assert "Nodes" in result.output
    assert "Person" in result.output
    assert "WORKS_AT" in result.output


def test_db_seed_twice_keeps_one_copy():
    runner.invoke(app, ["db", "seed"])
    result = runner.invoke(app, ["db", "seed"])

    assert result.exit_code == 0
    result = runner.invoke(app, ["db", "stats"])
    assert "Company" in result.output


def test_db_reset_empties_the_stores():
    runner.invoke(app, ["db", "seed"])

    result = runner.invoke(app, ["db", "reset", "--yes"])
    assert result.exit_code == 0

    result = runner.invoke(app, ["db", "stats"])
    assert "Person" not in result.output


def test_db_reset_asks_for_confirmation():
    runner.invoke(app, ["db", "seed"])

    result = runner.invoke(app, ["db", "reset"], input="n\n")

    assert result.exit_code != 0
    assert "Person" in runner.invoke(app, ["db", "stats"]).output


def test_server_stop_without_pidfile(tmp_path):
    result = runner.invoke(app, ["server", "stop", "--pidfile", str(tmp_path / "none.pid")])

    assert result.exit_code == 0


def test_server_stop_with_invalid_pidfile(tmp_path):
    pidfile = tmp_path / "server.pid"
    pidfile.write_text("not-a-pid")

    result = runner.invoke(app, ["server", "stop", "--pidfile", str(pidfile)])

    assert result.exit_code == 1
    assert not os.path.exists(pidfile)


def test_server_stop_with_stale_pidfile(tmp_path):
    pidfile = tmp_path / "server.pid"
    pidfile.write_text("999999999")

    result = runner.invoke(app, ["server", "stop", "--pidfile", str(pidfile)])

    assert result.exit_code == 0
    assert not pidfile.exists()
