"""Server management commands for the graphapp CLI."""

import os
import sys

import psutil
import typer
import uvicorn
from daemon import DaemonContext
from daemon.pidfile import PIDLockFile

from cli.common import logger
from graphapp.constants import GRAPHAPP_SERVER_PID_FILE

server = typer.Typer(name="server", help="Server management commands")


def run_server(host, port, daemon):
    """Helper function to run the server."""
    try:
        uvicorn.run(
            "servers.api.api_server:create_app",
            factory=True,
            host=host,
            port=port,
            log_level="error" if daemon else "info",
        )
    except Exception as e:
        logger.error(f"Failed to start API server: {e}")
        return sys.exit(1)


@server.command("start")
def start_server(
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind the API server to."),
    port: int = typer.Option(8080, "--port", help="Port to bind the API server to."),
    daemon: bool = typer.Option(
        False, "--daemon", help="Run the server in the background."
    ),
    pidfile: str = typer.Option(
        GRAPHAPP_SERVER_PID_FILE, "--pidfile", help="Path to the PID file."
    ),
):
    """Launch the GraphApp API server."""
    if not daemon:
        try:
            logger.info(f"Starting GraphApp API server on http://{host}:{port}")
            logger.info("Press Ctrl+C to stop.")
            run_server(host, port, daemon=False)
        except KeyboardInterrupt:
            logger.info("\nServer stopped by user.")
        finally:
            logger.info("✓ Server stopped.")

    else:
        lock = PIDLockFile(pidfile)
        with DaemonContext(working_directory=os.getcwd(), pidfile=lock):
            run_server(host, port, daemon=True)


def _read_pid(pidfile: str) -> int:
    """Read the PID file, removing it when it is unreadable or stale."""
    try:
        with open(pidfile, "r") as f:
            pid = int(f.read().strip())
    except (IOError, ValueError):
        logger.error(f"Could not read a PID from {pidfile}; removing it.")
        os.remove(pidfile)
        raise typer.Exit(1)

    if not psutil.pid_exists(pid):
        logger.warning(f"Removing stale PID file {pidfile} (process {pid} is gone).")
        os.remove(pidfile)
        raise typer.Exit()
    return pid


def _terminate(pid: int, timeout: float = 10) -> None:
    """Send SIGTERM and escalate to SIGKILL after ``timeout`` seconds."""
    proc = psutil.Process(pid)
    logger.info(f"Stopping API server process {pid}...")
    proc.terminate()
    try:
        proc.wait(timeout=timeout)
        logger.info(f"✓ Server process {pid} stopped.")
    except psutil.TimeoutExpired:
        logger.warning(f"Process {pid} ignored SIGTERM for {timeout}s, killing it.")
        proc.kill()
        proc.wait(timeout=5)
        logger.info(f"✓ Server process {pid} killed.")


@server.command("stop")
def kill_server(
    pidfile: str = typer.Option(
        GRAPHAPP_SERVER_PID_FILE, "--pidfile", help="Path to the PID file."
    )
):
    """Stop the GraphApp API server started with --daemon."""
    if not os.path.exists(pidfile):
        logger.warning("Server is not running (PID file not found).")
        raise typer.Exit()

    pid = _read_pid(pidfile)
    try:
        _terminate(pid)
    except psutil.NoSuchProcess:
        logger.warning(f"Server process {pid} exited before it could be stopped.")
    except psutil.Error as e:
        logger.error(f"Failed to stop server process {pid}: {e}")
        raise typer.Exit(1)
    finally:
        if os.path.exists(pidfile):
            os.remove(pidfile)
