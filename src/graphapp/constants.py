# Constants
# Use /tmp for PID file in containers to avoid persistence issues
def _get_pid_file_path(filename: str):
    """Determine appropriate PID file location."""
    import os

    # If in Docker, use /tmp which doesn't persist across restarts
    if os.path.exists("/.dockerenv") or os.path.exists("/run/.containerenv"):
        return "/tmp/" + filename
    # Otherwise use current directory
    return filename


GRAPHAPP_SERVER_PID_FILE = _get_pid_file_path("graphapp-server.pid")

DEFAULT_RELATIONAL_DB_URL = "sqlite+aiosqlite:///relational.db"
DEFAULT_GRAPH_DB_URL = "sqlite+aiosqlite:///graph.db"

DEFAULT_RECENT_PROJECTS_LIMIT = 5
