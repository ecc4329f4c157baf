"""FastAPI routers for the REST API."""

from .graph import router as graph_router
from .health import router as health_router
from .relational import router as relational_router

__all__ = [
    "health_router",
    "graph_router",
    "relational_router",
]
