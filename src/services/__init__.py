"""Service layer for graphapp.

Services hold the validation rules and own the transactions; each one wraps
the repositories of a single store. The HTTP routes and the CLI talk to the
services only.
"""

from database.database import DatabaseManager

from .aggregation_service import GraphAggregationService
from .errors import GraphAppError, NotFoundError, ValidationError
from .graph_service import GraphDataService
from .relational_service import RelationalDataService
from .sample_data import seed_sample_graph
from .updates import (
    UNSET,
    NodeUpdate,
    ProjectUpdate,
    RelationshipUpdate,
    UserUpdate,
)

__all__ = [
    "GraphAggregationService",
    "GraphDataService",
    "RelationalDataService",
    "GraphAppError",
    "NotFoundError",
    "ValidationError",
    "UNSET",
    "NodeUpdate",
    "RelationshipUpdate",
    "UserUpdate",
    "ProjectUpdate",
    "seed_sample_graph",
    "create_services",
]


def create_services(
    graph_db: DatabaseManager,
    relational_db: DatabaseManager,
) -> dict:
    """Create all services from the two store managers (dependency injection helper).

    Args:
        graph_db: Manager of the graph store
        relational_db: Manager of the relational store

    Returns:
        Dictionary with all service instances:
        - graph_service: GraphDataService
        - relational_service: RelationalDataService
        - aggregation_service: GraphAggregationService
    """
    graph_service = GraphDataService(graph_db)
    return {
        "graph_service": graph_service,
        "relational_service": RelationalDataService(relational_db),
        "aggregation_service": GraphAggregationService(graph_service),
    }
