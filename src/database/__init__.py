"""Storage layer for graphapp.

Two independent stores, each with its own SQLAlchemy metadata and its own
``DatabaseManager``: the relational store (users, projects) and the property
graph store (nodes, relationships).
"""

from .database import (
    DatabaseManager,
    create_graph_manager,
    create_relational_manager,
    normalize_db_url,
)
from .graph_models import GraphBase, Node, Relationship
from .graph_repository import NodeRepository, RelationshipRepository
from .property_codec import decode_properties, encode_properties
from .relational_models import Project, RelationalBase, User
from .relational_repository import ProjectRepository, UserRepository

__all__ = [
    "DatabaseManager",
    "create_graph_manager",
    "create_relational_manager",
    "normalize_db_url",
    "GraphBase",
    "Node",
    "Relationship",
    "RelationalBase",
    "User",
    "Project",
    "NodeRepository",
    "RelationshipRepository",
    "UserRepository",
    "ProjectRepository",
    "encode_properties",
    "decode_properties",
]
