"""Graph data service for nodes and relationships.

Each public method runs in its own session, so one call is one transaction
against the graph store. Returned entities are detached from the session but
keep their loaded state (nodes are loaded together with relationships).
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from database.database import DatabaseManager
from database.graph_models import Node, Relationship
from database.graph_repository import NodeRepository, RelationshipRepository

from .errors import NotFoundError, ValidationError
from .updates import NodeUpdate, RelationshipUpdate, is_set

logger = logging.getLogger(__name__)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class GraphDataService:
    """Service for creating, updating and querying the property graph."""

    def __init__(self, db_manager: DatabaseManager):
        """Initialize the graph data service.

        Args:
            db_manager: Manager of the graph store
        """
        self.db_manager = db_manager

    # ---- Nodes ----

    async def get_all_nodes(self) -> List[Node]:
        async with self.db_manager.get_session() as session:
            return list(await NodeRepository(session).find_all())

    async def get_node_by_id(self, node_id: int) -> Optional[Node]:
        async with self.db_manager.get_session() as session:
            return await NodeRepository(session).find_by_id(node_id)

    async def create_node(
        self,
        label: Optional[str],
        type: Optional[str] = None,
        labels: Optional[Iterable[str]] = None,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> Node:
        """Create a node.

        Args:
            label: Display name of the node (required)
            type: Optional category; it is also added to the label set
            labels: Additional labels
            properties: Property map; non-primitive values are stored as strings

        Returns:
            The persisted node

        Raises:
            ValidationError: If the label is blank
        """
        if _is_blank(label):
            logger.warning("Rejected node without a label")
            raise ValidationError("Node label cannot be empty")

        node = Node(label=label, node_type=type)
        node.labels = labels
        node.add_label(type)
        node.properties = properties

        async with self.db_manager.get_session() as session:
            await NodeRepository(session).save(node)

        logger.info(f"Created node: {node.label} (id: {node.id}, type: {node.node_type})")
        return node

    async def update_node(self, node_id: int, update: NodeUpdate) -> Node:
        """Apply the supplied fields of ``update`` to a node.

        A new type is folded into the label set. An explicit ``None`` for
        properties clears the map.

        Raises:
            NotFoundError: If no node has this id
            ValidationError: If the label is set to a blank value
        """
        changes = update.present_fields()
        if "label" in changes and _is_blank(changes["label"]):
            logger.warning(f"Rejected blank label for node {node_id}")
            raise ValidationError("Node label cannot be empty")

        async with self.db_manager.get_session() as session:
            repo = NodeRepository(session)
            node = await repo.find_by_id(node_id)
            if node is None:
                raise NotFoundError(f"Node not found with id: {node_id}")

            if "label" in changes:
                node.label = changes["label"]
            if "labels" in changes:
                node.labels = changes["labels"]
                node.add_label(node.node_type)
            if "type" in changes:
                node.node_type = changes["type"]
                node.add_label(changes["type"])
            if "properties" in changes:
                node.properties = changes["properties"]

            await repo.save(node)

        logger.info(f"Updated node {node_id}: {sorted(changes)}")
        return node

    async def delete_node(self, node_id: int) -> bool:
        """Delete a node and, through the store cascade, its relationships.

        Returns:
            True if a node was deleted, False if none had this id
        """
        async with self.db_manager.get_session() as session:
            repo = NodeRepository(session)
            node = await repo.find_by_id(node_id)
            if node is None:
                logger.debug(f"Node {node_id} not found, nothing to delete")
                return False
            await repo.delete(node)

        logger.info(f"Deleted node {node_id}")
        return True

    async def search_nodes(self, query: str) -> List[Node]:
        async with self.db_manager.get_session() as session:
            return list(await NodeRepository(session).search(query))

    async def find_nodes_by_type(self, node_type: str) -> List[Node]:
        async with self.db_manager.get_session() as session:
            return list(await NodeRepository(session).find_by_type(node_type))

    async def find_nodes_by_label(self, label: str) -> List[Node]:
        async with self.db_manager.get_session() as session:
            return await NodeRepository(session).find_by_label(label)

    # ---- Relationships ----

    async def get_all_relationships(self) -> List[Relationship]:
        async with self.db_manager.get_session() as session:
            return list(await RelationshipRepository(session).find_all())

    async def get_relationship_by_id(self, relationship_id: int) -> Optional[Relationship]:
        async with self.db_manager.get_session() as session:
            return await RelationshipRepository(session).find_by_id(relationship_id)

    async def _resolve_node(
        self, repo: NodeRepository, node_id: Optional[int], role: str
    ) -> Node:
        if node_id is None:
            logger.warning(f"Rejected relationship without a {role.lower()} node")
            raise ValidationError(f"{role} node is required")
        node = await repo.find_by_id(node_id)
        if node is None:
            logger.warning(f"Rejected relationship: {role.lower()} node {node_id} not found")
            raise ValidationError(f"{role} node not found with id: {node_id}")
        return node

    async def create_relationship(
        self,
        type: Optional[str],
        source_id: Optional[int],
        target_id: Optional[int],
        properties: Optional[Mapping[str, Any]] = None,
    ) -> Relationship:
        """Create a directed relationship between two existing nodes.

        Both endpoints are loaded first and the relationship is attached to
        the loaded nodes. Nothing is persisted if either lookup fails.

        Raises:
            ValidationError: If the type is blank, or a node id is missing or
                does not resolve
        """
        if _is_blank(type):
            logger.warning("Rejected relationship without a type")
            raise ValidationError("Relationship type cannot be empty")

        async with self.db_manager.get_session() as session:
            nodes = NodeRepository(session)
            source = await self._resolve_node(nodes, source_id, "Source")
            target = await self._resolve_node(nodes, target_id, "Target")

            relationship = Relationship(rel_type=type)
            relationship.source_node = source
            relationship.target_node = target
            relationship.properties = properties
            await RelationshipRepository(session).save(relationship)

        logger.info(
            f"Created relationship: ({source.id})-[{relationship.rel_type}]->({target.id}) "
            f"(id: {relationship.id})"
        )
        return relationship

    async def update_relationship(
        self, relationship_id: int, update: RelationshipUpdate
    ) -> Relationship:
        """Apply the supplied fields of ``update`` to a relationship.

        A supplied source or target id is resolved again against the store.

        Raises:
            NotFoundError: If no relationship has this id
            ValidationError: If the type is blank or an endpoint does not resolve
        """
        changes = update.present_fields()
        if "type" in changes and _is_blank(changes["type"]):
            logger.warning(f"Rejected blank type for relationship {relationship_id}")
            raise ValidationError("Relationship type cannot be empty")

        async with self.db_manager.get_session() as session:
            repo = RelationshipRepository(session)
            relationship = await repo.find_by_id(relationship_id)
            if relationship is None:
                raise NotFoundError(f"Relationship not found with id: {relationship_id}")

            nodes = NodeRepository(session)
            if "source_id" in changes:
                relationship.source_node = await self._resolve_node(
                    nodes, changes["source_id"], "Source"
                )
            if "target_id" in changes:
                relationship.target_node = await self._resolve_node(
                    nodes, changes["target_id"], "Target"
                )
            if "type" in changes:
                relationship.rel_type = changes["type"]
            if "properties" in changes:
                relationship.properties = changes["properties"]

            await repo.save(relationship)

        logger.info(f"Updated relationship {relationship_id}: {sorted(changes)}")
        return relationship

    async def delete_relationship(self, relationship_id: int) -> bool:
        """Delete a relationship.

        Returns:
            True if a relationship was deleted, False if none had this id
        """
        async with self.db_manager.get_session() as session:
            repo = RelationshipRepository(session)
            relationship = await repo.find_by_id(relationship_id)
            if relationship is None:
                logger.debug(f"Relationship {relationship_id} not found, nothing to delete")
                return False
            await repo.delete(relationship)

        logger.info(f"Deleted relationship {relationship_id}")
        return True

    async def search_relationships(self, query: str) -> List[Relationship]:
        async with self.db_manager.get_session() as session:
            return list(await RelationshipRepository(session).search(query))

    async def find_relationships_by_type(self, rel_type: str) -> List[Relationship]:
        async with self.db_manager.get_session() as session:
            return list(await RelationshipRepository(session).find_by_type(rel_type))

    async def find_relationships_by_node(self, node_id: int) -> List[Relationship]:
        async with self.db_manager.get_session() as session:
            return list(await RelationshipRepository(session).find_by_node_id(node_id))

    async def get_stats(self) -> Dict[str, Any]:
        """Count nodes and relationships, in total and per type."""
        async with self.db_manager.get_session() as session:
            nodes_by_type = await NodeRepository(session).count_by_type()
            relationships_by_type = await RelationshipRepository(session).count_by_type()

        return {
            "node_count": sum(nodes_by_type.values()),
            "relationship_count": sum(relationships_by_type.values()),
            # JSON object keys cannot be null
            "nodes_by_type": {
                (node_type if node_type is not None else "untyped"): count
                for node_type, count in nodes_by_type.items()
            },
            "relationships_by_type": relationships_by_type,
        }
