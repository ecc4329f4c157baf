"""Repository pattern for graph store data access.

Repositories are bound to one ``AsyncSession``; the caller owns the session
and with it the transaction. They never validate, they only query and stage
changes.
"""

import json
import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .graph_models import Node, Relationship
from .search import contains_pattern

logger = logging.getLogger(__name__)


class NodeRepository:
    """Data access for graph nodes."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self) -> Sequence[Node]:
        result = await self.session.execute(select(Node).order_by(Node.id))
        return result.scalars().all()

    async def find_by_id(self, node_id: int) -> Optional[Node]:
        return await self.session.get(Node, node_id)

    async def find_by_type(self, node_type: str) -> Sequence[Node]:
        stmt = select(Node).filter(Node.node_type == node_type).order_by(Node.id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def find_by_label(self, label: str) -> List[Node]:
        """Find nodes whose display label equals ``label`` or whose label set holds it."""
        # The label set is stored as JSON text; LIKE narrows it down, membership is confirmed here
        stmt = (
            select(Node)
            .filter(
                or_(
                    Node.label == label,
                    cast(Node.label_set, String).like(
                        contains_pattern(json.dumps(label)), escape="\\"
                    ),
                )
            )
            .order_by(Node.id)
        )
        result = await self.session.execute(stmt)
        return [
            node
            for node in result.scalars().all()
            if node.label == label or label in node.labels
        ]

    async def search(self, query: str) -> Sequence[Node]:
        """Case-insensitive substring search on label or type."""
        pattern = contains_pattern(query)
        stmt = (
            select(Node)
            .filter(
                or_(
                    Node.label.ilike(pattern, escape="\\"),
                    Node.node_type.ilike(pattern, escape="\\"),
                )
            )
            .order_by(Node.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_by_type(self) -> Dict[Optional[str], int]:
        stmt = select(Node.node_type, func.count(Node.id)).group_by(Node.node_type)
        result = await self.session.execute(stmt)
        return {node_type: count for node_type, count in result.all()}

    async def save(self, node: Node) -> Node:
        """Stage a node and flush so its identifier is assigned."""
        self.session.add(node)
        await self.session.flush()
        return node

    async def delete(self, node: Node) -> None:
        await self.session.delete(node)
        await self.session.flush()


class RelationshipRepository:
    """Data access for graph relationships."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self) -> Sequence[Relationship]:
        stmt = select(Relationship).order_by(Relationship.id)
        result = await self.session.execute(stmt)
        return result.scalars().unique().all()

    async def find_by_id(self, relationship_id: int) -> Optional[Relationship]:
        return await self.session.get(Relationship, relationship_id)

    async def find_by_type(self, rel_type: str) -> Sequence[Relationship]:
        stmt = (
            select(Relationship)
            .filter(Relationship.rel_type == rel_type)
            .order_by(Relationship.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().unique().all()

    async def find_by_node_id(self, node_id: int) -> Sequence[Relationship]:
        """Find relationships where the node is the source or the target."""
        stmt = (
            select(Relationship)
            .filter(
                or_(
                    Relationship.source_id == node_id,
                    Relationship.target_id == node_id,
                )
            )
            .order_by(Relationship.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().unique().all()

    async def search(self, query: str) -> Sequence[Relationship]:
        """Case-insensitive substring search on the relationship type."""
        stmt = (
            select(Relationship)
            .filter(Relationship.rel_type.ilike(contains_pattern(query), escape="\\"))
            .order_by(Relationship.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().unique().all()

    async def count_by_type(self) -> Dict[str, int]:
        stmt = select(Relationship.rel_type, func.count(Relationship.id)).group_by(
            Relationship.rel_type
        )
        result = await self.session.execute(stmt)
        return {rel_type: count for rel_type, count in result.all()}

    async def save(self, relationship: Relationship) -> Relationship:
        """Stage a relationship and flush so its identifier is assigned."""
        self.session.add(relationship)
        await self.session.flush()
        return relationship

    async def delete(self, relationship: Relationship) -> None:
        await self.session.delete(relationship)
        await self.session.flush()
