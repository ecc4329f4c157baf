"""Combined graph views for visualization and search."""

import logging
from typing import Any, Dict

from .graph_service import GraphDataService

logger = logging.getLogger(__name__)


class GraphAggregationService:
    """Merges node and relationship queries into a single graph payload."""

    def __init__(self, graph_service: GraphDataService):
        self.graph_service = graph_service

    async def get_visualization(self) -> Dict[str, Any]:
        """Return every node and every relationship of the graph."""
        nodes = await self.graph_service.get_all_nodes()
        relationships = await self.graph_service.get_all_relationships()
        logger.debug(
            f"Visualization: {len(nodes)} nodes, {len(relationships)} relationships"
        )
        return {"nodes": nodes, "relationships": relationships}

    async def search(self, query: str) -> Dict[str, Any]:
        """Search nodes and relationships with the same query.

        The two result lists are independent: a matching relationship does
        not pull in its endpoints and a matching node does not pull in its
        relationships.
        """
        nodes = await self.graph_service.search_nodes(query)
        relationships = await self.graph_service.search_relationships(query)
        return {"nodes": nodes, "relationships": relationships}
