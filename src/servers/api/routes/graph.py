"""Graph API endpoints for nodes, relationships and aggregated views."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from database.graph_models import Node, Relationship
from servers.api.dependencies import get_aggregation_service, get_graph_service
from services import (
    GraphAggregationService,
    GraphDataService,
    NodeUpdate,
    NotFoundError,
    RelationshipUpdate,
    ValidationError,
)

router = APIRouter(prefix="/graph", tags=["graph"])


class NodeRef(BaseModel):
    """Reference to an existing node; fields other than ``id`` are ignored."""

    id: Optional[int] = None


class NodeRequest(BaseModel):
    """Create or update node request model."""

    label: Optional[str] = None
    type: Optional[str] = None
    labels: Optional[List[str]] = None
    properties: Optional[Dict[str, Any]] = None


class RelationshipRequest(BaseModel):
    """Create or update relationship request model."""

    type: Optional[str] = None
    source: Optional[NodeRef] = None
    target: Optional[NodeRef] = None
    properties: Optional[Dict[str, Any]] = None


class NodeResponse(BaseModel):
    """Node response model."""

    id: int
    label: str
    type: Optional[str] = None
    labels: List[str]
    properties: Dict[str, Any]

    @classmethod
    def from_node(cls, node: Node) -> "NodeResponse":
        """Create NodeResponse from Node model."""
        return cls(**node.to_dict())


class RelationshipResponse(BaseModel):
    """Relationship response model."""

    id: int
    type: str
    source: NodeResponse
    target: NodeResponse
    properties: Dict[str, Any]

    @classmethod
    def from_relationship(cls, relationship: Relationship) -> "RelationshipResponse":
        """Create RelationshipResponse from Relationship model."""
        return cls(
            id=relationship.id,
            type=relationship.rel_type,
            source=NodeResponse.from_node(relationship.source_node),
            target=NodeResponse.from_node(relationship.target_node),
            properties=relationship.properties,
        )


class GraphResponse(BaseModel):
    """Nodes and relationships returned together."""

    nodes: List[NodeResponse]
    relationships: List[RelationshipResponse]

    @classmethod
    def from_graph(cls, graph: Dict[str, list]) -> "GraphResponse":
        return cls(
            nodes=[NodeResponse.from_node(n) for n in graph["nodes"]],
            relationships=[
                RelationshipResponse.from_relationship(r) for r in graph["relationships"]
            ],
        )


class GraphStatsResponse(BaseModel):
    """Graph statistics response model."""

    node_count: int
    relationship_count: int
    nodes_by_type: Dict[str, int]
    relationships_by_type: Dict[str, int]


def _ref_id(ref: Optional[dict]) -> Optional[int]:
    return ref.get("id") if ref else None


def _relationship_update(request: RelationshipRequest) -> RelationshipUpdate:
    data = request.model_dump(exclude_unset=True)
    if "source" in data:
        data["source_id"] = _ref_id(data.pop("source"))
    if "target" in data:
        data["target_id"] = _ref_id(data.pop("target"))
    return RelationshipUpdate.from_dict(data)


# ---- Aggregated views ----


@router.get("/visualization", response_model=GraphResponse)
async def get_visualization(
    aggregation: GraphAggregationService = Depends(get_aggregation_service),
):
    """Return the whole graph for rendering."""
    return GraphResponse.from_graph(await aggregation.get_visualization())


@router.get("/search", response_model=GraphResponse)
async def search_graph(
    query: str,
    aggregation: GraphAggregationService = Depends(get_aggregation_service),
):
    """Search nodes and relationships with one query."""
    return GraphResponse.from_graph(await aggregation.search(query))


@router.get("/stats", response_model=GraphStatsResponse)
async def get_stats(graph_service: GraphDataService = Depends(get_graph_service)):
    """Count nodes and relationships by type."""
    return GraphStatsResponse(**await graph_service.get_stats())


# ---- Nodes ----


@router.get("/nodes", response_model=List[NodeResponse])
async def list_nodes(graph_service: GraphDataService = Depends(get_graph_service)):
    nodes = await graph_service.get_all_nodes()
    return [NodeResponse.from_node(node) for node in nodes]


@router.get("/nodes/search", response_model=List[NodeResponse])
async def search_nodes(
    query: str, graph_service: GraphDataService = Depends(get_graph_service)
):
    nodes = await graph_service.search_nodes(query)
    return [NodeResponse.from_node(node) for node in nodes]


@router.get("/nodes/type/{node_type}", response_model=List[NodeResponse])
async def find_nodes_by_type(
    node_type: str, graph_service: GraphDataService = Depends(get_graph_service)
):
    nodes = await graph_service.find_nodes_by_type(node_type)
    return [NodeResponse.from_node(node) for node in nodes]


@router.get("/nodes/label/{label}", response_model=List[NodeResponse])
async def find_nodes_by_label(
    label: str, graph_service: GraphDataService = Depends(get_graph_service)
):
    nodes = await graph_service.find_nodes_by_label(label)
    return [NodeResponse.from_node(node) for node in nodes]


@router.get("/nodes/{node_id}", response_model=NodeResponse)
async def get_node(
    node_id: int, graph_service: GraphDataService = Depends(get_graph_service)
):
    """Get node by ID.

    Raises:
        HTTPException: If node not found
    """
    node = await graph_service.get_node_by_id(node_id)
    if not node:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Node '{node_id}' not found",
        )
    return NodeResponse.from_node(node)


@router.post("/nodes", response_model=NodeResponse, status_code=status.HTTP_201_CREATED)
async def create_node(
    request: NodeRequest, graph_service: GraphDataService = Depends(get_graph_service)
):
    """Create a node.

    Raises:
        HTTPException: If the label is missing
    """
    try:
        node = await graph_service.create_node(
            request.label,
            type=request.type,
            labels=request.labels,
            properties=request.properties,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return NodeResponse.from_node(node)


@router.put("/nodes/{node_id}", response_model=NodeResponse)
async def update_node(
    node_id: int,
    request: NodeRequest,
    graph_service: GraphDataService = Depends(get_graph_service),
):
    """Update the fields present in the request body.

    Raises:
        HTTPException: If node not found or the update is invalid
    """
    update = NodeUpdate.from_dict(request.model_dump(exclude_unset=True))
    try:
        node = await graph_service.update_node(node_id, update)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return NodeResponse.from_node(node)


@router.delete(
    "/nodes/{node_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_node(
    node_id: int, graph_service: GraphDataService = Depends(get_graph_service)
):
    """Delete a node and its relationships."""
    if not await graph_service.delete_node(node_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Node '{node_id}' not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---- Relationships ----


@router.get("/relationships", response_model=List[RelationshipResponse])
async def list_relationships(
    graph_service: GraphDataService = Depends(get_graph_service),
):
    relationships = await graph_service.get_all_relationships()
    return [RelationshipResponse.from_relationship(r) for r in relationships]


@router.get("/relationships/search", response_model=List[RelationshipResponse])
async def search_relationships(
    query: str, graph_service: GraphDataService = Depends(get_graph_service)
):
    relationships = await graph_service.search_relationships(query)
    return [RelationshipResponse.from_relationship(r) for r in relationships]


@router.get("/relationships/type/{rel_type}", response_model=List[RelationshipResponse])
async def find_relationships_by_type(
    rel_type: str, graph_service: GraphDataService = Depends(get_graph_service)
):
    relationships = await graph_service.find_relationships_by_type(rel_type)
    return [RelationshipResponse.from_relationship(r) for r in relationships]


@router.get("/relationships/node/{node_id}", response_model=List[RelationshipResponse])
async def find_relationships_by_node(
    node_id: int, graph_service: GraphDataService = Depends(get_graph_service)
):
    relationships = await graph_service.find_relationships_by_node(node_id)
    return [RelationshipResponse.from_relationship(r) for r in relationships]


@router.get("/relationships/{relationship_id}", response_model=RelationshipResponse)
async def get_relationship(
    relationship_id: int, graph_service: GraphDataService = Depends(get_graph_service)
):
    relationship = await graph_service.get_relationship_by_id(relationship_id)
    if not relationship:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Relationship '{relationship_id}' not found",
        )
    return RelationshipResponse.from_relationship(relationship)


@router.post(
    "/relationships",
    response_model=RelationshipResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_relationship(
    request: RelationshipRequest,
    graph_service: GraphDataService = Depends(get_graph_service),
):
    """Create a relationship between two existing nodes.

    Raises:
        HTTPException: If the type is missing or a node does not exist
    """
    try:
        relationship = await graph_service.create_relationship(
            request.type,
            request.source.id if request.source else None,
            request.target.id if request.target else None,
            properties=request.properties,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return RelationshipResponse.from_relationship(relationship)


@router.put("/relationships/{relationship_id}", response_model=RelationshipResponse)
async def update_relationship(
    relationship_id: int,
    request: RelationshipRequest,
    graph_service: GraphDataService = Depends(get_graph_service),
):
    """Update the fields present in the request body.

    Raises:
        HTTPException: If relationship not found or the update is invalid
    """
    try:
        relationship = await graph_service.update_relationship(
            relationship_id, _relationship_update(request)
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return RelationshipResponse.from_relationship(relationship)


@router.delete(
    "/relationships/{relationship_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_relationship(
    relationship_id: int, graph_service: GraphDataService = Depends(get_graph_service)
):
    if not await graph_service.delete_relationship(relationship_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Relationship '{relationship_id}' not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
