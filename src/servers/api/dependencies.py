"""FastAPI dependencies resolving the services wired up at startup."""

from fastapi import Request

from services import GraphAggregationService, GraphDataService, RelationalDataService


def get_graph_service(request: Request) -> GraphDataService:
    return request.app.state.graph_service


def get_relational_service(request: Request) -> RelationalDataService:
    return request.app.state.relational_service


def get_aggregation_service(request: Request) -> GraphAggregationService:
    return request.app.state.aggregation_service
