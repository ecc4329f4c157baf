"""Tests for GraphAggregationService and the sample graph."""

import pytest

from services import seed_sample_graph


@pytest.mark.asyncio
async def test_visualization_on_empty_graph(aggregation_service):
    assert await aggregation_service.get_visualization() == {
        "nodes": [],
        "relationships": [],
    }


@pytest.mark.asyncio
async def test_visualization_returns_whole_graph(aggregation_service, graph_service):
    assert await seed_sample_graph(graph_service) is True

    graph = await aggregation_service.get_visualization()

    assert len(graph["nodes"]) == 4
    assert {r.rel_type for r in graph["relationships"]} == {"WORKS_AT", "KNOWS"}


@pytest.mark.asyncio
async def test_search_combines_independent_results(aggregation_service, graph_service):
    await seed_sample_graph(graph_service)

    result = await aggregation_service.search("works")

    # Matching relationships do not pull their endpoints into the node list
    assert result["nodes"] == []
    assert [r.rel_type for r in result["relationships"]] == ["WORKS_AT"]

    result = await aggregation_service.search("person")

    assert {n.label for n in result["nodes"]} == {"John Doe", "Jane Smith"}
    assert result["relationships"] == []


@pytest.mark.asyncio
async def test_seed_sample_graph_only_fills_empty_store(graph_service):
    assert await seed_sample_graph(graph_service) is True
    assert await seed_sample_graph(graph_service) is False
    assert len(await graph_service.get_all_nodes()) == 4

    assert await seed_sample_graph(graph_service, force=True) is True
    assert len(await graph_service.get_all_nodes()) == 8


@pytest.mark.asyncio
async def test_sample_graph_properties(graph_service):
    await seed_sample_graph(graph_service)

    acme = (await graph_service.find_nodes_by_label("Acme Corp"))[0]
    works_at = (await graph_service.find_relationships_by_type("WORKS_AT"))[0]

    assert acme.properties == {"industry": "Technology", "founded": 2010}
    assert works_at.source_node.label == "John Doe"
    assert works_at.properties == {"since": 2015, "position": "Developer"}
