"""Sample graph used for demos and local development."""

import logging

from .graph_service import GraphDataService

logger = logging.getLogger(__name__)

SAMPLE_NODES = [
    {
        "label": "John Doe",
        "type": "Person",
        "properties": {"age": 30, "occupation": "Software Engineer"},
    },
    {
        "label": "Jane Smith",
        "type": "Person",
        "properties": {"age": 28, "occupation": "Data Scientist"},
    },
    {
        "label": "Acme Corp",
        "type": "Company",
        "properties": {"industry": "Technology", "founded": 2010},
    },
    {
        "label": "Graph Database Project",
        "type": "Project",
        "properties": {"status": "In Progress", "priority": "High"},
    },
]

# (source label, type, target label, properties)
SAMPLE_RELATIONSHIPS = [
    ("John Doe", "WORKS_AT", "Acme Corp", {"since": 2015, "position": "Developer"}),
    ("John Doe", "KNOWS", "Jane Smith", {"since": 2018}),
]


async def seed_sample_graph(graph_service: GraphDataService, force: bool = False) -> bool:
    """Load the sample graph.

    Args:
        graph_service: Service of the graph store to fill
        force: Seed even if the graph already holds nodes

    Returns:
        True if the sample data was written, False if the graph was not empty
    """
    if not force and await graph_service.get_all_nodes():
        logger.info("Graph store is not empty, skipping sample data")
        return False

    nodes_by_label = {}
    for sample in SAMPLE_NODES:
        node = await graph_service.create_node(
            sample["label"], type=sample["type"], properties=sample["properties"]
        )
        nodes_by_label[node.label] = node

    for source, rel_type, target, properties in SAMPLE_RELATIONSHIPS:
        await graph_service.create_relationship(
            rel_type,
            nodes_by_label[source].id,
            nodes_by_label[target].id,
            properties=properties,
        )

    logger.info(
        f"Seeded sample graph: {len(SAMPLE_NODES)} nodes, "
        f"{len(SAMPLE_RELATIONSHIPS)} relationships"
    )
    return True
