"""SQLAlchemy models for the property-graph store."""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import JSON, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship

from .property_codec import (
    EMPTY_OBJECT,
    coerce_properties,
    decode_properties,
    encode_properties,
)

GraphBase = declarative_base()


class Node(GraphBase):
    """Node model representing an entity in the property graph.

    A node has a display label, an optional type (category), a set of labels
    seeded from its type, and a property map. The property map is stored as
    a single text column using the flat encoding in ``property_codec``.
    """

    __tablename__ = "graph_nodes"

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Core attributes
    label = Column(String, nullable=False)
    node_type = Column("type", String, nullable=True)
    label_set = Column("labels", JSON, nullable=False, default=list)
    property_text = Column(
        "properties", Text, nullable=False, default=EMPTY_OBJECT
    )

    # Indexes
    __table_args__ = (
        Index("idx_graph_nodes_type", "type"),
        Index("idx_graph_nodes_label", "label"),
    )

    @property
    def properties(self) -> Dict[str, Any]:
        """Decoded property map (a fresh dict on every access)."""
        return decode_properties(self.property_text)

    @properties.setter
    def properties(self, value: Optional[Mapping[str, Any]]) -> None:
        self.property_text = encode_properties(coerce_properties(value))

    @property
    def labels(self) -> List[str]:
        return sorted(self.label_set or [])

    @labels.setter
    def labels(self, value: Optional[Iterable[str]]) -> None:
        self.label_set = sorted({label for label in (value or []) if label})

    def add_label(self, label: Optional[str]) -> None:
        """Fold a label into the label set (blank labels are ignored)."""
        if label:
            self.labels = set(self.labels) | {label}

    def __repr__(self) -> str:
        return f"<Node(id={self.id}, type='{self.node_type}', label='{self.label}')>"

    def to_dict(self) -> dict:
        """Convert node to dictionary format used by the API."""
        return {
            "id": self.id,
            "label": self.label,
            "type": self.node_type,
            "labels": self.labels,
            "properties": self.properties,
        }


class Relationship(GraphBase):
    """Relationship model representing a directed, typed edge between nodes.

    Both endpoints must reference persisted nodes. Deleting either node
    removes the relationship through the foreign-key cascade.
    """

    __tablename__ = "graph_relationships"

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Foreign keys
    source_id = Column(
        Integer, ForeignKey("graph_nodes.id", ondelete="CASCADE"), nullable=False
    )
    target_id = Column(
        Integer, ForeignKey("graph_nodes.id", ondelete="CASCADE"), nullable=False
    )

    # Relationship attributes
    rel_type = Column("type", String, nullable=False)
    property_text = Column(
        "properties", Text, nullable=False, default=EMPTY_OBJECT
    )

    # Endpoints are always loaded with the relationship
    source_node = relationship("Node", foreign_keys=[source_id], lazy="joined")
    target_node = relationship("Node", foreign_keys=[target_id], lazy="joined")

    # Indexes
    __table_args__ = (
        Index("idx_graph_relationships_source", "source_id"),
        Index("idx_graph_relationships_target", "target_id"),
        Index("idx_graph_relationships_type", "type"),
    )

    @property
    def properties(self) -> Dict[str, Any]:
        """Decoded property map (a fresh dict on every access)."""
        return decode_properties(self.property_text)

    @properties.setter
    def properties(self, value: Optional[Mapping[str, Any]]) -> None:
        self.property_text = encode_properties(coerce_properties(value))

    def __repr__(self) -> str:
        return (
            f"<Relationship(id={self.id}, source={self.source_id}, "
            f"target={self.target_id}, type='{self.rel_type}')>"
        )

    def to_dict(self) -> dict:
        """Convert relationship to dictionary format used by the API."""
        return {
            "id": self.id,
            "type": self.rel_type,
            "source": self.source_node.to_dict() if self.source_node else None,
            "target": self.target_node.to_dict() if self.target_node else None,
            "properties": self.properties,
        }
