"""
GraphEdge: payload carried by an edge of a RecordGraph.

The payload is either a ValueCell or a Record, never both. Endpoints are
owned by the graph, not by the edge.
"""

from typing import Any, Dict, Optional, Union
from uuid import uuid4

from recordkit.core.item import ValueCell
from recordkit.core.record import Record

Payload = Union[ValueCell, Record]


class GraphEdge:
    """
    Edge payload wrapper.

    The edge name (also used as its type) is the payload name.

    Example:
        knows = GraphEdge(Record("knows"))
        knows.name        # "knows"
    """

    def __init__(self, payload: Payload, edge_id: Optional[str] = None):
        """
        Initialize a GraphEdge.

        Args:
            payload: ValueCell or Record describing the relationship
            edge_id: Unique identifier (auto-generated if not provided)

        Raises:
            TypeError: If the payload is neither a ValueCell nor a Record
        """
        if not isinstance(payload, (ValueCell, Record)):
            raise TypeError(f"Edge payload must be a ValueCell or Record, got {type(payload).__name__}")
        self.id = edge_id or str(uuid4())
        self.payload = payload

    @classmethod
    def of_type(cls, edge_type: str) -> 'GraphEdge':
        """Edge whose payload is a name-only ValueCell."""
        return cls(ValueCell(edge_type))

    @property
    def name(self) -> str:
        return self.payload.name

    @property
    def type(self) -> str:
        return self.payload.name

    @property
    def item(self) -> Optional[ValueCell]:
        return self.payload if isinstance(self.payload, ValueCell) else None

    @property
    def doc(self) -> Optional[Record]:
        return self.payload if isinstance(self.payload, Record) else None

    def is_record(self) -> bool:
        return isinstance(self.payload, Record)

    def hash_id(self) -> str:
        """Content hash of the payload."""
        return self.payload.hash_id()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'payload': self.payload.to_dict(),
        }

    def __eq__(self, other) -> bool:
        return isinstance(other, GraphEdge) and other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"GraphEdge(id={self.id[:8]}, name={self.name})"
