"""
RecordGraph: ValueCells and Records arranged as a graph.

The graph is built on one networkx container chosen by its structure
(simple, weighted, directed, multi or pseudograph) and holds payloads of
the kinds fixed by its data model:

- ItemItem: ValueCell vertices, ValueCell edges
- DocItem:  Record vertices, ValueCell edges
- DocDoc:   Record vertices, Record edges

Vertices are the payload objects themselves, so they are compared by
content and must not be mutated while they belong to a graph.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Set, Tuple, Union
import logging

import networkx as nx

from recordkit.core.data import (
    DataType, GraphDataModel, GraphStructure, FEATURE_IS_GRAPH_LABEL,
    FEATURE_IS_GRAPH_TYPE, FEATURE_IS_PRIMARY, GRAPH_COMMON_PREFIX,
    GRAPH_DST_VERTEX_ID_NAME, GRAPH_DST_VERTEX_ID_TITLE, GRAPH_EDGE_TYPE_NAME,
    GRAPH_EDGE_TYPE_TITLE, GRAPH_SRC_VERTEX_ID_NAME, GRAPH_SRC_VERTEX_ID_TITLE,
    GRAPH_VERTEX_LABEL_NAME, GRAPH_VERTEX_LABEL_TITLE,
)
from recordkit.core.edge import GraphEdge, Payload
from recordkit.core.grid import Grid
from recordkit.core.hashing import digest_of
from recordkit.core.item import ValueCell, ValueCellBuilder
from recordkit.core.range import ValueRange
from recordkit.core.features import FeatureMixin
from recordkit.core.record import Record
from recordkit.exceptions import (
    GraphStructureError, ModelMismatchError, NotFoundError,
)

logger = logging.getLogger(__name__)

Vertex = Union[ValueCell, Record]

DEFAULT_EDGE_WEIGHT = 1.0


@dataclass(frozen=True)
class _Topology:
    factory: Callable[[], nx.Graph]
    weighted: bool
    multi: bool
    loops: bool


_TOPOLOGIES = {
    GraphStructure.SIMPLE_GRAPH: _Topology(nx.Graph, False, False, False),
    GraphStructure.SIMPLE_WEIGHTED_GRAPH: _Topology(nx.Graph, True, False, False),
    GraphStructure.SIMPLE_DIRECTED_GRAPH: _Topology(nx.DiGraph, False, False, False),
    GraphStructure.SIMPLE_DIRECTED_WEIGHTED_GRAPH: _Topology(nx.DiGraph, True, False, False),
    GraphStructure.MULTI_GRAPH: _Topology(nx.MultiGraph, False, True, False),
    GraphStructure.DIRECTED_PSEUDOGRAPH: _Topology(nx.MultiDiGraph, False, True, True),
    GraphStructure.DIRECTED_WEIGHTED_PSEUDOGRAPH: _Topology(nx.MultiDiGraph, True, True, True),
}


class RecordGraph(FeatureMixin):
    """
    Graph of ValueCells and Records with a fixed structure and data model.

    Example:
        graph = RecordGraph("people", GraphStructure.DIRECTED_PSEUDOGRAPH,
                            GraphDataModel.DOC_DOC)
        graph.add_vertex(ada)
        graph.add_vertex(charles)
        graph.add_edge_unique(ada, charles, Record("knows"))
        graph.add_edge_unique(charles, ada, Record("knows"))   # None, duplicate

        for vertex in graph.breadth_first(ada):
            print(vertex.name)
    """

    def __init__(
        self,
        name: str,
        structure: GraphStructure = GraphStructure.SIMPLE_GRAPH,
        data_model: GraphDataModel = GraphDataModel.ITEM_ITEM
    ):
        """
        Initialize an empty graph.

        Args:
            name: Graph name
            structure: Topology of the underlying container
            data_model: Payload kinds of vertices and edges

        Raises:
            ValueError: If the structure or data model is Undefined
        """
        if structure not in _TOPOLOGIES:
            raise ValueError(f"Unsupported graph structure: {structure}")
        if data_model == GraphDataModel.UNDEFINED:
            raise ValueError("Graph data model must be defined")
        self._init_features()
        self.name = name
        self.structure = structure
        self.data_model = data_model
        self._topology = _TOPOLOGIES[structure]
        self._graph = self._topology.factory()

        # edge_id -> edge, in insertion order
        self._edges: Dict[str, GraphEdge] = {}
        # edge_id -> (source, target) as given on insertion
        self._endpoints: Dict[str, Tuple[Vertex, Vertex]] = {}

    @classmethod
    def from_grid(cls, grid: Grid) -> 'RecordGraph':
        """DocDoc directed pseudograph with one Record vertex per grid row."""
        graph = cls(grid.name, GraphStructure.DIRECTED_PSEUDOGRAPH, GraphDataModel.DOC_DOC)
        for record in grid:
            graph.add_vertex(record)
        return graph

    # ========================================
    # Model checks
    # ========================================

    @property
    def is_directed(self) -> bool:
        return self._graph.is_directed()

    @property
    def is_weighted(self) -> bool:
        return self._topology.weighted

    @property
    def is_multi(self) -> bool:
        return self._topology.multi

    def is_vertex_record(self) -> bool:
        return self.data_model in (GraphDataModel.DOC_ITEM, GraphDataModel.DOC_DOC)

    def is_edge_record(self) -> bool:
        return self.data_model == GraphDataModel.DOC_DOC

    def _check_vertex(self, vertex) -> Vertex:
        if isinstance(vertex, str) and not self.is_vertex_record():
            return ValueCellBuilder().name(vertex).build()
        expected = Record if self.is_vertex_record() else ValueCell
        if not isinstance(vertex, expected):
            raise ModelMismatchError(
                f"Graph '{self.name}' ({self.data_model}) expects {expected.__name__} "
                f"vertices, got {type(vertex).__name__}")
        return vertex

    def _check_payload(self, payload) -> Payload:
        expected = Record if self.is_edge_record() else ValueCell
        if not isinstance(payload, expected):
            raise ModelMismatchError(
                f"Graph '{self.name}' ({self.data_model}) expects {expected.__name__} "
                f"edges, got {type(payload).__name__}")
        return payload

    def _require_record_vertices(self) -> None:
        if not self.is_vertex_record():
            raise ModelMismatchError(f"Graph '{self.name}' vertex data is not a record.")

    def _require_record_edges(self) -> None:
        if not self.is_edge_record():
            raise ModelMismatchError(f"Graph '{self.name}' edge data is not a record.")

    # ========================================
    # Vertex Operations
    # ========================================

    def add_vertex(self, vertex) -> bool:
        """
        Add a vertex.

        Args:
            vertex: Record or ValueCell matching the data model; a plain
                    name is accepted for ValueCell vertices

        Returns:
            True if added, False if an equal vertex already exists

        Raises:
            ModelMismatchError: If the vertex kind does not match the data model
        """
        vertex = self._check_vertex(vertex)
        if self._graph.has_node(vertex):
            return False
        self._graph.add_node(vertex)
        return True

    def delete_vertex(self, vertex) -> bool:
        """Remove a vertex and every edge touching it."""
        vertex = self._check_vertex(vertex)
        if not self._graph.has_node(vertex):
            return False
        for edge in self.edges_of(vertex):
            self._forget_edge(edge)
        self._graph.remove_node(vertex)
        return True

    def has_vertex(self, vertex) -> bool:
        return self._graph.has_node(self._check_vertex(vertex))

    def vertex_count(self) -> int:
        return self._graph.number_of_nodes()

    def vertices(self) -> List[Vertex]:
        """Vertices in insertion order."""
        return list(self._graph.nodes)

    def degree(self, vertex) -> int:
        vertex = self._require_vertex(vertex)
        return self._graph.degree(vertex)

    def neighbors(self, vertex) -> List[Vertex]:
        """Adjacent vertices in either direction, without duplicates."""
        vertex = self._require_vertex(vertex)
        adjacent = dict.fromkeys(self._graph.neighbors(vertex))
        if self.is_directed:
            adjacent.update(dict.fromkeys(self._graph.predecessors(vertex)))
        return list(adjacent)

    def _require_vertex(self, vertex) -> Vertex:
        vertex = self._check_vertex(vertex)
        if not self._graph.has_node(vertex):
            raise NotFoundError(f"Vertex '{vertex.name}' is not in graph '{self.name}'")
        return vertex

    # ========================================
    # Edge Operations
    # ========================================

    def _default_payload(self, source: Vertex, target: Vertex) -> Payload:
        edge_name = f"{source.name}-{target.name}"
        if self.is_edge_record():
            return Record(edge_name)
        return ValueCellBuilder().name(edge_name).build()

    def add_edge(
        self,
        source,
        target,
        payload: Optional[Payload] = None,
        weight: Optional[float] = None
    ) -> Optional[GraphEdge]:
        """
        Connect two existing vertices.

        Args:
            source: Source vertex (or name for ValueCell vertices)
            target: Target vertex (or name for ValueCell vertices)
            payload: Edge payload, named "<source>-<target>" when omitted
            weight: Edge weight, only allowed on weighted structures

        Returns:
            The new GraphEdge, or None when the structure rejects it
            (parallel edge on a simple graph, or a self loop where loops
            are not allowed)

        Raises:
            ModelMismatchError: If a vertex or the payload kind is wrong
            GraphStructureError: If a vertex is missing or a weight is
                                 given to an unweighted structure
        """
        source = self._check_vertex(source)
        target = self._check_vertex(target)
        payload = self._check_payload(payload if payload is not None
                                      else self._default_payload(source, target))
        if weight is not None and not self._topology.weighted:
            raise GraphStructureError(f"Graph structure {self.structure} does not support weights")
        for vertex in (source, target):
            if not self._graph.has_node(vertex):
                raise GraphStructureError(f"Vertex '{vertex.name}' is not in graph '{self.name}'")

        if source == target and not self._topology.loops:
            logger.debug("Graph '%s' rejected self loop on '%s'", self.name, source.name)
            return None
        if not self._topology.multi and self._graph.has_edge(source, target):
            logger.debug("Graph '%s' rejected parallel edge %s -> %s",
                         self.name, source.name, target.name)
            return None

        edge = GraphEdge(payload)
        edge_weight = DEFAULT_EDGE_WEIGHT if weight is None else float(weight)
        if self._topology.multi:
            self._graph.add_edge(source, target, key=edge.id, edge=edge, weight=edge_weight)
        else:
            self._graph.add_edge(source, target, edge=edge, weight=edge_weight)
        self._edges[edge.id] = edge
        self._endpoints[edge.id] = (source, target)
        return edge

    def add_edge_unique(
        self,
        source: Record,
        target: Record,
        payload: Record,
        weight: Optional[float] = None
    ) -> Optional[GraphEdge]:
        """
        Add an edge unless an equivalent one already exists.

        An edge is equivalent when its payload hash matches and its
        endpoint hashes match in either direction. Every existing edge
        is scanned, so each insertion costs O(E).

        Raises:
            ModelMismatchError: If the graph is not DocDoc
        """
        if self.data_model != GraphDataModel.DOC_DOC:
            raise ModelMismatchError(f"Graph '{self.name}' edge data is not a record.")
        source = self._check_vertex(source)
        target = self._check_vertex(target)
        payload = self._check_payload(payload)

        payload_hash = payload.generate_unique_hash(False)
        source_hash = source.generate_unique_hash(False)
        target_hash = target.generate_unique_hash(False)
        for edge_id, edge in self._edges.items():
            edge_source, edge_target = self._endpoints[edge_id]
            pair = (edge_source.generate_unique_hash(False), edge_target.generate_unique_hash(False))
            if pair not in ((source_hash, target_hash), (target_hash, source_hash)):
                continue
            if edge.payload.generate_unique_hash(False) == payload_hash:
                logger.debug("Graph '%s' skipped duplicate edge '%s'", self.name, payload.name)
                return None
        return self.add_edge(source, target, payload, weight)

    def _forget_edge(self, edge: GraphEdge) -> None:
        self._edges.pop(edge.id, None)
        self._endpoints.pop(edge.id, None)

    def delete_edge(self, edge: GraphEdge) -> bool:
        if edge.id not in self._edges:
            return False
        source, target = self._endpoints[edge.id]
        if self._topology.multi:
            self._graph.remove_edge(source, target, key=edge.id)
        else:
            self._graph.remove_edge(source, target)
        self._forget_edge(edge)
        return True

    def edge_count(self) -> int:
        return len(self._edges)

    def edges(self) -> List[GraphEdge]:
        """Edges in insertion order."""
        return list(self._edges.values())

    def _require_edge(self, edge: GraphEdge) -> Tuple[Vertex, Vertex]:
        try:
            return self._endpoints[edge.id]
        except KeyError:
            raise NotFoundError(f"Edge '{edge.name}' is not in graph '{self.name}'") from None

    def edge_source(self, edge: GraphEdge) -> Vertex:
        return self._require_edge(edge)[0]

    def edge_target(self, edge: GraphEdge) -> Vertex:
        return self._require_edge(edge)[1]

    def edge_weight(self, edge: GraphEdge) -> float:
        source, target = self._require_edge(edge)
        if self._topology.multi:
            return self._graph.edges[source, target, edge.id]['weight']
        return self._graph.edges[source, target]['weight']

    def edges_of(self, vertex) -> List[GraphEdge]:
        """Edges that start or end at the vertex."""
        vertex = self._check_vertex(vertex)
        return [edge for edge_id, edge in self._edges.items()
                if vertex in self._endpoints[edge_id]]

    # ========================================
    # Traversal
    # ========================================

    def depth_first(self, start=None) -> Iterator[Vertex]:
        """
        Depth-first vertex order.

        Without a start vertex every component is visited.
        """
        if start is None:
            return nx.dfs_preorder_nodes(self._graph)
        return nx.dfs_preorder_nodes(self._graph, source=self._require_vertex(start))

    def breadth_first(self, start=None) -> Iterator[Vertex]:
        """
        Breadth-first vertex order.

        Without a start vertex every component is visited, each one
        starting from its earliest inserted vertex.
        """
        starts = [self._require_vertex(start)] if start is not None else list(self._graph.nodes)
        seen: Set[Vertex] = set()
        for origin in starts:
            if origin in seen:
                continue
            seen.add(origin)
            yield origin
            for _, reached in nx.bfs_edges(self._graph, origin):
                if reached not in seen:
                    seen.add(reached)
                    yield reached

    # ========================================
    # Lookups
    # ========================================

    def get_vertex_by_name(self, name: str) -> Vertex:
        """
        First vertex with the given name.

        Raises:
            NotFoundError: If no vertex has that name
        """
        for vertex in self._graph.nodes:
            if vertex.name == name:
                return vertex
        raise NotFoundError(f"Graph '{self.name}' has no vertex named '{name}'")

    def get_vertex_by_name_value(self, item_name: str, value: str) -> Optional[Record]:
        """First Record vertex whose item holds the value."""
        self._require_record_vertices()
        for vertex in self._graph.nodes:
            if vertex.get_value_by_name(item_name) == value:
                return vertex
        return None

    def get_vertex_by_feature_value(self, feature: str, value: str) -> Optional[Vertex]:
        for vertex in self._graph.nodes:
            if vertex.get_feature(feature) == value:
                return vertex
        return None

    def get_vertex_set_unique(self) -> Dict[str, Vertex]:
        """One vertex per distinct name, the first one inserted wins."""
        unique: Dict[str, Vertex] = {}
        for vertex in self._graph.nodes:
            unique.setdefault(vertex.name, vertex)
        return unique

    def get_edge_by_name(self, name: str) -> Optional[GraphEdge]:
        for edge in self._edges.values():
            if edge.name == name:
                return edge
        return None

    def get_edge_by_name_value(self, item_name: str, value: str) -> Optional[GraphEdge]:
        """First Record edge whose payload item holds the value."""
        self._require_record_edges()
        for edge in self._edges.values():
            if edge.doc.get_value_by_name(item_name) == value:
                return edge
        return None

    def get_edge_by_feature_value(self, feature: str, value: str) -> Optional[GraphEdge]:
        for edge in self._edges.values():
            if edge.payload.get_feature(feature) == value:
                return edge
        return None

    def get_edge_set_unique(self) -> Dict[str, Payload]:
        """One edge payload per distinct edge type."""
        unique: Dict[str, Payload] = {}
        for edge in self._edges.values():
            unique.setdefault(edge.type, edge.payload)
        return unique

    # ========================================
    # Grid projection
    # ========================================

    @staticmethod
    def _union_schema(name: str, head: List[ValueCell], records: List[Record]) -> Record:
        schema = Record(name)
        for cell in head:
            schema.add(cell)
        for record in records:
            for cell in record:
                if cell.name not in schema:
                    column = cell.copy()
                    column.clear_values()
                    schema.add(column)
        return schema

    @staticmethod
    def _apply_schema_features(grid: Grid, schema: Optional[Record]) -> None:
        if schema is None:
            return
        for column in grid.columns:
            source = schema.get_item_by_name_optional(column.name)
            if source is not None:
                column.copy_features(source)

    def get_vertex_data_grid(self, schema: Optional[Record] = None) -> Grid:
        """
        Project Record vertices into a Grid.

        The columns are the union of every vertex item plus a label column
        holding the vertex name; items a vertex lacks stay empty.

        Args:
            schema: Optional Record whose item features are copied onto
                    matching columns

        Raises:
            ModelMismatchError: If the vertices are not Records
        """
        self._require_record_vertices()
        vertices = self.vertices()
        label = ValueCellBuilder().type(DataType.TEXT).name(GRAPH_VERTEX_LABEL_NAME) \
            .title(GRAPH_VERTEX_LABEL_TITLE).build()
        label.enable_feature(FEATURE_IS_GRAPH_LABEL)
        labels = list(dict.fromkeys(vertex.name for vertex in vertices))
        if labels:
            label.set_range(ValueRange.of_text(*labels))

        grid = Grid(self.name, self._union_schema(f"{self.name} Schema", [label], vertices))
        for vertex in vertices:
            row = vertex.copy()
            row.add(ValueCellBuilder().type(DataType.TEXT).name(GRAPH_VERTEX_LABEL_NAME)
                    .title(GRAPH_VERTEX_LABEL_TITLE).value(vertex.name).build())
            grid.add_row(row)
        self._apply_schema_features(grid, schema)
        return grid

    def get_edges_data_grid(self, schema: Optional[Record] = None) -> Grid:
        """
        Project Record edges into a Grid.

        Each row carries the primary key values of both endpoints, the
        edge type and the payload items.

        Raises:
            ModelMismatchError: If the graph is not DocDoc
        """
        self._require_record_edges()
        edges = self.edges()
        edge_type = ValueCellBuilder().type(DataType.TEXT).name(GRAPH_EDGE_TYPE_NAME) \
            .title(GRAPH_EDGE_TYPE_TITLE).build()
        edge_type.enable_feature(FEATURE_IS_GRAPH_TYPE)
        types = list(dict.fromkeys(edge.type for edge in edges))
        if types:
            edge_type.set_range(ValueRange.of_text(*types))
        head = [
            ValueCellBuilder().type(DataType.TEXT).name(GRAPH_SRC_VERTEX_ID_NAME)
            .title(GRAPH_SRC_VERTEX_ID_TITLE).is_hidden().build(),
            ValueCellBuilder().type(DataType.TEXT).name(GRAPH_DST_VERTEX_ID_NAME)
            .title(GRAPH_DST_VERTEX_ID_TITLE).is_hidden().build(),
            edge_type,
        ]

        grid = Grid(self.name, self._union_schema(f"{self.name} Schema", head,
                                                  [edge.doc for edge in edges]))
        for edge in edges:
            source, target = self._endpoints[edge.id]
            row = grid.columns.copy()
            row.set_value_by_name(GRAPH_SRC_VERTEX_ID_NAME, source.feature_first_item_value(FEATURE_IS_PRIMARY))
            row.set_value_by_name(GRAPH_DST_VERTEX_ID_NAME, target.feature_first_item_value(FEATURE_IS_PRIMARY))
            row.set_value_by_name(GRAPH_EDGE_TYPE_NAME, edge.type)
            for cell in edge.doc:
                row.set_values_by_name(cell.name, cell.values)
            grid.add_row(row)
        self._apply_schema_features(grid, schema)
        return grid

    def add_edges_from_grid(self, grid: Grid) -> int:
        """
        Add edges described by a grid made by get_edges_data_grid().

        Endpoints are resolved by the value of each vertex's primary key
        item; the edge payload is a Record named after the edge type
        holding the row's non-empty payload items.

        Returns:
            Number of edges added

        Raises:
            ModelMismatchError: If the graph is not DocDoc
            NotFoundError: If a row names a vertex id that is not in the graph
        """
        self._require_record_edges()
        by_primary: Dict[str, Record] = {}
        for vertex in self._graph.nodes:
            key = vertex.feature_first_item_value(FEATURE_IS_PRIMARY)
            if key:
                by_primary.setdefault(key, vertex)

        added = 0
        for row in grid:
            endpoints = []
            for column in (GRAPH_SRC_VERTEX_ID_NAME, GRAPH_DST_VERTEX_ID_NAME):
                key = row.get_value_by_name(column)
                if key not in by_primary:
                    raise NotFoundError(f"Graph '{self.name}' has no vertex with id '{key}'")
                endpoints.append(by_primary[key])
            payload = Record(row.get_value_by_name(GRAPH_EDGE_TYPE_NAME) or "edge")
            for cell in row:
                if not cell.name.startswith(GRAPH_COMMON_PREFIX) and cell.is_value_assigned():
                    payload.add(cell)
            if self.add_edge(endpoints[0], endpoints[1], payload) is not None:
                added += 1
        return added

    # ========================================
    # Identity
    # ========================================

    def hash_id(self) -> str:
        """Digest of the graph name, data model and structure."""
        return digest_of(self.name, self.data_model.value, self.structure.value)

    def to_dict(self) -> Dict[str, object]:
        return {
            'name': self.name,
            'structure': self.structure.value,
            'data_model': self.data_model.value,
            'vertex_count': self.vertex_count(),
            'edge_count': self.edge_count(),
            'features': dict(self.features),
        }

    def __repr__(self) -> str:
        return (f"RecordGraph(name={self.name}, structure={self.structure}, "
                f"model={self.data_model}, vertices={self.vertex_count()}, edges={self.edge_count()})")
