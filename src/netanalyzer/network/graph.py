"""
Graph model for the netanalyzer library.

A ``Graph`` is an immutable snapshot of nodes and weighted edges. It is
validated once at construction time (every edge must reference existing
nodes, ids must be unique) and then exposes read-only adjacency queries.
Parallel edges between the same pair of nodes are allowed.

The ``directed`` flag changes the meaning of every traversal query: in an
undirected graph an edge can be walked in both directions.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from ..common.exceptions import GraphConstructionError
from ..common.logging_config import get_logger

logger = get_logger(__name__)


def _freeze(attributes: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(attributes or {}))


@dataclass(frozen=True)
class Node:
    """
    A graph node.

    Attributes
    ----------
    id : str
        Unique node identifier (e.g. a wallet address)
    label : str
        Display label; defaults to the id
    attributes : Mapping[str, Any]
        Read-only metadata, never interpreted by the algorithms
    """
    id: str
    label: str = ""
    attributes: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        if not self.label:
            object.__setattr__(self, "label", str(self.id))
        object.__setattr__(self, "attributes", _freeze(self.attributes))


@dataclass(frozen=True)
class Edge:
    """
    A weighted edge between two nodes.

    Attributes
    ----------
    id : str
        Unique edge identifier
    source : str
        Source node id
    target : str
        Target node id
    weight : float
        Edge weight. Only Bellman-Ford is defined for negative weights.
    attributes : Mapping[str, Any]
        Read-only metadata, never interpreted by the algorithms
    """
    id: str
    source: str
    target: str
    weight: float = 1.0
    attributes: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "weight", float(self.weight))
        object.__setattr__(self, "attributes", _freeze(self.attributes))

    def other(self, node_id: str) -> str:
        """Return the endpoint opposite ``node_id``."""
        return self.target if node_id == self.source else self.source


class Graph:
    """
    Immutable weighted (multi)graph.

    Parameters
    ----------
    nodes : Iterable[Node]
        Graph nodes. Insertion order is preserved and used as the
        deterministic iteration order of every algorithm.
    edges : Iterable[Edge]
        Graph edges. Every ``source`` and ``target`` must be a node id.
    directed : bool, default False
        Whether edges are one-way.

    Raises
    ------
    GraphConstructionError
        If a node or edge id is duplicated, or an edge references a node
        that does not exist.

    Examples
    --------
    >>> graph = Graph(
    ...     nodes=[Node("A"), Node("B")],
    ...     edges=[Edge("e1", "A", "B", weight=2.5)],
    ...     directed=True
    ... )
    >>> graph.neighbors("A")
    ['B']
    >>> graph.neighbors("B")
    []
    """

    def __init__(
        self,
        nodes: Iterable[Node] = (),
        edges: Iterable[Edge] = (),
        directed: bool = False
    ) -> None:
        self._directed = bool(directed)
        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[str, Edge] = {}

        graph_type = "directed" if self._directed else "undirected"

        for node in nodes:
            if node.id in self._nodes:
                raise GraphConstructionError(
                    f"Duplicate node id '{node.id}'",
                    graph_type=graph_type,
                    node_count=len(self._nodes),
                    operation="add_nodes"
                )
            self._nodes[node.id] = node

        # Traversable (neighbor, edge) pairs per node, respecting direction
        self._out: Dict[str, List[Tuple[str, Edge]]] = {node_id: [] for node_id in self._nodes}
        self._in: Dict[str, List[Tuple[str, Edge]]] = {node_id: [] for node_id in self._nodes}

        for edge in edges:
            if edge.id in self._edges:
                raise GraphConstructionError(
                    f"Duplicate edge id '{edge.id}'",
                    graph_type=graph_type,
                    edge_count=len(self._edges),
                    operation="add_edges"
                )
            for endpoint, role in ((edge.source, "source"), (edge.target, "target")):
                if endpoint not in self._nodes:
                    raise GraphConstructionError(
                        f"Edge '{edge.id}' references unknown {role} node '{endpoint}'",
                        graph_type=graph_type,
                        node_count=len(self._nodes),
                        edge_count=len(self._edges),
                        operation="add_edges"
                    )
            self._edges[edge.id] = edge

            self._out[edge.source].append((edge.target, edge))
            self._in[edge.target].append((edge.source, edge))
            if not self._directed and edge.source != edge.target:
                self._out[edge.target].append((edge.source, edge))
                self._in[edge.source].append((edge.target, edge))

        logger.debug(
            "Graph created: %d nodes, %d edges, directed=%s",
            len(self._nodes), len(self._edges), self._directed
        )

    # -- Basic properties ------------------------------------------------

    @property
    def directed(self) -> bool:
        return self._directed

    @property
    def nodes(self) -> Mapping[str, Node]:
        return MappingProxyType(self._nodes)

    @property
    def edges(self) -> Mapping[str, Edge]:
        return MappingProxyType(self._edges)

    @property
    def node_ids(self) -> List[str]:
        """Node ids in insertion order."""
        return list(self._nodes)

    def number_of_nodes(self) -> int:
        return len(self._nodes)

    def number_of_edges(self) -> int:
        return len(self._edges)

    def is_empty(self) -> bool:
        return not self._nodes

    def total_weight(self) -> float:
        """Sum of all edge weights."""
        return sum(edge.weight for edge in self._edges.values())

    # -- Lookups ---------------------------------------------------------

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: str) -> Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise KeyError(f"Node '{node_id}' not found in graph")

    def get_edge(self, edge_id: str) -> Edge:
        try:
            return self._edges[edge_id]
        except KeyError:
            raise KeyError(f"Edge '{edge_id}' not found in graph")

    def has_edge(self, source: str, target: str) -> bool:
        """
        Check whether any edge leads from ``source`` to ``target``.

        In an undirected graph the edge may be stored in either direction.
        """
        if source not in self._out:
            return False
        return any(neighbor == target for neighbor, _ in self._out[source])

    # -- Adjacency -------------------------------------------------------

    def out_edges(self, node_id: str) -> List[Tuple[str, Edge]]:
        """
        Traversable edges leaving ``node_id`` as ``(neighbor, edge)`` pairs.

        Outbound edges only when directed; every incident edge when
        undirected. Parallel edges appear once each.
        """
        return list(self._out.get(node_id, ()))

    def in_edges(self, node_id: str) -> List[Tuple[str, Edge]]:
        """Traversable edges arriving at ``node_id`` as ``(neighbor, edge)`` pairs."""
        return list(self._in.get(node_id, ()))

    def neighbors(self, node_id: str) -> List[str]:
        """
        Distinct nodes reachable from ``node_id`` over a single edge.

        Order follows edge insertion order.
        """
        return list(dict.fromkeys(neighbor for neighbor, _ in self._out.get(node_id, ())))

    def incident_edges(self, node_id: str) -> List[Edge]:
        """Every edge touching ``node_id`` regardless of direction, once each."""
        seen = dict.fromkeys(edge.id for _, edge in self._out.get(node_id, ()))
        seen.update(dict.fromkeys(edge.id for _, edge in self._in.get(node_id, ())))
        return [self._edges[edge_id] for edge_id in seen]

    # -- Dunder helpers --------------------------------------------------

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __repr__(self) -> str:
        kind = "directed" if self._directed else "undirected"
        return f"Graph({kind}, nodes={len(self._nodes)}, edges={len(self._edges)})"
