"""
Graph construction module for the netanalyzer library.

Builds ``Graph`` snapshots from plain node/edge records or from Polars edge
lists (in memory or CSV), and converts graphs to NetworkIt for callers that
want to hand a snapshot to NetworkIt's native algorithms.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
import warnings
from pathlib import Path

import networkit as nk
import polars as pl

from ..common.id_mapper import IDMapper
from ..common.exceptions import (
    DataFormatError,
    GraphConstructionError,
    ValidationError
)
from ..common.validators import validate_edgelist_dataframe
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from .graph import Edge, Graph, Node

logger = get_logger(__name__)

NodeRecord = Union[Node, str, Mapping[str, Any]]
EdgeRecord = Union[Edge, Mapping[str, Any]]


def build_graph(
    nodes: Iterable[NodeRecord],
    edges: Iterable[EdgeRecord],
    directed: bool = False
) -> Graph:
    """
    Construct a Graph from node and edge records.

    Parameters
    ----------
    nodes : Iterable[Union[Node, str, Mapping]]
        ``Node`` objects, bare node ids, or mappings with an ``id`` key and
        optional ``label`` and ``attributes`` keys
    edges : Iterable[Union[Edge, Mapping]]
        ``Edge`` objects or mappings with ``source`` and ``target`` keys and
        optional ``id``, ``weight`` and ``attributes`` keys. Edges without
        an id are numbered ``e0``, ``e1``, ... in input order.
    directed : bool, default False
        Whether edges are one-way

    Returns
    -------
    Graph
        Validated, immutable graph

    Raises
    ------
    GraphConstructionError
        If an edge references an unknown node or ids are duplicated
    ValidationError
        If a record is missing a required key

    Examples
    --------
    >>> graph = build_graph(
    ...     ["A", "B", "C"],
    ...     [{"source": "A", "target": "B", "weight": 1.0},
    ...      {"source": "B", "target": "C", "weight": 2.0}],
    ...     directed=True
    ... )
    >>> graph.number_of_edges()
    2
    """
    node_objects = [_to_node(record) for record in nodes]
    edge_objects = [_to_edge(record, index) for index, record in enumerate(edges)]

    graph = Graph(node_objects, edge_objects, directed=directed)
    logger.debug("Built graph from records: %r", graph)
    return graph


def _to_node(record: NodeRecord) -> Node:
    if isinstance(record, Node):
        return record
    if isinstance(record, str):
        return Node(record)
    if isinstance(record, Mapping):
        if "id" not in record:
            raise ValidationError("Node record is missing 'id'", field="id")
        return Node(
            id=str(record["id"]),
            label=str(record.get("label") or record["id"]),
            attributes=record.get("attributes") or {}
        )
    raise ValidationError(
        f"Unsupported node record type: {type(record).__name__}",
        field="nodes",
        expected="Node, str or mapping"
    )


def _to_edge(record: EdgeRecord, index: int) -> Edge:
    if isinstance(record, Edge):
        return record
    if isinstance(record, Mapping):
        for key in ("source", "target"):
            if key not in record:
                raise ValidationError(f"Edge record {index} is missing '{key}'", field=key)
        return Edge(
            id=str(record.get("id", f"e{index}")),
            source=str(record["source"]),
            target=str(record["target"]),
            weight=float(record.get("weight", 1.0)),
            attributes=record.get("attributes") or {}
        )
    raise ValidationError(
        f"Unsupported edge record type: {type(record).__name__}",
        field="edges",
        expected="Edge or mapping"
    )


def build_graph_from_edgelist(
    edgelist: Union[str, Path, pl.DataFrame],
    source_col: str = "source",
    target_col: str = "target",
    weight_col: Optional[str] = None,
    edge_id_col: Optional[str] = None,
    directed: bool = False,
    nodes: Optional[pl.DataFrame] = None,
    node_id_col: str = "node_id",
    label_col: Optional[str] = "label",
    allow_self_loops: bool = True
) -> Graph:
    """
    Construct a Graph from an edge list.

    Each row becomes one edge; parallel rows stay parallel edges (no weight
    aggregation). Columns other than source, target, weight and edge id are
    carried into the edge's attributes.

    Parameters
    ----------
    edgelist : Union[str, Path, pl.DataFrame]
        Path to a CSV file or a Polars DataFrame containing edge data
    source_col : str, default "source"
        Name of the source node column
    target_col : str, default "target"
        Name of the target node column
    weight_col : str, optional
        Name of the weight column. All weights default to 1.0 when None.
    edge_id_col : str, optional
        Name of the edge id column. Rows are numbered ``e0``, ``e1``, ...
        when None.
    directed : bool, default False
        If True, create a directed graph
    nodes : pl.DataFrame, optional
        Node table. Nodes listed here are created first (so isolated nodes
        can be represented); remaining columns become node attributes.
        Nodes that only appear in the edge list are appended in order of
        first appearance.
    node_id_col : str, default "node_id"
        Node id column of ``nodes``
    label_col : str, optional, default "label"
        Label column of ``nodes``; ignored when absent
    allow_self_loops : bool, default True
        If False, self-loop rows are dropped before construction

    Returns
    -------
    Graph
        Constructed graph

    Raises
    ------
    ValidationError
        If the edge list is missing columns or has null ids / weights
    DataFormatError
        If the input file cannot be read or has the wrong type
    GraphConstructionError
        If the graph cannot be built from the processed rows

    Examples
    --------
    >>> edges = pl.DataFrame({
    ...     "from": ["0xa", "0xb"],
    ...     "to": ["0xb", "0xc"],
    ...     "value": [1.5, 2.0]
    ... })
    >>> graph = build_graph_from_edgelist(
    ...     edges, source_col="from", target_col="to",
    ...     weight_col="value", directed=True
    ... )
    >>> graph.number_of_nodes()
    3

    Notes
    -----
    Time Complexity: O(E) where E is the number of rows
    Space Complexity: O(V + E)
    """
    log_function_entry(
        "build_graph_from_edgelist",
        edgelist=type(edgelist).__name__,
        directed=directed,
        weight_col=weight_col
    )

    with LoggingTimer("build_graph_from_edgelist"):
        df = _load_edge_list(edgelist)

        validate_edgelist_dataframe(
            df,
            source_col=source_col,
            target_col=target_col,
            weight_col=weight_col,
            edge_id_col=edge_id_col
        )

        if df.is_empty() and nodes is None:
            warnings.warn("Empty edge list provided. Creating empty graph.")
            return Graph(directed=directed)

        if not allow_self_loops and not df.is_empty():
            initial_count = len(df)
            df = df.filter(pl.col(source_col) != pl.col(target_col))
            removed_count = initial_count - len(df)
            if removed_count > 0:
                logger.info("Removed %d self-loop edges", removed_count)

        try:
            node_objects = _nodes_from_frames(df, nodes, source_col, target_col, node_id_col, label_col)
            edge_objects = _edges_from_frame(df, source_col, target_col, weight_col, edge_id_col)
            graph = Graph(node_objects, edge_objects, directed=directed)
        except GraphConstructionError:
            raise
        except (TypeError, ValueError) as e:
            raise GraphConstructionError(
                f"Unexpected error during graph construction: {str(e)}",
                graph_type="directed" if directed else "undirected",
                operation="build_graph_from_edgelist",
                cause=e
            ) from e

    logger.info(
        "Graph construction completed: %d nodes, %d edges, directed=%s, weighted=%s",
        graph.number_of_nodes(), graph.number_of_edges(), directed, weight_col is not None
    )
    return graph


def _load_edge_list(edgelist: Union[str, Path, pl.DataFrame]) -> pl.DataFrame:
    """
    Load an edge list from a CSV path or return the DataFrame as-is.

    Raises
    ------
    DataFormatError
        If the file does not exist, cannot be parsed, or the input type is wrong
    """
    if isinstance(edgelist, pl.DataFrame):
        return edgelist

    if isinstance(edgelist, (str, Path)):
        file_path = Path(edgelist)
        if not file_path.exists():
            raise DataFormatError(
                f"Edge list file not found: {edgelist}",
                format_type="CSV",
                file_path=str(edgelist)
            )

        logger.debug("Loading edge list from file: %s", file_path)
        try:
            return pl.read_csv(file_path)
        except (pl.exceptions.PolarsError, OSError) as e:
            raise DataFormatError(
                f"Failed to parse CSV file: {str(e)}",
                format_type="CSV",
                file_path=str(edgelist),
                cause=e
            ) from e

    raise DataFormatError(
        f"Invalid edgelist type: {type(edgelist).__name__}. Expected str, Path or pl.DataFrame",
        format_type="DataFrame"
    )


def _nodes_from_frames(
    edges_df: pl.DataFrame,
    nodes_df: Optional[pl.DataFrame],
    source_col: str,
    target_col: str,
    node_id_col: str,
    label_col: Optional[str]
) -> List[Node]:
    """Create nodes from the optional node table, then from edge endpoints."""
    node_objects: Dict[str, Node] = {}

    if nodes_df is not None:
        if node_id_col not in nodes_df.columns:
            raise ValidationError(
                f"Node table is missing column '{node_id_col}'",
                field=node_id_col,
                details={"available_columns": nodes_df.columns}
            )
        has_label = label_col is not None and label_col in nodes_df.columns
        attribute_cols = [
            col for col in nodes_df.columns
            if col != node_id_col and not (has_label and col == label_col)
        ]
        for row in nodes_df.iter_rows(named=True):
            node_id = str(row[node_id_col])
            label = str(row[label_col]) if has_label and row[label_col] is not None else node_id
            node_objects[node_id] = Node(
                node_id, label, {col: row[col] for col in attribute_cols}
            )

    if not edges_df.is_empty():
        for source, target in edges_df.select([source_col, target_col]).iter_rows():
            for endpoint in (str(source), str(target)):
                if endpoint not in node_objects:
                    node_objects[endpoint] = Node(endpoint)

    return list(node_objects.values())


def _edges_from_frame(
    df: pl.DataFrame,
    source_col: str,
    target_col: str,
    weight_col: Optional[str],
    edge_id_col: Optional[str]
) -> List[Edge]:
    reserved = {source_col, target_col, weight_col, edge_id_col}
    attribute_cols = [col for col in df.columns if col not in reserved]

    edge_objects = []
    for index, row in enumerate(df.iter_rows(named=True)):
        edge_id = str(row[edge_id_col]) if edge_id_col is not None else f"e{index}"
        weight = float(row[weight_col]) if weight_col is not None else 1.0
        edge_objects.append(Edge(
            id=edge_id,
            source=str(row[source_col]),
            target=str(row[target_col]),
            weight=weight,
            attributes={col: row[col] for col in attribute_cols}
        ))
    return edge_objects


def to_networkit(graph: Graph) -> Tuple[nk.Graph, IDMapper]:
    """
    Convert a Graph to a weighted NetworkIt graph.

    Parameters
    ----------
    graph : Graph
        Graph to convert

    Returns
    -------
    nk_graph : nk.Graph
        Weighted NetworkIt graph with the same direction semantics. Parallel
        edges are added as parallel NetworkIt edges.
    id_mapper : IDMapper
        Mapping between node ids and NetworkIt node indices (insertion order)

    Raises
    ------
    GraphConstructionError
        If NetworkIt rejects an edge

    Examples
    --------
    >>> nk_graph, mapper = to_networkit(graph)
    >>> nk_graph.numberOfNodes() == graph.number_of_nodes()
    True
    """
    id_mapper = IDMapper.from_ids(graph.node_ids)
    nk_graph = nk.Graph(graph.number_of_nodes(), weighted=True, directed=graph.directed)

    try:
        for edge in graph.edges.values():
            nk_graph.addEdge(
                id_mapper.get_internal(edge.source),
                id_mapper.get_internal(edge.target),
                edge.weight
            )
    except (RuntimeError, ValueError) as e:
        raise GraphConstructionError(
            f"NetworkIt conversion failed: {str(e)}",
            graph_type="directed" if graph.directed else "undirected",
            node_count=graph.number_of_nodes(),
            edge_count=graph.number_of_edges(),
            operation="to_networkit",
            cause=e
        ) from e

    logger.debug(
        "Converted graph to NetworkIt: %d nodes, %d edges",
        nk_graph.numberOfNodes(), nk_graph.numberOfEdges()
    )
    return nk_graph, id_mapper


def get_graph_info(graph: Graph) -> Dict[str, Any]:
    """
    Get basic structural information about a graph.

    Returns
    -------
    Dict[str, Any]
        Dictionary with node/edge counts, direction, total weight, counts of
        self-loops, parallel edges and isolated nodes, and whether any edge
        carries a negative weight (only Bellman-Ford handles those).
    """
    pair_counts: Dict[Tuple[str, str], int] = {}
    self_loops = 0
    negative = False
    for edge in graph.edges.values():
        if edge.source == edge.target:
            self_loops += 1
        if edge.weight < 0:
            negative = True
        pair = (edge.source, edge.target)
        if not graph.directed:
            pair = tuple(sorted(pair))
        pair_counts[pair] = pair_counts.get(pair, 0) + 1

    isolated = sum(1 for node_id in graph.node_ids if not graph.incident_edges(node_id))

    return {
        "num_nodes": graph.number_of_nodes(),
        "num_edges": graph.number_of_edges(),
        "directed": graph.directed,
        "total_weight": graph.total_weight(),
        "self_loops": self_loops,
        "parallel_edges": sum(count - 1 for count in pair_counts.values()),
        "isolated_nodes": isolated,
        "has_negative_weights": negative,
    }
