"""
Result export module for the netanalyzer library.

This module converts graphs and algorithm results into Polars DataFrames so
they can be joined with other tabular data, and writes graphs to CSV edge
lists or Parquet node/edge tables.
"""

import os
import warnings
from pathlib import Path
from typing import Dict, List, Optional, Set

import polars as pl

from ..common.exceptions import ValidationError
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from .graph import Graph
from .paths import PathResult

logger = get_logger(__name__)

# Supported export formats
SUPPORTED_FORMATS = ["edgelist", "parquet"]


def scores_to_dataframe(
    scores: Dict[str, float],
    column: str = "score",
    sort_descending: bool = True
) -> pl.DataFrame:
    """
    Convert a node score map to a DataFrame.

    Parameters
    ----------
    scores : Dict[str, float]
        Score per node id, as returned by the ranking and centrality
        functions
    column : str, default "score"
        Name of the score column
    sort_descending : bool, default True
        Sort by score (descending, ties by node id) instead of by node id

    Returns
    -------
    pl.DataFrame
        Columns "node_id" and ``column``

    Examples
    --------
    >>> scores_to_dataframe(pagerank(graph).scores, column="pagerank").head(3)
    """
    df = pl.DataFrame(
        {"node_id": list(scores.keys()), column: [float(v) for v in scores.values()]},
        schema={"node_id": pl.Utf8, column: pl.Float64}
    )
    if sort_descending:
        return df.sort([column, "node_id"], descending=[True, False])
    return df.sort("node_id")


def paths_to_dataframe(source: str, paths: Dict[str, PathResult]) -> pl.DataFrame:
    """
    Convert ``dijkstra`` output to a DataFrame.

    Returns
    -------
    pl.DataFrame
        One row per reachable target with columns "source", "target",
        "cost", "length" and "path" (list of node ids), sorted by cost then
        target
    """
    return pl.DataFrame(
        {
            "source": [source] * len(paths),
            "target": list(paths.keys()),
            "cost": [result.cost for result in paths.values()],
            "length": [result.length for result in paths.values()],
            "path": [list(result.path) for result in paths.values()],
        },
        schema={
            "source": pl.Utf8,
            "target": pl.Utf8,
            "cost": pl.Float64,
            "length": pl.Int64,
            "path": pl.List(pl.Utf8),
        }
    ).sort(["cost", "target"])


def communities_to_dataframe(communities: List[Set[str]]) -> pl.DataFrame:
    """
    Convert a partition to a node -> community DataFrame.

    Returns
    -------
    pl.DataFrame
        Columns "node_id" and "community" (index into ``communities``),
        sorted by node_id
    """
    node_ids = []
    labels = []
    for index, members in enumerate(communities):
        for node_id in members:
            node_ids.append(node_id)
            labels.append(index)

    return pl.DataFrame(
        {"node_id": node_ids, "community": labels},
        schema={"node_id": pl.Utf8, "community": pl.Int64}
    ).sort("node_id")


def graph_to_edgelist(graph: Graph) -> pl.DataFrame:
    """
    Convert a graph's edges to a DataFrame.

    Returns
    -------
    pl.DataFrame
        Columns "edge_id", "source", "target" and "weight" in edge insertion
        order. Edge attributes are not included.
    """
    edges = list(graph.edges.values())
    return pl.DataFrame(
        {
            "edge_id": [edge.id for edge in edges],
            "source": [edge.source for edge in edges],
            "target": [edge.target for edge in edges],
            "weight": [edge.weight for edge in edges],
        },
        schema={
            "edge_id": pl.Utf8,
            "source": pl.Utf8,
            "target": pl.Utf8,
            "weight": pl.Float64,
        }
    )


def _prepare_node_data(graph: Graph, include_metrics: Optional[List[str]]) -> pl.DataFrame:
    """Prepare node data with labels and optional centrality metrics."""
    node_data = pl.DataFrame(
        {
            "node_id": graph.node_ids,
            "label": [node.label for node in graph.nodes.values()],
        },
        schema={"node_id": pl.Utf8, "label": pl.Utf8}
    )

    if include_metrics:
        # Import here to avoid circular dependency
        from .analysis import extract_centrality

        logger.debug("Calculating centrality metrics: %s", include_metrics)
        centrality_df = extract_centrality(graph, metrics=include_metrics)
        node_data = node_data.join(centrality_df, on="node_id", how="left")

    return node_data


def _prepare_output_path(output_path: str, format: str, overwrite: bool) -> str:
    """Add a default extension, warn on existing files and create the directory."""
    path = Path(output_path)
    if not path.suffix:
        path = path.with_suffix(".csv" if format == "edgelist" else f".{format}")

    output_path = str(path)

    if os.path.exists(output_path) and not overwrite:
        warnings.warn(
            f"File {output_path} already exists. Use overwrite=True to replace it.",
            UserWarning
        )

    os.makedirs(path.parent, exist_ok=True)
    return output_path


def export_graph(
    graph: Graph,
    output_path: str,
    format: str = "edgelist",
    include_metrics: Optional[List[str]] = None,
    overwrite: bool = False
) -> List[str]:
    """
    Write a graph to disk.

    Parameters
    ----------
    graph : Graph
        Graph to export
    output_path : str
        Output file path; an extension is added when missing
    format : str, default "edgelist"
        "edgelist" writes one CSV of edges, enriched with
        ``source_*``/``target_*`` centrality columns when metrics are
        requested. "parquet" writes ``<path>_nodes.parquet`` and
        ``<path>_edges.parquet``.
    include_metrics : List[str], optional
        Centrality metrics to compute and attach to the nodes
    overwrite : bool, default False
        Existing files are replaced either way; without overwrite a
        warning is emitted first

    Returns
    -------
    List[str]
        Paths of the files written

    Raises
    ------
    ValidationError
        If the format is unsupported or output_path is empty

    Examples
    --------
    >>> export_graph(graph, "out/transfers", format="parquet", include_metrics=["pagerank"])
    ['out/transfers_nodes.parquet', 'out/transfers_edges.parquet']
    """
    log_function_entry(
        "export_graph",
        output_path=output_path,
        format=format,
        include_metrics=include_metrics
    )

    if format not in SUPPORTED_FORMATS:
        raise ValidationError(
            f"Unsupported export format: {format}. Supported formats: {SUPPORTED_FORMATS}",
            field="format",
            value=format
        )
    if not output_path or not isinstance(output_path, str):
        raise ValidationError("output_path must be a non-empty string", field="output_path")

    output_path = _prepare_output_path(output_path, format, overwrite)

    with LoggingTimer("export_graph", {"format": format, "nodes": graph.number_of_nodes()}):
        node_data = _prepare_node_data(graph, include_metrics)
        edge_data = graph_to_edgelist(graph)

        if format == "edgelist":
            metric_cols = [col for col in node_data.columns if col.endswith("_centrality")]
            if metric_cols:
                for side in ("source", "target"):
                    side_attrs = node_data.select(["node_id"] + metric_cols).rename(
                        {"node_id": side, **{col: f"{side}_{col}" for col in metric_cols}}
                    )
                    edge_data = edge_data.join(side_attrs, on=side, how="left")
            edge_data.write_csv(output_path)
            written = [output_path]
        else:
            base_path = Path(output_path).with_suffix("")
            nodes_path = f"{base_path}_nodes.parquet"
            edges_path = f"{base_path}_edges.parquet"
            node_data.write_parquet(nodes_path)
            edge_data.write_parquet(edges_path)
            written = [nodes_path, edges_path]

    logger.info("Graph exported as %s: %s", format, ", ".join(written))
    return written
