"""
netanalyzer - Weighted graph analysis library.

This package models weighted (multi)graphs such as address-to-address
transfer graphs and computes structural metrics over them: ranking,
shortest paths, centrality, communities, connectivity and flow.

Modules:
    common: Shared utilities for exceptions, ID mapping, validation and logging
    network: Graph model, construction, algorithms and export
"""

__version__ = "0.1.0"

# Expose main functionality at package level
# Users can import as: from netanalyzer import build_graph, pagerank

from .common.exceptions import (
    NetworkAnalysisError,
    ValidationError,
    GraphConstructionError,
    ConfigurationError,
    ComputationError,
    DataFormatError
)
from .common.id_mapper import IDMapper
from .common.logging_config import setup_logging, get_logger

from .network.graph import Graph, Node, Edge
from .network.construction import build_graph, build_graph_from_edgelist, to_networkit
from .network.paths import PathResult, BellmanFordResult, dijkstra, bellman_ford, a_star
from .network.ranking import PageRankResult, pagerank, eigenvector_centrality
from .network.analysis import (
    CentralityMetrics,
    degree_centrality,
    betweenness_centrality,
    closeness_centrality,
    calculate_centrality,
    extract_centrality
)
from .network.communities import CommunityResult, louvain_communities, modularity
from .network.connectivity import (
    connected_components,
    strongly_connected_components,
    minimum_spanning_tree,
    max_flow,
    detect_cycles
)
from .network.metrics import NetworkMetrics, calculate_network_metrics

__all__ = [
    "NetworkAnalysisError", "ValidationError", "GraphConstructionError",
    "ConfigurationError", "ComputationError", "DataFormatError",
    "IDMapper", "setup_logging", "get_logger",
    "Graph", "Node", "Edge",
    "build_graph", "build_graph_from_edgelist", "to_networkit",
    "PathResult", "BellmanFordResult", "dijkstra", "bellman_ford", "a_star",
    "PageRankResult", "pagerank", "eigenvector_centrality",
    "CentralityMetrics", "degree_centrality", "betweenness_centrality",
    "closeness_centrality", "calculate_centrality", "extract_centrality",
    "CommunityResult", "louvain_communities", "modularity",
    "connected_components", "strongly_connected_components",
    "minimum_spanning_tree", "max_flow", "detect_cycles",
    "NetworkMetrics", "calculate_network_metrics",
]
