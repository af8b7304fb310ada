"""
Graph model and network analysis module.

This module provides the core network analysis capabilities:
- Graph model and construction from records or Polars edge lists
- Shortest paths (Dijkstra, Bellman-Ford, A*)
- Ranking (PageRank, eigenvector centrality)
- Centrality measures (degree, betweenness, closeness)
- Community detection using single-level Louvain
- Connectivity and flow (components, SCC, MST, max-flow, cycles)
- Whole-network metrics
- Export of graphs and results
"""

# Graph model
from .graph import Graph, Node, Edge

# Network construction functions
from .construction import (
    build_graph,
    build_graph_from_edgelist,
    to_networkit,
    get_graph_info
)

# Shortest paths
from .paths import (
    PathResult,
    BellmanFordResult,
    dijkstra,
    bellman_ford,
    a_star
)

# Ranking
from .ranking import (
    PageRankResult,
    pagerank,
    eigenvector_centrality
)

# Network analysis functions
from .analysis import (
    CentralityMetrics,
    degree_centrality,
    betweenness_centrality,
    closeness_centrality,
    calculate_centrality,
    extract_centrality,
    identify_central_nodes,
    get_centrality_summary
)

# Community detection functions
from .communities import (
    CommunityResult,
    louvain_communities,
    modularity,
    get_community_summary
)

# Connectivity and flow
from .connectivity import (
    connected_components,
    strongly_connected_components,
    minimum_spanning_tree,
    max_flow,
    detect_cycles
)

# Network metrics
from .metrics import (
    NetworkMetrics,
    calculate_network_metrics,
    clustering_coefficient,
    density,
    diameter
)

# Export
from .export import (
    scores_to_dataframe,
    paths_to_dataframe,
    communities_to_dataframe,
    graph_to_edgelist,
    export_graph
)
