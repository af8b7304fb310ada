"""
Community detection module for the netanalyzer library.

Provides single-level Louvain modularity optimisation and weighted Newman
modularity. Edges are always treated as undirected here, whatever the
graph's ``directed`` flag.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple
import warnings

import polars as pl

from ..common.exceptions import ValidationError, require_positive
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from .graph import Graph

logger = get_logger(__name__)

DEFAULT_RESOLUTION = 1.0
DEFAULT_MAX_ITERATIONS = 100

# Gains below this are treated as zero so that floating point noise cannot
# keep a node oscillating between communities
_GAIN_EPSILON = 1e-12


@dataclass(frozen=True)
class CommunityResult:
    """
    Output of ``louvain_communities``.

    Attributes
    ----------
    communities : List[Set[str]]
        Disjoint node sets covering every node, ordered by the position of
        their first member in the graph's node order
    modularity : float
        Standard modularity (resolution 1.0) of the partition
    num_communities : int
        Number of communities
    iterations : int
        Number of passes over the nodes
    converged : bool
        False when the pass cap was hit while nodes were still moving
    """
    communities: List[Set[str]]
    modularity: float
    num_communities: int
    iterations: int
    converged: bool

    def membership(self) -> Dict[str, int]:
        """Map each node id to the index of its community."""
        return {
            node_id: index
            for index, members in enumerate(self.communities)
            for node_id in members
        }


def _weighted_degrees(graph: Graph) -> Dict[str, float]:
    degrees = {node_id: 0.0 for node_id in graph.node_ids}
    for edge in graph.edges.values():
        degrees[edge.source] += edge.weight
        degrees[edge.target] += edge.weight
    return degrees


def _order_communities(graph: Graph, assignment: Dict[str, int]) -> List[Set[str]]:
    grouped: Dict[int, Set[str]] = {}
    for node_id in graph.node_ids:
        grouped.setdefault(assignment[node_id], set()).add(node_id)
    return list(grouped.values())


def modularity(
    graph: Graph,
    communities: Iterable[Iterable[str]],
    resolution: float = DEFAULT_RESOLUTION
) -> float:
    """
    Calculate the weighted Newman modularity of a partition.

    ``Q = sum over communities c of L_c / m - resolution * (D_c / 2m) ** 2``
    where ``m`` is the total edge weight, ``L_c`` the weight of edges inside
    ``c`` and ``D_c`` the summed weighted degree of its members.

    Parameters
    ----------
    graph : Graph
        Graph the partition refers to
    communities : Iterable[Iterable[str]]
        Disjoint groups of node ids. Nodes left out of every group are
        treated as singleton communities.
    resolution : float, default 1.0
        Resolution parameter; values above 1 favour smaller communities

    Returns
    -------
    float
        Modularity; 0.0 when the graph has no edge weight. With resolution
        1.0 and non-negative weights it lies in [-1, 1].

    Raises
    ------
    ValidationError
        If a group names an unknown node or a node appears twice

    Examples
    --------
    >>> modularity(graph, [{"A", "B", "C"}, {"D", "E", "F"}])
    0.357...
    """
    require_positive(resolution, "resolution")

    assignment: Dict[str, int] = {}
    for index, members in enumerate(communities):
        for node_id in members:
            if not graph.has_node(node_id):
                raise ValidationError(
                    f"Community member '{node_id}' is not a node of the graph",
                    field="communities",
                    value=node_id
                )
            if node_id in assignment:
                raise ValidationError(
                    f"Node '{node_id}' appears in more than one community",
                    field="communities",
                    value=node_id
                )
            assignment[node_id] = index

    next_index = max(assignment.values(), default=-1) + 1
    for node_id in graph.node_ids:
        if node_id not in assignment:
            assignment[node_id] = next_index
            next_index += 1

    total_weight = graph.total_weight()
    if total_weight == 0:
        return 0.0

    internal: Dict[int, float] = defaultdict(float)
    for edge in graph.edges.values():
        if assignment[edge.source] == assignment[edge.target]:
            internal[assignment[edge.source]] += edge.weight

    degree_sums: Dict[int, float] = defaultdict(float)
    for node_id, degree in _weighted_degrees(graph).items():
        degree_sums[assignment[node_id]] += degree

    return sum(
        internal[c] / total_weight - resolution * (degree_sums[c] / (2 * total_weight)) ** 2
        for c in degree_sums
    )


def louvain_communities(
    graph: Graph,
    resolution: float = DEFAULT_RESOLUTION,
    max_iterations: int = DEFAULT_MAX_ITERATIONS
) -> CommunityResult:
    """
    Detect communities with the local-moving phase of the Louvain method.

    Every node starts in its own community. Each pass visits the nodes in
    graph order and moves a node into the neighbouring community with the
    strictly largest positive modularity gain. Passes repeat until no node
    moves or ``max_iterations`` passes have run. Communities are not
    aggregated into super-nodes (single level).

    Parameters
    ----------
    graph : Graph
        Graph to partition; edges are treated as undirected
    resolution : float, default 1.0
        Resolution parameter for the gain computation. Higher values give
        more, smaller communities.
    max_iterations : int, default 100
        Maximum number of passes over the nodes

    Returns
    -------
    CommunityResult
        Partition, its standard modularity, pass count and convergence flag

    Raises
    ------
    ConfigurationError
        If resolution or max_iterations is not positive

    Examples
    --------
    >>> result = louvain_communities(graph)
    >>> result.num_communities
    2
    >>> sorted(map(sorted, result.communities))
    [['A', 'B', 'C'], ['D', 'E', 'F']]

    Notes
    -----
    The gain of moving node ``i`` from community ``A`` into ``B`` is::

        (k_i_B - k_i_A) / m - resolution * k_i * (S_B - S_A) / (2 * m ** 2)

    where ``k_i_X`` is the edge weight between ``i`` and ``X`` (without
    ``i``), ``k_i`` the weighted degree of ``i`` and ``S_X`` the summed
    degree of ``X`` without ``i``.

    Time Complexity: O(k * (V + E)) for k passes
    """
    log_function_entry(
        "louvain_communities",
        n_nodes=graph.number_of_nodes(),
        resolution=resolution,
        max_iterations=max_iterations
    )
    require_positive(resolution, "resolution")
    require_positive(max_iterations, "max_iterations")

    node_ids = graph.node_ids
    if not node_ids:
        warnings.warn("Empty graph provided. Returning no communities.")
        return CommunityResult(communities=[], modularity=0.0, num_communities=0, iterations=0, converged=True)

    assignment = {node_id: index for index, node_id in enumerate(node_ids)}
    total_weight = graph.total_weight()

    if total_weight == 0:
        logger.info("Graph has no edge weight. Each node forms its own community.")
        communities = _order_communities(graph, assignment)
        return CommunityResult(
            communities=communities,
            modularity=0.0,
            num_communities=len(communities),
            iterations=0,
            converged=True
        )

    degrees = _weighted_degrees(graph)
    community_degree: Dict[int, float] = {assignment[n]: degrees[n] for n in node_ids}

    # (neighbor, weight) per node, self-loops excluded, direction ignored
    adjacency: Dict[str, List[Tuple[str, float]]] = {node_id: [] for node_id in node_ids}
    for edge in graph.edges.values():
        if edge.source != edge.target:
            adjacency[edge.source].append((edge.target, edge.weight))
            adjacency[edge.target].append((edge.source, edge.weight))

    scale = resolution / (2 * total_weight ** 2)
    iterations = 0
    converged = False

    with LoggingTimer("louvain_communities", {"nodes": len(node_ids)}):
        while iterations < max_iterations:
            iterations += 1
            moves = 0

            for node_id in node_ids:
                current = assignment[node_id]
                k_i = degrees[node_id]

                links: Dict[int, float] = {}
                for neighbor, weight in adjacency[node_id]:
                    community = assignment[neighbor]
                    links[community] = links.get(community, 0.0) + weight

                community_degree[current] -= k_i
                stay_gain = links.get(current, 0.0) / total_weight - scale * k_i * community_degree[current]

                best_community = current
                best_gain = 0.0
                for community, link_weight in links.items():
                    if community == current:
                        continue
                    gain = (
                        link_weight / total_weight
                        - scale * k_i * community_degree[community]
                        - stay_gain
                    )
                    if gain > best_gain + _GAIN_EPSILON:
                        best_community = community
                        best_gain = gain

                community_degree[best_community] += k_i
                if best_community != current:
                    assignment[node_id] = best_community
                    moves += 1

            logger.debug("Louvain pass %d moved %d nodes", iterations, moves)
            if moves == 0:
                converged = True
                break

    if not converged:
        logger.warning("Louvain did not converge within %d passes", max_iterations)

    communities = _order_communities(graph, assignment)
    quality = modularity(graph, communities)

    logger.info(
        "Community detection completed: %d communities, modularity=%.3f, passes=%d",
        len(communities), quality, iterations
    )

    return CommunityResult(
        communities=communities,
        modularity=quality,
        num_communities=len(communities),
        iterations=iterations,
        converged=converged
    )


def get_community_summary(
    graph: Graph,
    result: CommunityResult
) -> pl.DataFrame:
    """
    Summarise each community of a detection result.

    Parameters
    ----------
    graph : Graph
        Graph the result was computed on
    result : CommunityResult
        Output of ``louvain_communities``

    Returns
    -------
    pl.DataFrame
        One row per community with columns "community_id", "size",
        "internal_weight", "total_degree" and "members" (node ids in graph
        order), sorted by community_id
    """
    membership = result.membership()
    order = {node_id: position for position, node_id in enumerate(graph.node_ids)}
    degrees = _weighted_degrees(graph)

    internal = [0.0] * len(result.communities)
    for edge in graph.edges.values():
        community: Optional[int] = membership.get(edge.source)
        if community is not None and community == membership.get(edge.target):
            internal[community] += edge.weight

    return pl.DataFrame(
        {
            "community_id": list(range(len(result.communities))),
            "size": [len(members) for members in result.communities],
            "internal_weight": internal,
            "total_degree": [sum(degrees[n] for n in members) for members in result.communities],
            "members": [sorted(members, key=order.__getitem__) for members in result.communities],
        },
        schema={
            "community_id": pl.Int64,
            "size": pl.Int64,
            "internal_weight": pl.Float64,
            "total_degree": pl.Float64,
            "members": pl.List(pl.Utf8),
        }
    )
