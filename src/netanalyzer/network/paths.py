"""
Shortest-path algorithms for the netanalyzer library.

Three single-source searches over a ``Graph``:

- ``dijkstra``: non-negative weights, binary heap
- ``bellman_ford``: arbitrary weights, reports negative cycles
- ``a_star``: best-first search guided by a caller-supplied heuristic

Dijkstra and A* assume non-negative edge weights. They do not check this;
on negative weights the results are undefined.
"""

from dataclasses import dataclass
import heapq
import math
from typing import Callable, Dict, List, Optional, Set, Tuple

from ..common.logging_config import get_logger, log_function_entry
from .graph import Graph

logger = get_logger(__name__)


@dataclass(frozen=True)
class PathResult:
    """
    A path between two nodes.

    Attributes
    ----------
    path : List[str]
        Node ids from source to target, both included
    length : int
        Number of hops (``len(path) - 1``)
    cost : float
        Sum of edge weights along the path
    """
    path: List[str]
    length: int
    cost: float


@dataclass(frozen=True)
class BellmanFordResult:
    """
    Output of ``bellman_ford``.

    Attributes
    ----------
    distances : Dict[str, float]
        Cost from the source for every node; ``math.inf`` when unreachable
    predecessors : Dict[str, Optional[str]]
        Previous node on the cheapest known path; ``None`` for the source
        and unreachable nodes
    has_negative_cycle : bool
        True when a negative-weight cycle is reachable from the source. The
        distances are then not meaningful.
    """
    distances: Dict[str, float]
    predecessors: Dict[str, Optional[str]]
    has_negative_cycle: bool

    def path_to(self, target: str) -> Optional[List[str]]:
        """Reconstruct the path to ``target``, or None if unreachable."""
        if self.has_negative_cycle or math.isinf(self.distances.get(target, math.inf)):
            return None
        path = [target]
        while self.predecessors.get(path[-1]) is not None:
            path.append(self.predecessors[path[-1]])
        path.reverse()
        return path


def _build_path(predecessors: Dict[str, Optional[str]], node_id: str) -> List[str]:
    path = [node_id]
    while predecessors[path[-1]] is not None:
        path.append(predecessors[path[-1]])
    path.reverse()
    return path


def dijkstra(
    graph: Graph,
    source: str,
    target: Optional[str] = None
) -> Dict[str, PathResult]:
    """
    Compute cheapest paths from ``source`` with Dijkstra's algorithm.

    Parameters
    ----------
    graph : Graph
        Graph with non-negative edge weights
    source : str
        Start node id
    target : str, optional
        If given, the search stops as soon as ``target`` is settled

    Returns
    -------
    Dict[str, PathResult]
        One entry per settled node, the source included with cost 0.
        Unreachable nodes are absent. With ``target`` the map holds the
        nodes settled before the target plus the target itself. An unknown
        source yields an empty dict.

    Examples
    --------
    >>> results = dijkstra(graph, "A")
    >>> results["C"].path
    ['A', 'B', 'C']
    >>> results["C"].cost
    3.0

    Notes
    -----
    Time Complexity: O((V + E) log V)

    Ties between equal-cost frontier nodes are broken by the lowest node
    id, which makes the returned paths deterministic.
    """
    log_function_entry("dijkstra", source=source, target=target, n_nodes=graph.number_of_nodes())

    if not graph.has_node(source):
        logger.debug("Source node '%s' not in graph, returning no paths", source)
        return {}

    distances: Dict[str, float] = {source: 0.0}
    predecessors: Dict[str, Optional[str]] = {source: None}
    settled: Set[str] = set()
    results: Dict[str, PathResult] = {}
    heap: List[Tuple[float, str]] = [(0.0, source)]

    while heap:
        cost, node_id = heapq.heappop(heap)
        if node_id in settled:
            continue
        settled.add(node_id)

        path = _build_path(predecessors, node_id)
        results[node_id] = PathResult(path=path, length=len(path) - 1, cost=cost)

        if node_id == target:
            break

        for neighbor, edge in graph.out_edges(node_id):
            if neighbor in settled:
                continue
            candidate = cost + edge.weight
            if candidate < distances.get(neighbor, math.inf):
                distances[neighbor] = candidate
                predecessors[neighbor] = node_id
                heapq.heappush(heap, (candidate, neighbor))

    return results


def bellman_ford(graph: Graph, source: str) -> BellmanFordResult:
    """
    Compute cheapest paths from ``source`` allowing negative edge weights.

    Runs at most ``|V| - 1`` relaxation passes over every edge, stopping
    early once a pass changes nothing, followed by one detection pass. In an
    undirected graph every edge relaxes in both directions, so a single
    negative undirected edge already forms a negative cycle.

    Parameters
    ----------
    graph : Graph
        Graph with arbitrary edge weights
    source : str
        Start node id

    Returns
    -------
    BellmanFordResult
        Distances and predecessors for every node, plus the negative cycle
        flag. An unknown source yields empty maps and no cycle.

    Examples
    --------
    >>> result = bellman_ford(graph, "A")
    >>> result.has_negative_cycle
    False
    >>> result.distances["C"]
    -1.0
    """
    log_function_entry("bellman_ford", source=source, n_nodes=graph.number_of_nodes())

    if not graph.has_node(source):
        logger.debug("Source node '%s' not in graph", source)
        return BellmanFordResult(distances={}, predecessors={}, has_negative_cycle=False)

    distances: Dict[str, float] = {node_id: math.inf for node_id in graph.node_ids}
    predecessors: Dict[str, Optional[str]] = {node_id: None for node_id in graph.node_ids}
    distances[source] = 0.0

    arcs: List[Tuple[str, str, float]] = []
    for edge in graph.edges.values():
        arcs.append((edge.source, edge.target, edge.weight))
        if not graph.directed and edge.source != edge.target:
            arcs.append((edge.target, edge.source, edge.weight))

    passes = 0
    for _ in range(graph.number_of_nodes() - 1):
        passes += 1
        changed = False
        for u, v, weight in arcs:
            if distances[u] != math.inf and distances[u] + weight < distances[v]:
                distances[v] = distances[u] + weight
                predecessors[v] = u
                changed = True
        if not changed:
            break

    has_negative_cycle = any(
        distances[u] != math.inf and distances[u] + weight < distances[v]
        for u, v, weight in arcs
    )

    if has_negative_cycle:
        logger.warning("Negative cycle reachable from '%s'", source)
    else:
        logger.debug("Bellman-Ford from '%s' finished after %d passes", source, passes)

    return BellmanFordResult(
        distances=distances,
        predecessors=predecessors,
        has_negative_cycle=has_negative_cycle
    )


def a_star(
    graph: Graph,
    source: str,
    target: str,
    heuristic: Callable[[str], float]
) -> Optional[PathResult]:
    """
    Find a path from ``source`` to ``target`` with A* search.

    Parameters
    ----------
    graph : Graph
        Graph with non-negative edge weights
    source : str
        Start node id
    target : str
        Goal node id
    heuristic : Callable[[str], float]
        Estimated remaining cost from a node to ``target``. It is not checked
        for admissibility: an overestimating heuristic may return a
        suboptimal path.

    Returns
    -------
    Optional[PathResult]
        The path found, or None if either node is unknown or the target is
        unreachable

    Examples
    --------
    >>> result = a_star(graph, "A", "E", heuristic=lambda node_id: 0.0)
    >>> result.cost
    5.0
    """
    log_function_entry("a_star", source=source, target=target)

    if not graph.has_node(source) or not graph.has_node(target):
        return None

    g_score: Dict[str, float] = {source: 0.0}
    predecessors: Dict[str, Optional[str]] = {source: None}
    closed: Set[str] = set()
    open_heap: List[Tuple[float, str]] = [(heuristic(source), source)]

    while open_heap:
        _, node_id = heapq.heappop(open_heap)
        if node_id in closed:
            continue

        if node_id == target:
            path = _build_path(predecessors, node_id)
            return PathResult(path=path, length=len(path) - 1, cost=g_score[node_id])

        closed.add(node_id)

        for neighbor, edge in graph.out_edges(node_id):
            if neighbor in closed:
                continue
            tentative = g_score[node_id] + edge.weight
            if tentative < g_score.get(neighbor, math.inf):
                g_score[neighbor] = tentative
                predecessors[neighbor] = node_id
                heapq.heappush(open_heap, (tentative + heuristic(neighbor), neighbor))

    logger.debug("No path from '%s' to '%s'", source, target)
    return None
