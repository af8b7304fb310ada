"""
Connectivity and flow module for the netanalyzer library.

Components, strongly connected components, minimum spanning trees, maximum
flow and bounded cycle detection. Every traversal uses an explicit stack or
queue, so deep graphs cannot exhaust the interpreter's recursion limit.
"""

from collections import deque
import heapq
from typing import Deque, Dict, Iterator, List, Optional, Set, Tuple

from ..common.exceptions import require_positive
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from .graph import Edge, Graph

logger = get_logger(__name__)

DEFAULT_MAX_CYCLE_LENGTH = 10


def connected_components(graph: Graph) -> List[Set[str]]:
    """
    Find connected components, ignoring edge direction.

    Returns
    -------
    List[Set[str]]
        Components ordered by their first node in graph order

    Examples
    --------
    >>> connected_components(graph)
    [{'A', 'B', 'C'}, {'D'}]
    """
    visited: Set[str] = set()
    components: List[Set[str]] = []

    for root in graph.node_ids:
        if root in visited:
            continue
        component = {root}
        visited.add(root)
        stack = [root]
        while stack:
            node_id = stack.pop()
            for edge in graph.incident_edges(node_id):
                neighbor = edge.other(node_id)
                if neighbor not in visited:
                    visited.add(neighbor)
                    component.add(neighbor)
                    stack.append(neighbor)
        components.append(component)

    return components


def strongly_connected_components(graph: Graph) -> List[Set[str]]:
    """
    Find strongly connected components with Tarjan's algorithm.

    The depth-first search keeps its own work stack of
    ``(node, neighbour iterator)`` frames instead of recursing.

    Parameters
    ----------
    graph : Graph
        Graph to analyse. In an undirected graph every edge is traversable
        both ways, so the result equals ``connected_components``.

    Returns
    -------
    List[Set[str]]
        Components in the order Tarjan completes them (reverse topological
        order of the condensation)

    Notes
    -----
    Time Complexity: O(V + E)
    """
    log_function_entry("strongly_connected_components", n_nodes=graph.number_of_nodes())

    index: Dict[str, int] = {}
    lowlink: Dict[str, int] = {}
    on_stack: Set[str] = set()
    stack: List[str] = []
    components: List[Set[str]] = []
    counter = 0

    for root in graph.node_ids:
        if root in index:
            continue

        index[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        work: List[Tuple[str, Iterator[str]]] = [(root, iter(graph.neighbors(root)))]

        while work:
            node_id, neighbors = work[-1]
            descended = False

            for neighbor in neighbors:
                if neighbor not in index:
                    index[neighbor] = lowlink[neighbor] = counter
                    counter += 1
                    stack.append(neighbor)
                    on_stack.add(neighbor)
                    work.append((neighbor, iter(graph.neighbors(neighbor))))
                    descended = True
                    break
                elif neighbor in on_stack:
                    lowlink[node_id] = min(lowlink[node_id], index[neighbor])

            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node_id])

            if lowlink[node_id] == index[node_id]:
                component = set()
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.add(member)
                    if member == node_id:
                        break
                components.append(component)

    logger.debug("Found %d strongly connected components", len(components))
    return components


def minimum_spanning_tree(graph: Graph, start: Optional[str] = None) -> Graph:
    """
    Build a minimum spanning tree with Prim's algorithm.

    Parameters
    ----------
    graph : Graph
        Graph to span. Edges are followed according to the directed flag.
    start : str, optional
        Node to grow the tree from; defaults to the lowest node id

    Returns
    -------
    Graph
        New undirected graph holding every node of the input and the
        selected tree edges. If the input is disconnected, only the
        component reachable from ``start`` is spanned. An unknown ``start``
        yields a tree without edges.

    Examples
    --------
    >>> tree = minimum_spanning_tree(graph)
    >>> tree.number_of_edges() == graph.number_of_nodes() - 1
    True

    Notes
    -----
    Candidate edges are ordered by weight, then by their insertion order in
    the input graph, which makes the selected tree deterministic.

    Time Complexity: O(E log E)
    """
    log_function_entry("minimum_spanning_tree", n_nodes=graph.number_of_nodes(), start=start)

    nodes = list(graph.nodes.values())
    if not nodes:
        return Graph(directed=False)

    if start is None:
        start = min(graph.node_ids)
    if not graph.has_node(start):
        logger.warning("Start node '%s' not in graph, returning tree without edges", start)
        return Graph(nodes, directed=False)

    edge_order = {edge_id: position for position, edge_id in enumerate(graph.edges)}
    in_tree: Set[str] = set()
    tree_edges: List[Edge] = []
    heap: List[Tuple[float, int, str, Edge]] = []

    def _grow(node_id: str) -> None:
        in_tree.add(node_id)
        for neighbor, edge in graph.out_edges(node_id):
            if neighbor not in in_tree:
                heapq.heappush(heap, (edge.weight, edge_order[edge.id], neighbor, edge))

    _grow(start)
    while heap and len(in_tree) < len(nodes):
        _, _, neighbor, edge = heapq.heappop(heap)
        if neighbor in in_tree:
            continue
        tree_edges.append(edge)
        _grow(neighbor)

    if len(in_tree) < len(nodes):
        logger.info(
            "Graph is disconnected: spanning tree covers %d of %d nodes",
            len(in_tree), len(nodes)
        )

    return Graph(nodes, tree_edges, directed=False)


def _residual_capacities(graph: Graph) -> Dict[str, Dict[str, float]]:
    residual: Dict[str, Dict[str, float]] = {node_id: {} for node_id in graph.node_ids}
    for edge in graph.edges.values():
        if edge.source == edge.target:
            continue
        arcs = [(edge.source, edge.target)]
        if not graph.directed:
            arcs.append((edge.target, edge.source))
        for u, v in arcs:
            residual[u][v] = residual[u].get(v, 0.0) + edge.weight
            residual[v].setdefault(u, 0.0)
    return residual


def _augmenting_path(
    residual: Dict[str, Dict[str, float]],
    source: str,
    sink: str
) -> Optional[Dict[str, Optional[str]]]:
    """Breadth-first search for a shortest path with spare capacity."""
    parents: Dict[str, Optional[str]] = {source: None}
    queue: Deque[str] = deque([source])
    while queue:
        node_id = queue.popleft()
        for neighbor, capacity in residual[node_id].items():
            if capacity > 0 and neighbor not in parents:
                parents[neighbor] = node_id
                if neighbor == sink:
                    return parents
                queue.append(neighbor)
    return None


def max_flow(graph: Graph, source: str, sink: str) -> float:
    """
    Compute the maximum flow from ``source`` to ``sink`` (Edmonds-Karp).

    Edge weights are capacities. Parallel edges add their capacities and
    an undirected edge offers its capacity in both directions.

    Parameters
    ----------
    graph : Graph
        Graph with non-negative weights
    source : str
        Node the flow leaves
    sink : str
        Node the flow arrives at

    Returns
    -------
    float
        Value of the maximum flow; 0.0 when either node is unknown or
        ``source == sink``

    Examples
    --------
    >>> max_flow(diamond, "S", "T")
    8.0

    Notes
    -----
    Time Complexity: O(V * E^2)
    """
    log_function_entry("max_flow", source=source, sink=sink)

    if source == sink or not graph.has_node(source) or not graph.has_node(sink):
        return 0.0

    residual = _residual_capacities(graph)
    total = 0.0
    augmentations = 0

    with LoggingTimer("max_flow", {"nodes": graph.number_of_nodes()}):
        while True:
            parents = _augmenting_path(residual, source, sink)
            if parents is None:
                break

            bottleneck = float("inf")
            node_id = sink
            while parents[node_id] is not None:
                previous = parents[node_id]
                bottleneck = min(bottleneck, residual[previous][node_id])
                node_id = previous

            node_id = sink
            while parents[node_id] is not None:
                previous = parents[node_id]
                residual[previous][node_id] -= bottleneck
                residual[node_id][previous] += bottleneck
                node_id = previous

            total += bottleneck
            augmentations += 1

    logger.debug("Max flow %s -> %s = %g after %d augmenting paths", source, sink, total, augmentations)
    return total


def detect_cycles(
    graph: Graph,
    max_cycle_length: int = DEFAULT_MAX_CYCLE_LENGTH,
    max_cycles: Optional[int] = None
) -> List[List[str]]:
    """
    Detect cycles with a depth-bounded depth-first search.

    Nodes are explored once across the whole search. Whenever an edge leads
    back to a node on the current DFS stack (other than the node we just
    came from), the stack segment from that node is recorded as a cycle,
    closed by repeating the first node.

    Parameters
    ----------
    graph : Graph
        Graph to search
    max_cycle_length : int, default 10
        Maximum number of distinct nodes in a reported cycle; the search
        does not descend deeper than this
    max_cycles : int, optional
        Stop after this many cycles and return what was found

    Returns
    -------
    List[List[str]]
        Cycles such as ``['A', 'B', 'C', 'A']``. Cycles may overlap and the
        list is not exhaustive: it is a detector, not an enumerator.

    Raises
    ------
    ConfigurationError
        If max_cycle_length or max_cycles is not positive

    Examples
    --------
    >>> detect_cycles(triangle)
    [['A', 'B', 'C', 'A']]
    """
    log_function_entry(
        "detect_cycles",
        n_nodes=graph.number_of_nodes(),
        max_cycle_length=max_cycle_length,
        max_cycles=max_cycles
    )
    require_positive(max_cycle_length, "max_cycle_length")
    if max_cycles is not None:
        require_positive(max_cycles, "max_cycles")

    cycles: List[List[str]] = []
    visited: Set[str] = set()

    for root in graph.node_ids:
        if root in visited:
            continue

        visited.add(root)
        stack: List[str] = [root]
        positions: Dict[str, int] = {root: 0}
        # (node, parent, outgoing neighbour iterator)
        work: List[Tuple[str, Optional[str], Iterator[str]]] = [
            (root, None, (neighbor for neighbor, _ in graph.out_edges(root)))
        ]

        while work:
            node_id, parent, targets = work[-1]
            descended = False

            for target in targets:
                if target in positions and target != parent:
                    cycles.append(stack[positions[target]:] + [target])
                    if max_cycles is not None and len(cycles) >= max_cycles:
                        logger.info("Cycle budget of %d reached, stopping search", max_cycles)
                        return cycles
                elif target not in visited and len(stack) < max_cycle_length:
                    visited.add(target)
                    positions[target] = len(stack)
                    stack.append(target)
                    work.append((target, node_id, (n for n, _ in graph.out_edges(target))))
                    descended = True
                    break

            if not descended:
                work.pop()
                del positions[stack.pop()]

    logger.debug("Detected %d cycles", len(cycles))
    return cycles
