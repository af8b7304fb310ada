#!/usr/bin/env python3
"""
Basic Transfer Network Analysis Example

This example walks through the usual analysis workflow of the netanalyzer
library on a small wallet-to-wallet transfer network. It shows how to:

1. Build a graph from a Polars edge list
2. Rank wallets with PageRank and centrality measures
3. Find shortest (cheapest) routes between wallets
4. Detect communities and connectivity structure
5. Export results for further analysis

Run it after installing the package (``pip install -e .``).
"""

import tempfile
from pathlib import Path

import polars as pl

from netanalyzer.common.logging_config import setup_logging
from netanalyzer.network import (
    build_graph_from_edgelist,
    calculate_network_metrics,
    dijkstra,
    detect_cycles,
    export_graph,
    extract_centrality,
    get_community_summary,
    identify_central_nodes,
    louvain_communities,
    max_flow,
    pagerank,
    paths_to_dataframe,
    scores_to_dataframe,
    strongly_connected_components
)


def load_transfers() -> pl.DataFrame:
    """Sample transfers between two wallet clusters joined through an exchange."""
    return pl.DataFrame({
        "from": ["alice", "bob", "carol", "alice", "carol", "exchange",
                 "dave", "erin", "frank", "dave", "frank"],
        "to": ["bob", "carol", "alice", "carol", "exchange", "dave",
               "erin", "frank", "dave", "frank", "exchange"],
        "amount": [12.0, 7.5, 3.0, 1.0, 20.0, 18.0, 9.0, 4.5, 6.0, 2.0, 5.0],
        "block": [101, 102, 103, 104, 105, 106, 107, 108, 109, 110, 111],
    })


def main():
    """Main function demonstrating the analysis workflow."""
    setup_logging(level="WARNING")

    print("=" * 60)
    print("Transfer Network Analysis Example")
    print("=" * 60)

    # Step 1: Build the graph
    print("\n1. Building Transfer Graph")
    print("-" * 40)

    transfers = load_transfers()
    graph = build_graph_from_edgelist(
        transfers, source_col="from", target_col="to", weight_col="amount", directed=True
    )
    metrics = calculate_network_metrics(graph)
    for name, value in metrics.to_dict().items():
        print(f"  {name:<24} {value}")

    # Step 2: Ranking
    print("\n2. Ranking Wallets")
    print("-" * 40)

    ranks = pagerank(graph)
    print(f"PageRank converged={ranks.converged} after {ranks.iterations} iterations")
    print(scores_to_dataframe(ranks.scores, column="pagerank").head(3))

    print("\nMost central wallets by betweenness:")
    for node_id, score in identify_central_nodes(graph, "betweenness", top_k=3):
        print(f"  {node_id:<10} {score:.3f}")

    centrality = extract_centrality(graph, metrics=["degree", "closeness", "pagerank"])
    print(centrality)

    # Step 3: Shortest routes
    print("\n3. Cheapest Routes from alice")
    print("-" * 40)

    print(paths_to_dataframe("alice", dijkstra(graph, "alice")))
    print(f"\nMax flow alice -> frank: {max_flow(graph, 'alice', 'frank'):.1f}")

    # Step 4: Structure
    print("\n4. Communities and Cycles")
    print("-" * 40)

    communities = louvain_communities(graph)
    print(f"Found {communities.num_communities} communities "
          f"(modularity {communities.modularity:.3f})")
    print(get_community_summary(graph, communities))

    scc = strongly_connected_components(graph)
    print(f"\nStrongly connected components: {[sorted(c) for c in scc]}")
    print(f"Cycles: {detect_cycles(graph, max_cycle_length=5)}")

    # Step 5: Export
    print("\n5. Exporting Results")
    print("-" * 40)

    output_dir = Path(tempfile.mkdtemp())
    written = export_graph(
        graph, str(output_dir / "transfers"), format="parquet", include_metrics=["pagerank"]
    )
    for path in written:
        print(f"  wrote {path}")

    print("\n" + "=" * 60)
    print("Analysis complete")
    print("=" * 60)


if __name__ == "__main__":
    main()
