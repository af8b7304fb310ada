"""
Tests for PageRank and eigenvector centrality.

NetworkIt's PageRank is used as an independent reference where the two
formulations agree (no dangling nodes).
"""

import math

import networkit as nk
import pytest

from netanalyzer.common.exceptions import ConfigurationError
from netanalyzer.network.construction import build_graph, to_networkit
from netanalyzer.network.ranking import (
    PageRankResult,
    eigenvector_centrality,
    pagerank
)


def _cycle_with_chord():
    """Directed graph in which every node has out-degree >= 1."""
    return build_graph(
        ["A", "B", "C", "D"],
        [
            {"source": "A", "target": "B"},
            {"source": "B", "target": "C"},
            {"source": "C", "target": "D"},
            {"source": "D", "target": "A"},
            {"source": "A", "target": "C"},
        ],
        directed=True
    )


class TestPageRank:
    """Test PageRank power iteration."""

    def test_scores_sum_to_one_without_dangling_nodes(self):
        result = pagerank(_cycle_with_chord(), tolerance=1e-8)

        assert result.converged
        assert sum(result.scores.values()) == pytest.approx(1.0, abs=1e-6)

    def test_symmetric_cycle_is_uniform(self):
        graph = build_graph(
            ["A", "B", "C"],
            [
                {"source": "A", "target": "B"},
                {"source": "B", "target": "C"},
                {"source": "C", "target": "A"},
            ],
            directed=True
        )
        result = pagerank(graph)

        for score in result.scores.values():
            assert score == pytest.approx(1 / 3)
        # Starting at the fixed point, the first iteration already converges
        assert result.iterations == 1

    def test_inbound_links_raise_rank(self):
        graph = build_graph(
            ["hub", "a", "b", "c"],
            [
                {"source": "a", "target": "hub"},
                {"source": "b", "target": "hub"},
                {"source": "c", "target": "hub"},
                {"source": "hub", "target": "a"},
            ],
            directed=True
        )
        scores = pagerank(graph).scores
        assert max(scores, key=scores.get) == "hub"

    def test_dangling_nodes_leak_rank(self):
        graph = build_graph(["A", "B"], [{"source": "A", "target": "B"}], directed=True)
        result = pagerank(graph)

        assert result.scores["A"] == pytest.approx(0.15 / 2)
        assert result.scores["B"] == pytest.approx(0.15 / 2 + 0.85 * 0.15 / 2)
        assert sum(result.scores.values()) < 1.0

    def test_edge_weights_ignored(self):
        heavy = build_graph(
            ["A", "B", "C"],
            [{"source": "A", "target": "B", "weight": 100}, {"source": "A", "target": "C", "weight": 1},
             {"source": "B", "target": "A"}, {"source": "C", "target": "A"}],
            directed=True
        )
        scores = pagerank(heavy).scores
        assert scores["B"] == pytest.approx(scores["C"])

    def test_undirected_edges_count_both_ways(self):
        graph = build_graph(["A", "B", "C"], [{"source": "A", "target": "B"}, {"source": "B", "target": "C"}])
        scores = pagerank(graph, tolerance=1e-10).scores

        assert scores["A"] == pytest.approx(scores["C"])
        assert scores["B"] > scores["A"]
        assert sum(scores.values()) == pytest.approx(1.0)

    def test_matches_networkit_reference(self):
        graph = _cycle_with_chord()
        result = pagerank(graph, tolerance=1e-10, max_iterations=1000)

        nk_graph, mapper = to_networkit(graph)
        reference = nk.centrality.PageRank(nk_graph, damp=0.85, tol=1e-12)
        reference.run()
        expected = reference.scores()

        for node_id, score in result.scores.items():
            assert score == pytest.approx(expected[mapper.get_internal(node_id)], abs=1e-6)

    def test_iteration_cap_reports_non_convergence(self):
        result = pagerank(_cycle_with_chord(), max_iterations=2, tolerance=1e-12)

        assert isinstance(result, PageRankResult)
        assert not result.converged
        assert result.iterations == 2
        assert len(result.scores) == 4

    def test_zero_damping_is_uniform(self):
        result = pagerank(_cycle_with_chord(), damping_factor=0.0)
        for score in result.scores.values():
            assert score == pytest.approx(0.25)

    def test_empty_graph(self):
        result = pagerank(build_graph([], []))
        assert result == PageRankResult(scores={}, iterations=0, converged=True)

    @pytest.mark.parametrize("kwargs", [
        {"damping_factor": 1.5},
        {"damping_factor": -0.1},
        {"max_iterations": 0},
        {"tolerance": 0},
    ])
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(ConfigurationError):
            pagerank(_cycle_with_chord(), **kwargs)


class TestEigenvectorCentrality:
    """Test eigenvector centrality."""

    def test_hub_dominates(self):
        # The a-b edge closes a triangle so the power iteration does not
        # oscillate as it would on a bipartite star
        graph = build_graph(
            ["hub", "a", "b", "c"],
            [{"source": "hub", "target": leaf} for leaf in ("a", "b", "c")]
            + [{"source": "a", "target": "b"}]
        )
        scores = eigenvector_centrality(graph, iterations=100)

        assert max(scores, key=scores.get) == "hub"
        assert scores["a"] == pytest.approx(scores["b"])
        assert scores["a"] > scores["c"]

    def test_unit_norm(self):
        scores = eigenvector_centrality(_cycle_with_chord(), iterations=100)
        norm = math.sqrt(sum(v * v for v in scores.values()))
        assert norm == pytest.approx(1.0)

    def test_weights_scale_contributions(self):
        graph = build_graph(
            ["A", "B", "C"],
            [
                {"source": "A", "target": "B", "weight": 5},
                {"source": "A", "target": "C", "weight": 1},
                {"source": "B", "target": "A"},
                {"source": "C", "target": "A"},
            ],
            directed=True
        )
        scores = eigenvector_centrality(graph)
        assert scores["B"] > scores["C"]

    def test_dag_collapses_to_zero(self):
        graph = build_graph(["A", "B"], [{"source": "A", "target": "B"}], directed=True)
        scores = eigenvector_centrality(graph, iterations=5)
        assert scores == {"A": 0.0, "B": 0.0}

    def test_no_edges(self):
        scores = eigenvector_centrality(build_graph(["A", "B"], []))
        assert scores == {"A": 0.0, "B": 0.0}

    def test_empty_graph(self):
        assert eigenvector_centrality(build_graph([], [])) == {}

    def test_invalid_iterations(self):
        with pytest.raises(ConfigurationError):
            eigenvector_centrality(_cycle_with_chord(), iterations=0)
