"""
Tests for graph construction functionality.

Covers building graphs from records and Polars edge lists, CSV loading,
conversion to NetworkIt and graph info.
"""

import os
import tempfile
import warnings

import pytest
import polars as pl
import networkit as nk

from netanalyzer.common.exceptions import (
    DataFormatError,
    GraphConstructionError,
    ValidationError
)
from netanalyzer.network.construction import (
    build_graph,
    build_graph_from_edgelist,
    get_graph_info,
    to_networkit
)
from netanalyzer.network.graph import Edge, Node


class TestBuildGraph:
    """Test construction from node and edge records."""

    def test_from_plain_records(self):
        graph = build_graph(
            ["A", "B", "C"],
            [
                {"source": "A", "target": "B", "weight": 2.0},
                {"source": "B", "target": "C"},
            ],
            directed=True
        )

        assert graph.directed
        assert graph.node_ids == ["A", "B", "C"]
        assert [edge.id for edge in graph.edges.values()] == ["e0", "e1"]
        assert graph.get_edge("e1").weight == 1.0

    def test_from_mappings_with_metadata(self):
        graph = build_graph(
            [{"id": "0xa", "label": "Exchange", "attributes": {"kind": "cex"}}, {"id": "0xb"}],
            [{"id": "tx1", "source": "0xa", "target": "0xb", "attributes": {"block": 12}}]
        )

        assert graph.get_node("0xa").label == "Exchange"
        assert graph.get_node("0xa").attributes["kind"] == "cex"
        assert graph.get_node("0xb").label == "0xb"
        assert graph.get_edge("tx1").attributes["block"] == 12

    def test_from_model_objects(self):
        graph = build_graph([Node("A"), Node("B")], [Edge("x", "A", "B", 3.0)])
        assert graph.get_edge("x").weight == 3.0

    def test_dangling_edge(self):
        with pytest.raises(GraphConstructionError):
            build_graph(["A"], [{"source": "A", "target": "B"}])

    def test_missing_keys(self):
        with pytest.raises(ValidationError, match="missing 'target'"):
            build_graph(["A"], [{"source": "A"}])
        with pytest.raises(ValidationError, match="missing 'id'"):
            build_graph([{"label": "x"}], [])

    def test_unsupported_record_type(self):
        with pytest.raises(ValidationError, match="Unsupported node record type"):
            build_graph([42], [])


class TestBuildGraphFromEdgelist:
    """Test construction from Polars edge lists."""

    def setup_method(self):
        self.edges = pl.DataFrame({
            "from": ["0xa", "0xb", "0xa", "0xc"],
            "to": ["0xb", "0xc", "0xc", "0xa"],
            "value": [1.5, 2.0, 0.5, 3.0],
            "block": [10, 11, 12, 13]
        })
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        import shutil
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_weighted_directed(self):
        graph = build_graph_from_edgelist(
            self.edges, source_col="from", target_col="to", weight_col="value", directed=True
        )

        assert graph.number_of_nodes() == 3
        assert graph.number_of_edges() == 4
        assert graph.node_ids == ["0xa", "0xb", "0xc"]
        assert graph.get_edge("e0").weight == 1.5
        assert graph.has_edge("0xc", "0xa")
        assert not graph.has_edge("0xb", "0xa")

    def test_unweighted_defaults_to_one(self):
        graph = build_graph_from_edgelist(self.edges, source_col="from", target_col="to")
        assert all(edge.weight == 1.0 for edge in graph.edges.values())

    def test_extra_columns_become_attributes(self):
        graph = build_graph_from_edgelist(
            self.edges, source_col="from", target_col="to", weight_col="value"
        )
        assert graph.get_edge("e2").attributes["block"] == 12
        assert "value" not in graph.get_edge("e2").attributes

    def test_edge_id_column(self):
        df = self.edges.with_columns(pl.Series("tx", ["t1", "t2", "t3", "t4"]))
        graph = build_graph_from_edgelist(df, source_col="from", target_col="to", edge_id_col="tx")
        assert graph.get_edge("t3").source == "0xa"

    def test_parallel_rows_stay_parallel(self):
        df = pl.DataFrame({"source": ["A", "A", "B"], "target": ["B", "B", "C"], "weight": [1.0, 2.0, 1.0]})
        graph = build_graph_from_edgelist(df, weight_col="weight")
        assert graph.number_of_edges() == 3
        assert graph.total_weight() == 4.0

    def test_node_table_adds_isolated_nodes(self):
        nodes = pl.DataFrame({
            "node_id": ["0xd", "0xa"],
            "label": ["Cold wallet", "Exchange"],
            "risk": [0.1, 0.9]
        })
        graph = build_graph_from_edgelist(
            self.edges, source_col="from", target_col="to", nodes=nodes
        )

        assert graph.node_ids == ["0xd", "0xa", "0xb", "0xc"]
        assert graph.get_node("0xd").label == "Cold wallet"
        assert graph.get_node("0xa").attributes["risk"] == 0.9
        assert graph.neighbors("0xd") == []

    def test_node_table_missing_id_column(self):
        with pytest.raises(ValidationError, match="missing column 'node_id'"):
            build_graph_from_edgelist(
                self.edges, source_col="from", target_col="to",
                nodes=pl.DataFrame({"id": ["0xa"]})
            )

    def test_drop_self_loops(self):
        df = pl.DataFrame({"source": ["A", "A", "B"], "target": ["A", "B", "C"]})
        graph = build_graph_from_edgelist(df, allow_self_loops=False)
        assert graph.number_of_edges() == 2
        assert not graph.has_edge("A", "A")

    def test_empty_edgelist_warns(self):
        df = pl.DataFrame({"source": [], "target": []}, schema={"source": pl.Utf8, "target": pl.Utf8})
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            graph = build_graph_from_edgelist(df, directed=True)
            assert any("Empty edge list" in str(item.message) for item in w)
        assert graph.is_empty()
        assert graph.directed

    def test_integer_ids_become_strings(self):
        df = pl.DataFrame({"source": [1, 2], "target": [2, 3]})
        graph = build_graph_from_edgelist(df)
        assert graph.node_ids == ["1", "2", "3"]

    def test_missing_column(self):
        with pytest.raises(ValidationError, match="Missing required columns"):
            build_graph_from_edgelist(self.edges)

    def test_from_csv(self):
        path = os.path.join(self.temp_dir, "edges.csv")
        self.edges.write_csv(path)

        graph = build_graph_from_edgelist(
            path, source_col="from", target_col="to", weight_col="value", directed=True
        )
        assert graph.number_of_edges() == 4
        assert graph.get_edge("e3").weight == 3.0

    def test_missing_csv(self):
        with pytest.raises(DataFormatError, match="Edge list file not found"):
            build_graph_from_edgelist(os.path.join(self.temp_dir, "nope.csv"))

    def test_invalid_input_type(self):
        with pytest.raises(DataFormatError, match="Invalid edgelist type"):
            build_graph_from_edgelist([("A", "B")])


class TestToNetworkit:
    """Test conversion to NetworkIt."""

    def test_directed_conversion(self):
        graph = build_graph(
            ["A", "B", "C"],
            [{"source": "A", "target": "B", "weight": 2.5}, {"source": "B", "target": "C"}],
            directed=True
        )
        nk_graph, mapper = to_networkit(graph)

        assert nk_graph.isDirected()
        assert nk_graph.isWeighted()
        assert nk_graph.numberOfNodes() == 3
        assert nk_graph.numberOfEdges() == 2
        a, b = mapper.get_internal("A"), mapper.get_internal("B")
        assert nk_graph.hasEdge(a, b)
        assert not nk_graph.hasEdge(b, a)
        assert nk_graph.weight(a, b) == 2.5

    def test_undirected_conversion(self):
        graph = build_graph(["A", "B"], [{"source": "A", "target": "B"}])
        nk_graph, mapper = to_networkit(graph)

        assert not nk_graph.isDirected()
        assert nk_graph.hasEdge(mapper.get_internal("B"), mapper.get_internal("A"))

    def test_component_count_matches_networkit(self):
        graph = build_graph(
            ["A", "B", "C", "D", "E"],
            [{"source": "A", "target": "B"}, {"source": "C", "target": "D"}]
        )
        nk_graph, _ = to_networkit(graph)

        cc = nk.components.ConnectedComponents(nk_graph)
        cc.run()
        assert cc.numberOfComponents() == 3

    def test_empty_graph(self):
        nk_graph, mapper = to_networkit(build_graph([], []))
        assert nk_graph.numberOfNodes() == 0
        assert mapper.is_empty()


class TestGetGraphInfo:
    """Test structural summary information."""

    def test_info(self):
        graph = build_graph(
            ["A", "B", "C", "D"],
            [
                {"source": "A", "target": "B"},
                {"source": "B", "target": "A"},
                {"source": "C", "target": "C", "weight": -1.0},
            ]
        )
        info = get_graph_info(graph)

        assert info["num_nodes"] == 4
        assert info["num_edges"] == 3
        assert not info["directed"]
        assert info["self_loops"] == 1
        assert info["parallel_edges"] == 1
        assert info["isolated_nodes"] == 1
        assert info["has_negative_weights"]
        assert info["total_weight"] == 1.0

    def test_directed_pairs_not_parallel(self):
        graph = build_graph(
            ["A", "B"],
            [{"source": "A", "target": "B"}, {"source": "B", "target": "A"}],
            directed=True
        )
        assert get_graph_info(graph)["parallel_edges"] == 0
