"""
Tests for input validation functions.

Covers valid edge lists (should pass) and malformed ones (should raise
ValidationError), plus the parallel-edge warning.
"""

import warnings

import pytest
import polars as pl

from netanalyzer.common.exceptions import ValidationError
from netanalyzer.common.validators import validate_edgelist_dataframe


class TestValidateEdgelistDataframe:
    """Test edge list DataFrame validation."""

    def test_valid_basic_edgelist(self):
        """Test validation of valid basic edge list."""
        df = pl.DataFrame({
            "source": ["A", "B", "C"],
            "target": ["B", "C", "A"]
        })

        validate_edgelist_dataframe(df)

    def test_valid_edgelist_with_weights(self):
        """Test validation of edge list with weights."""
        df = pl.DataFrame({
            "source": ["A", "B", "C"],
            "target": ["B", "C", "A"],
            "weight": [1.0, 2.5, 0.8]
        })

        validate_edgelist_dataframe(df, weight_col="weight")

    def test_valid_edgelist_custom_columns(self):
        """Test validation with custom column names."""
        df = pl.DataFrame({
            "from": ["0xa", "0xb", "0xc"],
            "to": ["0xb", "0xc", "0xa"],
            "value": [1, 2, 3],
            "tx_hash": ["h1", "h2", "h3"]
        })

        validate_edgelist_dataframe(
            df,
            source_col="from",
            target_col="to",
            weight_col="value",
            edge_id_col="tx_hash"
        )

    def test_empty_dataframe_with_columns(self):
        """Test that an empty edge list with the right columns is accepted."""
        df = pl.DataFrame({"source": [], "target": []}, schema={"source": pl.Utf8, "target": pl.Utf8})

        validate_edgelist_dataframe(df)

    def test_missing_required_columns(self):
        """Test validation fails for missing required columns."""
        df = pl.DataFrame({"source": ["A", "B"]})

        with pytest.raises(ValidationError, match="Missing required columns"):
            validate_edgelist_dataframe(df)

    def test_missing_optional_columns(self):
        """Test validation fails when a named optional column is missing."""
        df = pl.DataFrame({
            "source": ["A", "B"],
            "target": ["B", "A"]
        })

        with pytest.raises(ValidationError, match="Missing required columns"):
            validate_edgelist_dataframe(df, weight_col="nonexistent_weight")

    def test_null_values_in_source(self):
        df = pl.DataFrame({
            "source": ["A", None, "C"],
            "target": ["B", "C", "A"]
        })

        with pytest.raises(ValidationError, match="Column contains.*null values"):
            validate_edgelist_dataframe(df)

    def test_null_values_in_target(self):
        df = pl.DataFrame({
            "source": ["A", "B", "C"],
            "target": ["B", None, "A"]
        })

        with pytest.raises(ValidationError, match="Column contains.*null values"):
            validate_edgelist_dataframe(df)

    def test_invalid_weight_type(self):
        """Test validation fails for non-numeric weight column."""
        df = pl.DataFrame({
            "source": ["A", "B", "C"],
            "target": ["B", "C", "A"],
            "weight": ["high", "low", "medium"]
        })

        with pytest.raises(ValidationError, match="Weight column must be numeric"):
            validate_edgelist_dataframe(df, weight_col="weight")

    def test_null_weights(self):
        df = pl.DataFrame({
            "source": ["A", "B", "C"],
            "target": ["B", "C", "A"],
            "weight": [1.0, None, 3.0]
        })

        with pytest.raises(ValidationError, match="Weight column contains 1 null values"):
            validate_edgelist_dataframe(df, weight_col="weight")

    def test_negative_weights_allowed_by_default(self):
        """Negative weights are legal data (Bellman-Ford input)."""
        df = pl.DataFrame({
            "source": ["A", "B", "C"],
            "target": ["B", "C", "A"],
            "weight": [1.0, -2.0, 3.0]
        })

        validate_edgelist_dataframe(df, weight_col="weight")

    def test_negative_weights_rejected_when_disallowed(self):
        df = pl.DataFrame({
            "source": ["A", "B", "C"],
            "target": ["B", "C", "A"],
            "weight": [1.0, -2.0, 3.0]
        })

        with pytest.raises(ValidationError, match="1 negative values"):
            validate_edgelist_dataframe(df, weight_col="weight", allow_negative_weights=False)

    def test_duplicate_edge_ids(self):
        df = pl.DataFrame({
            "source": ["A", "B"],
            "target": ["B", "C"],
            "edge_id": ["e1", "e1"]
        })

        with pytest.raises(ValidationError, match="1 duplicate ids"):
            validate_edgelist_dataframe(df, edge_id_col="edge_id")

    def test_null_edge_ids(self):
        df = pl.DataFrame({
            "source": ["A", "B"],
            "target": ["B", "C"],
            "edge_id": ["e1", None]
        })

        with pytest.raises(ValidationError, match="Edge id column contains null values"):
            validate_edgelist_dataframe(df, edge_id_col="edge_id")

    def test_self_loops(self):
        df = pl.DataFrame({
            "source": ["A", "B"],
            "target": ["A", "C"]
        })

        validate_edgelist_dataframe(df)
        with pytest.raises(ValidationError, match="Found 1 self-loops"):
            validate_edgelist_dataframe(df, allow_self_loops=False)

    def test_parallel_edges_warning(self):
        """A majority of parallel edges triggers a warning, not an error."""
        df = pl.DataFrame({
            "source": ["A"] * 5,
            "target": ["B"] * 5
        })

        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            validate_edgelist_dataframe(df)
            assert len(w) == 1
            assert "parallel edges" in str(w[0].message)

    def test_few_parallel_edges_no_warning(self):
        df = pl.DataFrame({
            "source": ["A", "A", "B", "C"],
            "target": ["B", "B", "C", "A"]
        })

        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            validate_edgelist_dataframe(df)
            assert len(w) == 0
