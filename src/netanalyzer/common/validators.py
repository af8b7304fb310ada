"""
Input validation utilities for the netanalyzer library.

Validation runs before graph construction so that malformed input is
reported at the boundary rather than deep inside an algorithm.
"""

from typing import Optional
import warnings

import polars as pl

from .exceptions import ValidationError


def validate_edgelist_dataframe(
    df: pl.DataFrame,
    source_col: str = "source",
    target_col: str = "target",
    weight_col: Optional[str] = None,
    edge_id_col: Optional[str] = None,
    allow_negative_weights: bool = True,
    allow_self_loops: bool = True
) -> None:
    """
    Validate an edge list DataFrame for graph construction.

    Checks that the DataFrame has the required columns, no null node ids,
    a numeric weight column and unique edge ids.

    Parameters
    ----------
    df : pl.DataFrame
        Edge list DataFrame to validate
    source_col : str, default "source"
        Name of the source node column
    target_col : str, default "target"
        Name of the target node column
    weight_col : str, optional
        Name of the edge weight column (if present)
    edge_id_col : str, optional
        Name of the edge identifier column (if present)
    allow_negative_weights : bool, default True
        Whether negative weights are accepted. Only Bellman-Ford gives
        meaningful results on them, but they are legal graph data.
    allow_self_loops : bool, default True
        Whether to allow edges from a node to itself

    Raises
    ------
    ValidationError
        If the DataFrame fails any validation checks

    Examples
    --------
    >>> df = pl.DataFrame({
    ...     "source": ["A", "B", "C"],
    ...     "target": ["B", "C", "A"],
    ...     "weight": [1.0, 2.0, 1.5]
    ... })
    >>> validate_edgelist_dataframe(df, weight_col="weight")
    """
    required_cols = [source_col, target_col]
    optional_cols = [col for col in (weight_col, edge_id_col) if col is not None]

    missing_cols = [col for col in required_cols + optional_cols if col not in df.columns]
    if missing_cols:
        raise ValidationError(
            f"Missing required columns: {missing_cols}",
            field="columns",
            details={"available_columns": df.columns, "missing": missing_cols}
        )

    if df.is_empty():
        return

    for col in required_cols:
        null_count = df[col].null_count()
        if null_count > 0:
            raise ValidationError(
                f"Column contains {null_count} null values",
                field=col,
                details={"null_count": null_count, "total_rows": len(df)}
            )

    if weight_col is not None:
        weight_series = df[weight_col]

        if not weight_series.dtype.is_numeric():
            raise ValidationError(
                f"Weight column must be numeric, got {weight_series.dtype}",
                field=weight_col,
                details={"dtype": str(weight_series.dtype)}
            )

        null_count = weight_series.null_count()
        if null_count > 0:
            raise ValidationError(
                f"Weight column contains {null_count} null values",
                field=weight_col,
                details={"null_count": null_count}
            )

        if not allow_negative_weights:
            min_weight = weight_series.min()
            if min_weight is not None and min_weight < 0:
                negative_count = int((weight_series < 0).sum())
                raise ValidationError(
                    f"Weight column contains {negative_count} negative values. "
                    f"Minimum weight: {min_weight}",
                    field=weight_col,
                    details={"min_weight": min_weight, "negative_count": negative_count}
                )

    if edge_id_col is not None:
        id_series = df[edge_id_col]
        if id_series.null_count() > 0:
            raise ValidationError(
                "Edge id column contains null values",
                field=edge_id_col
            )
        duplicate_count = len(id_series) - id_series.n_unique()
        if duplicate_count > 0:
            raise ValidationError(
                f"Edge id column contains {duplicate_count} duplicate ids",
                field=edge_id_col,
                details={"duplicate_count": duplicate_count}
            )

    if not allow_self_loops:
        self_loop_count = int((df[source_col] == df[target_col]).sum())
        if self_loop_count > 0:
            raise ValidationError(
                f"Found {self_loop_count} self-loops (edges from node to itself)",
                field="edges",
                details={"self_loop_count": self_loop_count, "allow_self_loops": False}
            )

    # Parallel edges are legal; warn only when they dominate
    total_rows = len(df)
    unique_pairs = df.select([source_col, target_col]).n_unique()
    if unique_pairs < total_rows * 0.5:
        duplicate_ratio = 1 - (unique_pairs / total_rows)
        warnings.warn(
            f"High proportion of parallel edges ({duplicate_ratio:.1%}). "
            "Consider aggregating edge weights before building the graph."
        )
