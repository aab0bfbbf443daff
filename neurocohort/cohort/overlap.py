"""
Cross-dataset overlap counts and cohort summaries.

Only aggregated counts are produced here.
"""

from itertools import combinations
from typing import Dict

import polars as pl


def _unique_ids(table: pl.DataFrame) -> set:
    return set(
        table.select(pl.col("patient_id").cast(pl.Utf8).str.strip_chars().str.to_uppercase())
        .drop_nulls()
        .get_column("patient_id")
        .to_list()
    )


def compute_overlap(tables: Dict[str, pl.DataFrame]) -> pl.DataFrame:
    """
    Count shared subject identifiers between every pair of datasets.

    Args:
        tables: Mapping of dataset name to a table with a patient_id column

    Returns:
        DataFrame with columns dataset_a, dataset_b, n_a, n_b, n_shared
        (one row per unordered pair, in the mapping's order)
    """
    ids = {name: _unique_ids(table) for name, table in tables.items()}

    rows = []
    for a, b in combinations(ids, 2):
        rows.append(
            {
                "dataset_a": a,
                "dataset_b": b,
                "n_a": len(ids[a]),
                "n_b": len(ids[b]),
                "n_shared": len(ids[a] & ids[b]),
            }
        )

    return pl.DataFrame(
        rows,
        schema={
            "dataset_a": pl.Utf8,
            "dataset_b": pl.Utf8,
            "n_a": pl.Int64,
            "n_b": pl.Int64,
            "n_shared": pl.Int64,
        },
    )


def summarize_cohort(cohort: pl.DataFrame) -> pl.DataFrame:
    """
    Per-dataset subject and label counts, with a trailing total row.

    Returns:
        DataFrame with columns dataset, n_subjects, n_neuropathy, n_healthy
    """
    per_dataset = (
        cohort.group_by("dataset", maintain_order=True)
        .agg(
            pl.len().cast(pl.Int64).alias("n_subjects"),
            pl.col("neuropathy_outcome").sum().cast(pl.Int64).alias("n_neuropathy"),
        )
        .with_columns((pl.col("n_subjects") - pl.col("n_neuropathy")).alias("n_healthy"))
    )

    total = pl.DataFrame(
        {
            "dataset": ["total"],
            "n_subjects": [cohort.height],
            "n_neuropathy": [int(cohort.get_column("neuropathy_outcome").sum())],
        },
        schema={"dataset": pl.Utf8, "n_subjects": pl.Int64, "n_neuropathy": pl.Int64},
    ).with_columns((pl.col("n_subjects") - pl.col("n_neuropathy")).alias("n_healthy"))

    return pl.concat([per_dataset.select(total.columns), total], how="vertical")
