"""
Indicator normalization and neuropathy label derivation.

Survey columns in the source exports hold free-text yes/no answers. They are
normalized to a three-valued indicator (yes / no / unknown) and the
neuropathy outcome is derived as an OR across the available symptom flags,
or unknown when no flag is available.
"""

import logging
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Union

import polars as pl

logger = logging.getLogger(__name__)

YES_VALUES = ("yes", "YES", "Yes")
NO_VALUES = ("no", "NO", "No")
MISSING_VALUES = ("N/A", "")


class Tristate(Enum):
    """Three-valued indicator."""

    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, value: Union["Tristate", bool, None]) -> "Tristate":
        """Convert a bool/None (or an existing Tristate) to a Tristate."""
        if isinstance(value, Tristate):
            return value
        if value is None:
            return cls.UNKNOWN
        return cls.YES if value else cls.NO

    def to_optional(self) -> Optional[bool]:
        if self is Tristate.UNKNOWN:
            return None
        return self is Tristate.YES


def parse_indicator(raw: Optional[str]) -> Tristate:
    """
    Parse one raw survey literal.

    Raises:
        ValueError: If the literal is not part of the vocabulary
    """
    if raw is None:
        return Tristate.UNKNOWN
    value = raw.strip()
    if value in YES_VALUES:
        return Tristate.YES
    if value in NO_VALUES:
        return Tristate.NO
    if value in MISSING_VALUES:
        return Tristate.UNKNOWN
    raise ValueError(f"Unrecognized indicator value: {raw!r}")


def derive_label(
    indicators: Iterable[Union[Tristate, bool, None]],
) -> Optional[bool]:
    """
    Derive the neuropathy outcome from a subject's symptom indicators.

    Returns None when every indicator is unknown (or there are none),
    True when any indicator is yes, and False otherwise.
    """
    states = [Tristate.coerce(i) for i in indicators]
    if all(s is Tristate.UNKNOWN for s in states):
        return None
    return any(s is Tristate.YES for s in states)


def label_expression(columns: Sequence[str]) -> pl.Expr:
    """
    Polars equivalent of derive_label over Boolean indicator columns.

    Nulls are unknown. Note that pl.any_horizontal follows Kleene logic
    (False OR null -> null), so unknowns are filled with False explicitly
    once at least one indicator is known.
    """
    if not columns:
        raise ValueError("At least one symptom column is required")

    cols = [pl.col(c) for c in columns]
    return (
        pl.when(pl.all_horizontal([c.is_null() for c in cols]))
        .then(pl.lit(None, dtype=pl.Boolean))
        .otherwise(pl.any_horizontal([c.fill_null(False) for c in cols]))
    )


def _indicator_expression(column: str) -> pl.Expr:
    value = pl.col(column).cast(pl.Utf8).str.strip_chars()
    return (
        pl.when(value.is_in(list(YES_VALUES)))
        .then(pl.lit(True))
        .when(value.is_in(list(NO_VALUES)))
        .then(pl.lit(False))
        .otherwise(pl.lit(None, dtype=pl.Boolean))
        .alias(column)
    )


def find_unrecognized(table: pl.DataFrame, columns: Sequence[str]) -> pl.DataFrame:
    """
    List literal values outside the indicator vocabulary.

    Returns:
        DataFrame with columns column, value, count (one row per distinct
        offending value, in column order then first appearance)
    """
    known = list(YES_VALUES + NO_VALUES + MISSING_VALUES)
    frames: List[pl.DataFrame] = []

    for column in dict.fromkeys(columns):
        if column not in table.columns or table.schema[column] == pl.Boolean:
            continue
        values = table.select(pl.col(column).cast(pl.Utf8).str.strip_chars().alias("value"))
        bad = values.filter(pl.col("value").is_not_null() & ~pl.col("value").is_in(known))
        if bad.height == 0:
            continue
        counts = (
            bad.group_by("value", maintain_order=True)
            .agg(pl.len().cast(pl.Int64).alias("count"))
            .with_columns(pl.lit(column).alias("column"))
            .select(["column", "value", "count"])
        )
        frames.append(counts)

    if not frames:
        return pl.DataFrame(
            schema={"column": pl.Utf8, "value": pl.Utf8, "count": pl.Int64}
        )
    return pl.concat(frames, how="vertical")


def normalize_indicators(table: pl.DataFrame, columns: Sequence[str]) -> pl.DataFrame:
    """
    Map indicator columns through the yes/no/N-A vocabulary.

    Unrecognized literals are logged as data-quality warnings and become
    null. Columns that are already Boolean are left untouched; configured
    columns missing from the table are added as all-null.

    Args:
        table: Raw subject table (string columns)
        columns: Indicator columns to normalize

    Returns:
        Table with the indicator columns as nullable Boolean
    """
    for row in find_unrecognized(table, columns).iter_rows(named=True):
        logger.warning(
            f"Unrecognized value {row['value']!r} in column '{row['column']}' "
            f"({row['count']} rows) - treating as missing"
        )

    exprs = []
    for column in dict.fromkeys(columns):
        if column not in table.columns:
            logger.warning(f"Column '{column}' not found - treating all values as missing")
            exprs.append(pl.lit(None, dtype=pl.Boolean).alias(column))
        elif table.schema[column] == pl.Boolean:
            continue
        else:
            exprs.append(_indicator_expression(column))

    if not exprs:
        return table
    return table.with_columns(exprs)
