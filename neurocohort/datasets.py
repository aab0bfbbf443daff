"""
Source dataset schemas and loading.

Each study export (CDED, CPD) has its own column layout. A DatasetSchema
describes that layout, and to_subject_records() normalizes a raw table into
the shared subject-record shape used by the cohort builder:

    patient_id, dataset, diabetes, ecg_available, visit, neuropathy_outcome
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

import polars as pl

from neurocohort.labels import label_expression, normalize_indicators

logger = logging.getLogger(__name__)

SUBJECT_COLUMNS = [
    "patient_id",
    "dataset",
    "diabetes",
    "ecg_available",
    "visit",
    "neuropathy_outcome",
]


class DatasetTag(Enum):
    """Source study of a subject record, in merge priority order."""

    CDED = "cded"
    CPD = "cpd"


@dataclass(frozen=True)
class DatasetSchema:
    """Column layout of one source dataset."""

    tag: DatasetTag
    id_column: str
    diabetes_column: str
    ecg_column: str
    symptom_columns: Tuple[str, ...]
    visit_column: Optional[str] = None
    visit_value: Optional[str] = None

    @property
    def indicator_columns(self) -> Tuple[str, ...]:
        """Columns that go through the yes/no/N-A vocabulary."""
        return (self.diabetes_column, self.ecg_column) + tuple(self.symptom_columns)

    @property
    def name(self) -> str:
        return self.tag.name


CDED_SCHEMA = DatasetSchema(
    tag=DatasetTag.CDED,
    id_column="subject_id",
    diabetes_column="diabetes",
    ecg_column="ecg_recorded",
    symptom_columns=("symptom_numbness", "symptom_tingling", "symptom_pain"),
    visit_column="visit",
    visit_value="1",
)

CPD_SCHEMA = DatasetSchema(
    tag=DatasetTag.CPD,
    id_column="PatientID",
    diabetes_column="Diabetes",
    ecg_column="ECG",
    symptom_columns=("Neuropathic_Pain", "Foot_Numbness"),
)


def read_dataset(path: Union[str, Path], schema: DatasetSchema) -> pl.DataFrame:
    """
    Read a dataset export with every column as a string.

    Raises:
        FileNotFoundError: If the export does not exist or is not a file
        ValueError: If the export cannot be parsed as CSV
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"{schema.name} table not found: {path}")

    try:
        table = pl.read_csv(path, infer_schema_length=0)
    except (pl.exceptions.NoDataError, pl.exceptions.ComputeError, OSError) as e:
        raise ValueError(f"{schema.name} table could not be read: {path} ({e})") from e
    table = table.rename({c: c.lstrip("\ufeff").strip() for c in table.columns})
    logger.info(f"Loaded {schema.name} table: {table.height:,} rows from {path}")

    return table


def to_subject_records(table: pl.DataFrame, schema: DatasetSchema) -> pl.DataFrame:
    """
    Normalize a raw dataset table into the shared subject-record shape.

    Identifiers are stripped and uppercased, indicator columns are mapped
    through the vocabulary and the neuropathy outcome is derived from the
    symptom columns.
    """
    table = normalize_indicators(table, schema.indicator_columns)

    if schema.id_column in table.columns:
        patient_id = pl.col(schema.id_column).cast(pl.Utf8).str.strip_chars().str.to_uppercase()
    else:
        logger.warning(f"{schema.name}: id column '{schema.id_column}' not found")
        patient_id = pl.lit(None, dtype=pl.Utf8)

    if schema.visit_column and schema.visit_column in table.columns:
        visit = pl.col(schema.visit_column).cast(pl.Utf8).str.strip_chars()
    else:
        if schema.visit_column:
            logger.warning(f"{schema.name}: visit column '{schema.visit_column}' not found")
        visit = pl.lit(None, dtype=pl.Utf8)

    return table.select(
        patient_id.alias("patient_id"),
        pl.lit(schema.tag.value).alias("dataset"),
        pl.col(schema.diabetes_column).alias("diabetes"),
        pl.col(schema.ecg_column).alias("ecg_available"),
        visit.alias("visit"),
        label_expression(schema.symptom_columns).alias("neuropathy_outcome"),
    )
