"""
Neuropathy Cohort Builder.

Builds the labeled study cohort from the CDED and CPD exports:
inclusion filtering per dataset, then a priority merge in which CDED
subjects win over CPD subjects with the same identifier.
"""

import polars as pl
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from neurocohort.datasets import (
    DatasetSchema,
    DatasetTag,
    read_dataset,
    to_subject_records,
)
from neurocohort.labels import find_unrecognized
from neurocohort.cohort.overlap import compute_overlap, summarize_cohort

logger = logging.getLogger(__name__)

COHORT_COLUMNS = ["patient_id", "dataset", "neuropathy_outcome"]


@dataclass(frozen=True)
class CohortEntry:
    """One subject of the merged cohort."""

    patient_id: str
    dataset: DatasetTag
    neuropathy_outcome: bool


def iter_cohort_entries(cohort: pl.DataFrame) -> Iterator[CohortEntry]:
    """Iterate over a cohort table as CohortEntry records."""
    for row in cohort.select(COHORT_COLUMNS).iter_rows(named=True):
        yield CohortEntry(
            patient_id=row["patient_id"],
            dataset=DatasetTag(row["dataset"]),
            neuropathy_outcome=row["neuropathy_outcome"],
        )


def _inclusion_steps(schema: DatasetSchema) -> List[Tuple[str, pl.Expr]]:
    """Ordered inclusion predicates for one dataset."""
    steps = [
        ("id", pl.col("patient_id").is_not_null() & (pl.col("patient_id") != "")),
        ("diabetes", pl.col("diabetes").fill_null(False)),
        ("ecg", pl.col("ecg_available").fill_null(False)),
    ]
    if schema.visit_column:
        steps.append(("visit", pl.col("visit").fill_null("") == schema.visit_value))
    steps.append(("label", pl.col("neuropathy_outcome").is_not_null()))
    return steps


def filter_cohort(
    records: pl.DataFrame,
    schema: DatasetSchema,
    stats: Optional[Dict[str, int]] = None,
) -> pl.DataFrame:
    """
    Keep subjects that meet the inclusion criteria.

    A subject is kept when diabetes status is true, an ECG is available and
    the neuropathy outcome is known. Datasets with a visit marker also
    require the qualifying visit. Missing values fail the predicate.

    Args:
        records: Subject records from to_subject_records()
        schema: Schema of the dataset the records come from
        stats: Optional dict receiving row counts after each step,
            keyed "<dataset>_after_<step>"

    Returns:
        Filtered records, one row per subject, in original order
    """
    prefix = schema.tag.value
    cohort = records
    for step, predicate in _inclusion_steps(schema):
        cohort = cohort.filter(predicate)
        logger.debug(f"{schema.name} after {step} filter: {cohort.height:,}")
        if stats is not None:
            stats[f"{prefix}_after_{step}"] = cohort.height

    deduped = cohort.unique(subset=["patient_id"], keep="first", maintain_order=True)
    if deduped.height < cohort.height:
        logger.warning(
            f"{schema.name}: {cohort.height - deduped.height} repeated subject "
            "identifiers after filtering - keeping first occurrence"
        )
    if stats is not None:
        stats[f"{prefix}_final"] = deduped.height

    return deduped


def merge_cohorts(primary: pl.DataFrame, secondary: pl.DataFrame) -> pl.DataFrame:
    """
    Merge two cohorts, dropping secondary subjects already in primary.

    Identifiers are compared after uppercasing both sides. The result
    keeps primary rows first, then the remaining secondary rows, each in
    their original order.

    Returns:
        DataFrame with columns patient_id, dataset, neuropathy_outcome
    """

    def _select(table: pl.DataFrame) -> pl.DataFrame:
        return table.select(
            pl.col("patient_id").cast(pl.Utf8).str.to_uppercase(),
            pl.col("dataset").cast(pl.Utf8),
            pl.col("neuropathy_outcome").cast(pl.Boolean),
        )

    primary = _select(primary)
    secondary = _select(secondary)

    primary_ids = primary.get_column("patient_id").drop_nulls().to_list()
    if primary_ids:
        remaining = secondary.filter(~pl.col("patient_id").is_in(primary_ids))
    else:
        remaining = secondary

    dropped = secondary.height - remaining.height
    if dropped:
        logger.info(f"Dropped {dropped} secondary subjects already in primary cohort")

    merged = pl.concat([primary, remaining], how="vertical")
    return merged.unique(subset=["patient_id"], keep="first", maintain_order=True)


class NeuropathyCohortBuilder:
    """
    Build the labeled neuropathy cohort from the configured exports.

    Steps per dataset:
    1. Read the CSV export
    2. Normalize indicator columns and derive the neuropathy outcome
    3. Apply inclusion filters

    Then the CDED cohort is merged with the CPD cohort, CDED taking
    priority for shared identifiers.

    Output schema (3 columns):
    - patient_id, dataset, neuropathy_outcome
    """

    def __init__(self, config):
        """
        Initialize cohort builder.

        Args:
            config: NeuroCohortConfig with dataset paths and schemas
        """
        self.config = config
        self.overlap: Optional[pl.DataFrame] = None
        self._tables: Dict[DatasetTag, pl.DataFrame] = {}

    @property
    def schemas(self) -> Dict[DatasetTag, DatasetSchema]:
        return {
            DatasetTag.CDED: self.config.cded.to_schema(DatasetTag.CDED),
            DatasetTag.CPD: self.config.cpd.to_schema(DatasetTag.CPD),
        }

    def _get_table(self, tag: DatasetTag) -> pl.DataFrame:
        """Read (once) the raw export for a dataset."""
        if tag not in self._tables:
            dataset_config = getattr(self.config, tag.value)
            self._tables[tag] = read_dataset(dataset_config.path, self.schemas[tag])
        return self._tables[tag]

    def subject_records(self) -> Dict[DatasetTag, pl.DataFrame]:
        """Normalized subject records for every dataset, unfiltered."""
        return {
            tag: to_subject_records(self._get_table(tag), schema)
            for tag, schema in self.schemas.items()
        }

    def build_cohort(
        self, output_path: Optional[Union[str, Path]] = None
    ) -> Tuple[pl.DataFrame, Dict[str, int]]:
        """
        Build the merged cohort.

        Args:
            output_path: Optional path to save the cohort CSV

        Returns:
            Tuple of (cohort DataFrame, exclusion statistics dict)
        """
        logger.info("=" * 60)
        logger.info("BUILDING NEUROPATHY COHORT")
        logger.info("=" * 60)

        exclusion_stats: Dict[str, int] = {}
        cohorts: Dict[DatasetTag, pl.DataFrame] = {}

        for tag, schema in self.schemas.items():
            raw = self._get_table(tag)
            exclusion_stats[f"{tag.value}_initial"] = raw.height
            exclusion_stats[f"{tag.value}_unrecognized_values"] = int(
                find_unrecognized(raw, schema.indicator_columns)["count"].sum()
            )

            records = to_subject_records(raw, schema)
            cohorts[tag] = filter_cohort(records, schema, exclusion_stats)
            logger.info(
                f"{schema.name}: {raw.height:,} rows -> "
                f"{cohorts[tag].height:,} qualifying subjects"
            )

        self.overlap = compute_overlap(
            {tag.value: cohort for tag, cohort in cohorts.items()}
        )
        for row in self.overlap.iter_rows(named=True):
            logger.info(
                f"Overlap {row['dataset_a']}/{row['dataset_b']}: "
                f"{row['n_shared']} shared of {row['n_a']}/{row['n_b']}"
            )

        cohort = merge_cohorts(cohorts[DatasetTag.CDED], cohorts[DatasetTag.CPD])
        exclusion_stats["excluded_overlap"] = (
            cohorts[DatasetTag.CDED].height + cohorts[DatasetTag.CPD].height - cohort.height
        )
        exclusion_stats["final"] = cohort.height
        exclusion_stats["final_neuropathy"] = cohort.filter(pl.col("neuropathy_outcome")).height

        logger.info("=" * 60)
        logger.info("COHORT BUILDING COMPLETE")
        logger.info("=" * 60)
        for row in summarize_cohort(cohort).iter_rows(named=True):
            logger.info(
                f"{row['dataset']}: {row['n_subjects']} subjects, "
                f"{row['n_neuropathy']} neuropathy, {row['n_healthy']} healthy"
            )

        if output_path:
            write_cohort(cohort, output_path)

        return cohort, exclusion_stats


def write_cohort(cohort: pl.DataFrame, output_path: Union[str, Path]) -> Path:
    """Write the cohort table to CSV, creating parent directories."""
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    cohort.select(COHORT_COLUMNS).write_csv(output_file)
    logger.info(f"Saved cohort to {output_file}")
    return output_file


def read_cohort(path: Union[str, Path]) -> pl.DataFrame:
    """
    Read a cohort CSV written by write_cohort().

    Raises:
        FileNotFoundError: If the cohort file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"Cohort file not found: {path}\n"
            "Run 'neurocohort build-cohort' to generate it."
        )

    table = pl.read_csv(path, infer_schema_length=0)
    return table.select(
        pl.col("patient_id"),
        pl.col("dataset"),
        (pl.col("neuropathy_outcome").str.to_lowercase() == "true").alias("neuropathy_outcome"),
    )


def build_cohort(
    config_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
) -> Tuple[pl.DataFrame, Dict[str, int]]:
    """
    Build the neuropathy cohort from a YAML configuration.

    Convenience function that loads the config, creates a
    NeuropathyCohortBuilder and builds the cohort.

    Args:
        config_path: Path to neurocohort.yaml
        output_path: Optional path to save the cohort CSV (default: from config)

    Returns:
        Tuple of (cohort DataFrame, exclusion statistics)
    """
    from neurocohort.config.loader import load_config

    config = load_config(config_path)
    builder = NeuropathyCohortBuilder(config)
    return builder.build_cohort(output_path=output_path or config.output.cohort_path)
