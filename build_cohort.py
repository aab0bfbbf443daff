#!/usr/bin/env -S uv run
# /// script
# requires-python = ">=3.10"
# dependencies = [
#     "polars",
#     "pydantic>=2",
#     "pyyaml",
#     "click",
# ]
# ///
"""
Neuropathy Cohort Builder

Builds the labeled CDED/CPD cohort and routes the subjects' ECG files into
healthy/neuropathy folders.

Usage:
    uv run build_cohort.py [--config neurocohort.yaml] [--output cohort.csv] [--dry-run]
"""

import logging
from typing import Optional

from neurocohort.config.loader import load_config
from neurocohort.cohort.overlap import summarize_cohort
from neurocohort.pipeline import run_pipeline

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def main(config_path: str, output_path: Optional[str] = None, dry_run: bool = False) -> None:
    config = load_config(config_path)
    result = run_pipeline(config, copy_files=not dry_run, output_path=output_path)

    logger.info("=" * 60)
    logger.info("COHORT SUMMARY")
    logger.info("=" * 60)
    for row in summarize_cohort(result.cohort).iter_rows(named=True):
        logger.info(
            f"{row['dataset']}: {row['n_subjects']} subjects "
            f"({row['n_neuropathy']} neuropathy, {row['n_healthy']} healthy)"
        )
    logger.info(f"Routed signal files: {len(result.routes):,}")
    logger.info("=" * 60)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Build the neuropathy cohort and route ECG files")
    parser.add_argument(
        "--config",
        default="neurocohort.yaml",
        help="Path to neurocohort config YAML (default: neurocohort.yaml)"
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output path for the cohort CSV (default: from config)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Write the cohort and routing plan without copying files"
    )

    args = parser.parse_args()

    main(
        config_path=args.config,
        output_path=args.output,
        dry_run=args.dry_run,
    )
