"""
End-to-end run: build the cohort, route the signal files, copy them.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

import polars as pl

from neurocohort.cohort.builder import NeuropathyCohortBuilder, write_cohort
from neurocohort.config.schema import NeuroCohortConfig
from neurocohort.routing import (
    Bucket,
    copy_routed_files,
    list_signal_files,
    plan_routes,
    routing_plan,
    validate_filenames,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outputs of one pipeline run."""

    cohort: pl.DataFrame
    routes: Dict[Path, Bucket]
    exclusion_stats: Dict[str, int]
    overlap: pl.DataFrame
    copy_counts: Dict[str, int] = field(default_factory=dict)


def route_cohort_files(
    config: NeuroCohortConfig,
    cohort: pl.DataFrame,
    copy_files: bool = True,
) -> Tuple[Dict[Path, Bucket], Dict[str, int]]:
    """
    Route the configured signal files for a cohort and write the plan.

    Args:
        config: Loaded configuration
        cohort: Cohort table with patient_id and neuropathy_outcome
        copy_files: Copy files into the bucket directories (False for a dry run)

    Returns:
        Tuple of (routes, copy counts)
    """
    files = list_signal_files(config.routing.signals_dir, config.routing.pattern)
    validate_filenames(files, config.routing.window)

    decisions = plan_routes(files, cohort, config.routing.window)
    routes = {d.source_path: d.bucket for d in decisions}

    routes_path = Path(config.output.routes_path)
    routes_path.parent.mkdir(parents=True, exist_ok=True)
    routing_plan(decisions).write_csv(routes_path)
    logger.info(f"Saved routing plan to {routes_path}")

    copy_counts: Dict[str, int] = {}
    if copy_files:
        copy_counts = copy_routed_files(
            routes,
            config.output.destinations,
            overwrite=config.routing.overwrite,
        )

    return routes, copy_counts


def run_pipeline(
    config: NeuroCohortConfig,
    copy_files: bool = True,
    output_path: Optional[str] = None,
) -> PipelineResult:
    """
    Build the cohort, write it, then route and copy the signal files.

    Args:
        config: Loaded configuration
        copy_files: Copy files into the bucket directories
        output_path: Cohort CSV path (default: from config)

    Returns:
        PipelineResult
    """
    builder = NeuropathyCohortBuilder(config)
    cohort, stats = builder.build_cohort()
    write_cohort(cohort, output_path or config.output.cohort_path)

    routes, copy_counts = route_cohort_files(config, cohort, copy_files=copy_files)

    return PipelineResult(
        cohort=cohort,
        routes=routes,
        exclusion_stats=stats,
        overlap=builder.overlap,
        copy_counts=copy_counts,
    )
