"""
neurocohort: diabetic neuropathy ECG cohort builder

Builds a labeled study cohort from the CDED and CPD clinical exports and
sorts the subjects' raw ECG files into healthy/neuropathy folders.

Key Features:
- Yes/No/N-A survey answers normalized to a three-valued indicator
- Neuropathy outcome: OR across available symptom flags, else unknown
- Inclusion: diabetic, ECG available, known outcome (CDED: baseline visit)
- CDED subjects take priority over CPD subjects with the same identifier
- Signal files routed by the identifier embedded in their filename

Usage:
    from neurocohort import build_labeled_cohort

    result = build_labeled_cohort("neurocohort.yaml")
    print(f"N={result.cohort.height}, routed={len(result.routes)}")
"""

from typing import Optional

__version__ = "0.1.0"

from neurocohort.labels import Tristate, derive_label, normalize_indicators
from neurocohort.datasets import CDED_SCHEMA, CPD_SCHEMA, DatasetSchema, DatasetTag
from neurocohort.cohort.builder import (
    CohortEntry,
    NeuropathyCohortBuilder,
    filter_cohort,
    merge_cohorts,
)
from neurocohort.routing import Bucket, IdWindow, RoutingDecision, route_files
from neurocohort.pipeline import PipelineResult, run_pipeline


def build_labeled_cohort(
    config_path: str,
    copy_files: bool = True,
    output_path: Optional[str] = None,
) -> PipelineResult:
    """
    Run the full cohort build and file routing from a config file.

    Args:
        config_path: Path to neurocohort.yaml
        copy_files: Copy routed files into the bucket directories
        output_path: Optional cohort CSV path overriding the config

    Returns:
        PipelineResult with the cohort, routes and exclusion statistics
    """
    from neurocohort.config.loader import load_config

    config = load_config(config_path)
    return run_pipeline(config, copy_files=copy_files, output_path=output_path)


__all__ = [
    "__version__",
    # Main API
    "build_labeled_cohort",
    "run_pipeline",
    "PipelineResult",
    # Core operations
    "Tristate",
    "derive_label",
    "normalize_indicators",
    "filter_cohort",
    "merge_cohorts",
    "route_files",
    # Types
    "DatasetTag",
    "DatasetSchema",
    "CDED_SCHEMA",
    "CPD_SCHEMA",
    "CohortEntry",
    "NeuropathyCohortBuilder",
    "Bucket",
    "IdWindow",
    "RoutingDecision",
]
