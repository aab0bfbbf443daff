"""
Neuropathy Cohort Builder Module.

Provides inclusion filtering, the priority merge of the CDED and CPD
cohorts, and overlap/summary counts.
"""

from neurocohort.cohort.builder import (
    CohortEntry,
    NeuropathyCohortBuilder,
    build_cohort,
    filter_cohort,
    iter_cohort_entries,
    merge_cohorts,
    read_cohort,
    write_cohort,
)
from neurocohort.cohort.overlap import compute_overlap, summarize_cohort

__all__ = [
    "CohortEntry",
    "NeuropathyCohortBuilder",
    "build_cohort",
    "compute_overlap",
    "filter_cohort",
    "iter_cohort_entries",
    "merge_cohorts",
    "read_cohort",
    "summarize_cohort",
    "write_cohort",
]
