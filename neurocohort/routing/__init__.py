"""
Signal file routing.

Maps raw ECG files to the healthy/neuropathy buckets of the cohort and
copies them into place.
"""

from neurocohort.routing.router import (
    Bucket,
    IdWindow,
    RoutingDecision,
    extract_subject_id,
    list_signal_files,
    plan_routes,
    route_files,
    routing_plan,
    validate_filenames,
)
from neurocohort.routing.copier import RoutingCollisionError, copy_routed_files

__all__ = [
    "Bucket",
    "IdWindow",
    "RoutingCollisionError",
    "RoutingDecision",
    "copy_routed_files",
    "extract_subject_id",
    "list_signal_files",
    "plan_routes",
    "route_files",
    "routing_plan",
    "validate_filenames",
]
