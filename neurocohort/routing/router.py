"""
Signal file routing.

Raw ECG exports carry the subject identifier at a fixed position near the
end of the filename. Files of cohort subjects are routed to a bucket
matching their neuropathy outcome; every other file is left out.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import polars as pl

logger = logging.getLogger(__name__)


class Bucket(str, Enum):
    """Destination category of a routed signal file."""

    HEALTHY = "healthy"
    NEUROPATHY = "neuropathy"

    @classmethod
    def for_label(cls, neuropathy_outcome: bool) -> "Bucket":
        return cls.NEUROPATHY if neuropathy_outcome else cls.HEALTHY


@dataclass(frozen=True)
class IdWindow:
    """
    Position of the subject identifier in a filename stem.

    The identifier is `length` characters long and ends `end_offset`
    characters before the end of the stem. The default matches names like
    ``ecg_CD0001_rest.xml``.
    """

    end_offset: int = 5
    length: int = 6

    def slice(self, stem: str) -> Optional[str]:
        """Cut the identifier out of a stem, or None if it is too short."""
        end = len(stem) - self.end_offset
        start = end - self.length
        if start < 0:
            return None
        return stem[start:end]


@dataclass(frozen=True)
class RoutingDecision:
    """A signal file and the bucket it is copied to."""

    source_path: Path
    patient_id: str
    bucket: Bucket


def extract_subject_id(path: Union[str, Path], window: IdWindow = IdWindow()) -> Optional[str]:
    """Extract the uppercased subject identifier embedded in a filename."""
    subject_id = window.slice(Path(path).stem)
    if subject_id is None:
        return None
    return subject_id.upper()


def validate_filenames(
    file_paths: Iterable[Union[str, Path]], window: IdWindow = IdWindow()
) -> List[Path]:
    """
    Find filenames that do not follow the identifier convention.

    A name is rejected when its stem is too short for the window or the
    windowed characters are not all alphanumeric.

    Returns:
        Paths that do not match, in input order
    """
    invalid = []
    for path in file_paths:
        path = Path(path)
        subject_id = window.slice(path.stem)
        if subject_id is None or not subject_id.isalnum():
            invalid.append(path)

    if invalid:
        logger.warning(
            f"{len(invalid)} filenames do not match the identifier window "
            f"(end_offset={window.end_offset}, length={window.length}), "
            f"e.g. {invalid[0].name}"
        )
    return invalid


def plan_routes(
    file_paths: Iterable[Union[str, Path]],
    cohort: pl.DataFrame,
    window: IdWindow = IdWindow(),
) -> List[RoutingDecision]:
    """
    Route each signal file of a cohort subject to its bucket.

    Files whose identifier is not in the cohort are dropped silently.

    Args:
        file_paths: Signal files to route
        cohort: Cohort table with patient_id and neuropathy_outcome
        window: Identifier position in the filename

    Returns:
        Routing decisions in input order
    """
    labels = dict(
        zip(
            cohort.get_column("patient_id").str.to_uppercase().to_list(),
            cohort.get_column("neuropathy_outcome").to_list(),
        )
    )

    paths = [Path(p) for p in file_paths]
    decisions = []
    for path in paths:
        subject_id = extract_subject_id(path, window)
        label = labels.get(subject_id) if subject_id is not None else None
        if label is None:
            logger.debug(f"Skipping {path.name}: no cohort subject for {subject_id!r}")
            continue
        decisions.append(RoutingDecision(path, subject_id, Bucket.for_label(label)))

    logger.info(f"Routed {len(decisions):,} of {len(paths):,} signal files")
    return decisions


def route_files(
    file_paths: Iterable[Union[str, Path]],
    cohort: pl.DataFrame,
    window: IdWindow = IdWindow(),
) -> Dict[Path, Bucket]:
    """
    Map each cohort subject's signal file to its bucket.

    Returns:
        Dict of source path to Bucket, in input order
    """
    return {d.source_path: d.bucket for d in plan_routes(file_paths, cohort, window)}


def routing_plan(decisions: Iterable[RoutingDecision]) -> pl.DataFrame:
    """Tabulate routing decisions as source_file, patient_id, bucket."""
    rows = [
        {
            "source_file": str(d.source_path),
            "patient_id": d.patient_id,
            "bucket": d.bucket.value,
        }
        for d in decisions
    ]
    return pl.DataFrame(
        rows,
        schema={"source_file": pl.Utf8, "patient_id": pl.Utf8, "bucket": pl.Utf8},
    )


def list_signal_files(signals_dir: Union[str, Path], pattern: str = "*") -> List[Path]:
    """
    List signal files in a directory, sorted by name.

    Raises:
        FileNotFoundError: If the directory does not exist
    """
    signals_dir = Path(signals_dir)
    if not signals_dir.is_dir():
        raise FileNotFoundError(f"Signal directory not found: {signals_dir}")

    files = sorted(p for p in signals_dir.glob(pattern) if p.is_file())
    logger.info(f"Found {len(files):,} signal files in {signals_dir}")
    return files
