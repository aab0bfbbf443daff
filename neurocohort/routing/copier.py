"""
Copy routed signal files into their bucket directories.

Filenames are preserved. Existing destination files are never replaced
silently: an identical file is skipped, a different one is a collision.
"""

import hashlib
import logging
import shutil
from collections import Counter
from pathlib import Path
from typing import Dict, List, Mapping, Tuple, Union

from neurocohort.routing.router import Bucket

logger = logging.getLogger(__name__)


class RoutingCollisionError(Exception):
    """Raised when a routed file would replace a different file."""

    pass


def _sha256(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1 << 20), b""):
            h.update(chunk)
    return h.hexdigest()


def check_collisions(routes: Mapping[Path, Bucket]) -> None:
    """
    Reject routes that put two sources on the same destination name.

    Raises:
        RoutingCollisionError: If two sources share a filename in one bucket
    """
    counts = Counter((bucket, Path(path).name) for path, bucket in routes.items())
    clashes = sorted(f"{bucket.value}/{name}" for (bucket, name), n in counts.items() if n > 1)
    if clashes:
        raise RoutingCollisionError(
            f"{len(clashes)} destination filenames are routed more than once: "
            + ", ".join(clashes)
        )


def copy_routed_files(
    routes: Mapping[Path, Bucket],
    destinations: Mapping[Bucket, Union[str, Path]],
    overwrite: bool = False,
) -> Dict[str, int]:
    """
    Copy each routed file into its bucket directory.

    Args:
        routes: Source path to bucket, from route_files()
        destinations: Directory for each bucket (created if missing)
        overwrite: Replace differing destination files instead of failing

    Returns:
        Counts of copied, unchanged (identical file already present) and
        replaced files

    Raises:
        RoutingCollisionError: On duplicate destination names, or when a
            different file already exists and overwrite is False
    """
    check_collisions(routes)

    dest_dirs = {bucket: Path(destinations[bucket]) for bucket in Bucket}
    for directory in dest_dirs.values():
        directory.mkdir(parents=True, exist_ok=True)

    counts = {"copied": 0, "unchanged": 0, "replaced": 0}
    pending: List[Tuple[Path, Path]] = []
    conflicts: List[Path] = []

    for source, bucket in routes.items():
        source = Path(source)
        target = dest_dirs[bucket] / source.name

        if not target.exists():
            counts["copied"] += 1
        elif _sha256(source) == _sha256(target):
            logger.debug(f"Unchanged: {target}")
            counts["unchanged"] += 1
            continue
        elif overwrite:
            counts["replaced"] += 1
        else:
            conflicts.append(target)
            continue
        pending.append((source, target))

    # Nothing is copied when any destination conflicts
    if conflicts:
        raise RoutingCollisionError(
            f"{len(conflicts)} destination files already exist with different "
            f"content (first: {conflicts[0]})"
        )

    for source, target in pending:
        shutil.copy2(source, target)

    logger.info(
        f"Copied {counts['copied']} files, {counts['unchanged']} unchanged, "
        f"{counts['replaced']} replaced"
    )
    return counts
