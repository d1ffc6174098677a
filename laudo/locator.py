from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

from .constants import YEAR_PARTITION_PATTERN
from .errors import ArchiveLocateError, ArchiveNotFoundError, PathResolutionError
from .pathutil import archive_name, find_process_id, split_logical


logger = logging.getLogger(__name__)

PROBE_INVALID = "invalid"
PROBE_EMPTY = "empty"
PROBE_HAS_ZIP = "hasZip"


@dataclass
class LocatedArchive:
    path: str
    year: str
    process_id: str
    name: str


@dataclass
class ProbeResult:
    status: str
    archive_name: Optional[str] = None
    year: Optional[str] = None


def year_partitions(destination_base: str) -> List[str]:
    """Year directory names under ``destination_base``, newest first."""
    with os.scandir(destination_base) as it:
        years = [e.name for e in it if e.is_dir() and YEAR_PARTITION_PATTERN.match(e.name)]
    years.sort(key=int, reverse=True)
    return years


def _search(destination_base: str, process_id: str, name: str) -> Optional[LocatedArchive]:
    for year in year_partitions(destination_base):
        candidate = os.path.join(destination_base, year, process_id, name)
        if os.path.isfile(candidate):
            return LocatedArchive(path=candidate, year=year, process_id=process_id, name=name)
    return None


def locate_archive(destination_base: str, logical: str) -> LocatedArchive:
    """Find the most recent archive packaged for ``logical``.

    Raises:
        PathResolutionError: If no path segment names a process folder.
        ArchiveLocateError: If the destination base does not exist or cannot be listed.
        ArchiveNotFoundError: If no year partition holds the expected archive.
    """
    segments = split_logical(logical)
    process_id = find_process_id(segments)
    name = archive_name(segments, process_id)
    if not os.path.isdir(destination_base):
        raise ArchiveLocateError(f"Destination base does not exist: {destination_base}")
    try:
        found = _search(destination_base, process_id, name)
    except OSError as exc:
        raise ArchiveLocateError(f"Cannot list {destination_base}: {exc}") from exc
    if found is None:
        raise ArchiveNotFoundError(f"Archive {name} not found for process {process_id}")
    logger.debug("Located %s in partition %s", found.path, found.year)
    return found


def probe(destination_base: str, logical: str) -> ProbeResult:
    """Report whether an archive exists for ``logical`` without opening it."""
    if not logical:
        return ProbeResult(PROBE_INVALID)
    try:
        found = locate_archive(destination_base, logical)
    except PathResolutionError:
        return ProbeResult(PROBE_INVALID)
    except ArchiveNotFoundError:
        return ProbeResult(PROBE_EMPTY)
    except ArchiveLocateError:
        if not os.path.isdir(destination_base):
            return ProbeResult(PROBE_EMPTY)
        raise
    return ProbeResult(PROBE_HAS_ZIP, archive_name=found.name, year=found.year)
