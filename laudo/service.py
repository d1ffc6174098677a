"""Request-level operations shared by the HTTP app and the CLI.

Every function takes an explicit :class:`~laudo.config.Settings` and is
all-or-nothing: it either returns a complete result or raises a
:class:`~laudo.errors.LaudoError` (or ``OSError``) without surfacing partial state.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

from .config import Settings
from .constants import DEFAULT_MAX_DEPTH
from .errors import FolderNotFoundError
from .locator import ProbeResult, locate_archive, probe
from .manifest import build_manifest
from .pathutil import archive_name, find_process_id, resolve_segments
from .reader import read_root_hash
from .scanner import Predicate, is_eligible, scan_eligible_files
from .writer import destination_dir, write_archive


logger = logging.getLogger(__name__)


@dataclass
class FolderItem:
    name: str
    is_dir: bool
    relative_path: str


@dataclass
class PackageResult:
    archive_path: str
    root_hash: str
    process_id: str
    file_count: int


@dataclass
class CheckReport:
    archive_path: str
    archived_root_hash: str
    current_root_hash: str

    @property
    def matches(self) -> bool:
        return self.archived_root_hash == self.current_root_hash


def list_folder(settings: Settings, logical: str = "") -> List[FolderItem]:
    """Immediate children of ``logical`` below the source root, sorted by name."""
    target, segments = resolve_segments(settings.source_root, logical)
    if not target.is_dir():
        raise FolderNotFoundError(f"Folder not found: {logical or '/'}")
    with os.scandir(target) as it:
        entries = sorted(it, key=lambda e: e.name)
    return [
        FolderItem(
            name=e.name,
            is_dir=e.is_dir(),
            relative_path="/".join(segments + [e.name]),
        )
        for e in entries
    ]


def package_folder(
    settings: Settings,
    logical: str,
    *,
    store_root_hash: bool = False,
    year: Optional[str] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    predicate: Predicate = is_eligible,
) -> PackageResult:
    """Scan, hash and package one folder into its year-partitioned archive."""
    target, segments = resolve_segments(settings.source_root, logical)
    process_id = find_process_id(segments)

    files = scan_eligible_files(str(target), max_depth=max_depth, predicate=predicate)
    manifest = build_manifest(files)

    out_dir = destination_dir(str(settings.destination_base), process_id, year)
    out_path = os.path.join(out_dir, archive_name(segments, process_id))
    written = write_archive(
        out_path,
        str(target),
        files,
        manifest=manifest,
        store_root_hash=store_root_hash,
    )
    return PackageResult(
        archive_path=written.path,
        root_hash=written.root_hash,
        process_id=process_id,
        file_count=written.file_count,
    )


def retrieve_root_hash(settings: Settings, logical: str) -> str:
    """Root hash of the newest archive packaged for ``logical``."""
    _, segments = resolve_segments(settings.source_root, logical)
    located = locate_archive(str(settings.destination_base), "/".join(segments))
    return read_root_hash(located.path)


def probe_archive(settings: Settings, logical: str) -> ProbeResult:
    if logical:
        _, segments = resolve_segments(settings.source_root, logical)
        logical = "/".join(segments)
    return probe(str(settings.destination_base), logical)


def check_folder(
    settings: Settings,
    logical: str,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    predicate: Predicate = is_eligible,
) -> CheckReport:
    """Compare the archived root hash with one rebuilt from the live folder.

    Manifest lines carry absolute paths, so a match is only possible with the
    same source root that produced the archive.
    """
    target, segments = resolve_segments(settings.source_root, logical)
    located = locate_archive(str(settings.destination_base), "/".join(segments))
    archived = read_root_hash(located.path)
    files = scan_eligible_files(str(target), max_depth=max_depth, predicate=predicate)
    current = build_manifest(files).root_hash()
    if archived != current:
        logger.warning("Root hash mismatch for %s: archived %s, current %s", logical, archived, current)
    return CheckReport(archive_path=located.path, archived_root_hash=archived, current_root_hash=current)
