from __future__ import annotations

import os
import re
from pathlib import Path
from typing import List, Tuple

from .constants import ARCHIVE_PREFIX, ARCHIVE_SUFFIX, PROCESS_ID_PATTERN, ROOT_LEAF_SENTINEL
from .errors import PathContainmentError, PathResolutionError


def _raw_segments(logical: str) -> List[str]:
    p = (logical or "").replace("\\", "/")
    if os.sep != "/":
        p = p.replace(os.sep, "/")
    return [q for q in p.split("/") if q not in ("", ".")]


def split_logical(logical: str) -> List[str]:
    """Split a logical path into its segments.

    Rules:
    - Accept both '/' and the OS separator
    - Drop empty and '.' segments
    - Collapse '..' against the preceding segment; leading '..' are kept
    """
    out: List[str] = []
    for q in _raw_segments(logical):
        if q == ".." and out and out[-1] != "..":
            out.pop()
            continue
        out.append(q)
    return out


def norm_arc_path(p: str) -> str:
    """Normalize archive member names to a canonical forward-slash form.

    Rejects '..' segments so a member can never point outside the extraction root.
    """
    parts = _raw_segments(p)
    for q in parts:
        if q == "..":
            raise ValueError("Path may not contain '..'")
    return "/".join(parts)


def find_process_id(segments: List[str], pattern: re.Pattern = PROCESS_ID_PATTERN) -> str:
    """Return the deepest segment naming a process folder.

    The requested folder may sit at any depth below the process folder, so the
    scan runs from the leaf towards the root and the first match wins.
    """
    for seg in reversed(segments):
        if pattern.match(seg):
            return seg
    raise PathResolutionError("Process folder could not be identified in path: " + "/".join(segments))


def leaf_name(segments: List[str], process_id: str) -> str:
    if not segments or segments[-1] == process_id:
        return ROOT_LEAF_SENTINEL
    return segments[-1]


def archive_name(segments: List[str], process_id: str) -> str:
    return f"{ARCHIVE_PREFIX}{leaf_name(segments, process_id)}{ARCHIVE_SUFFIX}"


def resolve_under_root(root: Path, logical: str) -> Path:
    """Join ``logical`` onto ``root`` and refuse anything that escapes it."""
    base = Path(root).resolve()
    target = base.joinpath(*split_logical(logical)).resolve()
    if target != base and base not in target.parents:
        raise PathContainmentError(f"Access denied: {logical!r} is outside the source root")
    return target


def resolve_segments(root: Path, logical: str) -> Tuple[Path, List[str]]:
    """Resolve ``logical`` under ``root`` and return the folder with its segments.

    Segments are taken from the resolved folder relative to the resolved root,
    so process id and leaf name always describe the folder that is scanned.
    """
    base = Path(root).resolve()
    target = resolve_under_root(base, logical)
    return target, list(target.relative_to(base).parts)
