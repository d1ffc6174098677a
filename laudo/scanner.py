from __future__ import annotations

import logging
import os
from typing import Callable, List

from .constants import DEFAULT_MAX_DEPTH, HASHLOG_PREFIX, LISTING_FILENAME
from .errors import EmptyManifestError, ScanError


logger = logging.getLogger(__name__)

Predicate = Callable[[str], bool]


def is_eligible(name: str) -> bool:
    """Default selection: hash logs and the tool-generated file listing."""
    return name.startswith(HASHLOG_PREFIX) or name == LISTING_FILENAME


def _walk(dir_path: str, depth: int, max_depth: int, predicate: Predicate, out: List[str]) -> None:
    if depth > max_depth:
        return
    try:
        with os.scandir(dir_path) as it:
            entries = list(it)
    except OSError as exc:
        raise ScanError(f"Cannot list directory {dir_path}: {exc}") from exc
    for ent in entries:
        full = os.path.join(dir_path, ent.name)
        if ent.is_dir(follow_symlinks=False):
            _walk(full, depth + 1, max_depth, predicate, out)
        elif predicate(ent.name):
            out.append(full)


def scan_eligible_files(
    target: str,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    predicate: Predicate = is_eligible,
) -> List[str]:
    """Collect eligible files below ``target`` in enumeration order.

    Args:
        target: Folder to search. Depth 0 is this folder itself.
        max_depth: Deepest directory level still listed; anything below is skipped.
        predicate: Called with each file name; True selects the file.

    Returns:
        Absolute file paths, unsorted.

    Raises:
        ScanError: If ``target`` is not a directory or a directory cannot be listed.
        EmptyManifestError: If no file matches.
    """
    target = os.path.abspath(target)
    if not os.path.isdir(target):
        raise ScanError(f"Not a directory: {target}")
    found: List[str] = []
    _walk(target, 0, max_depth, predicate, found)
    if not found:
        raise EmptyManifestError(
            f"No '{HASHLOG_PREFIX}*' or '{LISTING_FILENAME}' file found under {target}"
        )
    logger.debug("Scanned %s: %d eligible file(s)", target, len(found))
    return found
