from __future__ import annotations

import datetime
import logging
import os
import tempfile
import threading
import zipfile
from dataclasses import dataclass
from typing import List, Optional

from .constants import (
    MANIFEST_ENCODING,
    MANIFEST_ENTRY_NAME,
    ROOT_HASH_ENTRY_NAME,
    ZIP_COMPRESSLEVEL,
)
from .errors import ArchiveWriteError
from .manifest import Manifest, build_manifest
from .pathutil import norm_arc_path


logger = logging.getLogger(__name__)

LOCK_POOL_SIZE = 64
_path_locks: List[threading.Lock] = [threading.Lock() for _ in range(LOCK_POOL_SIZE)]


def _lock_for(path: str) -> threading.Lock:
    # Paths hashing to the same slot share a lock.
    key = os.path.normcase(os.path.abspath(path))
    return _path_locks[hash(key) % LOCK_POOL_SIZE]


@dataclass
class WrittenArchive:
    path: str
    root_hash: str
    file_count: int


class ArchiveWriter:
    """Zip writer that only publishes the archive once it is complete.

    Members are streamed into a temporary file next to ``out_path``;
    ``finalize`` closes the container and moves it into place. Leaving the
    context without finalizing discards the temporary file.
    """

    def __init__(self, out_path: str, compresslevel: int = ZIP_COMPRESSLEVEL):
        self.out_path = out_path
        self.compresslevel = compresslevel
        self.zf: Optional[zipfile.ZipFile] = None
        self._tmp_path: Optional[str] = None
        self.names: List[str] = []
        self.finalized = False

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self.zf is not None:
            return
        out_dir = os.path.dirname(os.path.abspath(self.out_path))
        try:
            os.makedirs(out_dir, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".laudo-", suffix=".zip.part", dir=out_dir)
            os.close(fd)
            self._tmp_path = tmp
            self.zf = zipfile.ZipFile(
                tmp,
                mode="w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=self.compresslevel,
                strict_timestamps=False,
            )
        except OSError as exc:
            self._discard()
            raise ArchiveWriteError(f"Cannot create archive {self.out_path}: {exc}") from exc

    def close(self):
        if not self.finalized:
            self._discard()

    def add_file(self, arc_path: str, fs_path: str):
        """Stream a filesystem file into the archive under ``arc_path``."""
        if self.zf is None:
            raise RuntimeError("Archive not open")
        name = norm_arc_path(arc_path)
        try:
            self.zf.write(fs_path, arcname=name)
        except OSError as exc:
            raise ArchiveWriteError(f"Failed to add {fs_path} to {self.out_path}: {exc}") from exc
        self.names.append(name)

    def add_text(self, arc_path: str, data: bytes):
        if self.zf is None:
            raise RuntimeError("Archive not open")
        name = norm_arc_path(arc_path)
        try:
            self.zf.writestr(name, data)
        except OSError as exc:
            raise ArchiveWriteError(f"Failed to add {name} to {self.out_path}: {exc}") from exc
        self.names.append(name)

    def finalize(self):
        if self.zf is None:
            raise RuntimeError("Archive not open")
        try:
            self.zf.close()
            self.zf = None
            os.chmod(self._tmp_path, 0o644)
            os.replace(self._tmp_path, self.out_path)
        except OSError as exc:
            raise ArchiveWriteError(f"Failed to commit archive {self.out_path}: {exc}") from exc
        self._tmp_path = None
        self.finalized = True

    def _discard(self):
        if self.zf is not None:
            try:
                self.zf.close()
            except (OSError, ValueError) as exc:
                logger.warning("Failed to close partial archive for %s: %s", self.out_path, exc)
            self.zf = None
        if self._tmp_path is not None:
            try:
                os.unlink(self._tmp_path)
            except FileNotFoundError:
                pass
            except OSError as exc:
                logger.warning("Failed to remove partial archive %s: %s", self._tmp_path, exc)
            self._tmp_path = None


def current_year() -> str:
    return str(datetime.date.today().year)


def destination_dir(destination_base: str, process_id: str, year: Optional[str] = None) -> str:
    return os.path.join(destination_base, year or current_year(), process_id)


def write_archive(
    out_path: str,
    source_dir: str,
    files: List[str],
    *,
    manifest: Optional[Manifest] = None,
    store_root_hash: bool = False,
) -> WrittenArchive:
    """Package ``files`` (absolute paths under ``source_dir``) plus their manifest.

    Members keep their layout relative to ``source_dir``. The manifest is
    appended last as ``hashes.txt``; with ``store_root_hash`` a
    ``root_hash.txt`` member is written just before it so readers can take the
    fast path.

    Raises:
        ArchiveWriteError: On any I/O failure; no archive is left at ``out_path``.
        DigestError: If a file cannot be hashed while building the manifest.
    """
    if manifest is None:
        manifest = build_manifest(files)
    manifest_bytes = manifest.to_bytes()
    root_hash = manifest.root_hash()

    with _lock_for(out_path):
        with ArchiveWriter(out_path) as w:
            for fs_path in files:
                w.add_file(os.path.relpath(fs_path, source_dir), fs_path)
            if store_root_hash:
                w.add_text(ROOT_HASH_ENTRY_NAME, root_hash.encode(MANIFEST_ENCODING))
            w.add_text(MANIFEST_ENTRY_NAME, manifest_bytes)
            w.finalize()

    logger.info("Wrote %s (%d file(s), root hash %s)", out_path, len(files), root_hash)
    return WrittenArchive(path=out_path, root_hash=root_hash, file_count=len(files))
