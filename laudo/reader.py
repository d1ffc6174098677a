from __future__ import annotations

import enum
import logging
import zipfile
import zlib
from typing import Optional

from .constants import MANIFEST_ENCODING, MANIFEST_ENTRY_NAME, ROOT_HASH_ENTRY_NAME
from .errors import ArchiveReadError, ManifestMissingError
from .hashutil import digest_stream


logger = logging.getLogger(__name__)


class ReaderState(enum.Enum):
    SCANNING = "scanning"
    FOUND_ROOT_HASH = "found_root_hash"
    FOUND_MANIFEST = "found_manifest"
    DRAINED = "drained"


class RootHashReader:
    """Recover an archive's root hash by visiting its members in order.

    The first member named ``root_hash.txt`` or ``hashes.txt`` decides the
    outcome: a stored root hash is returned as-is, a manifest is re-hashed from
    its raw bytes. Members before the match are never read. Nothing is
    extracted to disk.
    """

    def __init__(self, path: str):
        self.path = path
        self.zf: Optional[zipfile.ZipFile] = None
        self.state = ReaderState.SCANNING
        self.matched_entry: Optional[str] = None
        self.root_hash: Optional[str] = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self.zf is not None:
            return
        try:
            self.zf = zipfile.ZipFile(self.path, "r")
        except (OSError, zipfile.BadZipFile) as exc:
            raise ArchiveReadError(f"Cannot open archive {self.path}: {exc}") from exc

    def close(self):
        if self.zf is not None:
            self.zf.close()
            self.zf = None

    def read(self) -> str:
        if self.zf is None:
            raise RuntimeError("Archive not open")
        if self.state is not ReaderState.SCANNING:
            if self.root_hash is None:
                raise ManifestMissingError(f"{MANIFEST_ENTRY_NAME} not found inside {self.path}")
            return self.root_hash
        for info in self.zf.infolist():
            if info.filename == ROOT_HASH_ENTRY_NAME:
                try:
                    with self.zf.open(info) as fh:
                        value = fh.read().decode(MANIFEST_ENCODING).strip()
                except (OSError, EOFError, zlib.error, zipfile.BadZipFile, UnicodeDecodeError) as exc:
                    raise ArchiveReadError(f"Cannot read {info.filename} from {self.path}: {exc}") from exc
                self._finish(ReaderState.FOUND_ROOT_HASH, info.filename, value)
                return self.root_hash
            if info.filename == MANIFEST_ENTRY_NAME:
                try:
                    fh = self.zf.open(info)
                except (OSError, zipfile.BadZipFile) as exc:
                    raise ArchiveReadError(f"Cannot open {info.filename} in {self.path}: {exc}") from exc
                with fh:
                    digest = digest_stream(fh, f"{self.path}:{info.filename}")
                self._finish(ReaderState.FOUND_MANIFEST, info.filename, digest)
                return self.root_hash
        self.state = ReaderState.DRAINED
        raise ManifestMissingError(f"{MANIFEST_ENTRY_NAME} not found inside {self.path}")

    def _finish(self, state: ReaderState, entry: str, value: str):
        self.state = state
        self.matched_entry = entry
        self.root_hash = value
        logger.debug("Root hash for %s taken from %s", self.path, entry)


def read_root_hash(path: str) -> str:
    with RootHashReader(path) as r:
        return r.read()
