from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List

from .constants import MANIFEST_ENCODING
from .hashutil import digest_file, sha256_hex


@dataclass(frozen=True)
class ManifestEntry:
    digest: str
    path: str

    def line(self) -> str:
        return f"{self.digest} {self.path}\n"


@dataclass
class Manifest:
    """Ordered per-file digests for one packaged folder.

    The serialized text is the unit of integrity: the root hash binds the exact
    bytes, so reordering, renaming or any whitespace change produces a new one.
    """

    entries: List[ManifestEntry] = field(default_factory=list)

    def add(self, digest: str, path: str) -> None:
        self.entries.append(ManifestEntry(digest=digest, path=path))

    def text(self) -> str:
        return "".join(e.line() for e in self.entries)

    def to_bytes(self) -> bytes:
        return self.text().encode(MANIFEST_ENCODING)

    def root_hash(self) -> str:
        return compute_root_hash(self.to_bytes())

    def __len__(self) -> int:
        return len(self.entries)


def compute_root_hash(manifest_bytes: bytes) -> str:
    return sha256_hex(manifest_bytes)


def build_manifest(paths: Iterable[str], digester: Callable[[str], str] = digest_file) -> Manifest:
    """Digest each file in the given order and collect the results."""
    m = Manifest()
    for p in paths:
        m.add(digester(p), p)
    return m
