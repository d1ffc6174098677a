from __future__ import annotations

import hashlib
import zipfile
import zlib
from typing import BinaryIO

from .constants import DEFAULT_READ_SIZE
from .errors import DigestError


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def digest_stream(fh: BinaryIO, name: str, read_size: int = DEFAULT_READ_SIZE) -> str:
    """Hash an open binary stream chunk by chunk and return the hex digest.

    The stream is consumed to EOF but never closed here; callers own the handle.
    Any failure while reading (including zip CRC errors surfaced on the last
    read of an archive member) is reported as ``DigestError(name, cause)``.
    """
    h = hashlib.sha256()
    try:
        for chunk in iter(lambda: fh.read(read_size), b""):
            h.update(chunk)
    except (OSError, ValueError, EOFError, zlib.error, zipfile.BadZipFile) as exc:
        raise DigestError(name, exc) from exc
    return h.hexdigest()


def digest_file(path: str, read_size: int = DEFAULT_READ_SIZE) -> str:
    try:
        fh = open(path, "rb")
    except OSError as exc:
        raise DigestError(path, exc) from exc
    with fh:
        return digest_stream(fh, path, read_size)
