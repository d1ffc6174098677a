class LaudoError(Exception):
    """Base class for laudo-specific errors."""


# Path handling
class PathResolutionError(LaudoError):
    pass


class PathContainmentError(LaudoError):
    pass


class FolderNotFoundError(LaudoError):
    pass


# Manifest construction
class ScanError(LaudoError):
    pass


class EmptyManifestError(LaudoError):
    pass


class DigestError(LaudoError):
    """Raised when a byte stream could not be read to completion while hashing."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"Failed to hash {path}: {cause}")
        self.path = path
        self.cause = cause


# Archive I/O
class ArchiveWriteError(LaudoError):
    pass


class ArchiveLocateError(LaudoError):
    pass


class ArchiveNotFoundError(ArchiveLocateError):
    pass


class ArchiveReadError(LaudoError):
    pass


class ManifestMissingError(LaudoError):
    pass
