"""Error taxonomy for the download and extraction stage."""

from __future__ import annotations

from pathlib import Path


class RelpickError(Exception):
    """Base class for every failure relpick reports to its caller."""


class DownloadError(RelpickError):
    """The transfer could not complete (network, HTTP status, interrupted stream)."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class DownloadCancelledError(DownloadError):
    """The caller asked to stop between two chunks of the stream."""


class ChecksumMismatchError(RelpickError):
    def __init__(self, filename: str, expected: str, actual: str) -> None:
        super().__init__(f"Checksum mismatch for {filename}: expected {expected}, got {actual}")
        self.filename = filename
        self.expected = expected
        self.actual = actual


class ArchiveError(RelpickError):
    """The downloaded archive could not be read or holds no usable artifact."""


class UnsafeArchiveError(ArchiveError):
    """An archive member would land outside the extraction root."""

    def __init__(self, archive: str, member: str, reason: str) -> None:
        super().__init__(f"Refusing to extract {archive}: {member!r} {reason}")
        self.archive = archive
        self.member = member
        self.reason = reason


class FilesystemError(RelpickError):
    """Local filesystem failure; the message is the underlying OSError text."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path

    @classmethod
    def from_os_error(cls, exc: OSError, path: Path | None = None) -> "FilesystemError":
        return cls(str(exc), path=path)


class ReleaseLookupError(RelpickError):
    """The release descriptor could not be fetched or decoded."""
