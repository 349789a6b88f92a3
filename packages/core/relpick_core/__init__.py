"""Core services for verified asset downloads, archive extraction, settings, and logging."""

from .checksums import ChecksumEntry, DigestAlgorithm, parse_manifest, parse_sidecar
from .config import AppConfig, load_config, save_config
from .download import DownloadResult, FetchState, fetch
from .errors import (
    ArchiveError,
    ChecksumMismatchError,
    DownloadCancelledError,
    DownloadError,
    FilesystemError,
    RelpickError,
    ReleaseLookupError,
    UnsafeArchiveError,
)

__all__ = [
    "AppConfig",
    "ArchiveError",
    "ChecksumEntry",
    "ChecksumMismatchError",
    "DigestAlgorithm",
    "DownloadCancelledError",
    "DownloadError",
    "DownloadResult",
    "FetchState",
    "FilesystemError",
    "RelpickError",
    "ReleaseLookupError",
    "UnsafeArchiveError",
    "fetch",
    "load_config",
    "parse_manifest",
    "parse_sidecar",
    "save_config",
]
