"""Command-line front-end: release lookup, asset selection, and download."""

from .client import fetch_release, parse_release, parse_repository
from .service import DownloadOutcome, SelectionError, choose_asset, download_release_asset, load_checksum_manifest

__all__ = [
    "DownloadOutcome",
    "SelectionError",
    "choose_asset",
    "download_release_asset",
    "fetch_release",
    "load_checksum_manifest",
    "parse_release",
    "parse_repository",
]
