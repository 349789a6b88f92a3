"""Release download service shared by the CLI commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from relpick_core.checksums import (
    ChecksumEntry,
    algorithm_for_name,
    find_manifest_name,
    find_sidecar_name,
    parse_manifest,
    parse_sidecar,
)
from relpick_core.config import AppConfig
from relpick_core.download import DownloadResult, fetch
from relpick_core.errors import RelpickError
from relpick_core.http import make_opener
from relpick_core.logging_setup import get_logger
from relpick_resolver import (
    Ambiguous,
    ArchiveKind,
    PlatformProfile,
    Release,
    ReleaseAsset,
    Resolution,
    Unique,
    resolve_release,
    select_tagged,
)

from .client import fetch_release, fetch_text


ProgressCallback = Callable[[str], None]

logger = get_logger("service")


class SelectionError(RelpickError):
    """No single asset could be chosen; ``resolution`` explains why when resolved automatically."""

    def __init__(self, message: str, resolution: Resolution | None = None) -> None:
        super().__init__(message)
        self.resolution = resolution


@dataclass(frozen=True)
class DownloadOutcome:
    tag: str
    profile: PlatformProfile
    asset: ReleaseAsset
    result: DownloadResult


def choose_asset(
    release: Release,
    profile: PlatformProfile,
    select: str | None = None,
    preference: Sequence[ArchiveKind] = (),
) -> ReleaseAsset:
    if select:
        name = select_tagged(release.tag, select, release.asset_names)
        asset = release.asset_named(name) if name else None
        if asset is None:
            raise SelectionError(f"No asset found for {select}")
        return asset

    resolution = resolve_release(release, profile, preference)
    if isinstance(resolution, Unique):
        asset = release.asset_named(resolution.name)
        if asset is not None:
            return asset
    if isinstance(resolution, Ambiguous):
        names = ", ".join(resolution.names)
        raise SelectionError(
            f"{len(resolution.candidates)} assets match {profile.describe()} equally: {names}",
            resolution,
        )
    raise SelectionError(f"Cannot find an asset that matches your system {profile.describe()}", resolution)


def load_checksum_manifest(
    release: Release,
    asset: ReleaseAsset,
    cfg: AppConfig | None = None,
) -> list[ChecksumEntry] | None:
    """Read the sidecar checksum of ``asset`` or, failing that, the release manifest."""
    cfg = cfg or AppConfig()
    names = release.asset_names

    sidecar = find_sidecar_name(names, asset.name)
    if sidecar is not None:
        text = fetch_text(release.asset_named(sidecar).download_url, network=cfg.network)
        return parse_sidecar(text, asset.name, algorithm_for_name(sidecar))

    manifest = find_manifest_name(names)
    if manifest is not None:
        text = fetch_text(release.asset_named(manifest).download_url, network=cfg.network)
        return parse_manifest(text, algorithm_for_name(manifest))
    return None


def download_release_asset(
    repo: str,
    destination_dir: Path,
    tag: str | None = None,
    select: str | None = None,
    executable_name: str | None = None,
    cfg: AppConfig | None = None,
    profile: PlatformProfile | None = None,
    progress: ProgressCallback | None = None,
) -> DownloadOutcome:
    cfg = cfg or AppConfig()
    progress = progress or (lambda _msg: None)
    profile = profile or PlatformProfile.detect(libc_override=cfg.match.libc_override)

    progress("Resolving release assets")
    release = fetch_release(repo, tag, network=cfg.network)
    progress(f"Detected target {profile.describe()}")

    asset = choose_asset(release, profile, select=select, preference=cfg.preference)
    logger.info(
        f"selected {asset.name} from {repo}@{release.tag}",
        extra={"event": "asset_selected", "asset": asset.name},
    )

    manifest = None
    if cfg.download.verify_checksums:
        progress("Looking for checksums")
        manifest = load_checksum_manifest(release, asset, cfg)

    progress(f"Downloading {asset.name}")
    result = fetch(
        asset,
        destination_dir,
        manifest,
        opener=make_opener(cfg.network, timeout=cfg.download.timeout_s),
        chunk_size=cfg.chunk_size,
        extract=cfg.download.extract_archives,
        executable_name=executable_name,
    )

    progress("Download complete")
    return DownloadOutcome(tag=release.tag, profile=profile, asset=asset, result=result)
