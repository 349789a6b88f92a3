"""Streaming download, checksum verification, and extraction of one release asset."""

from __future__ import annotations

import contextlib
import hmac
import http.client
import os
import shutil
import tempfile
import urllib.error
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence

from relpick_resolver.models import ArchiveKind, ReleaseAsset
from relpick_resolver.tokens import strip_archive_extension, tokenize

from .checksums import ChecksumEntry, digest_file, lookup
from .errors import (
    ChecksumMismatchError,
    DownloadCancelledError,
    DownloadError,
    FilesystemError,
    RelpickError,
)
from .extract import decompress_file, extract_archive, find_runnable, make_executable
from .http import StreamOpener, make_opener
from .logging_setup import get_logger


ProgressCallback = Callable[[int, Optional[int]], None]
CancelCheck = Callable[[], bool]
StateCallback = Callable[["FetchState"], None]

DEFAULT_CHUNK_SIZE = 64 * 1024

_NETWORK_ERRORS = (urllib.error.URLError, http.client.HTTPException, OSError, ValueError)

logger = get_logger("download")


class FetchState(str, Enum):
    PENDING = "Pending"
    DOWNLOADING = "Downloading"
    VERIFYING = "Verifying"
    SKIPPED_VERIFICATION = "SkippedVerification"
    EXTRACTING = "Extracting"
    DONE = "Done"
    FAILED = "Failed"


_TRANSITIONS: dict[FetchState, frozenset[FetchState]] = {
    FetchState.PENDING: frozenset({FetchState.DOWNLOADING, FetchState.FAILED}),
    FetchState.DOWNLOADING: frozenset(
        {FetchState.VERIFYING, FetchState.SKIPPED_VERIFICATION, FetchState.FAILED}
    ),
    FetchState.VERIFYING: frozenset({FetchState.EXTRACTING, FetchState.DONE, FetchState.FAILED}),
    FetchState.SKIPPED_VERIFICATION: frozenset({FetchState.EXTRACTING, FetchState.DONE, FetchState.FAILED}),
    FetchState.EXTRACTING: frozenset({FetchState.DONE, FetchState.FAILED}),
    FetchState.DONE: frozenset(),
    FetchState.FAILED: frozenset(),
}


@dataclass(frozen=True)
class DownloadResult:
    local_path: Path
    verified: bool
    asset_name: str = ""
    archive: ArchiveKind | None = None


@dataclass
class FetchStatus:
    asset: str
    state: FetchState = FetchState.PENDING
    bytes_written: int = 0
    total_bytes: int | None = None
    failure: str | None = None
    history: list[FetchState] = field(default_factory=lambda: [FetchState.PENDING])

    @property
    def terminal(self) -> bool:
        return not _TRANSITIONS[self.state]


class FetchRun:
    """State machine for a single fetch; ``Done`` and ``Failed`` are terminal."""

    def __init__(self, asset: str, on_state: StateCallback | None = None) -> None:
        self.status = FetchStatus(asset=asset)
        self._on_state = on_state

    @property
    def state(self) -> FetchState:
        return self.status.state

    def advance(self, state: FetchState) -> None:
        if state not in _TRANSITIONS[self.status.state]:
            raise RuntimeError(f"Illegal fetch transition {self.status.state.value} -> {state.value}")
        self.status.state = state
        self.status.history.append(state)
        logger.debug(
            f"{self.status.asset}: {state.value}",
            extra={"event": "fetch_state", "asset": self.status.asset, "state": state.value},
        )
        if self._on_state is not None:
            self._on_state(state)

    def fail(self, reason: str) -> None:
        if self.status.terminal:
            return
        self.status.failure = reason
        self.advance(FetchState.FAILED)


def _content_length(response) -> int | None:
    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    value = headers.get("Content-Length")
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def _stream_to_file(
    asset: ReleaseAsset,
    staged: Path,
    opener: StreamOpener,
    chunk_size: int,
    run: FetchRun,
    progress: ProgressCallback | None,
    cancel_check: CancelCheck | None,
) -> int:
    url = asset.download_url
    with contextlib.ExitStack() as stack:
        try:
            fh = stack.enter_context(staged.open("wb"))
        except OSError as exc:
            raise FilesystemError.from_os_error(exc, staged) from exc

        try:
            response = stack.enter_context(opener(url))
        except _NETWORK_ERRORS as exc:
            raise DownloadError(f"Cannot download {asset.name}: {exc}", url=url) from exc

        status = getattr(response, "status", None)
        if status is not None and not 200 <= int(status) < 300:
            raise DownloadError(f"Cannot download {asset.name}: HTTP {status}", url=url)

        total = _content_length(response)
        run.status.total_bytes = total
        written = 0
        while True:
            if cancel_check is not None and cancel_check():
                raise DownloadCancelledError(f"Download of {asset.name} cancelled", url=url)
            try:
                chunk = response.read(chunk_size)
            except _NETWORK_ERRORS as exc:
                raise DownloadError(f"Download of {asset.name} interrupted: {exc}", url=url) from exc
            if not chunk:
                break
            try:
                fh.write(chunk)
            except OSError as exc:
                raise FilesystemError.from_os_error(exc, staged) from exc
            written += len(chunk)
            run.status.bytes_written = written
            if progress is not None:
                progress(written, total)

    if total is not None and written < total:
        raise DownloadError(f"Download of {asset.name} interrupted after {written} of {total} bytes", url=url)
    return written


def _verify(staged: Path, asset_name: str, entry: ChecksumEntry) -> None:
    actual = digest_file(staged, entry.algorithm)
    if hmac.compare_digest(actual, entry.digest):
        return
    staged.unlink(missing_ok=True)
    logger.warning(
        f"checksum mismatch for {asset_name}",
        extra={"event": "checksum_mismatch", "asset": asset_name},
    )
    raise ChecksumMismatchError(asset_name, entry.hexdigest, actual.hex())


def _unpack(staged: Path, kind: ArchiveKind, staging: Path, asset_name: str, executable_name: str | None) -> Path:
    payload = staging / "payload"
    payload.mkdir()
    if kind.is_single_file:
        return decompress_file(staged, kind, payload / strip_archive_extension(staged.name))

    extract_archive(staged, kind, payload, archive=asset_name)
    artifact = find_runnable(payload, executable_name)
    make_executable(artifact)
    return artifact


def final_name(asset_name: str, artifact: Path, archive: ArchiveKind | None, executable_name: str | None) -> str:
    """Deterministic name of the installed artifact inside the destination directory."""
    name = executable_name or (strip_archive_extension(asset_name) if archive else asset_name)
    name = Path(name).name
    if artifact.is_file() and artifact.suffix.lower() == ".exe" and not name.lower().endswith(".exe"):
        name += ".exe"
    return name


def _publish(artifact: Path, final: Path) -> None:
    try:
        if final.is_dir() and not final.is_symlink():
            if not artifact.is_dir():
                raise FilesystemError(f"{final} exists and is a directory", path=final)
            shutil.rmtree(final)
        elif artifact.is_dir() and (final.exists() or final.is_symlink()):
            final.unlink()
        os.replace(artifact, final)
    except OSError as exc:
        raise FilesystemError.from_os_error(exc, final) from exc


def fetch(
    asset: ReleaseAsset,
    destination_dir: Path,
    checksum_manifest: Sequence[ChecksumEntry] | None = None,
    *,
    opener: StreamOpener | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    extract: bool = True,
    executable_name: str | None = None,
    progress: ProgressCallback | None = None,
    cancel_check: CancelCheck | None = None,
    on_state: StateCallback | None = None,
) -> DownloadResult:
    """Download ``asset`` into ``destination_dir`` and expose its runnable artifact.

    Everything is staged in a hidden directory inside ``destination_dir`` and
    moved into place only once verification and extraction succeeded, so the
    final path is either absent or complete. Verification is best-effort:
    without a manifest entry for the asset the result has ``verified=False``.

    Raises:
        DownloadError: network failure, non-success response, interrupted
            stream, or cancellation.
        ChecksumMismatchError: the digest differs from the manifest entry.
        UnsafeArchiveError: an archive member escapes the extraction root.
        ArchiveError: the archive is unreadable or lacks the requested file.
        FilesystemError: the destination cannot be written.
    """
    run = FetchRun(asset.name, on_state)
    destination_dir = Path(destination_dir)
    opener = opener or make_opener()

    if not destination_dir.is_dir():
        run.fail("destination is not a directory")
        raise FilesystemError(f"{destination_dir} is not an existing directory", path=destination_dir)

    try:
        staging = Path(tempfile.mkdtemp(prefix=".relpick-", dir=destination_dir))
    except OSError as exc:
        run.fail(str(exc))
        raise FilesystemError.from_os_error(exc, destination_dir) from exc

    logger.info(f"fetching {asset.name}", extra={"event": "fetch_start", "asset": asset.name, "url": asset.download_url})
    try:
        run.advance(FetchState.DOWNLOADING)
        (staging / "download").mkdir()
        staged = staging / "download" / (Path(asset.name).name or "asset")
        _stream_to_file(asset, staged, opener, chunk_size, run, progress, cancel_check)

        entry = lookup(checksum_manifest, asset.name)
        if entry is None:
            run.advance(FetchState.SKIPPED_VERIFICATION)
        else:
            run.advance(FetchState.VERIFYING)
            _verify(staged, asset.name, entry)

        archive = tokenize(asset.name).extension if extract else None
        if archive is not None:
            run.advance(FetchState.EXTRACTING)
            artifact = _unpack(staged, archive, staging, asset.name, executable_name)
        else:
            artifact = staged
            make_executable(artifact)

        final = destination_dir / final_name(asset.name, artifact, archive, executable_name)
        _publish(artifact, final)
        run.advance(FetchState.DONE)
    except RelpickError as exc:
        run.fail(str(exc))
        logger.error(f"fetch of {asset.name} failed: {exc}", extra={"event": "fetch_failed", "asset": asset.name})
        raise
    except OSError as exc:
        run.fail(str(exc))
        raise FilesystemError.from_os_error(exc) from exc
    except BaseException as exc:
        run.fail(type(exc).__name__)
        raise
    finally:
        shutil.rmtree(staging, ignore_errors=True)

    logger.info(
        f"fetched {asset.name} -> {final}",
        extra={"event": "fetch_done", "asset": asset.name, "path": str(final)},
    )
    return DownloadResult(local_path=final, verified=entry is not None, asset_name=asset.name, archive=archive)
