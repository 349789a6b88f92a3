"""Checksum manifest parsing and file digests."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Iterable, Sequence


class DigestAlgorithm(str, Enum):
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"


_BY_HEX_LENGTH = {
    40: DigestAlgorithm.SHA1,
    64: DigestAlgorithm.SHA256,
    128: DigestAlgorithm.SHA512,
}

_BSD_LINE_RE = re.compile(r"^(SHA1|SHA256|SHA512)\s*\((.+)\)\s*=\s*([0-9a-fA-F]+)$", re.IGNORECASE)

_MANIFEST_NAMES = (
    "checksums.txt",
    "sha256sums",
    "sha256sums.txt",
    "sha512sums",
    "sha512sums.txt",
    "checksums.sha256",
    "sha256sum.txt",
)

_SIDECAR_SUFFIXES = (".sha256", ".sha256sum", ".sha512", ".sha512sum")


@dataclass(frozen=True)
class ChecksumEntry:
    filename: str
    digest: bytes
    algorithm: DigestAlgorithm

    @property
    def hexdigest(self) -> str:
        return self.digest.hex()


def _entry(filename: str, hexdigest: str, algorithm: DigestAlgorithm | None) -> ChecksumEntry | None:
    hexdigest = hexdigest.strip().lower()
    algo = algorithm or _BY_HEX_LENGTH.get(len(hexdigest))
    if algo is None:
        return None
    try:
        digest = bytes.fromhex(hexdigest)
    except ValueError:
        return None
    if len(digest) != hashlib.new(algo.value).digest_size:
        return None
    name = PurePosixPath(filename.strip().lstrip("*").replace("\\", "/")).name
    if not name:
        return None
    return ChecksumEntry(filename=name, digest=digest, algorithm=algo)


def algorithm_for_name(name: str) -> DigestAlgorithm | None:
    lower = name.lower()
    for algo in (DigestAlgorithm.SHA512, DigestAlgorithm.SHA256, DigestAlgorithm.SHA1):
        if algo.value in lower:
            return algo
    return None


def parse_manifest(text: str, algorithm: DigestAlgorithm | None = None) -> list[ChecksumEntry]:
    """Parse ``sha256sum``-style (``<hex>  <file>``) and BSD-style manifests.

    Lines that do not hold a well-formed digest are skipped.
    """
    out: list[ChecksumEntry] = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        bsd = _BSD_LINE_RE.match(line)
        if bsd:
            entry = _entry(bsd.group(2), bsd.group(3), DigestAlgorithm(bsd.group(1).lower()))
        else:
            parts = line.split(None, 1)
            if len(parts) < 2:
                continue
            entry = _entry(parts[1], parts[0], algorithm)

        if entry is not None:
            out.append(entry)
    return out


def parse_sidecar(text: str, asset_name: str, algorithm: DigestAlgorithm | None = None) -> list[ChecksumEntry]:
    """Parse a per-asset checksum file, which may omit the filename."""
    entries = [e for e in parse_manifest(text, algorithm) if e.filename == asset_name]
    if entries:
        return entries
    first = text.strip().split()
    if not first:
        return []
    entry = _entry(asset_name, first[0], algorithm)
    return [entry] if entry else []


def lookup(entries: Sequence[ChecksumEntry] | None, filename: str) -> ChecksumEntry | None:
    for entry in entries or ():
        if entry.filename == filename:
            return entry
    return None


def digest_file(path: Path, algorithm: DigestAlgorithm = DigestAlgorithm.SHA256, chunk_size: int = 1024 * 1024) -> bytes:
    h = hashlib.new(algorithm.value)
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(chunk_size), b""):
            h.update(chunk)
    return h.digest()


def find_manifest_name(asset_names: Iterable[str]) -> str | None:
    names = list(asset_names)
    lowered = {n.lower(): n for n in names}
    for candidate in _MANIFEST_NAMES:
        if candidate in lowered:
            return lowered[candidate]
    for name in names:
        lower = name.lower()
        if "checksum" in lower and (lower.endswith(".txt") or lower.endswith("sums")):
            return name
    return None


def find_sidecar_name(asset_names: Iterable[str], asset_name: str) -> str | None:
    names = set(asset_names)
    for suffix in _SIDECAR_SUFFIXES:
        if asset_name + suffix in names:
            return asset_name + suffix
    return None
