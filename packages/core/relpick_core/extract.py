"""Archive unpacking with path traversal guards, and runnable artifact lookup."""

from __future__ import annotations

import bz2
import gzip
import lzma
import os
import posixpath
import re
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path
from typing import Final

from relpick_resolver.models import ArchiveKind

from .errors import ArchiveError, UnsafeArchiveError


WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]")

_TAR_MODES: Final[dict[ArchiveKind, str]] = {
    ArchiveKind.TAR_GZ: "r:gz",
    ArchiveKind.TAR_XZ: "r:xz",
    ArchiveKind.TAR_BZ2: "r:bz2",
    ArchiveKind.TAR: "r:",
}

_SINGLE_FILE_OPENERS = {
    ArchiveKind.GZ: gzip.open,
    ArchiveKind.XZ: lzma.open,
    ArchiveKind.BZ2: bz2.open,
}

_READ_ERRORS = (tarfile.TarError, zipfile.BadZipFile, lzma.LZMAError, EOFError, gzip.BadGzipFile)

# Raised by tarfile extraction filters; absent before the filters were added.
_FILTER_ERRORS = (tarfile.FilterError,) if hasattr(tarfile, "FilterError") else ()

_MAX_LINK_DEPTH = 32


def _inside(root: str, member_path: str, archive: str, member: str) -> str:
    """Return the lexical location of ``member_path`` under ``root`` or raise."""
    normalized = member_path.replace("\\", "/")
    if normalized.startswith("/") or WINDOWS_ABSOLUTE_PATTERN.match(normalized):
        raise UnsafeArchiveError(archive, member, "is an absolute path")

    parts = [part for part in normalized.split("/") if part not in ("", ".")]
    if any(part == ".." for part in parts):
        raise UnsafeArchiveError(archive, member, "contains a parent directory reference")

    target = posixpath.normpath(posixpath.join(root, *parts)) if parts else root
    if target != root and not target.startswith(root + "/"):
        raise UnsafeArchiveError(archive, member, "resolves outside the destination")
    return target


def _parts(path: str) -> list[str]:
    return [part for part in path.replace("\\", "/").split("/") if part not in ("", ".")]


def _walk(
    parts: list[str],
    links: dict[tuple[str, ...], list[str]],
    archive: str,
    member: str,
    reason: str,
    depth: int = 0,
) -> list[str]:
    """Resolve ``parts`` from the extraction root through the symlinks accepted so far."""
    resolved: list[str] = []
    for part in parts:
        if part == "..":
            if not resolved:
                raise UnsafeArchiveError(archive, member, reason)
            resolved.pop()
            continue
        resolved.append(part)
        target = links.get(tuple(resolved))
        if target is None:
            continue
        if depth >= _MAX_LINK_DEPTH:
            raise UnsafeArchiveError(archive, member, "has too many levels of symbolic links")
        resolved = _walk(resolved[:-1] + target, links, archive, member, reason, depth + 1)
    return resolved


def check_tar_members(members: list[tarfile.TarInfo], archive: str) -> None:
    """Reject members that would be written or linked outside the extraction root.

    Paths are resolved through the symlinks of earlier members, so a chain
    such as ``a -> .``, ``a/b -> ..``, ``a/b/x`` is caught.
    """
    root = "/extract"
    links: dict[tuple[str, ...], list[str]] = {}
    for member in members:
        _inside(root, member.name, archive, member.name)
        parts = _parts(member.name)
        if not parts:
            continue
        parent = _walk(parts[:-1], links, archive, member.name, "resolves outside the destination through a link")
        location = tuple(parent + parts[-1:])
        links.pop(location, None)

        if member.ischr() or member.isblk() or member.isfifo() or member.isdev():
            raise UnsafeArchiveError(archive, member.name, "is a device or fifo")
        if not (member.issym() or member.islnk()):
            continue

        link = member.linkname.replace("\\", "/")
        if link.startswith("/") or WINDOWS_ABSOLUTE_PATTERN.match(link):
            raise UnsafeArchiveError(archive, member.name, f"links to absolute path {member.linkname!r}")
        reason = f"links outside the destination via {member.linkname!r}"
        if member.issym():
            _walk(parent + _parts(link), links, archive, member.name, reason)
            links[location] = _parts(link)
        else:
            # Hard link names are relative to the archive root.
            _walk(_parts(link), links, archive, member.name, reason)


def check_zip_members(names: list[str], archive: str) -> None:
    root = "/extract"
    for name in names:
        _inside(root, name, archive, name)


def _extract_tar(archive_path: Path, kind: ArchiveKind, root: Path, archive: str) -> None:
    with tarfile.open(archive_path, _TAR_MODES[kind]) as tar:
        members = tar.getmembers()
        check_tar_members(members, archive)
        if hasattr(tarfile, "data_filter"):
            tar.extractall(root, members=members, filter="data")
        else:
            tar.extractall(root, members=members)


def _extract_zip(archive_path: Path, root: Path, archive: str) -> None:
    with zipfile.ZipFile(archive_path) as zf:
        infos = zf.infolist()
        check_zip_members([info.filename for info in infos], archive)
        zf.extractall(root)
        # zipfile drops unix permission bits; restore the executable ones.
        for info in infos:
            mode = info.external_attr >> 16
            if info.is_dir() or not mode & 0o111:
                continue
            path = root / info.filename
            if path.is_file():
                path.chmod(path.stat().st_mode | 0o111)


def extract_archive(archive_path: Path, kind: ArchiveKind, root: Path, archive: str | None = None) -> None:
    """Unpack a tarball or zip into ``root``.

    Every member is checked before anything is written, so a rejected archive
    leaves ``root`` untouched.
    """
    archive = archive or archive_path.name
    root.mkdir(parents=True, exist_ok=True)
    try:
        if kind.is_tarball:
            _extract_tar(archive_path, kind, root, archive)
        elif kind == ArchiveKind.ZIP:
            _extract_zip(archive_path, root, archive)
        else:
            raise ArchiveError(f"{archive} is not a multi-file archive")
    except _FILTER_ERRORS as exc:
        member = getattr(getattr(exc, "tarinfo", None), "name", "?")
        raise UnsafeArchiveError(archive, member, str(exc)) from exc
    except _READ_ERRORS as exc:
        raise ArchiveError(f"Cannot read {archive}: {exc}") from exc


def decompress_file(archive_path: Path, kind: ArchiveKind, target: Path) -> Path:
    opener = _SINGLE_FILE_OPENERS.get(kind)
    if opener is None:
        raise ArchiveError(f"{archive_path.name} is not a single-file compressed asset")
    try:
        with opener(archive_path, "rb") as src, target.open("wb") as dst:
            shutil.copyfileobj(src, dst)
    except _READ_ERRORS as exc:
        raise ArchiveError(f"Cannot decompress {archive_path.name}: {exc}") from exc
    make_executable(target)
    return target


def make_executable(path: Path) -> None:
    if os.name != "posix" or not path.is_file():
        return
    path.chmod(path.stat().st_mode | 0o755)


def _looks_executable(path: Path) -> bool:
    if path.suffix.lower() == ".exe":
        return True
    return os.name == "posix" and bool(path.stat().st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))


def find_runnable(root: Path, executable_name: str | None = None) -> Path:
    """Pick what to install from an extracted tree.

    Preference: the requested executable name, the only regular file, the
    only executable file, then the tree itself (its single top-level
    directory when there is one).
    """
    files = sorted(p for p in root.rglob("*") if p.is_file() and not p.is_symlink())

    if executable_name:
        wanted = {executable_name, f"{executable_name}.exe"}
        matches = [p for p in files if p.name in wanted]
        if not matches:
            raise ArchiveError(f"No file named {executable_name} in the archive")
        return min(matches, key=lambda p: (len(p.parts), str(p)))

    if len(files) == 1:
        return files[0]

    executables = [p for p in files if _looks_executable(p)]
    if len(executables) == 1:
        return executables[0]

    entries = list(root.iterdir())
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    return root
