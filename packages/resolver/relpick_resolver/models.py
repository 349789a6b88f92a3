"""Typed models for platforms, release assets, and tokenized asset names."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OsFamily(str, Enum):
    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"
    FREEBSD = "freebsd"
    NETBSD = "netbsd"
    OPENBSD = "openbsd"
    ANDROID = "android"


class CpuArch(str, Enum):
    X86_64 = "x86_64"
    X86 = "x86"
    AARCH64 = "aarch64"
    ARM = "arm"
    RISCV64 = "riscv64"
    PPC64 = "ppc64"
    PPC64LE = "ppc64le"
    MIPS = "mips"
    MIPS64 = "mips64"
    LOONGARCH64 = "loongarch64"
    S390X = "s390x"
    # Fat macOS binaries; runs on any profile architecture.
    UNIVERSAL = "universal"


class LibcVariant(str, Enum):
    GNU = "gnu"
    MUSL = "musl"
    MSVC = "msvc"


class ArchiveKind(str, Enum):
    TAR_GZ = "tar.gz"
    TAR_XZ = "tar.xz"
    TAR_BZ2 = "tar.bz2"
    TAR = "tar"
    ZIP = "zip"
    GZ = "gz"
    XZ = "xz"
    BZ2 = "bz2"

    @property
    def is_tarball(self) -> bool:
        return self in (ArchiveKind.TAR_GZ, ArchiveKind.TAR_XZ, ArchiveKind.TAR_BZ2, ArchiveKind.TAR)

    @property
    def is_single_file(self) -> bool:
        return self in (ArchiveKind.GZ, ArchiveKind.XZ, ArchiveKind.BZ2)


@dataclass(frozen=True)
class AssetTokens:
    raw: str
    os: OsFamily | None = None
    arch: CpuArch | None = None
    libc: LibcVariant | None = None
    extension: ArchiveKind | None = None
    metadata: bool = False
    leftover: tuple[str, ...] = ()

    @property
    def platform_tokens(self) -> tuple[OsFamily | None, CpuArch | None, LibcVariant | None, ArchiveKind | None]:
        return (self.os, self.arch, self.libc, self.extension)


@dataclass(frozen=True)
class Candidate:
    asset: AssetTokens
    score: int
    compatible: bool

    @property
    def name(self) -> str:
        return self.asset.raw


@dataclass(frozen=True)
class ReleaseAsset:
    name: str
    download_url: str
    size: int = 0


@dataclass(frozen=True)
class Release:
    tag: str
    assets: tuple[ReleaseAsset, ...] = ()

    @property
    def asset_names(self) -> list[str]:
        return [a.name for a in self.assets]

    def asset_named(self, name: str) -> ReleaseAsset | None:
        for asset in self.assets:
            if asset.name == name:
                return asset
        return None
