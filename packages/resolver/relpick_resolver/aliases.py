"""Static alias vocabularies mapping filename segments to platform tokens.

New spellings are added here as data; the tokenizer never special-cases a
name. Segments are lower-case and split on every non-alphanumeric character,
so ``x86_64`` arrives as the two segments ``("x86", "64")``.
"""

from __future__ import annotations

from typing import Any, Final

from .models import ArchiveKind, CpuArch, LibcVariant, OsFamily


OS_ALIASES: Final[dict[str, OsFamily]] = {
    "linux": OsFamily.LINUX,
    "darwin": OsFamily.MACOS,
    "macos": OsFamily.MACOS,
    "mac": OsFamily.MACOS,
    "osx": OsFamily.MACOS,
    "apple": OsFamily.MACOS,
    "windows": OsFamily.WINDOWS,
    "win": OsFamily.WINDOWS,
    "win32": OsFamily.WINDOWS,
    "win64": OsFamily.WINDOWS,
    "freebsd": OsFamily.FREEBSD,
    "netbsd": OsFamily.NETBSD,
    "openbsd": OsFamily.OPENBSD,
    "android": OsFamily.ANDROID,
}

ARCH_ALIASES: Final[dict[str, CpuArch]] = {
    "amd64": CpuArch.X86_64,
    "x64": CpuArch.X86_64,
    "64bit": CpuArch.X86_64,
    "x86": CpuArch.X86,
    "i386": CpuArch.X86,
    "i486": CpuArch.X86,
    "i586": CpuArch.X86,
    "i686": CpuArch.X86,
    "386": CpuArch.X86,
    "ia32": CpuArch.X86,
    "32bit": CpuArch.X86,
    "aarch64": CpuArch.AARCH64,
    "arm64": CpuArch.AARCH64,
    "armv8": CpuArch.AARCH64,
    "arm": CpuArch.ARM,
    "armv6": CpuArch.ARM,
    "armv6l": CpuArch.ARM,
    "armv7": CpuArch.ARM,
    "armv7l": CpuArch.ARM,
    "armhf": CpuArch.ARM,
    "armel": CpuArch.ARM,
    "riscv64": CpuArch.RISCV64,
    "riscv64gc": CpuArch.RISCV64,
    "ppc64": CpuArch.PPC64,
    "powerpc64": CpuArch.PPC64,
    "ppc64le": CpuArch.PPC64LE,
    "powerpc64le": CpuArch.PPC64LE,
    "s390x": CpuArch.S390X,
    "mips": CpuArch.MIPS,
    "mipsel": CpuArch.MIPS,
    "mips64": CpuArch.MIPS64,
    "mips64el": CpuArch.MIPS64,
    "loongarch64": CpuArch.LOONGARCH64,
    "universal": CpuArch.UNIVERSAL,
    "universal2": CpuArch.UNIVERSAL,
}

LIBC_ALIASES: Final[dict[str, LibcVariant]] = {
    "gnu": LibcVariant.GNU,
    "glibc": LibcVariant.GNU,
    "gnueabi": LibcVariant.GNU,
    "gnueabihf": LibcVariant.GNU,
    "musl": LibcVariant.MUSL,
    "musleabi": LibcVariant.MUSL,
    "musleabihf": LibcVariant.MUSL,
    "msvc": LibcVariant.MSVC,
}

# Recognized only at the tail of a name, longest suffix first.
EXTENSION_ALIASES: Final[dict[tuple[str, ...], ArchiveKind]] = {
    ("tar", "gz"): ArchiveKind.TAR_GZ,
    ("tgz",): ArchiveKind.TAR_GZ,
    ("tar", "xz"): ArchiveKind.TAR_XZ,
    ("txz",): ArchiveKind.TAR_XZ,
    ("tar", "bz2"): ArchiveKind.TAR_BZ2,
    ("tbz",): ArchiveKind.TAR_BZ2,
    ("tbz2",): ArchiveKind.TAR_BZ2,
    ("tar",): ArchiveKind.TAR,
    ("zip",): ArchiveKind.ZIP,
    ("gz",): ArchiveKind.GZ,
    ("xz",): ArchiveKind.XZ,
    ("bz2",): ArchiveKind.BZ2,
}

# Trailing segments marking checksums, signatures, and docs rather than binaries.
METADATA_SUFFIXES: Final[frozenset[str]] = frozenset(
    {
        "sha1",
        "sha256",
        "sha512",
        "sha256sum",
        "sha512sum",
        "md5",
        "sig",
        "asc",
        "minisig",
        "pem",
        "crt",
        "sbom",
        "spdx",
        "intoto",
        "jsonl",
        "json",
        "txt",
        "md",
        "yml",
        "yaml",
        "pub",
    }
)

# Contiguous segment windows, matched before single segments, longest first.
# A window may set several fields at once.
WINDOW_ALIASES: Final[dict[tuple[str, ...], dict[str, Any]]] = {
    ("unknown", "linux", "gnu"): {"os": OsFamily.LINUX, "libc": LibcVariant.GNU},
    ("unknown", "linux", "musl"): {"os": OsFamily.LINUX, "libc": LibcVariant.MUSL},
    ("unknown", "linux", "gnueabihf"): {"os": OsFamily.LINUX, "libc": LibcVariant.GNU},
    ("unknown", "linux", "musleabihf"): {"os": OsFamily.LINUX, "libc": LibcVariant.MUSL},
    ("pc", "windows", "msvc"): {"os": OsFamily.WINDOWS, "libc": LibcVariant.MSVC},
    ("pc", "windows", "gnu"): {"os": OsFamily.WINDOWS, "libc": LibcVariant.GNU},
    ("linux", "gnu"): {"os": OsFamily.LINUX, "libc": LibcVariant.GNU},
    ("linux", "musl"): {"os": OsFamily.LINUX, "libc": LibcVariant.MUSL},
    ("linux", "gnueabihf"): {"os": OsFamily.LINUX, "libc": LibcVariant.GNU},
    ("linux", "musleabihf"): {"os": OsFamily.LINUX, "libc": LibcVariant.MUSL},
    ("windows", "msvc"): {"os": OsFamily.WINDOWS, "libc": LibcVariant.MSVC},
    ("windows", "gnu"): {"os": OsFamily.WINDOWS, "libc": LibcVariant.GNU},
    ("apple", "darwin"): {"os": OsFamily.MACOS},
    ("x86", "64"): {"arch": CpuArch.X86_64},
    ("linux", "android"): {"os": OsFamily.ANDROID},
    ("unknown", "freebsd"): {"os": OsFamily.FREEBSD},
    ("unknown", "netbsd"): {"os": OsFamily.NETBSD},
}

MAX_WINDOW: Final[int] = max(len(k) for k in WINDOW_ALIASES)
