"""Detection of the invoking machine's OS, CPU architecture, and libc variant."""

from __future__ import annotations

import glob
import platform
import struct
from dataclasses import dataclass

from .aliases import ARCH_ALIASES, OS_ALIASES
from .models import CpuArch, LibcVariant, OsFamily
from .tokens import split_segments, tokenize


# 64-bit machines running a 32-bit userland execute their 32-bit counterpart.
_NARROW_32: dict[CpuArch, CpuArch] = {
    CpuArch.X86_64: CpuArch.X86,
    CpuArch.AARCH64: CpuArch.ARM,
}

_MUSL_LOADER_GLOB = "/lib/ld-musl-*.so.1"


@dataclass(frozen=True)
class PlatformProfile:
    os: OsFamily
    arch: CpuArch
    libc: LibcVariant | None = None
    bits: int = 64

    @classmethod
    def detect(cls, libc_override: LibcVariant | str | None = None) -> "PlatformProfile":
        return detect_profile(
            platform.system(),
            platform.machine(),
            bits=struct.calcsize("P") * 8,
            libc_override=libc_override,
        )

    def describe(self) -> str:
        libc = self.libc.value if self.libc else "unknown"
        return f"{self.os.value}/{self.arch.value}/{libc}/{self.bits}bit"


def _normalize_os(system: str) -> OsFamily:
    s = system.lower()
    if s.startswith("win") or s.startswith("cygwin") or s.startswith("msys"):
        return OsFamily.WINDOWS
    if s.startswith("darwin") or s.startswith("mac"):
        return OsFamily.MACOS
    for segment in split_segments(s):
        if segment in OS_ALIASES:
            return OS_ALIASES[segment]
    return OsFamily.LINUX


def _normalize_arch(machine: str, bits: int) -> CpuArch:
    m = machine.lower()
    arch = ARCH_ALIASES.get(m) or tokenize(m).arch
    if arch is None:
        # platform.machine() is empty on some emulated hosts.
        arch = CpuArch.X86_64 if bits == 64 else CpuArch.X86
    if bits == 32:
        arch = _NARROW_32.get(arch, arch)
    return arch


def _detect_libc(os_family: OsFamily) -> LibcVariant | None:
    if os_family == OsFamily.WINDOWS:
        return LibcVariant.MSVC
    if os_family != OsFamily.LINUX:
        return None
    lib, _version = platform.libc_ver()
    if lib == "glibc":
        return LibcVariant.GNU
    if glob.glob(_MUSL_LOADER_GLOB):
        return LibcVariant.MUSL
    return None


def detect_profile(
    system: str,
    machine: str,
    bits: int = 64,
    libc_override: LibcVariant | str | None = None,
) -> PlatformProfile:
    os_family = _normalize_os(system)
    if libc_override:
        libc: LibcVariant | None = LibcVariant(libc_override)
    else:
        libc = _detect_libc(os_family)
    return PlatformProfile(
        os=os_family,
        arch=_normalize_arch(machine, bits),
        libc=libc,
        bits=32 if bits == 32 else 64,
    )
