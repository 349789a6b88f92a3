import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "resolver"))

from relpick_resolver.matcher import is_compatible, score
from relpick_resolver.models import ArchiveKind, AssetTokens, CpuArch, LibcVariant, OsFamily
from relpick_resolver.platform_profile import PlatformProfile


LINUX_GNU = PlatformProfile(os=OsFamily.LINUX, arch=CpuArch.X86_64, libc=LibcVariant.GNU)
LINUX_UNKNOWN_LIBC = PlatformProfile(os=OsFamily.LINUX, arch=CpuArch.X86_64)
MAC_ARM = PlatformProfile(os=OsFamily.MACOS, arch=CpuArch.AARCH64)

# (tokens, profile, compatible, score)
CASES = [
    (AssetTokens("a", OsFamily.LINUX, CpuArch.X86_64, LibcVariant.GNU, ArchiveKind.TAR_GZ), LINUX_GNU, True, 6),
    (AssetTokens("b", OsFamily.LINUX, CpuArch.X86_64, None, ArchiveKind.TAR_GZ), LINUX_GNU, True, 4),
    (AssetTokens("c", OsFamily.LINUX, CpuArch.X86_64, None, None), LINUX_GNU, True, 3),
    (AssetTokens("d", OsFamily.LINUX, None, None, ArchiveKind.ZIP), LINUX_GNU, True, 1),
    (AssetTokens("e", OsFamily.LINUX, CpuArch.X86_64, LibcVariant.MUSL, ArchiveKind.TAR_GZ), LINUX_GNU, False, 0),
    (AssetTokens("f", OsFamily.LINUX, CpuArch.AARCH64, None, ArchiveKind.TAR_GZ), LINUX_GNU, False, 0),
    (AssetTokens("g", OsFamily.MACOS, CpuArch.X86_64, None, ArchiveKind.TAR_GZ), LINUX_GNU, False, 0),
    (AssetTokens("h", None, CpuArch.X86_64, None, ArchiveKind.TAR_GZ), LINUX_GNU, False, 0),
    (AssetTokens("i", OsFamily.LINUX, CpuArch.X86_64, None, None, metadata=True), LINUX_GNU, False, 0),
    (AssetTokens("j", OsFamily.LINUX, CpuArch.X86_64, LibcVariant.MUSL, ArchiveKind.TAR_GZ), LINUX_UNKNOWN_LIBC, True, 3),
    (AssetTokens("k", OsFamily.LINUX, CpuArch.X86_64, None, ArchiveKind.TAR_GZ), LINUX_UNKNOWN_LIBC, True, 4),
    (AssetTokens("l", OsFamily.MACOS, CpuArch.UNIVERSAL, None, ArchiveKind.TAR_GZ), MAC_ARM, True, 1),
    (AssetTokens("m", OsFamily.MACOS, CpuArch.AARCH64, None, ArchiveKind.TAR_GZ), MAC_ARM, True, 4),
]


class MatcherTests(unittest.TestCase):
    def test_table(self):
        for tokens, profile, compatible, points in CASES:
            with self.subTest(asset=tokens.raw):
                candidate = score(tokens, profile)
                self.assertEqual(candidate.compatible, compatible)
                self.assertEqual(candidate.score, points)
                self.assertEqual(is_compatible(tokens, profile), compatible)

    def test_incompatible_candidates_keep_their_tokens(self):
        tokens = AssetTokens("x", OsFamily.WINDOWS, CpuArch.X86_64, LibcVariant.MSVC, ArchiveKind.ZIP)
        candidate = score(tokens, LINUX_GNU)
        self.assertIs(candidate.asset, tokens)
        self.assertEqual(candidate.name, "x")

    def test_exact_libc_beats_unspecified_libc(self):
        exact = score(AssetTokens("a", OsFamily.LINUX, CpuArch.X86_64, LibcVariant.GNU), LINUX_GNU)
        loose = score(AssetTokens("b", OsFamily.LINUX, CpuArch.X86_64), LINUX_GNU)
        self.assertGreater(exact.score, loose.score)

    def test_unverified_libc_ranks_below_unspecified(self):
        declared = score(AssetTokens("a", OsFamily.LINUX, CpuArch.X86_64, LibcVariant.GNU), LINUX_UNKNOWN_LIBC)
        plain = score(AssetTokens("b", OsFamily.LINUX, CpuArch.X86_64), LINUX_UNKNOWN_LIBC)
        self.assertTrue(declared.compatible)
        self.assertLess(declared.score, plain.score)


if __name__ == "__main__":
    unittest.main()
