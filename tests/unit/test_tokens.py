import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "resolver"))

from relpick_resolver.models import ArchiveKind, CpuArch, LibcVariant, OsFamily
from relpick_resolver.tokens import strip_archive_extension, tokenize


class TokenizerTests(unittest.TestCase):
    def test_separator_style_does_not_change_tokens(self):
        names = [
            "tool-x86_64-unknown-linux-gnu.tar.gz",
            "tool_x86_64_unknown_linux_gnu.tar.gz",
            "tool.x86_64.unknown.linux.gnu.tar.gz",
        ]
        tokens = [tokenize(n) for n in names]
        expected = (OsFamily.LINUX, CpuArch.X86_64, LibcVariant.GNU, ArchiveKind.TAR_GZ)
        for t in tokens:
            self.assertEqual(t.platform_tokens, expected)
            self.assertEqual(t.leftover, ("tool",))

    def test_specific_libc_window_wins_over_generic_linux(self):
        t = tokenize("tool-x86_64-unknown-linux-musl.tar.gz")
        self.assertEqual(t.os, OsFamily.LINUX)
        self.assertEqual(t.libc, LibcVariant.MUSL)

    def test_go_style_names(self):
        t = tokenize("tool_darwin_amd64.zip")
        self.assertEqual(t.platform_tokens, (OsFamily.MACOS, CpuArch.X86_64, None, ArchiveKind.ZIP))

    def test_windows_executable_without_archive(self):
        t = tokenize("tool-win64.exe")
        self.assertEqual(t.os, OsFamily.WINDOWS)
        self.assertIsNone(t.arch)
        self.assertIsNone(t.extension)
        self.assertIn("exe", t.leftover)

    def test_rust_target_triples(self):
        mac = tokenize("tool-1.2.0-x86_64-apple-darwin.tar.gz")
        self.assertEqual(mac.platform_tokens, (OsFamily.MACOS, CpuArch.X86_64, None, ArchiveKind.TAR_GZ))

        win = tokenize("tool-x86_64-pc-windows-msvc.zip")
        self.assertEqual(win.platform_tokens, (OsFamily.WINDOWS, CpuArch.X86_64, LibcVariant.MSVC, ArchiveKind.ZIP))

        android = tokenize("tool-aarch64-linux-android.tar.gz")
        self.assertEqual(android.os, OsFamily.ANDROID)
        self.assertEqual(android.arch, CpuArch.AARCH64)

    def test_case_insensitive(self):
        t = tokenize("TOOL-Linux-ARM64.TAR.GZ")
        self.assertEqual(t.platform_tokens, (OsFamily.LINUX, CpuArch.AARCH64, None, ArchiveKind.TAR_GZ))
        self.assertEqual(t.raw, "TOOL-Linux-ARM64.TAR.GZ")

    def test_metadata_files_are_flagged(self):
        self.assertTrue(tokenize("CHANGELOG.md").metadata)
        sidecar = tokenize("tool-linux-amd64.tar.gz.sha256")
        self.assertTrue(sidecar.metadata)
        self.assertEqual(sidecar.os, OsFamily.LINUX)
        self.assertIsNone(sidecar.extension)

    def test_source_archive_has_no_os(self):
        t = tokenize("source-code.tar.gz")
        self.assertIsNone(t.os)
        self.assertEqual(t.extension, ArchiveKind.TAR_GZ)

    def test_single_file_compression_and_universal(self):
        self.assertEqual(tokenize("tool-linux-amd64.gz").extension, ArchiveKind.GZ)
        self.assertEqual(tokenize("tool-macos-universal.tar.xz").arch, CpuArch.UNIVERSAL)
        self.assertEqual(tokenize("tool-powerpc64-unknown-linux-gnu.tar.gz").arch, CpuArch.PPC64)

    def test_leftmost_value_wins_for_repeated_field(self):
        t = tokenize("tool-linux-musl-gnu")
        self.assertEqual(t.libc, LibcVariant.MUSL)

    def test_tokenize_is_deterministic(self):
        name = "tool-v3.0.1-armv7-unknown-linux-musleabihf.tar.gz"
        self.assertEqual(tokenize(name), tokenize(name))

    def test_never_fails_on_odd_input(self):
        for name in ("", "...", "---", "tar.gz", "64"):
            t = tokenize(name)
            self.assertIsNone(t.os)

    def test_strip_archive_extension(self):
        self.assertEqual(strip_archive_extension("tool-1.0-linux.tar.gz"), "tool-1.0-linux")
        self.assertEqual(strip_archive_extension("tool.TGZ"), "tool")
        self.assertEqual(strip_archive_extension("tool-linux-amd64.gz"), "tool-linux-amd64")
        self.assertEqual(strip_archive_extension("tool-linux"), "tool-linux")
        self.assertEqual(strip_archive_extension("tool.exe"), "tool.exe")


if __name__ == "__main__":
    unittest.main()
