import io
import json
import sys
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "apps" / "cli"))
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "resolver"))

from relpick_cli import cli
from relpick_cli.cli import EXIT_AMBIGUOUS, EXIT_FAILED, EXIT_OK, build_parser, main
from relpick_core.config import AppConfig
from relpick_core.errors import ReleaseLookupError
from relpick_resolver import CpuArch, LibcVariant, OsFamily, PlatformProfile, Release, ReleaseAsset


LINUX_GNU = PlatformProfile(os=OsFamily.LINUX, arch=CpuArch.X86_64, libc=LibcVariant.GNU)


class CliParserTests(unittest.TestCase):
    def test_download_command(self):
        args = build_parser().parse_args(
            ["download", "owner/tool", "--tag", "v1.0", "-o", "bin", "--executable", "tool", "--no-verify"]
        )
        self.assertEqual(args.command, "download")
        self.assertEqual(args.repo, "owner/tool")
        self.assertEqual(args.tag, "v1.0")
        self.assertEqual(args.output, "bin")
        self.assertTrue(args.no_verify)
        self.assertFalse(args.no_extract)

    def test_repository_url_is_normalized(self):
        args = build_parser().parse_args(["untag", "https://github.com/owner/tool/"])
        self.assertEqual(args.repo, "owner/tool")

    def test_bad_repository_is_rejected(self):
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            build_parser().parse_args(["download", "not-a-repo"])

    def test_resolve_accepts_asset_list(self):
        args = build_parser().parse_args(["resolve", "--asset", "a.zip", "--asset", "b.zip"])
        self.assertIsNone(args.repo)
        self.assertEqual(args.asset, ["a.zip", "b.zip"])


class CliMainTests(unittest.TestCase):
    def setUp(self):
        patches = [
            mock.patch.object(cli, "load_config", return_value=AppConfig()),
            mock.patch.object(cli, "configure_logging"),
            mock.patch.object(cli, "install_crash_hooks"),
            mock.patch.object(cli.PlatformProfile, "detect", return_value=LINUX_GNU),
        ]
        for patcher in patches:
            patcher.start()
            self.addCleanup(patcher.stop)

    def _run(self, argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_resolve_unique(self):
        code, out, _ = self._run(["resolve", "--asset", "tool-linux-amd64.tar.gz", "--asset", "tool-darwin-amd64.tar.gz"])
        payload = json.loads(out)
        self.assertEqual(code, EXIT_OK)
        self.assertEqual(payload["outcome"], "unique")
        self.assertEqual(payload["selected"], "tool-linux-amd64.tar.gz")
        self.assertEqual(len(payload["candidates"]), 2)

    def test_resolve_ambiguous(self):
        code, out, _ = self._run(["resolve", "--asset", "tool-linux-amd64.zip", "--asset", "tool-linux-amd64.tar.gz"])
        self.assertEqual(code, EXIT_AMBIGUOUS)
        self.assertEqual(json.loads(out)["tied"], ["tool-linux-amd64.zip", "tool-linux-amd64.tar.gz"])

    def test_resolve_no_match(self):
        code, out, _ = self._run(["resolve", "--asset", "checksums.txt"])
        self.assertEqual(code, EXIT_FAILED)
        self.assertEqual(json.loads(out)["outcome"], "no_match")

    def test_resolve_needs_input(self):
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            main(["resolve"])

    def test_platform(self):
        code, out, _ = self._run(["platform"])
        self.assertEqual(code, EXIT_OK)
        self.assertEqual(json.loads(out), {"os": "linux", "arch": "x86_64", "libc": "gnu", "bits": 64})

    def test_untag(self):
        release = Release(tag="v2.0.0", assets=(ReleaseAsset("tool-v2.0.0-linux.tar.gz", "u"),))
        with mock.patch.object(cli, "fetch_release", return_value=release):
            code, out, _ = self._run(["untag", "owner/tool"])
        self.assertEqual(code, EXIT_OK)
        self.assertEqual(json.loads(out)["assets"], ["tool-{tag}-linux.tar.gz"])

    def test_download_ambiguity_exit_code(self):
        release = Release(
            tag="v1",
            assets=(ReleaseAsset("tool-linux-amd64.zip", "u1"), ReleaseAsset("tool-linux-amd64.tar.gz", "u2")),
        )
        with mock.patch("relpick_cli.service.fetch_release", return_value=release):
            code, _, err = self._run(["download", "owner/tool", "-o", str(ROOT)])
        self.assertEqual(code, EXIT_AMBIGUOUS)
        payload = json.loads(err)
        self.assertEqual(payload["type"], "SelectionError")
        self.assertEqual(len(payload["tied"]), 2)

    def test_errors_are_reported_as_json(self):
        with mock.patch.object(cli, "fetch_release", side_effect=ReleaseLookupError("No release latest found for owner/tool")):
            code, _, err = self._run(["resolve", "owner/tool"])
        self.assertEqual(code, EXIT_FAILED)
        payload = json.loads(err)
        self.assertEqual(payload["type"], "ReleaseLookupError")
        self.assertIn("owner/tool", payload["error"])


if __name__ == "__main__":
    unittest.main()
