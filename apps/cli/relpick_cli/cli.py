"""CLI entrypoints for resolving and downloading release assets."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from relpick_core import RelpickError, load_config
from relpick_core.logging_setup import configure_logging, install_crash_hooks
from relpick_resolver import Ambiguous, NoMatch, PlatformProfile, Unique, resolve, untag
from relpick_resolver.resolution import score_all

from .client import fetch_release, parse_repository
from .service import SelectionError, download_release_asset


EXIT_OK = 0
EXIT_FAILED = 1
EXIT_AMBIGUOUS = 2


def _print_json(data: object, stream=None) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str), file=stream or sys.stdout)


def _repository(value: str) -> str:
    try:
        return parse_repository(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _profile_payload(profile: PlatformProfile) -> dict[str, Any]:
    return {
        "os": profile.os.value,
        "arch": profile.arch.value,
        "libc": profile.libc.value if profile.libc else None,
        "bits": profile.bits,
    }


def cmd_platform(_args: argparse.Namespace) -> int:
    cfg = load_config()
    _print_json(_profile_payload(PlatformProfile.detect(libc_override=cfg.match.libc_override)))
    return EXIT_OK


def cmd_resolve(args: argparse.Namespace) -> int:
    cfg = load_config()
    profile = PlatformProfile.detect(libc_override=cfg.match.libc_override)
    if args.asset:
        tag, names = None, list(args.asset)
    else:
        release = fetch_release(args.repo, args.tag, network=cfg.network)
        tag, names = release.tag, release.asset_names

    resolution = resolve(names, profile, cfg.preference)
    payload: dict[str, Any] = {
        "tag": tag,
        "profile": _profile_payload(profile),
        "candidates": [
            {
                "name": c.name,
                "compatible": c.compatible,
                "score": c.score,
                "os": c.asset.os,
                "arch": c.asset.arch,
                "libc": c.asset.libc,
                "extension": c.asset.extension,
            }
            for c in score_all(names, profile)
        ],
    }

    if isinstance(resolution, Unique):
        payload.update(outcome="unique", selected=resolution.name)
        code = EXIT_OK
    elif isinstance(resolution, Ambiguous):
        payload.update(outcome="ambiguous", tied=resolution.names)
        code = EXIT_AMBIGUOUS
    else:
        payload.update(outcome="no_match")
        code = EXIT_FAILED

    _print_json(payload)
    return code


def cmd_untag(args: argparse.Namespace) -> int:
    cfg = load_config()
    release = fetch_release(args.repo, args.tag, network=cfg.network)
    _print_json({"tag": release.tag, "assets": [untag(release.tag, name) for name in release.asset_names]})
    return EXIT_OK


def cmd_download(args: argparse.Namespace) -> int:
    cfg = load_config()
    if args.no_extract:
        cfg.download.extract_archives = False
    if args.no_verify:
        cfg.download.verify_checksums = False

    output = Path(args.output).expanduser().resolve() if args.output else Path.cwd()
    outcome = download_release_asset(
        repo=args.repo,
        destination_dir=output,
        tag=args.tag,
        select=args.select,
        executable_name=args.executable,
        cfg=cfg,
        progress=(lambda msg: print(msg, file=sys.stderr)) if args.verbose else None,
    )

    _print_json(
        {
            "tag": outcome.tag,
            "profile": _profile_payload(outcome.profile),
            "asset": outcome.asset.name,
            "path": str(outcome.result.local_path),
            "verified": outcome.result.verified,
            "archive": outcome.result.archive,
        }
    )
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="relpick", description="Pick and download release assets for this machine")
    sub = parser.add_subparsers(dest="command", required=True)

    platform_cmd = sub.add_parser("platform", help="Print the detected platform profile")
    platform_cmd.set_defaults(func=cmd_platform)

    resolve_cmd = sub.add_parser("resolve", help="Score release assets against this machine")
    resolve_cmd.add_argument("repo", type=_repository, nargs="?", default=None, help="GitHub OWNER/REPO")
    resolve_cmd.add_argument("--tag", default=None, help="Release tag (default: latest)")
    resolve_cmd.add_argument("--asset", action="append", default=[], help="Resolve these names instead of a release")
    resolve_cmd.set_defaults(func=cmd_resolve)

    untag_cmd = sub.add_parser("untag", help="List asset names with the release tag replaced by {tag}")
    untag_cmd.add_argument("repo", type=_repository, help="GitHub OWNER/REPO")
    untag_cmd.add_argument("--tag", default=None, help="Release tag (default: latest)")
    untag_cmd.set_defaults(func=cmd_untag)

    dl_cmd = sub.add_parser("download", help="Download the asset matching this machine")
    dl_cmd.add_argument("repo", type=_repository, help="GitHub OWNER/REPO")
    dl_cmd.add_argument("--tag", default=None, help="Release tag (default: latest)")
    dl_cmd.add_argument("--select", default=None, help="Asset name to download; may contain {tag} or {version}")
    dl_cmd.add_argument("--output", "-o", default=None, help="Existing destination directory (default: cwd)")
    dl_cmd.add_argument("--executable", default=None, help="Name of the executable to take from an archive")
    dl_cmd.add_argument("--no-extract", action="store_true", help="Keep archives as downloaded")
    dl_cmd.add_argument("--no-verify", action="store_true", help="Skip checksum lookup")
    dl_cmd.add_argument("--verbose", "-v", action="store_true", help="Print progress to stderr")
    dl_cmd.set_defaults(func=cmd_download)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "resolve" and not args.repo and not args.asset:
        parser.error("resolve needs OWNER/REPO or at least one --asset")

    cfg = load_config()
    configure_logging(keep_files=cfg.logging.keep_log_files, console=False, level=cfg.logging.level)
    install_crash_hooks()

    try:
        return int(args.func(args))
    except SelectionError as exc:
        payload: dict[str, Any] = {"error": str(exc), "type": type(exc).__name__}
        if isinstance(exc.resolution, Ambiguous):
            payload["tied"] = exc.resolution.names
            _print_json(payload, stream=sys.stderr)
            return EXIT_AMBIGUOUS
        if isinstance(exc.resolution, NoMatch):
            payload["outcome"] = "no_match"
        _print_json(payload, stream=sys.stderr)
        return EXIT_FAILED
    except RelpickError as exc:
        _print_json({"error": str(exc), "type": type(exc).__name__}, stream=sys.stderr)
        return EXIT_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
