"""GitHub Releases API client returning release descriptors."""

from __future__ import annotations

import json
import re
import urllib.error
from typing import Any

from relpick_core.config import NetworkConfig
from relpick_core.errors import ReleaseLookupError
from relpick_core.http import urlopen
from relpick_resolver.models import Release, ReleaseAsset


_REPO_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


def parse_repository(value: str) -> str:
    repo = value.strip().removeprefix("https://github.com/").strip("/")
    if not _REPO_RE.match(repo):
        raise ValueError(f"Expected OWNER/REPO, got {value!r}")
    return repo


def release_url(repo: str, tag: str | None = None, api_base: str = "https://api.github.com") -> str:
    base = api_base.rstrip("/")
    if not tag or tag == "latest":
        return f"{base}/repos/{repo}/releases/latest"
    return f"{base}/repos/{repo}/releases/tags/{tag}"


def parse_release(payload: dict[str, Any]) -> Release:
    return Release(
        tag=payload.get("tag_name") or "",
        assets=tuple(
            ReleaseAsset(
                name=item["name"],
                download_url=item["browser_download_url"],
                size=int(item.get("size") or 0),
            )
            for item in payload.get("assets", [])
        ),
    )


def fetch_release(
    repo: str,
    tag: str | None = None,
    network: NetworkConfig | None = None,
    timeout: int = 30,
) -> Release:
    network = network or NetworkConfig()
    url = release_url(repo, tag, network.api_base)
    label = tag or "latest"

    try:
        with urlopen(url, timeout=timeout, accept="application/vnd.github+json", network=network) as response:
            payload = json.loads(response.read().decode("utf-8"))
    except urllib.error.HTTPError as exc:
        if exc.code == 404:
            raise ReleaseLookupError(f"No release {label} found for {repo}") from exc
        raise ReleaseLookupError(f"Error fetching release {label} of {repo}: HTTP {exc.code}") from exc
    except (urllib.error.URLError, OSError, ValueError) as exc:
        raise ReleaseLookupError(f"Error fetching release {label} of {repo}: {exc}") from exc

    try:
        return parse_release(payload)
    except (KeyError, TypeError, AttributeError) as exc:
        raise ReleaseLookupError(f"Unexpected release payload for {repo}: {exc}") from exc


def fetch_text(url: str, network: NetworkConfig | None = None, timeout: int = 30) -> str:
    """Fetch a small text asset such as a checksum manifest."""
    try:
        with urlopen(url, timeout=timeout, network=network) as response:
            return response.read().decode("utf-8", errors="replace")
    except (urllib.error.URLError, OSError) as exc:
        raise ReleaseLookupError(f"Error fetching {url}: {exc}") from exc
