"""Tag-independent asset names.

Asset names usually embed the release tag (``tool-v1.4.0-linux.tar.gz``).
Replacing it with a placeholder gives a name that selects the same asset in
every release.
"""

from __future__ import annotations

from typing import Iterable


TAG_PLACEHOLDER = "{tag}"
VERSION_PLACEHOLDER = "{version}"


def _version(tag: str) -> str:
    return tag[1:] if tag[:1] in ("v", "V") and tag[1:2].isdigit() else tag


def untag(tag: str, asset_name: str) -> str:
    if tag and tag in asset_name:
        return asset_name.replace(tag, TAG_PLACEHOLDER)
    version = _version(tag)
    if version and version in asset_name:
        return asset_name.replace(version, VERSION_PLACEHOLDER)
    return asset_name


def tag_name(tag: str, untagged: str) -> str:
    return untagged.replace(TAG_PLACEHOLDER, tag).replace(VERSION_PLACEHOLDER, _version(tag))


def select_tagged(tag: str, untagged: str, asset_names: Iterable[str]) -> str | None:
    wanted = tag_name(tag, untagged)
    for name in asset_names:
        if name == wanted:
            return name
    return None
