"""Platform detection, asset tokenizing, and release asset resolution."""

from .matcher import is_compatible, score
from .models import (
    ArchiveKind,
    AssetTokens,
    Candidate,
    CpuArch,
    LibcVariant,
    OsFamily,
    Release,
    ReleaseAsset,
)
from .platform_profile import PlatformProfile, detect_profile
from .resolution import Ambiguous, NoMatch, Resolution, Unique, resolve, resolve_release, selected_asset
from .tagged import select_tagged, tag_name, untag
from .tokens import strip_archive_extension, tokenize

__all__ = [
    "Ambiguous",
    "ArchiveKind",
    "AssetTokens",
    "Candidate",
    "CpuArch",
    "LibcVariant",
    "NoMatch",
    "OsFamily",
    "PlatformProfile",
    "Release",
    "ReleaseAsset",
    "Resolution",
    "Unique",
    "detect_profile",
    "is_compatible",
    "resolve",
    "resolve_release",
    "score",
    "select_tagged",
    "selected_asset",
    "strip_archive_extension",
    "tag_name",
    "tokenize",
    "untag",
]
