"""Compatibility filter and scoring of tokenized assets against a platform profile."""

from __future__ import annotations

from typing import Callable

from .models import AssetTokens, Candidate, CpuArch
from .platform_profile import PlatformProfile


ARCH_EXACT_POINTS = 3
LIBC_EXACT_POINTS = 2
# A declared libc accepted only because the profile libc is unknown.
LIBC_UNVERIFIED_POINTS = -1
ARCHIVE_POINTS = 1

Rule = Callable[[AssetTokens, PlatformProfile], bool]
Points = Callable[[AssetTokens, PlatformProfile], int]


def _is_binary(tokens: AssetTokens, _profile: PlatformProfile) -> bool:
    return not tokens.metadata


def _declares_os(tokens: AssetTokens, _profile: PlatformProfile) -> bool:
    return tokens.os is not None


def _os_matches(tokens: AssetTokens, profile: PlatformProfile) -> bool:
    return tokens.os == profile.os


def _arch_matches(tokens: AssetTokens, profile: PlatformProfile) -> bool:
    return tokens.arch in (None, CpuArch.UNIVERSAL, profile.arch)


def _libc_matches(tokens: AssetTokens, profile: PlatformProfile) -> bool:
    return tokens.libc is None or profile.libc is None or tokens.libc == profile.libc


COMPATIBILITY_RULES: tuple[Rule, ...] = (
    _is_binary,
    _declares_os,
    _os_matches,
    _arch_matches,
    _libc_matches,
)


def _arch_points(tokens: AssetTokens, profile: PlatformProfile) -> int:
    return ARCH_EXACT_POINTS if tokens.arch == profile.arch else 0


def _libc_points(tokens: AssetTokens, profile: PlatformProfile) -> int:
    if tokens.libc is None:
        return 0
    if profile.libc is None:
        return LIBC_UNVERIFIED_POINTS
    return LIBC_EXACT_POINTS if tokens.libc == profile.libc else 0


def _extension_points(tokens: AssetTokens, _profile: PlatformProfile) -> int:
    return ARCHIVE_POINTS if tokens.extension is not None else 0


SCORING_TERMS: tuple[Points, ...] = (_arch_points, _libc_points, _extension_points)


def is_compatible(tokens: AssetTokens, profile: PlatformProfile) -> bool:
    return all(rule(tokens, profile) for rule in COMPATIBILITY_RULES)


def rank(tokens: AssetTokens, profile: PlatformProfile) -> int:
    return sum(term(tokens, profile) for term in SCORING_TERMS)


def score(tokens: AssetTokens, profile: PlatformProfile) -> Candidate:
    """Score one asset; incompatible assets get score 0 and are never ranked."""
    if not is_compatible(tokens, profile):
        return Candidate(asset=tokens, score=0, compatible=False)
    return Candidate(asset=tokens, score=rank(tokens, profile), compatible=True)
