"""Resolution of a release's asset list to a single platform-compatible asset."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from .matcher import score
from .models import ArchiveKind, Candidate, Release, ReleaseAsset
from .platform_profile import PlatformProfile
from .tokens import tokenize


@dataclass(frozen=True)
class Unique:
    candidate: Candidate

    @property
    def name(self) -> str:
        return self.candidate.name


@dataclass(frozen=True)
class Ambiguous:
    candidates: tuple[Candidate, ...]

    def __post_init__(self) -> None:
        if len(self.candidates) < 2:
            raise ValueError("Ambiguous resolution needs at least two candidates")
        if len({c.score for c in self.candidates}) != 1:
            raise ValueError("Ambiguous candidates must share the top score")

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.candidates]


@dataclass(frozen=True)
class NoMatch:
    pass


Resolution = Union[Unique, Ambiguous, NoMatch]


_KINDS_BY_VALUE = {kind.value: kind for kind in ArchiveKind}


def _preference_order(preference: Sequence[ArchiveKind | str]) -> list[ArchiveKind]:
    """Known archive kinds from ``preference`` in order; unknown names are dropped."""
    order: list[ArchiveKind] = []
    for entry in preference:
        kind = _KINDS_BY_VALUE.get(str(entry.value if isinstance(entry, ArchiveKind) else entry).lower())
        if kind is not None and kind not in order:
            order.append(kind)
    return order


def _preference_rank(candidate: Candidate, preference: Sequence[ArchiveKind]) -> int:
    kind = candidate.asset.extension
    if kind is not None and kind in preference:
        return preference.index(kind)
    return len(preference)


def _break_ties(tied: list[Candidate], preference: Sequence[ArchiveKind]) -> list[Candidate]:
    if not preference or len(tied) < 2:
        return tied
    best = min(_preference_rank(c, preference) for c in tied)
    return [c for c in tied if _preference_rank(c, preference) == best]


def score_all(assets: Iterable[str], profile: PlatformProfile) -> list[Candidate]:
    return [score(tokenize(name), profile) for name in assets]


def resolve(
    assets: Iterable[str],
    profile: PlatformProfile,
    preference: Sequence[ArchiveKind | str] = (),
) -> Resolution:
    """Pick the single best asset for ``profile``.

    Ties at the top score are narrowed by the archive ``preference`` order when
    one is given (names that are not archive kinds are ignored); whatever
    remains tied is returned as ``Ambiguous`` in input order. Absence of a
    match is a normal outcome, never an exception.
    """
    order = _preference_order(preference)
    compatible = [c for c in score_all(assets, profile) if c.compatible]
    if not compatible:
        return NoMatch()

    top = max(c.score for c in compatible)
    tied = _break_ties([c for c in compatible if c.score == top], order)
    if len(tied) == 1:
        return Unique(tied[0])
    return Ambiguous(tuple(tied))


def resolve_release(
    release: Release,
    profile: PlatformProfile,
    preference: Sequence[ArchiveKind | str] = (),
) -> Resolution:
    return resolve(release.asset_names, profile, preference)


def selected_asset(release: Release, resolution: Resolution) -> ReleaseAsset | None:
    if isinstance(resolution, Unique):
        return release.asset_named(resolution.name)
    return None
