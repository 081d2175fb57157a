"""Fetcher model: the closed set of Nix fetch strategies for a package."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import ClassVar

from bunnix.errors import ValidationError


class _FetcherMixin:
    """Ordering and payload helpers shared by every fetcher variant.

    Variants order first by declaration order in ``FETCHER_VARIANTS`` and then
    by their fields, so a mixed list sorts deterministically.
    """

    __slots__ = ()

    template: ClassVar[str]

    def field_values(self) -> dict[str, str]:
        return {item.name: getattr(self, item.name) for item in fields(self)}  # type: ignore[arg-type]

    def to_payload(self) -> dict[str, str]:
        return {"type": self.template, **self.field_values()}

    def sort_key(self) -> tuple[int, tuple[str, ...]]:
        return _VARIANT_RANK[type(self)], tuple(self.field_values().values())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, _FetcherMixin):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, _FetcherMixin):
            return NotImplemented
        return self.sort_key() <= other.sort_key()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, _FetcherMixin):
            return NotImplemented
        return self.sort_key() > other.sort_key()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, _FetcherMixin):
            return NotImplemented
        return self.sort_key() >= other.sort_key()

    def _require_non_empty(self) -> None:
        for name, value in self.field_values().items():
            if not isinstance(value, str) or not value:
                raise ValidationError(
                    f"{type(self).__name__}.{name} must be a non-empty string.",
                    hint="Populate every fetcher field from the lockfile entry.",
                    context={"variant": type(self).__name__, "field": name},
                )


@dataclass(frozen=True, slots=True)
class FetchUrl(_FetcherMixin):
    """Single file download via ``fetchurl``."""

    template: ClassVar[str] = "fetchurl"

    url: str
    hash: str

    def __post_init__(self) -> None:
        self._require_non_empty()


@dataclass(frozen=True, slots=True)
class FetchGit(_FetcherMixin):
    """Repository checkout at ``rev`` via ``fetchgit``."""

    template: ClassVar[str] = "fetchgit"

    url: str
    rev: str
    hash: str

    def __post_init__(self) -> None:
        self._require_non_empty()


@dataclass(frozen=True, slots=True)
class FetchGitHub(_FetcherMixin):
    """GitHub-hosted repository via ``fetchFromGitHub``."""

    template: ClassVar[str] = "fetchgithub"

    owner: str
    repo: str
    rev: str
    hash: str

    def __post_init__(self) -> None:
        self._require_non_empty()


@dataclass(frozen=True, slots=True)
class FetchTarball(_FetcherMixin):
    """Archive that is downloaded and unpacked."""

    template: ClassVar[str] = "fetchtarball"

    url: str
    hash: str

    def __post_init__(self) -> None:
        self._require_non_empty()


@dataclass(frozen=True, slots=True)
class CopyToStore(_FetcherMixin):
    """Local path copied verbatim into the store; no network fetch."""

    template: ClassVar[str] = "copy-to-store"

    path: str


Fetcher = FetchUrl | FetchGit | FetchGitHub | FetchTarball | CopyToStore

FETCHER_VARIANTS: tuple[type[Fetcher], ...] = (
    FetchUrl,
    FetchGit,
    FetchGitHub,
    FetchTarball,
    CopyToStore,
)

_VARIANT_RANK: dict[type, int] = {variant: index for index, variant in enumerate(FETCHER_VARIANTS)}
_VARIANT_BY_TAG: dict[str, type[Fetcher]] = {variant.template: variant for variant in FETCHER_VARIANTS}


def fetcher_from_payload(payload: Mapping[str, object]) -> Fetcher:
    """Rebuild a fetcher from the mapping produced by ``to_payload()``."""
    tag = payload.get("type")
    variant = _VARIANT_BY_TAG.get(tag) if isinstance(tag, str) else None
    if variant is None:
        raise ValidationError(
            "Unknown fetcher type.",
            hint=f"Expected one of: {', '.join(sorted(_VARIANT_BY_TAG))}.",
            context={"type": str(tag)},
        )

    expected = [item.name for item in fields(variant)]
    provided = sorted(key for key in payload if key != "type")
    if provided != sorted(expected):
        raise ValidationError(
            "Fetcher payload fields do not match its type.",
            context={
                "type": variant.template,
                "expected": ", ".join(expected),
                "actual": ", ".join(provided),
            },
        )

    values: dict[str, str] = {}
    for name in expected:
        value = payload[name]
        if not isinstance(value, str):
            raise ValidationError(
                "Fetcher payload field must be a string.",
                context={"type": variant.template, "field": name},
            )
        values[name] = value
    return variant(**values)


__all__ = [
    "FETCHER_VARIANTS",
    "CopyToStore",
    "FetchGit",
    "FetchGitHub",
    "FetchTarball",
    "FetchUrl",
    "Fetcher",
    "fetcher_from_payload",
]
