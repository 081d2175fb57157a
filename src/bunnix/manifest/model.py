"""Manifest typed model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from bunnix.errors import ValidationError

EntryKind = Literal["npm", "url", "git", "github", "tarball", "path"]

ENTRY_KINDS: tuple[EntryKind, ...] = ("npm", "url", "git", "github", "tarball", "path")

REQUIRED_FIELDS: dict[EntryKind, tuple[str, ...]] = {
    "npm": ("hash",),
    "url": ("url", "hash"),
    "git": ("url", "rev", "hash"),
    "github": ("owner", "repo", "rev", "hash"),
    "tarball": ("url", "hash"),
    "path": ("path",),
}

OPTIONAL_FIELDS: dict[EntryKind, tuple[str, ...]] = {
    "npm": ("ident", "registry"),
}


@dataclass(frozen=True, slots=True)
class PackageEntry:
    """One package as already extracted from a lockfile.

    ``ident`` falls back to ``name`` for npm entries.
    """

    name: str
    kind: EntryKind
    ident: str = ""
    hash: str = ""
    registry: str = ""
    url: str = ""
    rev: str = ""
    owner: str = ""
    repo: str = ""
    path: str = ""

    def __post_init__(self) -> None:
        if self.kind not in ENTRY_KINDS:
            raise ValidationError(
                "Unknown package entry kind.",
                hint=f"Use one of: {', '.join(ENTRY_KINDS)}.",
                context={"package": self.name, "kind": str(self.kind)},
            )
        missing = [name for name in REQUIRED_FIELDS[self.kind] if not getattr(self, name)]
        if missing:
            raise ValidationError(
                "Package entry is missing required fields.",
                context={"package": self.name, "kind": self.kind, "fields": ", ".join(missing)},
            )

    @property
    def npm_ident(self) -> str:
        return self.ident or self.name

    def attributes(self) -> dict[str, str]:
        names = REQUIRED_FIELDS[self.kind] + OPTIONAL_FIELDS.get(self.kind, ())
        return {name: getattr(self, name) for name in names if getattr(self, name)}


@dataclass(frozen=True, slots=True)
class Manifest:
    version: int
    packages: dict[str, PackageEntry] = field(default_factory=dict)
