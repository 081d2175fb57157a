"""Manifest model, IO, and resolution helpers."""

from .io import (
    MANIFEST_VERSION,
    parse_manifest,
    read_manifest,
    serialize_manifest,
    write_manifest,
)
from .model import ENTRY_KINDS, EntryKind, Manifest, PackageEntry
from .resolve import build_fetcher, resolve_manifest

__all__ = [
    "ENTRY_KINDS",
    "MANIFEST_VERSION",
    "EntryKind",
    "Manifest",
    "PackageEntry",
    "build_fetcher",
    "parse_manifest",
    "read_manifest",
    "resolve_manifest",
    "serialize_manifest",
    "write_manifest",
]
