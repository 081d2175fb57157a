"""Translate manifest entries into fetchers."""

from __future__ import annotations

from typing import assert_never

from bunnix.errors import IdentifierFormatError
from bunnix.fetcher import (
    CopyToStore,
    Fetcher,
    FetchGit,
    FetchGitHub,
    FetchTarball,
    FetchUrl,
    new_npm_package,
)
from bunnix.manifest.model import Manifest, PackageEntry
from bunnix.observability import StructuredLogger
from bunnix.options import Options, registry_for


def build_fetcher(entry: PackageEntry, options: Options | None = None) -> Fetcher:
    match entry.kind:
        case "npm":
            registry = registry_for(options=options, entry_registry=entry.registry)
            return new_npm_package(entry.npm_ident, entry.hash, registry)
        case "url":
            return FetchUrl(url=entry.url, hash=entry.hash)
        case "git":
            return FetchGit(url=entry.url, rev=entry.rev, hash=entry.hash)
        case "github":
            return FetchGitHub(owner=entry.owner, repo=entry.repo, rev=entry.rev, hash=entry.hash)
        case "tarball":
            return FetchTarball(url=entry.url, hash=entry.hash)
        case "path":
            return CopyToStore(path=entry.path)
        case _:
            assert_never(entry.kind)


def resolve_manifest(
    manifest: Manifest,
    options: Options | None = None,
    *,
    logger: StructuredLogger | None = None,
) -> dict[str, Fetcher]:
    """Resolve every entry; malformed identifiers abort or are skipped per options."""
    policy = options.invalid_identifier_policy if options is not None else "error"
    resolved: dict[str, Fetcher] = {}
    for name, entry in sorted(manifest.packages.items()):
        try:
            fetcher = build_fetcher(entry, options)
        except IdentifierFormatError as exc:
            if policy == "error":
                raise
            if logger is not None:
                logger.log(
                    operation="resolve",
                    package=name,
                    variant=None,
                    message="Skipped package with malformed identifier.",
                    level="warning",
                    extra=exc.to_dict(),
                )
            continue
        resolved[name] = fetcher
        if logger is not None:
            logger.log(
                operation="resolve",
                package=name,
                variant=type(fetcher).__name__,
                message=f"Resolved {entry.kind} entry.",
            )
    return resolved
