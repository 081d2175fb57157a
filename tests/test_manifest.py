import json
from pathlib import Path

import pytest

from bunnix.errors import IdentifierFormatError, ManifestError, ValidationError
from bunnix.fetcher import CopyToStore, FetchGit, FetchGitHub, FetchTarball, FetchUrl
from bunnix.manifest import (
    Manifest,
    PackageEntry,
    build_fetcher,
    parse_manifest,
    read_manifest,
    resolve_manifest,
    serialize_manifest,
    write_manifest,
)
from bunnix.observability import StructuredLogger
from bunnix.options import Options


def _manifest_payload() -> dict[str, object]:
    return {
        "version": 1,
        "packages": {
            "@alloc/quick-lru": {
                "kind": "npm",
                "ident": "@alloc/quick-lru@5.2.0",
                "hash": "sha512-quick",
            },
            "lodash@4.17.21": {"kind": "npm", "hash": "sha512-lodash"},
            "private": {
                "kind": "npm",
                "ident": "private@2.0.0",
                "hash": "sha512-private",
                "registry": "https://npm.example.com",
            },
            "bun-types": {
                "kind": "github",
                "owner": "oven-sh",
                "repo": "bun",
                "rev": "abc123",
                "hash": "sha256-gh",
            },
            "dep-git": {
                "kind": "git",
                "url": "https://git.example.invalid/dep.git",
                "rev": "def456",
                "hash": "sha256-git",
            },
            "archive": {
                "kind": "tarball",
                "url": "https://example.invalid/archive.tar.gz",
                "hash": "sha256-tar",
            },
            "direct": {"kind": "url", "url": "https://example.invalid/x.tgz", "hash": "sha256-x"},
            "app": {"kind": "path", "path": "packages/app"},
        },
    }


def test_parse_manifest_builds_typed_entries() -> None:
    manifest = parse_manifest(json.dumps(_manifest_payload()))

    assert manifest.version == 1
    assert manifest.packages["app"] == PackageEntry(name="app", kind="path", path="packages/app")
    assert manifest.packages["lodash@4.17.21"].npm_ident == "lodash@4.17.21"
    assert manifest.packages["private"].registry == "https://npm.example.com"


def test_manifest_roundtrip_parser_serializer() -> None:
    manifest = parse_manifest(json.dumps(_manifest_payload()))

    assert parse_manifest(serialize_manifest(manifest)) == manifest


def test_read_and_write_manifest(tmp_path: Path) -> None:
    manifest = Manifest(
        version=1,
        packages={"app": PackageEntry(name="app", kind="path", path="packages/app")},
    )

    path = write_manifest(manifest, tmp_path / "nested" / "manifest.json")

    assert read_manifest(path) == manifest


def test_read_manifest_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ManifestError) as excinfo:
        read_manifest(tmp_path / "missing.json")

    assert excinfo.value.context["path"].endswith("missing.json")


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[]",
        json.dumps({"version": 2, "packages": {}}),
        json.dumps({"version": 1, "packages": []}),
        json.dumps({"version": 1, "packages": {"x": {"kind": "svn", "url": "svn://x"}}}),
        json.dumps({"version": 1, "packages": {"x": {"kind": "git", "url": "u", "hash": "h"}}}),
        json.dumps({"version": 1, "packages": {"x": {"kind": "path", "path": "p", "rev": "r"}}}),
        json.dumps({"version": 1, "packages": {"x": {"kind": "npm", "hash": "h", "ident": 3}}}),
    ],
)
def test_parse_manifest_rejects_malformed_payloads(raw: str) -> None:
    with pytest.raises(ManifestError):
        parse_manifest(raw)


def test_build_fetcher_covers_every_kind() -> None:
    manifest = parse_manifest(json.dumps(_manifest_payload()))
    packages = manifest.packages

    assert build_fetcher(packages["@alloc/quick-lru"]) == FetchUrl(
        url="https://registry.npmjs.org/@alloc/quick-lru/-/quick-lru-5.2.0.tgz",
        hash="sha512-quick",
    )
    assert build_fetcher(packages["private"]) == FetchUrl(
        url="https://npm.example.com/private/-/private-2.0.0.tgz",
        hash="sha512-private",
    )
    assert build_fetcher(packages["bun-types"]) == FetchGitHub(
        owner="oven-sh", repo="bun", rev="abc123", hash="sha256-gh"
    )
    assert build_fetcher(packages["dep-git"]) == FetchGit(
        url="https://git.example.invalid/dep.git", rev="def456", hash="sha256-git"
    )
    assert build_fetcher(packages["archive"]) == FetchTarball(
        url="https://example.invalid/archive.tar.gz", hash="sha256-tar"
    )
    assert build_fetcher(packages["direct"]) == FetchUrl(
        url="https://example.invalid/x.tgz", hash="sha256-x"
    )
    assert build_fetcher(packages["app"]) == CopyToStore(path="packages/app")


def test_entry_registry_takes_precedence_over_options() -> None:
    entry = PackageEntry(
        name="private",
        kind="npm",
        ident="private@2.0.0",
        hash="sha512-p",
        registry="https://npm.example.com/",
    )
    options = Options(registry="https://mirror.example.com")

    assert build_fetcher(entry, options).url == "https://npm.example.com/private/-/private-2.0.0.tgz"
    plain = PackageEntry(name="plain@1.0.0", kind="npm", hash="sha512-p")
    assert build_fetcher(plain, options).url == "https://mirror.example.com/plain/-/plain-1.0.0.tgz"


def test_resolve_manifest_logs_each_package() -> None:
    manifest = parse_manifest(json.dumps(_manifest_payload()))
    logger = StructuredLogger()

    fetchers = resolve_manifest(manifest, logger=logger)

    assert sorted(fetchers) == sorted(manifest.packages)
    assert logger.records_for_package("bun-types")[0]["variant"] == "FetchGitHub"


def test_resolve_manifest_aborts_on_malformed_identifier_by_default() -> None:
    manifest = Manifest(
        version=1,
        packages={"broken": PackageEntry(name="broken", kind="npm", hash="sha512-b")},
    )

    with pytest.raises(IdentifierFormatError):
        resolve_manifest(manifest)


def test_resolve_manifest_can_skip_malformed_identifiers() -> None:
    manifest = Manifest(
        version=1,
        packages={
            "broken": PackageEntry(name="broken", kind="npm", hash="sha512-b"),
            "app": PackageEntry(name="app", kind="path", path="packages/app"),
        },
    )
    logger = StructuredLogger()

    fetchers = resolve_manifest(
        manifest,
        Options(invalid_identifier_policy="skip"),
        logger=logger,
    )

    assert fetchers == {"app": CopyToStore(path="packages/app")}
    skipped = logger.records_for_package("broken")
    assert skipped[0]["level"] == "warning"
    assert skipped[0]["extra"]["code"] == "E_NO_AT_IN_PACKAGE_IDENTIFIER"


def test_package_entry_rejects_unknown_kind() -> None:
    with pytest.raises(ValidationError) as excinfo:
        PackageEntry(name="x", kind="svn", url="svn://example.invalid/x")  # type: ignore[arg-type]

    assert excinfo.value.context["kind"] == "svn"


@pytest.mark.parametrize(
    ("kind", "fields"),
    [
        ("path", "path"),
        ("npm", "hash"),
        ("git", "url, rev"),
        ("github", "owner, repo, rev, hash"),
    ],
)
def test_package_entry_requires_fields_for_its_kind(kind: str, fields: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        PackageEntry(name="x", kind=kind, hash="sha256-h" if kind == "git" else "")  # type: ignore[arg-type]

    assert excinfo.value.context["fields"] == fields


def test_parse_manifest_rejects_boolean_version() -> None:
    with pytest.raises(ManifestError):
        parse_manifest(json.dumps({"version": True, "packages": {}}))
