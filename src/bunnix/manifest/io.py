"""Manifest parser and serializer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from bunnix.errors import ManifestError
from bunnix.manifest.model import (
    ENTRY_KINDS,
    OPTIONAL_FIELDS,
    REQUIRED_FIELDS,
    EntryKind,
    Manifest,
    PackageEntry,
)

MANIFEST_VERSION = 1


def serialize_manifest(manifest: Manifest) -> str:
    payload = {
        "version": manifest.version,
        "packages": {
            name: {"kind": entry.kind, **entry.attributes()}
            for name, entry in manifest.packages.items()
        },
    }
    return json.dumps(payload, indent=2, sort_keys=True) + "\n"


def parse_manifest(raw: str) -> Manifest:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ManifestError("Invalid manifest JSON.", hint=str(exc)) from exc

    if not isinstance(payload, dict):
        raise ManifestError("Invalid manifest payload type.")

    version = _required_int(payload, "version")
    if version != MANIFEST_VERSION:
        raise ManifestError(
            "Unsupported manifest version.",
            hint=f"Regenerate the manifest with version {MANIFEST_VERSION}.",
            context={"version": str(version)},
        )
    packages_raw = payload.get("packages", {})
    if not isinstance(packages_raw, dict):
        raise ManifestError("Invalid manifest `packages` value.")
    packages = {name: _parse_entry(name, item) for name, item in packages_raw.items()}
    return Manifest(version=version, packages=packages)


def read_manifest(path: str | Path) -> Manifest:
    manifest_path = Path(path)
    try:
        raw = manifest_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ManifestError(
            "Manifest does not exist.",
            hint="Export the lockfile entries to a manifest first.",
            context={"path": str(manifest_path)},
        ) from exc
    except UnicodeDecodeError as exc:
        raise ManifestError(
            "Manifest is not valid UTF-8.",
            hint=str(exc),
            context={"path": str(manifest_path)},
        ) from exc
    except OSError as exc:
        raise ManifestError(
            "Manifest could not be read.",
            hint=exc.strerror or str(exc),
            context={"path": str(manifest_path)},
        ) from exc
    return parse_manifest(raw)


def write_manifest(manifest: Manifest, path: str | Path) -> Path:
    manifest_path = Path(path)
    manifest_path.parent.mkdir(parents=True, exist_ok=True)
    manifest_path.write_text(serialize_manifest(manifest), encoding="utf-8")
    return manifest_path


def _parse_entry(name: Any, item: Any) -> PackageEntry:
    if not isinstance(name, str) or not name:
        raise ManifestError("Invalid manifest package name.")
    if not isinstance(item, dict):
        raise ManifestError("Invalid package entry in manifest.", context={"package": name})

    kind = _required_str(item, "kind", package=name)
    if kind not in ENTRY_KINDS:
        raise ManifestError(
            "Unknown package entry kind.",
            hint=f"Use one of: {', '.join(ENTRY_KINDS)}.",
            context={"package": name, "kind": kind},
        )
    entry_kind: EntryKind = kind  # type: ignore[assignment]

    required = REQUIRED_FIELDS[entry_kind]
    optional = OPTIONAL_FIELDS.get(entry_kind, ())
    unknown = sorted(set(item) - {"kind", *required, *optional})
    if unknown:
        raise ManifestError(
            "Unexpected fields in package entry.",
            context={"package": name, "kind": kind, "fields": ", ".join(unknown)},
        )

    values = {key: _required_str(item, key, package=name) for key in required}
    values.update({key: _optional_str(item, key, package=name) for key in optional})
    return PackageEntry(name=name, kind=entry_kind, **values)


def _required_str(payload: dict[str, Any], key: str, *, package: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise ManifestError(f"Invalid manifest `{key}` value.", context={"package": package})
    return value


def _optional_str(payload: dict[str, Any], key: str, *, package: str) -> str:
    value = payload.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ManifestError(f"Invalid manifest `{key}` value.", context={"package": package})
    return value


def _required_int(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ManifestError(f"Invalid manifest `{key}` value.")
    return value
