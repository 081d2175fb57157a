"""Assembly of rendered fetchers into a single Nix document."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import cbor2

from bunnix.fetcher import Fetcher
from bunnix.observability import StructuredLogger
from bunnix.render import render

HEADER = "# This file was autogenerated by bunnix; do not edit by hand."

PRIMITIVES = ("copyPathToStore", "fetchFromGitHub", "fetchgit", "fetchurl")


@dataclass(frozen=True, slots=True)
class NixDocument:
    fetchers: Mapping[str, Fetcher] = field(default_factory=dict)
    schema_version: int = 1

    def render(
        self,
        *,
        templates: Mapping[str, str] | None = None,
        logger: StructuredLogger | None = None,
    ) -> str:
        lines = [HEADER, "{"]
        lines.extend(f"  {name}," for name in PRIMITIVES)
        lines.extend(["  ...", "}:", "{"])
        for name, fetcher in sorted(self.fetchers.items()):
            fragment = render(fetcher, templates=templates)
            body = fragment.replace("\n", "\n  ")
            lines.append(f"  {_nix_string(name)} = {body};")
            if logger is not None:
                logger.log(
                    operation="render",
                    package=name,
                    variant=type(fetcher).__name__,
                    message="Rendered fetcher.",
                )
        lines.append("}")
        return "\n".join(lines) + "\n"

    def write(
        self,
        path: str | Path,
        *,
        templates: Mapping[str, str] | None = None,
        logger: StructuredLogger | None = None,
    ) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render(templates=templates, logger=logger), encoding="utf-8")
        return output_path

    def unique_fetchers(self) -> tuple[Fetcher, ...]:
        return tuple(sorted(set(self.fetchers.values())))

    def to_json(self, path: str | Path | None = None) -> str:
        payload = self._payload()
        encoded = json.dumps(payload, indent=2, sort_keys=True) + "\n"
        if path is not None:
            output_path = Path(path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        payload = self._payload()
        encoded = cbor2.dumps(payload, canonical=True)
        if path is not None:
            output_path = Path(path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(encoded)
        return encoded

    def _payload(self) -> dict[str, object]:
        return {
            "schema_version": self.schema_version,
            "packages": {
                name: fetcher.to_payload() for name, fetcher in sorted(self.fetchers.items())
            },
        }


def _nix_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("${", "\\${")
    return f'"{escaped}"'
