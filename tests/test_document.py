import json
from pathlib import Path

import cbor2

from bunnix.document import NixDocument
from bunnix.fetcher import CopyToStore, FetchGitHub, FetchUrl, fetcher_from_payload
from bunnix.observability import StructuredLogger
from bunnix.render import TEMPLATES


def _document() -> NixDocument:
    shared = FetchUrl(url="https://registry.npmjs.org/pkg/-/pkg-1.0.0.tgz", hash="sha256-abc")
    return NixDocument(
        fetchers={
            "pkg@1.0.0": shared,
            "workspace": CopyToStore(path="packages/app"),
            "alias@1.0.0": shared,
            "bun-types": FetchGitHub(owner="oven-sh", repo="bun", rev="abc", hash="sha256-gh"),
        }
    )


def test_document_renders_sorted_attribute_set() -> None:
    rendered = _document().render()

    assert rendered == (
        "# This file was autogenerated by bunnix; do not edit by hand.\n"
        "{\n"
        "  copyPathToStore,\n"
        "  fetchFromGitHub,\n"
        "  fetchgit,\n"
        "  fetchurl,\n"
        "  ...\n"
        "}:\n"
        "{\n"
        '  "alias@1.0.0" = fetchurl {\n'
        '    url = "https://registry.npmjs.org/pkg/-/pkg-1.0.0.tgz";\n'
        '    hash = "sha256-abc";\n'
        "  };\n"
        '  "bun-types" = fetchFromGitHub {\n'
        '    owner = "oven-sh";\n'
        '    repo = "bun";\n'
        '    rev = "abc";\n'
        '    hash = "sha256-gh";\n'
        "  };\n"
        '  "pkg@1.0.0" = fetchurl {\n'
        '    url = "https://registry.npmjs.org/pkg/-/pkg-1.0.0.tgz";\n'
        '    hash = "sha256-abc";\n'
        "  };\n"
        '  "workspace" = copyPathToStore ./packages/app;\n'
        "}\n"
    )


def test_document_render_is_stable() -> None:
    assert _document().render() == _document().render()


def test_empty_document_is_an_empty_attribute_set() -> None:
    assert NixDocument().render().endswith("}:\n{\n}\n")


def test_package_names_are_escaped() -> None:
    document = NixDocument(fetchers={'we"ird${x}': CopyToStore(path="p")})

    assert '  "we\\"ird\\${x}" = copyPathToStore ./p;' in document.render()


def test_document_uses_custom_templates_and_logs(tmp_path: Path) -> None:
    templates = {**TEMPLATES, "copy-to-store": "./${path}"}
    logger = StructuredLogger()

    path = _document().write(tmp_path / "out" / "bun.nix", templates=templates, logger=logger)

    assert '  "workspace" = ./packages/app;' in path.read_text(encoding="utf-8")
    assert [record["package"] for record in logger.records] == [
        "alias@1.0.0",
        "bun-types",
        "pkg@1.0.0",
        "workspace",
    ]


def test_unique_fetchers_deduplicates_in_total_order() -> None:
    unique = _document().unique_fetchers()

    assert [type(fetcher).__name__ for fetcher in unique] == [
        "FetchUrl",
        "FetchGitHub",
        "CopyToStore",
    ]


def test_json_and_cbor_exports_are_stable(tmp_path: Path) -> None:
    document = _document()

    assert document.to_json() == document.to_json()
    assert document.to_cbor() == document.to_cbor()

    json_path = tmp_path / "fetchers.json"
    cbor_path = tmp_path / "fetchers.cbor"
    document.to_json(json_path)
    document.to_cbor(cbor_path)

    from_json = json.loads(json_path.read_text(encoding="utf-8"))
    from_cbor = cbor2.loads(cbor_path.read_bytes())
    assert from_json == from_cbor
    assert from_json["schema_version"] == 1
    assert fetcher_from_payload(from_json["packages"]["workspace"]) == CopyToStore(
        path="packages/app"
    )


def test_exports_create_missing_parent_directories(tmp_path: Path) -> None:
    document = _document()

    json_path = tmp_path / "exports" / "json" / "fetchers.json"
    cbor_path = tmp_path / "exports" / "cbor" / "fetchers.cbor"
    document.to_json(json_path)
    document.to_cbor(cbor_path)

    assert json_path.read_text(encoding="utf-8") == document.to_json()
    assert cbor_path.read_bytes() == document.to_cbor()
