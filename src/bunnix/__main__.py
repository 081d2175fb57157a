"""CLI for rendering a package manifest into a Nix fetcher document.

Usage:
    python -m bunnix manifest.json -o bun.nix
    python -m bunnix manifest.json --registry https://npm.example.com --skip-invalid
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from bunnix.document import NixDocument
from bunnix.errors import BunnixError
from bunnix.manifest import read_manifest, resolve_manifest
from bunnix.observability import StructuredLogger
from bunnix.options import Options
from bunnix.render import templates_from


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bunnix",
        description="Render package manifest entries into Nix fetcher expressions",
    )
    parser.add_argument("manifest", type=Path, help="Path to the package manifest JSON")
    parser.add_argument("-o", "--output", type=Path, help="Write the Nix document here")
    parser.add_argument("--registry", help="Registry base URL for npm entries without one")
    parser.add_argument("--templates", type=Path, help="Directory of *.nix_template overrides")
    parser.add_argument(
        "--skip-invalid",
        action="store_true",
        help="Skip packages with malformed identifiers instead of failing",
    )
    parser.add_argument("--export-json", type=Path, help="Write resolved fetchers as JSON")
    parser.add_argument("--export-cbor", type=Path, help="Write resolved fetchers as CBOR")
    parser.add_argument("--log-json", type=Path, help="Write structured log records as JSON lines")
    return parser


def run(args: argparse.Namespace) -> None:
    options = Options(
        registry=args.registry,
        template_dir=args.templates,
        invalid_identifier_policy="skip" if args.skip_invalid else "error",
    )
    logger = StructuredLogger()
    try:
        manifest = read_manifest(args.manifest)
        fetchers = resolve_manifest(manifest, options, logger=logger)
        for record in logger.records:
            if record["level"] == "warning":
                print(f"warning: {record['package']}: {record['message']}", file=sys.stderr)
        document = NixDocument(fetchers=fetchers)
        templates = templates_from(options)
        if args.output is not None:
            document.write(args.output, templates=templates, logger=logger)
        else:
            sys.stdout.write(document.render(templates=templates, logger=logger))
        if args.export_json is not None:
            document.to_json(args.export_json)
        if args.export_cbor is not None:
            document.to_cbor(args.export_cbor)
    finally:
        if args.log_json is not None:
            logger.to_json_lines(args.log_json)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        run(args)
    except BunnixError as exc:
        print(f"error[{exc.code}]: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
