"""Nix expression rendering for fetchers.

Every fetcher variant is bound to exactly one template through its
``template`` tag. Templates are ``string.Template`` sources whose
placeholders are the variant's field names; rendering is plain textual
substitution and never inspects the values.
"""

from __future__ import annotations

import textwrap
from collections.abc import Mapping
from pathlib import Path
from string import Template
from typing import assert_never

from bunnix.errors import RenderError, ValidationError
from bunnix.fetcher.model import (
    FETCHER_VARIANTS,
    CopyToStore,
    Fetcher,
    FetchGit,
    FetchGitHub,
    FetchTarball,
    FetchUrl,
)
from bunnix.options import Options

TEMPLATE_SUFFIX = ".nix_template"

FETCHURL_TEMPLATE = textwrap.dedent("""\
    fetchurl {
      url = "${url}";
      hash = "${hash}";
    }""")

FETCHGIT_TEMPLATE = textwrap.dedent("""\
    fetchgit {
      url = "${url}";
      rev = "${rev}";
      hash = "${hash}";
    }""")

FETCHGITHUB_TEMPLATE = textwrap.dedent("""\
    fetchFromGitHub {
      owner = "${owner}";
      repo = "${repo}";
      rev = "${rev}";
      hash = "${hash}";
    }""")

FETCHTARBALL_TEMPLATE = textwrap.dedent("""\
    builtins.fetchTarball {
      url = "${url}";
      sha256 = "${hash}";
    }""")

COPY_TO_STORE_TEMPLATE = "copyPathToStore ./${path}"

TEMPLATES: dict[str, str] = {
    FetchUrl.template: FETCHURL_TEMPLATE,
    FetchGit.template: FETCHGIT_TEMPLATE,
    FetchGitHub.template: FETCHGITHUB_TEMPLATE,
    FetchTarball.template: FETCHTARBALL_TEMPLATE,
    CopyToStore.template: COPY_TO_STORE_TEMPLATE,
}


def template_tag(fetcher: Fetcher) -> str:
    match fetcher:
        case FetchUrl():
            return FetchUrl.template
        case FetchGit():
            return FetchGit.template
        case FetchGitHub():
            return FetchGitHub.template
        case FetchTarball():
            return FetchTarball.template
        case CopyToStore():
            return CopyToStore.template
        case _:
            assert_never(fetcher)


def builtin_template(fetcher: Fetcher) -> str:
    match fetcher:
        case FetchUrl():
            return FETCHURL_TEMPLATE
        case FetchGit():
            return FETCHGIT_TEMPLATE
        case FetchGitHub():
            return FETCHGITHUB_TEMPLATE
        case FetchTarball():
            return FETCHTARBALL_TEMPLATE
        case CopyToStore():
            return COPY_TO_STORE_TEMPLATE
        case _:
            assert_never(fetcher)


def render(fetcher: Fetcher, *, templates: Mapping[str, str] | None = None) -> str:
    """Render ``fetcher`` into the Nix expression that retrieves it."""
    tag = template_tag(fetcher)
    source = builtin_template(fetcher) if templates is None else templates.get(tag)
    if source is None:
        raise RenderError(
            "No template registered for fetcher.",
            hint="Register a template for every fetcher variant.",
            context={"operation": "render", "template": tag},
        )
    try:
        return Template(source).substitute(fetcher.field_values())
    except (KeyError, ValueError) as exc:
        raise RenderError(
            "Template substitution failed.",
            hint="Placeholders must be `$name` or `${name}` using the variant's fields.",
            context={"operation": "render", "template": tag, "error": str(exc)},
        ) from exc


def load_templates(directory: str | Path) -> dict[str, str]:
    """Load ``<tag>.nix_template`` overrides, keeping built-ins for missing tags."""
    root = Path(directory)
    if not root.is_dir():
        raise ValidationError(
            "Template directory does not exist.",
            hint="Point template_dir at a directory of *.nix_template files.",
            context={"operation": "load_templates", "path": str(root)},
        )
    loaded = dict(TEMPLATES)
    for variant in FETCHER_VARIANTS:
        path = root / f"{variant.template}{TEMPLATE_SUFFIX}"
        if path.is_file():
            loaded[variant.template] = path.read_text(encoding="utf-8").rstrip("\n")
    return loaded


def templates_from(options: Options | None) -> dict[str, str]:
    if options is None or options.template_dir is None:
        return dict(TEMPLATES)
    return load_templates(options.template_dir)


__all__ = [
    "TEMPLATES",
    "TEMPLATE_SUFFIX",
    "builtin_template",
    "load_templates",
    "render",
    "template_tag",
    "templates_from",
]
