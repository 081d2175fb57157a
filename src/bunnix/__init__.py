"""Public package entrypoint for bunnix."""

from .document import NixDocument
from .errors import (
    BunnixError,
    IdentifierFormatError,
    ManifestError,
    RenderError,
    ValidationError,
)
from .fetcher import (
    DEFAULT_REGISTRY,
    FETCHER_VARIANTS,
    CopyToStore,
    Fetcher,
    FetchGit,
    FetchGitHub,
    FetchTarball,
    FetchUrl,
    fetcher_from_payload,
    new_npm_package,
    to_npm_url,
)
from .options import Options
from .render import render

__all__ = [
    "DEFAULT_REGISTRY",
    "FETCHER_VARIANTS",
    "BunnixError",
    "CopyToStore",
    "FetchGit",
    "FetchGitHub",
    "FetchTarball",
    "FetchUrl",
    "Fetcher",
    "IdentifierFormatError",
    "ManifestError",
    "NixDocument",
    "Options",
    "RenderError",
    "ValidationError",
    "fetcher_from_payload",
    "new_npm_package",
    "render",
    "to_npm_url",
]
