"""Fetcher model and npm resolution APIs."""

from .model import (
    FETCHER_VARIANTS,
    CopyToStore,
    Fetcher,
    FetchGit,
    FetchGitHub,
    FetchTarball,
    FetchUrl,
    fetcher_from_payload,
)
from .npm import DEFAULT_REGISTRY, new_npm_package, to_npm_url

__all__ = [
    "DEFAULT_REGISTRY",
    "FETCHER_VARIANTS",
    "CopyToStore",
    "FetchGit",
    "FetchGitHub",
    "FetchTarball",
    "FetchUrl",
    "Fetcher",
    "fetcher_from_payload",
    "new_npm_package",
    "to_npm_url",
]
