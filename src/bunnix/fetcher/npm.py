"""npm tarball URL derivation and ``fetchurl`` construction."""

from __future__ import annotations

from bunnix.errors import IdentifierFormatError
from bunnix.fetcher.model import FetchUrl

DEFAULT_REGISTRY = "https://registry.npmjs.org/"


def new_npm_package(ident: str, hash: str, registry_path: str | None = None) -> FetchUrl:
    """Build a ``FetchUrl`` fetcher for an npm identifier and its integrity hash."""
    url = to_npm_url(ident, registry_path)
    return FetchUrl(url=url, hash=hash)


def to_npm_url(ident: str, registry_path: str | None = None) -> str:
    """Return the tarball URL for ``ident`` (``name@ver`` or ``@scope/name@ver``).

    ``registry_path`` may be empty or ``None`` (default registry), a complete
    tarball URL ending in ``.tgz`` (returned as-is without looking at
    ``ident``), or a registry base URL.

    >>> to_npm_url("@alloc/quick-lru@5.2.0")
    'https://registry.npmjs.org/@alloc/quick-lru/-/quick-lru-5.2.0.tgz'
    >>> to_npm_url("lodash@4.17.21", "https://npm.example.com")
    'https://npm.example.com/lodash/-/lodash-4.17.21.tgz'
    """
    if registry_path and registry_path.endswith(".tgz"):
        return registry_path

    base_url = _registry_base(registry_path)

    user, slash, name_and_ver = ident.partition("/")
    if not slash:
        name, ver = _split_version(ident, ident=ident)
        return f"{base_url}{name}/-/{name}-{ver}.tgz"

    name, ver = _split_version(name_and_ver, ident=ident)
    return f"{base_url}{user}/{name}/-/{name}-{ver}.tgz"


def _registry_base(registry_path: str | None) -> str:
    if not registry_path:
        return DEFAULT_REGISTRY
    if registry_path.endswith("/"):
        return registry_path
    return f"{registry_path}/"


def _split_version(segment: str, *, ident: str) -> tuple[str, str]:
    name, at, ver = segment.partition("@")
    if not at:
        raise IdentifierFormatError(
            "No `@` separating name and version in package identifier.",
            hint="Use `name@version` or `@scope/name@version`.",
            context={"operation": "to_npm_url", "ident": ident},
        )
    return name, ver
