"""Run options and their validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from bunnix.errors import ValidationError

InvalidIdentifierPolicy = Literal["error", "skip"]


@dataclass(frozen=True, slots=True)
class Options:
    registry: str | None = None
    template_dir: Path | None = None
    invalid_identifier_policy: InvalidIdentifierPolicy = "error"

    def __post_init__(self) -> None:
        if self.invalid_identifier_policy not in ("error", "skip"):
            raise ValidationError(
                f"Unsupported invalid_identifier_policy value: {self.invalid_identifier_policy}",
                hint="Use 'error' to abort the run or 'skip' to drop the package.",
            )


def registry_for(*, options: Options | None, entry_registry: str) -> str | None:
    """Pick the entry's own registry, then the run-wide override."""
    if entry_registry:
        return entry_registry
    if options is not None and options.registry:
        return options.registry
    return None
