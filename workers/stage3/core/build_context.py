"""
Build context — the three filesystem roots of one stage3 build.

Created once per build and threaded through every operation.  Pure
data, no IO.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class BuildContext:
    """Immutable roots for a single build invocation."""

    source: Path                         # rootfs harvested from
    staging: Path                        # tree under construction
    output: Path                         # where the tarball + report land
    recipe_binary: Optional[Path] = None

    @classmethod
    def from_paths(
        cls,
        source: str | Path,
        staging: str | Path,
        output: str | Path,
    ) -> "BuildContext":
        return cls(source=Path(source), staging=Path(staging), output=Path(output))

    def with_recipe(self, recipe_binary: str | Path) -> "BuildContext":
        """Return a copy of this context carrying a recipe binary path."""
        return replace(self, recipe_binary=Path(recipe_binary))
