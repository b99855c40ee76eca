"""
Library resolver — find a library's source file across roots and follow
one level of symlink indirection.

Candidate priority for a library path ``/usr/lib64/libc.so.6``:
  1. ``<origin>/usr/lib64/libc.so.6``
  2. ``<origin>/usr/usr/lib64/libc.so.6``
  3. ``/usr/lib64/libc.so.6`` on the build host

A candidate counts as present when it exists, or when it is a symlink
whose target exists re-rooted under the origin (a cross-root link that
dangles from the host's point of view).  Any other dangling link is
passed over for the next candidate.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from stage3.core.errors import LibraryNotFoundError
from stage3.policy.verdict import ResolveReason

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedSource:
    """The concrete file to copy for one library reference."""

    library: str                 # reference as reported by the query tool
    located: Path                # first present candidate
    path: Path                   # file whose content will be copied
    reasons: Tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.path.name


def _rooted_target(origin: Path, link: Path) -> Path:
    return origin / os.readlink(link).lstrip("/")


def _present(origin: Path, path: Path) -> bool:
    if path.exists():
        return True
    return path.is_symlink() and _rooted_target(origin, path).exists()


def library_candidates(origin: Path, lib_path: str) -> List[Tuple[Path, ResolveReason]]:
    rel = lib_path.lstrip("/")
    return [
        (origin / rel, ResolveReason.ORIGIN_ROOT),
        (origin / "usr" / rel, ResolveReason.ORIGIN_USR),
        (Path(lib_path), ResolveReason.HOST_FALLBACK),
    ]


def locate_library(origin: Path, lib_path: str) -> Tuple[Path, ResolveReason]:
    """
    Return the first present candidate for *lib_path* and where it came from.

    Raises
    ------
    LibraryNotFoundError
        If no candidate is present.
    """
    for candidate, reason in library_candidates(origin, lib_path):
        if _present(origin, candidate):
            return candidate, reason
    raise LibraryNotFoundError(f"Could not find library: {lib_path}")


def follow_link(origin: Path, located: Path) -> Tuple[Path, ResolveReason]:
    """
    Follow exactly one level of symlink indirection from *located*.

    Relative targets are taken against the link's own directory.  When
    that target is missing, the raw target is re-rooted under *origin*;
    when that is missing too, *located* itself is returned.
    """
    link_target = Path(os.readlink(located))
    if link_target.is_absolute():
        actual = link_target
    else:
        actual = located.parent / link_target

    if actual.exists():
        return actual, ResolveReason.LINK_TARGET

    rooted = _rooted_target(origin, located)
    if rooted.exists():
        return rooted, ResolveReason.ROOTED_LINK_TARGET

    logger.warning(
        "symlink %s -> %s did not resolve, copying link path as-is",
        located, link_target,
    )
    return located, ResolveReason.LITERAL_FALLBACK


def resolve_library(origin: Path, lib_path: str) -> ResolvedSource:
    """Locate *lib_path* and, if it is a symlink, follow it once."""
    located, where = locate_library(origin, lib_path)
    reasons = [where.value]

    path = located
    if located.is_symlink():
        path, how = follow_link(origin, located)
        reasons.append(how.value)

    return ResolvedSource(
        library=lib_path,
        located=located,
        path=path,
        reasons=tuple(reasons),
    )
