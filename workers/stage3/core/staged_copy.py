"""
Staged copier — place files into the staging tree exactly once.

An existing destination (file or symlink) is never touched: the first
writer wins.
"""
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from stage3.core.library_resolver import ResolvedSource
from stage3.policy.profile import Stage3Profile
from stage3.policy.verdict import CopyStatus

logger = logging.getLogger(__name__)


@dataclass
class CopyOutcome:
    status: CopyStatus
    destination: Path
    error: Optional[str] = None


def library_destination(staging: Path, lib_path: str, profile: Stage3Profile) -> Path:
    """Map a library path to its place in the staging tree."""
    name = Path(lib_path).name
    if not name:
        raise ValueError(f"Library path has no filename: {lib_path}")
    if profile.lib64_marker in lib_path:
        return staging / profile.lib64_dir / name
    return staging / profile.lib_dir / name


def make_executable(path: Path, mode: int = 0o755) -> None:
    os.chmod(path, mode)


def materialize(
    source: Path,
    destination: Path,
    executable: bool = False,
    mode: int = 0o755,
) -> CopyOutcome:
    """Copy *source* to *destination* unless the destination already exists."""
    if os.path.lexists(destination):
        return CopyOutcome(CopyStatus.SKIPPED, destination)

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy(source, destination)
        if executable:
            make_executable(destination, mode)
    except OSError as e:
        return CopyOutcome(CopyStatus.FAILED, destination, error=str(e))

    logger.debug("copied %s -> %s", source, destination)
    return CopyOutcome(CopyStatus.COPIED, destination)


def link_soname(link_path: Path, target_name: str) -> CopyOutcome:
    """Create ``link_path -> target_name`` (relative) unless it exists."""
    if os.path.lexists(link_path):
        return CopyOutcome(CopyStatus.SKIPPED, link_path)
    try:
        link_path.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(target_name, link_path)
    except OSError as e:
        return CopyOutcome(CopyStatus.FAILED, link_path, error=str(e))
    return CopyOutcome(CopyStatus.COPIED, link_path)


def materialize_library(
    resolved: ResolvedSource,
    destination: Path,
    profile: Stage3Profile,
) -> CopyOutcome:
    """
    Copy a resolved library to *destination*.

    When the resolved file has a different name than the reference
    (``libc.so.6`` → ``libc-2.34.so``) and the profile preserves soname
    links, the file keeps its own name next to *destination* and
    *destination* becomes a relative symlink to it.
    """
    if not profile.preserve_soname_links or resolved.name == destination.name:
        return materialize(resolved.path, destination)

    real = destination.parent / resolved.name
    copied = materialize(resolved.path, real)
    if copied.status == CopyStatus.FAILED:
        return copied

    linked = link_soname(destination, resolved.name)
    if linked.status == CopyStatus.FAILED:
        return linked

    if CopyStatus.COPIED in (copied.status, linked.status):
        return CopyOutcome(CopyStatus.COPIED, real)
    return CopyOutcome(CopyStatus.SKIPPED, real)
