"""
Archive — pack the staging tree into the stage3 tarball and read it back.

Packing shells out to tar (xz compression); listing uses tarfile so it
works on any host.
"""
import logging
import subprocess
import tarfile
from pathlib import Path
from typing import List, Sequence

from stage3.core.errors import ArchiveError

logger = logging.getLogger(__name__)


def create_tarball(
    staging: Path,
    tarball: Path,
    command: Sequence[str] = ("tar",),
    timeout: int = 1800,
) -> Path:
    """
    Archive the whole of *staging* into *tarball*.

    Raises
    ------
    ArchiveError
        If tar cannot start, exits non-zero, times out, or leaves no
        regular file at *tarball*.
    """
    try:
        tarball.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArchiveError(f"Cannot create output directory {tarball.parent}: {e}") from e

    cmd = [*command, "-cJf", str(tarball), "-C", str(staging), "."]
    logger.info("Creating %s", tarball)
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise ArchiveError(f"{command[0]} timed out after {timeout}s") from e
    except OSError as e:
        raise ArchiveError(f"Failed to run {command[0]}: {e}") from e

    if result.returncode != 0:
        raise ArchiveError(
            f"{command[0]} exited with {result.returncode}: {result.stderr.strip()}"
        )
    if not tarball.is_file():
        raise ArchiveError(f"{command[0]} reported success but {tarball} is missing")

    return tarball


def list_tarball(tarball: Path) -> List[str]:
    """Return member names of an existing tarball, in archive order."""
    if not tarball.is_file():
        raise ArchiveError(f"Tarball not found: {tarball}")
    try:
        with tarfile.open(tarball, "r:*") as tf:
            return tf.getnames()
    except tarfile.TarError as e:
        raise ArchiveError(f"Cannot read {tarball}: {e}") from e
