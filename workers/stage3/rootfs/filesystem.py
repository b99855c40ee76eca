"""
Filesystem scaffolding — FHS directories, merged-/usr links, and the
small file/link helpers the other rootfs modules share.
"""
import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from stage3.core.errors import BuildError
from stage3.rootfs.catalog import FHS_DIRS, MERGED_USR_LINKS, RUNTIME_LINKS

logger = logging.getLogger(__name__)


def write_file(path: Path, content: str, mode: Optional[int] = None) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if mode is not None:
        os.chmod(path, mode)


def symlink_if_absent(target: str, link: Path) -> bool:
    """Create ``link -> target`` unless something is already at *link*."""
    if os.path.lexists(link):
        return False
    link.parent.mkdir(parents=True, exist_ok=True)
    os.symlink(target, link)
    return True


def create_fhs_structure(staging: Path) -> int:
    """Create the full FHS directory tree of an installed system."""
    logger.info("Creating FHS directory structure...")
    for d in FHS_DIRS:
        try:
            (staging / d).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BuildError(f"Failed to create directory {d}: {e}") from e
    logger.info("  Created %d directories", len(FHS_DIRS))
    return len(FHS_DIRS)


def create_symlinks(staging: Path) -> None:
    """Replace top-level bin/sbin/lib/lib64 with merged-/usr links."""
    logger.info("Creating symlinks...")

    for link, target in MERGED_USR_LINKS:
        path = staging / link
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        symlink_if_absent(target, path)

    for link, target in RUNTIME_LINKS:
        symlink_if_absent(target, staging / link)

    logger.info("  Created essential symlinks")


def copy_dir_recursive(src: Path, dst: Path) -> None:
    """Copy a tree; symlinks are recreated, never followed."""
    dst.mkdir(parents=True, exist_ok=True)
    for entry in src.iterdir():
        dest_path = dst / entry.name
        if entry.is_symlink():
            symlink_if_absent(os.readlink(entry), dest_path)
        elif entry.is_dir():
            copy_dir_recursive(entry, dest_path)
        else:
            shutil.copy(entry, dest_path)


def copy_dir_files(src: Path, dst: Path) -> int:
    """Copy the regular files directly inside *src*; returns the count."""
    if not src.is_dir():
        return 0
    dst.mkdir(parents=True, exist_ok=True)
    copied = 0
    for entry in sorted(src.iterdir()):
        if entry.is_file():
            shutil.copy(entry, dst / entry.name)
            copied += 1
    return copied
