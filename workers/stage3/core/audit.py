"""
Staging audit — check that every ELF file in the staging tree can find
its shared libraries inside that tree.

Responsibilities:
  - Walk the staging tree and index every file name present.
  - For each ELF file, read DT_NEEDED entries and the PT_INTERP path.
  - Report names that do not exist anywhere in the staging tree.
  - Report broken symlinks under the library directories.

Read-only: the audit never adds or removes files.
"""
import logging
import os
from pathlib import Path
from typing import List, Optional, Set, Tuple

from elftools.common.exceptions import ELFError, ELFParseError
from elftools.elf.dynamic import DynamicSection
from elftools.elf.elffile import ELFFile

from stage3.io.schema import AuditFinding, AuditSummary

logger = logging.getLogger(__name__)

ELF_MAGIC = b"\x7fELF"
LIB_DIRS = ("lib", "lib64", "usr/lib", "usr/lib64")


def is_elf(path: Path) -> bool:
    try:
        with open(path, "rb") as f:
            return f.read(4) == ELF_MAGIC
    except OSError:
        return False


def read_dependencies(path: Path) -> Tuple[List[str], Optional[str]]:
    """Return (DT_NEEDED sonames, PT_INTERP path or None) for an ELF file."""
    needed: List[str] = []
    interp: Optional[str] = None

    with open(path, "rb") as f:
        elffile = ELFFile(f)
        for section in elffile.iter_sections():
            if isinstance(section, DynamicSection):
                for tag in section.iter_tags():
                    if tag.entry.d_tag == "DT_NEEDED":
                        needed.append(tag.needed)
        for segment in elffile.iter_segments():
            if segment["p_type"] == "PT_INTERP":
                interp = segment.get_interp_name()

    return needed, interp


def _index_staging(staging: Path) -> Tuple[Set[str], List[Path]]:
    names: Set[str] = set()
    elf_files: List[Path] = []
    for root, _dirs, files in os.walk(staging):
        for fname in files:
            path = Path(root) / fname
            names.add(fname)
            if not path.is_symlink() and is_elf(path):
                elf_files.append(path)
    return names, sorted(elf_files)


def _link_resolves(staging: Path, link: Path) -> bool:
    target = os.readlink(link)
    if os.path.isabs(target):
        # absolute targets are meaningful inside the image, not on the host
        return (staging / target.lstrip("/")).exists()
    return (link.parent / target).exists()


def find_broken_symlinks(staging: Path) -> List[str]:
    broken: List[str] = []
    for lib_dir in LIB_DIRS:
        base = staging / lib_dir
        # merged-/usr links would walk the same tree twice
        if base.is_symlink() or not base.is_dir():
            continue
        for root, dirs, files in os.walk(base):
            for name in files + dirs:
                path = Path(root) / name
                if path.is_symlink() and not _link_resolves(staging, path):
                    rel = str(path.relative_to(staging))
                    logger.warning("Broken symlink: %s -> %s", rel, os.readlink(path))
                    broken.append(rel)
    return sorted(broken)


def audit_staging(staging: Path) -> AuditSummary:
    """Audit *staging* and return a summary of unsatisfied dependencies."""
    names, elf_files = _index_staging(staging)
    summary = AuditSummary()

    for path in elf_files:
        rel = str(path.relative_to(staging))
        try:
            needed, interp = read_dependencies(path)
        except (ELFError, ELFParseError, OSError) as e:
            logger.debug("Cannot read %s as ELF: %s", rel, e)
            summary.unreadable.append(rel)
            continue

        summary.elf_files_checked += 1
        wanted = needed + ([interp] if interp else [])
        missing = [w for w in wanted if Path(w).name not in names]
        if missing:
            logger.warning("%s is missing: %s", rel, ", ".join(missing))
            summary.findings.append(AuditFinding(path=rel, missing=missing))

    summary.broken_symlinks = find_broken_symlinks(staging)
    return summary
