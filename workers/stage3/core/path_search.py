"""
Path search — first existing candidate among prioritized locations.

Pure existence probes, no side effects.
"""
from pathlib import Path
from typing import Iterable, List, Optional

from stage3.policy.profile import SearchOrder, Stage3Profile


def find_first(candidates: Iterable[Path]) -> Optional[Path]:
    """Return the first candidate that exists, in caller priority order."""
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def binary_candidates(
    root: Path,
    name: str,
    order: SearchOrder,
    profile: Stage3Profile,
) -> List[Path]:
    return [root / d / name for d in profile.bin_dirs(order)]


def find_binary(
    root: Path,
    name: str,
    profile: Stage3Profile,
    order: SearchOrder = SearchOrder.USER,
) -> Optional[Path]:
    """Find *name* under *root* using the directory priority for *order*."""
    return find_first(binary_candidates(root, name, order, profile))


def find_sbin_binary(root: Path, name: str, profile: Stage3Profile) -> Optional[Path]:
    return find_binary(root, name, profile, SearchOrder.SYSTEM)
