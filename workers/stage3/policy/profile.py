"""
Profile — build policy descriptor and tunable parameters.

The profile encapsulates all policy knobs so that core copying logic
contains no opinions.  Search priorities, library placement, external
tool invocations and permission modes are profile changes, not code
changes.
"""
from dataclasses import dataclass
from enum import Enum, unique
from typing import Tuple


@unique
class SearchOrder(str, Enum):
    """Which catalog asked for a binary; decides directory priority."""
    USER = "USER"        # usr/bin first
    SYSTEM = "SYSTEM"    # usr/sbin first


@dataclass(frozen=True)
class Stage3Profile:
    """Describes how a stage3 tree is harvested and laid out."""

    # Identity
    profile_id: str

    # Binary search priorities (relative to the source root)
    user_bin_dirs: Tuple[str, ...]
    system_bin_dirs: Tuple[str, ...]

    # Library placement (relative to the staging root)
    lib64_dir: str = "usr/lib64"
    lib_dir: str = "usr/lib"
    lib64_marker: str = "lib64"

    # External tools
    query_command: Tuple[str, ...] = ("ldd",)
    query_timeout: int = 30          # seconds
    archive_command: Tuple[str, ...] = ("tar",)
    archive_timeout: int = 1800      # seconds
    tarball_name: str = "levitateos-stage3.tar.xz"

    # Copy policy
    binary_mode: int = 0o755
    preserve_soname_links: bool = True

    # Post-build
    audit: bool = True

    def bin_dirs(self, order: SearchOrder) -> Tuple[str, ...]:
        if order is SearchOrder.SYSTEM:
            return self.system_bin_dirs
        return self.user_bin_dirs

    @classmethod
    def v1(cls) -> "Stage3Profile":
        """The default merged-/usr x86_64 profile."""
        return cls(
            profile_id="linux-x86_64-merged-usr",
            user_bin_dirs=("usr/bin", "bin", "usr/sbin", "sbin"),
            system_bin_dirs=("usr/sbin", "sbin", "usr/bin", "bin"),
        )
