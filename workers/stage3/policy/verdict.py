"""
Verdict — structured COPIED / SKIPPED / FAILED outcomes with reason enums.

Every materialization step reports one of these instead of printing and
carrying on, so the orchestrator can aggregate a build report and tests
can assert on outcomes rather than scrape logs.
"""
from enum import Enum, unique


# ── Copy status ──────────────────────────────────────────────────────────────

@unique
class CopyStatus(str, Enum):
    COPIED = "COPIED"
    SKIPPED = "SKIPPED"      # destination already present (first writer wins)
    FAILED = "FAILED"


# ── How a library's source file was chosen ───────────────────────────────────

@unique
class ResolveReason(str, Enum):
    ORIGIN_ROOT = "ORIGIN_ROOT"              # <origin>/<lib_path>
    ORIGIN_USR = "ORIGIN_USR"                # <origin>/usr/<lib_path>
    HOST_FALLBACK = "HOST_FALLBACK"          # literal path on the build host
    LINK_TARGET = "LINK_TARGET"              # symlink target existed as-is
    ROOTED_LINK_TARGET = "ROOTED_LINK_TARGET"  # target re-rooted under origin
    LITERAL_FALLBACK = "LITERAL_FALLBACK"    # no target resolved; copied link path


# ── Per-library / per-binary failure reasons ─────────────────────────────────

@unique
class FailureReason(str, Enum):
    BINARY_NOT_FOUND = "BINARY_NOT_FOUND"
    BINARY_COPY_FAILED = "BINARY_COPY_FAILED"
    QUERY_FAILED = "QUERY_FAILED"
    LIBRARY_NOT_FOUND = "LIBRARY_NOT_FOUND"
    LIBRARY_COPY_FAILED = "LIBRARY_COPY_FAILED"
