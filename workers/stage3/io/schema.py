"""
Schema — Pydantic models for the stage3 build report.

One output per build:
  stage3_report.json — per-binary and per-library outcomes, catalog
                       summaries, library counts and the staging audit.

Runtime contract fields (present in every report):
  package_name, builder_version, profile_id, schema_version.
"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from stage3 import BUILDER_VERSION, PACKAGE_NAME, SCHEMA_VERSION


# ── Per-library outcome ──────────────────────────────────────────────────────

class LibraryOutcome(BaseModel):
    """Result of resolving and copying one library reference."""

    library: str
    status: str              # COPIED | SKIPPED | FAILED
    source: Optional[str] = None
    destination: Optional[str] = None
    reasons: List[str] = Field(default_factory=list)
    error: Optional[str] = None


# ── Per-binary outcome ───────────────────────────────────────────────────────

class BinaryOutcome(BaseModel):
    """One requested binary and its library closure."""

    name: str
    dest_dir: str
    search_order: str

    # Found-and-copied (or already present).  Library failures never
    # change this flag.
    success: bool = False
    status: str = "FAILED"   # status of the binary file itself

    source: Optional[str] = None
    destination: Optional[str] = None
    reasons: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    not_found: List[str] = Field(default_factory=list)
    libraries: List[LibraryOutcome] = Field(default_factory=list)


# ── Summaries ────────────────────────────────────────────────────────────────

class CatalogSummary(BaseModel):
    category: str
    requested: int = 0
    copied: int = 0
    missing: List[str] = Field(default_factory=list)


class LibraryCounts(BaseModel):
    total: int = 0
    copied: int = 0
    skipped: int = 0
    failed: int = 0
    not_found: int = 0


class AuditFinding(BaseModel):
    """An ELF file in the staging tree with unsatisfied dependencies."""
    path: str                # relative to the staging root
    missing: List[str] = Field(default_factory=list)


class AuditSummary(BaseModel):
    elf_files_checked: int = 0
    findings: List[AuditFinding] = Field(default_factory=list)
    broken_symlinks: List[str] = Field(default_factory=list)
    unreadable: List[str] = Field(default_factory=list)


# ── Build-level report ───────────────────────────────────────────────────────

class BuildReport(BaseModel):
    """Build-level summary — stage3_report.json."""

    package_name: str = PACKAGE_NAME
    builder_version: str = BUILDER_VERSION
    schema_version: str = SCHEMA_VERSION
    profile_id: str

    source: str
    staging: str
    output: str
    tarball: Optional[str] = None

    catalogs: List[CatalogSummary] = Field(default_factory=list)
    binaries: List[BinaryOutcome] = Field(default_factory=list)
    library_counts: LibraryCounts = Field(default_factory=LibraryCounts)

    audit: Optional[AuditSummary] = None

    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
