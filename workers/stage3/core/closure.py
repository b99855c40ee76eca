"""
Closure orchestrator — binary name → copied binary + copied library closure.

Per binary:

    search → (not found: warn, stop) → copy binary (if absent)
           → query → parse → for each library: resolve → materialize

Only the binary itself decides ``BinaryOutcome.success``.  Missing or
uncopyable libraries are warned about and recorded, never escalated.
"""
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from stage3.core.build_context import BuildContext
from stage3.core.errors import DependencyQueryError, LibraryNotFoundError
from stage3.core.ldd_parser import parse_ldd_output
from stage3.core.ldd_query import DependencyQuerier, LddQuerier
from stage3.core.library_resolver import resolve_library
from stage3.core.path_search import find_binary
from stage3.core.staged_copy import library_destination, materialize, materialize_library
from stage3.io.schema import BinaryOutcome, CatalogSummary, LibraryCounts, LibraryOutcome
from stage3.policy.profile import SearchOrder, Stage3Profile
from stage3.policy.verdict import CopyStatus, FailureReason

logger = logging.getLogger(__name__)


class ClosureMaterializer:
    """
    Copies binaries and their shared-library closure into ``ctx.staging``.

    Every outcome is kept on ``self.outcomes`` in request order so the
    builder can fold them into the build report.
    """

    def __init__(
        self,
        ctx: BuildContext,
        profile: Optional[Stage3Profile] = None,
        querier: Optional[DependencyQuerier] = None,
    ):
        self.ctx = ctx
        self.profile = profile or Stage3Profile.v1()
        self.querier = querier or LddQuerier(
            self.profile.query_command, self.profile.query_timeout
        )
        self.outcomes: List[BinaryOutcome] = []

    # -- public API ------------------------------------------------------------

    def copy_binary_with_libs(
        self,
        binary: str,
        dest_dir: str = "usr/bin",
        order: SearchOrder = SearchOrder.USER,
    ) -> BinaryOutcome:
        """Find *binary* in the source root and copy it with its libraries."""
        bin_path = find_binary(self.ctx.source, binary, self.profile, order)
        if bin_path is None:
            logger.warning("%s not found, skipping", binary)
            outcome = BinaryOutcome(
                name=binary,
                dest_dir=dest_dir,
                search_order=order.value,
                reasons=[FailureReason.BINARY_NOT_FOUND.value],
            )
            self.outcomes.append(outcome)
            return outcome
        return self.install_with_libs(binary, bin_path, dest_dir, order)

    def copy_sbin_binary_with_libs(self, binary: str) -> BinaryOutcome:
        return self.copy_binary_with_libs(binary, "usr/sbin", SearchOrder.SYSTEM)

    def install_with_libs(
        self,
        binary: str,
        bin_path: Path,
        dest_dir: str,
        order: SearchOrder = SearchOrder.USER,
    ) -> BinaryOutcome:
        """Copy an already-located binary and its libraries."""
        outcome = BinaryOutcome(
            name=binary,
            dest_dir=dest_dir,
            search_order=order.value,
            source=str(bin_path),
        )
        self.outcomes.append(outcome)

        dest = self.ctx.staging / dest_dir / binary
        copied = materialize(bin_path, dest, executable=True, mode=self.profile.binary_mode)
        outcome.destination = str(dest)
        outcome.status = copied.status.value

        if copied.status == CopyStatus.FAILED:
            logger.warning("Failed to copy %s: %s", binary, copied.error)
            outcome.reasons.append(FailureReason.BINARY_COPY_FAILED.value)
            outcome.error = copied.error
            return outcome

        outcome.success = True
        self._copy_libraries(outcome, bin_path)
        return outcome

    def copy_library(self, lib_path: str) -> LibraryOutcome:
        """Resolve one library reference and materialize it in the staging tree."""
        try:
            dest = library_destination(self.ctx.staging, lib_path, self.profile)
        except ValueError as e:
            logger.warning("Failed to copy library %s: %s", lib_path, e)
            return LibraryOutcome(
                library=lib_path,
                status=CopyStatus.FAILED.value,
                reasons=[FailureReason.LIBRARY_COPY_FAILED.value],
                error=str(e),
            )

        if os.path.lexists(dest):
            return LibraryOutcome(
                library=lib_path,
                status=CopyStatus.SKIPPED.value,
                destination=str(dest),
            )

        try:
            resolved = resolve_library(self.ctx.source, lib_path)
        except (LibraryNotFoundError, OSError) as e:
            logger.warning("Failed to copy library %s: %s", lib_path, e)
            return LibraryOutcome(
                library=lib_path,
                status=CopyStatus.FAILED.value,
                destination=str(dest),
                reasons=[FailureReason.LIBRARY_NOT_FOUND.value],
                error=str(e),
            )

        copied = materialize_library(resolved, dest, self.profile)
        outcome = LibraryOutcome(
            library=lib_path,
            status=copied.status.value,
            source=str(resolved.path),
            destination=str(copied.destination),
            reasons=list(resolved.reasons),
            error=copied.error,
        )
        if copied.status == CopyStatus.FAILED:
            logger.warning("Failed to copy library %s: %s", lib_path, copied.error)
            outcome.reasons.append(FailureReason.LIBRARY_COPY_FAILED.value)
        return outcome

    def copy_catalog(
        self,
        category: str,
        binaries: Iterable[str],
        dest_dir: str = "usr/bin",
        order: SearchOrder = SearchOrder.USER,
    ) -> CatalogSummary:
        """Copy every binary of a catalog; returns requested/copied counts."""
        summary = CatalogSummary(category=category)
        for binary in binaries:
            summary.requested += 1
            if self.copy_binary_with_libs(binary, dest_dir, order).success:
                summary.copied += 1
            else:
                summary.missing.append(binary)
        return summary

    def library_counts(self) -> LibraryCounts:
        counts = LibraryCounts()
        for outcome in self.outcomes:
            counts.not_found += len(outcome.not_found)
            for lib in outcome.libraries:
                counts.total += 1
                if lib.status == CopyStatus.COPIED.value:
                    counts.copied += 1
                elif lib.status == CopyStatus.SKIPPED.value:
                    counts.skipped += 1
                else:
                    counts.failed += 1
        return counts

    # -- internals -------------------------------------------------------------

    def _copy_libraries(self, outcome: BinaryOutcome, bin_path: Path) -> None:
        try:
            output = self.querier.query(bin_path)
        except DependencyQueryError as e:
            logger.warning("No dependency information for %s: %s", outcome.name, e)
            outcome.reasons.append(FailureReason.QUERY_FAILED.value)
            outcome.error = str(e)
            return

        report = parse_ldd_output(output)
        outcome.not_found = list(report.not_found)
        for lib in report.libraries:
            outcome.libraries.append(self.copy_library(lib))
