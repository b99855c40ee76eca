"""
Stage3 builder — top-level orchestration: source rootfs → staging tree →
report + tarball.

Only BuildError escapes ``build()``.  Missing binaries and libraries
end up in the report and the log, never in an exception.
"""
import logging
from pathlib import Path
from typing import Optional

from stage3.core.archive import create_tarball
from stage3.core.audit import audit_staging
from stage3.core.build_context import BuildContext
from stage3.core.closure import ClosureMaterializer
from stage3.core.errors import BuildError
from stage3.core.ldd_query import DependencyQuerier
from stage3.io.schema import BuildReport, CatalogSummary
from stage3.io.writer import write_report
from stage3.policy.profile import Stage3Profile
from stage3.rootfs import binaries, etc, filesystem, pam, recipe, systemd

logger = logging.getLogger(__name__)


class Stage3Builder:
    """
    Builds the stage3 tarball extracted during installation.

    Usage::

        ctx = BuildContext.from_paths("rootfs", "staging", "output")
        report = Stage3Builder(ctx).build()
    """

    def __init__(
        self,
        ctx: BuildContext,
        profile: Optional[Stage3Profile] = None,
        querier: Optional[DependencyQuerier] = None,
    ):
        self.ctx = ctx
        self.profile = profile or Stage3Profile.v1()
        self.closure = ClosureMaterializer(ctx, self.profile, querier)

    @property
    def tarball_path(self) -> Path:
        return self.ctx.output / self.profile.tarball_name

    def build(self, archive: bool = True) -> BuildReport:
        """
        Run the full pipeline.

        Raises
        ------
        BuildError
            Missing source rootfs, uncreatable staging tree, missing bash,
            or a failed archive step.
        """
        ctx = self.ctx
        if not ctx.source.is_dir():
            raise BuildError(f"Source rootfs not found: {ctx.source}")
        try:
            ctx.staging.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BuildError(f"Cannot create staging directory {ctx.staging}: {e}") from e

        report = BuildReport(
            profile_id=self.profile.profile_id,
            source=str(ctx.source),
            staging=str(ctx.staging),
            output=str(ctx.output),
        )

        # ── Step 1: scaffolding ──────────────────────────────────────────
        try:
            filesystem.create_fhs_structure(ctx.staging)
            filesystem.create_symlinks(ctx.staging)
        except OSError as e:
            raise BuildError(f"Failed to scaffold staging tree: {e}") from e

        # ── Step 2: binaries + library closure ───────────────────────────
        report.catalogs = [
            binaries.copy_shell(self.closure),
            binaries.copy_coreutils(self.closure),
            binaries.copy_sbin_utils(self.closure),
            self._copy_systemd_binaries(),
            binaries.copy_login_binaries(self.closure),
        ]
        recipe.copy_recipe(ctx)

        # ── Step 3: configuration ────────────────────────────────────────
        try:
            self._configure()
        except OSError as e:
            raise BuildError(f"Failed to write configuration: {e}") from e

        report.binaries = list(self.closure.outcomes)
        report.library_counts = self.closure.library_counts()

        # ── Step 4: audit ────────────────────────────────────────────────
        if self.profile.audit:
            report.audit = audit_staging(ctx.staging)

        # ── Step 5: archive ──────────────────────────────────────────────
        if archive:
            create_tarball(
                ctx.staging,
                self.tarball_path,
                self.profile.archive_command,
                self.profile.archive_timeout,
            )
            report.tarball = str(self.tarball_path)

        try:
            write_report(report, ctx.output)
        except OSError as e:
            raise BuildError(f"Failed to write build report: {e}") from e
        self._log_summary(report)
        return report

    def _copy_systemd_binaries(self) -> CatalogSummary:
        try:
            return binaries.copy_systemd_binaries(self.closure)
        except OSError as e:
            raise BuildError(f"Failed to copy systemd binaries: {e}") from e

    def _configure(self) -> None:
        ctx = self.ctx
        etc.create_etc_files(ctx)
        etc.copy_timezone_data(ctx)
        etc.copy_locales(ctx)

        pam.setup_pam(ctx)
        pam.copy_pam_modules(ctx)
        pam.create_security_config(ctx)

        systemd.copy_systemd_units(ctx)
        systemd.copy_dbus_symlinks(ctx)
        systemd.setup_getty(ctx)
        systemd.setup_serial_console(ctx)
        systemd.setup_networkd(ctx)
        systemd.set_default_target(ctx)
        systemd.setup_dbus(ctx)
        systemd.copy_udev_rules(ctx)
        systemd.copy_tmpfiles(ctx)
        systemd.copy_sysctl(ctx)

        recipe.setup_recipe_config(ctx)

    def _log_summary(self, report: BuildReport) -> None:
        for summary in report.catalogs:
            if summary.missing:
                logger.warning(
                    "%s: missing %s", summary.category, ", ".join(summary.missing)
                )
        counts = report.library_counts
        logger.info(
            "Libraries: %d (copied=%d, skipped=%d, failed=%d, not found=%d)",
            counts.total, counts.copied, counts.skipped, counts.failed, counts.not_found,
        )
        if report.tarball:
            logger.info("Stage3 tarball: %s", report.tarball)
