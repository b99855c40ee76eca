"""
Binaries — copy the catalogued executables with their library closure.
"""
import logging

from stage3.core.closure import ClosureMaterializer
from stage3.core.errors import BuildError
from stage3.core.path_search import find_first
from stage3.core.staged_copy import materialize
from stage3.io.schema import CatalogSummary
from stage3.policy.profile import SearchOrder
from stage3.policy.verdict import CopyStatus
from stage3.rootfs.catalog import COREUTILS, LOGIN_BINARIES, SBIN_UTILS, SYSTEMD_BINARIES
from stage3.rootfs.filesystem import symlink_if_absent

logger = logging.getLogger(__name__)


def copy_shell(closure: ClosureMaterializer) -> CatalogSummary:
    """Copy bash; the image is useless without it, so absence is fatal."""
    logger.info("Copying bash shell...")
    source = closure.ctx.source
    bash_path = find_first([source / "usr/bin/bash", source / "bin/bash"])
    if bash_path is None:
        raise BuildError(f"Could not find bash in source rootfs {source}")

    logger.info("  Found bash at: %s", bash_path)
    outcome = closure.install_with_libs("bash", bash_path, "usr/bin")
    if not outcome.success:
        raise BuildError(f"Failed to copy bash: {outcome.error}")
    return CatalogSummary(category="shell", requested=1, copied=1)


def copy_coreutils(closure: ClosureMaterializer) -> CatalogSummary:
    logger.info("Copying coreutils binaries...")
    summary = closure.copy_catalog("coreutils", COREUTILS, "usr/bin", SearchOrder.USER)
    logger.info("  Copied %d/%d coreutils binaries", summary.copied, summary.requested)
    return summary


def copy_sbin_utils(closure: ClosureMaterializer) -> CatalogSummary:
    logger.info("Copying sbin utilities...")
    summary = closure.copy_catalog("sbin", SBIN_UTILS, "usr/sbin", SearchOrder.SYSTEM)
    logger.info("  Copied %d/%d sbin utilities", summary.copied, summary.requested)
    return summary


def copy_login_binaries(closure: ClosureMaterializer) -> CatalogSummary:
    logger.info("Copying login binaries...")
    summary = closure.copy_catalog("login", LOGIN_BINARIES, "usr/sbin", SearchOrder.SYSTEM)
    logger.info("  Copied %d/%d login binaries", summary.copied, summary.requested)
    return summary


def copy_systemd_binaries(closure: ClosureMaterializer) -> CatalogSummary:
    """
    Copy systemd, its helpers and its private libraries.

    These live outside the PATH directories and link against the
    private ``usr/lib64/systemd`` libraries, which are copied wholesale
    instead of through the dependency query.
    """
    logger.info("Copying systemd binaries...")
    ctx = closure.ctx
    mode = closure.profile.binary_mode
    src_dir = ctx.source / "usr/lib/systemd"
    dst_dir = ctx.staging / "usr/lib/systemd"
    summary = CatalogSummary(category="systemd")

    for binary in ("systemd",) + SYSTEMD_BINARIES:
        summary.requested += 1
        src = src_dir / binary
        if not src.exists():
            summary.missing.append(binary)
            continue
        outcome = materialize(src, dst_dir / binary, executable=True, mode=mode)
        if outcome.status == CopyStatus.FAILED:
            logger.warning("Failed to copy %s: %s", binary, outcome.error)
            summary.missing.append(binary)
        else:
            summary.copied += 1

    private_src = ctx.source / "usr/lib64/systemd"
    if private_src.is_dir():
        private_dst = ctx.staging / "usr/lib64/systemd"
        for entry in sorted(private_src.iterdir()):
            if entry.name.startswith("libsystemd-") and entry.name.endswith(".so"):
                outcome = materialize(entry, private_dst / entry.name)
                if outcome.status == CopyStatus.FAILED:
                    logger.warning("Failed to copy %s: %s", entry.name, outcome.error)

    symlink_if_absent("/usr/lib/systemd/systemd", ctx.staging / "usr/sbin/init")

    logger.info("  Copied %d/%d systemd binaries", summary.copied, summary.requested)
    return summary
