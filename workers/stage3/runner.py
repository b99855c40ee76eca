"""
Stage3 runner — CLI and programmatic entry point.

    python -m stage3.runner build --source rootfs --staging staging -o output
    python -m stage3.runner list output/levitateos-stage3.tar.xz
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from stage3.builder import Stage3Builder
from stage3.core.archive import list_tarball
from stage3.core.build_context import BuildContext
from stage3.core.errors import BuildError
from stage3.core.ldd_query import DependencyQuerier
from stage3.io.schema import BuildReport
from stage3.policy.profile import Stage3Profile

logger = logging.getLogger(__name__)


def run_stage3(
    source: str | Path,
    staging: str | Path,
    output: str | Path,
    recipe_binary: Optional[str | Path] = None,
    archive: bool = True,
    profile: Optional[Stage3Profile] = None,
    querier: Optional[DependencyQuerier] = None,
) -> BuildReport:
    """
    Build a stage3 tree (and tarball) from *source*.

    Returns
    -------
    BuildReport

    Raises
    ------
    BuildError
        On any fatal condition.
    """
    ctx = BuildContext.from_paths(source, staging, output)
    if recipe_binary is not None:
        ctx = ctx.with_recipe(recipe_binary)
    return Stage3Builder(ctx, profile, querier).build(archive=archive)


# ── CLI ──────────────────────────────────────────────────────────────────────

def _cmd_build(args: argparse.Namespace) -> int:
    try:
        report = run_stage3(
            source=args.source,
            staging=args.staging,
            output=args.output,
            recipe_binary=args.recipe,
            archive=not args.no_archive,
        )
    except BuildError as e:
        logger.error("%s", e)
        return 1

    for summary in report.catalogs:
        print(f"{summary.category}: {summary.copied}/{summary.requested}")
    counts = report.library_counts
    print(f"Libraries: {counts.total} "
          f"(copied={counts.copied}, skipped={counts.skipped}, "
          f"failed={counts.failed}, not_found={counts.not_found})")
    if report.audit is not None:
        print(f"Audit: {report.audit.elf_files_checked} ELF files, "
              f"{len(report.audit.findings)} with missing dependencies")
    if report.tarball:
        print(f"Tarball written to: {report.tarball}")
    return 0


def _cmd_list(args: argparse.Namespace) -> int:
    try:
        names = list_tarball(Path(args.path))
    except BuildError as e:
        logger.error("%s", e)
        return 1
    for name in names:
        print(name)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for stage3."""
    parser = argparse.ArgumentParser(
        prog="stage-3",
        description="Build stage3 tarball for LevitateOS installation",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Build the stage3 tarball")
    build.add_argument("--source", type=Path, required=True,
                       help="Source rootfs to harvest binaries from")
    build.add_argument("--staging", type=Path, default=Path("staging"),
                       help="Staging directory for the stage3 tree")
    build.add_argument("-o", "--output", type=Path, default=Path("output"),
                       help="Output directory")
    build.add_argument("--recipe", type=Path, default=None,
                       help="Path to the recipe binary")
    build.add_argument("--no-archive", action="store_true",
                       help="Stop after populating the staging tree")
    build.set_defaults(func=_cmd_build)

    lst = sub.add_parser("list", help="List contents of an existing tarball")
    lst.add_argument("path", help="Path to tarball")
    lst.set_defaults(func=_cmd_list)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
