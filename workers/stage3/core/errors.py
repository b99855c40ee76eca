"""
Errors — exception hierarchy for the stage3 build.

Only BuildError (and its subclasses) aborts a build.  The other
exceptions are raised by single-purpose helpers and absorbed by the
closure orchestrator into per-binary / per-library outcomes.
"""


class Stage3Error(Exception):
    """Base class for every stage3 error."""


class BuildError(Stage3Error):
    """Fatal: the build cannot continue."""


class ArchiveError(BuildError):
    """The archiving subprocess failed or produced no tarball."""


class DependencyQueryError(Stage3Error):
    """The dependency-query tool could not report on a binary."""


class LibraryNotFoundError(Stage3Error):
    """No candidate source location exists for a library."""
