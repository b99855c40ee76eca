"""
Dependency query — run the dynamic-linker inspection tool on a binary.

The tool is an opaque oracle: this module only captures its textual
report.  Interpreting the text is ldd_parser's job.
"""
import logging
import subprocess
from pathlib import Path
from typing import Protocol, Sequence

from stage3.core.errors import DependencyQueryError

logger = logging.getLogger(__name__)


class DependencyQuerier(Protocol):
    """Anything that can produce an ldd-style report for a binary."""

    def query(self, binary_path: Path) -> str:
        ...


class LddQuerier:
    """Runs ``<command> <binary_path>`` and returns its stdout."""

    def __init__(self, command: Sequence[str] = ("ldd",), timeout: int = 30):
        self.command = tuple(command)
        self.timeout = timeout

    def query(self, binary_path: Path) -> str:
        cmd = [*self.command, str(binary_path)]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise DependencyQueryError(
                f"{self.command[0]} timed out after {self.timeout}s on {binary_path}"
            ) from e
        except OSError as e:
            raise DependencyQueryError(f"Failed to run {self.command[0]}: {e}") from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            raise DependencyQueryError(
                f"{self.command[0]} exited with {result.returncode} on {binary_path}"
                + (f": {detail}" if detail else "")
            )
        return result.stdout
