"""
ldd parser — turn an ldd-style report into absolute library paths.

Recognized line shapes (after stripping)::

    libc.so.6 => /usr/lib64/libc.so.6 (0x00007f...)   → /usr/lib64/libc.so.6
    /lib64/ld-linux-x86-64.so.2 (0x00007f...)        → /lib64/ld-linux-x86-64.so.2
    libfoo.so.1 => not found                          → not_found: libfoo.so.1
    linux-vdso.so.1 (0x00007ffd...)                   → ignored

Order follows the input; duplicates are kept.
"""
import logging
from dataclasses import dataclass, field
from typing import List

logger = logging.getLogger(__name__)

NOT_FOUND_MARKER = "not found"
ARROW = "=>"


@dataclass
class LddReport:
    """Parsed dependency report for one binary."""

    libraries: List[str] = field(default_factory=list)
    not_found: List[str] = field(default_factory=list)


def parse_ldd_output(output: str) -> LddReport:
    report = LddReport()

    for raw in output.splitlines():
        line = raw.strip()

        if NOT_FOUND_MARKER in line:
            tokens = line.split()
            if tokens:
                logger.warning("library %s not found", tokens[0])
                report.not_found.append(tokens[0])
            continue

        if ARROW in line:
            tokens = line.split(ARROW)[1].split()
            # skips load addresses and empty resolutions
            if tokens and tokens[0].startswith("/"):
                report.libraries.append(tokens[0])
        elif line.startswith("/"):
            report.libraries.append(line.split()[0])

    return report
