"""
Shared pytest fixtures for stage3 tests.

Provides a throwaway source rootfs on tmp_path and a scripted dependency
querier, so the closure logic can be exercised without a real system
image or a real ldd.

gcc/ldd-backed fixtures are skipped when the tools are not installed.
"""
import os
import shutil
import subprocess
import textwrap
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

from stage3.core.build_context import BuildContext
from stage3.core.errors import DependencyQueryError

LIBC_LDD = textwrap.dedent("""\
    \tlinux-vdso.so.1 (0x00007ffd4a5f2000)
    \tlibc.so.6 => /usr/lib64/libc.so.6 (0x00007f3a1c000000)
""")

HELLO_C = textwrap.dedent("""\
    #include <stdio.h>

    int main(void) {
        printf("hello\\n");
        return 0;
    }
""")


class FakeQuerier:
    """Scripted stand-in for LddQuerier.

    ``reports`` maps a binary's file name to the ldd text it returns;
    binaries named in ``failing`` raise DependencyQueryError.
    """

    def __init__(
        self,
        reports: Optional[Dict[str, str]] = None,
        failing: Iterable[str] = (),
        default: str = "",
    ):
        self.reports = dict(reports or {})
        self.failing = set(failing)
        self.default = default
        self.calls: List[Path] = []

    def query(self, binary_path: Path) -> str:
        self.calls.append(binary_path)
        if binary_path.name in self.failing:
            raise DependencyQueryError(f"ldd exited with 1 on {binary_path}")
        return self.reports.get(binary_path.name, self.default)


def write_binary(path: Path, content: str = "#!/bin/sh\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    os.chmod(path, 0o644)
    return path


@pytest.fixture
def source_root(tmp_path) -> Path:
    """Minimal rootfs: bash and ls in usr/bin, libc behind a soname link."""
    root = tmp_path / "rootfs"
    write_binary(root / "usr/bin/bash", "bash\n")
    write_binary(root / "usr/bin/ls", "ls\n")
    lib64 = root / "usr/lib64"
    lib64.mkdir(parents=True)
    (lib64 / "libc-2.34.so").write_text("libc\n")
    os.symlink("libc-2.34.so", lib64 / "libc.so.6")
    return root


@pytest.fixture
def ctx(tmp_path, source_root) -> BuildContext:
    return BuildContext.from_paths(source_root, tmp_path / "staging", tmp_path / "output")


@pytest.fixture
def libc_querier() -> FakeQuerier:
    """Every binary links against libc only."""
    return FakeQuerier(default=LIBC_LDD)


@pytest.fixture
def fake_querier():
    """Factory for custom FakeQuerier instances."""
    return FakeQuerier


@pytest.fixture(scope="session")
def gcc_ok():
    """Skip tests if gcc is not available."""
    if shutil.which("gcc") is None:
        pytest.skip("gcc not available - install gcc to run these tests")


@pytest.fixture(scope="session")
def ldd_ok():
    """Skip tests if ldd is not available."""
    if shutil.which("ldd") is None:
        pytest.skip("ldd not available")


@pytest.fixture(scope="session")
def hello_binary(tmp_path_factory, gcc_ok) -> Path:
    """A dynamically linked ELF executable compiled with gcc."""
    out_dir = tmp_path_factory.mktemp("elf")
    src = out_dir / "hello.c"
    src.write_text(HELLO_C)
    binary = out_dir / "hello"
    subprocess.run(
        ["gcc", "-O0", str(src), "-o", str(binary)],
        check=True,
        capture_output=True,
        timeout=30,
    )
    magic = binary.read_bytes()[:4]
    if magic != b"\x7fELF":
        pytest.skip("gcc does not produce ELF binaries on this host")
    return binary
