"""
test_audit — post-build check of the staging tree with pyelftools.

Tests verify invariant properties:
  - An ELF file whose DT_NEEDED / PT_INTERP names are absent is reported.
  - Providing those names anywhere in the tree clears the finding.
  - Broken library symlinks are reported; absolute targets are taken
    relative to the staging root.
"""
import os
import shutil

from stage3.core.audit import audit_staging, find_broken_symlinks, is_elf, read_dependencies


class TestReadDependencies:

    def test_hello(self, hello_binary):
        needed, interp = read_dependencies(hello_binary)
        assert "libc.so.6" in needed
        assert interp is not None and interp.startswith("/")

    def test_is_elf(self, tmp_path, hello_binary):
        text = tmp_path / "script"
        text.write_text("#!/bin/sh\n")
        assert is_elf(hello_binary)
        assert not is_elf(text)
        assert not is_elf(tmp_path / "absent")


class TestAuditStaging:

    def test_missing_libc_reported(self, tmp_path, hello_binary):
        staging = tmp_path / "staging"
        (staging / "usr/bin").mkdir(parents=True)
        shutil.copy(hello_binary, staging / "usr/bin/hello")

        summary = audit_staging(staging)

        assert summary.elf_files_checked == 1
        assert len(summary.findings) == 1
        finding = summary.findings[0]
        assert finding.path == "usr/bin/hello"
        assert "libc.so.6" in finding.missing

    def test_satisfied_dependencies(self, tmp_path, hello_binary):
        staging = tmp_path / "staging"
        (staging / "usr/bin").mkdir(parents=True)
        shutil.copy(hello_binary, staging / "usr/bin/hello")
        needed, interp = read_dependencies(hello_binary)
        lib64 = staging / "usr/lib64"
        lib64.mkdir(parents=True)
        for name in needed + [os.path.basename(interp)]:
            (lib64 / name).write_text("stub\n")

        summary = audit_staging(staging)

        assert summary.elf_files_checked == 1
        assert summary.findings == []

    def test_corrupt_elf_unreadable(self, tmp_path):
        staging = tmp_path / "staging"
        (staging / "usr/bin").mkdir(parents=True)
        (staging / "usr/bin/broken").write_bytes(b"\x7fELF\x09\x09" + b"\x00" * 58)

        summary = audit_staging(staging)

        assert summary.unreadable == ["usr/bin/broken"]
        assert summary.elf_files_checked == 0

    def test_non_elf_ignored(self, tmp_path):
        staging = tmp_path / "staging"
        (staging / "etc").mkdir(parents=True)
        (staging / "etc/hostname").write_text("levitateos\n")

        summary = audit_staging(staging)

        assert summary.elf_files_checked == 0
        assert summary.unreadable == []


class TestBrokenSymlinks:

    def test_relative_and_absolute_targets(self, tmp_path):
        staging = tmp_path / "staging"
        lib64 = staging / "usr/lib64"
        lib64.mkdir(parents=True)
        (lib64 / "libc-2.34.so").write_text("libc\n")
        os.symlink("libc-2.34.so", lib64 / "libc.so.6")
        os.symlink("/usr/lib64/libc-2.34.so", lib64 / "libc.so")
        os.symlink("libgone.so.1.0", lib64 / "libgone.so.1")

        assert find_broken_symlinks(staging) == ["usr/lib64/libgone.so.1"]

    def test_merged_usr_links_walked_once(self, tmp_path):
        staging = tmp_path / "staging"
        lib64 = staging / "usr/lib64"
        lib64.mkdir(parents=True)
        os.symlink("libgone.so.1.0", lib64 / "libgone.so.1")
        os.symlink("usr/lib64", staging / "lib64")

        assert find_broken_symlinks(staging) == ["usr/lib64/libgone.so.1"]
