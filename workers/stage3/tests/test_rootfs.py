"""
test_rootfs — scaffolding and configuration written into the staging tree.
"""
import os
import stat

import pytest

from stage3.core.closure import ClosureMaterializer
from stage3.core.errors import BuildError
from stage3.rootfs import binaries, etc, filesystem, pam, recipe, systemd
from stage3.rootfs.catalog import FHS_DIRS, PAM_MODULES

from conftest import write_binary


def _mode(path):
    return stat.S_IMODE(path.stat().st_mode)


class TestFilesystem:

    def test_fhs_and_merged_usr(self, tmp_path):
        staging = tmp_path / "staging"

        assert filesystem.create_fhs_structure(staging) == len(FHS_DIRS)
        filesystem.create_symlinks(staging)

        for name, target in (("bin", "usr/bin"), ("sbin", "usr/sbin"),
                             ("lib", "usr/lib"), ("lib64", "usr/lib64")):
            assert (staging / name).is_symlink()
            assert os.readlink(staging / name) == target
        assert os.readlink(staging / "var/run") == "/run"
        assert os.readlink(staging / "usr/bin/sh") == "bash"
        assert (staging / "var/log/journal").is_dir()

    def test_symlinks_idempotent(self, tmp_path):
        staging = tmp_path / "staging"
        filesystem.create_fhs_structure(staging)
        filesystem.create_symlinks(staging)
        filesystem.create_symlinks(staging)
        assert os.readlink(staging / "bin") == "usr/bin"

    def test_copy_dir_recursive_keeps_links(self, tmp_path):
        src = tmp_path / "src"
        (src / "sub").mkdir(parents=True)
        (src / "sub/file").write_text("x")
        os.symlink("sub/file", src / "link")

        filesystem.copy_dir_recursive(src, tmp_path / "dst")

        assert (tmp_path / "dst/sub/file").read_text() == "x"
        assert os.readlink(tmp_path / "dst/link") == "sub/file"


class TestEtc:

    def test_etc_files(self, ctx):
        etc.create_etc_files(ctx)
        root = ctx.staging / "etc"

        assert root.joinpath("passwd").read_text().startswith("root:x:0:0:")
        assert _mode(root / "shadow") == 0o600
        assert _mode(root / "gshadow") == 0o600
        assert "wheel:x:10:" in root.joinpath("group").read_text()
        assert root.joinpath("hostname").read_text() == "levitateos\n"
        assert root.joinpath("machine-id").read_text() == ""
        assert os.readlink(root / "mtab") == "/proc/self/mounts"
        assert os.readlink(root / "resolv.conf") == "/run/systemd/resolve/stub-resolv.conf"
        assert (ctx.staging / "root/.bashrc").exists()
        assert (root / "skel/.bash_profile").exists()

    def test_timezones(self, ctx):
        zoneinfo = ctx.source / "usr/share/zoneinfo"
        (zoneinfo / "Europe").mkdir(parents=True)
        (zoneinfo / "Europe/Paris").write_text("tz")
        (zoneinfo / "UTC").write_text("utc")
        (zoneinfo / "Antarctica").mkdir()

        etc.copy_timezone_data(ctx)

        dst = ctx.staging / "usr/share/zoneinfo"
        assert (dst / "Europe/Paris").read_text() == "tz"
        assert (dst / "UTC").read_text() == "utc"
        assert not (dst / "Antarctica").exists()


class TestPam:

    def test_pam_config(self, ctx):
        pam.setup_pam(ctx)
        pam.create_security_config(ctx)

        pam_d = ctx.staging / "etc/pam.d"
        assert "pam_deny.so" in (pam_d / "other").read_text()
        assert "pam_unix.so" in (pam_d / "system-auth").read_text()
        assert (ctx.staging / "etc/security/limits.conf").exists()

    def test_pam_modules(self, ctx):
        src = ctx.source / "usr/lib64/security"
        src.mkdir(parents=True)
        for module in PAM_MODULES[:3]:
            (src / module).write_text("mod")
        (src / "pam_unrelated.so").write_text("mod")

        assert pam.copy_pam_modules(ctx) == 3
        assert not (ctx.staging / "usr/lib64/security/pam_unrelated.so").exists()

    def test_no_modules_dir(self, ctx):
        assert pam.copy_pam_modules(ctx) == 0


class TestSystemd:

    def test_enablement_links(self, ctx):
        systemd.setup_getty(ctx)
        systemd.setup_serial_console(ctx)
        systemd.setup_networkd(ctx)
        systemd.setup_dbus(ctx)

        etc_units = ctx.staging / "etc/systemd/system"
        assert os.readlink(etc_units / "getty.target.wants/getty@tty1.service") == \
            "/usr/lib/systemd/system/getty@.service"
        assert os.readlink(etc_units / "getty.target.wants/serial-getty@ttyS0.service") == \
            "/usr/lib/systemd/system/serial-getty@.service"
        assert (etc_units / "multi-user.target.wants/systemd-networkd.service").is_symlink()
        assert (etc_units / "sockets.target.wants/dbus.socket").is_symlink()
        assert "DHCP=yes" in (ctx.staging / "etc/systemd/network/80-dhcp.network").read_text()

    def test_default_target_replaced(self, ctx):
        link = ctx.staging / "etc/systemd/system/default.target"
        link.parent.mkdir(parents=True)
        os.symlink("/usr/lib/systemd/system/graphical.target", link)

        systemd.set_default_target(ctx)

        assert os.readlink(link) == "/usr/lib/systemd/system/multi-user.target"

    def test_units_and_dbus_aliases(self, ctx):
        unit_src = ctx.source / "usr/lib/systemd/system"
        unit_src.mkdir(parents=True)
        (unit_src / "basic.target").write_text("[Unit]\n")
        (unit_src / "not-essential.service").write_text("[Unit]\n")
        os.symlink("systemd-logind.service", unit_src / "dbus-org.freedesktop.login1.service")

        assert systemd.copy_systemd_units(ctx) == 1
        systemd.copy_dbus_symlinks(ctx)

        unit_dst = ctx.staging / "usr/lib/systemd/system"
        assert (unit_dst / "basic.target").exists()
        assert not (unit_dst / "not-essential.service").exists()
        assert os.readlink(unit_dst / "dbus-org.freedesktop.login1.service") == \
            "systemd-logind.service"


class TestBinaries:

    def test_shell(self, ctx, libc_querier):
        summary = binaries.copy_shell(ClosureMaterializer(ctx, querier=libc_querier))
        assert (summary.requested, summary.copied) == (1, 1)
        assert (ctx.staging / "usr/bin/bash").exists()

    def test_missing_bash_fatal(self, ctx, libc_querier):
        (ctx.source / "usr/bin/bash").unlink()
        with pytest.raises(BuildError, match="bash"):
            binaries.copy_shell(ClosureMaterializer(ctx, querier=libc_querier))

    def test_systemd_binaries(self, ctx, libc_querier):
        write_binary(ctx.source / "usr/lib/systemd/systemd")
        write_binary(ctx.source / "usr/lib/systemd/systemd-journald")
        private = ctx.source / "usr/lib64/systemd"
        private.mkdir(parents=True)
        (private / "libsystemd-shared-255.so").write_text("shared")
        (private / "README").write_text("skip")

        summary = binaries.copy_systemd_binaries(ClosureMaterializer(ctx, querier=libc_querier))

        assert summary.copied == 2
        assert "systemd-logind" in summary.missing
        assert _mode(ctx.staging / "usr/lib/systemd/systemd") == 0o755
        assert (ctx.staging / "usr/lib64/systemd/libsystemd-shared-255.so").exists()
        assert not (ctx.staging / "usr/lib64/systemd/README").exists()
        assert os.readlink(ctx.staging / "usr/sbin/init") == "/usr/lib/systemd/systemd"


class TestRecipe:

    def test_missing_recipe_is_warning(self, ctx, tmp_path):
        assert recipe.copy_recipe(ctx.with_recipe(tmp_path / "no-recipe")) is False
        assert not (ctx.staging / "usr/bin/recipe").exists()

    def test_recipe_directory_skipped(self, ctx, tmp_path):
        recipe_dir = tmp_path / "recipe-is-a-dir"
        recipe_dir.mkdir()

        assert recipe.copy_recipe(ctx.with_recipe(recipe_dir)) is False
        assert not (ctx.staging / "usr/bin/recipe").exists()

    def test_recipe_copied(self, ctx, tmp_path):
        binary = write_binary(tmp_path / "recipe-bin", "recipe\n")

        assert recipe.copy_recipe(ctx.with_recipe(binary)) is True
        recipe.setup_recipe_config(ctx)

        dest = ctx.staging / "usr/bin/recipe"
        assert _mode(dest) == 0o755
        assert "cache_dir" in (ctx.staging / "etc/recipe/recipe.conf").read_text()
        assert (ctx.staging / "var/cache/recipe").is_dir()
