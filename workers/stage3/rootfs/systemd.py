"""
systemd — unit files and enablement links for the installed system.

An installed system needs more than the live initramfs: fsck and
remount-fs for disk roots, a non-autologin getty, networkd + resolved.
"""
import logging
import os
import shutil

from stage3.core.build_context import BuildContext
from stage3.rootfs.catalog import DBUS_SYMLINKS, ESSENTIAL_UNITS
from stage3.rootfs.filesystem import copy_dir_files, symlink_if_absent, write_file

logger = logging.getLogger(__name__)

UNIT_DIR = "usr/lib/systemd/system"
ETC_UNIT_DIR = "etc/systemd/system"

DHCP_NETWORK = """\
[Match]
Name=en*
Name=eth*

[Network]
DHCP=yes
IPv6AcceptRA=yes

[DHCPv4]
UseDNS=yes
UseNTP=yes
UseHostname=yes
"""


def _enable(ctx: BuildContext, wants: str, unit: str, instance: str = "") -> None:
    """Link ``etc/systemd/system/<wants>/<instance or unit>`` to the vendor unit."""
    link = ctx.staging / ETC_UNIT_DIR / wants / (instance or unit)
    symlink_if_absent(f"/{UNIT_DIR}/{unit}", link)


def copy_systemd_units(ctx: BuildContext) -> int:
    logger.info("Copying systemd units...")
    unit_src = ctx.source / UNIT_DIR
    unit_dst = ctx.staging / UNIT_DIR
    unit_dst.mkdir(parents=True, exist_ok=True)

    copied = 0
    for unit in ESSENTIAL_UNITS:
        src = unit_src / unit
        if src.exists():
            shutil.copy(src, unit_dst / unit)
            copied += 1

    logger.info("  Copied %d/%d unit files", copied, len(ESSENTIAL_UNITS))
    return copied


def copy_dbus_symlinks(ctx: BuildContext) -> None:
    """Recreate the D-Bus activation aliases (links, not copies)."""
    logger.info("Copying D-Bus symlinks...")
    unit_src = ctx.source / UNIT_DIR
    unit_dst = ctx.staging / UNIT_DIR
    for name in DBUS_SYMLINKS:
        src = unit_src / name
        if src.is_symlink():
            symlink_if_absent(os.readlink(src), unit_dst / name)


def setup_getty(ctx: BuildContext) -> None:
    logger.info("Setting up getty...")
    _enable(ctx, "getty.target.wants", "getty@.service", "getty@tty1.service")
    _enable(ctx, "multi-user.target.wants", "getty.target")
    logger.info("  Enabled getty@tty1.service")


def setup_serial_console(ctx: BuildContext) -> None:
    logger.info("Setting up serial console...")
    _enable(ctx, "getty.target.wants", "serial-getty@.service", "serial-getty@ttyS0.service")
    logger.info("  Enabled serial-getty@ttyS0.service")


def setup_networkd(ctx: BuildContext) -> None:
    logger.info("Setting up systemd-networkd...")
    write_file(ctx.staging / "etc/systemd/network/80-dhcp.network", DHCP_NETWORK)
    _enable(ctx, "multi-user.target.wants", "systemd-networkd.service")
    _enable(ctx, "multi-user.target.wants", "systemd-resolved.service")
    logger.info("  Enabled systemd-networkd and resolved")


def set_default_target(ctx: BuildContext) -> None:
    """Point default.target at multi-user.target, replacing any previous link."""
    logger.info("Setting default target...")
    link = ctx.staging / ETC_UNIT_DIR / "default.target"
    if os.path.lexists(link):
        link.unlink()
    symlink_if_absent(f"/{UNIT_DIR}/multi-user.target", link)


def setup_dbus(ctx: BuildContext) -> None:
    logger.info("Setting up D-Bus...")
    for sub in ("usr/share/dbus-1/system.d", "usr/share/dbus-1/system-services"):
        copy_dir_files(ctx.source / sub, ctx.staging / sub)
    _enable(ctx, "sockets.target.wants", "dbus.socket")
    logger.info("  Set up D-Bus")


def copy_udev_rules(ctx: BuildContext) -> int:
    logger.info("Copying udev rules...")
    return copy_dir_files(ctx.source / "usr/lib/udev/rules.d", ctx.staging / "usr/lib/udev/rules.d")


def copy_tmpfiles(ctx: BuildContext) -> int:
    logger.info("Copying tmpfiles.d...")
    return copy_dir_files(ctx.source / "usr/lib/tmpfiles.d", ctx.staging / "usr/lib/tmpfiles.d")


def copy_sysctl(ctx: BuildContext) -> int:
    logger.info("Copying sysctl.d...")
    return copy_dir_files(ctx.source / "usr/lib/sysctl.d", ctx.staging / "usr/lib/sysctl.d")
