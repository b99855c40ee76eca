"""
/etc — configuration files for an installed (disk-based) system.

Everything here is static text; installer-specific values (hostname,
root device, timezone) are left as defaults the installer rewrites.
"""
import logging
import shutil

from stage3.core.build_context import BuildContext
from stage3.rootfs.catalog import TIMEZONES
from stage3.rootfs.filesystem import copy_dir_recursive, symlink_if_absent, write_file

logger = logging.getLogger(__name__)


# ── Accounts ─────────────────────────────────────────────────────────────────

PASSWD = """\
root:x:0:0:root:/root:/usr/bin/bash
bin:x:1:1:bin:/bin:/usr/sbin/nologin
daemon:x:2:2:daemon:/sbin:/usr/sbin/nologin
nobody:x:65534:65534:Kernel Overflow User:/:/usr/sbin/nologin
systemd-network:x:192:192:systemd Network Management:/:/usr/sbin/nologin
systemd-resolve:x:193:193:systemd Resolver:/:/usr/sbin/nologin
systemd-timesync:x:194:194:systemd Time Synchronization:/:/usr/sbin/nologin
systemd-coredump:x:195:195:systemd Core Dumper:/:/usr/sbin/nologin
dbus:x:81:81:System message bus:/:/usr/sbin/nologin
chrony:x:996:993::/var/lib/chrony:/usr/sbin/nologin
"""

# root is locked until the installer sets a password
SHADOW = """\
root:!:19000:0:99999:7:::
bin:*:19000:0:99999:7:::
daemon:*:19000:0:99999:7:::
nobody:*:19000:0:99999:7:::
systemd-network:!*:19000::::::
systemd-resolve:!*:19000::::::
systemd-timesync:!*:19000::::::
systemd-coredump:!*:19000::::::
dbus:!*:19000::::::
chrony:!*:19000::::::
"""

GROUPS = (
    ("root", 0), ("bin", 1), ("daemon", 2), ("sys", 3), ("adm", 4),
    ("tty", 5), ("disk", 6), ("wheel", 10), ("kmem", 9), ("audio", 11),
    ("video", 12), ("users", 100), ("nobody", 65534),
    ("systemd-network", 192), ("systemd-resolve", 193),
    ("systemd-timesync", 194), ("systemd-coredump", 195),
    ("dbus", 81), ("chrony", 993),
)

# Groups without a locked gshadow password.
_OPEN_GSHADOW = {
    "root", "bin", "daemon", "sys", "adm", "tty", "disk", "wheel", "kmem",
    "audio", "video", "users", "nobody",
}


def _group_file() -> str:
    return "".join(f"{name}:x:{gid}:\n" for name, gid in GROUPS)


def _gshadow_file() -> str:
    return "".join(
        f"{name}:::\n" if name in _OPEN_GSHADOW else f"{name}:!::\n"
        for name, _gid in GROUPS
    )


# ── Identity / filesystems / auth ────────────────────────────────────────────

OS_RELEASE = """\
NAME="LevitateOS"
ID=levitateos
ID_LIKE=fedora
VERSION="1.0"
VERSION_ID=1
PRETTY_NAME="LevitateOS 1.0"
HOME_URL="https://levitateos.org"
BUG_REPORT_URL="https://github.com/levitateos/levitateos/issues"
"""

FSTAB = """\
# /etc/fstab - Static file system information
# <device>  <mount>  <type>  <options>  <dump>  <fsck>

# Root filesystem (set by installer)
# /dev/xxx  /  ext4  defaults  0  1

# EFI System Partition (set by installer)
# /dev/xxx  /boot/efi  vfat  umask=0077  0  2

proc  /proc  proc  defaults  0  0
sysfs  /sys  sysfs  defaults  0  0
devtmpfs  /dev  devtmpfs  mode=0755,nosuid  0  0
tmpfs  /tmp  tmpfs  defaults,nosuid,nodev  0  0
tmpfs  /run  tmpfs  mode=0755,nosuid,nodev  0  0
"""

SECURETTY = "".join(
    f"{tty}\n"
    for tty in ("console", "tty1", "tty2", "tty3", "tty4", "tty5", "tty6", "ttyS0", "ttyS1")
)

SHELLS = """\
/usr/bin/bash
/bin/bash
/usr/bin/sh
/bin/sh
"""

LOGIN_DEFS = """\
# Login configuration
MAIL_DIR /var/spool/mail
PASS_MAX_DAYS 99999
PASS_MIN_DAYS 0
PASS_WARN_AGE 7
UID_MIN 1000
UID_MAX 60000
SYS_UID_MIN 201
SYS_UID_MAX 999
GID_MIN 1000
GID_MAX 60000
SYS_GID_MIN 201
SYS_GID_MAX 999
CREATE_HOME yes
UMASK 022
USERGROUPS_ENAB yes
ENCRYPT_METHOD SHA512
"""

# ── Locale / network / shell ─────────────────────────────────────────────────

ADJTIME = "0.0 0 0.0\n0\nUTC\n"

HOSTS = """\
127.0.0.1   localhost localhost.localdomain
::1         localhost localhost.localdomain ip6-localhost ip6-loopback
"""

PROFILE = """\
# System-wide profile
export PATH="/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"
export EDITOR="vi"
export PAGER="less"

# Source profile.d scripts
for script in /etc/profile.d/*.sh; do
    [ -r "$script" ] && . "$script"
done
unset script

# Interactive shell settings
if [ -n "$PS1" ]; then
    PS1='[\\u@\\h \\W]\\$ '
fi
"""

BASHRC = """\
# System-wide bashrc
[ -f /etc/profile ] && . /etc/profile

if [ -n "$PS1" ]; then
    HISTSIZE=1000
    HISTFILESIZE=2000
    HISTCONTROL=ignoredups:erasedups

    alias ls='ls --color=auto'
    alias ll='ls -la'
    alias l='ls -l'
fi
"""

ROOT_BASHRC = """\
# Root bashrc
[ -f /etc/bashrc ] && . /etc/bashrc
export PS1='[\\u@\\h \\W]# '
"""

USER_BASHRC = """\
# User bashrc
[ -f /etc/bashrc ] && . /etc/bashrc
"""

BASH_PROFILE = """\
# bash_profile
[ -f ~/.bashrc ] && . ~/.bashrc
"""

NSSWITCH = """\
# Name Service Switch configuration
passwd:     files systemd
shadow:     files
group:      files systemd
hosts:      files resolve [!UNAVAIL=return] dns myhostname
networks:   files
protocols:  files
services:   files
ethers:     files
rpc:        files
"""


def create_etc_files(ctx: BuildContext) -> None:
    """Create all /etc configuration files."""
    logger.info("Creating /etc configuration files...")

    create_passwd_files(ctx)
    create_system_identity(ctx)
    create_filesystem_config(ctx)
    create_auth_config(ctx)
    create_locale_config(ctx)
    create_network_config(ctx)
    create_shell_config(ctx)
    write_file(ctx.staging / "etc/nsswitch.conf", NSSWITCH)

    logger.info("  Created /etc configuration files")


def create_passwd_files(ctx: BuildContext) -> None:
    etc = ctx.staging / "etc"
    write_file(etc / "passwd", PASSWD)
    write_file(etc / "shadow", SHADOW, mode=0o600)
    write_file(etc / "group", _group_file())
    write_file(etc / "gshadow", _gshadow_file(), mode=0o600)


def create_system_identity(ctx: BuildContext) -> None:
    etc = ctx.staging / "etc"
    write_file(etc / "hostname", "levitateos\n")
    # systemd generates the machine id on first boot
    write_file(etc / "machine-id", "")
    write_file(etc / "os-release", OS_RELEASE)


def create_filesystem_config(ctx: BuildContext) -> None:
    etc = ctx.staging / "etc"
    write_file(etc / "fstab", FSTAB)
    symlink_if_absent("/proc/self/mounts", etc / "mtab")


def create_auth_config(ctx: BuildContext) -> None:
    etc = ctx.staging / "etc"
    write_file(etc / "securetty", SECURETTY)
    write_file(etc / "shells", SHELLS)
    write_file(etc / "login.defs", LOGIN_DEFS)


def create_locale_config(ctx: BuildContext) -> None:
    etc = ctx.staging / "etc"
    symlink_if_absent("/usr/share/zoneinfo/UTC", etc / "localtime")
    write_file(etc / "adjtime", ADJTIME)
    write_file(etc / "locale.conf", "LANG=C.UTF-8\n")
    write_file(etc / "vconsole.conf", "KEYMAP=us\n")


def create_network_config(ctx: BuildContext) -> None:
    etc = ctx.staging / "etc"
    write_file(etc / "hosts", HOSTS)
    # systemd-resolved owns resolv.conf
    symlink_if_absent("/run/systemd/resolve/stub-resolv.conf", etc / "resolv.conf")


def create_shell_config(ctx: BuildContext) -> None:
    etc = ctx.staging / "etc"
    root_home = ctx.staging / "root"
    write_file(etc / "profile", PROFILE)
    write_file(etc / "bashrc", BASHRC)
    write_file(root_home / ".bashrc", ROOT_BASHRC)
    write_file(root_home / ".bash_profile", BASH_PROFILE)
    write_file(etc / "skel/.bashrc", USER_BASHRC)
    write_file(etc / "skel/.bash_profile", BASH_PROFILE)


def copy_timezone_data(ctx: BuildContext) -> None:
    logger.info("Copying timezone data...")
    src = ctx.source / "usr/share/zoneinfo"
    dst = ctx.staging / "usr/share/zoneinfo"
    dst.mkdir(parents=True, exist_ok=True)

    if not src.exists():
        return

    for zone in TIMEZONES:
        zone_src = src / zone
        if zone_src.is_dir():
            copy_dir_recursive(zone_src, dst / zone)
        elif zone_src.exists():
            shutil.copy(zone_src, dst / zone)
    logger.info("  Copied timezone data")


def copy_locales(ctx: BuildContext) -> None:
    logger.info("Copying locales...")
    archive_src = ctx.source / "usr/lib/locale/locale-archive"
    if archive_src.exists():
        archive_dst = ctx.staging / "usr/lib/locale/locale-archive"
        archive_dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy(archive_src, archive_dst)
        logger.info("  Copied locale-archive")
