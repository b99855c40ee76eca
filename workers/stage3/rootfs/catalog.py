"""
Catalog — what goes into the stage3 image.

Plain ordered name tuples, no metadata.  Order is the copy order.
"""
from typing import Tuple

# Coreutils and essential user binaries (usr/bin first).
COREUTILS: Tuple[str, ...] = (
    # File operations
    "ls", "cat", "cp", "mv", "rm", "mkdir", "rmdir", "touch", "chmod",
    "chown", "ln", "readlink", "dirname", "basename", "realpath", "stat",
    "file",
    # Text processing
    "echo", "printf", "head", "tail", "wc", "sort", "uniq", "cut", "tr",
    "diff", "tee", "yes",
    # Search/find
    "grep", "find", "xargs", "which",
    # System info
    "pwd", "uname", "date", "env", "printenv", "id", "whoami", "groups",
    "hostname",
    # Process
    "sleep", "kill", "ps", "pgrep", "pkill", "nice", "nohup",
    # Compression
    "gzip", "gunzip", "xz", "unxz", "bzip2", "bunzip2",
    # Archive
    "tar", "cpio",
    # Editors
    "vi", "vim",
    # Shell utilities
    "true", "false", "test", "expr", "seq",
    # Disk utilities
    "df", "du", "sync",
    "sed", "awk", "gawk",
    # User
    "su", "sudo", "passwd",
    # Network
    "ping", "curl", "wget",
    # systemd control
    "systemctl", "journalctl", "timedatectl", "hostnamectl", "localectl",
    "loginctl", "bootctl",
)

# System administration utilities (usr/sbin first).
SBIN_UTILS: Tuple[str, ...] = (
    # Filesystem
    "mount", "umount", "fsck", "fsck.ext4", "e2fsck", "mkfs.ext4", "mke2fs",
    "mkfs.fat", "mkfs.vfat",
    # Disk management
    "blkid", "fdisk", "sfdisk", "parted", "partprobe", "wipefs", "lsblk",
    # System control
    "reboot", "shutdown", "poweroff", "halt",
    # Hardware
    "hwclock", "lspci", "lsusb",
    # Kernel modules
    "insmod", "rmmod", "modprobe", "lsmod", "depmod",
    # Boot
    "chroot", "pivot_root",
    "ldconfig",
    # User management
    "useradd", "userdel", "usermod", "groupadd", "groupdel", "groupmod",
    "chpasswd",
    # Network
    "ip", "ss", "ifconfig", "route",
    "sysctl", "losetup",
    "chronyd",
    # SELinux (if present)
    "getenforce", "setenforce",
)

# Helpers living in usr/lib/systemd next to the systemd binary.
SYSTEMD_BINARIES: Tuple[str, ...] = (
    "systemd-executor",
    "systemd-shutdown",
    "systemd-sulogin-shell",
    "systemd-cgroups-agent",
    "systemd-journald",
    "systemd-modules-load",
    "systemd-sysctl",
    "systemd-tmpfiles",
    "systemd-timedated",
    "systemd-hostnamed",
    "systemd-localed",
    "systemd-logind",
    "systemd-networkd",
    "systemd-resolved",
    "systemd-udevd",
    "systemd-fsck",
    "systemd-remount-fs",
    "systemd-vconsole-setup",
    "systemd-random-seed",
)

LOGIN_BINARIES: Tuple[str, ...] = ("agetty", "login", "sulogin", "nologin")

ESSENTIAL_UNITS: Tuple[str, ...] = (
    # Targets
    "basic.target", "sysinit.target", "multi-user.target", "default.target",
    "getty.target", "local-fs.target", "local-fs-pre.target",
    "remote-fs.target", "remote-fs-pre.target", "network.target",
    "network-pre.target", "network-online.target", "paths.target",
    "slices.target", "sockets.target", "timers.target", "swap.target",
    "shutdown.target", "rescue.target", "emergency.target", "reboot.target",
    "poweroff.target", "halt.target", "suspend.target", "sleep.target",
    "umount.target", "final.target", "graphical.target",
    # Core systemd services
    "systemd-journald.service", "systemd-journald@.service",
    "systemd-udevd.service", "systemd-modules-load.service",
    "systemd-sysctl.service", "systemd-tmpfiles-setup.service",
    "systemd-tmpfiles-setup-dev.service", "systemd-tmpfiles-clean.service",
    "systemd-random-seed.service", "systemd-vconsole-setup.service",
    # Boot critical for disk systems
    "systemd-fsck-root.service", "systemd-fsck@.service",
    "systemd-remount-fs.service", "systemd-fstab-generator",
    # Authentication
    "systemd-logind.service",
    # Getty
    "getty@.service", "serial-getty@.service", "console-getty.service",
    "container-getty@.service",
    # Time/network
    "systemd-timedated.service", "systemd-hostnamed.service",
    "systemd-localed.service", "systemd-networkd.service",
    "systemd-resolved.service", "systemd-networkd-wait-online.service",
    # Misc
    "dbus.service", "dbus-broker.service", "chronyd.service",
    # Sockets
    "systemd-journald.socket", "systemd-journald-dev-log.socket",
    "systemd-journald-audit.socket", "systemd-udevd-control.socket",
    "systemd-udevd-kernel.socket", "dbus.socket",
    # Paths
    "systemd-ask-password-console.path", "systemd-ask-password-wall.path",
    # Slices
    "-.slice", "system.slice", "user.slice", "machine.slice",
)

DBUS_SYMLINKS: Tuple[str, ...] = (
    "dbus-org.freedesktop.timedate1.service",
    "dbus-org.freedesktop.hostname1.service",
    "dbus-org.freedesktop.locale1.service",
    "dbus-org.freedesktop.login1.service",
    "dbus-org.freedesktop.network1.service",
    "dbus-org.freedesktop.resolve1.service",
)

PAM_MODULES: Tuple[str, ...] = (
    "pam_unix.so", "pam_deny.so", "pam_permit.so", "pam_env.so",
    "pam_nologin.so", "pam_securetty.so", "pam_limits.so", "pam_access.so",
    "pam_namespace.so", "pam_lastlog.so", "pam_motd.so", "pam_keyinit.so",
    "pam_loginuid.so", "pam_rootok.so", "pam_pwquality.so",
    "pam_faillock.so", "pam_shells.so", "pam_succeed_if.so",
    "pam_systemd.so", "pam_systemd_home.so",
)

# Full zoneinfo is large; only these zones are carried.
TIMEZONES: Tuple[str, ...] = ("UTC", "America", "Europe", "Asia", "Etc")

FHS_DIRS: Tuple[str, ...] = (
    # Essential directories (replaced by merged-/usr links later)
    "bin", "sbin", "lib", "lib64",
    # /usr hierarchy
    "usr/bin", "usr/sbin", "usr/lib", "usr/lib64",
    "usr/share", "usr/share/man", "usr/share/doc", "usr/share/licenses",
    "usr/share/zoneinfo",
    "usr/local/bin", "usr/local/sbin", "usr/local/lib",
    # /etc
    "etc", "etc/systemd/system", "etc/pam.d", "etc/security",
    "etc/profile.d", "etc/skel",
    # Volatile
    "proc", "sys", "dev", "dev/pts", "dev/shm", "run", "run/lock", "tmp",
    # Persistent data
    "var", "var/log", "var/log/journal", "var/tmp", "var/cache", "var/lib",
    "var/spool",
    # Mount points
    "mnt", "media", "boot",
    "root", "home",
    "opt", "srv",
    # systemd
    "usr/lib/systemd/system", "usr/lib/systemd/system-generators",
    "usr/lib64/systemd",
    "usr/lib/modules",
    # PAM modules
    "usr/lib64/security",
    # D-Bus
    "usr/share/dbus-1/system.d", "usr/share/dbus-1/system-services",
    "usr/lib/locale",
)

# (link, target) pairs relative to the staging root; merged /usr.
MERGED_USR_LINKS: Tuple[Tuple[str, str], ...] = (
    ("bin", "usr/bin"),
    ("sbin", "usr/sbin"),
    ("lib", "usr/lib"),
    ("lib64", "usr/lib64"),
)

RUNTIME_LINKS: Tuple[Tuple[str, str], ...] = (
    ("var/run", "/run"),
    ("var/lock", "/run/lock"),
    ("usr/bin/sh", "bash"),
)
