"""
PAM — real local authentication for the installed system.

Unlike the live environment, nothing here is permissive: pam_unix
against /etc/shadow, pam_deny as the fallback for unknown services.
"""
import logging
import shutil

from stage3.core.build_context import BuildContext
from stage3.rootfs.catalog import PAM_MODULES
from stage3.rootfs.filesystem import write_file

logger = logging.getLogger(__name__)

_AUTH_STACK = """\
auth        required      pam_env.so
auth        sufficient    pam_unix.so try_first_pass nullok
auth        required      pam_deny.so

account     required      pam_unix.so

password    requisite     pam_pwquality.so try_first_pass local_users_only retry=3 authtok_type=
password    sufficient    pam_unix.so try_first_pass use_authtok nullok sha512 shadow
password    required      pam_deny.so

session     optional      pam_keyinit.so revoke
session     required      pam_limits.so
session     required      pam_unix.so
"""

PAM_FILES = {
    "system-auth": "#%PAM-1.0\n# System authentication configuration\n\n" + _AUTH_STACK,
    "password-auth": "#%PAM-1.0\n# Password authentication configuration\n\n" + _AUTH_STACK,
    "login": """\
#%PAM-1.0
# Login authentication configuration

auth       requisite    pam_nologin.so
auth       include      system-auth

account    required     pam_access.so
account    include      system-auth

password   include      system-auth

session    required     pam_loginuid.so
session    optional     pam_keyinit.so force revoke
session    include      system-auth
session    required     pam_namespace.so
session    optional     pam_lastlog.so showfailed
session    optional     pam_motd.so
""",
    "passwd": """\
#%PAM-1.0
# Password change configuration

auth       include      system-auth
account    include      system-auth
password   substack     system-auth
""",
    "su": """\
#%PAM-1.0
# su authentication configuration

auth       sufficient   pam_rootok.so
auth       required     pam_unix.so

account    sufficient   pam_rootok.so
account    required     pam_unix.so

session    required     pam_unix.so
""",
    "sudo": """\
#%PAM-1.0
# sudo authentication configuration

auth       include      system-auth
account    include      system-auth
password   include      system-auth
session    optional     pam_keyinit.so revoke
session    required     pam_limits.so
""",
    "chpasswd": """\
#%PAM-1.0
# chpasswd configuration

auth       sufficient   pam_rootok.so
auth       required     pam_unix.so

account    required     pam_unix.so

password   include      system-auth
""",
    "other": """\
#%PAM-1.0
# Fallback PAM configuration

auth        required      pam_deny.so
account     required      pam_deny.so
password    required      pam_deny.so
session     required      pam_deny.so
""",
    "systemd-user": """\
#%PAM-1.0
# systemd user session configuration

account    include      system-auth
session    required     pam_loginuid.so
session    optional     pam_keyinit.so force revoke
session    include      system-auth
""",
}

SECURITY_FILES = {
    "limits.conf": """\
# /etc/security/limits.conf
#
# <domain>  <type>  <item>  <value>
#

*               soft    core            0
*               hard    nofile          1048576
*               soft    nofile          1024
root            soft    nofile          1048576
""",
    "access.conf": """\
# /etc/security/access.conf
#
# Login access control table
#

# Allow root from console
+:root:LOCAL

# Allow all other users from anywhere (default)
+:ALL:ALL
""",
    "namespace.conf": """\
# /etc/security/namespace.conf
#
# Polyinstantiation configuration
#

# $HOME    $HOME                        user      root
# /tmp     /tmp-inst/                   level     root
# /var/tmp /var/tmp/tmp-inst/           level     root
""",
    "pam_env.conf": """\
# /etc/security/pam_env.conf
#
# Environment variables for PAM sessions
#

# PATH is set in /etc/profile
""",
    "pwquality.conf": """\
# Password quality configuration

# Minimum password length
minlen = 8

# Minimum number of character classes (uppercase, lowercase, digits, special)
minclass = 1
""",
}


def setup_pam(ctx: BuildContext) -> None:
    logger.info("Setting up PAM configuration...")
    pam_dir = ctx.staging / "etc/pam.d"
    for name, content in PAM_FILES.items():
        write_file(pam_dir / name, content)
    logger.info("  Created %d PAM configuration files", len(PAM_FILES))


def copy_pam_modules(ctx: BuildContext) -> int:
    """Copy the essential PAM modules that exist in the source rootfs."""
    logger.info("Copying PAM modules...")
    modules_src = ctx.source / "usr/lib64/security"
    modules_dst = ctx.staging / "usr/lib64/security"
    if not modules_src.exists():
        return 0

    modules_dst.mkdir(parents=True, exist_ok=True)
    copied = 0
    for module in PAM_MODULES:
        src = modules_src / module
        if src.exists():
            shutil.copy(src, modules_dst / module)
            copied += 1
    logger.info("  Copied %d/%d PAM modules", copied, len(PAM_MODULES))
    return copied


def create_security_config(ctx: BuildContext) -> None:
    logger.info("Creating security configuration...")
    security_dir = ctx.staging / "etc/security"
    for name, content in SECURITY_FILES.items():
        write_file(security_dir / name, content)
