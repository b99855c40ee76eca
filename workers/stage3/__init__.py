"""
stage3 — installed-system rootfs builder.

Harvests binaries and their shared-library closure from a source rootfs
into a staging tree, lays down the configuration an installed system
needs, and archives the result as a stage3 tarball.
"""

__version__ = "0.1.0"
BUILDER_VERSION = "v1"
PACKAGE_NAME = "stage3"
SCHEMA_VERSION = "0.1"
