"""
Recipe — ship the recipe package manager and its configuration.
"""
import logging
import shutil
from pathlib import Path

from stage3.core.build_context import BuildContext
from stage3.core.staged_copy import make_executable
from stage3.rootfs.filesystem import write_file

logger = logging.getLogger(__name__)

DEFAULT_RECIPE_BINARY = Path("../recipe/target/release/recipe")

RECIPE_DIRS = ("etc/recipe", "var/lib/recipe", "var/cache/recipe")

RECIPE_CONF = """\
# Recipe package manager configuration

# Repository URL (set during installation)
# repository = "https://packages.levitateos.org"

# Cache directory
cache_dir = "/var/cache/recipe"

# Database directory
db_dir = "/var/lib/recipe"
"""


def copy_recipe(ctx: BuildContext) -> bool:
    """Copy the recipe binary to usr/bin/recipe; missing binary is only a warning."""
    logger.info("Copying recipe package manager...")
    recipe_path = ctx.recipe_binary or DEFAULT_RECIPE_BINARY

    if not recipe_path.is_file():
        logger.warning("recipe binary not found at %s, skipping", recipe_path)
        return False

    dest = ctx.staging / "usr/bin/recipe"
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy(recipe_path, dest)
        make_executable(dest)
    except OSError as e:
        logger.warning("Failed to copy recipe from %s: %s", recipe_path, e)
        return False
    logger.info("  Copied recipe to /usr/bin/recipe")
    return True


def setup_recipe_config(ctx: BuildContext) -> None:
    logger.info("Setting up recipe configuration...")
    for d in RECIPE_DIRS:
        (ctx.staging / d).mkdir(parents=True, exist_ok=True)
    write_file(ctx.staging / "etc/recipe/recipe.conf", RECIPE_CONF)
