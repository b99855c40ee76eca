"""
Stage3 Router
Builds the stage3 tarball from a source rootfs and lists existing ones.

Runs the stage3 package in-process and returns the same report that is
written to <output>/stage3_report.json.
"""
import logging
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from app.config import settings
from stage3.core.archive import list_tarball  # type: ignore
from stage3.core.errors import BuildError  # type: ignore
from stage3.io.schema import BuildReport  # type: ignore
from stage3.runner import run_stage3  # type: ignore

logger = logging.getLogger(__name__)


# =============================================================================
# Request/Response Models
# =============================================================================

class Stage3BuildRequest(BaseModel):
    """Request to build a stage3 tree."""
    source_root: Optional[str] = Field(
        None,
        description="Override path to the source rootfs",
    )
    staging_dir: Optional[str] = Field(
        None,
        description="Override path to the staging directory",
    )
    output_dir: Optional[str] = Field(
        None,
        description="Override path to the output directory",
    )
    recipe_binary: Optional[str] = Field(
        None,
        description="Override path to the recipe binary",
    )
    archive: bool = Field(
        True,
        description="Pack the staging tree into the tarball",
    )


class Stage3ListResponse(BaseModel):
    """Members of an existing stage3 tarball."""
    tarball: str
    count: int
    members: List[str] = Field(default_factory=list)


# =============================================================================
# Router
# =============================================================================

router = APIRouter()


@router.post(
    "/build",
    response_model=BuildReport,
    status_code=status.HTTP_200_OK,
    summary="Build the stage3 tree (and tarball) from a source rootfs",
)
def build_stage3(request: Stage3BuildRequest):
    """
    Harvest binaries, libraries and configuration from the source rootfs
    into the staging directory, then optionally archive it.

    Missing binaries and libraries are reported, not raised.  A missing
    source rootfs is a 404; any other fatal build error is a 500.
    """
    source = Path(request.source_root or settings.STAGE3_SOURCE_ROOT)
    if not source.is_dir():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Source rootfs not found: {source}",
        )

    try:
        return run_stage3(
            source=source,
            staging=request.staging_dir or settings.STAGE3_STAGING_DIR,
            output=request.output_dir or settings.STAGE3_OUTPUT_DIR,
            recipe_binary=request.recipe_binary or settings.STAGE3_RECIPE_BINARY,
            archive=request.archive,
        )
    except BuildError as e:
        logger.error("Stage3 build failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )


@router.get(
    "/list",
    response_model=Stage3ListResponse,
    summary="List the contents of a stage3 tarball",
)
async def list_stage3_tarball(
    path: Optional[str] = Query(None, description="Override path to the tarball"),
):
    tarball = Path(path or settings.tarball_path)
    if not tarball.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tarball not found: {tarball}",
        )
    try:
        members = list_tarball(tarball)
    except BuildError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return Stage3ListResponse(tarball=str(tarball), count=len(members), members=members)
