"""
Stage3 API
HTTP front end for building and inspecting the stage3 tarball.
"""
from fastapi import FastAPI

from app.config import settings
from app.routers import stage3

app = FastAPI(
    title=settings.API_TITLE,
    description="Build the LevitateOS stage3 tarball from a source rootfs",
    version=settings.API_VERSION,
)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "stage3-api",
        "version": settings.API_VERSION,
        "source_root": settings.STAGE3_SOURCE_ROOT,
    }


app.include_router(stage3.router, prefix="/stage3", tags=["stage3"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.API_HOST, port=settings.API_PORT)
