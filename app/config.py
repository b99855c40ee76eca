"""
Application configuration
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""
    
    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080
    API_TITLE: str = "Stage3 API"
    API_VERSION: str = "0.1.0"
    
    # Build roots
    STAGE3_SOURCE_ROOT: str = "/files/rootfs"
    STAGE3_STAGING_DIR: str = "/files/stage3/staging"
    STAGE3_OUTPUT_DIR: str = "/files/stage3/output"
    STAGE3_RECIPE_BINARY: str | None = None
    
    @property
    def tarball_path(self) -> str:
        """Default stage3 tarball location"""
        return f"{self.STAGE3_OUTPUT_DIR}/levitateos-stage3.tar.xz"
    
    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
