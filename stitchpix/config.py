"""Configuration management for the StitchPix try-on studio."""

from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings

from .services.providers import DEEPAI_URL, NANOBANANA_URL


DEFAULT_BACKEND = "https://stitchpix-backend-1.onrender.com"


class AppConfig(BaseSettings):
    """Main studio configuration."""
    
    # Auth backend (STITCHPIX_BACKEND)
    backend: str = DEFAULT_BACKEND
    
    # Local session storage
    storage_path: Path = Path.home() / ".stitchpix" / "storage.json"
    keep_credential_on_logout: bool = True  # API key survives logout
    
    # Remote try-on providers
    nanobanana_url: str = NANOBANANA_URL
    deepai_url: str = DEEPAI_URL
    http_timeout: float = 60.0  # shared by every outbound httpx client
    
    # Uploads
    max_image_bytes: int = Field(default=6 * 1024 * 1024, gt=0)
    
    # Logging
    log_level: str = "INFO"
    json_logs: bool = False
    
    class Config:
        env_file = ".env"
        env_prefix = "STITCHPIX_"
        extra = "ignore"
    
    @property
    def backend_url(self) -> str:
        return self.backend.rstrip("/")


def load_config() -> AppConfig:
    """Load configuration from environment and defaults."""
    return AppConfig()
