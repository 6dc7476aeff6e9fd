"""StitchPix virtual try-on studio."""

from .config import AppConfig, load_config
from .studio import Page, PhotoRole, TryOnStudio

__all__ = [
    "AppConfig",
    "load_config",
    "Page",
    "PhotoRole",
    "TryOnStudio",
]

__version__ = "1.0.0"
