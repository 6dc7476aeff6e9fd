"""Data models for the StitchPix try-on studio."""

from .image import EncodedImage
from .catalog import Backend, ModelDescriptor, ModelRegistry, Tier, DEFAULT_MODELS
from .generation import GenerationRequest, GenerationResult, GenerationOutcome, SourceTag
from .session import SessionState, UserProfile

__all__ = [
    "EncodedImage",
    "Backend",
    "ModelDescriptor",
    "ModelRegistry",
    "Tier",
    "DEFAULT_MODELS",
    "GenerationRequest",
    "GenerationResult",
    "GenerationOutcome",
    "SourceTag",
    "SessionState",
    "UserProfile",
]
