"""Generation request and result models."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator

from ..errors import AdapterError
from .image import EncodedImage


class SourceTag(str, Enum):
    """Where a result image came from."""
    CANVAS = "canvas"
    NANOBANANA = "nanobanana"
    DEEPAI = "deepai"
    ORIGINAL = "original"


class GenerationRequest(BaseModel):
    """One generate action: two photos, a model id and an optional API key."""
    
    model_config = ConfigDict(frozen=True)
    
    subject_image: EncodedImage | None
    garment_image: EncodedImage | None
    model_id: str
    credential: str | None = None
    
    @property
    def has_images(self) -> bool:
        return self.subject_image is not None and self.garment_image is not None
    
    @property
    def has_credential(self) -> bool:
        return bool(self.credential and self.credential.strip())


class GenerationResult(BaseModel):
    """A produced image, held either as bytes or as a provider URL."""
    
    model_config = ConfigDict(frozen=True)
    
    image: EncodedImage | None = None
    remote_url: str | None = None
    label: str
    source: SourceTag
    
    @model_validator(mode="after")
    def _exactly_one_payload(self) -> "GenerationResult":
        if (self.image is None) == (self.remote_url is None):
            raise ValueError("GenerationResult needs exactly one of image or remote_url")
        return self
    
    @property
    def url(self) -> str:
        """Displayable URL: the provider URL or the image as a data URL."""
        if self.remote_url is not None:
            return self.remote_url
        return self.image.to_data_url()  # type: ignore[union-attr]
    
    @property
    def is_local(self) -> bool:
        return self.image is not None

@dataclass(frozen=True)
class GenerationOutcome:
    """A result plus the advisory left by a failed remote attempt, if any."""
    result: GenerationResult
    advisory: str | None = None
    cause: AdapterError | None = None
    
    @property
    def fell_back(self) -> bool:
        return self.cause is not None
