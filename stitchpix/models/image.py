"""Encoded image payloads."""

import io
import logging

from PIL import ExifTags, Image, ImageOps, UnidentifiedImageError
from pydantic import BaseModel, ConfigDict, Field

from ..utils.data_url import encode_data_url


logger = logging.getLogger(__name__)

# EXIF orientations that swap width and height when displayed
TRANSPOSED_ORIENTATIONS = {5, 6, 7, 8}


class EncodedImage(BaseModel):
    """Immutable image bytes plus MIME type and, once decoded, pixel size."""
    
    model_config = ConfigDict(frozen=True)
    
    data: bytes = Field(repr=False)
    mime_type: str = "image/png"
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    
    @property
    def decoded(self) -> bool:
        """Whether pixel dimensions are known."""
        return self.width is not None and self.height is not None
    
    @property
    def size(self) -> tuple[int, int] | None:
        if not self.decoded:
            return None
        return (self.width, self.height)  # type: ignore[return-value]
    
    def to_data_url(self) -> str:
        return encode_data_url(self.data, self.mime_type)
    
    def open(self) -> Image.Image:
        """Decode into a fully loaded Pillow image, upright per its EXIF orientation.
        
        Raises:
            ValueError: if the bytes are not a readable image.
        """
        try:
            img = Image.open(io.BytesIO(self.data))
            img.load()
            img = ImageOps.exif_transpose(img)
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            raise ValueError(f"Cannot decode {self.mime_type} image: {e}") from e
        return img
    
    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> "EncodedImage":
        """Wrap bytes, probing displayed dimensions. Undecodable bytes keep no size."""
        width = height = None
        try:
            with Image.open(io.BytesIO(data)) as img:
                width, height = img.size
                if img.getexif().get(ExifTags.Base.Orientation) in TRANSPOSED_ORIENTATIONS:
                    width, height = height, width
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            logger.debug("Could not probe %s image size: %s", mime_type, e)
        return cls(data=data, mime_type=mime_type, width=width, height=height)
    
    @classmethod
    def from_pil(cls, img: Image.Image, format: str = "PNG") -> "EncodedImage":
        output = io.BytesIO()
        img.save(output, format=format)
        return cls(
            data=output.getvalue(),
            mime_type=Image.MIME.get(format.upper(), "image/png"),
            width=img.width,
            height=img.height,
        )
