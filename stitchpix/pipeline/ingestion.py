"""Turn user-selected files into EncodedImage values."""

import mimetypes
from pathlib import Path

from ..errors import ValidationError
from ..models.image import EncodedImage
from ..utils.data_url import decode_data_url, sniff_image_type


MAX_IMAGE_BYTES = 6 * 1024 * 1024


def validate_image_file(content_type: str | None, size: int, max_bytes: int = MAX_IMAGE_BYTES) -> None:
    """Check declared type, then size.
    
    Raises:
        ValidationError: with a user-facing reason.
    """
    if not content_type or not content_type.lower().startswith("image/"):
        raise ValidationError("Upload an image file (jpg/png)")
    if size > max_bytes:
        raise ValidationError(f"Image too large (max {max_bytes // (1024 * 1024)}MB)")


def ingest_bytes(data: bytes, content_type: str | None, max_bytes: int = MAX_IMAGE_BYTES) -> EncodedImage:
    validate_image_file(content_type, len(data), max_bytes)
    return EncodedImage.from_bytes(bytes(data), content_type.lower())  # type: ignore[union-attr]


def ingest_path(
    path: Path,
    content_type: str | None = None,
    max_bytes: int = MAX_IMAGE_BYTES,
) -> EncodedImage:
    """Ingest a file from disk. The file is only read once it passes validation."""
    path = Path(path)
    try:
        if content_type is None:
            content_type = guess_content_type(path)
        validate_image_file(content_type, path.stat().st_size, max_bytes)
        data = path.read_bytes()
    except OSError as e:
        raise ValidationError("Failed to read file") from e
    return EncodedImage.from_bytes(data, content_type.lower())  # type: ignore[union-attr]


def ingest_data_url(data_url: str, max_bytes: int = MAX_IMAGE_BYTES) -> EncodedImage:
    """Ingest a base64 data URL as sent by a browser front end."""
    try:
        content_type, data = decode_data_url(data_url)
    except ValueError as e:
        raise ValidationError(f"Failed to read file: {e}") from e
    if content_type == "application/octet-stream":
        content_type = sniff_image_type(data) or content_type
    return ingest_bytes(data, content_type, max_bytes)


def guess_content_type(path: Path) -> str | None:
    """Content type from the file name, else from magic bytes."""
    content_type, _ = mimetypes.guess_type(path.name)
    if content_type:
        return content_type
    with open(path, "rb") as f:
        return sniff_image_type(f.read(16))
