"""Helpers for base64 data URLs and image type sniffing."""

import base64
import binascii
import re


DATA_URL_PATTERN = re.compile(
    r'^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[\w.+-]+=[^;,]*)*)(?P<b64>;base64)?,(?P<payload>.*)$',
    re.DOTALL,
)

# Magic bytes for the formats a browser file picker usually hands over
IMAGE_SIGNATURES = [
    (b'\xff\xd8\xff', "image/jpeg"),
    (b'\x89PNG\r\n\x1a\n', "image/png"),
    (b'GIF87a', "image/gif"),
    (b'GIF89a', "image/gif"),
    (b'BM', "image/bmp"),
]


def encode_data_url(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    """Split a data URL into (mime_type, raw bytes).
    
    Raw base64 without the ``data:`` prefix is accepted too and reported as
    ``application/octet-stream``.
    
    Raises:
        ValueError: if the payload is not valid base64.
    """
    data_url = data_url.strip()
    if not data_url.startswith("data:"):
        return "application/octet-stream", _b64decode(data_url)
    
    match = DATA_URL_PATTERN.match(data_url)
    if not match:
        raise ValueError("Malformed data URL")
    
    mime_type = match.group("mime") or "text/plain"
    payload = match.group("payload")
    if match.group("b64"):
        return mime_type, _b64decode(payload)
    return mime_type, payload.encode("utf-8")


def sniff_image_type(data: bytes) -> str | None:
    """Detect an image MIME type from magic bytes."""
    for signature, mime_type in IMAGE_SIGNATURES:
        if data.startswith(signature):
            return mime_type
    if data[:4] == b'RIFF' and data[8:12] == b'WEBP':
        return "image/webp"
    return None


def _b64decode(payload: str) -> bytes:
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
