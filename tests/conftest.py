# Test fixtures and configuration
import io
import sys
from pathlib import Path

import httpx
import pytest
from PIL import ExifTags, Image

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from stitchpix.config import AppConfig
from stitchpix.models import EncodedImage


def png_bytes(size, color="white", regions=()) -> bytes:
    """PNG bytes of a solid image with optional (box, color) rectangles."""
    img = Image.new("RGB", size, color=color)
    for box, fill in regions:
        img.paste(fill, box)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def rotated_jpeg_bytes(size, color="white", regions=()) -> bytes:
    """JPEG stored sideways with EXIF Orientation=6; displays upright at ``size``."""
    upright = Image.new("RGB", size, color=color)
    for box, fill in regions:
        upright.paste(fill, box)
    # Orientation 6 means "rotate 90 degrees clockwise to display"
    stored = upright.transpose(Image.Transpose.ROTATE_90)
    exif = Image.Exif()
    exif[ExifTags.Base.Orientation] = 6
    buf = io.BytesIO()
    stored.save(buf, format="JPEG", quality=95, exif=exif.tobytes())
    return buf.getvalue()


def mock_client(handler) -> httpx.AsyncClient:
    """An AsyncClient whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def minimal_png_bytes():
    """Minimal valid PNG image bytes."""
    return bytes([
        0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A,  # PNG signature
        0x00, 0x00, 0x00, 0x0D, 0x49, 0x48, 0x44, 0x52,  # IHDR chunk
        0x00, 0x00, 0x00, 0x01, 0x00, 0x00, 0x00, 0x01,  # 1x1 dimensions
        0x08, 0x02, 0x00, 0x00, 0x00, 0x90, 0x77, 0x53,
        0xDE, 0x00, 0x00, 0x00, 0x0C, 0x49, 0x44, 0x41,  # IDAT chunk
        0x54, 0x08, 0xD7, 0x63, 0xF8, 0xCF, 0xC0, 0x00,
        0x00, 0x00, 0x03, 0x00, 0x01, 0x00, 0x05, 0xFE,
        0xD4, 0xAA, 0x00, 0x00, 0x00, 0x00, 0x49, 0x45,  # IEND chunk
        0x4E, 0x44, 0xAE, 0x42, 0x60, 0x82
    ])


@pytest.fixture
def subject_image():
    """800x600 face photo; the face crop region is solid red."""
    data = png_bytes((800, 600), color="green", regions=[((200, 60, 600, 300), (255, 0, 0))])
    return EncodedImage(data=data, mime_type="image/png", width=800, height=600)


@pytest.fixture
def garment_image():
    """1000x1500 solid blue garment photo."""
    data = png_bytes((1000, 1500), color=(0, 0, 255))
    return EncodedImage(data=data, mime_type="image/png", width=1000, height=1500)


@pytest.fixture
def broken_image():
    """Claims to be a PNG but does not decode."""
    return EncodedImage(data=b"definitely not a png", mime_type="image/png")


@pytest.fixture
def config(tmp_path):
    return AppConfig(
        backend="https://auth.test",
        storage_path=tmp_path / "storage.json",
        nanobanana_url="https://nanobanana.test/api/try-on",
        deepai_url="https://deepai.test/api/image-editor",
    )


@pytest.fixture
def make_png():
    return png_bytes


@pytest.fixture
def make_rotated_jpeg():
    return rotated_jpeg_bytes


@pytest.fixture
def make_client():
    return mock_client
