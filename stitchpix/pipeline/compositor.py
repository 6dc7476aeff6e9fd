"""Offline canvas compositor.

Overlays a crop of the subject photo (assumed to hold a face) onto the
garment photo inside a rounded rectangle near the top centre. Placement is a
fixed heuristic, not content aware. The routine is the fallback of last
resort, so every decode or draw failure degrades to a simpler result instead
of raising; the only exception is when neither photo can be decoded.
"""

import asyncio
import logging
import math

from PIL import Image, ImageDraw

from ..errors import CompositionError
from ..models.generation import GenerationResult, SourceTag
from ..models.image import EncodedImage


logger = logging.getLogger(__name__)

# Destination face box, relative to the output canvas
FACE_WIDTH_RATIO = 0.25
FACE_ASPECT = 1.2  # height / width
FACE_TOP_RATIO = 0.08

# Source crop, relative to the subject photo
CROP_X_RATIO = 0.25
CROP_Y_RATIO = 0.10
CROP_WIDTH_RATIO = 0.50
CROP_HEIGHT_RATIO = 0.40

CORNER_RADIUS = 36

CANVAS_LABEL = "Canvas Merged"
ORIGINAL_LABEL = "Original"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def face_box(canvas_width: int, canvas_height: int) -> tuple[int, int, int, int]:
    """(x, y, width, height) of the face region on the output canvas."""
    width = round_half_up(canvas_width * FACE_WIDTH_RATIO)
    height = round_half_up(width * FACE_ASPECT)
    x = round_half_up((canvas_width - width) / 2)
    y = round_half_up(canvas_height * FACE_TOP_RATIO)
    return x, y, width, height


def crop_box(subject_width: int, subject_height: int) -> tuple[int, int, int, int]:
    """(x, y, width, height) of the face crop taken from the subject photo."""
    return (
        round_half_up(subject_width * CROP_X_RATIO),
        round_half_up(subject_height * CROP_Y_RATIO),
        round_half_up(subject_width * CROP_WIDTH_RATIO),
        round_half_up(subject_height * CROP_HEIGHT_RATIO),
    )


def rounded_mask(width: int, height: int, radius: int = CORNER_RADIUS) -> Image.Image:
    """L-mode clip mask; the radius is clamped like a canvas roundRect."""
    mask = Image.new("L", (width, height), 0)
    radius = max(0, min(radius, width // 2, height // 2))
    ImageDraw.Draw(mask).rounded_rectangle((0, 0, width - 1, height - 1), radius=radius, fill=255)
    return mask


class Compositor:
    """Deterministic two-photo overlay, no network and no randomness."""
    
    def __init__(self, corner_radius: int = CORNER_RADIUS, resample: int = Image.Resampling.LANCZOS):
        self.corner_radius = corner_radius
        self.resample = resample
    
    def compose(self, subject: EncodedImage, garment: EncodedImage) -> GenerationResult:
        """Overlay the subject's face crop onto the garment photo.
        
        Returns:
            A ``canvas`` result sized exactly like the garment photo, or an
            ``original`` passthrough when one of the photos cannot be decoded.
        
        Raises:
            CompositionError: only if neither photo decodes.
        """
        # Subject first, then garment
        try:
            subject_img = subject.open().convert("RGBA")
        except ValueError as subject_error:
            logger.warning("Subject photo does not decode, passing garment through: %s", subject_error)
            if not self._decodes(garment):
                raise CompositionError("Neither photo could be decoded") from subject_error
            return GenerationResult(image=garment, label=ORIGINAL_LABEL, source=SourceTag.ORIGINAL)
        
        try:
            garment_img = garment.open().convert("RGBA")
        except ValueError as e:
            logger.warning("Garment photo does not decode, passing subject through: %s", e)
            return GenerationResult(image=subject, label=ORIGINAL_LABEL, source=SourceTag.ORIGINAL)
        
        canvas = self._draw(subject_img, garment_img)
        return GenerationResult(
            image=EncodedImage.from_pil(canvas, format="PNG"),
            label=CANVAS_LABEL,
            source=SourceTag.CANVAS,
        )
    
    async def compose_async(self, subject: EncodedImage, garment: EncodedImage) -> GenerationResult:
        return await asyncio.to_thread(self.compose, subject, garment)
    
    def _draw(self, subject_img: Image.Image, garment_img: Image.Image) -> Image.Image:
        # Garment is the base layer and fixes the output size
        canvas = Image.new("RGBA", garment_img.size)
        canvas.paste(garment_img, (0, 0))
        
        fx, fy, fw, fh = face_box(*canvas.size)
        sx, sy, sw, sh = crop_box(*subject_img.size)
        
        try:
            patch = subject_img.crop((sx, sy, sx + sw, sy + sh)).resize((fw, fh), self.resample)
            canvas.paste(patch, (fx, fy), rounded_mask(fw, fh, self.corner_radius))
        except (ValueError, OSError, MemoryError) as e:
            logger.warning("Face crop failed, drawing whole subject instead: %s", e)
            try:
                canvas.paste(subject_img.resize((fw, fh), self.resample), (fx, fy))
            except (ValueError, OSError, MemoryError) as e2:
                logger.warning("Subject overlay skipped: %s", e2)
        
        return canvas
    
    @staticmethod
    def _decodes(image: EncodedImage) -> bool:
        try:
            image.open()
        except ValueError:
            return False
        return True
