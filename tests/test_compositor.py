"""Tests for the offline canvas compositor."""

import io

import pytest
from PIL import Image

from stitchpix.errors import CompositionError
from stitchpix.models import EncodedImage, SourceTag
from stitchpix.pipeline.compositor import (
    CANVAS_LABEL,
    Compositor,
    crop_box,
    face_box,
    round_half_up,
    rounded_mask,
)


def open_result(result) -> Image.Image:
    return Image.open(io.BytesIO(result.image.data)).convert("RGB")


def near(pixel, expected, tolerance=3) -> bool:
    return all(abs(a - b) <= tolerance for a, b in zip(pixel, expected))


class TestGeometry:
    """Tests for the fixed placement heuristic."""
    
    def test_face_box_for_tall_garment(self):
        """1000x1500 canvas puts a 250x300 box centred at y=120."""
        assert face_box(1000, 1500) == (375, 120, 250, 300)
    
    def test_crop_box_for_landscape_subject(self):
        """800x600 subject crops x=200, y=60, w=400, h=240."""
        assert crop_box(800, 600) == (200, 60, 400, 240)
    
    @pytest.mark.parametrize("value,expected", [
        (0.5, 1),
        (1.5, 2),
        (2.5, 3),
        (2.49, 2),
        (0.0, 0),
    ])
    def test_round_half_up(self, value, expected):
        """Halves round up, unlike Python's banker's rounding."""
        assert round_half_up(value) == expected
    
    def test_rounded_mask_corners_are_clipped(self):
        mask = rounded_mask(250, 300, 36)
        
        assert mask.size == (250, 300)
        assert mask.getpixel((0, 0)) == 0
        assert mask.getpixel((249, 299)) == 0
        assert mask.getpixel((125, 0)) == 255
        assert mask.getpixel((125, 150)) == 255
    
    def test_rounded_mask_clamps_radius_on_small_boxes(self):
        mask = rounded_mask(10, 12, 36)
        
        assert mask.getpixel((5, 6)) == 255


class TestCompose:
    """Tests for Compositor.compose."""
    
    @pytest.fixture
    def compositor(self):
        return Compositor()
    
    def test_output_matches_garment_size(self, compositor, subject_image, garment_image):
        result = compositor.compose(subject_image, garment_image)
        
        assert result.source == SourceTag.CANVAS
        assert result.label == CANVAS_LABEL
        assert result.image.size == (1000, 1500)
        assert open_result(result).size == (1000, 1500)
        assert result.image.mime_type == "image/png"
    
    def test_face_region_holds_subject_crop(self, compositor, subject_image, garment_image):
        """The red face crop lands in the rounded box; the rest stays garment."""
        img = open_result(compositor.compose(subject_image, garment_image))
        
        # Inside the 250x300 box at (375, 120)
        assert near(img.getpixel((500, 270)), (255, 0, 0))
        assert near(img.getpixel((378, 270)), (255, 0, 0))
        assert near(img.getpixel((500, 121)), (255, 0, 0))
        # Rounded corner and everything outside is the garment
        assert img.getpixel((375, 120)) == (0, 0, 255)
        assert img.getpixel((370, 270)) == (0, 0, 255)
        assert img.getpixel((500, 425)) == (0, 0, 255)
        assert img.getpixel((10, 10)) == (0, 0, 255)
    
    @pytest.mark.parametrize("subject_size,garment_size", [
        ((800, 600), (1000, 1500)),
        ((1000, 1500), (800, 600)),
        ((64, 64), (37, 91)),
        ((1, 1), (1, 1)),
        ((3, 2), (2000, 10)),
    ])
    def test_total_for_any_valid_sizes(self, compositor, make_png, subject_size, garment_size):
        """Never raises and always returns the garment's size."""
        subject = EncodedImage.from_bytes(make_png(subject_size, "red"), "image/png")
        garment = EncodedImage.from_bytes(make_png(garment_size, "blue"), "image/png")
        
        result = compositor.compose(subject, garment)
        
        assert result.source == SourceTag.CANVAS
        assert result.image.data
        assert open_result(result).size == garment_size
    
    def test_deterministic(self, compositor, subject_image, garment_image):
        first = compositor.compose(subject_image, garment_image)
        second = compositor.compose(subject_image, garment_image)
        
        assert first.image.data == second.image.data
    
    def test_undecodable_garment_returns_subject(self, compositor, subject_image, broken_image):
        result = compositor.compose(subject_image, broken_image)
        
        assert result.source == SourceTag.ORIGINAL
        assert result.image == subject_image
        assert result.url == subject_image.to_data_url()
    
    def test_undecodable_subject_returns_garment(self, compositor, broken_image, garment_image):
        result = compositor.compose(broken_image, garment_image)
        
        assert result.source == SourceTag.ORIGINAL
        assert result.image == garment_image
    
    def test_both_undecodable_raises(self, compositor, broken_image):
        with pytest.raises(CompositionError):
            compositor.compose(broken_image, broken_image)
    
    def test_failed_crop_draws_whole_subject(self, compositor, subject_image, garment_image, monkeypatch):
        """A failing crop degrades to the whole subject, unclipped."""
        def broken_crop(self, box=None):
            raise ValueError("crop exploded")
        
        monkeypatch.setattr(Image.Image, "crop", broken_crop)
        img = open_result(compositor.compose(subject_image, garment_image))
        
        assert img.size == (1000, 1500)
        # Unclipped: the corner now shows the subject's green background
        assert near(img.getpixel((375, 120)), (0, 128, 0))
        assert img.getpixel((10, 10)) == (0, 0, 255)
    
    @pytest.mark.asyncio
    async def test_compose_async_matches_sync(self, compositor, subject_image, garment_image):
        result = await compositor.compose_async(subject_image, garment_image)
        
        assert result.image.data == compositor.compose(subject_image, garment_image).image.data


class TestExifOrientation:
    """Phone photos stored sideways are composed as displayed."""
    
    @pytest.fixture
    def compositor(self):
        return Compositor()
    
    def test_canvas_uses_displayed_garment_size(self, compositor, subject_image, make_rotated_jpeg):
        garment = EncodedImage.from_bytes(make_rotated_jpeg((1000, 1500), (0, 0, 255)), "image/jpeg")
        
        assert garment.size == (1000, 1500)
        
        img = open_result(compositor.compose(subject_image, garment))
        
        assert img.size == (1000, 1500)
        assert near(img.getpixel((10, 10)), (0, 0, 255), tolerance=12)
    
    def test_face_crop_taken_from_upright_subject(self, compositor, garment_image, make_rotated_jpeg):
        data = make_rotated_jpeg((800, 600), "green", regions=[((200, 60, 600, 300), (255, 0, 0))])
        subject = EncodedImage.from_bytes(data, "image/jpeg")
        
        assert subject.size == (800, 600)
        
        img = open_result(compositor.compose(subject, garment_image))
        
        # The whole upright crop is red; a sideways crop would be half green
        assert near(img.getpixel((400, 200)), (255, 0, 0), tolerance=12)
        assert near(img.getpixel((600, 380)), (255, 0, 0), tolerance=12)
