"""
Tests for view extraction and the preview processor.
"""

import numpy as np
import pytest

from darkroom.preview import PreviewConfig, PreviewProcessor, composite_over
from darkroom.processing.geometry import extract_view, crop_bounds
from darkroom.processing.local_adjustments import EditSettings, LinearMask, CropRect

from conftest import make_buffer


@pytest.fixture
def column_image():
    """4x8 image whose red channel holds the column index."""
    image = make_buffer(4, 8, (0, 0, 0))
    image[..., 0] = np.arange(8, dtype=np.uint8)
    return image


@pytest.fixture
def processor():
    return PreviewProcessor(PreviewConfig(max_dimension=None))


class TestExtractView:
    """Test crop/mirror extraction."""

    def test_crop_bounds(self):
        assert crop_bounds(CropRect(0.25, 0.0, 0.5, 1.0), 8, 4) == (2, 0, 6, 4)

    def test_crop_bounds_minimum_size(self):
        """Tiny crops still yield one pixel."""
        left, top, right, bottom = crop_bounds(CropRect(0.5, 0.5, 0.01, 0.01), 8, 4)
        assert right - left == 1
        assert bottom - top == 1

    def test_crop_then_mirror(self, column_image):
        """Mirroring flips the cropped region."""
        view = extract_view(column_image, CropRect(0.25, 0.0, 0.5, 1.0), is_mirrored=True)
        assert list(view[0, :, 0]) == [5, 4, 3, 2]

    def test_no_crop_returns_copy(self, column_image):
        view = extract_view(column_image)
        np.testing.assert_array_equal(view, column_image)
        view[0, 0, 0] = 99
        assert column_image[0, 0, 0] == 0

    def test_full_width_crop_returns_copy(self, column_image):
        """Row-only crops do not alias the source image."""
        view = extract_view(column_image, CropRect(0.0, 0.5, 1.0, 0.5))
        assert view.shape == (2, 8, 4)
        assert view.flags['C_CONTIGUOUS']
        view[0, 0, 0] = 99
        assert column_image[2, 0, 0] == 0

    def test_prepare_view_does_not_alias_input(self, processor, column_image):
        view = processor.prepare_view(column_image, EditSettings())
        view[0, 0, 0] = 99
        assert column_image[0, 0, 0] == 0


class TestPreviewProcessor:
    """Test preview rendering."""

    def test_downscale(self):
        image = make_buffer(40, 80, (10, 20, 30))
        view = PreviewProcessor(PreviewConfig(max_dimension=20)).prepare_view(image, EditSettings())
        assert view.shape == (10, 20, 4)

    def test_never_upscales(self):
        image = make_buffer(40, 80, (10, 20, 30))
        view = PreviewProcessor().prepare_view(image, EditSettings(), max_dimension=200)
        assert view.shape == image.shape

    def test_render_before_ignores_edits(self, processor, column_image):
        """Before view keeps geometry only."""
        settings = EditSettings(exposure=50, is_mirrored=True)
        before = processor.render_before(column_image, settings)
        np.testing.assert_array_equal(before, column_image[:, ::-1])

    def test_render_compare(self, processor):
        image = make_buffer(4, 8, (100, 100, 100))
        result = processor.render_compare(image, EditSettings(exposure=50), split=0.5)
        assert np.all(result[:, :4, 0] == 100)
        assert np.all(result[:, 4:, 0] == 200)

    def test_mask_overlay(self, processor):
        """Covered pixels get the overlay colour at alpha 130."""
        view = make_buffer(10, 10, (50, 50, 50))
        overlay = processor.mask_overlay(view, EditSettings(), LinearMask())
        assert tuple(overlay[9, 5]) == (255, 0, 0, 130)
        assert tuple(overlay[0, 5]) == (0, 0, 0, 0)

    def test_render_mask_overlay_unknown_mask(self, processor, column_image):
        with pytest.raises(KeyError):
            processor.render_mask_overlay(column_image, EditSettings(), 'missing')

    def test_render_mask_overlay(self, processor):
        mask = LinearMask(id='grad')
        image = make_buffer(10, 10, (0, 0, 0))
        result = processor.render_mask_overlay(image, EditSettings(masks=(mask,)), 'grad')
        assert result[9, 0, 0] == 130
        assert result[0, 0, 0] == 0
        assert np.all(result[..., 3] == 255)


def test_composite_over():
    base = make_buffer(1, 1, (100, 100, 100))
    overlay = np.array([[[255, 0, 0, 255]]], dtype=np.uint8)
    assert tuple(composite_over(base, overlay)[0, 0]) == (255, 0, 0, 255)
