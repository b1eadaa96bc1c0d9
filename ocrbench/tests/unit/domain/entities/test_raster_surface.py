"""
Unit tests for RasterSurface entity
"""
import numpy as np
import pytest

from conftest import make_page
from ocrbench.domain.entities.raster_surface import RasterSurface
from ocrbench.domain.exceptions import InvalidCropError
from ocrbench.domain.value_objects.crop_rect import CropRect
from ocrbench.domain.value_objects.source_context import SourceContext

SOURCE = SourceContext(document_id="doc", file_name="page.png", file_type="image", page_number=1)


@pytest.fixture
def surface() -> RasterSurface:
    return RasterSurface.create(SOURCE, 100, make_page(200, 100))


class TestRasterSurfaceCreation:
    def test_create_displays_copy_of_original(self, surface):
        assert surface.width == 200
        assert surface.height == 100
        assert not surface.is_cropped
        assert surface.displayed is not surface.original

    def test_original_is_read_only(self, surface):
        with pytest.raises(ValueError):
            surface.original[0, 0, 0] = 1

    def test_rejects_flat_buffers(self):
        with pytest.raises(ValueError):
            RasterSurface.create(SOURCE, 100, np.zeros((10, 10), dtype=np.uint8))


class TestRasterSurfaceCrop:
    def test_crop_keeps_original_dimensions(self, surface):
        cropped = surface.cropped(CropRect(20, 10, 50, 40))
        assert (cropped.width, cropped.height) == (50, 40)
        assert (cropped.original_width, cropped.original_height) == (200, 100)
        assert cropped.is_cropped
        assert np.array_equal(cropped.displayed, surface.original[10:50, 20:70])

    def test_crop_outside_surface_raises(self, surface):
        with pytest.raises(InvalidCropError):
            surface.cropped(CropRect(500, 500, 10, 10))

    def test_restore_is_byte_identical_to_original(self, surface):
        restored = surface.cropped(CropRect(20, 10, 50, 40)).restored()
        assert not restored.is_cropped
        assert np.array_equal(restored.displayed, surface.original)
