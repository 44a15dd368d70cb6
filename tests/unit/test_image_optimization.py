import io

import pytest
from PIL import Image

from myumc.services.errors import InvalidOperationError
from myumc.services.image_optimization import ImageOptimizationService


def _image_bytes(size, mode="RGB", fmt="JPEG", color=(200, 30, 30)):
    out = io.BytesIO()
    Image.new(mode, size, color).save(out, format=fmt)
    return out.getvalue()


@pytest.fixture
def optimizer():
    return ImageOptimizationService()


def test_calculate_dimensions(optimizer):
    assert optimizer.calculate_dimensions(800, 600) == (800, 600)
    assert optimizer.calculate_dimensions(2400, 1200) == (1200, 600)
    assert optimizer.calculate_dimensions(1000, 3000) == (400, 1200)


def test_large_image_is_downscaled(optimizer):
    result = optimizer.optimize(_image_bytes((3000, 1500)))
    image = Image.open(io.BytesIO(result))
    assert image.format == "JPEG"
    assert image.size == (1200, 600)


def test_small_image_is_not_enlarged(optimizer):
    image = Image.open(io.BytesIO(optimizer.optimize(_image_bytes((320, 240)))))
    assert image.size == (320, 240)


def test_png_output_keeps_transparency(optimizer):
    data = _image_bytes((64, 64), mode="RGBA", fmt="PNG", color=(0, 0, 255, 0))
    image = Image.open(io.BytesIO(optimizer.optimize(data, output_format="png")))
    assert image.format == "PNG"
    assert image.mode == "RGBA"


def test_transparent_png_flattened_to_white_jpeg(optimizer):
    data = _image_bytes((16, 16), mode="RGBA", fmt="PNG", color=(0, 0, 0, 0))
    image = Image.open(io.BytesIO(optimizer.optimize(data)))
    assert image.format == "JPEG"
    assert image.mode == "RGB"
    r, g, b = image.getpixel((8, 8))
    assert min(r, g, b) > 245


def test_invalid_bytes_rejected(optimizer):
    with pytest.raises(InvalidOperationError, match="not a valid image"):
        optimizer.optimize(b"definitely not an image")
