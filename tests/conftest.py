import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from digicam import OpenCVBackend, PixelBuffer
from digicam.errors import EncodeFailure
from digicam.scenes import synthetic_photo


class FailingCodecBackend(OpenCVBackend):
    """OpenCV backend whose JPEG encoder always refuses."""

    def encode_jpeg(self, image, quality):
        raise EncodeFailure("codec unavailable")


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def backend():
    return OpenCVBackend()


@pytest.fixture
def failing_backend():
    return FailingCodecBackend()


@pytest.fixture
def photo():
    return synthetic_photo(seed=3, h=96, w=128)


@pytest.fixture
def photo_buf(photo):
    return PixelBuffer.from_image(photo)


def pixel(rgb, h=4, w=4):
    """Uniform float buffer filled with one RGB value."""
    data = np.empty((h, w, 4), np.float32)
    data[..., :3] = rgb
    data[..., 3] = 255.0
    return PixelBuffer(data)
