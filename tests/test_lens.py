import numpy as np
import pytest

from digicam import ChromaticAberrationFilter, LensDistortion, PixelBuffer
from digicam.scenes import coordinate_ramp, flat
from conftest import pixel


def test_aberration_noop_below_one_pixel(photo_buf):
    before = photo_buf.data.copy()
    out = ChromaticAberrationFilter(0.4).apply(photo_buf)
    assert ChromaticAberrationFilter(0.4).shift == 0
    np.testing.assert_array_equal(out.data, before)


def test_aberration_blends_shifted_channels():
    buf = pixel((0, 0, 0), h=6, w=6)
    buf.data[1, 1, 0] = 200     # red source
    buf.data[4, 4, 2] = 200     # blue source
    out = ChromaticAberrationFilter(1.0).apply(buf)     # shift 2, weights 0.5 / 0.5
    assert out.data[3, 3, 0] == pytest.approx(100.0)
    assert out.data[1, 1, 0] == pytest.approx(200.0)    # no in-bounds red sample
    assert out.data[2, 2, 2] == pytest.approx(100.0)
    assert out.data[4, 4, 2] == pytest.approx(200.0)    # sample out of bounds: untouched
    assert out.data[..., 1].max() == 0


def test_barrel_keeps_centre_and_pulls_corners_outward():
    src = PixelBuffer.from_image(coordinate_ramp(150, 200))
    out = LensDistortion(1.0).apply(src)
    img = out.to_image()
    assert img[75, 100, :2].tolist() == [100, 75]
    # near the corner the sample comes from further out than the pixel itself
    assert img[10, 10, 0] < 10 and img[10, 10, 1] < 10
    assert img[140, 190, 0] > 190 and img[140, 190, 1] > 140
    # displacement grows with radius
    assert abs(int(img[75, 20, 0]) - 20) > abs(int(img[75, 90, 0]) - 90)


def test_barrel_zero_intensity_is_identity():
    src = PixelBuffer.from_image(coordinate_ramp(40, 60))
    out = LensDistortion(0.0).apply(src.copy())
    np.testing.assert_array_equal(out.data, src.data)


def test_barrel_forces_opaque_alpha():
    img = flat(20, 30, 90)
    img[..., 3] = 10
    out = LensDistortion(1.0).apply(PixelBuffer.from_image(img))
    assert np.all(out.data[..., 3] == 255)
