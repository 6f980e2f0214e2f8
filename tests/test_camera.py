import numpy as np
import pytest

from digicam import DecodeFailure, EffectOptions, InvalidInput, Y2KCamera
from digicam.helpers import load_image, resolve_source, save_image, uri_to_path
from digicam.scenes import synthetic_photo

NO_STAMP = EffectOptions(intensity=0.8, add_date_stamp=False)


@pytest.fixture
def photo_files(tmp_path):
    paths = []
    for i in range(3):
        p = save_image(tmp_path / f"shot_{i}.png", synthetic_photo(seed=i, h=64, w=80))
        paths.append(str(p))
    return paths


def test_requires_a_source():
    with pytest.raises(InvalidInput):
        Y2KCamera().process()


def test_invalid_input_is_value_error():
    with pytest.raises(ValueError):
        resolve_source()


def test_garbage_bytes_fail_to_decode():
    with pytest.raises(DecodeFailure):
        Y2KCamera().process(data=b"definitely not a jpeg")


def test_unsupported_uri_scheme():
    with pytest.raises(InvalidInput):
        uri_to_path("https://example.com/a.jpg")


def test_file_uri_and_bytes_agree(photo_files):
    path = photo_files[0]
    with open(path, "rb") as fh:
        data = fh.read()
    a = Y2KCamera(NO_STAMP, seed=1).process(uri="file://" + path)
    b = Y2KCamera(NO_STAMP, seed=1).process(data=data)
    c = Y2KCamera(NO_STAMP, seed=1).process(image=load_image(path))
    np.testing.assert_array_equal(a, b)
    np.testing.assert_array_equal(a, c)
    assert a.shape == (64, 80, 4)


def test_png_save_is_lossless(tmp_path):
    img = synthetic_photo(seed=5, h=32, w=48)
    out = save_image(tmp_path / "frame.png", img)
    np.testing.assert_array_equal(load_image(out), img)


def test_save_result_uses_output_quality(tmp_path):
    img = synthetic_photo(seed=5, h=64, w=64)
    hi = Y2KCamera(EffectOptions(add_date_stamp=False, output_quality=95), seed=0)
    lo = Y2KCamera(EffectOptions(add_date_stamp=False, output_quality=10), seed=0)
    hi.process(image=img)
    lo.process(image=img)
    big = hi.save_result(tmp_path / "hi.jpg")
    small = lo.save_result(tmp_path / "lo.jpg")
    assert big.stat().st_size > small.stat().st_size
    assert load_image(big).shape == (64, 64, 4)


def test_save_result_follows_per_call_options(tmp_path):
    img = synthetic_photo(seed=5, h=64, w=64)
    cam = Y2KCamera(EffectOptions(add_date_stamp=False, output_quality=95), seed=0)
    ref = Y2KCamera(EffectOptions(add_date_stamp=False, output_quality=10), seed=0)
    cam.process(image=img, options=EffectOptions(add_date_stamp=False, output_quality=10))
    ref.process(image=img)
    assert cam.result.options.output_quality == 10
    np.testing.assert_array_equal(cam.result.image, ref.result.image)
    saved = cam.save_result(tmp_path / "per_call.jpg")
    expected = ref.save_result(tmp_path / "reference.jpg")
    assert saved.read_bytes() == expected.read_bytes()


def test_save_without_result(tmp_path):
    cam = Y2KCamera()
    with pytest.raises(RuntimeError):
        cam.save_result(tmp_path / "x.jpg")


def test_reset_clears_result():
    cam = Y2KCamera(NO_STAMP, seed=0)
    cam.process(image=synthetic_photo(h=32, w=32))
    assert cam.result is not None
    cam.reset()
    assert cam.result is None


def test_batch_is_independent_of_worker_count(photo_files):
    serial = Y2KCamera(NO_STAMP, seed=7).process_many(photo_files, workers=1)
    parallel = Y2KCamera(NO_STAMP, seed=7).process_many(photo_files, workers=3)
    assert len(serial) == len(photo_files)
    for a, b in zip(serial, parallel):
        np.testing.assert_array_equal(a, b)


def test_batch_logs_recode_failures_per_file(photo_files, failing_backend, caplog):
    cam = Y2KCamera(NO_STAMP, seed=3, backend=failing_backend)
    with caplog.at_level("WARNING", logger="digicam.camera"):
        out = cam.process_many(photo_files[:2])
    assert len(out) == 2
    camera_lines = [r.getMessage() for r in caplog.records if r.name == "digicam.camera"]
    assert any(m.startswith("shot_0.png:") for m in camera_lines)
    assert any(m.startswith("shot_1.png:") for m in camera_lines)


def test_source_precedence_image_then_data_then_uri(photo_files):
    img = synthetic_photo(seed=9, h=16, w=24)
    with open(photo_files[0], "rb") as fh:
        data = fh.read()
    np.testing.assert_array_equal(resolve_source(uri="https://x/y.jpg", data=b"junk", image=img), img)
    np.testing.assert_array_equal(resolve_source(uri="https://x/y.jpg", data=data), load_image(photo_files[0]))
