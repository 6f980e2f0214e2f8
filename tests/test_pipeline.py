"""End-to-end tests for the ordered Y2K pipeline."""
import threading

import numpy as np
import pytest

from digicam import (
    EffectOptions, PipelineCancelled, RecodeFailure, Stage, Y2KPipeline, apply_y2k_effect,
    derive_params,
)
from digicam.scenes import flat, synthetic_photo
from digicam.viz import StageRecorder

NO_STAMP = EffectOptions(add_date_stamp=False)

STAGE_ORDER = [
    "downscale", "cool_cast", "saturation", "dynamic_range", "local_contrast", "bloom",
    "chromatic_aberration", "sharpen", "noise", "lens_distortion", "lossy_recode", "restore",
]


def test_stage_order(backend):
    pipe = Y2KPipeline(backend)
    stages = pipe.build_stages(derive_params(1.0), EffectOptions(), (640, 480))
    assert [s.name for s in stages] == STAGE_ORDER + ["date_stamp"]
    assert all(isinstance(s, Stage) for s in stages)


def test_date_stamp_is_only_switch(backend):
    pipe = Y2KPipeline(backend)
    stages = pipe.build_stages(derive_params(0.0), NO_STAMP, (640, 480))
    assert [s.name for s in stages] == STAGE_ORDER


@pytest.mark.parametrize("intensity", [0.0, 0.5, 1.0, 1.5])
def test_shape_and_clamp_invariants(intensity, rng):
    src = synthetic_photo(seed=2, h=90, w=130)

    def check(name, buf):
        assert buf.data.min() >= 0, name
        assert buf.data.max() <= 255, name

    pipe = Y2KPipeline(rng=rng, target_pixels=5000)
    result = pipe.process(src, EffectOptions(intensity=intensity), on_stage=check)
    assert result.image.shape == src.shape
    assert result.image.dtype == np.uint8
    assert set(result.timings) == set(STAGE_ORDER + ["date_stamp"])


def test_seeded_runs_are_identical(photo):
    opts = EffectOptions(intensity=0.9)
    a = Y2KPipeline(rng=np.random.default_rng(11)).process(photo, opts).image
    b = Y2KPipeline(rng=np.random.default_rng(11)).process(photo, opts).image
    np.testing.assert_array_equal(a, b)


def test_zero_intensity_reproducible_without_seed(photo):
    opts = EffectOptions(intensity=0.0, add_date_stamp=False)
    a = apply_y2k_effect(photo, opts)
    b = apply_y2k_effect(photo, opts)
    np.testing.assert_array_equal(a, b)


def test_input_not_mutated(photo):
    before = photo.copy()
    apply_y2k_effect(photo, NO_STAMP, rng=np.random.default_rng(0))
    np.testing.assert_array_equal(photo, before)


def test_recode_failure_is_reported_not_raised(photo, failing_backend):
    recorder = StageRecorder()
    pipe = Y2KPipeline(failing_backend, rng=np.random.default_rng(0))
    result = pipe.process(photo, NO_STAMP, on_stage=recorder)
    snaps = dict(recorder.snapshots)
    np.testing.assert_array_equal(snaps["lossy_recode"], snaps["lens_distortion"])
    assert len(result.warnings) == 1
    assert isinstance(result.warnings[0], RecodeFailure)
    assert result.image.shape == photo.shape


def test_cancel_before_start(photo):
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(PipelineCancelled) as exc:
        Y2KPipeline().process(photo, cancel=cancel)
    assert exc.value.next_stage == "downscale"


def test_cancel_between_stages(photo):
    cancel = threading.Event()
    seen = []

    def observer(name, buf):
        seen.append(name)
        if name == "bloom":
            cancel.set()

    with pytest.raises(PipelineCancelled) as exc:
        Y2KPipeline().process(photo, NO_STAMP, cancel=cancel, on_stage=observer)
    assert exc.value.next_stage == "chromatic_aberration"
    assert seen[-1] == "bloom"


def test_downscale_then_restore(rng):
    src = synthetic_photo(seed=4, h=200, w=300)
    sizes = {}
    pipe = Y2KPipeline(rng=rng, target_pixels=15000)
    pipe.process(src, NO_STAMP, on_stage=lambda name, buf: sizes.setdefault(name, buf.size))
    assert sizes["downscale"][0] * sizes["downscale"][1] <= 15000 + 300
    assert sizes["lossy_recode"] == sizes["downscale"]
    assert sizes["restore"] == (300, 200)


def test_date_stamp_uses_injected_rng(photo):
    opts = EffectOptions(intensity=0.0)
    a = Y2KPipeline(rng=np.random.default_rng(3)).process(photo, opts).image
    b = Y2KPipeline(rng=np.random.default_rng(3)).process(photo, opts).image
    np.testing.assert_array_equal(a, b)
    plain = apply_y2k_effect(photo, EffectOptions(intensity=0.0, add_date_stamp=False))
    assert not np.array_equal(a, plain)


@pytest.mark.slow
def test_large_white_frame_round_trip():
    src = flat(3000, 4000, 255)
    sizes = {}
    result = Y2KPipeline(rng=np.random.default_rng(0)).process(
        src, NO_STAMP, on_stage=lambda name, buf: sizes.setdefault(name, buf.size)
    )
    w, h = sizes["downscale"]
    assert w * h <= 2_000_000 + 4000
    assert w < 4000 and h < 3000
    assert result.image.shape == (3000, 4000, 4)
    assert result.image.min() >= 0 and result.image.max() <= 255
