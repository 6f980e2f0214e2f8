from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Protocol, runtime_checkable

import numpy as np

from .backend import RasterBackend, OpenCVBackend
from .bloom import BloomCompositor
from .buffer import PixelBuffer
from .color import CoolCast, DynamicRangeReducer, SaturationBoost
from .config import TARGET_PIXELS, EffectOptions, EffectParams, derive_params
from .contrast import LocalContrastReducer
from .errors import DigicamError, PipelineCancelled
from .lens import ChromaticAberrationFilter, LensDistortion
from .noise import NoiseInjector
from .recode import LossyRecodeSimulator
from .resample import Resampler
from .sharpen import Sharpener
from .stamp import DateStampOverlay

logger = logging.getLogger(__name__)

StageObserver = Callable[[str, PixelBuffer], None]


@runtime_checkable
class Stage(Protocol):
    """A pipeline step: buffer in, buffer out."""

    name: str

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        ...


class CancelToken(Protocol):
    def is_set(self) -> bool:
        ...


@dataclass
class PipelineResult:
    image: np.ndarray                                   # RGBA uint8, original size
    params: EffectParams
    options: EffectOptions = field(default_factory=EffectOptions)
    warnings: List[DigicamError] = field(default_factory=list)
    timings: Dict[str, float] = field(default_factory=dict)


class Y2KPipeline:
    """
    Early-2000s digicam look as an explicit, ordered list of stages.

    One instance may be reused for many images; the only state carried
    across calls is ``rng`` (noise and random date stamps).
    """

    def __init__(
        self,
        backend: Optional[RasterBackend] = None,
        rng: Optional[np.random.Generator] = None,
        target_pixels: int = TARGET_PIXELS,
    ) -> None:
        self.backend = backend or OpenCVBackend()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.target_pixels = int(target_pixels)

    def build_stages(
        self, params: EffectParams, options: EffectOptions, source_size: tuple[int, int]
    ) -> List[Stage]:
        width, height = source_size
        b = self.backend
        stages: List[Stage] = [
            Resampler(b, target_pixels=params.target_pixels, blend=params.resolution_blend),
            CoolCast(params.cast),
            SaturationBoost(params.saturation, params.vibrance),
            DynamicRangeReducer(params.dynamic_range),
            LocalContrastReducer(params.local_contrast, params.local_contrast_window, backend=b),
            BloomCompositor(params.bloom, backend=b),
            ChromaticAberrationFilter(params.aberration),
            Sharpener(params.sharpen, backend=b),
            NoiseInjector(params.noise, rng=self.rng),
            LensDistortion(params.distortion),
            LossyRecodeSimulator(params.recode_quality, backend=b),
            Resampler.restore(width, height, backend=b),
        ]
        if options.add_date_stamp:
            stages.append(DateStampOverlay(options.date_stamp_text, rng=self.rng, backend=b))
        return stages

    def run_stages(
        self,
        buf: PixelBuffer,
        stages: List[Stage],
        cancel: Optional[CancelToken] = None,
        on_stage: Optional[StageObserver] = None,
        timings: Optional[Dict[str, float]] = None,
    ) -> PixelBuffer:
        for stage in stages:
            if cancel is not None and cancel.is_set():
                logger.info("[Pipeline] cancelled before %s", stage.name)
                raise PipelineCancelled(stage.name)
            t0 = time.perf_counter()
            buf = stage.apply(buf)
            elapsed = time.perf_counter() - t0
            if timings is not None:
                timings[stage.name] = elapsed
            logger.debug("[Pipeline] %-20s %7.1f ms  %dx%d", stage.name, elapsed * 1e3, buf.width, buf.height)
            if on_stage is not None:
                on_stage(stage.name, buf)
        return buf

    def process(
        self,
        image: np.ndarray,
        options: Optional[EffectOptions] = None,
        cancel: Optional[CancelToken] = None,
        on_stage: Optional[StageObserver] = None,
    ) -> PipelineResult:
        options = options or EffectOptions()
        buf = PixelBuffer.from_image(image)
        params = derive_params(options.intensity, self.target_pixels)
        stages = self.build_stages(params, options, buf.size)
        logger.info(
            "[Pipeline] %dx%d, intensity=%.2f, %d stages",
            buf.width, buf.height, options.intensity, len(stages),
        )

        result = PipelineResult(image=image, params=params, options=options)
        buf = self.run_stages(buf, stages, cancel=cancel, on_stage=on_stage, timings=result.timings)
        for stage in stages:
            result.warnings.extend(getattr(stage, "failures", []))
        result.image = buf.to_image()
        logger.info("[Pipeline] done in %.1f ms", sum(result.timings.values()) * 1e3)
        return result


def apply_y2k_effect(
    image: np.ndarray,
    options: Optional[EffectOptions] = None,
    *,
    rng: Optional[np.random.Generator] = None,
    backend: Optional[RasterBackend] = None,
) -> np.ndarray:
    """Run the full effect and return only the RGBA uint8 image."""
    return Y2KPipeline(backend=backend, rng=rng).process(image, options).image
