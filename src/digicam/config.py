from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

TARGET_PIXELS = 2_000_000       # ~2MP sensor
BLUR_RADIUS_TO_SIGMA = 0.425    # box-radius convention -> Gaussian sigma


def radius_to_sigma(radius: float) -> float:
    return radius * BLUR_RADIUS_TO_SIGMA


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# Caller-facing options

@dataclass(frozen=True)
class EffectOptions:
    intensity: float = 1.0                  # nominal [0, 1]; extrapolates outside
    add_date_stamp: bool = True
    date_stamp_text: Optional[str] = None   # None -> random 2001-2006 date
    output_quality: int = 85                # JPEG quality when persisting


# Derived per-stage parameters

@dataclass(frozen=True)
class BloomParams:
    intensity: float = 0.8
    highlight_threshold: float = 150.0
    bloom_strength: float = 0.8
    bloom_radius: float = 0.25
    shadow_crush_strength: float = 0.5
    shadow_crush_radius: float = 0.1


@dataclass(frozen=True)
class EffectParams:
    resolution_blend: float
    target_pixels: int
    cast: float
    saturation: float
    vibrance: float
    dynamic_range: float
    local_contrast: float
    local_contrast_window: int
    bloom: BloomParams
    aberration: float
    sharpen: float
    noise: float
    distortion: float
    recode_quality: int


def derive_params(intensity: float, target_pixels: int = TARGET_PIXELS) -> EffectParams:
    """
    Map the single ``intensity`` knob onto every stage's multipliers.

    Values outside [0, 1] are not clamped: the formulas extrapolate
    (a warning is logged so callers notice).
    """
    i = float(intensity)
    if not 0.0 <= i <= 1.0:
        logger.warning("[Params] intensity=%.3f outside [0, 1]; extrapolating", i)

    bloom = BloomParams(
        intensity=0.8,
        highlight_threshold=150.0,
        bloom_strength=0.8 * i,
        bloom_radius=0.25 * i,
        shadow_crush_strength=0.5 * i,
        shadow_crush_radius=0.1 * i,
    )
    quality = min(100, max(0, round_half_up(70 - 30 * i)))
    return EffectParams(
        resolution_blend=i,
        target_pixels=int(target_pixels),
        cast=i,
        saturation=1.3 * i,
        vibrance=1.3 * i,
        dynamic_range=i,
        local_contrast=i,
        local_contrast_window=5,
        bloom=bloom,
        aberration=i,
        sharpen=1.3 * i,
        noise=i,
        distortion=i,
        recode_quality=quality,
    )


# Runtime / CLI configuration

@dataclass
class PipelineConfig:
    effect: EffectOptions = field(default_factory=EffectOptions)
    save_dir: Optional[str] = None
    show: bool = False
    workers: int = 1
    seed: Optional[int] = None
    suffix: str = "_y2k"
