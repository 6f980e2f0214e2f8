from __future__ import annotations
from typing import Optional

import numpy as np

from .buffer import PixelBuffer, clamp_u8


class NoiseInjector:
    """
    Gaussian sensor grain, heavier in shadows.

    One standard-normal draw per pixel per color channel from ``rng``, scaled by
    ``12 * intensity * (0.5 + 0.5 * (1 - lum / 255))``.
    """
    name = "noise"

    def __init__(self, intensity: float, rng: Optional[np.random.Generator] = None) -> None:
        self.intensity = intensity
        self.rng = rng if rng is not None else np.random.default_rng()

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        lum = buf.luminance()
        shadow_mask = 1.0 - lum / np.float32(255.0)
        weight = np.float32(12.0 * self.intensity) * (0.5 + shadow_mask * 0.5)
        noise = self.rng.standard_normal((buf.height, buf.width, 3), dtype=np.float32)
        rgb = buf.rgb
        rgb += noise * weight[..., None]
        clamp_u8(rgb)
        return buf
