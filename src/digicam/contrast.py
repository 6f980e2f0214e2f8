from __future__ import annotations
from typing import Optional

import numpy as np

from .backend import RasterBackend, OpenCVBackend
from .buffer import PixelBuffer, clamp_u8
from .config import radius_to_sigma


class LocalContrastReducer:
    """Pull each pixel's luminance toward its blurred neighbourhood mean."""
    name = "local_contrast"

    def __init__(self, amount: float, window: int = 5, backend: Optional[RasterBackend] = None) -> None:
        self.amount = amount
        self.window = int(window)
        self.backend = backend or OpenCVBackend()

    @property
    def sigma(self) -> float:
        return radius_to_sigma(self.window // 2)

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        lum = buf.luminance()
        local_mean = self.backend.gaussian_blur(lum, self.sigma)
        reduced = local_mean + (lum - local_mean) * np.float32(1.0 - self.amount)
        ratio = np.ones_like(lum)
        np.divide(reduced, lum, out=ratio, where=lum != 0)
        np.clip(ratio, 0.0, 2.0, out=ratio)
        rgb = buf.rgb
        rgb *= ratio[..., None]
        clamp_u8(rgb)
        return buf
