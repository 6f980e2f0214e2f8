from __future__ import annotations
from typing import Optional

import numpy as np

from .backend import RasterBackend, OpenCVBackend
from .buffer import PixelBuffer, clamp_u8
from .config import radius_to_sigma


class Sharpener:
    """Unsharp mask tuned hot enough to leave halos around edges."""
    name = "sharpen"

    def __init__(self, intensity: float, radius: float = 1.5, backend: Optional[RasterBackend] = None) -> None:
        self.intensity = intensity
        self.radius = radius
        self.backend = backend or OpenCVBackend()

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        rgb = buf.rgb
        blurred = self.backend.gaussian_blur(rgb, radius_to_sigma(self.radius))
        amount = np.float32(1.5 * self.intensity)
        rgb += (rgb - blurred) * amount
        clamp_u8(rgb)
        return buf
