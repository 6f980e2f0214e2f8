from __future__ import annotations
import logging
import math
from typing import Optional

from .backend import RasterBackend, OpenCVBackend
from .buffer import PixelBuffer
from .config import TARGET_PIXELS, round_half_up

logger = logging.getLogger(__name__)


class Resampler:
    """
    Resize stage with two modes:
      - downscale: shrink toward ``target_pixels`` (blended by ``blend``), never upscales
      - restore: resample to an exact (width, height)
    """

    def __init__(
        self,
        backend: Optional[RasterBackend] = None,
        *,
        target_pixels: int = TARGET_PIXELS,
        blend: float = 1.0,
        size: Optional[tuple[int, int]] = None,
        name: Optional[str] = None,
    ) -> None:
        self.backend = backend or OpenCVBackend()
        self.target_pixels = int(target_pixels)
        self.blend = float(blend)
        self.size = size
        self.name = name or ("restore" if size is not None else "downscale")

    @classmethod
    def restore(cls, width: int, height: int, backend: Optional[RasterBackend] = None) -> "Resampler":
        return cls(backend, size=(int(width), int(height)))

    def target_size(self, width: int, height: int) -> tuple[int, int]:
        if self.size is not None:
            return self.size
        current = width * height
        if current <= self.target_pixels:
            return width, height
        s = math.sqrt(self.target_pixels / current)
        scale = 1.0 - (1.0 - s) * self.blend
        if scale >= 1.0:
            return width, height
        return max(1, round_half_up(width * scale)), max(1, round_half_up(height * scale))

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        new_w, new_h = self.target_size(buf.width, buf.height)
        if (new_w, new_h) == buf.size:
            return buf
        logger.debug("[Resampler] %s %dx%d -> %dx%d", self.name, buf.width, buf.height, new_w, new_h)
        resized = self.backend.resize(buf.to_image(), new_w, new_h)
        return PixelBuffer.from_image(resized)
