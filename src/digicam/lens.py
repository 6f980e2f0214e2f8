from __future__ import annotations
import math

import numpy as np

from .buffer import PixelBuffer, clamp_u8


class ChromaticAberrationFilter:
    """Blend R with its up-left neighbour and B with its down-right neighbour."""
    name = "chromatic_aberration"

    def __init__(self, intensity: float) -> None:
        self.intensity = intensity

    @property
    def shift(self) -> int:
        return math.floor(2 * self.intensity)

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        s = self.shift
        if s < 1 or s >= buf.width or s >= buf.height:
            return buf
        orig = buf.data.copy()
        keep = np.float32(1.0 - 0.5 * self.intensity)
        take = np.float32(0.5 * self.intensity)
        data = buf.data
        # red sampled from (x - s, y - s); blue from (x + s, y + s)
        data[s:, s:, 0] = orig[s:, s:, 0] * keep + orig[:-s, :-s, 0] * take
        data[:-s, :-s, 2] = orig[:-s, :-s, 2] * keep + orig[s:, s:, 2] * take
        clamp_u8(data[..., :3])
        return buf


class LensDistortion:
    """Barrel distortion by inverse nearest-neighbour sampling."""
    name = "lens_distortion"

    def __init__(self, intensity: float) -> None:
        self.k = 0.1 * intensity

    def source_coords(self, width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
        cx, cy = width / 2.0, height / 2.0
        ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
        xn = (xs - cx) / cx
        yn = (ys - cy) / cy
        r2 = xn * xn + yn * yn
        # r' / r = 1 + k r^2, which is also 1 at the centre
        scale = 1.0 + self.k * r2
        src_x = np.clip(np.floor(xn * scale * cx + cx + 0.5), 0, width - 1).astype(np.intp)
        src_y = np.clip(np.floor(yn * scale * cy + cy + 0.5), 0, height - 1).astype(np.intp)
        return src_x, src_y

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        src_x, src_y = self.source_coords(buf.width, buf.height)
        out = np.empty_like(buf.data)
        out[..., :3] = buf.data[src_y, src_x, :3]
        out[..., 3] = 255.0
        return PixelBuffer(out)
