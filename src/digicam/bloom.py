"""
Bloom: highlight bleed and shadow crush.

Cheap CCD sensors of the era bled light out of bright regions and clipped
shadows to muddy near-black. The compositor builds a chain of derived layers:

  1) luminance -> highlight mask (soft threshold, gamma 0.7)
  2) bloom source = color * highlight mask
  3) bloom source blurred at three radii, weighted 0.40 / 0.35 / 0.25
  4) highlight mask blurred at two radii -> crush influence (0.6 / 0.4)
  5) global highlight share -> shadow crush factor
  6) shadow crush near highlights, then a black-level floor
  7) screen + additive bloom composite with a warm shift, clamp

All layers stay float32; blurs go through the raster backend.
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .backend import RasterBackend, OpenCVBackend
from .buffer import PixelBuffer, clamp_u8
from .config import BloomParams, radius_to_sigma

logger = logging.getLogger(__name__)

BLOOM_SCALES = (1.0, 2.5, 4.0)
BLOOM_WEIGHTS = (0.4, 0.35, 0.25)
CRUSH_SCALES = (1.0, 2.0)
CRUSH_WEIGHTS = (0.6, 0.4)


@dataclass
class BloomLayers:
    """Intermediate layers, kept for inspection and tests."""
    luminance: np.ndarray
    highlight_mask: np.ndarray
    combined_bloom: np.ndarray       # (H, W, 3), 0..255 scale
    crush_influence: np.ndarray      # (H, W), 0..1
    highlight_amount: float
    shadow_crush_factor: float


class BloomCompositor:
    name = "bloom"

    def __init__(self, params: Optional[BloomParams] = None, backend: Optional[RasterBackend] = None) -> None:
        self.p = params or BloomParams()
        self.backend = backend or OpenCVBackend()

    # Layer construction

    def highlight_mask(self, lum: np.ndarray) -> np.ndarray:
        t = self.p.highlight_threshold
        hm = np.clip((lum - t) / (255.0 - t), 0.0, 1.0)
        return np.power(hm, 0.7).astype(np.float32)

    def bloom_sigmas(self) -> list[float]:
        base = max(15, math.floor(40 * self.p.intensity))
        return [radius_to_sigma(base * self.p.bloom_radius * s) for s in BLOOM_SCALES]

    def crush_sigmas(self) -> list[float]:
        base = max(10, math.floor(30 * self.p.intensity))
        return [radius_to_sigma(base * self.p.shadow_crush_radius * s) for s in CRUSH_SCALES]

    def build_layers(self, buf: PixelBuffer) -> BloomLayers:
        lum = buf.luminance()
        hm = self.highlight_mask(lum)

        source = buf.rgb * hm[..., None]
        combined = np.zeros_like(source)
        for sigma, weight in zip(self.bloom_sigmas(), BLOOM_WEIGHTS):
            combined += self.backend.gaussian_blur(source, sigma) * np.float32(weight)

        influence = np.zeros_like(hm)
        for sigma, weight in zip(self.crush_sigmas(), CRUSH_WEIGHTS):
            influence += self.backend.gaussian_blur(hm, sigma) * np.float32(weight)

        highlight_amount = float(hm.mean()) if hm.size else 0.0
        p = self.p
        factor = 1.0 + 0.15 * p.intensity * p.shadow_crush_strength * (1.0 + 2.0 * highlight_amount)
        logger.debug(
            "[Bloom] highlight_amount=%.4f crush_factor=%.4f bloom_sigmas=%s",
            highlight_amount, factor, ["%.2f" % s for s in self.bloom_sigmas()],
        )
        return BloomLayers(
            luminance=lum,
            highlight_mask=hm,
            combined_bloom=combined,
            crush_influence=influence,
            highlight_amount=highlight_amount,
            shadow_crush_factor=factor,
        )

    # Compositing

    def crush_shadows(self, rgb: np.ndarray, layers: BloomLayers) -> np.ndarray:
        p = self.p
        shadow_mask = np.power(np.clip(1.0 - layers.luminance / 128.0, 0.0, 1.0), 1.5)
        crush = (shadow_mask * layers.crush_influence * 0.3 * p.intensity
                 * p.shadow_crush_strength * layers.shadow_crush_factor)
        adjusted = rgb * (1.0 - crush)[..., None]
        black_lift = 5.0 * p.intensity * (2.0 - p.shadow_crush_strength)
        return np.maximum(adjusted, np.float32(black_lift))

    def composite(self, adjusted: np.ndarray, combined: np.ndarray) -> np.ndarray:
        p = self.p
        screen_amount = 0.5 * p.intensity * p.bloom_strength
        additive_amount = 0.25 * p.intensity * p.bloom_strength

        orig = adjusted / np.float32(255.0)
        bloom = combined / np.float32(255.0)
        screened = 1.0 - (1.0 - orig) * (1.0 - bloom * screen_amount)
        out = screened * np.float32(255.0) + combined * np.float32(additive_amount)

        bmask = np.clip(combined.sum(axis=2) / 765.0, 0.0, 1.0)
        out[..., 0] += bmask * (8.0 * p.intensity * p.bloom_strength)
        out[..., 2] += bmask * (4.0 * p.intensity * p.bloom_strength)
        return clamp_u8(out.astype(np.float32, copy=False))

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        layers = self.build_layers(buf)
        adjusted = self.crush_shadows(buf.rgb, layers)
        result = np.empty_like(buf.data)
        result[..., :3] = self.composite(adjusted, layers.combined_bloom)
        result[..., 3] = 255.0
        return PixelBuffer(result)
