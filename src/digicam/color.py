from __future__ import annotations
import numpy as np

from .buffer import LUMA, PixelBuffer, clamp_u8


class ColorGrader:
    """Per-pixel color math. Every method mutates ``buf`` in place and clamps."""

    @staticmethod
    def cool_cast(buf: PixelBuffer, intensity: float) -> PixelBuffer:
        gains = np.array(
            [1.0 - 0.06 * intensity, 1.0 + 0.02 * intensity, 1.0 + 0.08 * intensity],
            dtype=np.float32,
        )
        rgb = buf.rgb
        rgb *= gains
        clamp_u8(rgb)
        return buf

    @staticmethod
    def saturation(buf: PixelBuffer, factor: float) -> PixelBuffer:
        rgb = buf.rgb
        lum = (rgb @ LUMA)[..., None]
        rgb[...] = lum + (rgb - lum) * np.float32(factor)
        clamp_u8(rgb)
        return buf

    @staticmethod
    def vibrance(buf: PixelBuffer, factor: float) -> PixelBuffer:
        """Saturation boost weighted toward already-muted pixels."""
        if factor == 1.0:
            return buf
        rgb = buf.rgb
        norm = rgb / np.float32(255.0)
        max_c = norm.max(axis=2)
        min_c = norm.min(axis=2)
        sat = np.divide(max_c - min_c, max_c, out=np.zeros_like(max_c), where=max_c != 0)
        curve = np.power(np.maximum(1.0 - sat, 0.0), 1.5)
        per_pixel = (1.0 + (factor - 1.0) * curve)[..., None]
        lum = (norm @ LUMA)[..., None]
        rgb[...] = (lum + (norm - lum) * per_pixel) * np.float32(255.0)
        clamp_u8(rgb)
        return buf

    @staticmethod
    def dynamic_range(buf: PixelBuffer, intensity: float) -> PixelBuffer:
        black_lift = 8.0 * intensity
        highlight_compress = 0.95 - 0.05 * intensity
        contrast = 0.9 + 0.1 * (1.0 - intensity)
        mid = 128.0
        rgb = buf.rgb
        rgb[...] = ((rgb + black_lift) * highlight_compress - mid) * contrast + mid
        clamp_u8(rgb)
        return buf


# Pipeline stages

class CoolCast:
    name = "cool_cast"

    def __init__(self, intensity: float) -> None:
        self.intensity = intensity

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        return ColorGrader.cool_cast(buf, self.intensity)


class SaturationBoost:
    """Global saturation followed by vibrance (order matters)."""
    name = "saturation"

    def __init__(self, saturation: float, vibrance: float) -> None:
        self.saturation = saturation
        self.vibrance = vibrance

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        ColorGrader.saturation(buf, self.saturation)
        return ColorGrader.vibrance(buf, self.vibrance)


class DynamicRangeReducer:
    name = "dynamic_range"

    def __init__(self, intensity: float) -> None:
        self.intensity = intensity

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        return ColorGrader.dynamic_range(buf, self.intensity)
