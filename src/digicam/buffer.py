from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from .errors import InvalidInput

LUMA = np.array([0.299, 0.587, 0.114], dtype=np.float32)


def clamp_u8(values: np.ndarray) -> np.ndarray:
    """Clamp in place to the 8-bit channel range and return the same array."""
    return np.clip(values, 0.0, 255.0, out=values)


def as_rgba(image: np.ndarray) -> np.ndarray:
    """Coerce gray / RGB / RGBA uint8 arrays to an (H, W, 4) RGBA uint8 array."""
    arr = np.asarray(image)
    if arr.ndim == 2:
        arr = np.repeat(arr[..., None], 3, axis=2)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4) or arr.shape[0] == 0 or arr.shape[1] == 0:
        raise InvalidInput(f"Expected an (H, W[, 3|4]) image, got shape {arr.shape}")
    if arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)
    if arr.shape[2] == 3:
        alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
        arr = np.concatenate([arr, alpha], axis=2)
    return np.ascontiguousarray(arr)


@dataclass
class PixelBuffer:
    """
    Working pixel storage: float32 RGBA, shape (H, W, 4), row-major.
    Channel values live in [0, 255]; stages clamp before handing the buffer on.
    """
    data: np.ndarray

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def rgb(self) -> np.ndarray:
        return self.data[..., :3]

    @classmethod
    def from_image(cls, image: np.ndarray) -> "PixelBuffer":
        return cls(as_rgba(image).astype(np.float32))

    def to_image(self) -> np.ndarray:
        """Round half-up, clip and quantize back to RGBA uint8."""
        out = np.floor(self.data + 0.5)
        return np.clip(out, 0, 255).astype(np.uint8)

    def luminance(self) -> np.ndarray:
        return self.data[..., :3] @ LUMA

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.data.copy())
