"""Synthetic RGBA scenes for demos and tests."""
from __future__ import annotations

import numpy as np
from skimage.draw import disk
from skimage.filters import gaussian


def _opaque(rgb: np.ndarray) -> np.ndarray:
    alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([rgb.astype(np.uint8), alpha], axis=2)


def flat(h: int, w: int, value: int | tuple[int, int, int] = 255) -> np.ndarray:
    rgb = np.empty((h, w, 3), dtype=np.uint8)
    rgb[...] = value
    return _opaque(rgb)


def highlight_line(h: int, w: int, line: int = 255, bg: int = 5, column: int | None = None) -> np.ndarray:
    """Single-pixel-wide vertical highlight on a near-black field."""
    rgb = np.full((h, w, 3), bg, dtype=np.uint8)
    rgb[:, w // 2 if column is None else column] = line
    return _opaque(rgb)


def coordinate_ramp(h: int, w: int) -> np.ndarray:
    """R encodes x and G encodes y (both must be <= 256 for a lossless code)."""
    ys, xs = np.mgrid[0:h, 0:w]
    rgb = np.zeros((h, w, 3), dtype=np.uint8)
    rgb[..., 0] = np.clip(xs, 0, 255)
    rgb[..., 1] = np.clip(ys, 0, 255)
    return _opaque(rgb)


def synthetic_photo(seed: int = 0, h: int = 240, w: int = 320) -> np.ndarray:
    """Sky gradient, a bright sun and a few dark foreground blobs, softly blurred."""
    rng = np.random.default_rng(seed)
    t = np.linspace(0.0, 1.0, h, dtype=np.float32)[:, None]
    img = np.empty((h, w, 3), np.float32)
    img[..., 0] = 0.35 + 0.45 * t
    img[..., 1] = 0.55 + 0.30 * t
    img[..., 2] = 0.95 - 0.35 * t

    rr, cc = disk((h * 0.25, w * 0.75), max(4, min(h, w) // 10), shape=(h, w))
    img[rr, cc] = 1.0

    for _ in range(6):
        y = rng.integers(h // 2, h)
        x = rng.integers(0, w)
        r = rng.integers(max(3, h // 20), max(4, h // 6))
        rr, cc = disk((y, x), r, shape=(h, w))
        img[rr, cc] = rng.uniform(0.02, 0.2, size=3)

    img = gaussian(img, sigma=rng.uniform(0.5, 1.5), channel_axis=-1)
    return _opaque((np.clip(img, 0, 1) * 255).round())


SCENES = {
    "photo": lambda: synthetic_photo(0),
    "white": lambda: flat(300, 400, 255),
    "highlight": lambda: highlight_line(120, 160),
    "ramp": lambda: coordinate_ramp(150, 200),
}
