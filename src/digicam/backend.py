"""
Raster backend: the imaging substrate the effect stages lean on.

Stages only talk to the ``RasterBackend`` protocol (blur, resize, codec,
text). ``OpenCVBackend`` is the software implementation used by default;
tests swap in subclasses to force failures.
"""
from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Iterator, Protocol, Tuple, runtime_checkable

import cv2
import numpy as np

from .buffer import as_rgba
from .errors import DecodeFailure, EncodeFailure, SurfaceAllocationFailure

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]


@runtime_checkable
class RasterBackend(Protocol):
    """Capability set required by the pipeline stages."""

    def gaussian_blur(self, array: np.ndarray, sigma: float) -> np.ndarray:
        """Blur a float (H, W) or (H, W, C) array with clamped edges."""
        ...

    def resize(self, image: np.ndarray, width: int, height: int) -> np.ndarray:
        """Resample an RGBA uint8 image to exactly (width, height)."""
        ...

    def encode_jpeg(self, image: np.ndarray, quality: int) -> bytes:
        ...

    def decode(self, data: bytes) -> np.ndarray:
        """Decode encoded bytes into an RGBA uint8 image."""
        ...

    def measure_text(self, text: str, font_px: int) -> Tuple[int, int]:
        ...

    def draw_text(
        self, image: np.ndarray, text: str, origin: Tuple[int, int], font_px: int, color: Color
    ) -> np.ndarray:
        ...


@contextmanager
def _surface(op: str, width: int, height: int) -> Iterator[None]:
    if width <= 0 or height <= 0:
        raise SurfaceAllocationFailure(f"{op}: cannot allocate a {width}x{height} surface")
    try:
        yield
    except (cv2.error, MemoryError) as e:
        raise SurfaceAllocationFailure(f"{op}: failed for {width}x{height} surface: {e}") from e


class OpenCVBackend:
    """Software raster backend built on OpenCV."""

    def __init__(self, font: int = cv2.FONT_HERSHEY_SIMPLEX, line_type: int = cv2.LINE_AA) -> None:
        self.font = font
        self.line_type = line_type

    # Filtering

    def gaussian_blur(self, array: np.ndarray, sigma: float) -> np.ndarray:
        if sigma <= 0:
            return array.copy()
        h, w = array.shape[:2]
        with _surface("gaussian_blur", w, h):
            src = np.ascontiguousarray(array, dtype=np.float32)
            return cv2.GaussianBlur(
                src, (0, 0), sigmaX=float(sigma), sigmaY=float(sigma),
                borderType=cv2.BORDER_REPLICATE,
            )

    def resize(self, image: np.ndarray, width: int, height: int) -> np.ndarray:
        with _surface("resize", width, height):
            h, w = image.shape[:2]
            shrinking = width * height < w * h
            interp = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
            return cv2.resize(image, (int(width), int(height)), interpolation=interp)

    # Codec

    def encode(self, image: np.ndarray, ext: str = ".jpg", quality: int = 85) -> bytes:
        ext = ext.lower()
        rgba = as_rgba(image)
        if ext in (".jpg", ".jpeg"):
            payload = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGR)
            params = [cv2.IMWRITE_JPEG_QUALITY, int(min(100, max(0, quality)))]
        else:
            payload = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA)
            params = []
        try:
            ok, encoded = cv2.imencode(ext, payload, params)
        except cv2.error as e:
            raise EncodeFailure(f"Could not encode {ext}: {e}") from e
        if not ok:
            raise EncodeFailure(f"Could not encode {ext}")
        return encoded.tobytes()

    def encode_jpeg(self, image: np.ndarray, quality: int) -> bytes:
        return self.encode(image, ".jpg", quality)

    def decode(self, data: bytes) -> np.ndarray:
        buf = np.frombuffer(data, dtype=np.uint8)
        if buf.size == 0:
            raise DecodeFailure("Empty image payload")
        try:
            img = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
        except cv2.error as e:
            raise DecodeFailure(f"Could not decode image payload ({buf.size} bytes): {e}") from e
        if img is None:
            logger.debug("[Backend] imdecode rejected %d bytes", buf.size)
            raise DecodeFailure(f"Could not decode image payload ({buf.size} bytes)")
        if img.dtype == np.uint16:
            img = (img // 257).astype(np.uint8)
        if img.ndim == 2:
            return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
        if img.shape[2] == 4:
            return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)

    # Text

    def _font_params(self, font_px: int) -> Tuple[float, int]:
        thickness = max(1, int(round(font_px / 10)))
        scale = cv2.getFontScaleFromHeight(self.font, int(font_px), thickness)
        return scale, thickness

    def measure_text(self, text: str, font_px: int) -> Tuple[int, int]:
        scale, thickness = self._font_params(font_px)
        (w, h), _baseline = cv2.getTextSize(text, self.font, scale, thickness)
        return int(w), int(h)

    def draw_text(
        self, image: np.ndarray, text: str, origin: Tuple[int, int], font_px: int, color: Color
    ) -> np.ndarray:
        scale, thickness = self._font_params(font_px)
        # glyph coverage must not reach the alpha plane
        rgb = image[..., :3].copy()
        fill = tuple(int(c) for c in color)
        cv2.putText(rgb, text, (int(origin[0]), int(origin[1])), self.font, scale,
                    fill, thickness, self.line_type)
        out = image.copy()
        out[..., :3] = rgb
        return out
