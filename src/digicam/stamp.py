from __future__ import annotations
import logging
from typing import Optional

import numpy as np

from .backend import RasterBackend, OpenCVBackend
from .buffer import PixelBuffer

logger = logging.getLogger(__name__)

STAMP_PADDING = 20
SHADOW_COLOR = (100, 50, 0)
STAMP_COLOR = (255, 140, 0)     # digicam orange
YEAR_RANGE = (2001, 2006)


def random_date_text(rng: Optional[np.random.Generator] = None) -> str:
    """Random ``MM/DD/YYYY`` between 2001 and 2006 (day capped at 28)."""
    rng = rng if rng is not None else np.random.default_rng()
    year = int(rng.integers(YEAR_RANGE[0], YEAR_RANGE[1] + 1))
    month = int(rng.integers(1, 13))
    day = int(rng.integers(1, 29))
    return f"{month:02d}/{day:02d}/{year}"


class DateStampOverlay:
    """Two-layer (shadow + orange) date text in the bottom-right corner."""
    name = "date_stamp"

    def __init__(
        self,
        text: Optional[str] = None,
        rng: Optional[np.random.Generator] = None,
        backend: Optional[RasterBackend] = None,
        padding: int = STAMP_PADDING,
    ) -> None:
        self.text = text
        self.rng = rng
        self.backend = backend or OpenCVBackend()
        self.padding = padding

    @staticmethod
    def font_px(width: int) -> int:
        return max(16, width // 30)

    def resolve_text(self) -> str:
        return self.text if self.text is not None else random_date_text(self.rng)

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        text = self.resolve_text()
        if not text:
            return buf
        size = self.font_px(buf.width)
        text_w, _text_h = self.backend.measure_text(text, size)
        x = buf.width - text_w - self.padding
        y = buf.height - self.padding
        logger.debug("[Stamp] '%s' at (%d, %d), %dpx", text, x, y, size)

        image = buf.to_image()
        image = self.backend.draw_text(image, text, (x + 1, y + 1), size, SHADOW_COLOR)
        image = self.backend.draw_text(image, text, (x, y), size, STAMP_COLOR)
        return PixelBuffer.from_image(image)
