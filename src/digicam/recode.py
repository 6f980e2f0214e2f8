from __future__ import annotations
import logging
from typing import List, Optional

import numpy as np

from .backend import RasterBackend, OpenCVBackend
from .buffer import PixelBuffer
from .errors import DecodeFailure, EncodeFailure, RecodeFailure

logger = logging.getLogger(__name__)


class LossyRecodeSimulator:
    """
    JPEG round trip to bake in blocking and ringing.

    Codec failures never abort the pipeline: they are logged, kept in
    ``failures`` and the pre-encode buffer is passed through untouched.
    """
    name = "lossy_recode"

    def __init__(self, quality: int, backend: Optional[RasterBackend] = None) -> None:
        self.quality = int(min(100, max(0, quality)))
        self.backend = backend or OpenCVBackend()
        self.failures: List[RecodeFailure] = []

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        try:
            encoded = self.backend.encode_jpeg(buf.to_image(), self.quality)
            decoded = self.backend.decode(encoded)
        except (EncodeFailure, DecodeFailure) as e:
            failure = RecodeFailure(f"JPEG re-encode at quality {self.quality} failed: {e}")
            failure.__cause__ = e
            self.failures.append(failure)
            logger.warning("[Recode] %s; skipping artifacts", failure)
            return buf
        if decoded.shape[:2] != buf.data.shape[:2]:
            failure = RecodeFailure(
                f"Codec returned {decoded.shape[1]}x{decoded.shape[0]}, expected {buf.width}x{buf.height}"
            )
            self.failures.append(failure)
            logger.warning("[Recode] %s; skipping artifacts", failure)
            return buf
        out = PixelBuffer.from_image(decoded)
        out.data[..., 3] = np.float32(255.0)
        return out
