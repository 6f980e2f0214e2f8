from __future__ import annotations


class DigicamError(Exception):
    """Base class for every error raised by digicam."""


class InvalidInput(DigicamError, ValueError):
    """No usable image source was supplied (or it has an unusable shape)."""


class DecodeFailure(DigicamError):
    """Source bytes could not be interpreted as an image."""


class SurfaceAllocationFailure(DigicamError):
    """The raster backend could not allocate working storage."""


class EncodeFailure(DigicamError):
    """The lossy codec refused to encode an image."""


class RecodeFailure(DigicamError):
    """Lossy encode/decode round trip failed. Reported, never raised by the pipeline."""


class PipelineCancelled(DigicamError):
    """Cancellation was requested between two stages."""

    def __init__(self, next_stage: str) -> None:
        super().__init__(f"Pipeline cancelled before stage '{next_stage}'")
        self.next_stage = next_stage
