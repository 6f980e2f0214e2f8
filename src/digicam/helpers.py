from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import unquote, urlparse

import numpy as np

from .backend import RasterBackend, OpenCVBackend
from .buffer import as_rgba
from .errors import InvalidInput

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS: Tuple[str, ...] = (".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".webp")


# I/O & filesystem helpers

def ensure_dir(path: str | os.PathLike) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def uri_to_path(uri: str) -> Path:
    """Accept plain paths and ``file://`` URIs; anything else is rejected."""
    parsed = urlparse(uri)
    if parsed.scheme in ("", "file"):
        return Path(unquote(parsed.path) if parsed.scheme else uri)
    if len(parsed.scheme) == 1:         # Windows drive letter
        return Path(uri)
    raise InvalidInput(f"Unsupported URI scheme '{parsed.scheme}': {uri}")


def decode_image(data: bytes, backend: Optional[RasterBackend] = None) -> np.ndarray:
    """Decode encoded bytes to RGBA uint8. Raises DecodeFailure."""
    return (backend or OpenCVBackend()).decode(bytes(data))


def load_image(path: str | os.PathLike, backend: Optional[RasterBackend] = None) -> np.ndarray:
    """Load an image file as RGBA uint8. Raises on a missing or undecodable file."""
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Could not read image: {p}")
    return decode_image(p.read_bytes(), backend)


def resolve_source(
    uri: Optional[str] = None,
    data: Optional[bytes] = None,
    image: Optional[np.ndarray] = None,
    backend: Optional[RasterBackend] = None,
) -> np.ndarray:
    """Pick the first supplied source (image, then bytes, then uri) and return RGBA uint8."""
    if image is not None:
        return as_rgba(image)
    if data is not None:
        return decode_image(data, backend)
    if uri is not None:
        return load_image(uri_to_path(uri), backend)
    raise InvalidInput("An image source is required: one of uri, data or image")


def save_image(
    path: str | os.PathLike,
    image: np.ndarray,
    quality: int = 85,
    backend: Optional[OpenCVBackend] = None,
) -> Path:
    """Encode by extension (JPEG at ``quality`` by default) and write to disk."""
    p = Path(path)
    ext = p.suffix.lower() or ".jpg"
    if not p.suffix:
        p = p.with_suffix(ext)
    ensure_dir(p.parent)
    payload = (backend or OpenCVBackend()).encode(image, ext, quality)
    p.write_bytes(payload)
    logger.info("Saved %s (%d bytes)", p, len(payload))
    return p


def list_images(
    dir_path: str | os.PathLike,
    extensions: Tuple[str, ...] = IMAGE_EXTENSIONS,
    skip_suffix: Optional[str] = None,
) -> List[str]:
    """Sorted image files in ``dir_path``; stems ending in ``skip_suffix`` (earlier outputs) are left out."""
    p = Path(dir_path)
    if not p.is_dir():
        raise NotADirectoryError(p)
    found = []
    for fp in sorted(p.iterdir()):
        if not fp.is_file() or fp.suffix.lower() not in extensions:
            continue
        if skip_suffix and fp.stem.endswith(skip_suffix):
            continue
        found.append(str(fp))
    return found
