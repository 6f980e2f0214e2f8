from __future__ import annotations
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from .backend import OpenCVBackend
from .config import TARGET_PIXELS, EffectOptions
from .helpers import load_image, resolve_source, save_image
from .pipeline import CancelToken, PipelineResult, StageObserver, Y2KPipeline

logger = logging.getLogger(__name__)


class Y2KCamera:
    """
    Front-end around ``Y2KPipeline``: resolves the image source, runs the
    effect, remembers the last result and persists it.

    Staleness of overlapping requests is left to the caller.
    """

    def __init__(
        self,
        options: Optional[EffectOptions] = None,
        seed: Optional[int] = None,
        backend: Optional[OpenCVBackend] = None,
        target_pixels: int = TARGET_PIXELS,
    ) -> None:
        self.options = options or EffectOptions()
        self.seed = seed
        self.backend = backend or OpenCVBackend()
        self.target_pixels = target_pixels
        self._seeds = np.random.SeedSequence(seed)
        self.pipeline = Y2KPipeline(
            backend=self.backend,
            rng=np.random.default_rng(self._seeds.spawn(1)[0]),
            target_pixels=target_pixels,
        )
        self.result: Optional[PipelineResult] = None

    def process(
        self,
        uri: Optional[str] = None,
        data: Optional[bytes] = None,
        image: Optional[np.ndarray] = None,
        options: Optional[EffectOptions] = None,
        cancel: Optional[CancelToken] = None,
        on_stage: Optional[StageObserver] = None,
    ) -> np.ndarray:
        source = resolve_source(uri=uri, data=data, image=image, backend=self.backend)
        self.result = self.pipeline.process(source, options or self.options, cancel=cancel, on_stage=on_stage)
        return self.result.image

    def reset(self) -> None:
        self.result = None

    def save_result(self, path: str | os.PathLike, quality: Optional[int] = None) -> Path:
        if self.result is None:
            raise RuntimeError("No result to save; call process() first")
        q = self.result.options.output_quality if quality is None else quality
        return save_image(path, self.result.image, quality=q, backend=self.backend)

    # Batch

    def _process_path(self, path: str, seed: np.random.SeedSequence) -> np.ndarray:
        pipeline = Y2KPipeline(
            backend=self.backend,
            rng=np.random.default_rng(seed),
            target_pixels=self.target_pixels,
        )
        result = pipeline.process(load_image(path, self.backend), self.options)
        for warning in result.warnings:
            logger.warning("%s: %s", os.path.basename(path), warning)
        return result.image

    def process_many(self, paths: Sequence[str], workers: int = 1) -> List[np.ndarray]:
        """
        Process files independently, one pipeline (and generator) per file.
        Results keep input order and do not depend on ``workers``.
        """
        seeds = self._seeds.spawn(len(paths))
        if workers <= 1:
            return [self._process_path(p, s) for p, s in zip(paths, seeds)]
        logger.info("[Camera] %d images on %d workers", len(paths), workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self._process_path, paths, seeds))
