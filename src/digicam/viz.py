from __future__ import annotations
from typing import List, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .buffer import PixelBuffer


class StageRecorder:
    """``on_stage`` observer that keeps a quantized snapshot of every stage."""

    def __init__(self) -> None:
        self.snapshots: List[Tuple[str, np.ndarray]] = []

    def __call__(self, name: str, buf: PixelBuffer) -> None:
        self.snapshots.append((name, buf.to_image()))


class Visualizer:
    """Plot helpers (only used when --show). No implicit showing in library paths."""

    @staticmethod
    def show_before_after(
        original: np.ndarray,
        processed: np.ndarray,
        titles: Tuple[str, str] = ("Original", "Y2K"),
        figsize: Tuple[int, int] = (12, 6),
        show: bool = True,
    ) -> plt.Figure:
        """Original and processed frame on one row; RGBA arrays are shown as-is."""
        fig, (ax_in, ax_out) = plt.subplots(1, 2, figsize=figsize)
        for ax, img, title in zip((ax_in, ax_out), (original, processed), titles):
            ax.imshow(img)
            ax.set_title(f"{title} ({img.shape[1]}x{img.shape[0]})")
            ax.axis("off")
        fig.tight_layout()
        if show:
            plt.show()
        return fig

    @staticmethod
    def show_stages(
        snapshots: Sequence[Tuple[str, np.ndarray]],
        cols: int = 4,
        show: bool = True,
    ) -> plt.Figure:
        n = len(snapshots)
        rows = max(1, -(-n // cols))
        fig, axes = plt.subplots(rows, cols, figsize=(4 * cols, 3 * rows), squeeze=False)
        for ax in axes.ravel():
            ax.axis("off")
        for ax, (name, img) in zip(axes.ravel(), snapshots):
            ax.imshow(img)
            ax.set_title(name)
        fig.tight_layout()
        if show:
            plt.show()
        return fig
