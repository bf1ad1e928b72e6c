"""Quality metric systems comparing a source with its reconstruction.

Implements MSE, PSNR, SSIM and max-abs error using scikit-image.
Metrics store results in World metadata rather than creating components.

Source/reconstruction pairs default to Image2D/ReconImage2D; pass
Signal1D/ReconSignal1D to measure 1D round trips (SSIM is 2D only).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any

import numpy as np
from skimage.metrics import (
    mean_squared_error,
    peak_signal_noise_ratio,
    structural_similarity,
)

from wavelet_ecs.components.image import Image2D, ReconImage2D
from wavelet_ecs.core.system import System

if TYPE_CHECKING:
    from wavelet_ecs.core.world import World


def _tensor(world: World, component: Any) -> np.ndarray:
    ref = component.pix if hasattr(component, "pix") else component.samples
    return world.arena.view(ref, writeable=False)


def default_data_range(src: np.ndarray) -> float:
    """Peak-to-peak range of the source, 1.0 for a flat source."""
    span = float(np.ptp(src)) if src.size else 0.0
    return span if span > 0 else 1.0


class _PairMetric(System):
    """Shared plumbing: fetch the source/recon pair and store one value."""

    key = ""

    def __init__(
        self,
        src_component: type = Image2D,
        recon_component: type = ReconImage2D,
        data_range: float | None = None,
    ):
        """Initialize metric system.

        Args:
            src_component: Source component type (default: Image2D)
            recon_component: Reconstruction component type (default: ReconImage2D)
            data_range: Data range (source peak-to-peak if None)
        """
        super().__init__(mode="forward")
        self.src_component = src_component
        self.recon_component = recon_component
        self.data_range = data_range

    def required_components(self) -> list[type]:
        return [self.src_component, self.recon_component]

    def produced_components(self) -> list[type]:
        """None; results go to world.metadata."""
        return []

    @abstractmethod
    def measure(self, src: np.ndarray, recon: np.ndarray, data_range: float) -> float:
        """Compute the metric for one source/recon pair."""

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            src_data = _tensor(world, world.get_component(eid, self.src_component))
            recon_data = _tensor(world, world.get_component(eid, self.recon_component))

            if src_data.shape != recon_data.shape:
                raise ValueError(
                    f"Shape mismatch: src {src_data.shape} vs recon {recon_data.shape}"
                )

            data_range = self.data_range
            if data_range is None:
                data_range = default_data_range(src_data)

            world.metadata.setdefault(eid, {})[self.key] = float(
                self.measure(src_data, recon_data, data_range)
            )


class MetricMSE(_PairMetric):
    """Mean squared error. Stores world.metadata[eid]['mse']."""

    key = "mse"

    def measure(self, src: np.ndarray, recon: np.ndarray, data_range: float) -> float:
        return float(mean_squared_error(src, recon))


class MetricPSNR(_PairMetric):
    """Peak signal-to-noise ratio in dB.

    Identical inputs give inf. Stores world.metadata[eid]['psnr'].
    """

    key = "psnr"

    def measure(self, src: np.ndarray, recon: np.ndarray, data_range: float) -> float:
        if np.array_equal(src, recon):
            return float("inf")
        return float(peak_signal_noise_ratio(src, recon, data_range=data_range))


class MetricSSIM(_PairMetric):
    """Structural similarity of 2D grids, in [-1, 1].

    Stores world.metadata[eid]['ssim'].
    """

    key = "ssim"

    def measure(self, src: np.ndarray, recon: np.ndarray, data_range: float) -> float:
        if src.ndim != 2:
            raise ValueError(f"SSIM needs 2D grids, got shape {src.shape}")
        # skimage needs an odd window no larger than the smaller side
        win_size = min(7, *src.shape)
        if win_size % 2 == 0:
            win_size -= 1
        if win_size < 3:
            raise ValueError(f"Grid {src.shape} too small for SSIM")
        return float(structural_similarity(src, recon, data_range=data_range, win_size=win_size))


class MetricMaxError(_PairMetric):
    """Largest absolute sample difference. Stores world.metadata[eid]['max_error']."""

    key = "max_error"

    def measure(self, src: np.ndarray, recon: np.ndarray, data_range: float) -> float:
        return float(np.max(np.abs(src - recon))) if src.size else 0.0
