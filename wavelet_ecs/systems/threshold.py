"""Detail-coefficient thresholding systems.

DetailThreshold shrinks the detail subbands of every pyramid on an entity
by a fixed threshold. NormalShrink estimates a per-subband threshold from
the data (adaptive wavelet denoising of 2D grids):

    noise_var = (median(|HH_1|) / 0.6745) ** 2
    beta      = sqrt(log(band_size // L))
    threshold = beta * noise_var / std(band)

Both edit the pyramid in place; run DWT1D/DWT2D in inverse mode afterwards
to obtain the cleaned signal or grid.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Iterable, Literal

import numpy as np

from wavelet_ecs.components.coeffs import DWT1DCoeff, DWT2DCoeff
from wavelet_ecs.core.system import System
from wavelet_ecs.eval.pyramid import estimate_noise_sigma
from wavelet_ecs.exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from wavelet_ecs.core.world import World

logger = logging.getLogger(__name__)


def _check_threshold(threshold: float) -> float:
    if threshold < 0:
        raise InvalidArgumentError(f"Threshold must be non-negative, got {threshold}")
    return float(threshold)


def soft_threshold(coeff: Any, threshold: float) -> np.ndarray:
    """Shrink values toward zero: sign(x) * max(|x| - t, 0)."""
    t = _check_threshold(threshold)
    x = np.asarray(coeff, dtype=np.float64)
    return np.sign(x) * np.maximum(np.abs(x) - t, 0.0)


def hard_threshold(coeff: Any, threshold: float) -> np.ndarray:
    """Zero every value with |x| <= t, keep the rest."""
    t = _check_threshold(threshold)
    x = np.asarray(coeff, dtype=np.float64)
    return np.where(np.abs(x) > t, x, 0.0)


def _select_levels(levels: Iterable[int] | None, depth: int) -> list[int]:
    if levels is None:
        return list(range(1, depth + 1))
    selected = sorted(set(levels))
    for level in selected:
        if not 1 <= level <= depth:
            raise InvalidArgumentError(f"Level must be in [1, {depth}], got {level}")
    return selected


class DetailThreshold(System):
    """Threshold detail subbands of DWT1DCoeff/DWT2DCoeff in place.

    Entities qualify if they carry either pyramid type; both are edited
    when both are present.
    """

    def __init__(
        self,
        threshold: float,
        kind: Literal["soft", "hard"] = "soft",
        levels: Iterable[int] | None = None,
    ):
        """Initialize threshold system.

        Args:
            threshold: Non-negative threshold
            kind: 'soft' (shrink) or 'hard' (keep or kill)
            levels: Levels to edit (default: all)
        """
        super().__init__(mode="forward")
        if kind not in ("soft", "hard"):
            raise InvalidArgumentError(f"kind must be 'soft' or 'hard', got {kind!r}")
        self.threshold = _check_threshold(threshold)
        self.kind = kind
        self.levels = None if levels is None else list(levels)
        self._apply = soft_threshold if kind == "soft" else hard_threshold

    def required_components(self) -> list[type]:
        return []

    def produced_components(self) -> list[type]:
        return []

    def can_run(self, world: World, eid: int) -> bool:
        return world.has_component(eid, DWT1DCoeff) or world.has_component(eid, DWT2DCoeff)

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            if world.has_component(eid, DWT1DCoeff):
                coeff1d = world.get_component(eid, DWT1DCoeff)
                for level in _select_levels(self.levels, coeff1d.get_decomposition_level()):
                    detail = coeff1d.access_detail(level)
                    coeff1d.assign_detail(self._apply(detail, self.threshold), level)
            if world.has_component(eid, DWT2DCoeff):
                coeff2d = world.get_component(eid, DWT2DCoeff)
                for level in _select_levels(self.levels, coeff2d.get_decomposition_level()):
                    for name in DWT2DCoeff.DETAIL_NAMES:
                        band = coeff2d.access_band(level, name)
                        coeff2d.assign_band(self._apply(band, self.threshold), level, name)

    def __repr__(self) -> str:
        return f"DetailThreshold(threshold={self.threshold}, kind={self.kind!r})"


def estimate_noise_variance(coeff: DWT2DCoeff) -> float:
    """Robust noise variance from the level-1 diagonal subband."""
    return estimate_noise_sigma(coeff.access_diagonal(1)) ** 2


def normal_shrink_thresholds(
    coeff: DWT2DCoeff, level: int, noise_var: float | None = None
) -> dict[str, float | None]:
    """NormalShrink threshold for each detail subband of a level.

    A subband with zero standard deviation gets None (nothing to shrink).
    """
    if noise_var is None:
        noise_var = estimate_noise_variance(coeff)
    depth = coeff.get_decomposition_level()
    rows, cols = coeff.level_shape(level)
    ratio = (rows * cols) // depth
    beta = math.sqrt(math.log(ratio)) if ratio > 1 else 0.0

    thresholds: dict[str, float | None] = {}
    for name in DWT2DCoeff.DETAIL_NAMES:
        sigma = float(np.std(coeff.access_band(level, name)))
        thresholds[name] = beta * noise_var / sigma if sigma > 0 else None
    return thresholds


class NormalShrink(System):
    """Adaptive soft thresholding of DWT2DCoeff detail subbands.

    Requires: DWT2DCoeff (edited in place)
    """

    def __init__(self, levels: Iterable[int] | None = None):
        """Initialize NormalShrink.

        Args:
            levels: Levels to shrink (default: all). The noise estimate
                always comes from the level-1 diagonal subband.
        """
        super().__init__(mode="forward")
        self.levels = None if levels is None else list(levels)

    def required_components(self) -> list[type]:
        return [DWT2DCoeff]

    def produced_components(self) -> list[type]:
        return []

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            coeff = world.get_component(eid, DWT2DCoeff)
            noise_var = estimate_noise_variance(coeff)
            for level in _select_levels(self.levels, coeff.get_decomposition_level()):
                thresholds = normal_shrink_thresholds(coeff, level, noise_var)
                logger.debug("NormalShrink level %d thresholds %s", level, thresholds)
                for name, threshold in thresholds.items():
                    if threshold is None:
                        continue
                    band = coeff.access_band(level, name)
                    coeff.assign_band(soft_threshold(band, threshold), level, name)

    def __repr__(self) -> str:
        return f"NormalShrink(levels={self.levels})"
