"""DWT-based fusion of two same-shape pyramids.

The deepest approximations are blended linearly. Every detail coefficient
is taken from whichever pyramid has the stronger local edge response at
that position, measured as the Sobel gradient magnitude of the subband.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from skimage.filters import sobel

from wavelet_ecs.components.coeffs import DWT2DCoeff
from wavelet_ecs.exceptions import DimensionMismatchError, InvalidArgumentError

logger = logging.getLogger(__name__)


def select_by_gradient(band1: np.ndarray, band2: np.ndarray) -> np.ndarray:
    """Per position, keep the value whose subband has the larger gradient.

    Ties go to band1.
    """
    if band1.shape != band2.shape:
        raise DimensionMismatchError(f"Subband shapes differ: {band1.shape} vs {band2.shape}")
    grad1 = sobel(np.asarray(band1, dtype=np.float64))
    grad2 = sobel(np.asarray(band2, dtype=np.float64))
    return np.where(grad2 > grad1, band2, band1)


def _check_weights(k1: float, k2: float) -> None:
    if not (0.0 <= k1 <= 1.0 and 0.0 <= k2 <= 1.0):
        raise InvalidArgumentError(f"Weights must lie in [0, 1], got k1={k1}, k2={k2}")
    if not math.isclose(k1 + k2, 1.0, rel_tol=0.0, abs_tol=1e-9):
        raise InvalidArgumentError(f"Weights must sum to 1, got k1 + k2 = {k1 + k2}")


def fuse_coefficients(coeff1: DWT2DCoeff, k1: float, coeff2: DWT2DCoeff, k2: float) -> DWT2DCoeff:
    """Fuse coeff2 into coeff1 and return coeff1.

    Args:
        coeff1: Pyramid receiving the fused coefficients
        k1: Weight of coeff1's deepest approximation
        coeff2: Second pyramid, same depth and subband shapes
        k2: Weight of coeff2's deepest approximation, k1 + k2 == 1

    Raises:
        InvalidArgumentError: If the weights are out of range
        DimensionMismatchError: If the pyramids differ in depth or shape
    """
    _check_weights(k1, k2)
    depth = coeff1.get_decomposition_level()
    if depth != coeff2.get_decomposition_level():
        raise DimensionMismatchError(
            f"Pyramid depths differ: {depth} vs {coeff2.get_decomposition_level()}"
        )
    for level in range(1, depth + 1):
        if coeff1.level_shape(level) != coeff2.level_shape(level):
            raise DimensionMismatchError(
                f"Level {level} shapes differ: "
                f"{coeff1.level_shape(level)} vs {coeff2.level_shape(level)}"
            )

    for level, name, band1 in coeff1.detail_bands():
        fused = select_by_gradient(band1, coeff2.access_band(level, name))
        coeff1.assign_band(fused, level, name)

    blended = k1 * coeff1.access_approximate(depth) + k2 * coeff2.access_approximate(depth)
    coeff1.assign_approximate(blended, depth)
    logger.debug("Fused %d-level pyramids with weights (%s, %s)", depth, k1, k2)
    return coeff1
