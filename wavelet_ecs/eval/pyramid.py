"""Pyramid inspection helpers: shapes, subband energies, noise estimate."""

from __future__ import annotations

from typing import Any

import numpy as np

from wavelet_ecs.components.coeffs import DWT1DCoeff, DWT2DCoeff
from wavelet_ecs.core.world import World
from wavelet_ecs.exceptions import InvalidArgumentError
from wavelet_ecs.wavelets import Wavelet, get_wavelet

# Median absolute deviation of a unit normal
MAD_SCALE = 0.6745


def coefficient_length(n: int, filter_length: int) -> int:
    """Subband length produced from a length-n input.

    Half the periodic convolution length (n + L - 1), rounded down, or 1
    when the convolution output has at most 2 samples.
    """
    if n < 1 or filter_length < 1:
        raise InvalidArgumentError(f"Need n >= 1 and filter_length >= 1, got {n}, {filter_length}")
    total = n + filter_length - 1
    return 1 if total <= 2 else total // 2


def pyramid_shapes(n: int, levels: int, wavelet: str | Wavelet) -> list[int]:
    """Subband length at each level 1..levels for a length-n signal."""
    length = get_wavelet(wavelet).filter_length
    shapes = []
    for _ in range(levels):
        n = coefficient_length(n, length)
        shapes.append(n)
    return shapes


def pyramid_shapes_2d(
    shape: tuple[int, int], levels: int, wavelet: str | Wavelet
) -> list[tuple[int, int]]:
    """Subband shape at each level 1..levels for a (rows, cols) grid."""
    rows, cols = shape
    return list(zip(pyramid_shapes(rows, levels, wavelet), pyramid_shapes(cols, levels, wavelet)))


def band_energies(coeff: DWT1DCoeff | DWT2DCoeff) -> dict[str, float]:
    """Sum of squares per subband, keyed 'L{level}_{name}'.

    Only the deepest approximation is reported; shallower ones are
    intermediate results already split into deeper subbands.
    """
    energies: dict[str, float] = {}
    depth = coeff.get_decomposition_level()
    for level in range(1, depth + 1):
        for name in coeff.BAND_NAMES:
            if name == "approximation" and level != depth:
                continue
            band = coeff.access_band(level, name)
            energies[f"L{level}_{name}"] = float(np.sum(band * band))
    return energies


def band_energies_from_world(world: World, eid: int) -> dict[str, float]:
    """band_energies() for the pyramid attached to an entity (2D preferred)."""
    if world.has_component(eid, DWT2DCoeff):
        return band_energies(world.get_component(eid, DWT2DCoeff))
    return band_energies(world.get_component(eid, DWT1DCoeff))


def estimate_noise_sigma(data: Any) -> float:
    """Robust Gaussian noise sigma, median(|x|) / 0.6745.

    Accepts a detail array or a pyramid; for a pyramid the finest diagonal
    (2D) or detail (1D) subband is used.
    """
    if isinstance(data, DWT2DCoeff):
        band = data.access_diagonal(1)
    elif isinstance(data, DWT1DCoeff):
        band = data.access_detail(1)
    else:
        band = np.asarray(data, dtype=np.float64)
    if band.size == 0:
        raise InvalidArgumentError("Cannot estimate noise from an empty subband")
    return float(np.median(np.abs(band))) / MAD_SCALE
