"""2D discrete wavelet transform engine and system.

Each level splits the current approximation into four subbands with the
separable filter bank (rows first, then columns):

    approximation  low rows / low cols   (LL)
    horizontal     high rows / low cols  (HL)
    vertical       low rows / high cols  (LH)
    diagonal       high rows / high cols (HH)

Per axis the subband length follows the 1D law (n + L - 1) // 2, so a
grid with an odd row count and an even column count round-trips exactly.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Literal

import numpy as np

from wavelet_ecs.components.coeffs import DWT2DCoeff
from wavelet_ecs.components.image import Image2D, ReconImage2D
from wavelet_ecs.core.system import System
from wavelet_ecs.exceptions import (
    BugEncounteredError,
    DimensionMismatchError,
    InvalidArgumentError,
)
from wavelet_ecs.filterbank import analysis_2d, synthesis_2d
from wavelet_ecs.systems.dwt1d import check_levels, resolve_wavelet
from wavelet_ecs.wavelets import Wavelet, get_wavelet

if TYPE_CHECKING:
    from wavelet_ecs.core.world import World

logger = logging.getLogger(__name__)


def decompose2d(grid: Any, levels: int, wavelet: str | Wavelet) -> DWT2DCoeff:
    """Multi-level 2D decomposition.

    Args:
        grid: Real 2D array with both dimensions >= 2 (not modified)
        levels: Number of decomposition levels, >= 1
        wavelet: Wavelet descriptor or factory name

    Returns:
        DWT2DCoeff with `levels` four-subband levels

    Raises:
        InvalidArgumentError: On a bad level count, input rank or size
    """
    levels = check_levels(levels)
    wavelet = get_wavelet(wavelet)
    current = np.asarray(grid, dtype=np.float64)
    if current.ndim != 2:
        raise InvalidArgumentError(f"Expected a 2D grid, got shape {current.shape}")
    if min(current.shape) < 2:
        raise InvalidArgumentError(f"Grid dimensions must be >= 2, got {current.shape}")
    shape = current.shape

    bands = []
    even = []
    for _ in range(levels):
        even.append((current.shape[0] % 2 == 0, current.shape[1] % 2 == 0))
        subbands = analysis_2d(current, wavelet)
        bands.append(subbands)
        current = subbands[0]

    coeff = DWT2DCoeff.from_arrays(bands, even)
    coeff.assign_associated_wavelet(wavelet)
    logger.debug("Decomposed %s grid with %s over %d levels", shape, wavelet.name, levels)
    return coeff


def reconstruct2d(coeff: DWT2DCoeff, wavelet: str | Wavelet | None = None) -> np.ndarray:
    """Inverse of decompose2d().

    Like the 1D engine, every level's stored approximation is overwritten
    with the running reconstruction on the way up.

    Raises:
        InvalidArgumentError: If no wavelet is given or associated, or the
            override's filter length differs from the associated wavelet's
        BugEncounteredError: If the filter bank rejects the stored pyramid
    """
    wavelet = resolve_wavelet(coeff, wavelet)

    levels = coeff.get_decomposition_level()
    current = np.array(coeff.access_approximate(levels))
    try:
        for level in range(levels, 0, -1):
            coeff.assign_approximate(current, level)
            even_rows, even_cols = coeff.parity(level)
            current = synthesis_2d(
                (
                    coeff.access_approximate(level),
                    coeff.access_horizontal(level),
                    coeff.access_vertical(level),
                    coeff.access_diagonal(level),
                ),
                wavelet,
                even_rows,
                even_cols,
            )
    except (InvalidArgumentError, DimensionMismatchError) as e:
        raise BugEncounteredError(f"Reconstruction failed at level {level}: {e}") from e

    logger.debug("Reconstructed %s grid from %d levels", current.shape, levels)
    return current


class DWT2D(System):
    """2D wavelet decomposition/reconstruction system.

    Forward mode: Image2D -> DWT2DCoeff
    Inverse mode: DWT2DCoeff -> ReconImage2D
    """

    def __init__(
        self,
        levels: int | None = None,
        wavelet: str | Wavelet | None = None,
        mode: Literal["forward", "inverse"] = "forward",
    ):
        """Initialize 2D DWT system.

        Args:
            levels: Number of decomposition levels (default from settings)
            wavelet: Wavelet descriptor or name (default from settings in
                forward mode, the pyramid's own wavelet in inverse mode)
            mode: 'forward' for decomposition, 'inverse' for reconstruction
        """
        super().__init__(mode=mode)
        if self.is_forward and (levels is None or wavelet is None):
            from wavelet_ecs.config import load_settings

            settings = load_settings()
            levels = settings.levels if levels is None else levels
            wavelet = settings.wavelet if wavelet is None else wavelet
        self.levels = check_levels(levels) if levels is not None else None
        self.wavelet = get_wavelet(wavelet) if wavelet is not None else None

    def required_components(self) -> list[type]:
        if self.mode == "forward":
            return [Image2D]
        return [DWT2DCoeff]

    def produced_components(self) -> list[type]:
        if self.mode == "forward":
            return [DWT2DCoeff]
        return [ReconImage2D]

    def run(self, world: World, eids: list[int]) -> None:
        if self.mode == "forward":
            self._run_forward(world, eids)
        else:
            self._run_inverse(world, eids)

    def _run_forward(self, world: World, eids: list[int]) -> None:
        """Image2D -> DWT2DCoeff."""
        assert self.levels is not None and self.wavelet is not None
        for eid in eids:
            img = world.get_component(eid, Image2D)
            pix = world.arena.view(img.pix, writeable=False)
            world.add_component(eid, decompose2d(pix, self.levels, self.wavelet))

    def _run_inverse(self, world: World, eids: list[int]) -> None:
        """DWT2DCoeff -> ReconImage2D."""
        for eid in eids:
            coeff = world.get_component(eid, DWT2DCoeff)
            recon = reconstruct2d(coeff, self.wavelet)
            world.add_component(eid, ReconImage2D(pix=world.arena.copy_tensor(recon)))

    def __repr__(self) -> str:
        name = self.wavelet.name if self.wavelet is not None else None
        return f"DWT2D(levels={self.levels}, wavelet={name!r}, mode={self.mode})"
