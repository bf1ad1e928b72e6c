"""1D discrete wavelet transform engine and system.

decompose() iterates the analysis filter bank, each level consuming the
previous level's approximation. reconstruct() runs the synthesis filter
bank from the deepest level back to level 1.

Example:
    >>> coeff = decompose([1.0, 2.0, 3.0, 4.0], levels=1, wavelet="haar")
    >>> coeff.access_approximate(1)
    array([2.12132034, 4.94974747])
    >>> reconstruct(coeff)
    array([1., 2., 3., 4.])
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Literal

import numpy as np

from wavelet_ecs.components.coeffs import DWT1DCoeff
from wavelet_ecs.components.signal import ReconSignal1D, Signal1D
from wavelet_ecs.core.system import System
from wavelet_ecs.exceptions import (
    BugEncounteredError,
    DimensionMismatchError,
    InvalidArgumentError,
)
from wavelet_ecs.filterbank import analysis_1d, synthesis_1d
from wavelet_ecs.wavelets import Wavelet, get_wavelet

if TYPE_CHECKING:
    from wavelet_ecs.core.world import World

logger = logging.getLogger(__name__)


def check_levels(levels: Any) -> int:
    """Validate a decomposition level count."""
    if isinstance(levels, bool) or not isinstance(levels, (int, np.integer)):
        raise InvalidArgumentError(f"levels must be an integer, got {type(levels).__name__}")
    if levels < 1:
        raise InvalidArgumentError(f"levels must be >= 1, got {levels}")
    return int(levels)


def resolve_wavelet(coeff: Any, wavelet: str | Wavelet | None) -> Wavelet:
    """Pick the reconstruction wavelet for a pyramid.

    An override must have the same filter length as the wavelet the pyramid
    was built with; the stored coefficient lengths depend on it.
    """
    associated = coeff.associated_wavelet
    if wavelet is None:
        if associated is None:
            raise InvalidArgumentError("No wavelet given and none associated with the pyramid")
        return associated
    wavelet = get_wavelet(wavelet)
    if associated is not None and wavelet.filter_length != associated.filter_length:
        raise InvalidArgumentError(
            f"Wavelet {wavelet.name} has filter length {wavelet.filter_length}, "
            f"pyramid was built with {associated.name} (length {associated.filter_length})"
        )
    return wavelet


def decompose(signal: Any, levels: int, wavelet: str | Wavelet) -> DWT1DCoeff:
    """Multi-level 1D decomposition.

    Args:
        signal: Real sequence of length >= 2 (not modified)
        levels: Number of decomposition levels, >= 1
        wavelet: Wavelet descriptor or factory name

    Returns:
        DWT1DCoeff with `levels` (approximation, detail) pairs

    Raises:
        InvalidArgumentError: On a bad level count, input rank or length
    """
    levels = check_levels(levels)
    wavelet = get_wavelet(wavelet)
    current = np.asarray(signal, dtype=np.float64)
    length = current.shape[-1] if current.ndim else 0
    if current.ndim != 1:
        raise InvalidArgumentError(f"Expected a 1D signal, got shape {current.shape}")
    if length < 2:
        raise InvalidArgumentError(f"Signal length must be >= 2, got {length}")

    pairs = []
    even = []
    for level in range(1, levels + 1):
        even.append(current.shape[0] % 2 == 0)
        approx, detail = analysis_1d(current, wavelet)
        if approx.shape[0] == 1 and current.shape[0] > 1:
            logger.debug("Approximation collapsed to a single sample at level %d", level)
        pairs.append((approx, detail))
        current = approx

    coeff = DWT1DCoeff.from_arrays(pairs, even)
    coeff.assign_associated_wavelet(wavelet)
    logger.debug(
        "Decomposed length %d signal with %s over %d levels", length, wavelet.name, levels
    )
    return coeff


def reconstruct(coeff: DWT1DCoeff, wavelet: str | Wavelet | None = None) -> np.ndarray:
    """Inverse of decompose().

    The stored approximation of every level above the deepest is replaced
    by the running reconstruction, so edits to any approximation other than
    the deepest have no effect.

    Args:
        coeff: Coefficient pyramid
        wavelet: Override for the pyramid's associated wavelet (same filter length)

    Returns:
        Newly allocated sequence of the original length

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
            current = synthesis_1d(
                (coeff.access_approximate(level), coeff.access_detail(level)),
                wavelet,
                coeff.is_even(level),
            )
    except (InvalidArgumentError, DimensionMismatchError) as e:
        raise BugEncounteredError(f"Reconstruction failed at level {level}: {e}") from e

    logger.debug("Reconstructed length %d signal from %d levels", current.shape[0], levels)
    return current


class DWT1D(System):
    """1D wavelet decomposition/reconstruction system.

    Forward mode: Signal1D -> DWT1DCoeff
    Inverse mode: DWT1DCoeff -> ReconSignal1D
    """

    def __init__(
        self,
        levels: int | None = None,
        wavelet: str | Wavelet | None = None,
        mode: Literal["forward", "inverse"] = "forward",
    ):
        """Initialize 1D DWT system.

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
            return [Signal1D]
        return [DWT1DCoeff]

    def produced_components(self) -> list[type]:
        if self.mode == "forward":
            return [DWT1DCoeff]
        return [ReconSignal1D]

    def run(self, world: World, eids: list[int]) -> None:
        """Execute the transform on entities."""
        if self.mode == "forward":
            self._run_forward(world, eids)
        else:
            self._run_inverse(world, eids)

    def _run_forward(self, world: World, eids: list[int]) -> None:
        """Signal1D -> DWT1DCoeff."""
        assert self.levels is not None and self.wavelet is not None
        for eid in eids:
            signal = world.get_component(eid, Signal1D)
            samples = world.arena.view(signal.samples, writeable=False)
            world.add_component(eid, decompose(samples, self.levels, self.wavelet))

    def _run_inverse(self, world: World, eids: list[int]) -> None:
        """DWT1DCoeff -> ReconSignal1D."""
        for eid in eids:
            coeff = world.get_component(eid, DWT1DCoeff)
            recon = reconstruct(coeff, self.wavelet)
            world.add_component(eid, ReconSignal1D(samples=world.arena.copy_tensor(recon)))

    def __repr__(self) -> str:
        name = self.wavelet.name if self.wavelet is not None else None
        return f"DWT1D(levels={self.levels}, wavelet={name!r}, mode={self.mode})"
