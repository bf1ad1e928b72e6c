"""1D/2D Discrete Wavelet Transform toolkit with ECS architecture.

This package provides:
- Multi-level DWT decomposition and exact reconstruction with orthogonal
  QMF wavelets (Haar, Daubechies db1-db6 and other orthogonal families)
- Editable coefficient pyramids (DWT1DCoeff, DWT2DCoeff)
- Coefficient editing: soft/hard thresholding, NormalShrink denoising,
  gradient-driven fusion
- Entity-Component-System (ECS) pipelines over arena-backed buffers

Quick Start:
    >>> from wavelet_ecs import decompose, reconstruct
    >>> coeff = decompose(signal, levels=3, wavelet="db2")
    >>> restored = reconstruct(coeff)

For more control, use the fluent pipeline API:
    >>> from wavelet_ecs import World
    >>> from wavelet_ecs.systems.dwt2d import DWT2D
    >>> from wavelet_ecs.systems.threshold import NormalShrink
    >>>
    >>> world = World()
    >>> entity = world.spawn_image(img)
    >>> recon = (
    ...     world.pipe(entity)
    ...     .to(DWT2D(levels=2, wavelet="db4"))
    ...     .to(NormalShrink())
    ...     .to(DWT2D(mode="inverse"))
    ...     .out(ReconImage2D)
    ... )
"""

__version__ = "0.1.0"

from wavelet_ecs.api import denoise, fuse, get_pyramid_info, round_trip_error
from wavelet_ecs.components.coeffs import DWT1DCoeff, DWT2DCoeff
from wavelet_ecs.core.arena import Arena, TensorRef
from wavelet_ecs.core.world import World
from wavelet_ecs.exceptions import (
    BugEncounteredError,
    DimensionMismatchError,
    InvalidArgumentError,
)
from wavelet_ecs.systems.dwt1d import decompose, reconstruct
from wavelet_ecs.systems.dwt2d import decompose2d, reconstruct2d
from wavelet_ecs.wavelets import Wavelet, available_wavelets, get_wavelet

__all__ = [
    "__version__",
    "denoise",
    "fuse",
    "get_pyramid_info",
    "round_trip_error",
    "decompose",
    "reconstruct",
    "decompose2d",
    "reconstruct2d",
    "DWT1DCoeff",
    "DWT2DCoeff",
    "Wavelet",
    "available_wavelets",
    "get_wavelet",
    "World",
    "Arena",
    "TensorRef",
    "InvalidArgumentError",
    "DimensionMismatchError",
    "BugEncounteredError",
]
