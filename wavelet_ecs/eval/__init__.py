from wavelet_ecs.eval.pyramid import (
    band_energies,
    band_energies_from_world,
    coefficient_length,
    estimate_noise_sigma,
    pyramid_shapes,
    pyramid_shapes_2d,
)

__all__ = [
    "band_energies",
    "band_energies_from_world",
    "coefficient_length",
    "estimate_noise_sigma",
    "pyramid_shapes",
    "pyramid_shapes_2d",
]
