"""Wavelet coefficient pyramid components.

A pyramid stores, for every decomposition level 1..L, the subbands the
filter bank produced at that level plus the parity of the input that was
decomposed. Reconstruction needs both: the subbands feed the synthesis
filter bank and the parity selects the length of the centered extract.

Storage lives in a private Arena sized exactly for the pyramid, so a
pyramid survives World.clear() and can be passed between worlds.

Accessors return copies. Setters check the level range and the
exact shape before writing in place; a rejected assignment leaves the
pyramid untouched.

Level layout:
    DWT1DCoeff: (approximation, detail)
    DWT2DCoeff: (approximation, horizontal, vertical, diagonal)
"""

from __future__ import annotations

from typing import Any, ClassVar, Iterator, Sequence

import numpy as np
from pydantic import Field, model_validator

from wavelet_ecs.components.base import Component
from wavelet_ecs.core.arena import Arena, TensorRef
from wavelet_ecs.exceptions import DimensionMismatchError, InvalidArgumentError
from wavelet_ecs.wavelets import Wavelet


class _CoeffPyramid(Component):
    """Shared storage and bounds checking for 1D and 2D pyramids."""

    BAND_NAMES: ClassVar[tuple[str, ...]] = ()

    arena: Arena
    bands: list[list[TensorRef]] = Field(min_length=1)
    wavelet: Wavelet | None = None

    @model_validator(mode="after")
    def check_layout(self) -> "_CoeffPyramid":
        width = len(self.BAND_NAMES)
        for index, level in enumerate(self.bands, start=1):
            if len(level) != width:
                raise ValueError(f"Level {index} holds {len(level)} subbands, expected {width}")
            if len({ref.shape for ref in level}) != 1:
                raise ValueError(f"Level {index} subbands differ in shape")
        return self

    @classmethod
    def _store(cls, levels: Sequence[Sequence[np.ndarray]]) -> tuple[Arena, list[list[TensorRef]]]:
        arrays = [[np.asarray(band, dtype=np.float64) for band in level] for level in levels]
        arena = Arena.for_shapes(band.shape for level in arrays for band in level)
        return arena, [[arena.copy_tensor(band) for band in level] for level in arrays]

    def get_decomposition_level(self) -> int:
        """Number of decomposition levels L."""
        return len(self.bands)

    @property
    def associated_wavelet(self) -> Wavelet | None:
        """Wavelet used to compute this pyramid."""
        return self.wavelet

    def assign_associated_wavelet(self, wavelet: Wavelet) -> None:
        """Attach the wavelet used for decomposition. Can be done once.

        Raises:
            InvalidArgumentError: If a different wavelet is already attached
        """
        if self.wavelet is not None and self.wavelet != wavelet:
            raise InvalidArgumentError(
                f"Pyramid already bound to wavelet '{self.wavelet.name}'"
            )
        self.wavelet = wavelet

    def _check_level(self, level: int) -> None:
        if isinstance(level, bool) or not isinstance(level, (int, np.integer)):
            raise InvalidArgumentError(f"Level must be an integer, got {type(level).__name__}")
        if not 1 <= level <= len(self.bands):
            raise InvalidArgumentError(
                f"Level must be in [1, {len(self.bands)}], got {level}"
            )

    def _band_index(self, name: str) -> int:
        try:
            return self.BAND_NAMES.index(name)
        except ValueError as e:
            raise InvalidArgumentError(
                f"Unknown subband '{name}', expected one of {self.BAND_NAMES}"
            ) from e

    def access_band(self, level: int, name: str) -> np.ndarray:
        """Copy of one subband; later assignments do not change it.

        Raises:
            InvalidArgumentError: If level is outside [1, L] or name unknown
        """
        self._check_level(level)
        ref = self.bands[level - 1][self._band_index(name)]
        return self.arena.view(ref, writeable=False).copy()

    def assign_band(self, coeff: Any, level: int, name: str) -> None:
        """Overwrite one subband in place.

        Raises:
            InvalidArgumentError: If level is outside [1, L] or name unknown
            DimensionMismatchError: If coeff does not have the stored shape
        """
        self._check_level(level)
        ref = self.bands[level - 1][self._band_index(name)]
        values = np.asarray(coeff, dtype=np.float64)
        if values.shape != ref.shape:
            raise DimensionMismatchError(
                f"Level {level} {name} has shape {ref.shape}, got {values.shape}"
            )
        self.arena.write(ref, values)

    def level_shape(self, level: int) -> tuple[int, ...]:
        """Shape shared by every subband of a level."""
        self._check_level(level)
        return self.bands[level - 1][0].shape

    def _arrays(self) -> list[list[np.ndarray]]:
        return [[self.arena.view(ref).copy() for ref in level] for level in self.bands]

    def __repr__(self) -> str:
        name = self.wavelet.name if self.wavelet is not None else None
        return f"{type(self).__name__}(levels={len(self.bands)}, wavelet={name!r})"


class DWT1DCoeff(_CoeffPyramid):
    """1D DWT coefficient pyramid.

    Attributes:
        arena: Private storage for every coefficient sequence
        bands: Per level [approximation, detail] TensorRefs
        even: Per level, whether the decomposed sequence had even length
        wavelet: Wavelet used for decomposition
    """

    BAND_NAMES: ClassVar[tuple[str, ...]] = ("approximation", "detail")

    even: list[bool]

    @model_validator(mode="after")
    def check_parity(self) -> "DWT1DCoeff":
        if len(self.even) != len(self.bands):
            raise ValueError(f"Expected {len(self.bands)} parity flags, got {len(self.even)}")
        return self

    @classmethod
    def from_arrays(
        cls,
        levels: Sequence[tuple[np.ndarray, np.ndarray]],
        even: Sequence[bool],
        wavelet: Wavelet | None = None,
    ) -> DWT1DCoeff:
        """Build a pyramid from per-level (approximation, detail) arrays."""
        arena, bands = cls._store(levels)
        return cls(arena=arena, bands=bands, even=list(even), wavelet=wavelet)

    def access_approximate(self, level: int) -> np.ndarray:
        """Approximation coefficients of a level (copy)."""
        return self.access_band(level, "approximation")

    def access_detail(self, level: int) -> np.ndarray:
        """Detail coefficients of a level (copy)."""
        return self.access_band(level, "detail")

    def assign_approximate(self, coeff: Any, level: int) -> None:
        """Replace a level's approximation; length must match exactly."""
        self.assign_band(coeff, level, "approximation")

    def assign_detail(self, coeff: Any, level: int) -> None:
        """Replace a level's detail; length must match exactly."""
        self.assign_band(coeff, level, "detail")

    def is_even(self, level: int) -> bool:
        """Whether the sequence decomposed at this level had even length."""
        self._check_level(level)
        return self.even[level - 1]

    def detail_bands(self) -> Iterator[tuple[int, np.ndarray]]:
        """Yield (level, detail) from level 1 to L."""
        for level in range(1, len(self.bands) + 1):
            yield level, self.access_detail(level)

    def clone(self) -> DWT1DCoeff:
        """Deep copy with independent storage."""
        return DWT1DCoeff.from_arrays(self._arrays(), self.even, self.wavelet)


class DWT2DCoeff(_CoeffPyramid):
    """2D DWT coefficient pyramid.

    Attributes:
        arena: Private storage for every subband
        bands: Per level [approximation, horizontal, vertical, diagonal] TensorRefs
        even: Per level (row_even, col_even) parity of the decomposed grid
        wavelet: Wavelet used for decomposition
    """

    BAND_NAMES: ClassVar[tuple[str, ...]] = ("approximation", "horizontal", "vertical", "diagonal")
    DETAIL_NAMES: ClassVar[tuple[str, ...]] = ("horizontal", "vertical", "diagonal")

    even: list[tuple[bool, bool]]

    @model_validator(mode="after")
    def check_parity(self) -> "DWT2DCoeff":
        if len(self.even) != len(self.bands):
            raise ValueError(f"Expected {len(self.bands)} parity flags, got {len(self.even)}")
        for index, level in enumerate(self.bands, start=1):
            if level[0].ndim != 2:
                raise ValueError(f"Level {index} subbands must be 2D, got {level[0].shape}")
        return self

    @classmethod
    def from_arrays(
        cls,
        levels: Sequence[tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]],
        even: Sequence[tuple[bool, bool]],
        wavelet: Wavelet | None = None,
    ) -> DWT2DCoeff:
        """Build a pyramid from per-level (LL, HL, LH, HH) arrays."""
        arena, bands = cls._store(levels)
        return cls(arena=arena, bands=bands, even=[tuple(flags) for flags in even], wavelet=wavelet)

    def access_approximate(self, level: int) -> np.ndarray:
        return self.access_band(level, "approximation")

    def access_horizontal(self, level: int) -> np.ndarray:
        return self.access_band(level, "horizontal")

    def access_vertical(self, level: int) -> np.ndarray:
        return self.access_band(level, "vertical")

    def access_diagonal(self, level: int) -> np.ndarray:
        return self.access_band(level, "diagonal")

    def assign_approximate(self, coeff: Any, level: int) -> None:
        self.assign_band(coeff, level, "approximation")

    def assign_horizontal(self, coeff: Any, level: int) -> None:
        self.assign_band(coeff, level, "horizontal")

    def assign_vertical(self, coeff: Any, level: int) -> None:
        self.assign_band(coeff, level, "vertical")

    def assign_diagonal(self, coeff: Any, level: int) -> None:
        self.assign_band(coeff, level, "diagonal")

    def parity(self, level: int) -> tuple[bool, bool]:
        """(row_even, col_even) of the grid decomposed at this level."""
        self._check_level(level)
        return self.even[level - 1]

    def detail_bands(self) -> Iterator[tuple[int, str, np.ndarray]]:
        """Yield (level, subband name, band) for every detail subband."""
        for level in range(1, len(self.bands) + 1):
            for name in self.DETAIL_NAMES:
                yield level, name, self.access_band(level, name)

    def clone(self) -> DWT2DCoeff:
        """Deep copy with independent storage."""
        return DWT2DCoeff.from_arrays(self._arrays(), self.even, self.wavelet)
