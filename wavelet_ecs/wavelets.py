"""Orthogonal wavelet descriptors and the wavelet factory.

A Wavelet bundles the four filter sequences of an orthogonal QMF bank:

    dec_lo, dec_hi  - analysis (decomposition) low/high pass
    rec_lo, rec_hi  - synthesis (reconstruction) low/high pass

Canonical descriptors are built from PyWavelets filter banks, which use
the same ordering convention as the engine (dec_hi is the alternating flip
of dec_lo, reconstruction filters are the time reverse of the analysis
filters).

Example:
    >>> w = get_wavelet("db2")
    >>> w.filter_length
    4
    >>> haar().dec_lo
    (0.7071067811865476, 0.7071067811865476)
"""

from __future__ import annotations

from functools import lru_cache

import numpy as np
import pywt
from pydantic import BaseModel, Field, model_validator

from wavelet_ecs.exceptions import InvalidArgumentError

# Named constants exposed by the factory, in family order
DAUBECHIES = ("db1", "db2", "db3", "db4", "db5", "db6")
ALIASES = {"haar": "db1"}


class Wavelet(BaseModel):
    """Immutable orthogonal wavelet descriptor.

    Attributes:
        name: Wavelet type label (e.g. 'db2', 'haar')
        dec_lo: Low-pass decomposition filter
        dec_hi: High-pass decomposition filter
        rec_lo: Low-pass reconstruction filter
        rec_hi: High-pass reconstruction filter

    The QMF pairing of the four filters is not verified; callers building
    their own descriptor must supply a matched set.
    """

    model_config = {"frozen": True}

    name: str
    dec_lo: tuple[float, ...] = Field(min_length=1)
    dec_hi: tuple[float, ...] = Field(min_length=1)
    rec_lo: tuple[float, ...] = Field(min_length=1)
    rec_hi: tuple[float, ...] = Field(min_length=1)

    @model_validator(mode="after")
    def check_lengths(self) -> "Wavelet":
        lengths = {len(self.dec_lo), len(self.dec_hi), len(self.rec_lo), len(self.rec_hi)}
        if len(lengths) != 1:
            raise ValueError(
                f"All four filters must have the same length, got "
                f"dec_lo={len(self.dec_lo)}, dec_hi={len(self.dec_hi)}, "
                f"rec_lo={len(self.rec_lo)}, rec_hi={len(self.rec_hi)}"
            )
        return self

    @property
    def filter_length(self) -> int:
        """Number of taps in each filter."""
        return len(self.dec_lo)

    def decomposition_filters(self) -> tuple[np.ndarray, np.ndarray]:
        """Return (dec_lo, dec_hi) as float64 arrays."""
        return np.asarray(self.dec_lo, dtype=np.float64), np.asarray(self.dec_hi, dtype=np.float64)

    def reconstruction_filters(self) -> tuple[np.ndarray, np.ndarray]:
        """Return (rec_lo, rec_hi) as float64 arrays."""
        return np.asarray(self.rec_lo, dtype=np.float64), np.asarray(self.rec_hi, dtype=np.float64)

    def __repr__(self) -> str:
        return f"Wavelet(name={self.name!r}, filter_length={self.filter_length})"


@lru_cache(maxsize=None)
def _from_pywt(pywt_name: str, label: str) -> Wavelet:
    try:
        source = pywt.Wavelet(pywt_name)
    except ValueError as e:
        raise InvalidArgumentError(f"Unknown wavelet '{label}'") from e
    if not source.orthogonal:
        raise InvalidArgumentError(
            f"Wavelet '{label}' is not orthogonal; only orthogonal QMF wavelets are supported"
        )
    dec_lo, dec_hi, rec_lo, rec_hi = source.filter_bank
    return Wavelet(name=label, dec_lo=dec_lo, dec_hi=dec_hi, rec_lo=rec_lo, rec_hi=rec_hi)


def get_wavelet(name: str | Wavelet) -> Wavelet:
    """Return the descriptor for a wavelet name.

    Accepts 'haar', 'db1'..'db6' and any other orthogonal PyWavelets name
    (e.g. 'sym4', 'coif2'). A Wavelet instance is returned unchanged.

    Raises:
        InvalidArgumentError: If the name is unknown or not orthogonal
    """
    if isinstance(name, Wavelet):
        return name
    if not isinstance(name, str):
        raise InvalidArgumentError(f"Expected wavelet name or Wavelet, got {type(name)}")
    label = name.strip().lower()
    return _from_pywt(ALIASES.get(label, label), label)


def available_wavelets() -> list[str]:
    """Names of the canonical descriptors exposed by the factory."""
    return ["haar", *DAUBECHIES]


def haar() -> Wavelet:
    """Haar wavelet (identical filters to db1)."""
    return get_wavelet("haar")


def db1() -> Wavelet:
    return get_wavelet("db1")


def db2() -> Wavelet:
    return get_wavelet("db2")


def db3() -> Wavelet:
    return get_wavelet("db3")


def db4() -> Wavelet:
    return get_wavelet("db4")


def db5() -> Wavelet:
    return get_wavelet("db5")


def db6() -> Wavelet:
    return get_wavelet("db6")
