"""Analysis/synthesis filter banks for one DWT level.

1D analysis (one level):
    y = periodic_convolve(s, h)      length n + L - 1
    c = downsample(y)                odd samples y[1], y[3], ...

1D synthesis (one level):
    z = periodic_convolve(upsample(a), rec_lo) + periodic_convolve(upsample(d), rec_hi)
    s = centered_extract(z, L, even)

The convolution wraps the input modulo its own length, so no zero-padding
energy is lost at the borders. Together with the centered extract this is
an exact inverse for orthogonal QMF filters, including odd lengths.

The 2D bank applies the 1D steps separably: rows first, then columns (via
transpose) for analysis, columns first then rows for synthesis. All
operations work on the last axis so a 2D array is filtered row by row.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from wavelet_ecs.exceptions import DimensionMismatchError, InvalidArgumentError
from wavelet_ecs.wavelets import Wavelet


def periodic_convolve(data: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """Linear convolution along the last axis with circular extension.

    out[..., x] = sum_k data[..., (x - k) mod n] * kernel[k],  x in [0, n + L - 1)

    Args:
        data: Array (..., n), n >= 1
        kernel: 1D filter of length L >= 1

    Returns:
        Array (..., n + L - 1)
    """
    n = data.shape[-1]
    taps = kernel.shape[0]
    if n < 1 or taps < 1:
        raise InvalidArgumentError(f"Cannot convolve length {n} with {taps} taps")
    # index[x, k] = (x - k) mod n
    index = (np.arange(n + taps - 1)[:, None] - np.arange(taps)[None, :]) % n
    return np.take(data, index, axis=-1) @ kernel


def downsample(data: np.ndarray) -> np.ndarray:
    """Keep odd samples along the last axis.

    Outputs of length <= 2 collapse to their first sample.
    """
    length = data.shape[-1]
    if length <= 2:
        return data[..., :1].copy()
    return data[..., 1::2][..., : length // 2].copy()


def upsample(data: np.ndarray) -> np.ndarray:
    """Place samples at odd positions of a zero array twice as long."""
    out = np.zeros(data.shape[:-1] + (2 * data.shape[-1],), dtype=np.float64)
    out[..., 1::2] = data
    return out


def extract_length(total: int, filter_length: int, even: bool) -> int:
    """Length of the centered extract that undoes the analysis padding."""
    return total - 2 * filter_length + (3 if even else 2)


def centered_extract(data: np.ndarray, filter_length: int, even: bool) -> np.ndarray:
    """Drop the convolution padding along the last axis.

    Starts at filter_length - 1 and keeps extract_length() samples.
    """
    total = data.shape[-1]
    start = filter_length - 1
    length = extract_length(total, filter_length, even)
    if length < 1 or start + length > total:
        raise InvalidArgumentError(
            f"Cannot extract {length} samples at offset {start} from length {total}"
        )
    return data[..., start : start + length].copy()


def analysis_1d(signal: np.ndarray, wavelet: Wavelet) -> tuple[np.ndarray, np.ndarray]:
    """One decomposition level of a 1D sequence.

    Returns:
        (approximation, detail), each of length (n + L - 1) // 2
    """
    dec_lo, dec_hi = wavelet.decomposition_filters()
    approx = downsample(periodic_convolve(signal, dec_lo))
    detail = downsample(periodic_convolve(signal, dec_hi))
    return approx, detail


def synthesis_1d(pair: Sequence[np.ndarray], wavelet: Wavelet, even: bool) -> np.ndarray:
    """One reconstruction level from an (approximation, detail) pair.

    Args:
        pair: Exactly two equal-length sequences
        wavelet: Descriptor used for decomposition
        even: Whether the sequence fed to decomposition had even length

    Raises:
        InvalidArgumentError: If pair does not hold exactly two sequences
        DimensionMismatchError: If the two sequences differ in length
    """
    if len(pair) != 2:
        raise InvalidArgumentError(f"Expected (approximation, detail) pair, got {len(pair)} items")
    approx, detail = (np.asarray(p, dtype=np.float64) for p in pair)
    if approx.shape != detail.shape:
        raise DimensionMismatchError(
            f"Approximation {approx.shape} and detail {detail.shape} differ"
        )
    rec_lo, rec_hi = wavelet.reconstruction_filters()
    summed = periodic_convolve(upsample(approx), rec_lo) + periodic_convolve(upsample(detail), rec_hi)
    return centered_extract(summed, wavelet.filter_length, even)


def _analyse_rows(grid: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    return downsample(periodic_convolve(grid, kernel))


def _synthesise_rows(grid: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    return periodic_convolve(upsample(grid), kernel)


def analysis_2d(
    grid: np.ndarray, wavelet: Wavelet
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """One decomposition level of a 2D grid.

    Returns:
        (approximation, horizontal, vertical, diagonal), i.e.
        (low/low, high rows/low cols, low rows/high cols, high/high)
    """
    dec_lo, dec_hi = wavelet.decomposition_filters()

    rows_lo = _analyse_rows(grid, dec_lo)
    rows_hi = _analyse_rows(grid, dec_hi)

    approx = _analyse_rows(rows_lo.T, dec_lo).T
    vertical = _analyse_rows(rows_lo.T, dec_hi).T
    horizontal = _analyse_rows(rows_hi.T, dec_lo).T
    diagonal = _analyse_rows(rows_hi.T, dec_hi).T

    return (
        np.ascontiguousarray(approx),
        np.ascontiguousarray(horizontal),
        np.ascontiguousarray(vertical),
        np.ascontiguousarray(diagonal),
    )


def synthesis_2d(
    bands: Sequence[np.ndarray],
    wavelet: Wavelet,
    even_rows: bool,
    even_cols: bool,
) -> np.ndarray:
    """One reconstruction level from four subbands.

    Args:
        bands: (approximation, horizontal, vertical, diagonal), equal shapes
        wavelet: Descriptor used for decomposition
        even_rows: Whether the decomposed grid had an even row count
        even_cols: Whether the decomposed grid had an even column count

    Raises:
        InvalidArgumentError: If bands does not hold exactly four grids
        DimensionMismatchError: If the subbands differ in shape
    """
    if len(bands) != 4:
        raise InvalidArgumentError(f"Expected 4 subbands, got {len(bands)}")
    approx, horizontal, vertical, diagonal = (np.asarray(b, dtype=np.float64) for b in bands)
    shapes = {approx.shape, horizontal.shape, vertical.shape, diagonal.shape}
    if len(shapes) != 1 or approx.ndim != 2:
        raise DimensionMismatchError(f"Subbands must be equal 2D grids, got shapes {sorted(shapes)}")

    rec_lo, rec_hi = wavelet.reconstruction_filters()

    # Columns first: undo the column split within each row band
    approx = _synthesise_rows(approx.T, rec_lo).T
    horizontal = _synthesise_rows(horizontal.T, rec_lo).T
    vertical = _synthesise_rows(vertical.T, rec_hi).T
    diagonal = _synthesise_rows(diagonal.T, rec_hi).T

    rows_lo = approx + vertical
    rows_hi = horizontal + diagonal

    summed = _synthesise_rows(rows_lo, rec_lo) + _synthesise_rows(rows_hi, rec_hi)

    length = wavelet.filter_length
    summed = centered_extract(summed, length, even_cols)
    return np.ascontiguousarray(centered_extract(summed.T, length, even_rows).T)
