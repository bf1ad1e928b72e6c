"""Arena allocator and TensorRef handles for numeric buffers.

Signals, grids and coefficient subbands are stored in a single contiguous
bytearray per Arena. Components hold TensorRefs (offset, shape, dtype,
generation) rather than arrays, so a component can be copied around
without duplicating samples and every array handed out is a view.

- alloc_tensor() bumps the allocation offset, aligned to the dtype
- view() returns a numpy view, optionally read-only
- write() overwrites an allocation in place after a shape check
- reset() invalidates every TensorRef handed out so far

Example:
    >>> arena = Arena.for_shapes([(8,), (4, 4)])
    >>> ref = arena.copy_tensor(np.arange(8.0))
    >>> arena.view(ref, writeable=False)[0]
    0.0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

import numpy as np

DEFAULT_DTYPE = np.dtype(np.float64)


@dataclass(frozen=True)
class TensorRef:
    """Handle to a C-contiguous tensor stored in an Arena.

    Attributes:
        offset: Byte offset into the arena buffer
        shape: Tensor dimensions
        dtype: NumPy data type
        generation: Arena generation the allocation belongs to
    """

    offset: int
    shape: tuple[int, ...]
    dtype: np.dtype
    generation: int

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError(f"offset must be non-negative, got {self.offset}")
        if any(dim < 0 for dim in self.shape):
            raise ValueError(f"shape must be non-negative, got {self.shape}")
        if self.generation < 0:
            raise ValueError(f"generation must be non-negative, got {self.generation}")

    @property
    def ndim(self) -> int:
        """Number of dimensions."""
        return len(self.shape)

    @property
    def size(self) -> int:
        """Total number of elements."""
        return int(np.prod(self.shape, dtype=np.int64))

    @property
    def nbytes(self) -> int:
        """Total number of bytes."""
        return self.size * self.dtype.itemsize


def required_bytes(shapes: Iterable[tuple[int, ...]], dtype: Any = DEFAULT_DTYPE) -> int:
    """Bytes needed to allocate every shape in order, alignment included."""
    dt = np.dtype(dtype)
    offset = 0
    for shape in shapes:
        offset = _align(offset, dt.alignment)
        offset += int(np.prod(shape, dtype=np.int64)) * dt.itemsize
    return offset


def _align(offset: int, alignment: int) -> int:
    return (offset + alignment - 1) // alignment * alignment


class Arena:
    """Contiguous bump allocator for tensors.

    Attributes:
        size: Total arena size in bytes
        offset: Bytes allocated so far
        generation: Incremented on reset() to invalidate old TensorRefs
    """

    def __init__(self, size_bytes: int):
        """Create arena with specified size.

        Args:
            size_bytes: Total size in bytes
        """
        if size_bytes <= 0:
            raise ValueError(f"size_bytes must be positive, got {size_bytes}")

        self._buffer = bytearray(size_bytes)
        self._size = size_bytes
        self._offset = 0
        self._generation = 0

    @classmethod
    def for_shapes(cls, shapes: Iterable[tuple[int, ...]], dtype: Any = DEFAULT_DTYPE) -> Arena:
        """Create an arena exactly large enough for the given allocations."""
        return cls(size_bytes=max(required_bytes(shapes, dtype), 1))

    @property
    def size(self) -> int:
        """Total arena size in bytes."""
        return self._size

    @property
    def offset(self) -> int:
        """Current allocation offset (bytes used)."""
        return self._offset

    @property
    def generation(self) -> int:
        """Current generation counter."""
        return self._generation

    @property
    def available(self) -> int:
        """Remaining bytes available for allocation."""
        return self._size - self._offset

    def reset(self) -> None:
        """Release every allocation. Existing TensorRefs become stale."""
        self._offset = 0
        self._generation += 1

    def alloc_tensor(self, shape: tuple[int, ...], dtype: Any = DEFAULT_DTYPE) -> TensorRef:
        """Allocate an uninitialised tensor.

        Raises:
            ValueError: If the allocation would exceed the arena size
        """
        dt = np.dtype(dtype)
        shape = tuple(int(dim) for dim in shape)
        nbytes = int(np.prod(shape, dtype=np.int64)) * dt.itemsize

        aligned_offset = _align(self._offset, dt.alignment)
        end_offset = aligned_offset + nbytes
        if end_offset > self._size:
            raise ValueError(
                f"Arena out of memory: need {nbytes} bytes at offset {aligned_offset}, "
                f"but arena size is {self._size} (available: {self.available})"
            )

        ref = TensorRef(offset=aligned_offset, shape=shape, dtype=dt, generation=self._generation)
        self._offset = end_offset
        return ref

    def view(self, ref: TensorRef, writeable: bool = True) -> np.ndarray:
        """NumPy view of the tensor behind a TensorRef (no copy).

        Args:
            ref: Handle returned by this arena
            writeable: If False the returned view rejects writes

        Raises:
            ValueError: If the ref is stale or points outside the arena
        """
        if ref.generation != self._generation:
            raise ValueError(
                f"Stale TensorRef: arena was reset (current generation {self._generation}, "
                f"ref is from generation {ref.generation})"
            )
        if ref.offset + ref.nbytes > self._size:
            raise ValueError(
                f"TensorRef out of bounds: offset={ref.offset}, nbytes={ref.nbytes}, "
                f"arena size={self._size}"
            )

        arr = np.ndarray(shape=ref.shape, dtype=ref.dtype, buffer=self._buffer, offset=ref.offset)
        if not writeable:
            arr.flags.writeable = False
        return arr

    def copy_tensor(self, arr: np.ndarray, dtype: Any = None) -> TensorRef:
        """Allocate a tensor and copy data into it.

        Args:
            arr: Array-like to copy
            dtype: Storage dtype (defaults to the array's own dtype)
        """
        arr = np.asarray(arr, dtype=dtype)
        ref = self.alloc_tensor(arr.shape, arr.dtype)
        self.view(ref)[...] = arr
        return ref

    def write(self, ref: TensorRef, values: np.ndarray) -> None:
        """Overwrite an allocation in place.

        Raises:
            ValueError: If values do not have exactly the ref's shape
        """
        values = np.asarray(values)
        if values.shape != ref.shape:
            raise ValueError(f"Shape {values.shape} does not match allocation {ref.shape}")
        self.view(ref)[...] = values

    def __repr__(self) -> str:
        return (
            f"Arena(size={self._size}, offset={self._offset}, "
            f"generation={self._generation}, available={self.available})"
        )
