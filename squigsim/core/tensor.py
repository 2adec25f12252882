#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SquigSim v0.1.0

N-dimensional tensor used to carry signal data between pipeline stages.

A Tensor owns a flat, zero-initialised numpy buffer and describes it with
a shape and element strides, so the same buffer can be viewed in row-major
(C) or column-major order. Integer tensors carry quantization metadata
(real_value = scale * (quantized - zero_point)).

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

from __future__ import annotations
import logging
from enum import Enum, IntFlag
from typing import Optional, Sequence, Tuple

import numpy as np

from ..errors import AllocationError, InvalidShapeError, TensorDTypeError

logger = logging.getLogger(__name__)

DEFAULT_ALIGNMENT = 16


# ============================================================================
#                           DATA TYPES AND FLAGS
# ============================================================================

class DType(Enum):
    """Element types supported by the tensor store."""
    INT8 = "int8"
    INT32 = "int32"
    FLT32 = "float32"

    @property
    def numpy_dtype(self) -> np.dtype:
        return np.dtype(self.value)

    @property
    def is_quantized(self) -> bool:
        return self in (DType.INT8, DType.INT32)


class TensorFlags(IntFlag):
    """Memory properties of a tensor buffer."""
    NONE = 0
    ALIGNED_16 = 0x1000
    OWNS_DATA = 0x8000


# ============================================================================
#                           ALLOCATION HELPERS
# ============================================================================

def calculate_c_strides(shape: Sequence[int]) -> Tuple[int, ...]:
    """
    Calculate C-order (row-major) element strides for a shape.

    Example:
        >>> calculate_c_strides((2, 3, 4))
        (12, 4, 1)
    """
    strides = [1] * len(shape)
    for i in range(len(shape) - 2, -1, -1):
        strides[i] = strides[i + 1] * shape[i + 1]
    return tuple(strides)


def _validate_shape(shape: Sequence[int]) -> Tuple[int, ...]:
    if shape is None or len(shape) == 0:
        raise InvalidShapeError("Tensor shape must have at least one dimension")

    checked = []
    for axis, extent in enumerate(shape):
        try:
            valid = int(extent) == extent and extent > 0
        except (TypeError, ValueError):
            valid = False
        if not valid:
            raise InvalidShapeError(
                f"Tensor dimension {axis} must be a positive integer, got {extent!r}"
            )
        checked.append(int(extent))
    return tuple(checked)


def _check_stride_bounds(shape: Tuple[int, ...], stride: Tuple[int, ...], size: int):
    # every index reachable through (shape, stride) must land inside the buffer
    if any(not isinstance(s, (int, np.integer)) or s <= 0 for s in stride):
        raise InvalidShapeError(f"Tensor strides must be positive integers, got {stride}")
    last = sum((extent - 1) * s for extent, s in zip(shape, stride))
    if last >= size:
        raise InvalidShapeError(
            f"Stride {stride} reaches element {last} of a {size}-element buffer"
        )


def allocate_aligned(num_elements: int, dtype: DType,
                     alignment: int = DEFAULT_ALIGNMENT) -> Tuple[np.ndarray, bool]:
    """
    Allocate a zeroed 1-D buffer, attempting to align its start address.

    Over-allocates by `alignment` bytes and slices at the first aligned
    offset. If the resulting view is not aligned (or the aligned path
    fails), falls back to a plain zeroed allocation.

    Args:
        num_elements: Number of elements
        dtype: Element type
        alignment: Requested byte alignment

    Returns:
        Tuple of (buffer, aligned) where aligned reports whether the
        buffer start address is a multiple of `alignment`

    Raises:
        AllocationError: If memory cannot be obtained
    """
    np_dtype = dtype.numpy_dtype
    nbytes = num_elements * np_dtype.itemsize

    try:
        raw = np.zeros(nbytes + alignment, dtype=np.uint8)
        offset = (-raw.ctypes.data) % alignment
        buffer = raw[offset:offset + nbytes].view(np_dtype)
        if buffer.ctypes.data % alignment == 0:
            return buffer, True
    except MemoryError:
        logger.debug(f"Aligned allocation of {nbytes} bytes failed, falling back")
    except ValueError:
        logger.debug("Aligned view not possible for this dtype, falling back")

    try:
        buffer = np.zeros(num_elements, dtype=np_dtype)
    except MemoryError as e:
        raise AllocationError(
            f"Failed to allocate {num_elements} x {dtype.value} tensor buffer"
        ) from e

    return buffer, buffer.ctypes.data % alignment == 0


# ============================================================================
#                               TENSOR
# ============================================================================

class Tensor:
    """
    Owned, typed, strided n-dimensional buffer.

    Attributes:
        shape: Dimension sizes
        stride: Element strides per dimension
        dtype: Element type
        scale: Quantization scale (1.0 for float tensors)
        zero_point: Quantization zero point (0 for float tensors)
        flags: TensorFlags describing the buffer
    """

    def __init__(self, shape: Sequence[int], dtype: DType = DType.FLT32,
                 scale: float = 1.0, zero_point: int = 0,
                 stride: Optional[Sequence[int]] = None):
        self.shape = _validate_shape(shape)
        self.dtype = dtype
        self.scale = float(scale)
        self.zero_point = int(zero_point)
        self.stride = tuple(stride) if stride is not None else calculate_c_strides(self.shape)

        if len(self.stride) != len(self.shape):
            raise InvalidShapeError(
                f"Stride {self.stride} does not match shape {self.shape}"
            )

        self.size = int(np.prod(self.shape, dtype=np.int64))
        _check_stride_bounds(self.shape, self.stride, self.size)
        self._data, aligned = allocate_aligned(self.size, dtype)

        self.flags = TensorFlags.OWNS_DATA
        if aligned:
            self.flags |= TensorFlags.ALIGNED_16

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def create_float(cls, shape: Sequence[int]) -> 'Tensor':
        """Create a zeroed float32 tensor with C-order strides."""
        return cls(shape, DType.FLT32)

    @classmethod
    def create_int8(cls, shape: Sequence[int], scale: float,
                    zero_point: int) -> 'Tensor':
        """Create a zeroed int8 quantized tensor."""
        return cls(shape, DType.INT8, scale=scale, zero_point=zero_point)

    @classmethod
    def create_int32(cls, shape: Sequence[int], scale: float,
                     zero_point: int) -> 'Tensor':
        """Create a zeroed int32 accumulator tensor."""
        return cls(shape, DType.INT32, scale=scale, zero_point=zero_point)

    @classmethod
    def create_2d_float_rm(cls, rows: int, cols: int) -> 'Tensor':
        """Row-major float matrix: element (i, j) lives at data[i * cols + j]."""
        return cls((rows, cols), DType.FLT32, stride=(cols, 1))

    @classmethod
    def create_2d_float_cm(cls, rows: int, cols: int) -> 'Tensor':
        """Column-major float matrix: element (i, j) lives at data[j * rows + i]."""
        return cls((rows, cols), DType.FLT32, stride=(1, rows))

    @classmethod
    def from_array(cls, array: np.ndarray) -> 'Tensor':
        """Create a float32 row-major tensor holding a copy of `array`."""
        array = np.asarray(array, dtype=np.float32)
        tensor = cls.create_float(array.shape)
        tensor.view()[...] = array
        return tensor

    # ------------------------------------------------------------------
    # Data access
    # ------------------------------------------------------------------

    def _require_dtype(self, expected: DType) -> np.ndarray:
        if self._data is None:
            raise InvalidShapeError("Tensor buffer has been released")
        if self.dtype is not expected:
            raise TensorDTypeError(
                f"Tensor holds {self.dtype.value} data, not {expected.value}"
            )
        return self._data

    def data_float(self) -> np.ndarray:
        """Flat float32 buffer."""
        return self._require_dtype(DType.FLT32)

    def data_int8(self) -> np.ndarray:
        """Flat int8 buffer."""
        return self._require_dtype(DType.INT8)

    def data_int32(self) -> np.ndarray:
        """Flat int32 buffer."""
        return self._require_dtype(DType.INT32)

    def view(self) -> np.ndarray:
        """
        Writable ndarray view over the buffer honouring shape and stride.

        Returns:
            ndarray of shape `self.shape` sharing memory with the tensor
        """
        data = self._require_dtype(self.dtype)
        itemsize = data.itemsize
        return np.lib.stride_tricks.as_strided(
            data,
            shape=self.shape,
            strides=tuple(s * itemsize for s in self.stride),
        )

    def dequantize(self) -> np.ndarray:
        """Real-valued float32 copy of the tensor contents."""
        values = self.view()
        if not self.dtype.is_quantized:
            return np.array(values, dtype=np.float32)
        return (self.scale * (values.astype(np.float32) - self.zero_point)).astype(np.float32)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def is_aligned(self) -> bool:
        return bool(self.flags & TensorFlags.ALIGNED_16)

    @property
    def owns_data(self) -> bool:
        return bool(self.flags & TensorFlags.OWNS_DATA)

    def dim(self, axis: int) -> int:
        """Size of dimension `axis`."""
        if axis < 0 or axis >= self.ndim:
            raise IndexError(f"Axis {axis} out of range for {self.ndim}-D tensor")
        return self.shape[axis]

    def total_size(self) -> int:
        return self.size

    def release(self):
        """Drop the owned buffer. The tensor is unusable afterwards."""
        self._data = None
        self.flags &= ~TensorFlags.OWNS_DATA

    def summary(self, max_elements: int = 10) -> str:
        """Shape, dtype and leading elements, for debugging."""
        if self._data is None:
            return f"Tensor dtype={self.dtype.value} shape={list(self.shape)} (released)"

        count = min(self.size, max_elements)
        if self.dtype is DType.FLT32:
            head = ' '.join(f"{v:.4f}" for v in self._data[:count])
        else:
            head = ' '.join(str(int(v)) for v in self._data[:count])

        lines = [
            f"Tensor dtype={self.dtype.value} shape={list(self.shape)} size={self.size}",
            f"  First {count} elements: {head}",
        ]
        if self.dtype.is_quantized:
            lines.append(f"  Quantization: scale={self.scale:.6f} zero_point={self.zero_point}")
        return '\n'.join(lines)

    def __repr__(self) -> str:
        return (f"Tensor(dtype={self.dtype.value}, shape={self.shape}, "
                f"stride={self.stride}, flags={int(self.flags):#06x})")


__all__ = [
    'DType',
    'TensorFlags',
    'Tensor',
    'allocate_aligned',
    'calculate_c_strides',
]

# SquigSim v0.1.0
# Any usage is subject to this software's license.
