#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SquigSim v0.1.0

Squiggle to sample-level signal conversion.

- raw: each event expands to its sample count, every sample drawn as
  current + stddev * N(0, 1)
- event: the same sample counts, every sample equal to the event current

An event with dwell d at sampling rate r (kHz) spans ceil(d * r / 4) samples.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

from __future__ import annotations
import logging
import math
from typing import Optional, Tuple

import numpy as np

from .tensor import DType, Tensor
from .seqgen_models import REFERENCE_RATE_KHZ, SQUIGGLE_COLUMNS
from ..errors import InvalidSampleRateError, InvalidShapeError

logger = logging.getLogger(__name__)


# ============================================================================
#                       GAUSSIAN RANDOM NUMBER GENERATOR
# ============================================================================

class GaussianGenerator:
    """
    Standard-normal generator using the polar Box-Muller transform.

    Each transform yields two independent draws; the second is kept as a
    spare and returned by the next call. State lives on the instance, so
    separate generators never interfere and a seed reproduces a stream.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)
        self._spare: Optional[float] = None

    def next(self) -> float:
        """One standard-normal draw."""
        if self._spare is not None:
            value, self._spare = self._spare, None
            return value

        while True:
            u = self._rng.random() * 2.0 - 1.0
            v = self._rng.random() * 2.0 - 1.0
            s = u * u + v * v
            if 0.0 < s < 1.0:
                break

        factor = math.sqrt(-2.0 * math.log(s) / s)
        self._spare = v * factor
        return u * factor

    def sample(self, n: int) -> np.ndarray:
        """`n` consecutive draws as a float64 array."""
        return np.fromiter((self.next() for _ in range(n)), dtype=np.float64, count=n)

    def reseed(self, seed: Optional[int]):
        self.seed = seed
        self._rng = np.random.default_rng(seed)
        self._spare = None


# ============================================================================
#                               SAMPLE COUNTS
# ============================================================================

def samples_per_event(dwell: np.ndarray, sample_rate_khz: float) -> np.ndarray:
    """
    Number of output samples for each event.

    Args:
        dwell: Per-event dwell values (4 kHz reference units)
        sample_rate_khz: Output sampling rate

    Returns:
        int64 array of ceil(dwell * sample_rate_khz / 4)
    """
    scaled = np.asarray(dwell, dtype=np.float64) * (sample_rate_khz / REFERENCE_RATE_KHZ)
    return np.ceil(scaled).astype(np.int64)


def _validate_squiggle(squiggle: Tensor, sample_rate_khz: float) -> Tuple[np.ndarray, np.ndarray]:
    if squiggle is None or squiggle.ndim != 2 or squiggle.shape[1] != SQUIGGLE_COLUMNS:
        shape = None if squiggle is None else list(squiggle.shape)
        raise InvalidShapeError(f"Invalid squiggle tensor {shape} (expected [n x 3])")
    if squiggle.dtype is not DType.FLT32:
        raise InvalidShapeError(f"Squiggle tensor must be float32, got {squiggle.dtype.value}")
    if sample_rate_khz <= 0:
        raise InvalidSampleRateError(f"Sampling rate must be positive, got {sample_rate_khz}")

    events = squiggle.view()
    counts = samples_per_event(events[:, 2], sample_rate_khz)
    if np.any(counts < 0):
        raise InvalidShapeError("Squiggle contains negative dwell values")
    return events, counts


def _allocate_signal(total_samples: int) -> Tensor:
    if total_samples <= 0:
        raise InvalidShapeError("Squiggle produces no samples")
    return Tensor.create_float((total_samples, 1))


# ============================================================================
#                               CONVERTERS
# ============================================================================

def squiggle_to_raw(squiggle: Tensor, sample_rate_khz: float,
                    generator: Optional[GaussianGenerator] = None) -> Tensor:
    """
    Convert squiggle events to a noisy raw signal.

    Args:
        squiggle: float32 Tensor [n x 3] of (current, stddev, dwell)
        sample_rate_khz: Output sampling rate in kHz
        generator: Gaussian source; an unseeded one if None

    Returns:
        float32 Tensor [total_samples x 1]

    Raises:
        InvalidShapeError: If the squiggle is not [n x 3] float32
        InvalidSampleRateError: If the sampling rate is not positive
    """
    events, counts = _validate_squiggle(squiggle, sample_rate_khz)
    total_samples = int(counts.sum())
    raw = _allocate_signal(total_samples)

    if generator is None:
        generator = GaussianGenerator()

    current = np.repeat(events[:, 0].astype(np.float64), counts)
    stddev = np.repeat(events[:, 1].astype(np.float64), counts)
    noise = generator.sample(total_samples)

    raw.data_float()[:] = current + stddev * noise

    logger.debug(f"Raw signal: {len(counts)} events -> {total_samples} samples")
    return raw


def squiggle_to_event(squiggle: Tensor, sample_rate_khz: float) -> Tensor:
    """
    Convert squiggle events to a piecewise-constant signal (no noise).

    Sample counts match squiggle_to_raw for the same inputs.

    Args:
        squiggle: float32 Tensor [n x 3] of (current, stddev, dwell)
        sample_rate_khz: Output sampling rate in kHz

    Returns:
        float32 Tensor [total_samples x 1]
    """
    events, counts = _validate_squiggle(squiggle, sample_rate_khz)
    total_samples = int(counts.sum())
    event = _allocate_signal(total_samples)

    event.data_float()[:] = np.repeat(events[:, 0], counts)

    logger.debug(f"Event signal: {len(counts)} events -> {total_samples} samples")
    return event


__all__ = [
    'GaussianGenerator',
    'samples_per_event',
    'squiggle_to_raw',
    'squiggle_to_event',
]

# SquigSim v0.1.0
# Any usage is subject to this software's license.
