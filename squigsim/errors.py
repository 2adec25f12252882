#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SquigSim v0.1.0

Exception hierarchy for the signal synthesis core.

Every failure raised by the core derives from SquigsimError so callers
(the CLI, batch drivers) can skip a single sequence and carry on.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""


class SquigsimError(Exception):
    """Base class for all synthesis errors."""
    pass


class ModelNotFoundError(SquigsimError):
    """Raised when no candidate k-mer model file can be opened."""
    pass


class ModelParseError(SquigsimError):
    """Raised when a k-mer model file is malformed or has the wrong row count."""
    pass


class InvalidKmerSizeError(SquigsimError):
    """Raised when a requested k-mer size is outside [1, 9]."""
    pass


class UnsupportedUpscaleError(InvalidKmerSizeError):
    """Raised when the requested k-mer size exceeds the loaded model's."""
    pass


class SequenceTooShortError(SquigsimError):
    """Raised when a sequence is shorter than the k-mer window."""
    pass


class InvalidBaseError(SquigsimError, ValueError):
    """Raised for symbols outside the ACGT alphabet."""

    def __init__(self, base, position=None):
        self.base = base
        self.position = position
        if position is None:
            message = f"Unrecognised base {base!r}"
        else:
            message = f"Unrecognised base {base!r} at position {position}"
        super().__init__(message)


class InvalidShapeError(SquigsimError, ValueError):
    """Raised when a tensor shape contract is violated."""
    pass


class TensorDTypeError(SquigsimError, TypeError):
    """Raised when a typed accessor is used on a tensor of another dtype."""
    pass


class AllocationError(SquigsimError, MemoryError):
    """Raised when a tensor buffer cannot be allocated."""
    pass


class UnimplementedModelFamilyError(SquigsimError, NotImplementedError):
    """Raised for unknown or not-yet-implemented model families."""
    pass


class InvalidSampleRateError(SquigsimError, ValueError):
    """Raised when a sampling rate is not strictly positive."""
    pass


__all__ = [
    'SquigsimError',
    'ModelNotFoundError',
    'ModelParseError',
    'InvalidKmerSizeError',
    'UnsupportedUpscaleError',
    'SequenceTooShortError',
    'InvalidBaseError',
    'InvalidShapeError',
    'TensorDTypeError',
    'AllocationError',
    'UnimplementedModelFamilyError',
    'InvalidSampleRateError',
]

# SquigSim v0.1.0
# Any usage is subject to this software's license.
