#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SquigSim v0.1.0

Signal generation model dispatcher.

Maps model-family names to squiggle generators and implements the k-mer
lookup family. A squiggle is a float32 tensor of shape [n_kmers x 3] whose
columns are (current, stddev, dwell); dwell is expressed against a 4 kHz
reference rate.

When the requested k-mer size is smaller than the loaded model's, a coarser
table is derived by averaging contiguous blocks of 4^d finer entries. This
relies on the model rows being in base-4 lexicographic order, so that all
finer k-mers sharing a coarse prefix are adjacent.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

from __future__ import annotations
import logging
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

import numpy as np

from .kmer_model_loader import KmerModel, load_kmer_model, MIN_KMER_SIZE, MAX_KMER_SIZE
from .sequence_utils import NUM_BASES, encode_bases
from .tensor import Tensor
from ..errors import (
    InvalidBaseError,
    InvalidKmerSizeError,
    InvalidSampleRateError,
    SequenceTooShortError,
    UnimplementedModelFamilyError,
    UnsupportedUpscaleError,
)

logger = logging.getLogger(__name__)

REFERENCE_RATE_KHZ = 4.0
BASE_DWELL = 10.0  # samples per k-mer at the reference rate
SQUIGGLE_COLUMNS = 3


# ============================================================================
#                           MODEL TYPES AND PARAMETERS
# ============================================================================

class ModelType(Enum):
    """Signal generation model families."""
    KMER = "squiggle_kmer"
    R9_4 = "squiggle_r94"
    R9_4_RNA = "squiggle_r94_rna"
    R10 = "squiggle_r10"
    INVALID = "invalid"


@dataclass(frozen=True)
class KmerParams:
    """
    Parameters for the k-mer lookup family.

    Attributes:
        model_name: Model subdirectory, e.g. "dna_r10.4.1_e8.2_260bps"
        models_dir: Base directory holding the models
        kmer_size: Requested k-mer size (1-9)
        sample_rate_khz: Output sampling rate in kHz
        add_noise: Whether rendering should produce noisy raw samples
    """
    model_name: str = "rna_r9.4_180mv_70bps"
    models_dir: str = "kmer_models"
    kmer_size: int = 5
    sample_rate_khz: float = REFERENCE_RATE_KHZ
    add_noise: bool = True

    @property
    def model_type(self) -> ModelType:
        return ModelType.KMER


@dataclass(frozen=True)
class NeuralParams:
    """Reserved parameters for neural-network squiggle models."""
    model_path: str = ""
    family: ModelType = ModelType.R10

    @property
    def model_type(self) -> ModelType:
        return self.family


ModelParams = Union[KmerParams, NeuralParams]


# ============================================================================
#                               MODEL CACHE
# ============================================================================

class ModelCache:
    """
    Bounded LRU cache of loaded k-mer models.

    Keyed by "<models_dir>/<model_name>". With the default capacity of one,
    requesting a different model evicts the previous one.
    """

    def __init__(self, max_models: int = 1,
                 loader: Callable[[str, str], KmerModel] = load_kmer_model):
        if max_models < 1:
            raise ValueError(f"max_models must be >= 1, got {max_models}")
        self.max_models = max_models
        self._loader = loader
        self._models: 'OrderedDict[str, KmerModel]' = OrderedDict()
        self.loads = 0

    @staticmethod
    def make_key(models_dir: Union[str, Path], model_name: str) -> str:
        return f"{models_dir}/{model_name}"

    def get(self, models_dir: Union[str, Path], model_name: str) -> KmerModel:
        """Return the cached model, loading (and evicting) as needed."""
        key = self.make_key(models_dir, model_name)

        model = self._models.get(key)
        if model is not None:
            self._models.move_to_end(key)
            return model

        logger.debug(f"K-mer model cache miss: {key}")
        model = self._loader(models_dir, model_name)
        self.loads += 1
        self._models[key] = model

        while len(self._models) > self.max_models:
            evicted, _ = self._models.popitem(last=False)
            logger.debug(f"Evicted k-mer model from cache: {evicted}")

        return model

    def clear(self):
        self._models.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._models

    def __len__(self) -> int:
        return len(self._models)

    def __repr__(self) -> str:
        return f"ModelCache(max_models={self.max_models}, cached={list(self._models)})"


# ============================================================================
#                               DECIMATION
# ============================================================================

def decimate_table(table: np.ndarray, from_k: int, to_k: int) -> np.ndarray:
    """
    Reduce a 4^from_k table to 4^to_k entries by block averaging.

    Entry k of the result is the mean of entries [k * 4^d, (k + 1) * 4^d)
    of the input, with d = from_k - to_k.

    Args:
        table: Finer table, length 4^from_k
        from_k: K-mer size of the input table
        to_k: Target k-mer size (<= from_k)

    Returns:
        New float32 table of length 4^to_k
    """
    if to_k > from_k:
        raise UnsupportedUpscaleError(
            f"Requested k-mer size {to_k} larger than loaded model size {from_k}"
        )

    factor = NUM_BASES ** (from_k - to_k)
    blocks = np.asarray(table, dtype=np.float64).reshape(NUM_BASES ** to_k, factor)
    return blocks.mean(axis=1).astype(np.float32)


def _lookup_tables(model: KmerModel, kmer_size: int) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    if kmer_size == model.kmer_size:
        return model.level_mean, model.level_stddev

    if kmer_size > model.kmer_size:
        raise UnsupportedUpscaleError(
            f"Requested k-mer size {kmer_size} larger than loaded model size {model.kmer_size}"
        )

    logger.debug(f"Decimating {model.name} from {model.kmer_size}-mer to {kmer_size}-mer")
    mean = decimate_table(model.level_mean, model.kmer_size, kmer_size)
    stddev = None
    if model.level_stddev is not None:
        stddev = decimate_table(model.level_stddev, model.kmer_size, kmer_size)
    return mean, stddev


def dwell_for_rate(sample_rate_khz: float) -> float:
    """Per-event dwell for a sampling rate, relative to the 4 kHz reference."""
    return BASE_DWELL * (sample_rate_khz / REFERENCE_RATE_KHZ)


# ============================================================================
#                           K-MER LOOKUP MODEL
# ============================================================================

def squiggle_kmer(encoded: np.ndarray, params: KmerParams,
                  cache: Optional[ModelCache] = None) -> Tensor:
    """
    Generate a squiggle by k-mer table lookup.

    Slides a window of `params.kmer_size` over the encoded sequence, folds
    each window into a base-4 index and emits (current, stddev, dwell).

    Args:
        encoded: Integer base codes (0-3)
        params: K-mer model parameters
        cache: Model cache; a private single-use cache if None

    Returns:
        float32 Tensor of shape [len(encoded) - kmer_size + 1, 3]

    Raises:
        InvalidKmerSizeError: If kmer_size is outside [1, 9]
        SequenceTooShortError: If the sequence is shorter than kmer_size
        UnsupportedUpscaleError: If kmer_size exceeds the model's
        InvalidBaseError: If a code is outside 0-3
        ModelNotFoundError, ModelParseError: From model loading
    """
    kmer_size = params.kmer_size
    if not MIN_KMER_SIZE <= kmer_size <= MAX_KMER_SIZE:
        raise InvalidKmerSizeError(
            f"K-mer size {kmer_size} out of range [{MIN_KMER_SIZE}-{MAX_KMER_SIZE}]"
        )
    if params.sample_rate_khz <= 0:
        raise InvalidSampleRateError(
            f"Sampling rate must be positive, got {params.sample_rate_khz}"
        )

    encoded = np.asarray(encoded)
    length = len(encoded)
    if length < kmer_size:
        raise SequenceTooShortError(
            f"Sequence length {length} shorter than k-mer size {kmer_size}"
        )

    bad = np.flatnonzero((encoded < 0) | (encoded > NUM_BASES - 1))
    if bad.size:
        position = int(bad[0])
        raise InvalidBaseError(int(encoded[position]), position=position)

    if cache is None:
        cache = ModelCache()
    model = cache.get(params.models_dir, params.model_name)
    lookup_mean, lookup_stddev = _lookup_tables(model, kmer_size)

    windows = np.lib.stride_tricks.sliding_window_view(encoded.astype(np.int64), kmer_size)
    weights = NUM_BASES ** np.arange(kmer_size - 1, -1, -1, dtype=np.int64)
    indices = windows @ weights

    num_windows = length - kmer_size + 1
    squiggle = Tensor.create_float((num_windows, SQUIGGLE_COLUMNS))
    rows = squiggle.view()
    rows[:, 0] = lookup_mean[indices]
    if lookup_stddev is not None:
        rows[:, 1] = lookup_stddev[indices]
    else:
        rows[:, 1] = model.default_stddev
    rows[:, 2] = dwell_for_rate(params.sample_rate_khz)

    return squiggle


# ============================================================================
#                       NEURAL NETWORK MODELS (RESERVED)
# ============================================================================

def _neural_stub(label: str):
    def squiggle_neural(encoded: np.ndarray, params: ModelParams,
                        cache: Optional[ModelCache] = None) -> Tensor:
        raise UnimplementedModelFamilyError(
            f"Neural network model {label} not yet implemented"
        )
    squiggle_neural.__name__ = f"squiggle_{label.lower().replace('.', '').replace(' ', '_')}"
    return squiggle_neural


squiggle_r94 = _neural_stub("R9.4")
squiggle_r94_rna = _neural_stub("R9.4 RNA")
squiggle_r10 = _neural_stub("R10")


# ============================================================================
#                               DISPATCHER
# ============================================================================

SeqgenFunc = Callable[..., Tensor]

_SEQGEN_FUNCS = {
    ModelType.KMER: squiggle_kmer,
    ModelType.R9_4: squiggle_r94,
    ModelType.R9_4_RNA: squiggle_r94_rna,
    ModelType.R10: squiggle_r10,
}


def get_model_type(model_str: str) -> ModelType:
    """
    Map a model-family name to its ModelType.

    Example:
        >>> get_model_type("squiggle_kmer")
        <ModelType.KMER: 'squiggle_kmer'>
    """
    for model_type in ModelType:
        if model_type is not ModelType.INVALID and model_type.value == model_str:
            return model_type
    return ModelType.INVALID


def get_seqgen_func(model_type: ModelType) -> SeqgenFunc:
    """
    Return the squiggle generator for a model family.

    Raises:
        UnimplementedModelFamilyError: For INVALID or unknown model types
    """
    func = _SEQGEN_FUNCS.get(model_type)
    if func is None:
        raise UnimplementedModelFamilyError(f"Invalid squiggle model: {model_type!r}")
    return func


def sequence_to_squiggle(sequence: str, params: ModelParams,
                         cache: Optional[ModelCache] = None) -> Tensor:
    """
    Encode a base-letter sequence and dispatch it to its model family.

    Args:
        sequence: DNA sequence (upper or lower case ACGT)
        params: KmerParams or NeuralParams
        cache: Model cache shared across calls

    Returns:
        Squiggle tensor [n_kmers x 3]
    """
    encoded = encode_bases(sequence)
    func = get_seqgen_func(params.model_type)
    return func(encoded, params, cache)


__all__ = [
    'ModelType',
    'KmerParams',
    'NeuralParams',
    'ModelParams',
    'ModelCache',
    'decimate_table',
    'dwell_for_rate',
    'squiggle_kmer',
    'squiggle_r94',
    'squiggle_r94_rna',
    'squiggle_r10',
    'get_model_type',
    'get_seqgen_func',
    'sequence_to_squiggle',
]

# SquigSim v0.1.0
# Any usage is subject to this software's license.
