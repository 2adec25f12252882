"""
SquigSim v0.1.0

Sequence-to-signal synthesis core.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

from .tensor import DType, Tensor, TensorFlags
from .sequence_utils import encode_bases, base_to_int, random_sequences
from .kmer_model_loader import KmerModel, load_kmer_model
from .seqgen_models import (
    KmerParams,
    ModelCache,
    ModelType,
    NeuralParams,
    get_model_type,
    get_seqgen_func,
    sequence_to_squiggle,
    squiggle_kmer,
)
from .signal_conversion import GaussianGenerator, squiggle_to_event, squiggle_to_raw
from .engine import SignalMode, SynthesisEngine, SynthesisResult

__all__ = [
    'DType',
    'Tensor',
    'TensorFlags',
    'encode_bases',
    'base_to_int',
    'random_sequences',
    'KmerModel',
    'load_kmer_model',
    'KmerParams',
    'ModelCache',
    'ModelType',
    'NeuralParams',
    'get_model_type',
    'get_seqgen_func',
    'sequence_to_squiggle',
    'squiggle_kmer',
    'GaussianGenerator',
    'squiggle_to_event',
    'squiggle_to_raw',
    'SignalMode',
    'SynthesisEngine',
    'SynthesisResult',
]
