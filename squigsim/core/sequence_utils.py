#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SquigSim v0.1.0

Sequence utility functions for signal synthesis.

Encodes base letters to the integers 0-3 (A, C, G, T), converts k-mers to
their base-4 lexicographic index and back, and generates random synthetic
sequences.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

from typing import List, Optional

import numpy as np

from ..errors import InvalidBaseError

BASES = 'ACGT'
NUM_BASES = 4

_BASE_CODES = {base: code for code, base in enumerate(BASES)}


def base_to_int(base: str, allow_lower: bool = True) -> int:
    """
    Convert a nucleotide letter to its integer code.

    Ambiguous bases (N, IUPAC codes) are rejected.

    Args:
        base: Single nucleotide character
        allow_lower: Whether lowercase letters are accepted

    Returns:
        0 for A, 1 for C, 2 for G, 3 for T

    Raises:
        InvalidBaseError: If the symbol is not recognised

    Example:
        >>> base_to_int('g')
        2
    """
    if allow_lower:
        base = base.upper()
    code = _BASE_CODES.get(base)
    if code is None:
        raise InvalidBaseError(base)
    return code


def encode_bases(sequence: str, allow_lower: bool = True) -> np.ndarray:
    """
    Encode a base-letter sequence as an int8 array of codes 0-3.

    Args:
        sequence: DNA sequence string
        allow_lower: Whether lowercase letters are accepted

    Returns:
        numpy int8 array of the same length as `sequence`

    Raises:
        InvalidBaseError: On the first unrecognised symbol, with its position
    """
    encoded = np.empty(len(sequence), dtype=np.int8)
    for i, base in enumerate(sequence):
        try:
            encoded[i] = base_to_int(base, allow_lower)
        except InvalidBaseError:
            raise InvalidBaseError(base, position=i) from None
    return encoded


def kmer_to_index(kmer: str) -> int:
    """
    Convert a k-mer to its lexicographic index (leftmost base most significant).

    Example:
        >>> kmer_to_index("ACTG")
        30
    """
    index = 0
    for base in kmer:
        index = index * NUM_BASES + base_to_int(base)
    return index


def index_to_kmer(index: int, k: int) -> str:
    """
    Convert a lexicographic index back to a k-mer of length k.

    Example:
        >>> index_to_kmer(30, 4)
        'ACTG'
    """
    if index < 0 or index >= NUM_BASES ** k:
        raise ValueError(f"Index {index} out of range for k={k}")

    letters = []
    for _ in range(k):
        letters.append(BASES[index % NUM_BASES])
        index //= NUM_BASES
    return ''.join(reversed(letters))


def extract_kmers(sequence: str, k: int) -> List[str]:
    """
    Extract all k-mers from a sequence.

    Example:
        >>> extract_kmers("GTCTGC", 3)
        ['GTC', 'TCT', 'CTG', 'TGC']
    """
    if k > len(sequence):
        return []

    sequence = sequence.upper()
    return [sequence[i:i + k] for i in range(len(sequence) - k + 1)]


def encode_kmers(sequence: str, k: int) -> np.ndarray:
    """
    Encode every k-mer window of a sequence as its lexicographic index.

    Example:
        >>> encode_kmers("GTCTGCCAGC", 3).tolist()
        [45, 55, 30, 57, 37, 20, 18, 9]
    """
    codes = encode_bases(sequence).astype(np.int64)
    if k > len(codes):
        return np.empty(0, dtype=np.int64)

    windows = np.lib.stride_tricks.sliding_window_view(codes, k)
    weights = NUM_BASES ** np.arange(k - 1, -1, -1, dtype=np.int64)
    return windows @ weights


def random_sequence(length: int, rng: Optional[np.random.Generator] = None) -> str:
    """
    Generate a random DNA sequence of uniformly drawn A, C, G, T bases.

    Args:
        length: Number of bases
        rng: numpy Generator (a fresh unseeded one if None)

    Returns:
        Random sequence string
    """
    if rng is None:
        rng = np.random.default_rng()
    codes = rng.integers(0, NUM_BASES, size=length)
    return ''.join(BASES[c] for c in codes)


def random_sequences(length: int, count: int, seed: Optional[int] = None) -> List[str]:
    """
    Generate `count` random sequences of `length` bases.

    The same seed always yields the same batch.
    """
    rng = np.random.default_rng(seed)
    return [random_sequence(length, rng) for _ in range(count)]


__all__ = [
    'BASES',
    'base_to_int',
    'encode_bases',
    'kmer_to_index',
    'index_to_kmer',
    'extract_kmers',
    'encode_kmers',
    'random_sequence',
    'random_sequences',
]

# SquigSim v0.1.0
# Any usage is subject to this software's license.
