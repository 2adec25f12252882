#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SquigSim v0.1.0

Tests for sequence encoding utilities.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

import numpy as np
import pytest

from squigsim.core.sequence_utils import (
    base_to_int,
    encode_bases,
    encode_kmers,
    extract_kmers,
    index_to_kmer,
    kmer_to_index,
    random_sequence,
    random_sequences,
)
from squigsim.errors import InvalidBaseError, SquigsimError


class TestBaseEncoding:
    """Test base letter to integer conversion."""

    def test_canonical_bases(self):
        assert [base_to_int(b) for b in "ACGT"] == [0, 1, 2, 3]

    def test_lowercase_accepted(self):
        assert [base_to_int(b) for b in "acgt"] == [0, 1, 2, 3]

    def test_lowercase_rejected_when_disallowed(self):
        with pytest.raises(InvalidBaseError):
            base_to_int('a', allow_lower=False)

    def test_ambiguous_base_rejected(self):
        """N is not part of the alphabet."""
        with pytest.raises(InvalidBaseError):
            base_to_int('N')

    def test_encode_sequence(self):
        encoded = encode_bases("GATTACA")

        assert encoded.dtype == np.int8
        assert encoded.tolist() == [2, 0, 3, 3, 0, 1, 0]

    def test_encode_reports_position(self):
        with pytest.raises(InvalidBaseError) as exc_info:
            encode_bases("ACGNT")

        assert exc_info.value.position == 3
        assert exc_info.value.base == 'N'
        assert "position 3" in str(exc_info.value)

    def test_invalid_base_is_value_error(self):
        """Callers catching ValueError or SquigsimError both see the failure."""
        with pytest.raises(ValueError):
            encode_bases("AXG")
        with pytest.raises(SquigsimError):
            encode_bases("AXG")


class TestKmerIndexing:
    """Test k-mer lexicographic indexing."""

    def test_kmer_to_index(self):
        assert kmer_to_index("ACTG") == 30
        assert kmer_to_index("AAAAA") == 0
        assert kmer_to_index("TTTTT") == 4 ** 5 - 1

    def test_index_to_kmer(self):
        assert index_to_kmer(30, 4) == "ACTG"
        assert index_to_kmer(0, 3) == "AAA"

    def test_index_out_of_range(self):
        with pytest.raises(ValueError):
            index_to_kmer(64, 3)

    def test_roundtrip_all_3mers(self):
        for index in range(64):
            assert kmer_to_index(index_to_kmer(index, 3)) == index

    def test_encode_kmers(self):
        indices = encode_kmers("GTCTGCCAGC", 3)

        assert indices.tolist() == [45, 55, 30, 57, 37, 20, 18, 9]

    def test_encode_kmers_too_short(self):
        assert encode_kmers("AC", 3).size == 0


class TestKmerExtraction:
    """Test k-mer extraction functions."""

    def test_basic_kmer_extraction(self):
        kmers = extract_kmers("ATCGATCG", 3)

        assert kmers == ["ATC", "TCG", "CGA", "GAT", "ATC", "TCG"]

    def test_kmer_count_correct(self):
        sequence = "ATCGATCG"
        k = 3

        kmers = extract_kmers(sequence, k)

        # Should have (length - k + 1) k-mers
        assert len(kmers) == len(sequence) - k + 1

    def test_kmer_larger_than_sequence(self):
        assert extract_kmers("ATG", 5) == []


class TestRandomSequences:
    """Test synthetic sequence generation."""

    def test_length_and_alphabet(self):
        sequence = random_sequence(200, np.random.default_rng(1))

        assert len(sequence) == 200
        assert set(sequence) <= set("ACGT")

    def test_seed_reproducible(self):
        assert random_sequences(50, 3, seed=42) == random_sequences(50, 3, seed=42)

    def test_different_seeds_differ(self):
        assert random_sequences(50, 1, seed=1) != random_sequences(50, 1, seed=2)

    def test_batch_count(self):
        batch = random_sequences(10, 4, seed=7)

        assert len(batch) == 4
        assert all(len(s) == 10 for s in batch)

# SquigSim v0.1.0
# Any usage is subject to this software's license.
