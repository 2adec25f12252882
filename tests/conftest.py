#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SquigSim v0.1.0

Pytest configuration and shared fixtures.

Model fixtures write small synthetic k-mer tables laid out the same way as
the real Oxford Nanopore model directories.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

import itertools
from pathlib import Path

import pytest

MODERN_MODEL = "rna_r9.4_180mv_70bps"
FINE_MODEL = "dna_r10.4.1_e8.2_260bps"
LEGACY_MODEL = "legacy/legacy_3mer"

LEGACY_HEADER = "kmer\tlevel_mean\tlevel_stdv\tsd_mean\tsd_stdv\tig_lambda\tweight\n"


def modern_level(index):
    """Current level written for k-mer `index` of the modern 5-mer model."""
    return 70.0 + (index % 64) * 0.25


def legacy_level(index):
    return 50.0 + index


def legacy_stddev(index):
    return 1.0 + (index % 4) * 0.5


def all_kmers(k):
    """Every k-mer in base-4 lexicographic order."""
    return (''.join(p) for p in itertools.product('ACGT', repeat=k))


def write_modern_model(models_dir, name, k, level, filename="5mer_levels_v1.txt"):
    model_dir = Path(models_dir) / name
    model_dir.mkdir(parents=True, exist_ok=True)
    path = model_dir / filename
    with open(path, 'w') as f:
        for index, kmer in enumerate(all_kmers(k)):
            f.write(f"{kmer}\t{level(index)}\n")
    return path


def write_legacy_model(models_dir, name, k, filename="template_median68pA.model"):
    model_dir = Path(models_dir) / name
    model_dir.mkdir(parents=True, exist_ok=True)
    path = model_dir / filename
    with open(path, 'w') as f:
        f.write(LEGACY_HEADER)
        for index, kmer in enumerate(all_kmers(k)):
            f.write(
                f"{kmer}\t{legacy_level(index)}\t{legacy_stddev(index)}"
                f"\t0.8\t0.1\t7.0\t{100 + index}\n"
            )
    return path


@pytest.fixture
def models_dir(tmp_path):
    """Models directory holding a modern 5-mer and a legacy 3-mer model."""
    root = tmp_path / "kmer_models"
    write_modern_model(root, MODERN_MODEL, 5, modern_level)
    write_legacy_model(root, LEGACY_MODEL, 3)
    return root


@pytest.fixture(scope="session")
def fine_models_dir(tmp_path_factory):
    """
    Models directory holding a full 9-mer model (262144 rows).

    Each level equals its k-mer index so decimated means are easy to predict.
    """
    root = tmp_path_factory.mktemp("fine_models")
    write_modern_model(root, FINE_MODEL, 9, float, filename="9mer_levels_v1.txt")
    return root


@pytest.fixture
def simple_fasta(tmp_path):
    """FASTA file with two short reads."""
    path = tmp_path / "reads.fa"
    path.write_text(">read1\nACGTACGTACGT\n>read2\nGGGTTTCCCAAAGT\n")
    return path


@pytest.fixture
def simple_fastq(tmp_path):
    """FASTQ file with two short reads."""
    path = tmp_path / "reads.fastq"
    path.write_text(
        "@read1\nACGTACGTACGT\n+\nIIIIIIIIIIII\n"
        "@read2\nGCTAGCTAGCTA\n+\nIIIIIIIIIIII\n"
    )
    return path

# SquigSim v0.1.0
# Any usage is subject to this software's license.
