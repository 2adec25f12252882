#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SquigSim v0.1.0

K-mer model loader for Oxford Nanopore current-level tables.

A model lives in `<models_dir>/<model_name>/` under one of a fixed list of
historical filenames. Two text layouts are understood:

- Modern: no header, two columns `kmer level_mean`. No per-k-mer stddev is
  stored, so a single default of 1.5 is used for every k-mer.
- Legacy: a header line starting with `kmer`, then
  `kmer level_mean level_stdv [sd_mean sd_stdv ig_lambda weight]`.

Rows are expected in base-4 lexicographic k-mer order. The k-mer strings
themselves are not checked against the row position.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO, Tuple, Union

import numpy as np

from ..errors import ModelNotFoundError, ModelParseError

logger = logging.getLogger(__name__)

# Searched in this order; the first file that opens wins
MODEL_FILENAMES = (
    "9mer_levels_v1.txt",
    "5mer_levels_v1.txt",
    "template_median68pA.model",
    "template_median69pA.model",
)

MODERN_DEFAULT_STDDEV = 1.5
MIN_KMER_SIZE = 1
MAX_KMER_SIZE = 9

LEGACY_HEADER_TOKEN = "kmer"
LEGACY_MIN_COLUMNS = 3
LEGACY_MAX_COLUMNS = 7


# ============================================================================
#                           MODEL DATA STRUCTURE
# ============================================================================

@dataclass
class KmerModel:
    """
    Per-k-mer current statistics.

    Attributes:
        name: Model identifier (directory name under models_dir)
        kmer_size: K-mer length (1-9)
        level_mean: Mean current per k-mer, length 4^kmer_size
        level_stddev: Current stddev per k-mer, or None (modern format)
        default_stddev: Fallback stddev used when level_stddev is None
        sd_mean, sd_stdv, ig_lambda, weight: Legacy extras, parsed but unused
        source_path: File the model was read from
        is_legacy: Whether the legacy layout was detected
    """
    name: str
    kmer_size: int
    level_mean: np.ndarray
    level_stddev: Optional[np.ndarray] = None
    default_stddev: float = 0.0
    sd_mean: Optional[np.ndarray] = None
    sd_stdv: Optional[np.ndarray] = None
    ig_lambda: Optional[np.ndarray] = None
    weight: Optional[np.ndarray] = None
    source_path: Optional[Path] = None
    is_legacy: bool = False

    @property
    def num_kmers(self) -> int:
        return 4 ** self.kmer_size

    @property
    def has_stddev(self) -> bool:
        return self.level_stddev is not None

    def stddev_for(self, index: int) -> float:
        """Noise magnitude for one k-mer index."""
        if self.level_stddev is not None:
            return float(self.level_stddev[index])
        return self.default_stddev

    def summary(self) -> str:
        fmt = "legacy" if self.is_legacy else "modern"
        first = ', '.join(f"{v:.4f}" for v in self.level_mean[:3])
        lines = [
            f"Model: {self.name} ({fmt} format)",
            f"  Source: {self.source_path}",
            f"  K-mer size: {self.kmer_size} ({self.num_kmers} k-mers)",
            f"  First means: {first}",
        ]
        if self.has_stddev:
            lines.append(f"  First stddevs: {', '.join(f'{v:.4f}' for v in self.level_stddev[:3])}")
        else:
            lines.append(f"  Default stddev: {self.default_stddev}")
        return '\n'.join(lines)


# ============================================================================
#                               FILE LOOKUP
# ============================================================================

def find_model_file(models_dir: Union[str, Path], model_name: str) -> Path:
    """
    Locate the first readable candidate model file.

    Args:
        models_dir: Base directory holding one subdirectory per model
        model_name: Model subdirectory name (may contain '/')

    Returns:
        Path to the model file

    Raises:
        ModelNotFoundError: If none of MODEL_FILENAMES can be opened
    """
    model_dir = Path(models_dir) / model_name

    for filename in MODEL_FILENAMES:
        candidate = model_dir / filename
        try:
            with open(candidate, 'r'):
                pass
        except OSError:
            continue
        logger.debug(f"Found k-mer model file: {candidate}")
        return candidate

    raise ModelNotFoundError(f"Could not find k-mer model in {model_dir}")


# ============================================================================
#                               PARSING
# ============================================================================

def _data_lines(handle: TextIO) -> List[Tuple[int, List[str]]]:
    """Split non-empty lines into (line_number, columns)."""
    rows = []
    try:
        for line_number, line in enumerate(handle, start=1):
            columns = line.split()
            if columns:
                rows.append((line_number, columns))
    except UnicodeDecodeError as e:
        raise ModelParseError(f"K-mer model is not valid text: {e}") from e
    return rows


def _parse_float(token: str, line_number: int) -> float:
    try:
        return float(token)
    except ValueError:
        raise ModelParseError(
            f"Non-numeric value {token!r} at line {line_number}"
        ) from None


def _kmer_size_from(token: str) -> int:
    kmer_size = len(token)
    if not MIN_KMER_SIZE <= kmer_size <= MAX_KMER_SIZE:
        raise ModelParseError(
            f"K-mer {token!r} has length {kmer_size}, expected {MIN_KMER_SIZE}-{MAX_KMER_SIZE}"
        )
    return kmer_size


def _check_row_count(found: int, expected: int):
    if found != expected:
        raise ModelParseError(f"Expected {expected} k-mers, found {found}")


def _parse_modern(name: str, rows: List[Tuple[int, List[str]]]) -> KmerModel:
    kmer_size = _kmer_size_from(rows[0][1][0])
    num_kmers = 4 ** kmer_size
    _check_row_count(len(rows), num_kmers)

    level_mean = np.zeros(num_kmers, dtype=np.float32)
    for i, (line_number, columns) in enumerate(rows):
        if len(columns) < 2:
            raise ModelParseError(f"Parse error at line {line_number}: expected 'kmer level_mean'")
        level_mean[i] = _parse_float(columns[1], line_number)

    return KmerModel(
        name=name,
        kmer_size=kmer_size,
        level_mean=level_mean,
        level_stddev=None,
        default_stddev=MODERN_DEFAULT_STDDEV,
    )


def _parse_legacy(name: str, rows: List[Tuple[int, List[str]]]) -> KmerModel:
    # rows[0] is the header
    data = rows[1:]
    if not data:
        raise ModelParseError("No data after header in k-mer model")

    kmer_size = _kmer_size_from(data[0][1][0])
    num_kmers = 4 ** kmer_size
    _check_row_count(len(data), num_kmers)

    # level_mean, level_stddev, sd_mean, sd_stdv, ig_lambda, weight
    table = np.zeros((LEGACY_MAX_COLUMNS - 1, num_kmers), dtype=np.float32)
    for i, (line_number, columns) in enumerate(data):
        if len(columns) < LEGACY_MIN_COLUMNS:
            raise ModelParseError(
                f"Parse error at legacy line {line_number} (got {len(columns)} columns)"
            )
        for j, token in enumerate(columns[1:LEGACY_MAX_COLUMNS]):
            table[j, i] = _parse_float(token, line_number)

    return KmerModel(
        name=name,
        kmer_size=kmer_size,
        level_mean=table[0].copy(),
        level_stddev=table[1].copy(),
        default_stddev=0.0,
        sd_mean=table[2].copy(),
        sd_stdv=table[3].copy(),
        ig_lambda=table[4].copy(),
        weight=table[5].copy(),
        is_legacy=True,
    )


def parse_kmer_model(handle: TextIO, name: str) -> KmerModel:
    """
    Parse an open k-mer model file, auto-detecting its layout.

    Args:
        handle: Text stream positioned at the start of the file
        name: Model name recorded on the result

    Returns:
        Parsed KmerModel

    Raises:
        ModelParseError: On an empty file, bad columns or a row count
            different from 4^kmer_size
    """
    rows = _data_lines(handle)
    if not rows:
        raise ModelParseError("Empty k-mer model file")

    is_legacy = rows[0][1][0].startswith(LEGACY_HEADER_TOKEN)
    if is_legacy:
        return _parse_legacy(name, rows)
    return _parse_modern(name, rows)


def load_kmer_model(models_dir: Union[str, Path], model_name: str) -> KmerModel:
    """
    Load a k-mer model by directory and name.

    Args:
        models_dir: Base models directory
        model_name: Model name, e.g. "dna_r10.4.1_e8.2_260bps"

    Returns:
        Loaded KmerModel

    Raises:
        ModelNotFoundError: If no candidate file exists
        ModelParseError: If the file cannot be parsed
    """
    path = find_model_file(models_dir, model_name)

    with open(path, 'r', encoding='utf-8') as f:
        model = parse_kmer_model(f, model_name)
    model.source_path = path

    logger.info(
        f"Loaded k-mer model {model_name}: {model.kmer_size}-mer, "
        f"{model.num_kmers} k-mers ({'legacy' if model.is_legacy else 'modern'} format)"
    )
    return model


__all__ = [
    'MODEL_FILENAMES',
    'MODERN_DEFAULT_STDDEV',
    'KmerModel',
    'find_model_file',
    'parse_kmer_model',
    'load_kmer_model',
]

# SquigSim v0.1.0
# Any usage is subject to this software's license.
