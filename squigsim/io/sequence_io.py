#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Sequence and signal text I/O for SquigSim.

- SequenceRecord: (name, sequence) pairs fed to the synthesizer
- FASTA/FASTQ reading via Biopython (gzip aware)
- Reference FASTA writing
- Tab-separated squiggle / raw / event table writers
"""

# =============================================================================
# SECTION 1: IMPORTS AND DEPENDENCIES
# =============================================================================

import gzip
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, TextIO, Union

from Bio import SeqIO

from ..core.tensor import Tensor

logger = logging.getLogger(__name__)

FASTQ_SUFFIXES = ('.fq', '.fastq')


# =============================================================================
# SECTION 2: RECORDS
# =============================================================================

@dataclass
class SequenceRecord:
    """
    Named base-letter sequence.

    Attributes:
        name: Read name (FASTA header id)
        sequence: Base letters
    """
    name: str
    sequence: str

    @property
    def length(self) -> int:
        return len(self.sequence)

    def to_fasta_string(self) -> str:
        return f">{self.name}\n{self.sequence}\n"

    def __len__(self) -> int:
        return len(self.sequence)


# =============================================================================
# SECTION 3: FILE HANDLING
# =============================================================================

def is_gzipped(filepath: Union[str, Path]) -> bool:
    """Check if file is gzip compressed (by suffix)."""
    return Path(filepath).suffix in ('.gz', '.gzip')


def open_file(filepath: Union[str, Path], mode: str = 'r') -> TextIO:
    """
    Open file with automatic gzip detection.

    Args:
        filepath: Path to file
        mode: File mode ('r' or 'w')

    Returns:
        File handle
    """
    filepath = Path(filepath)

    if is_gzipped(filepath):
        if 'r' in mode:
            return gzip.open(filepath, 'rt')
        else:
            return gzip.open(filepath, 'wt')
    else:
        return open(filepath, mode)


def detect_format(filepath: Union[str, Path]) -> str:
    """Return 'fastq' or 'fasta' from the file suffix (ignoring .gz)."""
    path = Path(filepath)
    suffix = Path(path.stem).suffix if is_gzipped(path) else path.suffix
    return 'fastq' if suffix.lower() in FASTQ_SUFFIXES else 'fasta'


# =============================================================================
# SECTION 4: SEQUENCE READING AND WRITING
# =============================================================================

def read_sequences(
    filepaths: Sequence[Union[str, Path]],
    limit: int = 0
) -> Iterator[SequenceRecord]:
    """
    Read sequences from FASTA/FASTQ files in order.

    Files that cannot be opened are skipped with a warning. The limit
    applies across all files.

    Args:
        filepaths: Input files
        limit: Maximum records to yield (0 = unlimited)

    Yields:
        SequenceRecord objects
    """
    yielded = 0

    for filepath in filepaths:
        filepath = Path(filepath)
        if not filepath.exists():
            logger.warning(f"Failed to open \"{filepath}\" for input")
            continue

        fmt = detect_format(filepath)
        with open_file(filepath, 'r') as handle:
            for record in SeqIO.parse(handle, fmt):
                if limit and yielded >= limit:
                    return
                yielded += 1
                yield SequenceRecord(name=record.id, sequence=str(record.seq))


def count_sequences(filepaths: Sequence[Union[str, Path]]) -> int:
    """Count records across all readable input files."""
    return sum(1 for _ in read_sequences(filepaths))


def write_fasta(
    records: Iterable[SequenceRecord],
    filepath: Union[str, Path],
    line_width: int = 0
) -> int:
    """
    Write records to a FASTA file.

    Args:
        records: Records to write
        filepath: Output FASTA path (gzipped if it ends in .gz)
        line_width: Bases per line (0 = no wrapping)

    Returns:
        Number of sequences written
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open_file(filepath, 'w') as handle:
        for record in records:
            if line_width > 0:
                handle.write(f">{record.name}\n")
                for i in range(0, len(record.sequence), line_width):
                    handle.write(record.sequence[i:i + line_width] + '\n')
            else:
                handle.write(record.to_fasta_string())

            count += 1

    return count


# =============================================================================
# SECTION 5: SIGNAL TABLES
# =============================================================================

def write_squiggle_table(handle: TextIO, record: SequenceRecord, squiggle: Tensor):
    """
    Write a squiggle as `pos base current sd dwell` rows.

    The base column is the first base of each k-mer window.
    """
    handle.write(f"#{record.name}\n")
    handle.write("pos\tbase\tcurrent\tsd\tdwell\n")

    rows = squiggle.view()
    for pos, (current, stddev, dwell) in enumerate(rows):
        handle.write(
            f"{pos}\t{record.sequence[pos]}\t{current:3.6f}\t{stddev:3.6f}\t{dwell:3.6f}\n"
        )


def write_signal_table(handle: TextIO, record: SequenceRecord, signal: Tensor,
                       column: str = 'raw_value'):
    """
    Write a [n x 1] signal as `sample_index <column>` rows.

    Args:
        handle: Output text stream
        record: Source record (its name heads the block)
        signal: Raw or event signal tensor
        column: Value column header ('raw_value' or 'event_value')
    """
    handle.write(f"#{record.name}\n")
    handle.write(f"sample_index\t{column}\n")

    for index, value in enumerate(signal.data_float()):
        handle.write(f"{index}\t{value:3.6f}\n")


__all__ = [
    'SequenceRecord',
    'open_file',
    'detect_format',
    'read_sequences',
    'count_sequences',
    'write_fasta',
    'write_squiggle_table',
    'write_signal_table',
]
