"""
I/O module for SquigSim: sequence input and signal table output.
"""

from .sequence_io import (
    SequenceRecord,
    read_sequences,
    count_sequences,
    write_fasta,
    write_squiggle_table,
    write_signal_table,
)

__all__ = [
    'SequenceRecord',
    'read_sequences',
    'count_sequences',
    'write_fasta',
    'write_squiggle_table',
    'write_signal_table',
]
