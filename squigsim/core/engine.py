#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SquigSim v0.1.0

Synthesis engine: the per-context owner of the model cache and the noise
generator. One engine per thread; engines share nothing.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .seqgen_models import KmerParams, ModelCache, ModelParams, sequence_to_squiggle
from .signal_conversion import GaussianGenerator, squiggle_to_event, squiggle_to_raw
from .tensor import Tensor

logger = logging.getLogger(__name__)


class SignalMode(Enum):
    """Output representation of a synthesized read."""
    SQUIGGLE = "squiggle"
    RAW = "raw"
    EVENT = "event"


@dataclass
class SynthesisResult:
    """Squiggle plus the rendered signal (None in squiggle mode)."""
    squiggle: Tensor
    signal: Optional[Tensor]
    mode: SignalMode

    @property
    def num_events(self) -> int:
        return self.squiggle.dim(0)

    @property
    def num_samples(self) -> int:
        return 0 if self.signal is None else self.signal.dim(0)


class SynthesisEngine:
    """
    Sequence-to-signal pipeline with explicit state.

    Args:
        cache: Model cache (a fresh single-slot cache if None)
        generator: Gaussian noise source (seeded from `seed` if None)
        seed: Seed for the default generator
    """

    def __init__(self, cache: Optional[ModelCache] = None,
                 generator: Optional[GaussianGenerator] = None,
                 seed: Optional[int] = None):
        self.cache = cache if cache is not None else ModelCache()
        self.generator = generator if generator is not None else GaussianGenerator(seed)

    def squiggle(self, sequence: str, params: ModelParams) -> Tensor:
        """Sequence letters to a [n_kmers x 3] squiggle."""
        return sequence_to_squiggle(sequence, params, self.cache)

    def render(self, squiggle: Tensor, params: KmerParams,
               mode: Optional[SignalMode] = None) -> Optional[Tensor]:
        """
        Expand a squiggle into samples.

        Without an explicit mode, params.add_noise selects raw over event.
        """
        if mode is None:
            mode = SignalMode.RAW if params.add_noise else SignalMode.EVENT

        if mode is SignalMode.RAW:
            return squiggle_to_raw(squiggle, params.sample_rate_khz, self.generator)
        if mode is SignalMode.EVENT:
            return squiggle_to_event(squiggle, params.sample_rate_khz)
        return None

    def synthesize(self, sequence: str, params: KmerParams,
                   mode: Optional[SignalMode] = None) -> SynthesisResult:
        """Full pipeline for one sequence."""
        squiggle = self.squiggle(sequence, params)
        if mode is None:
            mode = SignalMode.RAW if params.add_noise else SignalMode.EVENT
        signal = self.render(squiggle, params, mode)
        return SynthesisResult(squiggle=squiggle, signal=signal, mode=mode)


__all__ = ['SignalMode', 'SynthesisResult', 'SynthesisEngine']

# SquigSim v0.1.0
# Any usage is subject to this software's license.
