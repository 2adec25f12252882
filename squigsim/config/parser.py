#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SquigSim v0.1.0

Configuration parser: layers a YAML file and command-line overrides on top
of DEFAULT_CONFIG and turns the result into synthesis parameters.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

import copy
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .schema import DEFAULT_CONFIG, deep_merge, validate_config
from ..core.seqgen_models import KmerParams

logger = logging.getLogger(__name__)

# ${NAME} or ${NAME:-fallback}
ENV_PATTERN = re.compile(r'\$\{(?P<name>[^}:]+)(?::-(?P<fallback>[^}]*))?\}')


class ConfigValidationError(Exception):
    """Raised when a configuration file cannot be read or fails validation."""
    pass


def expand_env(value: Any) -> Any:
    """
    Expand ${NAME} / ${NAME:-fallback} references in every string of a
    nested dict/list structure. Unset names without a fallback become ''.
    """
    if isinstance(value, dict):
        return {key: expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    if isinstance(value, str):
        return ENV_PATTERN.sub(
            lambda m: os.environ.get(m.group('name'), m.group('fallback') or ''),
            value,
        )
    return value


class ConfigParser:
    """
    Layered SquigSim configuration.

    Precedence, lowest to highest: DEFAULT_CONFIG, the YAML file (after
    environment expansion), then merge_cli_overrides(). Values are read with
    dotted keys such as 'signal.sample_rate_khz'.

    Args:
        config_file: Optional YAML file path
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        self.config_file = Path(config_file) if config_file else None
        self._config: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_file is not None:
            self._config = deep_merge(self._config, self._read_file(self.config_file))

    @staticmethod
    def _read_file(path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in config file {path}: {e}") from e

        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise ConfigValidationError(f"Config file {path} must contain a mapping")

        logger.debug(f"Loaded configuration file: {path}")
        return expand_env(loaded)

    def merge_cli_overrides(self, overrides: Mapping[str, Any]):
        """
        Apply dotted-key overrides (e.g. {'model.kmer_size': 9}).

        Keys mapped to None are ignored, so options the user did not pass
        leave the file or default value in place.
        """
        for dotted, value in overrides.items():
            if value is None:
                continue
            *parents, leaf = dotted.split('.')
            section = self._config
            for name in parents:
                section = section.setdefault(name, {})
            section[leaf] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key; `default` if any level is missing."""
        node: Any = self._config
        for name in key.split('.'):
            if not isinstance(node, dict) or name not in node:
                return default
            node = node[name]
        return node

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._config)

    def validate(self) -> bool:
        """
        Raise ConfigValidationError listing every problem found, or return True.
        """
        problems = validate_config(self._config)
        if problems:
            raise ConfigValidationError(
                "Configuration validation failed:\n  " + "\n  ".join(problems)
            )
        return True

    def to_model_params(self) -> KmerParams:
        """K-mer model parameters for the configured model and signal mode."""
        return KmerParams(
            model_name=self.get('model.name'),
            models_dir=str(self.get('model.models_dir')),
            kmer_size=int(self.get('model.kmer_size')),
            sample_rate_khz=float(self.get('signal.sample_rate_khz')),
            add_noise=self.get('signal.mode') != 'event',
        )

    def __repr__(self) -> str:
        return f"ConfigParser(config_file={self.config_file})"

# SquigSim v0.1.0
# Any usage is subject to this software's license.
