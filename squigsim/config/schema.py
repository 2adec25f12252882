"""
SquigSim v0.1.0

Configuration schema for SquigSim.

Defines all available configuration parameters with defaults and validation.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

import copy
from typing import Dict, Any, Optional, List
from pathlib import Path
import yaml


# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # Signal Model
    # ========================================================================
    'model': {
        'family': 'squiggle_kmer',  # 'squiggle_kmer' (neural families reserved)
        'name': 'rna_r9.4_180mv_70bps',  # Small 5-mer model
        'models_dir': 'kmer_models',
        'kmer_size': 5,  # 1-9, must not exceed the loaded model's k
    },

    # ========================================================================
    # Signal Rendering
    # ========================================================================
    'signal': {
        'sample_rate_khz': 4.0,
        'mode': 'squiggle',  # 'squiggle', 'raw', 'event'
        'seed': None,  # Seed for sequence generation and noise
    },

    # ========================================================================
    # Synthetic Sequence Generation
    # ========================================================================
    'generate': {
        'seq_length': 100,
        'num_sequences': 1,
        'prefix': '',  # Prepended to each read name
        'limit': 0,  # Max reads processed (0 = unlimited)
    },

    # ========================================================================
    # Model Cache
    # ========================================================================
    'cache': {
        'max_models': 1,
    },

    # ========================================================================
    # Logging
    # ========================================================================
    'logging': {
        'level': 'INFO',  # 'DEBUG', 'INFO', 'WARNING', 'ERROR'
        'log_file': None,
    },
}

VALID_FAMILIES = ['squiggle_kmer', 'squiggle_r94', 'squiggle_r94_rna', 'squiggle_r10']
VALID_MODES = ['squiggle', 'raw', 'event']
VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
TEMPLATES = ['default', 'r9_rna', 'r10_dna', 'legacy']


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Path to YAML config file (None = use defaults)

    Returns:
        Configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                user_config = yaml.safe_load(f)

            if user_config:
                if not isinstance(user_config, dict):
                    raise ValueError(f"Config file {config_path} must contain a mapping")
                config = deep_merge(config, user_config)

    return config


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def save_config_template(output_path: Path, template: str = 'default'):
    """
    Save a configuration template to file.

    Args:
        output_path: Output file path
        template: Template type ('default', 'r9_rna', 'r10_dna', 'legacy')
    """
    if template not in TEMPLATES:
        raise ValueError(f"Unknown template: {template}")

    config = copy.deepcopy(DEFAULT_CONFIG)

    # Customize for specific templates
    if template == 'r9_rna':
        config['model']['name'] = 'rna_r9.4_180mv_70bps'
        config['model']['kmer_size'] = 5

    elif template == 'r10_dna':
        config['model']['name'] = 'dna_r10.4.1_e8.2_260bps'
        config['model']['kmer_size'] = 9
        config['signal']['sample_rate_khz'] = 5.0
        config['signal']['mode'] = 'raw'

    elif template == 'legacy':
        config['model']['name'] = 'legacy/legacy_r9.4_180mv_450bps_6mer'
        config['model']['kmer_size'] = 6

    with open(output_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    model = config.get('model', {})
    if model.get('family') not in VALID_FAMILIES:
        errors.append(f"Invalid model family: {model.get('family')}")

    kmer_size = model.get('kmer_size')
    if not isinstance(kmer_size, int) or not 1 <= kmer_size <= 9:
        errors.append(f"Invalid kmer_size: must be an integer in [1, 9], got {kmer_size}")

    if not model.get('name'):
        errors.append("Model name must not be empty")

    signal = config.get('signal', {})
    rate = signal.get('sample_rate_khz')
    if not isinstance(rate, (int, float)) or rate <= 0:
        errors.append(f"Invalid sample_rate_khz: must be positive, got {rate}")

    if signal.get('mode') not in VALID_MODES:
        errors.append(f"Invalid signal mode: {signal.get('mode')}")

    generate = config.get('generate', {})
    for key in ('seq_length', 'num_sequences'):
        value = generate.get(key)
        if not isinstance(value, int) or value <= 0:
            errors.append(f"Invalid {key}: must be a positive integer, got {value}")

    limit = generate.get('limit', 0)
    if not isinstance(limit, int) or limit < 0:
        errors.append(f"Invalid limit: must be non-negative, got {limit}")

    max_models = config.get('cache', {}).get('max_models', 1)
    if not isinstance(max_models, int) or max_models < 1:
        errors.append(f"Invalid cache.max_models: must be >= 1, got {max_models}")

    level = str(config.get('logging', {}).get('level', 'INFO')).upper()
    if level not in VALID_LOG_LEVELS:
        errors.append(f"Invalid logging level: {level}")

    return errors

# SquigSim v0.1.0
# Any usage is subject to this software's license.
