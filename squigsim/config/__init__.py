"""
SquigSim v0.1.0

Configuration management for SquigSim.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

from .parser import ConfigParser, ConfigValidationError
from .schema import DEFAULT_CONFIG, load_config, save_config_template, validate_config

__all__ = [
    "ConfigParser",
    "ConfigValidationError",
    "DEFAULT_CONFIG",
    "load_config",
    "save_config_template",
    "validate_config",
]
