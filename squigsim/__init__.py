#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SquigSim v0.1.0

Package initialization and version metadata.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

from .version import __version__

__all__ = ["__version__"]

# SquigSim v0.1.0
# Any usage is subject to this software's license.
