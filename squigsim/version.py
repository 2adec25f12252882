#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SquigSim v0.1.0

Version information.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

__version__ = "0.1.0"

# SquigSim v0.1.0
# Any usage is subject to this software's license.
