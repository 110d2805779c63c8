"""
Configuration management for AssocFlow

This module provides configuration loading, validation, and management
for permutation analyses.
"""

from .config import (Config, get_default_config, load_config, save_config,
                     validate_config)

__all__ = [
    "Config",
    "load_config",
    "save_config",
    "validate_config",
    "get_default_config",
]
