"""
Utility functions and classes for AssocFlow
"""

from .io import load_labels, save_table
from .logging import Stopwatch, get_logger, setup_logging, timed
from .validation import (validate_fractions, validate_iterations,
                         validate_labels_in_universe, validate_positive_int)

__all__ = [
    "setup_logging",
    "get_logger",
    "timed",
    "Stopwatch",
    "load_labels",
    "save_table",
    "validate_positive_int",
    "validate_iterations",
    "validate_fractions",
    "validate_labels_in_universe",
]
