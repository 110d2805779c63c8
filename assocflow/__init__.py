"""
AssocFlow: permutation-based association analysis for region label sets

AssocFlow estimates the association between a query set and a reference set
of discrete labels (reduced genomic regions) by permutation testing. Besides
the conventional z-score (ZS) it reports the normalized z-score
(nZS = ZS / sqrt(sample size)), which stays comparable across query sets of
different sizes.

Main Components:
- Uniform label sampling with explicit, seedable generators
- Permutation tests with pluggable evaluation functions
- Sweeps over query sub-sample fractions
- Replicated sweeps grouped by sample size for stability assessment

Example:
    >>> from assocflow import AssocFlowAnalysis
    >>> analysis = AssocFlowAnalysis(config="config.yaml")
    >>> collection = analysis.run_comparison("peaks_vs_tss", query, reference)
"""

import logging
import sys
from importlib import metadata
from typing import Any, Dict

try:
    __version__ = metadata.version("assocflow")
except metadata.PackageNotFoundError:
    __version__ = "0.1.0-dev"

from . import permutation, utils
from .config import Config, load_config
from .core import AssocFlowAnalysis
from .errors import (AssocFlowError, DegenerateDistribution, InvalidArgument,
                     SamplerExhaustion)
from .utils import setup_logging

__all__ = [
    "__version__",
    "AssocFlowAnalysis",
    "Config",
    "load_config",
    "setup_logging",
    "AssocFlowError",
    "InvalidArgument",
    "SamplerExhaustion",
    "DegenerateDistribution",
    "permutation",
    "utils",
]

logger = logging.getLogger(__name__)


def get_info() -> Dict[str, Any]:
    """Get package information."""
    return {
        "name": "AssocFlow",
        "version": __version__,
        "description": "Permutation-based association analysis with normalized z-scores",
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "modules": ["permutation", "utils"],
    }


def check_dependencies() -> Dict[str, bool]:
    """Check if key dependencies are available."""
    dependencies = {}

    packages = ["numpy", "pandas", "scipy", "joblib", "tqdm", "yaml", "colorlog", "click"]
    for name in packages:
        try:
            __import__(name)
            dependencies[name] = True
        except ImportError:
            dependencies[name] = False

    return dependencies
