"""
Core configuration management for AssocFlow
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Main configuration class for AssocFlow analysis"""

    # General settings
    project_name: str = "AssocFlow_Analysis"
    random_seed: Optional[int] = 42
    n_threads: int = 1

    # Input/Output paths
    output_dir: Optional[str] = None

    # Logging
    log_file: Optional[str] = None
    log_colors: bool = True

    # Analysis parameters
    permutation: Dict[str, Any] = field(default_factory=dict)
    cache: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Fill defaults, keeping any keys the user provided"""
        self.permutation = {**self._get_default_permutation(), **self.permutation}
        self.cache = {**self._get_default_cache(), **self.cache}

    def _get_default_permutation(self) -> Dict[str, Any]:
        """Default permutation test configuration"""
        return {
            "universe_size": 100000,
            "iterations": 1000,
            "fractions": [round(0.1 * i, 1) for i in range(1, 11)],
            "replicate_count": 10,
            "evaluation_function": "overlap",
            "on_degenerate": "raise",
            "show_progress": False,
        }

    def _get_default_cache(self) -> Dict[str, Any]:
        """Default result cache configuration"""
        return {"enabled": False, "cache_dir": None}

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(config_file: Union[str, Path]) -> Config:
    """Load configuration from YAML or JSON file"""
    config_path = Path(config_file)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, "r") as f:
        if config_path.suffix.lower() in [".yaml", ".yml"]:
            config_dict = yaml.safe_load(f)
        elif config_path.suffix.lower() == ".json":
            config_dict = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

    return Config(**(config_dict or {}))


def save_config(config: Config, output_file: Union[str, Path]) -> None:
    """Save configuration to YAML or JSON file, chosen by suffix"""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = config.to_dict()

    with open(output_path, "w") as f:
        if output_path.suffix.lower() == ".json":
            json.dump(config_dict, f, indent=2)
        else:
            yaml.dump(config_dict, f, default_flow_style=False, indent=2)

    logger.info(f"Configuration saved to {output_path}")


def validate_config(config: Config) -> List[str]:
    """Validate configuration and return list of issues"""
    issues = []
    perm = config.permutation

    universe_size = perm.get("universe_size")
    if not isinstance(universe_size, int) or universe_size <= 0:
        issues.append("permutation.universe_size must be a positive integer")

    iterations = perm.get("iterations")
    if not isinstance(iterations, int) or iterations < 2:
        issues.append("permutation.iterations must be an integer of at least 2")

    fractions = perm.get("fractions") or []
    if not fractions:
        issues.append("permutation.fractions must not be empty")
    elif not all(isinstance(f, (int, float)) and 0 < f <= 1 for f in fractions):
        issues.append("permutation.fractions must all lie in (0, 1]")

    replicate_count = perm.get("replicate_count")
    if not isinstance(replicate_count, int) or replicate_count <= 0:
        issues.append("permutation.replicate_count must be a positive integer")

    if perm.get("on_degenerate") not in ("raise", "flag"):
        issues.append("permutation.on_degenerate must be 'raise' or 'flag'")

    evaluation = perm.get("evaluation_function")
    if evaluation not in ("overlap", "mean_distance"):
        issues.append(
            f"Unknown permutation.evaluation_function: {evaluation!r}"
        )

    if config.n_threads == 0:
        issues.append("Number of threads must be non-zero")

    if config.cache.get("enabled"):
        if config.random_seed is None:
            issues.append("Caching requires random_seed to be set")
        if not config.cache.get("cache_dir") and not config.output_dir:
            issues.append("Caching requires cache.cache_dir or output_dir")

    return issues


def get_default_config() -> Config:
    """Get default configuration object"""
    return Config()
