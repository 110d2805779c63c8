"""
Caching of replicate collections keyed by their inputs and parameters
"""

import hashlib
import json
import logging
import pickle
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np

from .replicates import ReplicateCollection
from .sampling import LabelSet

logger = logging.getLogger(__name__)

CACHE_VERSION = "1.0"


def label_set_digest(labels: LabelSet) -> str:
    """Order-independent digest of a label set"""
    arr = np.fromiter(sorted(labels), dtype=np.int64, count=len(labels))
    return hashlib.md5(arr.tobytes()).hexdigest()


def make_cache_params(
    query: LabelSet,
    reference: LabelSet,
    universe_size: int,
    fractions: Sequence[float],
    iterations: int,
    replicate_count: int,
    evaluation_function: str,
    seed: int,
    on_degenerate: str,
) -> Dict[str, Any]:
    """Parameters that fully determine a seeded replicate collection"""
    return {
        "query": label_set_digest(query),
        "reference": label_set_digest(reference),
        "universe_size": int(universe_size),
        "fractions": [float(f) for f in fractions],
        "iterations": int(iterations),
        "replicate_count": int(replicate_count),
        "evaluation_function": evaluation_function,
        "seed": int(seed),
        "on_degenerate": on_degenerate,
    }


class ResultCache:
    """Cache manager for replicate collections"""

    def __init__(self, cache_dir: Union[str, Path]):
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _get_params_hash(self, params: Dict[str, Any]) -> str:
        """Generate hash of parameters for cache validation"""
        sorted_params = json.dumps(params, sort_keys=True)
        return hashlib.md5(sorted_params.encode()).hexdigest()[:12]

    def get_cache_path(self, comparison_name: str, params: Dict[str, Any]) -> Path:
        """Get cache file path for given comparison and parameters"""
        params_hash = self._get_params_hash(params)
        return self.cache_dir / f"{comparison_name}_{params_hash}_replicates.pkl"

    def save_result(
        self,
        comparison_name: str,
        collection: ReplicateCollection,
        params: Dict[str, Any],
    ) -> Path:
        """Save a replicate collection to the cache"""
        cache_path = self.get_cache_path(comparison_name, params)
        cache_data = {
            "result": collection,
            "params": params,
            "version": CACHE_VERSION,
        }

        with open(cache_path, "wb") as f:
            pickle.dump(cache_data, f)
        logger.debug(f"Cached replicate collection: {cache_path}")
        return cache_path

    def load_result(
        self, comparison_name: str, params: Dict[str, Any]
    ) -> Optional[ReplicateCollection]:
        """Load a cached collection if present and its parameters match"""
        cache_path = self.get_cache_path(comparison_name, params)

        if not cache_path.exists():
            return None

        try:
            with open(cache_path, "rb") as f:
                cache_data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            logger.warning(f"Failed to load cached result {cache_path}: {e}")
            return None

        if cache_data.get("version") != CACHE_VERSION:
            logger.debug(f"Cache version mismatch for {comparison_name}")
            return None

        if not params_match(cache_data.get("params", {}), params):
            logger.debug(f"Cache parameters mismatch for {comparison_name}")
            return None

        logger.debug(f"Loaded cached replicate collection: {cache_path}")
        return cache_data["result"]

    def clear_cache(self, comparison_name: Optional[str] = None) -> int:
        """Clear cache files, optionally only those of one comparison"""
        if comparison_name:
            pattern = f"{comparison_name}_*_replicates.pkl"
        else:
            pattern = "*_replicates.pkl"

        cleared = 0
        for cache_file in self.cache_dir.glob(pattern):
            cache_file.unlink()
            cleared += 1

        logger.info(f"Cleared {cleared} cache files")
        return cleared

    def info(self) -> Dict[str, Any]:
        """Get information about the cache directory"""
        cache_files = list(self.cache_dir.glob("*_replicates.pkl"))
        total_size = sum(f.stat().st_size for f in cache_files)

        return {
            "files": len(cache_files),
            "total_size": total_size,
            "total_size_mb": total_size / (1024 * 1024),
            "cache_dir": str(self.cache_dir),
        }


def params_match(cached_params: Dict[str, Any], current_params: Dict[str, Any]) -> bool:
    """Check if cached parameters match current parameters"""
    for key, value in current_params.items():
        if cached_params.get(key) != value:
            logger.debug(
                f"Parameter mismatch: {key} cached={cached_params.get(key)} vs current={value}"
            )
            return False
    return True
