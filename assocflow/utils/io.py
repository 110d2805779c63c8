"""
Reading label files and writing result tables
"""

import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from ..errors import InvalidArgument

logger = logging.getLogger(__name__)


def load_labels(file_path: Union[str, Path], universe_size: Optional[int] = None):
    """
    Load a label set from a text file with one integer label per line

    Lines starting with '#' are ignored.

    Args:
        file_path: Path to the label file
        universe_size: If given, labels must lie in [1, universe_size]

    Returns:
        LabelSet
    """
    from ..permutation.sampling import make_label_set

    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Label file not found: {path}")

    df = pd.read_csv(path, header=None, comment="#", usecols=[0], names=["label"])
    if not pd.api.types.is_integer_dtype(df["label"]):
        raise InvalidArgument(f"Label file {path} contains non-integer values")

    labels = make_label_set(df["label"].tolist(), universe_size=universe_size)
    logger.info(f"Loaded {len(labels)} labels from {path}")
    return labels


def save_table(df: pd.DataFrame, output_file: Union[str, Path]) -> Path:
    """Write a result table as CSV, creating parent directories"""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False)
    logger.info(f"Saved {len(df)} rows to {output_path}")
    return output_path
