"""
Load ground-truth (sequence, score) tables and resolve dataset names to files.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from ..config import DATA_DIR, resolve_project_path, validate_dataframe, validate_file_exists
from ..constants import SEQUENCE_COL, SCORE_COL, GROUND_TRUTH_FILENAME
from ..pipeline.table import assert_equal_lengths

logger = logging.getLogger(__name__)


def resolve_dataset_path(name: str, config: Optional[Dict[str, Any]] = None) -> Path:
    """
    Map a dataset name to its ground-truth CSV.

    An explicit path under config["datasets"][name] wins; otherwise the
    layout <data_dir>/<name>/ground_truth.csv is used.

    Raises:
        FileNotFoundError: If the resolved file does not exist
    """
    config = config or {}
    datasets = config.get("datasets") or {}
    entry = datasets.get(name)

    if isinstance(entry, dict) and entry.get("path"):
        path = resolve_project_path(entry["path"])
    elif isinstance(entry, str):
        path = resolve_project_path(entry)
    else:
        data_dir = resolve_project_path(config["data_dir"]) if config.get("data_dir") else DATA_DIR
        path = data_dir / name / GROUND_TRUTH_FILENAME

    validate_file_exists(path, f"dataset '{name}'")
    return path


def load_ground_truth(path: Path) -> pd.DataFrame:
    """
    Load a ground-truth CSV into a sequence table.

    Rows with a missing score are dropped. Sequences are kept as strings
    and must share one length.

    Args:
        path: CSV with at least 'sequence' and 'score' columns

    Returns:
        DataFrame with the file's columns, index reset
    """
    validate_file_exists(path, "ground truth")
    df = pd.read_csv(path, dtype={SEQUENCE_COL: str})
    validate_dataframe(df, path.name, required_columns=[SEQUENCE_COL, SCORE_COL])

    n_raw = len(df)
    df = df[df[SCORE_COL].notna() & df[SEQUENCE_COL].notna()].reset_index(drop=True)
    if len(df) < n_raw:
        logger.warning(f"Dropped {n_raw - len(df)} rows with missing sequence or score")

    df[SCORE_COL] = df[SCORE_COL].astype(float)
    length = assert_equal_lengths(df[SEQUENCE_COL])

    logger.info(f"Loaded {len(df)} sequences of length {length} from {path}")
    return df
