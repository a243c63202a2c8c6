"""
Shared configuration for the mutant benchmark.
Centralizes paths, run settings, and validation logic.
"""

from pathlib import Path
import pandas as pd
import logging
from typing import Optional, Dict, Any
import copy
import os
import subprocess

from .constants import (
    DEFAULT_SEED,
    DEFAULT_SCORE,
    DEFAULT_N_MUTANTS,
    STRATEGY_ORDER,
)

# Initialize logging once when module is imported
LOGGER_NAME = "mutbench"
_root_logger = logging.getLogger()
if not _root_logger.handlers:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )
logger = logging.getLogger(LOGGER_NAME)


def get_project_root() -> Path:
    """Get the repository root directory."""
    override = os.getenv("MUTBENCH_ROOT")
    if override:
        return Path(override).resolve()
    return Path(__file__).resolve().parents[2]


PROJECT_ROOT = get_project_root()
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"

DEFAULT_CONFIG_PATH = CONFIG_DIR / "benchmark.yaml"

# Environment overrides
DEFAULT_DATASET = os.getenv("MUTBENCH_DATASET", "GFP")
SEED = int(os.getenv("MUTBENCH_SEED", str(DEFAULT_SEED)))


# Provenance tracking
def get_git_sha() -> str:
    """Get current git SHA for provenance tracking."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            cwd=PROJECT_ROOT
        )
    except (OSError, subprocess.SubprocessError):
        return "unknown"
    return result.stdout.strip() if result.returncode == 0 else "unknown"


RUN_ID = os.getenv("RUN_ID", get_git_sha())

# Settings used when the YAML file omits a key
DEFAULT_SETTINGS: Dict[str, Any] = {
    "data_dir": "data",
    "results_dir": "results",
    "datasets": {},
    "seed": SEED,
    "default_score": DEFAULT_SCORE,
    "n_mutants": DEFAULT_N_MUTANTS,
    "difficulty_filter": "none",
    "strategies": list(STRATEGY_ORDER),
}


def validate_file_exists(path: Path, context: str = "") -> None:
    """Validate that a file exists, raise informative error if not."""
    if not path.exists():
        context_msg = f" ({context})" if context else ""
        raise FileNotFoundError(
            f"Required file missing: {path}{context_msg}\n"
            f"Please check the dataset name and data directory."
        )


def validate_dataframe(df: pd.DataFrame, name: str, required_columns: Optional[list] = None) -> None:
    """Validate dataframe is not empty and has required columns."""
    if df.empty:
        raise ValueError(f"DataFrame '{name}' is empty")

    if required_columns:
        missing_cols = set(required_columns) - set(df.columns)
        if missing_cols:
            raise ValueError(f"DataFrame '{name}' missing required columns: {missing_cols}")


def resolve_project_path(path_str: str) -> Path:
    """Resolve a config path relative to the project root."""
    path = Path(path_str)
    return path if path.is_absolute() else PROJECT_ROOT / path


def load_benchmark_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load benchmark configuration from YAML file.

    Missing keys fall back to DEFAULT_SETTINGS. A missing file is not an
    error: the defaults alone describe a runnable benchmark.

    Args:
        config_path: Path to benchmark.yaml (defaults to config/benchmark.yaml)

    Returns:
        Dictionary with all benchmark settings

    Raises:
        ValueError: If the config file cannot be parsed or is not a mapping
    """
    import yaml

    config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    config = copy.deepcopy(DEFAULT_SETTINGS)

    if not config_path.exists():
        logger.warning(f"Config not found: {config_path}; using defaults")
        return config

    try:
        with open(config_path, 'r') as f:
            loaded = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(
            f"Failed to parse YAML config: {e}\n"
            f"Config file: {config_path}"
        ) from e

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ValueError(
            f"Invalid config format: expected dict, got {type(loaded)}\n"
            f"Config file: {config_path}"
        )

    config.update(loaded)
    if config.get("datasets") is None:
        config["datasets"] = {}

    # Environment wins over the file so CI can pin seeds
    if os.getenv("MUTBENCH_SEED"):
        config["seed"] = SEED

    logger.info(f"Loaded benchmark configuration from {config_path}")
    return config
