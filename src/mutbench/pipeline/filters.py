#!/usr/bin/env python3
"""
Difficulty filters that build a "training" subset from a scored table.

Implements:
- Gap-threshold filtering (https://arxiv.org/pdf/2307.00494)
- Stratified train/oracle sampling (https://arxiv.org/pdf/2405.18986)
- Named presets and a registry for dispatch by name
"""

import logging
from typing import Callable, Dict, Optional, Tuple

import numpy as np
import pandas as pd

from ..constants import (
    DEFAULT_SEED,
    GAP_COL,
    PARTITION_COL,
    THRESHOLD_PRESETS,
    STRATIFIED_PRESETS,
)
from ..exceptions import MalformedInputError, OutOfRangeError
from .table import get_percentile

logger = logging.getLogger(__name__)


def filter_threshold(
    df: pd.DataFrame,
    percentile_range: Tuple[float, float],
    min_gap: int,
) -> pd.DataFrame:
    """
    Slice by percentile, then keep rows at least `min_gap` away from the optimum.

    Args:
        df: Gap-annotated sequence table
        percentile_range: Score percentile range to slice
        min_gap: Minimum mutational gap to keep a row

    Returns:
        Filtered DataFrame sorted ascending by score
    """
    if GAP_COL not in df.columns:
        raise MalformedInputError(
            f"Column '{GAP_COL}' not found; run annotate_gaps() first"
        )

    df_slice = get_percentile(df, percentile_range)
    df_filtered = df_slice[df_slice[GAP_COL] >= min_gap].reset_index(drop=True)

    logger.info(
        f"Threshold filter {percentile_range}, gap>={min_gap}: "
        f"kept {len(df_filtered)} / {len(df_slice)} rows of slice"
    )
    return df_filtered


def filter_stratified(
    df: pd.DataFrame,
    percentile_range: Tuple[float, float],
    n_train: int,
    n_oracle: int,
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    """
    Top-scoring train rows plus randomly drawn oracle-call rows from one slice.

    The `n_train` highest-scoring rows of the slice form the train partition
    (kept in ascending score order). `n_oracle` rows are drawn uniformly
    without replacement from the rest. The result is train followed by oracle,
    with a 'partition' column labelling each row.

    Args:
        df: Sequence table
        percentile_range: Score percentile range to slice
        n_train: Number of highest-scoring rows to keep
        n_oracle: Number of random rows to draw from the remainder
        rng: Random generator; defaults to one seeded with DEFAULT_SEED

    Returns:
        DataFrame with n_train + n_oracle rows

    Raises:
        OutOfRangeError: If the slice cannot supply the requested rows
    """
    if rng is None:
        rng = np.random.default_rng(DEFAULT_SEED)

    df_slice = get_percentile(df, percentile_range)
    slice_size = len(df_slice)

    if n_train < 0 or n_oracle < 0:
        raise OutOfRangeError(
            f"Sample sizes must be non-negative, got n_train={n_train}, n_oracle={n_oracle}",
            bounds=(n_train, n_oracle),
        )
    if n_train > slice_size:
        raise OutOfRangeError(
            f"n_train={n_train} exceeds slice size {slice_size} "
            f"for percentile {percentile_range}",
            bounds=(0, slice_size),
        )
    if n_oracle > slice_size - n_train:
        raise OutOfRangeError(
            f"n_oracle={n_oracle} exceeds the {slice_size - n_train} rows left "
            f"after taking n_train={n_train} from percentile {percentile_range}",
            bounds=(0, slice_size - n_train),
        )

    df_train = df_slice.iloc[slice_size - n_train:].copy()
    df_rest = df_slice.iloc[:slice_size - n_train]

    indices = rng.choice(len(df_rest), size=n_oracle, replace=False)
    df_oracle = df_rest.iloc[indices].copy()

    df_train[PARTITION_COL] = "train"
    df_oracle[PARTITION_COL] = "oracle"

    df_out = pd.concat([df_train, df_oracle], ignore_index=True)
    logger.info(
        f"Stratified filter {percentile_range}: {n_train} train + {n_oracle} oracle "
        f"from slice of {slice_size}"
    )
    return df_out


def difficulty_filter_medium(df: pd.DataFrame) -> pd.DataFrame:
    return filter_threshold(df, **THRESHOLD_PRESETS["medium"])


def difficulty_filter_hard(df: pd.DataFrame) -> pd.DataFrame:
    return filter_threshold(df, **THRESHOLD_PRESETS["hard"])


def difficulty_filter_alt_medium(
    df: pd.DataFrame,
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    return filter_stratified(df, rng=rng, **STRATIFIED_PRESETS["alt_medium"])


def difficulty_filter_alt_hard(
    df: pd.DataFrame,
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    return filter_stratified(df, rng=rng, **STRATIFIED_PRESETS["alt_hard"])


DIFFICULTY_FILTERS: Dict[str, Callable[..., pd.DataFrame]] = {
    "medium": lambda df, rng=None: difficulty_filter_medium(df),
    "hard": lambda df, rng=None: difficulty_filter_hard(df),
    "alt_medium": difficulty_filter_alt_medium,
    "alt_hard": difficulty_filter_alt_hard,
    "none": lambda df, rng=None: df.copy(),
}


def apply_difficulty_filter(
    df: pd.DataFrame,
    name: str,
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    """
    Apply a named difficulty filter.

    Args:
        df: Gap-annotated sequence table
        name: One of DIFFICULTY_FILTERS
        rng: Generator consumed by the stratified presets

    Returns:
        The training subset
    """
    if name not in DIFFICULTY_FILTERS:
        raise ValueError(
            f"Unknown difficulty filter '{name}'. "
            f"Choose from: {sorted(DIFFICULTY_FILTERS)}"
        )

    df_train = DIFFICULTY_FILTERS[name](df, rng=rng)
    logger.info(f"Difficulty filter '{name}': {len(df_train)} / {len(df)} rows")
    return df_train
