#!/usr/bin/env python3
"""
Sequence table helpers: percentile slicing and mutational gaps.

A sequence table is a plain DataFrame with one row per (sequence, score)
record. Every helper here returns a new frame and never touches the caller's.

Key Responsibilities:
  - Validate that all sequences share one length
  - Slice a table by score percentile (floor-based, exact counts)
  - Compute the mutational gap of each row to the top-percentile reference
"""

import logging
import math
from typing import Iterable, Sequence, Tuple

import numpy as np
import pandas as pd

from ..constants import SEQUENCE_COL, SCORE_COL, GAP_COL, OPTIMAL_PERCENTILE
from ..exceptions import MalformedInputError, OutOfRangeError

logger = logging.getLogger(__name__)


def assert_equal_lengths(sequences: Iterable[str]) -> int:
    """
    Check that every sequence has the same length.

    Returns:
        The shared sequence length (0 for an empty input)

    Raises:
        MalformedInputError: If two sequences differ in length
    """
    lengths = {len(seq) for seq in sequences}
    if len(lengths) > 1:
        raise MalformedInputError(
            f"Sequences must share one length, found lengths {sorted(lengths)}"
        )
    return lengths.pop() if lengths else 0


def encode_sequences(sequences: Sequence[str]) -> np.ndarray:
    """Encode equal-length sequences as an (n, L) array of single characters."""
    length = assert_equal_lengths(sequences)
    if len(sequences) == 0:
        return np.empty((0, length), dtype="<U1")
    return np.array([list(seq) for seq in sequences], dtype="<U1").reshape(len(sequences), length)


def check_percentile_range(percentile_range: Tuple[float, float]) -> None:
    lo, hi = percentile_range
    if not (0.0 <= lo <= 1.0 and 0.0 <= hi <= 1.0):
        raise OutOfRangeError(
            f"Percentile bounds must lie in [0, 1], got ({lo}, {hi})",
            bounds=(lo, hi),
        )
    if lo > hi:
        raise OutOfRangeError(
            f"Lower percentile exceeds upper percentile: ({lo}, {hi})",
            bounds=(lo, hi),
        )


def get_percentile(df: pd.DataFrame, percentile_range: Tuple[float, float]) -> pd.DataFrame:
    """
    Extract a score-ranked slice of the table.

    The table is sorted ascending by score and the rows at 1-based positions
    floor(n*lo)+1 .. floor(n*hi) are returned, so the slice always holds
    exactly floor(n*hi) - floor(n*lo) rows.

    Args:
        df: Sequence table with a 'score' column
        percentile_range: (lo, hi) with 0 <= lo <= hi <= 1

    Returns:
        New DataFrame sorted ascending by score, index reset

    Raises:
        OutOfRangeError: If the bounds fall outside [0, 1] or lo > hi
    """
    check_percentile_range(percentile_range)
    lo, hi = percentile_range

    # Stable sort so equal scores keep insertion order
    df_sorted = df.sort_values(SCORE_COL, kind="mergesort")
    n_sequences = len(df_sorted)
    start = int(math.floor(n_sequences * lo))
    stop = int(math.floor(n_sequences * hi))

    df_slice = df_sorted.iloc[start:stop].reset_index(drop=True).copy()
    logger.debug(f"Percentile {percentile_range}: rows {start + 1}..{stop} of {n_sequences}")
    return df_slice


def get_mutational_gaps(
    df: pd.DataFrame,
    reference_percentile: Tuple[float, float] = OPTIMAL_PERCENTILE,
) -> np.ndarray:
    """
    Minimum Hamming distance from every row to the reference ("optimal") set.

    The reference set is the top-percentile slice of the same table. Distances
    are accumulated one reference sequence at a time with a running minimum,
    which keeps memory at O(n * L) however large the reference is.

    Args:
        df: Sequence table
        reference_percentile: Percentile range defining the reference set

    Returns:
        Integer array of gaps aligned with df's row order

    Raises:
        MalformedInputError: If sequences differ in length
        OutOfRangeError: If the reference slice is empty
    """
    df_optimal = get_percentile(df, reference_percentile)
    if df_optimal.empty:
        raise OutOfRangeError(
            f"Reference percentile {reference_percentile} selects no rows "
            f"from a table of {len(df)}",
            bounds=tuple(reference_percentile),
        )

    encoded = encode_sequences(list(df[SEQUENCE_COL]))
    reference = encode_sequences(list(df_optimal[SEQUENCE_COL]))
    if reference.shape[1] != encoded.shape[1]:
        raise MalformedInputError(
            f"Reference sequences have length {reference.shape[1]}, "
            f"table sequences have length {encoded.shape[1]}"
        )

    gaps = np.full(len(encoded), encoded.shape[1], dtype=int)
    for ref_seq in reference:
        distances = (encoded != ref_seq).sum(axis=1)
        np.minimum(gaps, distances, out=gaps)

    logger.info(
        f"Mutational gaps: {len(encoded)} sequences vs {len(reference)} reference, "
        f"median gap {np.median(gaps):.1f}"
    )
    return gaps


def annotate_gaps(
    df: pd.DataFrame,
    reference_percentile: Tuple[float, float] = OPTIMAL_PERCENTILE,
) -> pd.DataFrame:
    """Return a copy of the table with a 'gap' column appended."""
    gaps = get_mutational_gaps(df, reference_percentile)
    df_annotated = df.copy()
    df_annotated[GAP_COL] = gaps
    return df_annotated
