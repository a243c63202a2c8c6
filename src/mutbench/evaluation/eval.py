#!/usr/bin/env python3
"""
Evaluation metrics for generated mutant batches.

Computes:
- Ground-truth score lookup with default-score imputation
- Median / mean score and min-max normalized median
- Pairwise Hamming diversity within the batch
"""

import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy.spatial.distance import pdist, squareform

from ..constants import SEQUENCE_COL, SCORE_COL, DEFAULT_SCORE
from ..pipeline.table import encode_sequences

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreRange:
    """Min/max score of the full source table, captured once."""
    min_score: float
    max_score: float

    @classmethod
    def from_table(cls, df: pd.DataFrame) -> "ScoreRange":
        return cls(float(df[SCORE_COL].min()), float(df[SCORE_COL].max()))

    @property
    def width(self) -> float:
        return self.max_score - self.min_score

    def normalize(self, score: float) -> float:
        if self.width == 0:
            logger.warning("Min and max are equal; using identity normalization")
            return score
        return (score - self.min_score) / self.width

    def denormalize(self, score: float) -> float:
        if self.width == 0:
            logger.warning("Min and max are equal; using identity normalization")
            return score
        return score * self.width + self.min_score


@dataclass(frozen=True)
class EvaluationResult:
    scores: Tuple[float, ...]
    n_missing: int
    median_score: float
    mean_score: float
    normalized_median_score: float
    median_distance: float
    mean_distance: float

    @property
    def n_mutants(self) -> int:
        return len(self.scores)

    def to_dict(self) -> Dict[str, float]:
        """Summary metrics without the per-mutant scores."""
        summary = asdict(self)
        summary.pop("scores")
        summary["n_mutants"] = self.n_mutants
        return summary


def lookup_scores(
    batch: Sequence[str],
    df_source: pd.DataFrame,
    default_score: float = DEFAULT_SCORE,
) -> Tuple[np.ndarray, int]:
    """
    Ground-truth score for each mutant.

    Each mutant scores the mean of all source rows with the identical
    sequence. Mutants with no match get `default_score`.

    Returns:
        (scores array aligned with batch, number of imputed mutants)
    """
    mean_by_sequence = df_source.groupby(SEQUENCE_COL)[SCORE_COL].mean().to_dict()

    scores = np.empty(len(batch), dtype=float)
    n_missing = 0
    for i, seq in enumerate(batch):
        if seq in mean_by_sequence:
            scores[i] = mean_by_sequence[seq]
        else:
            scores[i] = default_score
            n_missing += 1

    if n_missing:
        logger.info(f"{n_missing} / {len(batch)} mutants have no ground truth; using default_score={default_score}")
    return scores, n_missing


def pairwise_hamming(batch: Sequence[str]) -> np.ndarray:
    """Condensed vector of Hamming distances (mismatch counts) between mutants."""
    encoded = encode_sequences(list(batch))
    if len(encoded) < 2:
        return np.empty(0, dtype=float)
    # pdist's hamming is the mismatch fraction; scale back to counts
    codes = encoded.view(np.uint32)
    return np.rint(pdist(codes, metric="hamming") * encoded.shape[1])


def evaluate(
    batch: Sequence[str],
    df_source: pd.DataFrame,
    default_score: float = DEFAULT_SCORE,
    score_range: Optional[ScoreRange] = None,
    distinct_pairs: bool = False,
) -> EvaluationResult:
    """
    Evaluate a mutant batch against the ground-truth table.

    Args:
        batch: Mutant sequences
        df_source: Full source table (ground truth)
        default_score: Score imputed for mutants absent from df_source
        score_range: Normalization range; captured from df_source if omitted
        distinct_pairs: Compute distance stats over the distinct unordered
            pairs only, instead of the full square matrix with its zero diagonal

    Returns:
        EvaluationResult
    """
    if score_range is None:
        score_range = ScoreRange.from_table(df_source)

    scores, n_missing = lookup_scores(batch, df_source, default_score)
    if len(scores):
        median_score = float(np.median(scores))
        mean_score = float(np.mean(scores))
        normalized_median = float(score_range.normalize(median_score))
    else:
        logger.warning("Empty mutant batch; score metrics are NaN")
        median_score = mean_score = normalized_median = float("nan")

    distances = pairwise_hamming(batch)
    if not distinct_pairs and len(batch):
        # Full square matrix, zero diagonal included
        distances = squareform(distances).ravel() if len(batch) > 1 else np.zeros(1)

    if len(distances) == 0:
        logger.warning(f"Batch of {len(batch)} mutants has no pairs; distance metrics are NaN")
        median_distance = mean_distance = float("nan")
    else:
        median_distance = float(np.median(distances))
        mean_distance = float(np.mean(distances))

    return EvaluationResult(
        scores=tuple(float(s) for s in scores),
        n_missing=n_missing,
        median_score=median_score,
        mean_score=mean_score,
        normalized_median_score=normalized_median,
        median_distance=median_distance,
        mean_distance=mean_distance,
    )


def evaluate_strategies(
    batches: Dict[str, Sequence[str]],
    df_source: pd.DataFrame,
    default_score: float = DEFAULT_SCORE,
    score_range: Optional[ScoreRange] = None,
    distinct_pairs: bool = False,
) -> pd.DataFrame:
    """
    Evaluate several strategies' batches against one source table.

    Returns:
        DataFrame with one row per strategy, columns for each metric
    """
    if score_range is None:
        score_range = ScoreRange.from_table(df_source)

    rows = []
    for strategy_name, batch in batches.items():
        result = evaluate(batch, df_source, default_score, score_range, distinct_pairs)
        metrics = result.to_dict()
        metrics["strategy"] = strategy_name
        rows.append(metrics)

        logger.info(
            f"  {strategy_name}: "
            f"median={result.median_score:.3f}, "
            f"normalized={result.normalized_median_score:.3f}, "
            f"missing={result.n_missing}, "
            f"diversity={result.median_distance:.2f}"
        )

    return pd.DataFrame(rows)


def save_metrics(
    metrics_df: pd.DataFrame,
    run_id: str,
    output_dir: Path,
) -> Path:
    """
    Save metrics to CSV.

    Args:
        metrics_df: Metrics DataFrame
        run_id: Identifier used in the file name
        output_dir: Output directory

    Returns:
        Path to saved file
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"{run_id}_metrics.csv"
    metrics_df.to_csv(output_path, index=False)
    logger.info(f"Saved metrics to {output_path}")
    return output_path
