import math

import numpy as np
import pandas as pd
import pytest

from mutbench.evaluation.eval import (
    ScoreRange,
    evaluate,
    evaluate_strategies,
    lookup_scores,
    pairwise_hamming,
    save_metrics,
)
from mutbench.exceptions import MalformedInputError


def test_batch_from_source_has_no_missing(scored_table):
    batch = list(scored_table["sequence"].iloc[:10])
    result = evaluate(batch, scored_table)
    assert result.n_missing == 0
    assert list(result.scores) == list(scored_table["score"].iloc[:10])


def test_missing_mutants_use_default_score(small_table):
    scores, n_missing = lookup_scores(["ACDC", "WWWW"], small_table, default_score=-1.0)
    assert n_missing == 1
    assert list(scores) == [2.0, -1.0]


def test_duplicate_sequences_are_averaged():
    df = pd.DataFrame({"sequence": ["AA", "AA", "AC"], "score": [2.0, 4.0, 9.0]})
    scores, n_missing = lookup_scores(["AA"], df)
    assert n_missing == 0
    assert scores[0] == 3.0


def test_normalization_uses_source_range(small_table):
    # Source range is [1, 4]; batch scores are 2 and 3
    result = evaluate(["ACDC", "AGDC"], small_table)
    assert result.median_score == 2.5
    assert result.mean_score == 2.5
    assert result.normalized_median_score == pytest.approx(0.5)

    fixed = evaluate(["ACDC", "AGDC"], small_table, score_range=ScoreRange(0.0, 10.0))
    assert fixed.normalized_median_score == pytest.approx(0.25)


def test_score_range_round_trip():
    score_range = ScoreRange(2.0, 6.0)
    assert score_range.normalize(4.0) == 0.5
    assert score_range.denormalize(0.5) == 4.0
    assert ScoreRange(3.0, 3.0).normalize(3.0) == 3.0


def test_pairwise_hamming_counts():
    distances = pairwise_hamming(["AAAA", "AAAT", "TTTT"])
    assert list(distances) == [1.0, 4.0, 3.0]


def test_diversity_statistics():
    batch = ["AAAA", "AAAT", "TTTT"]
    df = pd.DataFrame({"sequence": batch, "score": [0.0, 1.0, 2.0]})
    # Full 3x3 matrix: 0, 0, 0, 1, 1, 3, 3, 4, 4
    result = evaluate(batch, df)
    assert result.median_distance == 1.0
    assert result.mean_distance == pytest.approx(16 / 9)

    distinct = evaluate(batch, df, distinct_pairs=True)
    assert distinct.median_distance == 3.0
    assert distinct.mean_distance == pytest.approx(8 / 3)


def test_single_mutant_distances(small_table):
    result = evaluate(["ACDC"], small_table)
    assert result.median_distance == 0.0
    assert result.mean_distance == 0.0
    assert result.median_score == 2.0

    distinct = evaluate(["ACDC"], small_table, distinct_pairs=True)
    assert math.isnan(distinct.median_distance)
    assert math.isnan(distinct.mean_distance)


def test_empty_batch_metrics_are_nan(small_table):
    result = evaluate([], small_table)
    assert math.isnan(result.median_score)
    assert math.isnan(result.median_distance)


def test_unequal_batch_lengths_raise(small_table):
    with pytest.raises(MalformedInputError):
        evaluate(["ACDC", "ACD"], small_table)


def test_evaluate_strategies_and_save(small_table, tmp_path):
    metrics = evaluate_strategies(
        {"single": ["TCDC", "AGDC"], "double": ["TGDC", "TCDA"]},
        small_table,
        default_score=0.0,
    )
    assert list(metrics["strategy"]) == ["single", "double"]
    assert list(metrics["n_missing"]) == [0, 2]
    assert list(metrics["n_mutants"]) == [2, 2]

    path = save_metrics(metrics, "toy", tmp_path / "out")
    assert path.exists()
    assert len(pd.read_csv(path)) == 2


def test_to_dict_drops_scores(small_table):
    summary = evaluate(["ACDC", "AGDC"], small_table).to_dict()
    assert "scores" not in summary
    assert summary["n_mutants"] == 2
    assert np.isfinite(summary["median_distance"])
