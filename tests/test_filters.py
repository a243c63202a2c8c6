import numpy as np
import pandas as pd
import pytest

from mutbench.exceptions import MalformedInputError, OutOfRangeError
from mutbench.pipeline.filters import (
    apply_difficulty_filter,
    difficulty_filter_alt_medium,
    difficulty_filter_medium,
    filter_stratified,
    filter_threshold,
)
from mutbench.pipeline.table import annotate_gaps, get_percentile


@pytest.fixture
def annotated(scored_table):
    return annotate_gaps(scored_table)


def test_threshold_keeps_only_large_gaps(annotated):
    out = filter_threshold(annotated, (0.2, 0.4), min_gap=9)
    sliced = get_percentile(annotated, (0.2, 0.4))
    assert (out["gap"] >= 9).all()
    assert len(out) == (sliced["gap"] >= 9).sum()
    assert set(out["sequence"]) <= set(sliced["sequence"])


def test_threshold_zero_gap_is_plain_slice(annotated):
    out = filter_threshold(annotated, (0.2, 0.4), min_gap=0)
    assert len(out) == 20


def test_threshold_requires_gap_column(scored_table):
    with pytest.raises(MalformedInputError):
        filter_threshold(scored_table, (0.2, 0.4), min_gap=6)


def test_medium_preset_matches_explicit_call(annotated):
    pd.testing.assert_frame_equal(
        difficulty_filter_medium(annotated),
        filter_threshold(annotated, (0.2, 0.4), 6),
    )


def test_stratified_train_then_oracle(scored_table):
    out = filter_stratified(scored_table, (0.2, 0.4), n_train=5, n_oracle=5,
                            rng=np.random.default_rng(1))
    assert len(out) == 10
    assert list(out["score"].iloc[:5]) == [36.0, 37.0, 38.0, 39.0, 40.0]
    assert list(out["partition"]) == ["train"] * 5 + ["oracle"] * 5

    oracle = out[out["partition"] == "oracle"]
    assert oracle["score"].between(21, 35).all()
    assert oracle["sequence"].is_unique
    assert not set(oracle["sequence"]) & set(out["sequence"].iloc[:5])


def test_stratified_uses_whole_remainder(scored_table):
    out = filter_stratified(scored_table, (0.2, 0.4), n_train=5, n_oracle=15)
    assert sorted(out["score"]) == [float(s) for s in range(21, 41)]


def test_stratified_is_reproducible(scored_table):
    a = filter_stratified(scored_table, (0.1, 0.5), 4, 8, rng=np.random.default_rng(7))
    b = filter_stratified(scored_table, (0.1, 0.5), 4, 8, rng=np.random.default_rng(7))
    pd.testing.assert_frame_equal(a, b)
    c = filter_stratified(scored_table, (0.1, 0.5), 4, 8)
    d = filter_stratified(scored_table, (0.1, 0.5), 4, 8)
    pd.testing.assert_frame_equal(c, d)


@pytest.mark.parametrize("n_train,n_oracle", [(21, 0), (5, 16), (-1, 3), (3, -1)])
def test_stratified_rejects_oversized_samples(scored_table, n_train, n_oracle):
    with pytest.raises(OutOfRangeError):
        filter_stratified(scored_table, (0.2, 0.4), n_train, n_oracle)


def test_alt_presets_need_large_tables(scored_table):
    # 128 train rows cannot come from a 20-row slice
    with pytest.raises(OutOfRangeError):
        difficulty_filter_alt_medium(scored_table)


def test_alt_medium_on_large_table():
    rng = np.random.default_rng(3)
    sequences = ["".join(rng.choice(list("ACGT"), size=8)) for _ in range(2000)]
    df = pd.DataFrame({"sequence": sequences, "score": np.arange(2000, dtype=float)})
    out = difficulty_filter_alt_medium(df, rng=np.random.default_rng(0))
    assert len(out) == 128 + 256
    assert list(out["score"].iloc[:128]) == [float(s) for s in range(672, 800)]


def test_apply_by_name(annotated):
    pd.testing.assert_frame_equal(apply_difficulty_filter(annotated, "none"), annotated)
    assert (apply_difficulty_filter(annotated, "hard")["gap"] >= 7).all()
    with pytest.raises(ValueError):
        apply_difficulty_filter(annotated, "extreme")
