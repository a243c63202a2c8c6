import pandas as pd
import pytest

from mutbench.exceptions import MalformedInputError
from mutbench.pipeline.distributions import (
    MutationModel,
    as_mutation_model,
    build_mutation_model,
    get_avg_sequence,
    get_mutation_distributions,
)


def test_distributions_sorted_by_count(small_table):
    dists = get_mutation_distributions(small_table)
    assert dists == [
        (("A", 3), ("T", 1)),
        (("C", 3), ("G", 1)),
        (("D", 4),),
        (("C", 3), ("A", 1)),
    ]
    assert get_avg_sequence(dists) == "ACDC"


def test_counts_sum_to_row_count(scored_table):
    model = build_mutation_model(scored_table)
    assert model.n_sequences == 100
    for dist in model.distributions:
        assert sum(count for _, count in dist) == len(scored_table)


def test_consensus_is_top_symbol(scored_table):
    model = build_mutation_model(scored_table)
    for pos, symbol in enumerate(model.consensus):
        column = [seq[pos] for seq in scored_table["sequence"]]
        assert column.count(symbol) == max(column.count(s) for s in set(column))


def test_ties_break_by_symbol():
    df = pd.DataFrame({"sequence": ["AB", "BA"], "score": [0.0, 1.0]})
    model = build_mutation_model(df)
    assert model.distributions[0] == (("A", 1), ("B", 1))
    assert model.consensus == "AA"


def test_rejects_bad_tables():
    with pytest.raises(MalformedInputError):
        get_mutation_distributions(pd.DataFrame({"sequence": ["AB", "ABC"], "score": [1, 2]}))
    with pytest.raises(MalformedInputError):
        get_mutation_distributions(pd.DataFrame({"sequence": [], "score": []}))


def test_to_frame(small_table):
    model = build_mutation_model(small_table)
    frame = model.to_frame()
    assert len(frame) == 7
    assert frame["position"].min() == 1
    top = frame[frame["is_consensus"]].sort_values("position")
    assert "".join(top["symbol"]) == model.consensus
    assert frame.loc[(frame["position"] == 1) & (frame["symbol"] == "T"), "frequency"].iloc[0] == 0.25


def test_as_mutation_model_passthrough(small_table):
    model = build_mutation_model(small_table)
    assert as_mutation_model(model) is model
    assert isinstance(as_mutation_model(small_table), MutationModel)
    assert as_mutation_model(small_table) == model
