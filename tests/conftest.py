import numpy as np
import pandas as pd
import pytest

AMINO_ACIDS = np.array(list("ACDEFGHIKLMNPQRSTVWY"))


@pytest.fixture
def scored_table():
    """100 random 12-mers scored 1..100 in shuffled insertion order."""
    rng = np.random.default_rng(0)
    sequences = ["".join(rng.choice(AMINO_ACIDS, size=12)) for _ in range(100)]
    scores = rng.permutation(np.arange(1, 101)).astype(float)
    return pd.DataFrame({"sequence": sequences, "score": scores})


@pytest.fixture
def small_table():
    # pos1: A3 T1, pos2: C3 G1, pos3: D4, pos4: C3 A1 -> consensus ACDC
    return pd.DataFrame({
        "sequence": ["ACDA", "ACDC", "AGDC", "TCDC"],
        "score": [1.0, 2.0, 3.0, 4.0],
    })


def hamming(a, b):
    return sum(x != y for x, y in zip(a, b))
