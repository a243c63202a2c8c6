#!/usr/bin/env python3
"""
Per-position mutation frequencies and the consensus ("average") sequence.

Each position gets a distribution: (symbol, count) pairs sorted by
descending count. Equal counts are ordered by ascending symbol so the
result never depends on dictionary iteration order.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import List, Tuple, Union

import pandas as pd

from ..constants import SEQUENCE_COL
from ..exceptions import MalformedInputError
from .table import assert_equal_lengths

logger = logging.getLogger(__name__)

PositionDistribution = Tuple[Tuple[str, int], ...]


@dataclass(frozen=True)
class MutationModel:
    """Position distributions and the consensus derived from them."""
    distributions: Tuple[PositionDistribution, ...]
    consensus: str

    @property
    def sequence_length(self) -> int:
        return len(self.consensus)

    @property
    def n_sequences(self) -> int:
        if not self.distributions:
            return 0
        return sum(count for _, count in self.distributions[0])

    def to_frame(self) -> pd.DataFrame:
        """Long-format table: one row per (position, symbol), 1-based positions."""
        rows = []
        for idx, dist in enumerate(self.distributions):
            total = sum(count for _, count in dist)
            for rank, (symbol, count) in enumerate(dist, start=1):
                rows.append({
                    "position": idx + 1,
                    "symbol": symbol,
                    "count": count,
                    "frequency": count / total if total else 0.0,
                    "rank": rank,
                    "is_consensus": rank == 1,
                })
        return pd.DataFrame(rows, columns=["position", "symbol", "count", "frequency", "rank", "is_consensus"])


def _sorted_counts(symbols: List[str]) -> PositionDistribution:
    counts = Counter(symbols)
    return tuple(sorted(counts.items(), key=lambda item: (-item[1], item[0])))


def get_mutation_distributions(df: pd.DataFrame) -> List[PositionDistribution]:
    """
    Count symbol occurrences at every position.

    Args:
        df: Sequence table

    Returns:
        One distribution per position, in position order

    Raises:
        MalformedInputError: If the table is empty or lengths differ
    """
    sequences = list(df[SEQUENCE_COL])
    if not sequences:
        raise MalformedInputError("Cannot build mutation distributions from an empty table")

    length = assert_equal_lengths(sequences)
    return [_sorted_counts([seq[i] for seq in sequences]) for i in range(length)]


def get_avg_sequence(distributions: List[PositionDistribution]) -> str:
    """Consensus sequence: the most frequent symbol at each position."""
    return "".join(dist[0][0] for dist in distributions)


def build_mutation_model(df: pd.DataFrame) -> MutationModel:
    distributions = get_mutation_distributions(df)
    model = MutationModel(
        distributions=tuple(distributions),
        consensus=get_avg_sequence(distributions),
    )
    n_variable = sum(1 for dist in distributions if len(dist) > 1)
    logger.info(
        f"Mutation model: {model.n_sequences} sequences, length {model.sequence_length}, "
        f"{n_variable} variable positions"
    )
    return model


def as_mutation_model(source: Union[MutationModel, pd.DataFrame]) -> MutationModel:
    """Accept either a built model or a sequence table."""
    if isinstance(source, MutationModel):
        return source
    return build_mutation_model(source)
