#!/usr/bin/env python3
"""
Mutant proposal strategies built on the consensus sequence.

Implements:
- Positional greedy: one mutant per position, random subset of positions
- Common single mutants: most frequent non-consensus substitutions
- Common double mutants: pairs of frequent substitutions at distinct positions

Every strategy returns exactly `n_mutants` sequences or raises
InsufficientCandidatesError; nothing is silently truncated.
"""

import logging
from dataclasses import dataclass
from itertools import combinations, islice
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..constants import DEFAULT_SEED
from ..exceptions import InsufficientCandidatesError, OutOfRangeError
from .distributions import MutationModel, as_mutation_model

logger = logging.getLogger(__name__)

MutantBatch = List[str]


@dataclass(frozen=True)
class SubstitutionCandidate:
    """A (position, symbol) substitution ranked by how often it was observed."""
    position: int  # 0-based
    symbol: str
    count: int
    excluded: bool = False

    @property
    def rank_key(self) -> Tuple[bool, int]:
        # Excluded entries rank below every real count, including zero
        return (not self.excluded, self.count)


def substitution_candidates(model: MutationModel) -> List[SubstitutionCandidate]:
    """
    Flat candidate list sorted by descending frequency.

    Symbols carrying a position's maximum count are tagged as excluded and
    sort last. The sort is stable, so ties keep position order, then the
    order within the position's distribution.
    """
    candidates = []
    for pos, dist in enumerate(model.distributions):
        top_count = max(count for _, count in dist)
        for symbol, count in dist:
            candidates.append(
                SubstitutionCandidate(pos, symbol, count, excluded=count == top_count)
            )
    return sorted(candidates, key=lambda c: c.rank_key, reverse=True)


def check_batch_size(strategy: str, n_mutants: int) -> None:
    if n_mutants < 0:
        raise OutOfRangeError(
            f"{strategy}: n_mutants must be non-negative, got {n_mutants}",
            bounds=(0, n_mutants),
        )


def apply_substitutions(consensus: str, substitutions: Sequence[SubstitutionCandidate]) -> str:
    mutant = list(consensus)
    for sub in substitutions:
        mutant[sub.position] = sub.symbol
    return "".join(mutant)


def mutate_at_each_position(
    source: Union[MutationModel, pd.DataFrame],
    n_mutants: int,
    rng: Optional[np.random.Generator] = None,
) -> MutantBatch:
    """
    Positional greedy mutants.

    For every position, the consensus gets that position's second most
    frequent symbol (or its most frequent one when the position never
    varies, which reproduces the consensus). `n_mutants` of these are
    sampled without replacement.

    Args:
        source: MutationModel or sequence table to build one from
        n_mutants: Batch size, at most the sequence length
        rng: Random generator; defaults to one seeded with DEFAULT_SEED

    Returns:
        List of n_mutants sequences in sampled order
    """
    check_batch_size("positional", n_mutants)
    model = as_mutation_model(source)
    if rng is None:
        rng = np.random.default_rng(DEFAULT_SEED)

    if n_mutants > model.sequence_length:
        raise InsufficientCandidatesError("positional", n_mutants, model.sequence_length)

    mutants = []
    for pos, dist in enumerate(model.distributions):
        symbol = dist[1][0] if len(dist) > 1 else dist[0][0]
        mutants.append(apply_substitutions(
            model.consensus, [SubstitutionCandidate(pos, symbol, 0)]
        ))

    n_invariant = sum(1 for dist in model.distributions if len(dist) == 1)
    if n_invariant:
        logger.debug(f"Positional: {n_invariant} invariant positions reproduce the consensus")

    picked = rng.choice(len(mutants), size=n_mutants, replace=False)
    batch = [mutants[i] for i in picked]
    logger.info(f"Positional: sampled {len(batch)} of {len(mutants)} positional mutants")
    return batch


def common_single_mutants(
    source: Union[MutationModel, pd.DataFrame],
    n_mutants: int,
) -> MutantBatch:
    """
    Single substitutions ranked by observed frequency.

    Args:
        source: MutationModel or sequence table to build one from
        n_mutants: Batch size

    Returns:
        List of n_mutants sequences, most frequent substitution first
    """
    check_batch_size("single", n_mutants)
    model = as_mutation_model(source)
    candidates = substitution_candidates(model)

    if n_mutants > len(candidates):
        raise InsufficientCandidatesError("single", n_mutants, len(candidates))

    n_excluded = sum(1 for c in candidates[:n_mutants] if c.excluded)
    if n_excluded:
        logger.warning(
            f"Single: {n_excluded} of {n_mutants} mutants use excluded (top-count) symbols"
        )

    batch = [apply_substitutions(model.consensus, [c]) for c in candidates[:n_mutants]]
    logger.info(f"Single: built {len(batch)} mutants from {len(candidates)} candidates")
    return batch


def mutation_pairs(candidates: Sequence[SubstitutionCandidate]):
    """Lazily yield candidate pairs in combination order, skipping same-position pairs."""
    for first, second in combinations(candidates, 2):
        if first.position != second.position:
            yield first, second


def common_double_mutants(
    source: Union[MutationModel, pd.DataFrame],
    n_mutants: int,
) -> MutantBatch:
    """
    Double substitutions from pairs of frequent single substitutions.

    Pairs are taken in the enumeration order of the frequency-sorted
    candidate list, not re-sorted by combined frequency.

    Args:
        source: MutationModel or sequence table to build one from
        n_mutants: Batch size

    Returns:
        List of n_mutants sequences, each carrying two substitutions
    """
    check_batch_size("double", n_mutants)
    model = as_mutation_model(source)
    candidates = substitution_candidates(model)

    pairs = list(islice(mutation_pairs(candidates), n_mutants))
    if len(pairs) < n_mutants:
        raise InsufficientCandidatesError("double", n_mutants, len(pairs))

    batch = [apply_substitutions(model.consensus, pair) for pair in pairs]
    logger.info(f"Double: built {len(batch)} mutants from {len(candidates)} candidates")
    return batch


MUTANT_STRATEGIES: Dict[str, Callable[..., MutantBatch]] = {
    "positional": mutate_at_each_position,
    "single": lambda source, n_mutants, rng=None: common_single_mutants(source, n_mutants),
    "double": lambda source, n_mutants, rng=None: common_double_mutants(source, n_mutants),
}


def generate_mutants(
    source: Union[MutationModel, pd.DataFrame],
    strategy: str,
    n_mutants: int,
    rng: Optional[np.random.Generator] = None,
) -> MutantBatch:
    """Run a mutant strategy by name."""
    if strategy not in MUTANT_STRATEGIES:
        raise ValueError(
            f"Unknown mutant strategy '{strategy}'. "
            f"Choose from: {sorted(MUTANT_STRATEGIES)}"
        )
    return MUTANT_STRATEGIES[strategy](source, n_mutants, rng=rng)


def describe_batch(batch: MutantBatch, consensus: str, strategy: str) -> pd.DataFrame:
    """
    Tabulate a batch with mutation labels relative to the consensus.

    Labels use 1-based positions, e.g. "S65T;Y66H". A mutant identical to
    the consensus gets an empty label.
    """
    rows = []
    for rank, seq in enumerate(batch, start=1):
        labels = [
            f"{wt}{pos + 1}{mut}"
            for pos, (wt, mut) in enumerate(zip(consensus, seq))
            if wt != mut
        ]
        rows.append({
            "rank": rank,
            "sequence": seq,
            "mutations": ";".join(labels),
            "n_mutations": len(labels),
            "strategy": strategy,
        })
    return pd.DataFrame(rows, columns=["rank", "sequence", "mutations", "n_mutations", "strategy"])
