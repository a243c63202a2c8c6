"""
Mutant benchmark: difficulty-filtered training sets and consensus-based mutants.

This package builds training subsets from a scored protein sequence table,
proposes mutants of the consensus sequence, and evaluates them against the
held-out ground truth.

Architecture:
- pipeline/table.py: Percentile slicing and mutational gaps
- pipeline/filters.py: Difficulty filters (gap threshold, stratified sampling)
- pipeline/distributions.py: Per-position symbol counts and consensus
- pipeline/mutants.py: Positional, common-single, and common-double mutants
- evaluation/eval.py: Score lookup, normalization, diversity
- evaluation/sanity.py: Input/output sanity checks
- utilities/dataset_loader.py: Ground-truth CSV loading
- run_pipeline.py: Command-line runner
"""

__version__ = "0.1.0"

# Canonical sequence table schema
SEQUENCE_TABLE_SCHEMA = {
    "sequence": "str",      # Fixed-length symbol string, one length per table
    "score": "float",       # Ground-truth fitness
    # Added by annotate_gaps:
    "gap": "int",           # Min Hamming distance to the top-1% reference set
    # Added by filter_stratified:
    "partition": "str",     # "train" or "oracle"
}

__all__ = [
    "SEQUENCE_TABLE_SCHEMA",
]
