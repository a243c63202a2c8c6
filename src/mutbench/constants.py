"""Constants for the mutant benchmark."""

# Reproducibility
DEFAULT_SEED = 42

# Table schema
SEQUENCE_COL = "sequence"
SCORE_COL = "score"
GAP_COL = "gap"
PARTITION_COL = "partition"

# Mutational gap reference: top 1% of the dataset
OPTIMAL_PERCENTILE = (0.99, 1.0)

# Difficulty filters following https://arxiv.org/pdf/2307.00494
THRESHOLD_PRESETS = {
    "medium": {"percentile_range": (0.2, 0.4), "min_gap": 6},
    "hard": {"percentile_range": (0.0, 0.3), "min_gap": 7},
}

# Difficulty filters following https://arxiv.org/pdf/2405.18986
STRATIFIED_PRESETS = {
    "alt_medium": {"percentile_range": (0.2, 0.4), "n_train": 128, "n_oracle": 256},
    "alt_hard": {"percentile_range": (0.1, 0.3), "n_train": 128, "n_oracle": 256},
}

# Mutant generation and evaluation
DEFAULT_N_MUTANTS = 128
DEFAULT_SCORE = 0.0
STRATEGY_ORDER = ["positional", "single", "double"]

# Datasets shipped with the benchmark layout data/<name>/ground_truth.csv
KNOWN_DATASETS = ["GFP", "AAV"]
GROUND_TRUTH_FILENAME = "ground_truth.csv"
