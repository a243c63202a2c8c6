#!/usr/bin/env python3
"""
Master script to run the mutant benchmark: load, annotate, filter, generate, evaluate.

Usage:
    mutbench-run --dataset GFP --filter alt_medium
    mutbench-run --dataset AAV --filter hard --strategy double -n 64
    mutbench-run --check
"""

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .config import DEFAULT_DATASET, RUN_ID, load_benchmark_config, resolve_project_path
from .constants import GAP_COL, KNOWN_DATASETS, STRATEGY_ORDER
from .evaluation import sanity
from .evaluation.eval import ScoreRange, evaluate_strategies, save_metrics
from .pipeline.distributions import MutationModel, build_mutation_model
from .pipeline.filters import DIFFICULTY_FILTERS, apply_difficulty_filter
from .pipeline.mutants import MUTANT_STRATEGIES, describe_batch, generate_mutants
from .pipeline.table import annotate_gaps
from .utilities.dataset_loader import load_ground_truth, resolve_dataset_path

logger = logging.getLogger(__name__)


def run_phase_load(dataset: str, config: Dict, check: bool = False) -> pd.DataFrame:
    """Load the ground-truth table and attach mutational gaps."""
    logger.info("\n" + "=" * 70)
    logger.info("PHASE A: LOAD")
    logger.info("=" * 70)

    path = resolve_dataset_path(dataset, config)
    df = load_ground_truth(path)

    if check:
        sanity.check_sequence_table(df, dataset)

    return annotate_gaps(df)


def run_phase_filter(
    df: pd.DataFrame,
    filter_name: str,
    rng: np.random.Generator,
) -> pd.DataFrame:
    """Build the training subset."""
    logger.info("\n" + "=" * 70)
    logger.info(f"PHASE B: DIFFICULTY FILTER ({filter_name})")
    logger.info("=" * 70)

    df_train = apply_difficulty_filter(df, filter_name, rng=rng)
    if GAP_COL in df_train.columns and len(df_train):
        logger.info(f"Training subset gap range: {df_train[GAP_COL].min()}..{df_train[GAP_COL].max()}")
    return df_train


def run_phase_generate(
    df_train: pd.DataFrame,
    strategies: List[str],
    n_mutants: int,
    rng: np.random.Generator,
) -> Tuple[Dict[str, List[str]], MutationModel]:
    """Run the mutant strategies in a fixed order against one mutation model."""
    logger.info("\n" + "=" * 70)
    logger.info("PHASE C: GENERATE MUTANTS")
    logger.info("=" * 70)

    unknown = sorted(set(strategies) - set(STRATEGY_ORDER))
    if unknown:
        raise ValueError(
            f"Unknown mutant strategies {unknown}. "
            f"Choose from: {sorted(MUTANT_STRATEGIES)}"
        )

    model = build_mutation_model(df_train)
    ordered = [s for s in STRATEGY_ORDER if s in strategies]

    batches = {}
    for strategy in ordered:
        batches[strategy] = generate_mutants(model, strategy, n_mutants, rng=rng)
    return batches, model


def run_phase_evaluate(
    batches: Dict[str, List[str]],
    df_source: pd.DataFrame,
    default_score: float,
    distinct_pairs: bool = False,
) -> pd.DataFrame:
    logger.info("\n" + "=" * 70)
    logger.info("PHASE D: EVALUATION")
    logger.info("=" * 70)

    score_range = ScoreRange.from_table(df_source)
    logger.info(f"Normalization range: [{score_range.min_score:.4f}, {score_range.max_score:.4f}]")
    return evaluate_strategies(
        batches,
        df_source,
        default_score=default_score,
        score_range=score_range,
        distinct_pairs=distinct_pairs,
    )


def save_batches(
    batches: Dict[str, List[str]],
    model: MutationModel,
    run_name: str,
    output_dir: Path,
) -> List[Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for strategy, batch in batches.items():
        path = output_dir / f"{run_name}_{strategy}_mutants.csv"
        describe_batch(batch, model.consensus, strategy).to_csv(path, index=False)
        logger.info(f"Saved {len(batch)} {strategy} mutants to {path}")
        paths.append(path)
    return paths


def run_benchmark(
    dataset: str,
    config: Dict,
    filter_name: Optional[str] = None,
    strategies: Optional[List[str]] = None,
    n_mutants: Optional[int] = None,
    output_dir: Optional[Path] = None,
    check: bool = False,
    distinct_pairs: bool = False,
) -> pd.DataFrame:
    """
    Run every phase for one dataset and write mutants and metrics to CSV.

    A single generator seeded from config["seed"] is consumed first by the
    difficulty filter, then by the positional strategy, so runs with the
    same seed are identical.

    Returns:
        Metrics DataFrame, one row per strategy
    """
    filter_name = filter_name or config["difficulty_filter"]
    strategies = strategies or config["strategies"]
    n_mutants = n_mutants if n_mutants is not None else config["n_mutants"]
    output_dir = output_dir or resolve_project_path(config["results_dir"])

    rng = np.random.default_rng(config["seed"])
    logger.info(f"Run {RUN_ID}: dataset={dataset}, filter={filter_name}, seed={config['seed']}")

    df = run_phase_load(dataset, config, check=check)
    df_train = run_phase_filter(df, filter_name, rng)
    batches, model = run_phase_generate(df_train, strategies, n_mutants, rng)

    if check:
        results = {
            f"{strategy} batch": sanity.check_mutant_batch(batch, model.consensus, strategy)
            for strategy, batch in batches.items()
        }
        sanity.print_check_report(results)

    metrics_df = run_phase_evaluate(batches, df, config["default_score"], distinct_pairs)
    metrics_df.insert(0, "dataset", dataset)
    metrics_df.insert(1, "difficulty_filter", filter_name)
    metrics_df["n_train"] = len(df_train)
    metrics_df["run_id"] = RUN_ID

    run_name = f"{dataset}_{filter_name}"
    save_batches(batches, model, run_name, output_dir)
    save_metrics(metrics_df, run_name, output_dir)
    return metrics_df


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Build training subsets, propose mutants, and evaluate them"
    )
    parser.add_argument(
        "--dataset",
        default=None,
        help=f"Dataset name, e.g. {', '.join(KNOWN_DATASETS)} (default: $MUTBENCH_DATASET or {DEFAULT_DATASET})"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to benchmark config (default: config/benchmark.yaml)"
    )
    parser.add_argument(
        "--filter",
        choices=sorted(DIFFICULTY_FILTERS),
        default=None,
        help="Difficulty filter used to build the training subset"
    )
    parser.add_argument(
        "--strategy",
        choices=sorted(MUTANT_STRATEGIES),
        action="append",
        default=None,
        help="Mutant strategy (repeatable; default: all)"
    )
    parser.add_argument(
        "-n", "--n-mutants",
        type=int,
        default=None,
        help="Mutants per strategy"
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--default-score",
        type=float,
        default=None,
        help="Score imputed for mutants missing from the ground truth"
    )
    parser.add_argument("--output", type=Path, default=None, help="Output directory")
    parser.add_argument("--check", action="store_true", help="Run sanity checks")
    parser.add_argument(
        "--distinct-pairs",
        action="store_true",
        help="Compute diversity over distinct pairs only (default: full square matrix)"
    )

    args = parser.parse_args(argv)

    config = load_benchmark_config(args.config)
    if args.seed is not None:
        config["seed"] = args.seed
    if args.default_score is not None:
        config["default_score"] = args.default_score

    dataset = args.dataset or DEFAULT_DATASET
    logger.info("Mutant Benchmark")
    logger.info(f"Dataset: {dataset}")

    metrics_df = run_benchmark(
        dataset,
        config,
        filter_name=args.filter,
        strategies=args.strategy,
        n_mutants=args.n_mutants,
        output_dir=args.output,
        check=args.check,
        distinct_pairs=args.distinct_pairs,
    )
    logger.info("\n" + metrics_df.to_string(index=False))


if __name__ == "__main__":
    main()
