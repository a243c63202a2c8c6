#!/usr/bin/env python3
"""
Sanity checks and guardrails for benchmark inputs and outputs.

These checks help catch bad ground-truth files or broken mutant batches early.
They report issues instead of raising; the core operations raise on their own.
"""

import logging
from typing import Dict, List, Sequence, Tuple

import numpy as np
import pandas as pd

from ..constants import SEQUENCE_COL, SCORE_COL

logger = logging.getLogger(__name__)


def _report(name: str, issues: List[str]) -> bool:
    passed = len(issues) == 0
    if passed:
        logger.info(f"✅ {name} checks passed")
    else:
        logger.error(f"❌ {name} checks found {len(issues)} issues:")
        for issue in issues:
            logger.error(f"   - {issue}")
    return passed


def check_sequence_table(
    df: pd.DataFrame,
    name: str = "sequence table",
) -> Tuple[bool, List[str]]:
    """
    Quick sanity checks on a (sequence, score) table.

    Args:
        df: Sequence table
        name: Label used in log messages

    Returns:
        (passed: bool, issues: List[str])
    """
    issues = []

    for col in [SEQUENCE_COL, SCORE_COL]:
        if col not in df.columns:
            issues.append(f"Missing required column: {col}")
    if issues:
        return _report(name, issues), issues

    if len(df) == 0:
        issues.append("Table has 0 rows")

    for col in [SEQUENCE_COL, SCORE_COL]:
        if df[col].isna().any():
            null_count = df[col].isna().sum()
            issues.append(f"Column {col} has {null_count} nulls")

    if not pd.api.types.is_numeric_dtype(df[SCORE_COL]):
        issues.append(f"{SCORE_COL} should be numeric, got {df[SCORE_COL].dtype}")
    else:
        n_infinite = np.isinf(df[SCORE_COL]).sum()
        if n_infinite > 0:
            issues.append(f"Found {n_infinite} infinite values in {SCORE_COL}")

    lengths = df[SEQUENCE_COL].dropna().astype(str).str.len()
    if lengths.nunique() > 1:
        issues.append(
            f"Sequences have {lengths.nunique()} different lengths "
            f"(min {lengths.min()}, max {lengths.max()})"
        )

    # Duplicates are legal: their scores are averaged during evaluation
    dup_count = df.duplicated(subset=[SEQUENCE_COL]).sum()
    if dup_count > 0:
        logger.info(f"{name}: {dup_count} duplicate sequences (scores will be averaged)")

    return _report(name, issues), issues


def check_mutant_batch(
    batch: Sequence[str],
    consensus: str,
    name: str = "mutant batch",
) -> Tuple[bool, List[str]]:
    """
    Sanity checks on a generated batch.

    Args:
        batch: Mutant sequences
        consensus: Consensus sequence the batch was derived from

    Returns:
        (passed: bool, issues: List[str])
    """
    issues = []

    if len(batch) == 0:
        issues.append("Batch is empty")

    bad_length = [seq for seq in batch if len(seq) != len(consensus)]
    if bad_length:
        issues.append(
            f"{len(bad_length)} mutants differ in length from the consensus ({len(consensus)})"
        )

    n_duplicates = len(batch) - len(set(batch))
    if n_duplicates > 0:
        issues.append(f"Found {n_duplicates} duplicate mutants within the batch")

    n_consensus = sum(1 for seq in batch if seq == consensus)
    if n_consensus > 0:
        logger.warning(f"{name}: {n_consensus} mutants equal the consensus sequence")

    return _report(name, issues), issues


def print_check_report(check_results: Dict[str, Tuple[bool, List[str]]]) -> None:
    """
    Log a formatted report of sanity checks.

    Args:
        check_results: Mapping of check name to (passed, issues)
    """
    passed_checks = sum(1 for passed, _ in check_results.values() if passed)

    logger.info(f"\n{'=' * 60}")
    logger.info("SANITY CHECK REPORT")
    logger.info(f"{'=' * 60}")
    logger.info(f"Overall: {passed_checks} / {len(check_results)} checks passed")

    for check_name, (passed, issues) in check_results.items():
        status = "✅" if passed else "❌"
        logger.info(f"{check_name}: {status}")
        for issue in issues:
            logger.info(f"    - {issue}")
