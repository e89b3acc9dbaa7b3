#!/usr/bin/env python3
"""Evaluate the distance metric against a labelled keystroke dataset.

Scores every labelled (attempt, profile) pair with biokey.distance and
reports FAR/FRR at a threshold. Optionally sweeps thresholds and writes a
Markdown report.

Dataset format (JSON list):
    [
      {"attempt": [...], "profile": [...], "label": "GENUINE"},
      {"attempt": [...], "profile": [...], "label": "IMPOSTER", "length": 20},
      ...
    ]

"length" defaults to the attempt's full length. Rows the metric rejects
(length mismatch, NaN/inf timings) are skipped and logged.

This script is read-only except for --report.

Usage:
    python scripts/evaluate_dataset.py data/typing_dataset.json
    python scripts/evaluate_dataset.py data/typing_dataset.json --threshold 2.0
    python scripts/evaluate_dataset.py data/typing_dataset.json --sweep
    python scripts/evaluate_dataset.py data/typing_dataset.json --report docs/evaluation.md
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path for biokey imports
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from biokey.config import DEFAULT_EVAL_THRESHOLD
from biokey.distance import distance
from biokey.errors import DistanceError
from biokey.evaluation import (
    build_report_markdown,
    equal_error_point,
    evaluate_at_threshold,
    sweep_thresholds,
)

logger = logging.getLogger(__name__)


def load_dataset(path: Path) -> list[dict]:
    """Load labelled rows from a JSON file."""
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found: {path}")

    with open(path) as f:
        rows = json.load(f)

    if not isinstance(rows, list):
        raise ValueError(f"Dataset must be a JSON list, got {type(rows).__name__}")
    return rows


def score_rows(rows: list[dict]) -> tuple[list[dict], int]:
    """Score each row; returns (samples, skipped_count).

    Samples carry 'score' and 'label' for biokey.evaluation.
    """
    samples = []
    skipped = 0

    for index, row in enumerate(rows):
        attempt = row.get("attempt") if isinstance(row, dict) else None
        profile = row.get("profile") if isinstance(row, dict) else None
        if not isinstance(attempt, list) or not isinstance(profile, list):
            logger.warning("Skipping row %d: 'attempt' and 'profile' must both be lists", index)
            skipped += 1
            continue

        length = row.get("length", len(attempt))
        try:
            score = distance(attempt, profile, length, strict=True)
        except DistanceError as e:
            logger.warning("Skipping row %d: %s", index, e)
            skipped += 1
            continue

        samples.append({"score": score, "label": row.get("label", "")})

    return samples, skipped


def print_distance_stats(title: str, scores: list[float]) -> None:
    if not scores:
        return
    ordered = sorted(scores)
    print(f"{title} distance stats:")
    print(f"  Min:    {ordered[0]:.4f}")
    print(f"  Max:    {ordered[-1]:.4f}")
    print(f"  Mean:   {sum(ordered) / len(ordered):.4f}")
    print(f"  Median: {ordered[len(ordered) // 2]:.4f}")
    print()


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Evaluate the keystroke distance metric against a labelled dataset."
    )
    parser.add_argument("dataset", type=Path, help="Path to labelled dataset JSON")
    parser.add_argument(
        "--threshold",
        type=float,
        default=DEFAULT_EVAL_THRESHOLD,
        help=f"Accept when distance <= threshold (default: {DEFAULT_EVAL_THRESHOLD})",
    )
    parser.add_argument(
        "--sweep",
        action="store_true",
        help="Sweep thresholds from 0.0 to the largest observed distance",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=40,
        help="Number of sweep steps (default: 40)",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Write a Markdown report to this path",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    print("=" * 60)
    print("EVALUATE KEYSTROKE DATASET")
    print("=" * 60)

    try:
        rows = load_dataset(args.dataset)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    try:
        samples, skipped = score_rows(rows)
        result = evaluate_at_threshold(samples, args.threshold)
    except ValueError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(f"Rows: {len(rows)}  scored: {len(samples)}  skipped: {skipped}")
    print()

    if not samples:
        print("ERROR: No scoreable rows in dataset.")
        sys.exit(1)

    genuine = [s["score"] for s in samples if str(s["label"]).strip().upper() == "GENUINE"]
    imposter = [s["score"] for s in samples if str(s["label"]).strip().upper() == "IMPOSTER"]
    print_distance_stats("Genuine", genuine)
    print_distance_stats("Imposter", imposter)

    far = "N/A" if result["far"] is None else f"{result['far']:.4f}"
    frr = "N/A" if result["frr"] is None else f"{result['frr']:.4f}"
    print(f"Threshold: {args.threshold:.4f}")
    print(f"  FAR: {far}  ({result['false_accepts']}/{result['imposter_count']})")
    print(f"  FRR: {frr}  ({result['false_rejects']}/{result['genuine_count']})")

    if args.sweep:
        import numpy as np

        print()
        print("=" * 60)
        print("THRESHOLD SWEEP")
        print("=" * 60)
        print(f"{'Threshold':>10}  {'FAR':>10}  {'FRR':>10}")
        print("-" * 36)

        top = max(s["score"] for s in samples)
        sweep = sweep_thresholds(samples, np.linspace(0.0, top, max(args.steps, 2)))
        for row in sweep:
            row_far = "N/A" if row["far"] is None else f"{row['far']:.4f}"
            row_frr = "N/A" if row["frr"] is None else f"{row['frr']:.4f}"
            print(f"{row['threshold']:>10.4f}  {row_far:>10}  {row_frr:>10}")

        eer = equal_error_point(sweep)
        print()
        if eer is None:
            print("Equal-error point: N/A (need both GENUINE and IMPOSTER rows)")
        else:
            print(f"Equal-error point: threshold={eer['threshold']:.4f} "
                  f"FAR={eer['far']:.4f} FRR={eer['frr']:.4f}")

    if args.report:
        args.report.parent.mkdir(parents=True, exist_ok=True)
        args.report.write_text(build_report_markdown(result, len(samples)))
        print()
        print(f"Report written to {args.report}")


if __name__ == "__main__":
    main()
