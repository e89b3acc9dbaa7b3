"""
Offline FAR/FRR evaluation over labelled distance scores.

A labelled sample is {"score": float, "label": "GENUINE" | "IMPOSTER"}.
An attempt counts as accepted when score <= threshold:
  - IMPOSTER accepted  = false accept
  - GENUINE rejected   = false reject

This is developer tooling for judging a metric against a dataset. It does
not pick, store or apply production thresholds.
"""

import logging
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

GENUINE = "GENUINE"
IMPOSTER = "IMPOSTER"


def _normalize_label(label) -> str:
    normalized = str(label).strip().upper()
    if normalized not in (GENUINE, IMPOSTER):
        raise ValueError(f"Unknown label: {label!r} (expected GENUINE or IMPOSTER)")
    return normalized


def evaluate_at_threshold(samples: list[dict], threshold: float) -> dict:
    """
    Count false accepts/rejects at one threshold.

    Args:
        samples: List of dicts with 'score' and 'label' keys
        threshold: Accept when score <= threshold

    Returns:
        Dict with threshold, genuine_count, imposter_count, false_accepts,
        false_rejects, far, frr. far/frr are None when the class is empty.
    """
    genuine_count = imposter_count = 0
    false_accepts = false_rejects = 0

    for sample in samples:
        label = _normalize_label(sample["label"])
        accepted = sample["score"] <= threshold

        if label == GENUINE:
            genuine_count += 1
            if not accepted:
                false_rejects += 1
        else:
            imposter_count += 1
            if accepted:
                false_accepts += 1

    far = false_accepts / imposter_count if imposter_count else None
    frr = false_rejects / genuine_count if genuine_count else None

    return {
        "threshold": threshold,
        "genuine_count": genuine_count,
        "imposter_count": imposter_count,
        "false_accepts": false_accepts,
        "false_rejects": false_rejects,
        "far": far,
        "frr": frr,
    }


def sweep_thresholds(samples: list[dict], thresholds) -> list[dict]:
    """evaluate_at_threshold() for each threshold, in the given order."""
    results = [evaluate_at_threshold(samples, float(t)) for t in thresholds]
    logger.debug("Swept %d thresholds over %d samples", len(results), len(samples))
    return results


def equal_error_point(results: list[dict]) -> dict | None:
    """
    Sweep result where FAR and FRR are closest.

    Results with an undefined FAR or FRR are ignored. Ties keep the
    earliest result. Returns None if nothing is comparable.
    """
    best = None
    best_gap = None
    for result in results:
        if result["far"] is None or result["frr"] is None:
            continue
        gap = abs(result["far"] - result["frr"])
        if best_gap is None or gap < best_gap:
            best, best_gap = result, gap
    return best


def _format_rate(rate) -> str:
    return "N/A" if rate is None else f"{rate * 100.0:.2f}%"


def build_report_markdown(
    metrics: dict,
    sample_count: int,
    generated_at: datetime | None = None,
) -> str:
    """Render evaluate_at_threshold() output as a Markdown report."""
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)

    lines = [
        "# BioKey Evaluation Report",
        "",
        f"Generated at: {generated_at.isoformat()}",
        "",
        "## Dataset Summary",
        "",
        f"- Labeled samples: {sample_count}",
        f"- Genuine samples: {metrics['genuine_count']}",
        f"- Imposter samples: {metrics['imposter_count']}",
        "",
        "## Metrics",
        "",
        f"- Threshold: {metrics['threshold']:.4f}",
        f"- FAR (False Accept Rate): {_format_rate(metrics['far'])}",
        f"- FRR (False Reject Rate): {_format_rate(metrics['frr'])}",
        f"- False accepts: {metrics['false_accepts']}",
        f"- False rejects: {metrics['false_rejects']}",
        "",
        "## Notes",
        "",
        "- An attempt is accepted when its distance is <= the threshold.",
        "- FAR counts `IMPOSTER` samples that would be accepted.",
        "- FRR counts `GENUINE` samples that would be rejected.",
        "",
    ]
    return "\n".join(lines)
