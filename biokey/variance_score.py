"""
Variance-aware distance against per-feature profile statistics.

Plain Euclidean distance treats a 20 ms deviation the same on a key the
user types like a metronome and on one they type erratically. This score
normalizes each deviation by the profile's spread for that feature:

    s_i    = max(std_i, MIN_FEATURE_STD)
    z_i    = clamp((attempt_i - mean_i) / s_i, -MAX_Z, MAX_Z)
    w_i    = max(log(max(count_i, 2) + 1) / s_i, 0.01)
    score  = sqrt( Σ w_i · huber(z_i) / Σ w_i )

Weights favour features seen many times (log of sample count) and
features with a tight spread (1 / s). Clamping plus Huber loss keeps a
single wild keystroke from dominating the score.

Like distance(), the result is a non-negative dissimilarity with no
built-in threshold. It is bounded above by sqrt(huber(MAX_Z)).
"""

import logging
import math

import numpy as np

from biokey import config
from biokey.distance import as_vector, check_finite, check_length

logger = logging.getLogger(__name__)

MIN_WEIGHT = 0.01


def huber_loss(value, delta: float | None = None):
    """
    Quadratic for |value| <= delta, linear beyond.

    Accepts a scalar (returns float) or an array (returns an array of the
    same shape).
    """
    if delta is None:
        delta = config.HUBER_DELTA
    abs_value = np.abs(value)
    loss = np.where(
        abs_value <= delta,
        0.5 * abs_value * abs_value,
        delta * (abs_value - 0.5 * delta),
    )
    return float(loss) if loss.ndim == 0 else loss


def variance_aware_distance(
    attempt,
    mean,
    std,
    sample_count,
    length: int | None = None,
    strict: bool | None = None,
) -> float:
    """
    Weighted Huber distance of an attempt from a profile's mean/std.

    Args:
        attempt: Live feature vector
        mean: Profile mean per feature
        std: Profile standard deviation per feature
        sample_count: Number of enrollment samples behind each feature
        length: Leading features to compare (default: len(attempt))
        strict: Check compared elements for NaN/inf. None uses
            config.STRICT_MODE.

    Returns:
        Non-negative float; 0.0 when attempt equals mean or length is 0.

    Raises:
        LengthMismatch: length exceeds any of the four inputs
        NonFiniteInput: strict mode and a compared element is NaN/inf
    """
    if strict is None:
        strict = config.STRICT_MODE

    attempt = as_vector(attempt, "attempt")
    stats = {
        "mean": as_vector(mean, "mean"),
        "std": as_vector(std, "std"),
        "sample_count": as_vector(sample_count, "sample_count"),
    }
    if length is None:
        length = attempt.shape[0]

    shortest_stat = min(v.shape[0] for v in stats.values())
    check_length(length, attempt.shape[0], shortest_stat)
    if length == 0:
        return 0.0

    attempt = attempt[:length]
    mean, std, counts = (stats[k][:length] for k in ("mean", "std", "sample_count"))
    if strict:
        check_finite(attempt, "attempt")
        check_finite(mean, "mean")
        check_finite(std, "std")
        check_finite(counts, "sample_count")

    floored_std = np.maximum(std, config.MIN_FEATURE_STD)
    z = np.clip((attempt - mean) / floored_std, -config.MAX_Z, config.MAX_Z)

    losses = huber_loss(z)

    stability = np.log(np.maximum(counts, 2.0) + 1.0)
    weights = np.maximum(stability / floored_std, MIN_WEIGHT)

    weighted = float(np.sum(weights * losses))
    total_weight = float(np.sum(weights))
    result = math.sqrt(weighted / total_weight)
    logger.debug("Variance-aware score %.4f over %d features", result, length)
    return result
