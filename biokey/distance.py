"""
Euclidean distance between a keystroke attempt and a stored profile.

The core scoring primitive. Both inputs are already-extracted feature
vectors (dwell/flight timings in whatever layout the extractor chose);
this module only compares them element by element:

    distance(A, P, n) = sqrt( Σ_{i<n} (A[i] - P[i])² )

Guarantees:
- Result is >= 0, exactly 0 only for identical leading elements, symmetric
- `length` is validated against both vectors before any element is read
  (LengthMismatch instead of reading past the end)
- In strict mode, NaN/inf elements raise NonFiniteInput instead of
  producing a meaningless score

Differences are divided by their largest magnitude before squaring, so
the sum of squares cannot underflow to 0 or overflow to inf while the
true distance is representable:

    m = max|A[i] - P[i]|,   distance = m · sqrt( Σ ((A[i] - P[i]) / m)² )

All arithmetic is float64 so scores are comparable across callers
regardless of the dtype they hand in. The score is not normalized and is
not a probability: thresholds belong to the caller.
"""

import logging

import numpy as np
from scipy.spatial.distance import cdist

from biokey import config
from biokey.errors import LengthMismatch, NonFiniteInput

logger = logging.getLogger(__name__)


def _as_array(values, name: str, ndim: int) -> np.ndarray:
    """Convert to a float64 array of the given rank or raise LengthMismatch."""
    try:
        array = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        logger.debug("Rejected %s: %s", name, e)
        raise LengthMismatch(
            None, None, None,
            reason=f"{name} is not a rectangular array of reals: {e}",
        ) from e

    if array.ndim != ndim:
        logger.debug("Rejected %s with shape %s", name, array.shape)
        kind = "one-dimensional" if ndim == 1 else f"a {ndim}-D matrix"
        raise LengthMismatch(
            None, None, None,
            reason=f"{name} must be {kind}, got shape {array.shape}",
        )
    return array


def as_vector(values, name: str) -> np.ndarray:
    """Convert a sequence of reals to a 1-D float64 array."""
    return _as_array(values, name, ndim=1)


def check_length(length, attempt_length: int, profile_length: int) -> None:
    """
    Validate a comparison length against both vector sizes.

    Raises:
        LengthMismatch: length is not a non-negative integer, or exceeds
            min(attempt_length, profile_length)
    """
    reason = ""
    if isinstance(length, bool) or not isinstance(length, (int, np.integer)):
        reason = f"length must be an integer, got {type(length).__name__}"
    elif length < 0:
        reason = f"length must be non-negative, got {length}"
    elif length <= min(attempt_length, profile_length):
        return

    logger.debug(
        "Rejected length=%r (attempt=%d, profile=%d)",
        length, attempt_length, profile_length,
    )
    raise LengthMismatch(length, attempt_length, profile_length, reason=reason)


def check_finite(vector: np.ndarray, name: str) -> None:
    """Raise NonFiniteInput for the first NaN/inf element of `vector`."""
    bad = np.flatnonzero(~np.isfinite(vector))
    if bad.size:
        index = int(bad[0])
        logger.debug("Rejected non-finite %s[%d]", name, index)
        raise NonFiniteInput(name, index, float(vector[index]))


def _scaled_norm(diff: np.ndarray) -> float:
    """Euclidean norm of a difference vector, scaled by its largest entry."""
    if diff.size == 0:
        return 0.0
    scale = float(np.max(np.abs(diff)))
    # 0 means identical; NaN/inf (non-strict input) propagate as-is
    if scale == 0.0 or not np.isfinite(scale):
        return scale
    scaled = diff / scale
    return scale * float(np.sqrt(np.dot(scaled, scaled)))


def distance(attempt, profile, length: int, strict: bool | None = None) -> float:
    """
    Euclidean distance over the first `length` paired elements.

    Args:
        attempt: Live feature vector (sequence or array of reals)
        profile: Stored feature vector, same feature order as attempt
        length: Number of leading elements to compare (features, not
            characters)
        strict: Check compared elements for NaN/inf. None uses
            config.STRICT_MODE.

    Returns:
        Non-negative float. 0.0 when length is 0.

    Raises:
        LengthMismatch: length is negative, not an integer, or larger than
            either vector; or a vector is not a flat sequence of reals
        NonFiniteInput: strict mode and a compared element is NaN/inf
    """
    if strict is None:
        strict = config.STRICT_MODE

    attempt = as_vector(attempt, "attempt")
    profile = as_vector(profile, "profile")
    check_length(length, attempt.shape[0], profile.shape[0])

    attempt = attempt[:length]
    profile = profile[:length]
    if strict:
        check_finite(attempt, "attempt")
        check_finite(profile, "profile")

    return _scaled_norm(attempt - profile)


def score(attempt, profile, strict: bool | None = None) -> float:
    """
    Distance over the attempt's full length.

    Profiles longer than the attempt are compared on their leading
    elements; shorter profiles raise LengthMismatch.
    """
    attempt = as_vector(attempt, "attempt")
    return distance(attempt, profile, attempt.shape[0], strict=strict)


def distance_batch(
    attempt,
    profiles,
    length: int,
    strict: bool | None = None,
) -> np.ndarray:
    """
    Distance from one attempt to many stored profiles.

    Args:
        attempt: (M,) feature vector
        profiles: (N, M') matrix, one profile per row
        length: Leading elements to compare; must fit both M and M'
        strict: As in distance()

    Returns:
        (N,) float64 array; row k equals distance(attempt, profiles[k], length)
    """
    if strict is None:
        strict = config.STRICT_MODE

    attempt = as_vector(attempt, "attempt")
    if len(profiles) == 0:
        matrix = np.zeros((0, attempt.shape[0]), dtype=np.float64)
    else:
        matrix = _as_array(profiles, "profiles", ndim=2)

    check_length(length, attempt.shape[0], matrix.shape[1])

    n_profiles = matrix.shape[0]
    logger.debug("Scoring attempt against %d profiles (length=%d)", n_profiles, length)
    if n_profiles == 0 or length == 0:
        return np.zeros(n_profiles, dtype=np.float64)

    attempt = attempt[:length]
    matrix = matrix[:, :length]
    if strict:
        check_finite(attempt, "attempt")
        bad = np.argwhere(~np.isfinite(matrix))
        if bad.size:
            row, col = (int(v) for v in bad[0])
            logger.debug("Rejected non-finite profiles[%d][%d]", row, col)
            raise NonFiniteInput(f"profiles[{row}]", col, float(matrix[row, col]))

    # Per-row scaling, as in _scaled_norm; rows with a zero or non-finite
    # scale are returned as their scale
    diffs = matrix - attempt
    scales = np.max(np.abs(diffs), axis=1)
    usable = np.isfinite(scales) & (scales > 0.0)
    safe_scales = np.where(usable, scales, 1.0)
    scaled = diffs / safe_scales[:, np.newaxis]

    norms = cdist(scaled, np.zeros((1, length)), metric="euclidean")[:, 0]
    return np.where(usable, safe_scales * norms, scales)
