"""
Configuration for BioKey distance scoring.

Contains:
- Input checking mode (strict finiteness checks)
- Variance-aware scoring constants
- Evaluation defaults (offline tooling only)

Values are read from environment variables once, at import time.
"""

import os

# =============================================================================
# Input Checking
# =============================================================================

# Strict mode checks every compared element for NaN/inf before scoring.
# Callers with trusted extractor output can turn it off per call or here.
STRICT_MODE = os.getenv("BIOKEY_STRICT_MODE", "true").lower() == "true"

# =============================================================================
# Variance-Aware Scoring
# Values carried over from the production scorer; changing them shifts
# every stored score history.
# =============================================================================

# Floor for per-feature std (ms). Stops a freshly enrolled, near-constant
# feature from turning tiny deviations into huge z-scores.
MIN_FEATURE_STD = float(os.getenv("BIOKEY_MIN_FEATURE_STD", "15.0"))

# z-scores are clamped to [-MAX_Z, MAX_Z]
MAX_Z = float(os.getenv("BIOKEY_MAX_Z", "5.0"))

# Huber loss switches from quadratic to linear beyond this |z|
HUBER_DELTA = float(os.getenv("BIOKEY_HUBER_DELTA", "2.5"))

# =============================================================================
# Evaluation (scripts/evaluate_dataset.py)
# =============================================================================

# Accept when distance <= threshold. Matches the production success
# threshold; used only for offline FAR/FRR reports.
DEFAULT_EVAL_THRESHOLD = float(os.getenv("BIOKEY_EVAL_THRESHOLD", "1.75"))
