"""Keystroke-dynamics distance scoring.

Compares an already-extracted attempt feature vector (dwell/flight timings)
against a stored profile and returns a dissimilarity score. Capture,
enrollment, thresholds and the accept/reject decision live outside this
package.
"""
