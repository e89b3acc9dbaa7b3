"""
Caller errors raised by distance scoring.

Both are malformed-input conditions, not transient faults: they are raised
immediately and never retried. They subclass ValueError so callers that
already treat bad input as ValueError keep working.
"""


class DistanceError(ValueError):
    """Base class for rejected scoring calls."""


class LengthMismatch(DistanceError):
    """
    Comparison length does not fit the supplied vectors.

    Attributes:
        length: Requested comparison length (None when the call failed on
            input shape before a length was checked)
        attempt_length: Size of the attempt vector, or None if unknown
        profile_length: Size of the profile vector (row width for a
            profile matrix), or None if unknown
    """

    def __init__(
        self,
        length,
        attempt_length: int | None,
        profile_length: int | None,
        reason: str = "",
    ):
        self.length = length
        self.attempt_length = attempt_length
        self.profile_length = profile_length
        message = reason or (
            f"length={length} exceeds vector sizes "
            f"(attempt={attempt_length}, profile={profile_length})"
        )
        super().__init__(message)


class NonFiniteInput(DistanceError):
    """A compared element is NaN or infinite."""

    def __init__(self, vector: str, index: int, value: float):
        self.vector = vector
        self.index = index
        self.value = value
        super().__init__(f"{vector}[{index}] is not finite: {value!r}")
