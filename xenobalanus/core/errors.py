"""Typed failures raised by the analysis pipeline."""

import math


class AnalysisError(ValueError):
    """Base class for all input errors detected by the pipeline."""


class DegenerateInputError(AnalysisError):
    """Malformed points or triangles (too few points, zero-area or repeated vertices)."""


class IndexOutOfRangeError(AnalysisError, IndexError):
    """A triangle references a point index outside the input sequence."""


class InvalidThresholdError(AnalysisError):
    """A detector threshold is negative, NaN or below its minimum."""


class MeshModeError(AnalysisError):
    """The mesh index was built without the tables a detector needs."""


class HullError(AnalysisError):
    """A concave hull could not be formed from the given points."""


def check_threshold(name: str, value, minimum: float = 0.0) -> float:
    """Return `value` as float, raising InvalidThresholdError unless finite and >= minimum."""
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidThresholdError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise InvalidThresholdError(f"{name} must be finite, got {value!r}")
    if number < minimum:
        raise InvalidThresholdError(f"{name} must be >= {minimum}, got {value!r}")
    return number
