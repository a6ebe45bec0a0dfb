"""Exceptions raised by ROI mask construction and algebra."""


class ROIMaskError(ValueError):
    """Base class for all ROI mask errors."""


class ConstructionInvariantViolation(ROIMaskError):
    """Input runs are unsorted, zero-width or overlap within a row."""


class CoordinateRangeError(ROIMaskError):
    """A coordinate would leave the non-negative voxel index domain."""


class IncompatibleOperands(ROIMaskError):
    """Algebra was attempted on an operand that is not a canonical mask."""
