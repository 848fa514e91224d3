from __future__ import annotations


class SoftlearnError(Exception):
    """Base class for errors raised by softlearn."""


class InvalidInputError(SoftlearnError, ValueError):
    """Inputs violate a precondition (label range, sample counts, payload fields)."""


class DimensionMismatchError(SoftlearnError, ValueError):
    """A point or batch does not match the model's feature dimensionality."""
