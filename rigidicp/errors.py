"""Exceptions raised by the registration routines."""


class ICPError(Exception):
    """Base class for all registration errors."""


class ShapeMismatchError(ICPError, ValueError):
    """Operand matrices have incompatible dimensions."""


class InvalidConfigurationError(ICPError, ValueError):
    """Settings are out of range or disagree with the input data."""


class DegenerateInputError(ICPError, ValueError):
    """Point sets are empty or not laid out as one point per row."""
