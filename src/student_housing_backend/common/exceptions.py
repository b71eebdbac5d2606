"""
This file contains custom, application-specific exceptions.
"""

class FinanceError(Exception):
    """Base class for all errors raised by the finance services."""
    pass

class NotFoundError(FinanceError):
    """Raised when no student, payment or report matches the given key."""
    pass

class StoreUnavailableError(FinanceError):
    """Raised when a database call fails, times out or returns a malformed row."""
    pass

class ValidationFailedError(FinanceError):
    """Raised when input or a stored record is missing required fields."""
    pass
