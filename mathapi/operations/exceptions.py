"""Exceptions raised by arithmetic handlers."""

from mathapi.auth.exceptions import MathAPIError


class InvalidRequestError(MathAPIError):
    """Raised when a request body violates an operation precondition."""
    pass


class DivisionByZeroError(InvalidRequestError):
    def __init__(self):
        super().__init__(message="division by zero", code="DIVISION_BY_ZERO")


class NegativeFactorialError(InvalidRequestError):
    def __init__(self, n: int):
        super().__init__(message="n must be non-negative", code="NEGATIVE_FACTORIAL")
        self.n = n
