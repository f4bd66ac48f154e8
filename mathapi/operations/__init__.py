"""Operations module - arithmetic endpoints and primitives."""

from .router import router
from .bigmath import multiply, divide, factorial, factorial_string, to_decimal_string
from .exceptions import InvalidRequestError, DivisionByZeroError, NegativeFactorialError

__all__ = [
    "router",
    "multiply",
    "divide",
    "factorial",
    "factorial_string",
    "to_decimal_string",
    "InvalidRequestError",
    "DivisionByZeroError",
    "NegativeFactorialError",
]
