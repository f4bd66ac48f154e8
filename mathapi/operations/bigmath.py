"""Arithmetic primitives backing the operation endpoints.

Python integers are arbitrary precision, so factorial results are exact no
matter how large they grow. Rendering them as base-10 strings goes through
``Decimal`` because ``str(int)`` is capped by the interpreter's
integer-to-string digit limit (4300 digits by default).
"""

import math
from decimal import Decimal

from .exceptions import DivisionByZeroError


def multiply(a: float, b: float) -> float:
    return a * b


def divide(a: float, b: float) -> float:
    """Divide ``a`` by ``b``.

    Raises:
        DivisionByZeroError: If ``b`` is zero.
    """
    if b == 0:
        raise DivisionByZeroError()
    return a / b


def factorial(n: int) -> int:
    """Exact product of 1..n. Callers must reject negative ``n``."""
    return math.factorial(n)


def to_decimal_string(value: int) -> str:
    """Render an integer of any size as an exact decimal string."""
    # Decimal(int) imports the integer's internal digits and its exponent is 0,
    # so str() yields plain digits without the int->str limit.
    return str(Decimal(value))


def factorial_string(n: int) -> str:
    return to_decimal_string(factorial(n))
