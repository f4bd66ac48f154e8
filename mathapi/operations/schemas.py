"""Request and response bodies for the arithmetic endpoints."""

import math

from pydantic import AliasChoices, BaseModel, Field, StrictFloat, StrictInt, field_serializer

# Above this magnitude floats are written in exponent form
EXPONENT_THRESHOLD = 1e21


class BinaryOperationRequest(BaseModel):
    """Operands for multiply and divide. Keys are accepted as ``A``/``a`` and ``B``/``b``.

    Both must be JSON numbers; strings and booleans are rejected.
    """

    a: StrictFloat = Field(..., validation_alias=AliasChoices("A", "a"))
    b: StrictFloat = Field(..., validation_alias=AliasChoices("B", "b"))


class FactorialRequest(BaseModel):
    """Factorial input; ``N`` must be a JSON integer."""

    n: StrictInt = Field(..., validation_alias=AliasChoices("N", "n"))


class FloatResult(BaseModel):
    result: float

    @field_serializer("result")
    def serialize_result(self, value: float) -> int | float | str:
        # JSON has no inf/nan literals
        if not math.isfinite(value):
            return str(value)
        if value.is_integer() and abs(value) < EXPONENT_THRESHOLD:
            return int(value)
        return value


class FactorialResult(BaseModel):
    """Exact factorial as a decimal string, free of float precision loss."""

    result: str
