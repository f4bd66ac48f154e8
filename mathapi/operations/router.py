"""Protected arithmetic endpoints."""

from typing import Annotated

import anyio
import anyio.to_thread
from fastapi import APIRouter, Depends

from mathapi.audit.logger import AuditLogger
from mathapi.audit.schemas import OperationName
from mathapi.auth.dependencies import get_current_user
from mathapi.dependencies import get_audit_logger

from .bigmath import divide, factorial_string, multiply
from .dependencies import openapi_body, operation_body
from .exceptions import NegativeFactorialError
from .schemas import BinaryOperationRequest, FactorialRequest, FactorialResult, FloatResult

router = APIRouter(tags=["operations"], dependencies=[Depends(get_current_user)])

BinaryPayload = Annotated[BinaryOperationRequest, Depends(operation_body(BinaryOperationRequest))]
FactorialPayload = Annotated[FactorialRequest, Depends(operation_body(FactorialRequest))]


@router.post(
    "/multiply",
    response_model=FloatResult,
    openapi_extra=openapi_body(BinaryOperationRequest),
)
async def multiply_endpoint(
    payload: BinaryPayload,
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
) -> FloatResult:
    result = multiply(payload.a, payload.b)
    await audit.record(OperationName.multiply, [payload.a, payload.b], result)
    return FloatResult(result=result)


@router.post(
    "/divide",
    response_model=FloatResult,
    openapi_extra=openapi_body(BinaryOperationRequest),
)
async def divide_endpoint(
    payload: BinaryPayload,
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
) -> FloatResult:
    """Divide A by B.

    Raises:
        DivisionByZeroError: If B is zero (400).
    """
    result = divide(payload.a, payload.b)
    await audit.record(OperationName.divide, [payload.a, payload.b], result)
    return FloatResult(result=result)


@router.post(
    "/factorial",
    response_model=FactorialResult,
    openapi_extra=openapi_body(FactorialRequest),
)
async def factorial_endpoint(
    payload: FactorialPayload,
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
) -> FactorialResult:
    """Compute N! exactly.

    The product and its decimal rendering are CPU bound, so they run in a
    worker thread and large inputs do not stall other requests.

    Raises:
        NegativeFactorialError: If N is negative (400).
    """
    if payload.n < 0:
        raise NegativeFactorialError(payload.n)

    result = await anyio.to_thread.run_sync(factorial_string, payload.n)
    await audit.record(OperationName.factorial, [payload.n], result)
    return FactorialResult(result=result)
