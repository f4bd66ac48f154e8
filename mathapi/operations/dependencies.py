"""Body decoding for the protected arithmetic endpoints.

FastAPI parses a declared body parameter before any dependency runs, so a
caller without a token would see body errors first. Operation handlers
instead receive their payload from ``operation_body``, which depends on
``get_current_user`` and only then reads and validates the raw body.
"""

from typing import Annotated, TypeVar

from fastapi import Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from mathapi.auth.dependencies import get_current_user
from mathapi.auth.models import AuthenticatedUser

ModelT = TypeVar("ModelT", bound=BaseModel)


def operation_body(model: type[ModelT]):
    """Build a dependency that decodes the JSON body into ``model`` after auth.

    Args:
        model: Pydantic model describing the request body.

    Returns:
        Dependency callable yielding a validated ``model`` instance.

    Raises:
        RequestValidationError: If the body is not JSON or does not match the model (400).
    """

    async def decode(
        request: Request,
        user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    ) -> ModelT:
        body = await request.body()
        try:
            return model.model_validate_json(body)
        except ValidationError as e:
            raise RequestValidationError(e.errors(include_url=False), body=body) from e

    return decode


def openapi_body(model: type[BaseModel]) -> dict:
    """``openapi_extra`` documenting a body that is decoded by hand."""
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": model.model_json_schema()}},
        }
    }
