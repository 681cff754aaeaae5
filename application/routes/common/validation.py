"""
Validation utilities for route handlers.

Provides decorators for automatic request validation using Pydantic models.
"""

import logging
from functools import wraps
from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError
from quart import request

from application.routes.common.error_handlers import format_validation_errors
from application.routes.common.response import APIResponse

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def validate_json(model: Type[T]):
    """
    Decorator to validate JSON request body against Pydantic model.

    Automatically parses and validates the request body, making validated
    data available via request.validated_data attribute.

    Args:
        model: Pydantic model class for validation

    Returns:
        Decorated function with automatic validation

    Example:
        >>> @validate_json(ValidateRepoRequest)
        >>> async def validate_repo():
        >>>     data = request.validated_data
        >>>     return APIResponse.success({"valid": True})

    Validation errors are automatically returned as 400 Bad Request with
    detailed error messages.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                json_data = await request.get_json(silent=True)

                if json_data is None:
                    return APIResponse.error(
                        "Request body required",
                        400,
                        details={"expected": "application/json"},
                    )

                validated = model(**json_data)
                request.validated_data = validated

            except ValidationError as e:
                errors = format_validation_errors(e)
                logger.warning(f"Validation error in {func.__name__}: {errors}")

                return APIResponse.error(
                    "Validation failed", 400, details={"errors": errors}
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator
