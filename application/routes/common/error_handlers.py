"""
Centralized error handling middleware.

Provides consistent error handling across all routes with automatic
error logging and standardized response format.
"""

import logging
from typing import Any, Dict, List

from pydantic import ValidationError
from quart import Quart, jsonify, request
from werkzeug.exceptions import HTTPException, NotFound, RequestEntityTooLarge

from application.routes.common.response import APIResponse
from common.config.config import MAX_FILE_SIZE_BYTES

logger = logging.getLogger(__name__)

AVAILABLE_ROUTES = [
    "GET /api/health",
    "GET /api/test",
    "POST /api/validate-repo",
    "POST /api/upload",
]


def format_validation_errors(error: ValidationError) -> List[Dict[str, Any]]:
    """Flatten pydantic errors into ``{field, message, type}`` entries."""
    errors = []
    for err in error.errors():
        field = " -> ".join(str(loc) for loc in err["loc"])
        errors.append({"field": field, "message": err["msg"], "type": err["type"]})
    return errors


def register_error_handlers(app: Quart) -> None:
    """
    Register centralized error handlers for the application.

    Handles:
    - ValidationError (Pydantic) → 400 Bad Request
    - ValueError → 400 Bad Request
    - RequestEntityTooLarge → 413 with the configured size limit
    - NotFound → 404 listing available routes
    - HTTPException (Werkzeug) → Appropriate status
    - Exception (Generic) → 500 Internal Server Error

    Args:
        app: Quart application instance
    """

    @app.errorhandler(ValidationError)
    async def handle_validation_error(error: ValidationError):
        """
        Handle Pydantic validation errors.

        Returns 400 Bad Request with detailed validation errors.
        """
        errors = format_validation_errors(error)
        logger.warning(f"Validation error: {errors}")
        return APIResponse.error("Validation failed", 400, details={"errors": errors})

    @app.errorhandler(ValueError)
    async def handle_value_error(error: ValueError):
        """
        Handle value errors (typically from business logic).

        Returns 400 Bad Request.
        """
        logger.warning(f"Value error: {error}")
        return APIResponse.error(str(error), 400)

    @app.errorhandler(RequestEntityTooLarge)
    async def handle_request_too_large(error: RequestEntityTooLarge):
        logger.warning(f"Request body too large: {error}")
        return (
            jsonify(
                {
                    "error": "File too large",
                    "message": f"File size exceeds the {MAX_FILE_SIZE_BYTES // (1024 * 1024)}MB limit",
                }
            ),
            413,
        )

    @app.errorhandler(NotFound)
    async def handle_not_found(error: NotFound):
        """
        Handle 404 Not Found errors.

        Lists the routes this service exposes.
        """
        return (
            jsonify(
                {
                    "error": "Not Found",
                    "message": f"Route {request.path} not found",
                    "availableRoutes": AVAILABLE_ROUTES,
                }
            ),
            404,
        )

    @app.errorhandler(HTTPException)
    async def handle_http_exception(error: HTTPException):
        """
        Handle Werkzeug HTTP exceptions.

        Preserves the original HTTP status code.
        """
        logger.info(f"HTTP exception: {error.code} - {error.description}")

        return (
            jsonify(
                {"error": error.name, "message": error.description, "status": "error"}
            ),
            error.code,
        )

    @app.errorhandler(Exception)
    async def handle_generic_exception(error: Exception):
        """
        Handle all uncaught exceptions.

        Returns 500 Internal Server Error.
        Logs full stack trace for debugging.
        """
        logger.exception(f"Unhandled exception: {error}")

        # In production, hide implementation details
        return APIResponse.internal_error("An unexpected error occurred")
