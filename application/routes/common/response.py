"""
Response utilities for standardized API responses.

Provides consistent response formatting across all routes.
"""

from typing import Any, Dict, Tuple

from quart import Response, jsonify


class APIResponse:
    """
    Standardized API response helper.

    Ensures consistent response format across all endpoints.
    """

    @staticmethod
    def success(data: Any, status: int = 200) -> Tuple[Response, int]:
        """
        Create a successful response.

        Args:
            data: Response data (dict, list, or serializable object)
            status: HTTP status code (default: 200)

        Returns:
            tuple: (Response object, status code)

        Example:
            >>> return APIResponse.success({"message": "OK"})
        """
        return jsonify(data), status

    @staticmethod
    def error(
        message: str,
        status: int = 400,
        details: Any = None,
        **extra: Any,
    ) -> Tuple[Response, int]:
        """
        Create an error response.

        Args:
            message: Error message
            status: HTTP status code (default: 400)
            details: Additional error details (optional)
            **extra: Additional top-level fields (e.g. ``valid=False``)

        Returns:
            tuple: (Response object, status code)

        Example:
            >>> return APIResponse.error("Invalid request", 400)
            >>> return APIResponse.error("Validation failed", 422, details=validation_errors)
        """
        error_data: Dict[str, Any] = {"error": message}
        if details is not None:
            error_data["details"] = details
        error_data.update(extra)
        return jsonify(error_data), status

    @staticmethod
    def failure(
        error_code: str, message: str, details: Any, status: int = 500
    ) -> Tuple[Response, int]:
        """
        Create an upload failure response: ``{error, message, details}``.

        Args:
            error_code: Short machine-readable error code
            message: Human readable message
            details: Diagnostic text for operators
            status: HTTP status code (default: 500)

        Example:
            >>> return APIResponse.failure("NO_CHANGES", "No changes detected", "...", 409)
        """
        return jsonify({"error": error_code, "message": message, "details": details}), status

    @staticmethod
    def internal_error(message: str = "Internal server error") -> Tuple[Response, int]:
        """
        Create a 500 Internal Server Error response.

        Args:
            message: Custom error message

        Returns:
            tuple: (Response object, 500)
        """
        return APIResponse.error(message, 500)
