"""
Application models package.

Contains all request and response DTOs for the git upload API.
"""

from application.models.request_models import UploadForm, ValidateRepoRequest
from application.models.response_models import (
    HealthResponse,
    UploadErrorResponse,
    UploadResponse,
    ValidateRepoResponse,
)

__all__ = [
    # Request models
    "UploadForm",
    "ValidateRepoRequest",
    # Response models
    "HealthResponse",
    "UploadErrorResponse",
    "UploadResponse",
    "ValidateRepoResponse",
]
