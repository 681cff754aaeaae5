"""
Repository upload services.

Commits uploaded files (including zip archives) to a branch of a remote git
repository using token, basic or SSH authentication.
"""

from application.services.upload.errors import UploadError, UploadFailedError
from application.services.upload.types import (
    AuthMethod,
    BasicCredentials,
    InputFile,
    OperationResult,
    Provider,
    SshCredentials,
    TokenCredentials,
    UploadFailure,
    UploadRequest,
)
from application.services.upload.upload_service import UploadService

__all__ = [
    "AuthMethod",
    "BasicCredentials",
    "InputFile",
    "OperationResult",
    "Provider",
    "SshCredentials",
    "TokenCredentials",
    "UploadError",
    "UploadFailedError",
    "UploadFailure",
    "UploadRequest",
    "UploadService",
]
