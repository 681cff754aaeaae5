"""
Error taxonomy for repository uploads and the classification pass that turns
any failure into a caller-facing UploadFailure.
"""

import logging
import re
from typing import Optional

from application.services.upload.types import UploadFailure

logger = logging.getLogger(__name__)

# scheme://userinfo@ -> scheme://***@ (scp-style git@host is left alone)
_CREDENTIALS_IN_URL = re.compile(r"([a-zA-Z][a-zA-Z0-9+.-]*://)(?!git@)[^/@\s]*@")


def redact_credentials(text: Optional[str]) -> str:
    """Mask credentials embedded in any URL found in text."""
    if not text:
        return ""
    return _CREDENTIALS_IN_URL.sub(r"\1***@", str(text))


class UploadError(Exception):
    """Base class for all upload failures."""

    error_code = "UPLOAD_FAILED"
    http_status = 500

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = redact_credentials(message)
        self.details = redact_credentials(details) if details else None
        super().__init__(self.message)


class ValidationError(UploadError):
    error_code = "VALIDATION_ERROR"
    http_status = 400


class UnsupportedAuthMethodError(UploadError):
    error_code = "UNSUPPORTED_AUTH_METHOD"
    http_status = 400


class AuthSetupError(UploadError):
    error_code = "AUTH_SETUP_FAILED"


class CloneError(UploadError):
    error_code = "CLONE_FAILED"
    http_status = 502


class NoChangesError(UploadError):
    error_code = "NO_CHANGES"
    http_status = 409


class PushError(UploadError):
    error_code = "PUSH_FAILED"
    http_status = 502


class FileProcessingError(UploadError):
    error_code = "FILE_PROCESSING_FAILED"
    http_status = 400


class CleanupError(UploadError):
    """Logged during teardown, never surfaced as an operation result."""

    error_code = "CLEANUP_FAILED"


class GitCommandError(UploadError):
    """A git subprocess exited non-zero."""

    error_code = "GIT_COMMAND_FAILED"

    def __init__(self, command: str, returncode: Optional[int], stderr: str):
        self.command = redact_credentials(command)
        self.returncode = returncode
        self.stderr = redact_credentials(stderr.strip())
        super().__init__(
            f"git command failed with exit code {returncode}: {self.command}",
            details=self.stderr or None,
        )


class UploadFailedError(Exception):
    """Raised by the upload service once a failure has been classified."""

    def __init__(self, failure: UploadFailure):
        self.failure = failure
        super().__init__(failure.message)


# (needles, user-facing message), checked in order against the raw diagnostic
TRANSPORT_FAILURE_RULES = [
    (("authentication failed", "denied"), "Authentication failed - please check your credentials"),
    (("repository not found",), "Repository not found or access denied"),
    (("network", "timeout", "timed out", "could not resolve host"), "Network error occurred"),
    (("remote rejected",), "Push was rejected by remote"),
]


def match_transport_failure(text: str) -> Optional[str]:
    """Return the user-facing message for a known transport failure, if any."""
    lowered = (text or "").lower()
    for needles, message in TRANSPORT_FAILURE_RULES:
        if any(needle in lowered for needle in needles):
            return message
    return None


def classify_error(error: BaseException) -> UploadFailure:
    """Map any exception to an UploadFailure.

    The raw (redacted) diagnostic always goes into ``details``; ``message`` is
    either a curated transport message, the taxonomy message, or a generic
    fallback. Unknown exception text never becomes the message.
    """
    if isinstance(error, UploadError):
        raw = " ".join(part for part in (error.message, error.details) if part)
        details = error.details or error.message
    else:
        raw = f"{type(error).__name__}: {error}"
        details = redact_credentials(raw)

    transport_message = None
    if isinstance(error, (CloneError, PushError, GitCommandError)) or not isinstance(error, UploadError):
        transport_message = match_transport_failure(raw)

    if isinstance(error, UploadError) and type(error) not in (UploadError, GitCommandError):
        return UploadFailure(
            error=error.error_code,
            message=transport_message or error.message,
            details=details,
            http_status=error.http_status,
        )

    if transport_message:
        return UploadFailure(
            error=PushError.error_code,
            message=transport_message,
            details=details,
            http_status=PushError.http_status,
        )

    if isinstance(error, GitCommandError):
        return UploadFailure(
            error=GitCommandError.error_code,
            message="Git command failed",
            details=details,
            http_status=GitCommandError.http_status,
        )

    logger.error(f"Unclassified upload failure: {details}")
    return UploadFailure(
        error=UploadError.error_code,
        message="Upload failed",
        details=details,
        http_status=UploadError.http_status,
    )
