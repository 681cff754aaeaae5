"""
Upload Routes for the git upload service

Handles multipart uploads that are committed and pushed to a remote branch:
- Parse and validate form fields and files
- Enforce file count and size limits
- Hand the request to UploadService and map its outcome to a response
"""

import logging
from datetime import timedelta
from typing import List

from pydantic import ValidationError
from quart import Blueprint, request
from quart_rate_limiter import rate_limit

from application.models.request_models import UploadForm
from application.models.response_models import UploadErrorResponse, UploadResponse
from application.routes.common.error_handlers import format_validation_errors
from application.routes.common.rate_limiting import default_rate_limit_key
from application.routes.common.response import APIResponse
from application.services.upload import InputFile, UploadFailedError, UploadService
from application.services.upload.errors import redact_credentials
from common.config.config import (
    MAX_FILE_SIZE_BYTES,
    MAX_UPLOAD_FILES,
    UPLOAD_RATE_LIMIT,
    UPLOAD_RATE_WINDOW_MINUTES,
)

logger = logging.getLogger(__name__)

upload_bp = Blueprint("upload", __name__, url_prefix="/api")

# Initialize services
upload_service = UploadService()

_SECRET_FIELDS = {"authToken", "sshKey", "password"}


def _loggable_form(form) -> dict:
    loggable = {}
    for key, value in form.items():
        if key in _SECRET_FIELDS:
            loggable[key] = "***HIDDEN***" if value else "(empty)"
        else:
            loggable[key] = redact_credentials(value)
    return loggable


def _validation_failure(message: str, details: str):
    payload = UploadErrorResponse(error="VALIDATION_ERROR", message=message, details=details)
    return APIResponse.failure(payload.error, payload.message, payload.details, 400)


@upload_bp.route("/upload", methods=["POST"])
@rate_limit(
    UPLOAD_RATE_LIMIT,
    timedelta(minutes=UPLOAD_RATE_WINDOW_MINUTES),
    key_function=default_rate_limit_key,
)
async def upload_files():
    """
    Commit uploaded files to a branch of a remote repository.

    Form fields:
        repoUrl, branch, authMethod, authToken | sshKey | username + password,
        commitMessage, authorName, authorEmail
    Files:
        files: one or more files; .zip uploads are expanded

    Returns:
        200: {success, message, filesProcessed, branch, provider, commitMessage}
        4xx/5xx: {error, message, details}
    """
    form = await request.form
    files = await request.files
    logger.info(f"Upload request received: {_loggable_form(form)}")

    try:
        upload_form = UploadForm.model_validate(form.to_dict())
    except ValidationError as e:
        errors = format_validation_errors(e)
        logger.warning(f"Upload form validation failed: {errors}")
        message = errors[0]["message"].replace("Value error, ", "", 1)
        details = "; ".join(f"{err['field'] or 'form'}: {err['message']}" for err in errors)
        return _validation_failure(message, details)

    uploaded = files.getlist("files") if files else []
    if not uploaded:
        return _validation_failure(
            "No files uploaded", "Please select at least one file to upload"
        )
    if len(uploaded) > MAX_UPLOAD_FILES:
        return _validation_failure(
            "Too many files", f"Maximum {MAX_UPLOAD_FILES} files allowed per upload"
        )

    input_files: List[InputFile] = []
    for storage in uploaded:
        content = storage.read()
        if len(content) > MAX_FILE_SIZE_BYTES:
            return _validation_failure(
                "File too large",
                f"{storage.filename} exceeds the {MAX_FILE_SIZE_BYTES // (1024 * 1024)}MB limit",
            )
        input_files.append(
            InputFile(
                name=storage.filename or "",
                content=content,
                content_type=storage.mimetype or None,
            )
        )

    logger.info(f"Starting file upload process with files: {[f.name for f in input_files]}")

    try:
        result = await upload_service.upload(upload_form.to_upload_request(input_files))
    except UploadFailedError as e:
        failure = e.failure
        return APIResponse.failure(
            failure.error, failure.message, failure.details, failure.http_status
        )

    logger.info("Upload completed successfully")
    response = UploadResponse.model_validate(result.to_dict())
    return APIResponse.success(response.model_dump(by_alias=True))
