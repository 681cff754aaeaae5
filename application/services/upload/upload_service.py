"""
Upload orchestrator.

Validates an UploadRequest, then runs provider detection, credential
formatting and the repository workspace sequence. Any failure is passed
through classify_error() and re-raised as UploadFailedError.
"""

import logging
from typing import Optional

from common.config.config import (
    DEFAULT_COMMIT_MESSAGE,
    GIT_BINARY,
    GIT_CLONE_DEPTH,
    UPLOAD_WORK_DIR,
)
from application.services.upload.archive import expand_files
from application.services.upload.credentials import configure_authentication
from application.services.upload.errors import (
    UploadFailedError,
    ValidationError,
    classify_error,
)
from application.services.upload.provider_detector import detect_provider
from application.services.upload.types import (
    CREDENTIAL_TYPES,
    AuthMethod,
    BasicCredentials,
    OperationResult,
    SshCredentials,
    TokenCredentials,
    UploadRequest,
)
from application.services.upload.workspace import RepositoryWorkspace

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Files uploaded successfully"


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, bytes):
        return not value.strip()
    return not str(value).strip()


def validate_upload_request(request: UploadRequest) -> AuthMethod:
    """Fail fast on missing or mismatched fields before any I/O happens."""
    if _is_blank(request.repo_url) or _is_blank(request.branch) or not request.files:
        raise ValidationError(
            "Missing required parameters: repoUrl, branch, or files",
            details="Repository URL, branch and at least one file are required",
        )

    for file in request.files:
        if _is_blank(file.name):
            raise ValidationError("Uploaded file is missing a name")

    if request.auth_method is None or request.credentials is None:
        raise ValidationError("Missing authentication method or credentials")

    try:
        method = AuthMethod(request.auth_method)
    except ValueError:
        raise ValidationError(
            f"Invalid authentication method: {request.auth_method}",
            details="Supported methods: token, ssh, basic",
        )

    credentials = request.credentials
    if not isinstance(credentials, CREDENTIAL_TYPES[method]):
        raise ValidationError(
            f"Credentials do not match authentication method '{method.value}'"
        )

    if isinstance(credentials, TokenCredentials) and _is_blank(credentials.token):
        raise ValidationError(
            "Access token is required", details="Please provide a valid personal access token"
        )
    if isinstance(credentials, BasicCredentials) and (
        _is_blank(credentials.username) or _is_blank(credentials.password)
    ):
        raise ValidationError(
            "Username and password are required",
            details="Please provide both username and password for basic authentication",
        )
    if isinstance(credentials, SshCredentials) and _is_blank(credentials.private_key):
        raise ValidationError(
            "SSH key is required", details="Please provide a valid SSH private key"
        )

    if _is_blank(request.author_name) or _is_blank(request.author_email):
        raise ValidationError("Author name and email are required")

    return method


class UploadService:
    """Commits a set of uploaded files to a branch of a remote repository."""

    def __init__(
        self,
        work_dir: Optional[str] = UPLOAD_WORK_DIR,
        git_binary: str = GIT_BINARY,
        clone_depth: int = GIT_CLONE_DEPTH,
    ):
        self.work_dir = work_dir
        self.git_binary = git_binary
        self.clone_depth = clone_depth

    async def upload(self, request: UploadRequest) -> OperationResult:
        """Run one upload end to end.

        Returns:
            OperationResult on success

        Raises:
            UploadFailedError: with a classified UploadFailure for any failure
        """
        try:
            return await self._upload(request)
        except Exception as e:
            failure = classify_error(e)
            logger.error(f"Upload error [{failure.error}]: {failure.message} ({failure.details})")
            raise UploadFailedError(failure) from e

    async def _upload(self, request: UploadRequest) -> OperationResult:
        logger.info("Starting file upload process...")
        method = validate_upload_request(request)

        provider = detect_provider(request.repo_url)
        logger.info(f"Detected Git provider: {provider.value}")

        commit_message = (request.commit_message or "").strip() or DEFAULT_COMMIT_MESSAGE

        auth = configure_authentication(
            request.repo_url, method, request.credentials, provider, base_dir=self.work_dir
        )
        logger.info(
            f"Using {method.value} authentication for {provider.value}: {auth.display_url}"
        )

        workspace = RepositoryWorkspace(
            auth,
            request.branch,
            base_dir=self.work_dir,
            clone_depth=self.clone_depth,
            git_binary=self.git_binary,
        )
        async with workspace:
            await workspace.clone()
            await workspace.prepare_branch()
            await workspace.configure(request.author_name, request.author_email)

            processed = expand_files(request.files)
            logger.info(f"Processed {len(processed)} files")
            await workspace.write_files(processed)

            await workspace.stage()
            await workspace.commit(commit_message)
            await workspace.push()
            workspace.finish()

        return OperationResult(
            success=True,
            message=SUCCESS_MESSAGE,
            files_processed=len(processed),
            branch=request.branch,
            provider=provider,
            commit_message=commit_message,
        )
