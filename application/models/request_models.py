"""
Request models for the git upload API.

Defines all request DTOs used by the API endpoints. Field aliases match the
camelCase names sent by the upload form.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from common.utils.git_validation import validate_branch_name, validate_repo_url
from application.services.upload.types import (
    AuthMethod,
    BasicCredentials,
    Credentials,
    InputFile,
    SshCredentials,
    TokenCredentials,
    UploadRequest,
)
from common.config.config import (
    DEFAULT_AUTHOR_EMAIL,
    DEFAULT_AUTHOR_NAME,
    DEFAULT_BRANCH,
    DEFAULT_COMMIT_MESSAGE,
)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class UploadForm(BaseModel):
    """Form fields of a multipart upload request."""

    model_config = ConfigDict(populate_by_name=True)

    repo_url: str = Field(..., alias="repoUrl", description="Repository URL (HTTPS or SSH)")
    branch: str = Field(default=DEFAULT_BRANCH, description="Target branch")
    auth_method: AuthMethod = Field(
        ..., alias="authMethod", description="Authentication method: token, ssh or basic"
    )
    auth_token: Optional[str] = Field(default=None, alias="authToken")
    ssh_key: Optional[str] = Field(default=None, alias="sshKey")
    username: Optional[str] = Field(default=None, description="Username for basic auth")
    password: Optional[str] = Field(default=None, description="Password or app password")
    commit_message: str = Field(default=DEFAULT_COMMIT_MESSAGE, alias="commitMessage")
    author_name: str = Field(default=DEFAULT_AUTHOR_NAME, alias="authorName")
    author_email: str = Field(default=DEFAULT_AUTHOR_EMAIL, alias="authorEmail")

    @model_validator(mode="before")
    @classmethod
    def drop_empty_fields(cls, data):
        """Empty form fields fall back to their defaults."""
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value not in (None, "")}
        return data

    @field_validator("repo_url")
    @classmethod
    def check_repo_url(cls, value: str) -> str:
        value = value.strip()
        if not validate_repo_url(value):
            raise ValueError("Invalid repository URL")
        return value

    @field_validator("branch")
    @classmethod
    def check_branch(cls, value: str) -> str:
        if not validate_branch_name(value):
            raise ValueError("Branch name contains invalid characters")
        return value

    @model_validator(mode="after")
    def check_credentials(self) -> "UploadForm":
        if self.auth_method == AuthMethod.TOKEN and _is_blank(self.auth_token):
            raise ValueError("Access token is required")
        if self.auth_method == AuthMethod.SSH and _is_blank(self.ssh_key):
            raise ValueError("SSH key is required")
        if self.auth_method == AuthMethod.BASIC and (
            _is_blank(self.username) or _is_blank(self.password)
        ):
            raise ValueError("Username and password are required")
        return self

    def credentials(self) -> Credentials:
        if self.auth_method == AuthMethod.TOKEN:
            return TokenCredentials(token=self.auth_token)
        if self.auth_method == AuthMethod.BASIC:
            return BasicCredentials(username=self.username, password=self.password)
        return SshCredentials(private_key=self.ssh_key)

    def to_upload_request(self, files: List[InputFile]) -> UploadRequest:
        return UploadRequest(
            repo_url=self.repo_url,
            branch=self.branch,
            author_name=self.author_name,
            author_email=self.author_email,
            auth_method=self.auth_method,
            credentials=self.credentials(),
            files=files,
            commit_message=self.commit_message,
        )


class ValidateRepoRequest(BaseModel):
    """Request model for repository URL validation."""

    model_config = ConfigDict(populate_by_name=True)

    repo_url: str = Field(..., alias="repoUrl", description="Repository URL to check")
