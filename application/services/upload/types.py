"""
Shared types and models for repository upload operations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class AuthMethod(str, Enum):
    TOKEN = "token"
    BASIC = "basic"
    SSH = "ssh"


class Provider(str, Enum):
    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"
    AZURE = "azure"
    CODEBERG = "codeberg"
    GENERIC = "generic"


class WorkspaceState(str, Enum):
    CREATED = "created"
    CLONED = "cloned"
    BRANCH_READY = "branch_ready"
    FILES_WRITTEN = "files_written"
    STAGED = "staged"
    COMMITTED = "committed"
    PUSHED = "pushed"
    DONE = "done"
    FAILED = "failed"


@dataclass
class TokenCredentials:
    token: str

    def __repr__(self) -> str:
        return "TokenCredentials(token='***')"


@dataclass
class BasicCredentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"BasicCredentials(username={self.username!r}, password='***')"


@dataclass
class SshCredentials:
    private_key: Union[str, bytes]

    def __repr__(self) -> str:
        return "SshCredentials(private_key='***')"


Credentials = Union[TokenCredentials, BasicCredentials, SshCredentials]

# Which credential payload each auth method expects
CREDENTIAL_TYPES = {
    AuthMethod.TOKEN: TokenCredentials,
    AuthMethod.BASIC: BasicCredentials,
    AuthMethod.SSH: SshCredentials,
}


@dataclass
class InputFile:
    """An uploaded file as received from the request layer."""

    name: str
    content: bytes
    content_type: Optional[str] = None


@dataclass
class MaterializedFile:
    """A file ready to be written into the workspace at a relative path."""

    path: str
    content: bytes


@dataclass
class UploadRequest:
    repo_url: str
    branch: str
    author_name: str
    author_email: str
    auth_method: Union[AuthMethod, str]
    credentials: Optional[Credentials]
    files: List[InputFile] = field(default_factory=list)
    commit_message: Optional[str] = None


@dataclass
class StatusSummary:
    """Counts of staged changes, parsed from porcelain status output."""

    created: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    renamed: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.created) + len(self.modified) + len(self.deleted) + len(self.renamed)


@dataclass
class OperationResult:
    success: bool
    message: str
    files_processed: int
    branch: str
    provider: Provider
    commit_message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "filesProcessed": self.files_processed,
            "branch": self.branch,
            "provider": self.provider.value,
            "commitMessage": self.commit_message,
        }


@dataclass
class UploadFailure:
    error: str
    message: str
    details: str
    http_status: int = 500

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, "message": self.message, "details": self.details}
