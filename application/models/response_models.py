"""
Response models for the git upload API.

Defines all response DTOs used by the API endpoints.
"""

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    """Successful upload."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    files_processed: int = Field(..., alias="filesProcessed")
    branch: str
    provider: str
    commit_message: str = Field(..., alias="commitMessage")


class UploadErrorResponse(BaseModel):
    """Failed upload."""

    error: str = Field(..., description="Short error code")
    message: str = Field(..., description="Human readable message")
    details: str = Field(..., description="Diagnostic details for operators")


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime: float = Field(..., description="Seconds since the application started")
    git_config: Dict[str, str]


class ValidateRepoResponse(BaseModel):
    valid: bool
    message: str
    provider: str
