"""
System Routes for the git upload service

Health, smoke-test and repository URL validation endpoints.
"""

import logging
import time
from datetime import datetime, timezone

from quart import Blueprint, request

from application.models.request_models import ValidateRepoRequest
from application.models.response_models import HealthResponse, ValidateRepoResponse
from application.routes.common.response import APIResponse
from application.routes.common.validation import validate_json
from application.services.upload.git_command import base_git_env
from application.services.upload.provider_detector import detect_provider
from common.config.config import APP_ENVIRONMENT
from common.utils.git_validation import validate_repo_url

logger = logging.getLogger(__name__)

system_bp = Blueprint("system", __name__, url_prefix="/api")

_started_at = time.monotonic()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@system_bp.route("/health", methods=["GET"])
async def health():
    """Health check with the non-interactive git settings in effect."""
    env = base_git_env()
    response = HealthResponse(
        status="healthy",
        timestamp=_now(),
        uptime=round(time.monotonic() - _started_at, 3),
        git_config={
            "terminal_prompt": env["GIT_TERMINAL_PROMPT"],
            "askpass": env["GIT_ASKPASS"],
        },
    )
    return APIResponse.success(response.model_dump())


@system_bp.route("/test", methods=["GET"])
async def smoke_test():
    return APIResponse.success(
        {
            "message": "Backend is working!",
            "timestamp": _now(),
            "environment": APP_ENVIRONMENT,
        }
    )


@system_bp.route("/validate-repo", methods=["POST"])
@validate_json(ValidateRepoRequest)
async def validate_repo():
    """
    Check a repository URL's syntax and report the detected provider.

    Request body:
        {"repoUrl": "https://github.com/user/repo.git"}

    Returns:
        200: {"valid": bool, "message": str, "provider": str}
        400: missing repoUrl
    """
    data: ValidateRepoRequest = request.validated_data
    repo_url = data.repo_url.strip()
    if not repo_url:
        return APIResponse.error("Repository URL is required", 400, valid=False)

    is_valid = validate_repo_url(repo_url)
    response = ValidateRepoResponse(
        valid=is_valid,
        message="Valid repository URL" if is_valid else "Invalid repository URL format",
        provider=detect_provider(repo_url).value,
    )
    return APIResponse.success(response.model_dump())
