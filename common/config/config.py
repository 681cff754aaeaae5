"""
Configuration module for the git upload service.

All settings are read from the environment (optionally populated from a
.env file) once at import time and exposed as module-level constants.
"""

import os
import tempfile

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _get_bool(key: str, default: str = "false") -> bool:
    return os.getenv(key, default).lower() in ("1", "true", "yes")


# Upload defaults
DEFAULT_BRANCH = os.getenv("UPLOAD_DEFAULT_BRANCH", "main")
DEFAULT_COMMIT_MESSAGE = os.getenv(
    "UPLOAD_DEFAULT_COMMIT_MESSAGE", "Files uploaded via web interface"
)
DEFAULT_AUTHOR_NAME = os.getenv("UPLOAD_DEFAULT_AUTHOR_NAME", "Git Uploader")
DEFAULT_AUTHOR_EMAIL = os.getenv("UPLOAD_DEFAULT_AUTHOR_EMAIL", "uploader@example.com")

# Workspace and git client
UPLOAD_WORK_DIR = os.getenv("UPLOAD_WORK_DIR", tempfile.gettempdir())
GIT_BINARY = os.getenv("GIT_BINARY", "git")
GIT_CLONE_DEPTH = int(os.getenv("GIT_CLONE_DEPTH", "1"))

# Request limits
MAX_UPLOAD_FILES = int(os.getenv("MAX_UPLOAD_FILES", "10"))
MAX_FILE_SIZE_BYTES = int(os.getenv("MAX_FILE_SIZE_BYTES", str(50 * 1024 * 1024)))
MAX_ARCHIVE_ENTRIES = int(os.getenv("MAX_ARCHIVE_ENTRIES", "1000"))
MAX_EXTRACTED_BYTES = int(os.getenv("MAX_EXTRACTED_BYTES", str(100 * 1024 * 1024)))
UPLOAD_RATE_LIMIT = int(os.getenv("UPLOAD_RATE_LIMIT", "100"))
UPLOAD_RATE_WINDOW_MINUTES = int(os.getenv("UPLOAD_RATE_WINDOW_MINUTES", "15"))

# HTTP application
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "*")
APP_ENVIRONMENT = os.getenv("APP_ENVIRONMENT", "development")
APP_HOST = os.getenv("APP_HOST", "127.0.0.1")
APP_PORT = int(os.getenv("APP_PORT", "8080"))
APP_DEBUG = _get_bool("APP_DEBUG")
APP_LOG_FILE = os.getenv("APP_LOG_FILE", "app-log.log")
