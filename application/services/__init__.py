"""
Application services package.

Contains the repository upload services used by the HTTP routes.
"""

from application.services.upload import UploadService

__all__ = ["UploadService"]
