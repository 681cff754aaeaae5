"""
Application routes package.

Contains all API endpoint blueprints for the git upload service.
"""

from application.routes.system import system_bp
from application.routes.upload import upload_bp

__all__ = ["system_bp", "upload_bp"]
