#!/usr/bin/env python3
"""
Entry point script to run the git upload service.

This script should be run from the project root directory:
    python run.py

Environment variables:
    APP_HOST: Host to bind to (default: 127.0.0.1)
    APP_PORT: Port to bind to (default: 8080)
    APP_DEBUG: Enable debug mode (default: false)
"""
import asyncio

from hypercorn.asyncio import serve
from hypercorn.config import Config

if __name__ == "__main__":
    from application.app import app, logger
    from common.config.config import APP_DEBUG, APP_HOST, APP_PORT

    config = Config()
    config.bind = [f"{APP_HOST}:{APP_PORT}"]

    # Clone and push are blocking network calls; allow in-flight uploads to finish
    config.graceful_timeout = 30

    if APP_DEBUG:
        config.loglevel = "DEBUG"
        config.accesslog = "-"  # Log to stdout
        config.errorlog = "-"

    logger.info(f"Starting git upload service on {APP_HOST}:{APP_PORT}")
    logger.info(f"Debug mode: {APP_DEBUG}")

    asyncio.run(serve(app, config))
