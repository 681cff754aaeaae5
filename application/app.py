import sys
from pathlib import Path

# Load environment variables FIRST, before any other imports
from dotenv import load_dotenv
load_dotenv()

# Add project root to path (for IDE compatibility when running directly)
project_root = Path(__file__).parent.parent.resolve()
project_root_str = str(project_root)

if sys.path and Path(sys.path[0]).name == 'application':
    sys.path[0] = project_root_str
elif project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

import logging

from quart import Quart, Response, jsonify
from quart_rate_limiter import RateLimiter
from quart_schema import QuartSchema

from application.routes import system_bp, upload_bp
from application.routes.common.error_handlers import register_error_handlers
from common.config.config import (
    APP_DEBUG,
    APP_LOG_FILE,
    CORS_ORIGIN,
    MAX_FILE_SIZE_BYTES,
    MAX_UPLOAD_FILES,
)

# Configure root logging to both stdout and a file for debugging/triage.
log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logging.basicConfig(
    level=logging.DEBUG if APP_DEBUG else logging.INFO,
    format=log_format,
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(APP_LOG_FILE, mode="a"),
    ],
)

logger = logging.getLogger(__name__)

app = Quart(__name__)

# Whole multipart body: every file at its limit plus form fields
app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_FILES * MAX_FILE_SIZE_BYTES + 1024 * 1024

# Initialize rate limiter
RateLimiter(app)

QuartSchema(
    app,
    info={"title": "Git Upload Service", "version": "1.0.0"},
    tags=[
        {"name": "Upload", "description": "Commit uploaded files to a remote branch"},
        {"name": "System", "description": "System and health endpoints"},
    ],
)

register_error_handlers(app)

# Register blueprints
app.register_blueprint(upload_bp)  # URL prefix already set in blueprint
app.register_blueprint(system_bp)  # URL prefix already set in blueprint


@app.before_serving
async def startup() -> None:
    logger.info(f"CORS Origin: {CORS_ORIGIN}")
    logger.info(f"Upload limits: {MAX_UPLOAD_FILES} files, {MAX_FILE_SIZE_BYTES} bytes per file")


@app.after_request
async def apply_cors(response: Response) -> Response:
    response.headers["Access-Control-Allow-Origin"] = CORS_ORIGIN
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
    return response


# Handle OPTIONS preflight requests for CORS
@app.route("/<path:path>", methods=["OPTIONS"])
async def handle_options(path: str) -> tuple[Response, int]:
    """Handle CORS preflight OPTIONS requests."""
    return jsonify({"status": "ok"}), 200
