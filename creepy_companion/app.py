import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from creepy_companion.config import Settings, load_settings
from creepy_companion.routes import router
from creepy_companion.sounds import SoundCache

load_dotenv(Path(__file__).parent.parent / ".env")

logger = logging.getLogger(__name__)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render every HTTP error as {"error": ..., "details"?: ...}."""
    body = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(body, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Unparseable or missing bodies and query params are plain 400s."""
    return JSONResponse({"error": "Invalid request", "details": str(exc.errors())}, status_code=400)


def create_app(settings: Settings | None = None) -> FastAPI:
    resolved = settings or load_settings()
    if not resolved.has_credentials:
        logger.warning("RUNPOD_API_KEY not set: image generation disabled, sounds use fallback rules")

    app = FastAPI(title="Creepy Companion")
    app.state.settings = resolved
    # One cache per process, shared by every sound request
    app.state.sound_cache = SoundCache(capacity=resolved.sound_cache_size)

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (reads settings from the environment)
app = create_app()
