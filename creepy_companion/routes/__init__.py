"""FastAPI API endpoints under /api.

Endpoint groups: health, image generation, sound selection, text generation,
image proxy.
Collaborators (settings, sound cache, RunPod-backed generators and selector) are
resolved through the dependencies in `deps`.
"""

from fastapi import APIRouter

from .health import router as health_router
from .images import router as images_router
from .proxy import router as proxy_router
from .sounds import router as sounds_router
from .text import router as text_router

router = APIRouter()
router.include_router(health_router)
router.include_router(images_router)
router.include_router(sounds_router)
router.include_router(text_router)
router.include_router(proxy_router)
