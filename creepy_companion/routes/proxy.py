"""Image proxy so the browser can load generated images without CORS trouble."""

import logging
from urllib.parse import urlparse

import httpx
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from creepy_companion.config import Settings

from .deps import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_CONTENT_TYPE = "image/jpeg"
CACHE_CONTROL = "public, max-age=3600"


def is_allowed_host(url: str, allowed_domains: list[str]) -> bool:
    """True when the URL's host is an allowed domain or a subdomain of one."""
    host = (urlparse(url).hostname or "").lower()
    if not host:
        return False
    return any(host == d or host.endswith(f".{d}") for d in allowed_domains)


@router.get("/proxy-image")
async def proxy_image(url: str, settings: Settings = Depends(get_settings)):
    """Fetch an image from an allowed RunPod host and relay it."""
    if not url:
        raise HTTPException(400, "URL parameter is required")
    if not is_allowed_host(url, settings.proxy_allowed_domains):
        raise HTTPException(403, "Domain not allowed")

    try:
        # Only the allow-listed URL itself is fetched; redirects are refused
        async with httpx.AsyncClient(timeout=30, follow_redirects=False) as client:
            resp = await client.get(url)
    except httpx.HTTPError as e:
        logger.error("Proxy error: %s", e)
        raise HTTPException(500, {"error": "Failed to proxy image", "details": str(e)})

    if resp.is_redirect:
        logger.warning("Proxy refused redirect from %s to %s", url, resp.headers.get("location"))
        raise HTTPException(502, {"error": "Failed to fetch image", "status": resp.status_code})
    if not resp.is_success:
        raise HTTPException(resp.status_code, {"error": "Failed to fetch image", "status": resp.status_code})

    return Response(
        content=resp.content,
        media_type=resp.headers.get("content-type", DEFAULT_CONTENT_TYPE),
        headers={"Cache-Control": CACHE_CONTROL},
    )
