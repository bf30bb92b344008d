"""Image generation endpoints: sprite-based scenes and plain text-to-image art."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from creepy_companion.errors import ConfigurationError, GenerationError
from creepy_companion.images import ArtGenerator, ImageGenerator
from creepy_companion.models import ImageResponse

from .deps import get_art_generator, get_image_generator
from .models import parse_art_request, parse_image_request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate-image")
async def generate_image(
    body: dict[str, Any] = Body(...),
    generator: ImageGenerator | None = Depends(get_image_generator),
):
    """Compose a horror scene from the pet sprite and narrative via RunPod image edit."""
    try:
        request = parse_image_request(body)
        if generator is None:
            logger.error("Missing RUNPOD_API_KEY")
            raise ConfigurationError("Server configuration error")
        image_url = await generator.generate(request)
    except GenerationError as e:
        raise HTTPException(e.status_code, e.to_body())
    except Exception as e:
        logger.exception("Error generating image")
        raise HTTPException(500, {"error": "Failed to generate image", "details": str(e) or type(e).__name__})

    return ImageResponse(image_url=image_url).to_json_dict()


@router.post("/generate-art")
async def generate_art(
    body: dict[str, Any] = Body(...),
    generator: ArtGenerator | None = Depends(get_art_generator),
):
    """Generate standalone pet art from a text prompt."""
    try:
        request = parse_art_request(body)
        if generator is None:
            logger.error("Missing RunPod configuration")
            raise ConfigurationError("Server configuration error")
        art = await generator.generate(request)
    except GenerationError as e:
        raise HTTPException(e.status_code, e.to_body())
    except Exception as e:
        logger.exception("Error generating art")
        raise HTTPException(500, {"error": "Failed to generate image", "details": str(e) or type(e).__name__})

    return art.to_json_dict()
