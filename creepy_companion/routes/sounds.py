"""Sound selection endpoint. Always answers 200 once the body validates."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from creepy_companion.errors import InvalidRequestError
from creepy_companion.sounds import SoundSelector

from .deps import get_sound_selector
from .models import parse_sound_request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/select-sound")
async def select_sound(
    body: dict[str, Any] = Body(...),
    selector: SoundSelector = Depends(get_sound_selector),
):
    """Pick sounds for a game event: cache, then AI within the deadline, then rules."""
    try:
        request = parse_sound_request(body)
    except InvalidRequestError as e:
        raise HTTPException(e.status_code, e.to_body())

    try:
        response = await selector.select(request)
    except Exception:
        logger.exception("Sound selection error")
        response = selector.fallback(request)

    return response.to_json_dict()
