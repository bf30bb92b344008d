"""Request body parsing with field-specific 400 messages.

Bodies arrive as raw dicts and are validated here instead of in the route
signature, so a bad field produces a 400 with a message naming the field
rather than FastAPI's generic 422.
"""

from typing import Any

from pydantic import ValidationError

from creepy_companion.errors import InvalidRequestError
from creepy_companion.models import (
    MAX_PROMPT_LENGTH,
    ArtRequest,
    ChatRequest,
    GenerationRequest,
    SoundSelectionRequest,
    StorySummaryRequest,
)

IMAGE_FIELD_MESSAGES: dict[str, str] = {
    "narrativeText": "narrativeText is required",
    "petName": "petName is required",
    "archetype": "Valid archetype is required",
    "stage": "Valid stage is required",
    "sourceImages": "At least one source image is required",
    "itemType": "Invalid itemType",
    "ghostName": "Invalid ghostName",
    "fromStage": "Invalid fromStage",
    "toStage": "Invalid toStage",
    "visualTraits": "Invalid visualTraits",
}

# Checked in this order so the first message matches the first missing field
IMAGE_FIELD_ORDER = list(IMAGE_FIELD_MESSAGES)

SOUND_REQUIRED_MESSAGE = "Invalid request: eventType and context are required"
SOUND_FIELD_MESSAGES: dict[str, str] = {
    "eventType": "Invalid eventType",
    "context": "Invalid request: context must be an object",
}

CHAT_PROMPT_MESSAGE = "Invalid request: prompt is required and must be a string"
CHAT_LENGTH_MESSAGE = f"Invalid request: prompt exceeds maximum length of {MAX_PROMPT_LENGTH} characters"

SUMMARY_FIELD_MESSAGES: dict[str, str] = {
    "logs": "Invalid request: logs array is required",
    "petName": "Invalid request: petName is required and must be a string",
    "finalStats": "Invalid request: finalStats is required",
    "totalAge": "Invalid request: totalAge is required and must be a number",
}

ART_FIELD_MESSAGES: dict[str, str] = {
    "prompt": "Prompt is required",
}


def _first_error_field(exc: ValidationError, order: list[str]) -> tuple[str, tuple]:
    """Pick the failing top-level field that comes first in `order`."""
    locs = [err["loc"] for err in exc.errors() if err["loc"]]
    for name in order:
        for loc in locs:
            if loc[0] == name:
                return name, loc
    loc = locs[0] if locs else ("body",)
    return str(loc[0]), loc


def parse_image_request(body: dict[str, Any]) -> GenerationRequest:
    try:
        return GenerationRequest.model_validate(body)
    except ValidationError as e:
        field, _ = _first_error_field(e, IMAGE_FIELD_ORDER)
        raise InvalidRequestError(IMAGE_FIELD_MESSAGES.get(field, f"Invalid {field}")) from e


def parse_sound_request(body: dict[str, Any]) -> SoundSelectionRequest:
    if not body.get("eventType") or body.get("context") is None:
        raise InvalidRequestError(SOUND_REQUIRED_MESSAGE)
    try:
        return SoundSelectionRequest.model_validate(body)
    except ValidationError as e:
        field, loc = _first_error_field(e, list(SOUND_FIELD_MESSAGES))
        if field == "context" and len(loc) > 1:
            raise InvalidRequestError(f"Invalid request: context.{loc[1]} is invalid") from e
        raise InvalidRequestError(SOUND_FIELD_MESSAGES.get(field, f"Invalid {field}")) from e



def parse_chat_request(body: dict[str, Any]) -> ChatRequest:
    prompt = body.get("prompt")
    if not prompt or not isinstance(prompt, str):
        raise InvalidRequestError(CHAT_PROMPT_MESSAGE)
    if len(prompt) > MAX_PROMPT_LENGTH:
        raise InvalidRequestError(CHAT_LENGTH_MESSAGE)
    try:
        return ChatRequest.model_validate(body)
    except ValidationError as e:
        field, _ = _first_error_field(e, ["prompt", "temperature", "maxTokens"])
        raise InvalidRequestError(f"Invalid request: {field} is invalid") from e


def parse_summary_request(body: dict[str, Any]) -> StorySummaryRequest:
    try:
        return StorySummaryRequest.model_validate(body)
    except ValidationError as e:
        field, _ = _first_error_field(e, list(SUMMARY_FIELD_MESSAGES))
        raise InvalidRequestError(SUMMARY_FIELD_MESSAGES.get(field, f"Invalid {field}")) from e


def parse_art_request(body: dict[str, Any]) -> ArtRequest:
    try:
        return ArtRequest.model_validate(body)
    except ValidationError as e:
        field, _ = _first_error_field(e, list(ART_FIELD_MESSAGES))
        raise InvalidRequestError(ART_FIELD_MESSAGES.get(field, f"Invalid {field}")) from e
