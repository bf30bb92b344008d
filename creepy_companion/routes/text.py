"""Text endpoints: free-form narrative generation and the end-of-life story summary."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from creepy_companion.errors import ConfigurationError, InvalidRequestError, ProviderError
from creepy_companion.models import ChatResponse
from creepy_companion.story import StorySummarizer
from creepy_companion.text import TextGenerator

from .deps import get_story_summarizer, get_text_generator
from .models import parse_chat_request, parse_summary_request

logger = logging.getLogger(__name__)

router = APIRouter()


def text_error(e: Exception, message: str) -> HTTPException:
    """Map a generation failure to a client-facing error with a retry hint.

    Provider details are never exposed; only the provider's status class is.
    """
    if isinstance(e, ConfigurationError):
        return HTTPException(500, e.to_body())
    status = e.status_code if isinstance(e, ProviderError) else None
    if status == 504:
        return HTTPException(504, {"error": "Request timeout. Please try again.", "retryAfter": 5})
    if status == 429:
        return HTTPException(429, {"error": "Rate limit exceeded. Please try again later.", "retryAfter": 60})
    if status is not None and status >= 500:
        return HTTPException(502, {"error": "Upstream service error. Please try again.", "retryAfter": 10})
    return HTTPException(500, {"error": message})


def _require(collaborator):
    if collaborator is None:
        logger.error("No AI provider API keys configured")
        raise HTTPException(500, "Server configuration error")
    return collaborator


@router.post("/chat")
async def chat(
    body: dict[str, Any] = Body(...),
    generator: TextGenerator | None = Depends(get_text_generator),
):
    """Generate narrative text from a prompt."""
    try:
        request = parse_chat_request(body)
    except InvalidRequestError as e:
        raise HTTPException(e.status_code, e.to_body())
    generator = _require(generator)

    try:
        text = await generator.generate(request.prompt, request.temperature, request.max_tokens)
    except Exception as e:
        logger.exception("AI generation error")
        raise text_error(e, "An error occurred while generating text")
    return ChatResponse(text=text).to_json_dict()


@router.post("/story-summary")
async def story_summary(
    body: dict[str, Any] = Body(...),
    summarizer: StorySummarizer | None = Depends(get_story_summarizer),
):
    """Write a memorial of the pet's life from its narrative log."""
    try:
        request = parse_summary_request(body)
    except InvalidRequestError as e:
        raise HTTPException(e.status_code, e.to_body())
    summarizer = _require(summarizer)

    try:
        summary = await summarizer.summarize(request)
    except Exception as e:
        logger.exception("Story summary generation error")
        raise text_error(e, "An error occurred while generating story summary")
    return summary.to_json_dict()
