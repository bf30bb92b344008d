"""Image generation: prompt, RunPod image-edit job, output normalisation.

A completed job may report its image in any of four shapes:

    {"result": "<ref>"}          RESULT
    {"image_url": "<ref>"}       IMAGE_URL
    {"image": "<base64/data>"}   INLINE_IMAGE
    "http..." / "data:..."       URL_STRING

normalize_image_output() resolves them to one ImageOutput; anything else is
an OutputFormatError rather than a guess.

ArtGenerator is the plain text-to-image variant: no source sprite, its own
endpoint, and a fixed 2s poll schedule.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from creepy_companion.errors import OutputFormatError
from creepy_companion.models import ArtRequest, ArtResponse, GenerationRequest
from creepy_companion.polling import (
    ART_SCHEDULE,
    IMAGE_SCHEDULE,
    JobClient,
    JobPoller,
    PollSchedule,
    Sleep,
)
from creepy_companion.prompts import build_image_prompt

logger = logging.getLogger(__name__)


class ImageOutputKind(str, Enum):
    RESULT = "result"
    IMAGE_URL = "image_url"
    INLINE_IMAGE = "image"
    URL_STRING = "string"


@dataclass(frozen=True)
class ImageOutput:
    kind: ImageOutputKind
    reference: str


_DICT_KEYS: tuple[tuple[str, ImageOutputKind], ...] = (
    ("result", ImageOutputKind.RESULT),
    ("image_url", ImageOutputKind.IMAGE_URL),
    ("image", ImageOutputKind.INLINE_IMAGE),
)


def normalize_image_output(output: Any) -> ImageOutput:
    """Resolve a COMPLETED job's output to a single image reference."""
    if isinstance(output, dict):
        for key, kind in _DICT_KEYS:
            value = output.get(key)
            if value and isinstance(value, str):
                return ImageOutput(kind, value)
    elif isinstance(output, str) and output.startswith(("http", "data:")):
        return ImageOutput(ImageOutputKind.URL_STRING, output)

    logger.error("Unexpected output format: %r", output)
    raise OutputFormatError("Unexpected response format", details=json.dumps(output, default=str))


def build_image_payload(request: GenerationRequest, prompt: str) -> dict[str, Any]:
    return {
        "input": {
            "prompt": prompt,
            "images": list(request.source_images),
            "enable_safety_checker": True,
        },
    }


class ImageGenerator:
    """Resolves a GenerationRequest to an image reference via a RunPod job."""

    def __init__(
        self,
        client: JobClient,
        schedule: PollSchedule = IMAGE_SCHEDULE,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._client = client
        self._schedule = schedule
        self._sleep = sleep

    async def generate(self, request: GenerationRequest) -> str:
        prompt = build_image_prompt(request)
        logger.info(
            "Submitting image generation job: prompt_len=%d images=%d archetype=%s stage=%s event=%s",
            len(prompt), len(request.source_images), request.archetype, request.stage,
            request.event_type,
        )
        poller = JobPoller(self._client, self._schedule, sleep=self._sleep, label="image generation")
        output = await poller.run(build_image_payload(request, prompt))
        return normalize_image_output(output).reference


def build_art_payload(request: ArtRequest) -> dict[str, Any]:
    return {
        "input": {
            "prompt": request.prompt,
            "negative_prompt": request.negative_prompt,
            "size": "1024*1024",
            "seed": request.seed or -1,
            "enable_safety_checker": True,
        },
    }


class ArtGenerator:
    """Text-to-image generation on a separately configured RunPod endpoint."""

    def __init__(
        self,
        client: JobClient,
        schedule: PollSchedule = ART_SCHEDULE,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._client = client
        self._schedule = schedule
        self._sleep = sleep

    async def generate(self, request: ArtRequest) -> ArtResponse:
        logger.info("Submitting art job: prompt_len=%d", len(request.prompt))
        poller = JobPoller(self._client, self._schedule, sleep=self._sleep, label="image generation")
        output = await poller.run(build_art_payload(request))
        image = normalize_image_output(output)
        seed = request.seed
        # Only the image_url shape reports the seed that was actually used
        if image.kind is ImageOutputKind.IMAGE_URL and isinstance(output.get("seed"), int):
            seed = output["seed"]
        return ArtResponse(image_url=image.reference, seed=seed)
