"""FastAPI dependencies that build per-request collaborators from app state.

Tests replace these through `app.dependency_overrides`.
"""

from fastapi import Depends, Request

from creepy_companion.config import Settings
from creepy_companion.images import ArtGenerator, ImageGenerator
from creepy_companion.runpod import RunPodClient
from creepy_companion.sounds import SoundCache, SoundSelector
from creepy_companion.story import StorySummarizer
from creepy_companion.text import HttpProvider, TextGenerator


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_sound_cache(request: Request) -> SoundCache:
    return request.app.state.sound_cache


def _runpod(settings: Settings, endpoint: str, **kwargs) -> RunPodClient:
    return RunPodClient(
        api_key=settings.runpod_api_key,
        endpoint=endpoint,
        base_url=settings.runpod_base_url,
        **kwargs,
    )


def get_image_generator(settings: Settings = Depends(get_settings)) -> ImageGenerator | None:
    """None when no RunPod credential is configured."""
    if not settings.has_credentials:
        return None
    return ImageGenerator(_runpod(settings, settings.runpod_image_endpoint))


def get_art_generator(settings: Settings = Depends(get_settings)) -> ArtGenerator | None:
    """None unless both the RunPod credential and the art endpoint id are set."""
    if not settings.has_credentials or not settings.runpod_art_endpoint:
        return None
    return ArtGenerator(_runpod(settings, settings.runpod_art_endpoint))


def get_sound_selector(
    settings: Settings = Depends(get_settings),
    cache: SoundCache = Depends(get_sound_cache),
) -> SoundSelector:
    """Without a credential the selector skips the AI path and uses the rules."""
    client = None
    if settings.has_credentials:
        client = _runpod(settings, settings.runpod_sound_endpoint, timeout=settings.sound_selection_timeout)
    return SoundSelector(cache, client=client, timeout=settings.sound_selection_timeout)


def text_provider(settings: Settings) -> HttpProvider | None:
    """Anthropic when its key is set, otherwise Featherless, otherwise None."""
    if settings.anthropic_api_key:
        return HttpProvider(
            settings.anthropic_base_url,
            settings.anthropic_api_key,
            settings.anthropic_model,
            provider_format="anthropic",
        )
    if settings.featherless_api_key:
        return HttpProvider(
            settings.featherless_base_url,
            settings.featherless_api_key,
            settings.featherless_model,
            provider_format="openai",
        )
    return None


def get_text_generator(settings: Settings = Depends(get_settings)) -> TextGenerator | None:
    """None when neither RunPod nor a hosted provider has a key."""
    if not settings.has_text_provider:
        return None
    runpod = _runpod(settings, settings.runpod_text_endpoint) if settings.has_credentials else None
    return TextGenerator(runpod, text_provider(settings))


def get_story_summarizer(
    generator: TextGenerator | None = Depends(get_text_generator),
) -> StorySummarizer | None:
    return StorySummarizer(generator) if generator is not None else None
