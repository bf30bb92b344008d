"""Server settings (RunPod and provider connections, timing budgets, cache size, proxy allow-list).

Values come from the environment (after `.env` is loaded by the app module);
anything unset falls back to `_DEFAULTS`.
"""

import os
from typing import Any

from pydantic import BaseModel

_DEFAULTS: dict[str, Any] = {
    "runpod_api_key": "",
    "runpod_base_url": "https://api.runpod.ai/v2",
    "runpod_image_endpoint": "nano-banana-edit",
    "runpod_sound_endpoint": "qwen3-32b-awq",
    "runpod_text_endpoint": "qwen3-32b-awq",
    "runpod_art_endpoint": "",
    "anthropic_api_key": "",
    "anthropic_base_url": "https://api.anthropic.com",
    "anthropic_model": "claude-3-haiku-20240307",
    "featherless_api_key": "",
    "featherless_base_url": "https://api.featherless.ai/v1",
    "featherless_model": "meta-llama/Meta-Llama-3.1-8B-Instruct",
    "sound_selection_timeout_ms": 500,
    "sound_cache_size": 100,
    "proxy_allowed_domains": ["image.runpod.ai", "runpod.ai"],
}


class Settings(BaseModel):
    runpod_api_key: str = _DEFAULTS["runpod_api_key"]
    runpod_base_url: str = _DEFAULTS["runpod_base_url"]
    runpod_image_endpoint: str = _DEFAULTS["runpod_image_endpoint"]
    runpod_sound_endpoint: str = _DEFAULTS["runpod_sound_endpoint"]
    runpod_text_endpoint: str = _DEFAULTS["runpod_text_endpoint"]
    runpod_art_endpoint: str = _DEFAULTS["runpod_art_endpoint"]
    anthropic_api_key: str = _DEFAULTS["anthropic_api_key"]
    anthropic_base_url: str = _DEFAULTS["anthropic_base_url"]
    anthropic_model: str = _DEFAULTS["anthropic_model"]
    featherless_api_key: str = _DEFAULTS["featherless_api_key"]
    featherless_base_url: str = _DEFAULTS["featherless_base_url"]
    featherless_model: str = _DEFAULTS["featherless_model"]
    sound_selection_timeout_ms: int = _DEFAULTS["sound_selection_timeout_ms"]
    sound_cache_size: int = _DEFAULTS["sound_cache_size"]
    proxy_allowed_domains: list[str] = list(_DEFAULTS["proxy_allowed_domains"])

    @property
    def has_credentials(self) -> bool:
        return bool(self.runpod_api_key)

    @property
    def has_text_provider(self) -> bool:
        """True when any text backend (RunPod or a hosted provider) has a key."""
        return bool(self.runpod_api_key or self.anthropic_api_key or self.featherless_api_key)

    @property
    def sound_selection_timeout(self) -> float:
        """Sound deadline in seconds."""
        return self.sound_selection_timeout_ms / 1000


def _split_domains(raw: str) -> list[str]:
    return [d.strip().lower() for d in raw.split(",") if d.strip()]


# Optional string settings read verbatim
_STRING_VARS: tuple[tuple[str, str], ...] = (
    ("RUNPOD_IMAGE_ENDPOINT", "runpod_image_endpoint"),
    ("RUNPOD_SOUND_ENDPOINT", "runpod_sound_endpoint"),
    ("RUNPOD_TEXT_ENDPOINT", "runpod_text_endpoint"),
    ("RUNPOD_ENDPOINT_ID", "runpod_art_endpoint"),
    ("ANTHROPIC_API_KEY", "anthropic_api_key"),
    ("ANTHROPIC_MODEL", "anthropic_model"),
    ("FEATHERLESS_API_KEY", "featherless_api_key"),
    ("FEATHERLESS_BASE_URL", "featherless_base_url"),
    ("FEATHERLESS_MODEL", "featherless_model"),
)


def load_settings() -> Settings:
    """Read settings from the environment, returning defaults for unset values."""
    fields: dict[str, Any] = {}
    if os.getenv("RUNPOD_API_KEY"):
        fields["runpod_api_key"] = os.environ["RUNPOD_API_KEY"]
    if os.getenv("RUNPOD_BASE_URL"):
        fields["runpod_base_url"] = os.environ["RUNPOD_BASE_URL"].rstrip("/")
    for env, name in _STRING_VARS:
        if os.getenv(env):
            fields[name] = os.environ[env]
    if os.getenv("SOUND_SELECTION_TIMEOUT_MS"):
        fields["sound_selection_timeout_ms"] = int(os.environ["SOUND_SELECTION_TIMEOUT_MS"])
    if os.getenv("SOUND_CACHE_SIZE"):
        fields["sound_cache_size"] = int(os.environ["SOUND_CACHE_SIZE"])
    if os.getenv("PROXY_ALLOWED_DOMAINS"):
        fields["proxy_allowed_domains"] = _split_domains(os.environ["PROXY_ALLOWED_DOMAINS"])
    return Settings(**fields)
