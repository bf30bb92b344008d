"""Core domain models.

Request and response bodies travel as camelCase JSON; the models use
snake_case attributes with camelCase aliases. Pydantic validates every
boundary: enumerated fields are Literals, and the sound volume is clamped
on construction no matter where the value came from. The image event fields
are plain strings; the prompt builder gives unknown events no scene text.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Archetype = Literal["GLOOM", "SPARK", "ECHO"]
Stage = Literal["EGG", "BABY", "TEEN", "ABOMINATION"]
ItemType = Literal["PURITY", "ROT"]
SoundEventType = Literal["feed", "scavenge", "evolution", "sanity_change", "ambient"]

ARCHETYPES: tuple[str, ...] = ("GLOOM", "SPARK", "ECHO")
STAGES: tuple[str, ...] = ("EGG", "BABY", "TEEN", "ABOMINATION")
SOUND_EVENT_TYPES: tuple[str, ...] = ("feed", "scavenge", "evolution", "sanity_change", "ambient")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump with camelCase keys, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ── Image generation ─────────────────────────────────────


class VisualTraits(CamelModel):
    """Appearance notes carried between images so the pet stays recognisable."""

    model_config = ConfigDict(frozen=True)

    archetype: Archetype | None = None
    stage: Stage | None = None
    color_palette: list[str] = Field(default_factory=list)  # hex colours
    key_features: list[str] = Field(default_factory=list)
    style_keywords: list[str] = Field(default_factory=list)


class GenerationRequest(CamelModel):
    """One image-generation request. Immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    narrative_text: str = Field(min_length=1)
    pet_name: str = Field(min_length=1)
    archetype: Archetype
    stage: Stage
    source_images: list[str] = Field(min_length=1)  # data URIs or HTTP URLs
    item_type: ItemType | None = None
    event_type: str | None = None
    insanity_event_type: str | None = None
    ghost_name: str | None = None
    from_stage: Stage | None = None
    to_stage: Stage | None = None
    visual_traits: VisualTraits | None = None


class ImageResponse(CamelModel):
    image_url: str


class ArtRequest(CamelModel):
    """Text-to-image request for the standalone art endpoint."""

    model_config = ConfigDict(frozen=True)

    prompt: str = Field(min_length=1)
    negative_prompt: str = ""
    seed: int | None = None


class ArtResponse(CamelModel):
    image_url: str
    seed: int | None = None


# ── Text generation ──────────────────────────────────────

MAX_PROMPT_LENGTH = 1000


class ChatRequest(CamelModel):
    prompt: str = Field(min_length=1, max_length=MAX_PROMPT_LENGTH)
    temperature: float = 0.7
    max_tokens: int = Field(default=150, gt=0)


class ChatResponse(CamelModel):
    text: str


class NarrativeLog(CamelModel):
    """One entry of the game's narrative log. `timestamp` is the pet's age in minutes."""

    text: str = ""
    timestamp: float = 0
    event_type: str | None = None


class FinalStats(CamelModel):
    sanity: float = 0
    corruption: float = 0
    hunger: float = 0


class StorySummaryRequest(CamelModel):
    logs: list[NarrativeLog]
    pet_name: str = Field(min_length=1)
    final_stats: FinalStats
    total_age: float = Field(strict=True)


class StorySummaryResponse(CamelModel):
    summary_text: str
    key_events: list[str]


# ── Sound selection ──────────────────────────────────────


class SoundContext(CamelModel):
    pet_name: str = ""
    stage: Stage
    archetype: Archetype
    item_type: ItemType | None = None
    sanity: float = Field(ge=0, le=100)
    corruption: float = Field(ge=0, le=100)
    narrative_text: str | None = None


class SoundSelectionRequest(CamelModel):
    event_type: SoundEventType
    context: SoundContext


class SoundSelectionResponse(CamelModel):
    primary_sound: str
    secondary_sounds: list[str] | None = None
    ambient_sound: str | None = None
    volume: float = 0.7
    cached: bool = False

    @field_validator("volume", mode="before")
    @classmethod
    def _clamp_volume(cls, value: Any) -> float:
        return min(1.0, max(0.0, float(value)))


# ── Remote jobs ──────────────────────────────────────────


class JobStatus(BaseModel):
    """A RunPod job as observed through its status endpoint."""

    id: str | None = None
    status: str = ""
    output: Any = None
    error: Any = None
