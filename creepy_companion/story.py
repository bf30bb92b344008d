"""Story summary: a memorial of the pet's life written from its narrative log."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from creepy_companion.models import NarrativeLog, StorySummaryRequest, StorySummaryResponse
from creepy_companion.polling import SUMMARY_SCHEDULE
from creepy_companion.text import TextGenerator

logger = logging.getLogger(__name__)

KEY_EVENT_TYPES: tuple[str, ...] = ("evolution", "death", "placate", "haunt", "insanity", "vomit")

MAX_KEY_EVENTS = 20
MIDDLE_SAMPLE_SIZE = 18

SUMMARY_TEMPERATURE = 0.7
SUMMARY_MAX_TOKENS = 600

SUMMARY_SYSTEM_PROMPT = (
    "You are a creative writer for a dark pet simulator game. You write atmospheric, poignant "
    "narratives that capture the emotional journey between player and pet. Your writing is "
    "reflective, slightly unsettling, and deeply evocative."
)


@dataclass(frozen=True)
class KeyEvent:
    type: str
    text: str
    age: float


def extract_key_events(logs: list[NarrativeLog]) -> list[KeyEvent]:
    return [
        KeyEvent(type=log.event_type, text=log.text, age=log.timestamp)
        for log in logs
        if log.event_type in KEY_EVENT_TYPES
    ]


def sample_key_events(events: list[KeyEvent]) -> list[KeyEvent]:
    """Keep at most about 20 events: the first, the last and an even spread between."""
    if len(events) <= MAX_KEY_EVENTS:
        return list(events)
    middle = events[1:-1]
    step = len(middle) // MIDDLE_SAMPLE_SIZE
    sampled = [e for i, e in enumerate(middle) if i % step == 0][:MIDDLE_SAMPLE_SIZE]
    return [events[0], *sampled, events[-1]]


def format_age(minutes: float) -> str:
    hours = math.floor(minutes / 60)
    mins = math.floor(minutes % 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def build_summary_prompt(request: StorySummaryRequest, events: list[KeyEvent]) -> str:
    name = request.pet_name
    stats = request.final_stats
    event_lines = "\n".join(f"- [{format_age(e.age)}] {e.type.upper()}: {e.text}" for e in events)
    return (
        f"Write a cohesive narrative summary of {name}'s life journey. This is a dark pet simulator "
        "game where creatures evolve through mysterious stages.\n\n"
        f"Key events in {name}'s life:\n"
        f"{event_lines}\n\n"
        "Final state:\n"
        f"- Age: {format_age(request.total_age)}\n"
        f"- Sanity: {stats.sanity:g}%\n"
        f"- Corruption: {stats.corruption:g}%\n"
        f"- Hunger: {stats.hunger:g}%\n\n"
        f"Write a 300-500 word narrative that captures the essence of {name}'s journey. Focus on:\n"
        "- The emotional arc of the relationship between player and pet\n"
        f"- How {name} changed over time\n"
        "- The significant moments that defined their existence\n"
        "- The atmosphere and tone of their story\n\n"
        "Write in past tense, as if reflecting on a completed journey. Be atmospheric, poignant, "
        "and slightly unsettling. This should read like a memorial or eulogy."
    )


class StorySummarizer:
    def __init__(self, generator: TextGenerator) -> None:
        self._generator = generator

    async def summarize(self, request: StorySummaryRequest) -> StorySummaryResponse:
        events = sample_key_events(extract_key_events(request.logs))
        logger.info("Summarising %s: %d log entries, %d key events",
                    request.pet_name, len(request.logs), len(events))
        text = await self._generator.generate(
            build_summary_prompt(request, events),
            temperature=SUMMARY_TEMPERATURE,
            max_tokens=SUMMARY_MAX_TOKENS,
            system=SUMMARY_SYSTEM_PROMPT,
            schedule=SUMMARY_SCHEDULE,
        )
        return StorySummaryResponse(summary_text=text.strip(), key_events=[e.text for e in events])
