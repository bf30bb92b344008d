"""Tests for the story summary: key events, sampling, prompt and summarizer."""

from unittest.mock import AsyncMock

from creepy_companion.models import NarrativeLog, StorySummaryRequest
from creepy_companion.polling import SUMMARY_SCHEDULE
from creepy_companion.story import (
    SUMMARY_SYSTEM_PROMPT,
    KeyEvent,
    StorySummarizer,
    build_summary_prompt,
    extract_key_events,
    format_age,
    sample_key_events,
)


def _request(logs=None, **fields) -> StorySummaryRequest:
    body = {
        "logs": logs if logs is not None else [
            {"id": "1", "text": "Morsel hatched.", "timestamp": 0},
            {"id": "2", "text": "Morsel ate rot.", "timestamp": 12, "eventType": "feed"},
            {"id": "3", "text": "Morsel grew teeth.", "timestamp": 75, "eventType": "evolution"},
            {"id": "4", "text": "Morsel stopped breathing.", "timestamp": 130, "eventType": "death"},
        ],
        "petName": "Morsel",
        "finalStats": {"sanity": 12, "corruption": 88.5, "hunger": 40},
        "totalAge": 130,
    }
    body.update(fields)
    return StorySummaryRequest.model_validate(body)


def _events(n: int) -> list[KeyEvent]:
    return [KeyEvent(type="haunt", text=f"event {i}", age=i) for i in range(n)]


# ── key events ──────────────────────────────────────────────


def test_only_key_event_types_kept():
    events = extract_key_events(_request().logs)
    assert [e.text for e in events] == ["Morsel grew teeth.", "Morsel stopped breathing."]
    assert events[0].type == "evolution"
    assert events[0].age == 75


def test_log_without_event_type_ignored():
    assert extract_key_events([NarrativeLog(text="quiet day")]) == []


def test_small_lists_not_sampled():
    events = _events(20)
    assert sample_key_events(events) == events


def test_large_lists_keep_first_and_last():
    events = _events(60)
    sampled = sample_key_events(events)
    assert len(sampled) == 20
    assert sampled[0] is events[0]
    assert sampled[-1] is events[-1]
    # step = 58 // 18 = 3 over the middle slice
    assert sampled[1:4] == [events[1], events[4], events[7]]


def test_just_over_limit_samples_every_middle_event():
    events = _events(21)
    sampled = sample_key_events(events)
    assert len(sampled) == 20
    assert sampled[1:-1] == events[1:19]


# ── prompt ──────────────────────────────────────────────────


def test_format_age():
    assert format_age(45) == "45m"
    assert format_age(75) == "1h 15m"
    assert format_age(125.9) == "2h 5m"


def test_prompt_lists_events_and_final_state():
    req = _request()
    prompt = build_summary_prompt(req, extract_key_events(req.logs))
    assert "Write a cohesive narrative summary of Morsel's life journey." in prompt
    assert "- [1h 15m] EVOLUTION: Morsel grew teeth." in prompt
    assert "- [2h 10m] DEATH: Morsel stopped breathing." in prompt
    assert "- Sanity: 12%" in prompt
    assert "- Corruption: 88.5%" in prompt
    assert "- Age: 2h 10m" in prompt
    assert prompt.endswith("This should read like a memorial or eulogy.")


# ── summarizer ──────────────────────────────────────────────


async def test_summarize_uses_summary_settings():
    generator = AsyncMock()
    generator.generate = AsyncMock(return_value="  Morsel was loved.  \n")
    summary = await StorySummarizer(generator).summarize(_request())
    assert summary.summary_text == "Morsel was loved."
    assert summary.key_events == ["Morsel grew teeth.", "Morsel stopped breathing."]
    kwargs = generator.generate.call_args.kwargs
    assert kwargs["max_tokens"] == 600
    assert kwargs["temperature"] == 0.7
    assert kwargs["system"] == SUMMARY_SYSTEM_PROMPT
    assert kwargs["schedule"] is SUMMARY_SCHEDULE


async def test_summary_body_uses_camel_case():
    generator = AsyncMock()
    generator.generate = AsyncMock(return_value="text")
    summary = await StorySummarizer(generator).summarize(_request(logs=[]))
    assert summary.to_json_dict() == {"summaryText": "text", "keyEvents": []}
