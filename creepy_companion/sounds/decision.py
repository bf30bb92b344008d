"""AI sound decision: request payload for the chat model and parsing of its reply.

The model may think out loud inside <think>...</think> before answering.
That block is stripped, then the first balanced {...} object in what remains
is parsed as the decision.
"""

from __future__ import annotations

import json
import re
from typing import Any

from creepy_companion.errors import SoundDecisionError
from creepy_companion.models import SoundSelectionRequest, SoundSelectionResponse
from creepy_companion.sounds.fallback import NEUTRAL_SOUND

DEFAULT_AI_VOLUME = 0.7

SYSTEM_PROMPT = """You are a sound designer for a dark horror pet simulator game called "Creepy Companion".
Your task is to select appropriate sounds from the game's sound catalog based on game events.

The game has these sound categories:
- ambient: Background atmosphere loops (creepy ambience, rain, mechanical sounds)
- monster: Creature sounds (growls, roars, gore, ghosts)
- cute: Positive/gentle sounds (for pure/innocent moments)
- stinger: Jump scares and dramatic transitions
- character: Player action sounds (searching, breathing, footsteps)
- household: Environmental sounds (doors, kitchen, office)
- liquid: Wet/fluid sounds (bubbles, splashing, pouring)

Sound ID format: category_descriptive_name (e.g., "monster_deepone_growl", "cute_a", "ambient_creepy_ambience_3")

Consider these factors when selecting sounds:
- eventType: What triggered the sound need (feed, evolution, scavenge, sanity_change, ambient)
- stage: Pet's life stage (EGG, BABY, TEEN, ABOMINATION) - later stages are more horrific
- archetype: Pet personality (GLOOM=dark/sad, SPARK=energetic/chaotic, ECHO=mysterious/ethereal)
- itemType: For feeding - PURITY items are wholesome, ROT items are disturbing
- sanity: 0-100 scale, below 30 triggers horror mode
- corruption: 0-100 scale, higher = more monstrous

Respond with ONLY valid JSON matching this format:
{
  "primarySound": "sound_id",
  "secondarySounds": ["optional_sound_id"],
  "ambientSound": "optional_ambient_id",
  "volume": 0.7
}"""

SAMPLING_PARAMS: dict[str, Any] = {
    "max_tokens": 200,
    "temperature": 0.3,
    "seed": -1,
    "top_k": -1,
    "top_p": 1,
}

_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)


def build_user_prompt(request: SoundSelectionRequest) -> str:
    ctx = request.context
    lines = [
        "Select sounds for this game event:",
        f"Event Type: {request.event_type}",
        f"Pet Name: {ctx.pet_name}",
        f"Stage: {ctx.stage}",
        f"Archetype: {ctx.archetype}",
    ]
    if ctx.item_type:
        lines.append(f"Item Type: {ctx.item_type}")
    lines.append(f"Sanity: {ctx.sanity:g}")
    lines.append(f"Corruption: {ctx.corruption:g}")
    if ctx.narrative_text:
        lines.append(f"Recent Narrative: {ctx.narrative_text}")
    lines.append("")
    lines.append("Respond with JSON only.")
    return "\n".join(lines)


def build_sound_payload(request: SoundSelectionRequest) -> dict[str, Any]:
    return {
        "input": {
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(request)},
            ],
            "sampling_params": dict(SAMPLING_PARAMS),
        },
    }


def extract_completion_text(output: Any) -> str:
    """Pull the generated text out of a chat job's output.

    RunPod's vLLM workers answer with [{"choices": [{"tokens": ["..."]}]}];
    a bare string is accepted as-is.
    """
    if isinstance(output, str):
        return output
    try:
        text = output[0]["choices"][0]["tokens"][0]
    except (IndexError, KeyError, TypeError):
        return ""
    return text if isinstance(text, str) else ""


def strip_reasoning(text: str) -> str:
    return _THINK_RE.sub("", text).strip()


def extract_json_object(text: str) -> str | None:
    """Return the first balanced {...} span in `text`, ignoring braces inside strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
        # unbalanced from here; try the next opening brace
        start = text.find("{", start + 1)
    return None


def parse_sound_decision(text: str) -> SoundSelectionResponse:
    """Turn raw model text into a response. Raises SoundDecisionError on failure."""
    candidate = extract_json_object(strip_reasoning(text))
    if candidate is None:
        raise SoundDecisionError("No JSON found in AI response")
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise SoundDecisionError("Invalid JSON in AI response", details=str(e)) from e

    primary = parsed.get("primarySound")
    secondary = parsed.get("secondarySounds")
    ambient = parsed.get("ambientSound")
    volume = parsed.get("volume")

    if isinstance(secondary, list):
        secondary = [s for s in secondary if isinstance(s, str)] or None
    else:
        secondary = None
    is_number = isinstance(volume, (int, float)) and not isinstance(volume, bool)

    return SoundSelectionResponse(
        primary_sound=primary if isinstance(primary, str) and primary else NEUTRAL_SOUND,
        secondary_sounds=secondary,
        ambient_sound=ambient if isinstance(ambient, str) and ambient else None,
        volume=volume if is_number else DEFAULT_AI_VOLUME,
        cached=False,
    )
