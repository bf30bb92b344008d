"""Rule-based sound selection used when the AI path is unavailable.

select_fallback() is total: every combination of inputs, including unknown
event types and stages, yields a valid SoundSelectionResponse.
"""

from __future__ import annotations

import random

from creepy_companion.models import SoundSelectionRequest, SoundSelectionResponse

LOW_SANITY_THRESHOLD = 30
NEUTRAL_SOUND = "cute_a"

FEED_SOUNDS: dict[str, tuple[str, ...]] = {
    "PURITY": ("cute_a", "cute_b", "cute_c", "cute_d", "cute_e"),
    "ROT": ("liquid_liquid_slosh", "liquid_bubbles", "monster_gore_wet_4", "monster_gore_mushy"),
}

EVOLUTION_SOUNDS: dict[str, tuple[str, ...]] = {
    "EGG": ("stinger_harmonized_tone_pleasant_but_spooky",),
    "BABY": ("cute_h", "stinger_harmonized_tone_pleasant_but_spooky"),
    "TEEN": ("monster_monster_growl_1", "stinger_slow_stinger"),
    "ABOMINATION": ("monster_monster_roar_4", "monster_abyssal_descent", "stinger_piano_stinger_dissonent"),
}

SANITY_SOUNDS: dict[str, tuple[str, ...]] = {
    "low": ("ambient_creepy_ambience_3", "ambient_crying_moaning_ambience_2", "ambient_drone_doom"),
    "normal": ("ambient_suburban_neighborhood_morning", "ambient_rain_medium_2"),
}

SCAVENGE_SOUNDS: tuple[str, ...] = ("character_bag_searching", "character_box_searching", "character_woosh")

AMBIENT_EVENTS = ("ambient", "sanity_change")


def select_fallback(
    event_type: str,
    stage: str | None = None,
    archetype: str | None = None,
    item_type: str | None = None,
    sanity: float = 100,
    rng: random.Random | None = None,
) -> SoundSelectionResponse:
    """Pick sounds for an event from the fixed tables.

    `archetype` is accepted for parity with the AI path; the rule table does
    not distinguish archetypes. Pass `rng` for reproducible picks.
    """
    rng = rng or random
    secondary: list[str] | None = None
    ambient: str | None = None
    low_sanity = sanity < LOW_SANITY_THRESHOLD

    if event_type == "feed":
        pool = FEED_SOUNDS["PURITY"] if item_type == "PURITY" else FEED_SOUNDS["ROT"]
        primary = rng.choice(pool)
        volume = 0.6 if item_type == "ROT" else 0.8

    elif event_type == "evolution":
        sounds = EVOLUTION_SOUNDS.get(stage or "", (NEUTRAL_SOUND,))
        primary = sounds[0]
        if len(sounds) > 1:
            secondary = [sounds[1]]
        volume = 0.9 if stage == "ABOMINATION" else 0.7

    elif event_type == "scavenge":
        primary = rng.choice(SCAVENGE_SOUNDS)
        volume = 0.6

    elif event_type in AMBIENT_EVENTS:
        pool = SANITY_SOUNDS["low"] if low_sanity else SANITY_SOUNDS["normal"]
        primary = rng.choice(pool)
        ambient = primary
        volume = 0.5

    else:
        primary = NEUTRAL_SOUND
        volume = 0.5

    # Horror ambience whenever sanity is low, on top of the event's own pick
    if low_sanity and event_type not in AMBIENT_EVENTS:
        ambient = rng.choice(SANITY_SOUNDS["low"])

    return SoundSelectionResponse(
        primary_sound=primary,
        secondary_sounds=secondary,
        ambient_sound=ambient,
        volume=volume,
        cached=False,
    )


def fallback_for(request: SoundSelectionRequest, rng: random.Random | None = None) -> SoundSelectionResponse:
    ctx = request.context
    return select_fallback(
        request.event_type,
        stage=ctx.stage,
        archetype=ctx.archetype,
        item_type=ctx.item_type,
        sanity=ctx.sanity,
        rng=rng,
    )
