"""Image prompt construction.

build_image_prompt() is pure: the same request always yields the same
string. Unknown archetypes, stages, events or insanity variants degrade to
generic or empty text instead of failing.
"""

from __future__ import annotations

from creepy_companion.models import GenerationRequest, VisualTraits

ARCHETYPE_DESCRIPTIONS: dict[str, str] = {
    "GLOOM": "shadowy, melancholic creature with hollow eyes",
    "SPARK": "electric, jittery creature with crackling energy",
    "ECHO": "ethereal, translucent creature with fading echoes",
}

STAGE_DESCRIPTIONS: dict[str, str] = {
    "EGG": "mysterious egg form, pulsing with dark energy",
    "BABY": "small, vulnerable creature just hatched",
    "TEEN": "growing creature with developing features",
    "ABOMINATION": "twisted, horrific form of pure corruption",
}

DEFAULT_ARCHETYPE_DESCRIPTION = "mysterious creature"
DEFAULT_STAGE_DESCRIPTION = "creature"

ITEM_CONTEXT: dict[str, str] = {
    "PURITY": "consuming a glowing pure offering",
    "ROT": "devouring a rotting, corrupted offering",
}

# Static extensions for events without their own builder below
EVENT_EXTENSIONS: dict[str, str] = {
    "evolution": "dramatic transformation scene with morphing body horror elements, "
                 "cosmic horror aesthetic, creature changing form",
    "death": "somber memorial scene, creature fading into spectral form, melancholic atmosphere, "
             "ghost wisps, soft mourning light",
    "vomit": "visceral expulsion scene, grotesque splatters, creature convulsing, body horror, "
             "disturbing biological details without gratuitousness",
    "haunt": "spectral visitation, translucent apparition appearing, memories bleeding through, "
             "current pet sensing presence, ethereal horror",
    "feed": "",
}

PLACATE_EXTENSIONS: dict[str, str] = {
    "GLOOM": "intimate comforting moment, dark purple aura surrounding creature, gentle warmth amid horror",
    "SPARK": "intimate comforting moment, electric sparkles dancing around creature, gentle warmth amid horror",
    "ECHO": "intimate comforting moment, rippling echoes emanating from creature, gentle warmth amid horror",
}

INSANITY_EXTENSIONS: dict[str, str] = {
    "WHISPERS": "auditory hallucination visualized, soundwaves and whispers made visible, creature hearing voices",
    "SHADOWS": "visual hallucination, impossible shadows defying light sources, "
               "creature seeing things that aren't there",
    "GLITCH": "reality glitch, fragmented duplicates of creature, broken reality effect",
    "INVERSION": "inverted reality, upside-down environment, creature experiencing warped perception",
}

# Panel layouts; [fromStage], [toStage], [ghostName], [petName] are filled in
SCENE_COMPOSITIONS: dict[str, str] = {
    "evolution": "Two-panel comic layout: LEFT panel shows [fromStage] appearance, RIGHT panel shows "
                 "[toStage] appearance, connected by transformation energy. Use split-screen "
                 "composition with clear division.",
    "haunt": "Split-screen composition: LEFT shows translucent ghost of [ghostName], RIGHT shows current "
             "pet [petName] sensing the presence, ethereal connection between them. Vertical split "
             "with ghostly wisps crossing the divide.",
    "vomit": "Three-panel sequence composition: TOP panel shows pet looking uncomfortable and queasy, "
             "MIDDLE panel shows expulsion moment with dramatic action, BOTTOM panel shows aftermath "
             "with pet exhausted. Comic strip style with clear panel borders.",
    "insanity": "Fragmented multi-panel layout with 4-6 irregular panels showing different perspectives "
                "of the same moment, reality breaking apart. Shattered mirror effect with distorted "
                "reflections.",
    "death": "Single solemn panel with vignette effect, pet fading into spectral wisps. "
             "No multi-panel layout needed.",
    "placate": "Single intimate panel with warm glow, close-up of comforting moment. "
               "No multi-panel layout needed.",
    "feed": "Single panel showing feeding moment. No multi-panel layout needed.",
}

STYLE_DIRECTIVES = (
    "Apply dark horror lighting with dramatic shadows, unsettling atmosphere, creepy companion pet "
    "aesthetic, digital horror art style. Keep the pet's exact appearance from the provided sprite. "
    "Maintain visual continuity with any previous images provided."
)


def event_extension(request: GenerationRequest) -> str:
    """Event-specific scene text, or "" when the event has nothing to add."""
    event = request.event_type
    if event == "evolution" and request.from_stage and request.to_stage:
        return (f"dramatic transformation scene with {request.from_stage} morphing into "
                f"{request.to_stage}, body horror elements, cosmic horror aesthetic")
    if event == "death":
        return (f"somber memorial scene, {request.pet_name} fading into spectral form, "
                "melancholic atmosphere, ghost wisps, soft mourning light")
    if event == "placate":
        return PLACATE_EXTENSIONS.get(request.archetype, "")
    if event == "insanity" and request.insanity_event_type:
        return INSANITY_EXTENSIONS.get(request.insanity_event_type, "")
    if event == "haunt" and request.ghost_name:
        return (f"spectral visitation, {request.ghost_name} appearing as translucent apparition, "
                f"memories bleeding through, current pet sensing presence, ethereal horror")
    return EVENT_EXTENSIONS.get(event or "", "")


def scene_composition(request: GenerationRequest) -> str:
    """Layout instructions for multi-panel events; "" keeps a single panel."""
    template = SCENE_COMPOSITIONS.get(request.event_type or "")
    if not template:
        return ""

    substitutions = {
        "[fromStage]": request.from_stage,
        "[toStage]": request.to_stage,
        "[ghostName]": request.ghost_name,
        "[petName]": request.pet_name,
    }
    for placeholder, value in substitutions.items():
        if value:
            template = template.replace(placeholder, value)

    return (
        f"\n\nIMPORTANT LAYOUT INSTRUCTIONS:\n{template}\n\n"
        "Follow the specified panel layout exactly. This is a multi-panel composition."
    )


def visual_traits_block(traits: VisualTraits | None) -> str:
    if traits is None:
        return ""
    return (
        "\n\nIMPORTANT - Character Consistency Requirements:\n"
        "- Maintain exact appearance from previous images\n"
        f"- Key features: {', '.join(traits.key_features)}\n"
        f"- Color palette: {', '.join(traits.color_palette)}\n"
        f"- Style: {', '.join(traits.style_keywords)}\n"
        "- Keep the same character design throughout"
    )


def build_image_prompt(request: GenerationRequest) -> str:
    """Assemble the full image-edit prompt for a request.

    Layout: identity clause, archetype/stage clause, event clause (or the
    item clause when there is no event), quoted narrative, style directives.
    Event requests also get panel layout instructions, and visual traits are
    appended last when present.
    """
    name = request.pet_name
    archetype_desc = ARCHETYPE_DESCRIPTIONS.get(request.archetype, DEFAULT_ARCHETYPE_DESCRIPTION)
    stage_desc = STAGE_DESCRIPTIONS.get(request.stage, DEFAULT_STAGE_DESCRIPTION)

    if request.event_type:
        scene = event_extension(request)
    else:
        scene = ITEM_CONTEXT.get(request.item_type or "", "")

    prompt = (
        f"Combine these images into a single realistic horror scene: use the first image "
        f"({name} the {request.archetype} pet sprite) as the main character. "
        f"{name} is a {archetype_desc}, currently in {request.stage} stage ({stage_desc}). {scene}\n\n"
        f'Scene description from narrative: "{request.narrative_text}"\n\n'
        f"{STYLE_DIRECTIVES}"
    )

    if request.event_type:
        prompt += scene_composition(request)
    return prompt + visual_traits_block(request.visual_traits)
