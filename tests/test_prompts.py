"""Tests for image prompt construction."""

from creepy_companion.models import GenerationRequest
from creepy_companion.prompts import (
    INSANITY_EXTENSIONS,
    PLACATE_EXTENSIONS,
    build_image_prompt,
    event_extension,
    scene_composition,
)


def _request(**fields) -> GenerationRequest:
    base = {
        "narrative_text": "Morsel sniffs the offering.",
        "pet_name": "Morsel",
        "archetype": "GLOOM",
        "stage": "BABY",
        "source_images": ["https://image.runpod.ai/sprite.png"],
    }
    base.update(fields)
    return GenerationRequest(**base)


# ── base prompt ─────────────────────────────────────────────


def test_prompt_names_pet_archetype_and_stage():
    prompt = build_image_prompt(_request())
    assert "Morsel the GLOOM pet sprite" in prompt
    assert "shadowy, melancholic creature with hollow eyes" in prompt
    assert "currently in BABY stage (small, vulnerable creature just hatched)" in prompt


def test_prompt_quotes_narrative_and_ends_with_style():
    prompt = build_image_prompt(_request())
    assert 'Scene description from narrative: "Morsel sniffs the offering."' in prompt
    assert prompt.endswith("Maintain visual continuity with any previous images provided.")


def test_prompt_is_deterministic():
    req = _request(event_type="haunt", ghost_name="Pip")
    assert build_image_prompt(req) == build_image_prompt(req)


def test_unknown_archetype_and_stage_use_generic_descriptors():
    req = GenerationRequest.model_construct(
        narrative_text="x", pet_name="Morsel", archetype="WEIRD", stage="ELDER",
        source_images=["a"], item_type=None, event_type=None, insanity_event_type=None,
        ghost_name=None, from_stage=None, to_stage=None, visual_traits=None,
    )
    prompt = build_image_prompt(req)
    assert "Morsel is a mysterious creature" in prompt
    assert "(creature)" in prompt


# ── item context ────────────────────────────────────────────


def test_purity_item_without_event():
    assert "consuming a glowing pure offering" in build_image_prompt(_request(item_type="PURITY"))


def test_rot_item_without_event():
    assert "devouring a rotting, corrupted offering" in build_image_prompt(_request(item_type="ROT"))


def test_item_ignored_when_event_present():
    prompt = build_image_prompt(_request(item_type="ROT", event_type="death"))
    assert "corrupted offering" not in prompt
    assert "somber memorial scene, Morsel fading into spectral form" in prompt


# ── event extensions ────────────────────────────────────────


def test_evolution_names_both_stages():
    prompt = build_image_prompt(_request(event_type="evolution", from_stage="BABY", to_stage="TEEN"))
    assert "dramatic transformation scene with BABY morphing into TEEN" in prompt
    assert "LEFT panel shows BABY appearance, RIGHT panel shows TEEN appearance" in prompt


def test_evolution_without_stages_uses_static_text():
    ext = event_extension(_request(event_type="evolution"))
    assert ext.startswith("dramatic transformation scene with morphing body horror elements")


def test_placate_is_archetype_specific():
    for archetype, text in PLACATE_EXTENSIONS.items():
        assert event_extension(_request(event_type="placate", archetype=archetype)) == text


def test_insanity_variant():
    ext = event_extension(_request(event_type="insanity", insanity_event_type="GLITCH"))
    assert ext == INSANITY_EXTENSIONS["GLITCH"]


def test_insanity_without_variant_is_empty():
    assert event_extension(_request(event_type="insanity")) == ""


def test_unmapped_insanity_variant_is_empty():
    assert event_extension(_request(event_type="insanity", insanity_event_type="ECHOES")) == ""


def test_unknown_event_is_empty():
    assert event_extension(_request(event_type="sneeze")) == ""
    assert scene_composition(_request(event_type="sneeze")) == ""


def test_haunt_names_ghost():
    ext = event_extension(_request(event_type="haunt", ghost_name="Pip"))
    assert "Pip appearing as translucent apparition" in ext


def test_feed_event_has_empty_extension():
    assert event_extension(_request(event_type="feed")) == ""


def test_vomit_uses_static_extension():
    assert event_extension(_request(event_type="vomit")).startswith("visceral expulsion scene")


# ── scene composition ───────────────────────────────────────


def test_haunt_composition_substitutes_names():
    block = scene_composition(_request(event_type="haunt", ghost_name="Pip"))
    assert "IMPORTANT LAYOUT INSTRUCTIONS" in block
    assert "translucent ghost of Pip" in block
    assert "current pet Morsel" in block


def test_no_composition_without_event():
    prompt = build_image_prompt(_request())
    assert "LAYOUT INSTRUCTIONS" not in prompt


def test_vomit_composition_is_three_panel():
    assert "Three-panel sequence" in scene_composition(_request(event_type="vomit"))


# ── visual traits ───────────────────────────────────────────


def test_visual_traits_appended():
    prompt = build_image_prompt(_request(visual_traits={
        "color_palette": ["#2a0033", "#000000"],
        "key_features": ["hollow eyes", "tattered wings"],
        "style_keywords": ["shadowy"],
    }))
    assert "Character Consistency Requirements" in prompt
    assert "- Key features: hollow eyes, tattered wings" in prompt
    assert "- Color palette: #2a0033, #000000" in prompt
