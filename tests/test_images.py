"""Tests for image output normalisation and the image and art generators."""

import pytest

from creepy_companion.errors import JobTimeoutError, OutputFormatError, UpstreamJobFailure
from creepy_companion.images import (
    ArtGenerator,
    ImageGenerator,
    ImageOutputKind,
    build_art_payload,
    build_image_payload,
    normalize_image_output,
)
from creepy_companion.models import ArtRequest, GenerationRequest

URL = "https://image.runpod.ai/out/abc.png"


def _request(**fields) -> GenerationRequest:
    base = {
        "narrative_text": "It grows.",
        "pet_name": "Morsel",
        "archetype": "SPARK",
        "stage": "TEEN",
        "source_images": ["data:image/png;base64,AAAA", "https://x/prev.png"],
    }
    base.update(fields)
    return GenerationRequest(**base)


# ── normalize_image_output ──────────────────────────────────


@pytest.mark.parametrize("output, kind", [
    ({"result": URL}, ImageOutputKind.RESULT),
    ({"image_url": URL}, ImageOutputKind.IMAGE_URL),
    ({"image": URL}, ImageOutputKind.INLINE_IMAGE),
    (URL, ImageOutputKind.URL_STRING),
])
def test_all_shapes_normalize_to_same_reference(output, kind):
    normalized = normalize_image_output(output)
    assert normalized.reference == URL
    assert normalized.kind is kind


def test_data_uri_string_accepted():
    assert normalize_image_output("data:image/png;base64,QQ==").reference == "data:image/png;base64,QQ=="


def test_inline_image_returned_unchanged():
    out = normalize_image_output({"image": "iVBORw0KGgo="})
    assert out.kind is ImageOutputKind.INLINE_IMAGE
    assert out.reference == "iVBORw0KGgo="


def test_result_wins_over_image_url():
    out = normalize_image_output({"image_url": "https://b", "result": "https://a"})
    assert out.kind is ImageOutputKind.RESULT
    assert out.reference == "https://a"


@pytest.mark.parametrize("output", [None, {}, {"images": ["x"]}, "not a url", 42, [URL], {"result": ""}])
def test_unknown_shapes_rejected(output):
    with pytest.raises(OutputFormatError) as exc_info:
        normalize_image_output(output)
    assert exc_info.value.status_code == 500
    assert exc_info.value.error == "Unexpected response format"


# ── payload ─────────────────────────────────────────────────


def test_payload_carries_prompt_images_and_safety_flag():
    payload = build_image_payload(_request(), "PROMPT")
    assert payload == {
        "input": {
            "prompt": "PROMPT",
            "images": ["data:image/png;base64,AAAA", "https://x/prev.png"],
            "enable_safety_checker": True,
        },
    }


# ── ImageGenerator ──────────────────────────────────────────


async def test_generate_returns_image_reference(stub_runpod, no_sleep):
    client = stub_runpod(statuses=[
        {"status": "IN_PROGRESS"},
        {"status": "COMPLETED", "output": {"image_url": URL}},
    ])
    generator = ImageGenerator(client, sleep=no_sleep)
    assert await generator.generate(_request(event_type="evolution", from_stage="BABY", to_stage="TEEN")) == URL

    prompt = client.payloads[0]["input"]["prompt"]
    assert "BABY" in prompt and "TEEN" in prompt
    assert "transformation" in prompt


async def test_generate_failed_job(stub_runpod, no_sleep):
    client = stub_runpod(statuses=[{"status": "FAILED", "error": "safety checker"}])
    with pytest.raises(UpstreamJobFailure) as exc_info:
        await ImageGenerator(client, sleep=no_sleep).generate(_request())
    assert exc_info.value.to_body() == {"error": "Image generation failed", "details": "safety checker"}
    assert client.status_calls == 1


async def test_generate_timeout(stub_runpod, no_sleep):
    client = stub_runpod()
    with pytest.raises(JobTimeoutError):
        await ImageGenerator(client, sleep=no_sleep).generate(_request())
    assert client.status_calls == 45


async def test_generate_bad_output(stub_runpod, no_sleep):
    client = stub_runpod(statuses=[{"status": "COMPLETED", "output": {"nothing": True}}])
    with pytest.raises(OutputFormatError) as exc_info:
        await ImageGenerator(client, sleep=no_sleep).generate(_request())
    assert exc_info.value.details == '{"nothing": true}'


# ── ArtGenerator ────────────────────────────────────────────


def test_art_payload_defaults():
    payload = build_art_payload(ArtRequest(prompt="a pale thing"))
    assert payload == {
        "input": {
            "prompt": "a pale thing",
            "negative_prompt": "",
            "size": "1024*1024",
            "seed": -1,
            "enable_safety_checker": True,
        },
    }


async def test_art_result_keeps_request_seed(stub_runpod, no_sleep):
    client = stub_runpod(statuses=[{"status": "COMPLETED", "output": {"result": URL, "cost": 0.02}}])
    art = await ArtGenerator(client, sleep=no_sleep).generate(ArtRequest(prompt="p", seed=7))
    assert art.image_url == URL
    assert art.seed == 7
    assert client.payloads[0]["input"]["seed"] == 7
    assert no_sleep.delays == [2.0]


async def test_art_image_url_reports_output_seed(stub_runpod, no_sleep):
    client = stub_runpod(statuses=[{"status": "COMPLETED", "output": {"image_url": URL, "seed": 991}}])
    art = await ArtGenerator(client, sleep=no_sleep).generate(ArtRequest(prompt="p"))
    assert art.to_json_dict() == {"imageUrl": URL, "seed": 991}


async def test_art_timeout_after_30_polls(stub_runpod, no_sleep):
    client = stub_runpod()
    with pytest.raises(JobTimeoutError) as exc_info:
        await ArtGenerator(client, sleep=no_sleep).generate(ArtRequest(prompt="p"))
    assert exc_info.value.error == "Image generation timeout"
    assert client.status_calls == 30
