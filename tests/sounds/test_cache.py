"""Tests for the sound cache and its fingerprint."""

import json

import pytest

from creepy_companion.models import SoundSelectionRequest, SoundSelectionResponse
from creepy_companion.sounds.cache import SoundCache, fingerprint


def _request(event="feed", sanity=50, corruption=10, **ctx) -> SoundSelectionRequest:
    context = {"petName": "Morsel", "stage": "BABY", "archetype": "GLOOM", "itemType": "ROT",
               "sanity": sanity, "corruption": corruption}
    context.update(ctx)
    return SoundSelectionRequest.model_validate({"eventType": event, "context": context})


def _response(sound="cute_a") -> SoundSelectionResponse:
    return SoundSelectionResponse(primary_sound=sound, volume=0.5)


# ── fingerprint ─────────────────────────────────────────────


def test_fingerprint_buckets_values():
    key = json.loads(fingerprint(_request(sanity=57, corruption=39)))
    assert key == {
        "eventType": "feed", "stage": "BABY", "archetype": "GLOOM", "itemType": "ROT",
        "sanityBucket": 50, "corruptionBucket": 20,
    }


def test_fingerprint_ignores_name_and_narrative():
    a = fingerprint(_request(petName="Morsel", narrativeText="one"))
    b = fingerprint(_request(petName="Grub", narrativeText="two"))
    assert a == b


def test_fingerprint_collapses_within_bucket():
    assert fingerprint(_request(sanity=50, corruption=0)) == fingerprint(_request(sanity=59.9, corruption=19))


def test_fingerprint_splits_across_buckets():
    assert fingerprint(_request(sanity=49)) != fingerprint(_request(sanity=50))
    assert fingerprint(_request(corruption=19)) != fingerprint(_request(corruption=20))


# ── SoundCache ──────────────────────────────────────────────


def test_miss_returns_none():
    assert SoundCache().get("nope") is None


def test_hit_is_flagged_cached_and_counted():
    cache = SoundCache()
    cache.put("k", _response("monster_gore_mushy"))
    first = cache.get("k")
    second = cache.get("k")
    assert first.cached is True
    assert first.primary_sound == "monster_gore_mushy"
    assert second == first
    assert cache.entry("k").hit_count == 2


def test_stored_copy_is_not_cached_flagged():
    cache = SoundCache()
    resp = SoundSelectionResponse(primary_sound="cute_a", volume=0.5, cached=True)
    cache.put("k", resp)
    assert cache.entry("k").response.cached is False
    assert cache.entry("k").hit_count == 0


def test_returned_copy_does_not_mutate_entry():
    cache = SoundCache()
    cache.put("k", _response())
    cache.get("k")
    assert cache.entry("k").response.cached is False


def test_capacity_never_exceeded_and_oldest_evicted():
    cache = SoundCache(capacity=100)
    for i in range(100):
        cache.put(f"k{i}", _response())
    assert len(cache) == 100

    cache.put("k100", _response())
    assert len(cache) == 100
    assert "k0" not in cache
    assert "k1" in cache
    assert "k100" in cache


def test_hits_do_not_refresh_position():
    cache = SoundCache(capacity=2)
    cache.put("a", _response())
    cache.put("b", _response())
    cache.get("a")
    cache.put("c", _response())
    assert "a" not in cache
    assert "b" in cache


def test_overwrite_existing_key_does_not_evict():
    cache = SoundCache(capacity=2)
    cache.put("a", _response("x"))
    cache.put("b", _response())
    cache.put("a", _response("y"))
    assert len(cache) == 2
    assert cache.get("a").primary_sound == "y"


def test_zero_capacity_rejected():
    with pytest.raises(ValueError):
        SoundCache(capacity=0)
