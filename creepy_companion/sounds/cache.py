"""Bounded sound-decision cache keyed by a bucketed context fingerprint.

Near-identical requests share one entry: sanity is bucketed to the lower
multiple of 10, corruption to the lower multiple of 20, and the pet name and
narrative text are left out entirely.

Eviction is first-in-first-out over insertion order. Hits bump a counter but
do not refresh an entry's position. One SoundCache lives per process (see
create_app); separate processes do not share entries.
"""

from __future__ import annotations

import json
import logging
import math
import time
from collections import OrderedDict
from dataclasses import dataclass, field

from creepy_companion.models import SoundSelectionRequest, SoundSelectionResponse

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


def fingerprint(request: SoundSelectionRequest) -> str:
    ctx = request.context
    return json.dumps(
        {
            "eventType": request.event_type,
            "stage": ctx.stage,
            "archetype": ctx.archetype,
            "itemType": ctx.item_type,
            "sanityBucket": int(math.floor(ctx.sanity / 10) * 10),
            "corruptionBucket": int(math.floor(ctx.corruption / 20) * 20),
        },
        separators=(",", ":"),
    )


@dataclass
class CacheEntry:
    response: SoundSelectionResponse
    created_at: float = field(default_factory=time.time)
    hit_count: int = 0


class SoundCache:
    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("cache capacity must be at least 1")
        self.capacity = capacity
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def entry(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def get(self, key: str) -> SoundSelectionResponse | None:
        """Return a copy of the stored response flagged as cached, or None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        entry.hit_count += 1
        return entry.response.model_copy(update={"cached": True})

    def put(self, key: str, response: SoundSelectionResponse) -> None:
        if key not in self._entries and len(self._entries) >= self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("sound cache full, evicted %s", evicted)
        self._entries[key] = CacheEntry(response=response.model_copy(update={"cached": False}))

    def clear(self) -> None:
        self._entries.clear()
