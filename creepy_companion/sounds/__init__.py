"""Sound selection for game events.

Three layers, checked in order for each request:
  cache     bounded FIFO map keyed by a bucketed context fingerprint
  decision  chat-model answer, fetched under a short wall-clock deadline
  fallback  fixed rule tables; always produces a response

SoundSelector wires them together.
"""

from .cache import CacheEntry, SoundCache, fingerprint  # noqa: F401
from .decision import (  # noqa: F401
    build_sound_payload,
    extract_completion_text,
    extract_json_object,
    parse_sound_decision,
    strip_reasoning,
)
from .fallback import fallback_for, select_fallback  # noqa: F401
from .selector import SoundSelector  # noqa: F401
