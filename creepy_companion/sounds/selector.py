"""Sound selection orchestrator: cache, then AI under a deadline, then rules.

Flow for one request:
  1. Cache lookup by fingerprint. A hit is returned immediately.
  2. With a job client configured, ask the chat model. Submit and every poll
     share one deadline (default 500ms); when it fires, the in-flight HTTP
     call is cancelled.
  3. Timeout, upstream failure or an unparseable answer: rule-based fallback.
  4. Store the result and return it.

select() never raises for a validated request.
"""

from __future__ import annotations

import asyncio
import logging
import random

from creepy_companion.errors import JobTimeoutError
from creepy_companion.models import SoundSelectionRequest, SoundSelectionResponse
from creepy_companion.polling import SOUND_SCHEDULE, JobClient, JobPoller, PollSchedule, Sleep
from creepy_companion.sounds.cache import SoundCache, fingerprint
from creepy_companion.sounds.decision import (
    build_sound_payload,
    extract_completion_text,
    parse_sound_decision,
)
from creepy_companion.sounds.fallback import fallback_for

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 0.5


class SoundSelector:
    """Resolves sound requests for one process.

    Args:
        cache:    The process-wide SoundCache, shared by reference.
        client:   RunPod chat endpoint client, or None to go straight to rules.
        timeout:  Deadline in seconds for the whole AI attempt.
        schedule: Poll schedule for the AI job.
        sleep:    Timer used between polls.
        rng:      Randomness for the fallback tables.
    """

    def __init__(
        self,
        cache: SoundCache,
        client: JobClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        schedule: PollSchedule = SOUND_SCHEDULE,
        sleep: Sleep = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.cache = cache
        self._client = client
        self._timeout = timeout
        self._schedule = schedule
        self._sleep = sleep
        self._rng = rng

    async def select(self, request: SoundSelectionRequest) -> SoundSelectionResponse:
        key = fingerprint(request)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("sound cache hit %s", key)
            return cached

        if self._client is None:
            response = fallback_for(request, self._rng)
        else:
            response = await self._select_with_ai_or_fallback(self._client, request)

        self.cache.put(key, response)
        return response

    async def _select_with_ai_or_fallback(
        self, client: JobClient, request: SoundSelectionRequest,
    ) -> SoundSelectionResponse:
        try:
            return await asyncio.wait_for(self._select_with_ai(client, request), timeout=self._timeout)
        except (asyncio.TimeoutError, JobTimeoutError):
            logger.warning("AI sound selection timeout, using fallback")
        except Exception:
            logger.exception("AI sound selection failed, using fallback")
        return fallback_for(request, self._rng)

    async def _select_with_ai(self, client: JobClient, request: SoundSelectionRequest) -> SoundSelectionResponse:
        poller = JobPoller(client, self._schedule, sleep=self._sleep, label="sound selection")
        output = await poller.run(build_sound_payload(request))
        return parse_sound_decision(extract_completion_text(output))

    def fallback(self, request: SoundSelectionRequest) -> SoundSelectionResponse:
        """Rule-based answer with no cache involvement; used when select() itself breaks."""
        return fallback_for(request, self._rng)
