"""Submit-then-poll state machine for RunPod jobs.

    SUBMITTING ──ok──▶ POLLING ──COMPLETED──▶ COMPLETED
        │                 │ ────FAILED─────▶ FAILED
        └──error──▶ SUBMIT_ERROR
                          └─attempts spent─▶ TIMED_OUT

JobTracker holds the state and applies transitions; it never touches the
network or the clock. JobPoller is the scheduler: it owns the timer, sleeps
before every poll (including the first) and feeds observations into the
tracker until it reaches a terminal state.

Schedules:
  IMAGE_SCHEDULE: 45 attempts, 2s start, x1.5 after a failed poll,
                  x1.2 after a still-running status, capped at 5s.
  SOUND_SCHEDULE: 5 attempts at a fixed 100ms; the caller also wraps the
                  whole run in a wall-clock deadline.
  TEXT_SCHEDULE, SUMMARY_SCHEDULE, ART_SCHEDULE: fixed 2s interval,
                  15, 30 and 30 attempts.

The attempt ceiling is the real bound. Because the delay grows
geometrically, the image budget only comes out to roughly 90 seconds.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from creepy_companion.errors import (
    JobTimeoutError,
    UpstreamJobFailure,
    UpstreamPollError,
    UpstreamSubmitError,
)
from creepy_companion.models import JobStatus

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


class JobClient(Protocol):
    async def submit(self, payload: dict[str, Any]) -> str: ...

    async def status(self, job_id: str) -> JobStatus: ...


class JobState(str, Enum):
    SUBMITTING = "SUBMITTING"
    POLLING = "POLLING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"
    SUBMIT_ERROR = "SUBMIT_ERROR"

    @property
    def terminal(self) -> bool:
        return self not in (JobState.SUBMITTING, JobState.POLLING)


@dataclass(frozen=True)
class PollSchedule:
    """Attempt ceiling and delay growth for one kind of job (delays in seconds)."""

    max_attempts: int
    initial_delay: float
    max_delay: float
    failure_growth: float = 1.0
    pending_growth: float = 1.0


IMAGE_SCHEDULE = PollSchedule(
    max_attempts=45,
    initial_delay=2.0,
    max_delay=5.0,
    failure_growth=1.5,
    pending_growth=1.2,
)

SOUND_SCHEDULE = PollSchedule(
    max_attempts=5,
    initial_delay=0.1,
    max_delay=0.1,
)

TEXT_SCHEDULE = PollSchedule(max_attempts=15, initial_delay=2.0, max_delay=2.0)
SUMMARY_SCHEDULE = PollSchedule(max_attempts=30, initial_delay=2.0, max_delay=2.0)
ART_SCHEDULE = PollSchedule(max_attempts=30, initial_delay=2.0, max_delay=2.0)


@dataclass
class JobTracker:
    """Mutable state of one job run. Transitions are the only way to change it."""

    schedule: PollSchedule
    state: JobState = JobState.SUBMITTING
    attempts: int = 0
    delay: float = field(init=False, default=0.0)
    job_id: str | None = None
    output: Any = None
    error: Any = None

    def __post_init__(self) -> None:
        self.delay = self.schedule.initial_delay

    def _require(self, *states: JobState) -> None:
        if self.state not in states:
            raise RuntimeError(f"invalid transition from {self.state.value}")

    def _grow(self, factor: float) -> None:
        self.delay = min(self.delay * factor, self.schedule.max_delay)

    def _spend_attempt(self, factor: float) -> None:
        self.attempts += 1
        self._grow(factor)
        if self.attempts >= self.schedule.max_attempts:
            self.state = JobState.TIMED_OUT

    def submitted(self, job_id: str) -> JobState:
        self._require(JobState.SUBMITTING)
        self.job_id = job_id
        self.state = JobState.POLLING
        return self.state

    def submit_failed(self, error: Any) -> JobState:
        self._require(JobState.SUBMITTING)
        self.error = error
        self.state = JobState.SUBMIT_ERROR
        return self.state

    def poll_failed(self) -> JobState:
        """A status check failed; it still uses up an attempt."""
        self._require(JobState.POLLING)
        self._spend_attempt(self.schedule.failure_growth)
        return self.state

    def observe(self, job: JobStatus) -> JobState:
        """Apply one successful status reply."""
        self._require(JobState.POLLING)
        if job.status == "COMPLETED":
            self.output = job.output
            self.state = JobState.COMPLETED
        elif job.status == "FAILED":
            self.error = job.error
            self.state = JobState.FAILED
        else:
            self._spend_attempt(self.schedule.pending_growth)
        return self.state


class JobPoller:
    """Drive a JobTracker to a terminal state against a live job client.

    `sleep` is injectable so tests never wait on a real timer.
    """

    def __init__(
        self,
        client: JobClient,
        schedule: PollSchedule,
        sleep: Sleep = asyncio.sleep,
        label: str = "job",
    ) -> None:
        self._client = client
        self._schedule = schedule
        self._sleep = sleep
        self._label = label
        self.tracker: JobTracker | None = None

    async def run(self, payload: dict[str, Any]) -> Any:
        """Submit `payload`, poll to completion and return the job output.

        Raises:
            UpstreamSubmitError: job creation failed.
            UpstreamJobFailure:  provider reported FAILED.
            JobTimeoutError:     attempt ceiling reached.
        """
        tracker = JobTracker(self._schedule)
        self.tracker = tracker

        try:
            job_id = await self._client.submit(payload)
        except UpstreamSubmitError as e:
            tracker.submit_failed(e.details)
            raise
        tracker.submitted(job_id)

        while tracker.state is JobState.POLLING:
            await self._sleep(tracker.delay)
            try:
                job = await self._client.status(job_id)
            except UpstreamPollError as e:
                logger.warning("%s status check failed (attempt %d): %s",
                               self._label, tracker.attempts + 1, e.details)
                tracker.poll_failed()
                continue
            logger.debug("%s status (attempt %d): %s", self._label, tracker.attempts + 1, job.status)
            tracker.observe(job)

        if tracker.state is JobState.COMPLETED:
            return tracker.output
        if tracker.state is JobState.FAILED:
            logger.error("%s %s failed: %s", self._label, job_id, tracker.error)
            raise UpstreamJobFailure(f"{self._label.capitalize()} failed", details=tracker.error)
        raise JobTimeoutError(
            f"{self._label.capitalize()} timeout",
            details=f"Job did not complete within {self._schedule.max_attempts} status checks",
        )
