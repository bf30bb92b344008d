import asyncio

import pytest

from creepy_companion.models import JobStatus
from creepy_companion.sounds import SoundCache


class StubRunPod:
    """Scripted stand-in for RunPodClient.

    `statuses` is consumed one item per status() call: a dict or JobStatus is
    returned as the job status, an exception instance is raised. Once the
    script runs out the job reports IN_PROGRESS forever.
    """

    def __init__(self, statuses=(), job_id="job-123", submit_error=None, submit_delay=0.0):
        self.statuses = list(statuses)
        self.job_id = job_id
        self.submit_error = submit_error
        self.submit_delay = submit_delay
        self.payloads: list[dict] = []
        self.status_calls = 0

    async def submit(self, payload):
        self.payloads.append(payload)
        if self.submit_delay:
            await asyncio.sleep(self.submit_delay)
        if self.submit_error is not None:
            raise self.submit_error
        return self.job_id

    async def status(self, job_id):
        self.status_calls += 1
        item = self.statuses.pop(0) if self.statuses else {"status": "IN_PROGRESS"}
        if isinstance(item, Exception):
            raise item
        if isinstance(item, JobStatus):
            return item
        return JobStatus.model_validate(item)


class RecordingSleep:
    """Async sleep replacement that records delays instead of waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def stub_runpod():
    return StubRunPod


@pytest.fixture
def no_sleep():
    return RecordingSleep()


@pytest.fixture
def sound_cache():
    return SoundCache(capacity=100)
