"""RunPod serverless job client.

A RunPod endpoint accepts work through two calls:

    POST {base}/{endpoint}/run           {"input": {...}}  -> {"id": "...", "status": "IN_QUEUE"}
    GET  {base}/{endpoint}/status/{id}                     -> {"status": ..., "output"?, "error"?}

RunPodClient wraps exactly those two calls. Polling, backoff and deadlines
live in `creepy_companion.polling`; this module only speaks HTTP.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from creepy_companion.errors import UpstreamPollError, UpstreamSubmitError
from creepy_companion.models import JobStatus

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.runpod.ai/v2"


class RunPodClient:
    """Async HTTP client bound to one RunPod endpoint.

    Args:
        api_key:   Bearer token for the RunPod account.
        endpoint:  Endpoint id, e.g. "nano-banana-edit" or "qwen3-32b-awq".
        base_url:  API root. Defaults to the public v2 API.
        timeout:   Per-request HTTP timeout in seconds.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._endpoint_url = f"{base_url.rstrip('/')}/{endpoint.strip('/')}"
        self._timeout = timeout

    @property
    def endpoint_url(self) -> str:
        return self._endpoint_url

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    async def submit(self, payload: dict[str, Any]) -> str:
        """Create a job and return its id.

        Raises UpstreamSubmitError with the upstream status and raw body on a
        non-OK reply, or with status 500 when the reply carries no job id.
        """
        url = f"{self._endpoint_url}/run"
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(url, json=payload, headers=self._headers())

        if not resp.is_success:
            logger.error("RunPod submit error: %s %s", resp.status_code, resp.text)
            raise UpstreamSubmitError(
                "Failed to submit generation job",
                details=resp.text,
                status_code=resp.status_code,
            )

        data = resp.json()
        job_id = data.get("id") if isinstance(data, dict) else None
        if not job_id:
            logger.error("No job ID in response: %s", data)
            raise UpstreamSubmitError("Failed to get job ID", status_code=500)

        logger.info("Job submitted: %s", job_id)
        return job_id

    async def status(self, job_id: str) -> JobStatus:
        """Fetch the current status of a job.

        Any failure (transport error, non-OK reply, unreadable body) raises
        UpstreamPollError; the poll loop counts it and carries on.
        """
        url = f"{self._endpoint_url}/status/{job_id}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(url, headers=self._headers())
        except httpx.TransportError as e:
            raise UpstreamPollError("Status check failed", details=str(e)) from e

        if not resp.is_success:
            raise UpstreamPollError("Status check failed", details=resp.status_code)

        try:
            return JobStatus.model_validate(resp.json())
        except ValueError as e:
            raise UpstreamPollError("Unreadable status response", details=str(e)) from e
