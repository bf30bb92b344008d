"""Text generation: RunPod chat model first, one hosted provider as backup.

TextGenerator tries the RunPod vLLM endpoint (submit, then poll on a fixed
2s schedule). Any failure there is logged and the request goes to the hosted
provider, when one is configured:

    HttpProvider("anthropic")  POST {base}/v1/messages
                               Response: {"content": [{"text": "..."}]}
    HttpProvider("openai")     POST {base}/chat/completions
                               Response: {"choices": [{"message": {"content": "..."}}]}

Provider failures propagate as ProviderError carrying the provider's HTTP
status, which the routes turn into retry hints.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Literal

import httpx

from creepy_companion.errors import (
    ConfigurationError,
    GenerationError,
    OutputFormatError,
    ProviderError,
)
from creepy_companion.polling import TEXT_SCHEDULE, JobClient, JobPoller, PollSchedule, Sleep
from creepy_companion.sounds.decision import extract_completion_text, strip_reasoning

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


def sampling_params(temperature: float, max_tokens: int) -> dict[str, Any]:
    return {
        "max_tokens": max_tokens,
        "temperature": temperature,
        "seed": -1,
        "top_k": -1,
        "top_p": 1,
    }


def build_text_payload(
    prompt: str,
    temperature: float,
    max_tokens: int,
    system: str | None = None,
) -> dict[str, Any]:
    """Plain prompt input, or chat messages when a system prompt is given."""
    if system is None:
        body: dict[str, Any] = {"prompt": prompt}
    else:
        body = {
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
        }
    body["sampling_params"] = sampling_params(temperature, max_tokens)
    return {"input": body}


def extract_text_output(output: Any) -> str:
    """Resolve a COMPLETED text job's output to the generated text.

    Accepted shapes: vLLM [{"choices": [{"tokens": [...]}]}] (reasoning
    stripped), ["text"], "text", {"text": ...} and {"output": ...}.
    """
    if isinstance(output, list) and output:
        text = extract_completion_text(output)
        if text:
            return strip_reasoning(text)
        if isinstance(output[0], str):
            return output[0]
    if isinstance(output, str):
        return output
    if isinstance(output, dict):
        if isinstance(output.get("text"), str) and output["text"]:
            return output["text"]
        inner = output.get("output")
        if inner:
            return inner if isinstance(inner, str) else json.dumps(inner)

    logger.error("Unexpected text output format: %r", output)
    raise OutputFormatError("Unexpected output format from RunPod", details=json.dumps(output, default=str))


ProviderFormat = Literal["anthropic", "openai"]


class HttpProvider:
    """Async HTTP client for a hosted chat model.

    Args:
        base_url:        API root, e.g. "https://api.anthropic.com".
        api_key:         Provider API key.
        model:           Model identifier sent with every request.
        provider_format: Wire format, "anthropic" or "openai".
        timeout:         HTTP timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        provider_format: ProviderFormat = "openai",
        timeout: float = 60.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._model = model
        self._format = provider_format
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self._format

    def _headers(self) -> dict[str, str]:
        if self._format == "anthropic":
            return {
                "Content-Type": "application/json",
                "x-api-key": self._api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            }
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    def _build_request(
        self, prompt: str, system: str | None, temperature: float, max_tokens: int,
    ) -> tuple[str, dict]:
        if self._format == "anthropic":
            body: dict[str, Any] = {
                "model": self._model,
                "max_tokens": max_tokens,
                "temperature": temperature,
                "messages": [{"role": "user", "content": prompt}],
            }
            if system:
                body["system"] = system
            return f"{self._base_url}/v1/messages", body

        messages = [{"role": "user", "content": prompt}]
        if system:
            messages.insert(0, {"role": "system", "content": system})
        body = {
            "model": self._model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        return f"{self._base_url}/chat/completions", body

    def _parse_response(self, data: Any) -> str:
        try:
            if self._format == "anthropic":
                text = data["content"][0]["text"]
            else:
                text = data["choices"][0]["message"]["content"]
        except (IndexError, KeyError, TypeError) as e:
            raise ProviderError(f"Unexpected response format from {self._format} provider",
                                status_code=500) from e
        if not isinstance(text, str):
            raise ProviderError(f"Unexpected response format from {self._format} provider",
                                status_code=500)
        return text

    async def __call__(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 150,
    ) -> str:
        url, body = self._build_request(prompt, system, temperature, max_tokens)
        logger.debug("provider call format=%s url=%s prompt_len=%d", self._format, url, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.TimeoutException as e:
            raise ProviderError(f"Provider timed out after {self._timeout}s", status_code=504) from e
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"Provider returned HTTP {e.response.status_code}",
                details=e.response.text,
                status_code=e.response.status_code,
            ) from e
        except httpx.TransportError as e:
            raise ProviderError(f"Cannot connect to provider at {self._base_url}") from e

        text = self._parse_response(resp.json())
        logger.debug("provider response format=%s len=%d", self._format, len(text))
        return text


class TextGenerator:
    """Generates text with RunPod first and the hosted provider as backup.

    Either collaborator may be None, but not both.
    """

    def __init__(
        self,
        runpod: JobClient | None = None,
        provider: HttpProvider | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if runpod is None and provider is None:
            raise ConfigurationError("Server configuration error")
        self._runpod = runpod
        self._provider = provider
        self._sleep = sleep

    async def generate(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 150,
        system: str | None = None,
        schedule: PollSchedule = TEXT_SCHEDULE,
    ) -> str:
        if self._runpod is not None:
            try:
                return await self._generate_with_runpod(
                    self._runpod, prompt, temperature, max_tokens, system, schedule,
                )
            except (GenerationError, httpx.HTTPError) as e:
                logger.error("RunPod generation failed, trying fallback: %s", e)

        if self._provider is None:
            raise ConfigurationError("No AI provider available")
        logger.info("Generating with %s provider", self._provider.name)
        return await self._provider(prompt, system=system, temperature=temperature, max_tokens=max_tokens)

    async def _generate_with_runpod(
        self,
        client: JobClient,
        prompt: str,
        temperature: float,
        max_tokens: int,
        system: str | None,
        schedule: PollSchedule,
    ) -> str:
        poller = JobPoller(client, schedule, sleep=self._sleep, label="text generation")
        output = await poller.run(build_text_payload(prompt, temperature, max_tokens, system))
        return extract_text_output(output)
