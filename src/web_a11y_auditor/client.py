"""Text-generation REST client with authentication, retry logic, and error mapping.

Talks to an OpenAI-compatible chat completions endpoint (OpenRouter by
default) with exponential backoff on transient failures and structured
exception mapping. Blocking calls are offloaded to a bounded thread pool so
the enrichment fan-out can await them concurrently. Each audit builds its own
client and closes it when enrichment ends, so no pool is shared between audits.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from concurrent.futures import ThreadPoolExecutor

import requests

from web_a11y_auditor.config import AuditConfig
from web_a11y_auditor.exceptions import (
    AuditAPIError,
    AuditAuthError,
    AuditConnectionError,
    AuditRateLimitError,
)

logger = logging.getLogger(__name__)


class GenerationClient:
    """REST client for a chat completions API."""

    def __init__(self, config: AuditConfig) -> None:
        self.config = config
        self.base_url = config.generation_base_url.rstrip("/")
        self.model = config.generation_model
        self.temperature = config.generation_temperature
        self.max_retries = config.generation_max_retries
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {config.generation_api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
            "HTTP-Referer": config.generation_app_url,
            "X-Title": config.generation_app_title,
        })
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, config.max_violations_to_analyze + 1),
            thread_name_prefix="generation",
        )

    def _request(self, method: str, url: str, timeout: float, **kwargs: object) -> requests.Response:
        """Execute an HTTP request with retry logic and error mapping.

        The initial attempt plus up to ``max_retries`` retries are made,
        giving a total of ``max_retries + 1`` attempts.
        """
        last_exception: Exception | None = None
        for attempt in range(1, self.max_retries + 2):
            try:
                response = self.session.request(
                    method,
                    url,
                    timeout=timeout,
                    **kwargs,  # type: ignore[arg-type]
                )
                self._raise_for_status(response)
                return response
            except AuditRateLimitError as exc:
                last_exception = exc
                wait = exc.retry_after or (2 ** (attempt - 1))
                logger.warning("Rate limited, retrying in %ds (attempt %d/%d)", wait, attempt, self.max_retries + 1)
            except (requests.ConnectionError, requests.Timeout) as exc:
                last_exception = AuditConnectionError(
                    f"Connection failed: {exc}",
                    details={"url": url, "attempt": attempt},
                )
                wait = 2 ** (attempt - 1)
                logger.warning("Connection error, retrying in %ds (attempt %d/%d)", wait, attempt, self.max_retries + 1)
            if attempt <= self.max_retries:
                time.sleep(wait)
        raise last_exception  # type: ignore[misc]

    def _raise_for_status(self, response: requests.Response) -> None:
        """Map HTTP status codes to typed audit exceptions."""
        if response.ok:
            return
        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = {"raw": response.text[:500]}

        if status in (401, 403):
            raise AuditAuthError("Generation service rejected the credentials", details=body)
        if status == 429:
            retry_after = response.headers.get("Retry-After")
            raise AuditRateLimitError(
                "Rate limit exceeded",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                details=body,
            )
        raise AuditAPIError(
            f"API error: HTTP {status}",
            status_code=status,
            details=body,
        )

    def complete(self, prompt: str, system_prompt: str, max_tokens: int, timeout: float) -> str:
        """Run one chat completion and return the assistant text.

        Args:
            prompt: The user message.
            system_prompt: The system message.
            max_tokens: Upper bound on generated tokens.
            timeout: Per-request timeout in seconds.

        Returns:
            The generated text.

        Raises:
            AuditEnrichmentError: Any subclass, on transport, status, or body errors.
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": self.temperature,
        }
        response = self._request("POST", f"{self.base_url}/chat/completions", timeout=timeout, json=payload)
        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise AuditAPIError("Malformed generation response", status_code=response.status_code) from exc
        if not isinstance(content, str) or not content.strip():
            raise AuditAPIError("Empty generation response", status_code=response.status_code)
        return content

    async def generate(self, prompt: str, system_prompt: str, max_tokens: int, timeout: float) -> str:
        """Awaitable ``complete`` running on the client's thread pool."""
        loop = asyncio.get_running_loop()
        call = functools.partial(self.complete, prompt, system_prompt, max_tokens, timeout)
        return await loop.run_in_executor(self._executor, call)

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
        self.session.close()
