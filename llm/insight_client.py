"""
InsightClient: chat-completions client for trade insights.

Sends a system + user message pair to an OpenAI-compatible
/chat/completions endpoint and returns the first choice's text.

Failures are reported as distinct exception types (rate limit,
payment required, other upstream failure, missing credential).
Nothing is retried here; callers decide what to do.
"""

import logging
import os
from typing import Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-2.5-flash"
API_KEY_ENV = "AI_GATEWAY_API_KEY"


class InsightError(Exception):
    """Base class for text-generation failures."""


class ConfigurationMissing(InsightError):
    """Required credential is not configured."""


class UpstreamRateLimited(InsightError):
    """Endpoint answered 429."""

    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message)


class UpstreamPaymentRequired(InsightError):
    """Endpoint answered 402 (credits exhausted)."""

    status_code = 402

    def __init__(self, message: str = "Payment required. Please add credits to your workspace."):
        super().__init__(message)


class UpstreamFailure(InsightError):
    """Any other non-2xx answer, transport error or malformed body."""

    def __init__(self, status_code: Optional[int], message: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message or f"AI API error: {status_code}")


class InsightClient:
    """
    Credential-bearing client for the text-generation endpoint.

    Usage::

        client = InsightClient(api_key="...")
        text = client.complete([
            {"role": "system", "content": "..."},
            {"role": "user", "content": "..."},
        ])
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            api_key: Bearer credential (defaults to AI_GATEWAY_API_KEY env var)
            model: Model identifier sent with every request
            endpoint: Full chat-completions URL
            timeout: Request timeout in seconds
            session: requests.Session to send through (one is created if omitted)
        """
        self.api_key = api_key or os.getenv(API_KEY_ENV)
        self.model = model
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: dict, session: Optional[requests.Session] = None) -> "InsightClient":
        """
        Build a client from the "insights" section of the journal config.

        Keys: api_key, model, endpoint, timeout. The environment variable
        still applies when api_key is absent.
        """
        section = (config or {}).get("insights", {}) or {}
        return cls(
            api_key=section.get("api_key"),
            model=section.get("model", DEFAULT_MODEL),
            endpoint=section.get("endpoint", DEFAULT_ENDPOINT),
            timeout=float(section.get("timeout", 60.0)),
            session=session,
        )

    def complete(self, messages: list[dict]) -> str:
        """
        Request a completion.

        Args:
            messages: Chat messages ([{"role": ..., "content": ...}, ...])

        Returns:
            Generated text of the first choice

        Raises:
            ConfigurationMissing: No API key configured (no request is sent)
            UpstreamRateLimited: HTTP 429
            UpstreamPaymentRequired: HTTP 402
            UpstreamFailure: Other non-2xx, transport error or malformed body
        """
        if not self.api_key:
            raise ConfigurationMissing(f"{API_KEY_ENV} not configured")

        logger.info(f"Requesting trade analysis from {self.model}")
        try:
            response = self.session.post(
                self.endpoint,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={"model": self.model, "messages": messages},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"AI API request failed: {e}")
            raise UpstreamFailure(None, f"AI API request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.error(f"AI API error: {response.status_code} {response.text}")
            if response.status_code == 429:
                raise UpstreamRateLimited()
            if response.status_code == 402:
                raise UpstreamPaymentRequired()
            raise UpstreamFailure(response.status_code)

        try:
            data = response.json()
            text = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamFailure(
                response.status_code, f"Malformed AI API response: {e}"
            ) from e

        logger.info("Analysis completed successfully")
        return text or ""
