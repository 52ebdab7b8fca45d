"""Text-generation client with credential rotation."""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

import httpx

from ..config import DEFAULT_ENDPOINT, DEFAULT_MODEL, TextGenerationConfig

logger = logging.getLogger(__name__)

# Quota and auth failures are tied to one key; the next key may still work.
ROTATE_STATUS_CODES = frozenset({403, 429})


class TextGenerationError(RuntimeError):
    """The remote text-generation call failed."""


class CredentialsExhaustedError(TextGenerationError):
    """Every configured credential was tried and failed."""


class TextGenerationClient:
    """Call the ``generateContent`` API, rotating through API keys.

    Keys are used round-robin across calls. Within one call a quota (429) or
    auth (403) response, or a transport error, moves on to the next key; any
    other HTTP error fails immediately.
    """

    def __init__(
        self,
        api_keys: tuple[str, ...] | list[str],
        *,
        model: str = DEFAULT_MODEL,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout_seconds: float = 30.0,
        temperature: float = 0.7,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize the TextGenerationClient.

        Args:
            api_keys (tuple[str, ...] | list[str]): Credentials in rotation order.
            model (str): Model identifier.
            endpoint (str): Base URL of the models API.
            timeout_seconds (float): Per-request timeout.
            temperature (float): Sampling temperature sent with each request.
            http_client (Optional[httpx.Client]): Preconfigured client, for
                example one using a mock transport.
        """
        self._api_keys = tuple(key for key in api_keys if key)
        self._model = model
        self._endpoint = endpoint.rstrip("/")
        self._temperature = temperature
        self._http = http_client or httpx.Client(timeout=timeout_seconds)
        self._next_index = 0
        self._index_lock = threading.Lock()

    @classmethod
    def from_config(cls, cfg: TextGenerationConfig, *, http_client: Optional[httpx.Client] = None) -> "TextGenerationClient":
        return cls(
            cfg.api_keys,
            model=cfg.model,
            endpoint=cfg.endpoint,
            timeout_seconds=cfg.timeout_seconds,
            http_client=http_client,
        )

    @property
    def url(self) -> str:
        return f"{self._endpoint}/{self._model}:generateContent"

    def _take_key(self) -> tuple[int, str]:
        with self._index_lock:
            index = self._next_index
            self._next_index = (index + 1) % len(self._api_keys)
        return index, self._api_keys[index]

    def generate(self, prompt: str, max_tokens: int = 400) -> str:
        """Generate text for ``prompt``.

        Args:
            prompt (str): Prompt text.
            max_tokens (int): Output token budget.

        Returns:
            str: Text of the first candidate, or an empty string when the
            response has none.

        Raises:
            TextGenerationError: If no keys are configured or the API returns
                a non-rotatable error.
            CredentialsExhaustedError: If every key failed.
        """
        if not self._api_keys:
            raise TextGenerationError("No text-generation API keys configured")
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"maxOutputTokens": max_tokens, "temperature": self._temperature},
        }
        total = len(self._api_keys)
        last_error: Optional[str] = None
        for attempt in range(1, total + 1):
            index, key = self._take_key()
            try:
                response = self._http.post(self.url, params={"key": key}, json=body)
            except httpx.TransportError as exc:
                last_error = f"transport error: {exc}"
                logger.warning("Text-generation key %s/%s failed: %s", index + 1, total, last_error)
                continue
            if response.status_code in ROTATE_STATUS_CODES:
                last_error = f"HTTP {response.status_code}"
                logger.warning("Text-generation key %s/%s rejected with %s", index + 1, total, last_error)
                continue
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise TextGenerationError(
                    f"Text-generation API error: {exc.response.status_code} {exc.response.text}"
                ) from exc
            logger.debug("Text-generation call succeeded on attempt %s", attempt)
            return _first_candidate_text(response.json())
        raise CredentialsExhaustedError(f"All {total} text-generation API keys exhausted ({last_error})")

    def close(self) -> None:
        self._http.close()


def _first_candidate_text(data: Any) -> str:
    try:
        return str(data["candidates"][0]["content"]["parts"][0]["text"] or "")
    except (KeyError, IndexError, TypeError):
        return ""
