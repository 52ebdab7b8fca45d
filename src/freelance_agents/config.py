"""Parse runtime configuration for agent runs and the text-generation client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

DEFAULT_MODEL = "gemini-2.0-flash-lite-preview-02-05"
DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_API_KEYS_ENV = "GEMINI_API_KEY"
MAX_CONCURRENCY = 5


@dataclass(frozen=True)
class AgentRunConfig:
    """Settings for one orchestration pass.

    Attributes:
        concurrency: Number of domains scanned in parallel; ``1`` scans them
            sequentially in the fixed domain order.
    """

    concurrency: int = 1


@dataclass(frozen=True)
class TextGenerationConfig:
    """Resolved settings for the remote text-generation call.

    Attributes:
        model: Model identifier appended to ``endpoint``.
        endpoint: Base URL of the ``generateContent`` API.
        api_keys: Credentials tried in rotation; empty when none are configured.
        timeout_seconds: Per-request HTTP timeout.
        max_output_tokens: Token budget used by the resume analyzer.
    """

    model: str
    endpoint: str
    api_keys: tuple[str, ...]
    timeout_seconds: float = 30.0
    max_output_tokens: int = 1200


def _as_dict(value: Any) -> dict[str, Any]:
    """Return ``value`` only when it is a dictionary."""
    return value if isinstance(value, dict) else {}


def _coerce_int(value: Any, default: int, *, minimum: int = 0, maximum: Optional[int] = None) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        parsed = default
    if parsed < minimum:
        parsed = minimum
    if maximum is not None and parsed > maximum:
        parsed = maximum
    return parsed


def parse_api_keys(raw: Optional[str]) -> tuple[str, ...]:
    """Split a comma-separated credential list, dropping blanks."""
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def get_agent_run_config(*, config: dict[str, Any]) -> AgentRunConfig:
    """Resolve orchestration settings from the ``agents`` config section.

    Args:
        config (dict[str, Any]): Parsed runtime configuration dictionary.

    Returns:
        AgentRunConfig: Settings with concurrency clamped to ``1..MAX_CONCURRENCY``.
    """
    agents_cfg = _as_dict(config.get("agents"))
    concurrency = _coerce_int(agents_cfg.get("concurrency"), 1, minimum=1, maximum=MAX_CONCURRENCY)
    return AgentRunConfig(concurrency=concurrency)


def get_text_generation_config(
    *,
    config: dict[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> TextGenerationConfig:
    """Resolve text-generation settings and credentials.

    Credentials are read from the environment variable named by
    ``text_generation.api_keys_env`` so that keys never land in the state
    directory.

    Args:
        config (dict[str, Any]): Parsed runtime configuration dictionary.
        environ (Optional[Mapping[str, str]]): Environment to read credentials
            from; defaults to ``os.environ``.

    Returns:
        TextGenerationConfig: Normalized client settings.
    """
    env = os.environ if environ is None else environ
    tg_cfg = _as_dict(config.get("text_generation"))
    keys_env = str(tg_cfg.get("api_keys_env") or DEFAULT_API_KEYS_ENV).strip() or DEFAULT_API_KEYS_ENV
    try:
        timeout = float(tg_cfg.get("timeout_seconds") or 30.0)
    except (TypeError, ValueError):
        timeout = 30.0
    return TextGenerationConfig(
        model=str(tg_cfg.get("model") or DEFAULT_MODEL).strip() or DEFAULT_MODEL,
        endpoint=str(tg_cfg.get("endpoint") or DEFAULT_ENDPOINT).rstrip("/"),
        api_keys=parse_api_keys(env.get(keys_env)),
        timeout_seconds=timeout if timeout > 0 else 30.0,
        max_output_tokens=_coerce_int(tg_cfg.get("max_output_tokens"), 1200, minimum=1),
    )
