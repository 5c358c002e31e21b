"""Narrative gateway — flavor text from a text-completion backend.

The quest generator talks to a NarrativeGateway, which renders the session
context around a request and forwards it to an injected LLM callable matching
the protocol:

    async def __call__(self, stage: str, prompt: str) -> str: ...

`stage` identifies the caller (e.g. "quest_enhancement", "custom_quest").
The implementation may use it for logging or routing; the simplest
implementation ignores it.

Three implementations are provided:

    HttpLLM     — real HTTP client, supports KoboldCpp and OpenAI-compatible
                  backends. Selected by provider_format.
    EchoLLM     — returns the prompt back unchanged. Useful for smoke-testing
                  session wiring without a running model.
    OfflineLLM  — always fails. Used when no backend is configured so every
                  caller takes its fallback path.

Every failure surfaces as NarrativeGatewayError. Callers are expected to
recover from it; quest creation never aborts because of the gateway.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Protocol

import httpx

from construct_engine.models import Character, SessionConfig
from construct_engine.prompts import GATEWAY_PROMPT, PromptError, render_prompt

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol — every LLM implementation must match this signature
# ---------------------------------------------------------------------------

class LLM(Protocol):
    async def __call__(self, stage: str, prompt: str) -> str: ...


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class LLMError(RuntimeError):
    """Raised when the LLM backend cannot be reached or returns an error."""


class NarrativeGatewayError(LLMError):
    """Raised by the gateway for any failure to produce flavor text."""


# ---------------------------------------------------------------------------
# HttpLLM — connects to a real backend
# ---------------------------------------------------------------------------

ProviderFormat = Literal["koboldcpp", "openai"]


class HttpLLM:
    """Async HTTP client for text-completion backends.

    Supported formats:
      "koboldcpp"  — POST /api/v1/generate  {"prompt": ...}
                     Response: {"results": [{"text": "..."}]}
      "openai"     — POST /v1/completions   {"model": ..., "prompt": ...}
                     Response: {"choices": [{"text": "..."}]}

    Args:
        provider_url:    Base URL of the backend, e.g. "http://localhost:5001".
        api_key:         Bearer token, or empty string if not required.
        provider_format: Wire format to use. Defaults to "koboldcpp".
        model:           Model identifier, used only by the openai format.
        timeout:         HTTP timeout in seconds. Defaults to 120.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "koboldcpp",
        model: str = "",
        timeout: float = 120.0,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._api_key = api_key
        self._format = provider_format
        self._model = model
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _build_request(self, prompt: str) -> tuple[str, dict]:
        """Return (url, body) for the configured format."""
        if self._format == "openai":
            url = f"{self._base_url}/v1/completions"
            body: dict = {"prompt": prompt}
            if self._model:
                body["model"] = self._model
            return url, body

        # koboldcpp (default)
        url = f"{self._base_url}/api/v1/generate"
        return url, {"prompt": prompt}

    def _parse_response(self, data: Any) -> str:
        """Extract the completion text from the response body."""
        if self._format == "openai":
            key, backend = "choices", "OpenAI-compatible"
        else:
            key, backend = "results", "KoboldCpp"

        entries = data.get(key) if isinstance(data, dict) else None
        first = entries[0] if isinstance(entries, list) and entries else None
        text = first.get("text") if isinstance(first, dict) else None
        if not isinstance(text, str):
            raise LLMError(f"Unexpected response format from {backend} backend")
        return text

    async def __call__(self, stage: str, prompt: str) -> str:
        url, body = self._build_request(prompt)
        logger.debug("llm call stage=%s url=%s prompt_len=%d", stage, url, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"LLM backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise LLMError(f"LLM request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError("LLM backend returned a non-JSON body") from e
        text = self._parse_response(data)
        logger.debug("llm response stage=%s len=%d", stage, len(text))
        return text


# ---------------------------------------------------------------------------
# EchoLLM / OfflineLLM
# ---------------------------------------------------------------------------

class EchoLLM:
    """Returns the prompt text as-is. No network calls."""

    async def __call__(self, stage: str, prompt: str) -> str:
        logger.debug("EchoLLM stage=%s prompt_len=%d", stage, len(prompt))
        return prompt


class OfflineLLM:
    """Stands in when no backend is configured; every call fails."""

    async def __call__(self, stage: str, prompt: str) -> str:
        raise LLMError("No narrative backend configured")


# ---------------------------------------------------------------------------
# NarrativeGateway
# ---------------------------------------------------------------------------

class NarrativeGateway:
    """Wraps an LLM with the session context every narrative request needs."""

    def __init__(self, llm: LLM) -> None:
        self._llm = llm

    async def generate(
        self,
        prompt: str,
        session_config: SessionConfig,
        character_summary: Character | str | None = None,
        context_history: list[str] | None = None,
        *,
        stage: str = "narrative",
    ) -> str:
        """Render the request in session context and return the generated text.

        Raises NarrativeGatewayError on any prompt, transport or empty-response
        failure.
        """
        if isinstance(character_summary, Character):
            character_summary = character_summary.summary()
        context: dict[str, Any] = {
            "session": session_config.model_dump(),
            "character": character_summary or "",
            "history": list(context_history or []),
            "prompt": prompt.strip(),
        }
        try:
            full_prompt = render_prompt(GATEWAY_PROMPT, context)
            text = await self._llm(stage, full_prompt)
        except (LLMError, PromptError) as e:
            raise NarrativeGatewayError(str(e)) from e

        if not isinstance(text, str):
            raise NarrativeGatewayError(
                f"Narrative backend returned {type(text).__name__}, expected text (stage={stage})"
            )
        text = text.strip()
        if not text:
            raise NarrativeGatewayError(f"Empty response from narrative backend (stage={stage})")
        return text


def gateway_from_config(config: dict[str, Any]) -> NarrativeGateway:
    """Build a gateway from the stored app config.

    Without a provider URL the gateway is offline and every request falls back.
    """
    conn = config.get("llm_connection") or {}
    if not conn.get("provider_url"):
        return NarrativeGateway(OfflineLLM())
    return NarrativeGateway(
        HttpLLM(
            provider_url=conn["provider_url"],
            api_key=conn.get("api_key", ""),
            provider_format=conn.get("provider_format", "koboldcpp"),
            model=conn.get("model", ""),
            timeout=float(conn.get("timeout", 120.0)),
        )
    )
