import json
from typing import Any, Optional, Protocol

import openai
from openai import OpenAI

from incidentlens.core.config import settings
from incidentlens.core.exceptions import CompletionError
from incidentlens.core.logging import get_logger

logger = get_logger(__name__)


class CompletionClient(Protocol):
    """Anything that can turn a system/user prompt pair into assistant text."""

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        ...


class GroqCompletionClient:
    """
    Chat-completions adapter for Groq's OpenAI-compatible endpoint.

    One request per call, no retries. Transport errors and non-2xx
    responses surface as CompletionError.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        timeout: float = 30.0,
        client: Optional[OpenAI] = None,
    ):
        self.model = model
        self._client = client or OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0
        )

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        logger.debug(f"Calling completion service (model={self.model}, max_tokens={max_tokens})")

        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt}
                ],
                temperature=temperature,
                max_tokens=max_tokens
            )
        except openai.APIStatusError as e:
            raise CompletionError(f"Groq API error: {e.status_code}") from e
        except openai.APIError as e:
            raise CompletionError(f"Groq API error: {e}") from e

        if not response.choices:
            raise CompletionError("Groq API returned no choices")

        content = response.choices[0].message.content
        return (content or "").strip()


def get_completion_client() -> GroqCompletionClient:
    """Build the completion client from settings."""
    return GroqCompletionClient(
        api_key=settings.groq_api_key,
        model=settings.groq_model,
        base_url=settings.groq_base_url,
        timeout=settings.request_timeout_seconds
    )


def _loads(text: str) -> Optional[Any]:
    # RecursionError covers pathologically nested payloads
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return None


def _strip_code_fences(text: str) -> str:
    return "\n".join(line for line in text.split("\n") if not line.startswith("```"))


def extract_json(text: str) -> Optional[Any]:
    """
    Parse a JSON value out of completion text.

    Accepts a bare JSON document, one wrapped in markdown fences, or an object
    embedded in prose. Returns None when nothing parses.
    """
    parsed = _loads(text)
    if parsed is not None:
        return parsed

    candidate = text.strip()
    if candidate.startswith("```"):
        candidate = _strip_code_fences(candidate)

    start = candidate.find("{")
    end = candidate.rfind("}")
    if start == -1 or end <= start:
        return None
    return _loads(candidate[start:end + 1])
