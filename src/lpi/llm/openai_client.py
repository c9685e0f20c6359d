# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LLM client OpenAI implementation."""

import logging

from openai import OpenAI, OpenAIError

from lpi.llm_client import SYSTEM_INSTRUCTIONS, PromptExecutionError

logger = logging.getLogger(__name__)

OPENAI_DEFAULT_MODEL: str = "gpt-5.1"


class OpenAIClient:
    """Execute prompts with OpenAI's Responses API."""

    def __init__(
        self,
        api_key: str,
        model: str = OPENAI_DEFAULT_MODEL,
        base_url: str | None = None,
    ) -> None:
        """Initialize client configuration.

        Args:
            api_key: OpenAI API key.
            model: Model identifier used for prompts.
            base_url: Optional OpenAI-compatible endpoint, with or without scheme.
        """
        self._api_key = api_key
        self._model = model
        self._base_url = normalize_base_url(base_url) if base_url else None
        self._client: OpenAI | None = None

    @property
    def model(self) -> str:
        """Return the model identifier."""
        return self._model

    def execute_prompt(self, prompt: str) -> str:
        """Execute a prompt with OpenAI Responses API.

        Args:
            prompt: Full prompt text.

        Returns:
            Response text.

        Raises:
            PromptExecutionError: If request fails or response has no content.
        """
        try:
            response = self._get_client().responses.create(
                model=self._model,
                instructions=SYSTEM_INSTRUCTIONS,
                input=prompt,
            )
        except OpenAIError as exc:
            logger.warning(
                f"OpenAI request failed (base_url={self._base_url} "
                f"model={self._model} error={exc})"
            )
            raise PromptExecutionError(f"OpenAI API error: {exc}") from exc

        content = getattr(response, "output_text", None)
        if not isinstance(content, str) or not content.strip():
            logger.warning(
                f"OpenAI response did not contain content "
                f"(base_url={self._base_url} model={self._model})"
            )
            raise PromptExecutionError("No response content received from OpenAI")
        return content.strip()

    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(api_key=self._api_key, base_url=self._base_url)
        return self._client


def normalize_base_url(base_url: str) -> str:
    """Add a missing ``https://`` scheme and drop trailing slashes."""
    normalized = base_url.strip().rstrip("/")
    if "://" not in normalized:
        normalized = f"https://{normalized}"
    return normalized
