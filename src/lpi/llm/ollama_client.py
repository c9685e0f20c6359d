# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LLM client Ollama implementation."""

import logging

import ollama

from lpi.llm_client import SYSTEM_INSTRUCTIONS, PromptExecutionError

logger = logging.getLogger(__name__)

OLLAMA_DEFAULT_URL: str = "http://localhost:11434"


class OllamaClient:
    """Execute prompts using an Ollama provider endpoint."""

    def __init__(self, provider_url: str, model: str) -> None:
        """Initialize client configuration.

        Args:
            provider_url: Ollama endpoint base URL.
            model: Model identifier passed to Ollama.
        """
        self._provider_url = provider_url
        self._model = model
        self._client = ollama.Client(host=provider_url)

    @property
    def model(self) -> str:
        """Return the model identifier."""
        return self._model

    def execute_prompt(self, prompt: str) -> str:
        """Execute a prompt with Ollama generate API.

        Args:
            prompt: Full prompt text.

        Returns:
            Response text.

        Raises:
            PromptExecutionError: If request fails or response has no content.
        """
        try:
            response = self._client.generate(
                model=self._model,
                system=SYSTEM_INSTRUCTIONS,
                prompt=prompt,
                stream=False,
            )
        except (ollama.RequestError, ollama.ResponseError, OSError, ValueError) as exc:
            logger.warning(
                f"Ollama request failed (provider_url={self._provider_url} "
                f"model={self._model} error={exc})"
            )
            raise PromptExecutionError(str(exc)) from exc

        content = _extract_response_content(response)
        if not content:
            logger.warning(
                f"Ollama response did not contain content "
                f"(provider_url={self._provider_url} model={self._model} response={response!r})"
            )
            raise PromptExecutionError(
                "Ollama response does not contain generation content."
            )
        return content


def _extract_response_content(response: object) -> str:
    """Extract generation content from Ollama response object.

    Args:
        response: Ollama response object, typically mapping-like.

    Returns:
        Response content string, or empty string if unavailable.
    """
    if isinstance(response, dict):
        content = response.get("response")
        if isinstance(content, str):
            return content.strip()
    content_obj = getattr(response, "response", None)
    if isinstance(content_obj, str):
        return content_obj.strip()
    return ""
