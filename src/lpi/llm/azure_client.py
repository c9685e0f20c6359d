# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LLM client Azure OpenAI implementation."""

import logging

from openai import APIError, AzureOpenAI, OpenAIError

from lpi.llm_client import SYSTEM_INSTRUCTIONS, PromptExecutionError

logger = logging.getLogger(__name__)

AZURE_DEFAULT_API_VERSION: str = "2024-12-01-preview"


class AzureOpenAIClient:
    """Execute prompts against an Azure OpenAI deployment.

    Azure addresses models by deployment name, so the deployment doubles as
    the model identifier.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        deployment: str,
        api_version: str = AZURE_DEFAULT_API_VERSION,
    ) -> None:
        """Initialize client configuration.

        Args:
            api_key: Azure OpenAI API key.
            endpoint: Resource endpoint, e.g. ``https://my-resource.openai.azure.com``.
            deployment: Deployment name.
            api_version: Azure OpenAI API version.
        """
        self._api_key = api_key
        self._endpoint = endpoint
        self._deployment = deployment
        self._api_version = api_version
        self._client: AzureOpenAI | None = None

    @property
    def model(self) -> str:
        """Return the deployment name."""
        return self._deployment

    def execute_prompt(self, prompt: str) -> str:
        """Execute a prompt with the chat completions API.

        Args:
            prompt: Full prompt text.

        Returns:
            Response text.

        Raises:
            PromptExecutionError: If request fails or response has no content.
        """
        client = self._get_client()
        try:
            response = client.chat.completions.create(
                model=self._deployment,
                messages=[
                    {"role": "system", "content": SYSTEM_INSTRUCTIONS},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.3,
            )
        except (APIError, OpenAIError, OSError, ValueError) as exc:
            logger.warning(
                f"Azure OpenAI request failed (endpoint={self._endpoint} "
                f"deployment={self._deployment} error={exc})"
            )
            raise PromptExecutionError(f"Azure OpenAI API error: {exc}") from exc

        content = _extract_response_content(response)
        if not content:
            logger.warning(
                f"Azure OpenAI response did not contain content "
                f"(endpoint={self._endpoint} deployment={self._deployment})"
            )
            raise PromptExecutionError(
                "No response content received from Azure OpenAI"
            )
        return content

    def _get_client(self) -> AzureOpenAI:
        if self._client is not None:
            return self._client
        try:
            self._client = AzureOpenAI(
                api_key=self._api_key,
                azure_endpoint=self._endpoint,
                api_version=self._api_version,
            )
        except (OpenAIError, OSError, ValueError) as exc:
            logger.warning(
                f"Azure OpenAI client initialization failed "
                f"(endpoint={self._endpoint} error={exc})"
            )
            raise PromptExecutionError(str(exc)) from exc
        return self._client


def _extract_response_content(response: object) -> str:
    """Extract the first choice's message text from a chat completion.

    Args:
        response: Chat completion object.

    Returns:
        Response text, or empty string if unavailable.
    """
    choices = getattr(response, "choices", None)
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if isinstance(content, str):
        return content.strip()
    return ""
