# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LLM client abstractions."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTIONS: str = (
    "You are an expert software engineer specializing in categorizing coding "
    "practices and standards. You provide structured, consistent responses in "
    "YAML format."
)


class PromptExecutionError(RuntimeError):
    """Represent a prompt execution failure."""


class LLMClient(Protocol):
    """Define prompt execution behavior for a provider client.

    Responses are not deterministic: the same prompt may yield a different
    grouping, malformed YAML, or an incomplete answer on every call.
    """

    @property
    def model(self) -> str:
        """Return the model or deployment identifier used for prompts."""

    def execute_prompt(self, prompt: str) -> str:
        """Execute a prompt and return the raw response text.

        Args:
            prompt: Full prompt text.

        Returns:
            Response text.

        Raises:
            PromptExecutionError: If the request fails or the response is empty.
        """
