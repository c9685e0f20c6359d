# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LLM client implementations for the legacy practice importer."""

from lpi.llm.azure_client import AZURE_DEFAULT_API_VERSION, AzureOpenAIClient
from lpi.llm.ollama_client import OLLAMA_DEFAULT_URL, OllamaClient
from lpi.llm.openai_client import OPENAI_DEFAULT_MODEL, OpenAIClient

__all__ = [
    "AZURE_DEFAULT_API_VERSION",
    "AzureOpenAIClient",
    "OLLAMA_DEFAULT_URL",
    "OllamaClient",
    "OPENAI_DEFAULT_MODEL",
    "OpenAIClient",
]
