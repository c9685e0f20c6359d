# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Application configuration read from the environment and ``.env``."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import dotenv_values

from lpi.clustering import DEFAULT_MAX_ATTEMPTS
from lpi.context_extractor import DEFAULT_CONTEXT_LINES
from lpi.llm import (
    AZURE_DEFAULT_API_VERSION,
    OLLAMA_DEFAULT_URL,
    OPENAI_DEFAULT_MODEL,
    AzureOpenAIClient,
    OllamaClient,
    OpenAIClient,
)
from lpi.llm_client import LLMClient

logger = logging.getLogger(__name__)

PROVIDER_OPENAI: str = "openai"
PROVIDER_AZURE_OPENAI: str = "azure-openai"
PROVIDER_OLLAMA: str = "ollama"
SUPPORTED_PROVIDERS: tuple[str, ...] = (
    PROVIDER_OPENAI,
    PROVIDER_AZURE_OPENAI,
    PROVIDER_OLLAMA,
)
DEFAULT_WORKSPACE_DIR: str = "res"


class ConfigError(ValueError):
    """Represent missing or invalid configuration."""


@dataclass(frozen=True)
class AppConfig:
    """Resolved application settings."""

    llm_provider: str | None = None
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    openai_model: str = OPENAI_DEFAULT_MODEL
    azure_openai_api_key: str | None = None
    azure_openai_endpoint: str | None = None
    azure_openai_deployment: str | None = None
    azure_openai_api_version: str = AZURE_DEFAULT_API_VERSION
    ollama_url: str = OLLAMA_DEFAULT_URL
    ollama_model: str | None = None
    source_api_key: str | None = None
    target_api_key: str | None = None
    workspace_dir: Path = Path(DEFAULT_WORKSPACE_DIR)
    context_lines: int = DEFAULT_CONTEXT_LINES
    max_attempts: int = DEFAULT_MAX_ATTEMPTS


def read_environment(dotenv_path: Path | None = None) -> dict[str, str]:
    """Merge ``.env`` values with the process environment.

    Args:
        dotenv_path: ``.env`` location; defaults to the working directory.

    Returns:
        Variables by name; process values override ``.env`` values.
    """
    path = dotenv_path or Path(".env")
    merged = {
        key: value
        for key, value in dotenv_values(path).items()
        if value is not None
    }
    merged.update(os.environ)
    return merged


def normalize_provider(value: str | None) -> str | None:
    """Normalize a provider name, accepting ``OPENAI`` and ``AZURE_OPENAI`` forms."""
    if value is None or not value.strip():
        return None
    return value.strip().lower().replace("_", "-")


def load_config(environ: Mapping[str, str]) -> AppConfig:
    """Build the application config from environment variables.

    Args:
        environ: Variables by name.

    Returns:
        Application config. Blank values count as unset.
    """

    def get(name: str) -> str | None:
        value = environ.get(name)
        if value is None or not value.strip():
            return None
        return value.strip()

    return AppConfig(
        llm_provider=normalize_provider(get("LLM_PROVIDER")),
        openai_api_key=get("OPENAI_API_KEY"),
        openai_base_url=get("OPENAI_URL"),
        openai_model=get("OPENAI_MODEL") or OPENAI_DEFAULT_MODEL,
        azure_openai_api_key=get("AZURE_OPENAI_API_KEY"),
        azure_openai_endpoint=get("AZURE_OPENAI_ENDPOINT"),
        azure_openai_deployment=get("AZURE_OPENAI_DEPLOYMENT"),
        azure_openai_api_version=get("AZURE_OPENAI_API_VERSION")
        or AZURE_DEFAULT_API_VERSION,
        ollama_url=get("OLLAMA_URL") or OLLAMA_DEFAULT_URL,
        ollama_model=get("OLLAMA_MODEL"),
        source_api_key=get("SOURCE_API_KEY"),
        target_api_key=get("TARGET_API_KEY"),
        workspace_dir=Path(get("LPI_WORKSPACE") or DEFAULT_WORKSPACE_DIR),
    )


def build_llm_client(config: AppConfig) -> LLMClient:
    """Create the LLM client for the configured provider.

    Args:
        config: Application config.

    Returns:
        Configured LLM client.

    Raises:
        ConfigError: If the provider is unset, unknown, or incompletely configured.
    """
    provider = config.llm_provider
    if provider is None:
        raise ConfigError(
            "LLM_PROVIDER is not set. Set it to one of: "
            + ", ".join(SUPPORTED_PROVIDERS)
        )
    if provider == PROVIDER_OPENAI:
        return OpenAIClient(
            api_key=require_setting(config.openai_api_key, "OPENAI_API_KEY"),
            model=config.openai_model,
            base_url=config.openai_base_url,
        )
    if provider == PROVIDER_AZURE_OPENAI:
        return AzureOpenAIClient(
            api_key=require_setting(config.azure_openai_api_key, "AZURE_OPENAI_API_KEY"),
            endpoint=require_setting(config.azure_openai_endpoint, "AZURE_OPENAI_ENDPOINT"),
            deployment=require_setting(
                config.azure_openai_deployment, "AZURE_OPENAI_DEPLOYMENT"
            ),
            api_version=config.azure_openai_api_version,
        )
    if provider == PROVIDER_OLLAMA:
        return OllamaClient(
            provider_url=config.ollama_url,
            model=require_setting(config.ollama_model, "OLLAMA_MODEL"),
        )

    logger.warning(f"Unsupported LLM provider (provider={provider})")
    raise ConfigError(
        f"Invalid LLM_PROVIDER: {provider!r}. Must be one of: "
        + ", ".join(SUPPORTED_PROVIDERS)
    )


def require_setting(value: str | None, name: str) -> str:
    """Return a mandatory setting.

    Raises:
        ConfigError: If the setting is unset.
    """
    if not value:
        raise ConfigError(f"{name} environment variable is not set")
    return value
