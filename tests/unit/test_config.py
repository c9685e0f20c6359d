# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for configuration loading and LLM client selection."""

from pathlib import Path
from types import SimpleNamespace

import httpx
import openai
import pytest

from lpi.config import ConfigError, build_llm_client, load_config, read_environment
from lpi.llm import AzureOpenAIClient, OllamaClient, OpenAIClient
from lpi.llm.openai_client import normalize_base_url
from lpi.llm_client import PromptExecutionError


def test_ph3_cfg_001_defaults_apply_for_empty_environment() -> None:
    config = load_config({})

    assert config.llm_provider is None
    assert config.openai_model == "gpt-5.1"
    assert config.azure_openai_api_version == "2024-12-01-preview"
    assert config.ollama_url == "http://localhost:11434"
    assert config.workspace_dir == Path("res")
    assert config.context_lines == 2
    assert config.max_attempts == 5


def test_ph3_cfg_002_provider_names_are_normalized() -> None:
    assert load_config({"LLM_PROVIDER": "AZURE_OPENAI"}).llm_provider == "azure-openai"
    assert load_config({"LLM_PROVIDER": " OpenAI "}).llm_provider == "openai"
    assert load_config({"LLM_PROVIDER": "  "}).llm_provider is None


def test_ph3_cfg_003_builds_each_provider() -> None:
    openai_client = build_llm_client(
        load_config(
            {"LLM_PROVIDER": "OPENAI", "OPENAI_API_KEY": "sk-test", "OPENAI_MODEL": "m1"}
        )
    )
    azure_client = build_llm_client(
        load_config(
            {
                "LLM_PROVIDER": "azure-openai",
                "AZURE_OPENAI_API_KEY": "k",
                "AZURE_OPENAI_ENDPOINT": "https://res.openai.azure.com",
                "AZURE_OPENAI_DEPLOYMENT": "gpt-deploy",
            }
        )
    )
    ollama_client = build_llm_client(
        load_config({"LLM_PROVIDER": "ollama", "OLLAMA_MODEL": "qwen3-coder:latest"})
    )

    assert isinstance(openai_client, OpenAIClient)
    assert openai_client.model == "m1"
    assert isinstance(azure_client, AzureOpenAIClient)
    assert azure_client.model == "gpt-deploy"
    assert isinstance(ollama_client, OllamaClient)
    assert ollama_client.model == "qwen3-coder:latest"


@pytest.mark.parametrize(
    ("environ", "message"),
    [
        ({}, "LLM_PROVIDER is not set"),
        ({"LLM_PROVIDER": "gemini"}, "Invalid LLM_PROVIDER"),
        ({"LLM_PROVIDER": "openai"}, "OPENAI_API_KEY"),
        (
            {"LLM_PROVIDER": "azure-openai", "AZURE_OPENAI_API_KEY": "k"},
            "AZURE_OPENAI_ENDPOINT",
        ),
        ({"LLM_PROVIDER": "ollama"}, "OLLAMA_MODEL"),
    ],
)
def test_ph3_cfg_004_incomplete_provider_settings_raise(
    environ: dict[str, str], message: str
) -> None:
    with pytest.raises(ConfigError, match=message):
        build_llm_client(load_config(environ))


def test_ph3_cfg_005_process_environment_overrides_dotenv(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "LPI_WORKSPACE=from-dotenv\nOPENAI_MODEL=dotenv-model\n", encoding="utf-8"
    )
    monkeypatch.setenv("OPENAI_MODEL", "process-model")
    monkeypatch.delenv("LPI_WORKSPACE", raising=False)

    config = load_config(read_environment(env_file))

    assert config.workspace_dir == Path("from-dotenv")
    assert config.openai_model == "process-model"


def _responses_stub(create) -> SimpleNamespace:
    return SimpleNamespace(responses=SimpleNamespace(create=create))


def test_ph3_cfg_006_openai_client_wraps_sdk_errors_and_empty_answers() -> None:
    client = OpenAIClient(api_key="sk-test", base_url="llm.internal.example/v1/")

    def refuse(**kwargs):
        raise openai.APIConnectionError(
            request=httpx.Request("POST", "https://llm.internal.example/v1/responses")
        )

    client._client = _responses_stub(refuse)
    with pytest.raises(PromptExecutionError, match="OpenAI API error"):
        client.execute_prompt("group these")

    client._client = _responses_stub(lambda **kwargs: SimpleNamespace(output_text="  "))
    with pytest.raises(PromptExecutionError, match="No response content"):
        client.execute_prompt("group these")

    client._client = _responses_stub(
        lambda **kwargs: SimpleNamespace(output_text="standards: []\n")
    )
    assert client.execute_prompt("group these") == "standards: []"
    assert normalize_base_url("llm.internal.example/v1/") == "https://llm.internal.example/v1"
    assert normalize_base_url("http://localhost:8080") == "http://localhost:8080"
