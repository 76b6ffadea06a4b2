"""Layered configuration: provider config, credentials and orchestration settings."""
from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from aicall.config import get_model, get_provider_config, get_settings, reset_config_cache
from aicall.config.env import (
    ENV_ALIASES,
    get_env_var_candidates,
    get_env_var_name,
    is_placeholder,
    resolve_provider_key,
)
from aicall.config.settings import OrchestrationSettings, load_settings


def test_is_placeholder_heuristics():
    assert is_placeholder("placeholder-value")  # nosec B101
    assert is_placeholder("ChangeMe123")  # nosec B101
    assert is_placeholder("example-key")  # nosec B101
    assert is_placeholder("test_token")  # nosec B101
    assert not is_placeholder("real-value") and not is_placeholder(None)  # nosec B101


def test_env_var_names_and_aliases():
    assert get_env_var_name("OpenAI") == "OPENAI_API_KEY"  # nosec B101
    assert get_env_var_name("mock") is None  # nosec B101
    assert list(get_env_var_candidates("openai")) == list(ENV_ALIASES["openai"])  # nosec B101


def test_resolve_provider_key_skips_placeholders(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "changeme")
    monkeypatch.setenv("AICALL_OPENAI_API_KEY", "sk-live")  # pragma: allowlist secret - test value
    assert resolve_provider_key("openai") == ("sk-live", "AICALL_OPENAI_API_KEY")  # nosec B101
    assert resolve_provider_key("mock") == (None, None)  # nosec B101


def test_provider_config_defaults():
    cfg = get_provider_config("openai")
    assert cfg["model"] == "gpt-4o-mini" and cfg["base_url"].startswith("https://")  # nosec B101
    assert "api_key" not in cfg  # nosec B101
    assert get_model("mock") == "mock-chat"  # nosec B101
    assert get_provider_config("unknown") == {}  # nosec B101


def test_provider_config_merge_order(tmp_path, monkeypatch):
    config_file = tmp_path / "aicall.json"
    config_file.write_text(json.dumps({"openai": {"model": "from-file", "base_url": "http://file"}}), encoding="utf-8")
    monkeypatch.setenv("AICALL_CONFIG_FILE", str(config_file))
    monkeypatch.setenv("OPENAI_BASE_URL", "http://env")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")  # pragma: allowlist secret - test value

    cfg = get_provider_config("openai", overrides={"model": "from-code", "base_url": None})
    assert cfg["model"] == "from-code"  # nosec B101
    assert cfg["base_url"] == "http://env"  # nosec B101
    assert cfg["api_key"] == "sk-env"  # nosec B101


def test_yaml_config_file_and_cache_reset(tmp_path, monkeypatch):
    config_file = tmp_path / "aicall.yaml"
    config_file.write_text("mock:\n  model: mock-lite\n", encoding="utf-8")
    monkeypatch.setenv("AICALL_CONFIG_FILE", str(config_file))
    assert get_model("mock") == "mock-lite"  # nosec B101

    config_file.write_text("mock:\n  model: mock-reasoner\n", encoding="utf-8")
    assert get_model("mock") == "mock-lite"  # nosec B101
    reset_config_cache()
    assert get_model("mock") == "mock-reasoner"  # nosec B101


def test_config_file_must_hold_a_mapping(tmp_path, monkeypatch):
    config_file = tmp_path / "aicall.yaml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")
    monkeypatch.setenv("AICALL_CONFIG_FILE", str(config_file))
    with pytest.raises(ValueError, match="mapping"):
        get_provider_config("mock")


def test_missing_config_file_is_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("AICALL_CONFIG_FILE", str(tmp_path / "absent.yaml"))
    assert get_model("mock") == "mock-chat"  # nosec B101


# ---- orchestration settings -----------------------------------------------------------


def test_settings_defaults():
    settings = OrchestrationSettings()
    assert settings.max_tool_rounds == 8 and settings.concurrent_tool_execution  # nosec B101
    assert settings.default_timeout_seconds == 120  # nosec B101
    assert settings.streaming.coalesce_delay_ms == 40  # nosec B101
    assert settings.enabled_providers == ("mock", "openai")  # nosec B101


def test_settings_split_provider_lists():
    settings = OrchestrationSettings(streaming_disabled_providers="OpenAI, mock  other")
    assert settings.streaming_disabled_providers == ("openai", "mock", "other")  # nosec B101


@pytest.mark.parametrize(
    "field, value",
    [("max_tool_rounds", -1), ("default_timeout_seconds", 0), ("default_timeout_seconds", 601)],
)
def test_settings_reject_out_of_range_values(field, value):
    with pytest.raises(ValidationError):
        OrchestrationSettings(**{field: value})


def test_settings_are_frozen():
    with pytest.raises(ValidationError):
        OrchestrationSettings().max_tool_rounds = 3  # type: ignore[misc]


def test_load_settings_layers(monkeypatch):
    monkeypatch.setenv("AICALL_MAX_TOOL_ROUNDS", "4")
    monkeypatch.setenv("AICALL_STREAM_COALESCE_DELAY_MS", "10")
    monkeypatch.setenv("AICALL_ENABLED_PROVIDERS", "mock")
    settings = load_settings(
        {"max_tool_rounds": 2, "streaming": {"preferred_chunk_size": 8, "coalesce_delay_ms": 99}},
        {"concurrent_tool_execution": False},
    )
    assert settings.max_tool_rounds == 4  # nosec B101
    assert settings.streaming.coalesce_delay_ms == 10  # nosec B101
    assert settings.streaming.preferred_chunk_size == 8  # nosec B101
    assert settings.enabled_providers == ("mock",)  # nosec B101
    assert settings.concurrent_tool_execution is False  # nosec B101


def test_get_settings_reads_the_orchestration_section(tmp_path, monkeypatch):
    config_file = tmp_path / "aicall.yaml"
    config_file.write_text("orchestration:\n  max_tool_rounds: 3\n  allow_unregistered_models: true\n", encoding="utf-8")
    monkeypatch.setenv("AICALL_CONFIG_FILE", str(config_file))
    settings = get_settings({"default_timeout_seconds": 30})
    assert settings.max_tool_rounds == 3 and settings.allow_unregistered_models  # nosec B101
    assert settings.default_timeout_seconds == 30  # nosec B101


def test_invalid_env_value_raises(monkeypatch):
    monkeypatch.setenv("AICALL_MAX_TOOL_ROUNDS", "many")
    with pytest.raises(ValidationError):
        load_settings()
