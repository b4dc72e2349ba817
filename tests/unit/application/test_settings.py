"""Unit tests for environment settings."""

from pathlib import Path

import pytest

from agentdock.application.settings import AgentDockSettings

ENV_VARS = (
    "AGENTDOCK_PROFILE",
    "AGENTDOCK_CONFIG_DIR",
    "AGENTDOCK_TOOL_TIMEOUT_SECONDS",
    "AGENTDOCK_GITHUB_TOKEN",
    "AGENTDOCK_SLACK_TOKEN",
    "GITHUB_API_TOKEN",
    "SLACK_BOT_TOKEN",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    settings = AgentDockSettings(_env_file=None)

    assert settings.profile == "dev"
    assert settings.profile_path() == Path("configs") / "dev.yaml"
    assert settings.github_token is None
    assert settings.tool_timeout_seconds == 30.0


def test_prefixed_environment(monkeypatch):
    monkeypatch.setenv("AGENTDOCK_PROFILE", "prod")
    monkeypatch.setenv("AGENTDOCK_CONFIG_DIR", "/etc/agentdock")
    monkeypatch.setenv("AGENTDOCK_TOOL_TIMEOUT_SECONDS", "5")

    settings = AgentDockSettings(_env_file=None)

    assert settings.profile_path() == Path("/etc/agentdock/prod.yaml")
    assert settings.profile_path("staging") == Path("/etc/agentdock/staging.yaml")
    assert settings.tool_timeout_seconds == 5.0


def test_service_token_names(monkeypatch):
    monkeypatch.setenv("GITHUB_API_TOKEN", "ghp_abc")
    monkeypatch.setenv("AGENTDOCK_SLACK_TOKEN", "xoxb-abc")

    settings = AgentDockSettings(_env_file=None)

    assert settings.github_token == "ghp_abc"
    assert settings.slack_token == "xoxb-abc"
    assert "ghp_abc" not in repr(settings)


def test_timeouts_must_be_positive():
    with pytest.raises(ValueError):
        AgentDockSettings(_env_file=None, tool_timeout_seconds=0)
