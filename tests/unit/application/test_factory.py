"""
Unit tests for AgentFactory.

Tests verify:
- Profile loading and validation
- Tool creation with credentials from settings
- Agent wiring (kinds, shared tools, timeouts, model alias)
- Error handling for invalid profiles
"""

import textwrap

import pytest

from agentdock.application.factory import AgentFactory
from agentdock.application.settings import AgentDockSettings
from agentdock.core.domain.errors import ConfigurationError
from agentdock.core.domain.github_agent import GitHubAgent
from agentdock.core.domain.slack_agent import SlackAgent
from agentdock.infrastructure.tools.github_tool import GitHubTool
from agentdock.infrastructure.tools.slack_tool import SlackTool

PROFILE = """
llm:
  model: fast
tools:
  gh:
    kind: github
    name: GitHub
    repo_owner: acme
    repo_name: api
  chat:
    kind: slack
    default_channel: ops
    request_timeout: 5
agents:
  - name: Reviewer
    kind: github
    tools: [gh]
  - name: Notifier
    kind: slack
    default_channel: ops
    model: powerful
    tools: [chat]
  - name: Assistant
    tools: [gh, chat]
"""


@pytest.fixture
def settings(tmp_path):
    return AgentDockSettings(
        _env_file=None,
        config_dir=tmp_path,
        profile="test",
        github_token="ghp_test",
        slack_token="xoxb-test",
        tool_timeout_seconds=12,
        model_timeout_seconds=34,
    )


def _write_profile(settings, content, name="test"):
    path = settings.config_dir / f"{name}.yaml"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture
def factory(settings, mock_llm_provider):
    _write_profile(settings, PROFILE)
    return AgentFactory(settings=settings, llm_provider=mock_llm_provider)


class TestLoadProfile:
    """Test profile loading."""

    def test_load_profile(self, factory):
        config = factory.load_profile()

        assert set(config) == {"llm", "tools", "agents"}

    def test_profile_not_found(self, factory):
        with pytest.raises(ConfigurationError, match="Profile not found"):
            factory.load_profile("nonexistent")

    def test_profile_not_a_mapping(self, factory, settings):
        _write_profile(settings, "- just\n- a list\n", name="broken")

        with pytest.raises(ConfigurationError, match="empty or invalid"):
            factory.load_profile("broken")


class TestCreateTools:
    """Test tool instantiation."""

    def test_tools_use_settings(self, factory):
        tools = factory.create_tools(factory.load_profile())

        github = tools["gh"]
        assert isinstance(github, GitHubTool)
        assert github.name == "GitHub"
        assert github.contextual_defaults() == {"owner": "acme", "repo": "api"}
        assert github.request_timeout == 12.0

        slack = tools["chat"]
        assert isinstance(slack, SlackTool)
        assert slack.name == "chat"
        assert slack.default_channel == "ops"
        assert slack.request_timeout == 5.0

    def test_unknown_tool_kind(self, factory):
        with pytest.raises(ConfigurationError, match="Unknown tool kind 'jira'"):
            factory.create_tools({"tools": {"tracker": {"kind": "jira"}}})


class TestCreateAgents:
    """Test agent wiring."""

    def test_agents_in_declaration_order(self, factory):
        agents = factory.create_agents()

        assert list(agents) == ["Reviewer", "Notifier", "Assistant"]
        assert isinstance(agents["Reviewer"], GitHubAgent)
        assert isinstance(agents["Notifier"], SlackAgent)
        assert agents["Assistant"].kind == "generic"

    def test_injected_provider_is_shared(self, factory, mock_llm_provider):
        agents = factory.create_agents()

        assert all(agent.llm_provider is mock_llm_provider for agent in agents.values())

    def test_tools_are_shared_by_reference(self, factory):
        agents = factory.create_agents()

        assert agents["Assistant"].registry.get("gh") is agents["Reviewer"].registry.get("gh")
        assert agents["Assistant"].registry.get("chat") is agents["Notifier"].registry.get("chat")
        assert agents["Assistant"].registry.keys() == ["gh", "chat"]

    def test_timeouts_and_model_alias(self, factory):
        agents = factory.create_agents()

        reviewer = agents["Reviewer"]
        assert reviewer.tool_timeout == 12
        assert reviewer.model_timeout == 34
        assert reviewer.model_alias == "fast"
        assert agents["Notifier"].model_alias == "powerful"
        assert agents["Notifier"].default_channel == "ops"

    def test_create_agent_by_name(self, factory):
        assert factory.create_agent("Notifier").name == "Notifier"

        with pytest.raises(ConfigurationError, match="Agent 'Ghost' not found"):
            factory.create_agent("Ghost")

    @pytest.mark.parametrize(
        "agents_yaml, message",
        [
            ("agents:\n  - {name: X, kind: jira}\n", "Unknown agent kind 'jira'"),
            ("agents:\n  - {name: X, tools: [missing]}\n", "unknown tool 'missing'"),
            ("agents:\n  - {name: X}\n  - {name: X}\n", "Duplicate agent name 'X'"),
            ("agents:\n  - {kind: github}\n", "needs a 'name'"),
        ],
    )
    def test_invalid_agent_configs(self, settings, mock_llm_provider, agents_yaml, message):
        _write_profile(settings, agents_yaml, name="bad")
        factory = AgentFactory(settings=settings, llm_provider=mock_llm_provider)

        with pytest.raises(ConfigurationError, match=message):
            factory.create_agents("bad")


def test_repository_dev_profile_builds(mock_llm_provider):
    settings = AgentDockSettings(_env_file=None, profile="dev")
    agents = AgentFactory(settings=settings, llm_provider=mock_llm_provider).create_agents()

    assert set(agents) == {"GitHubAgent", "SlackAgent", "Assistant"}


def test_llm_service_built_from_profile(settings):
    _write_profile(settings, "llm:\n  config_path: configs/llm_config.yaml\nagents: []\n", name="llm")
    factory = AgentFactory(settings=settings)

    factory.create_agents("llm")

    assert factory.create_llm_provider({}).default_model == "main"
