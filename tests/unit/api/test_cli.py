"""
Tests for the agentdock CLI.

Agents are real domain agents wired to protocol mocks; AgentFactory is
patched so no profile, credential or network access is needed.
"""

import asyncio
import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from agentdock.api.cli.main import app
from agentdock.core.domain.agent import BaseAgent
from agentdock.core.domain.errors import ConfigurationError
from agentdock.core.domain.github_agent import GitHubAgent

FACTORY = "agentdock.api.cli.commands.agents.AgentFactory"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def agents(mock_llm_provider, make_tool):
    github_tool = make_tool("github", defaults={"owner": "acme", "repo": "api"})
    reviewer = GitHubAgent("GitHubAgent", mock_llm_provider)
    reviewer.register_tool("github", github_tool)
    assistant = BaseAgent("Assistant", mock_llm_provider)
    assistant.register_tool("github", github_tool)
    return {"GitHubAgent": reviewer, "Assistant": assistant}


@pytest.fixture
def factory(agents):
    with patch(FACTORY) as factory_class:
        factory_class.return_value.create_agents.return_value = agents
        yield factory_class


class TestMainCLI:
    """Test the top-level application."""

    def test_help_lists_command_groups(self, runner):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("query", "agents", "tools", "version", "serve"):
            assert command in result.stdout

    def test_version(self, runner):
        from agentdock import __version__

        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestAgentsCommand:
    def test_list(self, runner, factory):
        result = runner.invoke(app, ["--profile", "staging", "agents", "list"])

        assert result.exit_code == 0
        assert "GitHubAgent" in result.stdout
        assert "pr_summary" in result.stdout
        factory.return_value.create_agents.assert_called_once_with("staging")

    def test_configuration_error(self, runner):
        with patch(FACTORY) as factory_class:
            factory_class.return_value.create_agents.side_effect = ConfigurationError("Profile not found: x.yaml")

            result = runner.invoke(app, ["agents", "list"])

        assert result.exit_code == 1
        assert "Profile not found" in result.stdout


class TestQueryCommand:
    def test_query_prints_response(self, runner, factory, mock_llm_provider):
        mock_llm_provider.generate.return_value = {"success": True, "content": "All quiet."}

        result = runner.invoke(app, ["query", "Assistant", "anything new?"])

        assert result.exit_code == 0
        assert "All quiet." in result.stdout
        assert "Tool Results" not in result.stdout

    def test_query_json_output(self, runner, factory, mock_llm_provider):
        mock_llm_provider.generate.return_value = {
            "success": True,
            "content": '[TOOL_ACTION:github:getPR:{"number": 5}]',
        }

        result = runner.invoke(app, ["query", "Assistant", "show PR 5", "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["agent"] == "Assistant"
        assert payload["response"] == "[github_getPR completed successfully]"
        assert payload["tool_results"]["github_getPR"] == {"success": True, "data": {"ok": True}}

    def test_context_options_reach_agent(self, runner, factory, agents):
        with patch.object(agents["Assistant"], "process_query", wraps=agents["Assistant"].process_query) as spy:
            result = runner.invoke(
                app, ["query", "Assistant", "hello", "-c", "owner=acme", "--context", "repo=api"]
            )

        assert result.exit_code == 0
        spy.assert_called_once_with("hello", {"owner": "acme", "repo": "api"})

    def test_bad_context_option(self, runner, factory):
        result = runner.invoke(app, ["query", "Assistant", "hello", "-c", "novalue"])

        assert result.exit_code == 2

    def test_unknown_agent(self, runner, factory):
        result = runner.invoke(app, ["query", "Ghost", "hello"])

        assert result.exit_code == 1
        assert "Agent 'Ghost' not found" in result.stdout

    def test_model_failure_exits_nonzero(self, runner, factory, mock_llm_provider):
        mock_llm_provider.generate.return_value = {"success": False, "error": "quota exceeded"}

        result = runner.invoke(app, ["query", "Assistant", "hello"])

        assert result.exit_code == 1
        assert "quota exceeded" in result.stdout

    def test_fast_path_timeout_exits_nonzero(self, runner, factory, agents):
        async def stalled(action, params):
            await asyncio.sleep(1)

        reviewer = agents["GitHubAgent"]
        reviewer.tool_timeout = 0.01
        reviewer.registry.get("github").execute.side_effect = stalled

        result = runner.invoke(app, ["query", "GitHubAgent", "summarize pull request #42"])

        assert result.exit_code == 1
        assert "timed out" in result.stdout

    def test_agents_cleaned_up(self, runner, factory, agents):
        with patch.object(BaseAgent, "cleanup") as cleanup:
            runner.invoke(app, ["query", "Assistant", "hello"])

        assert cleanup.call_count == len(agents)


class TestToolsCommand:
    def test_list_deduplicates_shared_tools(self, runner, factory):
        result = runner.invoke(app, ["tools", "list"])

        assert result.exit_code == 0
        assert result.stdout.count("github integration") == 1

    def test_inspect_by_name(self, runner, factory):
        result = runner.invoke(app, ["tools", "inspect", "GITHUB"])

        assert result.exit_code == 0
        assert '"name": "createComment"' in result.stdout

    def test_inspect_unknown(self, runner, factory):
        result = runner.invoke(app, ["tools", "inspect", "jira"])

        assert result.exit_code == 1
        assert "Tool 'jira' not found" in result.stdout
