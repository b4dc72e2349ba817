"""Unit tests for SlackAgent fast-path intents and workspace context."""

import pytest

from agentdock.core.domain.errors import ToolExecutionFailure
from agentdock.core.domain.models import ExecutionResult
from agentdock.core.domain.slack_agent import SlackAgent, render_channel_info


@pytest.fixture
def slack_tool(make_tool):
    return make_tool("slack", actions=[])


@pytest.fixture
def agent(mock_llm_provider, slack_tool):
    agent = SlackAgent("SlackAgent", mock_llm_provider, default_channel="dev")
    agent.register_tool("slack", slack_tool)
    return agent


def _route(results: dict):
    def _execute(action, params):
        outcome = results[action]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return _execute


class TestFastPath:
    @pytest.mark.asyncio
    async def test_send_message(self, agent, slack_tool, mock_llm_provider):
        slack_tool.execute.return_value = ExecutionResult(success=True, data={"channel": "C1", "ts": "1.0"})

        outcome = await agent.process_query("send a message to #general saying Deploy finished")

        mock_llm_provider.generate.assert_not_called()
        slack_tool.execute.assert_awaited_once_with("sendMessage", {"channel": "general", "text": "Deploy finished"})
        assert outcome.response == 'Message sent to #general: "Deploy finished"'
        assert list(outcome.tool_results) == ["slack_sendMessage"]

    @pytest.mark.asyncio
    async def test_channel_info(self, agent, slack_tool):
        slack_tool.execute.side_effect = _route(
            {
                "getChannelInfo": ExecutionResult(
                    success=True,
                    data={"name": "random", "num_members": 8, "created": 0, "is_private": False},
                ),
                "getChannelHistory": ExecutionResult(
                    success=True, data={"messages": [{"text": "hello there", "ts": "0"}], "has_more": False}
                ),
            }
        )

        outcome = await agent.process_query("tell me about channel #random")

        assert outcome.response.startswith("Channel #random:\nMembers: 8\n")
        assert "Private: No" in outcome.response
        assert "hello there" in outcome.response
        assert list(outcome.tool_results) == ["slack_getChannelInfo", "slack_getChannelHistory"]
        history_call = slack_tool.execute.await_args_list[1]
        assert history_call.args == ("getChannelHistory", {"channel": "random", "limit": 5})

    @pytest.mark.asyncio
    async def test_create_channel(self, agent, slack_tool):
        slack_tool.execute.return_value = ExecutionResult(success=True, data={"id": "C9", "name": "launch"})

        outcome = await agent.process_query("Create a new channel called Launch")

        slack_tool.execute.assert_awaited_once_with("createChannel", {"name": "launch"})
        assert outcome.response == "Channel #launch has been created successfully!"

    @pytest.mark.asyncio
    async def test_failure_degrades(self, agent, slack_tool):
        slack_tool.execute.side_effect = ToolExecutionFailure("Failed to send Slack message: channel_not_found")

        outcome = await agent.process_query("send message to nowhere saying hi")

        assert outcome.response == (
            "I encountered an error trying to send a message to #nowhere: "
            "Failed to send Slack message: channel_not_found"
        )

    @pytest.mark.asyncio
    async def test_unavailable_without_slack_tool(self, mock_llm_provider):
        agent = SlackAgent("SlackAgent", mock_llm_provider)

        outcome = await agent.process_query("create channel ops")

        assert outcome.response.startswith("I can't access Slack right now")


def test_channel_report_without_messages():
    report = render_channel_info({"name": "quiet", "num_members": 1, "created": 0, "is_private": True}, [])

    assert "Private: Yes" in report
    assert report.endswith("No recent messages found.\n")


def test_channel_report_truncates_long_messages():
    report = render_channel_info({"name": "x", "created": 0}, [{"text": "a" * 150, "ts": "0"}])

    assert "a" * 100 + "..." in report
    assert "a" * 101 not in report


class TestWorkspaceContext:
    @pytest.mark.asyncio
    async def test_context_lists_channels_and_messages(self, agent, slack_tool):
        slack_tool.execute.side_effect = _route(
            {
                "getChannels": ExecutionResult(
                    success=True, data=[{"name": "general", "is_private": False}, {"name": "ops", "is_private": True}]
                ),
                "getChannelHistory": ExecutionResult(success=True, data={"messages": [{"text": "standup at 10"}]}),
            }
        )

        context = await agent.get_slack_context()

        assert "Channels (2):" in context
        assert "- #ops (private)" in context
        assert "Recent messages in #dev (1):" in context
        assert "- standup at 10" in context

    @pytest.mark.asyncio
    async def test_each_part_degrades_separately(self, agent, slack_tool):
        slack_tool.execute.side_effect = _route(
            {
                "getChannels": ToolExecutionFailure("missing_scope"),
                "getChannelHistory": ExecutionResult(success=True, data={"messages": []}),
            }
        )

        context = await agent.get_slack_context()

        assert "Couldn't retrieve channels." in context
        assert "Recent messages in #dev (0):" in context

    @pytest.mark.asyncio
    async def test_no_slack_tool(self, mock_llm_provider):
        agent = SlackAgent("SlackAgent", mock_llm_provider)

        assert await agent.get_slack_context() == (
            "Slack context not available. Please configure Slack credentials."
        )
