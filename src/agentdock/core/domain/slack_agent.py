"""
Slack Agent

Fast-path intents for common Slack requests, checked in this order:

- "send a message to #channel saying TEXT" -> sendMessage
- "tell me about channel #name"            -> getChannelInfo + getChannelHistory
- "create a channel called NAME"           -> createChannel

Model prompts are enriched with the workspace's channels and the latest
messages of the default channel.
"""

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from agentdock.core.domain.agent import BaseAgent
from agentdock.core.domain.models import QueryOutcome
from agentdock.core.domain.patterns import PatternRule
from agentdock.core.interfaces.llm import LLMProviderProtocol
from agentdock.core.prompts.agent_prompts import SLACK_AGENT_PROMPT

SEND_MESSAGE_PATTERN = r"send (?:a )?message to (?:channel )?#?(\w+) saying (.+)"
CHANNEL_INFO_PATTERN = r"(?:get|show|tell me about) (?:channel|conversation) #?(\w+)"
CREATE_CHANNEL_PATTERN = r"create (?:a )?(?:new )?channel (?:called )?#?(\w+)"

PREVIEW_CHARS = 100
CONTEXT_PREVIEW_CHARS = 50


def _preview(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def render_channel_info(channel: Mapping[str, Any], messages: list[Mapping[str, Any]]) -> str:
    """Plain-text report of a channel and its recent messages."""
    created = datetime.fromtimestamp(float(channel.get("created") or 0))
    lines = [
        f"Channel #{channel.get('name')}:",
        f"Members: {channel.get('num_members')}",
        f"Created: {created:%Y-%m-%d %H:%M:%S}",
        f"Private: {'Yes' if channel.get('is_private') else 'No'}",
        "",
    ]
    if messages:
        lines.append("Recent messages:")
        for msg in messages:
            sent = datetime.fromtimestamp(float(msg.get("ts") or 0))
            lines.append(f"[{sent:%H:%M:%S}] {_preview(msg.get('text') or '', PREVIEW_CHARS)}")
    else:
        lines.append("No recent messages found.")
    return "\n".join(lines) + "\n"


class SlackAgent(BaseAgent):
    """Agent specialized for Slack channels and messages."""

    kind = "slack"
    service_label = "Slack"

    def __init__(
        self,
        name: str,
        llm_provider: LLMProviderProtocol,
        description: str = "",
        default_channel: str = "general",
        **kwargs: Any,
    ):
        self.default_channel = default_channel
        super().__init__(name, llm_provider, description=description, **kwargs)

    def build_patterns(self) -> list[PatternRule]:
        return [
            PatternRule.compile(
                "send_message", SEND_MESSAGE_PATTERN, self._send_message, "send a message to #{0}"
            ),
            PatternRule.compile(
                "channel_info", CHANNEL_INFO_PATTERN, self._channel_info, "get information for channel #{0}"
            ),
            PatternRule.compile(
                "create_channel", CREATE_CHANNEL_PATTERN, self._create_channel, "create channel #{0}"
            ),
        ]

    async def _send_message(self, match: re.Match[str]) -> QueryOutcome:
        channel, message = match.group(1), match.group(2)
        key, result = await self.call_tool("slack", "sendMessage", {"channel": channel, "text": message})
        return QueryOutcome(response=f'Message sent to #{channel}: "{message}"', tool_results={key: result})

    async def _channel_info(self, match: re.Match[str]) -> QueryOutcome:
        channel = match.group(1)
        info_key, info = await self.call_tool("slack", "getChannelInfo", {"channel": channel})
        history_key, history = await self.call_tool(
            "slack", "getChannelHistory", {"channel": channel, "limit": 5}
        )
        return QueryOutcome(
            response=render_channel_info(info.data, history.data.get("messages", [])),
            tool_results={info_key: info, history_key: history},
        )

    async def _create_channel(self, match: re.Match[str]) -> QueryOutcome:
        name = match.group(1).lower()
        key, result = await self.call_tool("slack", "createChannel", {"name": name})
        return QueryOutcome(
            response=f"Channel #{result.data['name']} has been created successfully!",
            tool_results={key: result},
        )

    async def get_slack_context(self) -> str:
        """Channels and recent default-channel messages; each part degrades on its own."""
        if self.registry.find_by_kind("slack") is None:
            return "Slack context not available. Please configure Slack credentials."

        lines = ["Slack Information:"]
        try:
            _, channels = await self.call_tool("slack", "getChannels", {"limit": 10})
            lines.append(f"\nChannels ({len(channels.data)}):")
            for channel in channels.data:
                private = " (private)" if channel.get("is_private") else ""
                lines.append(f"- #{channel['name']}{private}")
        except Exception as e:
            self.logger.warning("slack_channels_unavailable", error=str(e))
            lines.append("\nCouldn't retrieve channels.")

        try:
            _, history = await self.call_tool(
                "slack", "getChannelHistory", {"channel": self.default_channel, "limit": 5}
            )
            messages = history.data.get("messages", [])
            lines.append(f"\nRecent messages in #{self.default_channel} ({len(messages)}):")
            for msg in messages:
                lines.append(f"- {_preview(msg.get('text') or '', CONTEXT_PREVIEW_CHARS)}")
        except Exception as e:
            self.logger.warning("slack_history_unavailable", error=str(e))
            lines.append(f"\nCouldn't retrieve messages from #{self.default_channel}.")

        return "\n".join(lines)

    async def build_prompt(self, query: str, context: Mapping[str, Any] | None = None) -> str:
        return SLACK_AGENT_PROMPT.format(
            agent_name=self.name,
            agent_description=self.description,
            service_context=await self.get_slack_context(),
            tools_context=self.get_tools_context(),
            query=query,
        )
