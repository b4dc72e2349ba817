# ============================================
# SLACK TOOL
# ============================================

import re
from typing import Any

import aiohttp

from agentdock.core.domain.errors import ToolExecutionFailure
from agentdock.core.domain.models import ActionSpec, ExecutionResult, ParameterSpec
from agentdock.infrastructure.tools.base_tool import ActionHandler, BaseTool

SLACK_API_BASE = "https://slack.com/api"
MAX_CHANNEL_NAME = 79


def normalize_channel_name(name: str) -> str:
    """Slack channel names are lowercase, without spaces or periods, shorter than 80 chars."""
    return re.sub(r"[^a-z0-9_-]", "-", name.lower())[:MAX_CHANNEL_NAME]


def _channel_param() -> dict[str, ParameterSpec]:
    return {"channel": ParameterSpec("string", required=True, description="Channel name or ID")}


class SlackTool(BaseTool):
    """Messages, channels and users of a Slack workspace (Web API, bot token)."""

    kind = "slack"
    label = "Slack"

    def __init__(
        self,
        name: str = "slack",
        description: str = "",
        token: str | None = None,
        default_channel: str = "general",
        api_base: str = SLACK_API_BASE,
        request_timeout: float = 30.0,
    ):
        super().__init__(name, description or "Send messages and manage channels in Slack")
        self._token = token
        self.default_channel = default_channel
        self.api_base = api_base.rstrip("/")
        self.request_timeout = request_timeout

        if token:
            self.logger.info("slack_tool_initialized", token_set=True, default_channel=default_channel)
        else:
            self.logger.warning("slack_token_missing", token_set=False)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def actions(self) -> list[ActionSpec]:
        return [
            ActionSpec("info", "Get information about this tool"),
            ActionSpec(
                "sendMessage",
                "Send a message to a Slack channel",
                {
                    **_channel_param(),
                    "text": ParameterSpec("string", required=True, description="Message text"),
                    "blocks": ParameterSpec("array", description="Message blocks (formatted content)"),
                },
            ),
            ActionSpec(
                "getChannels",
                "List all accessible channels",
                {"limit": ParameterSpec("number", description="Maximum number of channels to return", default=100)},
            ),
            ActionSpec("getChannelInfo", "Get details about a channel", _channel_param()),
            ActionSpec(
                "getChannelHistory",
                "Get message history for a channel",
                {
                    **_channel_param(),
                    "limit": ParameterSpec("number", description="Maximum number of messages to return", default=20),
                },
            ),
            ActionSpec(
                "findUser",
                "Find a user by email or name",
                {"query": ParameterSpec("string", required=True, description="Email or display name to search for")},
            ),
            ActionSpec(
                "createChannel",
                "Create a new Slack channel",
                {
                    "name": ParameterSpec("string", required=True, description="Channel name"),
                    "is_private": ParameterSpec(
                        "boolean", description="Whether the channel should be private", default=False
                    ),
                    "description": ParameterSpec("string", description="Channel description"),
                },
            ),
            ActionSpec("joinChannel", "Join a Slack channel", _channel_param()),
            ActionSpec("leaveChannel", "Leave a Slack channel", _channel_param()),
            ActionSpec(
                "inviteToChannel",
                "Invite users to a channel",
                {
                    **_channel_param(),
                    "users": ParameterSpec(
                        "string|array", required=True, description="User IDs to invite (single ID or array of IDs)"
                    ),
                },
            ),
            ActionSpec(
                "addReaction",
                "Add a reaction to a message",
                {
                    **_channel_param(),
                    "timestamp": ParameterSpec("string", required=True, description="Message timestamp"),
                    "name": ParameterSpec("string", required=True, description="Reaction emoji name"),
                },
            ),
            ActionSpec(
                "searchMessages",
                "Search for messages",
                {
                    "query": ParameterSpec("string", required=True, description="Search query"),
                    "count": ParameterSpec("number", description="Maximum number of results to return", default=20),
                },
            ),
        ]

    def handlers(self) -> dict[str, ActionHandler]:
        return {
            "info": self.get_info,
            "sendMessage": self.send_message,
            "getChannels": self.get_channels,
            "getChannelInfo": self.get_channel_info,
            "getChannelHistory": self.get_channel_history,
            "findUser": self.find_user,
            "createChannel": self.create_channel,
            "joinChannel": self.join_channel,
            "leaveChannel": self.leave_channel,
            "inviteToChannel": self.invite_to_channel,
            "addReaction": self.add_reaction,
            "searchMessages": self.search_messages,
        }

    def check_ready(self) -> None:
        if not self._token:
            raise ToolExecutionFailure("Slack client not initialized. Please check your API token.", tool=self.name)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    async def _request(self, api_method: str, payload: dict[str, Any], http_method: str = "POST") -> dict[str, Any]:
        """
        Call one Web API method.

        Read methods are sent as GET with query parameters, write methods
        as POST with a JSON body. Slack answers 200 with ``ok: false`` on
        most errors.
        """
        headers = {"Authorization": f"Bearer {self._token}"}
        url = f"{self.api_base}/{api_method}"

        async with aiohttp.ClientSession(headers=headers) as session:
            kwargs: dict[str, Any] = {"timeout": aiohttp.ClientTimeout(total=self.request_timeout)}
            if http_method == "GET":
                kwargs["params"] = {k: str(v).lower() if isinstance(v, bool) else v for k, v in payload.items()}
            else:
                kwargs["json"] = payload

            async with session.request(http_method, url, **kwargs) as response:
                if response.status >= 400:
                    raise ToolExecutionFailure(
                        f"Slack API returned {response.status}: {response.reason}", tool=self.name
                    )
                data = await response.json(content_type=None)
                if not data.get("ok"):
                    raise ToolExecutionFailure(data.get("error") or "unknown_error", tool=self.name)
                return data

    @staticmethod
    def _channel(params: dict[str, Any]) -> str:
        return str(params["channel"]).lstrip("#")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def get_info(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("get Slack info"):
            auth = await self._request("auth.test", {})
            return ExecutionResult(
                success=True,
                data={
                    "name": self.name,
                    "description": self.description,
                    "bot_id": auth.get("bot_id"),
                    "bot_name": auth.get("user"),
                    "team": auth.get("team"),
                    "authenticated": True,
                    "actions": [action.name for action in self.actions()],
                },
            )

    async def send_message(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("send Slack message"):
            payload: dict[str, Any] = {
                "channel": str(params.get("channel") or self.default_channel).lstrip("#"),
                "text": params["text"],
            }
            if params.get("blocks"):
                payload["blocks"] = params["blocks"]

            result = await self._request("chat.postMessage", payload)
            return ExecutionResult(
                success=True,
                data={
                    "channel": result.get("channel"),
                    "ts": result.get("ts"),
                    "message": {"text": (result.get("message") or {}).get("text")},
                },
            )

    async def get_channels(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("get Slack channels"):
            result = await self._request(
                "conversations.list",
                {"limit": int(params.get("limit") or 100), "exclude_archived": True},
                http_method="GET",
            )
            return ExecutionResult(
                success=True,
                data=[
                    {
                        "id": channel["id"],
                        "name": channel["name"],
                        "is_private": channel.get("is_private", False),
                        "num_members": channel.get("num_members"),
                        "topic": (channel.get("topic") or {}).get("value", ""),
                        "purpose": (channel.get("purpose") or {}).get("value", ""),
                    }
                    for channel in result.get("channels", [])
                ],
            )

    async def get_channel_info(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("get channel info"):
            result = await self._request(
                "conversations.info",
                {"channel": self._channel(params), "include_num_members": True},
                http_method="GET",
            )
            channel = result["channel"]
            return ExecutionResult(
                success=True,
                data={
                    "id": channel["id"],
                    "name": channel["name"],
                    "is_private": channel.get("is_private", False),
                    "num_members": channel.get("num_members"),
                    "created": channel.get("created"),
                    "topic": (channel.get("topic") or {}).get("value", ""),
                    "purpose": (channel.get("purpose") or {}).get("value", ""),
                },
            )

    async def get_channel_history(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("get channel history"):
            result = await self._request(
                "conversations.history",
                {"channel": self._channel(params), "limit": int(params.get("limit") or 20)},
                http_method="GET",
            )
            return ExecutionResult(
                success=True,
                data={
                    "messages": [
                        {
                            "text": msg.get("text"),
                            "user": msg.get("user"),
                            "ts": msg.get("ts"),
                            "thread_ts": msg.get("thread_ts"),
                            "reply_count": msg.get("reply_count", 0),
                            "reactions": msg.get("reactions", []),
                        }
                        for msg in result.get("messages", [])
                    ],
                    "has_more": result.get("has_more", False),
                },
            )

    async def find_user(self, params: dict[str, Any]) -> ExecutionResult:
        query = str(params["query"])
        with self.failure_context("find Slack user"):
            user = None
            if "@" in query:
                try:
                    result = await self._request("users.lookupByEmail", {"email": query}, http_method="GET")
                    user = result.get("user")
                except ToolExecutionFailure:
                    self.logger.info("slack_user_email_not_found", query=query)

            if user is None:
                result = await self._request("users.list", {}, http_method="GET")
                needle = query.lower()
                user = next(
                    (
                        member
                        for member in result.get("members", [])
                        if needle in member.get("name", "").lower()
                        or needle in ((member.get("profile") or {}).get("real_name") or "").lower()
                    ),
                    None,
                )

            if user is None:
                message = f"No user found matching '{query}'"
                return ExecutionResult(success=False, data={"message": message}, error=message)

            profile = user.get("profile") or {}
            return ExecutionResult(
                success=True,
                data={
                    "id": user["id"],
                    "name": user.get("name"),
                    "real_name": profile.get("real_name"),
                    "email": profile.get("email"),
                    "avatar": profile.get("image_72"),
                    "is_bot": user.get("is_bot", False),
                },
            )

    async def create_channel(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("create Slack channel"):
            result = await self._request(
                "conversations.create",
                {"name": normalize_channel_name(str(params["name"])), "is_private": bool(params.get("is_private"))},
            )
            channel = result["channel"]

            if params.get("description"):
                await self._request(
                    "conversations.setTopic", {"channel": channel["id"], "topic": params["description"]}
                )

            self.logger.info("slack_channel_created", channel=channel["name"])
            return ExecutionResult(
                success=True,
                data={
                    "id": channel["id"],
                    "name": channel["name"],
                    "is_private": channel.get("is_private", False),
                    "creator": channel.get("creator"),
                },
            )

    async def join_channel(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("join Slack channel"):
            result = await self._request("conversations.join", {"channel": self._channel(params)})
            channel = result["channel"]
            return ExecutionResult(
                success=True,
                data={"id": channel["id"], "name": channel["name"], "is_private": channel.get("is_private", False)},
            )

    async def leave_channel(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("leave Slack channel"):
            result = await self._request("conversations.leave", {"channel": self._channel(params)})
            return ExecutionResult(success=True, data={"ok": result["ok"]})

    async def invite_to_channel(self, params: dict[str, Any]) -> ExecutionResult:
        users = params["users"]
        user_list = users if isinstance(users, list) else [users]
        with self.failure_context("invite users to Slack channel"):
            result = await self._request(
                "conversations.invite", {"channel": self._channel(params), "users": ",".join(user_list)}
            )
            channel = result["channel"]
            return ExecutionResult(success=True, data={"channel": {"id": channel["id"], "name": channel["name"]}})

    async def add_reaction(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("add reaction to Slack message"):
            result = await self._request(
                "reactions.add",
                {"channel": self._channel(params), "timestamp": params["timestamp"], "name": params["name"]},
            )
            return ExecutionResult(success=True, data={"ok": result["ok"]})

    async def search_messages(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("search Slack messages"):
            result = await self._request(
                "search.messages",
                {"query": params["query"], "count": int(params.get("count") or 20)},
                http_method="GET",
            )
            messages = result.get("messages") or {}
            return ExecutionResult(
                success=True,
                data={
                    "total": messages.get("total", 0),
                    "matches": [
                        {
                            "text": match.get("text"),
                            "user": match.get("user"),
                            "ts": match.get("ts"),
                            "channel": {"id": match["channel"]["id"], "name": match["channel"]["name"]},
                            "permalink": match.get("permalink"),
                        }
                        for match in messages.get("matches", [])
                    ],
                },
            )
