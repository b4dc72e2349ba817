"""Shared fixtures for agentdock unit tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from agentdock.core.domain.models import ActionSpec, ExecutionResult, ParameterSpec


def github_actions() -> list[ActionSpec]:
    return [
        ActionSpec("listPRs", "List pull requests", {"state": ParameterSpec("string", default="open")}),
        ActionSpec(
            "getPR",
            "Get a pull request",
            {
                "number": ParameterSpec("number", required=True, description="PR number"),
                "owner": ParameterSpec("string", required=True),
                "repo": ParameterSpec("string", required=True),
            },
        ),
        ActionSpec(
            "createComment",
            "Comment on an issue",
            {
                "number": ParameterSpec("number", required=True),
                "body": ParameterSpec("string", required=True),
            },
        ),
    ]


@pytest.fixture
def make_tool():
    """Factory for ToolProtocol mocks."""

    def _make(
        name: str = "github",
        kind: str | None = None,
        actions: list[ActionSpec] | None = None,
        defaults: dict | None = None,
        result: ExecutionResult | None = None,
    ) -> MagicMock:
        specs = actions if actions is not None else github_actions()
        tool = MagicMock()
        tool.name = name
        tool.kind = kind or name
        tool.description = f"{name} integration"
        tool.actions.return_value = specs
        tool.get_action.side_effect = lambda action: next((a for a in specs if a.name == action), None)
        tool.contextual_defaults.return_value = dict(defaults or {})
        tool.execute = AsyncMock(return_value=result or ExecutionResult(success=True, data={"ok": True}))
        return tool

    return _make


@pytest.fixture
def mock_llm_provider():
    """Mock LLMProviderProtocol returning an empty completion."""
    mock = AsyncMock()
    mock.generate.return_value = {"success": True, "content": ""}
    return mock


@pytest.fixture(autouse=True)
def reset_structlog():
    """CLI and server entry points reconfigure structlog; restore defaults after each test."""
    yield
    structlog.reset_defaults()
