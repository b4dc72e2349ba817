# ============================================
# BASE TOOL
# ============================================

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import Any

import aiohttp
import structlog

from agentdock.core.domain.errors import ConfigurationError, ToolExecutionFailure
from agentdock.core.domain.models import ActionSpec, ExecutionResult

ActionHandler = Callable[[dict[str, Any]], Awaitable[ExecutionResult]]


class BaseTool(ABC):
    """
    Base class for all tool kinds.

    Subclasses declare their catalog in ``actions()`` and map each action
    name to a coroutine in ``handlers()``. ``execute`` resolves aliases,
    checks readiness and awaits the handler.
    """

    kind: str = ""
    label: str = ""
    ALIASES: dict[str, str] = {}

    def __init__(self, name: str, description: str = ""):
        self._name = name
        self._description = description
        self.logger = structlog.get_logger().bind(component="tool", tool=name, kind=self.kind)

        names = [action.name for action in self.actions()]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate action names in {self.label} catalog: {duplicates}")

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @abstractmethod
    def actions(self) -> list[ActionSpec]:
        pass

    @abstractmethod
    def handlers(self) -> dict[str, ActionHandler]:
        pass

    def canonical_action(self, action_name: str) -> str:
        return self.ALIASES.get(action_name, action_name)

    def get_action(self, action_name: str) -> ActionSpec | None:
        canonical = self.canonical_action(action_name)
        for action in self.actions():
            if action.name == canonical:
                return action
        return None

    def contextual_defaults(self) -> dict[str, Any]:
        return {}

    def check_ready(self) -> None:
        """Raise ToolExecutionFailure when the tool cannot reach its service."""

    async def execute(self, action_name: str, params: dict[str, Any]) -> ExecutionResult:
        self.check_ready()

        canonical = self.canonical_action(action_name)
        handler = self.handlers().get(canonical)
        if handler is None:
            raise ToolExecutionFailure(
                f"Action '{action_name}' not found for {self.label} tool",
                tool=self.name,
                action=action_name,
            )

        self.logger.info("tool_action_started", action=canonical)
        result = await handler(params)
        self.logger.info("tool_action_finished", action=canonical, success=result.success)
        return result

    async def get_info(self, params: dict[str, Any]) -> ExecutionResult:
        return ExecutionResult(
            success=True,
            data={
                "name": self.name,
                "kind": self.kind,
                "description": self.description,
                "actions": [action.name for action in self.actions()],
            },
        )

    @contextmanager
    def failure_context(self, what: str) -> Iterator[None]:
        """Re-raise service errors as ToolExecutionFailure("Failed to <what>: ...")."""
        try:
            yield
        except (ToolExecutionFailure, aiohttp.ClientError, KeyError, TypeError, ValueError) as e:
            self.logger.error("tool_request_failed", what=what, error_type=type(e).__name__, error=str(e))
            raise ToolExecutionFailure(f"Failed to {what}: {e}", tool=self.name) from e
