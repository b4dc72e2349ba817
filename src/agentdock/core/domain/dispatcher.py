"""
Tool Action Dispatcher

Turns the tags found in a model completion into executed actions:

    extract -> for each tag in textual order:
                   resolve tool -> enhance params -> validate -> execute
            -> rewrite every span with its marker

Tags are dispatched strictly one after another. Later tags may depend on
side effects of earlier ones ("create X" then "comment on X"), and markers
are substituted in a deterministic order.

Per-tag failures (malformed JSON, unknown tool, missing parameters, tool
errors, timeouts) never escape: they become inline markers and the
remaining tags still run.
"""

import asyncio
from collections.abc import Mapping
from typing import Any

import structlog

from agentdock.core.domain.errors import (
    MalformedInvocation,
    MissingRequiredParameter,
    ToolExecutionFailure,
    UnknownTool,
)
from agentdock.core.domain.invocation_parser import extract_invocations
from agentdock.core.domain.models import (
    ExecutionResult,
    Invocation,
    QueryOutcome,
    TagOutcome,
    TagStatus,
)
from agentdock.core.domain.parameters import check_required_parameters, enhance_parameters
from agentdock.core.domain.registry import ToolRegistry
from agentdock.core.domain.rewriter import (
    error_marker,
    malformed_marker,
    not_found_marker,
    rewrite_response,
    success_marker,
)
from agentdock.core.interfaces.tools import ToolProtocol


def coerce_result(raw: Any) -> ExecutionResult:
    """Accept ExecutionResult or the plain ``{"success", "data"}`` dict shape."""
    if isinstance(raw, ExecutionResult):
        return raw
    if isinstance(raw, Mapping) and "success" in raw:
        data = raw.get("data")
        error = raw.get("error")
        if not raw["success"] and error is None and isinstance(data, Mapping):
            error = data.get("message")
        return ExecutionResult(success=bool(raw["success"]), data=data, error=error)
    return ExecutionResult(success=True, data=raw)


class ToolDispatcher:
    """Executes invocation tags against a ToolRegistry."""

    def __init__(self, registry: ToolRegistry, tool_timeout: float | None = 30.0):
        self.registry = registry
        self.tool_timeout = tool_timeout
        self.logger = structlog.get_logger().bind(component="tool_dispatcher")

    async def process_completion(
        self, completion: str, ambient: Mapping[str, Any] | None = None
    ) -> QueryOutcome:
        """
        Execute every tag in ``completion`` and rewrite the text.

        Results are keyed "<tool>_<action>". A repeated tool+action pair
        overwrites the earlier entry under the same key.
        """
        invocations = extract_invocations(completion)
        self.logger.info("actions_extracted", count=len(invocations))

        outcomes: list[TagOutcome] = []
        tool_results: dict[str, ExecutionResult] = {}

        for invocation in invocations:
            outcome, result = await self.dispatch(invocation, ambient)
            outcomes.append(outcome)
            if result is not None:
                tool_results[invocation.result_key] = result

        return QueryOutcome(response=rewrite_response(completion, outcomes), tool_results=tool_results)

    async def dispatch(
        self, invocation: Invocation, ambient: Mapping[str, Any] | None = None
    ) -> tuple[TagOutcome, ExecutionResult | None]:
        """Resolve, validate and execute one tag; never raises."""
        tool_name, action_name = invocation.tool, invocation.action
        try:
            if invocation.malformed:
                raise MalformedInvocation(tool_name, action_name, invocation.error or "")

            tool = self.registry.resolve(tool_name)
            if tool is None:
                raise UnknownTool(tool_name)

            result = await self._execute(tool, invocation, ambient)

        except MalformedInvocation as e:
            self.logger.error(
                "malformed_invocation", tool=tool_name, action=action_name, reason=e.reason
            )
            return TagOutcome(invocation, TagStatus.MALFORMED, malformed_marker(invocation)), None

        except UnknownTool:
            self.logger.warning("tool_not_found", tool=tool_name, action=action_name)
            return (
                TagOutcome(invocation, TagStatus.NOT_FOUND, not_found_marker(tool_name, action_name)),
                None,
            )

        except Exception as e:
            # MissingRequiredParameter, ToolExecutionFailure and anything the tool raised
            self.logger.error(
                "tool_action_failed",
                tool=tool_name,
                action=action_name,
                error_type=type(e).__name__,
                error=str(e),
            )
            return (
                TagOutcome(invocation, TagStatus.ERROR, error_marker(tool_name, action_name, str(e))),
                None,
            )

        if not result.success:
            self.logger.warning(
                "tool_action_unsuccessful", tool=tool_name, action=action_name, error=result.error
            )
            message = result.error or "Action reported failure"
            return TagOutcome(invocation, TagStatus.ERROR, error_marker(tool_name, action_name, message)), result

        self.logger.info("tag_dispatched", tool=tool_name, action=action_name)
        return (
            TagOutcome(invocation, TagStatus.SUCCESS, success_marker(invocation.result_key)),
            result,
        )

    async def _execute(
        self,
        tool: ToolProtocol,
        invocation: Invocation,
        ambient: Mapping[str, Any] | None,
    ) -> ExecutionResult:
        params = enhance_parameters(invocation.params or {}, tool.contextual_defaults(), ambient)

        action = tool.get_action(invocation.action)
        missing = check_required_parameters(action, params)
        if missing:
            raise MissingRequiredParameter(invocation.action, missing)

        try:
            raw = await asyncio.wait_for(
                tool.execute(invocation.action, params), timeout=self.tool_timeout
            )
        except asyncio.TimeoutError as e:
            raise ToolExecutionFailure(
                f"Tool action timed out after {self.tool_timeout}s",
                tool=tool.name,
                action=invocation.action,
                timed_out=True,
            ) from e
        return coerce_result(raw)
