"""
Core Agent Domain Logic

BaseAgent turns a natural-language query into a response:

    Received
      -> PatternMatched -> Done                         (fast path)
      -> NoPatternMatch -> PromptBuilt -> ModelCompletionRequested
         -> ActionsExtracted -> [validate/enhance/dispatch per tag]*
         -> ResponseRewritten -> Done                   (tag protocol)

A failure to obtain a model completion escapes process_query as
ModelCompletionFailure, and a timed-out fast-path tool call escapes as
FastPathExecutionFailure. Other fast-path and per-tag failures degrade the
text of the response instead.

Specialized agents (GitHubAgent, SlackAgent) add fast-path intents and
service context to the prompt; the protocol itself lives here and in
ToolDispatcher.
"""

import asyncio
from collections.abc import Mapping
from typing import Any

import structlog

from agentdock.core.domain.dispatcher import ToolDispatcher, coerce_result
from agentdock.core.domain.errors import (
    FastPathExecutionFailure,
    ModelCompletionFailure,
    ToolExecutionFailure,
    UnknownTool,
)
from agentdock.core.domain.models import ExecutionResult, QueryOutcome
from agentdock.core.domain.parameters import enhance_parameters
from agentdock.core.domain.patterns import PatternMatcher, PatternRule
from agentdock.core.domain.prompt_builder import build_tools_context
from agentdock.core.domain.registry import ToolRegistry
from agentdock.core.interfaces.llm import LLMProviderProtocol
from agentdock.core.interfaces.tools import ToolProtocol
from agentdock.core.prompts.agent_prompts import GENERIC_AGENT_PROMPT


class BaseAgent:
    """
    Generic tool-using agent.

    Owns a ToolRegistry and an ordered list of fast-path PatternRules
    (empty for the generic kind). Tools may be shared with other agents.
    """

    kind = "generic"
    service_label = "the requested service"

    def __init__(
        self,
        name: str,
        llm_provider: LLMProviderProtocol,
        description: str = "",
        registry: ToolRegistry | None = None,
        tool_timeout: float | None = 30.0,
        model_timeout: float | None = 60.0,
        model_alias: str | None = None,
    ):
        """
        Initialize the agent.

        Args:
            name: Agent identity, used in prompts and logs
            llm_provider: Model-completion collaborator
            description: Free-text description of the agent's purpose
            registry: Tool registry to own (a new empty one by default)
            tool_timeout: Seconds allowed per tool action, None for no bound
            model_timeout: Seconds allowed per model completion, None for no bound
            model_alias: Model alias passed to the provider (provider default if None)
        """
        self.name = name
        self.description = description
        self.llm_provider = llm_provider
        self.registry = registry or ToolRegistry(owner=name)
        self.tool_timeout = tool_timeout
        self.model_timeout = model_timeout
        self.model_alias = model_alias
        self.dispatcher = ToolDispatcher(self.registry, tool_timeout=tool_timeout)
        self.patterns = PatternMatcher(self.build_patterns())
        self.logger = structlog.get_logger().bind(component="agent", agent=name, kind=self.kind)

    def build_patterns(self) -> list[PatternRule]:
        """Fast-path intents of this agent kind, in priority order."""
        return []

    # ------------------------------------------------------------------
    # Query pipeline
    # ------------------------------------------------------------------

    async def process_query(self, query: str, context: Mapping[str, Any] | None = None) -> QueryOutcome:
        """
        Answer a query.

        Args:
            query: User request in natural language
            context: Ambient parameters for this turn; they fill parameters
                     missing from tags after tool-specific defaults

        Returns:
            QueryOutcome with rewritten text and results keyed "<tool>_<action>"

        Raises:
            ModelCompletionFailure: If no fast-path intent matched and the
                                    model completion could not be obtained
            FastPathExecutionFailure: If a matched intent's tool call timed out
        """
        self.logger.info("query_received", query=query[:100])

        outcome = await self._try_fast_path(query)
        if outcome is not None:
            return outcome

        completion = await self.generate_completion(query, context)
        outcome = await self.dispatcher.process_completion(completion, context)

        self.logger.info("query_completed", tool_results=list(outcome.tool_results))
        return outcome

    async def _try_fast_path(self, query: str) -> QueryOutcome | None:
        matched = self.patterns.match(query)
        if matched is None:
            return None

        rule, match = matched
        self.logger.info("fast_path_matched", intent=rule.name, groups=match.groups())
        try:
            return await rule.handler(match)
        except UnknownTool:
            self.logger.warning("fast_path_tool_unavailable", intent=rule.name)
            return QueryOutcome(response=self.unavailable_response())
        except Exception as e:
            failure = FastPathExecutionFailure(rule.describe_attempt(match), e)
            if isinstance(e, ToolExecutionFailure) and e.timed_out:
                self.logger.error("fast_path_timeout", intent=rule.name, timeout=self.tool_timeout)
                raise failure from e
            self.logger.error("fast_path_failed", intent=rule.name, error=str(failure))
            return QueryOutcome(response=self.degraded_response(failure))

    def unavailable_response(self) -> str:
        label = self.service_label
        return f"I can't access {label} right now. Please make sure the {label} tool is registered."

    def degraded_response(self, failure: FastPathExecutionFailure) -> str:
        return f"I encountered an error trying to {failure.intent}: {failure.cause}"

    # ------------------------------------------------------------------
    # Model completion
    # ------------------------------------------------------------------

    async def build_prompt(self, query: str, context: Mapping[str, Any] | None = None) -> str:
        return GENERIC_AGENT_PROMPT.format(
            agent_name=self.name,
            tools_context=self.get_tools_context(),
            query=query,
        )

    async def generate_completion(self, query: str, context: Mapping[str, Any] | None = None) -> str:
        """Build the prompt and return the model's first completion choice."""
        prompt = await self.build_prompt(query, context)
        try:
            result = await asyncio.wait_for(
                self.llm_provider.generate(prompt, model=self.model_alias),
                timeout=self.model_timeout,
            )
        except asyncio.TimeoutError as e:
            self.logger.error("model_completion_timeout", timeout=self.model_timeout)
            raise ModelCompletionFailure(
                f"Failed to generate response: model call timed out after {self.model_timeout}s"
            ) from e
        except Exception as e:
            self.logger.error("model_completion_error", error_type=type(e).__name__, error=str(e))
            raise ModelCompletionFailure(f"Failed to generate response: {e}") from e

        if not result.get("success"):
            self.logger.error("model_completion_failed", error=result.get("error"))
            raise ModelCompletionFailure(f"Failed to generate response: {result.get('error')}")

        return result.get("content") or ""

    def get_tools_context(self) -> str:
        return build_tools_context(self.registry.snapshot())

    # ------------------------------------------------------------------
    # Direct tool calls (fast path and service context)
    # ------------------------------------------------------------------

    def find_tool(self, kind: str) -> ToolProtocol:
        tool = self.registry.find_by_kind(kind)
        if tool is None:
            raise UnknownTool(kind)
        return tool

    async def call_tool(
        self, kind: str, action: str, params: dict[str, Any] | None = None
    ) -> tuple[str, ExecutionResult]:
        """
        Execute an action on the first registered tool of ``kind``.

        Returns:
            Tuple of the result key ("<tool>_<action>") and the result

        Raises:
            UnknownTool: If no tool of that kind is registered
            ToolExecutionFailure: If the action fails, reports failure or times out
        """
        tool = self.find_tool(kind)
        merged = enhance_parameters(params or {}, tool.contextual_defaults())
        try:
            raw = await asyncio.wait_for(tool.execute(action, merged), timeout=self.tool_timeout)
        except asyncio.TimeoutError as e:
            raise ToolExecutionFailure(
                f"Tool action timed out after {self.tool_timeout}s",
                tool=tool.name,
                action=action,
                timed_out=True,
            ) from e

        result = coerce_result(raw)
        if not result.success:
            raise ToolExecutionFailure(
                result.error or f"{action} reported failure", tool=tool.name, action=action
            )
        return f"{tool.name}_{action}", result

    # ------------------------------------------------------------------
    # Registry and lifecycle
    # ------------------------------------------------------------------

    def register_tool(self, key: str, tool: ToolProtocol) -> None:
        self.registry.register(key, tool)

    def deregister_tool(self, key: str) -> bool:
        return self.registry.deregister(key)

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "description": self.description,
            "tools": self.registry.keys(),
            "intents": [rule.name for rule in self.patterns.rules],
        }

    def cleanup(self) -> None:
        self.logger.info("agent_cleanup")
