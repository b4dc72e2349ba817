"""
Tool Protocol

Interface every tool kind implements. Tools declare their action catalog
and execute actions by name through the same contract, so the agent never
probes tool objects for optional methods.
"""

from typing import Any, Protocol, runtime_checkable

from agentdock.core.domain.models import ActionSpec, ExecutionResult


@runtime_checkable
class ToolProtocol(Protocol):
    """Typed wrapper around an external service."""

    @property
    def name(self) -> str:
        """Configured tool identifier, matched case-insensitively against tag tokens."""
        ...

    @property
    def kind(self) -> str:
        """Tool kind (github, slack, ...), used by fast-path intents."""
        ...

    @property
    def description(self) -> str:
        ...

    def actions(self) -> list[ActionSpec]:
        """Ordered action catalog; names are unique."""
        ...

    def get_action(self, action_name: str) -> ActionSpec | None:
        """Catalog entry for an action name or one of its aliases."""
        ...

    def contextual_defaults(self) -> dict[str, Any]:
        """Implicit parameters this tool supplies when a tag omits them."""
        ...

    async def execute(self, action_name: str, params: dict[str, Any]) -> ExecutionResult:
        """Execute an action; raises ToolExecutionFailure on failure."""
        ...
