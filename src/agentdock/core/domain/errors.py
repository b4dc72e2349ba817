"""
Domain Errors

Exception taxonomy of the invocation protocol. Per-tag errors
(MalformedInvocation, UnknownTool, MissingRequiredParameter,
ToolExecutionFailure) are recovered by the dispatcher and rendered as
inline markers. ModelCompletionFailure escapes a query, and so does
FastPathExecutionFailure when the fast-path tool call timed out.
"""


class AgentDockError(Exception):
    """Base class for all agentdock errors."""


class ConfigurationError(AgentDockError):
    """Invalid profile, tool or agent configuration."""


class MalformedInvocation(AgentDockError):
    """Tag parameter text is not a JSON object."""

    def __init__(self, tool: str, action: str, reason: str = ""):
        self.tool = tool
        self.action = action
        self.reason = reason
        super().__init__(f"Invalid parameter format for {tool}.{action}")


class UnknownTool(AgentDockError):
    """Tag names a tool absent from the registry."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"Tool not found: {tool}")


class MissingRequiredParameter(AgentDockError):
    """Schema-required parameters are absent or null."""

    def __init__(self, action: str, missing: list[str]):
        self.action = action
        self.missing = list(missing)
        super().__init__(f"Missing required parameters for {action}: {', '.join(self.missing)}")


class ToolExecutionFailure(AgentDockError):
    """The tool's action call itself failed or timed out."""

    def __init__(
        self, message: str, tool: str | None = None, action: str | None = None, timed_out: bool = False
    ):
        self.tool = tool
        self.action = action
        self.timed_out = timed_out
        super().__init__(message)


class ModelCompletionFailure(AgentDockError):
    """The model-completion collaborator failed or timed out."""


class FastPathExecutionFailure(AgentDockError):
    """A pattern-matched intent's tool call failed. Escapes a query only on timeout."""

    def __init__(self, intent: str, cause: Exception):
        self.intent = intent
        self.cause = cause
        super().__init__(f"{intent} failed: {cause}")
