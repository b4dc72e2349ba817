"""
Core Domain Models

This module defines the data models shared by the invocation protocol:
tool catalogs (ActionSpec/ParameterSpec), parsed invocation tags,
execution results and the final outcome of a query.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class ParameterSpec:
    """
    Schema entry for a single action parameter.

    Attributes:
        type: Semantic type name (string, number, boolean, array, ...)
        required: Whether the parameter must be present (non-null)
        description: Human-readable description shown to the model
        default: Optional default value, informational only
    """

    type: str
    required: bool = False
    description: str = ""
    default: Any = None


@dataclass(frozen=True)
class ActionSpec:
    """
    Descriptor of one named action in a tool's catalog.

    Attributes:
        name: Action name, unique within one tool
        description: Human-readable description
        parameters: Mapping from parameter name to its schema
    """

    name: str
    description: str
    parameters: dict[str, ParameterSpec] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        params: dict[str, Any] = {}
        for param_name, spec in self.parameters.items():
            entry: dict[str, Any] = {
                "type": spec.type,
                "required": spec.required,
                "description": spec.description,
            }
            if spec.default is not None:
                entry["default"] = spec.default
            params[param_name] = entry
        return {"name": self.name, "description": self.description, "parameters": params}


@dataclass(frozen=True)
class Invocation:
    """
    A tool-invocation tag found in model output.

    Attributes:
        tool: Tool token with any trailing "tool" suffix stripped
        action: Action name token
        raw_params: Parameter text exactly as it appeared in the tag
        params: Parsed parameter object, None when the tag is malformed
        start: Offset of the opening bracket in the scanned text
        end: Offset one past the closing delimiter
        error: Parse error description for malformed tags
    """

    tool: str
    action: str
    raw_params: str
    params: dict[str, Any] | None
    start: int
    end: int
    error: str | None = None

    @property
    def malformed(self) -> bool:
        return self.params is None

    @property
    def result_key(self) -> str:
        return f"{self.tool}_{self.action}"


@dataclass
class ExecutionResult:
    """
    Outcome of executing one tool action.

    Attributes:
        success: Whether the action succeeded
        data: Payload returned by the tool
        error: Failure message when success is False
    """

    success: bool
    data: Any = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, "data": self.data}
        if self.error is not None:
            result["error"] = self.error
        return result


class TagStatus(str, Enum):
    """How a single tag was resolved."""

    SUCCESS = "success"
    MALFORMED = "malformed"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class TagOutcome:
    """Replacement decided for one tag span."""

    invocation: Invocation
    status: TagStatus
    marker: str


@dataclass
class QueryOutcome:
    """
    Final result of processing a query.

    Attributes:
        response: Rewritten response text (never contains tag syntax)
        tool_results: Execution results keyed by "<tool>_<action>"
    """

    response: str
    tool_results: dict[str, ExecutionResult] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "response": self.response,
            "tool_results": {key: result.to_dict() for key, result in self.tool_results.items()},
        }
