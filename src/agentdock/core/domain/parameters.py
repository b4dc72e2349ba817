"""
Parameter Validation and Enhancement

check_required_parameters reports every schema-required parameter that is
absent or null. enhance_parameters merges the three parameter layers used
for execution, highest priority first:

1. parameters written explicitly in the tag
2. contextual defaults declared by the resolved tool (e.g. GitHub owner/repo)
3. ambient parameters supplied by the caller of the query

Each layer only fills keys missing from the layers above it.
"""

from collections.abc import Mapping
from typing import Any

from agentdock.core.domain.models import ActionSpec


def is_missing(params: Mapping[str, Any], key: str) -> bool:
    """A key is missing when absent or explicitly null; "", 0 and False count as present."""
    return params.get(key) is None


def check_required_parameters(action: ActionSpec | None, params: Mapping[str, Any]) -> list[str]:
    """Names of required parameters absent from ``params``, in schema order."""
    if action is None:
        return []
    return [
        name
        for name, spec in action.parameters.items()
        if spec.required and is_missing(params, name)
    ]


def enhance_parameters(
    params: Mapping[str, Any],
    contextual: Mapping[str, Any] | None = None,
    ambient: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Merge explicit, tool-contextual and ambient parameters without overriding."""
    enhanced = dict(params)
    for layer in (contextual, ambient):
        if not layer:
            continue
        for key, value in layer.items():
            if is_missing(enhanced, key):
                enhanced[key] = value
    return enhanced
