"""
Response Rewriter

Marker constructors and span substitution. Every tag span found by the
parser is replaced by exactly one marker, so rewritten text never
contains invocation syntax.
"""

from collections.abc import Sequence

from agentdock.core.domain.models import Invocation, TagOutcome


def success_marker(result_key: str) -> str:
    return f"[{result_key} completed successfully]"


def not_found_marker(tool: str, action: str) -> str:
    return f"[{tool} {action} result: Tool not found]"


def error_marker(tool: str, action: str, message: str) -> str:
    return f"[{tool} {action} result: Error - {message}]"


def malformed_marker(invocation: Invocation) -> str:
    if not invocation.tool or not invocation.action:
        return "[Error: Invalid tool action syntax]"
    return f"[Error: Invalid parameter format for {invocation.tool}.{invocation.action}]"


def rewrite_response(text: str, outcomes: Sequence[TagOutcome]) -> str:
    """
    Replace each outcome's span in ``text`` with its marker.

    Spans are taken from the parsed invocations, which are ordered and
    non-overlapping; the text between spans is copied verbatim.
    """
    parts: list[str] = []
    cursor = 0
    for outcome in sorted(outcomes, key=lambda o: o.invocation.start):
        invocation = outcome.invocation
        parts.append(text[cursor:invocation.start])
        parts.append(outcome.marker)
        cursor = invocation.end
    parts.append(text[cursor:])
    return "".join(parts)
