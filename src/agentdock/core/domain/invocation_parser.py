"""
Invocation Tag Parser

Grammar for tool invocations embedded in free text:

    tag        := "[TOOL_ACTION:" tool_token ":" action_name ":" json_object "]"
    tool_token := token_chars     ; trailing "tool" (any case) stripped
    action_name:= token_chars

The parser performs a single left-to-right pass. The JSON object is
decoded with ``json.JSONDecoder.raw_decode`` so brackets and colons inside
string values never confuse the scanner. A tag whose parameters do not
decode to an object is returned as a malformed Invocation (``params`` is
None) and scanning resumes after its span.
"""

import json
from typing import Any

from agentdock.core.domain.models import Invocation

TAG_PREFIX = "[TOOL_ACTION:"
TAG_SEPARATOR = ":"
TAG_CLOSE = "]"

_TOOL_SUFFIX = "tool"
# Characters that can never be part of a tool or action token.
_TOKEN_STOP = frozenset(":[]\n\r")


def normalize_tool_token(token: str) -> str:
    """Strip a trailing case-insensitive "tool" suffix (githubTool -> github)."""
    token = token.strip()
    if len(token) > len(_TOOL_SUFFIX) and token.lower().endswith(_TOOL_SUFFIX):
        return token[: -len(_TOOL_SUFFIX)]
    return token


def format_invocation(tool: str, action: str, params: dict[str, Any]) -> str:
    """Serialize a (tool, action, params) triple into tag syntax."""
    return f"{TAG_PREFIX}{tool}{TAG_SEPARATOR}{action}{TAG_SEPARATOR}{json.dumps(params)}{TAG_CLOSE}"


class InvocationParser:
    """
    Scanner producing typed Invocation records from text.

    Spans are non-overlapping and returned in order of first occurrence.
    Every occurrence of the tag prefix yields exactly one Invocation, so a
    rewriter that replaces every span leaves no residual tag syntax.
    """

    def __init__(self) -> None:
        self._decoder = json.JSONDecoder()

    def parse(self, text: str) -> list[Invocation]:
        invocations: list[Invocation] = []
        pos = 0
        while True:
            start = text.find(TAG_PREFIX, pos)
            if start < 0:
                break
            invocation = self._parse_tag(text, start)
            invocations.append(invocation)
            pos = invocation.end
        return invocations

    def _parse_tag(self, text: str, start: int) -> Invocation:
        cursor = start + len(TAG_PREFIX)

        tool_token, cursor = self._read_token(text, cursor)
        if tool_token is None:
            return self._malformed(text, start, cursor, "", "", "missing tool name")
        tool = normalize_tool_token(tool_token)

        action, cursor = self._read_token(text, cursor)
        if action is None:
            return self._malformed(text, start, cursor, tool, "", "missing action name")
        action = action.strip()

        params_start = cursor
        try:
            params, params_end = self._decoder.raw_decode(text, self._skip_ws(text, cursor))
        except json.JSONDecodeError as e:
            return self._malformed(text, start, params_start, tool, action, e.msg)

        close = self._skip_ws(text, params_end)
        if not isinstance(params, dict):
            return self._malformed(text, start, params_start, tool, action, "parameters must be a JSON object")
        if not text.startswith(TAG_CLOSE, close):
            return self._malformed(text, start, params_start, tool, action, "missing closing bracket")

        return Invocation(
            tool=tool,
            action=action,
            raw_params=text[params_start:params_end].strip(),
            params=params,
            start=start,
            end=close + len(TAG_CLOSE),
        )

    @staticmethod
    def _read_token(text: str, cursor: int) -> tuple[str | None, int]:
        """Read token chars up to the separator; None if no separator follows."""
        end = cursor
        while end < len(text) and text[end] not in _TOKEN_STOP:
            end += 1
        if end == cursor or end >= len(text) or text[end] != TAG_SEPARATOR:
            return None, end
        token = text[cursor:end]
        if not token.strip():
            return None, end
        return token, end + len(TAG_SEPARATOR)

    @staticmethod
    def _skip_ws(text: str, cursor: int) -> int:
        while cursor < len(text) and text[cursor] in " \t\r\n":
            cursor += 1
        return cursor

    @staticmethod
    def _malformed_end(text: str, cursor: int) -> int:
        """
        End of a malformed tag: the first closing bracket before the next tag
        prefix or line break; otherwise stop at whichever comes first.
        """
        limit = len(text)
        for stop in (text.find(TAG_PREFIX, cursor), text.find("\n", cursor)):
            if stop >= 0:
                limit = min(limit, stop)
        close = text.find(TAG_CLOSE, cursor, limit)
        if close >= 0:
            return close + len(TAG_CLOSE)
        return limit

    def _malformed(
        self, text: str, start: int, cursor: int, tool: str, action: str, reason: str
    ) -> Invocation:
        end = self._malformed_end(text, cursor)
        return Invocation(
            tool=tool,
            action=action,
            raw_params=text[cursor:end].rstrip(TAG_CLOSE).strip(),
            params=None,
            start=start,
            end=end,
            error=reason,
        )


_default_parser = InvocationParser()


def extract_invocations(text: str) -> list[Invocation]:
    """Extract all invocation tags from text in left-to-right order."""
    return _default_parser.parse(text)
