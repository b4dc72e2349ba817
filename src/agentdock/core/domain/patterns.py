"""
Fast-Path Pattern Matcher

Ordered regular-expression intents checked before any model call. The
first rule whose pattern is found in the query wins (case-insensitive
search, not anchored).
"""

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from agentdock.core.domain.models import QueryOutcome

IntentHandler = Callable[[re.Match[str]], Awaitable[QueryOutcome]]


@dataclass(frozen=True)
class PatternRule:
    """
    One recognized phrasing.

    Attributes:
        name: Intent name used in logs and degraded responses
        pattern: Compiled case-insensitive regular expression
        handler: Coroutine function receiving the match object
        failure_text: What the intent attempts, formatted with the match
                      groups for degraded responses ("summarize PR #{0}")
    """

    name: str
    pattern: re.Pattern[str]
    handler: IntentHandler
    failure_text: str = "handle your request"

    @classmethod
    def compile(
        cls, name: str, pattern: str, handler: IntentHandler, failure_text: str = "handle your request"
    ) -> "PatternRule":
        return cls(
            name=name,
            pattern=re.compile(pattern, re.IGNORECASE),
            handler=handler,
            failure_text=failure_text,
        )

    def describe_attempt(self, match: re.Match[str]) -> str:
        return self.failure_text.format(*match.groups(""))


class PatternMatcher:
    """First-match-wins list of PatternRules."""

    def __init__(self, rules: list[PatternRule] | None = None):
        self._rules: list[PatternRule] = list(rules or [])

    def add(self, rule: PatternRule) -> None:
        self._rules.append(rule)

    @property
    def rules(self) -> list[PatternRule]:
        return list(self._rules)

    def match(self, query: str) -> tuple[PatternRule, re.Match[str]] | None:
        for rule in self._rules:
            found = rule.pattern.search(query)
            if found:
                return rule, found
        return None
