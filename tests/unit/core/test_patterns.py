"""Unit tests for the fast-path pattern matcher."""

from unittest.mock import AsyncMock

from agentdock.core.domain.patterns import PatternMatcher, PatternRule


def _rule(name, pattern, failure_text="handle your request"):
    return PatternRule.compile(name, pattern, AsyncMock(), failure_text)


def test_first_matching_rule_wins():
    matcher = PatternMatcher([_rule("specific", r"review PR #?(\d+)"), _rule("broad", r"PR #?(\d+)")])

    rule, match = matcher.match("please review PR #12")

    assert rule.name == "specific"
    assert match.group(1) == "12"


def test_case_insensitive_unanchored_search():
    matcher = PatternMatcher([_rule("summary", r"summarize (?:pull request|PR) #?(\d+)")])

    rule, match = matcher.match("Hey, could you SUMMARIZE Pull Request #42 for me?")

    assert rule.name == "summary"
    assert match.group(1) == "42"


def test_no_match_returns_none():
    matcher = PatternMatcher([_rule("summary", r"summarize PR #?(\d+)")])

    assert matcher.match("give a rundown of PR 42 please") is None
    assert PatternMatcher().match("anything") is None


def test_add_appends_with_lowest_priority():
    matcher = PatternMatcher([_rule("first", r"hello")])
    matcher.add(_rule("second", r"hello world"))

    assert [r.name for r in matcher.rules] == ["first", "second"]
    assert matcher.match("hello world")[0].name == "first"


def test_describe_attempt_uses_groups():
    rule = _rule("send", r"send to #(\w+) saying (.+)", "send a message to #{0}")
    match = rule.pattern.search("send to #dev saying hi")

    assert rule.describe_attempt(match) == "send a message to #dev"


def test_describe_attempt_with_unmatched_optional_group():
    rule = _rule("info", r"channel #?(\w+)( history)?", "get info for #{0}{1}")
    match = rule.pattern.search("tell me about channel #random")

    assert rule.describe_attempt(match) == "get info for #random"
