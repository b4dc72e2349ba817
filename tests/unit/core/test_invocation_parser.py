"""
Unit tests for the invocation tag grammar.

Tests cover:
- Serialization and parsing of well-formed tags
- Tool token normalization
- JSON values containing brackets and colons
- Malformed tags and span recovery
"""

import pytest

from agentdock.core.domain.invocation_parser import (
    TAG_PREFIX,
    InvocationParser,
    extract_invocations,
    format_invocation,
    normalize_tool_token,
)


class TestNormalizeToolToken:
    @pytest.mark.parametrize(
        "token,expected",
        [
            ("github", "github"),
            ("githubTool", "github"),
            ("SlackTOOL", "Slack"),
            ("tool", "tool"),
            (" jira ", "jira"),
        ],
    )
    def test_strips_trailing_tool_suffix(self, token, expected):
        assert normalize_tool_token(token) == expected


class TestWellFormedTags:
    def test_formatted_tag_parses_back(self):
        tag = format_invocation("github", "getPR", {"number": 42, "owner": "acme"})

        invocations = extract_invocations(tag)

        assert len(invocations) == 1
        inv = invocations[0]
        assert inv.tool == "github"
        assert inv.action == "getPR"
        assert inv.params == {"number": 42, "owner": "acme"}
        assert (inv.start, inv.end) == (0, len(tag))
        assert not inv.malformed

    def test_suffixed_tool_token_is_normalized(self):
        inv = extract_invocations('[TOOL_ACTION:githubTool:listPRs:{"state": "open"}]')[0]

        assert inv.tool == "github"
        assert inv.result_key == "github_listPRs"

    def test_brackets_and_colons_inside_strings(self):
        text = '[TOOL_ACTION:slack:sendMessage:{"channel": "dev", "text": "see [docs]: a:b }"}] done'

        inv = extract_invocations(text)[0]

        assert inv.params == {"channel": "dev", "text": "see [docs]: a:b }"}
        assert text[inv.end:] == " done"

    def test_nested_objects(self):
        text = '[TOOL_ACTION:slack:sendMessage:{"text": "hi", "blocks": [{"type": "section"}]}]'

        inv = extract_invocations(text)[0]

        assert inv.params["blocks"] == [{"type": "section"}]
        assert inv.end == len(text)

    def test_whitespace_around_parameters(self):
        inv = extract_invocations('[TOOL_ACTION:github:getPR: {"number": 1} ]')[0]

        assert inv.params == {"number": 1}

    def test_line_breaks_around_parameters(self):
        text = '[TOOL_ACTION:github:getPR:\n{"number": 1}\n]\r\n[TOOL_ACTION:github:listPRs:{}\r\n]'

        invocations = extract_invocations(text)

        assert [i.params for i in invocations] == [{"number": 1}, {}]
        assert not any(i.malformed for i in invocations)
        assert text[invocations[0].start:invocations[0].end] == '[TOOL_ACTION:github:getPR:\n{"number": 1}\n]'

    def test_multiple_tags_in_order(self):
        text = (
            "First [TOOL_ACTION:github:listPRs:{}] then "
            '[TOOL_ACTION:slack:sendMessage:{"channel": "dev", "text": "x"}] end'
        )

        invocations = extract_invocations(text)

        assert [i.result_key for i in invocations] == ["github_listPRs", "slack_sendMessage"]
        assert invocations[0].end <= invocations[1].start
        for inv in invocations:
            assert text[inv.start:inv.end].startswith(TAG_PREFIX)
            assert text[inv.end - 1] == "]"

    def test_text_without_tags(self):
        assert extract_invocations("Nothing to do here [not a tag]") == []
        assert extract_invocations("") == []


class TestMalformedTags:
    def test_truncated_json_does_not_swallow_later_tags(self):
        text = 'A [TOOL_ACTION:github:getPR:{"number": 4] B [TOOL_ACTION:github:listPRs:{}] C'

        invocations = extract_invocations(text)

        assert len(invocations) == 2
        bad, good = invocations
        assert bad.malformed
        assert (bad.tool, bad.action) == ("github", "getPR")
        assert text[bad.start:bad.end] == '[TOOL_ACTION:github:getPR:{"number": 4]'
        assert bad.error
        assert not good.malformed
        assert good.params == {}

    def test_non_object_parameters_are_malformed(self):
        inv = extract_invocations('[TOOL_ACTION:github:listPRs:"open"] rest')[0]

        assert inv.malformed
        assert inv.error == "parameters must be a JSON object"

    def test_missing_action_name(self):
        text = "x [TOOL_ACTION:github] y"

        inv = extract_invocations(text)[0]

        assert inv.malformed
        assert inv.action == ""
        assert text[inv.start:inv.end] == "[TOOL_ACTION:github]"

    def test_unterminated_tag_runs_to_end_of_text(self):
        text = 'before [TOOL_ACTION:github:getPR:{"number": '

        inv = extract_invocations(text)[0]

        assert inv.malformed
        assert inv.end == len(text)

    def test_malformed_tag_stops_at_line_break(self):
        text = '[TOOL_ACTION:github:getPR:{"number": 4\nSecond line stays.'

        inv = extract_invocations(text)[0]

        assert inv.malformed
        assert text[inv.end:] == "\nSecond line stays."

    def test_missing_closing_bracket(self):
        inv = extract_invocations('[TOOL_ACTION:github:getPR:{"number": 4} and more')[0]

        assert inv.malformed
        assert inv.error == "missing closing bracket"

    def test_every_prefix_yields_one_invocation(self):
        text = "[TOOL_ACTION:a:b:{}] [TOOL_ACTION:] [TOOL_ACTION:x:y:{bad}] [TOOL_ACTION:c:d:{}]"

        invocations = InvocationParser().parse(text)

        assert len(invocations) == text.count(TAG_PREFIX)
        assert [i.malformed for i in invocations] == [False, True, True, False]
