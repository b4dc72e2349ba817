"""
GitHub Agent

Adds two fast-path intents on top of the generic protocol:

- "summarize pull request #N" -> summarizePR -> Markdown summary
- "review PR #N"              -> reviewCode  -> Markdown code review

Model prompts are enriched with repository context gathered through the
registered GitHub tool.
"""

import re
from collections.abc import Mapping
from typing import Any

from agentdock.core.domain.agent import BaseAgent
from agentdock.core.domain.models import QueryOutcome
from agentdock.core.domain.patterns import PatternRule
from agentdock.core.prompts.agent_prompts import GITHUB_AGENT_PROMPT

PR_SUMMARY_PATTERN = r"(?:summarize|summarise|show|explain|tell me about) (?:pull request|PR) #?(\d+)"
CODE_REVIEW_PATTERN = r"(?:review|analyze|analyse) (?:code|changes|pull request|PR) #?(\d+)"

MAX_SUMMARY_FILES = 10
MAX_REVIEW_ITEMS = 5


def render_pr_summary(number: int, data: Mapping[str, Any]) -> str:
    """Markdown summary of a summarizePR payload."""
    stats = data.get("stats", {})
    files = data.get("files", [])
    merged = " (merged)" if data.get("merged") else ""

    lines = [
        f"# Pull Request #{number} Summary",
        "",
        f"**Title:** {data.get('title')}",
        f"**Author:** {data.get('author')}",
        f"**Status:** {data.get('state')}{merged}",
        "",
    ]
    if data.get("body"):
        lines += ["## Description", data["body"], ""]

    lines += [
        "## Changes",
        f"- Files changed: {stats.get('files_changed', 0)}",
        f"- Additions: {stats.get('total_additions', 0)} line(s)",
        f"- Deletions: {stats.get('total_deletions', 0)} line(s)",
        f"- Total changes: {stats.get('total_changes', 0)} line(s)",
        f"- Commits: {stats.get('commit_count', 0)}",
        "",
        "## Files Changed",
    ]
    for file in files[:MAX_SUMMARY_FILES]:
        lines.append(f"- {file['filename']} (+{file['additions']}, -{file['deletions']})")
    if len(files) > MAX_SUMMARY_FILES:
        lines.append(f"- ... and {len(files) - MAX_SUMMARY_FILES} more files")

    return "\n".join(lines) + "\n"


def _file_section(title: str, files: list[Mapping[str, Any]]) -> list[str]:
    if not files:
        return []
    lines = ["", f"### {title}"]
    lines += [f"- {file['filename']}" for file in files[:MAX_REVIEW_ITEMS]]
    if len(files) > MAX_REVIEW_ITEMS:
        lines.append(f"- ... and {len(files) - MAX_REVIEW_ITEMS} more")
    return lines


def render_code_review(number: int, data: Mapping[str, Any]) -> str:
    """Markdown report of a reviewCode payload."""
    pr = data.get("pull_request", {})
    stats = data.get("stats", {})
    categorized = data.get("categorized_files", {})
    added = categorized.get("added", [])
    modified = categorized.get("modified", [])
    removed = categorized.get("removed", [])

    lines = [
        f"# Code Review: PR #{number}",
        "",
        f"**Title:** {pr.get('title')}",
        f"**Author:** {pr.get('author')}",
        f"**Branch:** {pr.get('head_ref')} → {pr.get('base_ref')}",
        "",
        "## Overview",
        f"- {stats.get('total_files', 0)} files changed",
        f"- {stats.get('total_additions', 0)} line additions",
        f"- {stats.get('total_deletions', 0)} line deletions",
        f"- {stats.get('commit_count', 0)} commits",
        "",
        "## Files by Type",
    ]
    for ext, info in data.get("changes_by_type", {}).items():
        lines.append(f"- {ext}: {info['count']} file(s)")

    lines += [
        "",
        "## Changes By Category",
        f"- Added: {len(added)} file(s)",
        f"- Modified: {len(modified)} file(s)",
        f"- Removed: {len(removed)} file(s)",
    ]
    lines += _file_section("Added Files", added)
    lines += _file_section("Modified Files", modified)

    lines += ["", "## Recent Commits"]
    for commit in data.get("commits", [])[:MAX_REVIEW_ITEMS]:
        subject = (commit.get("message") or "").split("\n")[0]
        lines.append(f"- {commit['sha']}: {subject}")

    return "\n".join(lines) + "\n"


class GitHubAgent(BaseAgent):
    """Agent specialized for pull requests and issues of one repository."""

    kind = "github"
    service_label = "GitHub"

    def build_patterns(self) -> list[PatternRule]:
        return [
            PatternRule.compile("pr_summary", PR_SUMMARY_PATTERN, self._summarize_pr, "summarize PR #{0}"),
            PatternRule.compile("code_review", CODE_REVIEW_PATTERN, self._review_code, "review PR #{0}"),
        ]

    async def _summarize_pr(self, match: re.Match[str]) -> QueryOutcome:
        number = int(match.group(1))
        key, result = await self.call_tool("github", "summarizePR", {"number": number})
        return QueryOutcome(response=render_pr_summary(number, result.data), tool_results={key: result})

    async def _review_code(self, match: re.Match[str]) -> QueryOutcome:
        number = int(match.group(1))
        key, result = await self.call_tool("github", "reviewCode", {"number": number})
        return QueryOutcome(response=render_code_review(number, result.data), tool_results={key: result})

    def repository(self) -> str | None:
        tool = self.registry.find_by_kind("github")
        if tool is None:
            return None
        defaults = tool.contextual_defaults()
        if not defaults.get("owner") or not defaults.get("repo"):
            return None
        return f"{defaults['owner']}/{defaults['repo']}"

    async def get_github_context(self) -> str:
        """Repository overview for the prompt; failures degrade to a notice."""
        if self.repository() is None:
            return "No GitHub repository configured."

        try:
            _, repo = await self.call_tool("github", "getRepository")
            _, issues = await self.call_tool("github", "listIssues", {"state": "open", "limit": 5})
            _, prs = await self.call_tool("github", "listPRs", {"state": "open", "limit": 5})

            info = repo.data
            lines = [
                f"Repository: {info.get('full_name')}",
                f"Description: {info.get('description') or 'None'}",
                f"Stars: {info.get('stars')}, Forks: {info.get('forks')}",
                "",
                f"Recent open issues ({len(issues.data)}):",
            ]
            lines += [f"- #{issue['number']}: {issue['title']}" for issue in issues.data]
            lines += ["", f"Recent open pull requests ({len(prs.data)}):"]
            lines += [f"- #{pr['number']}: {pr['title']}" for pr in prs.data]
        except Exception as e:
            self.logger.error("github_context_failed", error=str(e))
            return f"Failed to get GitHub context: {e}"

        return "\n".join(lines)

    async def build_prompt(self, query: str, context: Mapping[str, Any] | None = None) -> str:
        return GITHUB_AGENT_PROMPT.format(
            agent_name=self.name,
            repository=self.repository() or "(no repository configured)",
            service_context=await self.get_github_context(),
            tools_context=self.get_tools_context(),
            query=query,
        )
