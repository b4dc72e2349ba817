"""
Tool adapters.

Contains:
- BaseTool: catalog + name-dispatched executor
- GitHubTool: GitHub REST wrapper
- SlackTool: Slack Web API wrapper
"""

from agentdock.infrastructure.tools.base_tool import BaseTool
from agentdock.infrastructure.tools.github_tool import GitHubTool
from agentdock.infrastructure.tools.slack_tool import SlackTool

__all__ = ["BaseTool", "GitHubTool", "SlackTool"]
