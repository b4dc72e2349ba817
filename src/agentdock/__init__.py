"""agentdock - tool-using agents for GitHub and Slack."""

__version__ = "0.3.0"
