"""
LLM Provider Protocol

Interface of the model-completion collaborator consumed by agents.
"""

from typing import Any, Protocol


class LLMProviderProtocol(Protocol):
    """Text-generation service."""

    async def generate(
        self,
        prompt: str,
        context: dict[str, Any] | None = None,
        model: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """
        Generate a completion for a single prompt.

        Returns:
            Dict with ``success``; ``content`` holds the first completion
            choice on success, ``error`` the failure message otherwise.
        """
        ...
