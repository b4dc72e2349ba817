"""
LLM adapters.

Contains:
- LLMService: LiteLLM-backed model-completion client
"""

from agentdock.infrastructure.llm.llm_service import LLMService

__all__ = ["LLMService"]
