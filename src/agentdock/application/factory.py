"""
Application Layer - Agent Factory

Builds tools and agents from a YAML configuration profile
(``<config_dir>/<profile>.yaml``):

    llm:
      config_path: configs/llm_config.yaml
      model: main
    tools:
      github: {kind: github, name: github, repo_owner: acme, repo_name: api}
      slack:  {kind: slack, name: slack, default_channel: general}
    agents:
      - {name: GitHubAgent, kind: github, tools: [github]}
      - {name: Assistant, kind: generic, tools: [github, slack]}

Each tool is instantiated once and registered by reference with every
agent that lists it. Credentials come from AgentDockSettings, never from
the profile.
"""

from pathlib import Path
from typing import Any

import structlog
import yaml

from agentdock.application.settings import AgentDockSettings
from agentdock.core.domain.agent import BaseAgent
from agentdock.core.domain.errors import ConfigurationError
from agentdock.core.domain.github_agent import GitHubAgent
from agentdock.core.domain.slack_agent import SlackAgent
from agentdock.core.interfaces.llm import LLMProviderProtocol
from agentdock.infrastructure.tools.base_tool import BaseTool
from agentdock.infrastructure.tools.github_tool import GitHubTool
from agentdock.infrastructure.tools.slack_tool import SlackTool

AGENT_KINDS: dict[str, type[BaseAgent]] = {
    "generic": BaseAgent,
    "github": GitHubAgent,
    "slack": SlackAgent,
}

TOOL_KINDS: dict[str, type[BaseTool]] = {
    "github": GitHubTool,
    "slack": SlackTool,
}


class AgentFactory:
    """
    Factory for creating agents with dependency injection.

    Wires core domain agents with infrastructure adapters (LLM service,
    tool wrappers) based on configuration profiles.
    """

    def __init__(
        self,
        settings: AgentDockSettings | None = None,
        llm_provider: LLMProviderProtocol | None = None,
    ):
        """
        Initialize AgentFactory.

        Args:
            settings: Environment settings (loaded from the environment if None)
            llm_provider: Model-completion client to inject instead of
                          building an LLMService from the profile
        """
        self.settings = settings or AgentDockSettings()
        self._llm_provider = llm_provider
        self.logger = structlog.get_logger().bind(component="agent_factory")

    def load_profile(self, profile: str | None = None) -> dict[str, Any]:
        """
        Load a configuration profile from YAML.

        Raises:
            ConfigurationError: If the file does not exist or is not a mapping
        """
        profile_path = self.settings.profile_path(profile)
        if not profile_path.exists():
            self.logger.error(
                "profile_not_found",
                profile=profile or self.settings.profile,
                path=str(profile_path),
                hint="Ensure profile YAML exists in configs directory",
            )
            raise ConfigurationError(f"Profile not found: {profile_path}")

        with open(profile_path, encoding="utf-8") as f:
            config = yaml.safe_load(f)

        if not isinstance(config, dict):
            raise ConfigurationError(f"Profile is empty or invalid: {profile_path}")

        self.logger.debug("profile_loaded", path=str(profile_path), config_keys=list(config.keys()))
        return config

    def create_llm_provider(self, config: dict[str, Any]) -> LLMProviderProtocol:
        if self._llm_provider is not None:
            return self._llm_provider

        from agentdock.infrastructure.llm.llm_service import LLMService

        llm_config = config.get("llm") or {}
        config_path = self.settings.llm_config_path or Path(
            llm_config.get("config_path", "configs/llm_config.yaml")
        )
        self._llm_provider = LLMService(config_path=config_path)
        return self._llm_provider

    def create_tools(self, config: dict[str, Any]) -> dict[str, BaseTool]:
        """Instantiate every tool of the profile, keyed by its config key."""
        tools_config = config.get("tools") or {}
        if not isinstance(tools_config, dict):
            raise ConfigurationError("'tools' must be a mapping of tool key to tool config")

        tools: dict[str, BaseTool] = {}
        for key, tool_config in tools_config.items():
            tools[key] = self._instantiate_tool(key, tool_config or {})
        return tools

    def _instantiate_tool(self, key: str, tool_config: dict[str, Any]) -> BaseTool:
        kind = tool_config.get("kind", key)
        if kind not in TOOL_KINDS:
            raise ConfigurationError(f"Unknown tool kind '{kind}' for tool '{key}'")

        common = {
            "name": tool_config.get("name", key),
            "description": tool_config.get("description", ""),
            "request_timeout": float(tool_config.get("request_timeout", self.settings.tool_timeout_seconds)),
        }
        if kind == "github":
            tool: BaseTool = GitHubTool(
                repo_owner=tool_config.get("repo_owner"),
                repo_name=tool_config.get("repo_name"),
                token=self.settings.github_token,
                **common,
            )
        else:
            tool = SlackTool(
                token=self.settings.slack_token,
                default_channel=tool_config.get("default_channel", "general"),
                **common,
            )

        self.logger.info("tool_created", key=key, kind=kind, name=tool.name)
        return tool

    def create_agents(self, profile: str | None = None) -> dict[str, BaseAgent]:
        """
        Build every agent declared in the profile.

        Returns:
            Agents keyed by name, in declaration order

        Raises:
            ConfigurationError: For unknown agent kinds, unknown tool
                                references or duplicate agent names
        """
        config = self.load_profile(profile)
        llm_provider = self.create_llm_provider(config)
        tools = self.create_tools(config)
        default_model = (config.get("llm") or {}).get("model")

        agents_config = config.get("agents") or []
        if not isinstance(agents_config, list):
            raise ConfigurationError("'agents' must be a list of agent configs")

        agents: dict[str, BaseAgent] = {}
        for agent_config in agents_config:
            agent = self._instantiate_agent(agent_config, llm_provider, tools, default_model)
            if agent.name in agents:
                raise ConfigurationError(f"Duplicate agent name '{agent.name}'")
            agents[agent.name] = agent

        self.logger.info("agents_created", profile=profile or self.settings.profile, agents=list(agents))
        return agents

    def _instantiate_agent(
        self,
        agent_config: dict[str, Any],
        llm_provider: LLMProviderProtocol,
        tools: dict[str, BaseTool],
        default_model: str | None,
    ) -> BaseAgent:
        name = agent_config.get("name")
        if not name:
            raise ConfigurationError("Every agent needs a 'name'")

        kind = agent_config.get("kind", "generic")
        agent_class = AGENT_KINDS.get(kind)
        if agent_class is None:
            raise ConfigurationError(f"Unknown agent kind '{kind}' for agent '{name}'")

        kwargs: dict[str, Any] = {
            "description": agent_config.get("description", ""),
            "tool_timeout": self.settings.tool_timeout_seconds,
            "model_timeout": self.settings.model_timeout_seconds,
            "model_alias": agent_config.get("model", default_model),
        }
        if kind == "slack" and agent_config.get("default_channel"):
            kwargs["default_channel"] = agent_config["default_channel"]

        agent = agent_class(name, llm_provider, **kwargs)

        for tool_key in agent_config.get("tools") or []:
            if tool_key not in tools:
                raise ConfigurationError(f"Agent '{name}' references unknown tool '{tool_key}'")
            agent.register_tool(tool_key, tools[tool_key])

        return agent

    def create_agent(self, name: str, profile: str | None = None) -> BaseAgent:
        agents = self.create_agents(profile)
        if name not in agents:
            raise ConfigurationError(f"Agent '{name}' not found in profile. Available: {', '.join(agents)}")
        return agents[name]
