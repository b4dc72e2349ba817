"""
Environment configuration.

Values come from ``AGENTDOCK_*`` environment variables or a ``.env`` file.
Service credentials keep the names the services conventionally use
(``GITHUB_API_TOKEN``, ``SLACK_BOT_TOKEN``).
"""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class AgentDockSettings(BaseSettings):
    """Runtime settings with environment variable support."""

    config_dir: Path = Field(default=Path("configs"), description="Directory holding profile YAML files")
    profile: str = Field(default="dev", description="Configuration profile name")
    llm_config_path: Path | None = Field(
        default=None, description="LLM config YAML, overrides the profile's llm.config_path"
    )

    tool_timeout_seconds: float = Field(default=30.0, gt=0, description="Bound on one tool action")
    model_timeout_seconds: float = Field(default=60.0, gt=0, description="Bound on one model completion")

    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Render logs as JSON lines")

    github_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GITHUB_API_TOKEN", "AGENTDOCK_GITHUB_TOKEN"),
        repr=False,
    )
    slack_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SLACK_BOT_TOKEN", "AGENTDOCK_SLACK_TOKEN"),
        repr=False,
    )

    model_config = {
        "env_file": ".env",
        "env_prefix": "AGENTDOCK_",
        "case_sensitive": False,
        "extra": "ignore",
        "populate_by_name": True,
    }

    def profile_path(self, profile: str | None = None) -> Path:
        return self.config_dir / f"{profile or self.profile}.yaml"
