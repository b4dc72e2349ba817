"""
LLM Service

Model-completion client backed by LiteLLM. Agents only depend on
``generate(prompt, model=None)``; model aliases, per-model parameters and
retries are driven by a YAML file:

    default_model: main
    models:
      main: gpt-4o-mini
    default_params: {temperature: 0.2, max_tokens: 2000}
    model_params:
      gpt-4o: {temperature: 0.1}
    retry_policy:
      max_attempts: 3
      backoff_multiplier: 2.0
      timeout: 30
      retry_on_errors: [RateLimitError, Timeout]
    providers:
      openai: {api_key_env: OPENAI_API_KEY}

Failures are reported in the returned dict (``success: False``), never
raised; the agent decides what a failed completion means.
"""

import asyncio
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import litellm
import structlog
import yaml

from agentdock.core.domain.errors import ConfigurationError

ALLOWED_PARAMS = ("temperature", "top_p", "max_tokens", "frequency_penalty", "presence_penalty", "stop")


@dataclass
class RetryPolicy:
    max_attempts: int = 3
    backoff_multiplier: float = 2.0
    timeout: int = 30
    retry_on_errors: list[str] = field(default_factory=list)

    def is_retryable(self, error: Exception) -> bool:
        """True when the error's class name or message names a listed error."""
        text = f"{type(error).__name__} {error}"
        return any(name in text for name in self.retry_on_errors)

    def backoff(self, attempt: int) -> float:
        """Seconds to wait after the zero-based ``attempt`` failed."""
        return self.backoff_multiplier**attempt


@dataclass
class LLMConfig:
    """Parsed LLM config file."""

    models: dict[str, str]
    default_model: str = "main"
    default_params: dict[str, Any] = field(default_factory=dict)
    model_params: dict[str, dict[str, Any]] = field(default_factory=dict)
    system_prompt: str | None = None
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    logging: dict[str, Any] = field(default_factory=dict)
    providers: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, path: Path) -> "LLMConfig":
        if not path.exists():
            raise ConfigurationError(f"LLM config not found: {path}")

        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config file is empty or invalid: {path}")
        if not raw.get("models"):
            raise ConfigurationError("Config must define at least one model in 'models' section")

        retry = raw.get("retry_policy") or {}
        return cls(
            models=dict(raw["models"]),
            default_model=raw.get("default_model", "main"),
            default_params=raw.get("default_params") or {},
            model_params=raw.get("model_params") or {},
            system_prompt=raw.get("system_prompt"),
            retry_policy=RetryPolicy(
                max_attempts=retry.get("max_attempts", 3),
                backoff_multiplier=retry.get("backoff_multiplier", 2.0),
                timeout=retry.get("timeout", 30),
                retry_on_errors=list(retry.get("retry_on_errors") or []),
            ),
            logging=raw.get("logging") or {},
            providers=raw.get("providers") or {},
        )


def _token_usage(response: Any) -> dict[str, int]:
    usage = getattr(response, "usage", None) or {}
    if isinstance(usage, dict):
        return usage
    return {
        key: getattr(usage, key, 0)
        for key in ("total_tokens", "prompt_tokens", "completion_tokens")
    }


class LLMService:
    """LiteLLM completion client with alias resolution and retries."""

    def __init__(self, config_path: str | Path = "configs/llm_config.yaml"):
        """
        Args:
            config_path: Path to the LLM config YAML

        Raises:
            ConfigurationError: If the file is missing, empty or defines no models
        """
        self.config = LLMConfig.from_yaml(Path(config_path))
        self.logger = structlog.get_logger().bind(component="llm_service")

        key_env = self.config.providers.get("openai", {}).get("api_key_env", "OPENAI_API_KEY")
        if not os.getenv(key_env):
            self.logger.warning("llm_api_key_missing", env_var=key_env)

        self.logger.info("llm_service_ready", default_model=self.default_model, aliases=list(self.models))

    @property
    def default_model(self) -> str:
        return self.config.default_model

    @property
    def models(self) -> dict[str, str]:
        return self.config.models

    @property
    def system_prompt(self) -> str | None:
        return self.config.system_prompt

    @property
    def retry_policy(self) -> RetryPolicy:
        return self.config.retry_policy

    def resolve_model(self, alias: str | None) -> str:
        """Model name for an alias; unknown aliases are used as model names."""
        alias = alias or self.default_model
        return self.models.get(alias, alias)

    def model_parameters(self, model: str) -> dict[str, Any]:
        """Parameters of the exact model, else of the first matching model family, else the defaults."""
        params = self.config.model_params.get(model)
        if params is None:
            params = next(
                (p for family, p in self.config.model_params.items() if model.startswith(family)),
                self.config.default_params,
            )
        return dict(params)

    async def _attempt(self, model: str, messages: list[dict[str, Any]], params: dict[str, Any]) -> dict[str, Any]:
        started = time.monotonic()
        response = await litellm.acompletion(
            model=model,
            messages=messages,
            timeout=self.retry_policy.timeout,
            **params,
        )
        usage = _token_usage(response)
        latency_ms = int((time.monotonic() - started) * 1000)

        if self.config.logging.get("log_token_usage", True):
            self.logger.info(
                "model_call_succeeded",
                model=model,
                tokens=usage.get("total_tokens", 0),
                latency_ms=latency_ms,
            )
        return {
            "success": True,
            "content": response.choices[0].message.content,
            "usage": usage,
            "model": model,
            "latency_ms": latency_ms,
        }

    async def complete(self, messages: list[dict[str, Any]], model: str | None = None, **kwargs: Any) -> dict[str, Any]:
        """
        Run a chat completion, retrying errors listed in the retry policy.

        Keyword arguments override the configured model parameters; only
        sampling parameters LiteLLM accepts for every provider are passed.

        Returns:
            ``{success, content, usage, model, latency_ms}`` or
            ``{success: False, error, error_type, model}``
        """
        name = self.resolve_model(model)
        merged = {**self.model_parameters(name), **kwargs}
        params = {key: value for key, value in merged.items() if key in ALLOWED_PARAMS}
        policy = self.retry_policy

        attempt = 0
        while True:
            self.logger.debug("model_call_started", model=name, attempt=attempt + 1, messages=len(messages))
            try:
                return await self._attempt(name, messages, params)
            except Exception as e:
                if attempt + 1 >= policy.max_attempts or not policy.is_retryable(e):
                    self.logger.error(
                        "model_call_failed",
                        model=name,
                        error_type=type(e).__name__,
                        error=str(e)[:200],
                        attempts=attempt + 1,
                    )
                    return {"success": False, "error": str(e), "error_type": type(e).__name__, "model": name}

                delay = policy.backoff(attempt)
                self.logger.warning(
                    "model_call_retrying", model=name, error_type=type(e).__name__, delay_seconds=delay
                )
                await asyncio.sleep(delay)
                attempt += 1

    async def generate(
        self,
        prompt: str,
        context: dict[str, Any] | None = None,
        model: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """
        Complete a single user prompt, preceded by the configured system prompt.

        ``context`` is rendered as YAML above the prompt. On success the
        completion text is also available as ``generated_text``.
        """
        if context:
            prompt = f"Context:\n{yaml.safe_dump(context, default_flow_style=False)}\nTask: {prompt}\n"

        messages = [{"role": "user", "content": prompt}]
        if self.system_prompt:
            messages.insert(0, {"role": "system", "content": self.system_prompt})

        result = await self.complete(messages, model=model, **kwargs)
        if result["success"]:
            result["generated_text"] = result["content"]
        return result
