"""Core configuration for the orchestrator."""

import logging
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ux_process_orchestrator.orchestrator.logging import configure_logging


class LLMConfig(BaseSettings):
    """Configuration for LLM providers."""

    provider: Literal["openai", "llama"] = Field(
        default="openai",
        description="LLM provider to use",
    )

    # OpenAI settings
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4",
        description="OpenAI model to use",
    )
    openai_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Temperature for OpenAI model",
    )

    # LLaMA settings
    llama_model_path: Path | None = Field(
        default=None,
        description="Path to LLaMA model file",
    )
    llama_n_ctx: int = Field(
        default=4096,
        gt=0,
        description="Context window size for LLaMA",
    )
    llama_n_threads: int | None = Field(
        default=None,
        description="Number of threads for LLaMA (None = auto)",
    )

    max_tokens: int | None = Field(
        default=None,
        gt=0,
        description="Completion token limit per agent task (None = provider default)",
    )

    model_config = SettingsConfigDict(
        env_prefix="ORCHESTRATOR_LLM_",
        env_file=".env",
        extra="ignore",
    )


class StateConfig(BaseSettings):
    """Configuration for run state persistence."""

    storage_path: Path = Field(
        default=Path(".state"),
        description="Directory holding per-run records and task input/result files",
    )

    model_config = SettingsConfigDict(
        env_prefix="ORCHESTRATOR_STATE_",
        env_file=".env",
        extra="ignore",
    )


class PipelineConfig(BaseSettings):
    """Configuration for pipeline execution."""

    quality_threshold: float = Field(
        default=80.0,
        ge=0.0,
        le=100.0,
        description="Score at or above which a process reports its quality as met",
    )
    max_parallel_tasks: int | None = Field(
        default=None,
        gt=0,
        description="Worker cap for parallel groups (None = one worker per member)",
    )
    checkpoint_mode: Literal["console", "auto", "queue"] = Field(
        default="console",
        description="How checkpoints are resolved when no gate is supplied",
    )

    model_config = SettingsConfigDict(
        env_prefix="ORCHESTRATOR_PIPELINE_",
        env_file=".env",
        extra="ignore",
    )


class NotifierConfig(BaseSettings):
    """Configuration for breakpoint notifications."""

    telegram_token: str | None = Field(
        default=None,
        description="Telegram bot token",
    )
    telegram_chat_id: str | None = Field(
        default=None,
        description="Telegram chat that receives breakpoint notifications",
    )
    telegram_api_base: str = Field(
        default="https://api.telegram.org",
        description="Telegram Bot API base URL",
    )
    telegram_poll: bool = Field(
        default=True,
        description="Poll the bot for replies that release breakpoints (server only)",
    )
    telegram_poll_interval: float = Field(
        default=5.0,
        gt=0,
        description="Seconds between Telegram update polls",
    )

    model_config = SettingsConfigDict(
        env_prefix="ORCHESTRATOR_NOTIFY_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def telegram_enabled(self) -> bool:
        return bool((self.telegram_token or "").strip() and (self.telegram_chat_id or "").strip())


class ServerConfig(BaseSettings):
    """Configuration for the REST server."""

    # Dev-friendly CORS. Override via ORCHESTRATOR_SERVER_CORS_ORIGINS=...
    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        description="Comma-separated list of allowed CORS origins.",
    )

    model_config = SettingsConfigDict(
        env_prefix="ORCHESTRATOR_SERVER_",
        env_file=".env",
        extra="ignore",
    )

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


class OrchestratorConfig(BaseSettings):
    """Main configuration for the orchestrator."""

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    llm: LLMConfig = Field(
        default_factory=LLMConfig,
        description="LLM configuration",
    )
    state: StateConfig = Field(
        default_factory=StateConfig,
        description="State configuration",
    )
    pipeline: PipelineConfig = Field(
        default_factory=PipelineConfig,
        description="Pipeline execution configuration",
    )
    notify: NotifierConfig = Field(
        default_factory=NotifierConfig,
        description="Breakpoint notification configuration",
    )
    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="REST server configuration",
    )

    model_config = SettingsConfigDict(
        env_prefix="ORCHESTRATOR_",
        env_file=".env",
        extra="ignore",
    )

    def setup_logging(self) -> None:
        """Configure structured logging based on settings."""
        configure_logging(self.log_level)

        if self.debug:
            logging.getLogger("ux_process_orchestrator").setLevel(logging.DEBUG)
