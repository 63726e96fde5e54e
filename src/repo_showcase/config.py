"""Configuration with 4-layer resolution: defaults -> YAML -> env -> CLI.

Uses pydantic-settings with YamlConfigSettingsSource for layered configuration.
Supports ``.env`` file loading, ``REPO_SHOWCASE_`` prefixed env vars, and
nested delimiter ``__`` for overriding sub-model fields, e.g.
``REPO_SHOWCASE_GITHUB__TOKEN``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, Field, SecretStr, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from repo_showcase.cache import DEFAULT_TTL_SECONDS, RepositoryCache
from repo_showcase.github import (
    DEFAULT_API_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    GitHubClient,
)
from repo_showcase.scheduler import RefreshScheduler
from repo_showcase.selection import (
    DEFAULT_FEATURED_NAMES,
    DEFAULT_MAX_RESULTS,
    DEFAULT_MIN_RESULTS,
    DEFAULT_RECENT_DAYS,
)

# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class GitHubSettings(BaseModel):
    """Upstream GitHub API configuration."""

    account: str = Field(default="lewisgathaiya", min_length=1)
    token: SecretStr | None = Field(
        default=None, description="Optional token for higher rate limits."
    )
    api_base_url: str = DEFAULT_API_BASE_URL
    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS, gt=0.0, description="Request timeout."
    )


class CacheSettings(BaseModel):
    """In-process cache configuration."""

    ttl_seconds: float = Field(default=DEFAULT_TTL_SECONDS, gt=0.0)


class SelectionSettings(BaseModel):
    """Which repositories are surfaced on the projects page."""

    featured_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FEATURED_NAMES)
    )
    max_results: int = Field(default=DEFAULT_MAX_RESULTS, ge=1, le=100)
    min_results: int = Field(
        default=DEFAULT_MIN_RESULTS,
        ge=1,
        le=100,
        description="Originals kept when no repository passes the filters.",
    )
    recent_days: int = Field(default=DEFAULT_RECENT_DAYS, ge=0)


class SchedulerSettings(BaseModel):
    """Periodic cache warm-up configuration."""

    enabled: bool = True
    interval_seconds: float = Field(default=2 * 60 * 60, gt=0.0)
    run_on_startup: bool = True


class APISettings(BaseModel):
    """FastAPI server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    rate_limit_requests: int = Field(default=30, ge=1, le=10_000)
    rate_limit_window_seconds: float = Field(default=15 * 60, gt=0.0)
    expose_cache_stats: bool = Field(
        default=False, description="Serve /api/github/cache/stats."
    )


class LoggingSettings(BaseModel):
    """Logging / observability configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json"] = "console"
    file: Path | None = None


# ---------------------------------------------------------------------------
# Main Settings (4-layer resolution)
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Top-level application settings.

    Resolution order (last wins):
        1. Field defaults (defined above)
        2. YAML config file (``config.yaml`` or ``--config`` path)
        3. Environment variables (prefixed ``REPO_SHOWCASE_``)
        4. CLI overrides (applied programmatically after loading)
    """

    model_config = SettingsConfigDict(
        env_prefix="REPO_SHOWCASE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file="config.yaml",
        yaml_file_encoding="utf-8",
        extra="ignore",
    )

    _config_path_override: ClassVar[Path | None] = None

    github: GitHubSettings = Field(default_factory=GitHubSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    selection: SelectionSettings = Field(default_factory=SelectionSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    api: APISettings = Field(default_factory=APISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings source priority.

        Resolution order (first = highest priority):
            init_settings (CLI) > env_settings > dotenv (.env) > yaml > defaults
        """
        yaml_file = cls._config_path_override or settings_cls.model_config.get(
            "yaml_file", "config.yaml"
        )
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file),
        )

    @classmethod
    def load(cls, config_path: Path | None = None, **overrides: Any) -> Settings:
        """Load settings with optional config path and CLI overrides.

        Args:
            config_path: Optional path to a YAML config file.
            **overrides: Key-value CLI overrides applied at highest priority.

        Returns:
            Fully-resolved Settings instance.

        Raises:
            ValidationError: If any setting value fails validation.
        """
        cls._config_path_override = config_path
        try:
            return cls(**overrides)
        finally:
            cls._config_path_override = None


def format_validation_error(exc: ValidationError) -> str:
    """Format a Pydantic ValidationError into a user-friendly message.

    Args:
        exc: The validation error to format.

    Returns:
        A multi-line string with each error on its own line.
    """
    lines: list[str] = []
    for error in exc.errors():
        loc = " -> ".join(str(part) for part in error["loc"])
        msg = error["msg"]
        raw_input = error.get("input")
        if raw_input is not None:
            lines.append(f"  {loc}: {msg} (got {raw_input!r})")
        else:
            lines.append(f"  {loc}: {msg}")
    return "Configuration error:\n" + "\n".join(lines)


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def build_client(settings: Settings) -> GitHubClient:
    token = settings.github.token
    return GitHubClient(
        token.get_secret_value() if token else None,
        base_url=settings.github.api_base_url,
        user_agent=settings.github.user_agent,
        timeout=settings.github.timeout_seconds,
    )


def build_cache(settings: Settings, client: GitHubClient | None = None) -> RepositoryCache:
    """Create a ``RepositoryCache`` configured from ``settings``."""
    selection = settings.selection
    return RepositoryCache(
        client or build_client(settings),
        ttl_seconds=settings.cache.ttl_seconds,
        featured_names=selection.featured_names,
        max_results=selection.max_results,
        min_results=selection.min_results,
        recent_days=selection.recent_days,
    )


def build_scheduler(settings: Settings, cache: RepositoryCache) -> RefreshScheduler:
    return RefreshScheduler(
        cache,
        settings.github.account,
        interval_seconds=settings.scheduler.interval_seconds,
        run_on_startup=settings.scheduler.run_on_startup,
    )
