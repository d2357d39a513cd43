"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_IGNORE_PATTERNS: List[str] = [".git", "node_modules", "target", "__pycache__", ".venv"]

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: Literal["openai", "anthropic"] = Field(
        default="openai", alias="INDIEFUTURE_LLM_PROVIDER", description="LLM provider used for planning"
    )
    model: str = Field(default="gpt-4o", alias="INDIEFUTURE_LLM_MODEL", description="Model name for the provider")
    temperature: Optional[float] = Field(
        default=None, alias="INDIEFUTURE_LLM_TEMPERATURE", description="Sampling temperature (provider default if unset)"
    )
    max_tokens: int = Field(default=4096, alias="INDIEFUTURE_LLM_MAX_TOKENS", description="Maximum response tokens")
    timeout_seconds: float = Field(
        default=30.0, alias="INDIEFUTURE_LLM_TIMEOUT_SECONDS", description="Per-request timeout for LLM calls"
    )
    openai_api_key: Optional[SecretStr] = Field(
        default=None, alias="OPENAI_API_KEY", description="OpenAI API key for authentication"
    )
    anthropic_api_key: Optional[SecretStr] = Field(
        default=None, alias="ANTHROPIC_API_KEY", description="Anthropic API key for authentication"
    )

    model_config = {"populate_by_name": True}

    def api_key(self) -> Optional[str]:
        """Return the API key of the selected provider, if any."""
        secret = self.openai_api_key if self.provider == "openai" else self.anthropic_api_key
        return secret.get_secret_value() if secret else None


class EngineConfig(BaseModel):
    """Subtask engine configuration."""

    max_revisits: int = Field(
        default=2,
        ge=0,
        alias="INDIEFUTURE_MAX_REVISITS",
        description="How many times one work item may be re-queued behind deeper work",
    )
    recursion_limit: int = Field(
        default=10_000, gt=0, alias="INDIEFUTURE_RECURSION_LIMIT", description="Maximum graph steps per drain"
    )
    capability_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        alias="INDIEFUTURE_CAPABILITY_TIMEOUT_SECONDS",
        description="Optional timeout around each capability dispatch",
    )

    model_config = {"populate_by_name": True}


class ApprovalConfig(BaseModel):
    """Confirmation gate configuration."""

    auto_approve: bool = Field(
        default=False, alias="INDIEFUTURE_AUTO_APPROVE", description="Approve every sensitive operation without asking"
    )
    approve_when_non_interactive: bool = Field(
        default=True,
        alias="INDIEFUTURE_APPROVE_WHEN_NON_INTERACTIVE",
        description="Approve sensitive operations when no terminal is attached (declined otherwise)",
    )

    model_config = {"populate_by_name": True}


class ToolConfig(BaseModel):
    """File system and shell tool configuration."""

    workspace_root: str = Field(
        default=".", alias="INDIEFUTURE_WORKSPACE_ROOT", description="Directory relative paths are resolved against"
    )
    shell_timeout_seconds: float = Field(
        default=30.0, gt=0, alias="INDIEFUTURE_SHELL_TIMEOUT_SECONDS", description="Shell command timeout"
    )
    max_read_lines: int = Field(
        default=2000, gt=0, alias="INDIEFUTURE_MAX_READ_LINES", description="Maximum lines returned by a file read"
    )
    max_search_results: int = Field(
        default=100, gt=0, alias="INDIEFUTURE_MAX_SEARCH_RESULTS", description="Maximum search hits recorded"
    )
    ignore_patterns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS),
        alias="INDIEFUTURE_IGNORE_PATTERNS",
        description="Path segments skipped by listing and search tools",
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="INDIEFUTURE_LOG_LEVEL",
    )
    log_format: Literal["simple", "detailed", "json"] = Field(
        default="simple", description="Log line format", alias="INDIEFUTURE_LOG_FORMAT"
    )
    log_to_file: bool = Field(default=False, description="Also write logs to a file", alias="INDIEFUTURE_LOG_TO_FILE")
    log_file_dir: str = Field(default="logs", description="Directory for log files", alias="INDIEFUTURE_LOG_FILE_DIR")

    # =====================================================================
    # LLM Configuration
    # =====================================================================
    llm_provider: Literal["openai", "anthropic"] = Field(default="openai", alias="INDIEFUTURE_LLM_PROVIDER")
    llm_model: str = Field(default="gpt-4o", alias="INDIEFUTURE_LLM_MODEL")
    llm_temperature: Optional[float] = Field(default=None, alias="INDIEFUTURE_LLM_TEMPERATURE")
    llm_max_tokens: int = Field(default=4096, alias="INDIEFUTURE_LLM_MAX_TOKENS")
    llm_timeout_seconds: float = Field(default=30.0, alias="INDIEFUTURE_LLM_TIMEOUT_SECONDS")
    openai_api_key: Optional[SecretStr] = Field(default=None, alias="OPENAI_API_KEY")
    anthropic_api_key: Optional[SecretStr] = Field(default=None, alias="ANTHROPIC_API_KEY")

    # =====================================================================
    # Engine Configuration
    # =====================================================================
    max_revisits: int = Field(default=2, ge=0, alias="INDIEFUTURE_MAX_REVISITS")
    recursion_limit: int = Field(default=10_000, gt=0, alias="INDIEFUTURE_RECURSION_LIMIT")
    capability_timeout_seconds: Optional[float] = Field(default=None, alias="INDIEFUTURE_CAPABILITY_TIMEOUT_SECONDS")

    # =====================================================================
    # Approval Configuration
    # =====================================================================
    auto_approve: bool = Field(default=False, alias="INDIEFUTURE_AUTO_APPROVE")
    approve_when_non_interactive: bool = Field(default=True, alias="INDIEFUTURE_APPROVE_WHEN_NON_INTERACTIVE")

    # =====================================================================
    # Tool Configuration
    # =====================================================================
    workspace_root: str = Field(default=".", alias="INDIEFUTURE_WORKSPACE_ROOT")
    shell_timeout_seconds: float = Field(default=30.0, alias="INDIEFUTURE_SHELL_TIMEOUT_SECONDS")
    max_read_lines: int = Field(default=2000, alias="INDIEFUTURE_MAX_READ_LINES")
    max_search_results: int = Field(default=100, alias="INDIEFUTURE_MAX_SEARCH_RESULTS")
    ignore_patterns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS), alias="INDIEFUTURE_IGNORE_PATTERNS"
    )

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def llm(self) -> LLMConfig:
        """Get LLM provider configuration."""
        return LLMConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def engine(self) -> EngineConfig:
        """Get subtask engine configuration."""
        return EngineConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def approval(self) -> ApprovalConfig:
        """Get confirmation gate configuration."""
        return ApprovalConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def tools(self) -> ToolConfig:
        """Get tool configuration."""
        return ToolConfig.model_validate(self.model_dump(by_alias=True))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    return Settings()
