"""Configuration for the skill routing service."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for runtime behavior."""

    service_name: str = "skillforge"
    api_version: str = "v1"
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"
    cors_allow_origins: list[str] = ["*"]

    # SKILL.md discovery; a missing directory simply loads nothing.
    skills_dir: str = "./skills"
    default_engine: str = "direct"
    include_builtin_skills: bool = True

    # Routing heuristics.
    idf_min_skills: int = 5
    fuzzy_prefix_min_length: int = 4
    name_weight: float = 20.0
    keyword_weight: float = 10.0
    tag_weight: float = 5.0

    # Delegated execution backends.
    backend_timeout_seconds: float = 300.0
    claude_code_command: str = "claude"
    codex_command: str = "codex"

    latency_warn_ms: float = 5000.0
    error_rate_warn_percent: float = 5.0

    model_config = SettingsConfigDict(
        env_prefix="SKILLFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
