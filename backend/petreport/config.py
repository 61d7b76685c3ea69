"""
PetReport Backend — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   `Settings` is read by the app factory and the middleware chain;
       `GatewaySettings` is read by the client request gateway.
When:  Loaded once at module import time; validated before app starts.

The origin allow-list and the user-agent blocklist are exposed as frozensets.
Both are fixed for the lifetime of the process.
"""

from typing import FrozenSet

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Server settings loaded from environment variables.

    Attributes are grouped by the filter-chain stage that consumes them.
    """

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Origin / CORS ─────────────────────────────────────────────────────
    # Format: Comma-separated origins, compared by exact string equality
    allowed_origins: str = Field(
        default="http://13.203.226.60:4000,http://localhost:4000",
        description="Registered frontend origins echoed back in Access-Control-Allow-Origin",
    )

    @property
    def allowed_origins_set(self) -> FrozenSet[str]:
        return frozenset(
            origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()
        )

    # ── User-Agent Blocklist ──────────────────────────────────────────────
    # Format: '|'-separated exact user-agent strings (user agents contain commas)
    blocked_user_agents: str = Field(default="")

    @property
    def blocked_user_agents_set(self) -> FrozenSet[str]:
        return frozenset(
            agent.strip() for agent in self.blocked_user_agents.split("|") if agent.strip()
        )

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # Fixed window per client IP: at most N requests per window
    rate_limit_requests: int = Field(default=45, ge=1)
    rate_limit_window_ms: int = Field(default=1000, ge=1)

    # ── Body Parsing ──────────────────────────────────────────────────────
    # JSON and form bodies larger than this are rejected with 413
    max_body_bytes: int = Field(default=100 * 1024, ge=1)

    # ── Static Read Paths ─────────────────────────────────────────────────
    public_dir: str = Field(default="./public")
    uploads_dir: str = Field(default="./uploads")

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


class GatewaySettings(BaseSettings):
    """Client-side settings for the request gateway."""

    # Every gateway call is sent to api_url + relative path
    api_url: str = Field(default="http://localhost:5000")
    request_timeout: float = Field(default=30.0, gt=0)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


settings = Settings()
