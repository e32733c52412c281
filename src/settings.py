# src/settings.py
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_CORS_ORIGINS = ["http://localhost:8501", "http://127.0.0.1:8501"]


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


@dataclass
class SupabaseConfig:
    url: Optional[str] = None
    key: Optional[str] = None

    @property
    def configured(self) -> bool:
        return bool(self.url and self.key)


@dataclass
class AIConfig:
    """Settings for the motivational-message client"""
    openai_api_key: Optional[str] = None
    model: str = "gpt-4o-mini"
    max_tokens: int = 120
    max_attempts: int = 3
    request_timeout: float = 30.0
    retry_delay: float = 1.0

    @property
    def enabled(self) -> bool:
        return bool(self.openai_api_key)


@dataclass
class AppConfig:
    supabase: SupabaseConfig = field(default_factory=SupabaseConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    log_file: str = "logs/habitual.log"
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


def load_config() -> AppConfig:
    """Read configuration from the environment and an optional .env file."""
    load_dotenv()

    max_attempts = _env_number("AI_MAX_ATTEMPTS", 3, int)
    if max_attempts < 1:
        raise ConfigError("AI_MAX_ATTEMPTS must be at least 1")

    origins = os.getenv("CORS_ORIGINS")
    cors_origins = [o.strip() for o in origins.split(",") if o.strip()] if origins else list(DEFAULT_CORS_ORIGINS)

    return AppConfig(
        supabase=SupabaseConfig(
            url=os.getenv("SUPABASE_URL"),
            key=os.getenv("SUPABASE_KEY"),
        ),
        ai=AIConfig(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            max_tokens=_env_number("OPENAI_MAX_TOKENS", 120, int),
            max_attempts=max_attempts,
            request_timeout=_env_number("AI_REQUEST_TIMEOUT", 30.0, float),
            retry_delay=_env_number("AI_RETRY_DELAY", 1.0, float),
        ),
        log_file=os.getenv("LOG_FILE", "logs/habitual.log"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=cors_origins,
    )
