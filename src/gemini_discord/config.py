"""Runtime configuration read from the environment."""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_WIKI_API_URL = "https://ff14.huijiwiki.com/api.php"


def _env(environ: Mapping[str, str], *names: str, default: str = "") -> str:
    for name in names:
        value = environ.get(name)
        if value and value.strip():
            return value.strip()
    return default


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = _env(environ, name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer, using {default}")
        return default


def _env_id(environ: Mapping[str, str], name: str) -> str:
    raw = _env(environ, name)
    if not raw:
        return ""
    try:
        return str(int(raw))
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a Discord id, ignoring it")
        return ""


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = _env(environ, name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a number, using {default}")
        return default


@dataclass(frozen=True)
class Settings:
    """Everything the bot reads from the environment."""

    discord_token: str = ""
    client_id: str = ""
    guild_id: str = ""
    ai_channel_id: str = ""
    daily_limit: int = 20
    gemini_api_key: str = ""
    gemini_model: str = ""
    gemini_timeout: float = 20.0
    serper_api_key: str = ""
    weather_provider: str = "openmeteo"
    default_city: str = "台北"
    wiki_api_url: str = DEFAULT_WIKI_API_URL
    http_timeout: float = 8.0
    leave_channel_id: str = ""
    report_channel_id: str = ""
    persona_parent_id: str = ""
    persona_sibling_id: str = ""
    port: int = 3000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables (defaults to os.environ)."""
        env = os.environ if environ is None else environ
        return cls(
            discord_token=_env(env, "DISCORD_TOKEN"),
            client_id=_env(env, "CLIENT_ID"),
            guild_id=_env_id(env, "GUILD_ID"),
            ai_channel_id=_env(env, "AI_CHANNEL_ID"),
            daily_limit=_env_int(env, "AI_DAILY_LIMIT_PER_USER", 20),
            gemini_api_key=_env(env, "GEMINI_API_KEY", "GEMINI_KEY"),
            gemini_model=_env(env, "GEMINI_MODEL"),
            # GEMINI_MODEL_TIMEOUT is in milliseconds
            gemini_timeout=_env_float(env, "GEMINI_MODEL_TIMEOUT", 20000) / 1000,
            serper_api_key=_env(env, "SERPER_API_KEY"),
            weather_provider=_env(env, "WEATHER_PROVIDER", default="openmeteo").lower(),
            default_city=_env(env, "DEFAULT_CITY", default="台北"),
            wiki_api_url=_env(env, "WIKI_API_URL", default=DEFAULT_WIKI_API_URL),
            http_timeout=_env_float(env, "HTTP_TIMEOUT_SECONDS", 8.0),
            leave_channel_id=_env(env, "LEAVE_CHANNEL_ID"),
            report_channel_id=_env(env, "REPORT_CHANNEL_ID"),
            persona_parent_id=_env(env, "AI_PERSONA_PARENT_ID"),
            persona_sibling_id=_env(env, "AI_PERSONA_SIBLING_ID"),
            port=_env_int(env, "PORT", 3000),
            log_level=_env(env, "LOG_LEVEL", default="INFO").upper(),
        )

    def log_warnings(self) -> None:
        """Log one warning per feature that is switched off by missing config."""
        if not self.discord_token:
            logger.warning("DISCORD_TOKEN is missing; the bot cannot log in")
        if not self.ai_channel_id:
            logger.warning("AI_CHANNEL_ID is not set; the AI chat feature is disabled")
            return
        if not self.gemini_api_key:
            logger.warning("AI_CHANNEL_ID is set but GEMINI_API_KEY is missing")
        if not self.serper_api_key:
            logger.warning(
                "AI_CHANNEL_ID is set but SERPER_API_KEY is missing; search-grounded answers are off"
            )
