import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

logger = logging.getLogger(__name__)

# Variables without which the process must not start
REQUIRED_VARS = ("BOT_TOKEN", "PG_HOST", "PG_USER", "PG_PASSWORD")


class ConfigurationError(RuntimeError):
    """Raised at startup when the environment is incomplete or malformed."""


@dataclass(frozen=True, slots=True)
class EnvConfig:
    bot_token: str
    pg_host: str
    pg_port: int
    pg_user: str
    pg_password: str
    pg_db: str
    default_channel: Optional[str] = None
    fallback_admin_id: Optional[int] = None
    webhook_url: Optional[str] = None


def load_env_config() -> EnvConfig:
    """
    Reads process configuration from environment variables.

    Raises:
        ConfigurationError: if a required variable is missing or an optional one
            cannot be parsed.
    """
    missing = [name for name in REQUIRED_VARS if not os.getenv(name)]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    admin_raw = os.getenv("ADMIN_ID", "").strip()
    try:
        fallback_admin_id = int(admin_raw) if admin_raw else None
    except ValueError as e:
        raise ConfigurationError(f"ADMIN_ID must be an integer, got {admin_raw!r}") from e

    try:
        pg_port = int(os.getenv("PG_PORT", "5432"))
    except ValueError as e:
        raise ConfigurationError("PG_PORT must be an integer") from e

    return EnvConfig(
        bot_token=os.environ["BOT_TOKEN"],
        pg_host=os.environ["PG_HOST"],
        pg_port=pg_port,
        pg_user=os.environ["PG_USER"],
        pg_password=os.environ["PG_PASSWORD"],
        pg_db=os.getenv("PG_DB", "confession_bot"),
        default_channel=os.getenv("CHANNEL_ID") or None,
        fallback_admin_id=fallback_admin_id,
        webhook_url=os.getenv("WEBHOOK_URL") or None,
    )


@lru_cache(maxsize=1)
def get_env_config() -> EnvConfig:
    """Cached variant used by request handling after startup validation."""
    return load_env_config()
