import logging
import os
from functools import lru_cache
from typing import Any, Dict

import yaml
from aiogram.exceptions import (
    TelegramBadRequest,
    TelegramEntityTooLarge,
    TelegramForbiddenError,
    TelegramNetworkError,
    TelegramServerError,
)
from aiohttp import ClientError
from tenacity import (
    retry,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

# aiogram wraps aiohttp and timeout errors into TelegramNetworkError
RETRYABLE_ERRORS = (
    TelegramNetworkError,
    TelegramServerError,
    ClientError,
    OSError,
    TimeoutError,
)

# Chat not found, bot blocked, message not modified and the like
PERMANENT_ERRORS = (
    TelegramBadRequest,
    TelegramForbiddenError,
    TelegramEntityTooLarge,
)

retry_on_network_error = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
    retry=retry_if_exception_type(RETRYABLE_ERRORS)
    & retry_if_not_exception_type(PERMANENT_ERRORS),
    reraise=True,
    before_sleep=lambda retry_state: logger.info(
        f"Retryable error on attempt {retry_state.attempt_number}/3: "
        f"{retry_state.outcome.exception() if retry_state.outcome else 'Unknown error'}. Retrying..."
    ),
)


@lru_cache(maxsize=1)
def load_config() -> Dict[str, Any]:
    """
    Loads config.yaml (path overridable with CONFIG_PATH).

    A missing file yields an empty config so that every consumer falls back to
    its built-in defaults.
    """
    path = os.getenv("CONFIG_PATH", "config.yaml")
    try:
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.info(f"Config file {path} not found, using defaults")
        return {}
    logger.debug("Configuration loaded successfully")
    return config


def get_system_config() -> Dict[str, Any]:
    return load_config().get("system", {}) or {}


def get_limits_config() -> Dict[str, Any]:
    return load_config().get("limits", {}) or {}


def get_webhook_timeout() -> int:
    return int(get_system_config().get("webhook_timeout", 55))


def truncate(text: str | None, max_len: int) -> str:
    """Cuts text to at most max_len characters."""
    if not text:
        return ""
    return text[:max_len]


def get_dotted_path(json: dict, path: str):
    """
    Returns the value at a dotted path, or None when any step is missing.

    get_dotted_path({"message": {"from": {"id": 1}}}, "message.from.id") == 1
    """
    current: Any = json
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current
