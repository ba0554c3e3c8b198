import logging
from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from ..common.env import get_env_config
from ..database import get_settings

logger = logging.getLogger(__name__)


class SettingsMiddleware(BaseMiddleware):
    """Loads the settings aggregate and environment config for each update."""

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        data["settings"] = await get_settings()
        data["env"] = get_env_config()
        return await handler(event, data)
