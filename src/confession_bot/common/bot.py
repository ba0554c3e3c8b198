import os

from aiogram import Bot

from .utils import get_system_config

bot = Bot(token=os.getenv("BOT_TOKEN"))

# Chat that receives warnings and errors from the logging handler.
# Defaults to the fallback admin when config.yaml does not name one.
_ops_chat = get_system_config().get("ops_chat_id") or os.getenv("ADMIN_ID")
OPS_CHAT_ID = int(_ops_chat) if _ops_chat else None
