import logging

from aiogram import types

from ..common.mp import mp
from ..common.notifications import try_reply
from ..common.texts import get_text
from ..common.utils import truncate
from ..database import (
    CONFESSION_PREVIEW_CHARS,
    MY_CONFESSIONS_LIMIT,
    delete_user_confessions,
    get_user_confessions,
    update_settings,
)
from ..moderation.actions import start_keyboard

logger = logging.getLogger(__name__)


async def handle_start_command(message: types.Message) -> str:
    """Greets the user and offers the start menu"""
    await try_reply(message, get_text("start"), reply_markup=start_keyboard())
    mp.track(message.from_user.id, "command_start")
    return "command_start_sent"


async def handle_my_confessions_command(message: types.Message) -> str:
    """Lists the caller's own confessions, newest first"""
    user_id = message.from_user.id
    confessions = await get_user_confessions(user_id, limit=MY_CONFESSIONS_LIMIT)
    if not confessions:
        await try_reply(message, get_text("no_confessions"))
        return "command_myconfessions_empty"

    lines = [get_text("confessions_header")]
    for confession in confessions:
        lines.append(
            get_text(
                "confession_line",
                number=confession.number,
                status=confession.status.value,
                text=truncate(confession.text, CONFESSION_PREVIEW_CHARS),
            )
        )
    await try_reply(message, "\n".join(lines))
    return "command_myconfessions_sent"


async def handle_delete_data_command(message: types.Message) -> str:
    """Removes every confession authored by the caller"""
    user_id = message.from_user.id
    deleted = await delete_user_confessions(user_id)
    mp.track(user_id, "command_deletedata", {"deleted": deleted})
    await try_reply(message, get_text("data_deleted"))
    return "command_deletedata_done"


async def handle_set_channel_command(message: types.Message, channel: str) -> str:
    """Admin shortcut for changing the channel without opening a session"""
    await update_settings(channel_target=channel)
    logger.info(f"Admin {message.from_user.id} set channel to {channel}")
    await try_reply(message, get_text("channel_set", channel=channel))
    return "command_setchannel_done"
