"""Second step of the multi-step admin commands.

An admin menu button opens a session; the admin's next free-text message is
interpreted here according to the session's pending action. The session is
closed after that one message, whether the input was valid or not.
"""

import logging
from typing import Optional

from aiogram.types import Message

from ..common.notifications import try_reply
from ..common.texts import get_text
from ..database import (
    AdminSession,
    SessionAction,
    Settings,
    add_admin,
    add_blacklist_word,
    close_session,
    remove_admin,
    remove_blacklist_word,
    update_settings,
)

logger = logging.getLogger(__name__)


def parse_member_command(text: str) -> Optional[tuple[str, str]]:
    """Parses ``add <value>`` / ``remove <value>``; returns None for anything else."""
    parts = text.split()
    if len(parts) != 2 or parts[0] not in ("add", "remove"):
        return None
    return parts[0], parts[1]


def parse_channel(text: str) -> Optional[str]:
    parts = text.split()
    return parts[0] if len(parts) == 1 else None


async def _change_channel(text: str) -> str:
    channel = parse_channel(text)
    if channel is None:
        return get_text("channel_invalid")
    await update_settings(channel_target=channel)
    return get_text("channel_changed", channel=channel)


async def _manage_admins(text: str) -> str:
    command = parse_member_command(text)
    if command is None:
        return get_text("admins_invalid")
    verb, raw_id = command
    try:
        admin_id = int(raw_id)
    except ValueError:
        return get_text("admins_invalid")

    if verb == "add":
        await add_admin(admin_id)
        return get_text("admin_added", admin_id=admin_id)
    await remove_admin(admin_id)
    return get_text("admin_removed", admin_id=admin_id)


async def _edit_blacklist(text: str, settings: Settings) -> str:
    if text.strip() == "list":
        return get_text("blacklist_list", words=", ".join(sorted(settings.blacklist)))

    command = parse_member_command(text)
    if command is None:
        return get_text("blacklist_invalid")
    verb, word = command
    if verb == "add":
        word = await add_blacklist_word(word)
        return get_text("blacklist_added", word=word)
    word = await remove_blacklist_word(word)
    return get_text("blacklist_removed", word=word)


async def continue_admin_session(
    message: Message, session: AdminSession, settings: Settings
) -> str:
    """Apply the admin's reply to the open session and close it."""
    admin_id = session.admin_id
    text = (message.text or "").strip()

    if not settings.is_admin(admin_id):
        await close_session(admin_id)
        await try_reply(message, get_text("not_authorized"))
        return "session_not_authorized"

    try:
        if session.pending_action == SessionAction.CHANGE_CHANNEL:
            reply = await _change_channel(text)
        elif session.pending_action == SessionAction.MANAGE_ADMINS:
            reply = await _manage_admins(text)
        else:
            reply = await _edit_blacklist(text, settings)
    finally:
        await close_session(admin_id)

    logger.info(
        f"Admin {admin_id} completed session {session.pending_action.value}",
        extra={"input": text},
    )
    await try_reply(message, reply)
    return f"session_{session.pending_action.value}_done"
