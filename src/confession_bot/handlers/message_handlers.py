import logging

from aiogram import Bot, F, types

from ..common.env import EnvConfig
from ..common.notifications import try_reply
from ..common.texts import get_text
from ..database import Settings, peek_session
from ..moderation.continuations import continue_admin_session
from ..moderation.workflow import SubmissionOutcome, submit_confession
from .command_handlers import (
    handle_delete_data_command,
    handle_my_confessions_command,
    handle_set_channel_command,
    handle_start_command,
)
from .dp import dp

logger = logging.getLogger(__name__)

_REJECTION_TEXTS = {
    SubmissionOutcome.EMPTY: "empty_confession",
    SubmissionOutcome.RATE_LIMITED: "rate_limited",
    SubmissionOutcome.BLACKLISTED: "blacklisted",
}


def has_attachment(message: types.Message) -> bool:
    return any(
        (
            message.photo,
            message.video,
            message.document,
            message.animation,
            message.audio,
            message.voice,
            message.video_note,
        )
    )


@dp.message(F.chat.type == "private")
async def handle_private_message(
    message: types.Message, bot: Bot, settings: Settings, env: EnvConfig
) -> str:
    """
    Routes a private message.

    Precedence: an open admin session, then /start, /myconfessions,
    /deletedata, /setchannel (admins only), and finally a new confession.
    """
    if not message.from_user:
        return "message_no_user_info"

    user_id = message.from_user.id
    text = (message.text or "").strip()

    session = await peek_session(user_id)
    if session is not None:
        return await continue_admin_session(message, session, settings)

    if text.startswith("/start"):
        return await handle_start_command(message)

    if text == "/myconfessions":
        return await handle_my_confessions_command(message)

    if text == "/deletedata":
        return await handle_delete_data_command(message)

    if text.startswith("/setchannel") and settings.is_admin(user_id):
        parts = text.split()
        if len(parts) > 1:
            return await handle_set_channel_command(message, parts[1])

    return await handle_confession_submission(message, bot, settings, env)


async def handle_confession_submission(
    message: types.Message, bot: Bot, settings: Settings, env: EnvConfig
) -> str:
    content = message.text or message.caption or ""
    submission = await submit_confession(
        bot,
        settings,
        env,
        author_id=message.from_user.id,
        text=content,
        has_media=has_attachment(message),
    )

    if submission.outcome in _REJECTION_TEXTS:
        await try_reply(message, get_text(_REJECTION_TEXTS[submission.outcome]))
        return f"confession_{submission.outcome.value}"

    await try_reply(
        message, get_text("received", number=submission.confession.number)
    )
    return f"confession_{submission.outcome.value}"
