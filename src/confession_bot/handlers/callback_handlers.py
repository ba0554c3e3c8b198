import logging
from typing import Optional

from aiogram import Bot
from aiogram.types import CallbackQuery, Message

from ..common.env import EnvConfig
from ..common.notifications import send_required, try_answer
from ..common.texts import format_bool, get_text
from ..database import (
    ConfessionStatus,
    SessionAction,
    Settings,
    get_settings,
    open_session,
    toggle_auto_post,
)
from ..moderation.actions import (
    ADMIN_MENU_ACTIONS,
    SESSION_ACTIONS,
    AdminMenu,
    Approve,
    BeginComposing,
    CallbackAction,
    Reject,
    ToggleAutoPost,
    ViewSettings,
    admin_menu_keyboard,
    parse_callback_action,
)
from ..moderation.workflow import DecisionOutcome, PromptRef, decide_confession
from .dp import dp

logger = logging.getLogger(__name__)

_DECISION_REPLIES = {
    DecisionOutcome.APPROVED: "approved",
    DecisionOutcome.REJECTED: "rejected",
    DecisionOutcome.NOT_AUTHORIZED: "not_authorized",
    DecisionOutcome.MISSING_ID: "missing_id",
    DecisionOutcome.NOT_FOUND: "confession_not_found",
    DecisionOutcome.ALREADY_DECIDED: "already_decided",
    DecisionOutcome.CHANNEL_NOT_CONFIGURED: "channel_not_configured",
}

_SESSION_PROMPTS = {
    SessionAction.CHANGE_CHANNEL: "channel_prompt",
    SessionAction.MANAGE_ADMINS: "admins_prompt",
    SessionAction.BLACKLIST: "blacklist_prompt",
}


def format_settings(settings: Settings) -> str:
    return get_text(
        "settings_view",
        channel=settings.channel_target or "Not set",
        auto_post=format_bool(settings.auto_post),
        admins=", ".join(str(a) for a in sorted(settings.admins)),
        blacklist=", ".join(sorted(settings.blacklist)),
    )


def _prompt_ref(callback: CallbackQuery) -> Optional[PromptRef]:
    message = callback.message
    if not isinstance(message, Message):
        return None
    return PromptRef(chat_id=message.chat.id, message_id=message.message_id)


@dp.callback_query()
async def handle_callback(
    callback: CallbackQuery, bot: Bot, settings: Settings, env: EnvConfig
) -> str:
    """Parses the button payload and runs the matching action"""
    action = parse_callback_action(callback.data)
    user_id = callback.from_user.id

    if isinstance(action, BeginComposing):
        await send_required(bot, user_id, get_text("compose_prompt"))
        await try_answer(callback)
        return "callback_compose_prompt"

    if isinstance(action, ADMIN_MENU_ACTIONS):
        if not settings.is_admin(user_id):
            await try_answer(callback, get_text("not_authorized"))
            return "callback_not_authorized"
        return await handle_admin_menu_action(callback, bot, action)

    if isinstance(action, (Approve, Reject)):
        return await handle_decision(callback, bot, settings, env, action)

    await try_answer(callback, get_text("action_received"))
    return "callback_acknowledged"


async def handle_admin_menu_action(
    callback: CallbackQuery, bot: Bot, action: CallbackAction
) -> str:
    user_id = callback.from_user.id

    if isinstance(action, AdminMenu):
        await send_required(
            bot, user_id, get_text("admin_menu"), reply_markup=admin_menu_keyboard()
        )
        await try_answer(callback)
        return "callback_admin_menu"

    if isinstance(action, ViewSettings):
        await try_answer(callback)
        # Re-read: the threaded settings may predate a change made in this update
        current = await get_settings()
        await send_required(bot, user_id, format_settings(current))
        return "callback_view_settings"

    if isinstance(action, ToggleAutoPost):
        new_state = await toggle_auto_post()
        logger.info(f"Admin {user_id} set auto-post to {new_state}")
        await try_answer(
            callback, get_text("auto_post_toggled", auto_post=format_bool(new_state))
        )
        return "callback_toggle_autopost"

    session_action = SESSION_ACTIONS[type(action)]
    await open_session(user_id, session_action)
    await send_required(bot, user_id, get_text(_SESSION_PROMPTS[session_action]))
    await try_answer(callback)
    return f"callback_session_{session_action.value}"


async def handle_decision(
    callback: CallbackQuery,
    bot: Bot,
    settings: Settings,
    env: EnvConfig,
    action: Approve | Reject,
) -> str:
    status = (
        ConfessionStatus.APPROVED
        if isinstance(action, Approve)
        else ConfessionStatus.REJECTED
    )
    decision = await decide_confession(
        bot,
        settings,
        env,
        action.confession_id,
        status,
        actor_id=callback.from_user.id,
        prompt=_prompt_ref(callback),
    )

    confession = decision.confession
    reply = get_text(
        _DECISION_REPLIES[decision.outcome],
        number=confession.number if confession else action.confession_id,
        status=confession.status.value if confession else "",
    )
    await try_answer(callback, reply)
    return f"callback_decision_{decision.outcome.value}"
