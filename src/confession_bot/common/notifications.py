"""Outbound Telegram calls.

Two kinds of calls are distinguished by their return type:

* ``send_required`` returns the sent message and raises on failure. Use it
  when the primary outcome of the update depends on the delivery.
* ``try_send``, ``try_reply``, ``try_edit`` and ``try_answer`` return a
  ``Delivery``. They never raise; failures are logged and reported in the result.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from aiogram import Bot
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from .utils import retry_on_network_error

logger = logging.getLogger(__name__)

ChatTarget = Union[int, str]


@dataclass(frozen=True, slots=True)
class Delivery:
    target: Optional[ChatTarget]
    ok: bool
    error: Optional[str] = None


async def send_required(
    bot: Bot,
    chat_id: ChatTarget,
    text: str,
    reply_markup: InlineKeyboardMarkup | None = None,
) -> Message:
    @retry_on_network_error
    async def _send():
        return await bot.send_message(chat_id, text, reply_markup=reply_markup)

    return await _send()


async def try_send(
    bot: Bot,
    chat_id: ChatTarget,
    text: str,
    reply_markup: InlineKeyboardMarkup | None = None,
) -> Delivery:
    try:
        await send_required(bot, chat_id, text, reply_markup)
    except Exception as e:
        logger.warning(f"Failed to send message to {chat_id}: {e}", exc_info=True)
        return Delivery(chat_id, ok=False, error=str(e))
    return Delivery(chat_id, ok=True)


async def try_edit(
    bot: Bot, chat_id: ChatTarget, message_id: int, text: str
) -> Delivery:
    try:
        await bot.edit_message_text(text=text, chat_id=chat_id, message_id=message_id)
    except Exception as e:
        logger.warning(
            f"Failed to edit message {message_id} in {chat_id}: {e}", exc_info=True
        )
        return Delivery(chat_id, ok=False, error=str(e))
    return Delivery(chat_id, ok=True)


async def try_reply(
    message: Message, text: str, reply_markup: InlineKeyboardMarkup | None = None
) -> Delivery:
    """Replies in the message's chat; a user who blocked the bot is only logged."""
    chat_id = message.chat.id
    kwargs = {"reply_markup": reply_markup} if reply_markup is not None else {}

    @retry_on_network_error
    async def _reply():
        return await message.answer(text, **kwargs)

    try:
        await _reply()
    except Exception as e:
        logger.warning(f"Failed to reply in {chat_id}: {e}", exc_info=True)
        return Delivery(chat_id, ok=False, error=str(e))
    return Delivery(chat_id, ok=True)


async def try_answer(callback: CallbackQuery, text: str | None = None) -> Delivery:
    """Answers a callback query; stale queries must not break the handler."""
    try:
        await callback.answer(text)
    except Exception as e:
        logger.info(f"Failed to answer callback {callback.id}: {e}")
        return Delivery(None, ok=False, error=str(e))
    return Delivery(None, ok=True)


async def notify_admins(
    bot: Bot,
    admin_ids: Iterable[int],
    text: str,
    reply_markup: InlineKeyboardMarkup | None = None,
) -> list[Delivery]:
    """
    Sends the same message to every admin concurrently.

    Each recipient is isolated: one failed delivery does not affect the others.
    """
    deliveries = await asyncio.gather(
        *(try_send(bot, admin_id, text, reply_markup) for admin_id in admin_ids)
    )
    failed = [d.target for d in deliveries if not d.ok]
    if failed:
        logger.warning(
            "Some admins were not notified",
            extra={"unreachable": failed, "total": len(deliveries)},
        )
    return list(deliveries)
