"""Confession lifecycle.

A confession is created ``pending`` and moves exactly once to ``approved`` or
``rejected``. Approval and auto-posting claim the transition in the database
before publishing to the channel, so two concurrent approvals cannot publish
the same confession twice; a failed publication reverts the claim.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from aiogram import Bot

from ..common.env import EnvConfig
from ..common.mp import mp
from ..common.notifications import (
    Delivery,
    notify_admins,
    send_required,
    try_edit,
)
from ..common.texts import get_text
from ..database import (
    AUTO_DECIDER,
    Confession,
    ConfessionStatus,
    Settings,
    get_confession,
    mark_confession_decided,
    next_confession_number,
    revert_to_pending,
    save_confession,
    try_acquire_submission_slot,
)
from .actions import moderation_keyboard

logger = logging.getLogger(__name__)


class SubmissionOutcome(str, Enum):
    EMPTY = "empty"
    RATE_LIMITED = "rate_limited"
    BLACKLISTED = "blacklisted"
    PENDING = "pending"
    AUTO_POSTED = "auto_posted"


class DecisionOutcome(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    NOT_AUTHORIZED = "not_authorized"
    MISSING_ID = "missing_id"
    NOT_FOUND = "not_found"
    ALREADY_DECIDED = "already_decided"
    CHANNEL_NOT_CONFIGURED = "channel_not_configured"


@dataclass
class Submission:
    outcome: SubmissionOutcome
    confession: Optional[Confession] = None
    notified: list[Delivery] | None = None


@dataclass
class Decision:
    outcome: DecisionOutcome
    confession: Optional[Confession] = None
    prompt_edit: Optional[Delivery] = None


@dataclass(frozen=True, slots=True)
class PromptRef:
    """Location of the moderation prompt an admin pressed a button on."""

    chat_id: int
    message_id: int


def format_channel_post(number: int, text: str) -> str:
    return f"#{number}\n{text}"


def resolve_channel(settings: Settings, env: EnvConfig) -> Optional[str]:
    return settings.channel_target or env.default_channel


def moderation_recipients(settings: Settings, env: EnvConfig) -> list[int]:
    if settings.admins:
        return sorted(settings.admins)
    if env.fallback_admin_id is not None:
        return [env.fallback_admin_id]
    return []


async def publish_confession(
    bot: Bot, channel: str, confession: Confession, decided_by: str
) -> None:
    """
    Post an already claimed confession to the channel.

    On failure the approval is reverted to pending and the error re-raised.
    """
    try:
        await send_required(
            bot, channel, format_channel_post(confession.number, confession.text)
        )
    except Exception:
        logger.error(
            f"Failed to publish confession #{confession.number} to {channel}",
            exc_info=True,
        )
        await revert_to_pending(confession.number, decided_by)
        raise


async def submit_confession(
    bot: Bot,
    settings: Settings,
    env: EnvConfig,
    author_id: int,
    text: str,
    has_media: bool = False,
) -> Submission:
    """
    Run a new submission through the gates and, if it passes, queue it.

    Gates, in order: empty content, per-user cooldown, blacklist.
    """
    text = (text or "").strip()
    if not text and not has_media:
        return Submission(SubmissionOutcome.EMPTY)

    if not await try_acquire_submission_slot(author_id):
        return Submission(SubmissionOutcome.RATE_LIMITED)

    word = settings.find_blacklisted(text)
    if word is not None:
        logger.info(f"Submission from {author_id} rejected by blacklist")
        mp.track(author_id, "confession_blacklisted", {"word": word})
        return Submission(SubmissionOutcome.BLACKLISTED)

    number = await next_confession_number()
    confession = await save_confession(number, text, author_id, has_media)
    mp.track(author_id, "confession_submitted", {"number": number, "has_media": has_media})

    notified = await notify_admins(
        bot,
        moderation_recipients(settings, env),
        get_text("admin_prompt", number=number, text=text),
        reply_markup=moderation_keyboard(number),
    )

    channel = resolve_channel(settings, env)
    if settings.auto_post and channel:
        if await _auto_post(bot, channel, confession):
            return Submission(SubmissionOutcome.AUTO_POSTED, confession, notified)

    return Submission(SubmissionOutcome.PENDING, confession, notified)


async def _auto_post(bot: Bot, channel: str, confession: Confession) -> bool:
    """Best effort: a failed auto-post leaves the confession pending for admins."""
    if not await mark_confession_decided(
        confession.number, ConfessionStatus.APPROVED, AUTO_DECIDER
    ):
        return False
    try:
        await publish_confession(bot, channel, confession, AUTO_DECIDER)
    except Exception as e:
        logger.warning(f"Auto-post of confession #{confession.number} failed: {e}")
        return False

    confession.status = ConfessionStatus.APPROVED
    confession.decided_by = AUTO_DECIDER
    mp.track(confession.author_id, "confession_auto_posted", {"number": confession.number})
    return True


async def decide_confession(
    bot: Bot,
    settings: Settings,
    env: EnvConfig,
    confession_id: Optional[int],
    status: ConfessionStatus,
    actor_id: int,
    prompt: Optional[PromptRef] = None,
) -> Decision:
    """
    Approve or reject a pending confession on behalf of an admin.

    Every refusal (not an admin, bad id, already decided, no channel) leaves the
    stored state unchanged. Publication errors propagate after the approval is
    reverted.
    """
    if not settings.is_admin(actor_id):
        return Decision(DecisionOutcome.NOT_AUTHORIZED)
    if confession_id is None:
        return Decision(DecisionOutcome.MISSING_ID)

    confession = await get_confession(confession_id)
    if confession is None:
        return Decision(DecisionOutcome.NOT_FOUND)
    if confession.is_decided:
        return Decision(DecisionOutcome.ALREADY_DECIDED, confession)

    decided_by = str(actor_id)
    if status == ConfessionStatus.APPROVED:
        channel = resolve_channel(settings, env)
        if not channel:
            return Decision(DecisionOutcome.CHANNEL_NOT_CONFIGURED, confession)
        if not await mark_confession_decided(confession.number, status, decided_by):
            return Decision(DecisionOutcome.ALREADY_DECIDED, confession)
        await publish_confession(bot, channel, confession, decided_by)
        outcome = DecisionOutcome.APPROVED
        prompt_text = get_text(
            "approved_prompt", number=confession.number, text=confession.text
        )
    else:
        if not await mark_confession_decided(confession.number, status, decided_by):
            return Decision(DecisionOutcome.ALREADY_DECIDED, confession)
        outcome = DecisionOutcome.REJECTED
        prompt_text = get_text(
            "rejected_prompt", number=confession.number, text=confession.text
        )

    confession.status = status
    confession.decided_by = decided_by
    mp.track(actor_id, f"confession_{outcome.value}", {"number": confession.number})

    prompt_edit = None
    if prompt is not None:
        prompt_edit = await try_edit(bot, prompt.chat_id, prompt.message_id, prompt_text)
    return Decision(outcome, confession, prompt_edit)
