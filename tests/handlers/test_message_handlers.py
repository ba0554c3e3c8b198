from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from aiogram.exceptions import TelegramForbiddenError

from confession_bot.database import (
    Confession,
    ConfessionStatus,
    SessionAction,
    Settings,
    get_confession,
    get_settings,
    mark_confession_decided,
    open_session,
    peek_session,
    save_confession,
    update_settings,
)
from confession_bot.handlers.message_handlers import (
    handle_private_message,
    has_attachment,
)
from confession_bot.moderation.workflow import Submission, SubmissionOutcome


def test_has_attachment(message_factory):
    assert not has_attachment(message_factory())
    assert has_attachment(message_factory(photo=[MagicMock()]))
    assert has_attachment(message_factory(voice=MagicMock()))


@pytest.mark.asyncio
async def test_plain_message_is_submitted(
    patched_db_conn, clean_db, bot, env, message_factory
):
    message = message_factory(user_id=1001, text="hello")

    result = await handle_private_message(message, bot, Settings(admins={1}), env)

    assert result == "confession_pending"
    message.answer.assert_awaited_once_with(
        "Received anonymously. Pending approval (ID #1)."
    )
    assert (await get_confession(1)).text == "hello"


@pytest.mark.asyncio
async def test_caption_is_used_for_media(
    patched_db_conn, clean_db, bot, env, message_factory
):
    message = message_factory(text=None, caption="look", photo=[MagicMock()])

    await handle_private_message(message, bot, Settings(), env)

    stored = await get_confession(1)
    assert stored.text == "look"
    assert stored.has_media is True


@pytest.mark.asyncio
async def test_rejection_replies(patched_db_conn, clean_db, bot, env, message_factory):
    settings = Settings(blacklist={"spammy"})

    empty = message_factory(user_id=1, text="   ")
    assert await handle_private_message(empty, bot, settings, env) == "confession_empty"
    empty.answer.assert_awaited_once_with("Please send a non-empty confession.")

    blocked = message_factory(user_id=2, text="so SPAMMY")
    assert (
        await handle_private_message(blocked, bot, settings, env)
        == "confession_blacklisted"
    )
    blocked.answer.assert_awaited_once_with(
        "Your confession contains disallowed words and was rejected."
    )

    await handle_private_message(message_factory(user_id=3, text="one"), bot, settings, env)
    limited = message_factory(user_id=3, text="two")
    assert (
        await handle_private_message(limited, bot, settings, env)
        == "confession_rate_limited"
    )
    limited.answer.assert_awaited_once_with(
        "You are sending confessions too quickly. Please wait."
    )


@pytest.mark.asyncio
async def test_start_command(patched_db_conn, clean_db, bot, env, message_factory):
    message = message_factory(text="/start")

    result = await handle_private_message(message, bot, Settings(), env)

    assert result == "command_start_sent"
    message.answer.assert_awaited_once()
    assert message.answer.await_args.args[0].startswith("Welcome to Confession Bot!")
    assert await get_confession(1) is None


@pytest.mark.asyncio
async def test_my_confessions_empty(
    patched_db_conn, clean_db, bot, env, message_factory
):
    message = message_factory(text="/myconfessions")

    result = await handle_private_message(message, bot, Settings(), env)

    assert result == "command_myconfessions_empty"
    message.answer.assert_awaited_once_with("You have no confessions.")


@pytest.mark.asyncio
async def test_my_confessions_lists_own(
    patched_db_conn, clean_db, bot, env, message_factory
):
    await save_confession(1, "first", 1001)
    await save_confession(2, "x" * 200, 1001)
    await save_confession(3, "not mine", 2002)
    await mark_confession_decided(1, ConfessionStatus.APPROVED, "5")
    message = message_factory(user_id=1001, text="/myconfessions")

    result = await handle_private_message(message, bot, Settings(), env)

    assert result == "command_myconfessions_sent"
    message.answer.assert_awaited_once_with(
        "Your confessions:\n"
        f"#2 - pending - {'x' * 120}\n"
        "#1 - approved - first"
    )


@pytest.mark.asyncio
async def test_delete_data(patched_db_conn, clean_db, bot, env, message_factory):
    await save_confession(1, "mine", 1001)
    await save_confession(2, "theirs", 2002)
    message = message_factory(user_id=1001, text="/deletedata")

    result = await handle_private_message(message, bot, Settings(), env)

    assert result == "command_deletedata_done"
    message.answer.assert_awaited_once_with("Your data has been deleted.")
    assert await get_confession(1) is None
    assert await get_confession(2) is not None


@pytest.mark.asyncio
async def test_setchannel_for_admin(
    patched_db_conn, clean_db, bot, env, message_factory
):
    message = message_factory(user_id=1, text="/setchannel @mine")

    result = await handle_private_message(message, bot, Settings(admins={1}), env)

    assert result == "command_setchannel_done"
    message.answer.assert_awaited_once_with("Channel set to @mine")
    assert (await get_settings()).channel_target == "@mine"


@pytest.mark.asyncio
async def test_setchannel_from_non_admin_is_a_confession(
    patched_db_conn, clean_db, bot, env, message_factory
):
    message = message_factory(user_id=1001, text="/setchannel @mine")

    result = await handle_private_message(message, bot, Settings(admins={1}), env)

    assert result == "confession_pending"
    assert (await get_settings()).channel_target is None
    assert (await get_confession(1)).text == "/setchannel @mine"


@pytest.mark.asyncio
async def test_open_session_takes_precedence(
    patched_db_conn, clean_db, bot, env, message_factory
):
    """With a session open, the next message is never treated as a command"""
    await update_settings(admins=[1])
    await open_session(1, SessionAction.CHANGE_CHANNEL)
    message = message_factory(user_id=1, text="/start")

    result = await handle_private_message(message, bot, await get_settings(), env)

    assert result == "session_change_channel_done"
    assert (await get_settings()).channel_target == "/start"


@pytest.mark.asyncio
async def test_message_after_session_is_a_confession(
    patched_db_conn, clean_db, bot, env, message_factory
):
    await update_settings(admins=[1])
    await open_session(1, SessionAction.MANAGE_ADMINS)

    first = message_factory(user_id=1, text="add 555")
    assert (
        await handle_private_message(first, bot, await get_settings(), env)
        == "session_manage_admins_done"
    )
    assert await peek_session(1) is None

    second = message_factory(user_id=1, text="hello")
    assert (
        await handle_private_message(second, bot, await get_settings(), env)
        == "confession_pending"
    )
    assert (await get_settings()).admins == {1, 555}


@pytest.mark.asyncio
async def test_message_without_sender(bot, env, message_factory):
    message = message_factory()
    message.from_user = None

    assert (
        await handle_private_message(message, bot, Settings(), env)
        == "message_no_user_info"
    )


@pytest.mark.asyncio
async def test_submission_is_delegated(bot, env, message_factory):
    message = message_factory(user_id=1001, text="hello")
    settings = Settings()

    with patch(
        "confession_bot.handlers.message_handlers.peek_session",
        new=AsyncMock(return_value=None),
    ), patch(
        "confession_bot.handlers.message_handlers.submit_confession",
        new_callable=AsyncMock,
    ) as mock_submit:
        mock_submit.return_value = Submission(
            SubmissionOutcome.PENDING, Confession(7, "hello", 1001)
        )

        result = await handle_private_message(message, bot, settings, env)

    mock_submit.assert_awaited_once_with(
        bot, settings, env, author_id=1001, text="hello", has_media=False
    )
    assert result == "confession_pending"
    message.answer.assert_awaited_once_with(
        "Received anonymously. Pending approval (ID #7)."
    )


@pytest.mark.asyncio
async def test_author_who_blocked_the_bot(
    patched_db_conn, clean_db, bot, env, message_factory
):
    """The confession stays queued even when the author's receipt bounces"""
    message = message_factory(user_id=1001, text="hello")
    message.answer.side_effect = TelegramForbiddenError(
        method=MagicMock(), message="bot was blocked by the user"
    )

    result = await handle_private_message(message, bot, Settings(admins={1}), env)

    assert result == "confession_pending"
    assert (await get_confession(1)).status == ConfessionStatus.PENDING
    assert bot.send_message.await_count == 1


@pytest.mark.asyncio
async def test_command_reply_failure_is_tolerated(
    patched_db_conn, clean_db, bot, env, message_factory
):
    await save_confession(1, "mine", 1001)
    message = message_factory(user_id=1001, text="/deletedata")
    message.answer.side_effect = TelegramForbiddenError(
        method=MagicMock(), message="bot was blocked by the user"
    )

    result = await handle_private_message(message, bot, Settings(), env)

    assert result == "command_deletedata_done"
    assert await get_confession(1) is None
