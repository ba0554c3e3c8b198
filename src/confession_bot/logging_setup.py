import logging
import os

from .common.telegram_logging_handler import TelegramLogHandler

debug = False
_telegram_handler: TelegramLogHandler | None = None


def mute_logging_for_tests():
    """Disable Logfire/Telegram logging side effects when running the test suite.

    Setting ``SKIP_LOGFIRE`` to one of ``{"1", "true", "yes", "on"}`` has the same
    effect without calling this helper.
    """
    global debug
    debug = True


def _should_skip_logfire() -> bool:
    if debug:
        return True

    skip_env = os.getenv("SKIP_LOGFIRE", "").strip().lower()
    if skip_env in {"1", "true", "yes", "on"}:
        return True

    return "PYTEST_CURRENT_TEST" in os.environ


def setup_logging():
    global _telegram_handler
    if _should_skip_logfire():
        logging.basicConfig(level=logging.DEBUG)
        return

    import logfire

    from .common.bot import OPS_CHAT_ID, bot

    logfire.configure()

    handlers: list[logging.Handler] = [logfire.LogfireLoggingHandler()]
    if OPS_CHAT_ID:
        _telegram_handler = TelegramLogHandler(bot=bot, chat_id=OPS_CHAT_ID)
        _telegram_handler.setFormatter(
            logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
        )
        handlers.append(_telegram_handler)

    logging.basicConfig(handlers=handlers, level=logging.DEBUG)
    logfire.install_auto_tracing(
        modules=["confession_bot.database", "confession_bot.moderation"],
        min_duration=0.01,
        check_imported_modules="ignore",
    )


def register_telegram_logging_loop(loop):
    if _telegram_handler:
        _telegram_handler.set_event_loop(loop)


def get_telegram_handler() -> TelegramLogHandler | None:
    return _telegram_handler


# Silence known chatty loggers
CHATTY_LOGGERS = [
    "aiohttp.access",
    "asyncio",
    "urllib3.connectionpool",
]
for logger_name in CHATTY_LOGGERS:
    logging.getLogger(logger_name).setLevel(logging.WARNING)
