import asyncio
import logging
from typing import Optional

import logfire
from aiogram.dispatcher.event.bases import UNHANDLED
from aiohttp import web

from .common.bot import bot
from .common.env import get_env_config
from .common.utils import get_dotted_path, get_system_config, get_webhook_timeout
from .database import close_pool, create_schema, get_pool
from .handlers.dp import dp
from .logging_setup import get_telegram_handler, register_telegram_logging_loop

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()
app = web.Application()

SUPPORTED_UPDATE_TYPES = ("message", "callback_query")


def classify_update(json) -> Optional[str]:
    """Return the update type if it is one the bot handles, else None"""
    if not isinstance(json, dict):
        return None
    present = [key for key in SUPPORTED_UPDATE_TYPES if isinstance(json.get(key), dict)]
    if len(present) != 1:
        return None
    return present[0]


def describe_update(json: dict) -> str:
    """Short span title: the sender's username or id"""
    for path in (
        "message.from.username",
        "callback_query.from.username",
        "message.from.id",
        "callback_query.from.id",
    ):
        value = get_dotted_path(json, path)
        if value is not None:
            return str(value)
    return "Unknown user"


@routes.get("/health")
async def healthcheck(_: web.Request) -> web.Response:
    """Return plain OK response for health probes."""
    return web.Response(text="ok")


@routes.post("/")
async def handle_update(request: web.Request) -> web.Response:
    """Handle incoming Telegram update"""
    try:
        json = await request.json()
    except ValueError:
        logger.warning("Received a non-JSON webhook body")
        return web.json_response({"error": "Invalid JSON"}, status=400)

    update_type = classify_update(json)
    if update_type is None:
        logger.warning(f"Received unsupported update: {json}")
        return web.json_response(
            {"error": "Unsupported update", "expected": list(SUPPORTED_UPDATE_TYPES)},
            status=400,
        )
    json.setdefault("update_id", 0)

    with logfire.span("Update: handling...", update=json) as span:
        span.message = describe_update(json)
        try:
            result = await asyncio.wait_for(
                dp.feed_raw_update(bot, json), timeout=get_webhook_timeout()
            )
        except asyncio.TimeoutError:
            logger.warning(f"Webhook processing timed out for {update_type}")
            span.tags = ["webhook_timeout"]
            return web.json_response({"error": "Processing timed out"}, status=503)
        except Exception as e:
            span.tags = ["unhandled_exception"]
            span.record_exception(e)
            logger.error(f"Failed to process {update_type}: {e}", exc_info=True)
            return web.json_response({"error": "Error processing request"}, status=500)

        if result is UNHANDLED:
            span.tags = ["unhandled"]
        elif isinstance(result, str):
            span.tags = [result]
        return web.json_response({"message": "Processed successfully"})


app.add_routes(routes)


async def _on_startup_register_logging(app: web.Application) -> None:
    register_telegram_logging_loop(asyncio.get_running_loop())


async def _on_startup_ensure_schema(app: web.Application) -> None:
    pool = await get_pool()
    async with pool.acquire() as conn:
        await create_schema(conn)
    logger.info("Database schema ensured")


async def _on_startup_setup_webhook(app: web.Application) -> None:
    """Register the webhook URL with Telegram, when one is configured"""
    webhook_url = get_env_config().webhook_url or get_system_config().get("webhook_url")
    if not webhook_url:
        logger.warning("No webhook URL configured, skipping webhook registration")
        return
    try:
        logger.info(f"Setting webhook URL to: {webhook_url}")
        await bot.set_webhook(webhook_url)
    except Exception as e:
        logger.error(f"Failed to set webhook: {e}")
        raise


async def _shutdown(app: web.Application) -> None:
    """Gracefully shutdown all resources."""
    logger.warning("Starting graceful shutdown...")

    async with asyncio.TaskGroup() as tg:
        tg.create_task(bot.session.close())
        tg.create_task(close_pool())

    telegram_handler = get_telegram_handler()
    if telegram_handler:
        try:
            await asyncio.wait_for(telegram_handler.stop(), timeout=5.0)
        except Exception as e:
            logger.warning(f"Error stopping TelegramLogHandler: {e}", exc_info=True)


app.on_startup.append(_on_startup_register_logging)
app.on_startup.append(_on_startup_ensure_schema)
app.on_startup.append(_on_startup_setup_webhook)
app.on_shutdown.append(_shutdown)
