import asyncio
import html
import logging
import time
from collections import deque
from typing import Deque, Optional

from aiogram import Bot


class TelegramLogHandler(logging.Handler):
    """
    Forwards warnings and errors to the operations chat.

    Records emitted before an event loop is registered are kept (up to 20) and
    flushed by `set_event_loop`. At most `capacity` messages are delivered per
    `window` seconds; the rest are dropped.
    """

    MAX_TELEGRAM_LENGTH = 4096

    def __init__(
        self, bot: Bot, chat_id: int, *, window: float = 60.0, capacity: int = 10
    ) -> None:
        super().__init__(level=logging.WARNING)
        self._bot = bot
        self._chat_id = chat_id
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._pending: Deque[str] = deque(maxlen=20)
        self._sent_at: Deque[float] = deque(maxlen=capacity)
        self._window = window
        self._tasks: set[asyncio.Task] = set()

    def set_event_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        pending = list(self._pending)
        self._pending.clear()
        for text in pending:
            self._deliver(text)

    def emit(self, record: logging.LogRecord) -> None:
        # Records about our own delivery failures would loop forever
        if record.name == __name__ or record.name.startswith("aiogram"):
            return
        try:
            text = self._render(record)
        except Exception:
            self.handleError(record)
            return
        if self._loop is None:
            self._pending.append(text)
            return
        self._deliver(text)

    def _deliver(self, text: str) -> None:
        now = time.monotonic()
        while self._sent_at and now - self._sent_at[0] > self._window:
            self._sent_at.popleft()
        if len(self._sent_at) == self._sent_at.maxlen:
            return
        self._sent_at.append(now)

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            task = self._loop.create_task(self._send(text))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        else:
            asyncio.run_coroutine_threadsafe(self._send(text), self._loop)

    def _render(self, record: logging.LogRecord) -> str:
        body = html.escape(self.format(record))
        header = f"<b>{html.escape(record.levelname)}</b> · <code>{html.escape(record.name)}</code>"
        text = f"{header}\n\n<pre>{body}</pre>"
        if len(text) > self.MAX_TELEGRAM_LENGTH:
            # Keep the closing tag so Telegram still parses the HTML
            text = text[: self.MAX_TELEGRAM_LENGTH - 10] + "…</pre>"
        return text

    async def _send(self, text: str) -> None:
        try:
            await self._bot.send_message(
                self._chat_id, text, parse_mode="HTML", disable_web_page_preview=True
            )
        except Exception:
            logging.getLogger(__name__).debug("Failed to deliver log record", exc_info=True)

    async def stop(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
