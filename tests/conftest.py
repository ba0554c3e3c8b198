import os

# The bot object is created at import time and validates its token
os.environ.setdefault("BOT_TOKEN", "123456:TEST-TOKEN")
os.environ.setdefault("PG_HOST", "localhost")
os.environ.setdefault("PG_USER", "postgres")
os.environ.setdefault("PG_PASSWORD", "postgres")

import pytest
from pytest_asyncio import is_async_test


def pytest_collection_modifyitems(items: list[pytest.Item]):
    for test in items:
        if is_async_test(test):
            # Mark async tests with session scope
            test.add_marker(pytest.mark.asyncio(loop_scope="session"), append=False)


# Mute Logfire/Telegram logging
from confession_bot.logging_setup import mute_logging_for_tests

mute_logging_for_tests()

# Mute mp for tests
from confession_bot.common.mp import mute_mp_for_tests

mute_mp_for_tests()

import re
from unittest.mock import AsyncMock, MagicMock

import aiosqlite
from aiogram import types

from confession_bot.common.env import EnvConfig
from confession_bot.database import postgres_connection

SQLITE_DB_PATH = ":memory:"


class _DummyTransactionContext:
    """Every statement is committed by the adapter itself"""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


class SQLiteConnectionAdapter:
    """Adapter to make an aiosqlite connection look like an asyncpg connection"""

    _dummy_transaction = _DummyTransactionContext()

    def __init__(self, sqlite_conn):
        self._conn = sqlite_conn

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass  # Connection is managed by the pool

    @staticmethod
    def _transform_query(query: str) -> str:
        """PostgreSQL $1 placeholders become SQLite ?1, NOW() becomes CURRENT_TIMESTAMP"""
        query = query.replace("NOW()", "CURRENT_TIMESTAMP")
        return re.sub(r"\$(\d+)", r"?\1", query)

    async def execute(self, query, *args):
        cursor = await self._conn.execute(self._transform_query(query), args)
        rowcount = cursor.rowcount
        await cursor.close()
        await self._conn.commit()
        return f"{query.split()[0].upper()} {rowcount}"

    async def executemany(self, query, args_list):
        await self._conn.executemany(self._transform_query(query), list(args_list))
        await self._conn.commit()

    async def fetch(self, query, *args):
        cursor = await self._conn.execute(self._transform_query(query), args)
        rows = await cursor.fetchall()
        await cursor.close()
        # RETURNING statements write; rows must be read before committing
        await self._conn.commit()
        return rows

    async def fetchrow(self, query, *args):
        rows = await self.fetch(query, *args)
        return rows[0] if rows else None

    async def fetchval(self, query, *args):
        row = await self.fetchrow(query, *args)
        return row[0] if row else None

    def transaction(self):
        return self._dummy_transaction

    async def close(self):
        await self._conn.close()


class SQLitePoolAdapter:
    """Adapter to make a single aiosqlite connection look like an asyncpg pool"""

    def __init__(self, sqlite_conn):
        self._conn = SQLiteConnectionAdapter(sqlite_conn)

    def acquire(self):
        return self._conn

    async def release(self, conn):
        pass

    async def close(self):
        await self._conn.close()


SQLITE_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS settings (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        channel_target TEXT,
        auto_post BOOLEAN NOT NULL DEFAULT 0,
        updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE TABLE IF NOT EXISTS settings_admins (admin_id INTEGER PRIMARY KEY)",
    "CREATE TABLE IF NOT EXISTS settings_blacklist (word TEXT PRIMARY KEY)",
    """
    CREATE TABLE IF NOT EXISTS meta_counter (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        last_number INTEGER NOT NULL CHECK (last_number >= 0)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS confessions (
        number INTEGER PRIMARY KEY CHECK (number > 0),
        text TEXT NOT NULL,
        author_id INTEGER NOT NULL,
        has_media BOOLEAN NOT NULL DEFAULT 0,
        status TEXT NOT NULL DEFAULT 'pending'
            CHECK (status IN ('pending', 'approved', 'rejected')),
        created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
        decided_by TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS admin_sessions (
        admin_id INTEGER PRIMARY KEY,
        pending_action TEXT NOT NULL
            CHECK (pending_action IN ('change_channel', 'manage_admins', 'blacklist')),
        opened_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS rate_limits (
        user_id INTEGER PRIMARY KEY,
        last_submission_at REAL NOT NULL
    )
    """,
]

SQLITE_TABLES = [
    "confessions",
    "meta_counter",
    "settings",
    "settings_admins",
    "settings_blacklist",
    "admin_sessions",
    "rate_limits",
]


@pytest.fixture(scope="session")
async def test_pool():
    """In-memory SQLite database shared by the whole session"""
    sqlite_conn = await aiosqlite.connect(SQLITE_DB_PATH)
    sqlite_conn.row_factory = aiosqlite.Row

    for statement in SQLITE_SCHEMA:
        await sqlite_conn.execute(statement)
    await sqlite_conn.commit()

    pool = SQLitePoolAdapter(sqlite_conn)
    try:
        yield pool
    finally:
        await pool.close()


@pytest.fixture(scope="session")
def patched_db_conn(test_pool):
    """Fixture to patch the global database pool for tests"""
    postgres_connection._pool = test_pool
    yield
    postgres_connection._pool = None


@pytest.fixture(scope="function")
async def clean_db(patched_db_conn, test_pool):
    """Ensure a clean database state before each test"""
    conn = test_pool.acquire()
    for table in SQLITE_TABLES:
        await conn.execute(f"DELETE FROM {table}")
    yield test_pool


@pytest.fixture
def env():
    return EnvConfig(
        bot_token="123456:TEST-TOKEN",
        pg_host="localhost",
        pg_port=5432,
        pg_user="postgres",
        pg_password="postgres",
        pg_db="confession_bot_test",
    )


@pytest.fixture
def bot():
    bot = MagicMock()
    bot.send_message = AsyncMock()
    bot.edit_message_text = AsyncMock()
    return bot


def make_message(user_id: int = 1001, text: str | None = "hello", **attachments):
    """Private chat message mock with every attachment field unset by default"""
    message = MagicMock(spec=types.Message)
    message.text = text
    message.caption = attachments.pop("caption", None)
    for field in (
        "photo",
        "video",
        "document",
        "animation",
        "audio",
        "voice",
        "video_note",
    ):
        setattr(message, field, attachments.pop(field, None))
    message.from_user = MagicMock()
    message.from_user.id = user_id
    message.chat = MagicMock()
    message.chat.id = user_id
    message.chat.type = "private"
    message.answer = AsyncMock()
    return message


def make_callback(user_id: int = 1, data: str | None = None, message_id: int = 77):
    callback = MagicMock(spec=types.CallbackQuery)
    callback.id = "callback-id"
    callback.data = data
    callback.from_user = MagicMock()
    callback.from_user.id = user_id
    callback.message = MagicMock(spec=types.Message)
    callback.message.chat = MagicMock()
    callback.message.chat.id = user_id
    callback.message.message_id = message_id
    callback.answer = AsyncMock()
    return callback


@pytest.fixture
def message_factory():
    return make_message


@pytest.fixture
def callback_factory():
    return make_callback
