import logging
from typing import Any

from .models import Settings
from .postgres_connection import get_pool

logger = logging.getLogger(__name__)

SCALAR_FIELDS = ("channel_target", "auto_post")
SET_FIELDS = ("admins", "blacklist")


async def _ensure_settings_row(conn) -> None:
    await conn.execute(
        """
        INSERT INTO settings (id) VALUES (1)
        ON CONFLICT (id) DO NOTHING
        """
    )


async def _read_settings(conn) -> Settings:
    row = await conn.fetchrow(
        "SELECT channel_target, auto_post FROM settings WHERE id = 1"
    )
    admin_rows = await conn.fetch("SELECT admin_id FROM settings_admins")
    word_rows = await conn.fetch("SELECT word FROM settings_blacklist")
    return Settings(
        admins={int(r["admin_id"]) for r in admin_rows},
        channel_target=row["channel_target"] if row else None,
        auto_post=bool(row["auto_post"]) if row else False,
        blacklist={r["word"] for r in word_rows},
    )


async def get_settings() -> Settings:
    """Return current settings, creating the default record on first access"""
    pool = await get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            await _ensure_settings_row(conn)
            return await _read_settings(conn)


async def update_settings(**updates: Any) -> Settings:
    """
    Merge the given fields into the stored settings and return the full record.

    Fields that are not passed stay untouched. ``admins`` and ``blacklist``
    replace the whole set; use the add/remove helpers for single members.
    """
    unknown = set(updates) - set(SCALAR_FIELDS) - set(SET_FIELDS)
    if unknown:
        raise ValueError(f"Unknown settings fields: {', '.join(sorted(unknown))}")

    pool = await get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            await _ensure_settings_row(conn)

            for field_name in SCALAR_FIELDS:
                if field_name in updates:
                    # field_name comes from the whitelist above
                    await conn.execute(
                        f"UPDATE settings SET {field_name} = $1, updated_at = NOW() WHERE id = 1",
                        updates[field_name],
                    )

            if "admins" in updates:
                await conn.execute("DELETE FROM settings_admins")
                admins = [(int(a),) for a in updates["admins"]]
                if admins:
                    await conn.executemany(
                        "INSERT INTO settings_admins (admin_id) VALUES ($1) ON CONFLICT DO NOTHING",
                        admins,
                    )

            if "blacklist" in updates:
                await conn.execute("DELETE FROM settings_blacklist")
                words = [(w.lower(),) for w in updates["blacklist"] if w]
                if words:
                    await conn.executemany(
                        "INSERT INTO settings_blacklist (word) VALUES ($1) ON CONFLICT DO NOTHING",
                        words,
                    )

            logger.info(f"Settings updated: {sorted(updates)}")
            return await _read_settings(conn)


async def toggle_auto_post() -> bool:
    """Flip the auto-post flag. Returns the new state"""
    pool = await get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            await _ensure_settings_row(conn)
            new_state = await conn.fetchval(
                """
                UPDATE settings
                SET auto_post = NOT auto_post, updated_at = NOW()
                WHERE id = 1
                RETURNING auto_post
                """
            )
            return bool(new_state)


async def add_admin(admin_id: int) -> None:
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(
            "INSERT INTO settings_admins (admin_id) VALUES ($1) ON CONFLICT DO NOTHING",
            admin_id,
        )


async def remove_admin(admin_id: int) -> None:
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(
            "DELETE FROM settings_admins WHERE admin_id = $1",
            admin_id,
        )


async def add_blacklist_word(word: str) -> str:
    word = word.lower()
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(
            "INSERT INTO settings_blacklist (word) VALUES ($1) ON CONFLICT DO NOTHING",
            word,
        )
    return word


async def remove_blacklist_word(word: str) -> str:
    word = word.lower()
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(
            "DELETE FROM settings_blacklist WHERE word = $1",
            word,
        )
    return word
