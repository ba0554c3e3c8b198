import logging
from typing import Optional

from .models import AdminSession, SessionAction
from .postgres_connection import get_pool

logger = logging.getLogger(__name__)


async def open_session(admin_id: int, action: SessionAction) -> None:
    """Create the admin's session, replacing any session already open"""
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(
            """
            INSERT INTO admin_sessions (admin_id, pending_action, opened_at)
            VALUES ($1, $2, NOW())
            ON CONFLICT (admin_id) DO UPDATE SET
                pending_action = EXCLUDED.pending_action,
                opened_at = EXCLUDED.opened_at
            """,
            admin_id,
            action.value,
        )
    logger.debug(f"Session {action.value} opened for admin {admin_id}")


async def peek_session(admin_id: int) -> Optional[AdminSession]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            "SELECT admin_id, pending_action, opened_at FROM admin_sessions WHERE admin_id = $1",
            admin_id,
        )
    if not row:
        return None
    return AdminSession(
        admin_id=int(row["admin_id"]),
        pending_action=SessionAction(row["pending_action"]),
        opened_at=row["opened_at"],
    )


async def close_session(admin_id: int) -> bool:
    """Delete the admin's session. Returns False if there was none"""
    pool = await get_pool()
    async with pool.acquire() as conn:
        deleted = await conn.fetchval(
            "DELETE FROM admin_sessions WHERE admin_id = $1 RETURNING admin_id",
            admin_id,
        )
    return deleted is not None
