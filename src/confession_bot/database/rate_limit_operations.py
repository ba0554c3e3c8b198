import logging
import time
from typing import Optional

from .constants import SUBMISSION_COOLDOWN_SECONDS
from .postgres_connection import get_pool

logger = logging.getLogger(__name__)


async def try_acquire_submission_slot(
    user_id: int,
    now: Optional[float] = None,
    cooldown: float = SUBMISSION_COOLDOWN_SECONDS,
) -> bool:
    """
    Check the per-user cooldown and, if it has elapsed, start a new one.

    The first submission of a user is always allowed. The check and the
    timestamp refresh happen in one upsert: the row is only updated (and
    returned) when the stored timestamp is at least ``cooldown`` seconds old.
    """
    now = time.time() if now is None else float(now)
    pool = await get_pool()
    async with pool.acquire() as conn:
        acquired = await conn.fetchval(
            """
            INSERT INTO rate_limits (user_id, last_submission_at) VALUES ($1, $2)
            ON CONFLICT (user_id) DO UPDATE
                SET last_submission_at = EXCLUDED.last_submission_at
                WHERE rate_limits.last_submission_at <= $3
            RETURNING user_id
            """,
            user_id,
            now,
            now - cooldown,
        )
    if acquired is None:
        logger.info(f"User {user_id} hit the submission cooldown")
    return acquired is not None
