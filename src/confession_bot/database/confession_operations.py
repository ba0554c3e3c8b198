import logging
from typing import List, Optional

from .models import Confession, ConfessionStatus
from .postgres_connection import get_pool

logger = logging.getLogger(__name__)


def _row_to_confession(row) -> Confession:
    return Confession(
        number=int(row["number"]),
        text=row["text"],
        author_id=int(row["author_id"]),
        has_media=bool(row["has_media"]),
        status=ConfessionStatus(row["status"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        decided_by=row["decided_by"],
    )


async def next_confession_number() -> int:
    """
    Issue the next confession number.

    The increment is a single upsert inside a transaction, so concurrent callers
    are serialized on the counter row and never receive the same number.
    """
    pool = await get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            number = await conn.fetchval(
                """
                INSERT INTO meta_counter (id, last_number) VALUES (1, 1)
                ON CONFLICT (id) DO UPDATE SET last_number = meta_counter.last_number + 1
                RETURNING last_number
                """
            )
    return int(number)


async def save_confession(
    number: int, text: str, author_id: int, has_media: bool = False
) -> Confession:
    """Persist a new confession in pending state"""
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(
            """
            INSERT INTO confessions (number, text, author_id, has_media, status)
            VALUES ($1, $2, $3, $4, 'pending')
            """,
            number,
            text,
            author_id,
            has_media,
        )
    return Confession(
        number=number, text=text, author_id=author_id, has_media=has_media
    )


async def get_confession(number: int) -> Optional[Confession]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            "SELECT * FROM confessions WHERE number = $1",
            number,
        )
    return _row_to_confession(row) if row else None


async def mark_confession_decided(
    number: int, status: ConfessionStatus, decided_by: str
) -> bool:
    """
    Move a pending confession to a terminal state.

    Returns False when the confession is missing or was already decided; in that
    case nothing is written.
    """
    if status == ConfessionStatus.PENDING:
        raise ValueError("Decision status must be approved or rejected")

    pool = await get_pool()
    async with pool.acquire() as conn:
        updated = await conn.fetchval(
            """
            UPDATE confessions
            SET status = $2, decided_by = $3, updated_at = NOW()
            WHERE number = $1 AND status = 'pending'
            RETURNING number
            """,
            number,
            status.value,
            decided_by,
        )
    return updated is not None


async def revert_to_pending(number: int, decided_by: str) -> bool:
    """Undo an approval whose publication failed"""
    pool = await get_pool()
    async with pool.acquire() as conn:
        reverted = await conn.fetchval(
            """
            UPDATE confessions
            SET status = 'pending', decided_by = NULL, updated_at = NOW()
            WHERE number = $1 AND status = 'approved' AND decided_by = $2
            RETURNING number
            """,
            number,
            decided_by,
        )
    if reverted is None:
        logger.warning(f"Confession #{number} could not be reverted to pending")
    return reverted is not None


async def get_user_confessions(author_id: int, limit: int = 50) -> List[Confession]:
    """Return the author's confessions, newest first"""
    pool = await get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            """
            SELECT * FROM confessions
            WHERE author_id = $1
            ORDER BY created_at DESC, number DESC
            LIMIT $2
            """,
            author_id,
            limit,
        )
    return [_row_to_confession(row) for row in rows]


async def delete_user_confessions(author_id: int) -> int:
    """Delete every confession of the author. Returns the number of rows removed"""
    pool = await get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            "DELETE FROM confessions WHERE author_id = $1 RETURNING number",
            author_id,
        )
    logger.info(f"Deleted {len(rows)} confessions of user {author_id}")
    return len(rows)
