import asyncpg

TABLES = [
    "confessions",
    "meta_counter",
    "settings",
    "settings_admins",
    "settings_blacklist",
    "admin_sessions",
    "rate_limits",
]


async def create_schema(conn: asyncpg.Connection):
    """Create tables and indexes; safe to run on every startup"""
    try:
        await conn.execute(
            """
            -- Singleton settings row
            CREATE TABLE IF NOT EXISTS settings (
                id SMALLINT PRIMARY KEY CHECK (id = 1),
                channel_target TEXT,
                auto_post BOOLEAN NOT NULL DEFAULT false,
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            );

            -- Settings sets, one row per member
            CREATE TABLE IF NOT EXISTS settings_admins (
                admin_id BIGINT PRIMARY KEY
            );

            CREATE TABLE IF NOT EXISTS settings_blacklist (
                word TEXT PRIMARY KEY
            );

            -- Confession number sequence
            CREATE TABLE IF NOT EXISTS meta_counter (
                id SMALLINT PRIMARY KEY CHECK (id = 1),
                last_number BIGINT NOT NULL CHECK (last_number >= 0)
            );

            CREATE TABLE IF NOT EXISTS confessions (
                number BIGINT PRIMARY KEY CHECK (number > 0),
                text TEXT NOT NULL,
                author_id BIGINT NOT NULL,
                has_media BOOLEAN NOT NULL DEFAULT false,
                status TEXT NOT NULL DEFAULT 'pending'
                    CHECK (status IN ('pending', 'approved', 'rejected')),
                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                decided_by TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_confessions_author
                ON confessions (author_id, created_at DESC);

            -- Multi-step admin commands awaiting their next input
            CREATE TABLE IF NOT EXISTS admin_sessions (
                admin_id BIGINT PRIMARY KEY,
                pending_action TEXT NOT NULL
                    CHECK (pending_action IN ('change_channel', 'manage_admins', 'blacklist')),
                opened_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            );

            CREATE TABLE IF NOT EXISTS rate_limits (
                user_id BIGINT PRIMARY KEY,
                last_submission_at DOUBLE PRECISION NOT NULL
            );
            """
        )
    except Exception as e:
        raise RuntimeError(f"Failed to create schema: {e}") from e


async def truncate_all_tables(conn: asyncpg.Connection):
    """Remove all rows; used by tests and local resets"""
    await conn.execute(f"TRUNCATE TABLE {', '.join(TABLES)}")
