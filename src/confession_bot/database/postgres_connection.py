import logging
from typing import Optional

import asyncpg

from ..common.env import get_env_config

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.Pool] = None


async def get_pool() -> asyncpg.Pool:
    """Get or create the PostgreSQL connection pool"""
    global _pool
    if _pool is None:
        env = get_env_config()
        try:
            _pool = await asyncpg.create_pool(
                host=env.pg_host,
                port=env.pg_port,
                user=env.pg_user,
                password=env.pg_password,
                database=env.pg_db,
                min_size=1,
                max_size=10,
            )
        except Exception as e:
            logger.error(f"Failed to create database pool: {e}")
            raise
    return _pool


async def close_pool():
    """Close the PostgreSQL connection pool"""
    global _pool
    if _pool:
        await _pool.close()
        _pool = None
