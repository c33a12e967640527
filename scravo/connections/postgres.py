"""
PostgreSQL Connection Module.

Manages the PostgreSQL connection pool shared by the handler groups.
"""

from typing import Optional

import asyncpg
from loguru import logger

from config.settings import PostgresSettings, get_settings

pg_log = logger.bind(module="Postgres")


class PostgresConnection:
    """PostgreSQL connection manager."""

    def __init__(self, settings: Optional[PostgresSettings] = None):
        """Initialize PostgreSQL connection."""
        self.settings = settings or get_settings().postgres
        self._pool: Optional[asyncpg.Pool] = None

    async def connect(self) -> None:
        """Connect to PostgreSQL."""
        pg_log.info(f"Connecting to PostgreSQL at {self.settings.host}:{self.settings.port}")
        self._pool = await asyncpg.create_pool(
            host=self.settings.host,
            port=self.settings.port,
            user=self.settings.user,
            password=self.settings.password,
            database=self.settings.database,
            min_size=1,
            max_size=self.settings.pool_max,
        )
        pg_log.info("PostgreSQL connected successfully")

    async def close(self) -> None:
        """Close PostgreSQL connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            pg_log.info("PostgreSQL connection closed")

    async def ping(self) -> bool:
        """Check the pool can still reach the database."""
        if not self._pool:
            return False
        try:
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            pg_log.warning(f"PostgreSQL ping failed: {e}")
            return False

    @property
    def pool(self) -> asyncpg.Pool:
        """Get connection pool."""
        if not self._pool:
            raise RuntimeError("PostgreSQL not connected. Call connect() first.")
        return self._pool
