# digishop/database/database.py
import asyncpg
import json
from abc import ABC, abstractmethod
import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional
from ..config import Config
from ..errors import BackendError

logger = logging.getLogger(__name__)

def _json_loads(value: str) -> Any:
    return json.loads(value, parse_float=Decimal)

async def _init_connection(conn: asyncpg.Connection):
    """Decode json/jsonb columns into Python objects"""
    for typename in ('json', 'jsonb'):
        await conn.set_type_codec(
            typename,
            encoder=json.dumps,
            decoder=_json_loads,
            schema='pg_catalog'
        )

class _Queries(ABC):
    """Query helpers shared by the pool and by open transactions"""

    @abstractmethod
    async def _run(self, method: str, query: str, *args):
        """Run one asyncpg connection method on a connection of this scope"""

    async def fetch(self, query: str, *args) -> List[Dict[str, Any]]:
        rows = await self._run('fetch', query, *args)
        return [dict(row) for row in rows]

    async def fetchrow(self, query: str, *args) -> Optional[Dict[str, Any]]:
        row = await self._run('fetchrow', query, *args)
        return dict(row) if row else None

    async def fetchval(self, query: str, *args) -> Any:
        return await self._run('fetchval', query, *args)

    async def execute(self, query: str, *args) -> str:
        return await self._run('execute', query, *args)

    @staticmethod
    async def _call(conn: asyncpg.Connection, method: str, query: str, *args):
        try:
            return await getattr(conn, method)(query, *args)
        except asyncpg.PostgresError as e:
            logger.error(f"Backend rejected query: {e}")
            raise BackendError(str(e)) from e

class Transaction(_Queries):
    """Queries bound to one connection inside an open transaction"""

    def __init__(self, conn: asyncpg.Connection):
        self.conn = conn

    async def _run(self, method: str, query: str, *args):
        return await self._call(self.conn, method, query, *args)

class Database(_Queries):
    """Connection pool to the backend Postgres"""

    def __init__(self, dsn: Optional[str] = None):
        self.dsn = dsn or Config.DATABASE_URL
        self.pool: Optional[asyncpg.Pool] = None
        self.logger = logging.getLogger(__name__)

    async def connect(self):
        """Open the pool and apply pending migrations"""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=2,
                max_size=10,
                init=_init_connection
            )

            await self._run_migrations()

            self.logger.info("Connected to database")
        except Exception as e:
            self.logger.error(f"Error connecting to database: {e}")
            raise

    async def close(self):
        """Close the pool"""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("Database connection closed")

    async def _run(self, method: str, query: str, *args):
        async with self.pool.acquire() as conn:
            return await self._call(conn, method, query, *args)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Transaction]:
        """Run the enclosed queries atomically; any exception rolls back"""
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                yield Transaction(conn)

    async def _run_migrations(self):
        """Apply migrations/*.sql that have not run yet"""
        try:
            migrations_path = Path(__file__).parent / "migrations"

            async with self.pool.acquire() as conn:
                await conn.execute("""
                    CREATE TABLE IF NOT EXISTS migrations (
                        id SERIAL PRIMARY KEY,
                        name VARCHAR(255) NOT NULL,
                        applied_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
                    )
                """)

                for migration_file in sorted(migrations_path.glob("*.sql")):
                    migration_name = migration_file.name

                    is_applied = await conn.fetchval(
                        "SELECT COUNT(*) FROM migrations WHERE name = $1",
                        migration_name
                    )

                    if not is_applied:
                        async with conn.transaction():
                            await conn.execute(migration_file.read_text())
                            await conn.execute(
                                "INSERT INTO migrations (name) VALUES ($1)",
                                migration_name
                            )

                        self.logger.info(f"Migration {migration_name} applied")

        except Exception as e:
            self.logger.error(f"Error running migrations: {e}")
            raise
