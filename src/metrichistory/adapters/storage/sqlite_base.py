"""Base class for SQLite storage adapters."""

import asyncio
import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite

from metrichistory.core.exceptions import StorageFault


class AsyncConnectionManager:
    """Manages async (aiosqlite) database connections.

    Handles schema initialization and connection lifecycle for async contexts.
    For :memory: databases, maintains a persistent connection since SQLite
    in-memory databases are connection-scoped.
    """

    def __init__(self, db_path: str, schema: str) -> None:
        self._db_path = db_path
        self._schema = schema
        self._initialized = False
        self._init_lock: asyncio.Lock | None = None
        self._persistent_conn: aiosqlite.Connection | None = None

    def _get_lock(self) -> asyncio.Lock:
        """Get or create the initialization lock (lazy to avoid event loop issues)."""
        if self._init_lock is None:
            self._init_lock = asyncio.Lock()
        return self._init_lock

    @property
    def _should_close_connection(self) -> bool:
        """Return True if connections should be closed after use."""
        return self._db_path != ":memory:"

    async def _ensure_initialized(self) -> None:
        """Create the schema once (create-on-first-use)."""
        if self._initialized:
            return
        async with self._get_lock():
            if self._initialized:
                return
            if self._db_path == ":memory:":
                self._persistent_conn = await aiosqlite.connect(":memory:")
                await self._persistent_conn.executescript(self._schema)
            else:
                async with aiosqlite.connect(self._db_path) as db:
                    await db.execute("PRAGMA journal_mode=WAL")
                    await db.executescript(self._schema)
            self._initialized = True

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get a database connection."""
        await self._ensure_initialized()
        if self._db_path == ":memory:":
            if self._persistent_conn is None:
                raise RuntimeError("Memory database connection not initialized")
            return self._persistent_conn
        return await aiosqlite.connect(self._db_path)

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Context manager for async database connections.

        Automatically closes connections for file-based databases.
        For :memory: databases, keeps connections open (they're persistent).
        """
        db = await self._get_connection()
        try:
            yield db
        finally:
            if self._should_close_connection:
                await db.close()

    async def close(self) -> None:
        """Close persistent connection (for :memory: databases)."""
        if self._persistent_conn is not None:
            await self._persistent_conn.close()
            self._persistent_conn = None
            self._initialized = False


class SQLiteStorageBase:
    """Base class for SQLite storage adapters.

    Delegates connection lifecycle to AsyncConnectionManager. Subclasses
    provide the schema and implement domain-specific read/write methods.

    Every sqlite3.Error raised inside async_connection() surfaces as a
    StorageFault, so callers only handle the domain error type.
    """

    def __init__(self, db_path: str, schema: str) -> None:
        self._db_path = db_path
        self._schema = schema
        self._async_manager = AsyncConnectionManager(db_path, schema)

    async def close(self) -> None:
        """Close persistent connection (for :memory: databases)."""
        await self._async_manager.close()

    @asynccontextmanager
    async def async_connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Context manager for async database connections."""
        try:
            async with self._async_manager.connection() as conn:
                yield conn
        except sqlite3.Error as exc:
            raise StorageFault(f"SQLite operation failed on {self._db_path}") from exc
