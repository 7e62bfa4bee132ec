"""
NextShop Catalog — MongoDB Connection Management
==================================================

What:  Process-wide MongoDB connection, health ping, and FastAPI dependencies.
How:   One AsyncMongoClient per process, created by MongoConnection.connect()
       during application startup and shared read-only by every request.
Who:   The lifespan handler connects/closes; routes receive the database or
       the products collection through FastAPI's Depends().

Connection Lifecycle:
    startup  → connect(): build client, admin ping round-trip, memoize handle
    requests → database / products collection (no per-request connections)
    shutdown → close()

    connect() is guarded by an asyncio.Lock, so concurrent first callers
    observe exactly one client. A failed connect leaves no client behind
    and raises DatabaseError; startup re-raises it and the process exits.

Pooling, reconnect-on-drop and server monitoring are left to the driver.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

from nextshop.config import settings
from nextshop.exceptions import DatabaseError

logger = logging.getLogger(__name__)

PRODUCTS_COLLECTION = "products"


class MongoConnection:
    """
    Owns the single MongoDB client for this process.

    The handle is set once and only read afterwards; no request mutates it.
    """

    def __init__(self) -> None:
        self._client: Optional[AsyncMongoClient] = None
        self._database: Optional[AsyncDatabase] = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._database is not None

    @property
    def database(self) -> AsyncDatabase:
        """The connected database handle. Raises DatabaseError before connect()."""
        if self._database is None:
            raise DatabaseError(
                message="Database connection is not initialized",
                context={"db_name": settings.db_name},
            )
        return self._database

    async def connect(
        self,
        uri: Optional[str] = None,
        db_name: Optional[str] = None,
    ) -> AsyncDatabase:
        """
        Establish the connection and verify it with a ping round-trip.

        Idempotent: once connected, later calls return the memoized handle.

        Args:
            uri: Override settings.mongo_connection_uri (used in tests).
            db_name: Override settings.db_name.

        Raises:
            DatabaseError: The server could not be reached or rejected the ping.
        """
        if self._database is not None:
            return self._database

        async with self._lock:
            # Another coroutine may have finished connecting while we waited
            if self._database is not None:
                return self._database

            name = db_name or settings.db_name
            client: AsyncMongoClient = AsyncMongoClient(
                uri or settings.mongo_connection_uri,
                server_api=ServerApi("1", strict=True, deprecation_errors=True),
                serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
                tz_aware=True,
            )
            try:
                await client.admin.command("ping")
            except PyMongoError as e:
                await client.close()
                raise DatabaseError(
                    message="Could not connect to MongoDB",
                    context={"db_name": name, "error": str(e)},
                ) from e

            self._client = client
            self._database = client[name]

        logger.info("Connected to MongoDB database '%s'", name)
        return self._database

    async def ping(self) -> Dict[str, Any]:
        """Trivial administrative round-trip against the connected database."""
        return await self.database.command("ping")

    async def close(self) -> None:
        """Close the client. Safe to call when never connected."""
        if self._client is None:
            return
        await self._client.close()
        self._client = None
        self._database = None
        logger.info("MongoDB connection closed")


# Shared connection for the whole process
mongo = MongoConnection()


# ── FastAPI Dependencies ──────────────────────────────────────────────────
async def get_database() -> AsyncDatabase:
    """
    FastAPI dependency returning the shared database handle.

    Example usage in a route:
        @router.get("/ping")
        async def ping(db: AsyncDatabase = Depends(get_database)):
            await db.command("ping")
    """
    return mongo.database


async def get_products_collection() -> AsyncCollection:
    """FastAPI dependency returning the `products` collection."""
    return mongo.database[PRODUCTS_COLLECTION]
