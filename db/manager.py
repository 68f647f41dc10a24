"""
MongoDB connection management.

Provides a singleton DatabaseManager that owns the motor client and
initializes Beanie with every document model.
"""

from __future__ import annotations

import logging
import threading
from datetime import UTC
from typing import Any, Self

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from config import MONGODB_DATABASE, MONGODB_URI

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Singleton class to manage the MongoDB client and Beanie initialization.

    Environment Variables:
        MONGODB_URI: MongoDB connection string
        MONGODB_DATABASE: Database name (default: streetsweep)
    """

    _instance: DatabaseManager | None = None
    _lock = threading.Lock()

    def __new__(cls) -> Self:
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if not getattr(self, "_initialized", False):
            self._client: AsyncIOMotorClient | None = None
            self._db: AsyncIOMotorDatabase | None = None
            self._beanie_initialized = False
            self._initialized = True

    def _initialize_client(self) -> None:
        client_kwargs: dict[str, Any] = {
            "tz_aware": True,
            "tzinfo": UTC,
            "serverSelectionTimeoutMS": 10000,
            "appname": "StreetSweep",
        }
        try:
            self._client = AsyncIOMotorClient(MONGODB_URI, **client_kwargs)
            self._db = self._client[MONGODB_DATABASE]
            logger.info("MongoDB client initialized for database %s", MONGODB_DATABASE)
        except Exception:
            logger.exception("Failed to initialize MongoDB client")
            raise

    @property
    def db(self) -> AsyncIOMotorDatabase:
        if self._db is None:
            self._initialize_client()
        return self._db

    async def init_beanie(self) -> None:
        """Bind every document model to the database. Idempotent."""
        if self._beanie_initialized:
            logger.debug("Beanie already initialized, skipping")
            return

        from beanie import init_beanie

        from db.models import ALL_DOCUMENT_MODELS

        await init_beanie(database=self.db, document_models=ALL_DOCUMENT_MODELS)
        self._beanie_initialized = True
        logger.info(
            "Beanie ODM initialized with %d document models",
            len(ALL_DOCUMENT_MODELS),
        )

    async def cleanup_connections(self) -> None:
        if self._client:
            try:
                logger.info("Closing MongoDB client connections...")
                self._client.close()
            except Exception:
                logger.exception("Error closing MongoDB client")
            finally:
                self._client = None
                self._db = None
                self._beanie_initialized = False


db_manager = DatabaseManager()
