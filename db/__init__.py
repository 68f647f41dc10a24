"""Database package for breadcrumb persistence using Beanie ODM.

Modules:
    manager: DatabaseManager singleton for connection handling
    models: Beanie Document models (sessions and breadcrumbs)
"""

from db.manager import DatabaseManager, db_manager
from db.models import ALL_DOCUMENT_MODELS, Breadcrumb, DriveSession


async def init_database() -> None:
    """Connect to MongoDB and initialize Beanie."""
    await db_manager.init_beanie()


__all__ = [
    "ALL_DOCUMENT_MODELS",
    "Breadcrumb",
    "DatabaseManager",
    "DriveSession",
    "db_manager",
    "init_database",
]
