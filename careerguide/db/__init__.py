"""
Database module - document store adapters and the FastAPI store dependency.
"""

import logging

from fastapi import Request

from careerguide.core.config import Settings
from careerguide.db.base import COLLECTIONS, DocumentStore, DuplicateDocumentError, StoreError
from careerguide.db.memory import MemoryDocumentStore
from careerguide.db.mongodb import MongoDocumentStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> DocumentStore:
    """MongoDB when a URI is configured, otherwise the in-memory store."""
    if settings.use_memory_store:
        logger.warning("MONGODB_URI not set - using in-memory document store")
        return MemoryDocumentStore()
    logger.info("Using MongoDB database '%s'", settings.mongodb_db)
    return MongoDocumentStore(settings.mongodb_uri, settings.mongodb_db)


def get_store(request: Request) -> DocumentStore:
    """
    Dependency for FastAPI route injection.
    Usage:
        @router.get("/things")
        async def things(store: DocumentStore = Depends(get_store)):
            ...
    """
    return request.app.state.store


__all__ = [
    "COLLECTIONS",
    "DocumentStore",
    "DuplicateDocumentError",
    "StoreError",
    "MemoryDocumentStore",
    "MongoDocumentStore",
    "build_store",
    "get_store",
]
