"""
Document store contract.

Routes and services only talk to ``DocumentStore``; the concrete adapter is
chosen at startup (MongoDB when credentials are configured, memory otherwise).

Documents are plain dicts. Every document handed back carries its
store-generated ``id``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class StoreError(Exception):
    """Generic document store failure."""


class DuplicateDocumentError(StoreError):
    """A write violated one of the UNIQUE_INDEXES."""


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "institutions": "institutions",
    "faculties": "faculties",
    "courses": "courses",
    "applications": "applications",
    "jobs": "jobs",
    "job_applications": "jobApplications",
    "transcripts": "transcripts",
    "notifications": "notifications",
}

# collection -> list of unique key tuples
UNIQUE_INDEXES = {
    COLLECTIONS["users"]: [("email",)],
    COLLECTIONS["applications"]: [("studentId", "courseId")],
    COLLECTIONS["job_applications"]: [("studentId", "jobId")],
}

# Plain (non-unique) lookup indexes
LOOKUP_INDEXES = {
    COLLECTIONS["users"]: ["role", "verificationToken", "resetPasswordToken"],
    COLLECTIONS["courses"]: ["institutionId"],
    COLLECTIONS["faculties"]: ["institutionId"],
    COLLECTIONS["applications"]: ["institutionId", "courseId", "status"],
    COLLECTIONS["jobs"]: ["companyId", "status"],
    COLLECTIONS["job_applications"]: ["jobId"],
    COLLECTIONS["transcripts"]: ["studentId"],
    COLLECTIONS["notifications"]: ["userId"],
}

OPERATORS = ("==", "!=", "<", "<=", ">", ">=", "in", "array-contains")


def check_operator(operator: str) -> None:
    if operator not in OPERATORS:
        raise StoreError(f"Unsupported query operator '{operator}'")


class DocumentStore(ABC):
    """Async CRUD over named collections of schema-free documents."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[dict]:
        """Fetch one document by id, or None."""

    @abstractmethod
    async def create(self, collection: str, data: dict) -> dict:
        """Insert a document and return it with its new id."""

    @abstractmethod
    async def update(self, collection: str, doc_id: str, data: dict) -> Optional[dict]:
        """Shallow-merge ``data`` into a document. None if it does not exist."""

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        """Remove a document. True if something was deleted."""

    @abstractmethod
    async def query(self, collection: str, field: str, operator: str, value: Any) -> List[dict]:
        """Documents where ``field <operator> value``."""

    @abstractmethod
    async def list(self, collection: str, order_by: Optional[str] = None, limit: Optional[int] = None) -> List[dict]:
        """
        All documents of a collection.

        ``order_by`` names a field; prefix it with '-' for descending order.
        """

    @abstractmethod
    async def find(self, collection: str, filters: Dict[str, Any]) -> List[dict]:
        """Documents matching every ``field == value`` pair in ``filters``."""

    async def find_one(self, collection: str, filters: Dict[str, Any]) -> Optional[dict]:
        docs = await self.find(collection, filters)
        return docs[0] if docs else None

    async def count(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> int:
        if filters:
            return len(await self.find(collection, filters))
        return len(await self.list(collection))

    async def ping(self) -> bool:
        return True

    async def init_indexes(self) -> None:
        """Create indexes. No-op for stores without index support."""

    async def close(self) -> None:
        """Release connections."""
