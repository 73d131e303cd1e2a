"""
MongoDB document store.

Collections:
- users, institutions, faculties, courses
- applications (course), jobs, jobApplications
- transcripts, notifications

pymongo is synchronous; every call is pushed to the threadpool so the
event loop is never blocked. Connection pooling is handled by MongoClient.
"""

import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi.concurrency import run_in_threadpool
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from careerguide.db.base import (
    DocumentStore,
    DuplicateDocumentError,
    LOOKUP_INDEXES,
    StoreError,
    UNIQUE_INDEXES,
    check_operator,
)

logger = logging.getLogger(__name__)

MONGO_OPERATORS = {
    "!=": "$ne",
    "<": "$lt",
    "<=": "$lte",
    ">": "$gt",
    ">=": "$gte",
    "in": "$in",
}


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Convert MongoDB document to JSON-serializable dict with an 'id' key."""
    if doc is None:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


def serialize_docs(docs) -> List[dict]:
    return [serialize_doc(doc) for doc in docs]


def to_object_id(doc_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(doc_id)
    except (InvalidId, TypeError):
        return None


def build_filter(field: str, operator: str, value: Any) -> dict:
    check_operator(operator)
    if field == "id":
        field = "_id"
        value = [to_object_id(v) for v in value] if operator == "in" else to_object_id(value)
    if operator in ("==", "array-contains"):
        # Mongo matches array fields against a scalar element
        return {field: value}
    return {field: {MONGO_OPERATORS[operator]: value}}


class MongoDocumentStore(DocumentStore):

    def __init__(self, uri: str, db_name: str, client: Optional[MongoClient] = None):
        self._client = client or MongoClient(uri)
        self._db: Database = self._client[db_name]

    def _collection(self, name: str) -> Collection:
        return self._db[name]

    async def _run(self, func, *args, **kwargs):
        try:
            return await run_in_threadpool(func, *args, **kwargs)
        except DuplicateKeyError as e:
            raise DuplicateDocumentError(str(e)) from e
        except PyMongoError as e:
            raise StoreError(str(e)) from e

    async def get(self, collection: str, doc_id: str) -> Optional[dict]:
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        doc = await self._run(self._collection(collection).find_one, {"_id": oid})
        return serialize_doc(doc)

    async def create(self, collection: str, data: dict) -> dict:
        doc = {k: v for k, v in data.items() if k != "id"}
        result = await self._run(self._collection(collection).insert_one, doc)
        doc.pop("_id", None)
        return {**doc, "id": str(result.inserted_id)}

    async def update(self, collection: str, doc_id: str, data: dict) -> Optional[dict]:
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        changes = {k: v for k, v in data.items() if k not in ("id", "_id")}
        if not changes:
            return await self.get(collection, doc_id)
        doc = await self._run(
            self._collection(collection).find_one_and_update,
            {"_id": oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        return serialize_doc(doc)

    async def delete(self, collection: str, doc_id: str) -> bool:
        oid = to_object_id(doc_id)
        if oid is None:
            return False
        result = await self._run(self._collection(collection).delete_one, {"_id": oid})
        return result.deleted_count > 0

    async def query(self, collection: str, field: str, operator: str, value: Any) -> List[dict]:
        query = build_filter(field, operator, value)
        docs = await self._run(lambda: list(self._collection(collection).find(query)))
        return serialize_docs(docs)

    async def list(self, collection: str, order_by: Optional[str] = None, limit: Optional[int] = None) -> List[dict]:
        def fetch():
            cursor = self._collection(collection).find({})
            if order_by:
                direction = DESCENDING if order_by.startswith("-") else ASCENDING
                cursor = cursor.sort(order_by.lstrip("-"), direction)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)

        return serialize_docs(await self._run(fetch))

    async def find(self, collection: str, filters: Dict[str, Any]) -> List[dict]:
        query = {}
        for field, value in filters.items():
            query.update(build_filter(field, "==", value))
        docs = await self._run(lambda: list(self._collection(collection).find(query)))
        return serialize_docs(docs)

    async def count(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> int:
        query = {}
        for field, value in (filters or {}).items():
            query.update(build_filter(field, "==", value))
        return await self._run(self._collection(collection).count_documents, query)

    async def ping(self) -> bool:
        """Test if MongoDB is reachable."""
        try:
            await self._run(self._client.admin.command, "ping")
            return True
        except StoreError as e:
            logger.warning("MongoDB connection failed: %s", e)
            return False

    async def init_indexes(self) -> None:
        """
        Create unique and lookup indexes.
        Call this once during app startup.
        """
        def create():
            for name, key_sets in UNIQUE_INDEXES.items():
                for keys in key_sets:
                    self._collection(name).create_index([(k, ASCENDING) for k in keys], unique=True)
            for name, fields in LOOKUP_INDEXES.items():
                for field in fields:
                    self._collection(name).create_index(field)

        await self._run(create)
        logger.info("MongoDB indexes created successfully")

    async def close(self) -> None:
        self._client.close()
