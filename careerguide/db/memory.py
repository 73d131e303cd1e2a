"""
In-memory document store.

Used when no database credentials are configured (local development and
tests). Same call shape as the MongoDB adapter; state lives on the instance,
so every app (and every test) owns its own data.
"""

import copy
import logging
import uuid
from typing import Any, Dict, List, Optional

from careerguide.db.base import (
    DocumentStore,
    DuplicateDocumentError,
    UNIQUE_INDEXES,
    check_operator,
)

logger = logging.getLogger(__name__)


def _matches(doc: dict, field: str, operator: str, value: Any) -> bool:
    if field not in doc:
        return operator == "!="
    current = doc[field]
    try:
        if operator == "==":
            return current == value
        if operator == "!=":
            return current != value
        if operator == "<":
            return current < value
        if operator == "<=":
            return current <= value
        if operator == ">":
            return current > value
        if operator == ">=":
            return current >= value
        if operator == "in":
            return current in value
        if operator == "array-contains":
            return isinstance(current, (list, tuple)) and value in current
    except TypeError:
        # Mixed types never compare, same as a typed query on a real store
        return False
    return False


def _sort_key(field: str):
    # None/missing values sort first, mixed types sort by their string form
    def key(doc: dict):
        value = doc.get(field)
        return (value is not None, str(type(value)), value if value is not None else 0)
    return key


class MemoryDocumentStore(DocumentStore):

    def __init__(self):
        self._collections: Dict[str, Dict[str, dict]] = {}

    def _bucket(self, collection: str) -> Dict[str, dict]:
        return self._collections.setdefault(collection, {})

    def _check_unique(self, collection: str, doc: dict, doc_id: str) -> None:
        for keys in UNIQUE_INDEXES.get(collection, []):
            if not all(k in doc for k in keys):
                continue
            for other_id, other in self._bucket(collection).items():
                if other_id != doc_id and all(other.get(k) == doc[k] for k in keys):
                    raise DuplicateDocumentError(
                        f"Duplicate {collection} document for {', '.join(keys)}"
                    )

    def _insert(self, collection: str, data: dict) -> dict:
        doc = copy.deepcopy(data)
        doc_id = str(doc.pop("id", None) or uuid.uuid4().hex)
        doc["id"] = doc_id
        self._check_unique(collection, doc, doc_id)
        self._bucket(collection)[doc_id] = doc
        return copy.deepcopy(doc)

    async def get(self, collection: str, doc_id: str) -> Optional[dict]:
        doc = self._bucket(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def create(self, collection: str, data: dict) -> dict:
        doc = self._insert(collection, data)
        logger.debug("memory store: created %s/%s", collection, doc["id"])
        return doc

    async def update(self, collection: str, doc_id: str, data: dict) -> Optional[dict]:
        bucket = self._bucket(collection)
        if doc_id not in bucket:
            return None
        merged = {**bucket[doc_id], **copy.deepcopy(data), "id": doc_id}
        self._check_unique(collection, merged, doc_id)
        bucket[doc_id] = merged
        return copy.deepcopy(merged)

    async def delete(self, collection: str, doc_id: str) -> bool:
        return self._bucket(collection).pop(doc_id, None) is not None

    async def query(self, collection: str, field: str, operator: str, value: Any) -> List[dict]:
        check_operator(operator)
        return [
            copy.deepcopy(doc) for doc in self._bucket(collection).values()
            if _matches(doc, field, operator, value)
        ]

    async def list(self, collection: str, order_by: Optional[str] = None, limit: Optional[int] = None) -> List[dict]:
        docs = [copy.deepcopy(doc) for doc in self._bucket(collection).values()]
        if order_by:
            field = order_by.lstrip("-")
            docs.sort(key=_sort_key(field), reverse=order_by.startswith("-"))
        if limit is not None:
            docs = docs[:limit]
        return docs

    async def find(self, collection: str, filters: Dict[str, Any]) -> List[dict]:
        return [
            copy.deepcopy(doc) for doc in self._bucket(collection).values()
            if all(_matches(doc, field, "==", value) for field, value in filters.items())
        ]
