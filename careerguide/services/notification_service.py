"""
In-app notifications stored in the ``notifications`` collection.
"""

import logging
from typing import List, Optional

from careerguide.db import COLLECTIONS, DocumentStore
from careerguide.utils.helpers import utc_now_iso

logger = logging.getLogger(__name__)


async def notify(
    store: DocumentStore,
    user_id: str,
    title: str,
    message: str,
    type: str = "system",
    related_id: Optional[str] = None,
    priority: str = "normal",
) -> dict:
    """Create an unread notification for ``user_id``."""
    notification = await store.create(COLLECTIONS["notifications"], {
        "userId": user_id,
        "title": title,
        "message": message,
        "type": type,
        "relatedId": related_id,
        "read": False,
        "priority": priority,
        "createdAt": utc_now_iso(),
    })
    logger.debug("Notification %s for user %s", notification["id"], user_id)
    return notification


async def list_for_user(store: DocumentStore, user_id: str) -> List[dict]:
    """The user's notifications, newest first."""
    docs = await store.query(COLLECTIONS["notifications"], "userId", "==", user_id)
    return sorted(docs, key=lambda n: n.get("createdAt", ""), reverse=True)


async def mark_read(store: DocumentStore, user_id: str, notification_id: str) -> Optional[dict]:
    """Mark one of the user's notifications read. None when it isn't theirs."""
    notification = await store.get(COLLECTIONS["notifications"], notification_id)
    if not notification or notification.get("userId") != user_id:
        return None
    return await store.update(
        COLLECTIONS["notifications"], notification_id, {"read": True, "readAt": utc_now_iso()}
    )
