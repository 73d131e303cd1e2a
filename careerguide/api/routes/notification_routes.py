"""
Notification Routes (any authenticated user)

GET /notifications - Own notifications, newest first
PATCH /notifications/{id}/read - Mark one as read
"""

from fastapi import APIRouter, Depends

from careerguide.core.auth import authenticate
from careerguide.core.errors import APIError
from careerguide.db import DocumentStore, get_store
from careerguide.services import notification_service
from careerguide.utils.helpers import format_response

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("")
async def my_notifications(user: dict = Depends(authenticate), store: DocumentStore = Depends(get_store)):
    notifications = await notification_service.list_for_user(store, user["id"])
    unread = sum(1 for n in notifications if not n.get("read"))
    return format_response(True, "Notifications retrieved successfully", notifications, unreadCount=unread)


@router.patch("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    user: dict = Depends(authenticate),
    store: DocumentStore = Depends(get_store),
):
    notification = await notification_service.mark_read(store, user["id"], notification_id)
    if notification is None:
        raise APIError(404, "Notification not found")
    return format_response(True, "Notification marked as read", notification)
