#!/usr/bin/env python3
"""
Notification endpoints - list notifications and mark them read.
"""

from fastapi import APIRouter, Depends, Query

from ..dependencies import get_current_user_id, get_notification_dispatcher
from ..exceptions import ValidationException
from ..services.presenters import notification_summary
from ..models.requests import NotificationReadRequest
from ..models.responses import (
    NotificationReadResponse,
    NotificationsResponse,
    UnreadCountResponse,
)
from notification.service import NotificationDispatcher, DEFAULT_LIMIT

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=NotificationsResponse)
def get_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(DEFAULT_LIMIT),
    user_id: str = Depends(get_current_user_id),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
):
    """Caller's notifications, newest first. limit must be between 1 and 100."""
    try:
        notifications = dispatcher.get_user_notifications(user_id, unread_only=unread_only, limit=limit)
    except ValueError as e:
        raise ValidationException(str(e))

    return NotificationsResponse(
        success=True,
        notifications=[notification_summary(n) for n in notifications],
        unread_count=dispatcher.get_unread_count(user_id)
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    user_id: str = Depends(get_current_user_id),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
):
    return UnreadCountResponse(success=True, unread_count=dispatcher.get_unread_count(user_id))


@router.post("/read", response_model=NotificationReadResponse)
def mark_notifications_read(
    body: NotificationReadRequest,
    user_id: str = Depends(get_current_user_id),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
):
    """
    Mark one notification ({"id": ...}) or all of them ({"all": true}) as read.

    Marking someone else's notification updates nothing and still succeeds.
    """
    mark_all = body.all is True
    if mark_all == bool(body.id):
        raise ValidationException("Provide either id or all: true")

    if mark_all:
        updated = dispatcher.mark_all_notifications_as_read(user_id)
    else:
        updated = dispatcher.mark_notification_as_read(body.id, user_id)

    return NotificationReadResponse(
        success=True,
        updated=updated,
        unread_count=dispatcher.get_unread_count(user_id)
    )
