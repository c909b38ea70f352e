#!/usr/bin/env python3
"""
Notification Dispatcher - in-app notifications plus best-effort email copies.

Two pieces:
- EmailDispatcher hands emails to a channel, either through a Redis Queue
  (worker process) or on a background thread, and never raises.
- NotificationDispatcher persists MESSAGE and MATCH notifications, answers
  read-side queries, and asks the EmailDispatcher to mail recipients who opted in.

Usage:
    from notification.service import NotificationDispatcher, EmailDispatcher

    dispatcher = NotificationDispatcher(
        email_dispatcher=EmailDispatcher(channel_type='resend'),
        base_url='https://switchwith.me'
    )
    dispatcher.create_match_notification(user_id, listing_id, matched_id, score=17)
"""

import logging
import threading
from typing import Optional, Dict, Any, List, Tuple

from redis import Redis
from rq import Queue, Retry

from database.models import Notification, User, NOTIFICATION_TYPE_MESSAGE, NOTIFICATION_TYPE_MATCH
from database.uow import swap_uow
from notification.channels import NotificationChannelFactory, OutboundEmail, _mask_email
from notification.message_builder import NotificationMessageBuilder, EmailContent

logger = logging.getLogger(__name__)

DEFAULT_MATCH_DESCRIPTION = "We found a potential seat match for you!"
DEFAULT_LIMIT = 50
MAX_LIMIT = 100


def truncate_preview(text: str, length: int = 100) -> str:
    if len(text) > length:
        return text[:length] + "..."
    return text


def process_email_task(email_data: Dict[str, Any]) -> bool:
    """
    Deliver one email (called by the RQ worker or a background thread).

    Returns the channel's success flag. Channel errors are logged by the channel.
    """
    channel = NotificationChannelFactory.get_channel(email_data['channel_type'])
    success = channel.send(OutboundEmail(
        to=email_data['to'],
        subject=email_data['subject'],
        text=email_data['body'],
        html=email_data.get('html'),
        from_email=email_data.get('from_email'),
    ))
    if not success:
        logger.warning(f"Email to {_mask_email(email_data['to'])} was not delivered")
    return success


def _process_email_safely(email_data: Dict[str, Any]) -> None:
    try:
        process_email_task(email_data)
    except Exception as e:
        logger.error(f"Email delivery to {_mask_email(email_data['to'])} failed: {e}")


class EmailDispatcher:
    """
    Fire-and-forget email sender.

    With use_async_queue the email is enqueued for notification.worker;
    otherwise it is sent on a daemon thread (or inline when background=False).
    A failed Redis connection falls back to thread mode.
    """

    QUEUE_NAME = 'notifications'

    def __init__(
        self,
        channel_type: str = 'log',
        from_email: Optional[str] = None,
        use_async_queue: bool = False,
        redis_url: Optional[str] = None,
        background: bool = True
    ):
        self.channel_type = channel_type
        self.from_email = from_email
        self.background = background
        self.redis_url = redis_url or 'redis://localhost:6379/0'

        if not use_async_queue:
            logger.info("Async email queue disabled via config. Using sync mode.")
            self.redis_conn = None
            self.queue = None
            self.async_mode = False
        else:
            try:
                self.redis_conn = Redis.from_url(self.redis_url)
                # Validate connection with ping before using
                self.redis_conn.ping()
                self.queue = Queue(self.QUEUE_NAME, connection=self.redis_conn)
                self.async_mode = True
                logger.info("Email dispatcher connected to Redis")
            except Exception as e:
                logger.error(f"Redis connection failed: {e}. Falling back to sync mode.")
                self.redis_conn = None
                self.queue = None
                self.async_mode = False

    def send(self, to: str, subject: str, body: str, html: Optional[str] = None) -> Optional[str]:
        """Queue or start delivery. Returns the RQ job id in async mode."""
        email_data = {
            'channel_type': self.channel_type,
            'to': to,
            'subject': subject,
            'body': body,
            'html': html,
            'from_email': self.from_email,
        }

        try:
            if self.async_mode:
                retry_policy = Retry(max=3, interval=[30, 60, 120])
                job = self.queue.enqueue(
                    process_email_task,
                    email_data,
                    job_timeout='5m',
                    result_ttl=86400,
                    retry=retry_policy
                )
                logger.info(f"Queued email as job {job.id}")
                return job.id

            if self.background:
                threading.Thread(target=_process_email_safely, args=(email_data,), daemon=True).start()
            else:
                _process_email_safely(email_data)
        except Exception as e:
            logger.error(f"Failed to dispatch email to {_mask_email(to)}: {e}")
        return None


class NotificationDispatcher:
    """Creates, lists and marks in-app notifications."""

    def __init__(
        self,
        session_factory=None,
        email_dispatcher: Optional[EmailDispatcher] = None,
        base_url: str = "http://localhost:3000",
        email_enabled: bool = True,
        preview_length: int = 100
    ):
        self.session_factory = session_factory
        self.email_dispatcher = email_dispatcher
        self.message_builder = NotificationMessageBuilder(base_url)
        self.email_enabled = email_enabled and email_dispatcher is not None
        self.preview_length = preview_length

    @staticmethod
    def _email_target(user: Optional[User]) -> Optional[Tuple[str, Optional[str]]]:
        if user is None or not user.email_notifications_enabled or not user.email:
            return None
        return user.email, user.display_name

    def _create(self, user_id: str, notification_type: str, data: Dict[str, Any]):
        with swap_uow(self.session_factory) as repo:
            notification = repo.notifications.create_notification(user_id, notification_type, data)
            target = self._email_target(repo.users.get_by_id(user_id)) if self.email_enabled else None
            return notification, target

    def _send_email(self, email: str, content: EmailContent) -> None:
        try:
            self.email_dispatcher.send(email, content.subject, content.text, html=content.html)
        except Exception as e:
            logger.error(f"Failed to send notification email to {_mask_email(email)}: {e}")

    def create_message_notification(
        self,
        recipient_id: str,
        conversation_id: str,
        message_id: str,
        sender_name: str,
        preview: str
    ) -> Notification:
        data = {
            'conversation_id': conversation_id,
            'message_id': message_id,
            'sender_name': sender_name,
            'preview': truncate_preview(preview, self.preview_length),
        }
        notification, target = self._create(recipient_id, NOTIFICATION_TYPE_MESSAGE, data)

        if target:
            email, name = target
            content = self.message_builder.build_message_email(name, sender_name, data['preview'], conversation_id)
            self._send_email(email, content)

        return notification

    def create_match_notification(
        self,
        user_id: str,
        listing_id: str,
        matched_listing_id: str,
        score: Optional[int] = None,
        description: Optional[str] = None
    ) -> Notification:
        data = {
            'listing_id': listing_id,
            'matched_listing_id': matched_listing_id,
            'score': score,
            'description': description or DEFAULT_MATCH_DESCRIPTION,
        }
        notification, target = self._create(user_id, NOTIFICATION_TYPE_MATCH, data)

        if target:
            email, name = target
            content = self.message_builder.build_match_email(name, data['description'])
            self._send_email(email, content)

        return notification

    def get_user_notifications(
        self,
        user_id: str,
        unread_only: bool = False,
        limit: int = DEFAULT_LIMIT
    ) -> List[Notification]:
        """Newest first. Raises ValueError for a limit outside 1..100."""
        if limit < 1 or limit > MAX_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_LIMIT}")
        with swap_uow(self.session_factory) as repo:
            return repo.notifications.list_for_user(user_id, unread_only=unread_only, limit=limit)

    def get_unread_count(self, user_id: str) -> int:
        with swap_uow(self.session_factory) as repo:
            return repo.notifications.count_unread(user_id)

    def mark_notification_as_read(self, notification_id: str, user_id: str) -> int:
        """Returns rows updated; zero (not someone else's row) is still success."""
        with swap_uow(self.session_factory) as repo:
            return repo.notifications.mark_read(notification_id, user_id)

    def mark_all_notifications_as_read(self, user_id: str) -> int:
        with swap_uow(self.session_factory) as repo:
            updated = repo.notifications.mark_all_read(user_id)
        logger.info(f"Marked {updated} notifications read for user {user_id}")
        return updated
