"""
Notification Module

In-app notifications with best-effort email delivery over SMTP, Resend or
a log-only channel, optionally through a Redis Queue.

Usage:
    from notification import NotificationDispatcher, EmailDispatcher

    dispatcher = NotificationDispatcher(email_dispatcher=EmailDispatcher('smtp'))
    dispatcher.create_message_notification(recipient_id, conversation_id, message_id, 'Sam', 'Hi!')
"""

from notification.channels import (
    NotificationChannel,
    EmailChannel,
    ResendEmailChannel,
    LogChannel,
    NotificationChannelFactory,
    OutboundEmail,
)

from notification.message_builder import NotificationMessageBuilder, EmailContent

from notification.service import (
    NotificationDispatcher,
    EmailDispatcher,
    process_email_task,
    truncate_preview,
)

__all__ = [
    # Channels
    'NotificationChannel',
    'EmailChannel',
    'ResendEmailChannel',
    'LogChannel',
    'NotificationChannelFactory',
    'OutboundEmail',
    # Content
    'NotificationMessageBuilder',
    'EmailContent',
    # Service
    'NotificationDispatcher',
    'EmailDispatcher',
    'process_email_task',
    'truncate_preview',
]
