#!/usr/bin/env python3
"""
Email delivery channels.

A channel turns an OutboundEmail into a delivered message. Subclasses only
implement deliver(); send() wraps it so configuration gaps and delivery
errors become a False return plus a log line, never an exception.

Usage:
    from notification.channels import NotificationChannelFactory, OutboundEmail

    channel = NotificationChannelFactory.get_channel('resend')
    channel.send(OutboundEmail(to='fan@example.com', subject='Hi', text='...'))
"""

import logging
import os
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Dict, List, Optional, Type

import requests

logger = logging.getLogger(__name__)

DEFAULT_FROM_EMAIL = "Switch With Me <notifications@switchwithme.app>"
RESEND_API_URL = "https://api.resend.com/emails"


def _is_dry_run_mode() -> bool:
    return os.environ.get('NOTIFICATION_DRY_RUN', '').lower() in ('true', '1', 'yes')


def _mask_email(email: str) -> str:
    """Keep only the domain of an address for logging, e.g. ***@example.com."""
    if '@' not in email:
        return "***"
    return f"***@{email.rsplit('@', 1)[1]}"


@dataclass
class OutboundEmail:
    to: str
    subject: str
    text: str
    html: Optional[str] = None
    from_email: Optional[str] = None


class NotificationChannel(ABC):
    """Base class for email channels."""

    name: str = ""

    def is_configured(self) -> bool:
        return True

    @abstractmethod
    def deliver(self, email: OutboundEmail) -> None:
        """Hand the email to the provider; raise on failure."""

    def send(self, email: OutboundEmail) -> bool:
        if not self.is_configured():
            logger.warning(f"{self.name} channel is not configured, email to {_mask_email(email.to)} dropped")
            return False
        try:
            self.deliver(email)
        except Exception as e:
            logger.error(f"{self.name} delivery to {_mask_email(email.to)} failed: {e}")
            return False
        logger.info(f"Email sent to {_mask_email(email.to)} via {self.name}")
        return True


class EmailChannel(NotificationChannel):
    """SMTP with STARTTLS, configured through SMTP_* environment variables."""

    name = 'smtp'
    REQUIRED_ENV = ('SMTP_SERVER', 'SMTP_PORT', 'SMTP_USERNAME', 'SMTP_PASSWORD')

    def is_configured(self) -> bool:
        return all(os.environ.get(var) for var in self.REQUIRED_ENV)

    def _build_mime(self, email: OutboundEmail) -> MIMEMultipart:
        mime = MIMEMultipart('alternative')
        mime['From'] = email.from_email or os.environ.get('FROM_EMAIL', DEFAULT_FROM_EMAIL)
        mime['To'] = email.to
        mime['Subject'] = email.subject
        mime.attach(MIMEText(email.text, 'plain', 'utf-8'))
        if email.html:
            mime.attach(MIMEText(email.html, 'html', 'utf-8'))
        return mime

    def deliver(self, email: OutboundEmail) -> None:
        host = os.environ['SMTP_SERVER']
        port = int(os.environ['SMTP_PORT'])
        with smtplib.SMTP(host, port) as server:
            server.starttls()
            server.login(os.environ['SMTP_USERNAME'], os.environ['SMTP_PASSWORD'])
            server.send_message(self._build_mime(email))


class ResendEmailChannel(NotificationChannel):
    """Resend HTTP API, authenticated with RESEND_API_KEY."""

    name = 'resend'

    def is_configured(self) -> bool:
        return bool(os.environ.get('RESEND_API_KEY'))

    def deliver(self, email: OutboundEmail) -> None:
        payload = {
            'from': email.from_email or os.environ.get('RESEND_FROM', DEFAULT_FROM_EMAIL),
            'to': [email.to],
            'subject': email.subject,
            'text': email.text,
        }
        if email.html:
            payload['html'] = email.html

        response = requests.post(
            RESEND_API_URL,
            json=payload,
            headers={'Authorization': f"Bearer {os.environ['RESEND_API_KEY']}"},
            timeout=10
        )
        response.raise_for_status()


class LogChannel(NotificationChannel):
    """Writes the subject line to the log instead of sending. Used in development and dry runs."""

    name = 'log'

    def deliver(self, email: OutboundEmail) -> None:
        logger.info(f"[DRY RUN] Email to {_mask_email(email.to)}: {email.subject}")


class NotificationChannelFactory:
    """Registry of channel classes keyed by name."""

    _channels: Dict[str, Type[NotificationChannel]] = {
        channel.name: channel for channel in (EmailChannel, ResendEmailChannel, LogChannel)
    }

    @classmethod
    def get_channel(cls, channel_type: str) -> NotificationChannel:
        """
        Instantiate the channel registered under channel_type.

        NOTIFICATION_DRY_RUN returns the log channel whatever was asked for.
        Raises ValueError for an unknown name.
        """
        if _is_dry_run_mode():
            return LogChannel()

        try:
            return cls._channels[channel_type.lower()]()
        except KeyError:
            raise ValueError(
                f"Unknown channel type: {channel_type}. Available: {', '.join(cls._channels)}"
            ) from None

    @classmethod
    def register_channel(cls, channel_type: str, channel_class: type) -> None:
        if not (isinstance(channel_class, type) and issubclass(channel_class, NotificationChannel)):
            raise ValueError("Channel class must extend NotificationChannel")
        cls._channels[channel_type.lower()] = channel_class
        logger.info(f"Registered email channel: {channel_type}")

    @classmethod
    def list_channels(cls) -> List[str]:
        return list(cls._channels)
