#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from core.app_context import AppContext
from .config import get_config
from .exceptions import UnauthorizedException
from .services import CreditLedger, ConversationCoordinator, ListingService
from notification.service import NotificationDispatcher


@lru_cache()
def get_app_context() -> AppContext:
    """
    Wired services for the running process, built once from configuration.

    Tests replace this through app.dependency_overrides.
    """
    return AppContext.build(get_config())


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """
    Authenticated user id.

    Session handling lives in front of this service; it forwards the
    authenticated id in the X-User-Id header.
    """
    if not x_user_id:
        raise UnauthorizedException("Unauthorized")
    return x_user_id


def get_listing_service(ctx: AppContext = Depends(get_app_context)) -> ListingService:
    return ctx.listing_service


def get_conversation_coordinator(ctx: AppContext = Depends(get_app_context)) -> ConversationCoordinator:
    return ctx.conversation_coordinator


def get_notification_dispatcher(ctx: AppContext = Depends(get_app_context)) -> NotificationDispatcher:
    return ctx.notification_dispatcher


def get_credit_ledger(ctx: AppContext = Depends(get_app_context)) -> CreditLedger:
    return ctx.credit_ledger
