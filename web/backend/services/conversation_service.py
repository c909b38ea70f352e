#!/usr/bin/env python3
"""
Conversation coordinator - starts, messages, ends and archives conversations.

start_or_get_conversation guarantees at most one conversation per
(user pair, listing). The guarantee rests on the UNIQUE dedup_key column:
lookups are an optimisation, and an insert that loses a race rolls back
(refunding any credit spent in the same transaction) and returns the row
the winning request created.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from core.realtime import RealtimeChannel, NullRealtimeChannel, NEW_MESSAGE_EVENT
from database.models import (
    Conversation,
    Message,
    CONVERSATION_STATUS_ENDED,
    LISTING_STATUS_ACTIVE,
    LISTING_STATUS_MATCHED,
    TERMINAL_LISTING_STATUSES,
    build_dedup_key,
    utcnow,
)
from database.repository import SwapRepository
from database.uow import swap_uow
from notification.service import NotificationDispatcher
from .credit_service import CreditLedger
from ..exceptions import ValidationException, NotFoundException, ForbiddenException

logger = logging.getLogger(__name__)

# Phrases that usually mean the ticket has changed hands
COMPLETION_PHRASES = (
    "transferred",
    "sent you the ticket",
    "sent the ticket",
    "got the ticket",
    "received the ticket",
    "swap is done",
    "swap complete",
    "all set",
    "we're good",
    "thanks for the swap",
    "swap successful",
    "ticket transferred",
)

END_REASONS = {
    "completed": "Swap completed",
    "unsafe": "Safety concern",
    "not_interested": "No longer interested",
    "other": "Other reason",
}

UNKNOWN_SENDER_NAME = "Someone"


def mentions_swap_completion(text: str) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in COMPLETION_PHRASES)


@dataclass
class SendMessageResult:
    message: Message
    suggest_set_inactive: bool = False
    listing_id: Optional[str] = None


@dataclass
class ConversationOverview:
    conversation: Conversation
    last_message: Optional[Message]
    archived: bool


class ConversationCoordinator:
    def __init__(
        self,
        session_factory=None,
        ledger: Optional[CreditLedger] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        realtime: Optional[RealtimeChannel] = None,
        pay_to_chat_enabled: bool = False,
        conversation_cost: int = 1
    ):
        self.session_factory = session_factory
        self.ledger = ledger or CreditLedger(session_factory)
        self.dispatcher = dispatcher
        self.realtime = realtime or NullRealtimeChannel()
        self.pay_to_chat_enabled = pay_to_chat_enabled
        self.conversation_cost = conversation_cost

    # ------------------------------------------------------------------
    # Start
    # ------------------------------------------------------------------

    def start_or_get_conversation(
        self,
        user_id: str,
        other_user_id: Optional[str],
        listing_id: Optional[str] = None
    ) -> Conversation:
        """
        Return the conversation for (user pair, listing), creating it if needed.

        Raises:
            ValidationException: missing/self target, or listing not owned by the target
            NotFoundException: target user or listing does not exist
            PaymentRequiredException: paywall on and the caller cannot pay
        """
        if not other_user_id:
            raise ValidationException("other_user_id is required")
        if other_user_id == user_id:
            raise ValidationException("Cannot start a conversation with yourself")

        dedup_key = build_dedup_key(user_id, other_user_id, listing_id)

        try:
            existing = self._validate_and_find(user_id, other_user_id, listing_id, dedup_key)
        except IntegrityError:
            # Attaching our listing-less conversation collided with a concurrent create
            logger.info(f"Concurrent create detected while attaching listing for {dedup_key}")
            return self._fetch_by_key(dedup_key)

        if existing is not None:
            return existing

        try:
            conversation, created = self._create(user_id, other_user_id, listing_id, dedup_key)
        except IntegrityError:
            logger.info(f"Conversation {dedup_key} created concurrently, returning existing one")
            return self._fetch_by_key(dedup_key)

        if created and not self.pay_to_chat_enabled:
            self._record_free_start(user_id, conversation.id)

        return conversation

    def _validate_and_find(
        self,
        user_id: str,
        other_user_id: str,
        listing_id: Optional[str],
        dedup_key: str
    ) -> Optional[Conversation]:
        with swap_uow(self.session_factory) as repo:
            if repo.users.get_by_id(other_user_id) is None:
                raise NotFoundException("User not found")

            if listing_id:
                listing = repo.listings.get_by_id(listing_id)
                if listing is None:
                    raise NotFoundException("Listing not found")
                if listing.owner_id != other_user_id:
                    raise ValidationException("Listing does not belong to this user")

            existing = repo.conversations.get_by_dedup_key(dedup_key)
            if existing is not None or not listing_id:
                return existing

            # A general conversation between the pair takes on the listing
            general = repo.conversations.get_by_dedup_key(build_dedup_key(user_id, other_user_id))
            if general is not None:
                repo.conversations.attach_listing(general, listing_id)
                logger.info(f"Attached listing {listing_id} to conversation {general.id}")
            return general

    def _create(self, user_id: str, other_user_id: str, listing_id: Optional[str], dedup_key: str):
        with swap_uow(self.session_factory) as repo:
            existing = repo.conversations.get_by_dedup_key(dedup_key)
            if existing is not None:
                return existing, False

            if self.pay_to_chat_enabled:
                other_user = repo.users.get_by_id(other_user_id)
                counterpart = (other_user.display_name if other_user else None) or "another user"
                self.ledger.spend(
                    user_id,
                    self.conversation_cost,
                    note=f"Started conversation with {counterpart}",
                    repo=repo
                )

            conversation = repo.conversations.create_conversation(user_id, other_user_id, listing_id)

        logger.info(f"Created conversation {conversation.id} ({dedup_key})")
        return conversation, True

    def _fetch_by_key(self, dedup_key: str) -> Conversation:
        with swap_uow(self.session_factory) as repo:
            conversation = repo.conversations.get_by_dedup_key(dedup_key)
        if conversation is None:
            # The conflicting row vanished (e.g. its listing was deleted) between insert and read
            raise NotFoundException("Conversation not found")
        return conversation

    def _record_free_start(self, user_id: str, conversation_id: str) -> None:
        try:
            self.ledger.record_audit(user_id, note=f"Started conversation {conversation_id} (free)")
        except Exception as e:
            logger.error(f"Failed to record audit entry for conversation {conversation_id}: {e}")

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @staticmethod
    def _require_participant(repo: SwapRepository, conversation_id: str, user_id: str, with_messages: bool = False):
        conversation = repo.conversations.get_by_id(conversation_id, with_messages=with_messages)
        if conversation is None:
            raise NotFoundException("Conversation not found")
        if user_id not in conversation.participant_ids:
            raise ForbiddenException("You are not a participant in this conversation")
        return conversation

    def get_conversation(self, conversation_id: str, user_id: str) -> Conversation:
        with swap_uow(self.session_factory) as repo:
            return self._require_participant(repo, conversation_id, user_id, with_messages=True)

    def list_conversations(self, user_id: str, include_archived: bool = True) -> List[ConversationOverview]:
        """Caller's conversations, most recent activity first."""
        with swap_uow(self.session_factory) as repo:
            overviews = []
            for conversation in repo.conversations.list_for_user(user_id, include_archived=include_archived):
                archived = any(p.archived for p in conversation.participants if p.user_id == user_id)
                overviews.append(ConversationOverview(
                    conversation=conversation,
                    last_message=repo.conversations.get_last_message(conversation.id),
                    archived=archived,
                ))
            return overviews

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def send_message(self, conversation_id: str, sender_id: str, text: Optional[str]) -> SendMessageResult:
        text = (text or "").strip()
        if not text:
            raise ValidationException("Message text is required")

        with swap_uow(self.session_factory) as repo:
            conversation = self._require_participant(repo, conversation_id, sender_id)
            if conversation.status == CONVERSATION_STATUS_ENDED:
                raise ValidationException("This conversation has ended")

            message = repo.conversations.add_message(conversation, sender_id, text)

            sender = repo.users.get_by_id(sender_id)
            sender_name = (sender.display_name if sender else None) or UNKNOWN_SENDER_NAME
            recipient_ids = [uid for uid in conversation.participant_ids if uid != sender_id]

            suggested_listing_id = None
            listing = conversation.listing
            if (
                listing is not None
                and mentions_swap_completion(text)
                and listing.owner_id == sender_id
                and listing.status == LISTING_STATUS_ACTIVE
            ):
                suggested_listing_id = listing.id

        self._publish_new_message(conversation_id, message, sender_name)
        for recipient_id in recipient_ids:
            self._notify_recipient(recipient_id, conversation_id, message, sender_name)

        return SendMessageResult(
            message=message,
            suggest_set_inactive=suggested_listing_id is not None,
            listing_id=suggested_listing_id,
        )

    def _publish_new_message(self, conversation_id: str, message: Message, sender_name: str) -> None:
        payload = {
            "event": NEW_MESSAGE_EVENT,
            "message": {
                "id": message.id,
                "conversation_id": conversation_id,
                "sender_id": message.sender_id,
                "sender_name": sender_name,
                "text": message.text,
                "created_at": message.created_at.isoformat(),
            },
        }
        try:
            self.realtime.publish(conversation_id, payload)
        except Exception as e:
            logger.error(f"Realtime publish failed for conversation {conversation_id}: {e}")

    def _notify_recipient(self, recipient_id: str, conversation_id: str, message: Message, sender_name: str) -> None:
        if self.dispatcher is None:
            return
        try:
            self.dispatcher.create_message_notification(
                recipient_id,
                conversation_id,
                message.id,
                sender_name,
                message.text
            )
        except Exception as e:
            logger.error(f"Failed to create message notification for {recipient_id}: {e}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def end_conversation(
        self,
        conversation_id: str,
        user_id: str,
        reason: str,
        other_reason_text: Optional[str] = None
    ) -> Conversation:
        if reason not in END_REASONS:
            raise ValidationException("Invalid reason")

        ended_reason = END_REASONS[reason]
        if reason == "other" and other_reason_text and other_reason_text.strip():
            ended_reason = other_reason_text.strip()

        with swap_uow(self.session_factory) as repo:
            conversation = self._require_participant(repo, conversation_id, user_id)
            if conversation.status == CONVERSATION_STATUS_ENDED:
                raise ValidationException("This conversation has already ended")

            conversation.status = CONVERSATION_STATUS_ENDED
            conversation.ended_at = utcnow()
            conversation.ended_by = user_id
            conversation.ended_reason = ended_reason

            user = repo.users.get_by_id(user_id)
            name = (user.display_name if user else None) or "A user"
            repo.conversations.add_message(
                conversation,
                user_id,
                f"🔒 {name} ended this conversation: {ended_reason}"
            )

        logger.info(f"Conversation {conversation_id} ended by {user_id}: {ended_reason}")
        return conversation

    def archive_conversation(self, conversation_id: str, user_id: str, archived: bool) -> bool:
        if not isinstance(archived, bool):
            raise ValidationException("archived must be a boolean")

        with swap_uow(self.session_factory) as repo:
            if repo.conversations.get_by_id(conversation_id) is None:
                raise NotFoundException("Conversation not found")
            participant = repo.conversations.get_participant(conversation_id, user_id)
            if participant is None:
                raise ForbiddenException("You are not a participant in this conversation")
            participant.archived = archived
        return archived

    def complete_swap(self, user_id: str, my_listing_id: Optional[str], their_listing_id: Optional[str]):
        """
        Mark both sides of a swap MATCHED and credit each owner with a successful swap.
        """
        if not my_listing_id or not their_listing_id:
            raise ValidationException("my_listing_id and their_listing_id are required")
        if my_listing_id == their_listing_id:
            raise ValidationException("A swap needs two different listings")

        with swap_uow(self.session_factory) as repo:
            mine = repo.listings.get_by_id(my_listing_id)
            if mine is None:
                raise NotFoundException("Listing not found")
            if mine.owner_id != user_id:
                raise ForbiddenException("You can only complete swaps for your own listing")

            theirs = repo.listings.get_by_id(their_listing_id)
            if theirs is None:
                raise NotFoundException("Listing not found")
            if theirs.owner_id == user_id:
                raise ValidationException("Cannot swap with your own listing")
            for listing in (mine, theirs):
                if listing.status in TERMINAL_LISTING_STATUSES:
                    raise ValidationException(f"Listing {listing.id} is already {listing.status.lower()}")

            repo.listings.set_status(mine, LISTING_STATUS_MATCHED)
            repo.listings.set_status(theirs, LISTING_STATUS_MATCHED)
            repo.users.increment_successful_swaps([mine.owner_id, theirs.owner_id])

        logger.info(f"Swap completed between listings {my_listing_id} and {their_listing_id}")
        return mine, theirs
