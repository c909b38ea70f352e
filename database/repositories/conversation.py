import logging
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from database.models import (
    Conversation,
    ConversationParticipant,
    Message,
    build_dedup_key,
    utcnow,
)
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ConversationRepository(BaseRepository):
    def _base_query(self, with_messages: bool = False):
        stmt = select(Conversation).options(
            selectinload(Conversation.participants),
            selectinload(Conversation.listing),
        )
        if with_messages:
            stmt = stmt.options(selectinload(Conversation.messages))
        return stmt

    def get_by_id(self, conversation_id: str, with_messages: bool = False) -> Optional[Conversation]:
        stmt = self._base_query(with_messages).where(Conversation.id == conversation_id)
        return self._one_or_none(stmt)

    def get_by_dedup_key(self, dedup_key: str) -> Optional[Conversation]:
        stmt = self._base_query().where(Conversation.dedup_key == dedup_key)
        return self._one_or_none(stmt)

    def create_conversation(
        self,
        user_id: str,
        other_user_id: str,
        listing_id: Optional[str] = None
    ) -> Conversation:
        """
        Insert a conversation and both participant rows.

        Flushes immediately so a dedup_key collision surfaces as IntegrityError here.
        """
        now = utcnow()
        conversation = Conversation(
            listing_id=listing_id,
            dedup_key=build_dedup_key(user_id, other_user_id, listing_id),
            created_at=now,
            updated_at=now,
        )
        conversation.participants = [
            ConversationParticipant(user_id=user_id),
            ConversationParticipant(user_id=other_user_id),
        ]
        self.db.add(conversation)
        self.db.flush()
        return conversation

    def attach_listing(self, conversation: Conversation, listing_id: str) -> Conversation:
        user_a, user_b = conversation.participant_ids
        conversation.listing_id = listing_id
        conversation.dedup_key = build_dedup_key(user_a, user_b, listing_id)
        conversation.updated_at = utcnow()
        self.db.flush()
        return conversation

    def get_participant(self, conversation_id: str, user_id: str) -> Optional[ConversationParticipant]:
        stmt = select(ConversationParticipant).where(
            ConversationParticipant.conversation_id == conversation_id,
            ConversationParticipant.user_id == user_id
        )
        return self._one_or_none(stmt)

    def list_for_user(self, user_id: str, include_archived: bool = True) -> List[Conversation]:
        stmt = (
            self._base_query()
            .join(ConversationParticipant, ConversationParticipant.conversation_id == Conversation.id)
            .where(ConversationParticipant.user_id == user_id)
        )
        if not include_archived:
            stmt = stmt.where(ConversationParticipant.archived.is_(False))
        stmt = stmt.order_by(Conversation.updated_at.desc())
        return self._all(stmt)

    def get_last_message(self, conversation_id: str) -> Optional[Message]:
        stmt = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.desc())
            .limit(1)
        )
        return self._one_or_none(stmt)

    def add_message(self, conversation: Conversation, sender_id: str, text: str) -> Message:
        now = utcnow()
        message = Message(
            conversation_id=conversation.id,
            sender_id=sender_id,
            text=text,
            created_at=now,
        )
        self.db.add(message)
        conversation.updated_at = now
        self.db.flush()
        return message
