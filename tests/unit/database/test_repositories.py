#!/usr/bin/env python3
"""
Repository and schema tests against a SQLite database.
"""

import os
import unittest

import pytest
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError

from database.models import (
    Conversation,
    ConversationParticipant,
    Message,
    Notification,
    User,
    build_dedup_key,
)
from tests import SqliteTestCase, days_after

pytestmark = pytest.mark.db


class TestDedupKey(SqliteTestCase):

    def test_key_is_order_independent(self):
        self.assertEqual(build_dedup_key("b", "a", "l1"), build_dedup_key("a", "b", "l1"))
        self.assertEqual(build_dedup_key("a", "b"), "a|b|*")

    def test_duplicate_key_rejected(self):
        alice = self.make_user("Alice")
        bob = self.make_user("Bob")
        with self.uow() as repo:
            repo.conversations.create_conversation(alice.id, bob.id)

        with self.assertRaises(IntegrityError):
            with self.uow() as repo:
                repo.conversations.create_conversation(bob.id, alice.id)

        with self.uow() as repo:
            count = repo.db.execute(select(func.count(Conversation.id))).scalar_one()
        self.assertEqual(count, 1)

    def test_same_pair_may_hold_one_conversation_per_listing(self):
        alice = self.make_user("Alice")
        bob = self.make_user("Bob")
        listing = self.make_listing(bob.id)
        with self.uow() as repo:
            general = repo.conversations.create_conversation(alice.id, bob.id)
            scoped = repo.conversations.create_conversation(alice.id, bob.id, listing.id)
        self.assertNotEqual(general.dedup_key, scoped.dedup_key)

    def test_attach_listing_rewrites_key(self):
        alice = self.make_user("Alice")
        bob = self.make_user("Bob")
        listing = self.make_listing(bob.id)
        with self.uow() as repo:
            conversation = repo.conversations.create_conversation(alice.id, bob.id)
            repo.conversations.attach_listing(conversation, listing.id)

        with self.uow() as repo:
            found = repo.conversations.get_by_dedup_key(build_dedup_key(alice.id, bob.id, listing.id))
            self.assertIsNotNone(found)
            self.assertEqual(found.id, conversation.id)
            self.assertIsNone(repo.conversations.get_by_dedup_key(build_dedup_key(alice.id, bob.id)))


class TestListingCascade(SqliteTestCase):

    def test_deleting_listing_removes_its_conversations(self):
        alice = self.make_user("Alice")
        bob = self.make_user("Bob")
        listing = self.make_listing(bob.id)
        with self.uow() as repo:
            conversation = repo.conversations.create_conversation(alice.id, bob.id, listing.id)
            repo.conversations.add_message(conversation, alice.id, "hi")
            general = repo.conversations.create_conversation(alice.id, bob.id)

        with self.uow() as repo:
            repo.listings.delete(repo.listings.get_by_id(listing.id))

        with self.uow() as repo:
            self.assertIsNone(repo.conversations.get_by_id(conversation.id))
            self.assertIsNotNone(repo.conversations.get_by_id(general.id))
            messages = repo.db.execute(select(func.count(Message.id))).scalar_one()
            participants = repo.db.execute(
                select(func.count(ConversationParticipant.id))
                .where(ConversationParticipant.conversation_id == conversation.id)
            ).scalar_one()
        self.assertEqual(messages, 0)
        self.assertEqual(participants, 0)


class TestListingQueries(SqliteTestCase):

    def test_browse_puts_boosted_first(self):
        owner = self.make_user("Owner")
        boosted = self.make_listing(owner.id)
        plain = self.make_listing(owner.id)
        with self.uow() as repo:
            repo.listings.boost(repo.listings.get_by_id(boosted.id))

        with self.uow() as repo:
            ids = [l.id for l in repo.listings.browse(team_id='lakers')]
        self.assertEqual(ids[0], boosted.id)
        self.assertIn(plain.id, ids)

    def test_match_pool_excludes_owner_and_inactive(self):
        owner = self.make_user("Owner")
        other = self.make_user("Other")
        self.make_listing(owner.id)
        visible = self.make_listing(other.id)
        self.make_listing(other.id, status='INACTIVE')
        self.make_listing(other.id, team_id='celtics')

        with self.uow() as repo:
            pool = repo.listings.get_match_pool('lakers', exclude_owner_id=owner.id)
        self.assertEqual([l.id for l in pool], [visible.id])

    def test_related_candidates_respect_window(self):
        owner = self.make_user("Owner")
        base = self.make_listing(owner.id)
        near = self.make_listing(owner.id, game_date=days_after(14))
        self.make_listing(owner.id, game_date=days_after(15))

        with self.uow() as repo:
            candidates = repo.listings.get_related_candidates(repo.listings.get_by_id(base.id), 14, 10)
        self.assertEqual([l.id for l in candidates], [near.id])


class TestNotificationRepository(SqliteTestCase):

    def test_mark_read_is_scoped_to_owner(self):
        alice = self.make_user("Alice")
        bob = self.make_user("Bob")
        with self.uow() as repo:
            notification = repo.notifications.create_notification(alice.id, "MESSAGE", {"text": "hi"})

        with self.uow() as repo:
            self.assertEqual(repo.notifications.mark_read(notification.id, bob.id), 0)
        with self.uow() as repo:
            self.assertFalse(repo.db.get(Notification, notification.id).is_read)
            self.assertEqual(repo.notifications.mark_read(notification.id, alice.id), 1)

    def test_mark_all_read_counts_only_unread(self):
        alice = self.make_user("Alice")
        with self.uow() as repo:
            first = repo.notifications.create_notification(alice.id, "MATCH", {})
            repo.notifications.create_notification(alice.id, "MATCH", {})
            repo.notifications.mark_read(first.id, alice.id)

        with self.uow() as repo:
            self.assertEqual(repo.notifications.mark_all_read(alice.id), 1)
            self.assertEqual(repo.notifications.count_unread(alice.id), 0)


class TestCreditRepository(SqliteTestCase):

    def test_sum_for_user_without_rows_is_zero(self):
        alice = self.make_user("Alice")
        with self.uow() as repo:
            self.assertEqual(repo.credits.sum_for_user(alice.id), 0)
            repo.credits.add_transaction(alice.id, 5)
            repo.credits.add_transaction(alice.id, -2)
            self.assertEqual(repo.credits.sum_for_user(alice.id), 3)


class TestRepositoryReads(SqliteTestCase):

    def test_single_row_lookups(self):
        alice = self.make_user("Alice", email="alice@example.com")
        with self.uow() as repo:
            self.assertEqual(repo.users.get_by_id(alice.id).email, "alice@example.com")
            self.assertEqual(repo.users.lock_by_id(alice.id).id, alice.id)
            self.assertIsNone(repo.users.get_by_id("missing"))

    def test_conversation_reads(self):
        alice = self.make_user("Alice")
        bob = self.make_user("Bob")
        with self.uow() as repo:
            created = repo.conversations.create_conversation(alice.id, bob.id)

        with self.uow() as repo:
            found = repo.conversations.get_by_dedup_key(build_dedup_key(bob.id, alice.id))
            listed = repo.conversations.list_for_user(alice.id)
        self.assertEqual(found.id, created.id)
        self.assertCountEqual(found.participant_ids, [alice.id, bob.id])
        self.assertEqual([c.id for c in listed], [created.id])


class TestUnitOfWork(SqliteTestCase):

    def test_exception_rolls_back(self):
        with self.assertRaises(RuntimeError):
            with self.uow() as repo:
                repo.users.create_user(email="ghost@example.com", display_name="Ghost")
                raise RuntimeError("abort")

        with self.uow() as repo:
            self.assertEqual(repo.db.execute(select(func.count(User.id))).scalar_one(), 0)


class TestDefaultEngine(unittest.TestCase):

    def test_module_engine_uses_environment_url(self):
        import database.database as db_module

        self.assertIn("DATABASE_URL", os.environ)
        self.assertEqual(db_module.DATABASE_URL, os.environ["DATABASE_URL"])
