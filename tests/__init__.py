#!/usr/bin/env python3
"""
Test suite configuration and utilities.

Run all tests with:

    python -m pytest tests/ -v

Database tests run against a throwaway SQLite file per test case, created
by SqliteTestCase, so no external database is needed.
"""

import os

# Set before database.database is imported below: it binds its default
# engine to DATABASE_URL at import time.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("NOTIFICATION_DRY_RUN", "true")

import shutil
import tempfile
import unittest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from database.database import create_db_engine, create_session_factory
from database.models import Base, Listing, User
from database.uow import swap_uow

GAME_DAY = date(2026, 4, 18)


class SqliteTestCase(unittest.TestCase):
    """
    Base class for tests that need a real database.

    Each test gets a fresh SQLite file with all tables created and the same
    engine settings production uses for SQLite (foreign keys on, BEGIN IMMEDIATE).
    """

    def setUp(self):
        self._tmpdir = tempfile.mkdtemp(prefix="seatswap-test-")
        self.db_path = os.path.join(self._tmpdir, "test.db")
        self.engine = create_db_engine(f"sqlite:///{self.db_path}")
        Base.metadata.create_all(bind=self.engine)
        self.session_factory = create_session_factory(self.engine)

    def tearDown(self):
        self.engine.dispose()
        shutil.rmtree(self._tmpdir, ignore_errors=True)

    def uow(self):
        return swap_uow(self.session_factory)

    def make_user(
        self,
        display_name: Optional[str] = "Test User",
        email: Optional[str] = None,
        email_notifications_enabled: bool = True,
        credits: int = 0
    ) -> User:
        """Create a user; a non-zero starting balance is written through the ledger."""
        with self.uow() as repo:
            user = repo.users.create_user(
                email=email,
                display_name=display_name,
                email_notifications_enabled=email_notifications_enabled
            )
            if credits:
                repo.credits.add_transaction(user.id, credits, note="Seed credits")
                repo.users.set_cached_credits(user, credits)
        return user

    def make_listing(self, owner_id: str, **overrides) -> Listing:
        fields = {
            'team_id': 'lakers',
            'game_date': GAME_DAY,
            'kind': 'HAVE',
            'section': '101',
            'row': 'F',
            'seat': '12',
            'zone': 'Lower Bowl',
            'want_zones': [],
            'want_sections': [],
            'face_value': Decimal('100.00'),
            'status': 'ACTIVE',
        }
        fields.update(overrides)
        with self.uow() as repo:
            return repo.listings.create_listing(owner_id, fields)


def utc(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def days_after(days: int) -> date:
    return GAME_DAY + timedelta(days=days)
