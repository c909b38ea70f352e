"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import pytest


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as using a SQLite test database (deselect with '-m \"not db\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks concurrency stress tests (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def listing_factory():
    """Build plain listing objects for pure scoring tests."""
    from core.matcher import ListingDTO
    from tests import GAME_DAY

    counter = {'n': 0}

    def _make(**overrides):
        counter['n'] += 1
        fields = {
            'id': f"listing-{counter['n']}",
            'owner_id': f"owner-{counter['n']}",
            'team_id': 'lakers',
            'game_date': GAME_DAY,
            'section': '101',
            'zone': 'Lower Bowl',
            'face_value': 100.0,
        }
        fields.update(overrides)
        return ListingDTO(**fields)

    return _make
