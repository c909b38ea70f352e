#!/usr/bin/env python3
"""
Unit tests for configuration loading and environment overrides.
"""

import os
import tempfile
import unittest
from unittest import mock

from core.config_loader import AppConfig, apply_env_overrides, load_config


class TestConfigDefaults(unittest.TestCase):

    def test_defaults(self):
        config = AppConfig()
        self.assertFalse(config.features.pay_to_chat)
        self.assertTrue(config.features.related_listings)
        self.assertEqual(config.credits.conversation_cost, 1)
        self.assertEqual(config.matching.notify_top_k, 3)
        self.assertEqual(config.matching.related_top_k, 6)
        self.assertEqual(config.notifications.preview_length, 100)
        self.assertEqual([t.points for t in config.matching.scorer.price_tiers], [3, 2, 1])


class TestLoadConfig(unittest.TestCase):

    def _write(self, content: str) -> str:
        fd, path = tempfile.mkstemp(suffix=".yaml")
        with os.fdopen(fd, "w") as f:
            f.write(content)
        self.addCleanup(os.remove, path)
        return path

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_yaml_values_are_applied(self):
        path = self._write(
            "features:\n"
            "  pay_to_chat: true\n"
            "matching:\n"
            "  scorer:\n"
            "    same_section: 9\n"
        )
        config = load_config(path)
        self.assertTrue(config.features.pay_to_chat)
        self.assertEqual(config.matching.scorer.same_section, 9)
        self.assertEqual(config.matching.scorer.same_zone, 3)

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_empty_file_gives_defaults(self):
        path = self._write("")
        self.assertEqual(load_config(path), AppConfig())

    @mock.patch.dict(os.environ, {
        'DATABASE_URL': 'sqlite:///override.db',
        'FEATURE_PAY_TO_CHAT_ENABLED': 'true',
        'FEATURE_BOOST_LISTINGS_ENABLED': '0',
        'WEB_PORT': '9000',
        'REDIS_URL': 'redis://cache:6379/0',
    }, clear=True)
    def test_env_overrides_win_over_yaml(self):
        path = self._write(
            "database:\n"
            "  url: postgresql://ignored/db\n"
            "features:\n"
            "  pay_to_chat: false\n"
        )
        config = load_config(path)
        self.assertEqual(config.database.url, 'sqlite:///override.db')
        self.assertTrue(config.features.pay_to_chat)
        self.assertFalse(config.features.boost_listings)
        self.assertEqual(config.web.port, 9000)
        self.assertEqual(config.notifications.redis_url, 'redis://cache:6379/0')
        self.assertEqual(config.realtime.redis_url, 'redis://cache:6379/0')

    @mock.patch.dict(os.environ, {'APP_BASE_URL': 'https://switchwithme.app'}, clear=True)
    def test_apply_env_overrides_creates_missing_sections(self):
        data = apply_env_overrides({})
        self.assertEqual(data, {'notifications': {'base_url': 'https://switchwithme.app'}})


if __name__ == '__main__':
    unittest.main()
