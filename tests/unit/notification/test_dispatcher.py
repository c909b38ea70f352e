#!/usr/bin/env python3
"""
Tests for NotificationDispatcher and EmailDispatcher.
"""

import unittest
from unittest import mock

import pytest

from database.models import NOTIFICATION_TYPE_MATCH, NOTIFICATION_TYPE_MESSAGE
from notification.channels import OutboundEmail
from notification.service import (
    EmailDispatcher,
    NotificationDispatcher,
    process_email_task,
    truncate_preview,
)
from tests import SqliteTestCase

pytestmark = pytest.mark.db


class TestTruncatePreview(unittest.TestCase):

    def test_short_text_untouched(self):
        self.assertEqual(truncate_preview("hello"), "hello")
        self.assertEqual(truncate_preview("x" * 100), "x" * 100)

    def test_long_text_truncated(self):
        self.assertEqual(truncate_preview("x" * 101), "x" * 100 + "...")


class TestNotificationDispatcher(SqliteTestCase):

    def setUp(self):
        super().setUp()
        self.email = mock.MagicMock(spec=EmailDispatcher)
        self.dispatcher = NotificationDispatcher(
            session_factory=self.session_factory,
            email_dispatcher=self.email,
            base_url="https://switchwithme.app/"
        )
        self.alice = self.make_user("Alice", email="alice@example.com")
        self.bob = self.make_user("Bob", email="bob@example.com", email_notifications_enabled=False)

    def test_message_notification_payload(self):
        notification = self.dispatcher.create_message_notification(
            self.alice.id, "conv-1", "msg-1", "Bob", "y" * 150
        )

        self.assertEqual(notification.type, NOTIFICATION_TYPE_MESSAGE)
        self.assertFalse(notification.is_read)
        self.assertEqual(notification.data['conversation_id'], "conv-1")
        self.assertEqual(notification.data['sender_name'], "Bob")
        self.assertEqual(notification.data['preview'], "y" * 100 + "...")

    def test_email_sent_to_opted_in_user(self):
        self.dispatcher.create_message_notification(self.alice.id, "conv-1", "msg-1", "Bob", "hi")

        self.email.send.assert_called_once()
        to, subject, body = self.email.send.call_args[0]
        self.assertEqual(to, "alice@example.com")
        self.assertEqual(subject, "New message on Switch With Me")
        self.assertIn("https://switchwithme.app/conversations/conv-1", body)

    def test_no_email_when_opted_out_or_missing_address(self):
        carol = self.make_user("Carol", email=None)
        self.dispatcher.create_match_notification(self.bob.id, "l1", "l2", score=10)
        self.dispatcher.create_match_notification(carol.id, "l1", "l2", score=10)
        self.email.send.assert_not_called()

    def test_email_failure_does_not_fail_notification(self):
        self.email.send.side_effect = RuntimeError("smtp down")

        notification = self.dispatcher.create_match_notification(self.alice.id, "l1", "l2", score=12)

        self.assertIsNotNone(notification.id)
        self.assertEqual(self.dispatcher.get_unread_count(self.alice.id), 1)

    def test_match_notification_default_description(self):
        notification = self.dispatcher.create_match_notification(self.bob.id, "l1", "l2")
        self.assertEqual(notification.type, NOTIFICATION_TYPE_MATCH)
        self.assertEqual(notification.data['description'], "We found a potential seat match for you!")
        self.assertIsNone(notification.data['score'])

    def test_listing_is_newest_first_and_filtered(self):
        first = self.dispatcher.create_match_notification(self.bob.id, "l1", "l2")
        second = self.dispatcher.create_match_notification(self.bob.id, "l1", "l3")
        self.dispatcher.create_match_notification(self.alice.id, "l9", "l8")

        notifications = self.dispatcher.get_user_notifications(self.bob.id)
        self.assertEqual([n.id for n in notifications], [second.id, first.id])

        self.dispatcher.mark_notification_as_read(second.id, self.bob.id)
        unread = self.dispatcher.get_user_notifications(self.bob.id, unread_only=True)
        self.assertEqual([n.id for n in unread], [first.id])

    def test_limit_bounds(self):
        for limit in (0, 101, -5):
            with self.subTest(limit=limit):
                with self.assertRaises(ValueError):
                    self.dispatcher.get_user_notifications(self.bob.id, limit=limit)
        for _ in range(3):
            self.dispatcher.create_match_notification(self.bob.id, "l1", "l2")
        self.assertEqual(len(self.dispatcher.get_user_notifications(self.bob.id, limit=2)), 2)

    def test_mark_read_of_someone_elses_notification_updates_nothing(self):
        notification = self.dispatcher.create_match_notification(self.alice.id, "l1", "l2")

        self.assertEqual(self.dispatcher.mark_notification_as_read(notification.id, self.bob.id), 0)
        self.assertEqual(self.dispatcher.get_unread_count(self.alice.id), 1)

    def test_mark_all_read(self):
        for _ in range(3):
            self.dispatcher.create_match_notification(self.bob.id, "l1", "l2")

        self.assertEqual(self.dispatcher.mark_all_notifications_as_read(self.bob.id), 3)
        self.assertEqual(self.dispatcher.get_unread_count(self.bob.id), 0)
        self.assertEqual(self.dispatcher.mark_all_notifications_as_read(self.bob.id), 0)


class TestEmailDispatcher(unittest.TestCase):

    def test_sync_mode_without_queue(self):
        dispatcher = EmailDispatcher(channel_type='log', use_async_queue=False)
        self.assertFalse(dispatcher.async_mode)
        self.assertIsNone(dispatcher.queue)

    @mock.patch('notification.service.Redis')
    def test_redis_failure_falls_back_to_sync(self, mock_redis):
        mock_redis.from_url.return_value.ping.side_effect = ConnectionError("no redis")
        dispatcher = EmailDispatcher(use_async_queue=True, redis_url='redis://nowhere:6379/0')
        self.assertFalse(dispatcher.async_mode)

    @mock.patch('notification.service.Queue')
    @mock.patch('notification.service.Redis')
    def test_async_mode_enqueues(self, mock_redis, mock_queue):
        mock_queue.return_value.enqueue.return_value.id = "job-1"
        dispatcher = EmailDispatcher(channel_type='resend', use_async_queue=True)

        job_id = dispatcher.send("a@example.com", "Subject", "Body")

        self.assertEqual(job_id, "job-1")
        args, kwargs = mock_queue.return_value.enqueue.call_args
        self.assertIs(args[0], process_email_task)
        self.assertEqual(args[1]['channel_type'], 'resend')
        self.assertEqual(args[1]['to'], "a@example.com")

    @mock.patch('notification.service.process_email_task', side_effect=RuntimeError("boom"))
    def test_inline_delivery_never_raises(self, mock_task):
        dispatcher = EmailDispatcher(background=False)
        self.assertIsNone(dispatcher.send("a@example.com", "Subject", "Body"))
        mock_task.assert_called_once()

    def test_process_email_task_uses_channel(self):
        channel = mock.MagicMock()
        channel.send.return_value = True
        with mock.patch('notification.service.NotificationChannelFactory.get_channel', return_value=channel):
            result = process_email_task({
                'channel_type': 'smtp',
                'to': 'a@example.com',
                'subject': 'S',
                'body': 'B',
                'html': '<p>B</p>',
                'from_email': None,
            })
        self.assertTrue(result)
        channel.send.assert_called_once_with(
            OutboundEmail(to='a@example.com', subject='S', text='B', html='<p>B</p>', from_email=None)
        )


class TestEmailWorker(unittest.TestCase):

    def test_redis_url_falls_back_to_localhost(self):
        from core.config_loader import AppConfig, NotificationConfig
        from notification.worker import resolve_redis_url, DEFAULT_REDIS_URL

        self.assertEqual(resolve_redis_url(AppConfig()), DEFAULT_REDIS_URL)
        config = AppConfig(notifications=NotificationConfig(redis_url='redis://queue:6379/2'))
        self.assertEqual(resolve_redis_url(config), 'redis://queue:6379/2')

    @mock.patch('notification.worker.Worker')
    @mock.patch('notification.worker.Redis')
    def test_run_worker_listens_on_notification_queue(self, mock_redis, mock_worker):
        from notification.worker import run_worker

        run_worker('redis://queue:6379/0', burst=True)

        mock_redis.from_url.assert_called_once_with('redis://queue:6379/0')
        mock_redis.from_url.return_value.ping.assert_called_once()
        args, kwargs = mock_worker.call_args
        self.assertEqual(args[0], [EmailDispatcher.QUEUE_NAME])
        mock_worker.return_value.work.assert_called_once_with(burst=True)
