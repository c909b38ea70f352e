#!/usr/bin/env python3
"""
Tests for the email delivery channels and their factory.
"""

import os
import unittest
from unittest import mock

from notification.channels import (
    EmailChannel,
    LogChannel,
    NotificationChannel,
    NotificationChannelFactory,
    OutboundEmail,
    ResendEmailChannel,
    _mask_email,
)

SMTP_ENV = {
    'SMTP_SERVER': 'smtp.example.com',
    'SMTP_PORT': '2525',
    'SMTP_USERNAME': 'mailer',
    'SMTP_PASSWORD': 'secret',
}


def _email(**overrides) -> OutboundEmail:
    fields = {'to': 'a@example.com', 'subject': 'Subject', 'text': 'Body'}
    fields.update(overrides)
    return OutboundEmail(**fields)


class TestChannelFactory(unittest.TestCase):

    @mock.patch.dict(os.environ, {'NOTIFICATION_DRY_RUN': 'false'})
    def test_returns_registered_channels(self):
        self.assertIsInstance(NotificationChannelFactory.get_channel('smtp'), EmailChannel)
        self.assertIsInstance(NotificationChannelFactory.get_channel('RESEND'), ResendEmailChannel)
        self.assertIsInstance(NotificationChannelFactory.get_channel('log'), LogChannel)

    @mock.patch.dict(os.environ, {'NOTIFICATION_DRY_RUN': 'false'})
    def test_unknown_channel(self):
        with self.assertRaises(ValueError):
            NotificationChannelFactory.get_channel('pigeon')

    @mock.patch.dict(os.environ, {'NOTIFICATION_DRY_RUN': 'true'})
    def test_dry_run_forces_log_channel(self):
        self.assertIsInstance(NotificationChannelFactory.get_channel('smtp'), LogChannel)

    @mock.patch.dict(os.environ, {'NOTIFICATION_DRY_RUN': 'false'})
    def test_register_channel(self):
        class PushChannel(NotificationChannel):
            name = 'push'

            def deliver(self, email):
                pass

        NotificationChannelFactory.register_channel('push', PushChannel)
        self.addCleanup(NotificationChannelFactory._channels.pop, 'push')

        self.assertIn('push', NotificationChannelFactory.list_channels())
        self.assertIsInstance(NotificationChannelFactory.get_channel('push'), PushChannel)

        with self.assertRaises(ValueError):
            NotificationChannelFactory.register_channel('bad', dict)

    def test_mask_email(self):
        self.assertEqual(_mask_email("alice@example.com"), "***@example.com")
        self.assertEqual(_mask_email("not-an-email"), "***")


class TestSendWrapper(unittest.TestCase):

    def test_delivery_error_becomes_false(self):
        class BrokenChannel(NotificationChannel):
            name = 'broken'

            def deliver(self, email):
                raise RuntimeError("provider down")

        self.assertFalse(BrokenChannel().send(_email()))

    def test_log_channel_always_succeeds(self):
        self.assertTrue(LogChannel().send(_email()))


class TestEmailChannel(unittest.TestCase):

    @mock.patch('notification.channels.smtplib.SMTP')
    @mock.patch.dict(os.environ, {}, clear=True)
    def test_missing_config_returns_false(self, mock_smtp):
        self.assertFalse(EmailChannel().send(_email()))
        mock_smtp.assert_not_called()

    @mock.patch('notification.channels.smtplib.SMTP')
    @mock.patch.dict(os.environ, SMTP_ENV, clear=True)
    def test_sends_over_smtp(self, mock_smtp):
        server = mock_smtp.return_value.__enter__.return_value

        sent = EmailChannel().send(_email(html='<p>Body</p>'))

        self.assertTrue(sent)
        mock_smtp.assert_called_once_with('smtp.example.com', 2525)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with('mailer', 'secret')
        message = server.send_message.call_args[0][0]
        self.assertEqual(message['To'], "a@example.com")
        self.assertEqual(message['Subject'], "Subject")
        self.assertEqual(len(message.get_payload()), 2)

    @mock.patch('notification.channels.smtplib.SMTP', side_effect=OSError("refused"))
    @mock.patch.dict(os.environ, SMTP_ENV, clear=True)
    def test_smtp_error_returns_false(self, mock_smtp):
        self.assertFalse(EmailChannel().send(_email()))


class TestResendChannel(unittest.TestCase):

    @mock.patch('notification.channels.requests.post')
    @mock.patch.dict(os.environ, {}, clear=True)
    def test_missing_key_returns_false(self, mock_post):
        self.assertFalse(ResendEmailChannel().send(_email()))
        mock_post.assert_not_called()

    @mock.patch('notification.channels.requests.post')
    @mock.patch.dict(os.environ, {'RESEND_API_KEY': 're_test'}, clear=True)
    def test_posts_to_resend(self, mock_post):
        sent = ResendEmailChannel().send(_email(html='<p>Body</p>', from_email='SeatSwap <hi@example.com>'))

        self.assertTrue(sent)
        kwargs = mock_post.call_args.kwargs
        self.assertEqual(kwargs['headers'], {'Authorization': 'Bearer re_test'})
        self.assertEqual(kwargs['json']['to'], ["a@example.com"])
        self.assertEqual(kwargs['json']['from'], 'SeatSwap <hi@example.com>')
        self.assertEqual(kwargs['json']['html'], '<p>Body</p>')

    @mock.patch('notification.channels.requests.post')
    @mock.patch.dict(os.environ, {'RESEND_API_KEY': 're_test'}, clear=True)
    def test_http_error_returns_false(self, mock_post):
        mock_post.return_value.raise_for_status.side_effect = RuntimeError("422")
        self.assertFalse(ResendEmailChannel().send(_email()))


if __name__ == '__main__':
    unittest.main()
