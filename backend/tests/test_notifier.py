"""
Tests for services/notifier.py and services/events.py
"""

import json
import unittest
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import MagicMock

from redis.exceptions import ConnectionError as RedisConnectionError

from scheduler.services.events import P2P_QUEUE, emit_event
from scheduler.services.notifier import EventNotifier, cancellation_url


def appointment(**overrides):
    data = dict(
        id=7,
        client_name="Jane Doe",
        client_email="jane@example.com",
        client_phone="555-0123",
        client_language="en",
        appointment_type="measurement",
        appointment_date=datetime(2026, 10, 20, 9, 0),
        duration=60,
        status="cancelled",
        location_address="12 Oak St",
        assigned_employee_id=1,
        cancellation_token="tok",
        cancel_reason="Changed plans",
    )
    data.update(overrides)
    return SimpleNamespace(**data)


class TestEventNotifier(unittest.TestCase):

    def setUp(self):
        self.redis = MagicMock()
        self.notifier = EventNotifier(redis=self.redis, base_url="https://example.test/")

    def _pushed(self):
        queue, raw = self.redis.rpush.call_args.args
        self.assertEqual(queue, P2P_QUEUE)
        return json.loads(raw)

    def test_cancellation_event(self):
        self.assertTrue(self.notifier.send_cancellation(appointment()))

        event = self._pushed()
        self.assertEqual(event["type"], "appointment_cancelled")
        self.assertEqual(event["recipient"], "client")
        self.assertEqual(event["cancel_reason"], "Changed plans")
        self.assertEqual(event["appointment"]["appointment_date"], "2026-10-20T09:00:00")
        self.assertEqual(event["cancellation_url"], "https://example.test/appointment/cancel/tok")
        self.assertIn("ts", event)

    def test_admin_alert_goes_to_staff(self):
        self.notifier.send_admin_alert(appointment(status="pending"))
        self.assertEqual(self._pushed()["recipient"], "staff")

    def test_reschedule_request_carries_message_and_link(self):
        self.notifier.send_reschedule_request(appointment(), "Please pick Friday")

        event = self._pushed()
        self.assertEqual(event["message"], "Please pick Friday")
        self.assertEqual(event["reschedule_url"], "https://example.test/appointment/reschedule/tok")

    def test_employee_assignment(self):
        employee = SimpleNamespace(id=2, name="Sam", phone="555-0200")
        self.notifier.send_employee_assignment(employee, appointment())

        event = self._pushed()
        self.assertEqual(event["recipient"], "employee")
        self.assertEqual(event["employee"], {"id": 2, "name": "Sam", "phone": "555-0200"})

    def test_redis_failure_returns_false(self):
        self.redis.rpush.side_effect = RedisConnectionError("down")
        self.assertFalse(self.notifier.send_confirmation(appointment()))


class TestEmitEvent(unittest.TestCase):

    def test_payload_is_merged(self):
        redis = MagicMock()
        self.assertTrue(emit_event("ping", {"a": 1}, redis=redis))

        event = json.loads(redis.rpush.call_args.args[1])
        self.assertEqual(event["type"], "ping")
        self.assertEqual(event["a"], 1)

    def test_cancellation_url_strips_slash(self):
        self.assertEqual(
            cancellation_url("abc", "http://host/"),
            "http://host/appointment/cancel/abc",
        )


if __name__ == "__main__":
    unittest.main()
