"""
Tests for the structlog processors added by setup_logging.
"""

from hotel_booking.core.config import Settings
from hotel_booking.core.logging import add_service_context


def test_service_context_added_to_every_entry():
    processor = add_service_context(Settings(ENVIRONMENT="staging", ROOM_LOCK_STRATEGY="redis"))

    event = processor(None, "info", {"event": "booking_created", "room_id": 3})

    assert event["environment"] == "staging"
    assert event["room_lock_strategy"] == "redis"
    assert event["room_id"] == 3


def test_service_context_does_not_override_explicit_values():
    processor = add_service_context(Settings(ROOM_LOCK_STRATEGY="local"))

    event = processor(None, "warning", {"event": "room_lock_timeout", "room_lock_strategy": "redis"})

    assert event["room_lock_strategy"] == "redis"
