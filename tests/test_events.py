"""Tests for the ledger event channel."""

import pytest
from decimal import Decimal
from uuid import uuid4

from financeflow.events import EventPublisher
from financeflow.models import LedgerEventBuilder, LedgerEventType


def account_added():
    return LedgerEventBuilder.record_changed("accounts", "added", uuid4())


class TestEventPublisher:
    """Tests for subscribe/publish dispatch."""

    def test_subscribe_to_all_events(self):
        received = []
        publisher = EventPublisher()
        publisher.subscribe(received.append)

        event = account_added()
        assert publisher.publish(event) == 1
        assert received == [event]

    def test_subscribe_to_one_type(self):
        alerts = []
        publisher = EventPublisher()
        publisher.subscribe(alerts.append, LedgerEventType.BUDGET_EXCEEDED)

        publisher.publish(account_added())
        assert alerts == []

        alert = LedgerEventBuilder.budget_alert(uuid4(), True, Decimal("105"), Decimal("100"), Decimal("100"))
        publisher.publish(alert)
        assert alerts == [alert]

    def test_handler_registered_twice_runs_once(self):
        received = []
        publisher = EventPublisher()
        publisher.subscribe(received.append)
        publisher.subscribe(received.append)
        publisher.subscribe(received.append, LedgerEventType.ACCOUNT_ADDED)

        assert publisher.publish(account_added()) == 1
        assert len(received) == 1

    def test_unsubscribe(self):
        received = []
        publisher = EventPublisher()
        publisher.subscribe(received.append)
        publisher.unsubscribe(received.append)
        publisher.unsubscribe(received.append)

        assert publisher.publish(account_added()) == 0
        assert received == []

    def test_failing_handler_does_not_break_others(self):
        """Test that one broken subscriber is logged and skipped."""
        received = []

        def broken(event):
            raise RuntimeError("boom")

        publisher = EventPublisher()
        publisher.subscribe(broken)
        publisher.subscribe(received.append)

        assert publisher.publish(account_added()) == 1
        assert len(received) == 1

    def test_publish_without_subscribers(self):
        assert EventPublisher().publish(LedgerEventBuilder.persistence_failed("insert", "disk full")) == 0


class TestEngineEvents:
    """Tests for the events the engine publishes for CRUD calls."""

    def test_crud_events(self, engine, food, events):
        events.clear()
        engine.update_category(food.id, name="Groceries")
        engine.delete_category(food.id)

        types = [e.event_type for e in events if e.event_type != LedgerEventType.WORKING_SET_RELOADED]
        assert types == [LedgerEventType.CATEGORY_UPDATED, LedgerEventType.CATEGORY_DELETED]

    def test_reload_event_counts(self, engine, account, events):
        reloads = [e for e in events if e.event_type == LedgerEventType.WORKING_SET_RELOADED]
        assert reloads[-1].details["accounts"] == 1
        assert reloads[-1].details["operations"] == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
