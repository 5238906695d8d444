import logging
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from outfit_feed.shared.event_bus import EventBus
from outfit_feed.shared.event_handlers.logging_handler import LoggingEventHandler
from outfit_feed.link_validation.domain.domain_event.link_validation_event import (
    LinkRejectedEvent,
    LinkSubmittedEvent,
    LinkValidatedEvent,
)


class TestLoggingEventHandler:

    @pytest.fixture
    def logger(self):
        return MagicMock(spec=logging.Logger)

    @pytest.fixture
    def handler(self, logger):
        return LoggingEventHandler(max_logs_per_link=3, logger=logger)

    def test_submitted_event_formatted(self, handler, logger):
        event = LinkSubmittedEvent(
            link_id="link-1", url="http://shop.com/x", outfit_id="o-1",
            timestamp=datetime(2024, 5, 1, 12, 0, 0)
        )
        handler.handle(event)

        logs = handler.get_logs("link-1")
        assert len(logs) == 1
        entry = logs[0]
        assert entry["level"] == "INFO"
        assert entry["event_type"] == "LinkSubmittedEvent"
        assert entry["timestamp"] == "2024-05-01 12:00:00"
        assert "http://shop.com/x" in entry["message"]
        assert entry["data"] == {"url": "http://shop.com/x", "outfit_id": "o-1"}

        level, message = logger.log.call_args.args
        assert level == logging.INFO
        assert logger.log.call_args.kwargs["extra"]["link_id"] == "link-1"

    def test_validated_event_is_success(self, handler, logger):
        handler.handle(LinkValidatedEvent(
            link_id="link-1", url="http://shop.com/x", domain="shop.com", title="Red Jacket", price="$49.99"
        ))

        entry = handler.get_logs("link-1")[0]
        assert entry["level"] == "SUCCESS"
        assert "Red Jacket" in entry["message"]
        assert "$49.99" in entry["message"]
        assert logger.log.call_args.args[0] == logging.INFO

    @pytest.mark.parametrize("reason,level,log_level", [
        ("blacklisted", "WARNING", logging.WARNING),
        ("network_failed", "WARNING", logging.WARNING),
        ("faulted", "ERROR", logging.ERROR),
    ])
    def test_rejected_event_levels(self, handler, logger, reason, level, log_level):
        handler.handle(LinkRejectedEvent(link_id="link-1", url="u", reason=reason, error="boom"))

        entry = handler.get_logs("link-1")[0]
        assert entry["level"] == level
        assert "boom" in entry["message"]
        assert logger.log.call_args.args[0] == log_level

    def test_logs_bounded_per_link(self, handler):
        for i in range(5):
            handler.handle(LinkRejectedEvent(link_id="link-1", url=f"u{i}", reason="non_html", error="x"))

        logs = handler.get_logs("link-1")
        assert len(logs) == 3
        assert logs[-1]["data"]["url"] == "u4"
        assert len(handler.get_logs("link-1", last_n=2)) == 2

    def test_level_filter_and_has_errors(self, handler):
        handler.handle(LinkSubmittedEvent(link_id="a", url="u"))
        handler.handle(LinkRejectedEvent(link_id="a", url="u", reason="faulted", error="x"))
        handler.handle(LinkSubmittedEvent(link_id="b", url="u"))

        assert handler.has_errors("a")
        assert not handler.has_errors("b")
        assert [log["event_type"] for log in handler.get_logs("a", level="error")] == ["LinkRejectedEvent"]
        assert len(handler.get_logs("a", last_n=1, level="INFO")) == 1
        assert handler.get_logs("unknown") == []


class TestEventBus:

    def test_type_and_global_subscribers(self):
        bus = EventBus()
        typed, everything = [], []
        bus.subscribe("LinkValidatedEvent", typed.append)
        bus.subscribe_to_all(everything.append)

        bus.publish(LinkSubmittedEvent(link_id="1", url="u"))
        bus.publish(LinkValidatedEvent(link_id="1", url="u", domain="d"))

        assert [e.event_type for e in typed] == ["LinkValidatedEvent"]
        assert len(everything) == 2

    def test_handler_error_not_propagated(self):
        bus = EventBus()
        received = []
        bus.subscribe_to_all(MagicMock(side_effect=RuntimeError("handler broken")))
        bus.subscribe_to_all(received.append)

        bus.publish(LinkSubmittedEvent(link_id="1", url="u"))
        assert len(received) == 1

    def test_publish_all_keeps_order(self):
        bus = EventBus()
        received = []
        bus.subscribe_to_all(received.append)

        bus.publish_all([
            LinkSubmittedEvent(link_id="1", url="u"),
            LinkRejectedEvent(link_id="1", url="u", reason="non_html", error="Not HTML (image/png)"),
        ])
        assert [e.event_type for e in received] == ["LinkSubmittedEvent", "LinkRejectedEvent"]

    def test_event_to_dict(self):
        event = LinkSubmittedEvent(link_id="1", url="u", timestamp=datetime(2024, 5, 1, 12, 0, 0))
        assert event.to_dict() == {
            "event_type": "LinkSubmittedEvent",
            "link_id": "1",
            "timestamp": "2024-05-01T12:00:00",
            "data": {"url": "u", "outfit_id": None},
        }
