"""
Unit tests for textproc.batch.events module.

Tests BatchEventChannel fan-out and the logging handler.
"""

import pytest
from unittest.mock import Mock, patch

from textproc.batch.events import (
    BatchEvent,
    BatchEventChannel,
    BatchEventType,
    TERMINAL_EVENTS,
    create_logging_handler,
)
from textproc.batch.models import BatchProgress

from helpers import FakeClock, build_plan


@pytest.fixture
def event():
    """A BatchCreated event for a fresh three-chunk batch."""
    clock = FakeClock()
    progress = BatchProgress(batch_id="batch-001", plan=build_plan(3), created_at=clock())
    return BatchEvent(
        type=BatchEventType.BATCH_CREATED,
        batch_id="batch-001",
        progress=progress,
        occurred_at=clock(),
    )


class TestBatchEventType:
    """Tests for BatchEventType enum."""

    def test_event_values(self):
        """Test the six lifecycle events."""
        assert {e.value for e in BatchEventType} == {
            "batch_created",
            "batch_started",
            "progress_updated",
            "batch_completed",
            "batch_timeout",
            "batch_cancelled",
        }

    def test_terminal_events(self):
        """Test which events mark a terminal transition."""
        assert BatchEventType.BATCH_COMPLETED in TERMINAL_EVENTS
        assert BatchEventType.PROGRESS_UPDATED not in TERMINAL_EVENTS


class TestBatchEventChannel:
    """Tests for BatchEventChannel."""

    def test_subscribe_and_publish(self, event):
        """Test handlers receive published events in order."""
        handler1 = Mock()
        handler2 = Mock()
        channel = BatchEventChannel()
        channel.subscribe(handler1)
        channel.subscribe(handler2)

        channel.publish(event)

        handler1.assert_called_once_with(event)
        handler2.assert_called_once_with(event)
        assert channel.handler_count == 2

    def test_injected_handlers(self, event):
        """Test handlers passed to the constructor are subscribed."""
        handler = Mock()
        channel = BatchEventChannel([handler])
        channel.publish(event)
        handler.assert_called_once_with(event)

    def test_unsubscribe(self, event):
        """Test unsubscribed handlers stop receiving events."""
        handler = Mock()
        channel = BatchEventChannel([handler])
        channel.unsubscribe(handler)
        channel.publish(event)
        handler.assert_not_called()

    def test_unsubscribe_unknown_handler(self):
        """Test removing a handler that was never added."""
        channel = BatchEventChannel()
        channel.unsubscribe(Mock())  # Should not raise
        assert channel.handler_count == 0

    def test_handler_error_isolated(self, event):
        """Test a failing handler does not stop delivery."""
        failing = Mock(side_effect=Exception("Handler error"))
        working = Mock()
        channel = BatchEventChannel([failing, working])

        channel.publish(event)

        working.assert_called_once_with(event)

    def test_close(self, event):
        """Test closed channel drops events and handlers."""
        handler = Mock()
        channel = BatchEventChannel([handler])
        channel.close()

        channel.publish(event)

        handler.assert_not_called()
        assert channel.closed
        assert channel.handler_count == 0

    def test_subscribe_after_close(self):
        """Test subscribing to a closed channel raises."""
        channel = BatchEventChannel()
        channel.close()
        with pytest.raises(RuntimeError):
            channel.subscribe(Mock())


class TestLoggingHandler:
    """Tests for create_logging_handler."""

    def test_logs_lifecycle_events(self, event):
        """Test non-progress events are always logged."""
        handler = create_logging_handler(log_interval=100)
        with patch('textproc.batch.events.logger') as mock_logger:
            handler(event)
            mock_logger.info.assert_called_once()

    def test_progress_interval(self, event):
        """Test progress updates are logged every N calls."""
        handler = create_logging_handler(log_interval=3)
        progress_event = BatchEvent(
            type=BatchEventType.PROGRESS_UPDATED,
            batch_id=event.batch_id,
            progress=event.progress,
            occurred_at=event.occurred_at,
        )
        with patch('textproc.batch.events.logger') as mock_logger:
            for _ in range(7):
                handler(progress_event)
            assert mock_logger.info.call_count == 2
