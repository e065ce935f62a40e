"""
Batch lifecycle notifications.

The controller publishes BatchEvents into a BatchEventChannel; listeners
subscribe handlers to the channel. There is no global listener registry:
the channel is created with (or injected into) the controller and closed
at shutdown.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List

from config.logging_config import get_logger

from .models import BatchProgress

logger = get_logger(__name__)


class BatchEventType(str, Enum):
    """Named lifecycle notifications"""
    BATCH_CREATED = "batch_created"
    BATCH_STARTED = "batch_started"
    PROGRESS_UPDATED = "progress_updated"
    BATCH_COMPLETED = "batch_completed"
    BATCH_TIMEOUT = "batch_timeout"
    BATCH_CANCELLED = "batch_cancelled"


TERMINAL_EVENTS = frozenset({
    BatchEventType.BATCH_COMPLETED,
    BatchEventType.BATCH_TIMEOUT,
    BatchEventType.BATCH_CANCELLED,
})


@dataclass(frozen=True)
class BatchEvent:
    """One notification. ``progress`` is a private snapshot."""
    type: BatchEventType
    batch_id: str
    progress: BatchProgress
    occurred_at: datetime


# Type alias for event handlers
BatchEventHandler = Callable[[BatchEvent], None]


class BatchEventChannel:
    """
    Fan-out of BatchEvents to subscribed handlers.

    Handlers run synchronously in publish order. A failing handler is
    logged and does not stop delivery to the others.

    Usage:
        channel = BatchEventChannel()
        channel.subscribe(on_event)
        controller = BatchController(channel=channel)
        ...
        channel.close()
    """

    def __init__(self, handlers: List[BatchEventHandler] = None):
        self._handlers: List[BatchEventHandler] = list(handlers or [])
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: BatchEventHandler):
        """Add event handler."""
        if self._closed:
            raise RuntimeError("Cannot subscribe to a closed event channel")
        self._handlers.append(handler)

    def unsubscribe(self, handler: BatchEventHandler):
        """Remove event handler."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def publish(self, event: BatchEvent):
        """Deliver event to every handler."""
        if self._closed:
            logger.debug(f"Event channel closed, dropping {event.type.value} for {event.batch_id}")
            return

        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Batch event handler error ({event.type.value}): {e}")

    def close(self):
        """Drop all handlers; later publishes are no-ops."""
        self._handlers.clear()
        self._closed = True


def create_logging_handler(log_interval: int = 5) -> BatchEventHandler:
    """
    Create a handler that logs every Nth progress update and every
    lifecycle transition.

    Args:
        log_interval: Log every N progress updates

    Returns:
        Event handler function
    """
    counter = {"count": 0}

    def handler(event: BatchEvent):
        progress = event.progress
        if event.type == BatchEventType.PROGRESS_UPDATED:
            counter["count"] += 1
            if counter["count"] % log_interval != 0:
                return

        logger.info(
            f"[{event.type.value}] {event.batch_id}: "
            f"{progress.processed_chunks}/{progress.total_chunks} "
            f"({progress.percentage*100:.1f}%) - {progress.status.value}"
        )

    return handler
