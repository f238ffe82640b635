"""Notification Publisher — fire-and-forget delivery of lifecycle events.

Invariants:
    - publish_safely never raises: a failed delivery is logged and dropped
    - Events are published only after the transition that produced them committed
    - Subscribers receive LifecycleEvent values; the payload carries ids, never PII

Design Decisions:
    - NotificationPublisher is a Protocol: the external notifier (email, push, queue)
      plugs in at startup; LoggingPublisher is the default sink
    - InMemoryPublisher records events for tests and local runs
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from collabhub.core.domain_types import LifecycleEventType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LifecycleEvent:
    """Logical event announced to the notification collaborator."""
    type: LifecycleEventType
    request_id: str
    brand_id: str
    creator_id: str
    actor_id: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationPublisher(Protocol):
    async def publish(self, event: LifecycleEvent) -> None: ...


class LoggingPublisher:
    """Default sink — writes each event to the application log."""

    async def publish(self, event: LifecycleEvent) -> None:
        logger.info(
            f"Lifecycle event {event.type.value}",
            extra={
                "event_type": event.type.value,
                "request_id": event.request_id,
                "brand_id": event.brand_id,
                "creator_id": event.creator_id,
            },
        )


class InMemoryPublisher:
    """Collects events in a list."""

    def __init__(self):
        self.events: list[LifecycleEvent] = []

    async def publish(self, event: LifecycleEvent) -> None:
        self.events.append(event)

    def types(self) -> list[LifecycleEventType]:
        return [e.type for e in self.events]


async def publish_safely(
    publisher: NotificationPublisher, event: LifecycleEvent,
) -> bool:
    """Deliver one event. Returns False (and logs) when delivery fails."""
    try:
        await publisher.publish(event)
        return True
    except Exception as e:
        logger.warning(
            f"Notification delivery failed for {event.type.value}: {e}",
            extra={"event_type": event.type.value, "request_id": event.request_id},
        )
        return False


_publisher: NotificationPublisher = LoggingPublisher()


def set_publisher(publisher: NotificationPublisher) -> None:
    global _publisher
    _publisher = publisher


def get_publisher() -> NotificationPublisher:
    """FastAPI dependency for the configured publisher."""
    return _publisher
