"""Publishing seam between sensors and the message transport.

Sensors hand each measurement to a :class:`Publisher`.  The real transport
lives outside this package; :class:`InMemoryPublisher` keeps messages in
memory for tests, examples and the CLI.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sim_sensors.sensors.base import SensorReading

logger = logging.getLogger(__name__)


@runtime_checkable
class Publisher(Protocol):
    """Anything that can deliver a reading on a topic."""

    def publish(self, topic: str, reading: SensorReading) -> bool:
        """Deliver *reading* on *topic*.  Return False if delivery failed."""
        ...


class InMemoryPublisher:
    """Record published readings per topic.

    Parameters
    ----------
    max_messages_per_topic:
        Oldest messages are dropped once a topic holds this many.  ``None``
        keeps everything.
    """

    def __init__(self, max_messages_per_topic: int | None = None) -> None:
        if max_messages_per_topic is not None and max_messages_per_topic <= 0:
            raise ValueError(
                f"max_messages_per_topic must be positive, got {max_messages_per_topic}."
            )
        self._max = max_messages_per_topic
        self._messages: dict[str, list[SensorReading]] = defaultdict(list)

    def publish(self, topic: str, reading: SensorReading) -> bool:
        messages = self._messages[topic]
        messages.append(reading)
        if self._max is not None and len(messages) > self._max:
            del messages[0]
        logger.debug("Published on %s at t=%.6f", topic, reading.sim_time)
        return True

    def messages(self, topic: str) -> list[SensorReading]:
        """Return a copy of the readings published on *topic*."""
        return list(self._messages.get(topic, []))

    def topics(self) -> list[str]:
        """Topics with at least one message, sorted."""
        return sorted(self._messages)

    def count(self, topic: str) -> int:
        return len(self._messages.get(topic, []))

    def clear(self) -> None:
        self._messages.clear()

    def __repr__(self) -> str:
        return f"InMemoryPublisher(topics={len(self._messages)})"
