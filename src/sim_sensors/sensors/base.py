"""Sensor ABC and SensorReading dataclass.

All simulated sensors subclass :class:`Sensor`.  The lifecycle is:

1. construct (no configuration yet);
2. :meth:`Sensor.load` with a
   :class:`~sim_sensors.sensors.descriptors.SensorDescriptor` — sets name,
   topic and update rate and builds the owned noise model;
3. the :class:`~sim_sensors.manager.Manager` assigns an id and calls
   :meth:`Sensor.update` whenever the sensor is due;
4. :meth:`Sensor.close` when the sensor is removed or the manager shuts down.

Concrete sensors implement :meth:`Sensor.update` and may override
:meth:`Sensor.on_load` for kind-specific configuration.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta

from pydantic import ValidationError

from sim_sensors.sensors.descriptors import SensorDescriptor
from sim_sensors.sensors.noise import NoiseModel
from sim_sensors.sensors.noise_factory import NoiseFactory
from sim_sensors.transport import Publisher

logger = logging.getLogger(__name__)

SensorId = int

#: Identifier value of a sensor that has not been registered.
NO_SENSOR: SensorId = 0


_NS_PER_SECOND = 1_000_000_000


def to_seconds(sim_time: float | timedelta) -> float:
    """Convert a simulation timestamp to float seconds."""
    if isinstance(sim_time, timedelta):
        return sim_time.total_seconds()
    return float(sim_time)


def to_nanoseconds(sim_time: float | timedelta) -> int:
    """Convert a simulation timestamp to integer nanoseconds.

    Rate gating compares integer nanoseconds so that ticks such as 0.6 and
    0.7 are exactly one 10 Hz period apart.
    """
    if isinstance(sim_time, timedelta):
        return sim_time // timedelta(microseconds=1) * 1000
    return round(float(sim_time) * _NS_PER_SECOND)


@dataclass
class SensorReading:
    """One measurement published by a :class:`Sensor`.

    Attributes
    ----------
    sensor_name:
        Name of the sensor that produced the reading.
    values:
        Noisy measured values.  Scalar sensors publish a single value.
    sim_time:
        Simulation time of the measurement, in seconds.
    metadata:
        Sensor-specific extras (e.g. the noise-free value).
    """

    sensor_name: str
    values: list[float]
    sim_time: float
    metadata: dict[str, object] = field(default_factory=dict)

    @property
    def scalar(self) -> float:
        """Convenience accessor for single-value readings."""
        if len(self.values) != 1:
            raise ValueError(
                f"Cannot call .scalar on a multi-value reading (len={len(self.values)})."
            )
        return self.values[0]


class Sensor(ABC):
    """Abstract base class for all simulated sensors.

    Subclasses set :attr:`kind` and implement :meth:`update`.

    Parameters
    ----------
    publisher:
        Where readings are delivered.  ``None`` means readings are produced
        but not published.
    noise_factory:
        Factory used to build the noise model during :meth:`load`.
    logger:
        Diagnostic sink.  Defaults to this module's logger.
    """

    #: Descriptor ``kind`` this class accepts.  Empty accepts any kind.
    kind: str = ""

    def __init__(
        self,
        publisher: Publisher | None = None,
        noise_factory: NoiseFactory | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._publisher = publisher
        self._noise_factory = noise_factory or NoiseFactory(logger=self._logger)
        self._id: int = NO_SENSOR
        self._name: str = ""
        self._topic: str = ""
        self._update_rate: float = 0.0
        self._last_update_time: float | None = None
        self._last_update_ns: int | None = None
        self._initialized: bool = False
        self._noise: NoiseModel | None = None
        self._descriptor: SensorDescriptor | None = None

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def id(self) -> int:
        """Identifier assigned by the manager, ``NO_SENSOR`` until then."""
        return self._id

    def assign_id(self, sensor_id: int) -> None:
        """Set the identifier.  May only happen once.

        Raises
        ------
        ValueError
            If *sensor_id* is ``NO_SENSOR``.
        RuntimeError
            If the sensor already has an identifier.
        """
        if sensor_id == NO_SENSOR:
            raise ValueError("Cannot assign NO_SENSOR as a sensor id.")
        if self._id != NO_SENSOR:
            raise RuntimeError(
                f"Sensor {self._name!r} already has id {self._id}; ids are immutable."
            )
        self._id = sensor_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def update_rate(self) -> float:
        """Target update frequency in Hz.  ``0`` means every tick."""
        return self._update_rate

    @property
    def last_update_time(self) -> float | None:
        """Simulation time of the last successful update, ``None`` if never."""
        return self._last_update_time

    @last_update_time.setter
    def last_update_time(self, sim_time: float | timedelta) -> None:
        self._last_update_time = to_seconds(sim_time)
        self._last_update_ns = to_nanoseconds(sim_time)

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def noise(self) -> NoiseModel | None:
        """Noise model built from the descriptor, if any."""
        return self._noise

    @property
    def descriptor(self) -> SensorDescriptor | None:
        return self._descriptor

    @property
    def publisher(self) -> Publisher | None:
        return self._publisher

    # ------------------------------------------------------------------
    # Scheduling helpers
    # ------------------------------------------------------------------

    @property
    def next_update_time(self) -> float | None:
        """Earliest simulation time at which the sensor is due again.

        ``None`` means the sensor is due on every tick (never updated, or
        no rate limit).
        """
        if self._last_update_ns is None or self._update_rate <= 0.0:
            return None
        return (self._last_update_ns + self._period_ns()) / _NS_PER_SECOND

    def is_due(self, sim_time: float | timedelta) -> bool:
        """Return True if at least one period has elapsed since the last update."""
        if self._update_rate <= 0.0 or self._last_update_ns is None:
            return True
        return to_nanoseconds(sim_time) - self._last_update_ns >= self._period_ns()

    def _period_ns(self) -> int:
        return round(_NS_PER_SECOND / self._update_rate)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self) -> bool:
        """Prepare resources that do not depend on the descriptor."""
        return True

    def load(self, descriptor: SensorDescriptor | Mapping[str, object]) -> bool:
        """Configure the sensor from *descriptor*.

        Returns False, leaving the sensor uninitialized, when the descriptor
        is invalid, names a different kind, or its noise model cannot be
        built.
        """
        if not isinstance(descriptor, SensorDescriptor):
            try:
                descriptor = SensorDescriptor.model_validate(
                    dict(descriptor) if isinstance(descriptor, Mapping) else descriptor
                )
            except ValidationError as exc:
                self._logger.error("Invalid sensor descriptor: %s", exc)
                return False

        if self.kind and descriptor.kind != self.kind:
            self._logger.error(
                "Attempting to load a %s sensor, but received a %s descriptor.",
                self.kind,
                descriptor.kind,
            )
            return False

        noise: NoiseModel | None = None
        if descriptor.noise is not None:
            try:
                noise = self._noise_factory.new_noise_model(
                    descriptor.noise, sensor_kind=descriptor.kind
                )
            except ValueError as exc:
                self._logger.error(
                    "Unable to create noise model for sensor %r: %s", descriptor.name, exc
                )
                return False

        self._name = descriptor.name
        self._topic = _normalize_topic(descriptor.topic, descriptor.name)
        self._update_rate = descriptor.update_rate
        self._noise = noise
        self._descriptor = descriptor

        if not self.on_load(descriptor):
            self._noise = None
            return False

        self._initialized = True
        self._logger.debug(
            "Loaded %s sensor %r on %s at %.3f Hz",
            descriptor.kind,
            self._name,
            self._topic,
            self._update_rate,
        )
        return True

    def on_load(self, descriptor: SensorDescriptor) -> bool:
        """Hook for kind-specific configuration.  Return False on failure."""
        return True

    @abstractmethod
    def update(self, sim_time: float) -> bool:
        """Produce one measurement at *sim_time*.

        Returns
        -------
        bool
            False if the sensor is not initialized or a dependency is
            unavailable.
        """

    def close(self) -> None:
        """Release resources.  The sensor cannot update afterwards."""
        self._noise = None
        self._initialized = False

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    def apply_noise(self, value: float, dt: float = 0.0) -> float:
        """Corrupt *value* with the owned noise model, if there is one."""
        if self._noise is None:
            return value
        return self._noise.apply(value, dt)

    def elapsed_since_update(self, sim_time: float) -> float:
        """Seconds since the last successful update, 0 if never updated."""
        if self._last_update_time is None:
            return 0.0
        return sim_time - self._last_update_time

    def publish(self, reading: SensorReading) -> bool:
        """Send *reading* on this sensor's topic.  True when no publisher is set."""
        if self._publisher is None:
            return True
        return self._publisher.publish(self._topic, reading)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"id={self._id}, name={self._name!r}, topic={self._topic!r}, "
            f"update_rate={self._update_rate})"
        )


def _normalize_topic(topic: str, name: str) -> str:
    topic = topic.strip() or f"/{name}"
    topic = topic.replace(" ", "_")
    if not topic.startswith("/"):
        topic = "/" + topic
    return topic
