"""Manager — own the live sensors and step them against the simulation clock.

The manager is the registry and scheduler for all sensors:

* :meth:`Manager.add_sensor` takes ownership of a loaded sensor and assigns
  it the next identifier.  Identifiers increase strictly and are never
  reissued, even after the sensor is removed.
* :meth:`Manager.run_once` is called once per simulation tick.  Each sensor
  is updated when its update rate says it is due (or always, when forced).
  A failed update is logged and retried on the next due tick; it never stops
  the other sensors from being stepped.

The manager is single-threaded and not reentrant.  Callers must serialize
access; there is no internal locking.
"""
from __future__ import annotations

import itertools
import logging
from collections.abc import Iterator, Mapping
from datetime import timedelta
from typing import TypeVar

from sim_sensors.sensors.base import NO_SENSOR, Sensor, SensorId, to_seconds
from sim_sensors.sensors.descriptors import SensorDescriptor
from sim_sensors.sensors.factory import SensorFactory

logger = logging.getLogger(__name__)

SensorT = TypeVar("SensorT", bound=Sensor)


class Manager:
    """Registry and update scheduler for simulated sensors.

    Parameters
    ----------
    logger:
        Diagnostic sink for construction and update failures.  Defaults to
        this module's logger.

    Example
    -------
    ::

        manager = Manager()
        manager.init()
        altimeter = manager.create_sensor(AltimeterSensor, descriptor, source=pose_z)
        for tick in range(1000):
            manager.run_once(tick * 0.001)
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._sensors: dict[SensorId, Sensor] = {}
        self._ids = itertools.count(NO_SENSOR + 1)
        self._factory = SensorFactory(logger=self._logger)
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(self) -> bool:
        """Initialize the sensor library.  Safe to call more than once."""
        if not self._initialized:
            self._initialized = True
            self._logger.debug("Sensor manager initialized.")
        return True

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def create_sensor(
        self,
        sensor_cls: type[SensorT],
        descriptor: SensorDescriptor | Mapping[str, object],
        **kwargs: object,
    ) -> SensorT | None:
        """Build, load and register a sensor of type *sensor_cls*.

        Returns
        -------
        SensorT | None
            The registered sensor, or ``None`` if creation or registration
            failed.  The manager keeps ownership.
        """
        sensor = self._factory.create_sensor(sensor_cls, descriptor, **kwargs)
        if sensor is None:
            self._logger.error("Failed to create sensor.")
            return None
        if self.add_sensor(sensor) == NO_SENSOR:
            self._logger.error("Failed to add sensor.")
            return None
        return sensor

    def create_sensor_by_kind(
        self,
        descriptor: SensorDescriptor | Mapping[str, object],
        registry: Mapping[str, type[Sensor]],
        **kwargs: object,
    ) -> SensorId:
        """Build and register the sensor class registered for the descriptor's kind.

        Returns
        -------
        SensorId
            The new identifier, or ``NO_SENSOR`` on failure.
        """
        sensor = self._factory.create_sensor_by_kind(descriptor, registry, **kwargs)
        if sensor is None:
            self._logger.error("Failed to create sensor.")
            return NO_SENSOR
        return self.add_sensor(sensor)

    def add_sensor(self, sensor: Sensor | None) -> SensorId:
        """Take ownership of *sensor* and assign it a new identifier.

        Returns
        -------
        SensorId
            The assigned identifier, or ``NO_SENSOR`` if *sensor* is ``None``
            or already registered.
        """
        if sensor is None:
            self._logger.error("Cannot add a null sensor.")
            return NO_SENSOR
        if sensor.id != NO_SENSOR:
            self._logger.error(
                "Sensor %r already has id %d and cannot be added again.",
                sensor.name,
                sensor.id,
            )
            return NO_SENSOR

        sensor_id = next(self._ids)
        sensor.assign_id(sensor_id)
        self._sensors[sensor_id] = sensor
        self._logger.debug("Added sensor %r with id %d.", sensor.name, sensor_id)
        return sensor_id

    def sensor(self, sensor_id: SensorId) -> Sensor | None:
        """Return the sensor registered under *sensor_id*, or ``None``.

        The manager keeps ownership; do not hold on to the result across a
        call that may remove the sensor.
        """
        return self._sensors.get(sensor_id)

    def remove(self, sensor_id: SensorId) -> bool:
        """Remove and tear down a sensor.

        Returns
        -------
        bool
            True if the sensor existed and was removed, False otherwise.
        """
        sensor = self._sensors.pop(sensor_id, None)
        if sensor is None:
            return False
        sensor.close()
        self._logger.debug("Removed sensor %r (id=%d).", sensor.name, sensor_id)
        return True

    def sensor_ids(self) -> list[SensorId]:
        """Identifiers of all registered sensors, ascending."""
        return sorted(self._sensors)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def run_once(self, sim_time: float | timedelta, force: bool = False) -> int:
        """Run one scheduling pass at *sim_time*.

        Parameters
        ----------
        sim_time:
            Current simulation time, as seconds or a ``timedelta``.
        force:
            Update every sensor regardless of its rate.

        Returns
        -------
        int
            Number of sensors that updated successfully.
        """
        now = to_seconds(sim_time)
        updated = 0
        # Sensors added or removed by an update do not affect this pass.
        for sensor_id, sensor in list(self._sensors.items()):
            if not force and not sensor.is_due(sim_time):
                continue
            try:
                ok = sensor.update(now)
            except Exception:
                self._logger.exception(
                    "Sensor %r (id=%d) raised during update at t=%.6f.",
                    sensor.name,
                    sensor_id,
                    now,
                )
                continue
            if ok:
                sensor.last_update_time = sim_time
                updated += 1
            else:
                self._logger.error(
                    "Sensor %r (id=%d) failed to update at t=%.6f.",
                    sensor.name,
                    sensor_id,
                    now,
                )
        return updated

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Tear down every registered sensor."""
        for sensor_id in list(self._sensors):
            self.remove(sensor_id)

    def __enter__(self) -> Manager:
        self.init()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._sensors)

    def __contains__(self, sensor_id: object) -> bool:
        return sensor_id in self._sensors

    def __iter__(self) -> Iterator[Sensor]:
        return iter(list(self._sensors.values()))

    def __repr__(self) -> str:
        return f"Manager(sensors={len(self._sensors)})"
