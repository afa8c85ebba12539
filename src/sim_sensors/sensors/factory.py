"""SensorFactory — type-checked sensor construction.

Two creation paths:

* :meth:`SensorFactory.create_sensor` — the caller names the concrete class.
* :meth:`SensorFactory.create_sensor_by_kind` — the class is looked up from
  the descriptor's ``kind`` in a registry mapping.

Both return ``None`` when the sensor fails to load; the caller decides
whether to retry with a corrected descriptor.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TypeVar

from pydantic import ValidationError

from sim_sensors.sensors.base import Sensor
from sim_sensors.sensors.descriptors import SensorDescriptor

logger = logging.getLogger(__name__)

SensorT = TypeVar("SensorT", bound=Sensor)


class SensorFactory:
    """Build and load :class:`~sim_sensors.sensors.base.Sensor` instances.

    Parameters
    ----------
    logger:
        Diagnostic sink.  Defaults to this module's logger.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def create_sensor(
        self,
        sensor_cls: type[SensorT],
        descriptor: SensorDescriptor | Mapping[str, object],
        **kwargs: object,
    ) -> SensorT | None:
        """Instantiate *sensor_cls* and load it from *descriptor*.

        Parameters
        ----------
        sensor_cls:
            Concrete :class:`Sensor` subclass to build.
        descriptor:
            Sensor configuration.
        **kwargs:
            Forwarded to the sensor constructor (publisher, sources, ...).

        Returns
        -------
        SensorT | None
            The loaded sensor, or ``None`` if :meth:`Sensor.load` failed.

        Raises
        ------
        TypeError
            If *sensor_cls* is not a concrete :class:`Sensor` subclass.
        """
        if not (isinstance(sensor_cls, type) and issubclass(sensor_cls, Sensor)):
            raise TypeError(f"{sensor_cls!r} is not a Sensor subclass.")

        sensor = sensor_cls(**kwargs)
        if not sensor.load(descriptor):
            self._logger.error(
                "Unable to load %s from descriptor %r.",
                sensor_cls.__name__,
                _descriptor_name(descriptor),
            )
            sensor.close()
            return None
        return sensor

    def create_sensor_by_kind(
        self,
        descriptor: SensorDescriptor | Mapping[str, object],
        registry: Mapping[str, type[Sensor]],
        **kwargs: object,
    ) -> Sensor | None:
        """Build the class registered under the descriptor's ``kind``.

        Returns ``None`` (logged) for an invalid descriptor or an unknown kind.
        """
        if not isinstance(descriptor, SensorDescriptor):
            try:
                descriptor = SensorDescriptor.model_validate(
                    dict(descriptor) if isinstance(descriptor, Mapping) else descriptor
                )
            except ValidationError as exc:
                self._logger.error("Invalid sensor descriptor: %s", exc)
                return None

        sensor_cls = registry.get(descriptor.kind)
        if sensor_cls is None:
            self._logger.error(
                "No sensor registered for kind %r (known: %s).",
                descriptor.kind,
                ", ".join(sorted(registry)) or "none",
            )
            return None
        return self.create_sensor(sensor_cls, descriptor, **kwargs)


def _descriptor_name(descriptor: SensorDescriptor | Mapping[str, object]) -> object:
    if isinstance(descriptor, SensorDescriptor):
        return descriptor.name
    if isinstance(descriptor, Mapping):
        return descriptor.get("name")
    return descriptor
