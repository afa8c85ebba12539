"""Synthetic sensors that need no rendering engine.

Each sensor pulls ground truth from a *source* callable ``source(sim_time)``
supplied by the caller (typically a physics step), corrupts it with the
owned noise model and publishes a :class:`~sim_sensors.sensors.base.SensorReading`.

* :class:`ScalarSensor` — publishes the source value (or a constant
  ``parameters.value``) as-is.
* :class:`AltimeterSensor` — vertical position relative to a reference
  altitude plus a finite-difference vertical velocity.
* :class:`AirPressureSensor` — static pressure from the standard atmosphere
  model.

:data:`BUILTIN_SENSORS` maps descriptor kinds to these classes for
:meth:`~sim_sensors.manager.Manager.create_sensor_by_kind`.
"""
from __future__ import annotations

import logging
from typing import Callable

from sim_sensors.sensors.base import Sensor, SensorReading
from sim_sensors.sensors.descriptors import SensorDescriptor
from sim_sensors.sensors.noise_factory import NoiseFactory
from sim_sensors.transport import Publisher

logger = logging.getLogger(__name__)

Source = Callable[[float], float]

# Standard atmosphere constants.
SEA_LEVEL_PRESSURE_PA = 101325.0
SEA_LEVEL_TEMPERATURE_K = 288.15
TEMPERATURE_LAPSE_RATE_K_PER_M = 0.0065
EARTH_RADIUS_M = 6356766.0
# g * M / (R * L), dimensionless.
BAROMETRIC_EXPONENT = 9.80665 * 0.0289644 / (8.3144598 * TEMPERATURE_LAPSE_RATE_K_PER_M)


class SourceSensor(Sensor):
    """Base for sensors that sample a ground-truth callable.

    Subclasses list their numeric ``parameters`` with defaults in
    :attr:`parameter_defaults`; :meth:`on_load` validates them into
    :attr:`parameters`.

    Parameters
    ----------
    source:
        ``source(sim_time) -> float`` giving the noise-free quantity.
    publisher, noise_factory, logger:
        See :class:`~sim_sensors.sensors.base.Sensor`.
    """

    parameter_defaults: dict[str, float] = {}

    def __init__(
        self,
        source: Source | None = None,
        publisher: Publisher | None = None,
        noise_factory: NoiseFactory | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(publisher=publisher, noise_factory=noise_factory, logger=logger)
        self._source = source
        self._parameters: dict[str, float] = dict(self.parameter_defaults)

    @property
    def parameters(self) -> dict[str, float]:
        """Numeric kind-specific parameters after loading."""
        return dict(self._parameters)

    def set_source(self, source: Source) -> None:
        self._source = source

    def on_load(self, descriptor: SensorDescriptor) -> bool:
        for key, default in self.parameter_defaults.items():
            raw = descriptor.parameters.get(key, default)
            try:
                self._parameters[key] = float(raw)  # type: ignore[arg-type]
            except (TypeError, ValueError):
                self._logger.error(
                    "Sensor %r parameter %r must be numeric, got %r.",
                    descriptor.name,
                    key,
                    raw,
                )
                return False
        if self._source is None and "value" in descriptor.parameters:
            try:
                constant = float(descriptor.parameters["value"])  # type: ignore[arg-type]
            except (TypeError, ValueError):
                self._logger.error("Sensor %r has a non-numeric value.", descriptor.name)
                return False
            self._source = lambda _t: constant
        return True

    def update(self, sim_time: float) -> bool:
        if not self.initialized:
            self._logger.error("Sensor %r updated before it was loaded.", self.name)
            return False
        if self._source is None:
            self._logger.error("Sensor %r has no ground-truth source.", self.name)
            return False
        truth = float(self._source(sim_time))
        dt = self.elapsed_since_update(sim_time)
        reading = self.measure(truth, sim_time, dt)
        return self.publish(reading)

    def measure(self, truth: float, sim_time: float, dt: float) -> SensorReading:
        """Turn a ground-truth sample into a noisy reading."""
        return SensorReading(
            sensor_name=self.name,
            values=[self.apply_noise(truth, dt)],
            sim_time=sim_time,
            metadata={"truth": truth},
        )


class ScalarSensor(SourceSensor):
    """Generic single-value sensor."""

    kind = "scalar"


class AltimeterSensor(SourceSensor):
    """Vertical position and velocity relative to a reference altitude.

    The source returns the world altitude in metres.  Noise is applied to
    the position; the velocity is a finite difference of consecutive
    noise-free positions.
    """

    kind = "altimeter"
    parameter_defaults = {"reference_altitude": 0.0}

    def __init__(
        self,
        source: Source | None = None,
        publisher: Publisher | None = None,
        noise_factory: NoiseFactory | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(source, publisher, noise_factory, logger)
        self._previous_position: float | None = None

    def measure(self, truth: float, sim_time: float, dt: float) -> SensorReading:
        position = truth - self._parameters["reference_altitude"]
        velocity = 0.0
        if self._previous_position is not None and dt > 0.0:
            velocity = (position - self._previous_position) / dt
        self._previous_position = position
        return SensorReading(
            sensor_name=self.name,
            values=[self.apply_noise(position, dt), velocity],
            sim_time=sim_time,
            metadata={"truth": position},
        )


def standard_atmosphere_pressure(altitude: float) -> float:
    """Static pressure in pascals at *altitude* metres above sea level."""
    geopotential = EARTH_RADIUS_M * altitude / (EARTH_RADIUS_M + altitude)
    temperature = SEA_LEVEL_TEMPERATURE_K - TEMPERATURE_LAPSE_RATE_K_PER_M * geopotential
    return SEA_LEVEL_PRESSURE_PA * (temperature / SEA_LEVEL_TEMPERATURE_K) ** BAROMETRIC_EXPONENT


class AirPressureSensor(SourceSensor):
    """Barometric pressure derived from the source altitude.

    ``reference_altitude`` is added to the source value before the standard
    atmosphere model is evaluated.
    """

    kind = "air_pressure"
    parameter_defaults = {"reference_altitude": 0.0}

    def measure(self, truth: float, sim_time: float, dt: float) -> SensorReading:
        pressure = standard_atmosphere_pressure(truth + self._parameters["reference_altitude"])
        return SensorReading(
            sensor_name=self.name,
            values=[self.apply_noise(pressure, dt)],
            sim_time=sim_time,
            metadata={"truth": pressure},
        )


BUILTIN_SENSORS: dict[str, type[Sensor]] = {
    ScalarSensor.kind: ScalarSensor,
    AltimeterSensor.kind: AltimeterSensor,
    AirPressureSensor.kind: AirPressureSensor,
}
