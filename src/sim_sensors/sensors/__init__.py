"""Sensor abstractions — base class, descriptors, factories and noise models.

* **base** — :class:`Sensor` ABC and :class:`SensorReading` dataclass.
* **descriptors** — pydantic :class:`SensorDescriptor` /
  :class:`NoiseDescriptor` and YAML world loading.
* **noise** — :class:`NoiseModel`, :class:`GaussianNoiseModel`,
  :class:`NoiseType`.
* **noise_factory** — :class:`NoiseFactory`.
* **factory** — :class:`SensorFactory`.
* **builtin** — synthetic scalar, altimeter and air pressure sensors.
"""
from __future__ import annotations

from sim_sensors.sensors.base import NO_SENSOR, Sensor, SensorId, SensorReading
from sim_sensors.sensors.builtin import (
    BUILTIN_SENSORS,
    AirPressureSensor,
    AltimeterSensor,
    ScalarSensor,
    SourceSensor,
)
from sim_sensors.sensors.descriptors import (
    NoiseDescriptor,
    SensorDescriptor,
    load_sensor_descriptors,
)
from sim_sensors.sensors.factory import SensorFactory
from sim_sensors.sensors.noise import GaussianNoiseModel, NoiseModel, NoiseType
from sim_sensors.sensors.noise_factory import NoiseFactory, UnknownNoiseTypeError

__all__ = [
    "NO_SENSOR",
    "Sensor",
    "SensorId",
    "SensorReading",
    "SourceSensor",
    "ScalarSensor",
    "AltimeterSensor",
    "AirPressureSensor",
    "BUILTIN_SENSORS",
    "NoiseDescriptor",
    "SensorDescriptor",
    "load_sensor_descriptors",
    "SensorFactory",
    "NoiseModel",
    "GaussianNoiseModel",
    "NoiseType",
    "NoiseFactory",
    "UnknownNoiseTypeError",
]
