"""sim-sensors — registry, scheduler and noise models for simulated sensors.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Quick-start example
-------------------
>>> import sim_sensors
>>> sim_sensors.__version__
'0.1.0'

Subpackages
-----------
manager:
    :class:`Manager` — sensor ownership, id assignment and rate-gated stepping.
sensors:
    Sensor ABC, descriptors, sensor/noise factories, noise models and the
    built-in synthetic sensors.
transport:
    Publisher protocol and an in-memory publisher.
cli:
    ``sim-sensors`` command line driver.
"""
from __future__ import annotations

__version__: str = "0.1.0"

from sim_sensors.manager import Manager

# -- Sensors --------------------------------------------------------------
from sim_sensors.sensors import (
    BUILTIN_SENSORS,
    NO_SENSOR,
    AirPressureSensor,
    AltimeterSensor,
    GaussianNoiseModel,
    NoiseDescriptor,
    NoiseFactory,
    NoiseModel,
    NoiseType,
    ScalarSensor,
    Sensor,
    SensorDescriptor,
    SensorFactory,
    SensorId,
    SensorReading,
    SourceSensor,
    UnknownNoiseTypeError,
    load_sensor_descriptors,
)

# -- Transport ------------------------------------------------------------
from sim_sensors.transport import InMemoryPublisher, Publisher

__all__: list[str] = [
    "__version__",
    # manager
    "Manager",
    # sensors
    "NO_SENSOR",
    "Sensor",
    "SensorId",
    "SensorReading",
    "SourceSensor",
    "ScalarSensor",
    "AltimeterSensor",
    "AirPressureSensor",
    "BUILTIN_SENSORS",
    "SensorDescriptor",
    "NoiseDescriptor",
    "load_sensor_descriptors",
    "SensorFactory",
    "NoiseModel",
    "GaussianNoiseModel",
    "NoiseType",
    "NoiseFactory",
    "UnknownNoiseTypeError",
    # transport
    "Publisher",
    "InMemoryPublisher",
]
