"""Declarative sensor and noise descriptors.

Descriptors are the configuration trees consumed at construction time.  They
are pydantic models so that a world file can be validated before any sensor
is built:

* :class:`NoiseDescriptor` — the ``noise`` block of a sensor.
* :class:`SensorDescriptor` — one sensor: kind, name, topic, update rate,
  optional noise and opaque kind-specific parameters.

World files are YAML documents with a top-level ``sensors`` list; see
:func:`load_sensor_descriptors`.
"""
from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class NoiseDescriptor(BaseModel):
    """Parameters of a noise model.

    Attributes
    ----------
    type:
        Variant name: ``"none"``, ``"gaussian"``, ``"gaussian_quantized"`` or
        ``"custom"``.  Other values are rejected by the noise factory.
    mean:
        Mean of the per-call Gaussian sample.
    stddev:
        Standard deviation of the per-call sample.  Must be >= 0.
    bias_mean:
        Mean of the one-time bias draw.
    bias_stddev:
        Standard deviation of the one-time bias draw.  Must be >= 0.
    precision:
        Quantization step for ``gaussian_quantized``.  Ignored otherwise.
    """

    type: str = "none"
    mean: float = 0.0
    stddev: float = Field(default=0.0, ge=0.0)
    bias_mean: float = 0.0
    bias_stddev: float = Field(default=0.0, ge=0.0)
    precision: float = 0.0

    model_config = {"frozen": True}


class SensorDescriptor(BaseModel):
    """Configuration for one sensor.

    Attributes
    ----------
    kind:
        Discriminator naming the concrete sensor type, e.g. ``"altimeter"``.
    name:
        Sensor name, unique by convention within a world.
    topic:
        Topic the sensor publishes on.  Empty means ``/<name>``.
    update_rate:
        Target update frequency in Hz.  ``0`` means every tick.
    noise:
        Optional noise configuration.
    parameters:
        Kind-specific settings, passed through untouched.
    """

    kind: str
    name: str
    topic: str = ""
    update_rate: float = Field(default=0.0, ge=0.0)
    noise: NoiseDescriptor | None = None
    parameters: dict[str, object] = Field(default_factory=dict)

    model_config = {"frozen": True}


class WorldDescriptor(BaseModel):
    """Top-level document of a world file."""

    sensors: list[SensorDescriptor] = Field(default_factory=list)


def load_sensor_descriptors(path: str | Path) -> list[SensorDescriptor]:
    """Read a YAML world file and return its sensor descriptors.

    Parameters
    ----------
    path:
        Path to the YAML file.

    Returns
    -------
    list[SensorDescriptor]
        Descriptors in file order.  An empty document yields ``[]``.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    yaml.YAMLError
        If the file is not valid YAML.
    pydantic.ValidationError
        If a descriptor is malformed.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    world = WorldDescriptor.model_validate(data or {})
    logger.info("Loaded %d sensor descriptor(s) from %s", len(world.sensors), path)
    return world.sensors
