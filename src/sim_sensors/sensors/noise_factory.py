"""NoiseFactory — build noise models from descriptors.

The factory maps the descriptor ``type`` onto a concrete model:

==========================  ==============================================
``"none"``                  :class:`~sim_sensors.sensors.noise.NoiseModel` (NONE)
``"custom"``                :class:`~sim_sensors.sensors.noise.NoiseModel` (CUSTOM)
``"gaussian"``              :class:`~sim_sensors.sensors.noise.GaussianNoiseModel`
``"gaussian_quantized"``    :class:`~sim_sensors.sensors.noise.GaussianNoiseModel`
                            with quantization enabled
==========================  ==============================================

Anything else raises :class:`UnknownNoiseTypeError`; the factory never falls
back to a default model.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

import numpy as np

from sim_sensors.sensors.descriptors import NoiseDescriptor
from sim_sensors.sensors.noise import GaussianNoiseModel, NoiseModel, NoiseType

logger = logging.getLogger(__name__)

_TYPE_NAMES: dict[str, NoiseType] = {
    "none": NoiseType.NONE,
    "custom": NoiseType.CUSTOM,
    "gaussian": NoiseType.GAUSSIAN,
    "gaussian_quantized": NoiseType.GAUSSIAN_QUANTIZED,
}


class UnknownNoiseTypeError(ValueError):
    """Raised when a noise descriptor names a type the factory cannot build."""

    def __init__(self, noise_type: object) -> None:
        self.noise_type = noise_type
        super().__init__(
            f"Unrecognized noise type {noise_type!r}; expected one of "
            f"{sorted(_TYPE_NAMES)}."
        )


def parse_noise_type(value: str | int | NoiseType) -> NoiseType:
    """Resolve a type name or integer code to a :class:`NoiseType`.

    Raises
    ------
    UnknownNoiseTypeError
        If *value* does not name a known variant.
    """
    if isinstance(value, str):
        try:
            return _TYPE_NAMES[value.strip().lower()]
        except KeyError:
            raise UnknownNoiseTypeError(value) from None
    try:
        return NoiseType(value)
    except ValueError:
        raise UnknownNoiseTypeError(value) from None


class NoiseFactory:
    """Construct :class:`~sim_sensors.sensors.noise.NoiseModel` instances.

    Parameters
    ----------
    logger:
        Diagnostic sink for construction failures.  Defaults to this
        module's logger.

    Example
    -------
    ::

        factory = NoiseFactory()
        noise = factory.new_noise_model({"type": "gaussian", "stddev": 0.1})
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def new_noise_model(
        self,
        descriptor: NoiseDescriptor | Mapping[str, object] | NoiseType | int,
        sensor_kind: str = "",
        rng: np.random.Generator | int | None = None,
    ) -> NoiseModel:
        """Build the model described by *descriptor*.

        Parameters
        ----------
        descriptor:
            A :class:`NoiseDescriptor`, a mapping validated into one, or a
            bare :class:`NoiseType` / integer code (default parameters).
        sensor_kind:
            Kind of the owning sensor.  Only affects diagnostics.
        rng:
            Optional generator or seed handed to the model.

        Returns
        -------
        NoiseModel

        Raises
        ------
        UnknownNoiseTypeError
            If the type is not recognised.
        pydantic.ValidationError
            If a mapping descriptor is malformed (e.g. negative stddev).
        """
        if isinstance(descriptor, (NoiseType, int)):
            noise_type = self._resolve_type(descriptor, sensor_kind)
            descriptor = NoiseDescriptor(type=_name_of(noise_type))
        else:
            if not isinstance(descriptor, NoiseDescriptor):
                descriptor = NoiseDescriptor.model_validate(dict(descriptor))
            noise_type = self._resolve_type(descriptor.type, sensor_kind)

        if noise_type in (NoiseType.GAUSSIAN, NoiseType.GAUSSIAN_QUANTIZED):
            model: NoiseModel = GaussianNoiseModel(
                mean=descriptor.mean,
                stddev=descriptor.stddev,
                bias_mean=descriptor.bias_mean,
                bias_stddev=descriptor.bias_stddev,
                precision=descriptor.precision,
                quantized=noise_type == NoiseType.GAUSSIAN_QUANTIZED,
                sensor_kind=sensor_kind,
                rng=rng,
            )
        else:
            model = NoiseModel(noise_type, rng=rng)

        self._logger.debug("Created %r for sensor kind %r", model, sensor_kind)
        return model

    def _resolve_type(self, value: str | int | NoiseType, sensor_kind: str) -> NoiseType:
        try:
            return parse_noise_type(value)
        except UnknownNoiseTypeError:
            self._logger.error(
                "Unrecognized noise type %r for sensor kind %r.", value, sensor_kind
            )
            raise


def _name_of(noise_type: NoiseType) -> str:
    return next(name for name, value in _TYPE_NAMES.items() if value == noise_type)
