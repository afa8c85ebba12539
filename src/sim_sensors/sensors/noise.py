"""NoiseModel — corrupt raw sensor measurements with stochastic noise.

Provides the noise variants recognised by the simulator:

* :class:`NoiseModel` — the base model.  Handles :attr:`NoiseType.NONE`
  (pass-through) and :attr:`NoiseType.CUSTOM` (user supplied callback).
* :class:`GaussianNoiseModel` — additive Gaussian noise plus a constant bias
  drawn once per instance.  Handles both :attr:`NoiseType.GAUSSIAN` and
  :attr:`NoiseType.GAUSSIAN_QUANTIZED`.

Every model owns a ``numpy.random.Generator`` so draws can be made
reproducible by passing a seed or a generator at construction time.

Usage
-----
::

    noise = GaussianNoiseModel(mean=0.0, stddev=0.05, rng=42)
    noisy = noise.apply(1.0)
"""
from __future__ import annotations

import io
import logging
import math
from enum import IntEnum
from typing import Callable, TextIO

import numpy as np
from numpy.typing import ArrayLike, NDArray

logger = logging.getLogger(__name__)

CustomNoiseCallback = Callable[[float, float], float]


class NoiseType(IntEnum):
    """Noise variant tags.

    The integer values appear in diagnostic text, so they are stable.
    """

    NONE = 0
    CUSTOM = 1
    GAUSSIAN = 2
    GAUSSIAN_QUANTIZED = 3


def make_rng(rng: np.random.Generator | int | None = None) -> np.random.Generator:
    """Return *rng* if it is already a Generator, otherwise seed a new one."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def round_half_away(value: float) -> float:
    """Round to the nearest integer, ties away from zero.

    Python's builtin :func:`round` rounds ties to even, which is not what
    quantization wants.
    """
    return math.copysign(math.floor(abs(value) + 0.5), value)


class NoiseModel:
    """Base noise model.

    A ``NONE`` model returns its input unchanged.  A ``CUSTOM`` model
    forwards to the callback installed with
    :meth:`set_custom_noise_callback`, and passes values through until one
    is installed.

    Parameters
    ----------
    noise_type:
        Variant tag for this model.
    rng:
        Optional ``numpy.random.Generator`` or integer seed.  Unused by the
        base variants but kept so every model exposes the same constructor
        surface.
    """

    def __init__(
        self,
        noise_type: NoiseType = NoiseType.NONE,
        rng: np.random.Generator | int | None = None,
    ) -> None:
        self._type = NoiseType(noise_type)
        self._rng = make_rng(rng)
        self._custom_callback: CustomNoiseCallback | None = None

    @property
    def type(self) -> NoiseType:
        """Variant tag."""
        return self._type

    @property
    def custom_callback(self) -> CustomNoiseCallback | None:
        """Installed custom callback, if any."""
        return self._custom_callback

    def set_custom_noise_callback(self, callback: CustomNoiseCallback) -> None:
        """Install the ``(value, dt) -> value`` callback used by CUSTOM models."""
        self._custom_callback = callback

    def apply(self, value: float, dt: float = 0.0) -> float:
        """Return a noisy copy of *value*.

        Parameters
        ----------
        value:
            Clean measurement.
        dt:
            Time elapsed since the previous measurement, in seconds.  Only
            custom callbacks look at it.
        """
        if self._type == NoiseType.NONE:
            return value
        if self._type == NoiseType.CUSTOM:
            if self._custom_callback is None:
                return value
            return self._custom_callback(value, dt)
        return self._apply_impl(value, dt)

    def apply_array(self, values: ArrayLike, dt: float = 0.0) -> NDArray[np.float64]:
        """Apply noise element-wise to an array of measurements.

        Each element gets an independent draw.  The input is not modified.
        """
        arr = np.asarray(values, dtype=np.float64)
        if self._type == NoiseType.NONE:
            return arr.copy()
        if self._type == NoiseType.CUSTOM and self._custom_callback is not None:
            callback = self._custom_callback
            return np.vectorize(lambda v: callback(float(v), dt), otypes=[np.float64])(arr)
        if self._type == NoiseType.CUSTOM:
            return arr.copy()
        return self._apply_array_impl(arr, dt)

    def _apply_impl(self, value: float, dt: float) -> float:
        # Variants without their own formula pass through.
        return value

    def _apply_array_impl(self, values: NDArray[np.float64], dt: float) -> NDArray[np.float64]:
        return values.copy()

    def describe(self) -> str:
        """Return a human-readable description of this model."""
        return (
            f"Noise with type[{int(self._type)}] does not have an overloaded "
            "Print function. No more information is available."
        )

    def print_to(self, sink: TextIO) -> None:
        """Write :meth:`describe` to *sink*."""
        sink.write(self.describe())

    def __str__(self) -> str:
        buffer = io.StringIO()
        self.print_to(buffer)
        return buffer.getvalue()

    def __call__(self, value: float, dt: float = 0.0) -> float:
        """Allow instances to be called directly as ``noise(value)``."""
        return self.apply(value, dt)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self._type.name})"


class GaussianNoiseModel(NoiseModel):
    """Additive Gaussian noise with a fixed per-instance bias.

    The output is::

        noisy = value + N(mean, stddev) + bias

    where ``bias`` is drawn once from ``N(bias_mean, bias_stddev)`` when the
    model is built.  For the quantized variant the result is then rounded to
    the nearest multiple of ``precision`` (ties away from zero) whenever
    ``precision > 0``.

    Parameters
    ----------
    mean:
        Mean of the per-call sample.
    stddev:
        Standard deviation of the per-call sample.  ``0`` makes the sample
        exactly ``mean``.
    bias_mean:
        Mean of the one-time bias draw.
    bias_stddev:
        Standard deviation of the one-time bias draw.
    precision:
        Quantization step, only used when ``quantized`` is True.
    quantized:
        Selects :attr:`NoiseType.GAUSSIAN_QUANTIZED`.
    sensor_kind:
        Kind of the owning sensor.  Only used in :meth:`describe`.
    rng:
        Optional ``numpy.random.Generator`` or integer seed.

    Raises
    ------
    ValueError
        If ``stddev`` or ``bias_stddev`` is negative.
    """

    def __init__(
        self,
        mean: float = 0.0,
        stddev: float = 0.0,
        bias_mean: float = 0.0,
        bias_stddev: float = 0.0,
        precision: float = 0.0,
        quantized: bool = False,
        sensor_kind: str = "",
        rng: np.random.Generator | int | None = None,
    ) -> None:
        if stddev < 0.0:
            raise ValueError(f"Noise stddev must be >= 0, got {stddev}.")
        if bias_stddev < 0.0:
            raise ValueError(f"Noise bias_stddev must be >= 0, got {bias_stddev}.")
        noise_type = NoiseType.GAUSSIAN_QUANTIZED if quantized else NoiseType.GAUSSIAN
        super().__init__(noise_type, rng=rng)
        self._mean = float(mean)
        self._stddev = float(stddev)
        self._bias_mean = float(bias_mean)
        self._bias_stddev = float(bias_stddev)
        self._precision = float(precision)
        self._quantized = quantized
        self._sensor_kind = sensor_kind

        if self._bias_stddev > 0.0:
            self._bias = float(self._rng.normal(self._bias_mean, self._bias_stddev))
        else:
            self._bias = self._bias_mean
        logger.debug(
            "Gaussian noise bias drawn: %.6f (bias_mean=%.6f, bias_stddev=%.6f)",
            self._bias,
            self._bias_mean,
            self._bias_stddev,
        )

    @property
    def mean(self) -> float:
        """Mean of the per-call sample."""
        return self._mean

    @property
    def stddev(self) -> float:
        """Standard deviation of the per-call sample."""
        return self._stddev

    @property
    def bias_mean(self) -> float:
        """Mean of the one-time bias draw."""
        return self._bias_mean

    @property
    def bias_stddev(self) -> float:
        """Standard deviation of the one-time bias draw."""
        return self._bias_stddev

    @property
    def bias(self) -> float:
        """Bias drawn at construction; fixed for the lifetime of the model."""
        return self._bias

    @property
    def precision(self) -> float:
        """Quantization step (0 when unquantized)."""
        return self._precision if self._quantized else 0.0

    @property
    def sensor_kind(self) -> str:
        """Sensor kind hint used only in diagnostics."""
        return self._sensor_kind

    def _sample(self) -> float:
        if self._stddev == 0.0:
            return self._mean
        return float(self._rng.normal(self._mean, self._stddev))

    def _apply_impl(self, value: float, dt: float) -> float:
        output = value + self._sample() + self._bias
        if self._quantized and self._precision > 0.0:
            output = round_half_away(output / self._precision) * self._precision
        return output

    def _apply_array_impl(self, values: NDArray[np.float64], dt: float) -> NDArray[np.float64]:
        if self._stddev == 0.0:
            sample = np.full(values.shape, self._mean)
        else:
            sample = self._rng.normal(self._mean, self._stddev, size=values.shape)
        output = values + sample + self._bias
        if self._quantized and self._precision > 0.0:
            scaled = output / self._precision
            output = np.sign(scaled) * np.floor(np.abs(scaled) + 0.5) * self._precision
        return output

    def describe(self) -> str:
        lines = [
            f"{self._type.name.lower()} noise"
            + (f" for {self._sensor_kind} sensor" if self._sensor_kind else ""),
            f"  mean: {self._mean}",
            f"  stddev: {self._stddev}",
            f"  bias: {self._bias} (bias_mean: {self._bias_mean}, "
            f"bias_stddev: {self._bias_stddev})",
        ]
        if self._quantized:
            lines.append(f"  precision: {self._precision}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"GaussianNoiseModel(type={self._type.name}, mean={self._mean}, "
            f"stddev={self._stddev}, bias={self._bias}, precision={self.precision})"
        )
