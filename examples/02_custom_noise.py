#!/usr/bin/env python3
"""Example: Custom noise — sim-sensors

Build noise models through the factory, install a user callback on a
``custom`` model and compare the output of each variant on the same input.

Usage:
    python examples/02_custom_noise.py
"""
from __future__ import annotations

import numpy as np

from sim_sensors import NoiseFactory


def drift(value: float, dt: float) -> float:
    """A callback that adds a slow drift proportional to the step length."""
    return value + 0.5 * dt


def main() -> None:
    factory = NoiseFactory()
    truth = np.linspace(0.0, 1.0, 5)

    models = {
        "none": factory.new_noise_model({"type": "none"}),
        "gaussian": factory.new_noise_model({"type": "gaussian", "stddev": 0.1}, rng=7),
        "gaussian_quantized": factory.new_noise_model(
            {"type": "gaussian_quantized", "stddev": 0.1, "precision": 0.25}, rng=7
        ),
        "custom": factory.new_noise_model({"type": "custom"}),
    }
    models["custom"].set_custom_noise_callback(drift)

    print(f"truth:              {np.round(truth, 3)}")
    for name, model in models.items():
        noisy = model.apply_array(truth, dt=0.1)
        print(f"{name:<19} {np.round(noisy, 3)}")

    print()
    for name, model in models.items():
        print(f"[{name}] {model}")


if __name__ == "__main__":
    main()
