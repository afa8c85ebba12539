#!/usr/bin/env python3
"""Example: Quickstart — sim-sensors

Minimal working example: register an altimeter and a barometer with the
manager, step them over one simulated second and read back what they
published.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install sim-sensors
"""
from __future__ import annotations

import sim_sensors
from sim_sensors import (
    AirPressureSensor,
    AltimeterSensor,
    InMemoryPublisher,
    Manager,
)


def climb(sim_time: float) -> float:
    """Ground truth: a drone climbing at 2 m/s from 100 m."""
    return 100.0 + 2.0 * sim_time


def main() -> None:
    print(f"sim-sensors version: {sim_sensors.__version__}")

    publisher = InMemoryPublisher()

    with Manager() as manager:
        # Step 1: Create sensors from descriptors
        altimeter = manager.create_sensor(
            AltimeterSensor,
            {
                "kind": "altimeter",
                "name": "altimeter",
                "update_rate": 10.0,
                "noise": {"type": "gaussian", "stddev": 0.05, "bias_mean": 0.2},
            },
            source=climb,
            publisher=publisher,
        )
        barometer = manager.create_sensor(
            AirPressureSensor,
            {
                "kind": "air_pressure",
                "name": "barometer",
                "topic": "/drone/air_pressure",
                "update_rate": 5.0,
                "noise": {"type": "gaussian_quantized", "stddev": 2.0, "precision": 1.0},
            },
            source=climb,
            publisher=publisher,
        )
        print(f"Registered: {altimeter!r}")
        print(f"Registered: {barometer!r}")

        # Step 2: Step the simulation at 1 kHz for one second
        for tick in range(1001):
            manager.run_once(tick * 0.001)

        # Step 3: Inspect what was published
        for topic in publisher.topics():
            messages = publisher.messages(topic)
            last = messages[-1]
            print(
                f"\n{topic}: {len(messages)} readings, last at t={last.sim_time:.3f}s "
                f"values={[round(v, 3) for v in last.values]}"
            )

        if altimeter is not None and altimeter.noise is not None:
            print("\nAltimeter noise model:")
            print(altimeter.noise.describe())


if __name__ == "__main__":
    main()
