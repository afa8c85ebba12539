"""Benchmark: Manager scheduling throughput — ticks per second.

Registers a mix of altimeter and air-pressure sensors at different update
rates and measures how many Manager.run_once() passes complete per second.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sim_sensors.manager import Manager
from sim_sensors.sensors.builtin import AirPressureSensor, AltimeterSensor
from sim_sensors.transport import InMemoryPublisher

_ITERATIONS: int = 10_000
_SENSORS: int = 20
_STEP: float = 0.001


def _make_manager() -> Manager:
    """Build a manager populated with rate-limited sensors."""
    manager = Manager()
    manager.init()
    publisher = InMemoryPublisher(max_messages_per_topic=16)
    for i in range(_SENSORS):
        sensor_cls = AltimeterSensor if i % 2 == 0 else AirPressureSensor
        manager.create_sensor(
            sensor_cls,
            {
                "kind": sensor_cls.kind,
                "name": f"{sensor_cls.kind}_{i}",
                "update_rate": float(50 * (i % 5)),
                "noise": {"type": "gaussian", "stddev": 0.1},
            },
            source=lambda t: 100.0 + t,
            publisher=publisher,
        )
    return manager


def bench_run_once_throughput() -> dict[str, object]:
    """Benchmark Manager.run_once() throughput.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, sensors.
    """
    manager = _make_manager()

    start = time.perf_counter()
    for tick in range(_ITERATIONS):
        manager.run_once(tick * _STEP)
    total = time.perf_counter() - start
    manager.close()

    result: dict[str, object] = {
        "operation": "manager_run_once_throughput",
        "iterations": _ITERATIONS,
        "sensors": _SENSORS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(total / _ITERATIONS * 1000, 4),
    }
    print(
        f"[bench_manager_throughput] {result['operation']}: "
        f"{result['ops_per_second']:,.0f} ticks/sec  "
        f"avg {result['avg_latency_ms']:.4f} ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_run_once_throughput()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "manager_throughput_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
