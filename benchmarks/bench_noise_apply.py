"""Benchmark: noise model apply latency, scalar versus vectorised.

Compares per-value GaussianNoiseModel.apply() calls with a single
apply_array() call over the same number of samples.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sim_sensors.sensors.noise_factory import NoiseFactory

_SAMPLES: int = 100_000


def bench_noise_apply() -> dict[str, object]:
    """Benchmark scalar and array application of a quantized Gaussian model.

    Returns
    -------
    dict with keys: operation, samples, scalar_seconds, array_seconds,
    scalar_ops_per_second, array_ops_per_second.
    """
    model = NoiseFactory().new_noise_model(
        {"type": "gaussian_quantized", "stddev": 0.05, "bias_stddev": 0.01, "precision": 0.01},
        rng=42,
    )
    values = np.linspace(0.0, 100.0, _SAMPLES)

    start = time.perf_counter()
    for value in values:
        model.apply(float(value))
    scalar_total = time.perf_counter() - start

    start = time.perf_counter()
    model.apply_array(values)
    array_total = time.perf_counter() - start

    result: dict[str, object] = {
        "operation": "noise_apply",
        "samples": _SAMPLES,
        "scalar_seconds": round(scalar_total, 4),
        "array_seconds": round(array_total, 4),
        "scalar_ops_per_second": round(_SAMPLES / scalar_total, 1),
        "array_ops_per_second": round(_SAMPLES / max(array_total, 1e-9), 1),
    }
    print(
        f"[bench_noise_apply] scalar {result['scalar_ops_per_second']:,.0f} ops/sec  "
        f"array {result['array_ops_per_second']:,.0f} ops/sec"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_noise_apply()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "noise_apply_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
