"""Performance benchmarks for the SLO tracker and anomaly detector.

Measures throughput and latency of:
- SLO status recompute on a full 1000-sample history
- Status snapshots (single and all)
- Anomaly detection on a warmed 100-sample baseline
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field

from pulse_sre.anomaly.detector import AnomalyDetector
from pulse_sre.metrics import Metric
from pulse_sre.slo.indicators import REQUEST_DURATION, REQUEST_SUCCESS, REQUEST_TOTAL
from pulse_sre.slo.objectives import SLO, SLIType
from pulse_sre.slo.tracker import SLOTracker


@dataclass
class BenchResult:
    """Single benchmark result."""

    name: str
    ops: int
    elapsed_s: float
    latencies_us: list[float] = field(default_factory=list)

    @property
    def throughput(self) -> float:
        return self.ops / self.elapsed_s if self.elapsed_s > 0 else 0.0

    @property
    def p50_us(self) -> float:
        if not self.latencies_us:
            return 0.0
        s = sorted(self.latencies_us)
        return s[len(s) // 2]

    @property
    def p99_us(self) -> float:
        if not self.latencies_us:
            return 0.0
        s = sorted(self.latencies_us)
        return s[int(len(s) * 0.99)]


def _timed_loop(fn, iterations: int = 10_000) -> BenchResult:
    """Run *fn* for *iterations* and collect per-call latencies."""
    latencies: list[float] = []
    start = time.perf_counter()
    for _ in range(iterations):
        t0 = time.perf_counter()
        fn()
        latencies.append((time.perf_counter() - t0) * 1_000_000)  # µs
    elapsed = time.perf_counter() - start
    return BenchResult(name="", ops=iterations, elapsed_s=elapsed, latencies_us=latencies)


# ---------------------------------------------------------------------------
# Benchmarks
# ---------------------------------------------------------------------------


def _full_tracker() -> SLOTracker:
    tracker = SLOTracker()
    tracker.add_slo(SLO(name="availability", sli=SLIType.AVAILABILITY, target=99.5))
    tracker.add_slo(SLO(name="latency", sli=SLIType.LATENCY, target=250.0))
    for _ in range(500):
        tracker.update_metrics("availability", [Metric(REQUEST_TOTAL, 100.0),
                                                Metric(REQUEST_SUCCESS, 99.0)])
        tracker.update_metrics("latency", [Metric(REQUEST_DURATION, random.uniform(50, 400))])
    return tracker


def bench_slo_update(iterations: int = 10_000) -> BenchResult:
    """Benchmark update_metrics() with a full history."""
    tracker = _full_tracker()
    batch = [Metric(REQUEST_TOTAL, 100.0), Metric(REQUEST_SUCCESS, 98.0)]

    result = _timed_loop(lambda: tracker.update_metrics("availability", batch), iterations)
    result.name = "SLO Update"
    return result


def bench_slo_snapshot(iterations: int = 10_000) -> BenchResult:
    """Benchmark get_all_slos() copies."""
    tracker = _full_tracker()
    result = _timed_loop(tracker.get_all_slos, iterations)
    result.name = "SLO Snapshot"
    return result


def bench_anomaly_detection(iterations: int = 10_000) -> BenchResult:
    """Benchmark detect_anomalies() on a single warmed metric."""
    detector = AnomalyDetector()
    detector.detect_anomalies([Metric("cpu_percent", random.gauss(50, 5)) for _ in range(200)])

    def _detect():
        detector.detect_anomalies([Metric("cpu_percent", random.gauss(50, 5))])

    result = _timed_loop(_detect, iterations)
    result.name = "Anomaly Detection"
    return result


def run_all(iterations: int = 10_000) -> list[BenchResult]:
    """Run all benchmarks and return results."""
    return [
        bench_slo_update(iterations),
        bench_slo_snapshot(iterations),
        bench_anomaly_detection(iterations),
    ]


if __name__ == "__main__":
    for r in run_all():
        print(
            f"{r.name:25s}  {r.throughput:>12,.0f} ops/sec  "
            f"p50={r.p50_us:>8.2f}µs  p99={r.p99_us:>8.2f}µs"
        )
