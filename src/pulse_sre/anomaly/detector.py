"""Statistical anomaly detection engine.

Keeps a rolling baseline (mean, population standard deviation) per
metric name and flags values whose z-score exceeds a threshold. Every
observation is folded into the baseline, anomalous ones included, so a
sustained shift is absorbed after roughly ``min_samples`` points.
"""

from __future__ import annotations

import logging
import math
import threading
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Any

from pulse_sre.anomaly.strategies import StatisticalStrategy
from pulse_sre.metrics import Metric, Prediction, PredictionStatus, utcnow
from pulse_sre.telemetry import PulseMetrics

logger = logging.getLogger(__name__)

ANOMALY_REASON = "Statistical anomaly detected"


@dataclass
class DetectorConfig:
    """Configuration for the anomaly detector."""

    threshold: float = 2.0
    window_capacity: int = 100
    min_samples: int = 10
    std_dev_floor: float = 1.0
    probability_scale: float = 10.0
    horizon: timedelta = field(default_factory=lambda: timedelta(hours=1))
    window: timedelta = field(default_factory=lambda: timedelta(hours=24))
    enabled: bool = True

    def __post_init__(self) -> None:
        if self.window_capacity < 1:
            raise ValueError(f"window_capacity must be positive, got {self.window_capacity}")
        if self.min_samples < 1:
            raise ValueError(f"min_samples must be at least 1, got {self.min_samples}")


@dataclass
class Baseline:
    """Rolling statistical baseline for a single metric name.

    ``count`` is the number of observations ever folded in; ``window``
    only retains the most recent ``capacity`` of them.
    """

    mean: float = 0.0
    std_dev: float = 1.0
    count: int = 0
    capacity: int = 100
    std_dev_floor: float = 1.0
    window: deque[float] = field(default_factory=deque)

    def __post_init__(self) -> None:
        self.window = deque(self.window, maxlen=self.capacity)

    def update(self, value: float) -> None:
        """Append *value* and recompute mean and standard deviation."""
        self.window.append(value)
        self.count += 1

        n = len(self.window)
        self.mean = sum(self.window) / n
        variance = sum((x - self.mean) ** 2 for x in self.window) / n
        self.std_dev = math.sqrt(variance)
        if self.std_dev == 0:
            self.std_dev = self.std_dev_floor

    def copy(self) -> Baseline:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mean": round(self.mean, 4),
            "std_dev": round(self.std_dev, 4),
            "count": self.count,
            "window_size": len(self.window),
            "capacity": self.capacity,
        }


class AnomalyDetector:
    """Z-score anomaly detector over a stream of ``Metric`` values.

    Baselines are created lazily on first observation and live as long as
    the detector. All baseline access goes through one re-entrant lock, so
    a single instance can be shared between producer threads.
    """

    def __init__(
        self,
        config: DetectorConfig | None = None,
        telemetry: PulseMetrics | None = None,
    ) -> None:
        self._config = config or DetectorConfig()
        self._telemetry = telemetry
        self._baselines: dict[str, Baseline] = {}
        self._lock = threading.RLock()
        self._samples_seen = 0
        self._predictions_emitted = 0

        self._statistical = StatisticalStrategy(
            threshold=self._config.threshold,
            probability_scale=self._config.probability_scale,
        )

    @property
    def config(self) -> DetectorConfig:
        return self._config

    # -- baseline management ---------------------------------------------

    def _get_or_create_baseline(self, metric_name: str) -> Baseline:
        baseline = self._baselines.get(metric_name)
        if baseline is None:
            baseline = Baseline(
                capacity=self._config.window_capacity,
                std_dev_floor=self._config.std_dev_floor,
            )
            self._baselines[metric_name] = baseline
            logger.debug("Created baseline for metric %s", metric_name)
        return baseline

    # -- public API -------------------------------------------------------

    def detect_anomalies(self, metrics: Iterable[Metric]) -> list[Prediction]:
        """Evaluate *metrics* in order and return a prediction per anomaly.

        Non-anomalous metrics produce nothing. Prediction timestamps are
        shifted forward by ``config.horizon``.
        """
        if not self._config.enabled:
            return []

        predictions: list[Prediction] = []
        with self._lock:
            for metric in metrics:
                anomalous = self.is_anomalous(metric)
                if self._telemetry is not None:
                    self._telemetry.record_sample(metric.name, anomalous)
                if not anomalous:
                    continue

                prediction = Prediction(
                    timestamp=utcnow() + self._config.horizon,
                    status=PredictionStatus.DEGRADED,
                    probability=self.calculate_probability(metric),
                    reason=ANOMALY_REASON,
                )
                self._predictions_emitted += 1
                logger.info(
                    "Anomaly detected: %s value %.4f (probability %.2f)",
                    metric.name, metric.value, prediction.probability,
                )
                predictions.append(prediction)
        return predictions

    def is_anomalous(self, metric: Metric) -> bool:
        """Score *metric* against its baseline, then fold it in.

        The first ``min_samples`` observations of a name only warm the
        baseline up and are never anomalous.
        """
        with self._lock:
            self._samples_seen += 1
            baseline = self._get_or_create_baseline(metric.name)

            if baseline.count < self._config.min_samples:
                baseline.update(metric.value)
                return False

            is_anomaly, _ = self._statistical.check_zscore(
                metric.value, baseline.mean, baseline.std_dev,
            )
            baseline.update(metric.value)
            return is_anomaly

    def calculate_probability(self, metric: Metric) -> float:
        """Severity proxy in [0, 1] for *metric* against its current baseline."""
        with self._lock:
            baseline = self._baselines.get(metric.name)
            if baseline is None:
                return 0.0
            stat = self._statistical
            z = stat.zscore(metric.value, baseline.mean, baseline.std_dev)
            return stat.probability(z)

    def get_baseline(self, metric_name: str) -> Baseline | None:
        """Return a copy of the baseline for *metric_name*, or ``None``."""
        with self._lock:
            baseline = self._baselines.get(metric_name)
            return baseline.copy() if baseline is not None else None

    def baseline_names(self) -> list[str]:
        with self._lock:
            return sorted(self._baselines)

    def summary(self) -> dict[str, Any]:
        """Return a summary of detector state."""
        with self._lock:
            return {
                "baselines_count": len(self._baselines),
                "samples_seen": self._samples_seen,
                "predictions_emitted": self._predictions_emitted,
                "threshold": self._config.threshold,
                "baselines": {
                    name: b.to_dict() for name, b in sorted(self._baselines.items())
                },
            }

    def reset(self, metric_name: str | None = None) -> None:
        """Reset the baseline for *metric_name*, or everything if ``None``."""
        with self._lock:
            if metric_name is None:
                self._baselines.clear()
                self._samples_seen = 0
                self._predictions_emitted = 0
            else:
                self._baselines.pop(metric_name, None)
