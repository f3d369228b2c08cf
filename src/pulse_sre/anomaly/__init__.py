"""Statistical Anomaly Detection for cluster health metrics.

Baselines each metric name over its recent observations and flags
values that stray too many standard deviations from the mean.
"""

from pulse_sre.anomaly.detector import (
    ANOMALY_REASON,
    AnomalyDetector,
    Baseline,
    DetectorConfig,
)
from pulse_sre.anomaly.strategies import StatisticalStrategy

__all__ = [
    "ANOMALY_REASON",
    "AnomalyDetector",
    "Baseline",
    "DetectorConfig",
    "StatisticalStrategy",
]
