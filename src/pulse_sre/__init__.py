"""Pulse SRE: analytics core for cluster health monitoring.

Turns a stream of numeric health metrics into two derived signals:

Core concepts
-------------
* **Anomaly predictions**: ``AnomalyDetector`` keeps a rolling
  baseline (mean, standard deviation) per metric name and emits a
  ``Prediction`` when a value's z-score exceeds the threshold.

* **SLO status**: ``SLOTracker`` evaluates declared SLOs
  (availability, latency, error rate or a generic average) against the
  metrics pushed for them and tracks error budget and burn rate.

Quick start::

    from pulse_sre import AnomalyDetector, Metric, SLO, SLOTracker

    detector = AnomalyDetector()
    predictions = detector.detect_anomalies([Metric("cpu_percent", 42.0)])

    tracker = SLOTracker()
    tracker.add_slo(SLO(name="api", sli="availability", target=99.5))
    tracker.update_metrics("api", [Metric("request_total", 1000),
                                   Metric("request_success", 997)])
    status, found = tracker.get_slo_status("api")
"""

from pulse_sre.anomaly.detector import AnomalyDetector, Baseline, DetectorConfig
from pulse_sre.metrics import Metric, Prediction, PredictionStatus
from pulse_sre.slo.objectives import SLO, BudgetAction, BudgetRule, SLIType, SLOStatus
from pulse_sre.slo.tracker import SLOTracker

__all__ = [
    "AnomalyDetector",
    "Baseline",
    "BudgetAction",
    "BudgetRule",
    "DetectorConfig",
    "Metric",
    "Prediction",
    "PredictionStatus",
    "SLIType",
    "SLO",
    "SLOStatus",
    "SLOTracker",
]

__version__ = "0.1.0"
