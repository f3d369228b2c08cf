"""
Pulse SRE Quickstart: anomaly predictions and SLO budgets in one loop.

Run:
    pip install -e .
    python examples/quickstart.py
"""

import json
import random
from pathlib import Path

from pulse_sre import AnomalyDetector, Metric, SLOTracker
from pulse_sre.config import configure_logging
from pulse_sre.models import encode_predictions, encode_statuses
from pulse_sre.slo import load_slo_specs, resolve_inheritance

configure_logging("INFO")

# ── 1. Declare SLOs from YAML ───────────────────────────────────────────

tracker = SLOTracker()
for spec in resolve_inheritance(load_slo_specs(Path(__file__).parent / "slos")):
    tracker.add_slo(spec.to_slo())

detector = AnomalyDetector()

# ── 2. Simulate health-check rounds ────────────────────────────────────

for i in range(60):
    cpu = random.gauss(45, 3) if i < 50 else random.gauss(90, 3)  # spike at the end
    predictions = detector.detect_anomalies([Metric("cpu_percent", cpu, unit="%")])
    if predictions:
        print(json.dumps(encode_predictions(predictions)))

    total = 1000.0
    errors = random.randint(0, 4) if i < 40 else random.randint(10, 40)
    tracker.update_metrics("api-availability", [
        Metric("request_total", total),
        Metric("request_success", total - errors),
    ])
    tracker.update_metrics("api-errors", [
        Metric("request_total", total),
        Metric("request_errors", float(errors)),
    ])
    tracker.update_metrics("api-latency", [Metric("request_duration", random.uniform(80, 300))])

# ── 3. Report ───────────────────────────────────────────────────────────

print(json.dumps(encode_statuses(tracker.get_all_slos()), indent=2))
for name in tracker.slo_names():
    actions = [r.action.value for r in tracker.triggered_actions(name)]
    if actions:
        print(f"{name}: budget policy actions {actions}")
