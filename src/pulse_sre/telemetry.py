"""OpenTelemetry metric instruments for the analytics engines.

The detector and tracker report what they do through these instruments
when one is supplied. Export goes through whatever ``MeterProvider`` the
host process configured (OTLP, Prometheus, console, ...).
"""

from __future__ import annotations

from dataclasses import dataclass

from opentelemetry.metrics import Counter, Meter, _Gauge

# ---------------------------------------------------------------------------
# Metric name constants
# ---------------------------------------------------------------------------

METRIC_SAMPLES_TOTAL = "pulse.anomaly.samples.total"
METRIC_PREDICTIONS_TOTAL = "pulse.anomaly.predictions.total"
METRIC_SLO_CURRENT_VALUE = "pulse.slo.current_value"
METRIC_SLO_ERROR_BUDGET = "pulse.slo.error_budget"
METRIC_SLO_BURN_RATE = "pulse.slo.burn_rate"

ATTR_METRIC_NAME = "metric.name"
ATTR_SLO_NAME = "slo.name"
ATTR_SLI = "slo.sli"


@dataclass
class PulseMetrics:
    """Collection of instruments shared by the anomaly and SLO engines."""

    samples_total: Counter
    predictions_total: Counter
    slo_current_value: _Gauge
    slo_error_budget: _Gauge
    slo_burn_rate: _Gauge

    def record_sample(self, metric_name: str, anomalous: bool) -> None:
        attrs = {ATTR_METRIC_NAME: metric_name}
        self.samples_total.add(1, attrs)
        if anomalous:
            self.predictions_total.add(1, attrs)

    def record_slo(
        self,
        slo_name: str,
        sli: str,
        current_value: float,
        error_budget: float,
        burn_rate: float,
    ) -> None:
        attrs = {ATTR_SLO_NAME: slo_name, ATTR_SLI: sli}
        self.slo_current_value.set(current_value, attrs)
        self.slo_error_budget.set(error_budget, attrs)
        self.slo_burn_rate.set(burn_rate, attrs)


def create_pulse_metrics(meter: Meter) -> PulseMetrics:
    """Create all instruments from a single meter.

    Args:
        meter: OpenTelemetry ``Meter`` instance.

    Returns:
        A :class:`PulseMetrics` dataclass with all instruments.
    """
    samples_total = meter.create_counter(
        name=METRIC_SAMPLES_TOTAL,
        description="Metric samples evaluated by the anomaly detector",
        unit="1",
    )
    predictions_total = meter.create_counter(
        name=METRIC_PREDICTIONS_TOTAL,
        description="Anomaly predictions emitted",
        unit="1",
    )
    slo_current_value = meter.create_gauge(
        name=METRIC_SLO_CURRENT_VALUE,
        description="Current SLI value of an SLO",
        unit="%",
    )
    slo_error_budget = meter.create_gauge(
        name=METRIC_SLO_ERROR_BUDGET,
        description="Remaining error budget (0-100)",
        unit="%",
    )
    slo_burn_rate = meter.create_gauge(
        name=METRIC_SLO_BURN_RATE,
        description="Heuristic error budget burn rate",
        unit="1",
    )

    return PulseMetrics(
        samples_total=samples_total,
        predictions_total=predictions_total,
        slo_current_value=slo_current_value,
        slo_error_budget=slo_error_budget,
        slo_burn_rate=slo_burn_rate,
    )
