"""Tests for OpenTelemetry instruments.

Uses an in-memory metric reader so no collector is required.
"""

from __future__ import annotations

from typing import Any

import pytest
from opentelemetry.metrics import Counter, _Gauge
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from pulse_sre.anomaly.detector import AnomalyDetector
from pulse_sre.metrics import Metric
from pulse_sre.slo.indicators import REQUEST_SUCCESS, REQUEST_TOTAL
from pulse_sre.slo.objectives import SLO, SLIType
from pulse_sre.slo.tracker import SLOTracker
from pulse_sre.telemetry import (
    METRIC_PREDICTIONS_TOTAL,
    METRIC_SAMPLES_TOTAL,
    METRIC_SLO_BURN_RATE,
    METRIC_SLO_CURRENT_VALUE,
    METRIC_SLO_ERROR_BUDGET,
    PulseMetrics,
    create_pulse_metrics,
)


@pytest.fixture()
def metric_reader() -> InMemoryMetricReader:
    return InMemoryMetricReader()


@pytest.fixture()
def pulse_metrics(metric_reader: InMemoryMetricReader) -> PulseMetrics:
    provider = MeterProvider(metric_readers=[metric_reader])
    return create_pulse_metrics(provider.get_meter("pulse_sre.test"))


def _points(reader: InMemoryMetricReader) -> dict[str, list[Any]]:
    """Collect data points keyed by metric name."""
    out: dict[str, list[Any]] = {}
    data = reader.get_metrics_data()
    if data is None:
        return out
    for rm in data.resource_metrics:
        for sm in rm.scope_metrics:
            for m in sm.metrics:
                out.setdefault(m.name, []).extend(m.data.data_points)
    return out


class TestInstruments:
    def test_instrument_types(self, pulse_metrics: PulseMetrics) -> None:
        assert isinstance(pulse_metrics.samples_total, Counter)
        assert isinstance(pulse_metrics.predictions_total, Counter)
        for gauge in (
            pulse_metrics.slo_current_value,
            pulse_metrics.slo_error_budget,
            pulse_metrics.slo_burn_rate,
        ):
            assert isinstance(gauge, _Gauge)


class TestDetectorTelemetry:
    def test_counts_samples_and_predictions(
        self, pulse_metrics: PulseMetrics, metric_reader: InMemoryMetricReader,
    ) -> None:
        det = AnomalyDetector(telemetry=pulse_metrics)
        det.detect_anomalies([Metric("cpu", 50.0)] * 12)
        det.detect_anomalies([Metric("cpu", 500.0)])

        points = _points(metric_reader)
        assert sum(p.value for p in points[METRIC_SAMPLES_TOTAL]) == 13
        predictions = points[METRIC_PREDICTIONS_TOTAL]
        assert sum(p.value for p in predictions) == 1
        assert predictions[0].attributes["metric.name"] == "cpu"


class TestTrackerTelemetry:
    def test_records_slo_gauges(
        self, pulse_metrics: PulseMetrics, metric_reader: InMemoryMetricReader,
    ) -> None:
        tracker = SLOTracker(telemetry=pulse_metrics)
        tracker.add_slo(SLO(name="api", sli=SLIType.AVAILABILITY, target=99.0))
        tracker.update_metrics("api", [Metric(REQUEST_TOTAL, 100.0), Metric(REQUEST_SUCCESS, 91.0)])

        points = _points(metric_reader)
        assert points[METRIC_SLO_CURRENT_VALUE][0].value == pytest.approx(91.0)
        assert points[METRIC_SLO_ERROR_BUDGET][0].value == pytest.approx(20.0)
        assert points[METRIC_SLO_BURN_RATE][0].value == pytest.approx(1.0)
        attrs = points[METRIC_SLO_ERROR_BUDGET][0].attributes
        assert attrs["slo.name"] == "api"
        assert attrs["slo.sli"] == "availability"

    def test_no_telemetry_is_fine(self) -> None:
        tracker = SLOTracker()
        tracker.add_slo(SLO(name="api", target=1.0))
        tracker.update_metrics("api", [Metric("x", 2.0)])
        status, _ = tracker.get_slo_status("api")
        assert status is not None
        assert status.current_value == 2.0
