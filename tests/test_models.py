"""Tests for the wire models."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from pulse_sre.anomaly.detector import AnomalyDetector
from pulse_sre.metrics import Metric, Prediction, PredictionStatus
from pulse_sre.models import (
    MetricModel,
    PredictionModel,
    SLOModel,
    SLOStatusModel,
    encode_predictions,
    encode_statuses,
)
from pulse_sre.slo.objectives import SLO, BudgetAction, BudgetRule, SLIType, SLOStatus
from pulse_sre.slo.tracker import SLOTracker

TS = datetime(2026, 3, 14, 9, 26, 53, 589000, tzinfo=timezone.utc)


@pytest.fixture()
def slo() -> SLO:
    return SLO(
        name="api",
        description="Public API",
        sli=SLIType.AVAILABILITY,
        target=99.5,
        window=timedelta(days=7),
        budget_policy=(
            BudgetRule(50.0, BudgetAction.NOTIFY),
            BudgetRule(90.0, BudgetAction.PAGE),
        ),
    )


class TestMetricModel:
    def test_round_trip(self) -> None:
        metric = Metric(
            name="cpu_percent",
            value=87.25,
            unit="%",
            labels={"node": "worker-1", "zone": "a"},
            timestamp=TS,
        )
        raw = MetricModel.from_metric(metric).model_dump_json()
        assert MetricModel.model_validate_json(raw).to_metric() == metric

    def test_field_names(self) -> None:
        data = json.loads(MetricModel.from_metric(Metric("cpu", 1.0, timestamp=TS)).model_dump_json())
        assert set(data) == {"name", "value", "unit", "labels", "timestamp"}
        assert data["timestamp"].startswith("2026-03-14T09:26:53.589")

    def test_to_dict_matches_model(self) -> None:
        metric = Metric("cpu", 1.5, unit="%", labels={"node": "a"}, timestamp=TS)
        assert metric.to_dict() == MetricModel.from_metric(metric).model_dump(mode="json")
        assert MetricModel.model_validate(metric.to_dict()).to_metric() == metric

    def test_labels_optional(self) -> None:
        model = MetricModel.model_validate(
            {"name": "cpu", "value": 3, "timestamp": "2026-03-14T09:26:53Z"}
        )
        metric = model.to_metric()
        assert metric.labels == {}
        assert metric.value == 3.0


class TestPredictionModel:
    def test_round_trip(self) -> None:
        pred = Prediction(
            timestamp=TS,
            status=PredictionStatus.DEGRADED,
            probability=0.35,
            reason="Statistical anomaly detected",
        )
        raw = PredictionModel.from_prediction(pred).model_dump_json()
        assert PredictionModel.model_validate_json(raw).to_prediction() == pred

    def test_to_dict_is_lossless(self) -> None:
        pred = Prediction(TS, PredictionStatus.DEGRADED, 0.312345678, "Statistical anomaly detected")
        data = json.loads(json.dumps(pred.to_dict()))
        assert data["probability"] == 0.312345678
        assert PredictionModel.model_validate(data).to_prediction() == pred

    def test_status_is_string(self) -> None:
        pred = Prediction(TS, PredictionStatus.DEGRADED, 1.0, "x")
        data = PredictionModel.from_prediction(pred).model_dump(mode="json")
        assert data["status"] == "degraded"

    def test_probability_bounds(self) -> None:
        with pytest.raises(ValidationError):
            PredictionModel(timestamp=TS, status="degraded", probability=1.5)

    def test_encode_detector_output(self) -> None:
        det = AnomalyDetector()
        det.detect_anomalies([Metric("cpu", 50.0)] * 12)
        encoded = encode_predictions(det.detect_anomalies([Metric("cpu", 500.0)]))
        assert len(encoded) == 1
        assert encoded[0]["status"] == "degraded"
        assert set(encoded[0]) == {"timestamp", "status", "probability", "reason"}


class TestSLOModels:
    def test_slo_round_trip(self, slo: SLO) -> None:
        raw = SLOModel.from_slo(slo).model_dump_json()
        assert SLOModel.model_validate_json(raw).to_slo() == slo

    def test_window_accepts_short_form(self) -> None:
        model = SLOModel.model_validate({"name": "x", "target": 99.0, "window": "30d"})
        assert model.window == timedelta(days=30)

    def test_unknown_sli_is_generic(self) -> None:
        model = SLOModel.model_validate({"name": "x", "target": 99.0, "sli": "saturation"})
        assert model.sli == SLIType.GENERIC

    def test_status_round_trip(self, slo: SLO) -> None:
        status = SLOStatus(
            slo=slo,
            current_value=97.5,
            error_budget=80.0,
            burn_rate=1.25,
            is_violated=True,
            time_to_exhaust="64h0m0s",
        )
        raw = SLOStatusModel.from_status(status).model_dump_json()
        assert SLOStatusModel.model_validate_json(raw).to_status() == status

    def test_status_round_trip_without_time_to_exhaust(self, slo: SLO) -> None:
        status = SLOStatus.initial(slo)
        raw = SLOStatusModel.from_status(status).model_dump_json(exclude_none=True)
        assert "time_to_exhaust" not in json.loads(raw)
        assert SLOStatusModel.model_validate_json(raw).to_status() == status

    def test_status_field_names(self, slo: SLO) -> None:
        data = SLOStatusModel.from_status(SLOStatus.initial(slo)).model_dump(mode="json")
        assert set(data) == {
            "slo", "current_value", "error_budget", "burn_rate",
            "is_violated", "time_to_exhaust",
        }
        assert set(data["slo"]) == {
            "name", "description", "sli", "target", "window", "budget_policy",
        }
        assert data["slo"]["budget_policy"][1] == {"threshold": 90.0, "action": "page"}

    def test_encode_tracker_statuses(self, slo: SLO) -> None:
        tracker = SLOTracker()
        tracker.add_slo(slo)
        encoded = encode_statuses(tracker.get_all_slos())
        assert encoded["api"]["error_budget"] == 100.0
        assert "time_to_exhaust" not in encoded["api"]

    def test_status_to_dict_round_trip(self, slo: SLO) -> None:
        status = SLOStatus(
            slo=slo,
            current_value=97.5,
            error_budget=80.0,
            burn_rate=1.25,
            is_violated=True,
            time_to_exhaust="64h0m0s",
        )
        data = json.loads(json.dumps(status.to_dict()))
        assert data["slo"] == slo.to_dict()
        assert SLOStatusModel.model_validate(data).to_status() == status
