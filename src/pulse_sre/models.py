"""Pydantic wire models for metrics, predictions and SLO status.

These are the JSON-shaped records handed to the transport layer. Each
model converts to and from its runtime dataclass so a value survives a
serialize/parse round trip field for field.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field, field_validator

from pulse_sre.metrics import Metric, Prediction, PredictionStatus
from pulse_sre.slo.objectives import SLO, BudgetAction, BudgetRule, SLIType, SLOStatus
from pulse_sre.slo.spec import parse_window


# ---------------------------------------------------------------------------
# Metric / prediction models
# ---------------------------------------------------------------------------


class MetricModel(BaseModel):
    """A metric sample on the wire."""

    name: str
    value: float
    unit: str = ""
    labels: dict[str, str] = Field(default_factory=dict)
    timestamp: datetime

    @classmethod
    def from_metric(cls, metric: Metric) -> MetricModel:
        return cls(
            name=metric.name,
            value=metric.value,
            unit=metric.unit,
            labels=dict(metric.labels),
            timestamp=metric.timestamp,
        )

    def to_metric(self) -> Metric:
        return Metric(
            name=self.name,
            value=self.value,
            unit=self.unit,
            labels=dict(self.labels),
            timestamp=self.timestamp,
        )


class PredictionModel(BaseModel):
    """An anomaly forecast on the wire."""

    timestamp: datetime
    status: PredictionStatus
    probability: float = Field(..., ge=0.0, le=1.0)
    reason: str = ""

    @classmethod
    def from_prediction(cls, prediction: Prediction) -> PredictionModel:
        return cls(
            timestamp=prediction.timestamp,
            status=prediction.status,
            probability=prediction.probability,
            reason=prediction.reason,
        )

    def to_prediction(self) -> Prediction:
        return Prediction(
            timestamp=self.timestamp,
            status=self.status,
            probability=self.probability,
            reason=self.reason,
        )


# ---------------------------------------------------------------------------
# SLO models
# ---------------------------------------------------------------------------


class BudgetRuleModel(BaseModel):
    """A budget policy step on the wire."""

    threshold: float
    action: BudgetAction


class SLOModel(BaseModel):
    """An SLO declaration on the wire. ``window`` is an ISO-8601 duration."""

    name: str
    description: str = ""
    sli: SLIType = SLIType.GENERIC
    target: float
    window: timedelta = Field(default_factory=lambda: timedelta(days=30))
    budget_policy: list[BudgetRuleModel] = Field(default_factory=list)

    @field_validator("sli", mode="before")
    @classmethod
    def _coerce_sli(cls, value: Any) -> SLIType:
        return SLIType.parse(value)

    @field_validator("window", mode="before")
    @classmethod
    def _coerce_window(cls, value: Any) -> Any:
        # Accept the short '30d' form used in SLO specs as well
        if isinstance(value, str):
            try:
                return parse_window(value)
            except ValueError:
                return value
        return value

    @classmethod
    def from_slo(cls, slo: SLO) -> SLOModel:
        return cls(
            name=slo.name,
            description=slo.description,
            sli=slo.sli,
            target=slo.target,
            window=slo.window,
            budget_policy=[
                BudgetRuleModel(threshold=r.threshold, action=r.action)
                for r in slo.budget_policy
            ],
        )

    def to_slo(self) -> SLO:
        return SLO(
            name=self.name,
            description=self.description,
            sli=self.sli,
            target=self.target,
            window=self.window,
            budget_policy=tuple(
                BudgetRule(threshold=r.threshold, action=r.action) for r in self.budget_policy
            ),
        )


class SLOStatusModel(BaseModel):
    """An SLO status snapshot on the wire."""

    slo: SLOModel
    current_value: float
    error_budget: float = Field(..., ge=0.0, le=100.0)
    burn_rate: float
    is_violated: bool
    time_to_exhaust: str | None = None

    @classmethod
    def from_status(cls, status: SLOStatus) -> SLOStatusModel:
        return cls(
            slo=SLOModel.from_slo(status.slo),
            current_value=status.current_value,
            error_budget=status.error_budget,
            burn_rate=status.burn_rate,
            is_violated=status.is_violated,
            time_to_exhaust=status.time_to_exhaust,
        )

    def to_status(self) -> SLOStatus:
        return SLOStatus(
            slo=self.slo.to_slo(),
            current_value=self.current_value,
            error_budget=self.error_budget,
            burn_rate=self.burn_rate,
            is_violated=self.is_violated,
            time_to_exhaust=self.time_to_exhaust,
        )


def encode_statuses(statuses: dict[str, SLOStatus]) -> dict[str, dict[str, Any]]:
    """JSON-ready mapping of SLO name to status, omitting unset fields."""
    return {
        name: SLOStatusModel.from_status(status).model_dump(mode="json", exclude_none=True)
        for name, status in statuses.items()
    }


def encode_predictions(predictions: list[Prediction]) -> list[dict[str, Any]]:
    """JSON-ready list of predictions."""
    return [PredictionModel.from_prediction(p).model_dump(mode="json") for p in predictions]
