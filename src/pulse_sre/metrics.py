"""Metric envelope and prediction types shared by both engines."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


class PredictionStatus(str, Enum):
    """Forecast health state carried by a ``Prediction``."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Metric:
    """A single numeric sample produced by a health check."""

    name: str
    value: float
    unit: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict in the wire format of ``MetricModel``."""
        from pulse_sre.models import MetricModel  # models imports this module

        return MetricModel.from_metric(self).model_dump(mode="json")


@dataclass
class Prediction:
    """Forecast emitted when a metric deviates from its baseline.

    ``timestamp`` is the forecast horizon, not the detection time.
    """

    timestamp: datetime
    status: PredictionStatus
    probability: float
    reason: str

    def to_dict(self) -> dict[str, Any]:
        from pulse_sre.models import PredictionModel

        return PredictionModel.from_prediction(self).model_dump(mode="json")
