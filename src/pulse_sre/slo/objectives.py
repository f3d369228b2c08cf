"""SLO definitions and status records."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import timedelta
from enum import Enum
from typing import Any

NEUTRAL_VALUE = 100.0
FULL_BUDGET = 100.0


class SLIType(str, Enum):
    """Service level indicator an SLO is evaluated against."""

    AVAILABILITY = "availability"
    LATENCY = "latency"
    ERROR_RATE = "error_rate"
    GENERIC = "generic"

    @classmethod
    def parse(cls, value: str | SLIType | None) -> SLIType:
        """Map *value* onto a known SLI; anything unrecognised is generic."""
        if isinstance(value, SLIType):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.GENERIC


class BudgetAction(str, Enum):
    """What to do once enough error budget has been consumed."""

    NOTIFY = "notify"
    ALERT = "alert"
    PAGE = "page"


@dataclass(frozen=True)
class BudgetRule:
    """A budget policy step.

    ``threshold`` is the percentage of error budget consumed at which
    ``action`` applies.
    """

    threshold: float
    action: BudgetAction

    def applies(self, consumed_percent: float) -> bool:
        return consumed_percent >= self.threshold


@dataclass(frozen=True)
class SLO:
    """Service Level Objective declared on the tracker."""

    name: str
    target: float
    sli: SLIType = SLIType.GENERIC
    description: str = ""
    window: timedelta = field(default_factory=lambda: timedelta(days=30))
    budget_policy: tuple[BudgetRule, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "sli", SLIType.parse(self.sli))
        object.__setattr__(self, "budget_policy", tuple(self.budget_policy))

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict; ``window`` is an ISO-8601 duration."""
        from pulse_sre.models import SLOModel  # models imports this module

        return SLOModel.from_slo(self).model_dump(mode="json")


@dataclass
class SLOStatus:
    """Live evaluation of one SLO.

    ``error_budget`` is the remaining budget as a percentage (0-100).
    ``burn_rate`` is a dimensionless trend score, not a rate per unit time.
    """

    slo: SLO
    current_value: float = NEUTRAL_VALUE
    error_budget: float = FULL_BUDGET
    burn_rate: float = 0.0
    is_violated: bool = False
    time_to_exhaust: str | None = None

    @classmethod
    def initial(cls, slo: SLO) -> SLOStatus:
        """Neutral status of a freshly declared SLO."""
        return cls(slo=slo)

    @property
    def budget_consumed(self) -> float:
        """Percentage of error budget already spent."""
        return FULL_BUDGET - self.error_budget

    def triggered_rules(self) -> list[BudgetRule]:
        """Budget policy rules reached at the current consumption, in order."""
        consumed = self.budget_consumed
        return [r for r in self.slo.budget_policy if r.applies(consumed)]

    def copy(self) -> SLOStatus:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        from pulse_sre.models import SLOStatusModel

        return SLOStatusModel.from_status(self).model_dump(mode="json", exclude_none=True)

    def __repr__(self) -> str:
        return (
            f"SLOStatus(slo={self.slo.name!r}, value={self.current_value:.2f}, "
            f"budget={self.error_budget:.1f}%, violated={self.is_violated})"
        )
