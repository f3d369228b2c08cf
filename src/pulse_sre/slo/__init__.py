"""SLO Engine: error budgets and burn rates for cluster services."""

from pulse_sre.slo.objectives import SLO, BudgetAction, BudgetRule, SLIType, SLOStatus
from pulse_sre.slo.spec import SLOSpec, load_slo_specs, parse_window, resolve_inheritance
from pulse_sre.slo.tracker import SLOTracker
from pulse_sre.slo.validator import SLODiff, diff_specs, validate_spec

__all__ = [
    "SLO",
    "BudgetAction",
    "BudgetRule",
    "SLIType",
    "SLOStatus",
    "SLOTracker",
    "SLOSpec",
    "load_slo_specs",
    "parse_window",
    "resolve_inheritance",
    "SLODiff",
    "diff_specs",
    "validate_spec",
]
