"""SLO spec validation and diff detection."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from pulse_sre.slo.objectives import SLIType
from pulse_sre.slo.spec import SLOSpec, parse_window


class ValidationError(BaseModel):
    """A single validation error on an SLO spec."""

    field: str
    message: str
    severity: str = Field(default="error")  # error, warning


class TargetChange(str, Enum):
    """How the SLO target changed between versions."""

    TIGHTENED = "tightened"
    LOOSENED = "loosened"
    UNCHANGED = "unchanged"


class SLODiff(BaseModel):
    """Diff between two versions of an SLO spec."""

    changed_fields: list[str] = Field(default_factory=list)
    target_change: TargetChange = Field(default=TargetChange.UNCHANGED)
    is_breaking: bool = Field(default=False)
    details: dict[str, Any] = Field(default_factory=dict)


def validate_spec(spec: SLOSpec) -> list[ValidationError]:
    """Validate an SLO spec and return any errors found.

    Checks:
        - Name is non-empty
        - Target is between 0-100%
        - Window is a positive duration
        - Unknown SLI types (warning, evaluated as a generic average)
        - Budget policy thresholds are within 0-100, ascending and unique
    """
    errors: list[ValidationError] = []

    if not spec.name.strip():
        errors.append(ValidationError(field="name", message="SLO name must be non-empty."))

    if spec.target < 0 or spec.target > 100:
        errors.append(ValidationError(
            field="target",
            message=f"Target must be between 0 and 100, got {spec.target}",
        ))

    try:
        window = parse_window(spec.window)
    except ValueError as exc:
        errors.append(ValidationError(field="window", message=str(exc)))
    else:
        if window.total_seconds() <= 0:
            errors.append(ValidationError(
                field="window",
                message="Window must be a positive duration.",
            ))

    if SLIType.parse(spec.sli).value != spec.sli.strip().lower():
        errors.append(ValidationError(
            field="sli",
            message=f"Unknown SLI '{spec.sli}', values will be averaged.",
            severity="warning",
        ))

    thresholds = [r.threshold for r in spec.budget_policy]
    for i, threshold in enumerate(thresholds):
        if threshold < 0 or threshold > 100:
            errors.append(ValidationError(
                field=f"budget_policy[{i}].threshold",
                message=f"Threshold must be between 0 and 100, got {threshold}",
            ))
    if len(set(thresholds)) != len(thresholds):
        errors.append(ValidationError(
            field="budget_policy",
            message=f"Budget policy thresholds must be unique, got {thresholds}",
        ))
    elif thresholds != sorted(thresholds):
        errors.append(ValidationError(
            field="budget_policy",
            message=(
                f"Budget policy thresholds must be in ascending order, "
                f"got {thresholds}"
            ),
        ))

    return errors


def diff_specs(old: SLOSpec, new: SLOSpec) -> SLODiff:
    """Compute the diff between two versions of an SLO spec.

    A tightened target or a changed SLI type is a breaking change.
    """
    old_data = old.model_dump(mode="json", exclude_none=True)
    new_data = new.model_dump(mode="json", exclude_none=True)

    changed_fields: list[str] = []
    details: dict[str, Any] = {}

    for key in sorted(set(old_data) | set(new_data)):
        old_val = old_data.get(key)
        new_val = new_data.get(key)
        if old_val != new_val:
            changed_fields.append(key)
            details[key] = {"old": old_val, "new": new_val}

    if new.target > old.target:
        target_change = TargetChange.TIGHTENED
    elif new.target < old.target:
        target_change = TargetChange.LOOSENED
    else:
        target_change = TargetChange.UNCHANGED

    is_breaking = target_change == TargetChange.TIGHTENED
    if SLIType.parse(old.sli) != SLIType.parse(new.sli):
        is_breaking = True

    return SLODiff(
        changed_fields=changed_fields,
        target_change=target_change,
        is_breaking=is_breaking,
        details=details,
    )
