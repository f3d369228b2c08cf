"""SLO-as-code: version-controlled SLO definitions in YAML."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from pulse_sre.slo.objectives import SLO, BudgetAction, BudgetRule, SLIType

_WINDOW_UNITS: dict[str, int] = {"s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}


def parse_window(window: str) -> timedelta:
    """Parse a window string like ``'30d'``, ``'1h'`` or ``'2w'``.

    Raises:
        ValueError: If *window* is not ``<integer><s|m|h|d|w>``.
    """
    text = (window or "").strip().lower()
    if len(text) < 2 or text[-1] not in _WINDOW_UNITS:
        raise ValueError(f"Invalid window format: '{window}'. Use e.g. '30d', '1h', '7d'.")
    try:
        value = int(text[:-1])
    except ValueError:
        raise ValueError(
            f"Invalid window format: '{window}'. Use e.g. '30d', '1h', '7d'."
        ) from None
    return timedelta(seconds=value * _WINDOW_UNITS[text[-1]])


def format_window(window: timedelta) -> str:
    """Inverse of :func:`parse_window`, using the largest exact unit."""
    seconds = int(window.total_seconds())
    for suffix in ("w", "d", "h", "m"):
        unit = _WINDOW_UNITS[suffix]
        if seconds and seconds % unit == 0:
            return f"{seconds // unit}{suffix}"
    return f"{seconds}s"


class BudgetRuleSpec(BaseModel):
    """One step of an error budget policy."""

    threshold: float = Field(..., description="Percentage of error budget consumed")
    action: BudgetAction = Field(default=BudgetAction.NOTIFY)


class SLOSpec(BaseModel):
    """Version-controlled SLO definition.

    Can be serialized to/from YAML for SLO-as-code workflows.
    """

    name: str = Field(..., description="Unique SLO name")
    description: str = Field(default="", description="Human-readable description")
    sli: str = Field(default=SLIType.GENERIC.value, description="availability, latency, error_rate, ...")
    target: float = Field(default=99.0, description="Target percentage (0-100)")
    window: str = Field(default="30d", description="Rolling window duration")
    budget_policy: list[BudgetRuleSpec] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)
    inherits_from: str | None = Field(
        default=None,
        description="Name of parent SLO spec to inherit from",
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> SLOSpec:
        """Load an SLO spec from a YAML file."""
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data)

    def to_yaml(self, path: str | Path) -> None:
        """Save this SLO spec to a YAML file."""
        path = Path(path)
        data = self.model_dump(mode="json", exclude_none=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def to_slo(self) -> SLO:
        """Build the runtime ``SLO`` this spec declares."""
        return SLO(
            name=self.name,
            description=self.description,
            sli=SLIType.parse(self.sli),
            target=self.target,
            window=parse_window(self.window),
            budget_policy=tuple(
                BudgetRule(threshold=r.threshold, action=r.action) for r in self.budget_policy
            ),
        )

    @classmethod
    def from_slo(cls, slo: SLO) -> SLOSpec:
        return cls(
            name=slo.name,
            description=slo.description,
            sli=slo.sli.value,
            target=slo.target,
            window=format_window(slo.window),
            budget_policy=[
                BudgetRuleSpec(threshold=r.threshold, action=r.action) for r in slo.budget_policy
            ],
        )


def load_slo_specs(directory: str | Path) -> list[SLOSpec]:
    """Load all SLO specs from YAML files in a directory."""
    directory = Path(directory)
    specs: list[SLOSpec] = []
    for path in sorted(directory.glob("*.yaml")):
        specs.append(SLOSpec.from_yaml(path))
    for path in sorted(directory.glob("*.yml")):
        if not path.with_suffix(".yaml").exists():
            specs.append(SLOSpec.from_yaml(path))
    return specs


def resolve_inheritance(specs: list[SLOSpec]) -> list[SLOSpec]:
    """Resolve inheritance chains across SLO specs.

    Child specs override parent fields; labels merge additively. Returns
    a new list with all inheritance resolved.
    """
    by_name: dict[str, SLOSpec] = {s.name: s for s in specs}
    resolved: dict[str, SLOSpec] = {}

    def _resolve(spec: SLOSpec, chain: tuple[str, ...]) -> SLOSpec:
        if spec.name in resolved:
            return resolved[spec.name]

        if spec.inherits_from is None:
            resolved[spec.name] = spec
            return spec

        parent_name = spec.inherits_from
        if parent_name in chain:
            raise ValueError(f"SLO '{spec.name}' has a circular inheritance chain")
        if parent_name not in by_name:
            raise ValueError(
                f"SLO '{spec.name}' inherits from unknown spec '{parent_name}'"
            )

        parent = _resolve(by_name[parent_name], (*chain, spec.name))

        # Only fields the child set explicitly override the parent
        parent_data: dict[str, Any] = parent.model_dump(exclude_none=True)
        child_data: dict[str, Any] = spec.model_dump(exclude_none=True, exclude_unset=True)

        merged = {**parent_data, **child_data}
        merged.pop("inherits_from", None)
        merged["labels"] = {**parent_data.get("labels", {}), **child_data.get("labels", {})}

        result = SLOSpec.model_validate(merged)
        resolved[spec.name] = result
        return result

    return [_resolve(s, ()) for s in specs]
